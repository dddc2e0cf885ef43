from __future__ import annotations

from functools import lru_cache
from typing import Mapping


@lru_cache(maxsize=1)
def get_alias_table() -> Mapping[str, str]:
    """Process-wide alias table, built on first use and never mutated.

    Defaults are extended by ``CHATBOT_ALIASES_PATH`` (or the bundled
    ``data/aliases.yml``). Call ``get_alias_table.cache_clear()`` to reload.
    """
    from .aliases import load_aliases
    return load_aliases()
