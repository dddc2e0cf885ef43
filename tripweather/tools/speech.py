"""Voice I/O for the chat front-end.

Speech-to-text uses faster-whisper, text-to-speech uses Piper. Both models
are heavy, so their packages are imported and the models loaded on first
use; the rest of the chatbot runs without the ``voice`` extra installed.
"""

import io
import os
import wave
from functools import lru_cache
from pathlib import Path
from typing import Dict, Generator, Optional, Tuple

import numpy as np

TARGET_SAMPLE_RATE = 16000
DEFAULT_VOICE = "en_US-amy-medium"
# Language hint (from the front-end's en-IN / hi-IN selector) → Piper voice
LANGUAGE_VOICES = {
    "en": DEFAULT_VOICE,
    "hi": "hi_IN-pratham-medium",
}

_VOICE_CACHE: Dict[Tuple[Path, Optional[Path]], object] = {}


def _data_dir() -> Path:
    return Path(__file__).resolve().parent.parent / "data"


def _voices_dir() -> Path:
    override = os.getenv("PIPER_VOICE_DIR")
    if override:
        return Path(override).expanduser().resolve()
    return (_data_dir() / "voices").resolve()


def normalize_language(language: Optional[str]) -> Optional[str]:
    """"en-IN" / "hi_IN" / "HI" → "en" / "hi"; blank → None."""
    if not language or not language.strip():
        return None
    return language.strip().replace("_", "-").split("-")[0].lower()


def voice_for(voice_id: Optional[str], language: Optional[str] = None) -> str:
    """Pick a voice: explicit id, then per-language setting, then PIPER_VOICE."""
    if voice_id:
        return voice_id
    lang = normalize_language(language)
    if lang:
        configured = os.getenv(f"PIPER_VOICE_{lang.upper()}")
        if configured:
            return configured
        if lang in LANGUAGE_VOICES:
            return LANGUAGE_VOICES[lang]
    return os.getenv("PIPER_VOICE") or DEFAULT_VOICE


def _resolve_voice_paths(voice_name: str) -> Tuple[Path, Optional[Path]]:
    model_path = Path(voice_name)
    if not model_path.suffix:
        model_path = model_path.with_suffix(".onnx")
    if not model_path.is_absolute():
        model_path = (_voices_dir() / model_path).resolve()

    if not model_path.exists():
        raise FileNotFoundError(
            f"Piper voice model not found at {model_path}. "
            "Set PIPER_VOICE or PIPER_VOICE_DIR to point to a valid .onnx voice file."
        )
    config_path = model_path.with_suffix(".onnx.json")
    if not config_path.exists():
        config_path = model_path.with_suffix(".json")
    return model_path, (config_path if config_path.exists() else None)


def _load_voice(voice_name: str):
    model_path, config_path = _resolve_voice_paths(voice_name)
    cache_key = (model_path, config_path)
    if cache_key not in _VOICE_CACHE:
        from piper import PiperVoice

        _VOICE_CACHE[cache_key] = PiperVoice.load(
            str(model_path),
            config_path=str(config_path) if config_path else None,
        )
    return _VOICE_CACHE[cache_key]


def _detect_device() -> str:
    device = os.getenv("WHISPER_DEVICE")
    if device:
        return device
    import torch

    return "cuda" if torch.cuda.is_available() else "cpu"


def _detect_compute_type(device: str) -> str:
    env_value = os.getenv("WHISPER_COMPUTE_TYPE")
    if env_value:
        return env_value
    return "float16" if device == "cuda" else "int8"


@lru_cache(maxsize=1)
def _whisper_model():
    from faster_whisper import WhisperModel

    model_id = os.getenv("WHISPER_MODEL", "base")
    device = _detect_device()
    return WhisperModel(model_id, device=device, compute_type=_detect_compute_type(device))


def resample(audio: np.ndarray, orig_sr: int, target_sr: int = TARGET_SAMPLE_RATE) -> np.ndarray:
    if orig_sr == target_sr:
        return audio.astype(np.float32)
    duration = audio.shape[0] / float(orig_sr)
    target_length = max(int(duration * target_sr), 1)
    # Linear interpolation; good enough for speech at 16 kHz
    source_positions = np.linspace(0.0, duration, num=audio.shape[0], endpoint=False)
    target_positions = np.linspace(0.0, duration, num=target_length, endpoint=False)
    return np.interp(target_positions, source_positions, audio).astype(np.float32)


def decode_wav(audio_bytes: bytes) -> Tuple[np.ndarray, int]:
    """16-bit PCM WAV → mono float32 samples in [-1, 1] plus the sample rate."""
    if not audio_bytes:
        raise ValueError("Audio payload is empty.")
    try:
        with wave.open(io.BytesIO(audio_bytes), "rb") as wav_reader:
            sample_width = wav_reader.getsampwidth()
            sample_rate = wav_reader.getframerate()
            channels = wav_reader.getnchannels()
            frames = wav_reader.readframes(wav_reader.getnframes())
    except (wave.Error, EOFError) as exc:
        raise ValueError(f"Invalid WAV payload: {exc}") from exc
    if sample_width != 2:
        raise ValueError("Expected 16-bit PCM WAV input.")

    audio = np.frombuffer(frames, dtype=np.int16).astype(np.float32)
    if channels > 1:
        audio = audio.reshape((-1, channels)).mean(axis=1)
    return audio / 32768.0, sample_rate


def transcribe_wav(audio_bytes: bytes, language: Optional[str] = None) -> Tuple[str, Optional[str], float]:
    """Return (transcript, detected language, audio duration seconds)."""
    audio, sample_rate = decode_wav(audio_bytes)
    audio = resample(audio, sample_rate)

    model = _whisper_model()
    segments, info = model.transcribe(audio, language=normalize_language(language))
    transcript = " ".join(s.text.strip() for s in segments if s.text and s.text.strip())
    return transcript.strip(), getattr(info, "language", None), getattr(info, "duration", 0.0)


def stream_speech(
    text: str,
    voice_id: Optional[str] = None,
    language: Optional[str] = None,
    chunk_size: int = 4096,
) -> Generator[bytes, None, None]:
    """Synthesize ``text`` with Piper and yield the WAV file in chunks."""
    if not text or not text.strip():
        raise ValueError("Text must be provided for speech synthesis.")

    voice = _load_voice(voice_for(voice_id, language))
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_writer:
        voice.synthesize_wav(text.strip(), wav_writer)
    buffer.seek(0)

    def _chunks() -> Generator[bytes, None, None]:
        while True:
            chunk = buffer.read(chunk_size)
            if not chunk:
                break
            yield chunk

    return _chunks()
