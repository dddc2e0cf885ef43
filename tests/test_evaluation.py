from tripweather.scripts import eval as eval_script


def test_intent_parser_eval_set():
    results = eval_script.run_eval(str(eval_script.DATA_DIR / "eval.yml"))
    misses = [r for r in results["rows"] if not r["ok"]]
    assert misses == []
    assert results["accuracy"] == 1.0
    assert results["total"] >= 10
