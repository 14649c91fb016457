import json

from otcswap.utils.logging import get_logger, log_json


def test_log_json(capsys):
    logger = get_logger("test")
    log_json(logger, "event_name", foo="bar", amount=10**30)
    out = capsys.readouterr().err.strip()
    data = json.loads(out)
    assert data["event"] == "event_name"
    assert data["foo"] == "bar"
    assert data["amount"] == str(10**30)
