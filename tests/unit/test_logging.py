import json
import logging

import pytest
import structlog

from script_signer.logging import _drop_secret_fields, configure_logging


@pytest.fixture
def configured(capsys):
    configure_logging("debug")
    yield capsys
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


def test_secret_fields_are_masked() -> None:
    event = _drop_secret_fields(None, "info", {"event": "keys.save", "passphrase": "hunter2", "path": "k.pem"})
    assert event["passphrase"] == "<redacted>"
    assert event["path"] == "k.pem"


def test_records_are_json_on_stderr(configured) -> None:
    structlog.get_logger("script_signer.tests").info("keys.save", role="private", passphrase="hunter2")
    captured = configured.readouterr()
    assert captured.out == ""
    record = json.loads(captured.err.strip().splitlines()[-1])
    assert record["msg"] == "keys.save"
    assert record["level"] == "info"
    assert record["component"] == "script_signer.tests"
    assert record["passphrase"] == "<redacted>"
    assert "ts" in record
