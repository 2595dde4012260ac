from pathlib import Path

import pytest
import yaml

from script_signer.script.canonicalizer import ScriptCanonicalizer
from script_signer.utils import config as config_module
from script_signer.utils.config import AppConfig, dump_default_config, load_config


@pytest.fixture(autouse=True)
def _isolated_search_paths(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(config_module, "runtime_config_dir", lambda: tmp_path / "user-config")


def test_defaults_when_no_file_exists() -> None:
    config = load_config()
    assert config.signing.algorithm == "SHA-256"
    assert config.signing.payload_encoding == "ascii"
    assert config.signing.wrap_lines is True
    assert config.script.directive_keyword == "EXECUTE"
    assert config.keys.private_key is None


def test_explicit_file(tmp_path: Path) -> None:
    path = tmp_path / "custom.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "script": {"directive_keyword": "PSEXECUTE", "line_ending": "lf"},
                "signing": {"algorithm": "SHA512withRSA"},
                "keys": {"private_key": str(tmp_path / "server_key.pem")},
            }
        ),
        encoding="utf-8",
    )
    config = load_config(path)
    assert config.script.directive_keyword == "PSEXECUTE"
    assert config.keys.private_key == tmp_path / "server_key.pem"

    canonicalizer = ScriptCanonicalizer.from_config(config)
    assert canonicalizer.keyword == "PSEXECUTE"
    assert canonicalizer.algorithm == "SHA512withRSA"
    assert canonicalizer.line_ending == "lf"


def test_local_config_is_discovered(tmp_path: Path) -> None:
    local = tmp_path / ".script-signer" / "config.yaml"
    local.parent.mkdir()
    local.write_text("logging:\n  level: debug\n", encoding="utf-8")
    assert load_config().logging.normalized_level() == "DEBUG"


@pytest.mark.parametrize(
    "document",
    [
        {"signing": {"algorithm": "MD5"}},
        {"signing": {"payload_encoding": "no-such-codec"}},
        {"script": {"directive_keyword": "   "}},
        {"script": {"directive_keyword": "RUN("}},
        {"script": {"line_ending": "cr"}},
    ],
)
def test_invalid_config_is_rejected(tmp_path: Path, document: dict) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text(yaml.safe_dump(document), encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(path)


def test_dump_default_config_round_trips(tmp_path: Path) -> None:
    target = tmp_path / "out" / "config.yaml"
    dump_default_config(target)
    assert load_config(target) == AppConfig()
