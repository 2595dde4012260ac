from pathlib import Path

import pytest

from script_signer.crypto import keys
from script_signer.services.script_service import (
    ScriptSigningService,
    VerificationError,
    read_script,
)
from script_signer.utils.config import AppConfig, KeyConfig

SCRIPT = 'EXECUTE({"Target":"Server1"})\r\nGet-Process\r\nGet-Service\r\n'


@pytest.fixture
def key_files(key_pair, tmp_path: Path) -> tuple[Path, Path]:
    private = keys.save_private(key_pair, tmp_path / "server_key.pem")
    public = keys.save_public(key_pair, tmp_path / "server.pem")
    return private, public


@pytest.fixture
def service(key_files) -> ScriptSigningService:
    private, public = key_files
    return ScriptSigningService(AppConfig(keys=KeyConfig(private_key=private, public_key=public)))


def test_sign_and_verify_file(service, tmp_path: Path) -> None:
    script = tmp_path / "job.ps1"
    script.write_bytes(SCRIPT.encode("utf-8"))
    signed_path = tmp_path / "job.signed.ps1"

    signed = service.sign_file(script, signed_path)
    raw = signed_path.read_bytes()
    assert raw.startswith(SCRIPT.encode("utf-8"))
    assert b"\r\r\n" not in raw
    assert signed.code == "Get-Process\nGet-Service"

    result = service.verify_file(signed_path)
    assert result.valid and bool(result)
    assert result.error is VerificationError.NONE


def test_sign_file_in_place(service, tmp_path: Path) -> None:
    script = tmp_path / "job.ps1"
    script.write_bytes(SCRIPT.encode("utf-8"))
    service.sign_file(script)
    assert "SHA-256:" in read_script(script)
    assert service.verify_file(script).valid


def test_missing_signature(service, key_pair) -> None:
    result = service.verify_text(SCRIPT, key_pair.public)
    assert not result
    assert result.error is VerificationError.MISSING_SIGNATURE


def test_bad_signature(service, key_pair, other_key_pair) -> None:
    signed = service.sign_text(SCRIPT, other_key_pair)
    result = service.verify_text(signed.text, key_pair.public)
    assert result.error is VerificationError.BAD_SIGNATURE


def test_signature_format_error_is_reported(service, key_pair) -> None:
    result = service.verify_text("Get-Process\r\nSHA-256:abc", key_pair.public)
    assert result.error is VerificationError.SIGNATURE_FORMAT


def test_text_appended_after_signature(service, key_pair) -> None:
    signed = service.sign_text(SCRIPT, key_pair)
    result = service.verify_text(signed.text + "\r\nRemove-Item -Recurse C:\\", key_pair.public)
    assert result.error is not VerificationError.SIGNATURE_FORMAT
    assert result.valid and result.error is VerificationError.NONE


def test_payload_encoding_error_is_reported(service, key_pair) -> None:
    result = service.verify_text("Write-Host 'café'\nSHA-256:AAAA", key_pair.public)
    assert result.error is VerificationError.PAYLOAD_ENCODING


def test_unreadable_public_key_is_reported(service, tmp_path: Path) -> None:
    script = tmp_path / "job.ps1"
    script.write_text("Get-Process\nSHA-256:AAAA", encoding="utf-8")
    garbage = tmp_path / "garbage.pem"
    garbage.write_text("garbage", encoding="utf-8")
    assert service.verify_file(script, garbage).error is VerificationError.KEY_FORMAT


def test_private_key_passed_as_public_is_reported(service, key_files, tmp_path: Path) -> None:
    private, _ = key_files
    script = tmp_path / "job.ps1"
    script.write_text("Get-Process\nSHA-256:AAAA", encoding="utf-8")
    assert service.verify_file(script, private).error is VerificationError.KEY_TYPE


def test_missing_key_configuration(tmp_path: Path) -> None:
    script = tmp_path / "job.ps1"
    script.write_text("Get-Process", encoding="utf-8")
    with pytest.raises(ValueError):
        ScriptSigningService(AppConfig()).sign_file(script)


def test_parameters(service) -> None:
    assert service.parameters(SCRIPT) == {"Target": "Server1"}
