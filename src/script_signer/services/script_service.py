# Sign script files and verify them for an execution host.
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional

import structlog

from ..core.exceptions import (
    KeyFormatError,
    KeyTypeError,
    PayloadEncodingError,
    ScriptSignerError,
    SignatureFormatError,
    UnsupportedAlgorithmError,
)
from ..crypto import keys
from ..crypto.signing import RsaVerifier
from ..script.canonicalizer import ScriptCanonicalizer, SignedScript
from ..utils.config import AppConfig, load_config

logger = structlog.get_logger(__name__)


class VerificationError(str, Enum):
    NONE = "NONE"
    MISSING_SIGNATURE = "MISSING_SIGNATURE"
    BAD_SIGNATURE = "BAD_SIGNATURE"
    SIGNATURE_FORMAT = "SIGNATURE_FORMAT"
    KEY_FORMAT = "KEY_FORMAT"
    KEY_TYPE = "KEY_TYPE"
    PAYLOAD_ENCODING = "PAYLOAD_ENCODING"
    UNSUPPORTED_ALGORITHM = "UNSUPPORTED_ALGORITHM"


_ERROR_KINDS = {
    KeyFormatError: VerificationError.KEY_FORMAT,
    KeyTypeError: VerificationError.KEY_TYPE,
    SignatureFormatError: VerificationError.SIGNATURE_FORMAT,
    PayloadEncodingError: VerificationError.PAYLOAD_ENCODING,
    UnsupportedAlgorithmError: VerificationError.UNSUPPORTED_ALGORITHM,
}


@dataclass(slots=True)
class VerificationResult:
    valid: bool
    error: VerificationError = VerificationError.NONE
    detail: str = ""

    def __bool__(self) -> bool:
        return self.valid


def read_script(path: Path) -> str:
    # newline="" keeps CRLF intact
    with open(path, "r", encoding="utf-8", newline="") as handle:
        return handle.read()


def write_script(path: Path, text: str) -> None:
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(text)


class ScriptSigningService:
    def __init__(self, config: AppConfig | None = None):
        self.config = config or load_config()
        self.canonicalizer = ScriptCanonicalizer.from_config(self.config)

    def _private_key_path(self, explicit: Optional[Path]) -> Path:
        path = explicit or self.config.keys.private_key
        if path is None:
            raise ValueError("No private key given and none configured under keys.private_key")
        return Path(path)

    def _public_key_path(self, explicit: Optional[Path]) -> Path:
        path = explicit or self.config.keys.public_key
        if path is None:
            raise ValueError("No public key given and none configured under keys.public_key")
        return Path(path)

    def parameters(self, text: str) -> Dict[str, str]:
        return self.canonicalizer.extract_parameters(text)

    def sign_text(self, text: str, pair: keys.RsaKeyPair) -> SignedScript:
        return self.canonicalizer.sign(text, pair)

    def sign_file(
        self,
        input_path: Path,
        output_path: Path | None = None,
        private_key: Path | None = None,
        passphrase: bytes | None = None,
    ) -> SignedScript:
        pair = keys.load_private(self._private_key_path(private_key), passphrase)
        signed = self.sign_text(read_script(input_path), pair)
        target = output_path or input_path
        write_script(target, signed.text)
        logger.info("script.sign_file", path=str(input_path), output=str(target), fingerprint=pair.public.fingerprint)
        return signed

    def verify_text(self, text: str, public_key: keys.RsaPublicKey) -> VerificationResult:
        """Verify ``text`` and report the outcome as a value.

        Malformed signatures, keys and payloads come back as an error kind
        instead of an exception. ``OSError`` is not caught.
        """
        if self.canonicalizer.extract_signature(text) is None:
            return VerificationResult(False, VerificationError.MISSING_SIGNATURE, "script carries no embedded signature")
        try:
            valid = self.canonicalizer.verify(text, RsaVerifier(public_key))
        except ScriptSignerError as exc:
            kind = _ERROR_KINDS.get(type(exc), VerificationError.SIGNATURE_FORMAT)
            logger.warning("script.verify.error", error=kind.value, detail=str(exc))
            return VerificationResult(False, kind, str(exc))
        if not valid:
            return VerificationResult(False, VerificationError.BAD_SIGNATURE, "signature does not match script code")
        return VerificationResult(True)

    def verify_file(self, input_path: Path, public_key: Path | None = None) -> VerificationResult:
        text = read_script(input_path)
        try:
            key = keys.load_public(self._public_key_path(public_key))
        except (KeyFormatError, KeyTypeError) as exc:
            return VerificationResult(False, _ERROR_KINDS[type(exc)], str(exc))
        result = self.verify_text(text, key)
        logger.info("script.verify_file", path=str(input_path), valid=result.valid, error=result.error.value)
        return result


__all__ = [
    "ScriptSigningService",
    "VerificationError",
    "VerificationResult",
    "read_script",
    "write_script",
]
