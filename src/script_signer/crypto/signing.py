from __future__ import annotations

import base64
import binascii
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from ..core.exceptions import (
    KeyTypeError,
    PayloadEncodingError,
    SignatureFormatError,
    UnsupportedAlgorithmError,
)

DEFAULT_ALGORITHM = "SHA-256"
DEFAULT_ENCODING = "ascii"
LINE_WIDTH = 76
LINE_BREAK = "\r\n"

# "SHA-256", "SHA256withRSA", "MD5": what may stand before the colon
_ALGORITHM_NAME = re.compile(r"[A-Za-z][A-Za-z0-9-]*")

_HASHES = {
    "SHA1": hashes.SHA1,
    "SHA256": hashes.SHA256,
    "SHA384": hashes.SHA384,
    "SHA512": hashes.SHA512,
}


def _normalise_name(name: str) -> str:
    n = name.strip().upper().replace("-", "")
    if n.endswith("WITHRSA"):
        n = n[: -len("WITHRSA")]
    return n


def resolve_hash(name: str) -> hashes.HashAlgorithm:
    """Map ``SHA-256`` / ``SHA256withRSA`` style names onto a hash instance."""
    factory = _HASHES.get(_normalise_name(name))
    if factory is None:
        raise UnsupportedAlgorithmError(f"Unsupported signature algorithm: {name}")
    return factory()


def same_algorithm(lhs: str, rhs: str) -> bool:
    return _normalise_name(lhs) == _normalise_name(rhs)


def encode_payload(payload: str | bytes, encoding: str = DEFAULT_ENCODING) -> bytes:
    """Turn payload text into the bytes that get hashed.

    The same encoding must be used when signing and verifying; characters the
    encoding cannot represent raise :class:`PayloadEncodingError`.
    """
    if isinstance(payload, bytes):
        return payload
    try:
        return payload.encode(encoding)
    except UnicodeEncodeError as exc:
        raise PayloadEncodingError(
            f"Payload character {payload[exc.start]!r} at offset {exc.start} is not representable in {encoding}"
        ) from exc


def encode_signature(signature: bytes, wrap_lines: bool = False) -> str:
    text = base64.b64encode(signature).decode("ascii")
    if not wrap_lines:
        return text
    return LINE_BREAK.join(text[i : i + LINE_WIDTH] for i in range(0, len(text), LINE_WIDTH))


def parse_signature_text(text: str) -> Tuple[Optional[str], bytes]:
    """Split ``[<algorithm>:]<base64>`` into the algorithm name and raw signature.

    Line breaks inside the base64 body are ignored.
    """
    algorithm: Optional[str] = None
    body = text.strip()
    if ":" in body:
        prefix, body = body.split(":", 1)
        algorithm = prefix.strip()
        if not _ALGORITHM_NAME.fullmatch(algorithm):
            raise SignatureFormatError(f"Signature prefix {algorithm!r} is not an algorithm name")
        resolve_hash(algorithm)
    compact = "".join(body.split())
    if not compact:
        raise SignatureFormatError("Signature text carries no base64 body")
    try:
        return algorithm, base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise SignatureFormatError(f"Signature is not valid base64: {exc}") from exc


@dataclass(frozen=True, slots=True)
class SignatureOptions:
    algorithm: str = DEFAULT_ALGORITHM
    wrap_lines: bool = False
    write_algo_as_prefix: bool = False
    encoding: str = DEFAULT_ENCODING


def _as_private(key) -> rsa.RSAPrivateKey:
    private = getattr(key, "private_key", key)
    if not isinstance(private, rsa.RSAPrivateKey):
        raise KeyTypeError(f"Expected RSA private key, got {type(private).__name__}")
    return private


def _as_public(key) -> rsa.RSAPublicKey:
    # RsaKeyPair -> RsaPublicKey -> rsa.RSAPublicKey
    public = getattr(key, "public", key)
    public = getattr(public, "key", public)
    if not isinstance(public, rsa.RSAPublicKey):
        raise KeyTypeError(f"Expected RSA public key, got {type(public).__name__}")
    return public


class RsaSigner:
    """RSA PKCS#1 v1.5 signer producing base64 signature text."""

    def __init__(self, key) -> None:
        self._private_key = _as_private(key)

    def sign_raw(self, payload: str | bytes, algorithm: str = DEFAULT_ALGORITHM, encoding: str = DEFAULT_ENCODING) -> bytes:
        data = encode_payload(payload, encoding)
        return self._private_key.sign(data, padding.PKCS1v15(), resolve_hash(algorithm))

    def sign(self, payload: str | bytes, options: SignatureOptions | None = None) -> str:
        opts = options or SignatureOptions()
        signature = self.sign_raw(payload, opts.algorithm, opts.encoding)
        prefix = f"{opts.algorithm}:" if opts.write_algo_as_prefix else ""
        return prefix + encode_signature(signature, opts.wrap_lines)


class RsaVerifier:
    """Checks RSA PKCS#1 v1.5 signatures; a mismatch is ``False``, not an error."""

    def __init__(self, key) -> None:
        self._public_key = _as_public(key)

    def verify(
        self,
        payload: str | bytes,
        signature_text: str,
        algorithm: str | None = None,
        encoding: str = DEFAULT_ENCODING,
    ) -> bool:
        prefix, signature = parse_signature_text(signature_text)
        if prefix and algorithm and not same_algorithm(prefix, algorithm):
            raise SignatureFormatError(
                f"Signature declares algorithm {prefix} but {algorithm} was requested"
            )
        hash_alg = resolve_hash(prefix or algorithm or DEFAULT_ALGORITHM)
        data = encode_payload(payload, encoding)
        try:
            self._public_key.verify(signature, data, padding.PKCS1v15(), hash_alg)
        except InvalidSignature:
            return False
        return True


def sign(key, payload: str | bytes, options: SignatureOptions | None = None) -> str:
    return RsaSigner(key).sign(payload, options)


def verify(
    key,
    payload: str | bytes,
    signature_text: str,
    algorithm: str | None = None,
    encoding: str = DEFAULT_ENCODING,
) -> bool:
    return RsaVerifier(key).verify(payload, signature_text, algorithm, encoding)


__all__ = [
    "DEFAULT_ALGORITHM",
    "DEFAULT_ENCODING",
    "LINE_WIDTH",
    "RsaSigner",
    "RsaVerifier",
    "SignatureOptions",
    "encode_payload",
    "encode_signature",
    "parse_signature_text",
    "resolve_hash",
    "same_algorithm",
    "sign",
    "verify",
]
