from __future__ import annotations

"""Central exception hierarchy"""
class ScriptSignerError(Exception):
    """Base exception for all failures"""


class KeyFormatError(ScriptSignerError):
    """Raised when key material does not parse as PEM"""


class KeyTypeError(ScriptSignerError):
    """Raised when a parsed key is not RSA or not the expected public/private role"""


class SignatureFormatError(ScriptSignerError):
    """Raised when signature text is not valid base64 after prefix stripping"""


class PayloadEncodingError(ScriptSignerError):
    """Raised when a payload holds characters outside the canonical encoding"""


class UnsupportedAlgorithmError(ScriptSignerError):
    """Raised for a hash/signature algorithm name that is not recognised"""


__all__ = [
    "ScriptSignerError",
    "KeyFormatError",
    "KeyTypeError",
    "SignatureFormatError",
    "PayloadEncodingError",
    "UnsupportedAlgorithmError",
]
