"""Sign and verify scripts with RSA signatures embedded in the script text."""
from .core.exceptions import (
    KeyFormatError,
    KeyTypeError,
    PayloadEncodingError,
    ScriptSignerError,
    SignatureFormatError,
    UnsupportedAlgorithmError,
)
from .crypto import RsaKeyPair, RsaPublicKey, SignatureOptions, sign, verify
from .script import ScriptCanonicalizer, extract_parameters
from .version import __version__

__all__ = [
    "KeyFormatError",
    "KeyTypeError",
    "PayloadEncodingError",
    "RsaKeyPair",
    "RsaPublicKey",
    "ScriptCanonicalizer",
    "ScriptSignerError",
    "SignatureFormatError",
    "SignatureOptions",
    "UnsupportedAlgorithmError",
    "__version__",
    "extract_parameters",
    "sign",
    "verify",
]
