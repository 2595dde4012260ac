"""Key management and RSA signing primitives."""
from .keys import RsaKeyPair, RsaPublicKey, generate, load_private, load_public, save_private, save_public
from .signing import RsaSigner, RsaVerifier, SignatureOptions, sign, verify

__all__ = [
    "RsaKeyPair",
    "RsaPublicKey",
    "RsaSigner",
    "RsaVerifier",
    "SignatureOptions",
    "generate",
    "load_private",
    "load_public",
    "save_private",
    "save_public",
    "sign",
    "verify",
]
