"""Derive the signable payload of a script and embed signatures back into it.

A script moves through three states. ``RAW`` is the text as supplied.
``CANONICALIZED`` is the code that gets signed: line endings folded to
``\\n``, directive lines removed, any previously embedded signature block cut
off, surrounding whitespace trimmed. ``SIGNED`` is the original text up to
any old signature block, followed by one line break and the new
``<algorithm>:<base64>`` block, written with the document's line endings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, Optional

import structlog

from ..crypto.signing import (
    DEFAULT_ALGORITHM,
    DEFAULT_ENCODING,
    LINE_WIDTH,
    RsaSigner,
    RsaVerifier,
    SignatureOptions,
)
from .directive import DEFAULT_KEYWORD, extract_parameters, remove_directives

if TYPE_CHECKING:
    from ..utils.config import AppConfig

logger = structlog.get_logger(__name__)

# exact spellings written by RsaSigner; lowercase digests such as "sha256:<hex>" are code
_MARKER_NAMES = (
    "SHA-1",
    "SHA-256",
    "SHA-384",
    "SHA-512",
    "SHA1withRSA",
    "SHA256withRSA",
    "SHA384withRSA",
    "SHA512withRSA",
)


def _compile_block(algorithm: str) -> re.Pattern[str]:
    """Match "<algorithm>:" at a line start followed by whole lines of base64.

    A line continues the block only after a full-width chunk, so code written
    below a signature is never read as part of it.
    """
    names = sorted({*_MARKER_NAMES, algorithm}, key=len, reverse=True)
    alternatives = "|".join(re.escape(name) for name in names)
    return re.compile(
        rf"^({alternatives}):((?:[A-Za-z0-9+/]{{{LINE_WIDTH}}}\n)*[A-Za-z0-9+/]+=*)[ \t]*$",
        re.MULTILINE,
    )


_LINE_ENDINGS = {"crlf": "\r\n", "lf": "\n"}


class ScriptState(str, Enum):
    RAW = "RAW"
    CANONICALIZED = "CANONICALIZED"
    SIGNED = "SIGNED"


@dataclass(frozen=True, slots=True)
class CanonicalScript:
    original: str
    code: str
    parameters: Dict[str, str] = field(default_factory=dict)

    @property
    def state(self) -> ScriptState:
        return ScriptState.CANONICALIZED


@dataclass(frozen=True, slots=True)
class SignedScript:
    original: str
    code: str
    parameters: Dict[str, str]
    signature: str
    text: str

    @property
    def state(self) -> ScriptState:
        return ScriptState.SIGNED


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def detect_line_ending(text: str) -> str:
    if "\n" in text and "\r\n" not in text and "\r" not in text:
        return "\n"
    return "\r\n"


class ScriptCanonicalizer:
    """Canonicalizes, signs and verifies scripts carrying embedded signatures."""

    def __init__(
        self,
        keyword: str = DEFAULT_KEYWORD,
        *,
        algorithm: str = DEFAULT_ALGORITHM,
        encoding: str = DEFAULT_ENCODING,
        wrap_lines: bool = True,
        line_ending: str = "auto",
    ) -> None:
        if line_ending != "auto" and line_ending not in _LINE_ENDINGS:
            raise ValueError(f"Unknown line ending: {line_ending}")
        self.keyword = keyword
        self.algorithm = algorithm
        self.encoding = encoding
        self.wrap_lines = wrap_lines
        self.line_ending = line_ending
        self._block = _compile_block(algorithm)

    @classmethod
    def from_config(cls, config: "AppConfig") -> "ScriptCanonicalizer":
        return cls(
            config.script.directive_keyword,
            algorithm=config.signing.algorithm,
            encoding=config.signing.payload_encoding,
            wrap_lines=config.signing.wrap_lines,
            line_ending=config.script.line_ending,
        )

    def _signature_match(self, normalized: str) -> Optional[re.Match[str]]:
        return self._block.search(normalized)

    def canonical_code(self, text: str) -> str:
        code = remove_directives(normalize_newlines(text).strip(), self.keyword).strip()
        match = self._signature_match(code)
        if match is not None:
            code = code[: match.start()].strip()
        return code

    def extract_parameters(self, text: str) -> Dict[str, str]:
        return extract_parameters(text, self.keyword)

    def canonicalize(self, text: str) -> CanonicalScript:
        return CanonicalScript(
            original=text,
            code=self.canonical_code(text),
            parameters=self.extract_parameters(text),
        )

    def extract_signature(self, text: str) -> Optional[str]:
        """Return the embedded ``<algorithm>:<base64>`` block with line breaks removed."""
        match = self._signature_match(normalize_newlines(text))
        if match is None:
            return None
        return f"{match.group(1)}:{match.group(2).replace(chr(10), '')}"

    def _line_ending_for(self, text: str) -> str:
        if self.line_ending == "auto":
            return detect_line_ending(text)
        return _LINE_ENDINGS[self.line_ending]

    def assemble(self, original: str, signature: str) -> str:
        normalized = normalize_newlines(original)
        match = self._signature_match(normalized)
        body = normalized[: match.start()] if match is not None else normalized
        if not body.endswith("\n"):
            body += "\n"
        body += normalize_newlines(signature)
        return body.replace("\n", self._line_ending_for(original))

    def sign(self, text: str, signer) -> SignedScript:
        if not isinstance(signer, RsaSigner):
            signer = RsaSigner(signer)
        canonical = self.canonicalize(text)
        options = SignatureOptions(
            algorithm=self.algorithm,
            wrap_lines=self.wrap_lines,
            write_algo_as_prefix=True,
            encoding=self.encoding,
        )
        signature = signer.sign(canonical.code, options)
        logger.info("script.sign", algorithm=self.algorithm, code_length=len(canonical.code))
        return SignedScript(
            original=text,
            code=canonical.code,
            parameters=canonical.parameters,
            signature=signature,
            text=self.assemble(text, signature),
        )

    def verify(self, text: str, verifier) -> bool:
        """Check the embedded signature against the script's canonical code.

        A script without an embedded signature does not verify. Malformed
        signature text and unrepresentable payload characters raise.
        """
        if not isinstance(verifier, RsaVerifier):
            verifier = RsaVerifier(verifier)
        signature = self.extract_signature(text)
        if signature is None:
            logger.warning("script.verify", valid=False, reason="missing signature")
            return False
        valid = verifier.verify(self.canonical_code(text), signature, encoding=self.encoding)
        logger.info("script.verify", valid=valid)
        return valid


__all__ = [
    "CanonicalScript",
    "ScriptCanonicalizer",
    "ScriptState",
    "SignedScript",
    "detect_line_ending",
    "normalize_newlines",
]
