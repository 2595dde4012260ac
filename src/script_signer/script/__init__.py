"""Script canonicalization exports."""
from .canonicalizer import CanonicalScript, ScriptCanonicalizer, ScriptState, SignedScript
from .directive import extract_parameters, find_directive

__all__ = [
    "CanonicalScript",
    "ScriptCanonicalizer",
    "ScriptState",
    "SignedScript",
    "extract_parameters",
    "find_directive",
]
