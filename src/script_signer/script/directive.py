"""Locate ``KEYWORD(<json-object>)`` invocation directives in script text.

The argument blob is captured by tracking bracket depth and JSON string
literals, so nested objects and arrays as well as brackets inside quoted
values do not end the capture early.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_KEYWORD = "EXECUTE"

_OPENERS = {"(": ")", "{": "}", "[": "]"}
_CLOSERS = {")", "}", "]"}


@dataclass(frozen=True, slots=True)
class Directive:
    keyword: str
    start: int
    end: int
    arguments: str

    def line_bounds(self, text: str) -> tuple[int, int]:
        """Return the span of whole lines holding the directive, trailing newline included."""
        line_start = text.rfind("\n", 0, self.start) + 1
        newline = text.find("\n", self.end)
        line_end = len(text) if newline == -1 else newline + 1
        return line_start, line_end


def _match_brackets(text: str, open_index: int) -> Optional[int]:
    """Return the index just past the bracket closing ``text[open_index]``."""
    stack: List[str] = []
    in_string = False
    escaped = False
    for index in range(open_index, len(text)):
        ch = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in _OPENERS:
            stack.append(_OPENERS[ch])
        elif ch in _CLOSERS:
            if not stack or stack.pop() != ch:
                return None
            if not stack:
                return index + 1
    return None


def iter_directives(text: str, keyword: str = DEFAULT_KEYWORD) -> Iterator[Directive]:
    position = 0
    while True:
        found = text.find(keyword, position)
        if found == -1:
            return
        paren = found + len(keyword)
        if paren < len(text) and text[paren] == "(":
            end = _match_brackets(text, paren)
            if end is not None:
                yield Directive(keyword, found, end, text[paren + 1 : end - 1])
                position = end
                continue
        position = found + 1


def find_directive(text: str, keyword: str = DEFAULT_KEYWORD) -> Optional[Directive]:
    return next(iter_directives(text, keyword), None)


def remove_directives(text: str, keyword: str = DEFAULT_KEYWORD) -> str:
    """Drop every line that carries a directive; expects ``\\n`` line endings.

    Removal repeats until nothing changes, since dropping a line can balance the
    brackets of a directive that did not parse on the previous pass.
    """
    while True:
        stripped = _remove_once(text, keyword)
        if stripped == text:
            return stripped
        text = stripped


def _remove_once(text: str, keyword: str) -> str:
    pieces: List[str] = []
    cursor = 0
    for directive in iter_directives(text, keyword):
        line_start, line_end = directive.line_bounds(text)
        if line_start < cursor:
            # shares a line with the previous directive
            cursor = max(cursor, line_end)
            continue
        pieces.append(text[cursor:line_start])
        cursor = line_end
    pieces.append(text[cursor:])
    return "".join(pieces)


def _as_text(value: object) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def parse_arguments(arguments: str) -> Dict[str, str]:
    try:
        data = json.loads(arguments)
    except ValueError as exc:
        logger.warning("script.parameters.invalid", error=str(exc))
        return {}
    if not isinstance(data, dict):
        logger.warning("script.parameters.invalid", error="directive arguments are not a JSON object")
        return {}
    return {str(key): _as_text(value) for key, value in data.items()}


def extract_parameters(text: str, keyword: str = DEFAULT_KEYWORD) -> Dict[str, str]:
    """Return the directive's JSON object as a str->str mapping, or ``{}``.

    Missing or malformed directives never raise.
    """
    directive = find_directive(text, keyword)
    if directive is None:
        return {}
    return parse_arguments(directive.arguments)


__all__ = [
    "DEFAULT_KEYWORD",
    "Directive",
    "extract_parameters",
    "find_directive",
    "iter_directives",
    "parse_arguments",
    "remove_directives",
]
