# File: zodgen/docs.py
"""
ZodGen - Documentation Directive Parser
========================================
Field documentation may carry instructions for the generator, one line
each, introduced by the ``@zod`` sentinel and written as a chain of calls::

    /// The user's login name
    /// @zod.max(64).min(1)
    /// @zod.custom(z.string().regex(/^[a-z]+$/))
    /// @zod.email()

Every ``@zod`` line is split into call segments and each segment becomes a
directive:

- ``custom(EXPR)``        → :class:`CustomSchema` (replaces the base validator)
- a standalone primitive  → :class:`StandaloneValidator` (``email()`` → ``z.email()``)
- anything else           → :class:`ExtraModifier` (appended verbatim)

All other lines are ordinary comment text, passed through as JSDoc.
Parsing is line-oriented, order-preserving and case-sensitive on the
sentinel.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple, Union

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.docs")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SENTINEL: str = "@zod"
CUSTOM_CALL: str = "custom"

# Zod primitives that stand on their own (``z.email()``) instead of
# refining ``z.string()``.
STANDALONE_PRIMITIVES: FrozenSet[str] = frozenset(
    {
        "email",
        "url",
        "httpUrl",
        "uuid",
        "uuidv4",
        "uuidv6",
        "uuidv7",
        "guid",
        "cuid",
        "cuid2",
        "ulid",
        "nanoid",
        "xid",
        "ksuid",
        "ipv4",
        "ipv6",
        "cidrv4",
        "cidrv6",
        "mac",
        "base64",
        "base64url",
        "e164",
        "jwt",
        "emoji",
        "hostname",
        "hex",
        "iso.date",
        "iso.time",
        "iso.datetime",
        "iso.duration",
    }
)

_OPENERS: str = "([{"
_CLOSERS: str = ")]}"
_QUOTES: str = "\"'`"


# ---------------------------------------------------------------------------
# Directive variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class CustomSchema:
    """Replace the whole base validator with *expression*."""

    expression: str


@dataclass(frozen=True, slots=True)
class StandaloneValidator:
    """Replace a string field's base validator with ``z.<call>``."""

    name: str
    call: str

    @property
    def expression(self) -> str:
        return f"z.{self.call}"


@dataclass(frozen=True, slots=True)
class ExtraModifier:
    """Append *call* verbatim to the validator chain."""

    call: str


Directive = Union[CustomSchema, StandaloneValidator, ExtraModifier]


@dataclass(frozen=True, slots=True)
class ParsedDocumentation:
    """Directives and plain comment lines of one field, both in source order."""

    directives: Tuple[Directive, ...] = ()
    comment_lines: Tuple[str, ...] = ()

    @property
    def custom_schema(self) -> Optional[CustomSchema]:
        """The first custom-schema override, if any."""
        for directive in self.directives:
            if isinstance(directive, CustomSchema):
                return directive
        return None

    @property
    def standalone_validator(self) -> Optional[StandaloneValidator]:
        for directive in self.directives:
            if isinstance(directive, StandaloneValidator):
                return directive
        return None

    @property
    def modifiers(self) -> List[str]:
        return [d.call for d in self.directives if isinstance(d, ExtraModifier)]


# ---------------------------------------------------------------------------
# Call-chain scanning
# ---------------------------------------------------------------------------


def _skip_quoted(text: str, start: int) -> int:
    """Return the index just past the string literal opening at *start*."""
    quote: str = text[start]
    idx: int = start + 1
    while idx < len(text):
        if text[idx] == "\\":
            idx += 2
            continue
        if text[idx] == quote:
            return idx + 1
        idx += 1
    return len(text)


def _skip_regex(text: str, start: int) -> int:
    """Return the index just past the regex literal opening at *start*."""
    idx: int = start + 1
    in_class: bool = False
    while idx < len(text):
        char: str = text[idx]
        if char == "\\":
            idx += 2
            continue
        if char == "[":
            in_class = True
        elif char == "]":
            in_class = False
        elif char == "/" and not in_class:
            idx += 1
            while idx < len(text) and text[idx].isalpha():
                idx += 1
            return idx
        idx += 1
    return len(text)


def _regex_may_start(text: str, idx: int) -> bool:
    """A ``/`` starts a regex literal when it follows an opener, comma or operator."""
    back: int = idx - 1
    while back >= 0 and text[back].isspace():
        back -= 1
    return back < 0 or text[back] in "([{,=:!&|?;>"


def _find_closing(text: str, open_idx: int) -> int:
    """
    Index of the bracket closing the one at *open_idx*, or -1 if unbalanced.

    String and regex literals are skipped so brackets inside them don't count.
    """
    depth: int = 0
    idx: int = open_idx
    while idx < len(text):
        char: str = text[idx]
        if char in _QUOTES:
            idx = _skip_quoted(text, idx)
            continue
        if char == "/" and _regex_may_start(text, idx):
            idx = _skip_regex(text, idx)
            continue
        if char in _OPENERS:
            depth += 1
        elif char in _CLOSERS:
            depth -= 1
            if depth == 0:
                return idx
        idx += 1
    return -1


def split_call_chain(chain: str) -> List[Tuple[str, str]]:
    """
    Split ``.a(1).b.c(x(y))`` into ``[("a", "a(1)"), ("b.c", "b.c(x(y))")]``.

    Dotted names without their own argument list (``iso.datetime()``) are
    joined with the following call.  Scanning stops at the first segment
    that is not a well-formed call.
    """
    segments: List[Tuple[str, str]] = []
    idx: int = 0
    text: str = chain.strip()

    while idx < len(text):
        if text[idx] != ".":
            logger.debug("Ignoring trailing directive text: %r", text[idx:])
            break
        name_start: int = idx + 1
        cursor: int = name_start
        while cursor < len(text) and (text[cursor].isalnum() or text[cursor] in "_$."):
            cursor += 1
        name: str = text[name_start:cursor].rstrip(".")
        if not name or cursor >= len(text) or text[cursor] != "(":
            logger.debug("Ignoring malformed directive segment: %r", text[idx:])
            break
        close: int = _find_closing(text, cursor)
        if close < 0:
            logger.debug("Unbalanced directive arguments: %r", text[idx:])
            break
        segments.append((name, text[name_start : close + 1]))
        idx = close + 1
        while idx < len(text) and text[idx].isspace():
            idx += 1

    return segments


def _classify(name: str, call: str) -> Directive:
    if name == CUSTOM_CALL:
        return CustomSchema(expression=call[len(CUSTOM_CALL) + 1 : -1].strip())
    if name in STANDALONE_PRIMITIVES:
        return StandaloneValidator(name=name, call=call)
    return ExtraModifier(call=call)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def is_directive_line(line: str) -> bool:
    """True when *line* is introduced by the ``@zod`` sentinel."""
    stripped: str = line.lstrip()
    return stripped.startswith(SENTINEL) and stripped[len(SENTINEL) : len(SENTINEL) + 1] in (
        ".",
        "",
    )


def parse_documentation(documentation: Optional[str]) -> ParsedDocumentation:
    """
    Parse a field's documentation into directives and comment lines.

    Args:
        documentation: Raw documentation text (may be ``None``).

    Returns:
        ParsedDocumentation with both lists in source order.
    """
    if not documentation:
        return ParsedDocumentation()

    directives: List[Directive] = []
    comments: List[str] = []

    for line in documentation.splitlines():
        if not is_directive_line(line):
            comments.append(line)
            continue
        chain: str = line.lstrip()[len(SENTINEL):]
        for name, call in split_call_chain(chain):
            directives.append(_classify(name, call))

    customs: int = sum(1 for d in directives if isinstance(d, CustomSchema))
    if customs > 1:
        logger.warning(
            "Documentation carries %d custom schema overrides; using the first.",
            customs,
        )

    return ParsedDocumentation(directives=tuple(directives), comment_lines=tuple(comments))


def comment_lines(documentation: Optional[str]) -> List[str]:
    """Plain (non-directive) documentation lines for JSDoc passthrough."""
    return list(parse_documentation(documentation).comment_lines)


def has_custom_schema(documentation: Optional[str]) -> bool:
    return parse_documentation(documentation).custom_schema is not None


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "SENTINEL",
    "STANDALONE_PRIMITIVES",
    "CustomSchema",
    "StandaloneValidator",
    "ExtraModifier",
    "Directive",
    "ParsedDocumentation",
    "split_call_chain",
    "is_directive_line",
    "parse_documentation",
    "comment_lines",
    "has_custom_schema",
]
