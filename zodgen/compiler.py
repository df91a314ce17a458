# File: zodgen/compiler.py
"""
ZodGen - Validator Expression Compiler
=======================================
Turns one field into one Zod validator expression, e.g.::

    title  String  @db.VarChar(255)      →  z.string().max(255)
    tags   String[]                      →  z.string().array()
    views  Int?     @default(0)          →  z.number().int().default(0).nullish()

The expression is assembled as a base validator followed by an ordered
modifier chain:

    base → native refinements → min-length policy → array()
         → documentation modifiers → default(...) → nullish()

Tokens are de-duplicated keeping the first occurrence.  ``compile_field`` is
total: an unmappable type degrades to ``z.unknown()`` and an unparsable
native type simply contributes no refinement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from zodgen.docs import (
    CustomSchema,
    Directive,
    ExtraModifier,
    StandaloneValidator,
)
from zodgen.models import (
    DefaultLiteral,
    FieldDescriptor,
    FieldKind,
    GeneratorConfig,
    ScalarType,
)
from zodgen.native_types import split_native_type
from zodgen.utils import enum_schema_name, format_default_literal

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.compiler")

RelatedNameResolver = Callable[[str], str]

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

UNKNOWN: str = "z.unknown()"
JSON_SCHEMA_NAME: str = "jsonSchema"
BUFFER_SCHEMA: str = "z.instanceof(Buffer)"

OBJECT_ID_MODIFIER: str = "regex(/^[0-9a-f]{24}$/i)"
DATE_PATTERN: str = r"regex(/^\d{4}-\d{2}-\d{2}$/)"
TIME_PATTERN: str = r"regex(/^\d{2}:\d{2}:\d{2}$/)"
TIME_TZ_PATTERN: str = r"regex(/^\d{2}:\d{2}:\d{2}[+-]\d{2}:\d{2}$/)"

NULLISH: str = "nullish()"
ARRAY: str = "array()"

# Native tags are compared case-insensitively on the whole tag identifier.
_STRING_MAX_LENGTH_TAGS: frozenset = frozenset({"varchar", "char", "nvarchar", "nchar"})
_STRING_GENERIC_TAGS: frozenset = frozenset(
    {"text", "ntext", "tinytext", "mediumtext", "longtext", "varbit", "bit", "xml"}
)
_STRING_OPAQUE_TAGS: frozenset = frozenset({"varbinary", "binary"})

_INT_BOUNDS: Dict[str, Tuple[Optional[int], Optional[int]]] = {
    "smallint": (-32768, 32767),
    "tinyint": (-128, 127),
    "unsignedint": (0, None),
    "unsignedsmallint": (0, 65535),
    "unsignedtinyint": (0, 255),
}

_DECIMAL_TAGS: frozenset = frozenset({"decimal", "numeric"})

_TIMESTAMP_TAGS: frozenset = frozenset(
    {"timestamp", "timestamptz", "datetime", "datetime2", "datetimeoffset", "smalldatetime"}
)


# ---------------------------------------------------------------------------
# ValidatorExpression
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ValidatorExpression:
    """
    A base validator plus its modifier chain.

    Build instances with :meth:`build`, which drops empty tokens and
    collapses duplicates to their first occurrence.
    """

    base: str
    modifiers: Tuple[str, ...] = ()

    @classmethod
    def build(cls, base: str, tokens: Iterable[str]) -> "ValidatorExpression":
        seen: Dict[str, None] = {}
        for token in tokens:
            if token and token not in seen:
                seen[token] = None
        return cls(base=base, modifiers=tuple(seen))

    def render(self) -> str:
        if not self.modifiers:
            return self.base
        return f"{self.base}.{'.'.join(self.modifiers)}"

    def __str__(self) -> str:
        return self.render()


# ---------------------------------------------------------------------------
# Base selection & native refinement
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class _Draft:
    """Mutable working state while one field compiles."""

    base: str
    tokens: List[str]
    special: bool = False


def _native_tag(native_type: Optional[str]) -> Tuple[Optional[str], List[str]]:
    if not native_type:
        return None, []
    parsed = split_native_type(native_type)
    if parsed is None:
        logger.debug("Unrecognised native type %r ignored.", native_type)
        return None, []
    tag, params = parsed
    return tag.lower(), params


def _parse_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def _compile_string(z: str, native_type: Optional[str], draft: _Draft) -> None:
    draft.base = f"{z}.string()"
    tag, params = _native_tag(native_type)
    if tag is None:
        return

    if tag == "uuid":
        draft.base = "z.uuid()"
        draft.special = True
    elif tag == "citext":
        draft.base = f"{z}.string().toLowerCase()"
        draft.special = True
    elif tag in _STRING_MAX_LENGTH_TAGS:
        length: Optional[int] = _parse_int(params[0]) if params else None
        if length is not None:
            draft.tokens.append(f"max({length})")
    elif tag in _STRING_GENERIC_TAGS:
        pass
    elif tag in _STRING_OPAQUE_TAGS:
        draft.base = UNKNOWN
    elif tag == "objectid":
        draft.tokens.append(OBJECT_ID_MODIFIER)
        draft.special = True


def _compile_int(z: str, native_type: Optional[str], draft: _Draft) -> None:
    draft.base = f"{z}.number()"
    draft.tokens.append("int()")
    tag, _ = _native_tag(native_type)
    bounds: Optional[Tuple[Optional[int], Optional[int]]] = _INT_BOUNDS.get(tag or "")
    if bounds is None:
        return
    low, high = bounds
    if low is not None:
        draft.tokens.append(f"min({low})")
    if high is not None:
        draft.tokens.append(f"max({high})")


def decimal_refinement(precision: int, scale: int) -> str:
    """
    Refinement bounding integer digits to ``precision - scale`` and
    fractional digits to ``scale``.

    Example:
        >>> decimal_refinement(10, 2)
        'refine(x => /^\\\\d{1,8}(\\\\.\\\\d{1,2})?$/.test(x.toString()))'
    """
    integer_digits: int = max(precision - scale, 1)
    if scale == 0:
        pattern: str = rf"/^\d{{1,{integer_digits}}}$/"
    else:
        pattern = rf"/^\d{{1,{integer_digits}}}(\.\d{{1,{scale}}})?$/"
    return f"refine(x => {pattern}.test(x.toString()))"


def _compile_decimal(z: str, native_type: Optional[str], draft: _Draft) -> None:
    draft.base = f"{z}.number()"
    tag, params = _native_tag(native_type)
    if tag not in _DECIMAL_TAGS or len(params) != 2:
        return
    precision: Optional[int] = _parse_int(params[0])
    scale: Optional[int] = _parse_int(params[1])
    if precision is None or scale is None or precision <= 0 or scale < 0 or scale > precision:
        logger.debug("Malformed decimal native type %r; no refinement added.", native_type)
        return
    draft.tokens.append(decimal_refinement(precision, scale))


def _compile_datetime(z: str, native_type: Optional[str], draft: _Draft) -> None:
    draft.base = f"{z}.date()"
    tag, _ = _native_tag(native_type)
    if tag is None or tag in _TIMESTAMP_TAGS:
        return
    if tag == "date":
        draft.base = f"{z}.string().{DATE_PATTERN}"
    elif tag == "timetz":
        draft.base = f"{z}.string().{TIME_TZ_PATTERN}"
    elif tag == "time":
        draft.base = f"{z}.string().{TIME_PATTERN}"


def _select_scalar(
    field: FieldDescriptor,
    native_type: Optional[str],
    config: GeneratorConfig,
    draft: _Draft,
) -> None:
    z: str = "z.coerce" if config.use_coerce else "z"
    field_type: str = field.type

    if field_type == ScalarType.STRING.value:
        _compile_string(z, native_type, draft)
        _apply_min_length(field, config, draft)
    elif field_type == ScalarType.INT.value:
        _compile_int(z, native_type, draft)
    elif field_type == ScalarType.BIGINT.value:
        draft.base = f"{z}.bigint()"
    elif field_type == ScalarType.FLOAT.value:
        draft.base = f"{z}.number()"
    elif field_type == ScalarType.DECIMAL.value:
        _compile_decimal(z, native_type, draft)
    elif field_type == ScalarType.DATETIME.value:
        _compile_datetime(z, native_type, draft)
    elif field_type == ScalarType.BOOLEAN.value:
        draft.base = f"{z}.boolean()"
    elif field_type == ScalarType.BYTES.value:
        draft.base = BUFFER_SCHEMA
    elif field_type == ScalarType.JSON.value:
        draft.base = JSON_SCHEMA_NAME
    else:
        logger.debug("Field '%s' has unmappable type '%s'.", field.name, field_type)


def _apply_min_length(field: FieldDescriptor, config: GeneratorConfig, draft: _Draft) -> None:
    if not (config.use_min_length and field.is_required and not draft.special):
        return
    if config.use_trim_strings:
        draft.tokens.append("trim()")
    draft.tokens.append("min(1)")
    if config.use_trim_strings and config.use_prefault_empty_string:
        draft.tokens.append('prefault("")')


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def compile_field(
    field: FieldDescriptor,
    native_type: Optional[str] = None,
    directives: Sequence[Directive] = (),
    default_value: Optional[DefaultLiteral] = None,
    config: Optional[GeneratorConfig] = None,
    related_name: Optional[RelatedNameResolver] = None,
) -> ValidatorExpression:
    """
    Compile one field into a validator expression.

    Args:
        field: The field to compile.
        native_type: Database-native type annotation (``"VarChar(255)"``), if known.
        directives: Parsed documentation directives, in documentation order.
        default_value: Literal default to embed via ``default(...)``.
        config: Generation options; defaults apply when omitted.
        related_name: Maps a related model name to the schema identifier to
            reference; the bare model name is used when omitted.

    Returns:
        ValidatorExpression (never raises for unmappable input).
    """
    cfg: GeneratorConfig = config if config is not None else GeneratorConfig()
    draft: _Draft = _Draft(base=UNKNOWN, tokens=[])

    if field.kind is FieldKind.SCALAR:
        _select_scalar(field, native_type, cfg, draft)
    elif field.kind is FieldKind.ENUM:
        if cfg.use_standalone_enums:
            draft.base = enum_schema_name(field.type)
        else:
            draft.base = f"z.enum({field.type})"
    elif field.kind is FieldKind.RELATION:
        draft.base = related_name(field.type) if related_name is not None else field.type

    if field.is_list:
        draft.tokens.append(ARRAY)

    custom: Optional[CustomSchema] = next(
        (d for d in directives if isinstance(d, CustomSchema)), None
    )
    standalone: Optional[StandaloneValidator] = next(
        (d for d in directives if isinstance(d, StandaloneValidator)), None
    )
    if custom is not None:
        draft.base = custom.expression
    elif standalone is not None:
        if field.type == ScalarType.STRING.value:
            draft.base = standalone.expression
        else:
            logger.debug(
                "Standalone validator '%s' ignored on non-string field '%s'.",
                standalone.name,
                field.name,
            )
    draft.tokens.extend(d.call for d in directives if isinstance(d, ExtraModifier))

    if default_value is not None:
        literal: Optional[str] = format_default_literal(default_value)
        if literal is not None:
            draft.tokens.append(f"default({literal})")

    if not field.is_required and field.type != ScalarType.JSON.value:
        draft.tokens.append(NULLISH)

    return ValidatorExpression.build(draft.base, draft.tokens)


def compile_field_source(
    field: FieldDescriptor,
    native_type: Optional[str] = None,
    directives: Sequence[Directive] = (),
    default_value: Optional[DefaultLiteral] = None,
    config: Optional[GeneratorConfig] = None,
    related_name: Optional[RelatedNameResolver] = None,
) -> str:
    """Shorthand for ``compile_field(...).render()``."""
    return compile_field(
        field, native_type, directives, default_value, config, related_name
    ).render()


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "RelatedNameResolver",
    "ValidatorExpression",
    "decimal_refinement",
    "compile_field",
    "compile_field_source",
]
