# File: zodgen/validators.py
"""
ZodGen - Data Model & Configuration Validators
================================================
Pydantic handles per-field structural correctness of the input.  This
module adds **cross-entity semantic validation** before emission:

- duplicate model / enum / field names (errors: they would emit colliding
  identifiers or modules),
- relation fields pointing at undeclared models and enum fields pointing
  at undeclared enums (warnings: the emitter still produces output, the
  referencing module simply won't type-check),
- generated identifier clashes between models and enums,
- configuration combinations that silently have no effect.

All functions are single-pass over the data model.

Usage:
    from zodgen.validators import validate_full
    result = validate_full(data_model, config)
    if not result.is_valid:
        raise SystemExit(result.format_report())
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Set, Tuple

from zodgen.models import DataModel, FieldKind, GeneratorConfig, ScalarType
from zodgen.utils import enum_schema_name, model_schema_name, module_file_name

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.validators")

# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight error descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning" | "info"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the validators."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    # -- Mutation -----------------------------------------------------------

    def add_error(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def add_info(
        self, code: str, message: str, context: Optional[Dict[str, Any]] = None
    ) -> None:
        self._items.append(ValidationError("info", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    # -- Query --------------------------------------------------------------

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def all_items(self) -> List[ValidationError]:
        return list(self._items)

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def has_errors(self) -> bool:
        return any(e.is_error for e in self._items)

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s), "
            f"{len(self._items)} total item(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self, include_info: bool = False) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            if not include_info and item.level == "info":
                continue
            prefix: str = {"error": "❌", "warning": "⚠️", "info": "ℹ️"}.get(item.level, "•")
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_IDENTIFIER_RE: re.Pattern[str] = re.compile(r"^[A-Za-z_$][A-Za-z0-9_$]*$")
_MODULE_SPECIFIER_RE: re.Pattern[str] = re.compile(r"^[^\s'\"\\]+$")

_RESERVED_MODULE_FILES: FrozenSet[str] = frozenset({"index.ts"})
_ENUMS_MODULE_FILE: str = "enums.ts"


# ---------------------------------------------------------------------------
# Individual validation functions
# ---------------------------------------------------------------------------


def validate_model_names(data_model: DataModel) -> ValidationResult:
    """
    Model and enum names must be unique identifiers, and models must not
    share a generated module file (``User`` and ``user`` both emit ``user.ts``).
    """
    result: ValidationResult = ValidationResult()
    seen: Set[str] = set()
    files: Dict[str, str] = {}

    for model in data_model.models:
        ctx: Dict[str, Any] = {"model": model.name}
        if model.name in seen:
            result.add_error(
                "DUPLICATE_MODEL_NAME",
                f"Model '{model.name}' is declared more than once.",
                ctx,
            )
            continue
        seen.add(model.name)

        if not _IDENTIFIER_RE.match(model.name):
            result.add_error(
                "INVALID_MODEL_NAME",
                f"Model name '{model.name}' is not a valid identifier.",
                ctx,
            )

        file_name: str = module_file_name(model.name)
        if file_name in _RESERVED_MODULE_FILES:
            result.add_error(
                "RESERVED_MODULE_FILE",
                f"Model '{model.name}' would overwrite the generated '{file_name}'.",
                {"model": model.name, "file": file_name},
            )
        elif file_name in files:
            result.add_error(
                "MODULE_FILE_COLLISION",
                f"Models '{files[file_name]}' and '{model.name}' would both "
                f"be written to '{file_name}'.",
                {"model": model.name, "file": file_name},
            )
        else:
            files[file_name] = model.name

    enum_seen: Set[str] = set()
    for enum in data_model.enums:
        if enum.name in enum_seen:
            result.add_error(
                "DUPLICATE_ENUM_NAME",
                f"Enum '{enum.name}' is declared more than once.",
                {"enum": enum.name},
            )
        enum_seen.add(enum.name)
        if enum.name in seen:
            result.add_error(
                "ENUM_MODEL_NAME_CLASH",
                f"'{enum.name}' is declared both as a model and as an enum.",
                {"enum": enum.name},
            )

    return result


def validate_fields(data_model: DataModel) -> ValidationResult:
    """Field names must be unique per model."""
    result: ValidationResult = ValidationResult()

    for model in data_model.models:
        names: Set[str] = set()
        for field in model.fields:
            ctx: Dict[str, Any] = {"model": model.name, "field": field.name}
            if field.name in names:
                result.add_error(
                    "DUPLICATE_FIELD_NAME",
                    f"Field '{model.name}.{field.name}' is declared more than once.",
                    ctx,
                )
            names.add(field.name)
            if not _IDENTIFIER_RE.match(field.name):
                result.add_error(
                    "INVALID_FIELD_NAME",
                    f"Field name '{model.name}.{field.name}' is not a valid identifier.",
                    ctx,
                )

    return result


def validate_references(data_model: DataModel) -> ValidationResult:
    """
    Relation and enum fields should reference declared types.

    Unresolved references are warnings: emission still succeeds, but the
    generated module imports a name nothing exports.
    """
    result: ValidationResult = ValidationResult()
    model_names: Set[str] = set(data_model.model_names)
    enum_names: Set[str] = set(data_model.enum_names)
    scalar_names: Set[str] = {t.value for t in ScalarType}

    for model in data_model.models:
        for field in model.fields:
            ctx: Dict[str, Any] = {"model": model.name, "field": field.name, "type": field.type}
            if field.kind is FieldKind.RELATION and field.type not in model_names:
                result.add_warning(
                    "UNKNOWN_RELATION_TARGET",
                    f"Relation '{model.name}.{field.name}' targets undeclared "
                    f"model '{field.type}'.",
                    ctx,
                )
            elif field.kind is FieldKind.ENUM and field.type not in enum_names:
                result.add_warning(
                    "UNKNOWN_ENUM_TYPE",
                    f"Enum field '{model.name}.{field.name}' references undeclared "
                    f"enum '{field.type}'.",
                    ctx,
                )
            elif field.kind is FieldKind.SCALAR and field.type not in scalar_names:
                result.add_info(
                    "UNMAPPED_SCALAR_TYPE",
                    f"Field '{model.name}.{field.name}' has type '{field.type}'; "
                    f"it will be emitted as z.unknown().",
                    ctx,
                )

    return result


def validate_identifier_clashes(
    data_model: DataModel, config: GeneratorConfig
) -> ValidationResult:
    """Generated schema identifiers must not collide across models and enums."""
    result: ValidationResult = ValidationResult()
    owners: Dict[str, str] = {}

    candidates: List[Tuple[str, str]] = [
        (model_schema_name(m.name, config), f"model '{m.name}'") for m in data_model.models
    ]
    if config.use_standalone_enums and data_model.enums:
        candidates.extend(
            (enum_schema_name(e.name), f"enum '{e.name}'") for e in data_model.enums
        )
        for model in data_model.models:
            if module_file_name(model.name) == _ENUMS_MODULE_FILE:
                result.add_error(
                    "RESERVED_MODULE_FILE",
                    f"Model '{model.name}' would overwrite the generated "
                    f"'{_ENUMS_MODULE_FILE}'.",
                    {"model": model.name, "file": _ENUMS_MODULE_FILE},
                )

    for identifier, owner in candidates:
        if identifier in owners and owners[identifier] != owner:
            result.add_error(
                "IDENTIFIER_CLASH",
                f"Generated identifier '{identifier}' is produced by both "
                f"{owners[identifier]} and {owner}.",
                {"identifier": identifier},
            )
        owners.setdefault(identifier, owner)

    return result


def validate_generator_config(config: GeneratorConfig) -> ValidationResult:
    """Configuration sanity checks beyond what the model enforces."""
    result: ValidationResult = ValidationResult()

    if config.use_prefault_empty_string and not (
        config.use_min_length and config.use_trim_strings
    ):
        result.add_warning(
            "PREFAULT_WITHOUT_TRIM",
            "usePrefaultEmptyString only applies when useMinLength and "
            "useTrimStrings are both enabled.",
        )

    if config.use_trim_strings and not config.use_min_length:
        result.add_warning(
            "TRIM_WITHOUT_MIN_LENGTH",
            "useTrimStrings only applies when useMinLength is enabled.",
        )

    if not _IDENTIFIER_RE.match(f"X{config.model_suffix}"):
        result.add_error(
            "INVALID_MODEL_SUFFIX",
            f"modelSuffix '{config.model_suffix}' would produce invalid identifiers.",
            {"modelSuffix": config.model_suffix},
        )

    if not _MODULE_SPECIFIER_RE.match(config.zod_import):
        result.add_error(
            "INVALID_ZOD_IMPORT",
            f"zodImport '{config.zod_import}' is not a valid module specifier.",
            {"zodImport": config.zod_import},
        )

    if config.imports is not None and not config.imports.strip():
        result.add_warning(
            "EMPTY_IMPORTS_PATH",
            "imports is set to an empty path and will be ignored.",
        )

    return result


# ---------------------------------------------------------------------------
# Aggregate validators
# ---------------------------------------------------------------------------


def validate_data_model(data_model: DataModel) -> ValidationResult:
    """Run all data-model validators and return a merged result."""
    result: ValidationResult = ValidationResult()

    validators: List[Callable[[DataModel], ValidationResult]] = [
        validate_model_names,
        validate_fields,
        validate_references,
    ]
    for validator_fn in validators:
        logger.debug("Running validator: %s", validator_fn.__name__)
        result.merge(validator_fn(data_model))

    logger.info("Data model validation complete: %s", result.summary())
    return result


def validate_config(config: GeneratorConfig) -> ValidationResult:
    result: ValidationResult = validate_generator_config(config)
    logger.info("Config validation complete: %s", result.summary())
    return result


def validate_full(data_model: DataModel, config: GeneratorConfig) -> ValidationResult:
    """
    **Master validation entry point**, called by the generator and the CLI
    before emission.
    """
    logger.info(
        "Starting full validation: %d models, %d enums.",
        len(data_model.models),
        len(data_model.enums),
    )

    result: ValidationResult = ValidationResult()
    result.merge(validate_data_model(data_model))
    result.merge(validate_config(config))
    result.merge(validate_identifier_clashes(data_model, config))

    if result.has_errors:
        logger.error(
            "Validation FAILED with %d error(s). %s", result.error_count, result.summary()
        )
    else:
        logger.info("Validation PASSED. %s", result.summary())
    return result


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_model_names",
    "validate_fields",
    "validate_references",
    "validate_identifier_clashes",
    "validate_generator_config",
    "validate_data_model",
    "validate_config",
    "validate_full",
]

logger.debug("zodgen.validators loaded — %d public symbols.", len(__all__))
