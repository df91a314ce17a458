# File: zodgen/models.py
"""
ZodGen - Core Data Models
==========================
Pydantic V2 models representing the structured data model (models, fields,
enums) and the generator configuration.  These models are the single source
of truth for the entire pipeline:
Input Loading → Validation → Native Type Resolution → Emission → Export.

Every model here is frozen: a generation run reads them, never mutates them.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.models")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ConfigurationError(ValueError):
    """Raised when generator configuration fails validation (always fatal)."""


# ---------------------------------------------------------------------------
# Enums — fixed sets used across the entire project
# ---------------------------------------------------------------------------


class FieldKind(str, Enum):
    """Classification of a model field."""

    SCALAR = "scalar"
    ENUM = "enum"
    RELATION = "relation"


class ScalarType(str, Enum):
    """Portable scalar types of the data-model language."""

    STRING = "String"
    INT = "Int"
    BIGINT = "BigInt"
    FLOAT = "Float"
    DECIMAL = "Decimal"
    DATETIME = "DateTime"
    BOOLEAN = "Boolean"
    BYTES = "Bytes"
    JSON = "Json"


class ModelCase(str, Enum):
    """Casing applied to generated schema identifiers."""

    PASCAL_CASE = "PascalCase"
    CAMEL_CASE = "camelCase"


# ---------------------------------------------------------------------------
# Mixin: shared model configuration
# ---------------------------------------------------------------------------

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    use_enum_values=False,
    frozen=True,
    extra="ignore",
)

_STRICT_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    use_enum_values=False,
    frozen=True,
    extra="forbid",
    protected_namespaces=(),
)

DefaultLiteral = Union[bool, int, float, str]


# ---------------------------------------------------------------------------
# Data-model primitives
# ---------------------------------------------------------------------------


class FieldDescriptor(BaseModel):
    """
    One declared field of a model.

    Accepts the DMMF shape produced by schema-introspection hosts: ``kind``
    may be ``"object"`` for relations and ``default`` may be a function
    object (``{"name": "now", "args": []}``), which carries no literal and
    is dropped.
    """

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Field name.")
    kind: FieldKind = Field(default=FieldKind.SCALAR, description="Field classification.")
    type: str = Field(..., min_length=1, description="Declared type name.")
    is_list: bool = Field(default=False, alias="isList", description="List cardinality.")
    is_required: bool = Field(
        default=True, alias="isRequired", description="False when the field is optional."
    )
    default: Optional[DefaultLiteral] = Field(
        default=None, description="Literal default value, if any."
    )
    documentation: Optional[str] = Field(
        default=None, description="Free-text documentation (may carry directives)."
    )

    @field_validator("kind", mode="before")
    @classmethod
    def _normalise_kind(cls, v: Any) -> Any:
        if v == "object":
            return FieldKind.RELATION
        if v == "unsupported":
            return FieldKind.SCALAR
        return v

    @field_validator("default", mode="before")
    @classmethod
    def _literal_defaults_only(cls, v: Any) -> Any:
        if isinstance(v, (dict, list)):
            return None
        return v

    @property
    def is_relation(self) -> bool:
        return self.kind is FieldKind.RELATION

    @property
    def is_enum(self) -> bool:
        return self.kind is FieldKind.ENUM

    def __repr__(self) -> str:
        card: str = "[]" if self.is_list else ""
        opt: str = "" if self.is_required else "?"
        return f"<Field {self.name}: {self.type}{card}{opt} ({self.kind.value})>"


class ModelDescriptor(BaseModel):
    """A model: an ordered list of fields."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Model name.")
    fields: List[FieldDescriptor] = Field(
        default_factory=list, description="Fields in declaration order."
    )
    documentation: Optional[str] = Field(default=None, description="Model documentation.")

    @computed_field  # type: ignore[misc]
    @property
    def relation_fields(self) -> List[FieldDescriptor]:
        return [f for f in self.fields if f.is_relation]

    @computed_field  # type: ignore[misc]
    @property
    def scalar_fields(self) -> List[FieldDescriptor]:
        """Every non-relation field (scalars and enums) in declaration order."""
        return [f for f in self.fields if not f.is_relation]

    @property
    def has_relations(self) -> bool:
        return any(f.is_relation for f in self.fields)

    def __repr__(self) -> str:
        return f"<Model {self.name} ({len(self.fields)} fields)>"


class EnumDescriptor(BaseModel):
    """An enum: an ordered list of value names."""

    model_config = _SHARED_CONFIG

    name: str = Field(..., min_length=1, description="Enum type name.")
    values: List[str] = Field(..., min_length=1, description="Ordered value names.")

    @field_validator("values", mode="before")
    @classmethod
    def _value_names(cls, v: Any) -> Any:
        # DMMF ships values as {"name": ..., "dbName": ...} objects.
        if isinstance(v, list):
            return [item["name"] if isinstance(item, dict) else item for item in v]
        return v

    def __repr__(self) -> str:
        return f"<Enum {self.name} {self.values}>"


class DataModel(BaseModel):
    """
    The root input: every model and enum of one generation run.

    Model and enum order is declaration order and drives emission order.
    """

    model_config = _SHARED_CONFIG

    models: List[ModelDescriptor] = Field(default_factory=list, description="Models.")
    enums: List[EnumDescriptor] = Field(default_factory=list, description="Enums.")

    @computed_field  # type: ignore[misc]
    @property
    def model_names(self) -> List[str]:
        return [m.name for m in self.models]

    @computed_field  # type: ignore[misc]
    @property
    def enum_names(self) -> List[str]:
        return [e.name for e in self.enums]

    def get_model(self, name: str) -> Optional[ModelDescriptor]:
        for model in self.models:
            if model.name == name:
                return model
        return None

    def __repr__(self) -> str:
        return f"<DataModel {len(self.models)} models, {len(self.enums)} enums>"


# ---------------------------------------------------------------------------
# Generator configuration
# ---------------------------------------------------------------------------

# Keys the host toolchain passes alongside generator settings.
HOST_CONFIG_KEYS: frozenset = frozenset(
    {"provider", "output", "previewFeatures", "binaryTargets", "engineType"}
)


def _string_boolean(value: Any) -> Any:
    """Accept the host's string booleans (``"true"`` / ``"false"``)."""
    if isinstance(value, str):
        lowered: str = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        raise ValueError(f"expected 'true' or 'false', got {value!r}")
    return value


class GeneratorConfig(BaseModel):
    """
    Immutable generation options, read once per run.

    Keys are accepted in the host's camelCase spelling (``useCoerce``) or
    as Python field names (``use_coerce``).  Unknown keys are rejected here;
    ``from_host`` drops them with a warning instead.
    """

    model_config = _STRICT_CONFIG

    relation_model: Union[Literal["default"], bool] = Field(
        default=True,
        alias="relationModel",
        description="Emit complete (relation-inclusive) schemas; 'default' also renames them.",
    )
    model_suffix: str = Field(default="Model", alias="modelSuffix")
    model_case: ModelCase = Field(default=ModelCase.PASCAL_CASE, alias="modelCase")
    use_coerce: bool = Field(default=False, alias="useCoerce")
    use_decimal_js: bool = Field(default=True, alias="useDecimalJs")
    use_standalone_enums: bool = Field(default=False, alias="useStandaloneEnums")
    prisma_json_nullability: bool = Field(default=True, alias="prismaJsonNullability")
    use_min_length: bool = Field(default=False, alias="useMinLength")
    use_trim_strings: bool = Field(default=False, alias="useTrimStrings")
    use_prefault_empty_string: bool = Field(default=False, alias="usePrefaultEmptyString")
    imports: Optional[str] = Field(
        default=None, description="Module path exposed to directives as ``imports``."
    )
    zod_import: str = Field(
        default="zod", min_length=1, alias="zodImport", description="Module specifier for z."
    )

    @field_validator("relation_model", mode="before")
    @classmethod
    def _parse_relation_model(cls, v: Any) -> Any:
        if v == "default":
            return v
        return _string_boolean(v)

    @field_validator(
        "use_coerce",
        "use_decimal_js",
        "use_standalone_enums",
        "prisma_json_nullability",
        "use_min_length",
        "use_trim_strings",
        "use_prefault_empty_string",
        mode="before",
    )
    @classmethod
    def _parse_booleans(cls, v: Any) -> Any:
        return _string_boolean(v)

    @property
    def relations_enabled(self) -> bool:
        return self.relation_model is not False

    @classmethod
    def known_keys(cls) -> frozenset:
        """Every accepted key, in both host (alias) and Python spelling."""
        keys = set(cls.model_fields)
        keys.update(f.alias for f in cls.model_fields.values() if f.alias)
        return frozenset(keys)

    @classmethod
    def from_host(cls, raw: Optional[Dict[str, Any]]) -> "GeneratorConfig":
        """
        Validate host-supplied settings.

        Host-only keys are dropped silently; any other unrecognised key is
        dropped with a warning, so settings meant for a newer release never
        abort a run.

        Raises:
            ConfigurationError: If any value fails validation.
        """
        known: frozenset = cls.known_keys()
        data: Dict[str, Any] = {}
        for key, value in (raw or {}).items():
            if key in HOST_CONFIG_KEYS:
                continue
            if key not in known:
                logger.warning("Ignoring unknown generator setting '%s'.", key)
                continue
            data[key] = value
        try:
            return cls.model_validate(data)
        except ValueError as exc:
            raise ConfigurationError(
                "Incorrect config provided. Please check the values you "
                f"provided and try again.\n{exc}"
            ) from exc


class GenerationOptions(BaseModel):
    """Paths that locate the run's inputs and outputs."""

    model_config = _SHARED_CONFIG

    output_path: str = Field(default="./generated", description="Output directory.")
    schema_path: Optional[str] = Field(
        default=None, description="Schema source file or directory (native types, imports)."
    )
    client_path: Optional[str] = Field(
        default=None, description="Directory of the generated database client (enum imports)."
    )


# ---------------------------------------------------------------------------
# Generation output
# ---------------------------------------------------------------------------


class GeneratedFile(BaseModel):
    """A single emitted module."""

    model_config = _SHARED_CONFIG

    path: str = Field(..., min_length=1, description="Relative file path.")
    content: str = Field(..., description="Full file content.")

    @computed_field  # type: ignore[misc]
    @property
    def line_count(self) -> int:
        if not self.content:
            return 0
        return self.content.count("\n") + (0 if self.content.endswith("\n") else 1)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ConfigurationError",
    "FieldKind",
    "ScalarType",
    "ModelCase",
    "DefaultLiteral",
    "FieldDescriptor",
    "ModelDescriptor",
    "EnumDescriptor",
    "DataModel",
    "HOST_CONFIG_KEYS",
    "GeneratorConfig",
    "GenerationOptions",
    "GeneratedFile",
]

logger.debug("zodgen.models loaded — %d public symbols.", len(__all__))
