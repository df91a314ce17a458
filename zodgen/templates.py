# File: zodgen/templates.py
"""
ZodGen - Schema Emitter
========================
Transforms ``ModelDescriptor`` / ``EnumDescriptor`` objects into TypeScript
source text defining Zod validators:

    1. Per model: imports, helper schemas, the scalar schema
       (``export const UserModel = z.object({...})``).
    2. Per model with relations: the ``CompleteUser`` interface and the lazy
       complete schema (``RelatedUserModel``), so that self references and
       mutual references resolve at first use instead of at definition time.
    3. ``enums.ts`` with one standalone schema per enum (standalone mode).
    4. ``index.ts`` barrel re-exporting every module.

**Performance contract:**
    - All text assembly uses ``List[str]`` + ``"\\n".join()``.
    - Emission for one model reads only the shared, immutable config and
      native type map, so models are independent of each other.

Exact whitespace and quote style are cosmetic; a downstream formatter may
reflow the output.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from zodgen.compiler import ValidatorExpression, compile_field
from zodgen.docs import ParsedDocumentation, parse_documentation
from zodgen.models import (
    DataModel,
    EnumDescriptor,
    FieldDescriptor,
    GeneratedFile,
    GenerationOptions,
    GeneratorConfig,
    ModelDescriptor,
    ScalarType,
)
from zodgen.native_types import NativeTypeMap
from zodgen.utils import (
    build_named_import,
    build_namespace_import,
    complete_type_name,
    enum_schema_name,
    enum_type_name,
    indent_lines,
    jsdoc_block,
    merge_named_imports,
    model_schema_name,
    module_file_name,
    quote_single,
    related_schema_name,
    relative_module,
)

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

INDEX_FILE: str = "index.ts"
ENUMS_FILE: str = "enums.ts"
ENUMS_MODULE: str = "./enums"
INDEX_MODULE: str = "./index"
DEFAULT_CLIENT_MODULE: str = "@prisma/client"

_DECIMAL_HELPER: List[str] = [
    "// Helper schema for Decimal fields",
    "const decimalSchema = z",
    "  .instanceof(Decimal)",
    "  .or(z.string())",
    "  .or(z.number())",
    "  .refine((value) => {",
    "    try {",
    "      return new Decimal(value)",
    "    } catch (error) {",
    "      return false",
    "    }",
    "  })",
    "  .transform((value) => new Decimal(value))",
]


def json_helper_lines(config: GeneratorConfig) -> List[str]:
    """Recursive JSON value schema; ``null`` literals unless the host models JSON null itself."""
    allow_null: bool = not config.prisma_json_nullability
    literal_type: str = "boolean | number | string" + (" | null" if allow_null else "")
    literal_members: str = "z.string(), z.number(), z.boolean()" + (
        ", z.null()" if allow_null else ""
    )
    return [
        "// Helper schema for JSON fields",
        f"type Literal = {literal_type}",
        "type Json = Literal | { [key: string]: Json } | Json[]",
        f"const literalSchema = z.union([{literal_members}])",
        "const jsonSchema: z.ZodSchema<Json> = z.lazy(() => "
        "z.union([literalSchema, z.array(jsonSchema), z.record(z.string(), jsonSchema)]))",
    ]


# ---------------------------------------------------------------------------
# SchemaEmitter
# ---------------------------------------------------------------------------


class SchemaEmitter:
    """
    Drives the compiler over every field and lays out the generated modules.

    Usage::

        emitter = SchemaEmitter(config, options, native_types)
        files = emitter.generate_all(data_model)   # {"index.ts": ..., "user.ts": ...}

    The emitter holds no per-run mutable state; ``render_model_file`` may be
    called for models in any order.
    """

    def __init__(
        self,
        config: GeneratorConfig,
        options: Optional[GenerationOptions] = None,
        native_types: Optional[NativeTypeMap] = None,
    ) -> None:
        self._config: GeneratorConfig = config
        self._options: GenerationOptions = options or GenerationOptions()
        self._native_types: NativeTypeMap = native_types or NativeTypeMap()

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    # -----------------------------------------------------------------
    # Field compilation
    # -----------------------------------------------------------------

    def compile_scalar_field(
        self, model: ModelDescriptor, field: FieldDescriptor
    ) -> ValidatorExpression:
        """Expression for a scalar or enum field of *model*."""
        docs: ParsedDocumentation = parse_documentation(field.documentation)
        return compile_field(
            field,
            native_type=self._native_types.get(model.name, field.name),
            directives=docs.directives,
            default_value=field.default,
            config=self._config,
        )

    def compile_relation_field(self, field: FieldDescriptor) -> ValidatorExpression:
        """Expression for a relation field, referencing the related complete schema."""
        docs: ParsedDocumentation = parse_documentation(field.documentation)
        return compile_field(
            field,
            directives=docs.directives,
            config=self._config,
            related_name=lambda name: related_schema_name(name, self._config),
        )

    def needs_complete_schema(self, model: ModelDescriptor) -> bool:
        return self._config.relations_enabled and model.has_relations

    # -----------------------------------------------------------------
    # Imports
    # -----------------------------------------------------------------

    def _client_module(self) -> str:
        if not self._options.client_path:
            return DEFAULT_CLIENT_MODULE
        return relative_module(self._options.client_path, self._options.output_path)

    def _imports_module(self) -> Optional[str]:
        if not self._config.imports:
            return None
        schema_path: Optional[str] = self._options.schema_path
        if schema_path is None:
            base_dir: Path = Path.cwd()
        else:
            candidate: Path = Path(schema_path)
            base_dir = candidate if candidate.is_dir() else candidate.parent
        target: str = os.path.normpath(str(base_dir / self._config.imports))
        return relative_module(target, self._options.output_path)

    def _uses_decimal_helper(self, model: ModelDescriptor) -> bool:
        if not self._config.use_decimal_js:
            return False
        return any(
            f.type == ScalarType.DECIMAL.value
            and parse_documentation(f.documentation).custom_schema is None
            for f in model.fields
        )

    def _uses_json_helper(self, model: ModelDescriptor) -> bool:
        return any(f.type == ScalarType.JSON.value and not f.is_relation for f in model.fields)

    def render_imports(self, model: ModelDescriptor) -> List[str]:
        """Import statements for one model module."""
        lines: List[str] = [build_namespace_import("z", self._config.zod_import)]

        imports_module: Optional[str] = self._imports_module()
        if imports_module is not None:
            lines.append(build_namespace_import("imports", imports_module))

        if self._uses_decimal_helper(model):
            lines.append(build_named_import(["Decimal"], "decimal.js"))

        enum_fields: List[FieldDescriptor] = [f for f in model.fields if f.is_enum]
        named: Dict[str, List[str]] = {}
        if enum_fields:
            if self._config.use_standalone_enums:
                named = merge_named_imports(
                    named, {ENUMS_MODULE: [enum_schema_name(f.type) for f in enum_fields]}
                )
            else:
                named = merge_named_imports(
                    named, {self._client_module(): [f.type for f in enum_fields]}
                )

        if self.needs_complete_schema(model):
            related: List[str] = []
            for f in model.relation_fields:
                # Self references resolve through the lazy binding, never an import.
                if f.type == model.name:
                    continue
                related.extend(
                    [complete_type_name(f.type), related_schema_name(f.type, self._config)]
                )
            if related:
                named = merge_named_imports(named, {INDEX_MODULE: related})

        for module, names in named.items():
            lines.append(build_named_import(names, module))
        return lines

    # -----------------------------------------------------------------
    # Schemas
    # -----------------------------------------------------------------

    def render_helpers(self, model: ModelDescriptor) -> List[List[str]]:
        """Helper schema blocks a model module needs, in emission order."""
        blocks: List[List[str]] = []
        if self._uses_json_helper(model):
            blocks.append(json_helper_lines(self._config))
        if self._uses_decimal_helper(model):
            blocks.append(list(_DECIMAL_HELPER))
        return blocks

    def render_scalar_schema(self, model: ModelDescriptor) -> List[str]:
        """``export const UserModel = z.object({...})`` over every non-relation field."""
        body: List[str] = []
        for field in model.scalar_fields:
            docs: ParsedDocumentation = parse_documentation(field.documentation)
            body.extend(jsdoc_block(docs.comment_lines))
            expression: ValidatorExpression = self.compile_scalar_field(model, field)
            body.append(f"{field.name}: {expression.render()},")

        return [
            *jsdoc_block(
                parse_documentation(model.documentation).comment_lines
            ),
            f"export const {model_schema_name(model.name, self._config)} = z.object({{",
            *indent_lines(body),
            "})",
        ]

    def render_complete_interface(self, model: ModelDescriptor) -> List[str]:
        """``CompleteUser``: the scalar type extended with typed relation properties."""
        properties: List[str] = []
        for field in model.relation_fields:
            optional: str = "" if field.is_required else "?"
            type_text: str = complete_type_name(field.type)
            if field.is_list:
                type_text += "[]"
            if not field.is_required:
                type_text += " | null"
            properties.append(f"{field.name}{optional}: {type_text}")

        scalar_name: str = model_schema_name(model.name, self._config)
        return [
            f"export interface {complete_type_name(model.name)} "
            f"extends z.infer<typeof {scalar_name}> {{",
            *indent_lines(properties),
            "}",
        ]

    def render_complete_schema(self, model: ModelDescriptor) -> List[str]:
        """Lazy relation-inclusive schema; the lazy binding breaks reference cycles."""
        related_name: str = related_schema_name(model.name, self._config)
        scalar_name: str = model_schema_name(model.name, self._config)

        body: List[str] = []
        for field in model.relation_fields:
            docs: ParsedDocumentation = parse_documentation(field.documentation)
            body.extend(jsdoc_block(docs.comment_lines))
            body.append(f"{field.name}: {self.compile_relation_field(field).render()},")

        return [
            "/**",
            f" * {related_name} contains all relations on your model in addition to the scalars",
            " *",
            " * NOTE: Lazy required in case of potential circular dependencies within schema",
            " */",
            f"export const {related_name}: z.ZodSchema<{complete_type_name(model.name)}> "
            f"= z.lazy(() => {scalar_name}.extend({{",
            *indent_lines(body),
            "}))",
        ]

    # -----------------------------------------------------------------
    # Modules
    # -----------------------------------------------------------------

    def render_model_file(self, model: ModelDescriptor) -> str:
        """Full source text of one model module."""
        sections: List[List[str]] = [self.render_imports(model)]
        sections.extend(self.render_helpers(model))
        sections.append(self.render_scalar_schema(model))
        if self.needs_complete_schema(model):
            sections.append(self.render_complete_interface(model))
            sections.append(self.render_complete_schema(model))
        return _join_sections(sections)

    def render_enums_file(self, enums: Sequence[EnumDescriptor]) -> str:
        """``enums.ts``: one standalone schema and inferred type per enum."""
        sections: List[List[str]] = [[build_namespace_import("z", self._config.zod_import)]]
        for enum in enums:
            schema_name: str = enum_schema_name(enum.name)
            members: str = ", ".join(quote_single(v) for v in enum.values)
            sections.append([f"export const {schema_name} = z.enum([{members}])"])
            sections.append(
                [f"export type {enum_type_name(enum.name)} = z.infer<typeof {schema_name}>"]
            )
        return _join_sections(sections)

    def render_barrel(
        self, models: Sequence[ModelDescriptor], include_enums: bool = False
    ) -> str:
        """``index.ts`` re-exporting every generated module."""
        lines: List[str] = [
            f"export * from {quote_single('./' + module_file_name(m.name)[:-3])}"
            for m in models
        ]
        if include_enums:
            lines.append(f"export * from {quote_single(ENUMS_MODULE)}")
        return "\n".join(lines) + "\n" if lines else ""

    def generate_all(self, data_model: DataModel) -> Dict[str, str]:
        """
        Emit every module of a run.

        Returns:
            Ordered mapping of relative path → source text: ``index.ts``,
            ``enums.ts`` (standalone-enum mode with at least one enum), then
            one module per model in declaration order.
        """
        emit_enums: bool = self._config.use_standalone_enums and bool(data_model.enums)
        files: Dict[str, str] = {
            INDEX_FILE: self.render_barrel(data_model.models, include_enums=emit_enums)
        }
        if emit_enums:
            files[ENUMS_FILE] = self.render_enums_file(data_model.enums)

        for model in data_model.models:
            files[module_file_name(model.name)] = self.render_model_file(model)
            logger.debug("Emitted module for model '%s'.", model.name)

        logger.info(
            "Emitted %d module(s) for %d model(s), %d enum(s).",
            len(files),
            len(data_model.models),
            len(data_model.enums),
        )
        return files

    def generate_files(self, data_model: DataModel) -> List[GeneratedFile]:
        """Same as :meth:`generate_all`, as ``GeneratedFile`` records."""
        return [
            GeneratedFile(path=path, content=content)
            for path, content in self.generate_all(data_model).items()
        ]


def _join_sections(sections: Sequence[Sequence[str]]) -> str:
    """Join non-empty sections with one blank line between them."""
    blocks: List[str] = ["\n".join(section) for section in sections if section]
    return "\n\n".join(blocks) + "\n"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "INDEX_FILE",
    "ENUMS_FILE",
    "DEFAULT_CLIENT_MODULE",
    "json_helper_lines",
    "SchemaEmitter",
]
