# File: zodgen/__init__.py
"""
ZodGen — Zod Validator Generator
==================================

Transforms a database data model (models, fields, enums) into TypeScript
modules defining Zod validators: one scalar schema per model, an optional
lazily-bound schema including relations, and standalone enum schemas.

Architecture overview::

    cli.py ──▶ generator.py (ZodGenerator)
                 ├──▶ validators.py
                 ├──▶ native_types.py
                 ├──▶ templates.py (SchemaEmitter) ──▶ compiler.py, docs.py
                 └──▶ exporters.py (ProjectExporter)

Usage::

    # As a library
    from zodgen import ZodGenerator, DataModel, GeneratorConfig
    report = ZodGenerator().generate(data_model, GeneratorConfig(), Path("./generated"))

    # From the command line
    python -m zodgen --schema datamodel.yaml --output ./generated --verbose
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from zodgen.models import (
    ConfigurationError,
    DataModel,
    EnumDescriptor,
    FieldDescriptor,
    FieldKind,
    GeneratedFile,
    GenerationOptions,
    GeneratorConfig,
    ModelCase,
    ModelDescriptor,
    ScalarType,
)
from zodgen.docs import ParsedDocumentation, parse_documentation
from zodgen.native_types import NativeTypeMap, parse_native_types, resolve_native_types
from zodgen.compiler import ValidatorExpression, compile_field
from zodgen.validators import ValidationResult, validate_full
from zodgen.utils import Timer, write_file
from zodgen.templates import SchemaEmitter
from zodgen.exporters import ExportManifest, ExportResult, ProjectExporter
from zodgen.generator import GenerationReport, ZodGenerator

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Core orchestrator
    "ZodGenerator",
    "GenerationReport",
    # Models
    "ConfigurationError",
    "DataModel",
    "EnumDescriptor",
    "FieldDescriptor",
    "FieldKind",
    "GeneratedFile",
    "GenerationOptions",
    "GeneratorConfig",
    "ModelCase",
    "ModelDescriptor",
    "ScalarType",
    # Compilation
    "ParsedDocumentation",
    "parse_documentation",
    "NativeTypeMap",
    "parse_native_types",
    "resolve_native_types",
    "ValidatorExpression",
    "compile_field",
    # Validation
    "validate_full",
    "ValidationResult",
    # Emission & export
    "SchemaEmitter",
    "ProjectExporter",
    "ExportManifest",
    "ExportResult",
    # Utilities
    "Timer",
    "write_file",
]
