# File: zodgen/generator.py
"""
ZodGen - Master Generation Pipeline (Orchestrator)
====================================================

Connects every phase together:

    Input Document → Validation → Native Type Resolution → Emission → Export

The ``ZodGenerator`` class provides both a programmatic API and the
backend for the CLI.

Workflow::

    1. Load the input document from JSON/YAML (or accept in-memory objects).
    2. Parse into ``DataModel`` + ``GeneratorConfig`` + ``GenerationOptions``.
    3. Run the validation pipeline (validators.py).
    4. Scan the schema source for native types (native_types.py).
    5. Emit every module (templates.py).
    6. Hand off to ``ProjectExporter`` (exporters.py).
    7. Return a ``GenerationReport`` with metrics and status.

Error handling strategy:
    - Invalid configuration is fatal and reported before any emission.
    - Validation errors are collected and surfaced, not swallowed.
    - A missing schema source only costs the native-type refinements.
    - The final report gives a clear pass/fail verdict.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError as PydanticValidationError

from zodgen.exporters import ExportManifest, ExportResult, ProjectExporter
from zodgen.models import (
    ConfigurationError,
    DataModel,
    GenerationOptions,
    GeneratorConfig,
)
from zodgen.native_types import NativeTypeMap, resolve_native_types
from zodgen.templates import SchemaEmitter
from zodgen.utils import Timer, count_lines
from zodgen.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(frozen=False, slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(frozen=False, slots=True)
class GenerationReport:
    """
    Report produced by ``ZodGenerator.generate()``.

    Errors are bucketed by phase so callers (the CLI) can map them to
    distinct exit codes.
    """

    success: bool = False
    output_directory: str = ""

    # Metrics
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    models_processed: int = 0
    enums_processed: int = 0
    native_type_models: int = 0
    total_elapsed_seconds: float = 0.0

    # Sub-reports
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    input_errors: List[str] = field(default_factory=list)
    config_errors: List[str] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)

    # Outputs
    generated_files: Dict[str, str] = field(default_factory=dict)
    manifest: Optional[ExportManifest] = None

    def summary(self) -> str:
        """Return a human-readable summary string."""
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines: List[str] = [
            "=" * 60,
            "  ZodGen — Generation Report",
            "=" * 60,
            f"  Status:           {status}",
            f"  Output:           {self.output_directory}",
            f"  Models processed: {self.models_processed}",
            f"  Enums processed:  {self.enums_processed}",
            f"  Native hints:     {self.native_type_models} model(s)",
            f"  Files generated:  {self.total_files}",
            f"  Total lines:      {self.total_lines:,}",
            f"  Total bytes:      {self.total_bytes:,}",
            f"  Total time:       {self.total_elapsed_seconds:.3f}s",
            "─" * 60,
        ]

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<28s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}"
                )

        sections: List[Tuple[str, str, List[str]]] = [
            ("Input Errors", "✗", self.input_errors),
            ("Configuration Errors", "✗", self.config_errors),
            ("Validation Errors", "✗", self.validation_errors),
            ("Validation Warnings", "⚠", self.validation_warnings),
            ("Generation Errors", "✗", self.generation_errors),
            ("Export Errors", "✗", self.export_errors),
        ]
        for title, icon, items in sections:
            if not items:
                continue
            lines.append("─" * 60)
            lines.append(f"  {title} ({len(items)}):")
            lines.extend(f"    {icon} {item}" for item in items)

        lines.append("=" * 60)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Input loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object at top level, got {type(data).__name__}.")
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping at top level, got {type(data).__name__}.")
    return data


def load_input_file(path: Path) -> Dict[str, Any]:
    """
    Load an input document (JSON or YAML), dispatching on file extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Input file not found: {path}")
    if not path.is_file():
        raise ValueError(f"Input path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    logger.info("Unknown extension '%s' — trying JSON then YAML.", suffix)
    try:
        return _load_json_file(path)
    except ValueError:
        return _load_yaml_file(path)


def _resolve_relative(value: Optional[str], base_dir: Optional[Path]) -> Optional[str]:
    if value is None or base_dir is None:
        return value
    candidate: Path = Path(value)
    if candidate.is_absolute():
        return value
    return str(base_dir / candidate)


def parse_raw_input(
    raw: Dict[str, Any],
    base_dir: Optional[Path] = None,
) -> Tuple[DataModel, GeneratorConfig, GenerationOptions]:
    """
    Parse a raw input document into validated models.

    Expected top-level keys:
        - ``datamodel`` (or ``dmmf``): ``{models: [...], enums: [...]}``
        - ``config``: generator settings (optional)
        - ``schemaPath``, ``clientPath``, ``outputPath``: paths (optional),
          relative ones resolved against *base_dir*

    Raises:
        ConfigurationError: If the configuration is invalid.
        ValueError: If the data model is missing or malformed.
    """
    data_model_raw: Optional[Any] = None
    for key in ("datamodel", "dmmf"):
        if key in raw:
            data_model_raw = raw[key]
            break
    if isinstance(data_model_raw, dict) and "datamodel" in data_model_raw:
        # Full DMMF documents nest the data model one level deeper.
        data_model_raw = data_model_raw["datamodel"]
    if not isinstance(data_model_raw, dict):
        raise ValueError(
            "Cannot find data model in input. Expected top-level key 'datamodel' "
            "holding a mapping with 'models' and 'enums'."
        )

    config_raw: Any = raw.get("config") or {}
    if not isinstance(config_raw, dict):
        raise ConfigurationError(
            f"Expected 'config' to be a mapping, got {type(config_raw).__name__}."
        )
    config: GeneratorConfig = GeneratorConfig.from_host(config_raw)

    try:
        data_model: DataModel = DataModel.model_validate(data_model_raw)
    except PydanticValidationError as exc:
        raise ValueError(f"Data model validation failed: {exc}") from exc

    options_data: Dict[str, Any] = {}
    for key, attr in (
        ("outputPath", "output_path"),
        ("schemaPath", "schema_path"),
        ("clientPath", "client_path"),
    ):
        value: Any = raw.get(key, raw.get(attr))
        if value is not None:
            options_data[attr] = _resolve_relative(str(value), base_dir)
    options: GenerationOptions = GenerationOptions.model_validate(options_data)

    return data_model, config, options


# ---------------------------------------------------------------------------
# ZodGenerator — Master orchestrator
# ---------------------------------------------------------------------------


class ZodGenerator:
    """
    Master pipeline orchestrator.

    Usage::

        generator = ZodGenerator()

        # From a file
        report = generator.generate_from_file(
            input_path=Path("datamodel.yaml"),
            output_dir=Path("./generated"),
        )

        # From in-memory objects
        report = generator.generate(data_model, config, Path("./generated"))

        print(report.summary())

    The generator is reusable — create once, call generate() many times.
    """

    def __init__(
        self,
        *,
        strict_validation: bool = True,
        fail_on_warnings: bool = False,
        clean_output: bool = False,
        dry_run: bool = False,
    ) -> None:
        """
        Args:
            strict_validation: If True, abort on any validation error.
            fail_on_warnings: If True, treat validation warnings as errors.
            clean_output: If True, remove stale generated modules before writing.
            dry_run: If True, stop after emission and write nothing.
        """
        self._strict_validation: bool = strict_validation
        self._fail_on_warnings: bool = fail_on_warnings
        self._clean_output: bool = clean_output
        self._dry_run: bool = dry_run

        logger.debug(
            "ZodGenerator initialised: strict=%s, fail_on_warnings=%s, clean=%s, dry_run=%s.",
            strict_validation,
            fail_on_warnings,
            clean_output,
            dry_run,
        )

    # -----------------------------------------------------------------
    # Public: generate from file
    # -----------------------------------------------------------------

    def generate_from_file(
        self,
        input_path: Path,
        output_dir: Path,
        *,
        schema_source: Optional[Path] = None,
        config_overrides: Optional[Dict[str, Any]] = None,
    ) -> GenerationReport:
        """
        Full pipeline: load file → validate → emit → export.

        Args:
            input_path: JSON/YAML input document.
            output_dir: Directory receiving the generated modules.
            schema_source: Schema file or directory overriding ``schemaPath``.
            config_overrides: Values merged over the document's ``config``.
        """
        report: GenerationReport = GenerationReport()
        report.output_directory = str(Path(output_dir).resolve())
        pipeline_start: float = time.perf_counter()

        with Timer("load_input") as t_load:
            try:
                raw_data: Dict[str, Any] = load_input_file(input_path)
            except (FileNotFoundError, ValueError) as exc:
                report.input_errors.append(str(exc))
                logger.error("Could not load input: %s", exc)
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Load Input",
                success=not report.input_errors,
                elapsed_seconds=t_load.elapsed,
                detail=report.input_errors[0] if report.input_errors else f"from {input_path.name}",
            )
        )
        if report.input_errors:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        with Timer("parse_input") as t_parse:
            if config_overrides:
                merged: Dict[str, Any] = dict(raw_data.get("config") or {})
                merged.update(config_overrides)
                raw_data = {**raw_data, "config": merged}
            try:
                data_model, config, options = parse_raw_input(
                    raw_data, base_dir=input_path.resolve().parent
                )
            except ConfigurationError as exc:
                report.config_errors.append(str(exc))
                logger.error("%s", exc)
            except ValueError as exc:
                report.input_errors.append(str(exc))
                logger.error("%s", exc)

        failed: bool = bool(report.config_errors or report.input_errors)
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Parse Input",
                success=not failed,
                elapsed_seconds=t_parse.elapsed,
                detail="invalid input" if failed else f"{len(data_model.models)} models parsed",
            )
        )
        if failed:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        if schema_source is not None:
            options = options.model_copy(update={"schema_path": str(schema_source)})
        options = options.model_copy(update={"output_path": str(Path(output_dir))})

        return self._run_pipeline(data_model, config, options, None, report, pipeline_start)

    # -----------------------------------------------------------------
    # Public: generate from in-memory objects
    # -----------------------------------------------------------------

    def generate(
        self,
        data_model: DataModel,
        config: GeneratorConfig,
        output_dir: Path,
        *,
        options: Optional[GenerationOptions] = None,
        native_types: Optional[NativeTypeMap] = None,
    ) -> GenerationReport:
        """
        Full pipeline from pre-parsed objects.

        A supplied *native_types* map is used as-is; otherwise it is
        resolved from ``options.schema_path``.
        """
        report: GenerationReport = GenerationReport()
        report.output_directory = str(Path(output_dir).resolve())
        run_options: GenerationOptions = (options or GenerationOptions()).model_copy(
            update={"output_path": str(Path(output_dir))}
        )
        return self._run_pipeline(
            data_model, config, run_options, native_types, report, time.perf_counter()
        )

    def render(
        self,
        data_model: DataModel,
        config: GeneratorConfig,
        *,
        options: Optional[GenerationOptions] = None,
        native_types: Optional[NativeTypeMap] = None,
    ) -> Dict[str, str]:
        """Emit every module in memory without validating or writing anything."""
        run_options: GenerationOptions = options or GenerationOptions()
        if native_types is None:
            native_types = resolve_native_types(run_options.schema_path)
        return SchemaEmitter(config, run_options, native_types).generate_all(data_model)

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        data_model: DataModel,
        config: GeneratorConfig,
        options: GenerationOptions,
        native_types: Optional[NativeTypeMap],
        report: GenerationReport,
        pipeline_start: float,
    ) -> GenerationReport:
        validation_ok: bool = self._step_validate(data_model, config, report)
        if not validation_ok and self._strict_validation:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        if native_types is None:
            native_types = self._step_resolve_native_types(options, report)

        generated_files: Dict[str, str] = self._step_emit(
            data_model, config, options, native_types, report
        )
        if report.generation_errors:
            return self._finalise_report(report, time.perf_counter() - pipeline_start)

        if self._dry_run:
            logger.info("Dry run: %d module(s) emitted, nothing written.", len(generated_files))
        else:
            self._step_export(generated_files, Path(options.output_path), report)

        return self._finalise_report(report, time.perf_counter() - pipeline_start)

    # -----------------------------------------------------------------
    # Pipeline step: Validation
    # -----------------------------------------------------------------

    def _step_validate(
        self,
        data_model: DataModel,
        config: GeneratorConfig,
        report: GenerationReport,
    ) -> bool:
        """Returns True if validation passed (warnings allowed unless configured otherwise)."""
        with Timer("validation") as t:
            result: ValidationResult = validate_full(data_model, config)

        report.validation_errors.extend(str(e) for e in result.errors)
        report.validation_warnings.extend(str(w) for w in result.warnings)

        if result.has_errors:
            detail: str = f"{result.error_count} error(s)"
        elif result.warning_count:
            detail = f"{result.warning_count} warning(s)"
        else:
            detail = "all checks passed"

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Validate Data Model",
                success=result.is_valid,
                elapsed_seconds=t.elapsed,
                detail=detail,
            )
        )

        if result.has_errors:
            for err in result.errors:
                logger.error("  ✗ %s", err)
            return False

        for warn in result.warnings:
            logger.warning("  ⚠ %s", warn)
        if result.warning_count and self._fail_on_warnings:
            report.validation_errors.append(
                f"{result.warning_count} warning(s) treated as errors."
            )
            return False
        return True

    # -----------------------------------------------------------------
    # Pipeline step: Native type resolution
    # -----------------------------------------------------------------

    def _step_resolve_native_types(
        self,
        options: GenerationOptions,
        report: GenerationReport,
    ) -> NativeTypeMap:
        with Timer("native_types") as t:
            native_types: NativeTypeMap = resolve_native_types(options.schema_path)

        report.native_type_models = len(native_types)
        detail: str = (
            f"{len(native_types)} model(s) with hints"
            if options.schema_path
            else "no schema source"
        )
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Resolve Native Types",
                success=True,
                elapsed_seconds=t.elapsed,
                detail=detail,
            )
        )
        return native_types

    # -----------------------------------------------------------------
    # Pipeline step: Emission
    # -----------------------------------------------------------------

    def _step_emit(
        self,
        data_model: DataModel,
        config: GeneratorConfig,
        options: GenerationOptions,
        native_types: NativeTypeMap,
        report: GenerationReport,
    ) -> Dict[str, str]:
        generated_files: Dict[str, str] = {}

        with Timer("emission") as t:
            try:
                emitter: SchemaEmitter = SchemaEmitter(config, options, native_types)
                generated_files = emitter.generate_all(data_model)
            except (ValueError, TypeError, KeyError) as exc:
                error_msg: str = f"Fatal generation error: {type(exc).__name__}: {exc}"
                report.generation_errors.append(error_msg)
                logger.error(error_msg, exc_info=True)

        report.generated_files = generated_files
        report.models_processed = len(data_model.models)
        report.enums_processed = len(data_model.enums)
        total_lines: int = sum(count_lines(c) for c in generated_files.values())

        detail_str: str = (
            f"{len(generated_files)} files, ~{total_lines:,} lines, "
            f"{len(data_model.models)} models"
        )
        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Emit Modules",
                success=not report.generation_errors,
                elapsed_seconds=t.elapsed,
                detail=detail_str,
            )
        )
        logger.info("Emission complete: %s in %.3fs.", detail_str, t.elapsed)
        return generated_files

    # -----------------------------------------------------------------
    # Pipeline step: Export
    # -----------------------------------------------------------------

    def _step_export(
        self,
        generated_files: Dict[str, str],
        output_dir: Path,
        report: GenerationReport,
    ) -> None:
        with Timer("export") as t:
            exporter: ProjectExporter = ProjectExporter(
                output_dir,
                clean_before_export=self._clean_output,
                atomic_writes=True,
                generate_manifest=True,
            )
            export_result: ExportResult = exporter.export(generated_files)

        report.total_files = export_result.manifest.total_files
        report.total_bytes = export_result.manifest.total_bytes
        report.total_lines = export_result.manifest.total_lines
        report.export_errors.extend(export_result.errors)
        report.manifest = export_result.manifest

        report.step_metrics.append(
            GenerationStepMetric(
                step_name="Export to Filesystem",
                success=export_result.success,
                elapsed_seconds=t.elapsed,
                detail=(
                    f"{export_result.manifest.total_files} files, "
                    f"{export_result.manifest.total_bytes:,} bytes"
                ),
            )
        )

    # -----------------------------------------------------------------
    # Internal: finalise report
    # -----------------------------------------------------------------

    def _finalise_report(self, report: GenerationReport, total_elapsed: float) -> GenerationReport:
        report.total_elapsed_seconds = total_elapsed
        report.success = not (
            report.input_errors
            or report.config_errors
            or report.validation_errors
            or report.generation_errors
            or report.export_errors
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "ZodGenerator",
    "GenerationReport",
    "GenerationStepMetric",
    "load_input_file",
    "parse_raw_input",
]

logger.debug("zodgen.generator loaded.")
