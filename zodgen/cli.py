# File: zodgen/cli.py
"""
ZodGen - Command-Line Interface
=================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Basic generation
    python -m zodgen --schema datamodel.yaml --output ./generated

    # Native types from the schema source, verbose, stale modules removed
    python -m zodgen -s datamodel.json -o ./out --schema-source prisma/ -v --clean

    # Override generator settings
    python -m zodgen -s datamodel.yaml -o ./out --model-suffix Schema --coerce

    # Validate only (no file output)
    python -m zodgen -s datamodel.yaml --validate-only

Exit codes:
    0 — success
    1 — validation or configuration error
    2 — generation error
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root zodgen logger based on verbosity level.

    Args:
        verbosity: -1 = ERROR, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.ERROR

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s", datefmt="%H:%M:%S"
        )
    )

    root_logger: logging.Logger = logging.getLogger("zodgen")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from zodgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="zodgen",
        description=(
            "ZodGen — Zod validator generator.\n\n"
            "Transforms a database data model (JSON/YAML) into TypeScript "
            "modules defining Zod schemas for every model and enum."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s datamodel.yaml -o ./generated\n"
            "  %(prog)s -s datamodel.json -o ./out --schema-source prisma/ -v\n"
            "  %(prog)s -s datamodel.yaml --validate-only\n"
        ),
    )

    parser.add_argument("--version", action="version", version=f"ZodGen v{__version__}")

    parser.add_argument(
        "-s", "--schema",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the data model document (JSON or YAML).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Output directory for generated modules. Required unless --validate-only is set.",
    )
    parser.add_argument(
        "--schema-source",
        type=str,
        default=None,
        metavar="PATH",
        help="Schema source file or directory scanned for native types (overrides schemaPath).",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the data model and configuration.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Run the full pipeline but don't write files to disk.",
    )

    # --- Config overrides ---
    config_group = parser.add_argument_group("configuration overrides")
    config_group.add_argument(
        "--relation-model",
        type=str,
        default=None,
        choices=["true", "false", "default"],
        help="Emit complete relation schemas ('default' also renames them).",
    )
    config_group.add_argument(
        "--model-suffix", type=str, default=None, metavar="SUFFIX",
        help="Suffix of generated schema identifiers (default 'Model').",
    )
    config_group.add_argument(
        "--model-case",
        type=str,
        default=None,
        choices=["PascalCase", "camelCase"],
        help="Casing of generated schema identifiers.",
    )
    config_group.add_argument(
        "--coerce", action="store_true", default=False,
        help="Use coercion-prefixed base validators.",
    )
    config_group.add_argument(
        "--standalone-enums", action="store_true", default=False,
        help="Emit enums as standalone schemas in enums.ts.",
    )
    config_group.add_argument(
        "--zod-import", type=str, default=None, metavar="MODULE",
        help="Module specifier z is imported from (e.g. 'zod/v4').",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--clean", action="store_true", default=False,
        help="Remove stale generated modules before writing.",
    )
    behaviour_group.add_argument(
        "--no-strict", action="store_true", default=False,
        help="Continue generation even if validation reports errors.",
    )
    behaviour_group.add_argument(
        "--fail-on-warnings", action="store_true", default=False,
        help="Treat validation warnings as errors.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet", action="store_true", default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Build a config override dictionary (host key spelling) from CLI arguments."""
    overrides: Dict[str, Any] = {}

    if args.relation_model is not None:
        overrides["relationModel"] = args.relation_model
    if args.model_suffix is not None:
        overrides["modelSuffix"] = args.model_suffix
    if args.model_case is not None:
        overrides["modelCase"] = args.model_case
    if args.coerce:
        overrides["useCoerce"] = True
    if args.standalone_enums:
        overrides["useStandaloneEnums"] = True
    if args.zod_import is not None:
        overrides["zodImport"] = args.zod_import

    return overrides


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(schema_path: Path, overrides: Dict[str, Any]) -> int:
    """Run validation only (no emission). Returns the exit code."""
    from zodgen.generator import load_input_file, parse_raw_input
    from zodgen.models import ConfigurationError
    from zodgen.utils import Timer
    from zodgen.validators import validate_full

    logger.info("Running validation-only mode for: %s", schema_path)

    try:
        raw_data: Dict[str, Any] = load_input_file(schema_path)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load input: %s", exc)
        return EXIT_INPUT_ERROR

    if overrides:
        raw_data = {**raw_data, "config": {**(raw_data.get("config") or {}), **overrides}}

    try:
        data_model, config, _ = parse_raw_input(raw_data, base_dir=schema_path.parent)
    except ConfigurationError as exc:
        logger.error("%s", exc)
        return EXIT_VALIDATION_ERROR
    except ValueError as exc:
        logger.error("Failed to parse input: %s", exc)
        return EXIT_INPUT_ERROR

    with Timer("validation") as t:
        result = validate_full(data_model, config)

    print(f"\n{'=' * 50}")
    print("  Data Model Validation Report")
    print(f"{'=' * 50}")
    print(f"  File:     {schema_path.name}")
    print(f"  Models:   {len(data_model.models)}")
    print(f"  Enums:    {len(data_model.enums)}")
    print(f"  Time:     {t.elapsed:.3f}s")
    print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")

    if result.errors:
        print(f"\n  Errors ({result.error_count}):")
        for err in result.errors:
            print(f"    ✗ {err}")
    if result.warnings:
        print(f"\n  Warnings ({result.warning_count}):")
        for warn in result.warnings:
            print(f"    ⚠ {warn}")
    if result.is_valid and not result.warnings:
        print("\n  ✅ All validations passed!")
    print(f"{'=' * 50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Full generation mode
# ---------------------------------------------------------------------------


def _run_generation(schema_path: Path, output_dir: Path, args: argparse.Namespace) -> int:
    """Run the full generation pipeline. Returns the exit code."""
    from zodgen.generator import GenerationReport, ZodGenerator

    overrides: Dict[str, Any] = _build_config_overrides(args)
    generator: ZodGenerator = ZodGenerator(
        strict_validation=not args.no_strict,
        fail_on_warnings=args.fail_on_warnings,
        clean_output=args.clean,
        dry_run=args.dry_run,
    )

    if args.dry_run:
        logger.info("Dry-run mode: files will not be written to disk.")

    report: GenerationReport = generator.generate_from_file(
        input_path=schema_path,
        output_dir=output_dir,
        schema_source=Path(args.schema_source) if args.schema_source else None,
        config_overrides=overrides or None,
    )

    if not args.quiet:
        print(report.summary())

    if report.success:
        return EXIT_SUCCESS
    if report.input_errors:
        return EXIT_INPUT_ERROR
    if report.config_errors or report.validation_errors:
        return EXIT_VALIDATION_ERROR
    if report.export_errors:
        return EXIT_EXPORT_ERROR
    return EXIT_GENERATION_ERROR


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    schema_path: Path = Path(args.schema).resolve()
    if not schema_path.is_file():
        logger.error("Data model file not found: %s", schema_path)
        sys.exit(EXIT_INPUT_ERROR)

    if args.validate_only:
        sys.exit(_run_validate_only(schema_path, _build_config_overrides(args)))

    if args.output is None:
        logger.error(
            "Output directory is required for generation. Use -o/--output or --validate-only."
        )
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    output_dir: Path = Path(args.output).resolve()
    logger.info("Data model: %s", schema_path)
    logger.info("Output:     %s", output_dir)

    exit_code: int = _run_generation(schema_path, output_dir, args)
    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)
    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("zodgen.cli loaded.")
