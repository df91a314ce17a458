# File: zodgen/exporters.py
"""
ZodGen - Module Exporter (File-System Manager)
================================================

Responsible for:
    1. Creating the output directory.
    2. Writing generated modules atomically (write-to-temp then rename).
    3. Producing an export manifest with checksums for reproducibility.
    4. Idempotent operation: re-running on the same path is always safe.

If a write fails mid-batch, previously written files remain intact; each
individual file is atomic.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

from zodgen.utils import Timer, count_lines, ensure_directory, sha256_hex, write_file

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.exporters")

MANIFEST_FILE: str = "manifest.json"
GENERATED_SUFFIX: str = ".ts"


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported file."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    sha256: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "relative_path": self.relative_path,
            "size_bytes": self.size_bytes,
            "line_count": self.line_count,
            "sha256": self.sha256,
        }


@dataclass(frozen=False, slots=True)
class ExportManifest:
    """
    Manifest of every exported module.

    Serialisable to JSON; the manifest file itself is not listed.
    """

    generator_version: str = ""
    export_timestamp: str = ""
    output_directory: str = ""
    total_files: int = 0
    total_bytes: int = 0
    total_lines: int = 0
    files: List[FileRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generator_version": self.generator_version,
            "export_timestamp": self.export_timestamp,
            "output_directory": self.output_directory,
            "total_files": self.total_files,
            "total_bytes": self.total_bytes,
            "total_lines": self.total_lines,
            "files": [f.to_dict() for f in self.files],
        }

    def to_json(self, indent_size: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent_size, ensure_ascii=False)

    def checksum_for(self, relative_path: str) -> str:
        for record in self.files:
            if record.relative_path == relative_path:
                return record.sha256
        raise KeyError(relative_path)


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Final result returned by ``ProjectExporter.export()``."""

    success: bool
    manifest: ExportManifest
    errors: Tuple[str, ...]
    warnings: Tuple[str, ...]
    elapsed_seconds: float


# ---------------------------------------------------------------------------
# ProjectExporter class
# ---------------------------------------------------------------------------


class ProjectExporter:
    """
    Writes generated modules to the filesystem.

    Usage::

        exporter = ProjectExporter(output_dir=Path("./generated"))
        result = exporter.export({"index.ts": "...", "user.ts": "..."})
        print(result.manifest.to_json())

    Thread-safety: NOT thread-safe.  Use one exporter per output directory.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        clean_before_export: bool = False,
        atomic_writes: bool = True,
        generate_manifest: bool = True,
    ) -> None:
        """
        Args:
            output_dir: Root directory for output files.
            clean_before_export: If True, remove stale generated modules
                (``*.ts``) and the previous manifest first.
            atomic_writes: If True, use write-to-temp+rename.
            generate_manifest: If True, write ``manifest.json``.
        """
        self._output_dir: Path = Path(output_dir).resolve()
        self._clean_before_export: bool = clean_before_export
        self._atomic_writes: bool = atomic_writes
        self._generate_manifest: bool = generate_manifest

        self._errors: List[str] = []
        self._warnings: List[str] = []
        self._file_records: List[FileRecord] = []

        logger.debug(
            "ProjectExporter initialised: output_dir=%s, atomic=%s.",
            self._output_dir,
            self._atomic_writes,
        )

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def export(self, generated_files: Dict[str, str]) -> ExportResult:
        """
        Export all generated modules.

        Args:
            generated_files: Mapping of relative_path → file_content.

        Returns:
            ExportResult with success flag, manifest, and error details.
        """
        self._errors = []
        self._warnings = []
        self._file_records = []

        with Timer("export") as timer:
            try:
                ensure_directory(self._output_dir)
                self._pre_export_cleanup()
                self._write_generated_files(generated_files)
                if self._generate_manifest:
                    self._write_manifest_file()
            except OSError as exc:
                error_msg: str = f"Fatal export error: {type(exc).__name__}: {exc}"
                self._errors.append(error_msg)
                logger.error(error_msg, exc_info=True)

        manifest: ExportManifest = self._build_manifest()
        success: bool = not self._errors

        if success:
            logger.info(
                "Export completed successfully: %d files, %d bytes, %.3fs.",
                manifest.total_files,
                manifest.total_bytes,
                timer.elapsed,
            )
        else:
            logger.error(
                "Export completed with %d error(s) in %.3fs.",
                len(self._errors),
                timer.elapsed,
            )

        return ExportResult(
            success=success,
            manifest=manifest,
            errors=tuple(self._errors),
            warnings=tuple(self._warnings),
            elapsed_seconds=timer.elapsed,
        )

    # -----------------------------------------------------------------
    # Internal: directory management
    # -----------------------------------------------------------------

    def _pre_export_cleanup(self) -> None:
        """Remove stale generated modules if configured to do so."""
        if not self._clean_before_export:
            return

        logger.info("Cleaning generated modules in: %s", self._output_dir)
        for item in self._output_dir.iterdir():
            if not item.is_file():
                continue
            if item.suffix != GENERATED_SUFFIX and item.name != MANIFEST_FILE:
                continue
            try:
                item.unlink()
            except OSError as exc:
                warning_msg: str = f"Could not remove {item}: {exc}"
                self._warnings.append(warning_msg)
                logger.warning(warning_msg)

    # -----------------------------------------------------------------
    # Internal: file writing
    # -----------------------------------------------------------------

    def _write_generated_files(self, generated_files: Dict[str, str]) -> None:
        for rel_path, content in generated_files.items():
            full_path: Path = self._output_dir / rel_path
            try:
                self._file_records.append(self._write_single_file(full_path, content, rel_path))
            except OSError as exc:
                error_msg: str = f"Failed to write {rel_path}: {type(exc).__name__}: {exc}"
                self._errors.append(error_msg)
                logger.error(error_msg)

        logger.info(
            "Wrote %d generated files to %s.", len(self._file_records), self._output_dir
        )

    def _write_single_file(self, full_path: Path, content: str, rel_path: str) -> FileRecord:
        size_bytes: int = write_file(full_path, content, atomic=self._atomic_writes)
        line_count: int = count_lines(content)

        logger.debug("Wrote file: %s (%d bytes, %d lines).", rel_path, size_bytes, line_count)

        return FileRecord(
            relative_path=rel_path,
            absolute_path=str(full_path),
            size_bytes=size_bytes,
            line_count=line_count,
            sha256=sha256_hex(content),
        )

    # -----------------------------------------------------------------
    # Internal: manifest
    # -----------------------------------------------------------------

    def _build_manifest(self) -> ExportManifest:
        import zodgen

        return ExportManifest(
            generator_version=zodgen.__version__,
            export_timestamp=time.strftime("%Y-%m-%dT%H:%M:%S%z"),
            output_directory=str(self._output_dir),
            total_files=len(self._file_records),
            total_bytes=sum(r.size_bytes for r in self._file_records),
            total_lines=sum(r.line_count for r in self._file_records),
            files=list(self._file_records),
        )

    def _write_manifest_file(self) -> None:
        manifest_path: Path = self._output_dir / MANIFEST_FILE
        try:
            write_file(manifest_path, self._build_manifest().to_json() + "\n")
            logger.debug("Wrote manifest to %s.", manifest_path)
        except OSError as exc:
            self._warnings.append(f"Could not write manifest: {exc}")
            logger.warning("Failed to write manifest: %s", exc)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "MANIFEST_FILE",
    "ProjectExporter",
    "ExportManifest",
    "ExportResult",
    "FileRecord",
]

logger.debug("zodgen.exporters loaded.")
