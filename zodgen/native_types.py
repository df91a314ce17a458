# File: zodgen/native_types.py
"""
ZodGen - Native Type Resolver
==============================
The structured data model handed to the generator carries portable types
only (``String``, ``Int``, ...).  Database-native column types such as
``@db.VarChar(255)`` exist only in the schema source text, so this module
recovers them with a tolerant lexical scan.

It is deliberately *not* a grammar parser: it understands model blocks,
field lines and the ``@db.<Tag>(<params>)`` attribute, and ignores
everything else (relations, ``@@`` block attributes, comments, generator
and datasource blocks).

Usage::

    from zodgen.native_types import resolve_native_types
    native = resolve_native_types(Path("prisma"))
    native.get("User", "email")   # → "VarChar(255)" or None
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.native_types")

# ---------------------------------------------------------------------------
# Constants & patterns
# ---------------------------------------------------------------------------

DEFAULT_SCHEMA_FILENAME: str = "schema.prisma"
SCHEMA_FILE_SUFFIX: str = ".prisma"

_BLOCK_START_RE: re.Pattern[str] = re.compile(r"^\s*(model|view)\s+(\w+)\s*\{")
_FIELD_LINE_RE: re.Pattern[str] = re.compile(r"^\s*(\w+)\s+(\S.*)$")
_NATIVE_ATTR_RE: re.Pattern[str] = re.compile(r"@db\.(\w+(?:\([^)]*\))?)")
_NATIVE_TAG_RE: re.Pattern[str] = re.compile(r"^\s*([A-Za-z]\w*)\s*(?:\(([^)]*)\))?")


# ---------------------------------------------------------------------------
# NativeTypeMap
# ---------------------------------------------------------------------------


class NativeTypeMap:
    """
    Read-only mapping: model name → (field name → native type annotation).

    Annotations are kept verbatim including parameters, e.g. ``"Decimal(10,2)"``.
    A missing entry means "no hint".
    """

    __slots__ = ("_models",)

    def __init__(self, models: Optional[Mapping[str, Mapping[str, str]]] = None) -> None:
        self._models: Dict[str, Dict[str, str]] = {
            name: dict(fields) for name, fields in (models or {}).items() if fields
        }

    def get(self, model_name: str, field_name: str) -> Optional[str]:
        return self._models.get(model_name, {}).get(field_name)

    def for_model(self, model_name: str) -> Dict[str, str]:
        """Copy of one model's field map (empty if the model has no hints)."""
        return dict(self._models.get(model_name, {}))

    @property
    def model_names(self) -> List[str]:
        return list(self._models)

    def __contains__(self, model_name: object) -> bool:
        return model_name in self._models

    def __len__(self) -> int:
        return len(self._models)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NativeTypeMap):
            return NotImplemented
        return self._models == other._models

    def __repr__(self) -> str:
        total: int = sum(len(f) for f in self._models.values())
        return f"<NativeTypeMap {len(self._models)} models, {total} fields>"


# ---------------------------------------------------------------------------
# Native type tag parsing (shared with the compiler)
# ---------------------------------------------------------------------------


def split_native_type(native_type: str) -> Optional[Tuple[str, List[str]]]:
    """
    Split a native type annotation into its tag and parameter list.

    The tag is anchored at the start of the annotation and matched as a
    whole identifier, so ``TinyInt`` never matches ``Int``.

    Examples:
        >>> split_native_type("VarChar(255)")
        ('VarChar', ['255'])
        >>> split_native_type("Decimal(10, 2)")
        ('Decimal', ['10', '2'])
        >>> split_native_type("Uuid")
        ('Uuid', [])
    """
    match: Optional[re.Match[str]] = _NATIVE_TAG_RE.match(native_type)
    if match is None:
        return None
    tag: str = match.group(1)
    raw_params: Optional[str] = match.group(2)
    params: List[str] = []
    if raw_params is not None and raw_params.strip():
        params = [p.strip() for p in raw_params.split(",")]
    return tag, params


# ---------------------------------------------------------------------------
# Scanning
# ---------------------------------------------------------------------------


def _strip_line_comment(line: str) -> str:
    """Drop a trailing ``//`` comment that is not inside a string literal."""
    in_string: bool = False
    escaped: bool = False
    for idx, char in enumerate(line):
        if escaped:
            escaped = False
            continue
        if char == "\\":
            escaped = True
        elif char == '"':
            in_string = not in_string
        elif char == "/" and not in_string and line[idx + 1 : idx + 2] == "/":
            return line[:idx]
    return line


def _iter_model_blocks(source: str) -> Iterator[Tuple[str, List[str]]]:
    """Yield ``(model_name, body_lines)`` for every model/view block."""
    current_name: Optional[str] = None
    body: List[str] = []

    for raw_line in source.splitlines():
        if current_name is None:
            match: Optional[re.Match[str]] = _BLOCK_START_RE.match(raw_line)
            if match is not None:
                current_name = match.group(2)
                body = []
                remainder: str = raw_line[match.end():]
                if "}" in _strip_line_comment(remainder):
                    yield current_name, []
                    current_name = None
            continue

        if _strip_line_comment(raw_line).strip().startswith("}"):
            yield current_name, body
            current_name = None
            continue
        body.append(raw_line)

    if current_name is not None:
        logger.debug("Unterminated block for model '%s'; using lines read so far.", current_name)
        yield current_name, body


def parse_native_types(source: str) -> NativeTypeMap:
    """
    Scan schema source text for native-type attributes.

    Per model block, every non-blank, non-comment line is split into a
    field name and its trailing attribute text; a ``@db.<Tag>(...)``
    attribute is recorded verbatim.  Lines that do not look like fields
    are skipped.
    """
    models: Dict[str, Dict[str, str]] = {}

    for model_name, body in _iter_model_blocks(source):
        fields: Dict[str, str] = {}
        for raw_line in body:
            line: str = _strip_line_comment(raw_line).strip()
            if not line or line.startswith("@@"):
                continue
            field_match: Optional[re.Match[str]] = _FIELD_LINE_RE.match(line)
            if field_match is None:
                continue
            field_name, attributes = field_match.group(1), field_match.group(2)
            native_match: Optional[re.Match[str]] = _NATIVE_ATTR_RE.search(attributes)
            if native_match is not None:
                fields[field_name] = native_match.group(1)
        if fields:
            models.setdefault(model_name, {}).update(fields)

    result: NativeTypeMap = NativeTypeMap(models)
    logger.debug("Native type scan: %r", result)
    return result


# ---------------------------------------------------------------------------
# Source discovery
# ---------------------------------------------------------------------------


def _resolve_target(path: Path) -> Optional[Path]:
    """
    Pick the file or directory to scan.

    Tries the path itself, then the conventional ``schema.prisma`` inside it,
    then its parent directory.
    """
    if path.exists():
        return path
    candidate: Path = path / DEFAULT_SCHEMA_FILENAME
    if candidate.exists():
        return candidate
    if path.parent != path and path.parent.exists():
        return path.parent
    return None


def _collect_schema_files(directory: Path) -> List[Path]:
    """
    All schema files under *directory* in stable order, skipping hidden
    subdirectories.  A directory that cannot be listed is logged and skipped.
    """
    try:
        entries: List[Path] = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        logger.warning("Skipping unreadable schema directory %s: %s", directory, exc)
        return []

    found: List[Path] = []
    for entry in entries:
        if entry.is_dir():
            if entry.name.startswith("."):
                continue
            found.extend(_collect_schema_files(entry))
        elif entry.is_file() and entry.suffix == SCHEMA_FILE_SUFFIX:
            found.append(entry)
    return found


def read_schema_source(path: Union[str, Path]) -> str:
    """
    Read and concatenate the schema source found at *path*.

    Returns an empty string if nothing can be located.  An individual file
    that cannot be read is logged and skipped.
    """
    target: Optional[Path] = _resolve_target(Path(path))
    if target is None:
        logger.warning("Schema source not found at %s; native types unavailable.", path)
        return ""

    files: List[Path] = [target] if target.is_file() else _collect_schema_files(target)
    chunks: List[str] = []
    for file_path in files:
        try:
            chunks.append(file_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Skipping unreadable schema file %s: %s", file_path, exc)

    logger.info("Read %d schema file(s) from %s.", len(chunks), target)
    return "\n".join(chunks)


def resolve_native_types(path: Optional[Union[str, Path]]) -> NativeTypeMap:
    """
    Build the native type map for one generation run.

    Args:
        path: Schema file or directory; ``None`` yields an empty map.

    Returns:
        NativeTypeMap (empty when the source cannot be found).
    """
    if path is None:
        return NativeTypeMap()
    return parse_native_types(read_schema_source(path))


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_SCHEMA_FILENAME",
    "NativeTypeMap",
    "split_native_type",
    "parse_native_types",
    "read_schema_source",
    "resolve_native_types",
]
