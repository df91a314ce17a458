# File: zodgen/utils.py
"""
ZodGen - Utility Functions & Helpers
=====================================
Identifier naming, import-path, literal-formatting and file I/O helpers
used throughout the generation pipeline.

String-conversion functions are decorated with ``@lru_cache(maxsize=None)``
because the emitter asks for the same model names once per referencing field.
"""

from __future__ import annotations

import functools
import hashlib
import logging
import math
import os
import re
import tempfile
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

from zodgen.models import GeneratorConfig, ModelCase

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("zodgen.utils")

# ---------------------------------------------------------------------------
# Pre-compiled regex patterns (compiled once at module load)
# ---------------------------------------------------------------------------

_UNC_PREFIX_RE: re.Pattern[str] = re.compile(r"^\\\\\?\\")
_MULTI_SLASH_RE: re.Pattern[str] = re.compile(r"//+")


# ---------------------------------------------------------------------------
# Cached naming functions
# ---------------------------------------------------------------------------


@functools.lru_cache(maxsize=None)
def lower_first(name: str) -> str:
    """
    Lower-case only the first character.

    Examples:
        >>> lower_first("UserRole")
        'userRole'
        >>> lower_first("URL")
        'uRL'
    """
    if not name:
        return ""
    return name[0].lower() + name[1:]


@functools.lru_cache(maxsize=None)
def upper_first(name: str) -> str:
    """Upper-case only the first character."""
    if not name:
        return ""
    return name[0].upper() + name[1:]


@functools.lru_cache(maxsize=None)
def enum_schema_name(enum_name: str) -> str:
    """
    Name of the standalone schema emitted for an enum.

    Examples:
        >>> enum_schema_name("LowerCaseRole")
        'lowerCaseRoleSchema'
    """
    return f"{lower_first(enum_name)}Schema"


@functools.lru_cache(maxsize=None)
def enum_type_name(enum_name: str) -> str:
    """Name of the inferred type alias exported next to a standalone enum schema."""
    return upper_first(enum_schema_name(enum_name))


@functools.lru_cache(maxsize=None)
def complete_type_name(model_name: str) -> str:
    """Name of the relation-inclusive interface for a model."""
    return f"Complete{model_name}"


@functools.lru_cache(maxsize=None)
def module_file_name(model_name: str) -> str:
    """Relative file name of a model's generated module."""
    return f"{model_name.lower()}.ts"


def _format_model_name(name: str, config: GeneratorConfig, prefix: str = "") -> str:
    if config.model_case is ModelCase.CAMEL_CASE:
        name = lower_first(name)
    return f"{prefix}{name}{config.model_suffix}"


def model_schema_name(model_name: str, config: GeneratorConfig) -> str:
    """
    Identifier of a model's scalar schema.

    Examples (default suffix ``Model``):
        ``User`` → ``UserModel``; ``_UserModel`` when ``relationModel`` is
        ``"default"``; ``userModel`` under ``camelCase``.
    """
    prefix: str = "_" if config.relation_model == "default" else ""
    return _format_model_name(model_name, config, prefix)


def related_schema_name(model_name: str, config: GeneratorConfig) -> str:
    """
    Identifier of a model's complete (relation-inclusive) schema.

    Examples (default suffix ``Model``):
        ``User`` → ``RelatedUserModel``; ``UserModel`` when
        ``relationModel`` is ``"default"``.
    """
    if config.relation_model == "default":
        return _format_model_name(model_name, config)
    return _format_model_name(f"Related{model_name}", config)


# ---------------------------------------------------------------------------
# Import paths
# ---------------------------------------------------------------------------


def dot_slash(path: str) -> str:
    """
    Turn a relative filesystem path into an ES module specifier.

    Backslashes become slashes, ``node_modules`` paths collapse to the bare
    package name and same-directory paths gain a leading ``./``.

    Examples:
        >>> dot_slash("../prisma/client")
        '../prisma/client'
        >>> dot_slash("client")
        './client'
        >>> dot_slash("../../node_modules/@prisma/client")
        '@prisma/client'
    """
    converted: str = _UNC_PREFIX_RE.sub("", path)
    converted = converted.replace("\\", "/")
    converted = _MULTI_SLASH_RE.sub("/", converted)

    if "/node_modules/" in converted:
        return converted.split("/node_modules/")[-1]
    if converted.startswith("node_modules/"):
        return converted[len("node_modules/"):]
    if converted.startswith("../"):
        return converted
    if converted.startswith("./"):
        return converted
    return "./" + converted


def relative_module(target: Union[str, Path], from_dir: Union[str, Path]) -> str:
    """Module specifier for *target* as seen from a file inside *from_dir*."""
    rel: str = os.path.relpath(os.path.abspath(target), os.path.abspath(from_dir))
    return dot_slash(rel)


# ---------------------------------------------------------------------------
# Literal formatting
# ---------------------------------------------------------------------------


def escape_string_literal(value: str) -> str:
    """
    Escape *value* for a double-quoted TS string literal.

    Backslashes are escaped first, then quotes, so the literal decodes back
    to exactly *value*.
    """
    return value.replace("\\", "\\\\").replace('"', '\\"')


def format_default_literal(value: Union[bool, int, float, str]) -> Optional[str]:
    """
    Render a default value as a TS literal, or ``None`` if it has no literal form.

    Examples:
        >>> format_default_literal(True)
        'true'
        >>> format_default_literal(4.0)
        '4'
        >>> format_default_literal('say "hi"')
        '"say \\\\"hi\\\\""'
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return f'"{escape_string_literal(value)}"'
    return None


def quote_single(value: str) -> str:
    """Wrap *value* in single quotes for an import specifier or enum member."""
    escaped: str = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


# ---------------------------------------------------------------------------
# TS import statement builder
# ---------------------------------------------------------------------------


def build_named_import(names: Sequence[str], module: str, type_only: bool = False) -> str:
    """
    Build ``import { a, b } from 'module'`` keeping first-seen order.

    Example:
        >>> build_named_import(["CompletePost", "RelatedPostModel"], "./index")
        "import { CompletePost, RelatedPostModel } from './index'"
    """
    unique: List[str] = list(dict.fromkeys(names))
    keyword: str = "import type" if type_only else "import"
    return f"{keyword} {{ {', '.join(unique)} }} from {quote_single(module)}"


def build_namespace_import(alias: str, module: str) -> str:
    """Build ``import * as alias from 'module'``."""
    return f"import * as {alias} from {quote_single(module)}"


def merge_named_imports(*groups: Dict[str, List[str]]) -> Dict[str, List[str]]:
    """
    Merge module → names mappings, preserving first-seen module and name order.
    """
    result: Dict[str, List[str]] = {}
    for group in groups:
        for module, names in group.items():
            bucket: List[str] = result.setdefault(module, [])
            seen: Set[str] = set(bucket)
            for name in names:
                if name not in seen:
                    bucket.append(name)
                    seen.add(name)
    return result


# ---------------------------------------------------------------------------
# Indentation & doc helpers
# ---------------------------------------------------------------------------


def indent_lines(lines: Sequence[str], level: int = 1, unit: str = "  ") -> List[str]:
    """Indent a list of lines, returning a new list. Blank lines stay blank."""
    prefix: str = unit * level
    return [prefix + line if line.strip() else line for line in lines]


def jsdoc_block(lines: Sequence[str]) -> List[str]:
    """
    Wrap comment lines in a ``/** ... */`` block (empty input → no block).

    A ``*/`` inside a line is escaped so it cannot close the block early.
    """
    if not lines:
        return []
    escaped: List[str] = [line.replace("*/", "*\\/") for line in lines]
    body: List[str] = [f" * {line}".rstrip() for line in escaped]
    return ["/**", *body, " */"]


# ---------------------------------------------------------------------------
# File I/O helpers
# ---------------------------------------------------------------------------


def ensure_directory(path: Path) -> None:
    """Create directory (and parents) if it doesn't exist."""
    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)


def write_file(path: Path, content: str, atomic: bool = True) -> int:
    """
    Write *content* to *path*.

    When *atomic* is True, writes to a temporary file in the same directory
    and renames it over the target.

    Returns the number of bytes written.
    """
    ensure_directory(path.parent)

    encoded: bytes = content.encode("utf-8")

    if atomic:
        fd, tmp_path = tempfile.mkstemp(
            dir=str(path.parent),
            prefix=f".{path.name}.",
            suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(encoded)
            os.replace(tmp_path, str(path))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
    else:
        path.write_bytes(encoded)

    logger.debug("Wrote %d bytes to %s", len(encoded), path)
    return len(encoded)


def sha256_hex(content: str) -> str:
    """Return SHA-256 hex digest of a string."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def count_lines(content: str) -> int:
    """Count the number of lines in a string."""
    if not content:
        return 0
    return content.count("\n") + (1 if not content.endswith("\n") else 0)


# ---------------------------------------------------------------------------
# Timer context manager
# ---------------------------------------------------------------------------


class Timer:
    """
    Simple context-manager timer for profiling generation steps.

    Usage:
        with Timer("emit models") as t:
            ...
        print(t.elapsed)
    """

    __slots__ = ("label", "start_time", "end_time", "elapsed")

    def __init__(self, label: str = "operation") -> None:
        self.label: str = label
        self.start_time: float = 0.0
        self.end_time: float = 0.0
        self.elapsed: float = 0.0

    def __enter__(self) -> "Timer":
        self.start_time = time.perf_counter()
        return self

    def __exit__(
        self,
        exc_type: Optional[type],
        exc_val: Optional[BaseException],
        exc_tb: Optional[object],
    ) -> None:
        self.end_time = time.perf_counter()
        self.elapsed = self.end_time - self.start_time
        logger.debug("Timer [%s]: %.4f seconds", self.label, self.elapsed)

    def __repr__(self) -> str:
        return f"<Timer {self.label}: {self.elapsed:.4f}s>"


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "lower_first",
    "upper_first",
    "enum_schema_name",
    "enum_type_name",
    "complete_type_name",
    "module_file_name",
    "model_schema_name",
    "related_schema_name",
    "dot_slash",
    "relative_module",
    "escape_string_literal",
    "format_default_literal",
    "quote_single",
    "build_named_import",
    "build_namespace_import",
    "merge_named_imports",
    "indent_lines",
    "jsdoc_block",
    "ensure_directory",
    "write_file",
    "sha256_hex",
    "count_lines",
    "Timer",
]

logger.debug("zodgen.utils loaded — %d public symbols.", len(__all__))
