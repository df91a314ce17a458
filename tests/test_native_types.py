"""
tests/test_native_types.py
Unit tests for zodgen.native_types: tolerant scanning of schema source and
source discovery on disk.
"""

from __future__ import annotations

import logging
import pathlib

import pytest

from zodgen.native_types import (
    NativeTypeMap,
    parse_native_types,
    read_schema_source,
    resolve_native_types,
    split_native_type,
)


class TestSplitNativeType:
    def test_with_params(self) -> None:
        assert split_native_type("Decimal(10, 2)") == ("Decimal", ["10", "2"])

    def test_without_params(self) -> None:
        assert split_native_type("Uuid") == ("Uuid", [])
        assert split_native_type("VarChar()") == ("VarChar", [])

    def test_anchored(self) -> None:
        assert split_native_type("TinyInt")[0] == "TinyInt"
        assert split_native_type("1nvalid") is None


class TestParseNativeTypes:
    def test_scans_models(self, inventory_schema_source: str) -> None:
        native = parse_native_types(inventory_schema_source)
        assert native.for_model("Item") == {
            "id": "Char(36)",
            "sku": "VarChar(32)",
            "qty": "SmallInt",
            "ratio": "UnsignedTinyInt",
            "price": "Decimal(8, 3)",
            "note": "Text",
        }
        assert native.get("Shelf", "label") == "VarChar(10)"
        assert native.get("Shelf", "opened") == "Date"

    def test_ignores_relations_and_block_attributes(self, inventory_schema_source: str) -> None:
        native = parse_native_types(inventory_schema_source)
        assert native.get("Item", "shelf") is None
        assert native.get("Item", "shelfId") is None
        assert native.get("Shelf", "items") is None

    def test_non_model_blocks_ignored(self, inventory_schema_source: str) -> None:
        native = parse_native_types(inventory_schema_source)
        assert native.model_names == ["Item", "Shelf"]
        assert "db" not in native

    def test_commented_attribute_is_ignored(self) -> None:
        source = "model A {\n  x String // @db.VarChar(3)\n  y String @db.Uuid\n}\n"
        native = parse_native_types(source)
        assert native.get("A", "x") is None
        assert native.get("A", "y") == "Uuid"

    def test_views_are_scanned(self) -> None:
        native = parse_native_types("view Stats {\n  total Int @db.SmallInt\n}\n")
        assert native.get("Stats", "total") == "SmallInt"

    def test_unterminated_block(self) -> None:
        native = parse_native_types("model A {\n  x String @db.Text\n")
        assert native.get("A", "x") == "Text"

    def test_empty_source(self) -> None:
        assert len(parse_native_types("")) == 0


class TestResolveNativeTypes:
    def test_none_path(self) -> None:
        assert resolve_native_types(None) == NativeTypeMap()

    def test_file(self, tmp_path: pathlib.Path, inventory_schema_source: str) -> None:
        path = tmp_path / "schema.prisma"
        path.write_text(inventory_schema_source, encoding="utf-8")
        assert resolve_native_types(path).get("Item", "qty") == "SmallInt"

    def test_directory_recursive_skips_hidden(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "a.prisma").write_text("model A {\n  x String @db.Text\n}\n", encoding="utf-8")
        nested = tmp_path / "models"
        nested.mkdir()
        (nested / "b.prisma").write_text("model B {\n  y Int @db.TinyInt\n}\n", encoding="utf-8")
        hidden = tmp_path / ".cache"
        hidden.mkdir()
        (hidden / "c.prisma").write_text("model C {\n  z String @db.Uuid\n}\n", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("model D {\n  w String @db.Uuid\n}\n", encoding="utf-8")

        native = resolve_native_types(tmp_path)
        assert native.model_names == ["A", "B"]

    def test_missing_path_falls_back_to_parent(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "schema.prisma").write_text(
            "model A {\n  x String @db.Text\n}\n", encoding="utf-8"
        )
        native = resolve_native_types(tmp_path / "does-not-exist")
        assert native.get("A", "x") == "Text"

    def test_default_filename_inside_directory(self, tmp_path: pathlib.Path) -> None:
        (tmp_path / "schema.prisma").write_text(
            "model A {\n  x String @db.Text\n}\n", encoding="utf-8"
        )
        assert "A" in resolve_native_types(tmp_path)

    def test_unresolvable_path_is_empty(self) -> None:
        missing = pathlib.Path("/nonexistent-zodgen-root/deeper/schema.prisma")
        assert read_schema_source(missing) == ""
        assert len(resolve_native_types(missing)) == 0

    def test_unreadable_file_is_skipped(
        self, tmp_path: pathlib.Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        (tmp_path / "a.prisma").write_text("model A {\n  x String @db.Text\n}\n", encoding="utf-8")
        (tmp_path / "b.prisma").write_bytes(b"\xff\xfe model B {\n")

        with caplog.at_level(logging.WARNING, logger="zodgen.native_types"):
            native = resolve_native_types(tmp_path)

        assert native.get("A", "x") == "Text"
        assert native.model_names == ["A"]
        assert any("Skipping unreadable schema file" in r.message for r in caplog.records)

    def test_unlistable_directory_is_skipped(
        self,
        tmp_path: pathlib.Path,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        (tmp_path / "schema.prisma").write_text(
            "model A {\n  x String @db.Text\n}\n", encoding="utf-8"
        )
        locked = tmp_path / "locked"
        locked.mkdir()
        (locked / "hidden.prisma").write_text(
            "model B {\n  y String @db.Uuid\n}\n", encoding="utf-8"
        )

        real_iterdir = pathlib.Path.iterdir

        def iterdir(self: pathlib.Path):
            if self == locked:
                raise PermissionError(13, "Permission denied", str(self))
            return real_iterdir(self)

        # Permission bits are not enforced for root, so deny the listing directly.
        monkeypatch.setattr(pathlib.Path, "iterdir", iterdir)

        with caplog.at_level(logging.WARNING, logger="zodgen.native_types"):
            native = resolve_native_types(tmp_path)

        assert native.get("A", "x") == "Text"
        assert "B" not in native
        assert any("Skipping unreadable schema directory" in r.message for r in caplog.records)
