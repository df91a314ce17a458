"""
tests/test_docs.py
Unit tests for zodgen.docs: call-chain splitting, directive classification
and comment passthrough.
"""

from __future__ import annotations

import logging

import pytest

from zodgen.docs import (
    CustomSchema,
    ExtraModifier,
    StandaloneValidator,
    comment_lines,
    has_custom_schema,
    is_directive_line,
    parse_documentation,
    split_call_chain,
)


class TestSplitCallChain:
    def test_simple_chain(self) -> None:
        assert split_call_chain(".max(64).min(1)") == [("max", "max(64)"), ("min", "min(1)")]

    def test_nested_calls_survive(self) -> None:
        assert split_call_chain(".custom(z.string().min(1))") == [
            ("custom", "custom(z.string().min(1))")
        ]

    def test_dotted_name_joined(self) -> None:
        assert split_call_chain(".iso.datetime({ offset: true })") == [
            ("iso.datetime", "iso.datetime({ offset: true })")
        ]

    def test_parenthesis_inside_string_literal(self) -> None:
        assert split_call_chain('.describe("a ) b").min(2)') == [
            ("describe", 'describe("a ) b")'),
            ("min", "min(2)"),
        ]

    def test_parenthesis_inside_regex_literal(self) -> None:
        assert split_call_chain(".regex(/^[a-z)]+$/i)") == [("regex", "regex(/^[a-z)]+$/i)")]

    def test_stops_at_malformed_segment(self) -> None:
        assert split_call_chain(".max(1) trailing") == [("max", "max(1)")]
        assert split_call_chain(".max") == []
        assert split_call_chain(".max(1") == []


class TestDirectiveLines:
    @pytest.mark.parametrize("line", ["@zod.max(1)", "   @zod.email()", "@zod"])
    def test_directive_lines(self, line: str) -> None:
        assert is_directive_line(line)

    @pytest.mark.parametrize("line", ["@zodiac.max(1)", "see @zod.max(1)", "@Zod.max(1)", ""])
    def test_non_directive_lines(self, line: str) -> None:
        assert not is_directive_line(line)


class TestParseDocumentation:
    def test_none_and_empty(self) -> None:
        assert parse_documentation(None).directives == ()
        assert parse_documentation("").comment_lines == ()

    def test_classification(self) -> None:
        parsed = parse_documentation("@zod.custom(imports.slug).email().max(3)")
        assert parsed.directives == (
            CustomSchema("imports.slug"),
            StandaloneValidator(name="email", call="email()"),
            ExtraModifier("max(3)"),
        )
        assert parsed.custom_schema == CustomSchema("imports.slug")
        assert parsed.standalone_validator is not None
        assert parsed.standalone_validator.expression == "z.email()"
        assert parsed.modifiers == ["max(3)"]

    def test_order_preserved_across_lines(self) -> None:
        parsed = parse_documentation("@zod.min(1)\nplain text\n@zod.max(9).int()")
        assert parsed.modifiers == ["min(1)", "max(9)", "int()"]
        assert parsed.comment_lines == ("plain text",)

    def test_comment_lines_only(self) -> None:
        doc = "The user's name\nshown publicly"
        assert comment_lines(doc) == ["The user's name", "shown publicly"]
        assert parse_documentation(doc).directives == ()

    def test_iso_primitive_is_standalone(self) -> None:
        parsed = parse_documentation("@zod.iso.datetime()")
        assert parsed.standalone_validator == StandaloneValidator(
            name="iso.datetime", call="iso.datetime()"
        )

    def test_multiple_custom_schemas_warn(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="zodgen.docs"):
            parsed = parse_documentation("@zod.custom(a())\n@zod.custom(b())")
        assert parsed.custom_schema == CustomSchema("a()")
        assert any("custom schema overrides" in r.message for r in caplog.records)

    def test_has_custom_schema(self) -> None:
        assert has_custom_schema("@zod.custom(z.any())")
        assert not has_custom_schema("@zod.max(1)")
        assert not has_custom_schema(None)
