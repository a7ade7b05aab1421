"""Unit tests for the shared data classes, helpers and errors."""

from __future__ import annotations

from datetime import date

import pytest

from rules_compiler.base import (
    ParsedValidationRules,
    ValidationRule,
    clean_json_str,
    convert_string_to_bool,
    format_value,
    get_str_value,
    normalize_metadata_key,
    normalize_severity,
)
from rules_compiler.errors import (
    RowParseError,
    RuleCompilerError,
    RuleFileIOError,
    StructuralError,
    UnsupportedFormatError,
)


class TestValidationRule:
    """Tests for ValidationRule."""

    def test_defaults(self) -> None:
        """Test rules are active errors unless told otherwise."""
        rule = ValidationRule(template_id=1, field="A1", rule_type="legacy", condition="NOT_EMPTY", error_message="x")

        assert rule.severity == "error"
        assert rule.is_active is True
        assert rule.cell_range is None

    def test_to_dict_uses_camel_case_and_drops_none(self) -> None:
        """Test the serialized form matches the evaluator contract."""
        rule = ValidationRule(
            template_id=7, field="A2:C5", rule_type="required", condition="NOT_EMPTY",
            error_message="Range A2:C5 validation failed", cell_range="A2:C5", apply_to_all_rows=False,
        )

        assert rule.to_dict() == {
            "templateId": 7,
            "field": "A2:C5",
            "ruleType": "required",
            "condition": "NOT_EMPTY",
            "errorMessage": "Range A2:C5 validation failed",
            "severity": "error",
            "isActive": True,
            "cellRange": "A2:C5",
            "applyToAllRows": False,
        }


class TestParsedValidationRules:
    """Tests for ParsedValidationRules."""

    def test_add_error_accepts_exceptions(self) -> None:
        """Test errors are stored as their messages."""
        result = ParsedValidationRules()
        result.add_error(RowParseError("bad row", row=4))
        result.add_error("plain message")

        assert result.errors == ["Row 4: bad row", "plain message"]
        assert result.has_errors

    def test_merge_keeps_order(self) -> None:
        """Test merging appends rules and errors in order."""
        rule_a = ValidationRule(1, "A", "legacy", "X", "m")
        rule_b = ValidationRule(1, "B", "legacy", "Y", "m")
        first = ParsedValidationRules(rules=[rule_a], metadata={"version": "1"})
        second = ParsedValidationRules(rules=[rule_b], errors=["problem"])

        first.merge(second)

        assert first.rules == [rule_a, rule_b]
        assert first.metadata == {"version": "1"}
        assert first.errors == ["problem"]

    def test_to_dict(self) -> None:
        """Test the envelope serializes rules, metadata and errors."""
        result = ParsedValidationRules(
            rules=[ValidationRule(1, "A", "legacy", "X", "m")],
            metadata={"templatename": "Q"},
            errors=["e"],
        )

        payload = result.to_dict()

        assert payload["rules"][0]["field"] == "A"
        assert payload["metadata"] == {"templatename": "Q"}
        assert payload["errors"] == ["e"]


class TestHelpers:
    """Tests for helper functions."""

    @pytest.mark.parametrize(
        ("key", "expected"),
        [
            ("templateName", "templatename"),
            ("Template Name", "templatename"),
            ("  Created\tBy ", "createdby"),
        ],
    )
    def test_normalize_metadata_key(self, key: str, expected: str) -> None:
        """Test metadata keys are lower-cased with whitespace removed."""
        assert normalize_metadata_key(key) == expected

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, "error"), ("", "error"), ("Warning", "warning"), (" error ", "error"), ("fatal", None)],
    )
    def test_normalize_severity(self, value: object, expected: object) -> None:
        """Test blank severities default to error and unknown ones are rejected."""
        assert normalize_severity(value) == expected

    def test_format_value(self) -> None:
        """Test text rendering of cell values."""
        assert format_value(5.0) == "5"
        assert format_value(0.5) == "0.5"
        assert format_value(True) == "true"
        assert format_value(date(2025, 1, 15)) == "2025-01-15"

    def test_get_str_value(self) -> None:
        """Test values are cleaned and blanks become None."""
        row = {"a": "  “D” ≥ 0 ", "b": "   ", "c": float("nan"), "d": 3}

        assert get_str_value(row, "a") == '"D" >= 0'
        assert get_str_value(row, "b") is None
        assert get_str_value(row, "c") is None
        assert get_str_value(row, "d") == "3"
        assert get_str_value(row, "missing") is None

    def test_clean_json_str(self) -> None:
        """Test typographic characters are replaced."""
        assert clean_json_str("A – B ≠ C") == "A - B != C"

    def test_convert_string_to_bool(self) -> None:
        """Test boolean flag conversion."""
        assert convert_string_to_bool("TRUE")
        assert convert_string_to_bool(True)
        assert not convert_string_to_bool("false")
        assert not convert_string_to_bool(None)


class TestErrors:
    """Tests for the exception hierarchy."""

    def test_all_inherit_from_base(self) -> None:
        """Test every compiler error is a RuleCompilerError."""
        for error in (
            UnsupportedFormatError(".pdf"),
            StructuralError("missing"),
            RowParseError("bad", row=2),
            RuleFileIOError("rules.json", "denied"),
        ):
            assert isinstance(error, RuleCompilerError)

    def test_unsupported_format_message(self) -> None:
        """Test the message names the extension."""
        error = UnsupportedFormatError(".pdf")

        assert str(error) == "Unsupported file format: .pdf"
        assert error.extension == ".pdf"

    def test_row_parse_error_forms(self) -> None:
        """Test row-numbered and line-text messages."""
        assert str(RowParseError("bad", row=3)) == "Row 3: bad"
        assert str(RowParseError(text="oops")) == "Failed to parse line: oops"

    def test_structural_error_key(self) -> None:
        """Test the offending key is kept."""
        error = StructuralError("Missing sheetValidations", key="sheetValidations")

        assert error.key == "sheetValidations"
        assert str(error) == "Missing sheetValidations"
