"""Unit tests for the format dispatcher (public entry point)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from api.excel_io import COLUMN_VALIDATIONS_COLUMN_ORDER
from rules_compiler import compile_rules_file, detect_format
from rules_compiler.errors import UnsupportedFormatError
from rules_compiler.examples import example_document

WriteFile = Callable[[str, str], Path]


class TestDetectFormat:
    """Tests for detect_format()."""

    @pytest.mark.parametrize(
        ("name", "fmt"),
        [
            ("rules.json", "json"),
            ("rules.yaml", "yaml"),
            ("rules.yml", "yaml"),
            ("rules.csv", "csv"),
            ("rules.xlsx", "workbook"),
            ("rules.xls", "workbook"),
            ("rules.txt", "legacy"),
            ("RULES.JSON", "json"),
            ("Rules.Xlsx", "workbook"),
        ],
    )
    def test_known_extensions(self, name: str, fmt: str) -> None:
        """Test extensions map to formats case-insensitively."""
        assert detect_format(name) == fmt

    @pytest.mark.parametrize("name", ["rules.pdf", "rules", "rules.json.bak"])
    def test_unknown_extension_raises(self, name: str) -> None:
        """Test unknown extensions raise UnsupportedFormatError."""
        with pytest.raises(UnsupportedFormatError):
            detect_format(name)


class TestFailureBoundary:
    """Tests for the never-raise contract of compile_rules_file()."""

    def test_unsupported_format(self, write_rules_file: WriteFile) -> None:
        """Test an unknown extension returns an empty result with the reason."""
        path = write_rules_file("rules.pdf", "%PDF-1.4")

        result = compile_rules_file(str(path), template_id=1)

        assert result.rules == []
        assert result.metadata == {}
        assert result.errors == ["Failed to parse validation file: Unsupported file format: .pdf"]

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test an unreadable file is contained."""
        result = compile_rules_file(str(tmp_path / "missing.json"), template_id=1)

        assert result.rules == []
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Failed to parse validation file:")

    def test_malformed_json(self, write_rules_file: WriteFile) -> None:
        """Test a malformed document is contained."""
        path = write_rules_file("rules.json", "{")

        result = compile_rules_file(str(path), template_id=1)

        assert result.rules == []
        assert len(result.errors) == 1

    def test_corrupt_workbook(self, tmp_path: Path) -> None:
        """Test a corrupt workbook is contained."""
        path = tmp_path / "rules.xlsx"
        path.write_bytes(b"\x00\x01\x02")

        result = compile_rules_file(str(path), template_id=1)

        assert result.rules == []
        assert len(result.errors) == 1

    def test_legacy_binary_xls_is_contained(self, tmp_path: Path) -> None:
        """Test an old binary .xls workbook is reported rather than raised."""
        path = tmp_path / "rules.xls"
        path.write_bytes(b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1" + b"\x00" * 64)

        result = compile_rules_file(str(path), template_id=1)

        assert result.rules == []
        assert len(result.errors) == 1

    def test_missing_sheet_validations(self, write_rules_file: WriteFile) -> None:
        """Test a JSON document without sheetValidations yields no rules and an error."""
        path = write_rules_file("rules.json", json.dumps({"metadata": {"templateName": "Q1"}}))

        result = compile_rules_file(str(path), template_id=1)

        assert result.rules == []
        assert result.errors
        assert result.metadata == {"templatename": "Q1"}

    def test_accepts_path_objects(self, write_rules_file: WriteFile) -> None:
        """Test a pathlib.Path works as well as a string."""
        path = write_rules_file("rules.txt", "A:NOT_EMPTY\n")

        assert compile_rules_file(path, template_id=1).rule_count == 1

    def test_none_path_is_contained(self) -> None:
        """Test an unusable path comes back as an error instead of raising."""
        result = compile_rules_file(None, template_id=1)

        assert result.rules == []
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Failed to parse validation file:")


class TestIdempotence:
    """Compiling the same file twice gives equal results."""

    @pytest.mark.parametrize("name", ["rules.json", "rules.yaml"])
    def test_document_formats(self, write_rules_file: WriteFile, name: str) -> None:
        """Test repeated compilation is deterministic for document formats."""
        path = write_rules_file(name, json.dumps(example_document()))

        first = compile_rules_file(str(path), template_id=2)
        second = compile_rules_file(str(path), template_id=2)

        assert first.rules == second.rules
        assert first.metadata == second.metadata

    def test_results_are_independent(self, write_rules_file: WriteFile) -> None:
        """Test mutating one result does not leak into the next call."""
        path = write_rules_file("rules.txt", "A:NOT_EMPTY\n")

        first = compile_rules_file(str(path), template_id=2)
        first.rules.clear()
        first.metadata["injected"] = True

        second = compile_rules_file(str(path), template_id=2)

        assert second.rule_count == 1
        assert second.metadata == {}


class TestCrossFormatEquivalence:
    """The same constraint compiles to the same rule from every format."""

    def _assert_required_rule(self, path: Path) -> None:
        result = compile_rules_file(str(path), template_id=10)
        assert result.errors == []
        matches = [
            r for r in result.rules
            if r.field == "Assets.Total" and r.rule_type == "required" and r.condition == "NOT_EMPTY"
        ]
        assert len(matches) == 1
        assert matches[0].severity == "error"
        assert matches[0].is_active is True

    def test_json(self, write_rules_file: WriteFile) -> None:
        """Test JSON."""
        document = {"sheetValidations": {"Assets": {"columnValidations": {"Total": {"required": True}}}}}
        self._assert_required_rule(write_rules_file("rules.json", json.dumps(document)))

    def test_yaml(self, write_rules_file: WriteFile) -> None:
        """Test YAML."""
        content = "sheetValidations:\n  Assets:\n    columnValidations:\n      Total:\n        required: true\n"
        self._assert_required_rule(write_rules_file("rules.yaml", content))

    def test_csv(self, write_rules_file: WriteFile) -> None:
        """Test CSV."""
        content = "RuleType,SheetName,Column,Required\ncolumn,Assets,Total,true\n"
        self._assert_required_rule(write_rules_file("rules.csv", content))

    def test_workbook(self, write_workbook: Callable[..., Path]) -> None:
        """Test Excel workbook."""
        path = write_workbook({"Column Validations": [
            COLUMN_VALIDATIONS_COLUMN_ORDER,
            ["Assets", "Total", None, True],
        ]})
        self._assert_required_rule(path)

    def test_legacy_text(self, write_rules_file: WriteFile) -> None:
        """Test legacy text keeps field and condition; its rule type is always legacy."""
        path = write_rules_file("rules.txt", "Assets.Total:NOT_EMPTY\n")

        rule = compile_rules_file(str(path), template_id=10).rules[0]

        assert (rule.field, rule.condition, rule.rule_type) == ("Assets.Total", "NOT_EMPTY", "legacy")
