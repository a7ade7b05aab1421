"""Unit tests for the legacy text adapter."""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from rules_compiler.errors import RuleFileIOError
from rules_compiler.legacy_adapter import build_rules_from_lines, parse_legacy_file


class TestBuildRulesFromLines:
    """Tests for build_rules_from_lines()."""

    def test_one_rule_and_one_error(self) -> None:
        """Test a parseable line yields a rule and a line without a colon an error."""
        result = build_rules_from_lines(["A:NOT_EMPTY", "garbage-no-colon"], template_id=6)

        assert len(result.rules) == 1
        assert result.errors == ["Failed to parse line: garbage-no-colon"]

        rule = result.rules[0]
        assert rule.field == "A"
        assert rule.condition == "NOT_EMPTY"
        assert rule.rule_type == "legacy"
        assert rule.severity == "error"
        assert rule.error_message == "Validation failed for A"
        assert rule.template_id == 6

    def test_condition_keeps_later_colons(self) -> None:
        """Test only the first colon splits field from condition."""
        rule = build_rules_from_lines(["B5:TIME >= 09:30"], template_id=1).rules[0]

        assert rule.field == "B5"
        assert rule.condition == "TIME >= 09:30"

    def test_blank_and_comment_lines_are_skipped(self) -> None:
        """Test blank lines, comments and block separators are ignored silently."""
        lines = ["", "   ", "# header comment", "---", "Sheet1.A:NOT_EMPTY"]

        result = build_rules_from_lines(lines, template_id=1)

        assert result.rule_count == 1
        assert result.errors == []

    def test_double_dash_line_is_reported(self) -> None:
        """Test a line starting with -- is not treated as a comment."""
        result = build_rules_from_lines(["-- check totals", "A:NOT_EMPTY"], template_id=1)

        assert result.rule_count == 1
        assert result.errors == ["Failed to parse line: -- check totals"]

    @pytest.mark.parametrize("line", [":NOT_EMPTY", "A:", "A:   "])
    def test_empty_field_or_condition_is_reported(self, line: str) -> None:
        """Test lines missing either side of the colon are reported."""
        result = build_rules_from_lines([line], template_id=1)

        assert result.rules == []
        assert result.errors == [f"Failed to parse line: {line.strip()}"]


class TestParseLegacyFile:
    """Tests for parse_legacy_file()."""

    def test_reads_file(self, write_rules_file: Callable[[str, str], Path]) -> None:
        """Test a text file compiles one rule per line, in order."""
        path = write_rules_file("rules.txt", "A1:NOT_EMPTY\r\nB2:VALUE > 100\n\n")

        result = parse_legacy_file(str(path), template_id=1)

        assert [(r.field, r.condition) for r in result.rules] == [
            ("A1", "NOT_EMPTY"),
            ("B2", "VALUE > 100"),
        ]

    def test_missing_file_raises_io_error(self, tmp_path: Path) -> None:
        """Test an unreadable file is raised as RuleFileIOError."""
        with pytest.raises(RuleFileIOError):
            parse_legacy_file(str(tmp_path / "missing.txt"), template_id=1)
