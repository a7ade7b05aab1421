"""Unit tests for the rules workbook manager."""

from __future__ import annotations

import io

import pytest

from api.excel_io import (
    COLUMN_VALIDATIONS_SHEET,
    CROSS_FIELD_VALIDATIONS_SHEET,
    METADATA_SHEET,
    RULE_SHEETS,
    RulesWorkbookManager,
    get_column_definitions,
    get_column_order,
)


class TestRulesWorkbookManager:
    """Tests for RulesWorkbookManager."""

    def test_new_workbook_has_rule_sheets_in_order(self) -> None:
        """Test a new workbook contains every rule sheet with headers."""
        manager = RulesWorkbookManager()
        workbook = manager.create_new_workbook()

        assert workbook.sheetnames == list(RULE_SHEETS.keys())
        header = [cell.value for cell in workbook[METADATA_SHEET][1]]
        assert header == get_column_order(METADATA_SHEET)

    def test_round_trip_skips_blank_rows(self) -> None:
        """Test rows written are read back by position with Excel row numbers."""
        writer = RulesWorkbookManager()
        writer.update_sheet_data(CROSS_FIELD_VALIDATIONS_SHEET, [
            ["Balance", "Assets equal liabilities", "D = E", "error", "Annexure 1"],
            [None, None, None, None, None],
            ["Quality", None, "NO_WHITESPACE_ONLY_CELLS()", "warning", None],
        ])

        reader = RulesWorkbookManager()
        reader.load_from_file(io.BytesIO(writer.save_to_bytes()))
        rows = list(reader.iter_rows(CROSS_FIELD_VALIDATIONS_SHEET))

        assert [excel_row for excel_row, _ in rows] == [2, 4]
        assert rows[0][1]["Expression"] == "D = E"
        assert rows[1][1]["Applicable Sheets"] is None

    def test_has_sheet(self) -> None:
        """Test sheet presence checks."""
        manager = RulesWorkbookManager()
        assert not manager.has_sheet(COLUMN_VALIDATIONS_SHEET)

        manager.create_new_workbook()
        assert manager.has_sheet(COLUMN_VALIDATIONS_SHEET)
        assert not manager.has_sheet("Sheet")

    def test_unknown_sheet_rejected(self) -> None:
        """Test only registered rule sheets can be written."""
        with pytest.raises(ValueError, match="Unknown sheet"):
            RulesWorkbookManager().update_sheet_data("Notes", [])

    def test_header_cells_carry_help_text(self) -> None:
        """Test header comments explain each column and flag required ones."""
        writer = RulesWorkbookManager()
        writer.create_new_workbook()

        reader = RulesWorkbookManager()
        workbook = reader.load_from_file(io.BytesIO(writer.save_to_bytes()))
        headers = {cell.value: cell for cell in workbook[CROSS_FIELD_VALIDATIONS_SHEET][1]}
        definitions = get_column_definitions(CROSS_FIELD_VALIDATIONS_SHEET)

        assert headers["Expression"].comment.text == f"Required. {definitions['Expression'].help_text}"
        assert headers["Severity"].comment.text == definitions["Severity"].help_text
