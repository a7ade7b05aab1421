"""
Excel workbook I/O for validation rule workbooks.
Reads the fixed rule sheets and writes example workbooks with the same layout.
"""

from pathlib import Path
from typing import Dict, List, Optional, Any, Iterator, Tuple, Union, BinaryIO
from io import BytesIO
import openpyxl
from openpyxl.comments import Comment
from openpyxl.styles import Font, PatternFill, Alignment
from dataclasses import dataclass


@dataclass
class ColumnDefinition:
    """Definition for a single column in a rules sheet."""
    name: str
    required: bool = False
    help_text: str = ""


COMMENT_AUTHOR = "Validation Rules Compiler"


# ============================================================================
# METADATA SHEET CONFIGURATION
# ============================================================================

METADATA_SHEET = "Metadata"

METADATA_COLUMNS = {
    "Field": ColumnDefinition(
        name="Field", required=True,
        help_text="Metadata key, e.g. Template Name, Version, Created By"
    ),
    "Value": ColumnDefinition(
        name="Value", required=True,
        help_text="Metadata value"
    ),
}

METADATA_COLUMN_ORDER = ["Field", "Value"]

# ============================================================================
# COLUMN VALIDATIONS SHEET CONFIGURATION
# ============================================================================

COLUMN_VALIDATIONS_SHEET = "Column Validations"

COLUMN_VALIDATIONS_COLUMNS = {
    "Sheet Name": ColumnDefinition(
        name="Sheet Name", required=True,
        help_text="Sheet of the report template the column belongs to"
    ),
    "Column": ColumnDefinition(
        name="Column", required=True,
        help_text="Column letter or header name"
    ),
    "Data Type": ColumnDefinition(
        name="Data Type",
        help_text="Expected type, e.g. string, number, date"
    ),
    "Required": ColumnDefinition(
        name="Required",
        help_text="TRUE if every data row must have a value"
    ),
    "Min Length": ColumnDefinition(
        name="Min Length",
        help_text="Minimum text length"
    ),
    "Max Length": ColumnDefinition(
        name="Max Length",
        help_text="Maximum text length"
    ),
    "Minimum": ColumnDefinition(
        name="Minimum",
        help_text="Minimum numeric value"
    ),
    "Maximum": ColumnDefinition(
        name="Maximum",
        help_text="Maximum numeric value"
    ),
    "Enum Values": ColumnDefinition(
        name="Enum Values",
        help_text="Comma-separated list of allowed values"
    ),
    "Pattern": ColumnDefinition(
        name="Pattern",
        help_text="Regular expression the value must match"
    ),
}

COLUMN_VALIDATIONS_COLUMN_ORDER = [
    "Sheet Name", "Column", "Data Type", "Required", "Min Length",
    "Max Length", "Minimum", "Maximum", "Enum Values", "Pattern"
]

# ============================================================================
# CROSS-FIELD VALIDATIONS SHEET CONFIGURATION
# ============================================================================

CROSS_FIELD_VALIDATIONS_SHEET = "Cross-Field Validations"

CROSS_FIELD_VALIDATIONS_COLUMNS = {
    "Name": ColumnDefinition(
        name="Name", required=True,
        help_text="Short name of the check"
    ),
    "Description": ColumnDefinition(
        name="Description",
        help_text="Message shown when the check fails"
    ),
    "Expression": ColumnDefinition(
        name="Expression", required=True,
        help_text="Condition over several columns, e.g. D = E"
    ),
    "Severity": ColumnDefinition(
        name="Severity",
        help_text="error or warning (default error)"
    ),
    "Applicable Sheets": ColumnDefinition(
        name="Applicable Sheets",
        help_text="Sheet the check applies to; blank means the whole submission"
    ),
}

CROSS_FIELD_VALIDATIONS_COLUMN_ORDER = [
    "Name", "Description", "Expression", "Severity", "Applicable Sheets"
]

# ============================================================================
# SHEET REGISTRY
# ============================================================================

RULE_SHEETS = {
    METADATA_SHEET: {
        "columns": METADATA_COLUMNS,
        "column_order": METADATA_COLUMN_ORDER,
    },
    COLUMN_VALIDATIONS_SHEET: {
        "columns": COLUMN_VALIDATIONS_COLUMNS,
        "column_order": COLUMN_VALIDATIONS_COLUMN_ORDER,
    },
    CROSS_FIELD_VALIDATIONS_SHEET: {
        "columns": CROSS_FIELD_VALIDATIONS_COLUMNS,
        "column_order": CROSS_FIELD_VALIDATIONS_COLUMN_ORDER,
    },
}


def get_column_order(sheet_name: str) -> list:
    """Get column order for a rules sheet."""
    if sheet_name not in RULE_SHEETS:
        raise ValueError(f"Unknown sheet: {sheet_name}")
    return RULE_SHEETS[sheet_name]["column_order"]


def get_column_definitions(sheet_name: str) -> dict:
    """Get column definitions for a rules sheet."""
    if sheet_name not in RULE_SHEETS:
        raise ValueError(f"Unknown sheet: {sheet_name}")
    return RULE_SHEETS[sheet_name]["columns"]


class RulesWorkbookManager:
    """Loads rule workbooks into memory and writes new ones."""

    def __init__(self):
        self.workbook: Optional[openpyxl.Workbook] = None

    def load_from_file(self, file_source: Union[str, Path, BinaryIO]) -> openpyxl.Workbook:
        """Load the whole workbook. Formula cells yield their cached values."""
        self.workbook = openpyxl.load_workbook(file_source, data_only=True)
        return self.workbook

    def has_sheet(self, sheet_name: str) -> bool:
        return self.workbook is not None and sheet_name in self.workbook.sheetnames

    def iter_rows(self, sheet_name: str) -> Iterator[Tuple[int, Dict[str, Any]]]:
        """
        Yield (excel_row, row_dict) for every non-blank data row of a rules sheet.
        Cells are mapped by position onto the sheet's fixed column order; the
        header row is skipped.
        """
        ws = self.workbook[sheet_name]
        columns = get_column_order(sheet_name)

        for excel_row, row in enumerate(ws.iter_rows(min_row=2, values_only=True), 2):
            if not any(cell is not None and str(cell).strip() != "" for cell in row):
                continue
            row_dict = {}
            for i, col_name in enumerate(columns):
                row_dict[col_name] = row[i] if i < len(row) else None
            yield excel_row, row_dict

    def create_new_workbook(self) -> openpyxl.Workbook:
        """Create a new workbook with all rule sheets and their headers."""
        self.workbook = openpyxl.Workbook()

        if 'Sheet' in self.workbook.sheetnames:
            del self.workbook['Sheet']

        for sheet_name in RULE_SHEETS.keys():
            self._write_sheet(sheet_name, [])

        return self.workbook

    def update_sheet_data(self, sheet_name: str, rows: List[List[Any]]):
        """Replace the data rows of a rules sheet."""
        if sheet_name not in RULE_SHEETS:
            raise ValueError(f"Unknown sheet: {sheet_name}")
        if self.workbook is None:
            self.create_new_workbook()
        self._write_sheet(sheet_name, rows)

    def save_to_bytes(self) -> bytes:
        """Save the workbook to bytes."""
        if self.workbook is None:
            self.create_new_workbook()

        output = BytesIO()
        self.workbook.save(output)
        output.seek(0)
        return output.read()

    def _write_sheet(self, sheet_name: str, rows: List[List[Any]]):
        """Write header and rows to a sheet, keeping the registry's sheet order."""
        position = list(RULE_SHEETS.keys()).index(sheet_name)
        if sheet_name in self.workbook.sheetnames:
            del self.workbook[sheet_name]

        ws = self.workbook.create_sheet(sheet_name, position)

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
        header_alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

        columns = get_column_order(sheet_name)
        definitions = get_column_definitions(sheet_name)

        for col_idx, col_name in enumerate(columns, 1):
            cell = ws.cell(row=1, column=col_idx, value=col_name)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = header_alignment
            definition = definitions[col_name]
            if definition.help_text:
                note = f"Required. {definition.help_text}" if definition.required else definition.help_text
                cell.comment = Comment(note, COMMENT_AUTHOR)

        for row_idx, row in enumerate(rows, 2):
            for col_idx, value in enumerate(row, 1):
                ws.cell(row=row_idx, column=col_idx, value=value)

        ws.freeze_panes = "A2"
