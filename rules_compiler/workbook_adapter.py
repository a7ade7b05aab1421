"""
Workbook adapter (xlsx).

Three sheets are recognized by name; any of them may be missing:

    Metadata                  Field | Value
    Column Validations        Sheet Name | Column | Data Type | Required | Min Length |
                              Max Length | Minimum | Maximum | Enum Values | Pattern
    Cross-Field Validations   Name | Description | Expression | Severity | Applicable Sheets

The workbook is loaded fully into memory before any row is visited.
"""

import logging
import zipfile
from pathlib import Path
from typing import Dict, Any

from openpyxl.utils.exceptions import InvalidFileException

from api.excel_io import (
    RulesWorkbookManager,
    METADATA_SHEET,
    COLUMN_VALIDATIONS_SHEET,
    CROSS_FIELD_VALIDATIONS_SHEET,
)

from .base import (
    GLOBAL_FIELD,
    DEFAULT_SEVERITY,
    ValidationRule,
    ParsedValidationRules,
    get_str_value,
    normalize_metadata_key,
    normalize_severity,
)
from .conditions import synthesize_column
from .errors import RowParseError, RuleFileIOError

logger = logging.getLogger(__name__)

# Column Validations header -> constraint name used by the condition synthesizer
CONSTRAINT_COLUMNS = {
    "Required": "required",
    "Data Type": "dataType",
    "Min Length": "minLength",
    "Max Length": "maxLength",
    "Minimum": "minimum",
    "Maximum": "maximum",
    "Pattern": "pattern",
    "Enum Values": "enum",
}


def parse_workbook_file(file_path: str, template_id: int) -> ParsedValidationRules:
    """Load a rules workbook and compile its recognized sheets."""
    path = Path(file_path)
    manager = RulesWorkbookManager()
    try:
        manager.load_from_file(str(path))
    except (OSError, InvalidFileException, zipfile.BadZipFile, KeyError, ValueError) as e:
        raise RuleFileIOError(path.name, str(e) or type(e).__name__) from e

    result = ParsedValidationRules()

    if manager.has_sheet(METADATA_SHEET):
        result.metadata = parse_metadata_sheet(manager)

    if manager.has_sheet(COLUMN_VALIDATIONS_SHEET):
        result.merge(parse_column_validations_sheet(manager, template_id))

    if manager.has_sheet(CROSS_FIELD_VALIDATIONS_SHEET):
        result.merge(parse_cross_field_validations_sheet(manager, template_id))

    logger.debug("Compiled %d rules from workbook %s", result.rule_count, path.name)
    return result


def parse_metadata_sheet(manager: RulesWorkbookManager) -> Dict[str, Any]:
    """Field/Value pairs; keys are lower-cased with whitespace removed."""
    metadata = {}
    for _, row in manager.iter_rows(METADATA_SHEET):
        key = get_str_value(row, "Field")
        value = get_str_value(row, "Value")
        if key and value:
            metadata[normalize_metadata_key(key)] = value
    return metadata


def parse_column_validations_sheet(manager: RulesWorkbookManager, template_id: int) -> ParsedValidationRules:
    """Every populated constraint cell becomes its own rule."""
    result = ParsedValidationRules()

    for excel_row, row in manager.iter_rows(COLUMN_VALIDATIONS_SHEET):
        sheet_name = get_str_value(row, "Sheet Name")
        column = get_str_value(row, "Column")
        if not sheet_name or not column:
            result.add_error(RowParseError(
                f"{COLUMN_VALIDATIONS_SHEET} row needs both Sheet Name and Column", row=excel_row
            ))
            continue

        constraints = {
            constraint: row.get(header) if constraint == "required" else get_str_value(row, header)
            for header, constraint in CONSTRAINT_COLUMNS.items()
        }
        for entry in synthesize_column(column, sheet_name, constraints):
            result.add_rule(ValidationRule(
                template_id=template_id,
                field=f"{sheet_name}.{column}",
                rule_type=entry.rule_type,
                condition=entry.condition,
                error_message=entry.error_message,
            ))

    return result


def parse_cross_field_validations_sheet(manager: RulesWorkbookManager, template_id: int) -> ParsedValidationRules:
    """One crossField rule per row; a blank Applicable Sheets cell means GLOBAL."""
    result = ParsedValidationRules()

    for excel_row, row in manager.iter_rows(CROSS_FIELD_VALIDATIONS_SHEET):
        name = get_str_value(row, "Name")
        expression = get_str_value(row, "Expression")
        if not name or not expression:
            result.add_error(RowParseError(
                f"{CROSS_FIELD_VALIDATIONS_SHEET} row needs both Name and Expression", row=excel_row
            ))
            continue

        severity = normalize_severity(row.get("Severity"))
        if severity is None:
            result.add_error(RowParseError(
                f"invalid Severity '{get_str_value(row, 'Severity')}', using '{DEFAULT_SEVERITY}'",
                row=excel_row,
            ))
            severity = DEFAULT_SEVERITY

        result.add_rule(ValidationRule(
            template_id=template_id,
            field=get_str_value(row, "Applicable Sheets") or GLOBAL_FIELD,
            rule_type="crossField",
            condition=expression,
            error_message=get_str_value(row, "Description") or name,
            severity=severity,
        ))

    return result


__all__ = [
    "parse_workbook_file",
    "parse_metadata_sheet",
    "parse_column_validations_sheet",
    "parse_cross_field_validations_sheet",
]
