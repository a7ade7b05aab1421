"""
CSV adapter.

Each row carries a ``RuleType`` discriminator (case-insensitive):

    column       up to eight rules, one per populated constraint cell
    cell         one rule on a single cell (CellRange or Column + Row)
    range        one rule on a block (CellRange or ColumnRange + RowRange)
    cross_field  one crossField rule scoped to SheetName
    global       one global rule

Blank rows and comment rows are skipped. Any other row that cannot be turned
into a rule is reported as ``Row <n>: ...`` and the remaining rows are still
compiled. Row numbers count the header as row 1.
"""

import logging
from pathlib import Path
from typing import Dict, List, Any, Optional

import pandas as pd

from .addressing import normalize_address
from .base import (
    GLOBAL_FIELD,
    DEFAULT_SEVERITY,
    NOT_EMPTY,
    ValidationRule,
    ParsedValidationRules,
    get_str_value,
    is_comment,
    is_empty,
    normalize_severity,
)
from .conditions import synthesize_column
from .errors import RowParseError, RuleFileIOError

logger = logging.getLogger(__name__)

FIRST_DATA_ROW = 2

# CSV header -> constraint name used by the condition synthesizer
CONSTRAINT_COLUMNS = {
    "Required": "required",
    "DataType": "dataType",
    "MinLength": "minLength",
    "MaxLength": "maxLength",
    "Minimum": "minimum",
    "Maximum": "maximum",
    "Pattern": "pattern",
    "EnumValues": "enum",
}

CROSS_FIELD_RULE_TYPES = ("cross_field", "crossfield")

# Placeholder for a line with more fields than the header
MALFORMED_ROW = "\x00malformed"


# ============================================================================
# CSV COMPILATION
# ============================================================================

def parse_csv_file(file_path: str, template_id: int) -> ParsedValidationRules:
    """Load every row of a CSV rules file, then compile the rows."""
    path = Path(file_path)
    # Field counts of lines wider than the header, in file order
    wide_lines: List[int] = []

    def hold_place(fields: List[str]) -> List[str]:
        wide_lines.append(len(fields))
        return [MALFORMED_ROW]

    try:
        # The header is read as a data row so that it alone fixes the row width
        raw = pd.read_csv(
            path, header=None, dtype=str, keep_default_na=False, encoding="utf-8-sig",
            engine="python", on_bad_lines=hold_place,
        )
    except pd.errors.EmptyDataError:
        result = ParsedValidationRules()
        result.add_error(f"CSV rules file {path.name} is empty")
        return result
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise RuleFileIOError(path.name, str(e)) from e

    width = raw.shape[1]
    df = raw.iloc[1:].reset_index(drop=True)
    df.columns = [str(c).strip() for c in raw.iloc[0]]

    row_errors = {}
    malformed_rows = [
        position + FIRST_DATA_ROW
        for position, first_cell in enumerate(df.iloc[:, 0])
        if first_cell == MALFORMED_ROW
    ]
    for row_number, field_count in zip(malformed_rows, wide_lines):
        row_errors[row_number] = f"expected {width} fields, saw {field_count}"

    result = build_rules_from_rows(df.to_dict(orient="records"), template_id, row_errors)
    logger.debug("Compiled %d rules from %d CSV rows in %s", result.rule_count, len(df), path.name)
    return result


def build_rules_from_rows(
    rows: List[Dict[str, Any]],
    template_id: int,
    row_errors: Optional[Dict[int, str]] = None,
) -> ParsedValidationRules:
    """
    Compile CSV rows (header -> cell text) into canonical rules.

    Args:
        rows: Row dicts in file order
        template_id: Owning report template
        row_errors: Row number -> reason for rows that could not be tokenized

    Returns:
        ParsedValidationRules (metadata is always empty for CSV)
    """
    result = ParsedValidationRules()
    row_errors = row_errors or {}

    for index, row in enumerate(rows):
        row_number = index + FIRST_DATA_ROW
        if row_number in row_errors:
            result.add_error(RowParseError(row_errors[row_number], row=row_number))
            continue
        if all(is_empty(v) for v in row.values()):
            continue

        raw_type = get_str_value(row, "RuleType")
        if raw_type is None:
            result.add_error(RowParseError("missing RuleType", row=row_number))
            continue
        if is_comment(raw_type):
            continue

        rule_type = raw_type.lower()
        if rule_type == "column":
            _compile_column_row(result, row, row_number, template_id)
        elif rule_type == "cell":
            _compile_cell_row(result, row, row_number, template_id)
        elif rule_type == "range":
            _compile_range_row(result, row, row_number, template_id)
        elif rule_type in CROSS_FIELD_RULE_TYPES:
            _compile_expression_row(
                result, row, row_number, template_id,
                field=get_str_value(row, "SheetName"), rule_type="crossField",
            )
        elif rule_type == "global":
            _compile_expression_row(
                result, row, row_number, template_id,
                field=GLOBAL_FIELD, rule_type="global",
            )
        else:
            result.add_error(RowParseError(f"unrecognized RuleType '{raw_type}'", row=row_number))

    return result


# ============================================================================
# PRIVATE HELPERS
# ============================================================================

def _row_severity(result: ParsedValidationRules, row: Dict[str, Any], row_number: int) -> str:
    """Severity cell, defaulting to error when blank or unusable."""
    severity = normalize_severity(row.get("Severity"))
    if severity is None:
        result.add_error(RowParseError(
            f"invalid Severity '{get_str_value(row, 'Severity')}', using '{DEFAULT_SEVERITY}'",
            row=row_number,
        ))
        return DEFAULT_SEVERITY
    return severity


def _apply_to_all_rows(row: Dict[str, Any]) -> bool:
    flag = get_str_value(row, "ApplyToAllRows")
    return flag is not None and flag.lower() == "true"


def _is_required(row: Dict[str, Any]) -> bool:
    flag = get_str_value(row, "Required")
    return flag is not None and flag.lower() == "true"


def _compile_column_row(result: ParsedValidationRules, row: Dict[str, Any], row_number: int, template_id: int):
    """One rule per non-empty constraint cell, addressing fields copied verbatim."""
    sheet_name = get_str_value(row, "SheetName")
    column = get_str_value(row, "Column")
    if sheet_name is None or column is None:
        result.add_error(RowParseError("column rule needs both SheetName and Column", row=row_number))
        return

    constraints = {
        constraint: get_str_value(row, header)
        for header, constraint in CONSTRAINT_COLUMNS.items()
    }
    # Only the literal "true" marks a column as required
    constraints["required"] = _is_required(row)

    synthesized = synthesize_column(column, sheet_name, constraints)
    if not synthesized:
        result.add_error(RowParseError(f"column rule for {sheet_name}.{column} has no constraints", row=row_number))
        return

    severity = _row_severity(result, row, row_number)
    for entry in synthesized:
        result.add_rule(ValidationRule(
            template_id=template_id,
            field=f"{sheet_name}.{column}",
            rule_type=entry.rule_type,
            condition=entry.condition,
            error_message=entry.error_message,
            severity=severity,
            row_range=get_str_value(row, "RowRange"),
            column_range=get_str_value(row, "ColumnRange"),
            cell_range=get_str_value(row, "CellRange"),
            apply_to_all_rows=_apply_to_all_rows(row),
        ))


def _compile_cell_row(result: ParsedValidationRules, row: Dict[str, Any], row_number: int, template_id: int):
    """Single-cell rule; the reference comes from CellRange or Column + Row."""
    address = _row_address(row)
    sheet_name = get_str_value(row, "SheetName")
    field = address.cell_range or _sheet_field(sheet_name, address.column)
    if field is None:
        result.add_error(RowParseError("cell rule needs CellRange, Column + Row, or SheetName + Column", row=row_number))
        return

    result.add_rule(ValidationRule(
        template_id=template_id,
        field=field,
        rule_type="required" if _is_required(row) else "custom",
        condition=get_str_value(row, "Expression") or NOT_EMPTY,
        error_message=get_str_value(row, "Description") or f"Cell {address.cell_range or field} validation failed",
        severity=_row_severity(result, row, row_number),
        row_range=address.row_range or address.row,
        column_range=address.column_range or address.column,
        cell_range=address.cell_range,
        apply_to_all_rows=_apply_to_all_rows(row),
    ))


def _compile_range_row(result: ParsedValidationRules, row: Dict[str, Any], row_number: int, template_id: int):
    """Block rule; the reference comes from CellRange or ColumnRange + RowRange."""
    address = _row_address(row)
    sheet_name = get_str_value(row, "SheetName")
    field = address.cell_range or _sheet_field(sheet_name, address.column_range)
    if field is None:
        result.add_error(RowParseError(
            "range rule needs CellRange, ColumnRange + RowRange, or SheetName + ColumnRange", row=row_number
        ))
        return

    result.add_rule(ValidationRule(
        template_id=template_id,
        field=field,
        rule_type="required" if _is_required(row) else "range",
        condition=get_str_value(row, "Expression") or NOT_EMPTY,
        error_message=get_str_value(row, "Description") or f"Range {address.cell_range or field} validation failed",
        severity=_row_severity(result, row, row_number),
        row_range=address.row_range,
        column_range=address.column_range,
        cell_range=address.cell_range,
        apply_to_all_rows=_apply_to_all_rows(row),
    ))


def _compile_expression_row(
    result: ParsedValidationRules,
    row: Dict[str, Any],
    row_number: int,
    template_id: int,
    field: Optional[str],
    rule_type: str,
):
    """crossField and global rows: the Expression cell is the condition."""
    if field is None:
        result.add_error(RowParseError(f"{rule_type} rule needs SheetName", row=row_number))
        return
    expression = get_str_value(row, "Expression")
    if expression is None:
        result.add_error(RowParseError(f"{rule_type} rule has no Expression", row=row_number))
        return

    scope = "Global" if rule_type == "global" else f"Cross-field ({field})"
    result.add_rule(ValidationRule(
        template_id=template_id,
        field=field,
        rule_type=rule_type,
        condition=expression,
        error_message=get_str_value(row, "Description") or f"{scope} validation failed",
        severity=_row_severity(result, row, row_number),
        cell_range=get_str_value(row, "CellRange"),
    ))


def _row_address(row: Dict[str, Any]):
    return normalize_address(
        column=get_str_value(row, "Column"),
        row=get_str_value(row, "Row"),
        column_range=get_str_value(row, "ColumnRange"),
        row_range=get_str_value(row, "RowRange"),
        cell_range=get_str_value(row, "CellRange"),
    )


def _sheet_field(sheet_name: Optional[str], column: Optional[str]) -> Optional[str]:
    if sheet_name is None or column is None:
        return None
    return f"{sheet_name}.{column}"


__all__ = [
    "parse_csv_file",
    "build_rules_from_rows",
]
