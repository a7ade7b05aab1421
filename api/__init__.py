# API module - Excel I/O for rule workbooks

from .excel_io import (
    RulesWorkbookManager,
    RULE_SHEETS,
    METADATA_SHEET,
    COLUMN_VALIDATIONS_SHEET,
    CROSS_FIELD_VALIDATIONS_SHEET,
    get_column_definitions,
    get_column_order,
    ColumnDefinition,
)

__all__ = [
    "RulesWorkbookManager",
    "RULE_SHEETS",
    "METADATA_SHEET",
    "COLUMN_VALIDATIONS_SHEET",
    "CROSS_FIELD_VALIDATIONS_SHEET",
    "get_column_definitions",
    "get_column_order",
    "ColumnDefinition",
]
