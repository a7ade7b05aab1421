"""
Base module with shared constants, data classes, and helper functions.

This module provides the foundation for the rules compiler:
- Rule vocabulary and severity constants
- ValidationRule and ParsedValidationRules data classes
- Helper functions for cell cleaning, boolean flags, metadata keys, etc.
"""

import re
from datetime import date, datetime
from typing import Dict, List, Any, Optional, Union
from dataclasses import dataclass, field
import pandas as pd

from .errors import RuleCompilerError


# ============================================================================
# CONSTANTS
# ============================================================================

COMMENT_PREFIXES = ["#", "--"]

GLOBAL_FIELD = "GLOBAL"

DEFAULT_SEVERITY = "error"
SEVERITIES = ("error", "warning")

RULE_TYPES = (
    "required", "dataType", "minLength", "maxLength", "minimum", "maximum",
    "pattern", "enum", "crossField", "global", "custom", "range", "legacy",
)

# Condition DSL tokens that the compiler emits on its own
NOT_EMPTY = "NOT_EMPTY"

# CSV header layout
CSV_COLUMN_ORDER = [
    "RuleType", "SheetName", "Column", "Row", "ColumnRange", "RowRange",
    "CellRange", "ApplyToAllRows", "DataType", "Required", "MinLength",
    "MaxLength", "Minimum", "Maximum", "Pattern", "EnumValues",
    "Expression", "Description", "Severity",
]


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass
class ValidationRule:
    """A single compiled rule, decoupled from the format it was read from."""
    template_id: int
    field: str
    rule_type: str
    condition: str
    error_message: str
    severity: str = DEFAULT_SEVERITY
    is_active: bool = True
    sheet_id: Optional[int] = None
    # Spatial addressing, raw or derived
    row_range: Optional[str] = None      # e.g. "2-100", "5", "10-*"
    column_range: Optional[str] = None   # e.g. "A-Z", "B", "C-E"
    cell_range: Optional[str] = None     # e.g. "A2:Z100", "B5"
    apply_to_all_rows: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "templateId": self.template_id,
            "sheetId": self.sheet_id,
            "field": self.field,
            "ruleType": self.rule_type,
            "condition": self.condition,
            "errorMessage": self.error_message,
            "severity": self.severity,
            "isActive": self.is_active,
            "rowRange": self.row_range,
            "columnRange": self.column_range,
            "cellRange": self.cell_range,
            "applyToAllRows": self.apply_to_all_rows,
        }
        # Remove None values to keep the contract clean
        return {k: v for k, v in result.items() if v is not None}


@dataclass
class ParsedValidationRules:
    """Result envelope of a single compile call."""
    rules: List[ValidationRule] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)
    errors: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return len(self.errors) > 0

    @property
    def rule_count(self) -> int:
        return len(self.rules)

    def add_rule(self, rule: ValidationRule):
        self.rules.append(rule)

    def add_error(self, problem: Union[str, RuleCompilerError]):
        self.errors.append(str(problem))

    def merge(self, other: 'ParsedValidationRules'):
        """Merge another result into this one, keeping source order."""
        self.rules.extend(other.rules)
        self.metadata.update(other.metadata)
        self.errors.extend(other.errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rules": [r.to_dict() for r in self.rules],
            "metadata": dict(self.metadata),
            "errors": list(self.errors),
        }


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def clean_json_str(input_string: str) -> str:
    """
    Clean a string by replacing typographic characters.
    Spreadsheet tools like to turn quotes and operators in expressions into
    curly quotes and unicode symbols; the evaluator expects plain ASCII.
    """
    if not input_string:
        return input_string

    cleaned_string = input_string

    replacement_dict = {
        '\u2018': "'",   # left single quote
        '\u2019': "'",   # right single quote
        '\u201C': '"',   # left double quote
        '\u201D': '"',   # right double quote
        '\u00A0': ' ',   # non-breaking space
        '\u2013': '-',   # en-dash
        '\u2014': '-',   # em-dash
        '\u2212': '-',   # minus sign
        '\u00D7': '*',   # multiplication
        '\u00F7': '/',   # division
        '\u2265': '>=',  # greater than or equal
        '\u2264': '<=',  # less than or equal
        '\u2260': '!=',  # not equal
    }

    for key, value in replacement_dict.items():
        cleaned_string = cleaned_string.replace(key, value)

    return cleaned_string


def is_comment(text: Any) -> bool:
    """Check if text is a comment line (starts with # or --)."""
    if text is None:
        return False
    stripped = str(text).strip()
    for prefix in COMMENT_PREFIXES:
        if stripped.startswith(prefix):
            return True
    return False


def is_empty(value: Any) -> bool:
    """Check if value is empty (None, NaN, or blank string)."""
    if value is None:
        return True
    if isinstance(value, str):
        return len(value.strip()) == 0
    if isinstance(value, float) and pd.isna(value):
        return True
    return False


def format_value(value: Any) -> str:
    """Render a cell or document value as text, dropping a trailing .0 on whole floats."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def get_str_value(row_dict: Dict[str, Any], key: str) -> Optional[str]:
    """
    Get a cleaned, stripped string value from a row dict.
    Returns None if the value is empty or missing.
    """
    value = row_dict.get(key)
    if is_empty(value):
        return None
    result = clean_json_str(format_value(value)).strip()
    return result if result else None


def convert_string_to_bool(value: Any) -> bool:
    """Convert a spreadsheet or document flag to boolean. Accepts TRUE, 1 and YES."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)) and not pd.isna(value):
        return value == 1
    if isinstance(value, str):
        return value.strip().upper() in ("TRUE", "1", "YES")
    return False


def normalize_metadata_key(key: Any) -> str:
    """Lower-case a metadata key and strip all whitespace (Template Name -> templatename)."""
    return re.sub(r"\s+", "", str(key)).lower()


def normalize_metadata(metadata: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Normalize every key of a metadata mapping, keeping values as given."""
    if not isinstance(metadata, dict):
        return {}
    return {normalize_metadata_key(k): v for k, v in metadata.items()}


def normalize_severity(value: Any) -> Optional[str]:
    """
    Map a severity value onto the allowed set.
    Blank values default to error; unknown values return None.
    """
    if is_empty(value):
        return DEFAULT_SEVERITY
    severity = str(value).strip().lower()
    if severity in SEVERITIES:
        return severity
    return None


# ============================================================================
# PUBLIC API
# ============================================================================

__all__ = [
    # Data classes
    "ValidationRule",
    "ParsedValidationRules",

    # Constants
    "COMMENT_PREFIXES",
    "GLOBAL_FIELD",
    "DEFAULT_SEVERITY",
    "SEVERITIES",
    "RULE_TYPES",
    "NOT_EMPTY",
    "CSV_COLUMN_ORDER",

    # Helper functions
    "clean_json_str",
    "is_comment",
    "is_empty",
    "format_value",
    "get_str_value",
    "convert_string_to_bool",
    "normalize_metadata_key",
    "normalize_metadata",
    "normalize_severity",
]
