"""
Example rule files in every supported format.

All five examples are rendered from one rules document, so uploaders can
download a starting point in whichever format they author in.
"""

import copy
import json
from typing import Dict, List, Any

import pandas as pd
import yaml

from api.excel_io import (
    RulesWorkbookManager,
    METADATA_SHEET,
    COLUMN_VALIDATIONS_SHEET,
    CROSS_FIELD_VALIDATIONS_SHEET,
)

from .base import CSV_COLUMN_ORDER, DEFAULT_SEVERITY


# Format name -> (file name, media type)
EXAMPLE_FORMATS = {
    "json": ("validation-rules.json", "application/json"),
    "yaml": ("validation-rules.yaml", "application/x-yaml"),
    "csv": ("validation-rules.csv", "text/csv"),
    "xlsx": ("validation-rules.xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"),
    "txt": ("validation-rules.txt", "text/plain"),
}

METADATA_LABELS = {
    "templateName": "Template Name",
    "version": "Version",
    "createdBy": "Created By",
    "description": "Description",
}

_EXAMPLE_DOCUMENT = {
    "metadata": {
        "templateName": "Quarterly Reporting Format",
        "version": "1.0",
        "createdBy": "Regulatory Reporting Team",
        "description": "Validation rules for quarterly intermediary reporting",
    },
    "sheetValidations": {
        "Annexure 1": {
            "columnValidations": {
                "A": {"dataType": "string", "required": True, "minLength": 1, "maxLength": 100},
                "B": {"dataType": "string", "required": True, "pattern": "^[A-Z]{2}[0-9]{4}$"},
                "D": {"dataType": "number", "required": True, "minimum": 0, "maximum": 999999999},
            },
            "crossFieldValidations": [
                {
                    "name": "Asset Liability Balance",
                    "description": "Total Assets should equal Total Liabilities",
                    "expression": "D = E",
                    "severity": "error",
                },
            ],
        },
        "Annexure 2": {
            "columnValidations": {
                "A": {
                    "dataType": "string",
                    "required": True,
                    "enumValues": ["Equity", "Debt", "Derivatives"],
                },
            },
        },
    },
    "globalValidations": [
        {
            "name": "Data Quality",
            "description": "No cell should contain only whitespace",
            "expression": "NO_WHITESPACE_ONLY_CELLS()",
            "severity": "warning",
        },
    ],
}


def example_document() -> Dict[str, Any]:
    """Return a fresh copy of the example rules document."""
    return copy.deepcopy(_EXAMPLE_DOCUMENT)


def render_example(fmt: str) -> bytes:
    """
    Render the example rules in the given format.

    Raises:
        ValueError: if the format is unknown
    """
    if fmt not in EXAMPLE_FORMATS:
        raise ValueError(f"Unknown example format: {fmt}")

    document = example_document()
    if fmt == "json":
        return json.dumps(document, indent=2).encode("utf-8")
    if fmt == "yaml":
        return yaml.safe_dump(document, sort_keys=False, allow_unicode=True).encode("utf-8")
    if fmt == "csv":
        return _render_csv(document)
    if fmt == "xlsx":
        return _render_workbook(document)
    return _render_legacy(document)


# ============================================================================
# PRIVATE HELPERS
# ============================================================================

def _iter_columns(document: Dict[str, Any]):
    for sheet_name, sheet in document["sheetValidations"].items():
        for column, constraints in sheet.get("columnValidations", {}).items():
            yield sheet_name, column, constraints


def _iter_cross_field(document: Dict[str, Any]):
    for sheet_name, sheet in document["sheetValidations"].items():
        for entry in sheet.get("crossFieldValidations", []):
            yield sheet_name, entry


def _render_csv(document: Dict[str, Any]) -> bytes:
    rows: List[Dict[str, Any]] = []

    for sheet_name, column, constraints in _iter_columns(document):
        rows.append({
            "RuleType": "column",
            "SheetName": sheet_name,
            "Column": column,
            "ApplyToAllRows": "true",
            "DataType": constraints.get("dataType", ""),
            "Required": "true" if constraints.get("required") else "",
            "MinLength": constraints.get("minLength", ""),
            "MaxLength": constraints.get("maxLength", ""),
            "Minimum": constraints.get("minimum", ""),
            "Maximum": constraints.get("maximum", ""),
            "Pattern": constraints.get("pattern", ""),
            "EnumValues": ", ".join(constraints.get("enumValues", [])),
        })

    # Positional addressing examples
    rows.append({
        "RuleType": "cell", "SheetName": "Annexure 1", "Column": "B", "Row": "1",
        "Required": "true", "Description": "Report header cell B1 must be filled",
    })
    rows.append({
        "RuleType": "range", "SheetName": "Annexure 1", "ColumnRange": "A-C", "RowRange": "2-5",
        "Required": "true", "Description": "Block A2:C5 must be complete",
    })

    for sheet_name, entry in _iter_cross_field(document):
        rows.append({
            "RuleType": "cross_field",
            "SheetName": sheet_name,
            "Expression": entry["expression"],
            "Description": entry.get("description", ""),
            "Severity": entry.get("severity", DEFAULT_SEVERITY),
        })

    for entry in document.get("globalValidations", []):
        rows.append({
            "RuleType": "global",
            "Expression": entry["expression"],
            "Description": entry.get("description", ""),
            "Severity": entry.get("severity", DEFAULT_SEVERITY),
        })

    df = pd.DataFrame(rows, columns=CSV_COLUMN_ORDER).fillna("").astype(str)
    return df.to_csv(index=False).encode("utf-8")


def _render_workbook(document: Dict[str, Any]) -> bytes:
    manager = RulesWorkbookManager()
    manager.create_new_workbook()

    manager.update_sheet_data(METADATA_SHEET, [
        [METADATA_LABELS.get(key, key), value]
        for key, value in document["metadata"].items()
    ])

    manager.update_sheet_data(COLUMN_VALIDATIONS_SHEET, [
        [
            sheet_name,
            column,
            constraints.get("dataType"),
            bool(constraints.get("required")),
            constraints.get("minLength"),
            constraints.get("maxLength"),
            constraints.get("minimum"),
            constraints.get("maximum"),
            ", ".join(constraints["enumValues"]) if constraints.get("enumValues") else None,
            constraints.get("pattern"),
        ]
        for sheet_name, column, constraints in _iter_columns(document)
    ])

    cross_field_rows = [
        [entry.get("name"), entry.get("description"), entry["expression"], entry.get("severity"), sheet_name]
        for sheet_name, entry in _iter_cross_field(document)
    ]
    # Blank Applicable Sheets compiles to a submission-wide rule
    cross_field_rows.extend(
        [entry.get("name"), entry.get("description"), entry["expression"], entry.get("severity"), None]
        for entry in document.get("globalValidations", [])
    )
    manager.update_sheet_data(CROSS_FIELD_VALIDATIONS_SHEET, cross_field_rows)

    return manager.save_to_bytes()


def _render_legacy(document: Dict[str, Any]) -> bytes:
    lines = [
        "# Legacy validation rules: one field:condition per line",
        f"# {document['metadata'].get('templateName', '')}",
    ]
    for sheet_name, column, constraints in _iter_columns(document):
        if constraints.get("required"):
            lines.append(f"{sheet_name}.{column}:NOT_EMPTY")
        if constraints.get("pattern"):
            lines.append(f'{sheet_name}.{column}:REGEX("{constraints["pattern"]}")')
    lines.append("B5:VALUE > 100 AND VALUE < 1000")
    return ("\n".join(lines) + "\n").encode("utf-8")


__all__ = [
    "EXAMPLE_FORMATS",
    "example_document",
    "render_example",
]
