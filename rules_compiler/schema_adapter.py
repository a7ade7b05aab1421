"""
Schema-document adapter (JSON).

A rules document has three top-level keys:

    metadata:           template name, version, author, description
    sheetValidations:   {sheet name: {columnValidations, crossFieldValidations}}
    globalValidations:  [{name, description, expression, severity}]

``build_rules_from_document`` works on an already-parsed object and is shared
with the YAML adapter, so neither format needs a round trip through disk.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Any

from .base import (
    GLOBAL_FIELD,
    DEFAULT_SEVERITY,
    ValidationRule,
    ParsedValidationRules,
    get_str_value,
    normalize_metadata,
    normalize_severity,
)
from .conditions import synthesize_column
from .errors import StructuralError, RuleFileIOError

logger = logging.getLogger(__name__)


# ============================================================================
# DOCUMENT COMPILATION
# ============================================================================

def build_rules_from_document(document: Any, template_id: int) -> ParsedValidationRules:
    """
    Compile a parsed rules document into canonical rules.

    Partial success: a missing ``sheetValidations`` section records an error
    and returns the metadata anyway; a malformed sheet or column is reported
    and skipped while the rest of the document is still compiled.

    Args:
        document: Parsed JSON/YAML object
        template_id: Owning report template, passed through to every rule

    Returns:
        ParsedValidationRules
    """
    result = ParsedValidationRules()

    if not isinstance(document, dict):
        result.add_error(StructuralError("Rules document must be a mapping of sections"))
        return result

    result.metadata = normalize_metadata(document.get("metadata"))

    sheet_validations = document.get("sheetValidations")
    if sheet_validations is None:
        result.add_error(StructuralError("Missing sheetValidations in JSON Schema", key="sheetValidations"))
        return result
    if not isinstance(sheet_validations, dict):
        result.add_error(StructuralError("sheetValidations must be a mapping of sheet names", key="sheetValidations"))
        return result

    for sheet_name, sheet_rules in sheet_validations.items():
        sheet_name = str(sheet_name)
        if not isinstance(sheet_rules, dict):
            result.add_error(StructuralError(f"Validations for sheet '{sheet_name}' must be a mapping", key=sheet_name))
            continue
        _compile_column_validations(result, sheet_name, sheet_rules.get("columnValidations"), template_id)
        _compile_cross_field_validations(result, sheet_name, sheet_rules.get("crossFieldValidations"), template_id)

    _compile_global_validations(result, document.get("globalValidations"), template_id)

    return result


def parse_json_file(file_path: str, template_id: int) -> ParsedValidationRules:
    """Read a JSON rules document and compile it."""
    path = Path(file_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            document = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise RuleFileIOError(path.name, str(e)) from e

    result = build_rules_from_document(document, template_id)
    logger.debug("Compiled %d rules from %s", result.rule_count, path.name)
    return result


# ============================================================================
# PRIVATE HELPERS
# ============================================================================

def _compile_column_validations(
    result: ParsedValidationRules,
    sheet_name: str,
    column_validations: Any,
    template_id: int
):
    """Emit one rule per populated constraint of every column."""
    if column_validations is None:
        return
    if not isinstance(column_validations, dict):
        result.add_error(StructuralError(
            f"columnValidations for sheet '{sheet_name}' must be a mapping", key="columnValidations"
        ))
        return

    for column, constraints in column_validations.items():
        column = str(column)
        if not isinstance(constraints, dict):
            result.add_error(StructuralError(
                f"Constraints for column '{column}' in sheet '{sheet_name}' must be a mapping", key=column
            ))
            continue

        for synthesized in synthesize_column(column, sheet_name, constraints):
            result.add_rule(ValidationRule(
                template_id=template_id,
                field=f"{sheet_name}.{column}",
                rule_type=synthesized.rule_type,
                condition=synthesized.condition,
                error_message=synthesized.error_message,
            ))


def _compile_cross_field_validations(
    result: ParsedValidationRules,
    sheet_name: str,
    cross_field_validations: Any,
    template_id: int
):
    """Cross-field rules are scoped to the sheet, so the field is the sheet name."""
    for entry in _as_entries(result, cross_field_validations, f"crossFieldValidations of sheet '{sheet_name}'"):
        rule = _expression_rule(
            result, entry, template_id,
            field=sheet_name,
            rule_type="crossField",
            fallback_message=f"Cross-field validation failed in {sheet_name}",
            location=f"sheet '{sheet_name}'",
        )
        if rule:
            result.add_rule(rule)


def _compile_global_validations(result: ParsedValidationRules, global_validations: Any, template_id: int):
    """Global rules apply to the whole submission."""
    for entry in _as_entries(result, global_validations, "globalValidations"):
        rule = _expression_rule(
            result, entry, template_id,
            field=GLOBAL_FIELD,
            rule_type="global",
            fallback_message="Global validation failed",
            location="globalValidations",
        )
        if rule:
            result.add_rule(rule)


def _as_entries(result: ParsedValidationRules, section: Any, label: str) -> List[Dict[str, Any]]:
    """Return the mapping entries of a list section, reporting anything else."""
    if section is None:
        return []
    if not isinstance(section, list):
        result.add_error(StructuralError(f"{label} must be a list"))
        return []

    entries = []
    for index, entry in enumerate(section, 1):
        if isinstance(entry, dict):
            entries.append(entry)
        else:
            result.add_error(StructuralError(f"Entry {index} of {label} must be a mapping"))
    return entries


def _expression_rule(
    result: ParsedValidationRules,
    entry: Dict[str, Any],
    template_id: int,
    field: str,
    rule_type: str,
    fallback_message: str,
    location: str,
):
    """Build a cross-field or global rule from an {expression, description, name, severity} entry."""
    name = get_str_value(entry, "name")
    expression = get_str_value(entry, "expression")
    if expression is None:
        result.add_error(StructuralError(
            f"Validation '{name or '<unnamed>'}' in {location} has no expression", key="expression"
        ))
        return None

    severity = normalize_severity(entry.get("severity"))
    if severity is None:
        result.add_error(StructuralError(
            f"Validation '{name or expression}' in {location} has invalid severity "
            f"'{entry.get('severity')}', using '{DEFAULT_SEVERITY}'",
            key="severity",
        ))
        severity = DEFAULT_SEVERITY

    return ValidationRule(
        template_id=template_id,
        field=field,
        rule_type=rule_type,
        condition=expression,
        error_message=get_str_value(entry, "description") or name or fallback_message,
        severity=severity,
    )


__all__ = [
    "build_rules_from_document",
    "parse_json_file",
]
