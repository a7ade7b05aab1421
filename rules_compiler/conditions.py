"""
Condition synthesis for column constraints.

Turns a structured constraint such as ``minLength: 5`` into a condition string
of the evaluator's DSL (``LENGTH >= 5``) and a default error message. Every
adapter goes through here, so a column that is "required" in a YAML file, a CSV
row or a workbook row compiles to the same rule.

Each populated constraint produces its own rule; a column with both
``required`` and ``dataType`` yields two rules, never a compound one.
"""

from typing import Dict, List, Any
from dataclasses import dataclass

from .base import NOT_EMPTY, convert_string_to_bool, format_value, is_empty


# Fixed emission order for a column's constraints
CONSTRAINT_ORDER = [
    "required", "dataType", "minLength", "maxLength",
    "minimum", "maximum", "pattern", "enum",
]

# Alternate document keys accepted for a constraint
CONSTRAINT_ALIASES = {
    "enum": ["enum", "enumValues"],
}


@dataclass(frozen=True)
class SynthesizedCondition:
    """Rule type, condition and default message for one constraint."""
    rule_type: str
    condition: str
    error_message: str


def quote_literal(text: str) -> str:
    """Wrap text in double quotes, escaping embedded ones as \\"."""
    return '"' + text.replace('"', '\\"') + '"'


def split_enum_values(value: Any) -> List[str]:
    """Accept a list or a comma-separated string; return trimmed, non-blank values."""
    if isinstance(value, (list, tuple)):
        items = [format_value(v) for v in value if not is_empty(v)]
    else:
        items = format_value(value).split(",")
    return [item.strip() for item in items if item.strip()]


def synthesize(constraint: str, value: Any, column: str, sheet: str = "") -> SynthesizedCondition:
    """
    Build the condition and default message for a single constraint.

    Args:
        constraint: One of CONSTRAINT_ORDER
        value: Constraint value as found in the source
        column: Column label used in messages
        sheet: Sheet name used in the required message

    Returns:
        SynthesizedCondition

    Raises:
        ValueError: if the constraint name is unknown
    """
    if constraint == "required":
        return SynthesizedCondition(
            "required", NOT_EMPTY, f"{column} is required in {sheet}"
        )

    if constraint == "dataType":
        data_type = format_value(value).strip()
        return SynthesizedCondition(
            "dataType", f"TYPE_IS_{data_type.upper()}", f"{column} must be of type {data_type}"
        )

    if constraint == "pattern":
        pattern = format_value(value)
        return SynthesizedCondition(
            "pattern", f"REGEX({quote_literal(pattern)})", f"{column} format is invalid"
        )

    if constraint == "enum":
        values = split_enum_values(value)
        quoted = ", ".join(quote_literal(v) for v in values)
        return SynthesizedCondition(
            "enum", f"VALUE IN [{quoted}]", f"{column} must be one of: {', '.join(values)}"
        )

    number = format_value(value).strip()
    if constraint == "minLength":
        return SynthesizedCondition(
            "minLength", f"LENGTH >= {number}", f"{column} must be at least {number} characters"
        )
    if constraint == "maxLength":
        return SynthesizedCondition(
            "maxLength", f"LENGTH <= {number}", f"{column} must not exceed {number} characters"
        )
    if constraint == "minimum":
        return SynthesizedCondition(
            "minimum", f"VALUE >= {number}", f"{column} must be at least {number}"
        )
    if constraint == "maximum":
        return SynthesizedCondition(
            "maximum", f"VALUE <= {number}", f"{column} must not exceed {number}"
        )

    raise ValueError(f"Unknown constraint: {constraint}")


def _lookup(constraints: Dict[str, Any], constraint: str) -> Any:
    for key in CONSTRAINT_ALIASES.get(constraint, [constraint]):
        if key in constraints:
            return constraints[key]
    return None


def is_populated(constraint: str, value: Any) -> bool:
    """Check whether a constraint value should produce a rule."""
    if constraint == "required":
        return convert_string_to_bool(value)
    if constraint == "enum":
        return not is_empty(value) and len(split_enum_values(value)) > 0
    if isinstance(value, bool):
        # A bare true/false is not a usable length, bound or pattern
        return False
    return not is_empty(value)


def synthesize_column(column: str, sheet: str, constraints: Dict[str, Any]) -> List[SynthesizedCondition]:
    """Synthesize one condition per populated constraint, in CONSTRAINT_ORDER."""
    synthesized = []
    for constraint in CONSTRAINT_ORDER:
        value = _lookup(constraints, constraint)
        if is_populated(constraint, value):
            synthesized.append(synthesize(constraint, value, column, sheet))
    return synthesized


__all__ = [
    "CONSTRAINT_ORDER",
    "SynthesizedCondition",
    "synthesize",
    "synthesize_column",
    "split_enum_values",
    "quote_literal",
    "is_populated",
]
