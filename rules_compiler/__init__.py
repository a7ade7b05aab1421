"""
Multi-Format Validation Rules Compiler for Regulatory Report Templates.

This package compiles validation rule files authored in five formats into one
canonical list of rules that the submission evaluator executes:
- JSON schema document (metadata / sheetValidations / globalValidations)
- YAML, same sections as JSON
- CSV, one row per rule definition with a RuleType discriminator
- Excel workbook with Metadata / Column Validations / Cross-Field Validations sheets
- Legacy text, one field:condition per line

Usage:
    from rules_compiler import compile_rules_file
    result = compile_rules_file("/uploads/rules.yaml", template_id=42)
    for rule in result.rules:
        print(rule.field, rule.condition)
    if result.has_errors:
        print(result.errors)

Compilation is best-effort: ``compile_rules_file`` never raises, and partial
results come back alongside the problems found.

Package Structure:
    - base.py: Shared constants, data classes, and helper functions
    - errors.py: Exception hierarchy
    - conditions.py: Constraint -> condition string and message
    - addressing.py: Column/Row/Range -> cell range normalization
    - schema_adapter.py, yaml_adapter.py, csv_adapter.py,
      workbook_adapter.py, legacy_adapter.py: one adapter per format
    - dispatcher.py: Extension-based adapter selection and failure boundary
    - examples.py: Example rule files in every format
"""

# Base module - constants, data classes, helpers
from .base import (
    # Data classes
    ValidationRule,
    ParsedValidationRules,

    # Constants
    GLOBAL_FIELD,
    DEFAULT_SEVERITY,
    SEVERITIES,
    RULE_TYPES,
    NOT_EMPTY,
    CSV_COLUMN_ORDER,

    # Helper functions
    normalize_metadata_key,
)

from .errors import (
    RuleCompilerError,
    UnsupportedFormatError,
    StructuralError,
    RowParseError,
    RuleFileIOError,
)

# Shared building blocks
from .conditions import (
    SynthesizedCondition,
    synthesize,
    synthesize_column,
)
from .addressing import (
    CellAddress,
    normalize_address,
)

# Format adapters
from .schema_adapter import build_rules_from_document, parse_json_file
from .yaml_adapter import parse_yaml_file
from .csv_adapter import build_rules_from_rows, parse_csv_file
from .workbook_adapter import parse_workbook_file
from .legacy_adapter import build_rules_from_lines, parse_legacy_file

# Entry point
from .dispatcher import (
    SUPPORTED_EXTENSIONS,
    detect_format,
    compile_rules_file,
)

from .examples import (
    EXAMPLE_FORMATS,
    example_document,
    render_example,
)


# ============================================================================
# PUBLIC API
# ============================================================================

__all__ = [
    # Data classes
    "ValidationRule",
    "ParsedValidationRules",

    # Constants
    "GLOBAL_FIELD",
    "DEFAULT_SEVERITY",
    "SEVERITIES",
    "RULE_TYPES",
    "NOT_EMPTY",
    "CSV_COLUMN_ORDER",
    "SUPPORTED_EXTENSIONS",
    "EXAMPLE_FORMATS",

    # Errors
    "RuleCompilerError",
    "UnsupportedFormatError",
    "StructuralError",
    "RowParseError",
    "RuleFileIOError",

    # Building blocks
    "SynthesizedCondition",
    "synthesize",
    "synthesize_column",
    "CellAddress",
    "normalize_address",
    "normalize_metadata_key",

    # Adapters
    "build_rules_from_document",
    "parse_json_file",
    "parse_yaml_file",
    "build_rules_from_rows",
    "parse_csv_file",
    "parse_workbook_file",
    "build_rules_from_lines",
    "parse_legacy_file",

    # Entry point
    "detect_format",
    "compile_rules_file",

    # Examples
    "example_document",
    "render_example",
]
