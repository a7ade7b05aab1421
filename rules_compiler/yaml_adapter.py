"""
YAML adapter.

YAML rule files use the same three sections as the JSON schema document.
The parsed object is handed straight to ``build_rules_from_document``.
"""

import logging
from pathlib import Path

import yaml

from .base import ParsedValidationRules
from .errors import StructuralError, RuleFileIOError
from .schema_adapter import build_rules_from_document

logger = logging.getLogger(__name__)

DOCUMENT_SECTIONS = ("metadata", "sheetValidations", "globalValidations")


def parse_yaml_file(file_path: str, template_id: int) -> ParsedValidationRules:
    """Read a YAML rules file and compile it in memory."""
    path = Path(file_path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        raise RuleFileIOError(path.name, str(e)) from e

    if not isinstance(config, dict):
        result = ParsedValidationRules()
        result.add_error(StructuralError("YAML rules file must contain a mapping at the top level"))
        return result

    document = {section: config.get(section) for section in DOCUMENT_SECTIONS}
    result = build_rules_from_document(document, template_id)
    logger.debug("Compiled %d rules from %s", result.rule_count, path.name)
    return result


__all__ = ["parse_yaml_file"]
