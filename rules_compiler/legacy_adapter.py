"""
Legacy text adapter.

Backward-compatible ``field:condition`` format, one rule per line. The first
colon is the delimiter; everything after it is the condition, verbatim.
Lines starting with ``#`` are comments and lines of three or more dashes
separate blocks; both are skipped. Every other line must hold a
``field:condition`` pair or it is reported.
"""

import logging
import re
from pathlib import Path
from typing import Iterable

from .base import ValidationRule, ParsedValidationRules
from .errors import RowParseError, RuleFileIOError

logger = logging.getLogger(__name__)

FIELD_DELIMITER = ":"
COMMENT_PREFIX = "#"
SEPARATOR_LINE = re.compile(r"^-{3,}$")


def parse_legacy_file(file_path: str, template_id: int) -> ParsedValidationRules:
    """Read a legacy text rules file and compile it line by line."""
    path = Path(file_path)
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise RuleFileIOError(path.name, str(e)) from e

    result = build_rules_from_lines(content.splitlines(), template_id)
    logger.debug("Compiled %d legacy rules from %s", result.rule_count, path.name)
    return result


def build_rules_from_lines(lines: Iterable[str], template_id: int) -> ParsedValidationRules:
    """Compile ``field:condition`` lines; unparseable lines are recorded, not raised."""
    result = ParsedValidationRules()

    for line in lines:
        text = line.strip()
        if not text or text.startswith(COMMENT_PREFIX) or SEPARATOR_LINE.match(text):
            continue

        field, delimiter, condition = text.partition(FIELD_DELIMITER)
        field, condition = field.strip(), condition.strip()
        if not delimiter or not field or not condition:
            result.add_error(RowParseError(text=text))
            continue

        result.add_rule(ValidationRule(
            template_id=template_id,
            field=field,
            rule_type="legacy",
            condition=condition,
            error_message=f"Validation failed for {field}",
        ))

    return result


__all__ = [
    "parse_legacy_file",
    "build_rules_from_lines",
]
