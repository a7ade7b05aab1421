"""
Format dispatcher: the compiler's public entry point.

The adapter is chosen from the file extension alone (no content sniffing).
Any failure inside an adapter is contained here and returned as an empty
result carrying the reason; ``compile_rules_file`` never raises.
"""

import logging
from pathlib import Path
from typing import Callable, Dict

from .base import ParsedValidationRules
from .csv_adapter import parse_csv_file
from .errors import UnsupportedFormatError
from .legacy_adapter import parse_legacy_file
from .schema_adapter import parse_json_file
from .workbook_adapter import parse_workbook_file
from .yaml_adapter import parse_yaml_file

logger = logging.getLogger(__name__)

Adapter = Callable[[str, int], ParsedValidationRules]

# Extension -> format name
SUPPORTED_EXTENSIONS: Dict[str, str] = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".csv": "csv",
    ".xlsx": "workbook",
    ".xls": "workbook",
    ".txt": "legacy",
}

# Format name -> adapter
ADAPTERS: Dict[str, Adapter] = {
    "json": parse_json_file,
    "yaml": parse_yaml_file,
    "csv": parse_csv_file,
    "workbook": parse_workbook_file,
    "legacy": parse_legacy_file,
}


def detect_format(file_path: str) -> str:
    """
    Return the format name for a file path.

    Raises:
        UnsupportedFormatError: if the extension is not supported
    """
    extension = Path(file_path).suffix.lower()
    if extension not in SUPPORTED_EXTENSIONS:
        raise UnsupportedFormatError(extension)
    return SUPPORTED_EXTENSIONS[extension]


def compile_rules_file(file_path: str, template_id: int) -> ParsedValidationRules:
    """
    Compile a validation rules file into canonical rules.

    Args:
        file_path: Path to an already-persisted rules file
        template_id: Owning report template, copied onto every rule

    Returns:
        ParsedValidationRules. On failure: no rules, no metadata, and the
        reason in ``errors``.
    """
    try:
        fmt = detect_format(file_path)
        logger.debug("Compiling %s as %s rules", Path(file_path).name, fmt)
        return ADAPTERS[fmt](str(file_path), template_id)
    except Exception as e:
        logger.warning("Failed to compile rules file %s: %s", file_path, e, exc_info=True)
        return ParsedValidationRules(
            rules=[],
            metadata={},
            errors=[f"Failed to parse validation file: {e}"],
        )


# Short alias for the entry point
compile = compile_rules_file


__all__ = [
    "SUPPORTED_EXTENSIONS",
    "ADAPTERS",
    "detect_format",
    "compile_rules_file",
    "compile",
]
