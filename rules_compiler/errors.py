"""
Exception hierarchy for the rules compiler.

- RuleCompilerError: base class, message is safe to show to the uploader
- UnsupportedFormatError: file extension is not one of the known formats
- StructuralError: a required top-level key is missing or has the wrong shape
- RowParseError: a single CSV row, workbook row or text line could not be read
- RuleFileIOError: the file could not be read or decoded

Only UnsupportedFormatError and RuleFileIOError are raised; structural and
row problems are recorded on the result and compilation carries on.
"""

from typing import Optional


class RuleCompilerError(Exception):
    """Base exception for the rules compiler."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnsupportedFormatError(RuleCompilerError):
    """Raised when no adapter is registered for a file extension."""

    def __init__(self, extension: str):
        super().__init__(f"Unsupported file format: {extension or '<none>'}")
        self.extension = extension


class StructuralError(RuleCompilerError):
    """A rules document is missing a required key or a section has the wrong shape."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key


class RowParseError(RuleCompilerError):
    """
    A single record could not be turned into a rule.

    Row-based sources pass the 1-based row number; line-based sources pass
    the raw text instead.
    """

    def __init__(self, reason: str = "", row: Optional[int] = None, text: Optional[str] = None):
        if row is not None:
            message = f"Row {row}: {reason}"
        elif text is not None:
            message = f"Failed to parse line: {text}"
        else:
            message = reason
        super().__init__(message)
        self.reason = reason
        self.row = row
        self.text = text


class RuleFileIOError(RuleCompilerError):
    """Raised when a rules file is unreadable or malformed at the byte level."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path
        self.reason = reason


__all__ = [
    "RuleCompilerError",
    "UnsupportedFormatError",
    "StructuralError",
    "RowParseError",
    "RuleFileIOError",
]
