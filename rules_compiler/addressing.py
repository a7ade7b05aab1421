"""
Address normalization for row-oriented rule sources.

A CSV row may describe where a rule applies as a single cell (Column + Row),
a block (ColumnRange + RowRange) or an explicit CellRange. This module derives
the most specific ``cell_range`` it can while keeping the partial fields, so
the evaluator can fall back to column-only or row-only addressing.

References are not checked for well-formedness or against sheet bounds.
"""

from typing import Optional, Tuple
from dataclasses import dataclass

from .base import is_empty


RANGE_SEPARATOR = "-"


@dataclass(frozen=True)
class CellAddress:
    """Addressing fields of a rule after normalization."""
    column: Optional[str] = None
    row: Optional[str] = None
    column_range: Optional[str] = None
    row_range: Optional[str] = None
    cell_range: Optional[str] = None


def split_bounds(value: str) -> Tuple[str, str]:
    """Split "A-C" into ("A", "C"); a bound without a dash is its own start and end."""
    if RANGE_SEPARATOR in value:
        start, end = value.split(RANGE_SEPARATOR, 1)
        return start.strip(), end.strip()
    value = value.strip()
    return value, value


def _clean(value: Optional[str]) -> Optional[str]:
    if is_empty(value):
        return None
    return str(value).strip()


def normalize_address(
    column: Optional[str] = None,
    row: Optional[str] = None,
    column_range: Optional[str] = None,
    row_range: Optional[str] = None,
    cell_range: Optional[str] = None,
) -> CellAddress:
    """
    Derive a cell range from partial addressing fields.

    Precedence:
        1. explicit cell_range, unchanged
        2. column + row                  ("A", "1")     -> "A1"
        3. column_range + row_range      ("A-C", "2-5") -> "A2:C5"
        4. otherwise no cell_range

    Examples:
        >>> normalize_address(column="A", row="1").cell_range
        'A1'
        >>> normalize_address(column_range="B", row_range="5").cell_range
        'B5:B5'
    """
    column, row = _clean(column), _clean(row)
    column_range, row_range = _clean(column_range), _clean(row_range)
    explicit = _clean(cell_range)

    derived = None
    if explicit is not None:
        derived = explicit
    elif column is not None and row is not None:
        derived = f"{column}{row}"
    elif column_range is not None and row_range is not None:
        start_col, end_col = split_bounds(column_range)
        start_row, end_row = split_bounds(row_range)
        derived = f"{start_col}{start_row}:{end_col}{end_row}"

    return CellAddress(
        column=column,
        row=row,
        column_range=column_range,
        row_range=row_range,
        cell_range=derived,
    )


__all__ = [
    "CellAddress",
    "normalize_address",
    "split_bounds",
]
