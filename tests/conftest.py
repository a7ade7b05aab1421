"""Shared test fixtures for the rules compiler tests.

Provides factories that write rule files of every format into a
temporary directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import openpyxl
import pytest


@pytest.fixture
def write_rules_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Factory writing text content to a file in tmp_path.

    Returns:
        Callable taking (file name, content) and returning the file path.
    """

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_workbook(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing an xlsx workbook from {sheet name: rows}.

    Rows are written as-is, so the first row of each sheet is its header.
    """

    def _write(sheets: dict[str, list[list[Any]]], name: str = "rules.xlsx") -> Path:
        workbook = openpyxl.Workbook()
        del workbook["Sheet"]
        for sheet_name, rows in sheets.items():
            ws = workbook.create_sheet(sheet_name)
            for row in rows:
                ws.append(row)
        path = tmp_path / name
        workbook.save(path)
        return path

    return _write
