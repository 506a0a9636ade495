from __future__ import annotations

from pathlib import Path
from typing import Iterable
from uuid import uuid4

from openpyxl import Workbook


def _next_path(tmp_path: Path, prefix: str) -> Path:
    return tmp_path / f"{prefix}_{uuid4().hex}.xlsx"


def make_single_table_xlsx(
    tmp_path: Path,
    headers: Iterable[object],
    rows: Iterable[Iterable[object]],
    sheet: str = "Sheet1",
    title: str | None = None,
) -> Path:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = sheet

    if title:
        worksheet.append([title])
    worksheet.append(list(headers))
    for row in rows:
        worksheet.append(list(row))

    path = _next_path(tmp_path, "roster")
    workbook.save(path)
    return path
