"""
Spreadsheet builders for import tests.
"""
import io
from typing import Any, Sequence

from openpyxl import Workbook


def build_workbook(rows: Sequence[Sequence[Any]], title: str = "Hoja1") -> bytes:
    """Write ``rows`` to the first sheet of a new workbook and return the .xlsx bytes."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = title
    for row in rows:
        sheet.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def xlsx_upload(rows: Sequence[Sequence[Any]], filename: str = "import.xlsx") -> dict:
    """``files=`` argument for TestClient multipart uploads."""
    return {
        "file": (
            filename,
            build_workbook(rows),
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    }
