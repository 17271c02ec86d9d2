import io

import pytest
from openpyxl import Workbook
from openpyxl.cell.rich_text import CellRichText, TextBlock
from openpyxl.cell.text import InlineFont

from backoffice.core.exceptions import ImportFormatError
from backoffice.domain.imports.processors.spreadsheet_processor import (
    detect_file_type,
    read_csv_grid,
    read_excel_grid,
    read_spreadsheet_grid,
)
from tests.utils.workbooks import build_workbook


@pytest.mark.parametrize("filename, expected", [
    ("catalog.xlsx", "excel"),
    ("CATALOG.XLSX", "excel"),
    ("macro.xlsm", "excel"),
    ("export.csv", "csv"),
])
def test_detect_file_type(filename, expected):
    assert detect_file_type(filename) == expected


@pytest.mark.parametrize("filename", ["legacy.xls", "data.json", "noextension", ""])
def test_detect_file_type_rejects_other_files(filename):
    with pytest.raises(ImportFormatError):
        detect_file_type(filename)


def test_excel_grid_keeps_positions_of_blank_rows():
    content = build_workbook([
        ["Descripción", "Código"],
        ["Exento", 1],
        [],
        ["General", 13],
    ])
    grid = read_excel_grid(content)
    assert grid[0] == ["Descripción", "Código"]
    assert grid[1] == ["Exento", 1]
    assert grid[2] == [None, None]
    assert grid[3] == ["General", 13]


def test_excel_grid_reads_only_the_first_sheet():
    workbook = Workbook()
    workbook.active.append(["codigo"])
    workbook.active.append([1])
    other = workbook.create_sheet("Otra")
    other.append(["ignored"])
    buffer = io.BytesIO()
    workbook.save(buffer)

    assert read_excel_grid(buffer.getvalue()) == [["codigo"], [1]]


def test_excel_grid_keeps_rich_text():
    workbook = Workbook()
    workbook.active["A1"] = CellRichText(["Prov", TextBlock(InlineFont(i=True), "incia")])
    buffer = io.BytesIO()
    workbook.save(buffer)

    cell = read_excel_grid(buffer.getvalue())[0][0]
    assert str(cell) == "Provincia"


def test_corrupt_workbook_is_a_format_error():
    with pytest.raises(ImportFormatError) as exc_info:
        read_excel_grid(b"not a zip file")
    assert "Excel" in exc_info.value.message


def test_csv_grid_keeps_every_cell_as_text():
    content = "descripcion,codigo\nExento,01\nGeneral,\"13,0\"\n".encode("utf-8")
    assert read_csv_grid(content) == [
        ["descripcion", "codigo"],
        ["Exento", "01"],
        ["General", "13,0"],
    ]


def test_csv_grid_sniffs_semicolons_and_strips_bom():
    content = "\ufeffdescripcion;codigo\nExento;1\n".encode("utf-8")
    assert read_csv_grid(content) == [["descripcion", "codigo"], ["Exento", "1"]]


def test_csv_grid_falls_back_to_latin1():
    content = "descripcion,codigo\nCódigo,1\n".encode("latin-1")
    assert read_csv_grid(content)[1] == ["Código", "1"]


def test_empty_csv_gives_empty_grid():
    assert read_csv_grid(b"  \n") == []


def test_dispatch_by_extension():
    assert read_spreadsheet_grid(b"codigo\n1\n", "tarifas.csv") == [["codigo"], ["1"]]
    with pytest.raises(ImportFormatError):
        read_spreadsheet_grid(b"codigo\n1\n", "tarifas.txt")
