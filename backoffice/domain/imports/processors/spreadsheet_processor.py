import io
import logging
from typing import Any, List

import pandas as pd
from openpyxl import load_workbook

from backoffice.core.exceptions import ImportFormatError

logger = logging.getLogger(__name__)

EXCEL_EXTENSIONS = (".xlsx", ".xlsm")
CSV_EXTENSIONS = (".csv",)
CSV_DELIMITERS = (",", ";", "\t")


def detect_file_type(filename: str) -> str:
    """
    Detect the spreadsheet flavour from the file extension.

    Returns:
        'excel' or 'csv'

    Raises:
        ImportFormatError: If the extension is not a supported spreadsheet
    """
    lowered = (filename or "").lower()
    if lowered.endswith(CSV_EXTENSIONS):
        return "csv"
    if lowered.endswith(EXCEL_EXTENSIONS):
        return "excel"
    raise ImportFormatError(
        f"Unsupported file type for '{filename}'; upload an .xlsx or .csv spreadsheet"
    )


def read_excel_grid(file_content: bytes) -> List[List[Any]]:
    """
    Read the first worksheet of an Excel workbook as a grid of raw cell values.

    Formulas are read as their cached results and rich text cells are kept as
    ``CellRichText`` so the ingestion step can flatten them. Row ``i`` of the
    grid is sheet row ``i + 1``, blank rows included.
    """
    try:
        workbook = load_workbook(io.BytesIO(file_content), data_only=True, rich_text=True)
    except Exception as e:
        raise ImportFormatError(f"Could not read Excel file: {str(e)}")

    try:
        if not workbook.worksheets:
            raise ImportFormatError("The Excel file does not contain any worksheet")
        worksheet = workbook.worksheets[0]
        grid = [list(row) for row in worksheet.iter_rows(min_row=1, values_only=True)]
    finally:
        workbook.close()

    logger.info("Read %d rows from worksheet '%s'", len(grid), worksheet.title)
    return grid


def _decode_csv(file_content: bytes) -> str:
    try:
        return file_content.decode("utf-8-sig")
    except UnicodeDecodeError:
        # Spreadsheets exported on Windows are usually cp1252/latin-1
        return file_content.decode("latin-1")


def _guess_delimiter(text: str) -> str:
    # Spanish-locale exports separate with semicolons
    header = next((line for line in text.splitlines() if line.strip()), "")
    return max(CSV_DELIMITERS, key=header.count) if header else ","


def read_csv_grid(file_content: bytes) -> List[List[Any]]:
    """
    Read a CSV file as a grid of strings without treating any row as a header.

    The delimiter is taken from the header line, so semicolon-separated
    exports work as well. Blank lines are kept so grid positions match file line numbers.
    """
    text = _decode_csv(file_content)
    if not text.strip():
        return []

    try:
        df = pd.read_csv(
            io.StringIO(text),
            header=None,
            dtype=str,
            keep_default_na=False,
            skip_blank_lines=False,
            sep=_guess_delimiter(text),
        )
    except pd.errors.EmptyDataError:
        return []
    except (pd.errors.ParserError, ValueError) as e:
        raise ImportFormatError(f"Could not read CSV file: {str(e)}")

    grid = df.values.tolist()
    logger.info("Read %d rows from CSV file", len(grid))
    return grid


def read_spreadsheet_grid(file_content: bytes, filename: str) -> List[List[Any]]:
    """Dispatch to the reader matching the uploaded file's extension."""
    file_type = detect_file_type(filename)
    if file_type == "csv":
        return read_csv_grid(file_content)
    return read_excel_grid(file_content)
