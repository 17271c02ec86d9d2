"""
Helpers shared by the API routers: upload reading and error translation.
"""
import logging
from contextlib import contextmanager
from typing import Any, Dict, List

from fastapi import HTTPException, UploadFile, status

from backoffice.core.exceptions import BackofficeError, ImportFormatError
from backoffice.domain.imports.processors.spreadsheet_processor import read_spreadsheet_grid
from backoffice.utils.serialization import make_json_safe

logger = logging.getLogger(__name__)


def to_http_exception(exc: BackofficeError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


@contextmanager
def domain_errors():
    """Translate domain exceptions raised inside the block into HTTP errors."""
    try:
        yield
    except HTTPException:
        raise
    except BackofficeError as e:
        if e.status_code >= 500:
            logger.error("Request failed: %s", e.message, exc_info=e.original_error)
        raise to_http_exception(e)


async def read_upload(file: UploadFile, max_bytes: int) -> bytes:
    """
    Read an uploaded file, refusing anything above ``max_bytes``.

    Raises:
        ImportFormatError: 413 when the file is too large, 400 when it is empty
    """
    content = await file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise ImportFormatError(
            f"File is larger than the {max_bytes // (1024 * 1024)} MiB upload limit",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )
    if not content:
        raise ImportFormatError("Uploaded file is empty")
    return content


async def read_upload_grid(file: UploadFile, max_bytes: int) -> List[List[Any]]:
    content = await read_upload(file, max_bytes)
    return read_spreadsheet_grid(content, file.filename or "")


def serialize_records(records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [make_json_safe(record) for record in records]
