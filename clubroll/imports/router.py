"""Imports API routes."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status
from fastapi.responses import Response, StreamingResponse

from clubroll.config import Settings, get_settings
from clubroll.dependencies import DbSession
from clubroll.imports.parsers import generate_csv_template
from clubroll.imports.schemas import ImportValidationResult
from clubroll.imports.service import ImportFileError, ImportService, format_sse, read_lines
from clubroll.members.repository import MemberRepository

logger = logging.getLogger(__name__)

router = APIRouter()


def _read_upload_lines(file: UploadFile, max_bytes: int) -> list[str]:
    """Read an uploaded file into lines, enforcing the size limit.

    Args:
        file: Uploaded file.
        max_bytes: Largest accepted size.

    Returns:
        list[str]: File lines, header first.

    Raises:
        HTTPException: If the file is too large, empty or has no data rows.
    """
    content = file.file.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds the {max_bytes // (1024 * 1024)} MB upload limit.",
        )

    try:
        return read_lines(content)
    except ImportFileError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e


@router.get("/import/template")
async def download_template():
    """Download a DONMAN-format CSV template.

    Returns:
        Response: CSV file download.
    """
    return Response(
        content=generate_csv_template(),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=donman_import_template.csv"},
    )


@router.post("/import/validate")
async def validate_import(
    file: Annotated[UploadFile, File(description="DONMAN export (CSV or TSV)")],
    db: DbSession,
    settings: Annotated[Settings, Depends(get_settings)],
) -> ImportValidationResult:
    """Validate a DONMAN export without importing it.

    Args:
        file: Uploaded export file.
        db: Database session.
        settings: Application settings.

    Returns:
        ImportValidationResult: Counts, skipped duplicates and every row error.

    Raises:
        HTTPException: If the file is too large, empty or has no data rows.
    """
    lines = _read_upload_lines(file, settings.import_max_upload_bytes)
    logger.info(f"Validating import file {file.filename!r} ({len(lines) - 1} data lines)")

    service = ImportService(MemberRepository(db), batch_size=settings.import_batch_size)
    return service.validate(lines)


@router.post("/import/execute")
async def execute_import(
    file: Annotated[UploadFile, File(description="DONMAN export (CSV or TSV)")],
    db: DbSession,
    settings: Annotated[Settings, Depends(get_settings)],
) -> StreamingResponse:
    """Import a DONMAN export, streaming progress as server-sent events.

    The stream carries "progress" events followed by one "complete" event,
    or a single "error" event if the file fails validation or saving fails.

    Args:
        file: Uploaded export file.
        db: Database session.
        settings: Application settings.

    Returns:
        StreamingResponse: text/event-stream of import events.

    Raises:
        HTTPException: If the file is too large, empty or has no data rows.
    """
    lines = _read_upload_lines(file, settings.import_max_upload_bytes)
    logger.info(f"Importing file {file.filename!r} ({len(lines) - 1} data lines)")

    service = ImportService(MemberRepository(db), batch_size=settings.import_batch_size)

    def event_stream():
        for event in service.execute(lines):
            yield format_sse(event)
            if event.is_terminal:
                break

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
