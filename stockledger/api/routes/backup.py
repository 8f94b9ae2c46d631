"""Backup export/import endpoints."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from stockledger.api.dependencies import (
    get_app_settings,
    get_export_use_case,
    get_import_use_case,
)
from stockledger.application.dto.responses import ErrorResponse, ImportBackupResponse
from stockledger.application.use_cases import ExportBackupUseCase, ImportBackupUseCase
from stockledger.config import Settings
from stockledger.core.exceptions import BackupTooLargeError

router = APIRouter(prefix="/api/backup", tags=["backup"])


async def _read_body(request: Request, max_bytes: int) -> bytes:
    """Read the request body, stopping as soon as it passes max_bytes."""
    declared = request.headers.get("content-length", "")
    if declared.isdigit() and int(declared) > max_bytes:
        raise BackupTooLargeError(int(declared), max_bytes)

    body = bytearray()
    async for chunk in request.stream():
        body.extend(chunk)
        if len(body) > max_bytes:
            raise BackupTooLargeError(len(body), max_bytes)
    return bytes(body)


@router.get("/export")
async def export_backup(
    use_case: ExportBackupUseCase = Depends(get_export_use_case),
) -> Response:
    """Download the full dataset as a JSON snapshot."""
    backup = await use_case.execute()
    return Response(
        content=backup.content,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{backup.filename}"'},
    )


@router.post(
    "/import",
    response_model=ImportBackupResponse,
    responses={422: {"model": ErrorResponse}},
)
async def import_backup(
    request: Request,
    use_case: ImportBackupUseCase = Depends(get_import_use_case),
    settings: Settings = Depends(get_app_settings),
) -> ImportBackupResponse:
    """
    Replace all data with the snapshot in the request body.

    The body is the raw JSON produced by /api/backup/export. Nothing is
    changed unless the whole snapshot validates. Bodies over the configured
    size limit are refused without being read in full.
    """
    raw = await _read_body(request, settings.backup.max_size_bytes)
    result = await use_case.execute(raw)
    return ImportBackupResponse(
        schema_version=result.schema_version,
        exported_at=result.exported_at,
        products=result.products,
        movements=result.movements,
        photos=result.photos,
    )
