"""Dive log import/export endpoints.

Import is two-step: ``/dives/import/preview`` parses an upload and reports
title collisions and integrity warnings; ``/dives/import`` commits, but only
renames colliding titles when called with ``confirm=true``.
"""

from typing import Annotated, Any

import structlog
from litestar import Router, get, post
from litestar.datastructures import UploadFile
from litestar.enums import RequestEncodingType
from litestar.exceptions import ValidationException
from litestar.params import Body, Parameter
from litestar.response import Response
from litestar.status_codes import HTTP_200_OK, HTTP_201_CREATED, HTTP_409_CONFLICT
from sqlalchemy.ext.asyncio import AsyncSession

from scuba_log_server.core.config import settings
from scuba_log_server.interchange.errors import ContentFormatError
from scuba_log_server.interchange.units import UnitSystem
from scuba_log_server.services.interchange import (
    ImportPreview,
    InterchangeFormat,
    InterchangeService,
)
from scuba_log_server.services.repository import SqlDiveRepository

logger = structlog.get_logger()

UploadBody = Annotated[UploadFile, Body(media_type=RequestEncodingType.MULTI_PART)]


def _preview_payload(preview: ImportPreview) -> dict[str, Any]:
    return {
        "filename": preview.filename,
        "format": preview.format.value,
        "records": len(preview.records),
        "conflicts": sorted(preview.conflicts),
        "renames": [
            {"position": r.position, "original": r.original, "renamed": r.renamed}
            for r in preview.renames
        ],
        "warnings": preview.warnings,
    }


async def _preview_upload(data: UploadFile, service: InterchangeService) -> ImportPreview:
    content = await data.read()
    if len(content) > settings.max_import_bytes:
        raise ValidationException(
            detail=f"File is larger than {settings.max_import_bytes} bytes",
        )
    try:
        return await service.preview_import(data.filename or "upload.csv", content)
    except ContentFormatError as exc:
        logger.warning("Import rejected", filename=data.filename, error=str(exc))
        raise ValidationException(detail=str(exc)) from exc


@post("/dives/import/preview", status_code=HTTP_200_OK)
async def preview_import(data: UploadBody, session: AsyncSession) -> dict[str, Any]:
    """Parse an uploaded CSV or UDDF file without storing anything.

    Returns:
        Record count, colliding titles, planned renames and warnings
    """
    service = InterchangeService(SqlDiveRepository(session))
    preview = await _preview_upload(data, service)
    status = "conflicts" if preview.has_conflicts else "ready"
    return {"status": status, **_preview_payload(preview)}


@post("/dives/import", status_code=HTTP_201_CREATED)
async def import_dives(
    data: UploadBody,
    session: AsyncSession,
    confirm: bool = False,
) -> Response[dict[str, Any]]:
    """Import an uploaded CSV or UDDF file.

    Without ``confirm=true`` a file whose titles collide is not stored; the
    409 response carries the preview so the caller can ask the user.

    Example:
        POST /api/v1/dives/import?confirm=true  (multipart field ``data``)
    """
    service = InterchangeService(SqlDiveRepository(session))
    preview = await _preview_upload(data, service)
    if preview.has_conflicts and not confirm:
        return Response(
            content={"status": "conflicts", "imported": 0, **_preview_payload(preview)},
            status_code=HTTP_409_CONFLICT,
        )

    result = await service.commit_import(preview)
    await session.commit()
    return Response(
        content={"status": "imported", "imported": result.imported, **_preview_payload(preview)},
        status_code=HTTP_201_CREATED,
    )


@get("/dives/export", status_code=HTTP_200_OK)
async def export_dives(
    session: AsyncSession,
    fmt: Annotated[InterchangeFormat, Parameter(query="format")] = InterchangeFormat.CSV,
    units: Annotated[UnitSystem | None, Parameter(query="units")] = None,
) -> Response[bytes]:
    """Export every dive as a CSV or UDDF attachment.

    Example:
        GET /api/v1/dives/export?format=csv&units=imperial
    """
    service = InterchangeService(SqlDiveRepository(session))
    artifact = await service.export(fmt, units or settings.default_unit_system)
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f"attachment; filename={artifact.filename}"},
    )


interchange_router = Router(
    path="/",
    route_handlers=[preview_import, import_dives, export_dives],
)
