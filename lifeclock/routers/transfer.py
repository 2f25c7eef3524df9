"""
Import / export router.

GET  /export/json   — full export (history + current scores)
GET  /export/csv    — history as CSV
POST /import        — append records from a JSON or CSV export
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from lifeclock.routers.deps import get_session
from lifeclock.schemas.common import ErrorResponse
from lifeclock.schemas.transfer import ImportRequest, ImportResponse
from lifeclock.services.session import LifeClockSession
from lifeclock.services.transfer import export_filename

router = APIRouter(tags=["transfer"])


def _attachment(filename: str) -> dict[str, str]:
    return {"Content-Disposition": f'attachment; filename="{filename}"'}


@router.get("/export/json", summary="Export history and scores as JSON")
async def export_json(session: LifeClockSession = Depends(get_session)):
    return JSONResponse(
        content=session.export_payload(),
        headers=_attachment(export_filename(session.clock(), "json")),
    )


@router.get("/export/csv", summary="Export history as CSV")
async def export_csv(session: LifeClockSession = Depends(get_session)):
    return Response(
        content=session.export_csv(),
        media_type="text/csv",
        headers=_attachment(export_filename(session.clock(), "csv")),
    )


@router.post(
    "/import",
    response_model=ImportResponse,
    summary="Import choices from an export",
    responses={
        422: {"model": ErrorResponse, "description": "Malformed content. Records before the bad one stay imported."},
    },
)
async def import_choices(
    body: ImportRequest,
    session: LifeClockSession = Depends(get_session),
):
    """
    Every record is appended with a fresh id. There is no rollback: on a
    parse error the response reports how many records were already written.
    """
    imported = session.import_data(body.content, fmt=body.format)
    return ImportResponse(
        imported=len(imported),
        total=len(session.choices),
        persisted=session.store.available,
    )
