"""Evidence router."""

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Depends, Query
from fastapi.responses import Response
from compliance.orchestrator import RunController
from backend.models import ClearResponse, EvidenceResponse
from backend.routers.checks import get_controller_from_main

router = APIRouter(prefix="/evidence", tags=["evidence"])

MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv; charset=utf-8",
}


@router.get("", response_model=EvidenceResponse)
async def get_evidence(controller: RunController = Depends(get_controller_from_main)):
    """Журнал доказательств в порядке добавления."""
    entries = [entry.to_dict() for entry in controller.evidence.entries]
    return {"entries": entries, "count": len(entries)}


@router.get("/export")
async def export_evidence(
    format: str = Query("json", description="json or csv"),
    controller: RunController = Depends(get_controller_from_main),
):
    """Выгрузка журнала файлом."""
    if format not in MEDIA_TYPES:
        raise HTTPException(400, f"Unknown format: {format}. Use 'json' or 'csv'")

    content = controller.evidence.export(format)
    timestamp_str = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
    filename = f"compliance-evidence-{timestamp_str}.{format}"

    return Response(
        content=content,
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.delete("", response_model=ClearResponse)
async def clear_evidence(
    confirm: bool = False,
    controller: RunController = Depends(get_controller_from_main),
):
    """Очистить журнал. Требует confirm=true."""
    try:
        removed = controller.evidence.clear(confirm=confirm)
    except ValueError as e:
        raise HTTPException(400, str(e))
    return {"status": "cleared", "removed": removed}
