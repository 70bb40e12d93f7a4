"""FastAPI HTTP API — routes calling the shared service layer."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Query
from pydantic import ValidationError

from frecent.server.api_models import (
    OpenPathsRequest,
    PathRequest,
    RenameRequest,
    SettingsUpdate,
    VisitRequest,
)
from frecent.service import (
    svcAgingPreview,
    svcClear,
    svcClose,
    svcDelete,
    svcEntries,
    svcGetSettings,
    svcRemove,
    svcRename,
    svcSearch,
    svcStats,
    svcSyncOpen,
    svcUpdateSettings,
    svcVisit,
)
from frecent.state import getState

# Routes are async so events are applied one at a time on the event loop.
router = APIRouter()


# ── Health ───────────────────────────────────────────────────


@router.get("/health")
async def health():
    return {"status": "ok"}


# ── Visit events ─────────────────────────────────────────────


@router.post("/visit")
async def api_visit(req: VisitRequest):
    return svcVisit(getState(), req.path, req.now)


@router.post("/rename")
async def api_rename(req: RenameRequest):
    return svcRename(getState(), req.old_path, req.new_path)


@router.post("/delete")
async def api_delete(req: PathRequest):
    return svcDelete(getState(), req.path)


@router.post("/remove")
async def api_remove(req: PathRequest):
    return svcRemove(getState(), req.path)


@router.post("/clear")
async def api_clear():
    return svcClear(getState())


# ── Open-set ─────────────────────────────────────────────────


@router.post("/open")
async def api_sync_open(req: OpenPathsRequest):
    return svcSyncOpen(getState(), req.paths)


@router.post("/close")
async def api_close(req: PathRequest):
    return svcClose(getState(), req.path)


# ── Queries ──────────────────────────────────────────────────


@router.get("/entries")
async def api_entries(
    limit: int | None = Query(None, ge=0),
    unbounded: bool = Query(False, alias="all"),
):
    return svcEntries(getState(), limit, unbounded)


@router.get("/search")
async def api_search(
    query: str = Query(""),
    limit: int | None = Query(None, ge=0),
):
    return svcSearch(getState(), query, limit)


@router.get("/stats")
async def api_stats():
    return svcStats(getState())


# ── Settings ─────────────────────────────────────────────────


@router.get("/settings")
async def api_get_settings():
    return svcGetSettings(getState())


@router.patch("/settings")
async def api_update_settings(req: SettingsUpdate):
    changes = req.model_dump(exclude_none=True)
    try:
        return svcUpdateSettings(getState(), changes)
    except ValidationError as e:
        # Omit inputs: a rejected NaN is not JSON-serializable
        detail = e.errors(include_url=False, include_context=False, include_input=False)
        raise HTTPException(status_code=422, detail=detail) from e


@router.get("/settings/preview")
async def api_aging_preview(max_age: float = Query(..., allow_inf_nan=False)):
    return svcAgingPreview(getState(), max_age)
