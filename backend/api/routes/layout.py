"""Layout API - full grid layout, caller-chosen subset, focus toggle."""

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from loguru import logger

from db import get_effective_settings
from layout import build_layout_payload
from tasks.task_order import CycleError, sort

from .. import state as api_state
from ..loader import ProjectNotFoundError, load_layout_context
from ..schemas import SubsetLayoutRequest

router = APIRouter()


async def _context_or_error(project_id: str):
    """Returns (ctx, cycle_payload, error_response). Applies the cycle policy."""
    try:
        ctx = await load_layout_context(project_id)
    except ProjectNotFoundError as e:
        return None, None, JSONResponse(status_code=404, content={"error": str(e)})
    except ValueError as e:
        return None, None, JSONResponse(status_code=400, content={"error": str(e)})

    try:
        sort(ctx.graph)
    except CycleError as e:
        settings = await get_effective_settings()
        if settings["cyclePolicy"] == "strict":
            return None, None, JSONResponse(status_code=409, content={"error": str(e), "cycle": e.to_payload()})
        logger.warning("Project {}: laying out despite cycle ({})", project_id, ", ".join(e.cycle_ids))
        return ctx, e.to_payload(), None
    return ctx, None, None


@router.get("/{project_id}/layout")
async def get_full_layout(project_id: str):
    ctx, cycle, error = await _context_or_error(project_id)
    if error is not None:
        return error
    positions = ctx.restore()
    return {**build_layout_payload(ctx.graph, positions), "cycle": cycle}


@router.post("/{project_id}/layout/subset")
async def post_subset_layout(project_id: str, body: SubsetLayoutRequest):
    ctx, cycle, error = await _context_or_error(project_id)
    if error is not None:
        return error
    positions = ctx.subset(body.task_ids)
    return {**build_layout_payload(ctx.graph, positions), "cycle": cycle}


@router.get("/{project_id}/layout/focus")
async def get_focus_layout(project_id: str, task_id: str = Query(..., alias="taskId")):
    """Select a task: its visible chain, compacted. Selecting it again restores the full layout."""
    ctx, cycle, error = await _context_or_error(project_id)
    if error is not None:
        return error
    if task_id not in ctx.graph:
        return JSONResponse(status_code=404, content={"error": f"Task {task_id} not found"})
    positions = ctx.select(task_id)
    payload = {**build_layout_payload(ctx.graph, positions), "cycle": cycle, "focusId": ctx.focus_id}
    await api_state.emit("layout-update", {"projectId": project_id, "focusId": ctx.focus_id})
    return payload
