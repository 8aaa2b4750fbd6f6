"""Projects API - import (XML / document), list, graph, export, delete."""

from typing import Any, List

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse
from loguru import logger

from db import delete_project, get_effective_settings, list_project_ids, save_project, validate_project_id
from ingest import parse_project_xml, parse_task_document, to_record_dicts, to_task_document
from tasks.models import BuildError
from tasks.task_cache import build_project

from .. import state as api_state
from ..loader import ProjectNotFoundError, forget_project, load_project_build

router = APIRouter()


async def _import_records(project_id: str, source: str, records: List[Any]):
    """Build first so a broken import never replaces a good stored project."""
    validate_project_id(project_id)
    forget_project(project_id)
    try:
        result = build_project(project_id, records)
    except BuildError as e:
        forget_project(project_id)
        return JSONResponse(
            status_code=400,
            content={"error": str(e), "diagnostics": [d.to_payload() for d in e.diagnostics]},
        )
    await save_project(project_id, {"source": source, "records": to_record_dicts(records)})
    diagnostics = [d.to_payload() for d in result.diagnostics]
    logger.info("Imported project {} from {}: {} tasks", project_id, source, len(result.graph))
    await api_state.emit("project-loaded", {"projectId": project_id, "taskCount": len(result.graph)})
    return {"projectId": project_id, "taskCount": len(result.graph), "diagnostics": diagnostics}


@router.get("")
async def list_projects():
    """List project IDs (newest first)."""
    return {"projectIds": await list_project_ids()}


@router.post("/{project_id}/import/xml")
async def import_xml(project_id: str, request: Request):
    """Import an MS Project XML export (raw XML request body)."""
    try:
        settings = await get_effective_settings()
        records = parse_project_xml(await request.body(), hours_per_day=settings["hoursPerDay"])
        return await _import_records(project_id, "xml", records)
    except ValueError as e:  # IngestError, invalid project id
        return JSONResponse(status_code=400, content={"error": str(e)})


@router.post("/{project_id}/import/document")
async def import_document(project_id: str, body: Any = Body(...)):
    """Import a document-store export: {"tasks": [...]} or a bare list."""
    try:
        settings = await get_effective_settings()
        records = parse_task_document(body, hours_per_day=settings["hoursPerDay"])
        return await _import_records(project_id, "document", records)
    except ValueError as e:  # IngestError, invalid project id
        return JSONResponse(status_code=400, content={"error": str(e)})


@router.get("/{project_id}/graph")
async def get_graph(project_id: str):
    try:
        result = await load_project_build(project_id)
    except ProjectNotFoundError as e:
        return JSONResponse(status_code=404, content={"error": str(e)})
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    return {**result.graph.to_payload(), "diagnostics": [d.to_payload() for d in result.diagnostics]}


@router.get("/{project_id}/export")
async def export_document(project_id: str):
    """Export the loaded tasks in document-store shape (durations in hours)."""
    try:
        result = await load_project_build(project_id)
    except ProjectNotFoundError as e:
        return JSONResponse(status_code=404, content={"error": str(e)})
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    settings = await get_effective_settings()
    return to_task_document(result.graph, hours_per_day=settings["hoursPerDay"])


@router.delete("/{project_id}")
async def remove_project(project_id: str):
    try:
        deleted = await delete_project(project_id)
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    forget_project(project_id)
    if not deleted:
        return JSONResponse(status_code=404, content={"error": f"Project {project_id} not found"})
    return {"success": True}
