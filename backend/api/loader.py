"""
Load a project's task graph and layout context: cached build, else rebuild
from stored records. Import/delete/clear must call forget_project.
"""

from typing import Dict, Optional

from db import get_project
from layout import LayoutContext
from tasks.builder import BuildResult
from tasks.task_cache import build_project, clear_project_cache, get_project_build

_contexts: Dict[str, LayoutContext] = {}


class ProjectNotFoundError(LookupError):
    pass


async def load_project_build(project_id: str) -> BuildResult:
    cached = get_project_build(project_id)
    if cached is not None:
        return cached
    project = await get_project(project_id)
    if not project or not project.get("records"):
        raise ProjectNotFoundError(f"Project {project_id} not found")
    return build_project(project_id, project["records"])


async def load_layout_context(project_id: str) -> LayoutContext:
    result = await load_project_build(project_id)
    ctx = _contexts.get(project_id)
    if ctx is None or ctx.graph is not result.graph:
        ctx = LayoutContext(result.graph)
        _contexts[project_id] = ctx
    return ctx


def forget_project(project_id: Optional[str] = None) -> None:
    """Drop cached graph + layout context for one project, or all of them."""
    if project_id is None:
        _contexts.clear()
    else:
        _contexts.pop(project_id, None)
    clear_project_cache(project_id)
