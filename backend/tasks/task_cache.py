"""
Task cache module
Cache: project_id -> BuildResult built from the stored raw records.
Rebuilt on import; dropped on delete/clear so a reload never sees stale tasks.
A dropped graph is left intact: requests still holding it finish on it.
"""

from typing import Any, Dict, List, Optional

from tasks.builder import BuildResult, build

_project_cache: Dict[str, BuildResult] = {}


def get_project_build(project_id: str) -> Optional[BuildResult]:
    return _project_cache.get(project_id)


def build_project(project_id: str, records: List[Dict[str, Any]]) -> BuildResult:
    """Build graph from records and replace any cached graph for project_id."""
    clear_project_cache(project_id)
    result = build(records)
    _project_cache[project_id] = result
    return result


def clear_project_cache(project_id: Optional[str] = None) -> None:
    """Drop one project's cached build, or every cached build."""
    if project_id is None:
        _project_cache.clear()
    else:
        _project_cache.pop(project_id, None)
