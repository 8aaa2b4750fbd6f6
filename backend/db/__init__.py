"""
Database Module
File-based storage: db/{project_id}/project.json holds the raw task records of
the last import (durations in days). db/settings.json holds layout settings.
SPV_DB_DIR relocates the store. Uses orjson + aiofiles, atomic .tmp writes.
"""

import os
import re
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles
import orjson
from loguru import logger

DEFAULT_DB_DIR = Path(__file__).parent
PROJECT_FILE = "project.json"
SETTINGS_FILE = "settings.json"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "hoursPerDay": 8.0,
    "cyclePolicy": "render",
}
CYCLE_POLICIES = ("render", "strict")


def get_db_dir() -> Path:
    return Path(os.environ.get("SPV_DB_DIR") or DEFAULT_DB_DIR)


def validate_project_id(project_id: str) -> None:
    """Reject path traversal and invalid project_id."""
    if not project_id or not isinstance(project_id, str):
        raise ValueError("project_id must be a non-empty string")
    if ".." in project_id or "/" in project_id or "\\" in project_id:
        raise ValueError("project_id must not contain path separators")
    if not re.match(r"^[a-zA-Z0-9_\-]+$", project_id):
        raise ValueError("project_id must contain only letters, digits, '-' and '_'")


def _get_project_dir(project_id: str) -> Path:
    validate_project_id(project_id)
    return get_db_dir() / project_id


async def _read_json(file_path: Path):
    try:
        async with aiofiles.open(file_path, "rb") as f:
            data = await f.read()
            return orjson.loads(data)
    except FileNotFoundError:
        return None
    except orjson.JSONDecodeError as e:
        logger.warning("Invalid JSON in {}: {}", file_path, e)
        return None


async def _write_json(file_path: Path, data: Any) -> None:
    """Atomic write: write to .tmp then rename to avoid partial/corrupt files."""
    file_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = file_path.with_suffix(file_path.suffix + ".tmp")
    content = orjson.dumps(data, option=orjson.OPT_INDENT_2).decode("utf-8")
    async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
        await f.write(content)
    tmp_path.replace(file_path)


async def get_project(project_id: str) -> Optional[Dict[str, Any]]:
    """Get stored project {name, source, records} or None."""
    return await _read_json(_get_project_dir(project_id) / PROJECT_FILE)


async def save_project(project_id: str, project: Dict[str, Any]) -> dict:
    await _write_json(_get_project_dir(project_id) / PROJECT_FILE, project)
    return {"success": True}


async def delete_project(project_id: str) -> bool:
    project_dir = _get_project_dir(project_id)
    if not project_dir.exists():
        return False
    try:
        shutil.rmtree(project_dir)
        return True
    except OSError as e:
        logger.warning("Failed to remove {}: {}", project_dir, e)
        return False


async def list_project_ids() -> List[str]:
    """List project IDs, sorted by project.json mtime (newest first)."""
    db_dir = get_db_dir()
    if not db_dir.exists():
        return []
    result = []
    for p in db_dir.iterdir():
        if p.is_dir() and not p.name.startswith("."):
            project_file = p / PROJECT_FILE
            if project_file.exists():
                try:
                    mtime = project_file.stat().st_mtime
                    result.append((p.name, mtime))
                except OSError:
                    result.append((p.name, 0))
    result.sort(key=lambda x: x[1], reverse=True)
    return [pid for pid, _ in result]


async def clear_db() -> dict:
    """Clear DB: remove all project folders."""
    db_dir = get_db_dir()
    if not db_dir.exists():
        return {"success": True, "removed": []}
    removed = []
    for p in db_dir.iterdir():
        if not p.is_dir() or p.name.startswith(".") or not (p / PROJECT_FILE).exists():
            continue
        try:
            shutil.rmtree(p)
            removed.append(p.name)
        except OSError as e:
            logger.warning("Failed to remove {}: {}", p, e)
    return {"success": True, "removed": removed}


async def get_settings() -> dict:
    """Raw settings from db/settings.json ({} when missing or unreadable)."""
    data = await _read_json(get_db_dir() / SETTINGS_FILE)
    return data if isinstance(data, dict) else {}


def _resolve_settings(raw: dict) -> dict:
    cfg = dict(DEFAULT_SETTINGS)
    v = raw.get("hoursPerDay")
    try:
        if v is not None and float(v) > 0:
            cfg["hoursPerDay"] = float(v)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid hoursPerDay setting: {!r}", v)
    policy = raw.get("cyclePolicy")
    if policy in CYCLE_POLICIES:
        cfg["cyclePolicy"] = policy
    elif policy is not None:
        logger.warning("Ignoring unknown cyclePolicy setting: {!r}", policy)
    return cfg


async def get_effective_settings() -> dict:
    """Settings with defaults applied for missing or invalid keys."""
    return _resolve_settings(await get_settings())


async def save_settings(settings: dict) -> dict:
    """Save settings to db/settings.json."""
    await _write_json(get_db_dir() / SETTINGS_FILE, settings or {})
    return {"success": True}
