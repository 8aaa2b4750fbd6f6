"""
Document-store export ({"tasks": [...]}) <-> raw task records.
Durations are stored in hours there; records carry days.
Damaged exports are repaired with json_repair before giving up.
"""

from typing import Any, Dict, List, Union

import json_repair
import orjson
from loguru import logger

from shared.graph import TaskGraph

from .errors import IngestError
from .xml_loader import DEFAULT_HOURS_PER_DAY

DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _load_json(payload: Union[str, bytes]) -> Any:
    raw = payload.encode("utf-8") if isinstance(payload, str) else payload
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        logger.warning("Task document is not valid JSON, attempting repair")
        return json_repair.loads(raw.decode("utf-8", errors="replace"))


def _hours_to_days(value: Any, hours_per_day: float) -> Any:
    if value in (None, ""):
        return 0.0
    try:
        return float(value) / hours_per_day
    except (TypeError, ValueError):
        # left as-is so the builder reports the record
        return value


def parse_task_document(
    payload: Union[str, bytes, Dict[str, Any], List[Any]],
    hours_per_day: float = DEFAULT_HOURS_PER_DAY,
) -> List[Dict[str, Any]]:
    """Return record dicts (export field names, duration in days) ready for tasks.builder.build."""
    data = payload if isinstance(payload, (dict, list)) else _load_json(payload)
    if isinstance(data, dict):
        tasks = data.get("tasks")
    else:
        tasks = data
    if not isinstance(tasks, list):
        raise IngestError("Task document must be a list or an object with a 'tasks' list")

    records = []
    for item in tasks:
        if not isinstance(item, dict):
            records.append(item)
            continue
        record = dict(item)
        record["Duration"] = _hours_to_days(record.get("Duration"), hours_per_day)
        records.append(record)
    return records


def _format_date(value) -> str:
    return value.strftime(DATE_FORMAT) if value else ""


def to_task_document(graph: TaskGraph, hours_per_day: float = DEFAULT_HOURS_PER_DAY) -> Dict[str, Any]:
    """Export the loaded tasks back to the document-store shape."""
    return {
        "tasks": [
            {
                "Critical": "1" if t.is_critical else "0",
                "UID": t.id,
                "Name": t.name,
                "Start": _format_date(t.start),
                "Finish": _format_date(t.finish),
                "Duration": t.duration * hours_per_day,
                "OutlineLevel": t.outline_level,
                "WBS": t.wbs,
                "Predecessors": list(t.predecessor_ids),
                "PredecessorUIDs": list(t.predecessor_ids),
            }
            for t in graph.tasks()
        ]
    }
