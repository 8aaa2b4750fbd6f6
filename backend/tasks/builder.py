"""
Graph builder: raw task records -> TaskGraph + diagnostics.

Order of work:
  1) merge predecessor fields, create one Task per valid record
  2) link predecessor/successor edges by id (missing ids are warnings)
  3) infer parent/children from outline level over the WBS-sorted sequence
Never raises on per-record problems; BuildError only when nothing is usable.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Union

from loguru import logger
from pydantic import ValidationError

from shared.graph import TaskGraph
from tasks.models import BuildError, Diagnostic, RawTask, Task, normalize_flag


class BuildResult(NamedTuple):
    graph: TaskGraph
    diagnostics: List[Diagnostic]


def merge_predecessor_ids(*id_lists: Optional[Iterable[str]]) -> List[str]:
    """Union of predecessor id lists: order-preserving, deduplicated, blanks dropped."""
    merged: List[str] = []
    seen = set()
    for ids in id_lists:
        for pid in ids or []:
            pid = (pid or "").strip()
            if not pid or pid in seen:
                continue
            seen.add(pid)
            merged.append(pid)
    return merged


def parse_outline_level(value: Any) -> Optional[int]:
    """Return the outline level as int, or None when it does not parse."""
    if value is None:
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError:
        return None


def _skip(diagnostics: List[Diagnostic], idx: int, task_id: Optional[str], field: str, message: str) -> None:
    diag = Diagnostic(kind="ParseSkip", task_id=task_id, field=field, message=message, record_index=idx)
    logger.info("Skipping record {}: {}", idx, message)
    diagnostics.append(diag)


def _warn(diagnostics: List[Diagnostic], kind: str, task_id: str, field: str, message: str) -> None:
    diag = Diagnostic(kind=kind, task_id=task_id, field=field, message=message)
    logger.warning("{} ({}.{}): {}", kind, task_id, field, message)
    diagnostics.append(diag)


def _to_raw(record: Union[RawTask, Dict[str, Any]]) -> RawTask:
    if isinstance(record, RawTask):
        return record
    return RawTask.model_validate(record)


def _create_tasks(records: List[Any], graph: TaskGraph, diagnostics: List[Diagnostic]) -> None:
    for idx, record in enumerate(records):
        try:
            raw = _to_raw(record)
        except ValidationError as e:
            err = e.errors()[0] if e.errors() else {}
            loc = ".".join(str(p) for p in err.get("loc", ())) or "record"
            task_id = record.get("UID") or record.get("id") if isinstance(record, dict) else None
            _skip(diagnostics, idx, str(task_id) if task_id is not None else None, loc, err.get("msg", str(e)))
            continue

        level = parse_outline_level(raw.outline_level)
        if level is None:
            _skip(diagnostics, idx, raw.id, "outline_level", f"Outline level {raw.outline_level!r} does not parse")
            continue
        if level <= 0:
            _skip(diagnostics, idx, raw.id, "outline_level", "Outline level 0 is a project summary row")
            continue
        if not raw.id:
            _skip(diagnostics, idx, None, "id", "Record has no task id")
            continue
        if raw.id in graph:
            _skip(diagnostics, idx, raw.id, "id", f"Duplicate task id {raw.id}; first record kept")
            continue

        graph.add_task(Task(
            id=raw.id,
            name=raw.name or "",
            start=_parse_datetime(raw.start),
            finish=_parse_datetime(raw.finish),
            duration=raw.duration,
            is_critical=normalize_flag(raw.critical),
            outline_level=level,
            wbs=raw.wbs,
            predecessor_ids=merge_predecessor_ids(raw.predecessor_uids, raw.predecessors),
        ))


def _link_dependencies(graph: TaskGraph, diagnostics: List[Diagnostic]) -> None:
    for task in graph.tasks():
        for pid in task.predecessor_ids:
            if pid == task.id:
                _warn(diagnostics, "DanglingReference", task.id, "predecessor_ids",
                      f"Task {task.id} lists itself as predecessor; edge omitted")
                continue
            if not graph.add_dependency(pid, task.id):
                _warn(diagnostics, "DanglingReference", task.id, "predecessor_ids",
                      f"Predecessor {pid} not found; edge omitted")


def _link_hierarchy(graph: TaskGraph, diagnostics: List[Diagnostic]) -> None:
    """
    Single scan over tasks sorted by WBS (codepoint order, stable).
    Parent of a level-n task = most recent level n-1 task seen so far.
    """
    last_at_level: Dict[int, str] = {}
    for task in sorted(graph.tasks(), key=lambda t: t.wbs):
        level = task.outline_level
        if level > 1:
            parent_id = last_at_level.get(level - 1)
            if parent_id is not None:
                graph.set_parent(task.id, parent_id)
            else:
                _warn(diagnostics, "ParentNotFound", task.id, "outline_level",
                      f"No level {level - 1} task precedes WBS {task.wbs!r}; placed as root")
        last_at_level[level] = task.id


def build(raw_records: Iterable[Union[RawTask, Dict[str, Any]]]) -> BuildResult:
    """
    Build the task graph from raw records.
    Raises BuildError if the input is empty or no record yields a task.
    """
    records = list(raw_records or [])
    if not records:
        raise BuildError("No task records supplied")

    diagnostics: List[Diagnostic] = []
    graph = TaskGraph()
    _create_tasks(records, graph, diagnostics)
    if len(graph) == 0:
        raise BuildError(f"None of the {len(records)} records is a valid task", diagnostics)

    _link_dependencies(graph, diagnostics)
    _link_hierarchy(graph, diagnostics)
    logger.info("Built task graph: {} tasks, {} edges, {} diagnostics",
                len(graph), graph.G.number_of_edges(), len(diagnostics))
    return BuildResult(graph, diagnostics)
