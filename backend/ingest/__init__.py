"""
Ingest Module
Turns MS Project XML and document-store exports into raw task records.
"""

from typing import Any, Dict, Iterable, List, Union

from tasks.models import RawTask

from .document_loader import parse_task_document, to_task_document
from .errors import IngestError
from .xml_loader import DEFAULT_HOURS_PER_DAY, parse_duration_hours, parse_project_xml


def to_record_dicts(records: Iterable[Union[RawTask, Dict[str, Any]]]) -> List[Any]:
    """JSON-ready records for storage (export field names)."""
    return [r.model_dump(by_alias=True) if isinstance(r, RawTask) else r for r in records]


__all__ = [
    "DEFAULT_HOURS_PER_DAY",
    "IngestError",
    "parse_duration_hours",
    "parse_project_xml",
    "parse_task_document",
    "to_record_dicts",
    "to_task_document",
]
