"""
Task entity model, raw import records and build diagnostics.
Relationships (parent, children, predecessors, successors) are not stored here:
they live in shared.graph.TaskGraph, addressed by task id.
"""

from datetime import datetime
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

TRUTHY_FLAGS = {"1", "true", "yes", "y"}

DiagnosticKind = Literal["ParseSkip", "DanglingReference", "ParentNotFound"]


def normalize_flag(value: Any) -> bool:
    """Critical flag arrives as "1"/"0", "true"/"false" or a real bool."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in TRUTHY_FLAGS


def _as_id_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (str, int)):
        value = [value]
    return [str(v).strip() for v in value if v is not None]


class RawTask(BaseModel):
    """
    One task record as exported by MS Project XML or the document store.
    Accepts both the export field names (UID, OutlineLevel, ...) and snake_case.
    Predecessor ids may be split across PredecessorUIDs and Predecessors.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(None, alias="UID")
    name: Optional[str] = Field(None, alias="Name")
    critical: Optional[Union[bool, str]] = Field(None, alias="Critical")
    start: Optional[str] = Field(None, alias="Start")
    finish: Optional[str] = Field(None, alias="Finish")
    duration: float = Field(0.0, alias="Duration", description="Duration in days")
    outline_level: Optional[str] = Field(None, alias="OutlineLevel")
    wbs: str = Field("", alias="WBS")
    predecessor_uids: List[str] = Field(default_factory=list, alias="PredecessorUIDs")
    predecessors: List[str] = Field(default_factory=list, alias="Predecessors")

    @field_validator("id", "outline_level", mode="before")
    @classmethod
    def _stringify(cls, v):
        if v is None:
            return None
        return str(v).strip()

    @field_validator("critical", mode="before")
    @classmethod
    def _flag_text(cls, v):
        if v is None or isinstance(v, bool):
            return v
        return str(v)

    @field_validator("wbs", mode="before")
    @classmethod
    def _wbs_text(cls, v):
        return "" if v is None else str(v)

    @field_validator("duration", mode="before")
    @classmethod
    def _duration_or_zero(cls, v):
        return 0.0 if v in (None, "") else v

    @field_validator("predecessor_uids", "predecessors", mode="before")
    @classmethod
    def _id_lists(cls, v):
        return _as_id_list(v)


class Task(BaseModel):
    """A loaded task. Scheduling attributes are carried for display only."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    start: Optional[datetime] = None
    finish: Optional[datetime] = None
    duration: float = 0.0
    is_critical: bool = False
    outline_level: int = Field(1, ge=1)
    wbs: str = ""
    predecessor_ids: List[str] = Field(default_factory=list)


class Diagnostic(BaseModel):
    """Non-fatal build finding, precise enough to locate the offending record."""
    kind: DiagnosticKind
    task_id: Optional[str] = None
    field: Optional[str] = None
    message: str
    record_index: Optional[int] = None

    def to_payload(self) -> dict:
        return {
            "kind": self.kind,
            "taskId": self.task_id,
            "field": self.field,
            "message": self.message,
            "recordIndex": self.record_index,
        }


class BuildError(ValueError):
    """No usable task in the input (EmptyInput)."""

    kind = "EmptyInput"

    def __init__(self, message: str, diagnostics: Optional[List[Diagnostic]] = None):
        super().__init__(message)
        self.diagnostics = list(diagnostics or [])
