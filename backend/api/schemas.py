"""Pydantic request schemas for API."""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SubsetLayoutRequest(BaseModel):
    """Visible subset chosen by the viewer (ids not in the project are ignored)."""
    model_config = ConfigDict(populate_by_name=True)
    task_ids: List[str] = Field(..., alias="taskIds")


class SettingsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")
    hours_per_day: Optional[float] = Field(None, alias="hoursPerDay", gt=0)
    cycle_policy: Optional[Literal["render", "strict"]] = Field(None, alias="cyclePolicy")
