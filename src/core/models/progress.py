"""
Progress and loader state models published by the StreamOrchestrator.
"""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field

ProgressPhase = Literal["idle", "paginating", "fetching", "done"]


class LoaderState(str, Enum):
    """Lifecycle states of a load cycle."""

    IDLE = "idle"
    PAGINATING = "paginating"
    FETCHING_DETAILS = "fetching_details"
    DONE = "done"
    ERROR = "error"


class Progress(BaseModel):
    """
    Progress of the current load cycle.

    Attributes:
        phase: "idle", "paginating", "fetching" or "done"
        current: Dispatches found (paginating) or processed (fetching)
        total: Dispatches reported (paginating) or to process (fetching)
        message: Human-readable status; carries the reason on failure
    """

    phase: ProgressPhase = "idle"
    current: int = Field(0, ge=0)
    total: int = Field(0, ge=0)
    message: str = ""

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "phase": "fetching",
                "current": 5,
                "total": 7,
                "message": "Loading entries (5/7)..."
            }
        }
