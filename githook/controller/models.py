"""
Reconciliation bookkeeping models.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReconcileStatus(str, Enum):
    """Outcome of the latest reconciliation pass of a GitHook."""
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    BLOCKED = "blocked"  # configuration error, waits for a spec change
    DELETED = "deleted"


class ReconcileRecord(BaseModel):
    """Latest reconciliation pass of one GitHook."""

    namespace: str = Field(..., description="GitHook namespace")
    name: str = Field(..., description="GitHook name")
    generation: Optional[int] = Field(None, description="Generation seen by the pass")

    status: ReconcileStatus = Field(ReconcileStatus.PENDING, description="Pass status")
    hook_id: Optional[str] = Field(None, description="Webhook id after the pass")
    error_message: Optional[str] = None

    attempts: int = Field(0, description="Passes run for this GitHook")
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"
