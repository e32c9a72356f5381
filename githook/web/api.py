"""
Web API routes.
"""
from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from ..controller.models import ReconcileRecord, ReconcileStatus
from ..controller.scheduler import ReconcileScheduler


class ReconcileRecordResponse(BaseModel):
    """Response model for a reconcile record."""
    namespace: str
    name: str
    generation: Optional[int] = None
    status: str
    hook_id: Optional[str] = None
    error_message: Optional[str] = None
    attempts: int
    started_at: Optional[str] = None
    finished_at: Optional[str] = None


def _to_response(record: ReconcileRecord) -> ReconcileRecordResponse:
    return ReconcileRecordResponse(
        namespace=record.namespace,
        name=record.name,
        generation=record.generation,
        status=record.status.value,
        hook_id=record.hook_id,
        error_message=record.error_message,
        attempts=record.attempts,
        started_at=record.started_at.isoformat() if record.started_at else None,
        finished_at=record.finished_at.isoformat() if record.finished_at else None,
    )


def create_api_router(scheduler: ReconcileScheduler) -> APIRouter:
    """Create API router with dependencies."""

    router = APIRouter(prefix="/api")

    @router.get("/githooks", response_model=List[ReconcileRecordResponse])
    async def list_githooks(
        namespace: Optional[str] = Query(None),
        status: Optional[ReconcileStatus] = Query(None),
    ):
        """List the latest reconcile record of every GitHook."""
        records = scheduler.list_records(namespace=namespace, status=status)
        return [_to_response(r) for r in records]

    @router.get("/githooks/{namespace}/{name}", response_model=ReconcileRecordResponse)
    async def get_githook(namespace: str, name: str):
        """Get the latest reconcile record of one GitHook."""
        record = scheduler.get_record(namespace, name)
        if not record:
            raise HTTPException(status_code=404, detail="GitHook not found")

        return _to_response(record)

    @router.post("/githooks/{namespace}/{name}/reconcile", response_model=ReconcileRecordResponse)
    async def reconcile_githook(namespace: str, name: str):
        """Request an immediate reconcile pass."""
        record = scheduler.trigger(namespace, name)
        return _to_response(record)

    return router
