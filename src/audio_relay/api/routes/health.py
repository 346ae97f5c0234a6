"""Index and health check endpoints."""

import time

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from ...relay import DebouncedOrderedQueue, SequenceTracker
from ..dependencies import get_queue, get_tracker
from ..schemas import HealthCheckResponse, QueueStatsSchema

router = APIRouter()

INDEX_BODY = "Hi there"

# Track application start time
_start_time = time.time()


@router.get(
    "/",
    response_class=PlainTextResponse,
    summary="Liveness check",
    description="Returns a fixed body while the process is serving",
)
async def index() -> str:
    """Fixed body so a plain GET shows the process is up."""
    return INDEX_BODY


@router.get(
    "/api/v1/health",
    response_model=HealthCheckResponse,
    summary="Overall health check",
    description="Uptime, last confirmed channel message id, and relay queue statistics",
)
async def health_check(
    queue: DebouncedOrderedQueue = Depends(get_queue),
    tracker: SequenceTracker = Depends(get_tracker),
) -> HealthCheckResponse:
    """
    Get application health status.

    Returns:
        Health check response with uptime and queue statistics
    """
    return HealthCheckResponse(
        status="healthy",
        uptime_seconds=time.time() - _start_time,
        last_message_id=tracker.last,
        queue=QueueStatsSchema(**queue.stats().to_dict()),
    )
