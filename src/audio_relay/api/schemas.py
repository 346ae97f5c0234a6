"""Pydantic schemas for API responses."""

from typing import Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")


class QueueStatsSchema(BaseModel):
    """Relay queue statistics."""

    pending: int = Field(..., description="Items waiting for the next drain")
    worker_active: bool = Field(..., description="Whether a drain worker is running")
    items_admitted_total: int
    items_replaced_total: int
    batches_dispatched_total: int


class HealthCheckResponse(BaseModel):
    """Response model for the health check."""

    status: str = Field(..., description="Overall status (healthy)")
    uptime_seconds: float
    last_message_id: int = Field(..., description="Last confirmed channel message id")
    queue: QueueStatsSchema
