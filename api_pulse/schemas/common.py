"""Pydantic schemas shared by every operation."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class OperationResult(BaseModel):
    """Outcome of an exposed operation: success with payload or failure with reason."""
    success: bool
    message: Optional[str] = None
    data: Any = None
    error: Optional[str] = None
    reason: Optional[str] = Field(default=None, description="Machine-readable failure code")
    summary: Optional[Dict[str, int]] = None

    @classmethod
    def ok(cls, data: Any = None, message: Optional[str] = None, **extra: Any) -> "OperationResult":
        return cls(success=True, data=data, message=message, **extra)

    @classmethod
    def fail(
        cls,
        error: str,
        reason: str,
        data: Any = None,
        message: Optional[str] = None
    ) -> "OperationResult":
        return cls(success=False, error=error, reason=reason, data=data, message=message)


class HealthResponse(BaseModel):
    """Schema for liveness response."""
    status: str = Field(default="healthy")
    version: str
    timestamp: str
    scheduler: str = Field(default="stopped")
