"""
Shared response schemas - status, errors, health
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Standard error response schema."""

    error: str = Field(description="Human-readable error message")

    model_config = ConfigDict(
        json_schema_extra={"example": {"error": "Failed to fetch note"}}
    )


class SuccessResponse(BaseModel):
    """Standard success response schema."""

    success: bool = Field(default=True, description="Operation success status")
    message: str = Field(description="Success message")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Note saved successfully",
            }
        }
    )


class HealthCheckResponse(BaseModel):
    """Overall health status."""

    status: str = Field(description="healthy or unhealthy")
    timestamp: datetime = Field(description="Check timestamp")
    version: str = Field(description="Application version")
    checks: Dict[str, Any] = Field(default_factory=dict, description="Per-dependency results")
    details: Optional[Dict[str, Any]] = Field(default=None, description="Runtime counters")
