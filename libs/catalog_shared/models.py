# libs/catalog_shared/models.py
"""
Shared Pydantic models used across the catalog services.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standard error response model.

    Provides a consistent error format for all API endpoints,
    with a machine-readable error code and human-readable detail message.

    Example:
        {
            "error": "Not Found",
            "detail": "Product with ID 'B00TEST' not found"
        }
    """

    error: str = Field(..., description="Error code or type")
    detail: Optional[str] = Field(None, description="Human-readable error details")


class SuccessResponse(BaseModel):
    """Acknowledgement body for write endpoints."""

    success: bool = Field(True, description="Whether the operation was applied")


class HealthStatus(str, Enum):
    """
    Health status enum for health check responses.
    """

    OK = "ok"
    WARNING = "warning"
    ERROR = "error"


class HealthResponse(BaseModel):
    """
    Standard health check response model for /health endpoints.

    Example:
        {
            "status": "ok",
            "version": "0.3.0",
            "details": {
                "store": "ready",
                "total_products": 18234
            }
        }
    """

    status: HealthStatus = Field(..., description="Overall health status")
    version: str = Field(..., description="Service version identifier")
    details: Dict[str, Any] = Field(
        default_factory=dict, description="Service-specific health details"
    )
