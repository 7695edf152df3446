"""Response bodies shared by several endpoints."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """JSON error body, as produced by AppError.to_dict()."""

    success: bool = False
    error: str
    code: str
    field: Optional[str] = None
    details: Optional[Any] = None


class HealthResponse(BaseModel):
    status: Literal["healthy", "degraded", "unhealthy"]
    checks: dict[str, str]


class MessageResponse(BaseModel):
    """Bare acknowledgement: ``{"success": true}``."""

    success: bool = True
