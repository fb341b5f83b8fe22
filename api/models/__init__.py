"""API request and response models."""

from api.models.requests import AgentSpec, VerifyRequest
from api.models.responses import (
    HealthResponse,
    VerifyDetails,
    VerifyResponse,
    StatsResponse,
    ErrorDetail,
    ErrorResponse,
)

__all__ = [
    "AgentSpec",
    "VerifyRequest",
    "HealthResponse",
    "VerifyDetails",
    "VerifyResponse",
    "StatsResponse",
    "ErrorDetail",
    "ErrorResponse",
]
