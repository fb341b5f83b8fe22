"""
Module 09D - API Response Models

Pydantic models for API response serialization.
"""

from typing import Any

from pydantic import BaseModel, Field

from core.schemas import SubScores, TimingStats


class HealthResponse(BaseModel):
    """Response for GET /health endpoint."""

    ok: bool = True
    service: str = "swarmproof-verifier"
    version: str = "0.1.0"
    protocol: str = "SVP v0.1"
    endpoints: dict[str, str] = Field(default_factory=dict)


class VerifyDetails(BaseModel):
    """Counts, timing and sub-scores for one verification."""

    challenged: int = Field(..., description="Number of agents challenged")
    responded: int = Field(..., description="Number of agents that answered successfully")
    avg_latency_ms: int = Field(..., description="Mean latency of successful responses, rounded")
    timing_stats: TimingStats
    scores: SubScores


class VerifyResponse(BaseModel):
    """Response for POST /verify endpoint."""

    ok: bool = True
    verification_id: str = Field(..., description="Id for GET /result/{id}")
    overall_score: int = Field(..., description="Rounded mean of the four sub-scores")
    verdict: str = Field(..., description="genuine, suspicious or likely_fake")
    details: VerifyDetails


class StatsResponse(BaseModel):
    """Response for GET /stats endpoint."""

    ok: bool = True
    total_verifications: int = 0
    verdicts: dict[str, int] = Field(default_factory=dict)
    average_score: int = 0


class ErrorDetail(BaseModel):
    """Detailed error information."""

    code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response."""

    ok: bool = False
    error: ErrorDetail = Field(..., description="Error details")
