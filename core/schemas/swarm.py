"""
Module 01 - Schemas
File: swarm.py

Purpose: Data model for off-chain swarm verification.
Agents, challenges, per-agent responses, timing statistics, sub-scores and
the immutable Verification record produced by the scoring engine.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .versioning import SCHEMA_VERSION


ChallengeType = Literal["parallel", "distributed", "consistency"]

CHALLENGE_TYPES: tuple[str, ...] = ("parallel", "distributed", "consistency")


class Verdict(str, Enum):
    """Three-way classification derived from the overall score."""
    GENUINE = "genuine"
    SUSPICIOUS = "suspicious"
    LIKELY_FAKE = "likely_fake"


class Agent(BaseModel):
    """A claimed swarm member and where to reach it."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(..., min_length=1, description="Agent identifier")
    name: str = Field(default="", description="Display name")
    endpoint: str = Field(..., min_length=1, description="HTTP endpoint base URL")
    token_id: Optional[str] = Field(
        default=None,
        description="External identity reference (e.g. registry token id)",
    )

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("endpoint must be an http(s) URL")
        return v.rstrip("/")


class Challenge(BaseModel):
    """
    A single-use challenge issued to every agent of a swarm at once.

    Immutable once created. The nonce defeats replay of a cached answer to
    a previously seen prompt.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    challenge_id: str = Field(..., min_length=1)
    type: ChallengeType = Field(default="parallel")
    prompt: str = Field(..., min_length=1)
    nonce: str = Field(..., min_length=32, description="Hex nonce, >=128 bits")
    created_at: datetime
    expires_at: datetime
    target_agents: tuple[str, ...] = Field(default_factory=tuple)

    @model_validator(mode="after")
    def validate_window(self) -> "Challenge":
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be after created_at")
        return self

    @property
    def timeout_ms(self) -> float:
        return (self.expires_at - self.created_at).total_seconds() * 1000

    def format_message(self) -> str:
        """Human-readable message form sent alongside the structured fields."""
        return f"[SWARM-VERIFY {self.challenge_id}/{self.nonce}] {self.prompt}"


class ChallengeResponse(BaseModel):
    """
    One agent's answer to a challenge, or the failure that replaced it.

    latency_ms is always measured by the dispatcher; processing_time_ms is
    whatever the agent reported about itself and is informational only.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    challenge_id: str
    agent_id: str
    response: str = ""
    received_at: datetime
    latency_ms: float = Field(..., ge=0.0)
    processing_time_ms: Optional[float] = None
    endpoint_used: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TimingStats(BaseModel):
    """Latency statistics over successful responses. All zero when none."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_ms: float = 0.0
    max_ms: float = 0.0
    mean_ms: float = 0.0
    std_dev_ms: float = 0.0
    cv: float = 0.0


class SubScores(BaseModel):
    """The four independent sub-scores, each clamped to [0, 100]."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    response_time: float = Field(..., ge=0.0, le=100.0)
    time_variance: float = Field(..., ge=0.0, le=100.0)
    consistency: float = Field(..., ge=0.0, le=100.0)
    participation: float = Field(..., ge=0.0, le=100.0)

    def mean(self) -> float:
        return (
            self.response_time + self.time_variance
            + self.consistency + self.participation
        ) / 4


class Verification(BaseModel):
    """
    The stored outcome of one swarm verification.

    Written once after every dispatch task has settled and never revised.
    The only later change is attaching an attestation reference, which
    produces a new copy.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    schema_version: str = Field(default=SCHEMA_VERSION)
    verification_id: str = Field(..., min_length=1)
    challenge_id: str
    challenge_type: ChallengeType = "parallel"
    prompt: str = ""
    agents: tuple[Agent, ...] = Field(..., min_length=2)
    responses: tuple[ChallengeResponse, ...]
    scores: SubScores
    overall_score: int = Field(..., ge=0, le=100)
    verdict: Verdict
    timing: TimingStats = Field(default_factory=TimingStats)
    created_at: datetime
    attestation_ref: Optional[str] = None

    @model_validator(mode="after")
    def validate_response_mapping(self) -> "Verification":
        if len(self.responses) != len(self.agents):
            raise ValueError("exactly one response per agent is required")
        return self

    @property
    def responded_count(self) -> int:
        return sum(1 for r in self.responses if r.ok)

    @property
    def agent_count(self) -> int:
        return len(self.agents)
