"""
Module 09D - API Request Models

Pydantic models for API request validation.
"""

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.schemas import Agent


class AgentSpec(BaseModel):
    """One claimed swarm member as submitted by the caller."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., min_length=1, description="Agent identifier")
    name: str = Field(default="", description="Display name")
    endpoint: str = Field(..., min_length=1, description="Agent HTTP endpoint base URL")
    token_id: Optional[str] = Field(
        default=None,
        alias="tokenId",
        description="External identity reference (e.g. registry token id)",
    )

    def to_agent(self) -> Agent:
        return Agent(id=self.id, name=self.name, endpoint=self.endpoint, token_id=self.token_id)


class VerifyRequest(BaseModel):
    """Request body for POST /verify endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    agents: list[AgentSpec] = Field(
        ...,
        description="The claimed swarm; at least two agents",
    )
    challenge_type: Optional[Literal["parallel", "distributed", "consistency"]] = Field(
        default=None,
        alias="challengeType",
        description="Challenge family; defaults to 'parallel'",
    )
    timeout_ms: Optional[int] = Field(
        default=None,
        alias="timeoutMs",
        description="Challenge lifetime in milliseconds; defaults to 10000",
    )
