"""
Module 09D - Verify Routes

Submit a swarm for verification and fetch stored results.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends
from pydantic import ValidationError

from api.deps import get_verifier
from api.errors import InvalidRequestError, from_domain_error
from api.models.requests import VerifyRequest
from api.models.responses import VerifyDetails, VerifyResponse
from core.schemas import Agent, SwarmProofException
from orchestrator.pipeline import SwarmVerifier


logger = logging.getLogger(__name__)

router = APIRouter(tags=["verification"])


def _to_agents(request: VerifyRequest) -> list[Agent]:
    try:
        return [spec.to_agent() for spec in request.agents]
    except ValidationError as e:
        raise InvalidRequestError(
            "Invalid agent definition",
            details={"errors": [err.get("msg", "") for err in e.errors()]},
        )


@router.post("/verify", response_model=VerifyResponse)
async def verify_swarm(
    request: VerifyRequest,
    verifier: SwarmVerifier = Depends(get_verifier),
) -> VerifyResponse:
    """
    Challenge every agent at once, score the responses and store the result.
    """
    agents = _to_agents(request)

    try:
        verification = await verifier.verify(
            agents,
            challenge_type=request.challenge_type,
            timeout_ms=request.timeout_ms,
        )
    except SwarmProofException as e:
        raise from_domain_error(e)

    return VerifyResponse(
        ok=True,
        verification_id=verification.verification_id,
        overall_score=verification.overall_score,
        verdict=verification.verdict.value,
        details=VerifyDetails(
            challenged=verification.agent_count,
            responded=verification.responded_count,
            avg_latency_ms=round(verification.timing.mean_ms),
            timing_stats=verification.timing,
            scores=verification.scores,
        ),
    )


@router.get("/result/{verification_id}")
async def get_result(
    verification_id: str,
    verifier: SwarmVerifier = Depends(get_verifier),
) -> dict[str, Any]:
    """
    Full stored verification record.
    """
    try:
        verification = verifier.get(verification_id)
    except SwarmProofException as e:
        raise from_domain_error(e)
    return verification.model_dump(mode="json")
