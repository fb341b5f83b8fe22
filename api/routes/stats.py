"""
Module 09D - Stats Route

Aggregate counts over stored verifications.
"""

from fastapi import APIRouter, Depends

from api.deps import get_verifier
from api.models.responses import StatsResponse
from orchestrator.pipeline import SwarmVerifier


router = APIRouter(tags=["stats"])


@router.get("/stats", response_model=StatsResponse)
async def service_stats(verifier: SwarmVerifier = Depends(get_verifier)) -> StatsResponse:
    stats = verifier.stats()
    return StatsResponse(ok=True, **stats.to_dict())
