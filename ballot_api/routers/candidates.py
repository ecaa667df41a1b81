"""Candidate endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ballot_api.dependencies import get_ballot_service
from ballot_api.schemas.ballot import (
    CandidateCreate,
    CandidateCreatedResponse,
    CandidateResponse,
)
from ballot_api.services.ballot_service import BallotService

router = APIRouter()


@router.post("", status_code=201, response_model=CandidateCreatedResponse)
async def add_candidate(
    payload: CandidateCreate,
    service: BallotService = Depends(get_ballot_service),
) -> dict:
    """Register a candidate (owner only)."""
    return await service.add_candidate(payload.name, owner_address=payload.owner_address)


@router.get("", response_model=list[CandidateResponse])
async def list_candidates(service: BallotService = Depends(get_ballot_service)) -> list[dict]:
    """List all candidates and their vote counts."""
    return await service.list_candidates()
