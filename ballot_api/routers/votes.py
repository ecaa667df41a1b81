"""Vote endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ballot_api.dependencies import get_ballot_service
from ballot_api.schemas.ballot import TransactionResponse, VoteCreate, VoterStatusResponse
from ballot_api.services.ballot_service import BallotService

router = APIRouter()


@router.post("/vote", response_model=TransactionResponse)
async def cast_vote(
    payload: VoteCreate,
    service: BallotService = Depends(get_ballot_service),
) -> dict:
    """Cast a vote for a candidate."""
    return await service.cast_vote(payload.voter_address, payload.candidate_index)


@router.get("/voters/{address}", response_model=VoterStatusResponse)
async def voter_status(
    address: str,
    service: BallotService = Depends(get_ballot_service),
) -> dict:
    """Return whether an address has already voted."""
    return await service.voter_status(address)
