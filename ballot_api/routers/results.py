"""Tally endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ballot_api.dependencies import get_ballot_service
from ballot_api.schemas.ballot import ResultsResponse, WinnerResponse
from ballot_api.services.ballot_service import BallotService

router = APIRouter()


@router.get("/winner", response_model=WinnerResponse)
async def get_winner(service: BallotService = Depends(get_ballot_service)) -> dict:
    """Return the winner's name as reported by the contract."""
    return await service.winner()


@router.get("/results", response_model=ResultsResponse)
async def get_results(service: BallotService = Depends(get_ballot_service)) -> dict:
    """Return candidates, total votes, and the winner once votes exist."""
    return await service.snapshot()
