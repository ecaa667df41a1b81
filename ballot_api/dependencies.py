"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Depends, Request

from ballot_api.services.ballot_service import BallotService
from ballot_api.services.chain import ChainClient
from ballot_api.utils.errors import UpstreamUnavailableError
from ballot_api.utils.web3_client import ChainContext


def get_chain_context(request: Request) -> ChainContext:
    """Return the chain context created during application start-up."""
    context = getattr(request.app.state, "chain", None)
    if context is None:
        raise UpstreamUnavailableError("Blockchain connection is not initialised")
    return context


def get_chain_client(context: ChainContext = Depends(get_chain_context)) -> ChainClient:
    """Return a chain client bound to the shared context."""
    return ChainClient(context)


def get_ballot_service(chain: ChainClient = Depends(get_chain_client)) -> BallotService:
    """Return the ballot command handlers."""
    return BallotService(chain)
