"""Candidate registration, voting, and tally logic."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from web3 import Web3

from ballot_api.services.chain import ChainClient
from ballot_api.utils.errors import (
    AlreadyVotedError,
    ContractExecutionError,
    NoVotesCastError,
    ValidationError,
    is_already_voted,
    is_no_votes,
)


MAX_UINT256 = 2**256 - 1


def normalize_address(value: Any, label: str = "voter address") -> str:
    """Return the checksum form of an address or raise ValidationError."""
    if not isinstance(value, str) or not Web3.is_address(value.strip()):
        raise ValidationError(f"Invalid {label}")
    return Web3.to_checksum_address(value.strip())


def serialize_candidate(candidate: Any) -> dict[str, str]:
    """Render one on-chain candidate with its vote count as a decimal string."""
    if isinstance(candidate, Mapping):
        name, vote_count = candidate["name"], candidate["voteCount"]
    else:
        name, vote_count = candidate[0], candidate[1]
    return {"name": str(name), "voteCount": str(int(vote_count))}


class BallotService:
    """Translate ballot requests into contract reads and writes."""

    def __init__(self, chain: ChainClient) -> None:
        self.chain = chain

    async def add_candidate(self, name: Any, owner_address: str | None = None) -> dict[str, str]:
        """Register a candidate on behalf of the contract owner."""
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Candidate name is required and must be a non-empty string")
        candidate_name = name.strip()

        await self.chain.ensure_owner(owner_address)

        result = await self.chain.write(
            "addCandidate", [candidate_name], self.chain.owner_address
        )
        receipt = result.unwrap()
        return {
            "message": "Candidate added successfully",
            "name": candidate_name,
            "transactionHash": receipt.transaction_hash,
        }

    async def cast_vote(self, voter_address: Any, candidate_index: Any) -> dict[str, str]:
        """Cast one vote; the contract is the final arbiter of double votes."""
        voter = normalize_address(voter_address)
        if (
            isinstance(candidate_index, bool)
            or not isinstance(candidate_index, int)
            or candidate_index < 0
            or candidate_index > MAX_UINT256
        ):
            raise ValidationError("Invalid candidate index")

        if await self._has_voted(voter):
            raise AlreadyVotedError()

        # a concurrent request may pass the pre-check too; the late revert
        # must surface exactly like the pre-check rejection
        result = await self.chain.write("vote", [candidate_index], voter)
        if isinstance(result.error, ContractExecutionError):
            if is_already_voted(result.error.details) or await self._has_voted(voter):
                raise AlreadyVotedError() from result.error
        receipt = result.unwrap()
        return {
            "message": "Vote cast successfully",
            "transactionHash": receipt.transaction_hash,
        }

    async def list_candidates(self) -> list[dict[str, str]]:
        """Return all candidates with string vote counts."""
        candidates = (await self.chain.read("getCandidates")).unwrap()
        return [serialize_candidate(candidate) for candidate in candidates or []]

    async def winner(self) -> dict[str, Any]:
        """Return the contract's current leader as reported by the contract."""
        result = await self.chain.read("getWinner")
        if isinstance(result.error, ContractExecutionError) and is_no_votes(result.error.details):
            raise NoVotesCastError() from result.error
        return {"winner": result.unwrap()}

    async def snapshot(self) -> dict[str, Any]:
        """Return candidates, total votes, and the winner once votes exist."""
        candidates = await self.list_candidates()
        total_votes = sum(int(candidate["voteCount"]) for candidate in candidates)
        winner = None
        if total_votes > 0:
            winner = (await self.winner())["winner"]
        return {
            "candidates": candidates,
            "totalVotes": str(total_votes),
            "winner": winner,
        }

    async def voter_status(self, address: Any) -> dict[str, Any]:
        """Return whether an address has voted, read fresh from the contract."""
        voter = normalize_address(address)
        return {"voterAddress": voter, "hasVoted": await self._has_voted(voter)}

    async def _has_voted(self, voter: str) -> bool:
        return bool((await self.chain.read("hasVoted", [voter])).unwrap())
