"""Pytest fixtures for backend tests."""

from __future__ import annotations

import asyncio
import os
from collections.abc import Iterator, Sequence
from typing import Any

import pytest
from fastapi.testclient import TestClient
from web3.exceptions import ContractLogicError

OWNER_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"
OWNER_ADDRESS = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
VOTER_ADDRESS = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
OTHER_VOTER_ADDRESS = "0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC"
CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


def _set_default_env() -> None:
    os.environ.setdefault("RPC_URL", "http://127.0.0.1:8545")
    os.environ.setdefault("CONTRACT_ADDRESS", CONTRACT_ADDRESS)
    os.environ.setdefault("PRIVATE_KEY", OWNER_PRIVATE_KEY)


_set_default_env()

from ballot_api.services.chain import ChainClient, ChainResult, Receipt  # noqa: E402
from ballot_api.utils.errors import normalize_chain_error  # noqa: E402


class FakeBallotChain(ChainClient):
    """In-memory ballot contract behind the ChainClient interface.

    Reads and writes yield to the event loop so concurrent callers
    interleave the way they do against a real node.
    """

    def __init__(self, owner: str = OWNER_ADDRESS) -> None:
        self.owner = owner
        self.candidates: list[list[Any]] = []
        self.voters: set[str] = set()
        self.calls: list[tuple[str, str]] = []
        self.failure: BaseException | None = None
        self.winner_when_empty: str | None = None
        self._tx_count = 0

    @property
    def owner_address(self) -> str:
        return self.owner

    async def read(self, method: str, args: Sequence[Any] = ()) -> ChainResult[Any]:
        self.calls.append(("read", method))
        await asyncio.sleep(0)
        if self.failure is not None:
            return ChainResult.failure(normalize_chain_error(self.failure))

        if method == "owner":
            return ChainResult.success(self.owner)
        if method == "hasVoted":
            return ChainResult.success(args[0].lower() in self.voters)
        if method == "getCandidates":
            return ChainResult.success([(name, count) for name, count in self.candidates])
        if method == "getWinner":
            if not any(count for _, count in self.candidates):
                if self.winner_when_empty is not None:
                    return ChainResult.success(self.winner_when_empty)
                return self._revert("No votes cast yet")
            leader = max(self.candidates, key=lambda candidate: candidate[1])
            return ChainResult.success(leader[0])
        raise AssertionError(f"unexpected read {method}")

    async def write(
        self,
        method: str,
        args: Sequence[Any],
        signer_address: str,
    ) -> ChainResult[Receipt]:
        self.calls.append(("write", method))
        await asyncio.sleep(0)
        if self.failure is not None:
            return ChainResult.failure(normalize_chain_error(self.failure))

        if method == "addCandidate":
            if signer_address.lower() != self.owner.lower():
                return self._revert("Only owner can add candidates")
            self.candidates.append([args[0], 0])
        elif method == "vote":
            voter = signer_address.lower()
            if voter in self.voters:
                return self._revert("You have already voted")
            if args[0] >= len(self.candidates):
                return self._revert("Invalid candidate index")
            self.voters.add(voter)
            self.candidates[args[0]][1] += 1
        else:
            raise AssertionError(f"unexpected write {method}")

        self._tx_count += 1
        return ChainResult.success(
            Receipt(transaction_hash=f"0x{self._tx_count:064x}", success=True)
        )

    @staticmethod
    def _revert(reason: str) -> ChainResult[Any]:
        exc = ContractLogicError(f"execution reverted: {reason}")
        return ChainResult.failure(normalize_chain_error(exc))


@pytest.fixture
def chain() -> FakeBallotChain:
    """Fresh in-memory ballot for each test."""
    return FakeBallotChain()


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a FastAPI test client."""
    from ballot_api.main import app

    return TestClient(app)


@pytest.fixture
def api(client: TestClient, chain: FakeBallotChain) -> Iterator[TestClient]:
    """Test client whose handlers talk to the in-memory ballot."""
    from ballot_api.dependencies import get_chain_client
    from ballot_api.main import app

    app.dependency_overrides[get_chain_client] = lambda: chain
    yield client
    app.dependency_overrides.pop(get_chain_client, None)
