"""Web3 connection, contract binding, and the owner signing credential."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from eth_account import Account
from eth_account.signers.local import LocalAccount
from web3 import AsyncHTTPProvider, AsyncWeb3, Web3
from web3.contract import AsyncContract

from ballot_api.config import Settings

DEFAULT_ABI_PATH = Path(__file__).resolve().parents[1] / "contracts" / "Voting.json"


class ConfigurationError(RuntimeError):
    """Raised at start-up when a process precondition is not met."""


@dataclass(frozen=True)
class SigningContext:
    """The single privileged credential used for owner writes."""

    account: LocalAccount

    @classmethod
    def from_private_key(cls, private_key: str | None) -> SigningContext:
        """Derive the owner account, failing fast on a missing or bad key."""
        if not private_key or not private_key.strip():
            raise ConfigurationError("PRIVATE_KEY is not configured")
        try:
            account = Account.from_key(private_key.strip())
        except Exception as exc:
            raise ConfigurationError("PRIVATE_KEY is malformed") from exc
        return cls(account=account)

    @property
    def owner_address(self) -> str:
        return self.account.address

    def is_owner(self, address: str) -> bool:
        """Return True when ``address`` is the owner account."""
        return address.lower() == self.owner_address.lower()

    def sign(self, transaction: dict[str, Any]) -> bytes:
        """Sign a fully built transaction and return the raw payload."""
        signed = self.account.sign_transaction(transaction)
        return signed.raw_transaction


@dataclass
class ChainContext:
    """Node connection, bound contract and signer shared by all requests.

    Created once at process start and read-only afterwards.
    """

    web3: AsyncWeb3
    contract: AsyncContract
    signer: SigningContext

    async def close(self) -> None:
        """Release pooled HTTP sessions held by the provider."""
        await self.web3.provider.disconnect()


def load_abi(path: str | Path | None = None) -> list[dict[str, Any]]:
    """Load a contract ABI from a bare ABI list or a Hardhat artifact."""
    abi_path = Path(path) if path else DEFAULT_ABI_PATH
    try:
        document = json.loads(abi_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Contract ABI could not be read from {abi_path}") from exc

    abi = document if isinstance(document, list) else document.get("abi")
    if not isinstance(abi, list) or not abi:
        raise ConfigurationError(f"No ABI entries found in {abi_path}")
    return abi


def build_chain_context(config: Settings) -> ChainContext:
    """Connect to the node and bind the deployed contract."""
    if not config.rpc_url.strip():
        raise ConfigurationError("RPC_URL is not configured")
    if not Web3.is_address(config.contract_address):
        raise ConfigurationError("CONTRACT_ADDRESS is not a valid address")

    signer = SigningContext.from_private_key(config.private_key.get_secret_value())
    abi = load_abi(config.contract_abi_path)

    web3 = AsyncWeb3(AsyncHTTPProvider(config.rpc_url))
    contract = web3.eth.contract(
        address=Web3.to_checksum_address(config.contract_address),
        abi=abi,
    )
    return ChainContext(web3=web3, contract=contract, signer=signer)
