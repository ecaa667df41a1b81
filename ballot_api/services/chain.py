"""Contract read/write access and owner checks over web3."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from web3 import Web3

from ballot_api.config import settings
from ballot_api.utils.errors import (
    TRANSPORT_ERRORS,
    AppError,
    AuthorizationError,
    ContractExecutionError,
    InternalError,
    is_revert,
    normalize_chain_error,
    revert_reason,
)
from ballot_api.utils.web3_client import ChainContext

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Receipt:
    """Proof that a write was mined; not proof of finality."""

    transaction_hash: str
    success: bool


@dataclass(frozen=True)
class ChainResult(Generic[T]):
    """Outcome of one chain operation: a value or a normalized error."""

    value: T | None = None
    error: AppError | None = None

    @classmethod
    def success(cls, value: T) -> ChainResult[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: AppError) -> ChainResult[T]:
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


class ChainClient:
    """Thin wrapper around the bound contract that normalizes failures."""

    def __init__(
        self,
        context: ChainContext,
        timeout_seconds: float | None = None,
        poll_latency_seconds: float | None = None,
    ) -> None:
        self.context = context
        self.timeout_seconds = timeout_seconds or settings.chain_timeout_seconds
        self.poll_latency_seconds = poll_latency_seconds or settings.receipt_poll_latency_seconds

    @property
    def owner_address(self) -> str:
        return self.context.signer.owner_address

    async def read(self, method: str, args: Sequence[Any] = ()) -> ChainResult[Any]:
        """Call a view function; never submits a transaction."""
        started = time.perf_counter()
        try:
            value = await asyncio.wait_for(
                self._function(method, args).call(),
                timeout=self.timeout_seconds,
            )
        except Exception as exc:
            return self._failure(method, exc)
        self._log_if_slow(method, started)
        return ChainResult.success(value)

    async def write(
        self,
        method: str,
        args: Sequence[Any],
        signer_address: str,
    ) -> ChainResult[Receipt]:
        """Estimate gas, price, submit and wait for the mined receipt."""
        started = time.perf_counter()
        try:
            receipt = await asyncio.wait_for(
                self._submit(method, args, signer_address),
                timeout=self.timeout_seconds,
            )
        except Exception as exc:
            return self._failure(method, exc)
        self._log_if_slow(method, started)

        if not receipt.success:
            logger.warning("Transaction %s for %s reverted", receipt.transaction_hash, method)
            return ChainResult.failure(ContractExecutionError(reason="Transaction reverted"))

        logger.info("%s sent by %s, tx %s", method, signer_address, receipt.transaction_hash)
        return ChainResult.success(receipt)

    async def ensure_owner(self, claimed_address: str | None) -> None:
        """Raise AuthorizationError when a supplied owner hint does not match.

        Only rejects an explicit mismatch. It does not prove the caller holds
        the owner key.
        """
        if not claimed_address:
            return
        owner = (await self.read("owner")).unwrap()
        if str(claimed_address).lower() != str(owner).lower():
            raise AuthorizationError()

    def _function(self, method: str, args: Sequence[Any]) -> Any:
        return getattr(self.context.contract.functions, method)(*args)

    async def _submit(self, method: str, args: Sequence[Any], signer_address: str) -> Receipt:
        web3 = self.context.web3
        sender = Web3.to_checksum_address(signer_address)
        function = self._function(method, args)

        try:
            gas = await function.estimate_gas({"from": sender})
        except TRANSPORT_ERRORS:
            raise
        except Exception as exc:
            # estimation only fails when the call would revert
            reason = revert_reason(exc) if is_revert(exc) else "Gas estimation failed"
            raise ContractExecutionError(reason=reason) from exc

        gas_price = await web3.eth.gas_price
        transaction = {"from": sender, "gas": gas, "gasPrice": gas_price}

        if self.context.signer.is_owner(sender):
            transaction["nonce"] = await web3.eth.get_transaction_count(sender, "pending")
            built = await function.build_transaction(transaction)
            tx_hash = await web3.eth.send_raw_transaction(self.context.signer.sign(built))
        else:
            # node-managed account, as on a local development chain
            tx_hash = await function.transact(transaction)

        mined = await web3.eth.wait_for_transaction_receipt(
            tx_hash,
            timeout=self.timeout_seconds,
            poll_latency=self.poll_latency_seconds,
        )
        return Receipt(
            transaction_hash=Web3.to_hex(mined["transactionHash"]),
            success=mined["status"] == 1,
        )

    def _failure(self, method: str, exc: Exception) -> ChainResult[Any]:
        error = normalize_chain_error(exc)
        if isinstance(error, InternalError):
            logger.error("Chain call %s failed", method, exc_info=exc)
        else:
            logger.warning(
                "Chain call %s failed: %s (%s)",
                method,
                error.code,
                error.details or error.message,
            )
        return ChainResult.failure(error)

    def _log_if_slow(self, method: str, started: float) -> None:
        elapsed_ms = (time.perf_counter() - started) * 1000
        threshold_ms = settings.slow_chain_call_log_threshold_ms
        if threshold_ms > 0 and elapsed_ms >= threshold_ms:
            logger.warning("Slow chain call %s %.1fms", method, elapsed_ms)
