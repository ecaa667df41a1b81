"""Chain failure classification tests."""

from __future__ import annotations

import pytest
from web3.exceptions import ContractLogicError, TimeExhausted

from ballot_api.utils.errors import (
    AlreadyVotedError,
    ContractExecutionError,
    InternalError,
    UpstreamUnavailableError,
    ValidationError,
    is_already_voted,
    is_no_votes,
    normalize_chain_error,
    revert_reason,
)


@pytest.mark.parametrize(
    ("exc", "exc_type"),
    [
        (ContractLogicError("execution reverted: Invalid candidate"), ContractExecutionError),
        (ValueError("VM Exception while processing transaction: revert"), ContractExecutionError),
        (ValueError({"code": -32000, "message": "execution reverted"}), ContractExecutionError),
        (ConnectionRefusedError("connection refused"), UpstreamUnavailableError),
        (TimeExhausted("receipt not found after 120 seconds"), UpstreamUnavailableError),
        (TimeoutError(), UpstreamUnavailableError),
        (KeyError("transactionHash"), InternalError),
        (ValueError("nonce too low"), InternalError),
    ],
)
def test_normalize_chain_error_maps_failures(exc: Exception, exc_type: type[Exception]) -> None:
    """Reverts, transport failures and everything else land in stable buckets."""
    error = normalize_chain_error(exc)
    assert type(error) is exc_type


def test_normalize_chain_error_keeps_app_errors() -> None:
    """Already-normalized errors pass through untouched."""
    error = ValidationError("Invalid voter address")
    assert normalize_chain_error(error) is error


@pytest.mark.parametrize(
    ("message", "reason"),
    [
        ("execution reverted: You have already voted", "You have already voted"),
        (
            "VM Exception while processing transaction: reverted with reason string "
            "'Only owner can add candidates'",
            "Only owner can add candidates",
        ),
        ("VM Exception while processing transaction: revert No votes cast", "No votes cast"),
        ("execution reverted", None),
    ],
)
def test_revert_reason_extraction(message: str, reason: str | None) -> None:
    """The human-readable reason follows the revert marker."""
    assert revert_reason(ContractLogicError(message)) == reason


def test_internal_error_hides_details() -> None:
    """Unclassified failures never echo the underlying message."""
    error = normalize_chain_error(RuntimeError("http://node.internal:8545 secret"))
    assert error.to_dict() == {"error": "Internal server error", "code": "INTERNAL_ERROR"}
    assert error.status_code == 500


def test_contract_error_serializes_reason() -> None:
    """Revert reasons are returned to the caller as details."""
    error = normalize_chain_error(ContractLogicError("execution reverted: Invalid candidate"))
    assert error.status_code == 400
    assert error.to_dict() == {
        "error": "Contract execution failed",
        "code": "CONTRACT_EXECUTION_FAILED",
        "details": "Invalid candidate",
    }


def test_already_voted_is_a_contract_execution_error() -> None:
    """Pre-check and late-revert rejections share one category."""
    error = AlreadyVotedError()
    assert isinstance(error, ContractExecutionError)
    assert error.status_code == 400
    assert error.code == "ALREADY_VOTED"


def test_reason_matchers() -> None:
    assert is_already_voted("You have already voted")
    assert is_already_voted("Already  Voted")
    assert not is_already_voted(None)
    assert is_no_votes("No votes cast yet")
    assert not is_no_votes("Invalid candidate")
