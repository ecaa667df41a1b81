"""Custom exception hierarchy for the ballot API."""

from __future__ import annotations

import re

from web3.exceptions import ContractLogicError, ProviderConnectionError, TimeExhausted

_REVERT_MARKER = "revert"
_REVERT_REASON = re.compile(r"revert(?:ed)?\b:?\s*(.*)", re.IGNORECASE | re.DOTALL)
_REASON_STRING = re.compile(r"reason string ['\"](.*?)['\"]", re.IGNORECASE)
_ALREADY_VOTED = re.compile(r"already\s+voted", re.IGNORECASE)
_NO_VOTES = re.compile(r"no\s+votes", re.IGNORECASE)

TRANSPORT_ERRORS = (ProviderConnectionError, TimeExhausted, TimeoutError, OSError)


class AppError(Exception):
    """Base application error with a stable machine-readable code."""

    def __init__(
        self,
        message: str,
        code: str,
        status_code: int = 400,
        details: str | None = None,
    ) -> None:
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, str]:
        """Serialize the error in the API standard shape."""
        payload = {"error": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class ValidationError(AppError):
    """Raised for request payload or parameter validation issues."""

    def __init__(self, reason: str) -> None:
        super().__init__(message=reason, code="VALIDATION_ERROR", status_code=400)


class AuthorizationError(AppError):
    """Raised when the caller lacks permission for the action."""

    def __init__(self, reason: str = "Only the contract owner can perform this action") -> None:
        super().__init__(message=reason, code="FORBIDDEN", status_code=403)


class ContractExecutionError(AppError):
    """Raised when the ledger rejected an operation."""

    def __init__(
        self,
        reason: str | None = None,
        message: str = "Contract execution failed",
        code: str = "CONTRACT_EXECUTION_FAILED",
    ) -> None:
        super().__init__(message=message, code=code, status_code=400, details=reason)


class AlreadyVotedError(ContractExecutionError):
    """Raised when an address tries to vote a second time."""

    def __init__(self) -> None:
        super().__init__(message="This address has already voted", code="ALREADY_VOTED")


class NoVotesCastError(ContractExecutionError):
    """Raised when a winner is requested before any vote exists."""

    def __init__(self) -> None:
        super().__init__(message="No votes cast", code="NO_VOTES_CAST")


class UpstreamUnavailableError(AppError):
    """Raised when the blockchain node cannot be reached or times out."""

    def __init__(self, reason: str = "Blockchain node unavailable") -> None:
        super().__init__(message=reason, code="UPSTREAM_UNAVAILABLE", status_code=502)


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str) -> None:
        super().__init__(message=f"{resource} not found", code="NOT_FOUND", status_code=404)


class InternalError(AppError):
    """Unclassified failure; the caller only ever sees a generic message."""

    def __init__(self) -> None:
        super().__init__(message="Internal server error", code="INTERNAL_ERROR", status_code=500)


def failure_message(exc: BaseException) -> str:
    """Return the most descriptive message web3 attached to ``exc``."""
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    if exc.args and isinstance(exc.args[0], dict):
        return str(exc.args[0].get("message") or exc)
    return str(exc)


def is_revert(exc: BaseException) -> bool:
    """Return True when the failure reads like a contract revert."""
    if isinstance(exc, ContractLogicError):
        return True
    return _REVERT_MARKER in failure_message(exc).lower()


def revert_reason(exc: BaseException) -> str | None:
    """Extract the human-readable reason following the revert marker."""
    message = failure_message(exc)
    quoted = _REASON_STRING.search(message)
    if quoted:
        return quoted.group(1).strip() or None
    match = _REVERT_REASON.search(message)
    if not match:
        return message.strip() or None
    reason = match.group(1).strip().strip("'\"").strip()
    return reason or None


def is_already_voted(reason: str | None) -> bool:
    """Return True when a revert reason says the voter already voted."""
    return bool(reason and _ALREADY_VOTED.search(reason))


def is_no_votes(reason: str | None) -> bool:
    """Return True when a revert reason says no votes exist yet."""
    return bool(reason and _NO_VOTES.search(reason))


def normalize_chain_error(exc: BaseException) -> AppError:
    """Map any chain-client failure into the API error taxonomy.

    A failure whose message mentions a revert is a ``ContractExecutionError``
    carrying the revert reason. Transport failures and timeouts become
    ``UpstreamUnavailableError``. Everything else is an ``InternalError``.
    Classification is substring based and will misfile a node that reports
    reverts without the marker.
    """
    if isinstance(exc, AppError):
        return exc
    if is_revert(exc):
        return ContractExecutionError(reason=revert_reason(exc))
    if isinstance(exc, TRANSPORT_ERRORS):
        return UpstreamUnavailableError()
    return InternalError()
