"""Exceptions raised by the Quantumic session controller."""

import re


class QuantumicError(Exception):
    """Base error for the session controller."""
    pass


class RemoteError(QuantumicError):
    """A remote call failed. `reason` is the human-readable cause, if known."""

    def __init__(self, message: str, reason: str | None = None, method: str | None = None):
        super().__init__(message)
        self.reason = reason
        self.method = method


class RemoteTransient(RemoteError):
    """Transport-level failure; retryable in principle but never retried here."""
    pass


class RemoteRejected(RemoteError):
    """The remote refused the request (policy or validation)."""
    pass


class ValidationError(QuantumicError, ValueError):
    """Client-side input rejected before dispatch."""
    pass


class OperationBusy(QuantumicError):
    """An operation of the same kind is already outstanding."""
    pass


class SessionClosed(QuantumicError):
    """The session was stopped; no further operations are accepted."""
    pass


class ConversationStateError(QuantumicError):
    """The transcript placeholder protocol was violated."""
    pass


class NoPendingTurn(ConversationStateError):
    """resolve_pending_turn was called with no placeholder in the transcript."""
    pass


# Error text shapes produced by the backend agent runtime
_REJECT_CODE_PATTERN = re.compile(r'(SysTransient|CanisterReject), \\*"([^\\"]+)')
_REJECT_TEXT_MARKER = "Reject text:"


def extract_reason(exc: BaseException) -> str | None:
    """
    Pull a human-readable reason out of a failure.

    RemoteError carries its reason directly. For anything else the
    message text is searched for the backend's reject shapes.
    Returns None when nothing usable is found.
    """
    if isinstance(exc, RemoteError) and exc.reason:
        return exc.reason

    text = str(exc)
    match = _REJECT_CODE_PATTERN.search(text)
    if match:
        return match.group(2)

    if _REJECT_TEXT_MARKER in text:
        reason = text.split(_REJECT_TEXT_MARKER, 1)[1].strip()
        return reason or None

    return None
