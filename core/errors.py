"""Error taxonomy shared by the transport, merge and validation layers."""
from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional


class ErrorKind(str, Enum):
    TRANSPORT_TIMEOUT = "TRANSPORT_TIMEOUT"
    TRANSPORT_OFFLINE = "TRANSPORT_OFFLINE"
    TRANSPORT_REFUSED = "TRANSPORT_REFUSED"
    REMOTE_4XX = "REMOTE_4XX"
    REMOTE_5XX = "REMOTE_5XX"
    MALFORMED_RESPONSE = "MALFORMED_RESPONSE"
    VALIDATION = "VALIDATION"


RETRYABLE_STATUS = {408, 429}

STATUS_MESSAGES = {
    400: "Invalid request. Please check your data and try again.",
    401: "Authentication required. Please log in and try again.",
    403: "You do not have permission to perform this action.",
    404: "The requested resource was not found.",
    408: "The request timed out. Please try again.",
    429: "Too many requests. Please try again later.",
    500: "Server error occurred. Please try again later.",
    503: "Service unavailable. Please try again later.",
}


class TrackerError(Exception):
    """Base class for every error raised by the tracker engine."""

    kind: ErrorKind = ErrorKind.MALFORMED_RESPONSE
    retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        kind: Optional[ErrorKind] = None,
        retryable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if kind is not None:
            self.kind = kind
        if retryable is not None:
            self.retryable = retryable

    def to_dict(self) -> dict:
        return {"code": self.kind.value, "message": self.message, "retryable": self.retryable}


class TransportError(TrackerError):
    retryable = True

    _SUGGESTIONS = {
        ErrorKind.TRANSPORT_TIMEOUT: "The server is taking too long to respond. Please try again later.",
        ErrorKind.TRANSPORT_OFFLINE: "Please check your internet connection and try again.",
        ErrorKind.TRANSPORT_REFUSED: "The server might be down or unreachable. Please try again later.",
    }

    def __init__(self, kind: ErrorKind, message: str, *, url: Optional[str] = None) -> None:
        suggestion = self._SUGGESTIONS.get(kind)
        text = f"{message}. {suggestion}" if suggestion else message
        super().__init__(text, kind=kind)
        self.url = url


class RemoteError(TrackerError):
    def __init__(self, status: int, payload: Optional[Mapping[str, Any]] = None) -> None:
        self.status = int(status)
        self.payload = dict(payload or {})
        kind = ErrorKind.REMOTE_5XX if self.status >= 500 else ErrorKind.REMOTE_4XX
        retryable = self.status >= 500 or self.status in RETRYABLE_STATUS
        super().__init__(self._message_for(self.status, self.payload), kind=kind, retryable=retryable)

    @staticmethod
    def _message_for(status: int, payload: Mapping[str, Any]) -> str:
        message = payload.get("message") if payload else None
        if isinstance(message, str) and message.strip():
            return message
        return STATUS_MESSAGES.get(status, f"Error {status} occurred. Please try again.")


class MalformedResponseError(TrackerError):
    kind = ErrorKind.MALFORMED_RESPONSE
    retryable = True


class ValidationError(TrackerError, ValueError):
    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


__all__ = [
    "ErrorKind",
    "MalformedResponseError",
    "RemoteError",
    "TrackerError",
    "TransportError",
    "ValidationError",
]
