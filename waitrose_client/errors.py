"""Error classes for the Waitrose client."""
from __future__ import annotations

from typing import Any, Optional, Sequence


def _snippet(message: str) -> str:
    return message if len(message) <= 300 else message[:300]


class WaitroseError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str) -> None:
        super().__init__(_snippet(message))


class TransportError(WaitroseError):
    """Raised for a non-2xx HTTP status or a failed connection."""

    def __init__(
        self, message: str, status_code: Optional[int] = None, body: str = ""
    ) -> None:
        if status_code is not None:
            msg = f"HTTP {status_code}: {_snippet(message)}"
        else:
            msg = message
        super().__init__(msg)
        self.status_code = status_code
        self.body = body

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code == 401


AUTH_ERROR_MARKERS = ("401", "Unauthorized", "UNAUTHENTICATED")


class ProtocolError(WaitroseError):
    """Raised for a 2xx GraphQL response carrying a top-level ``errors`` list."""

    def __init__(
        self, message: str, errors: Optional[Sequence[dict[str, Any]]] = None
    ) -> None:
        super().__init__(message)
        self.errors = list(errors or [])

    @property
    def is_auth_failure(self) -> bool:
        for error in self.errors:
            if not isinstance(error, dict):
                continue
            code = (error.get("extensions") or {}).get("code")
            if code == "UNAUTHENTICATED":
                return True
            text = str(error.get("message") or "")
            if any(marker in text for marker in AUTH_ERROR_MARKERS):
                return True
        return False


class DomainFailure(WaitroseError):
    """A business rejection reported in the ``failures`` list of a 200 OK payload."""

    def __init__(self, message: str, failures: Optional[Sequence[Any]] = None) -> None:
        super().__init__(message)
        self.failures = list(failures or [])


class AuthenticationError(WaitroseError):
    """The backend rejected the login itself."""


class NotAuthenticatedError(WaitroseError):
    """No session and no usable credentials."""


class ReauthenticationFailedError(WaitroseError):
    """The single re-login and retry cycle did not recover the call."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


def is_auth_failure(exc: BaseException) -> bool:
    """Return True if ``exc`` is a transport/protocol error signalling a rejected token."""
    if isinstance(exc, (TransportError, ProtocolError)):
        return exc.is_auth_failure
    return False
