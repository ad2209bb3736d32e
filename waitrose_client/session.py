"""Session value for an authenticated shopper."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence

from .config import DEFAULT_EXPIRES_IN


@dataclass(frozen=True)
class ApiFailure:
    """A failure reported inside an otherwise successful response payload."""

    type: str
    message: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ApiFailure":
        return cls(type=str(data.get("type") or ""), message=str(data.get("message") or ""))


def parse_failures(raw: Optional[Sequence[Mapping[str, Any]]]) -> list[ApiFailure]:
    return [ApiFailure.from_dict(item) for item in (raw or [])]


@dataclass(frozen=True)
class Session:
    """The authenticated identity and shopping context returned by a login.

    Instances are immutable. A new login replaces the held session, and the
    order id/state are changed only by swapping in a copy, so callers never
    observe a half-built session.

    Attributes:
        access_token: Bearer credential sent with every authenticated call
        refresh_token: Returned by the service but unusable for refresh
        customer_id: Customer identifier, also used in search URLs
        customer_order_id: The in-progress order (trolley) id
        customer_order_state: State of that order, e.g. ``PENDING``
        default_branch_id: Branch used for availability and slots
        expires_in: Token lifetime in seconds from issuance
        expires_at: Absolute expiry as epoch seconds
    """

    access_token: str
    refresh_token: str
    customer_id: str
    customer_order_id: str
    customer_order_state: str
    default_branch_id: str
    expires_in: int
    expires_at: float

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], issued_at: float) -> "Session":
        """Build a session from a ``generateSession`` payload issued at ``issued_at``."""
        expires_in = int(payload.get("expiresIn") or DEFAULT_EXPIRES_IN)
        return cls(
            access_token=str(payload["accessToken"]),
            refresh_token=str(payload.get("refreshToken") or ""),
            customer_id=str(payload.get("customerId") or ""),
            customer_order_id=str(payload.get("customerOrderId") or ""),
            customer_order_state=str(payload.get("customerOrderState") or ""),
            default_branch_id=str(payload.get("defaultBranchId") or ""),
            expires_in=expires_in,
            expires_at=issued_at + expires_in,
        )

    @classmethod
    def from_token(cls, access_token: str, issued_at: float) -> "Session":
        """Wrap a bare bearer token supplied from outside (e.g. the environment)."""
        return cls(
            access_token=access_token,
            refresh_token="",
            customer_id="",
            customer_order_id="",
            customer_order_state="",
            default_branch_id="",
            expires_in=DEFAULT_EXPIRES_IN,
            expires_at=issued_at + DEFAULT_EXPIRES_IN,
        )

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at
