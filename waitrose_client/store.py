"""Persistence of the session record between CLI invocations."""
from __future__ import annotations

import json
import logging
import math
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

from .config import DEFAULT_EXPIRES_IN
from .session import Session

logger = logging.getLogger(__name__)

# Treat a stored token as expired this many milliseconds early.
EXPIRY_SKEW_MS = 60_000

_KEYS = {
    "access_token": "accessToken",
    "refresh_token": "refreshToken",
    "customer_id": "customerId",
    "customer_order_id": "customerOrderId",
    "customer_order_state": "customerOrderState",
    "default_branch_id": "defaultBranchId",
    "username": "username",
    "expires_at": "expiresAt",
}


def _text(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


def _millis(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and math.isfinite(value):
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None


def default_config_dir() -> Path:
    env = os.getenv("WAITROSE_CONFIG_DIR")
    return Path(env) if env else Path.home() / ".waitrose"


@dataclass
class SessionRecord:
    """The persisted form of a session; ``expires_at`` is epoch milliseconds."""

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    customer_id: Optional[str] = None
    customer_order_id: Optional[str] = None
    customer_order_state: Optional[str] = None
    default_branch_id: Optional[str] = None
    username: Optional[str] = None
    expires_at: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SessionRecord":
        """Build a record from stored JSON, dropping values of the wrong type."""
        values = {attr: _text(data.get(key)) for attr, key in _KEYS.items()}
        values["expires_at"] = _millis(data.get(_KEYS["expires_at"]))
        return cls(**values)

    def to_dict(self) -> dict[str, Any]:
        return {
            _KEYS[f.name]: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @classmethod
    def from_session(
        cls, session: Session, username: Optional[str] = None
    ) -> "SessionRecord":
        return cls(
            access_token=session.access_token,
            refresh_token=session.refresh_token,
            customer_id=session.customer_id,
            customer_order_id=session.customer_order_id,
            customer_order_state=session.customer_order_state,
            default_branch_id=session.default_branch_id,
            username=username,
            expires_at=int(session.expires_at * 1000),
        )

    def merged(self, other: "SessionRecord") -> "SessionRecord":
        """Return a copy overlaid with the non-empty fields of ``other``."""
        values = {f.name: getattr(self, f.name) for f in fields(self)}
        for f in fields(other):
            value = getattr(other, f.name)
            if value is not None:
                values[f.name] = value
        return SessionRecord(**values)

    def is_expired(self, now: float) -> bool:
        """Whether the token is past, or within a minute of, its expiry."""
        if not self.expires_at:
            return True
        return now * 1000 > self.expires_at - EXPIRY_SKEW_MS

    def to_session(self) -> Optional[Session]:
        """Rebuild a session from the record, or None if it holds no token."""
        if not self.access_token:
            return None
        expires_at = (self.expires_at or 0) / 1000
        return Session(
            access_token=self.access_token,
            refresh_token=self.refresh_token or "",
            customer_id=self.customer_id or "",
            customer_order_id=self.customer_order_id or "",
            customer_order_state=self.customer_order_state or "",
            default_branch_id=self.default_branch_id or "",
            expires_in=DEFAULT_EXPIRES_IN,
            expires_at=expires_at,
        )


class ConfigStore(ABC):
    """Key-value persistence for the session record."""

    @abstractmethod
    def load(self) -> SessionRecord:
        raise NotImplementedError

    @abstractmethod
    def save(self, record: SessionRecord) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        self.save(SessionRecord())


class JsonConfigStore(ConfigStore):
    """Stores the record as JSON, by default in ``~/.waitrose/config.json``."""

    def __init__(self, path: Optional[Path] = None) -> None:
        self.path = Path(path) if path else default_config_dir() / "config.json"

    def load(self) -> SessionRecord:
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return SessionRecord()
        except OSError as exc:
            logger.warning("Could not read %s: %s", self.path, exc)
            return SessionRecord()
        try:
            data = json.loads(text)
        except ValueError:
            logger.warning("Ignoring malformed config file %s", self.path)
            return SessionRecord()
        if not isinstance(data, dict):
            return SessionRecord()
        return SessionRecord.from_dict(data)

    def save(self, record: SessionRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(record.to_dict(), indent=2), encoding="utf-8")
        logger.debug("Saved session record to %s", self.path)


class MemoryConfigStore(ConfigStore):
    """In-process store, for tests and one-off scripts."""

    def __init__(self, record: Optional[SessionRecord] = None) -> None:
        self.record = record or SessionRecord()

    def load(self) -> SessionRecord:
        return SessionRecord(**{f.name: getattr(self.record, f.name) for f in fields(self.record)})

    def save(self, record: SessionRecord) -> None:
        self.record = record
