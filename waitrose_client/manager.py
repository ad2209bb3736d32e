"""Owner of the current session."""
from __future__ import annotations

import dataclasses
import logging
import time
from typing import Callable, Optional

from . import operations
from .dispatcher import ProtocolDispatcher
from .errors import AuthenticationError, WaitroseError
from .session import Session, parse_failures

logger = logging.getLogger(__name__)


class SessionManager:
    """Holds ``Session | None`` and is the only place it changes.

    Expiry is not polled: a stale token is found out when a call using it is
    rejected.

    Args:
        dispatcher: Dispatcher used for the session mutations
        clock: Returns the current time as epoch seconds
    """

    def __init__(
        self,
        dispatcher: ProtocolDispatcher,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.dispatcher = dispatcher
        self.clock = clock
        self._session: Optional[Session] = None

    def login(self, username: str, password: str) -> Session:
        """Create a new server-side session and install it.

        Raises:
            AuthenticationError: If the service reports login failures. The
                held session is left as it was.
        """
        variables = {
            "input": {
                "username": username,
                "password": password,
                "clientId": self.dispatcher.config.client_id,
            }
        }
        data = self.dispatcher.execute_rpc(operations.NEW_SESSION, variables)
        payload = data.get("generateSession")
        if not payload:
            raise AuthenticationError("Login failed: empty session payload")
        failures = parse_failures(payload.get("failures"))
        if failures:
            raise AuthenticationError(
                "Login failed: " + ", ".join(f.message for f in failures)
            )
        if not payload.get("accessToken"):
            raise AuthenticationError("Login failed: no access token issued")

        session = Session.from_payload(payload, issued_at=self.clock())
        self._session = session
        logger.info("Logged in as customer %s", session.customer_id)
        return session

    def logout(self) -> None:
        """Delete the server-side session (best effort) and drop the local one."""
        session = self._session
        if session is not None:
            try:
                self.dispatcher.execute_rpc(
                    operations.DELETE_SESSION, token=session.access_token
                )
            except WaitroseError as exc:
                logger.warning("Could not delete server session: %s", exc)
        self._session = None
        logger.info("Logged out")

    def restore(self, session: Session) -> None:
        """Install a session obtained elsewhere, without contacting the service."""
        self._session = session

    def update_order_context(self, order_id: str, order_state: Optional[str] = None) -> None:
        session = self._session
        if session is None:
            return
        self._session = dataclasses.replace(
            session,
            customer_order_id=order_id,
            customer_order_state=order_state if order_state is not None else session.customer_order_state,
        )

    def is_authenticated(self) -> bool:
        return self._session is not None

    def current_session(self) -> Optional[Session]:
        return self._session

    def current_token(self) -> Optional[str]:
        return self._session.access_token if self._session else None

    def current_order_id(self) -> Optional[str]:
        return (self._session.customer_order_id or None) if self._session else None

    def current_customer_id(self) -> Optional[str]:
        return (self._session.customer_id or None) if self._session else None

    def current_branch_id(self) -> Optional[str]:
        return (self._session.default_branch_id or None) if self._session else None
