"""Credential sources and the re-authentication policy."""
from __future__ import annotations

import enum
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Mapping, Optional, TypeVar

from .errors import (
    DomainFailure,
    NotAuthenticatedError,
    ReauthenticationFailedError,
    WaitroseError,
    is_auth_failure,
)
from .manager import SessionManager
from .session import Session
from .store import ConfigStore, SessionRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

USERNAME_VARS = ("WAITROSE_USERNAME", "WAITROSE_EMAIL")
PASSWORD_VARS = ("WAITROSE_PASSWORD",)
TOKEN_VARS = ("WAITROSE_ACCESS_TOKEN", "WAITROSE_TOKEN")

NOT_AUTHENTICATED_MESSAGE = (
    "Not authenticated. Run 'waitrose login' or set WAITROSE_USERNAME and "
    "WAITROSE_PASSWORD environment variables."
)


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"


class CredentialSource(ABC):
    """Somewhere a username and password can be obtained from."""

    @abstractmethod
    def resolve(self) -> Optional[Credentials]:
        """Return credentials, or None if none are available."""
        raise NotImplementedError

    def access_token(self) -> Optional[str]:
        """A bearer token that replaces login altogether, if one is configured."""
        return None


def _first_env(environ: Mapping[str, str], names: tuple[str, ...]) -> Optional[str]:
    for name in names:
        value = environ.get(name)
        if value:
            return value
    return None


class EnvCredentialSource(CredentialSource):
    """Reads ``WAITROSE_*`` variables; the username may fall back to the stored record."""

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        store: Optional[ConfigStore] = None,
    ) -> None:
        self.environ = os.environ if environ is None else environ
        self.store = store

    def username(self) -> Optional[str]:
        username = _first_env(self.environ, USERNAME_VARS)
        if not username and self.store is not None:
            username = self.store.load().username
        return username

    def password(self) -> Optional[str]:
        return _first_env(self.environ, PASSWORD_VARS)

    def resolve(self) -> Optional[Credentials]:
        username = self.username()
        password = self.password()
        if username and password:
            return Credentials(username, password)
        return None

    def access_token(self) -> Optional[str]:
        return _first_env(self.environ, TOKEN_VARS)


class AuthState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    REAUTHENTICATING = "reauthenticating"


class ReauthenticationPolicy:
    """Runs operations with a session, recovering once from a rejected token.

    An operation is a zero-argument callable that reads the current token
    from the session manager when it runs, so a retry after re-login picks up
    the new token. At most one re-login and one retry happen per ``run``.

    Args:
        manager: Session owner used for login
        credentials: Where usernames and passwords come from
        store: Optional store the session record is saved to after each login
        token_override: True when the session came from an injected bearer
            token; login is then never attempted
    """

    def __init__(
        self,
        manager: SessionManager,
        credentials: CredentialSource,
        store: Optional[ConfigStore] = None,
        token_override: bool = False,
    ) -> None:
        self.manager = manager
        self.credentials = credentials
        self.store = store
        self.token_override = token_override
        self._reauthenticating = False

    @property
    def state(self) -> AuthState:
        if self._reauthenticating:
            return AuthState.REAUTHENTICATING
        if self.manager.is_authenticated():
            return AuthState.AUTHENTICATED
        return AuthState.UNAUTHENTICATED

    def login(self, credentials: Credentials) -> Session:
        """Log in and persist the new session record."""
        session = self.manager.login(credentials.username, credentials.password)
        if self.store is not None:
            record = self.store.load().merged(
                SessionRecord.from_session(session, username=credentials.username)
            )
            self.store.save(record)
        return session

    def ensure_authenticated(self) -> None:
        if self.manager.is_authenticated():
            return
        creds = None if self.token_override else self.credentials.resolve()
        if creds is None:
            raise NotAuthenticatedError(NOT_AUTHENTICATED_MESSAGE)
        self.login(creds)

    def run(self, operation: Callable[[], T]) -> T:
        """Execute ``operation``, re-authenticating once if its token is rejected.

        Raises:
            NotAuthenticatedError: No session and no credentials to create one
            ReauthenticationFailedError: The token was rejected and the single
                re-login or retry did not succeed
        """
        self.ensure_authenticated()
        try:
            return operation()
        except Exception as exc:
            if not is_auth_failure(exc):
                raise
            first_error = exc

        logger.info("Session rejected (%s); logging in again", first_error)
        self._reauthenticating = True
        try:
            creds = None if self.token_override else self.credentials.resolve()
            if creds is None:
                raise ReauthenticationFailedError(
                    f"Authentication failed and no credentials are available: {first_error}",
                    first_error,
                ) from first_error
            try:
                self.login(creds)
            except WaitroseError as exc:
                raise ReauthenticationFailedError(
                    f"Re-authentication failed: {exc}", exc
                ) from exc
        finally:
            self._reauthenticating = False

        try:
            return operation()
        except DomainFailure:
            raise
        except Exception as exc:
            raise ReauthenticationFailedError(
                f"Re-authentication failed: {exc}", exc
            ) from exc


def restore_session(
    manager: SessionManager,
    credentials: CredentialSource,
    store: Optional[ConfigStore] = None,
) -> bool:
    """Install a session from an injected token or an unexpired stored record.

    Returns:
        bool: True if the session came from an injected token, meaning login
        must not be attempted for the rest of the process.
    """
    token = credentials.access_token()
    if token:
        logger.debug("Using access token from environment")
        manager.restore(Session.from_token(token, issued_at=manager.clock()))
        return True
    if store is not None:
        record = store.load()
        if not record.is_expired(manager.clock()):
            session = record.to_session()
            if session is not None:
                logger.debug("Restored stored session for customer %s", session.customer_id)
                manager.restore(session)
    return False
