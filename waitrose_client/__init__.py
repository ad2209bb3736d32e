"""Public API exports."""
from .auth import (
    AuthState,
    Credentials,
    CredentialSource,
    EnvCredentialSource,
    ReauthenticationPolicy,
    restore_session,
)
from .client import WaitroseClient
from .config import ClientConfig
from .dispatcher import ProtocolDispatcher, SearchResults
from .errors import (
    AuthenticationError,
    DomainFailure,
    NotAuthenticatedError,
    ProtocolError,
    ReauthenticationFailedError,
    TransportError,
    WaitroseError,
)
from .manager import SessionManager
from .paginate import search_pages
from .session import ApiFailure, Session
from .store import ConfigStore, JsonConfigStore, SessionRecord

__version__ = "1.0.0"

__all__ = [
    "ApiFailure",
    "AuthState",
    "AuthenticationError",
    "ClientConfig",
    "ConfigStore",
    "CredentialSource",
    "Credentials",
    "DomainFailure",
    "EnvCredentialSource",
    "JsonConfigStore",
    "NotAuthenticatedError",
    "ProtocolDispatcher",
    "ProtocolError",
    "ReauthenticationFailedError",
    "ReauthenticationPolicy",
    "SearchResults",
    "Session",
    "SessionManager",
    "SessionRecord",
    "TransportError",
    "WaitroseClient",
    "WaitroseError",
    "restore_session",
    "search_pages",
]
