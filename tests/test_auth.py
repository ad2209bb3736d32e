import pathlib
import sys
from dataclasses import dataclass

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from waitrose_client.auth import (
    AuthState,
    Credentials,
    CredentialSource,
    EnvCredentialSource,
    ReauthenticationPolicy,
    restore_session,
)
from waitrose_client.config import ClientConfig
from waitrose_client.dispatcher import ProtocolDispatcher
from waitrose_client.errors import (
    DomainFailure,
    NotAuthenticatedError,
    ProtocolError,
    ReauthenticationFailedError,
    TransportError,
)
from waitrose_client.manager import SessionManager
from waitrose_client.session import Session
from waitrose_client.store import MemoryConfigStore, SessionRecord
from waitrose_client.transport import Transport

NOW = 1_700_000_000.0


@dataclass
class DummyResponse:
    status_code: int
    _json: dict
    text: str = ""

    def json(self):
        return self._json


class LoginTransport(Transport):
    """Answers every POST with a fresh session, or with a login failure."""

    def __init__(self, reject=False):
        self.reject = reject
        self.logins = 0

    def post(self, url, headers, json, timeout):
        self.logins += 1
        if self.reject:
            failures = [{"type": "INVALID", "message": "Bad credentials"}]
            return DummyResponse(200, {"data": {"generateSession": {"failures": failures}}})
        payload = {
            "accessToken": f"token-{self.logins}",
            "refreshToken": "r",
            "customerId": "C1",
            "customerOrderId": "O1",
            "customerOrderState": "PENDING",
            "defaultBranchId": "651",
            "expiresIn": 900,
            "failures": None,
        }
        return DummyResponse(200, {"data": {"generateSession": payload}})

    def get(self, url, headers, params, timeout):
        raise AssertionError("unexpected GET")


class StaticCredentials(CredentialSource):
    def __init__(self, creds=None, token=None, on_resolve=None):
        self.creds = creds
        self.token = token
        self.on_resolve = on_resolve
        self.resolved = 0

    def resolve(self):
        self.resolved += 1
        if self.on_resolve:
            self.on_resolve()
        return self.creds

    def access_token(self):
        return self.token


class Operation:
    """Callable that fails with queued errors before succeeding, recording the token used."""

    def __init__(self, manager, errors, result="ok"):
        self.manager = manager
        self.errors = list(errors)
        self.result = result
        self.tokens = []

    @property
    def attempts(self):
        return len(self.tokens)

    def __call__(self):
        self.tokens.append(self.manager.current_token())
        if self.errors:
            error = self.errors.pop(0)
            if error is not None:
                raise error
        return self.result


def unauthorized():
    return TransportError("Unauthorized", 401, body="Unauthorized")


def make_policy(creds=Credentials("user", "pass"), reject=False, store=None, **kwargs):
    transport = LoginTransport(reject=reject)
    manager = SessionManager(ProtocolDispatcher(ClientConfig(), transport), clock=lambda: NOW)
    source = creds if isinstance(creds, CredentialSource) else StaticCredentials(creds)
    policy = ReauthenticationPolicy(manager, source, store, **kwargs)
    return policy, manager, transport


def restored_session(token="stored"):
    return Session(token, "r", "C1", "O1", "PENDING", "651", 900, NOW + 900)


def test_no_credentials_fails_without_running_operation():
    policy, manager, transport = make_policy(creds=None)
    op = Operation(manager, [])
    with pytest.raises(NotAuthenticatedError):
        policy.run(op)
    assert op.attempts == 0
    assert transport.logins == 0
    assert policy.state is AuthState.UNAUTHENTICATED


def test_first_run_logs_in_and_persists():
    store = MemoryConfigStore()
    policy, manager, transport = make_policy(store=store)
    op = Operation(manager, [])
    assert policy.run(op) == "ok"
    assert transport.logins == 1
    assert op.tokens == ["token-1"]
    assert policy.state is AuthState.AUTHENTICATED
    record = store.load()
    assert record.access_token == "token-1"
    assert record.username == "user"
    assert record.expires_at == int((NOW + 900) * 1000)


def test_always_unauthorized_stops_after_one_retry():
    policy, manager, transport = make_policy()
    op = Operation(manager, [unauthorized(), unauthorized(), unauthorized()])
    with pytest.raises(ReauthenticationFailedError) as exc:
        policy.run(op)
    assert op.attempts == 2
    assert transport.logins == 2
    assert isinstance(exc.value.cause, TransportError)
    assert policy.state is AuthState.AUTHENTICATED


def test_unauthorized_once_then_success():
    policy, manager, transport = make_policy()
    op = Operation(manager, [unauthorized()], result={"trolley": []})
    assert policy.run(op) == {"trolley": []}
    assert transport.logins == 2
    assert op.tokens == ["token-1", "token-2"]


def test_protocol_unauthenticated_triggers_reauth():
    policy, manager, transport = make_policy()
    error = ProtocolError(
        "GraphQL Error: denied", [{"message": "denied", "extensions": {"code": "UNAUTHENTICATED"}}]
    )
    op = Operation(manager, [error])
    assert policy.run(op) == "ok"
    assert op.attempts == 2


def test_server_error_is_not_retried():
    policy, manager, transport = make_policy()
    error = TransportError("boom", 500)
    op = Operation(manager, [error])
    with pytest.raises(TransportError) as exc:
        policy.run(op)
    assert exc.value is error
    assert op.attempts == 1
    assert transport.logins == 1


def test_domain_failure_is_not_retried():
    policy, manager, transport = make_policy()
    error = DomainFailure("Cancel failed: too late")
    op = Operation(manager, [error])
    with pytest.raises(DomainFailure) as exc:
        policy.run(op)
    assert exc.value is error
    assert op.attempts == 1


def test_protocol_error_mentioning_product_text_is_not_retried():
    policy, manager, _ = make_policy()
    error = ProtocolError("GraphQL Error: invalid lineNumber", [{"message": "invalid lineNumber"}])
    op = Operation(manager, [error])
    with pytest.raises(ProtocolError):
        policy.run(op)
    assert op.attempts == 1


def test_restored_session_is_used_without_login():
    policy, manager, transport = make_policy()
    manager.restore(restored_session())
    assert policy.state is AuthState.AUTHENTICATED
    op = Operation(manager, [])
    policy.run(op)
    assert transport.logins == 0
    assert op.tokens == ["stored"]


def test_expired_restored_session_recovers_with_single_login():
    policy, manager, transport = make_policy()
    manager.restore(restored_session())
    op = Operation(manager, [unauthorized()])
    assert policy.run(op) == "ok"
    assert transport.logins == 1
    assert op.tokens == ["stored", "token-1"]


def test_missing_credentials_during_reauth_fails_terminally():
    policy, manager, transport = make_policy(creds=None)
    manager.restore(restored_session())
    first = unauthorized()
    op = Operation(manager, [first])
    with pytest.raises(ReauthenticationFailedError) as exc:
        policy.run(op)
    assert exc.value.cause is first
    assert op.attempts == 1
    assert transport.logins == 0


def test_rejected_relogin_fails_terminally():
    policy, manager, transport = make_policy(reject=True)
    manager.restore(restored_session())
    op = Operation(manager, [unauthorized()])
    with pytest.raises(ReauthenticationFailedError) as exc:
        policy.run(op)
    assert "Bad credentials" in str(exc.value)
    assert op.attempts == 1
    assert manager.current_token() == "stored"


def test_injected_token_never_logs_in():
    policy, manager, transport = make_policy(token_override=True)
    manager.restore(Session.from_token("env-token", issued_at=NOW))
    op = Operation(manager, [unauthorized()])
    with pytest.raises(ReauthenticationFailedError):
        policy.run(op)
    assert transport.logins == 0
    assert op.attempts == 1


def test_state_is_reauthenticating_while_resolving_credentials():
    seen = []
    source = StaticCredentials(Credentials("user", "pass"))
    policy, manager, _ = make_policy(creds=source)
    source.on_resolve = lambda: seen.append(policy.state)
    manager.restore(restored_session())
    policy.run(Operation(manager, [unauthorized()]))
    assert seen == [AuthState.REAUTHENTICATING]
    assert policy.state is AuthState.AUTHENTICATED


def test_restore_session_prefers_environment_token():
    store = MemoryConfigStore(SessionRecord(access_token="stored", expires_at=int((NOW + 900) * 1000)))
    _, manager, _ = make_policy()
    override = restore_session(manager, StaticCredentials(token="env-token"), store)
    assert override is True
    assert manager.current_token() == "env-token"


def test_restore_session_uses_unexpired_record():
    record = SessionRecord(
        access_token="stored",
        customer_id="C1",
        customer_order_id="O1",
        default_branch_id="651",
        expires_at=int((NOW + 900) * 1000),
    )
    _, manager, _ = make_policy()
    assert restore_session(manager, StaticCredentials(), MemoryConfigStore(record)) is False
    assert manager.current_token() == "stored"
    assert manager.current_order_id() == "O1"


def test_restore_session_skips_record_about_to_expire():
    record = SessionRecord(access_token="stored", expires_at=int((NOW + 30) * 1000))
    _, manager, _ = make_policy()
    restore_session(manager, StaticCredentials(), MemoryConfigStore(record))
    assert not manager.is_authenticated()


def test_env_credentials_fallbacks():
    store = MemoryConfigStore(SessionRecord(username="stored@example.com"))
    source = EnvCredentialSource({"WAITROSE_PASSWORD": "pw"}, store=store)
    assert source.resolve() == Credentials("stored@example.com", "pw")

    source = EnvCredentialSource(
        {"WAITROSE_EMAIL": "me@example.com", "WAITROSE_PASSWORD": "pw", "WAITROSE_TOKEN": "t"}
    )
    assert source.resolve() == Credentials("me@example.com", "pw")
    assert source.access_token() == "t"

    assert EnvCredentialSource({"WAITROSE_USERNAME": "me"}).resolve() is None


def test_credentials_repr_hides_password():
    assert "secret" not in repr(Credentials("me", "secret"))
