import pathlib
import sys

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from waitrose_client.transport import RequestsTransport


def retry_for(transport):
    return transport._session.get_adapter("https://www.waitrose.com").max_retries


def test_retry_settings_from_environment(monkeypatch):
    monkeypatch.setenv("WAITROSE_HTTP_RETRIES", "5")
    monkeypatch.setenv("WAITROSE_HTTP_BACKOFF", "0.1")
    retry = retry_for(RequestsTransport())
    assert retry.total == 5
    assert retry.backoff_factor == 0.1
    assert 503 in retry.status_forcelist
    assert 500 not in retry.status_forcelist


def test_explicit_retry_settings_win(monkeypatch):
    monkeypatch.setenv("WAITROSE_HTTP_RETRIES", "5")
    retry = retry_for(RequestsTransport(retries=0, backoff=0))
    assert retry.total == 0
    assert "POST" in retry.allowed_methods
