import json
import pathlib
import sys
from dataclasses import dataclass

import pytest
import requests

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from waitrose_client.config import ClientConfig
from waitrose_client.dispatcher import ProtocolDispatcher
from waitrose_client.errors import ProtocolError, TransportError, is_auth_failure
from waitrose_client.transport import Transport

FIXTURES = pathlib.Path(__file__).resolve().parent / "fixtures"


@dataclass
class DummyResponse:
    status_code: int
    _json: object
    text: str = ""

    def json(self):
        return self._json


class ListTransport(Transport):
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def _next(self):
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def post(self, url, headers, json, timeout):
        self.calls.append({"method": "POST", "url": url, "headers": dict(headers), "json": json})
        return self._next()

    def get(self, url, headers, params, timeout):
        self.calls.append({"method": "GET", "url": url, "headers": dict(headers), "params": dict(params)})
        return self._next()


CONFIG = ClientConfig(
    graphql_url="https://api.test/graphql",
    search_url="https://api.test/content/",
    products_url="https://api.test/products",
)


def make_dispatcher(responses):
    transport = ListTransport(responses)
    return ProtocolDispatcher(CONFIG, transport), transport


def test_rpc_returns_data_payload_and_sends_envelope():
    dispatcher, transport = make_dispatcher([DummyResponse(200, {"data": {"campaigns": []}})])
    data = dispatcher.execute_rpc("query GetCampaigns { campaigns { id } }", {"a": 1})
    assert data == {"campaigns": []}
    call = transport.calls[0]
    assert call["url"] == "https://api.test/graphql"
    assert call["json"] == {"query": "query GetCampaigns { campaigns { id } }", "variables": {"a": 1}}
    assert call["headers"]["Content-Type"] == "application/json"
    assert call["headers"]["Accept"] == "application/json"
    assert call["headers"]["User-Agent"] == "Waitrose/3.9.1 (Android)"
    assert "Authorization" not in call["headers"]


def test_rpc_attaches_bearer_token():
    dispatcher, transport = make_dispatcher([DummyResponse(200, {"data": {}})])
    dispatcher.execute_rpc("query", token="abc")
    assert transport.calls[0]["headers"]["Authorization"] == "Bearer abc"
    assert transport.calls[0]["json"]["variables"] == {}


def test_rpc_raises_transport_error_on_non_2xx():
    dispatcher, _ = make_dispatcher([DummyResponse(500, {}, text="boom")])
    with pytest.raises(TransportError) as exc:
        dispatcher.execute_rpc("query")
    assert exc.value.status_code == 500
    assert exc.value.body == "boom"
    assert "HTTP 500" in str(exc.value)
    assert not is_auth_failure(exc.value)


def test_rpc_401_is_auth_failure():
    dispatcher, _ = make_dispatcher([DummyResponse(401, {}, text="expired")])
    with pytest.raises(TransportError) as exc:
        dispatcher.execute_rpc("query")
    assert is_auth_failure(exc.value)


def test_rpc_raises_protocol_error_with_joined_messages():
    body = {"errors": [{"message": "bad"}, {"message": "worse"}], "data": None}
    dispatcher, _ = make_dispatcher([DummyResponse(200, body)])
    with pytest.raises(ProtocolError) as exc:
        dispatcher.execute_rpc("query")
    assert str(exc.value) == "GraphQL Error: bad, worse"
    assert len(exc.value.errors) == 2
    assert not exc.value.is_auth_failure


@pytest.mark.parametrize(
    "error",
    [
        {"message": "denied", "extensions": {"code": "UNAUTHENTICATED"}},
        {"message": "401: Unauthorized"},
    ],
)
def test_protocol_error_auth_classification(error):
    dispatcher, _ = make_dispatcher([DummyResponse(200, {"errors": [error]})])
    with pytest.raises(ProtocolError) as exc:
        dispatcher.execute_rpc("query")
    assert is_auth_failure(exc.value)


def test_nested_failures_are_not_interpreted():
    body = {"data": {"cancelOrder": {"failures": [{"type": "X", "message": "nope"}]}}}
    dispatcher, _ = make_dispatcher([DummyResponse(200, body)])
    data = dispatcher.execute_rpc("mutation")
    assert data["cancelOrder"]["failures"][0]["message"] == "nope"


def test_rpc_raises_on_invalid_json():
    class BadJsonResponse(DummyResponse):
        def json(self):  # type: ignore[override]
            raise ValueError("no json")

    dispatcher, _ = make_dispatcher([BadJsonResponse(200, {}, text="oops")])
    with pytest.raises(ProtocolError) as exc:
        dispatcher.execute_rpc("query")
    assert "oops" in str(exc.value)


def test_connection_error_becomes_transport_error():
    dispatcher, _ = make_dispatcher([requests.exceptions.ConnectionError("unreachable")])
    with pytest.raises(TransportError) as exc:
        dispatcher.execute_rpc("query")
    assert exc.value.status_code is None
    assert "unreachable" in str(exc.value)


def test_rest_keeps_only_product_entries():
    raw = {
        "totalMatches": 2,
        "componentsAndProducts": [
            {"searchProduct": {"id": "1"}},
            {"other": {}},
            {"searchProduct": {"id": "2"}},
        ],
    }
    dispatcher, transport = make_dispatcher([DummyResponse(200, raw)])
    results = dispatcher.execute_rest("search", {"customerSearchRequest": {}})
    assert results.products == [{"id": "1"}, {"id": "2"}]
    assert results.total_matches == 2
    call = transport.calls[0]
    assert call["url"] == "https://api.test/content/search/-1?clientType=WEB_APP"
    assert "Authorization" not in call["headers"]


def test_rest_uses_customer_id_and_token():
    raw = json.loads((FIXTURES / "search_milk.json").read_text())
    dispatcher, transport = make_dispatcher([DummyResponse(200, raw)])
    results = dispatcher.execute_rest("browse", {}, token="abc", customer_id="C1")
    assert [p["lineNumber"] for p in results.products] == ["088903", "052107"]
    assert transport.calls[0]["url"] == "https://api.test/content/browse/C1?clientType=WEB_APP"
    assert transport.calls[0]["headers"]["Authorization"] == "Bearer abc"


def test_rest_missing_components_gives_empty_list():
    dispatcher, _ = make_dispatcher([DummyResponse(200, {"totalMatches": 0})])
    results = dispatcher.execute_rest("search", {})
    assert results.products == []
    assert results.total_matches == 0


def test_rest_rejects_unknown_endpoint():
    dispatcher, transport = make_dispatcher([])
    with pytest.raises(ValueError):
        dispatcher.execute_rest("checkout", {})
    assert transport.calls == []


def test_rest_raises_transport_error():
    dispatcher, _ = make_dispatcher([DummyResponse(401, {}, text="Unauthorized")])
    with pytest.raises(TransportError) as exc:
        dispatcher.execute_rest("search", {})
    assert exc.value.is_auth_failure


def test_lookup_builds_url_and_params():
    dispatcher, transport = make_dispatcher(
        [DummyResponse(200, {"products": [{"lineNumber": "1", "name": "Milk"}]})]
    )
    products = dispatcher.execute_lookup(["1", "2"], token="abc", branch_id="651")
    assert products == [{"lineNumber": "1", "name": "Milk"}]
    call = transport.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://api.test/products/1+2"
    assert call["params"]["view"] == "EXTENDED"
    assert call["params"]["branchId"] == "651"
    assert "Content-Type" not in call["headers"]


def test_lookup_without_line_numbers_makes_no_request():
    dispatcher, transport = make_dispatcher([])
    assert dispatcher.execute_lookup([]) == []
    assert transport.calls == []


def test_rest_keeps_empty_product_payloads():
    raw = {
        "totalMatches": 2,
        "componentsAndProducts": [{"searchProduct": {}}, {"searchProduct": None}, {"searchProduct": {"id": "2"}}],
    }
    dispatcher, _ = make_dispatcher([DummyResponse(200, raw)])
    assert dispatcher.execute_rest("search", {}).products == [{}, {"id": "2"}]
