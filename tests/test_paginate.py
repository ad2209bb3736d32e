import pathlib
import sys
from dataclasses import dataclass

import pytest

sys.path.insert(0, str(pathlib.Path(__file__).resolve().parents[1]))

from waitrose_client.client import WaitroseClient
from waitrose_client.config import ClientConfig
from waitrose_client.paginate import search_pages
from waitrose_client.transport import Transport


@dataclass
class DummyResponse:
    status_code: int
    _json: dict
    text: str = ""

    def json(self):
        return self._json


class ListTransport(Transport):
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def post(self, url, headers, json, timeout):
        self.calls.append(dict(json["customerSearchRequest"]["queryParams"]))
        return self.responses.pop(0)

    def get(self, url, headers, params, timeout):
        raise AssertionError("unexpected GET")


def page(ids, total):
    return DummyResponse(
        200,
        {
            "totalMatches": total,
            "componentsAndProducts": [{"searchProduct": {"id": i}} for i in ids],
        },
    )


def make_client(responses):
    transport = ListTransport(responses)
    return WaitroseClient(ClientConfig(), transport), transport


def test_search_pages_streams_all_products():
    client, transport = make_client([page(["1", "2"], 3), page(["3"], 3)])
    items = list(search_pages(client, "milk", page_size=2))
    assert [item["id"] for item in items] == ["1", "2", "3"]
    assert [call["start"] for call in transport.calls] == [0, 2]
    assert all(call["size"] == 2 for call in transport.calls)
    assert transport.calls[0]["searchTerm"] == "milk"


def test_search_pages_stops_at_max_products():
    client, transport = make_client([page(["1", "2"], 10), page(["3", "4"], 10)])
    items = list(search_pages(client, "milk", page_size=2, max_products=3))
    assert [item["id"] for item in items] == ["1", "2", "3"]
    assert len(transport.calls) == 2


def test_search_pages_stops_on_empty_page():
    client, transport = make_client([page(["1"], 50), page([], 50)])
    items = list(search_pages(client, "milk", page_size=1))
    assert [item["id"] for item in items] == ["1"]
    assert len(transport.calls) == 2


def test_search_pages_passes_options():
    client, transport = make_client([page([], 0)])
    assert list(search_pages(client, "milk", sortBy="A_2_Z")) == []
    assert transport.calls[0]["sortBy"] == "A_2_Z"


def test_search_pages_bad_page_size():
    client, _ = make_client([])
    with pytest.raises(ValueError):
        list(search_pages(client, "milk", page_size=0))
