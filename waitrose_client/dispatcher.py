"""Request dispatch for the GraphQL and REST endpoints."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from .config import ClientConfig
from .errors import ProtocolError, TransportError
from .transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)

ANONYMOUS_CUSTOMER_ID = "-1"
REST_ENDPOINTS = ("search", "browse")


@dataclass
class SearchResults:
    """Products from a search or browse call, in the order the service returned them."""

    products: list[dict[str, Any]] = field(default_factory=list)
    total_matches: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"products": self.products, "totalMatches": self.total_matches}


def normalize_search_envelope(raw: Mapping[str, Any]) -> SearchResults:
    """Flatten ``componentsAndProducts`` into a product list.

    Only entries carrying a ``searchProduct`` are kept; banners and other
    components are dropped. Order is preserved.
    """
    products = [
        item["searchProduct"]
        for item in raw.get("componentsAndProducts") or []
        if isinstance(item, dict) and item.get("searchProduct") is not None
    ]
    return SearchResults(products=products, total_matches=int(raw.get("totalMatches") or 0))


class ProtocolDispatcher:
    """Sends GraphQL operations and REST calls, decoding their error envelopes.

    The bearer token is passed explicitly on each call; ``None`` means an
    anonymous request.

    Args:
        config: Endpoints and client identity
        transport: Transport used for HTTP (defaults to ``RequestsTransport``)
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
    ) -> None:
        self.config = config or ClientConfig()
        self.transport = transport or RequestsTransport()

    def headers(self, token: Optional[str] = None, json_body: bool = True) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self.config.user_agent,
        }
        if json_body:
            headers["Content-Type"] = "application/json"
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def execute_rpc(
        self,
        query: str,
        variables: Mapping[str, Any] | None = None,
        token: Optional[str] = None,
    ) -> dict[str, Any]:
        """Execute a GraphQL query or mutation.

        Args:
            query: The GraphQL document
            variables: Optional mapping of variables for the document
            token: Bearer token to attach, or None for an anonymous call

        Returns:
            dict: The ``data`` payload of the response. Domain ``failures``
            lists inside it are left for the caller to inspect.

        Raises:
            TransportError: On a connection failure or non-2xx status
            ProtocolError: On an unparseable body or a non-empty ``errors`` list
        """
        payload = {"query": query, "variables": dict(variables or {})}
        logger.debug("POST %s (%s)", self.config.graphql_url, _operation_name(query))
        resp = self._send(
            self.transport.post,
            self.config.graphql_url,
            headers=self.headers(token),
            json=payload,
        )
        data = self._decode(resp)
        if not isinstance(data, dict):
            raise ProtocolError("GraphQL Error: response is not an object")
        errors = data.get("errors")
        if errors:
            messages = ", ".join(
                str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors
            )
            raise ProtocolError(f"GraphQL Error: {messages}", errors)
        return data.get("data") or {}

    def execute_rest(
        self,
        endpoint: str,
        body: Mapping[str, Any],
        token: Optional[str] = None,
        customer_id: Optional[str] = None,
    ) -> SearchResults:
        """POST to the ``search`` or ``browse`` endpoint and normalize the result.

        The URL is keyed by ``customer_id``, or ``-1`` for anonymous shoppers.
        """
        if endpoint not in REST_ENDPOINTS:
            raise ValueError(f"unknown REST endpoint '{endpoint}'")
        url = f"{self.config.search_url}/{endpoint}/{customer_id or ANONYMOUS_CUSTOMER_ID}?clientType=WEB_APP"
        logger.debug("POST %s", url)
        resp = self._send(self.transport.post, url, headers=self.headers(token), json=dict(body))
        raw = self._decode(resp)
        if not isinstance(raw, dict):
            raise ProtocolError("Search response is not an object")
        return normalize_search_envelope(raw)

    def execute_lookup(
        self,
        line_numbers: Sequence[str],
        token: Optional[str] = None,
        branch_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        """Fetch product details for the given line numbers."""
        if not line_numbers:
            return []
        url = f"{self.config.products_url}/{'+'.join(line_numbers)}"
        params = {
            "view": "EXTENDED",
            "excludeLinesWithConflicts": "false",
            "filterByCustomerSlot": "false",
        }
        if branch_id:
            params["branchId"] = branch_id
        logger.debug("GET %s", url)
        resp = self._send(
            self.transport.get,
            url,
            headers=self.headers(token, json_body=False),
            params=params,
        )
        raw = self._decode(resp)
        if not isinstance(raw, dict):
            return []
        return raw.get("products") or []

    def _send(self, method, url: str, **kwargs: Any) -> Any:
        try:
            resp = method(url, timeout=self.config.timeout, **kwargs)
        except Exception as exc:
            raise TransportError(str(exc)) from exc

        status = getattr(resp, "status_code", None)
        if status is None:
            raise TransportError("Transport response missing status_code")
        logger.debug("HTTP %s from %s", status, url)
        if not 200 <= status < 300:
            text = getattr(resp, "text", "")
            raise TransportError(text, status, body=text)
        return resp

    @staticmethod
    def _decode(resp: Any) -> Any:
        try:
            return resp.json()
        except Exception as exc:
            snippet = getattr(resp, "text", "")[:300]
            raise ProtocolError(f"Invalid JSON response: {snippet}") from exc


def _operation_name(query: str) -> str:
    words = query.split(None, 2)
    return words[1].split("(")[0] if len(words) > 1 else "anonymous"
