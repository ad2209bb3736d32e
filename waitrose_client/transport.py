"""Transport abstractions."""
from __future__ import annotations

from abc import ABC, abstractmethod
import os
from typing import Any, Mapping, TYPE_CHECKING

if TYPE_CHECKING:
    import requests


class Transport(ABC):
    """Abstract transport interface."""

    @abstractmethod
    def post(
        self,
        url: str,
        headers: Mapping[str, str],
        json: Mapping[str, Any],
        timeout: float,
    ) -> "requests.Response":  # noqa: D401
        """Send a POST request."""
        raise NotImplementedError

    @abstractmethod
    def get(
        self,
        url: str,
        headers: Mapping[str, str],
        params: Mapping[str, str],
        timeout: float,
    ) -> "requests.Response":  # noqa: D401
        """Send a GET request."""
        raise NotImplementedError


class RequestsTransport(Transport):
    """Transport using the requests library with retry support.

    Args:
        retries: Total retry attempts for connection errors and throttled or
            unavailable responses. Defaults to the ``WAITROSE_HTTP_RETRIES``
            env var or ``2``.
        backoff: Exponential backoff factor between retries. Defaults to the
            ``WAITROSE_HTTP_BACKOFF`` env var or ``0.5`` seconds.
    """

    def __init__(
        self,
        *,
        retries: int | None = None,
        backoff: float | None = None,
    ) -> None:
        import requests
        from requests.adapters import HTTPAdapter
        from urllib3.util import Retry

        retry_total = retries if retries is not None else int(
            os.getenv("WAITROSE_HTTP_RETRIES", "2")
        )
        backoff_factor = backoff if backoff is not None else float(
            os.getenv("WAITROSE_HTTP_BACKOFF", "0.5")
        )
        retry = Retry(
            total=retry_total,
            connect=retry_total,
            read=retry_total,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 502, 503, 504],
            allowed_methods=["GET", "POST"],
            raise_on_status=False,
            respect_retry_after_header=True,
        )
        adapter = HTTPAdapter(max_retries=retry)
        session = requests.Session()
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        self._session = session

    def post(
        self,
        url: str,
        headers: Mapping[str, str],
        json: Mapping[str, Any],
        timeout: float,
    ) -> "requests.Response":
        return self._session.post(url, headers=headers, json=json, timeout=timeout)

    def get(
        self,
        url: str,
        headers: Mapping[str, str],
        params: Mapping[str, str],
        timeout: float,
    ) -> "requests.Response":
        return self._session.get(url, headers=headers, params=params, timeout=timeout)
