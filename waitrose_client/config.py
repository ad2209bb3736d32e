"""Client configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass

GRAPHQL_URL = "https://www.waitrose.com/api/graphql-prod/graph/live"
SEARCH_URL = "https://www.waitrose.com/api/content-prod/v2/cms/publish/productcontent"
PRODUCTS_URL = "https://www.waitrose.com/api/products-prod/v1/products"
CLIENT_ID = "ANDROID_APP"
USER_AGENT = "Waitrose/3.9.1 (Android)"

# Lifetime the upstream service issues tokens with, in seconds.
DEFAULT_EXPIRES_IN = 900


@dataclass(frozen=True)
class ClientConfig:
    """Endpoints and identity the client presents to the service.

    Attributes:
        graphql_url: The single GraphQL endpoint (sessions, trolley, orders, slots)
        search_url: Base URL of the search/browse REST API
        products_url: Base URL of the product lookup REST API
        client_id: Client identifier sent with the login mutation
        user_agent: ``User-Agent`` header identifying the mobile app
        timeout: Request timeout in seconds
    """

    graphql_url: str = GRAPHQL_URL
    search_url: str = SEARCH_URL
    products_url: str = PRODUCTS_URL
    client_id: str = CLIENT_ID
    user_agent: str = USER_AGENT
    timeout: float = 30

    def __post_init__(self) -> None:
        for name in ("graphql_url", "search_url", "products_url"):
            object.__setattr__(self, name, getattr(self, name).strip().rstrip("/"))

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Build a config, letting ``WAITROSE_*`` environment variables override defaults."""
        return cls(
            graphql_url=os.getenv("WAITROSE_GRAPHQL_URL", GRAPHQL_URL),
            search_url=os.getenv("WAITROSE_SEARCH_URL", SEARCH_URL),
            products_url=os.getenv("WAITROSE_PRODUCTS_URL", PRODUCTS_URL),
            timeout=float(os.getenv("WAITROSE_TIMEOUT", "30")),
        )
