"""Pagination helpers."""
from __future__ import annotations

from typing import Any, Iterable, Optional

from .client import WaitroseClient


def search_pages(
    client: WaitroseClient,
    search_term: str,
    page_size: int = 24,
    max_products: Optional[int] = None,
    **options: Any,
) -> Iterable[dict[str, Any]]:
    """
    Yield products for `search_term`, requesting further pages by offset
    until the service's `totalMatches` is reached or a page comes back empty.

    Args:
        client: `WaitroseClient`, authenticated or anonymous.
        search_term: Text to search for.
        page_size: Products per request (the service caps this around 128).
        max_products: Stop after yielding this many products. May be None.
        **options: Extra query params such as `sortBy` or `filterTags`.

    Yields:
        dict: Each product, one at a time, in the service's order.

    Raises:
        ValueError: If `page_size` is not positive.

    Example:
        >>> for product in search_pages(client, "cheese", page_size=48):
        ...     print(product["name"])
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")

    start = 0
    yielded = 0
    while True:
        results = client.search_products(search_term, start=start, size=page_size, **options)
        for product in results.products:
            if max_products is not None and yielded >= max_products:
                return
            yield product
            yielded += 1
        start += page_size
        if not results.products or start >= results.total_matches:
            break
