"""Client helpers."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Mapping, Optional, Sequence

from . import operations
from .config import ClientConfig
from .dispatcher import ProtocolDispatcher, SearchResults
from .errors import DomainFailure, WaitroseError
from .manager import SessionManager
from .session import Session, parse_failures
from .transport import Transport

logger = logging.getLogger(__name__)

# The orders API rejects page sizes above this.
MAX_ORDER_PAGE_SIZE = 15

PENDING_ORDER_STATUSES = ["PAYMENT_FAILED", "PLACED", "FULFIL", "PAID", "PICKED"]
PREVIOUS_ORDER_STATUSES = ["COMPLETED", "CANCELLED", "REFUND_PENDING"]

SORT_OPTIONS = (
    "RELEVANCE",
    "PRICE_LOW_2_HIGH",
    "PRICE_HIGH_2_LOW",
    "A_2_Z",
    "Z_2_A",
    "TOP_RATED",
    "MOST_POPULAR",
    "CATEGORY_RANKING",
)
SLOT_TYPES = ("DELIVERY", "COLLECTION")

# Unit of measure for "each".
DEFAULT_UOM = "C62"


def raise_for_failures(action: str, failures: Optional[Sequence[Mapping[str, Any]]]) -> None:
    """Raise ``DomainFailure`` if a payload's ``failures`` list is non-empty."""
    parsed = parse_failures(failures)
    if parsed:
        raise DomainFailure(
            f"{action} failed: " + ", ".join(f.message for f in parsed), parsed
        )


class WaitroseClient:
    """Grocery operations on top of a session manager and dispatcher.

    Every call reads the token from the manager at the moment it is sent,
    so wrapping calls in ``ReauthenticationPolicy.run`` retries them with a
    fresh session.

    Example:
        >>> client = WaitroseClient()
        >>> client.login("me@example.com", "secret")
        >>> trolley = client.get_trolley()
    """

    def __init__(
        self,
        config: Optional[ClientConfig] = None,
        transport: Optional[Transport] = None,
        manager: Optional[SessionManager] = None,
    ) -> None:
        if manager is None:
            manager = SessionManager(ProtocolDispatcher(config, transport))
        self.manager = manager
        self.dispatcher = manager.dispatcher

    # Session

    def login(self, username: str, password: str) -> Session:
        return self.manager.login(username, password)

    def logout(self) -> None:
        self.manager.logout()

    def is_authenticated(self) -> bool:
        return self.manager.is_authenticated()

    def _rpc(self, query: str, variables: Mapping[str, Any] | None = None) -> dict[str, Any]:
        return self.dispatcher.execute_rpc(query, variables, token=self.manager.current_token())

    # Shopping context and account

    def get_shopping_context(self) -> dict[str, Any]:
        data = self._rpc(operations.GET_SHOPPING_CONTEXT)
        context = data.get("shoppingContext") or {}
        if context.get("customerOrderId"):
            self.manager.update_order_context(
                context["customerOrderId"], context.get("customerOrderState")
            )
        return context

    def get_account_info(self) -> dict[str, Any]:
        """Return ``{"profile": ..., "memberships": [...] | None}``."""
        data = self._rpc(operations.GET_ACCOUNT_INFO_AND_MEMBERSHIP)
        memberships = (data.get("getMemberships") or {}).get("memberships")
        return {"profile": data.get("getAccountProfile"), "memberships": memberships or None}

    def _order_id(self, order_id: Optional[str]) -> str:
        order_id = order_id or self.manager.current_order_id()
        if not order_id and self.manager.is_authenticated():
            logger.debug("No order id in session; fetching shopping context")
            order_id = self.get_shopping_context().get("customerOrderId")
        if not order_id:
            raise WaitroseError("No order ID available")
        return order_id

    # Trolley

    def get_trolley(self, order_id: Optional[str] = None) -> dict[str, Any]:
        data = self._rpc(operations.GET_TROLLEY, {"orderId": self._order_id(order_id)})
        return data["getTrolley"]

    def update_trolley_items(
        self, items: Sequence[Mapping[str, Any]], order_id: Optional[str] = None
    ) -> dict[str, Any]:
        """Set quantities (and optionally notes) for trolley lines; amount 0 removes a line."""
        data = self._rpc(
            operations.UPDATE_TROLLEY_ITEMS,
            {"trolleyItemsInput": list(items), "orderId": self._order_id(order_id)},
        )
        return data["updateTrolleyItems"]

    def add_to_trolley(
        self, line_number: str, quantity: int = 1, uom: str = DEFAULT_UOM
    ) -> dict[str, Any]:
        return self.update_trolley_items(
            [{"lineNumber": line_number, "quantity": {"amount": quantity, "uom": uom}}]
        )

    def remove_from_trolley(self, line_number: str) -> dict[str, Any]:
        return self.update_trolley_items(
            [{"lineNumber": line_number, "quantity": {"amount": 0, "uom": DEFAULT_UOM}}]
        )

    def empty_trolley(self, order_id: Optional[str] = None) -> dict[str, Any]:
        data = self._rpc(operations.EMPTY_TROLLEY, {"orderId": self._order_id(order_id)})
        return data["emptyTrolley"]

    # Orders

    def get_orders(self, limit: int = 10) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        """Fetch pending and previous orders concurrently.

        Returns:
            tuple: ``(pending, previous)``, each a possibly empty list
        """
        with ThreadPoolExecutor(max_workers=2) as pool:
            pending = pool.submit(self.get_pending_orders, limit)
            previous = pool.submit(self.get_previous_orders, limit)
            return pending.result(), previous.result()

    def get_pending_orders(self, limit: int = 10) -> list[dict[str, Any]]:
        data = self._rpc(
            operations.GET_PENDING_ORDERS,
            {
                "getPendingOrdersInput": {
                    "size": min(limit, MAX_ORDER_PAGE_SIZE),
                    "sortBy": "+",
                    "statuses": PENDING_ORDER_STATUSES,
                }
            },
        )
        return (data.get("pendingOrders") or {}).get("content") or []

    def get_previous_orders(self, limit: int = 10) -> list[dict[str, Any]]:
        data = self._rpc(
            operations.GET_PREVIOUS_ORDERS,
            {
                "getPreviousOrdersInput": {
                    "size": min(limit, MAX_ORDER_PAGE_SIZE),
                    "sortBy": "-",
                    "statuses": PREVIOUS_ORDER_STATUSES,
                }
            },
        )
        return (data.get("previousOrders") or {}).get("content") or []

    def get_order(self, customer_order_id: str) -> dict[str, Any]:
        data = self._rpc(operations.GET_ORDER, {"customerOrderId": customer_order_id})
        return data["getOrder"]

    def cancel_order(self, customer_order_id: str) -> None:
        data = self._rpc(operations.CANCEL_ORDER, {"input": customer_order_id})
        raise_for_failures("Cancel", (data.get("cancelOrder") or {}).get("failures"))

    def initiate_amend_order(self, customer_order_id: str) -> None:
        data = self._rpc(operations.INITIATE_AMEND_ORDER, {"input": customer_order_id})
        raise_for_failures("Amend", (data.get("amendOrder") or {}).get("failures"))

    def cancel_amend_order(self, customer_order_id: str) -> None:
        data = self._rpc(operations.CANCEL_AMEND_ORDER, {"input": customer_order_id})
        raise_for_failures("Cancel amend", (data.get("cancelAmendOrder") or {}).get("failures"))

    # Slots

    def get_current_slot(self, postcode: Optional[str] = None) -> Optional[dict[str, Any]]:
        data = self._rpc(
            operations.CURRENT_SLOT,
            {"input": {"postcode": postcode, "customerOrderId": self.manager.current_order_id()}},
        )
        return data.get("currentSlot")

    def get_slot_dates(
        self,
        slot_type: str,
        branch_id: Optional[str] = None,
        address_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        data = self._rpc(
            operations.SLOT_DATES,
            {
                "slotDatesInput": {
                    "slotType": slot_type,
                    "branchId": branch_id or self.manager.current_branch_id(),
                    "customerOrderId": self.manager.current_order_id(),
                    "addressId": address_id,
                }
            },
        )
        result = data.get("slotDates") or {}
        raise_for_failures("Get slots", result.get("failures"))
        return result.get("content") or []

    def get_slot_days(
        self,
        slot_type: str,
        from_date: str,
        branch_id: Optional[str] = None,
        address_id: Optional[str] = None,
    ) -> list[dict[str, Any]]:
        data = self._rpc(
            operations.SLOT_DAYS,
            {
                "slotDaysInput": {
                    "slotType": slot_type,
                    "branchId": branch_id or self.manager.current_branch_id(),
                    "customerOrderId": self.manager.current_order_id(),
                    "addressId": address_id,
                    "fromDate": from_date,
                }
            },
        )
        result = data.get("slotDays") or {}
        raise_for_failures("Get slot days", result.get("failures"))
        return result.get("content") or []

    def book_slot(
        self, slot_id: str, slot_type: str, address_id: Optional[str] = None
    ) -> dict[str, Any]:
        data = self._rpc(
            operations.BOOK_SLOT,
            {"input": {"slotId": slot_id, "slotType": slot_type, "addressId": address_id}},
        )
        result = data.get("bookSlot") or {}
        raise_for_failures("Book slot", result.get("failures"))
        return result

    # Campaigns

    def get_campaigns(self) -> list[dict[str, Any]]:
        return self._rpc(operations.GET_CAMPAIGNS).get("campaigns") or []

    # Product search (REST)

    def _query_params(self, **params: Any) -> dict[str, Any]:
        query = {"start": 0, "sortBy": "RELEVANCE"}
        query.update({k: v for k, v in params.items() if v is not None})
        branch_id = self.manager.current_branch_id()
        if branch_id and not query.get("branchId"):
            query["branchId"] = branch_id
        return query

    def _search(self, endpoint: str, query_params: Mapping[str, Any]) -> SearchResults:
        return self.dispatcher.execute_rest(
            endpoint,
            {"customerSearchRequest": {"queryParams": dict(query_params)}},
            token=self.manager.current_token(),
            customer_id=self.manager.current_customer_id(),
        )

    def search_products(self, search_term: str, **options: Any) -> SearchResults:
        """Search products by text.

        Options are passed through as query params: ``sortBy``, ``start``,
        ``size``, ``searchTags``, ``filterTags``, ``branchId``, ``promotionId``.

        Example:
            >>> client.search_products("milk", sortBy="PRICE_LOW_2_HIGH", size=24)
        """
        return self._search("search", self._query_params(searchTerm=search_term, **options))

    def browse_products(self, category: str, **options: Any) -> SearchResults:
        """Browse a category path such as ``groceries/bakery/bread``."""
        return self._search("browse", self._query_params(category=category, **options))

    def get_promotion_products(self, promotion_id: str, **options: Any) -> SearchResults:
        return self._search("search", self._query_params(promotionId=promotion_id, **options))

    def search_with_filters(
        self,
        search_term: str,
        filter_tags: Optional[Sequence[Mapping[str, str]]] = None,
        search_tags: Optional[Sequence[Mapping[str, str]]] = None,
        **options: Any,
    ) -> SearchResults:
        """Search with ``{"group": ..., "value": ...}`` filter and search tags."""
        if filter_tags is not None:
            options["filterTags"] = list(filter_tags)
        if search_tags is not None:
            options["searchTags"] = list(search_tags)
        return self.search_products(search_term, **options)

    def search_products_page(
        self, search_term: str, page: int, page_size: int = 24, **options: Any
    ) -> SearchResults:
        """Fetch one 1-based page of search results."""
        if page < 1:
            raise ValueError("page numbers start at 1")
        options.update(start=(page - 1) * page_size, size=page_size)
        return self.search_products(search_term, **options)

    def get_products_by_line_numbers(self, line_numbers: Sequence[str]) -> list[dict[str, Any]]:
        return self.dispatcher.execute_lookup(
            list(line_numbers),
            token=self.manager.current_token(),
            branch_id=self.manager.current_branch_id(),
        )
