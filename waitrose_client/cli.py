"""Command line interface: ``waitrose <command>``."""
from __future__ import annotations

import functools
import json
import logging
import os
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, List, Optional, TypeVar

import typer
from rich.console import Console
from rich.markup import escape
from typing_extensions import Annotated

from . import __version__
from .auth import (
    CredentialSource,
    Credentials,
    EnvCredentialSource,
    ReauthenticationPolicy,
    restore_session,
)
from .client import SLOT_TYPES, SORT_OPTIONS, WaitroseClient
from .config import ClientConfig
from .errors import WaitroseError, is_auth_failure
from .store import JsonConfigStore
from .transport import RequestsTransport, Transport

logger = logging.getLogger(__name__)

T = TypeVar("T")

app = typer.Typer(
    name="waitrose",
    help="CLI for Waitrose grocery shopping.",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON.")]
CountOption = Annotated[int, typer.Option("-n", "--count", help="Limit results.")]


class PromptCredentialSource(CredentialSource):
    """Fills in whatever ``base`` cannot supply by prompting on the terminal."""

    def __init__(
        self,
        base: EnvCredentialSource,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> None:
        self.base = base
        self.username = username
        self.password = password

    def resolve(self) -> Optional[Credentials]:
        username = self.username or self.base.username() or typer.prompt("Email")
        password = self.password or self.base.password() or typer.prompt(
            "Password", hide_input=True
        )
        if not username or not password:
            return None
        return Credentials(username, password)


@dataclass
class Runtime:
    store: JsonConfigStore
    credentials: EnvCredentialSource
    client: WaitroseClient
    policy: ReauthenticationPolicy

    def run(self, fn: Callable[[WaitroseClient], T]) -> T:
        return self.policy.run(lambda: fn(self.client))


def make_transport() -> Transport:
    return RequestsTransport()


def build_runtime() -> Runtime:
    store = JsonConfigStore()
    credentials = EnvCredentialSource(store=store)
    client = WaitroseClient(ClientConfig.from_env(), make_transport())
    token_override = restore_session(client.manager, credentials, store)
    policy = ReauthenticationPolicy(
        client.manager, credentials, store, token_override=token_override
    )
    return Runtime(store, credentials, client, policy)


def handle_errors(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Print errors to stderr and exit 1 instead of dumping a traceback."""

    @functools.wraps(fn)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return fn(*args, **kwargs)
        except (typer.Exit, typer.Abort, typer.BadParameter):
            raise
        except WaitroseError as exc:
            logger.debug("Command failed", exc_info=True)
            err_console.print(f"[red]✗[/red] {escape(str(exc))}")
            raise typer.Exit(code=1)
        except Exception as exc:
            logger.debug("Command failed unexpectedly", exc_info=True)
            err_console.print(f"[red]✗[/red] {escape(str(exc) or type(exc).__name__)}")
            raise typer.Exit(code=1)

    return wrapper


def success(message: str) -> None:
    console.print(f"[green]✓[/green] {message}")


def warn(message: str) -> None:
    console.print(f"[yellow]![/yellow] {message}")


def header(title: str) -> None:
    console.print(f"\n[bold cyan]{title}[/bold cyan]")


def echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


def format_price(price: Optional[dict[str, Any]]) -> str:
    if not price or price.get("amount") is None:
        return "—"
    return f"£{float(price['amount']):.2f}"


def format_date(value: Optional[str]) -> str:
    if not value:
        return "—"
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return value


def format_time(value: str) -> str:
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00")).strftime("%H:%M")
    except ValueError:
        return value


@app.callback()
def main(
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Log requests and session changes.")
    ] = False,
) -> None:
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s"
        )


@app.command()
def version() -> None:
    """Show version."""
    typer.echo(f"waitrose v{__version__}")


# Authentication


@app.command()
@handle_errors
def login(
    email: Annotated[Optional[str], typer.Argument(help="Account email.")] = None,
    password: Annotated[Optional[str], typer.Argument(help="Account password.")] = None,
) -> None:
    """Log in (uses env vars or prompts if not provided)."""
    rt = build_runtime()
    creds = PromptCredentialSource(rt.credentials, email, password).resolve()
    if creds is None:
        err_console.print("[red]✗[/red] Email and password are required")
        raise typer.Exit(code=1)
    console.print("Logging in...")
    session = rt.policy.login(creds)
    success(f"Logged in as customer {escape(session.customer_id)}")
    console.print(f"  Order ID: {escape(session.customer_order_id)}")
    console.print(f"  Branch: {escape(session.default_branch_id)}")
    console.print(f"  Token expires in: {session.expires_in // 60} minutes")


@app.command()
@handle_errors
def logout() -> None:
    """Log out and clear stored credentials."""
    rt = build_runtime()
    if rt.client.is_authenticated():
        rt.client.logout()
    rt.store.clear()
    success("Logged out and cleared stored credentials")


@app.command()
@handle_errors
def check() -> None:
    """Check authentication status."""
    store = JsonConfigStore()
    record = store.load()
    now = datetime.now().timestamp()

    header("Authentication Status")
    if record.access_token:
        if record.expires_at and now * 1000 > record.expires_at:
            warn("Token expired")
        else:
            success("Token valid")
            if record.expires_at:
                remaining = int((record.expires_at - now * 1000) // 60000)
                console.print(f"  Expires in: {remaining} minutes")
        console.print(f"  Customer ID: {escape(record.customer_id or '—')}")
        console.print(f"  Order ID: {escape(record.customer_order_id or '—')}")
        console.print(f"  Username: {escape(record.username or '—')}")
    else:
        warn("Not logged in")

    header("Environment Variables")
    for name in ("WAITROSE_USERNAME", "WAITROSE_PASSWORD", "WAITROSE_ACCESS_TOKEN"):
        console.print(f"  {name}: {'set' if os.getenv(name) else 'not set'}")

    header("Config Location")
    console.print(f"  {store.path}")


@app.command()
@handle_errors
def whoami(as_json: JsonOption = False) -> None:
    """Show current account info."""
    info = build_runtime().run(lambda c: c.get_account_info())
    if as_json:
        echo_json(info)
        return
    profile = info["profile"] or {}
    header("Account Info")
    console.print(f"  Email: {escape(str(profile.get('email')))}")
    console.print(f"  ID: {escape(str(profile.get('id')))}")
    address = profile.get("contactAddress")
    if address:
        console.print(
            f"  Address: {escape(str(address.get('line1')))}, "
            f"{escape(str(address.get('town')))} {escape(str(address.get('postalCode')))}"
        )
    if info["memberships"]:
        header("Memberships")
        for membership in info["memberships"]:
            console.print(f"  {membership.get('type')}: {membership.get('number')}")


@app.command()
@handle_errors
def context(as_json: JsonOption = False) -> None:
    """Show shopping context."""
    ctx = build_runtime().run(lambda c: c.get_shopping_context())
    if as_json:
        echo_json(ctx)
        return
    header("Shopping Context")
    console.print(f"  Customer ID: {ctx.get('customerId')}")
    console.print(f"  Order ID: {ctx.get('customerOrderId')}")
    console.print(f"  Order State: {ctx.get('customerOrderState')}")
    console.print(f"  Branch: {ctx.get('defaultBranchId')}")


# Trolley


@app.command()
@handle_errors
def trolley(as_json: JsonOption = False) -> None:
    """View your trolley contents."""
    result = build_runtime().run(lambda c: c.get_trolley())
    if as_json:
        echo_json(result)
        return
    header("Trolley")
    items = result["trolley"]["trolleyItems"]
    if not items:
        console.print("  Your trolley is empty")
        return
    names = {p.get("lineNumber"): p.get("name") for p in result.get("products") or []}
    for item in items:
        name = names.get(item["lineNumber"]) or item["lineNumber"]
        console.print(
            f"  {item['quantity']['amount']}x {escape(name)} — {format_price(item.get('totalPrice'))}"
        )
        console.print(f"     Line: {item['lineNumber']}")
    totals = result["trolley"]["trolleyTotals"]
    header("Totals")
    console.print(f"  Items: {len(items)}")
    console.print(f"  Subtotal: {format_price(totals.get('itemTotalEstimatedCost'))}")
    if totals.get("savingsFromOffers"):
        console.print(f"  Offer savings: {format_price(totals['savingsFromOffers'])}")
    if totals.get("savingsFromMyWaitrose"):
        console.print(f"  myWaitrose savings: {format_price(totals['savingsFromMyWaitrose'])}")
    console.print(f"  [bold]Total: {format_price(totals.get('totalEstimatedCost'))}[/bold]")


@app.command()
@handle_errors
def add(
    line_number: Annotated[str, typer.Argument(help="Product line number.")],
    quantity: Annotated[int, typer.Argument(help="Quantity.")] = 1,
    uom: Annotated[str, typer.Option(help="Unit of measure.")] = "C62",
    as_json: JsonOption = False,
) -> None:
    """Add item to trolley."""
    result = build_runtime().run(lambda c: c.add_to_trolley(line_number, quantity, uom))
    if as_json:
        echo_json(result)
        return
    names = {p.get("lineNumber"): p.get("name") for p in result.get("products") or []}
    success(f"Added {quantity}x {escape(names.get(line_number) or line_number)} to trolley")
    console.print(
        f"  Total: {format_price(result['trolley']['trolleyTotals'].get('totalEstimatedCost'))}"
    )


@app.command()
@handle_errors
def remove(
    line_number: Annotated[str, typer.Argument(help="Product line number.")],
    as_json: JsonOption = False,
) -> None:
    """Remove item from trolley."""
    result = build_runtime().run(lambda c: c.remove_from_trolley(line_number))
    if as_json:
        echo_json(result)
        return
    success(f"Removed {line_number} from trolley")
    console.print(
        f"  Total: {format_price(result['trolley']['trolleyTotals'].get('totalEstimatedCost'))}"
    )


@app.command()
@handle_errors
def empty(as_json: JsonOption = False) -> None:
    """Empty the entire trolley."""
    result = build_runtime().run(lambda c: c.empty_trolley())
    if as_json:
        echo_json(result)
        return
    success("Trolley emptied")


# Search


def _print_products(products: list[dict[str, Any]], show_promotions: bool = False) -> None:
    if not products:
        console.print("  No products found")
        return
    for product in products:
        console.print(f"  [bold]{escape(str(product.get('name')))}[/bold]")
        console.print(f"    {product.get('displayPrice')} — Line: {product.get('lineNumber')}")
        promotions = product.get("promotions") or []
        if show_promotions and promotions:
            console.print(f"    [green]{escape(str(promotions[0].get('promotionDescription')))}[/green]")


@app.command()
@handle_errors
def search(
    term: Annotated[List[str], typer.Argument(help="Search term.")],
    count: CountOption = 10,
    sort: Annotated[
        Optional[str], typer.Option(help=f"One of {', '.join(SORT_OPTIONS)}.")
    ] = None,
    as_json: JsonOption = False,
) -> None:
    """Search for products."""
    text = " ".join(term)
    if sort and sort not in SORT_OPTIONS:
        raise typer.BadParameter(f"sort must be one of {', '.join(SORT_OPTIONS)}")
    results = build_runtime().run(lambda c: c.search_products(text, size=count, sortBy=sort))
    if as_json:
        echo_json(results.to_dict())
        return
    header(f'Search: "{escape(text)}" ({results.total_matches} results)')
    _print_products(results.products, show_promotions=True)


@app.command()
@handle_errors
def browse(
    category: Annotated[List[str], typer.Argument(help="Category path, e.g. groceries/bakery.")],
    count: CountOption = 10,
    as_json: JsonOption = False,
) -> None:
    """Browse products by category."""
    path = "/".join(category)
    results = build_runtime().run(lambda c: c.browse_products(path, size=count))
    if as_json:
        echo_json(results.to_dict())
        return
    header(f"Browse: {escape(path)} ({results.total_matches} products)")
    _print_products(results.products)


# Orders


@app.command()
@handle_errors
def orders(count: CountOption = 10, as_json: JsonOption = False) -> None:
    """List pending and previous orders."""
    pending, previous = build_runtime().run(lambda c: c.get_orders(count))
    if as_json:
        echo_json({"pending": pending, "previous": previous})
        return
    header("Pending Orders")
    if not pending:
        console.print("  No pending orders")
    for order in pending:
        totals = order.get("totals") or {}
        console.print(f"  [bold]{order['customerOrderId']}[/bold] — {order.get('status')}")
        console.print(f"    Created: {format_date(order.get('created'))}")
        console.print(f"    Total: {format_price((totals.get('estimated') or {}).get('totalPrice'))}")
        slots = order.get("slots") or []
        if slots:
            console.print(
                f"    Slot: {format_date(slots[0].get('startDateTime'))} - "
                f"{format_date(slots[0].get('endDateTime'))}"
            )
    if previous:
        header("Previous Orders")
        for order in previous:
            totals = order.get("totals") or {}
            paid = (totals.get("actual") or {}).get("paid") or (totals.get("estimated") or {}).get(
                "totalPrice"
            )
            console.print(f"  [bold]{order['customerOrderId']}[/bold] — {order.get('status')}")
            console.print(f"    Created: {format_date(order.get('created'))}")
            console.print(f"    Total: {format_price(paid)}")


@app.command()
@handle_errors
def order(
    order_id: Annotated[str, typer.Argument(help="Customer order id.")],
    as_json: JsonOption = False,
) -> None:
    """View order details."""

    def fetch(client: WaitroseClient) -> tuple[dict[str, Any], dict[str, str]]:
        details = client.get_order(order_id)
        lines = [line["lineNumber"] for line in details.get("orderLines") or []]
        try:
            products = client.get_products_by_line_numbers(lines)
        except WaitroseError as exc:
            if is_auth_failure(exc):
                raise
            logger.warning("Product lookup failed, showing line numbers: %s", exc)
            products = []
        return details, {p["lineNumber"]: p.get("name") for p in products}

    details, names = build_runtime().run(fetch)
    if as_json:
        enriched = dict(details)
        enriched["orderLines"] = [
            {**line, "productName": names.get(line["lineNumber"])}
            for line in details.get("orderLines") or []
        ]
        echo_json(enriched)
        return

    header(f"Order {details['customerOrderId']}")
    console.print(f"  Status: {details.get('status')}")
    console.print(f"  Created: {format_date(details.get('created'))}")
    console.print(f"  Updated: {format_date(details.get('lastUpdated'))}")
    slots = details.get("slots") or []
    if slots:
        header("Delivery Slot")
        console.print(
            f"  {format_date(slots[0].get('startDateTime'))} - {format_date(slots[0].get('endDateTime'))}"
        )
        console.print(f"  Type: {slots[0].get('type')}")
        console.print(f"  Branch: {slots[0].get('branchName')}")
    header("Items")
    for line in details.get("orderLines") or []:
        qty = (line.get("quantity") or line.get("estimatedQuantity") or {}).get("amount") or 1
        name = names.get(line["lineNumber"]) or line["lineNumber"]
        price = line.get("totalPrice") or line.get("estimatedTotalPrice")
        console.print(f"  {qty}x {escape(name)} — {format_price(price)}")
        console.print(f"     [dim]Line: {line['lineNumber']}[/dim]")
    totals = details.get("totals") or {}
    header("Totals")
    if totals.get("estimated"):
        console.print(f"  Estimated: {format_price(totals['estimated'].get('totalPrice'))}")
    if (totals.get("actual") or {}).get("paid"):
        console.print(f"  [bold]Paid: {format_price(totals['actual']['paid'])}[/bold]")


@app.command("cancel-order")
@handle_errors
def cancel_order(order_id: Annotated[str, typer.Argument(help="Customer order id.")]) -> None:
    """Cancel an order."""
    build_runtime().run(lambda c: c.cancel_order(order_id))
    success(f"Order {order_id} cancelled")


# Slots


def _slot_type(value: str) -> str:
    slot_type = value.upper()
    if slot_type not in SLOT_TYPES:
        raise typer.BadParameter("type must be delivery or collection")
    return slot_type


SlotTypeOption = Annotated[
    str, typer.Option("--type", help="delivery or collection.", callback=_slot_type)
]


@app.command()
@handle_errors
def slot(
    postcode: Annotated[Optional[str], typer.Option(help="Delivery postcode.")] = None,
    as_json: JsonOption = False,
) -> None:
    """View currently booked slot."""
    current = build_runtime().run(lambda c: c.get_current_slot(postcode))
    if as_json:
        echo_json(current)
        return
    header("Current Slot")
    if not current or not current.get("startDateTime"):
        console.print("  No slot booked")
        return
    console.print(f"  Type: {current.get('slotType')}")
    console.print(
        f"  Time: {format_date(current.get('startDateTime'))} - {format_date(current.get('endDateTime'))}"
    )
    console.print(f"  Expires: {format_date(current.get('expiryDateTime'))}")
    console.print(f"  Delivery charge: {format_price(current.get('deliveryCharge'))}")
    console.print(f"  Branch: {current.get('branchId')}")


@app.command()
@handle_errors
def slots(
    slot_type: SlotTypeOption = "DELIVERY",
    days: Annotated[int, typer.Option(help="Number of days to show.")] = 7,
    as_json: JsonOption = False,
) -> None:
    """View available delivery/collection slots."""

    def fetch(client: WaitroseClient) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        profile = client.get_account_info()["profile"] or {}
        address_id = (profile.get("contactAddress") or {}).get("id")
        dates = client.get_slot_dates(slot_type, address_id=address_id)
        slot_days: list[dict[str, Any]] = []
        # The service returns one day per call.
        for date in dates[:days]:
            slot_days.extend(
                client.get_slot_days(slot_type, date["id"], address_id=address_id)
            )
        return dates, slot_days

    dates, slot_days = build_runtime().run(fetch)
    if as_json:
        echo_json({"dates": dates, "slotDays": slot_days})
        return
    if not dates:
        console.print("  No available slot dates")
        return
    header(f"Available {slot_type} Slots")
    for day in slot_days:
        console.print(f"\n  [bold]{day.get('date')}[/bold]")
        available = [s for s in day.get("slots") or [] if s.get("status") == "AVAILABLE"]
        if not available:
            console.print("    No available slots")
            continue
        for s in available:
            badges = []
            if s.get("greenSlot"):
                badges.append("green")
            if s.get("deliveryPassSlot"):
                badges.append("pass")
            console.print(
                f"    {format_time(s['startDateTime'])}-{format_time(s['endDateTime'])} "
                f"{format_price(s.get('charge'))} {' '.join(badges)} \\[{s['id']}]"
            )


@app.command("book-slot")
@handle_errors
def book_slot(
    slot_id: Annotated[str, typer.Argument(help="Slot id from 'waitrose slots'.")],
    slot_type: SlotTypeOption = "DELIVERY",
    address: Annotated[Optional[str], typer.Option(help="Address id.")] = None,
    as_json: JsonOption = False,
) -> None:
    """Book a delivery/collection slot."""
    result = build_runtime().run(lambda c: c.book_slot(slot_id, slot_type, address))
    if as_json:
        echo_json(result)
        return
    success("Slot booked!")
    console.print(f"  Expires: {format_date(result.get('slotExpiryDateTime'))}")
    console.print(f"  Order cutoff: {format_date(result.get('orderCutoffDateTime'))}")
    if result.get("shopByDateTime"):
        console.print(f"  Shop by: {format_date(result['shopByDateTime'])}")


# Other


@app.command()
@handle_errors
def campaigns(as_json: JsonOption = False) -> None:
    """List active campaigns."""
    result = build_runtime().run(lambda c: c.get_campaigns())
    if as_json:
        echo_json(result)
        return
    header("Active Campaigns")
    if not result:
        console.print("  No active campaigns")
        return
    for campaign in result:
        console.print(f"  [bold]{escape(str(campaign.get('name')))}[/bold]")
        console.print(f"    ID: {campaign.get('id')}")
        console.print(f"    Period: {campaign.get('startDate')} — {campaign.get('endDate')}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
