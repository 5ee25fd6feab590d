"""
adapters.cli.main - Device-local CLI for the marketplace wishlist.

Anonymous users keep a guest wishlist on this machine; once signed in, the
same commands talk to the REST API and the guest items are merged into the
account (once per sign-in).

Commands
--------
  login            Sign in with a bearer token issued by the marketplace
  logout           Clear stored credentials
  whoami           Show the current identity and sync state
  sync             Retry the guest wishlist merge
  wishlist list    Show saved items and the summary
  wishlist add     Save an item
  wishlist remove  Remove an item by (itemType, itemId)
  wishlist clear   Remove every item

Usage
-----
  python run_cli.py wishlist add --item-id 42 --type FarmProduct --name "Maize"
  python run_cli.py login --token <jwt>
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Optional

# Ensure src/ is on the path when run as a script
_SRC = Path(__file__).resolve().parent.parent.parent
sys.path.insert(0, str(_SRC))

import typer
from jose import jwt, JWTError
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm
from rich.table import Table

from adapters.client.api_client import MarketplaceClient
from adapters.client.guest_store import GuestWishlistStore, item_from_wire, item_to_wire
from adapters.client.session import Session
from adapters.client.sync import SyncState, WishlistSync
from domain.exceptions import DomainError, DuplicateWishlistItemError, RemoteServiceError
from domain.wishlist import NaturalKey, WishlistItem, WishlistItemType
from infrastructure.config import Settings

__version__ = "0.1.0"

console = Console()
app = typer.Typer(
    help="Agri Marketplace wishlist CLI",
    add_completion=False,
    no_args_is_help=True,
)
wishlist_app = typer.Typer(help="Manage your wishlist.", no_args_is_help=True)
app.add_typer(wishlist_app, name="wishlist")


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------

def _settings() -> Settings:
    return Settings.from_env()


def _build_sync(settings: Settings) -> WishlistSync:
    def client_for(session: Session) -> MarketplaceClient:
        return MarketplaceClient(settings.api_base_url, session.access_token)

    return WishlistSync(
        guest_store=GuestWishlistStore(settings.guest_wishlist_path),
        session_path=settings.session_path,
        client_factory=client_for,
    )


def _client_or_none(settings: Settings, sync: WishlistSync) -> Optional[MarketplaceClient]:
    """Return an API client when signed in (retrying a pending merge first)."""
    session = sync.session
    if session is None:
        return None
    if sync.state is SyncState.AUTHENTICATED_UNMERGED:
        _report_merge(sync.check_session())
    return MarketplaceClient(settings.api_base_url, session.access_token)


def _report_merge(response: Optional[dict[str, Any]]) -> None:
    if response is None:
        return
    data = response.get("data", {})
    console.print(
        f"[green]Guest wishlist merged:[/green] {len(data.get('added', []))} added, "
        f"{len(data.get('alreadyPresent', []))} already saved, "
        f"{len(data.get('failed', []))} skipped."
    )


def _fail(message: str) -> None:
    console.print(f"[bold red]{message}[/bold red]")
    raise typer.Exit(code=1)


def _render(items: list[WishlistItem], summary: dict[str, int], title: str) -> None:
    if not items:
        console.print(Panel("[dim]Your wishlist is empty.[/dim]", title=title))
        return
    t = Table(box=box.SIMPLE, title=title)
    t.add_column("Type", style="bold")
    t.add_column("Item id")
    t.add_column("Product")
    t.add_column("Price", justify="right")
    t.add_column("In stock")
    t.add_column("Notes", style="dim")
    for item in items:
        price = "" if item.price is None else f"{item.price:g} {item.currency or ''}".strip()
        t.add_row(
            item.item_type.value, item.item_id, item.product_name, price,
            "yes" if item.in_stock else "no", item.notes or "",
        )
    console.print(t)
    console.print(
        f"[bold]{summary['totalItems']}[/bold] item(s): "
        f"{summary['farmProducts']} farm product(s), "
        f"{summary['storeProducts']} store product(s)"
    )


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"agri-market v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs."),
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ---------------------------------------------------------------------------
# Commands: Session
# ---------------------------------------------------------------------------

@app.command()
def login(
    token: str = typer.Option(..., "--token", "-t", help="Bearer token (JWT)."),
) -> None:
    """Sign in with a token and merge the guest wishlist into the account."""
    try:
        user_id = str(jwt.get_unverified_claims(token)["user_id"])
    except (JWTError, KeyError):
        _fail("That does not look like a marketplace token.")

    sync = _build_sync(_settings())
    response = sync.sign_in(user_id, token)
    console.print(Panel(
        f"[bold green]Signed in[/bold green] as [bold]{user_id}[/bold].",
        border_style="green",
    ))
    _report_merge(response)
    if sync.state is SyncState.AUTHENTICATED_UNMERGED:
        console.print(
            "[yellow]Could not merge your guest wishlist yet; it is kept on this "
            "device and will be retried. Run [bold]sync[/bold] to retry now.[/yellow]"
        )


@app.command()
def logout() -> None:
    """Sign out and clear stored credentials."""
    sync = _build_sync(_settings())
    session = sync.session
    if session is None:
        console.print("[dim]Not currently signed in.[/dim]")
        return
    if Confirm.ask(f"Sign out [bold]{session.user_id}[/bold]?"):
        sync.sign_out()
        console.print("[green]Signed out.[/green]")


@app.command()
def whoami() -> None:
    """Show the current identity and guest wishlist sync state."""
    sync = _build_sync(_settings())
    session = sync.session
    if session is None:
        console.print("[dim]Browsing as a guest.[/dim]")
        return
    console.print(
        f"Signed in as [bold]{session.user_id}[/bold] "
        f"([dim]{sync.state.value}[/dim])"
    )


@app.command()
def sync() -> None:
    """Retry merging the guest wishlist into the signed-in account."""
    wishlist_sync = _build_sync(_settings())
    if wishlist_sync.state is SyncState.ANONYMOUS:
        _fail("Not signed in.")
    if wishlist_sync.state is SyncState.AUTHENTICATED_MERGED:
        console.print("[dim]Nothing to merge.[/dim]")
        return
    _report_merge(wishlist_sync.check_session())
    if wishlist_sync.state is SyncState.AUTHENTICATED_UNMERGED:
        _fail("Merge failed; guest wishlist kept on this device.")


# ---------------------------------------------------------------------------
# Commands: Wishlist
# ---------------------------------------------------------------------------

@wishlist_app.command("list")
def list_items() -> None:
    """Show saved items and the wishlist summary."""
    settings = _settings()
    wishlist_sync = _build_sync(settings)
    client = _client_or_none(settings, wishlist_sync)
    if client is None:
        store = GuestWishlistStore(settings.guest_wishlist_path)
        summary = store.summary()
        _render(store.items(), {
            "totalItems": summary.total_items,
            "farmProducts": summary.farm_products,
            "storeProducts": summary.store_products,
        }, title="Guest wishlist")
        return

    try:
        response = client.get_wishlist()
    except RemoteServiceError as exc:
        _fail(str(exc))
    items = [item_from_wire(i) for i in response["data"]["items"]]
    _render(items, response["summary"], title="Your wishlist")


@wishlist_app.command("add")
def add_item(
    item_id: str = typer.Option(..., "--item-id", help="Product id."),
    item_type: WishlistItemType = typer.Option(..., "--type", help="FarmProduct or StoreProduct."),
    name: str = typer.Option(..., "--name", help="Product name."),
    price: Optional[float] = typer.Option(None, "--price"),
    currency: Optional[str] = typer.Option(None, "--currency"),
    image: Optional[str] = typer.Option(None, "--image", help="Product image URL."),
    notes: Optional[str] = typer.Option(None, "--notes"),
) -> None:
    """Save an item to the wishlist."""
    settings = _settings()
    try:
        item = WishlistItem(
            item_id=item_id, item_type=item_type, product_name=name,
            price=price, currency=currency, product_image=image, notes=notes,
        )
    except DomainError as exc:
        _fail(str(exc))

    client = _client_or_none(settings, _build_sync(settings))
    if client is None:
        try:
            GuestWishlistStore(settings.guest_wishlist_path).add_item(item)
        except DuplicateWishlistItemError:
            _fail("That item is already in your wishlist.")
        console.print(f"[green]Saved[/green] {name} to your guest wishlist.")
        return

    try:
        client.add_item(item_to_wire(item))
    except RemoteServiceError as exc:
        if exc.status_code == 409:
            _fail("That item is already in your wishlist.")
        _fail(str(exc))
    console.print(f"[green]Saved[/green] {name} to your wishlist.")


@wishlist_app.command("remove")
def remove_item(
    item_type: WishlistItemType = typer.Argument(..., help="FarmProduct or StoreProduct."),
    item_id: str = typer.Argument(..., help="Product id."),
) -> None:
    """Remove an item by its type and id (no-op if it is not saved)."""
    settings = _settings()
    key = NaturalKey(item_id, item_type)
    client = _client_or_none(settings, _build_sync(settings))
    if client is None:
        removed = GuestWishlistStore(settings.guest_wishlist_path).remove_item(key)
        console.print("[green]Removed.[/green]" if removed else "[dim]Not in your wishlist.[/dim]")
        return

    try:
        client.remove_item(key)
    except RemoteServiceError as exc:
        _fail(str(exc))
    console.print("[green]Removed.[/green]")


@wishlist_app.command("clear")
def clear_items(
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation."),
) -> None:
    """Remove every item from the wishlist."""
    if not yes and not Confirm.ask("Remove every item from your wishlist?"):
        return
    settings = _settings()
    client = _client_or_none(settings, _build_sync(settings))
    if client is None:
        GuestWishlistStore(settings.guest_wishlist_path).clear()
    else:
        try:
            client.clear_wishlist()
        except RemoteServiceError as exc:
            _fail(str(exc))
    console.print("[green]Wishlist cleared.[/green]")


if __name__ == "__main__":
    app()
