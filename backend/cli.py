"""
Storefront CLI.

Command-line interface for running the API, seeding the database and
driving a local shopping cart against a running server.
"""

import asyncio
import sys
import time
from decimal import Decimal

import httpx
import typer
from rich.console import Console
from rich.table import Table

from cart_store import (
    AddItem,
    CartPersistence,
    CartStore,
    ClearCart,
    FileSlot,
    ProductSnapshot,
    RemoveItem,
    UpdateQuantity,
)
from shared.config.settings import settings

app = typer.Typer(
    name="storefront",
    help="Storefront management CLI",
    add_completion=False,
)
console = Console()

API_TIMEOUT = 10.0


def _open_store() -> CartStore:
    store = CartStore(CartPersistence(FileSlot(settings.cart_file)))
    store.rehydrate()
    return store


def _api_request(method: str, path: str, api_url: str | None = None, **kwargs) -> httpx.Response:
    base_url = api_url or settings.api_base_url
    try:
        with httpx.Client(base_url=base_url, timeout=API_TIMEOUT) as client:
            return client.request(method, path, **kwargs)
    except httpx.HTTPError as e:
        console.print(f"[red]✗ Could not reach {base_url}: {type(e).__name__}[/red]")
        raise typer.Exit(1)


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        return str(body.get("detail") or body.get("error") or body)
    return str(body)


def _print_cart(store: CartStore, establishment_id: int) -> None:
    cart = store.state.cart_for(establishment_id)
    table = Table(title=f"Cart - establishment {establishment_id}")
    table.add_column("Product", style="cyan")
    table.add_column("Name")
    table.add_column("Qty", justify="right")
    table.add_column("Unit price", justify="right")
    table.add_column("Subtotal", justify="right", style="green")

    for item in cart.items:
        table.add_row(
            str(item.product.id),
            item.product.name,
            str(item.quantity),
            f"{item.product.price:.2f}",
            f"{item.subtotal:.2f}",
        )
    table.add_row("", "[bold]Total[/bold]", str(cart.item_count), "", f"[bold]{cart.total:.2f}[/bold]")
    console.print(table)


# =============================================================================
# Server Commands
# =============================================================================

@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(settings.rest_api_port, help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Run the REST API."""
    import uvicorn

    console.print(f"[blue]Starting REST API on {host}:{port}[/blue]")
    uvicorn.run("rest_api.main:app", host=host, port=port, reload=reload)


@app.command()
def db_seed(
    force: bool = typer.Option(False, "--force", "-f", help="Allow seeding in production"),
):
    """Create tables and seed the demo storefront."""
    console.print(f"[blue]Seeding database for: {settings.environment}[/blue]")

    if settings.environment == "production" and not force:
        console.print("[red]Cannot seed production without --force[/red]")
        raise typer.Exit(1)

    from sqlalchemy.exc import SQLAlchemyError

    from rest_api.models import Base
    from rest_api.seed import seed
    from shared.infrastructure.db import engine, get_db_context

    try:
        Base.metadata.create_all(bind=engine)
        with get_db_context() as db:
            seed(db)
        console.print("[green]✓ Seeding complete[/green]")
    except SQLAlchemyError as e:
        console.print(f"[red]✗ Seeding failed: {e}[/red]")
        raise typer.Exit(1)


# =============================================================================
# Cart Commands
# =============================================================================

@app.command()
def cart_add(
    product_id: int = typer.Argument(..., help="Catalog product id"),
    api_url: str = typer.Option(None, help="API base URL"),
):
    """Add one unit of a product to its establishment's cart."""
    response = _api_request("GET", f"/api/products/{product_id}", api_url)
    if response.status_code != 200:
        console.print(f"[red]✗ {_error_detail(response)}[/red]")
        raise typer.Exit(1)

    product = ProductSnapshot.model_validate(response.json())
    store = _open_store()
    store.dispatch(AddItem(product=product, establishment_id=product.establishment_id))
    console.print(f"[green]✓ Added {product.name}[/green]")
    _print_cart(store, product.establishment_id)


@app.command()
def cart_remove(
    product_id: int = typer.Argument(..., help="Product id"),
    establishment: int = typer.Option(..., "--establishment", "-e", help="Establishment id"),
):
    """Remove a product from an establishment's cart."""
    store = _open_store()
    store.dispatch(RemoveItem(product_id, establishment))
    _print_cart(store, establishment)


@app.command()
def cart_qty(
    product_id: int = typer.Argument(..., help="Product id"),
    quantity: int = typer.Argument(..., help="New quantity (0 removes the product)"),
    establishment: int = typer.Option(..., "--establishment", "-e", help="Establishment id"),
):
    """Set the quantity of a product already in the cart."""
    store = _open_store()
    store.dispatch(UpdateQuantity(product_id, quantity, establishment))
    _print_cart(store, establishment)


@app.command()
def cart_show(
    establishment: int = typer.Option(None, "--establishment", "-e", help="Only this establishment"),
):
    """Show carts."""
    store = _open_store()
    if establishment is not None:
        _print_cart(store, establishment)
        return

    carts = {eid: cart for eid, cart in store.state.carts.items() if cart.items}
    if not carts:
        console.print("[yellow]All carts are empty[/yellow]")
        return
    for establishment_id in sorted(carts):
        _print_cart(store, establishment_id)


@app.command()
def cart_clear(
    establishment: int = typer.Option(None, "--establishment", "-e", help="Only this establishment"),
):
    """Empty one establishment's cart, or all carts."""
    store = _open_store()
    store.dispatch(ClearCart(establishment))
    target = f"establishment {establishment}" if establishment is not None else "all establishments"
    console.print(f"[green]✓ Cart cleared for {target}[/green]")


@app.command()
def checkout(
    establishment: int = typer.Option(..., "--establishment", "-e", help="Establishment id"),
    name: str = typer.Option(..., help="Customer name"),
    email: str = typer.Option(..., help="Customer email"),
    street: str = typer.Option(..., help="Street"),
    number: str = typer.Option(..., help="Street number"),
    city: str = typer.Option(..., help="City"),
    zip_code: str = typer.Option(..., "--zip", help="Postal code"),
    neighborhood: str = typer.Option("", help="Neighborhood"),
    complement: str = typer.Option(None, help="Address complement"),
    state: str = typer.Option(None, help="State"),
    phone: str = typer.Option(None, help="Customer phone"),
    payment_method: str = typer.Option("instant_transfer", help="instant_transfer or credit_card"),
    api_url: str = typer.Option(None, help="API base URL"),
):
    """Place an order for an establishment's cart and clear it on success."""
    store = _open_store()
    cart = store.state.cart_for(establishment)
    if not cart.items:
        console.print(f"[yellow]Cart for establishment {establishment} is empty[/yellow]")
        raise typer.Exit(1)

    delivery_fee = Decimal(settings.default_delivery_fee)
    body = {
        "order": {
            "customerName": name,
            "customerEmail": email,
            "customerPhone": phone,
            "deliveryAddress": {
                "zipCode": zip_code,
                "street": street,
                "number": number,
                "complement": complement,
                "neighborhood": neighborhood,
                "city": city,
                "state": state,
            },
            "paymentMethod": payment_method,
            "totalAmount": str(cart.total + delivery_fee),
            "deliveryFee": str(delivery_fee),
            "establishmentId": establishment,
        },
        "items": [
            {
                "productId": item.product.id,
                "quantity": item.quantity,
                "price": str(item.product.price),
            }
            for item in cart.items
        ],
    }

    response = _api_request("POST", "/api/orders", api_url, json=body)
    if response.status_code != 201:
        console.print(f"[red]✗ Checkout failed: {_error_detail(response)}[/red]")
        raise typer.Exit(1)

    order = response.json()
    store.dispatch(ClearCart(establishment))
    console.print(
        f"[green]✓ Order {order['id']} created - total {order['totalAmount']} "
        f"({order['paymentStatus']})[/green]"
    )


# =============================================================================
# Health Commands
# =============================================================================

@app.command()
def health(api_url: str = typer.Option(None, help="API base URL")):
    """Check API health."""
    base_url = api_url or settings.api_base_url

    async def _health():
        table = Table(title="Service Health")
        table.add_column("Check", style="cyan")
        table.add_column("Status", style="green")
        table.add_column("Response Time", style="yellow")

        async with httpx.AsyncClient(base_url=base_url, timeout=5.0) as client:
            try:
                start = time.time()
                response = await client.get("/api/health/detailed")
                elapsed = (time.time() - start) * 1000
            except httpx.HTTPError as e:
                table.add_row("REST API", f"✗ {type(e).__name__}", "-")
                console.print(table)
                return

        body = response.json()
        table.add_row("REST API", body.get("status", "?"), f"{elapsed:.0f}ms")
        for name, dep in body.get("dependencies", {}).items():
            table.add_row(name, dep.get("status", "?"), "-")
        for name, stats in body.get("circuit_breakers", {}).items():
            table.add_row(f"breaker: {name}", stats.get("state", "?"), "-")
        console.print(table)

    asyncio.run(_health())


@app.command()
def version():
    """Show version information."""
    table = Table(title="Storefront Version")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("API", "0.1.0")
    table.add_row("Python", sys.version.split()[0])

    console.print(table)


if __name__ == "__main__":
    app()
