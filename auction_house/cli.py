"""
Auction House CLI

Usage:
    auction-house run seed.json requests.csv --seed 42
    auction-house catalog seed.json
"""

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import get_settings
from .coordinator import AuctionCoordinator
from .exceptions import AuctionHouseError
from .log import configure_logging
from .replay import replay
from .seed import load_house, load_requests
from .transcript import render_transcript

app = typer.Typer(
    name="auction-house",
    help="Multi-round sealed-bid auctions run through brokers",
    add_completion=False,
)
console = Console()


def _load(seed: Path, random_seed: Optional[int]) -> AuctionCoordinator:
    settings = get_settings()
    if random_seed is not None:
        settings = settings.model_copy(update={"random_seed": random_seed})
    try:
        return load_house(seed, settings=settings)
    except AuctionHouseError as e:
        console.print(f"[bold red]Cannot load {escape(str(seed))}:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)


def _client_table(house: AuctionCoordinator) -> Table:
    table = Table(title="Clients")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Kind")
    table.add_column("Participations", justify="right")
    table.add_column("Wins", justify="right")
    for stats in house.get_client_stats():
        table.add_row(
            str(stats["client_id"]),
            stats["name"],
            stats["kind"],
            str(stats["participation_count"]),
            str(stats["win_count"]),
        )
    return table


def _broker_table(house: AuctionCoordinator) -> Table:
    table = Table(title="Brokers")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Cash", justify="right")
    table.add_column("Wins", justify="right")
    for stats in house.get_broker_stats():
        table.add_row(
            str(stats["broker_id"]),
            stats["name"],
            f"${stats['cash_accumulated']:,.2f}",
            str(stats["win_count"]),
        )
    return table


def _product_table(title: str, products) -> Table:
    table = Table(title=title)
    table.add_column("ID", justify="right")
    table.add_column("Kind")
    table.add_column("Name")
    table.add_column("Min price", justify="right")
    table.add_column("Sell price", justify="right")
    for product in products:
        table.add_row(
            str(product.id),
            product.kind,
            product.name,
            f"{product.min_price:,.2f}",
            f"{product.sell_price:,.2f}",
        )
    return table


@app.command()
def run(
    seed: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON seed file"),
    requests: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV request stream"),
    random_seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Seed for random broker assignment",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
):
    """Load an auction house, replay the requests and print the results."""
    configure_logging("DEBUG" if verbose else get_settings().log_level)

    house = _load(seed, random_seed)
    try:
        stream = load_requests(requests)
    except AuctionHouseError as e:
        console.print(f"[bold red]Cannot load {escape(str(requests))}:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1)

    summary = replay(house, stream)

    for outcome in summary.outcomes:
        console.print(
            render_transcript(outcome), markup=False, highlight=False, soft_wrap=True
        )
        console.print()

    console.print(
        f"[bold green]{summary.accepted}[/bold green] requests accepted, "
        f"[bold red]{summary.total_rejected}[/bold red] rejected, "
        f"{len(summary.outcomes)} auctions run"
    )
    console.print(_client_table(house))
    console.print(_broker_table(house))
    console.print(_product_table("Sold products", house.sold_products))


@app.command()
def catalog(
    seed: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON seed file"),
):
    """Print the products offered by a seeded auction house."""
    configure_logging("WARNING")
    house = _load(seed, None)
    products = sorted(house.catalog(), key=lambda p: p.id)
    console.print(_product_table("Catalog", products))


def main():
    app()


if __name__ == "__main__":
    main()
