"""
stocksaga CLI Application - Built with Click.

Commands:
    place-order   Run one reservation saga from an order file
    stress        Run many concurrent one-unit sagas against one item
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel
from rich.table import Table

from stocksaga.core.config import SagaConfig
from stocksaga.core.logger import configure_default_logging
from stocksaga.orchestrator import ReservationSaga
from stocksaga.reconciliation import SagaReconciler
from stocksaga.storage import InMemoryInventoryStore, InMemoryOrderStore, create_stores
from stocksaga.types import OrderLine, PartialFailure, SagaRequest, SagaStatus

console = Console()


# ============================================================================
# CLI Group
# ============================================================================


class OrderedGroup(click.Group):
    """Click Group that lists commands in the order they were added."""

    def list_commands(self, ctx):
        return list(self.commands.keys())


@click.group(cls=OrderedGroup)
@click.version_option(version="0.1.0", prog_name="stocksaga")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """
    stocksaga - All-or-nothing stock reservation for orders.

    \b
    Commands:
      place-order      Run one saga from a YAML/JSON order file
      stress           Concurrency stress test against a single item
    """
    if verbose:
        configure_default_logging(level=logging.DEBUG)


# ============================================================================
# stocksaga place-order
# ============================================================================


def load_order_file(path: Path) -> dict[str, Any]:
    """Load an order file. YAML is a superset of JSON, so both parse here."""
    with path.open() as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        msg = f"Order file must contain a mapping, got {type(data).__name__}"
        raise click.BadParameter(msg, param_hint="FILE")
    return data


async def run_order_file(
    data: dict[str, Any], store_url: str = "memory://", conditional: bool = False
) -> tuple[int, dict[str, Any]]:
    """Seed stock from ``data["inventory"]`` and place ``data["lines"]`` as one order."""
    inventory, orders = create_stores(store_url, conditional_decrement=conditional)
    try:
        for item_id, stock in (data.get("inventory") or {}).items():
            await inventory.set_stock(str(item_id), int(stock))

        saga = ReservationSaga(
            SagaConfig(inventory_store=inventory, order_store=orders, metrics=False)
        )
        return await saga.place_order({"lines": data.get("lines")})
    finally:
        # Redis stores share one connection; in-memory stores have nothing to close
        close = getattr(inventory, "close", None)
        if close is not None:
            await close()


@click.command("place-order")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--store-url",
    default="memory://",
    show_default=True,
    envvar="STOCKSAGA_STORE_URL",
    help="Store URL (memory:// or redis://host:6379/0)",
)
@click.option("--conditional", is_flag=True, help="Reject decrements that would go negative")
def place_order_cmd(file: Path, store_url: str, conditional: bool):
    """
    Run one reservation saga from FILE.

    \b
    FILE is YAML or JSON with an optional stock seed and the order lines:
        inventory:
          sku-1: 5
        lines:
          - itemId: sku-1
            quantity: 2
    """
    data = load_order_file(file)
    status, body = asyncio.run(run_order_file(data, store_url, conditional))

    style = "green" if status == 200 else "yellow" if status in (409, 503) else "red"
    console.print(
        Panel(
            JSON(json.dumps(body)),
            title=f"[bold {style}]{status}[/bold {style}]",
            border_style=style,
        )
    )
    if status != 200:
        raise SystemExit(1)


# ============================================================================
# stocksaga stress
# ============================================================================


async def run_stress(
    stock: int, runs: int, conditional: bool, latency: float, reconcile: bool
) -> dict[str, Any]:
    """
    Run ``runs`` concurrent one-unit sagas against a single item.

    Store latency makes every run finish checking before any run reserves,
    which is the interleaving that over-commits an unconditional store.
    """
    item_id = "stress-item"
    inventory = InMemoryInventoryStore(
        {item_id: stock}, conditional_decrement=conditional, latency=latency
    )
    orders = InMemoryOrderStore()
    saga = ReservationSaga(
        SagaConfig(inventory_store=inventory, order_store=orders, logging=False)
    )
    request = SagaRequest.of(OrderLine(item_id, 1))

    outcomes = await asyncio.gather(*(saga.run(request) for _ in range(runs)))

    by_status: dict[str, int] = {}
    for outcome in outcomes:
        by_status[outcome.status.value] = by_status.get(outcome.status.value, 0) + 1

    released = 0
    if reconcile:
        reconciler = SagaReconciler(inventory, orders)
        for outcome in outcomes:
            if isinstance(outcome, PartialFailure):
                report = await reconciler.reconcile(outcome)
                released += len(report.released)

    return {
        "runs": runs,
        "initial_stock": stock,
        "by_status": by_status,
        "committed": by_status.get(SagaStatus.COMMITTED.value, 0),
        "final_stock": inventory.snapshot()[item_id],
        "orders": orders.get_order_count(),
        "released": released,
    }


@click.command("stress")
@click.option("--stock", type=int, required=True, help="Initial stock of the item")
@click.option("--runs", type=int, required=True, help="Number of concurrent sagas")
@click.option("--conditional", is_flag=True, help="Reject decrements that would go negative")
@click.option(
    "--latency", type=float, default=0.01, show_default=True, help="Simulated store latency (s)"
)
@click.option("--reconcile", is_flag=True, help="Release reservations of partially failed runs")
def stress_cmd(stock: int, runs: int, conditional: bool, latency: float, reconcile: bool):
    """
    Run RUNS concurrent one-unit orders against one item with STOCK units.

    \b
    Examples:
        stocksaga stress --stock 9 --runs 10                # over-commits
        stocksaga stress --stock 9 --runs 10 --conditional  # one run fails
    """
    if runs <= 0:
        raise click.BadParameter("must be positive", param_hint="--runs")

    console.print(
        Panel.fit(
            f"[bold blue]stocksaga stress[/bold blue]\n"
            f"Stock: [cyan]{stock}[/cyan]  Runs: [cyan]{runs}[/cyan]  "
            f"Store: [cyan]{'conditional' if conditional else 'unconditional'}[/cyan]",
            border_style="blue",
        )
    )

    result = asyncio.run(run_stress(stock, runs, conditional, latency, reconcile))

    table = Table(title="Outcomes")
    table.add_column("Status", style="cyan")
    table.add_column("Count", justify="right")
    for status, count in sorted(result["by_status"].items()):
        table.add_row(status, str(count))
    console.print(table)

    final_style = "red" if result["final_stock"] < 0 else "green"
    console.print(f"Committed: [bold]{result['committed']}[/bold] / {runs}")
    console.print(f"Orders recorded: {result['orders']}")
    console.print(f"Final stock: [{final_style}]{result['final_stock']}[/{final_style}]")
    if reconcile:
        console.print(f"Reservations released: {result['released']}")


cli.add_command(place_order_cmd)
cli.add_command(stress_cmd)
