"""
Spendboard CLI - Command line console for SaaS cost and usage.
"""

import asyncio
import json
import logging
import time
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from spendboard.config import Settings
from spendboard.connect.base import ProviderCategory, ProviderRecord
from spendboard.connect.errors import UpstreamError
from spendboard.connect.railway import RailwayAdapter
from spendboard.connect.registry import build_registry
from spendboard.see import FleetSummary, ProviderAggregator

app = typer.Typer(
    name="spendboard",
    help="SaaS Cost Console - cost and usage across all your providers",
    add_completion=False,
)
console = Console()

STATUS_COLORS = {
    "healthy": "green",
    "degraded": "yellow",
    "error": "red",
    "unknown": "dim",
}


def load_settings(env_file: Optional[str] = None) -> Settings:
    settings = Settings.from_env(dotenv_path=env_file)
    logging.basicConfig(
        level=settings.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    return settings


def create_aggregator(settings: Settings) -> ProviderAggregator:
    """Create aggregator over the full registry."""
    return ProviderAggregator(build_registry(settings), settings.adapter_timeout)


def format_money(amount: Optional[float], currency: str = "USD") -> str:
    if amount is None:
        return "-"
    symbol = "$" if currency == "USD" else f"{currency} "
    return f"{symbol}{amount:,.2f}"


def format_usage(record: ProviderRecord) -> str:
    usage = record.usage
    if usage is None:
        return "-"
    text = f"{usage.current:,.2f} {usage.unit}"
    if usage.limit:
        text += f" ({usage.percentage:.0f}%)"
    return text


def _metric(metrics: dict, key: str) -> str:
    value = metrics.get(key)
    if value is None:
        return "-"
    if isinstance(value, (int, float)):
        return f"{value:,.2f}"
    return str(value)


def collect_records(aggregator: ProviderAggregator) -> list[ProviderRecord]:
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("Fetching providers...", total=None)
        return asyncio.run(aggregator.fetch_all())


def render_records(records: list[ProviderRecord]) -> None:
    table = Table(title="Providers")
    table.add_column("Provider", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Status")
    table.add_column("This Month", justify="right")
    table.add_column("Projected", justify="right")
    table.add_column("Usage", justify="right")
    table.add_column("Billing API", justify="center")

    for record in records:
        color = STATUS_COLORS.get(record.status, "white")
        costs = record.costs
        table.add_row(
            record.name,
            record.category.value,
            f"[{color}]{record.status}[/]",
            format_money(costs.current_month, costs.currency) if costs else "-",
            format_money(costs.projected, costs.currency) if costs else "-",
            format_usage(record),
            "yes" if record.has_billing_api else "[dim]no[/]",
        )

    console.print(table)

    errors = [r for r in records if r.health.error_message]
    for record in errors:
        console.print(f"[red]{record.name}:[/] {record.health.error_message}")


def render_summary(summary: FleetSummary) -> None:
    lines = [
        f"[bold]Providers:[/] {summary.provider_count}  |  "
        f"[bold]With costs:[/] {summary.with_costs}  |  "
        f"[bold]Billing API:[/] {summary.with_billing_api}",
        "[bold]Health:[/] " + "  ".join(
            f"[{STATUS_COLORS[status]}]{status} {count}[/]"
            for status, count in summary.by_status.items()
        ),
    ]
    for totals in summary.by_currency:
        lines.append(
            f"[bold]{totals.currency}:[/] [yellow]{format_money(totals.current_month, totals.currency)}[/] this month, "
            f"{format_money(totals.projected, totals.currency)} projected"
        )

    console.print(Panel("\n".join(lines), title="Summary"))


@app.command()
def status(
    category: Optional[ProviderCategory] = typer.Option(
        None,
        "--category", "-c",
        help="Only show providers in this category",
    ),
    json_output: bool = typer.Option(
        False,
        "--json", "-j",
        help="Output as JSON",
    ),
    env_file: Optional[str] = typer.Option(None, "--env-file", help="Path to a .env file"),
):
    """Fetch every provider once and show costs, usage and health."""
    settings = load_settings(env_file)
    records = collect_records(create_aggregator(settings))

    if category is not None:
        records = [r for r in records if r.category == category]

    summary = FleetSummary.from_records(records)

    if json_output:
        output = {
            "providers": [r.to_dict() for r in records],
            "summary": summary.to_dict(),
        }
        console.print(json.dumps(output, indent=2))
        return

    render_records(records)
    console.print()
    render_summary(summary)


@app.command()
def providers(
    env_file: Optional[str] = typer.Option(None, "--env-file", help="Path to a .env file"),
):
    """List the provider registry and which providers are configured."""
    settings = load_settings(env_file)
    registry = build_registry(settings)

    table = Table(title="Provider Registry")
    table.add_column("ID", style="cyan")
    table.add_column("Name")
    table.add_column("Category", style="magenta")
    table.add_column("Billing API", justify="center")
    table.add_column("Env Key")
    table.add_column("Configured", justify="center")

    for entry in registry.all_entries():
        configured = settings.credential(entry.env_key) is not None
        table.add_row(
            entry.id,
            entry.name,
            entry.category.value,
            "yes" if entry.has_billing_api else "[dim]no[/]",
            entry.env_key,
            "[green]yes[/]" if configured else "[dim]no[/]",
        )

    console.print(table)


@app.command()
def show(
    provider_id: str = typer.Argument(..., help="Provider id, e.g. openai"),
    json_output: bool = typer.Option(False, "--json", "-j"),
    env_file: Optional[str] = typer.Option(None, "--env-file", help="Path to a .env file"),
):
    """Show one provider's registry entry and a fresh record."""
    settings = load_settings(env_file)
    registry = build_registry(settings)

    entry = registry.find_by_id(provider_id)
    if entry is None:
        console.print(f"[red]Unknown provider:[/] {provider_id}")
        console.print(f"Known providers: {', '.join(registry.ids)}")
        raise typer.Exit(code=1)

    aggregator = ProviderAggregator(registry, settings.adapter_timeout)
    record = asyncio.run(aggregator.fetch_one(provider_id))

    if json_output:
        console.print(json.dumps({"entry": entry.to_dict(), "record": record.to_dict()}, indent=2))
        return

    color = STATUS_COLORS.get(record.status, "white")
    costs = record.costs
    lines = [
        f"[bold]Category:[/] {entry.category.value}",
        f"[bold]Health:[/] [{color}]{record.status}[/]  |  "
        f"[bold]Billing API:[/] {'Yes' if entry.has_billing_api else 'No'}",
        f"[bold]Env Key:[/] {entry.env_key}",
    ]
    if costs:
        lines += [
            "",
            f"[bold]This Month:[/] [yellow]{format_money(costs.current_month, costs.currency)}[/]",
            f"[bold]Last Month:[/] {format_money(costs.last_month, costs.currency)}",
            f"[bold]Projected:[/] {format_money(costs.projected, costs.currency)}",
        ]
    if record.usage:
        lines.append(f"[bold]Usage:[/] {format_usage(record)}")
    if record.health.last_sync:
        lines.append(f"[bold]Last Sync:[/] {record.health.last_sync:%Y-%m-%d %H:%M:%S} UTC")
    if record.health.error_message:
        lines += ["", f"[red]{record.health.error_message}[/]"]

    console.print(Panel("\n".join(lines), title=entry.name))


@app.command()
def watch(
    interval: Optional[float] = typer.Option(
        None,
        "--interval", "-i",
        help="Seconds between refreshes (default: SPENDBOARD_POLL_INTERVAL or 900)",
    ),
    cycles: int = typer.Option(0, "--cycles", "-n", help="Stop after N cycles (0 = forever)"),
    env_file: Optional[str] = typer.Option(None, "--env-file", help="Path to a .env file"),
):
    """Refresh the provider table on a fixed interval."""
    settings = load_settings(env_file)
    aggregator = create_aggregator(settings)
    delay = interval if interval is not None else settings.poll_interval

    completed = 0
    try:
        while True:
            records = collect_records(aggregator)
            console.clear()
            render_records(records)
            render_summary(FleetSummary.from_records(records))

            completed += 1
            if cycles and completed >= cycles:
                break

            console.print(f"[dim]Next refresh in {delay:g}s (Ctrl+C to stop)[/]")
            time.sleep(delay)
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped.[/]")


@app.command()
def railway(
    json_output: bool = typer.Option(False, "--json", "-j"),
    env_file: Optional[str] = typer.Option(None, "--env-file", help="Path to a .env file"),
):
    """Show Railway projects, services and estimated usage."""
    settings = load_settings(env_file)
    adapter = RailwayAdapter(settings)

    if not adapter.is_configured:
        console.print("[yellow]RAILWAY_API_TOKEN is not set.[/]")
        raise typer.Exit(code=1)

    try:
        data = asyncio.run(adapter.get_all_railway_data())
    except (UpstreamError, httpx.HTTPError) as e:
        console.print(f"[red]Failed to fetch Railway data:[/] {e}")
        raise typer.Exit(code=1)

    if json_output:
        console.print(json.dumps(data, indent=2))
        return

    estimated = data["estimatedUsage"]
    console.print(Panel(
        f"[bold]Projects:[/] {data['projectCount']}\n"
        f"[bold]Estimated Usage:[/] {estimated['estimatedUsage']:,.2f}\n"
        f"[bold]Projected Cost:[/] [yellow]${estimated['projectedCost']:,.2f}[/]",
        title="Railway",
    ))

    table = Table(title="Services")
    table.add_column("Project", style="cyan")
    table.add_column("Service")
    table.add_column("Status")
    table.add_column("CPU", justify="right")
    table.add_column("Memory", justify="right")
    table.add_column("Egress", justify="right")

    for project in data["projectMetrics"]:
        for service in project["services"]:
            metrics = service.get("metrics") or {}
            table.add_row(
                project.get("name") or "-",
                service.get("name") or "-",
                service.get("status") or "-",
                _metric(metrics, "cpu"),
                _metric(metrics, "memory"),
                _metric(metrics, "networkEgress"),
            )

    console.print(table)


@app.command()
def version():
    """Show version information."""
    from spendboard import __version__
    console.print(f"Spendboard v{__version__}")
    console.print("SaaS Cost Console")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
