"""Click-based CLI for growth-tracker.

Thin wrapper around library modules. Owns the configuration lifecycle and
delegates every operation to the acquisition, analysis, refresh and
watchlist modules.
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.table import Table

console = Console(stderr=True)

_SIMULATED_NOTICE = (
    "[yellow]Simulated data:[/yellow] no data source answered for {symbols}. "
    "Figures shown for them are synthetic."
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run_async(coro):
    """Run an async coroutine from synchronous Click code."""
    return asyncio.run(coro)


def _load_config(ctx: click.Context):
    """Load config lazily, caching on first call."""
    if "config" not in ctx.obj:
        from growth_tracker.core import load_config

        ctx.obj["config"] = load_config(config_path=ctx.obj.get("config_path"))
    return ctx.obj["config"]


def _create_store(config):
    from growth_tracker.watchlist import SqliteWatchlistStore

    return SqliteWatchlistStore(config.watchlist.path)


def _create_search_adapter(config):
    from growth_tracker.acquisition import YahooFinanceAdapter

    return YahooFinanceAdapter.from_config(config.sources.yahoo, config.acquisition)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    envvar="GROWTH_TRACKER_CONFIG",
    default=None,
    help="Path to growth-tracker.yml config file.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose output.",
)
@click.version_option(package_name="growth-tracker")
@click.pass_context
def cli(ctx: click.Context, config: str | None, verbose: bool) -> None:
    """Growth Tracker: revenue and EPS growth for a stock watchlist."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console
    _configure_logging(verbose)


# ---------------------------------------------------------------------------
# refresh
# ---------------------------------------------------------------------------


@cli.command()
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.option(
    "--concurrency",
    type=click.IntRange(min=1),
    default=None,
    help="Stocks refreshed at once. Default: refresh.max_concurrent from config.",
)
@click.pass_context
def refresh(ctx: click.Context, output_format: str, concurrency: int | None) -> None:
    """Fetch financials for every watch-listed stock and report growth."""
    config = _load_config(ctx)

    async def _run():
        from growth_tracker.acquisition import AcquisitionPipeline
        from growth_tracker.refresh import refresh_watchlist

        stocks = await _create_store(config).list()
        if not stocks:
            console.print("[yellow]Watchlist is empty. Add stocks with 'watchlist add'.[/yellow]")
            return None

        async with AcquisitionPipeline.from_config(config) as pipeline:
            with console.status(f"Refreshing {len(stocks)} stocks..."):
                return await refresh_watchlist(
                    stocks,
                    pipeline,
                    max_concurrent=concurrency or config.refresh.max_concurrent,
                )

    report = _run_async(_run())
    if report is None:
        return

    if output_format == "json":
        click.echo(report.model_dump_json(indent=2))
    else:
        _output_summary_table(report)

    if report.is_synthetic:
        console.print(_SIMULATED_NOTICE.format(symbols=", ".join(report.synthetic_symbols)))
    if report.omitted:
        console.print(f"[yellow]Could not analyze: {', '.join(report.omitted)}[/yellow]")


def _output_summary_table(report) -> None:
    from growth_tracker.formatting import format_currency, format_percentage

    table = Table(title="Watchlist Growth")
    table.add_column("Symbol", style="bold")
    table.add_column("Name")
    table.add_column("Price", justify="right")
    table.add_column("Revenue", justify="right")
    table.add_column("Rev QoQ", justify="right")
    table.add_column("Rev YoY", justify="right")
    table.add_column("EPS", justify="right")
    table.add_column("EPS QoQ", justify="right")
    table.add_column("EPS YoY", justify="right")
    table.add_column("Streak", justify="right")
    table.add_column("Max", justify="center")

    synthetic = set(report.synthetic_symbols)
    for s in report.summaries:
        if s.consecutive_growth_quarters:
            streak = f"[green]+{s.consecutive_growth_quarters}[/green]"
        elif s.consecutive_decline_quarters:
            streak = f"[red]-{s.consecutive_decline_quarters}[/red]"
        else:
            streak = "0"
        flags = "".join(
            mark
            for mark, on in (("R", s.is_historic_max_revenue), ("E", s.is_historic_max_eps))
            if on
        )
        table.add_row(
            s.symbol + (" *" if s.symbol in synthetic else ""),
            s.name,
            f"${s.price:.2f}" if s.price is not None else "N/A",
            format_currency(s.current_revenue),
            _colored(format_percentage(s.revenue_growth_qoq), s.revenue_growth_qoq),
            _colored(format_percentage(s.revenue_growth_yoy), s.revenue_growth_yoy),
            f"{s.current_eps:.2f}",
            _colored(format_percentage(s.eps_growth_qoq), s.eps_growth_qoq),
            _colored(format_percentage(s.eps_growth_yoy), s.eps_growth_yoy),
            streak,
            flags or "-",
        )

    Console().print(table)


def _colored(text: str, value: float) -> str:
    return f"[green]{text}[/green]" if value >= 0 else f"[red]{text}[/red]"


# ---------------------------------------------------------------------------
# history
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("symbol")
@click.pass_context
def history(ctx: click.Context, symbol: str) -> None:
    """Show the financial history used to analyze SYMBOL."""
    config = _load_config(ctx)
    symbol = symbol.strip().upper()

    async def _run():
        from growth_tracker.acquisition import AcquisitionPipeline

        async with AcquisitionPipeline.from_config(config) as pipeline:
            return await pipeline.acquire(symbol)

    result = _run_async(_run())

    from growth_tracker.formatting import format_currency

    table = Table(title=f"{symbol} financial history ({result.source})")
    table.add_column("Date")
    table.add_column("Period")
    table.add_column("Revenue", justify="right")
    table.add_column("EPS", justify="right")
    for period in sorted(result.records, key=lambda p: p.date, reverse=True):
        table.add_row(
            period.date.isoformat(),
            period.period.value,
            format_currency(period.revenue),
            f"{period.eps:.2f}",
        )
    Console().print(table)

    if result.is_synthetic:
        console.print(_SIMULATED_NOTICE.format(symbols=symbol))


# ---------------------------------------------------------------------------
# search
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("query")
@click.pass_context
def search(ctx: click.Context, query: str) -> None:
    """Look up a stock by ticker or company name."""
    config = _load_config(ctx)

    async def _run():
        async with _create_search_adapter(config) as adapter:
            return await adapter.search(query)

    stock = _run_async(_run())
    if stock is None:
        console.print(f"[red]No results for '{query}'[/red]")
        raise SystemExit(1)

    click.echo(stock.model_dump_json(indent=2, exclude_none=True))


# ---------------------------------------------------------------------------
# watchlist
# ---------------------------------------------------------------------------


@cli.group()
def watchlist() -> None:
    """Manage the list of tracked stocks."""


@watchlist.command("list")
@click.pass_context
def watchlist_list(ctx: click.Context) -> None:
    """List tracked stocks."""
    config = _load_config(ctx)
    stocks = _run_async(_create_store(config).list())

    table = Table(title="Watchlist")
    table.add_column("Symbol", style="bold")
    table.add_column("Name")
    table.add_column("Sector")
    table.add_column("Industry")
    for stock in stocks:
        table.add_row(stock.symbol, stock.name, stock.sector or "N/A", stock.industry or "N/A")
    Console().print(table)


@watchlist.command("add")
@click.argument("symbol")
@click.option("--name", type=str, default=None, help="Company name. Looked up if omitted.")
@click.pass_context
def watchlist_add(ctx: click.Context, symbol: str, name: str | None) -> None:
    """Start tracking SYMBOL."""
    config = _load_config(ctx)

    async def _run():
        from growth_tracker.core import Stock

        if name:
            stock = Stock(symbol=symbol, name=name)
        else:
            async with _create_search_adapter(config) as adapter:
                stock = await adapter.search(symbol)
            if stock is None:
                return None, False
        return stock, await _create_store(config).add(stock)

    stock, added = _run_async(_run())
    if stock is None:
        console.print(f"[red]Could not find a stock for '{symbol}'[/red]")
        raise SystemExit(1)
    if added:
        console.print(f"[green]✓[/green] Added {stock.symbol} ({stock.name}) to the watchlist")
    else:
        console.print(f"[yellow]{stock.symbol} is already in the watchlist[/yellow]")


@watchlist.command("remove")
@click.argument("symbol")
@click.pass_context
def watchlist_remove(ctx: click.Context, symbol: str) -> None:
    """Stop tracking SYMBOL."""
    config = _load_config(ctx)
    removed = _run_async(_create_store(config).remove(symbol))
    if removed:
        console.print(f"[green]✓[/green] Removed {symbol.upper()} from the watchlist")
    else:
        console.print(f"[yellow]{symbol.upper()} is not in the watchlist[/yellow]")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
