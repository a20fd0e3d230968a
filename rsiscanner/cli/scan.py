"""Scan and watch commands for the RSI scanner CLI.

``scan`` runs a single refresh and prints the RSI grid. ``watch`` keeps
refreshing on an interval and shows alert toasts as they arrive.
"""

import asyncio
from typing import Mapping, Optional

import click
from rich.console import Group
from rich.panel import Panel
from rich.table import Table

from rsiscanner.cli.main import console
from rsiscanner.data import TIMEFRAMES, BaseFetcher, SymbolDataAggregator
from rsiscanner.grid import SORT_ORDERS, displayed_symbols, rsi_zone
from rsiscanner.models import AlertKind, AlertStatus, SymbolData, ToastNotification

ZONE_STYLES = {
    AlertStatus.OVERBOUGHT: "red",
    AlertStatus.OVERSOLD: "green",
    AlertStatus.NEUTRAL: "white",
}


def _get_config(ctx: click.Context):
    """Get the loaded config, loading it if the group did not."""
    from rsiscanner.config import load_config

    obj = ctx.ensure_object(dict)
    if "config" not in obj:
        obj["config"] = load_config()
    return obj["config"]


def _get_settings(config):
    """Get the user settings backed by the configured database."""
    from rsiscanner.db.store import SettingsStore
    from rsiscanner.settings import UserSettings

    return UserSettings(SettingsStore(config.storage.db_path))


def _get_fetcher(config, offline: bool) -> BaseFetcher:
    """Get the candle source selected by config or the --offline flag."""
    limit = config.scanner.history_limit

    if offline or config.data.source == "simulated":
        from rsiscanner.data.simulated import SimulatedFetcher

        return SimulatedFetcher(limit=limit)

    from rsiscanner.data.binance import BinanceFetcher

    return BinanceFetcher(
        base_url=config.data.base_url,
        limit=limit,
        timeout=config.data.timeout_seconds,
    )


def build_grid_table(
    symbols: list[str],
    snapshot: Mapping[str, SymbolData],
    timeframe: str,
    favorites: list[str],
    title: Optional[str] = None,
) -> Table:
    """Build the RSI grid as a rich table."""
    table = Table(
        title=title or f"RSI ({timeframe})",
        show_header=True,
        header_style="bold cyan",
    )

    table.add_column("", width=2)
    table.add_column("Symbol", style="bold")
    table.add_column("Price", justify="right")
    table.add_column("RSI", justify="right")
    table.add_column("Zone", justify="center")

    for symbol in symbols:
        data = snapshot.get(symbol)
        star = "[yellow]★[/yellow]" if symbol in favorites else ""

        if data is None:
            table.add_row(star, symbol, "[dim]-[/dim]", "[dim]-[/dim]", "[dim]no data[/dim]")
            continue

        price = f"{data.last_close:,.4f}" if data.last_close is not None else "-"
        value = data.latest_rsi
        zone = rsi_zone(value)

        if zone is None:
            table.add_row(star, symbol, price, "[dim]-[/dim]", "[dim]warming up[/dim]")
            continue

        style = ZONE_STYLES[zone]
        table.add_row(
            star,
            symbol,
            price,
            f"[{style}]{value:.2f}[/{style}]",
            f"[{style}]{zone.value}[/{style}]",
        )

    return table


def format_toast(toast: ToastNotification) -> str:
    """Render a notification as rich markup."""
    if toast.kind is AlertKind.OVERBOUGHT:
        icon, label = "[red]▲[/red]", "[red]Overbought[/red]"
    else:
        icon, label = "[green]▼[/green]", "[green]Oversold[/green]"
    return f"{icon} [bold]{toast.title}[/bold] is now {label} at {toast.rsi_value:.2f}"


def _print_no_symbols() -> None:
    console.print(Panel(
        "[dim]No symbols tracked. Use 'rsiscanner symbols add SYMBOL' to add some.[/dim]",
        title="[bold]RSI Scanner[/bold]",
        border_style="dim",
    ))


@click.command()
@click.option(
    "-t", "--timeframe",
    type=click.Choice(TIMEFRAMES),
    default=None,
    help="Candle timeframe (default: from config).",
)
@click.option(
    "--sort", "sort_order",
    type=click.Choice(SORT_ORDERS),
    default="default",
    help="Order rows by latest RSI.",
)
@click.option("-s", "--search", default="", help="Only show symbols containing this text.")
@click.option("--favorites-only", is_flag=True, help="Only show favorite symbols.")
@click.option("--offline", is_flag=True, help="Use simulated candles instead of the API.")
@click.pass_context
def scan(
    ctx: click.Context,
    timeframe: Optional[str],
    sort_order: str,
    search: str,
    favorites_only: bool,
    offline: bool,
) -> None:
    """Fetch candles once and print the RSI of every tracked symbol.

    \b
    Examples:
      rsiscanner scan                      # Default timeframe
      rsiscanner scan -t 4h --sort rsi-desc
      rsiscanner scan --search eth --favorites-only
    """
    config = _get_config(ctx)
    timeframe = timeframe or config.scanner.timeframe

    try:
        settings = _get_settings(config)
        symbols = settings.tracked_symbols
        favorites = settings.favorites
    except Exception as e:
        console.print(Panel(
            f"[red]Failed to load settings:[/red]\n\n{str(e)}",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    if not symbols:
        _print_no_symbols()
        return

    failures: dict[str, BaseException] = {}
    fetcher = _get_fetcher(config, offline)
    aggregator = SymbolDataAggregator(
        fetcher,
        period=config.scanner.rsi_period,
        on_error=lambda symbol, error: failures.__setitem__(symbol, error),
    )

    async def _refresh() -> Mapping[str, SymbolData]:
        try:
            return await aggregator.refresh(symbols, timeframe)
        finally:
            await fetcher.aclose()

    console.print(f"[dim]Fetching {timeframe} candles for {len(symbols)} symbols...[/dim]")
    snapshot = asyncio.run(_refresh())

    rows = displayed_symbols(
        symbols,
        snapshot,
        search=search,
        favorites_only=favorites_only,
        favorites=favorites,
        sort_order=sort_order,
    )
    console.print(build_grid_table(rows, snapshot, timeframe, favorites))

    if failures:
        console.print(f"[yellow]Failed to fetch {len(failures)} symbol(s): {', '.join(failures)}[/yellow]")
    console.print(f"\n[dim]Showing {len(rows)} of {len(symbols)} symbols[/dim]")


@click.command()
@click.option(
    "-t", "--timeframe",
    type=click.Choice(TIMEFRAMES),
    default=None,
    help="Candle timeframe (default: from config).",
)
@click.option(
    "-r", "--refresh", "refresh_seconds",
    type=float,
    default=None,
    help="Refresh interval in seconds (default: from config).",
)
@click.option(
    "--sort", "sort_order",
    type=click.Choice(SORT_ORDERS),
    default="default",
    help="Order rows by latest RSI.",
)
@click.option("--offline", is_flag=True, help="Use simulated candles instead of the API.")
@click.pass_context
def watch(
    ctx: click.Context,
    timeframe: Optional[str],
    refresh_seconds: Optional[float],
    sort_order: str,
    offline: bool,
) -> None:
    """Live RSI dashboard with overbought/oversold notifications.

    Notifications are shown when alerts are enabled ('rsiscanner alerts on')
    and the timeframe is 15m or longer. Press Ctrl+C to stop.

    \b
    Examples:
      rsiscanner watch
      rsiscanner watch -t 1h --refresh 30
      rsiscanner watch --offline
    """
    from rich.live import Live

    from rsiscanner.scanner import Scanner

    config = _get_config(ctx)
    timeframe = timeframe or config.scanner.timeframe
    refresh_seconds = refresh_seconds or config.scanner.refresh_seconds

    try:
        settings = _get_settings(config)
        symbols = settings.tracked_symbols
        favorites = settings.favorites
        alerts_enabled = settings.alerts_enabled
    except Exception as e:
        console.print(Panel(
            f"[red]Failed to load settings:[/red]\n\n{str(e)}",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    if not symbols:
        _print_no_symbols()
        return

    fetcher = _get_fetcher(config, offline)
    scanner = Scanner(
        fetcher,
        symbols,
        timeframe=timeframe,
        refresh_seconds=refresh_seconds,
        period=config.scanner.rsi_period,
        alerts_enabled=alerts_enabled,
        display_seconds=config.alerts.display_seconds,
    )

    def render() -> Group:
        snapshot = scanner.snapshot
        rows = displayed_symbols(symbols, snapshot, favorites=favorites, sort_order=sort_order)
        table = build_grid_table(
            rows, snapshot, timeframe, favorites,
            title=f"RSI ({timeframe}) - refresh every {refresh_seconds:g}s (Ctrl+C to stop)",
        )
        toasts = scanner.notifications.items
        if not toasts:
            return Group(table)
        return Group(table, Panel(
            "\n".join(format_toast(t) for t in toasts),
            title="[bold]Alerts[/bold]",
            border_style="yellow",
        ))

    async def _watch() -> None:
        with Live(render(), refresh_per_second=4, console=console) as live_display:
            scanner.on_snapshot(lambda snapshot: live_display.update(render()))
            scanner.notifications.subscribe(lambda event, toast: live_display.update(render()))
            try:
                await scanner.run()
            finally:
                await scanner.stop()
                await fetcher.aclose()

    alert_note = "alerts on" if alerts_enabled else "alerts off"
    console.print(f"[dim]Watching {len(symbols)} symbol(s) on {timeframe}, {alert_note}...[/dim]\n")

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped watching.[/dim]")
