"""Symbol management commands for the RSI scanner CLI.

Handles the asset list, the tracked selection and favorites.
"""

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

console = Console()


def _get_settings(ctx: click.Context):
    """Get the user settings backed by the configured database."""
    from rsiscanner.config import load_config
    from rsiscanner.db.store import SettingsStore
    from rsiscanner.settings import UserSettings

    obj = ctx.ensure_object(dict)
    config = obj.get("config") or load_config()
    return UserSettings(SettingsStore(config.storage.db_path))


def _fail(action: str, error: Exception) -> None:
    console.print(Panel(
        f"[red]Failed to {action}:[/red]\n\n{str(error)}",
        title="[bold red]Error[/bold red]",
        border_style="red",
    ))
    raise SystemExit(1)


@click.group()
def symbols() -> None:
    """Manage the asset list and tracked symbols.

    \b
    Examples:
      rsiscanner symbols list                    # Show all assets
      rsiscanner symbols add PEPEUSDT WIFUSDT    # Add and track new assets
      rsiscanner symbols remove DOGEUSDT         # Drop an asset
      rsiscanner symbols select BTCUSDT ETHUSDT  # Track only these
      rsiscanner symbols reset                   # Restore defaults
    """
    pass


@symbols.command("list")
@click.pass_context
def list_symbols(ctx: click.Context) -> None:
    """Show every asset with its tracked and favorite state."""
    try:
        settings = _get_settings(ctx)
        all_symbols = settings.all_symbols
        tracked = set(settings.tracked_symbols)
        favorites = set(settings.favorites)
    except Exception as e:
        _fail("list symbols", e)

    if not all_symbols:
        console.print(Panel(
            "[dim]Asset list is empty. Use 'rsiscanner symbols add SYMBOL' to add one.[/dim]",
            title="[bold]Symbols[/bold]",
            border_style="dim",
        ))
        return

    table = Table(title="Assets", show_header=True, header_style="bold cyan")
    table.add_column("Symbol", style="bold")
    table.add_column("Tracked", justify="center")
    table.add_column("Favorite", justify="center")

    for symbol in all_symbols:
        table.add_row(
            symbol,
            "[green]✓[/green]" if symbol in tracked else "[dim]-[/dim]",
            "[yellow]★[/yellow]" if symbol in favorites else "",
        )

    console.print(table)
    console.print(f"\n[dim]Tracking {len(tracked)} of {len(all_symbols)} assets[/dim]")


@symbols.command("add")
@click.argument("new_symbols", metavar="SYMBOLS", nargs=-1, required=True)
@click.pass_context
def add_symbols(ctx: click.Context, new_symbols: tuple[str, ...]) -> None:
    """Add assets and start tracking them."""
    try:
        settings = _get_settings(ctx)
        tracked = settings.tracked_symbols
        added = [s.upper() for s in new_symbols if s.upper() not in tracked]
        settings.set_tracked_symbols(tracked + added)
    except Exception as e:
        _fail("add symbols", e)

    if added:
        console.print(f"[green]✓ Tracking {', '.join(added)}[/green]")
    else:
        console.print("[yellow]All symbols are already tracked[/yellow]")


@symbols.command("remove")
@click.argument("old_symbols", metavar="SYMBOLS", nargs=-1, required=True)
@click.pass_context
def remove_symbols(ctx: click.Context, old_symbols: tuple[str, ...]) -> None:
    """Remove assets from the asset list."""
    try:
        settings = _get_settings(ctx)
        drop = {s.upper() for s in old_symbols}
        all_symbols = settings.all_symbols
        removed = [s for s in all_symbols if s in drop]
        settings.save_asset_list(
            [s for s in all_symbols if s not in drop],
            settings.tracked_symbols,
        )
    except Exception as e:
        _fail("remove symbols", e)

    if removed:
        console.print(f"[green]✓ Removed {', '.join(removed)}[/green]")
    else:
        console.print("[yellow]None of those symbols are in the asset list[/yellow]")


@symbols.command("select")
@click.argument("selected", metavar="SYMBOLS", nargs=-1, required=True)
@click.pass_context
def select_symbols(ctx: click.Context, selected: tuple[str, ...]) -> None:
    """Track exactly the given symbols."""
    try:
        settings = _get_settings(ctx)
        chosen = settings.set_tracked_symbols(selected)
    except Exception as e:
        _fail("select symbols", e)

    console.print(f"[green]✓ Tracking {len(chosen)} symbol(s): {', '.join(chosen)}[/green]")


@symbols.command("reset")
@click.confirmation_option(prompt="Reset assets, selection, favorites and alerts to defaults?")
@click.pass_context
def reset_symbols(ctx: click.Context) -> None:
    """Restore every preference to its default."""
    try:
        settings = _get_settings(ctx)
        settings.reset()
    except Exception as e:
        _fail("reset settings", e)

    console.print("[green]✓ Settings restored to defaults[/green]")


@click.command()
@click.argument("symbol")
@click.pass_context
def favorite(ctx: click.Context, symbol: str) -> None:
    """Toggle SYMBOL as a favorite.

    \b
    Examples:
      rsiscanner favorite BTCUSDT
    """
    symbol = symbol.upper()

    try:
        settings = _get_settings(ctx)
        is_favorite = settings.toggle_favorite(symbol)
    except Exception as e:
        _fail("update favorites", e)

    if is_favorite:
        console.print(f"[green]★ {symbol} added to favorites[/green]")
    else:
        console.print(f"[yellow]{symbol} removed from favorites[/yellow]")
