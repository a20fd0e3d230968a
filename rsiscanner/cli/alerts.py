"""Alert management commands for the RSI scanner CLI.

Turns overbought/oversold notifications on or off and shows the rules
they follow.
"""

import click
from rich.console import Console
from rich.panel import Panel

from rsiscanner.alerts import ALERT_TIMEFRAMES, OVERBOUGHT_THRESHOLD, OVERSOLD_THRESHOLD
from rsiscanner.data import TIMEFRAMES

console = Console()


def _get_settings(ctx: click.Context):
    """Get the user settings backed by the configured database."""
    from rsiscanner.config import load_config
    from rsiscanner.db.store import SettingsStore
    from rsiscanner.settings import UserSettings

    obj = ctx.ensure_object(dict)
    config = obj.get("config") or load_config()
    return UserSettings(SettingsStore(config.storage.db_path))


def _set_enabled(ctx: click.Context, enabled: bool) -> None:
    try:
        settings = _get_settings(ctx)
        settings.alerts_enabled = enabled
    except Exception as e:
        console.print(Panel(
            f"[red]Failed to update alerts:[/red]\n\n{str(e)}",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    if enabled:
        console.print("[green]✓ RSI alerts enabled[/green]")
    else:
        console.print("[yellow]RSI alerts disabled[/yellow]")


@click.group()
def alerts() -> None:
    """Manage overbought/oversold alerts.

    \b
    Examples:
      rsiscanner alerts on       # Enable notifications
      rsiscanner alerts off      # Disable notifications
      rsiscanner alerts status   # Show current state and rules
    """
    pass


@alerts.command("on")
@click.pass_context
def alerts_on(ctx: click.Context) -> None:
    """Enable RSI alerts."""
    _set_enabled(ctx, True)


@alerts.command("off")
@click.pass_context
def alerts_off(ctx: click.Context) -> None:
    """Disable RSI alerts."""
    _set_enabled(ctx, False)


@alerts.command("status")
@click.pass_context
def alerts_status(ctx: click.Context) -> None:
    """Show whether alerts are enabled and when they fire."""
    try:
        settings = _get_settings(ctx)
        enabled = settings.alerts_enabled
    except Exception as e:
        console.print(Panel(
            f"[red]Failed to read alert settings:[/red]\n\n{str(e)}",
            title="[bold red]Error[/bold red]",
            border_style="red",
        ))
        raise SystemExit(1)

    state = "[green]● Enabled[/green]" if enabled else "[dim]○ Disabled[/dim]"
    timeframes = ", ".join(tf for tf in TIMEFRAMES if tf in ALERT_TIMEFRAMES)

    console.print(Panel(
        f"Status:      {state}\n"
        f"Overbought:  RSI >= {OVERBOUGHT_THRESHOLD:g}\n"
        f"Oversold:    RSI <= {OVERSOLD_THRESHOLD:g}\n"
        f"Timeframes:  {timeframes}\n\n"
        "[dim]A notification fires once when a symbol enters a zone,\n"
        "not on every refresh while it stays there.[/dim]",
        title="[bold]RSI Alerts[/bold]",
        border_style="green" if enabled else "dim",
    ))
