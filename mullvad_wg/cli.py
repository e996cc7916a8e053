"""Command line interface for mullvad-wg."""

from __future__ import annotations

import asyncio
from contextlib import contextmanager
from typing import Iterator, List, Optional

import typer
from rich.console import Console
from rich.table import Table

from . import __version__
from .core.errors import MullvadWGError
from .core.manager import VPNManager
from .utils.logging import enable_console_logging, get_logger
from .utils.platform import is_root

console = Console()
logger = get_logger("cli")
app = typer.Typer(add_completion=False, help="Manage Mullvad WireGuard connections from the terminal")


def build_manager() -> VPNManager:
    return VPNManager()


def _require_root() -> None:
    if not is_root():
        console.print("[red]This command must be run as root (use sudo)[/red]")
        raise typer.Exit(code=1)


def _format_age(seconds: float) -> str:
    minutes = int(max(seconds, 0) // 60)
    if minutes < 60:
        return f"{minutes} min"
    hours, minutes = divmod(minutes, 60)
    if hours < 48:
        return f"{hours} h {minutes} min"
    return f"{hours // 24} days"


@contextmanager
def _reported_errors() -> Iterator[None]:
    try:
        yield
    except MullvadWGError as exc:
        logger.error("%s", exc)
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Echo log output to the terminal"),
) -> None:
    if verbose:
        enable_console_logging()


@app.command()
def status() -> None:
    """Show the active tunnel and the autostart profile."""
    _require_root()
    manager = build_manager()
    current = manager.status()
    colour = "green" if current.is_connected else "yellow"
    console.print(f"[{colour}]{current.describe()}[/{colour}]")
    autostart = manager.autostart_profile()
    console.print(f"Autostart: {autostart or '-'}")


@app.command("list")
def list_profiles() -> None:
    """List generated profiles."""
    _require_root()
    manager = build_manager()
    current = manager.status()
    autostart = manager.autostart_profile()
    table = Table(title="WireGuard Profiles")
    table.add_column("Code")
    table.add_column("Connected")
    table.add_column("Autostart")
    for code in manager.profiles():
        table.add_row(
            code,
            "Yes" if current.code == code else "",
            "Yes" if autostart == code else "",
        )
    console.print(table)


@app.command()
def servers(
    country: Optional[str] = typer.Option(None, "--country", "-c", help="Show cities of this country"),
    city: Optional[str] = typer.Option(None, "--city", help="Show relays in this city (needs --country)"),
    refresh: bool = typer.Option(False, "--refresh", "-r", help="Fetch a fresh relay list"),
) -> None:
    """Browse relays by country and city."""
    manager = build_manager()
    with _reported_errors():
        loaded = asyncio.run(manager.load_servers(refresh=refresh))
    if not loaded:
        console.print("No servers cached. Run with --refresh or run setup.")
        return
    if manager.cache is not None:
        console.print(f"Relay list fetched {_format_age(manager.cache.age())} ago")
    tree = manager.server_tree()
    if country is None:
        table = Table(title=f"Countries ({len(loaded)} relays)")
        table.add_column("Country")
        table.add_column("Cities", justify="right")
        for name, cities in tree.items():
            table.add_row(name, str(len(cities)))
        console.print(table)
        return
    cities = tree.get(country)
    if cities is None:
        console.print(f"[red]Unknown country {country}[/red]")
        raise typer.Exit(code=1)
    if city is None:
        table = Table(title=country)
        table.add_column("City")
        table.add_column("Relays", justify="right")
        for name, relays in cities.items():
            table.add_row(name, str(len(relays)))
        console.print(table)
        return
    relays = cities.get(city)
    if relays is None:
        console.print(f"[red]Unknown city {city} in {country}[/red]")
        raise typer.Exit(code=1)
    table = Table(title=f"{city}, {country}")
    table.add_column("Code")
    table.add_column("Endpoint")
    table.add_column("Profile")
    for relay in relays:
        table.add_row(relay.code, relay.endpoint(), "Yes" if manager.store.exists(relay.code) else "")
    console.print(table)


@app.command()
def connect(code: str) -> None:
    """Connect to a relay, replacing any active tunnel."""
    _require_root()
    manager = build_manager()
    with _reported_errors():
        result = manager.connect(code)
    console.print(f"[green]{result.describe()}[/green]")


@app.command()
def disconnect() -> None:
    """Tear down the active tunnel."""
    _require_root()
    manager = build_manager()
    with _reported_errors():
        before = manager.status()
        manager.disconnect()
    if before.is_connected:
        console.print(f"Disconnected from {before.code}")
    else:
        console.print("Not connected")


@app.command()
def autostart(code: str) -> None:
    """Toggle boot-time activation for a profile."""
    _require_root()
    manager = build_manager()
    with _reported_errors():
        enabled = manager.toggle_autostart(code)
    state = "Enabled" if enabled else "Disabled"
    console.print(f"{state} autostart for {code}")


@app.command()
def setup(
    account: Optional[str] = typer.Option(None, "--account", "-a", help="Mullvad account number"),
    remember: bool = typer.Option(True, help="Store the account number in the system keyring (--no-remember forgets it)"),
) -> None:
    """Register this host and generate a profile for every relay."""
    _require_root()
    manager = build_manager()
    if not account:
        account = typer.prompt("Account number", default=manager.accounts.load_account() or "")
    with _reported_errors():
        result = asyncio.run(manager.setup(account or "", remember=remember))
    source = "existing" if result.reused_key else "new"
    console.print(f"[green]Setup complete! Generated {result.count} config files using the {source} key.[/green]")


@app.command()
def remove(code: str) -> None:
    """Delete one generated profile."""
    _require_root()
    manager = build_manager()
    with _reported_errors():
        manager.delete_profile(code)
    console.print(f"Removed {code}")


@app.command()
def doctor() -> None:
    """Check that the required system tools are installed."""
    manager = build_manager()
    report = manager.dependency_report()
    platform = report["platform"]
    table = Table(title=f"Dependencies on {platform.name}")
    table.add_column("Tool")
    table.add_column("Found")
    table.add_column("Install")
    missing = report["missing"]
    for name, found in report["dependencies"].items():
        table.add_row(name, "Yes" if found else "[red]No[/red]", "" if found else missing.get(name, ""))
    console.print(table)
    if missing:
        raise typer.Exit(code=1)


@app.command()
def version() -> None:
    """Print the version."""
    console.print(__version__)


def run_cli(argv: List[str] | None = None) -> int:
    try:
        app(args=argv, prog_name="mullvad-wg", standalone_mode=False)
        return 0
    except typer.Exit as exc:
        return exc.exit_code


def main() -> None:
    app(prog_name="mullvad-wg")
