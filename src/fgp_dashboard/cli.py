"""fgp-dashboard CLI entry point."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import webbrowser
from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from fgp_dashboard.registry.registry import ServiceRegistry

app = typer.Typer(
    name="fgp-dashboard",
    help="FGP Dashboard: monitor and control local daemon services",
    no_args_is_help=True,
)
console = Console()

LOG_LEVEL_ENV = "FGP_DASHBOARD_LOG"
LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def _format_uptime(seconds: int | None) -> str:
    if not seconds:
        return "-"
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m {seconds % 60}s"
    if seconds < 86400:
        return f"{seconds // 3600}h {(seconds % 3600) // 60}m"
    return f"{seconds // 86400}d {(seconds % 86400) // 3600}h"


def _load_registry(path: Path | None = None) -> ServiceRegistry:
    from fgp_dashboard.config.loader import load_config
    from fgp_dashboard.registry.registry import ServiceRegistry

    try:
        config = load_config(path=path)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    return ServiceRegistry(config)


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Bind host [default: 127.0.0.1]"),
    port: int | None = typer.Option(None, "--port", "-p", help="Bind port [default: 8765]"),
    open_browser: bool = typer.Option(False, "--open", "-o", help="Open the dashboard in a browser"),
    log_level: str = typer.Option(
        "info", "--log-level", envvar=LOG_LEVEL_ENV, help="Log level (debug, info, warning, error, critical)"
    ),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to .fgp-dashboard.yaml"),
) -> None:
    """Start the dashboard API server and serve the status page."""
    import uvicorn

    from fgp_dashboard.config.loader import CONFIG_ENV_VAR, load_config

    if log_level.lower() not in LOG_LEVELS:
        console.print(f"[red]Invalid log level {log_level!r}. Choose from: {', '.join(LOG_LEVELS)}[/red]")
        raise typer.Exit(1)

    try:
        config = load_config(path=config_path)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # the app factory runs inside uvicorn and reads the path from the environment
    if config_path is not None:
        os.environ[CONFIG_ENV_VAR] = str(config_path)
    host = host or config.server.host
    port = port or config.server.port

    url = f"http://{host}:{port}"
    console.print(f"[bold]FGP Dashboard[/bold] starting at {url}")
    if open_browser:
        webbrowser.open(url)
    uvicorn.run(
        "fgp_dashboard.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=log_level.lower(),
    )


@app.command()
def status(
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to .fgp-dashboard.yaml"),
) -> None:
    """Show all installed services and their status."""
    registry = _load_registry(config_path)
    records = registry.get_all_statuses_sync()

    if not records:
        console.print(f"No services installed in {registry.config.services_dir}")
        return

    table = Table(title="FGP Services")
    table.add_column("Service", style="bold")
    table.add_column("Status")
    table.add_column("Version")
    table.add_column("Uptime")
    table.add_column("Socket")

    for r in records:
        if r.status in ("running", "healthy"):
            style = "green"
        elif r.status == "stopped":
            style = "dim"
        elif r.status in ("unhealthy", "degraded"):
            style = "yellow"
        else:
            style = "red"
        table.add_row(
            r.name,
            f"[{style}]{r.status}[/{style}]",
            r.version or "-",
            _format_uptime(r.uptime_seconds),
            r.control_address,
        )

    console.print(table)


@app.command()
def health(
    service: str = typer.Argument(help="Service name"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to .fgp-dashboard.yaml"),
) -> None:
    """Print the raw health payload of one service."""
    from fgp_dashboard.errors import DashboardError

    registry = _load_registry(config_path)
    try:
        detail = asyncio.run(registry.get_service_health(service))
    except DashboardError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(1)
    console.print_json(json.dumps(detail.payload))


def _control(action: str, service: str, config_path: Path | None) -> None:
    from fgp_dashboard.errors import DashboardError

    registry = _load_registry(config_path)
    handler = registry.start_service if action == "start" else registry.stop_service
    try:
        outcome = asyncio.run(handler(service))
    except DashboardError as exc:
        console.print(f"[red]Failed to {action} {service}: {exc.message}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]✓[/green] {outcome.message}")


@app.command()
def start(
    service: str = typer.Argument(help="Service name"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to .fgp-dashboard.yaml"),
) -> None:
    """Start a service through the supervisor."""
    _control("start", service, config_path)


@app.command()
def stop(
    service: str = typer.Argument(help="Service name"),
    config_path: Path | None = typer.Option(None, "--config", "-c", help="Path to .fgp-dashboard.yaml"),
) -> None:
    """Stop a running service."""
    _control("stop", service, config_path)


config_app = typer.Typer(name="config", help="Configuration commands")
app.add_typer(config_app)


@config_app.command("show")
def config_show(
    path: Path | None = typer.Option(None, "--path", "-p", help="Path to .fgp-dashboard.yaml"),
) -> None:
    """Print resolved configuration."""
    from fgp_dashboard.config.loader import find_config_file, load_config

    try:
        config = load_config(path=path)
    except (FileNotFoundError, ValueError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)

    source = path or find_config_file()
    console.print(f"[bold]Config file:[/bold] {source or '(defaults)'}\n")
    console.print(f"  Services dir: {config.services_dir}")
    console.print(f"  Socket name: {config.socket_name}")
    console.print(f"  Manifest name: {config.manifest_name}")
    console.print(f"  Probe timeout: {config.probe_timeout}s")
    console.print(f"  Max concurrent probes: {config.max_concurrent_probes}")
    console.print(f"  Start timeout: {config.start_timeout}s")
    console.print(f"  Stop timeout: {config.stop_timeout}s")
    console.print(f"  Server: {config.server.host}:{config.server.port}")


def main() -> None:
    app()
