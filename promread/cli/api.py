"""API server CLI commands for promread."""

from typing import Optional

import typer
from rich.console import Console

app = typer.Typer(
    name="api",
    help="API server management commands",
    add_completion=True,
)

console = Console()


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(
        None,
        "--host",
        "-h",
        help="Host to bind to (defaults to configured host)",
    ),
    port: Optional[int] = typer.Option(
        None,
        "--port",
        "-p",
        help="Port to bind to (defaults to configured port)",
    ),
    workers: Optional[int] = typer.Option(
        None,
        "--workers",
        "-w",
        help="Number of worker processes",
    ),
    reload: bool = typer.Option(
        False,
        "--reload",
        "-r",
        help="Enable auto-reload for development",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Logging level (debug, info, warning, error, critical)",
    ),
    access_log: bool = typer.Option(
        True,
        "--access-log/--no-access-log",
        help="Enable/disable access logging",
    ),
) -> None:
    """Start promread API server.

    Examples:
        promread api serve

        promread api serve --host 0.0.0.0 --port 9000

        promread api serve --workers 4
    """
    import uvicorn
    from promread.config import get_settings

    settings = get_settings()

    host = host or settings.promread_host
    port = port or settings.promread_port
    workers = workers or settings.promread_workers

    if log_level:
        effective_log_level = log_level.lower()
    else:
        effective_log_level = settings.log_level.lower()

    if reload and workers > 1:
        console.print(
            "[yellow]Warning:[/yellow] --reload flag is ignored when workers > 1. "
            "Using single worker mode with reload."
        )
        workers = 1

    console.print("\n[bold cyan]Starting promread API Server[/bold cyan]\n")
    console.print(f"  Host:        {host}")
    console.print(f"  Port:        {port}")
    console.print(f"  Workers:     {workers}")
    console.print(f"  ClickHouse:  {settings.clickhouse_url}")
    console.print(f"  Log Level:   {effective_log_level}")

    host_display = "localhost" if host == "0.0.0.0" else host
    console.print(f"\n  Remote read: http://{host_display}:{port}/api/v1/prom/read")
    console.print(f"  Health:      http://{host_display}:{port}/health\n")

    uvicorn_config = {
        "app": "promread.api.app:app",
        "host": host,
        "port": port,
        "log_level": effective_log_level,
        "access_log": access_log,
    }

    if reload:
        uvicorn_config["reload"] = True
    else:
        uvicorn_config["workers"] = workers

    try:
        uvicorn.run(**uvicorn_config)
    except KeyboardInterrupt:
        console.print("\n[green]✓ Server stopped gracefully[/green]\n")
    except Exception as e:
        console.print(f"\n[red]✗ Server error: {e}[/red]\n")
        raise typer.Exit(1)


@app.command("status")
def status(
    host: str = typer.Option(
        "localhost",
        "--host",
        "-h",
        help="API server host",
    ),
    port: int = typer.Option(
        8000,
        "--port",
        "-p",
        help="API server port",
    ),
) -> None:
    """Check whether a running server is ready to answer remote reads.

    Example:
        promread api status --port 9201
    """
    import httpx

    url = f"http://{host}:{port}/health/ready"

    try:
        console.print(f"[blue]Checking API server at {url}...[/blue]")
        response = httpx.get(url, timeout=5.0)
    except httpx.ConnectError:
        console.print(f"\n[red]✗ Cannot connect to API server at {url}[/red]")
        console.print("[yellow]Is the server running?[/yellow]\n")
        raise typer.Exit(1)
    except httpx.TimeoutException:
        console.print(f"\n[red]✗ Connection timeout to {url}[/red]\n")
        raise typer.Exit(1)

    data = response.json()
    if response.status_code != 200:
        console.print(
            f"\n[yellow]⚠ Server responded with status {response.status_code} "
            f"({data.get('status', 'unknown')})[/yellow]\n"
        )
        raise typer.Exit(1)

    console.print("\n[green]✓ API server is ready[/green]\n")
    console.print(f"  Status:      {data.get('status', 'unknown')}")
    console.print(f"  Version:     {data.get('version', 'unknown')}")
    console.print(f"  Timestamp:   {data.get('timestamp', 'unknown')}\n")


if __name__ == "__main__":
    app()
