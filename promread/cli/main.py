"""Main CLI entry point for promread."""

import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from promread import __version__
from promread.config import Settings, get_settings
from promread.exceptions import PromReadError
from promread.logging_config import get_logger, setup_logging

app = typer.Typer(
    name="promread",
    help="promread - Prometheus remote read bridge for ClickHouse",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=False,
)

console = Console()
console_err = Console(stderr=True)
logger = get_logger(__name__)


class CLIState:
    """Global CLI state."""

    output_format: str = "table"
    verbose: bool = False
    settings: Optional[Settings] = None


state = CLIState()


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"promread version: {__version__}")
        console.print(f"Python: {sys.version.split()[0]}")
        raise typer.Exit(0)


@app.callback()
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version information and exit",
        callback=version_callback,
        is_eager=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file path",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    output: str = typer.Option(
        "table",
        "--output",
        "-o",
        help="Output format: table, json",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging",
    ),
) -> None:
    """
    promread - Prometheus remote read for ClickHouse

    Translates remote read requests into ClickHouse SQL and turns the
    result rows back into Prometheus time series.
    """
    if output not in ["table", "json"]:
        console_err.print(f"[red]Error:[/red] Invalid output format: {output}")
        console_err.print("Valid formats: table, json")
        raise typer.Exit(1)

    state.output_format = output
    state.verbose = verbose
    state.settings = get_settings(config, reload=config is not None)

    if verbose:
        state.settings.log_level = "DEBUG"

    setup_logging(state.settings)

    ctx.obj = state


def handle_error(error: Exception) -> None:
    """Handle CLI errors with user-friendly messages.

    Args:
        error: Exception to handle
    """
    if isinstance(error, PromReadError):
        console_err.print(f"\n[red]Error:[/red] {error.message}")

        if state.verbose and error.context:
            console_err.print("\n[yellow]Context:[/yellow]")
            for key, value in error.context.items():
                console_err.print(f"  {key}: {value}")
    else:
        console_err.print(f"\n[red]Unexpected Error:[/red] {str(error)}")

        if state.verbose:
            import traceback

            console_err.print("\n[yellow]Traceback:[/yellow]")
            console_err.print(traceback.format_exc())

    raise typer.Exit(1)


from promread.cli import api, translate  # noqa: E402

app.command("translate")(translate.translate)
app.command("decode")(translate.decode)
app.add_typer(api.app, name="api", help="API server management")


def main_cli() -> None:
    """Entry point for CLI application with error handling."""
    try:
        app()
    except PromReadError as e:
        handle_error(e)
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(1)
    except Exception as e:
        handle_error(e)


if __name__ == "__main__":
    main_cli()
