"""wharf CLI: validate and publish packages to the registry."""

import typer

from wharf import __version__

from .commands import init, publish
from .logging import configure_logging
from .output import OutputContext, set_output_context


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"wharf {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="wharf",
    help="Validate a package and publish it to the registry",
    no_args_is_help=True,
)


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase verbosity (-v, -vv); -v also requests debug job logs",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Suppress non-error output",
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Output in JSON format for automation",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable colored output",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug logging with timestamps and source locations",
    ),
) -> None:
    """wharf - package publishing for the registry."""
    console = configure_logging(
        verbosity=verbose,
        quiet=quiet,
        no_color=no_color,
        debug=debug,
    )
    set_output_context(
        OutputContext(
            console=console,
            json_mode=json_output,
            verbosity=2 if debug else verbose,
        )
    )


app.command()(init)
app.command()(publish)
