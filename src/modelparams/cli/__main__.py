"""modelparams CLI entry point.

Provides commands to inspect guess vectors and parameter reports of a
model-object tree, and to apply a saved guess.
"""

import logging
import sys

import typer

from .params import apply_command, guess_command, report_command

app = typer.Typer(
    name="modelparams",
    help="Inspect and update calibrated parameters of model-object trees",
    invoke_without_command=True,
)

app.command("guess")(guess_command)
app.command("report")(report_command)
app.command("apply")(apply_command)


@app.command("version")
def version():
    """Show version information."""
    from .. import __version__
    typer.echo(f"modelparams version {__version__}")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output")
):
    """Inspect and update calibrated parameters of model-object trees."""
    if verbose:
        logging.basicConfig(level=logging.INFO)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        typer.echo("\nError: Missing command.", err=True)
        raise typer.Exit(1)


def cli_main():
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("\nAborted", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
