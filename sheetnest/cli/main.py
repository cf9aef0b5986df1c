"""Main CLI entry point for SheetNest."""

import click
from rich.console import Console

from sheetnest import __version__
from sheetnest.utils import setup_logging

console = Console()


@click.group()
@click.version_option(version=__version__, prog_name="SheetNest")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """SheetNest - lay out parts on material sheets.

    Nests polygonal parts onto rectangular sheets, minimizing the number
    of sheets and maximizing material utilization.
    """
    from sheetnest.config import get_settings

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    setup_logging("DEBUG" if verbose else get_settings().log_level)


# Import and register command groups
from sheetnest.cli.nest_cmd import nest

cli.add_command(nest)


@cli.command()
def status() -> None:
    """Show effective nesting defaults."""
    from sheetnest.config import get_settings

    settings = get_settings()

    console.print("[bold]SheetNest Status[/bold]")
    console.print(f"Version: {__version__}")
    console.print()
    console.print("[bold]Sheet:[/bold]")
    console.print(f"  Size: {settings.sheet_width:g} x {settings.sheet_height:g}")
    console.print(f"  Spacing: {settings.spacing:g}")
    console.print()
    console.print("[bold]Search:[/bold]")
    console.print(f"  Iterations: {settings.iterations}")
    console.print(f"  Rotation steps: {settings.rotation_steps}")
    console.print(f"  Mutation rate: {settings.mutation_rate:g}")
    console.print(f"  Grid step: {settings.grid_step:g}")
    console.print(f"  Seed: {settings.seed if settings.seed is not None else '[yellow]random[/yellow]'}")
    console.print(f"  Strict compatibility: {settings.strict_compat}")


if __name__ == "__main__":
    cli()
