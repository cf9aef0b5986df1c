"""CLI command for running a nesting job."""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import click
from pydantic import BaseModel, Field, ValidationError
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from sheetnest.utils import format_duration, format_percent

console = Console()


class SheetSpec(BaseModel):
    width: float
    height: float


class PartSpec(BaseModel):
    id: str
    polygon: List[float]
    quantity: int = 1


class JobFile(BaseModel):
    sheet: Optional[SheetSpec] = None
    parts: List[PartSpec]
    config: Dict[str, Any] = Field(default_factory=dict)


def load_job(path: Path) -> JobFile:
    """Read and validate a JSON job file."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return JobFile(**data)


@click.command("nest")
@click.argument("job_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--iterations", "-n", type=int, help="Search attempts")
@click.option("--rotation-steps", "-r", type=int, help="Rotations to try per part")
@click.option("--spacing", "-s", type=float, help="Gap between parts")
@click.option("--mutation-rate", "-m", type=float, help="Swap probability per attempt")
@click.option("--seed", type=int, help="Random seed for a reproducible run")
@click.option("--algorithm", "-a", type=click.Choice(["search", "shelf"]), help="Layout engine")
@click.option("--strict", is_flag=True, help="Drop unplaceable parts silently")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.option("--layout", "as_layout", is_flag=True, help="Output a text layout")
def nest(job_file, iterations, rotation_steps, spacing, mutation_rate, seed,
         algorithm, strict, as_json, as_layout):
    """Nest the parts of JOB_FILE onto sheets.

    JOB_FILE is JSON with a "sheet" ({"width", "height"}), a list of
    "parts" ({"id", "polygon", "quantity"}) and optional "config" values.

    Example: sheetnest nest job.json --iterations 100 --seed 7
    """
    from sheetnest.nesting import NestingConfig, NestingError, Nester, Part

    try:
        job = load_job(Path(job_file))
    except (ValidationError, json.JSONDecodeError, TypeError) as e:
        console.print(f"[red]Invalid job file: {escape(str(e))}[/red]")
        raise SystemExit(1)

    overrides = dict(job.config)
    if job.sheet:
        overrides["sheet_width"] = job.sheet.width
        overrides["sheet_height"] = job.sheet.height
    options = {
        "iterations": iterations,
        "rotation_steps": rotation_steps,
        "spacing": spacing,
        "mutation_rate": mutation_rate,
        "seed": seed,
        "algorithm": algorithm,
        "strict_compat": True if strict else None,
    }
    # Only options given on the command line replace job file values
    overrides.update({k: v for k, v in options.items() if v is not None})

    try:
        config = NestingConfig.from_settings(**overrides)
        parts = [Part(id=p.id, polygon=p.polygon, quantity=p.quantity) for p in job.parts]
        nester = Nester(config)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.fields[best]}"),
            console=console,
            disable=as_json or as_layout,
        ) as progress:
            task = progress.add_task("Nesting...", total=max(1, config.iterations), best="")

            def on_progress(attempt: int, total: int, best: float) -> None:
                progress.update(task, completed=attempt, best=f"best {format_percent(best)}")

            result = nester.nest(parts, progress=on_progress)

    except NestingError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    if as_layout:
        click.echo(nester.export_layout(result))
        return

    table = Table(title=f"Nesting - {Path(job_file).name}")
    table.add_column("Sheet", style="cyan", justify="right")
    table.add_column("Parts", justify="right")
    table.add_column("Utilization", justify="right", style="green")

    for sheet_index, util in enumerate(result.utilization):
        table.add_row(
            str(sheet_index + 1),
            str(len(result.placements_on(sheet_index))),
            format_percent(util),
        )

    console.print(table)
    console.print(f"Sheets used: [bold]{result.sheets_used}[/bold]")
    console.print(f"Iterations: {result.iterations_run} ({format_duration(result.processing_time)})")
    if result.dropped_count:
        console.print(f"[yellow]Unplaced instances: {result.dropped_count}[/yellow]")
