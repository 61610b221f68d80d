"""
RoofScan CLI.

Command-line interface for projecting roof scan results and rendering
annotated roof images.
"""

from __future__ import annotations

import asyncio
import base64
import json
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .api.client import SolarScanClient
from .api.models import ScanResults
from .core.config import Settings
from .core.exceptions import RoofScanError
from .geo.projector import CoordinateProjector
from .utils.logging_config import setup_logging
from .visual.pipeline import visualize_scan
from .visual.renderer import OverlayRenderer, data_reference_to_bytes

app = typer.Typer(
    name="roofscan",
    help="RoofScan - annotate satellite imagery with solar roof scan results",
    add_completion=False,
)
console = Console()


@app.callback()
def _configure(
    log_level: str = typer.Option("WARNING", "--log-level", help="Log level"),
):
    setup_logging(level=log_level)


def _load_results(path: Path) -> dict[str, Any]:
    """Read a saved results JSON; exits with code 1 when it is unusable."""
    try:
        with open(path) as f:
            data = json.load(f)
        return ScanResults.model_validate(data).model_dump(by_alias=True)
    except OSError as e:
        console.print(f"[red]Cannot read {path}: {e.strerror or e}[/red]")
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        console.print(f"[red]Invalid JSON in {path}: {e}[/red]")
    except ValidationError as e:
        count = e.error_count()
        console.print(f"[red]Not a scan result: {path} ({count} invalid field(s))[/red]")
    raise typer.Exit(code=1)


def _image_source(image: str) -> str:
    """Local files become raw base64 payloads; URLs and data references pass through."""
    if image.startswith(("data:", "http")):
        return image
    try:
        data = Path(image).read_bytes()
    except OSError:
        return image
    return base64.b64encode(data).decode("ascii")


def _write_png(data_url: str, output: Path) -> None:
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(data_reference_to_bytes(data_url))
    console.print(f"[green]Saved:[/green] {output}")


def _renderer(settings: Settings) -> OverlayRenderer:
    return OverlayRenderer(
        style=settings.render_style(),
        fetch_timeout=settings.image_fetch_timeout,
        on_malformed=lambda w: console.print(f"[yellow]Skipped: {w}[/yellow]"),
    )


@app.command()
def project(
    results_file: Path = typer.Argument(..., help="Scan results JSON file"),
    width: int = typer.Option(..., "--width", "-w", help="Image width in pixels"),
    height: int = typer.Option(..., "--height", "-h", help="Image height in pixels"),
):
    """
    Print the pixel rectangles for a saved scan result.
    """
    results = _load_results(results_file)
    projection = CoordinateProjector().project(
        width, height, results.get("buildingBoundingBox"), results.get("roofSegments")
    )

    if projection.building_box is None:
        console.print("[red]Scan results have no valid building bounding box[/red]")
        raise typer.Exit(code=1)

    table = Table(title=f"Pixel boxes ({width} x {height})")
    table.add_column("Shape", style="cyan")
    for name in ("min_x", "min_y", "max_x", "max_y"):
        table.add_column(name, justify="right")

    box = projection.building_box
    table.add_row("building", str(box.min_x), str(box.min_y), str(box.max_x), str(box.max_y))
    for segment in projection.roof_segments:
        table.add_row(
            f"segment {segment.id}",
            str(segment.min_x), str(segment.min_y), str(segment.max_x), str(segment.max_y),
        )

    console.print(table)


@app.command()
def render(
    results_file: Path = typer.Argument(..., help="Scan results JSON file"),
    image: str = typer.Argument(..., help="Image file, URL, or data reference"),
    output: Path = typer.Option(Path("output/roof_scan.png"), "--output", "-o", help="Output PNG"),
    width: int = typer.Option(..., "--width", "-w", help="Output width in pixels"),
    height: int = typer.Option(..., "--height", "-h", help="Output height in pixels"),
):
    """
    Draw a saved scan result over an image and save it as PNG.
    """
    settings = Settings()
    results = _load_results(results_file)

    try:
        data_url = asyncio.run(
            visualize_scan(results, _image_source(image), width, height, renderer=_renderer(settings))
        )
    except RoofScanError as e:
        console.print(f"[red]Render failed: {e}[/red]")
        raise typer.Exit(code=1)

    _write_png(data_url, output)


@app.command()
def scan(
    address: str = typer.Argument(..., help="Street address of the building"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Output PNG"),
    width: int = typer.Option(800, "--width", "-w", help="Output width in pixels"),
    height: int = typer.Option(600, "--height", "-h", help="Output height in pixels"),
):
    """
    Run a roof scan for an address and render the result.
    """
    settings = Settings()
    console.print(Panel.fit(
        f"[bold blue]Solar Roof Scan[/bold blue]\n{address}",
        border_style="blue"
    ))

    try:
        with SolarScanClient.from_settings(settings) as client:
            job = client.initiate_scan({"address": address})
            job_id = job["jobId"]
            console.print(f"[cyan]Job:[/cyan] {job_id}")

            with console.status("Waiting for scan to complete..."):
                results = client.wait_for_results(
                    job_id,
                    poll_interval=settings.poll_interval,
                    timeout=settings.poll_timeout,
                )

        parsed = ScanResults.model_validate(results)
        console.print(f"[green]Found {len(parsed.roof_segments or [])} roof segments[/green]")

        if not parsed.image_source:
            console.print("[yellow]Results contain no image; nothing to render[/yellow]")
            return

        data_url = asyncio.run(
            visualize_scan(
                parsed.geometry(), parsed.image_source, width, height,
                renderer=_renderer(settings),
            )
        )
    except RoofScanError as e:
        console.print(f"[red]Scan failed: {e}[/red]")
        raise typer.Exit(code=1)

    if output is None:
        settings.ensure_dirs()
        output = settings.output_dir / f"roof_scan_{job_id}.png"
    _write_png(data_url, output)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
