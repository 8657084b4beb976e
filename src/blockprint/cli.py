"""Command-line interface for BlockPrint.

Provides commands for building a palette from a manifest, quantizing an
image into a grid packet, and inspecting an encoded packet.
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from blockprint.codec import decode_packet, encode_packet
from blockprint.config import load_manifest
from blockprint.constants import AIR
from blockprint.errors import BlockPrintError
from blockprint.image_io import open_image_file
from blockprint.logging import setup_logging
from blockprint.models import GridPacket
from blockprint.palette import build_palette_report, load_palette, save_palette
from blockprint.quantizer import quantize
from blockprint.renderer import render_grid
from blockprint.sources import DirectoryImageSource

console = Console()

_EXPECTED_ERRORS = (BlockPrintError, FileNotFoundError, ValidationError, ValueError)


def _setup_logging(verbose: bool) -> None:
    """Configure logging based on verbose flag."""
    setup_logging(level=logging.DEBUG if verbose else logging.INFO, verbose=verbose)


def _fail(action: str, exc: Exception, verbose: bool) -> NoReturn:
    console.print(f"[bold red]✗[/] {action} failed: {exc}")
    if verbose:
        console.print_exception()
    sys.exit(1)


@click.group()
@click.version_option(package_name="blockprint")
def main() -> None:
    """BlockPrint — turn images into grids of palette blocks."""


@main.command()
@click.argument(
    "manifest_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Where to write the palette JSON",
)
@click.option(
    "--workers",
    "-w",
    type=click.IntRange(min=1),
    help="Sampling threads (overrides manifest)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable detailed logging")
def palette(
    manifest_path: Path,
    output: Path,
    workers: int | None,
    verbose: bool,
) -> None:
    """Build a palette from the candidates listed in a manifest.

    MANIFEST_PATH: Path to the YAML palette manifest

    Example:

        \b
        blockprint palette manifests/vanilla.yaml -o palettes/vanilla.json
    """
    _setup_logging(verbose)

    try:
        manifest = load_manifest(manifest_path)
        source = DirectoryImageSource(manifest.textures.root)

        with console.status(
            f"[bold blue]Sampling {len(manifest.candidates)} candidates..."
        ):
            report = build_palette_report(
                manifest.candidates,
                source,
                texture_template=manifest.textures.template,
                alpha_threshold=manifest.alpha_threshold,
                max_workers=workers or manifest.workers,
            )
        save_palette(report.palette, output)
    except _EXPECTED_ERRORS as exc:
        _fail("Palette build", exc, verbose)

    console.print(
        f"[bold green]✓[/] Palette with [bold]{len(report.palette)}[/] entries "
        f"written to {output}"
    )
    counts = report.skip_counts()
    if counts:
        table = Table(title="Skipped candidates")
        table.add_column("Reason")
        table.add_column("Count", justify="right")
        for reason, count in sorted(counts.items()):
            table.add_row(reason.value, str(count))
        console.print(table)


@main.command(name="quantize")
@click.argument(
    "image_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--palette",
    "-p",
    "palette_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Palette JSON produced by 'blockprint palette'",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the encoded grid packet here",
)
@click.option(
    "--json",
    "json_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the grid as a JSON array of rows",
)
@click.option(
    "--preview",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write a PNG rendered from the palette colors",
)
@click.option(
    "--origin",
    type=(int, int, int),
    default=(0, 0, 0),
    show_default=True,
    help="World origin stored in the packet",
)
@click.option(
    "--fallback",
    default=AIR,
    show_default=True,
    help="Identifier used when the palette is empty",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable detailed logging")
def quantize_command(
    image_path: Path,
    palette_path: Path,
    output: Path | None,
    json_path: Path | None,
    preview: Path | None,
    origin: tuple[int, int, int],
    fallback: str,
    verbose: bool,
) -> None:
    """Quantize an image against a palette.

    IMAGE_PATH: The image to convert

    Example:

        \b
        blockprint quantize art/logo.png -p palettes/vanilla.json \\
            -o logo.bin --preview logo_preview.png
    """
    _setup_logging(verbose)

    try:
        pal = load_palette(palette_path)
        image = open_image_file(image_path)
        with console.status(
            f"[bold blue]Quantizing {image.width}x{image.height} image..."
        ):
            grid = quantize(image, pal, fallback=fallback)

        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_bytes(encode_packet(GridPacket(origin=origin, grid=grid)))
        if json_path is not None:
            json_path.parent.mkdir(parents=True, exist_ok=True)
            json_path.write_text(
                json.dumps([list(row) for row in grid.rows]) + "\n", encoding="utf-8"
            )
        if preview is not None:
            preview.parent.mkdir(parents=True, exist_ok=True)
            render_grid(grid, pal).save(preview, format="PNG")
    except _EXPECTED_ERRORS as exc:
        _fail("Quantization", exc, verbose)

    console.print(
        f"[bold green]✓[/] {grid.width}x{grid.height} grid, "
        f"{len(grid.identifiers())} distinct blocks"
    )
    for label, path in (("Packet", output), ("JSON", json_path), ("Preview", preview)):
        if path is not None:
            console.print(f"  {label}: {path}")


@main.command()
@click.argument(
    "packet_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option("--verbose", "-v", is_flag=True, help="Enable detailed logging")
def inspect(packet_path: Path, verbose: bool) -> None:
    """Decode a grid packet and summarise it.

    PACKET_PATH: File written by 'blockprint quantize --output'
    """
    _setup_logging(verbose)

    try:
        packet = decode_packet(packet_path.read_bytes())
    except _EXPECTED_ERRORS as exc:
        _fail("Decoding", exc, verbose)

    grid = packet.grid
    console.print(f"[bold green]✓[/] Packet is valid")
    console.print(f"  Origin: {packet.origin}")
    console.print(f"  Size: {grid.width}x{grid.height}")
    console.print(f"  Distinct blocks: {len(grid.identifiers())}")


if __name__ == "__main__":
    main()
