#!/usr/bin/env python3
"""
media_converter.cli.cli

Typer-based CLI driving the conversion workflow with local adapters.

Examples
--------
Convert and save into the gallery album:

    media-converter convert photo.heic --format PNG --save

Settings not given as options are read from ``MEDIA_CONVERTER_*``
environment variables.
"""

from __future__ import annotations

import asyncio
import logging
import sys
import traceback
from pathlib import Path

import typer

from media_converter.application.pipeline import available_formats
from media_converter.application.state import WorkflowEvent
from media_converter.config import WorkflowSettings, load_settings
from media_converter.errors import MediaConverterError
from media_converter.schemas import ConvertedArtifact

app = typer.Typer(
    name="media-converter",
    help="Convert images between JPEG, PNG and WEBP and save them to a gallery album.",
    no_args_is_help=True,
)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _print_error(exc: Exception, debug: bool) -> int:
    """Print a user-friendly error and return the process exit code."""
    typer.echo(f"✗ {type(exc).__name__}: {exc}", err=True)
    if debug:
        typer.echo("\nTraceback:", err=True)
        typer.echo("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), err=True)
    code = getattr(exc, "exit_code", None)
    if isinstance(code, int) and code > 0:
        return code
    return 1


def _echo_event(event: WorkflowEvent) -> None:
    if event.kind == "progress":
        typer.echo(f"  {event.snapshot.progress:3d}% {event.snapshot.stage.name.lower()}")
    elif event.kind == "source_selected" and event.snapshot.source is not None:
        source = event.snapshot.source
        typer.echo(f"Selected {source.display_name} ({source.kind_label} • {source.size_megabytes} MB)")
    elif event.message:
        typer.echo(event.message)


async def _convert(
    settings: WorkflowSettings,
    source_path: Path,
    target_format: str,
    save: bool,
) -> ConvertedArtifact | None:
    from media_converter.app import build_local_workflow

    workflow = build_local_workflow(settings, source_path)
    coordinator = workflow.coordinator
    coordinator.subscribe(_echo_event)
    workflow.banner.attach()
    await coordinator.start()
    try:
        if await coordinator.select_source() is None:
            return None
        converted = await coordinator.request_conversion(target_format)
        if save:
            await coordinator.persist_result()
        return converted
    finally:
        await coordinator.close()


@app.callback()
def _main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Verbose logging and full tracebacks on error."),
) -> None:
    """Initialize shared CLI state and logging."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    ctx.obj = {"debug": debug}


@app.command("convert")
def convert_cmd(
    ctx: typer.Context,
    source: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="Image to convert.",
    ),
    target_format: str = typer.Option(
        ..., "--format", "-f", help="Target format: JPEG, JPG, PNG or WEBP."
    ),
    save: bool = typer.Option(False, "--save", help="Save the result into the gallery album."),
    storage_root: Path | None = typer.Option(
        None, "--storage-root", help="Directory receiving converted files."
    ),
    gallery_root: Path | None = typer.Option(
        None, "--gallery-root", help="Directory acting as the media gallery."
    ),
    album: str | None = typer.Option(None, "--album", help="Gallery album name."),
    ad_placement: str | None = typer.Option(
        None, "--ad-placement", help="When to show the interstitial: before, after or none."
    ),
) -> None:
    """Convert SOURCE to another image format."""
    debug: bool = bool(ctx.obj.get("debug", False))
    try:
        settings = load_settings(
            storage_root=storage_root,
            gallery_root=gallery_root,
            album_name=album,
            ad_placement=ad_placement,
        )
        converted = asyncio.run(_convert(settings, source, target_format, save))
    except MediaConverterError as exc:
        raise typer.Exit(code=_print_error(exc, debug))
    except Exception as exc:
        raise typer.Exit(code=_print_error(exc, debug))
    if converted is None:
        raise typer.Exit(code=1)
    label = "Saved" if save else "Converted"
    typer.echo(f"✓ {label}: {converted.locator}")


@app.command("formats")
def formats_cmd() -> None:
    """List the format names accepted by ``convert --format``."""
    for name in available_formats():
        typer.echo(name)


@app.command("doctor")
def doctor_cmd() -> None:
    """Print installed library versions and Pillow codec support."""
    import importlib.metadata as metadata

    typer.echo(f"Python: {sys.version.split()[0]}")
    for module in ("pillow", "pillow-heif", "pydantic", "typer"):
        try:
            typer.echo(f"{module}: {metadata.version(module)}")
        except metadata.PackageNotFoundError:
            typer.echo(f"{module}: <not installed>")

    from PIL import features

    for codec in ("jpg", "webp", "zlib"):
        status = "yes" if features.check(codec) else "no"
        typer.echo(f"codec {codec}: {status}")


if __name__ == "__main__":
    app()
