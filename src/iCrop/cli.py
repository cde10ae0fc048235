"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
import logging
import math
import os
from pathlib import Path
from typing import Any, Optional, Tuple

import typer
from rich import print
from rich.logging import RichHandler
from rich.table import Table

from .config import DEFAULT_VIEWPORT
from .controller import CropController
from .errors import ICropError
from .session import CropSession
from .settings.options import CropOptions, load_options

app = typer.Typer(help="Crop images through a circle or rectangle viewport")


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ICropError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


def _parse_size(value: Optional[str]) -> Optional[tuple[int, int]]:
    if value is None:
        return None
    try:
        width_text, height_text = value.lower().split("x", 1)
        width, height = int(width_text), int(height_text)
    except ValueError as exc:
        raise typer.BadParameter(f"Expected WIDTHxHEIGHT, got {value!r}") from exc
    if width <= 0 or height <= 0:
        raise typer.BadParameter(f"Size must be positive, got {value!r}")
    return width, height


def _ensure_qt_application() -> None:
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    from PySide6.QtGui import QGuiApplication

    if QGuiApplication.instance() is None:
        QGuiApplication([])


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(show_path=False)],
    )


def _build_options(
    options_file: Optional[Path],
    shape: Optional[str],
    percentage: Optional[float],
    aspect_ratio: Optional[float],
    background: Optional[str],
    target: Optional[str],
) -> CropOptions:
    overrides: dict[str, Any] = {}
    if shape is not None:
        overrides["shape"] = shape
    if percentage is not None:
        overrides["crop_percentage"] = percentage
    if aspect_ratio is not None:
        overrides["aspect_ratio"] = aspect_ratio
    if background is not None:
        overrides["background_color"] = background
    target_size = _parse_size(target)
    if target_size is not None:
        overrides["target_size"] = list(target_size)
    if options_file is not None:
        return load_options(options_file, overrides)
    return CropOptions.from_mapping(overrides)


def _prepare_session(
    source: Path,
    options: CropOptions,
    viewport: Optional[str],
    pan: Tuple[float, float],
    scale: float,
    rotate: float,
) -> tuple[CropSession, CropController]:
    _ensure_qt_application()
    controller = CropController()
    session = CropSession(options, controller)
    session.load_image(source)
    view_width, view_height = _parse_size(viewport) or DEFAULT_VIEWPORT
    session.set_viewport(view_width, view_height)
    if rotate:
        controller.rotate(math.radians(rotate))
    if scale != 1.0:
        controller.scale(scale)
    if pan != (0.0, 0.0):
        controller.pan(*pan)
    return session, controller


def _print_pose(session: CropSession) -> None:
    table = Table(title="Pose")
    table.add_column("x", justify="right")
    table.add_column("y", justify="right")
    table.add_column("scale", justify="right")
    table.add_column("angle (deg)", justify="right")
    state = session.state
    table.add_row(
        f"{state.x:.2f}",
        f"{state.y:.2f}",
        f"{state.scale:.4f}",
        f"{math.degrees(state.angle):.2f}",
    )
    print(table)


_OPTIONS_FILE = typer.Option(None, "--options", exists=True, dir_okay=False, help="JSON options file")
_SHAPE = typer.Option(None, "--shape", help="circle or rectangle")
_PERCENTAGE = typer.Option(None, "--percentage", help="Share of the viewport used by the crop")
_ASPECT = typer.Option(None, "--aspect-ratio", help="Crop width / height")
_BACKGROUND = typer.Option(None, "--background", help="Background colour, #RRGGBB or #AARRGGBB")
_VIEWPORT = typer.Option(None, "--viewport", help="Viewport size as WIDTHxHEIGHT")
_PAN = typer.Option((0.0, 0.0), "--pan", help="Pan in viewport pixels")
_SCALE = typer.Option(1.0, "--scale", help="Zoom factor around the crop centre")
_ROTATE = typer.Option(0.0, "--rotate", help="Rotation in degrees")
_VERBOSE = typer.Option(False, "--verbose", "-v", help="Enable debug logging")


@app.command()
@_handle_errors
def crop(
    source: Path = typer.Argument(..., exists=True, dir_okay=False),
    output: Path = typer.Argument(...),
    options_file: Optional[Path] = _OPTIONS_FILE,
    shape: Optional[str] = _SHAPE,
    percentage: Optional[float] = _PERCENTAGE,
    aspect_ratio: Optional[float] = _ASPECT,
    background: Optional[str] = _BACKGROUND,
    viewport: Optional[str] = _VIEWPORT,
    pan: Tuple[float, float] = _PAN,
    scale: float = _SCALE,
    rotate: float = _ROTATE,
    target: Optional[str] = typer.Option(None, "--target", help="Output size as WIDTHxHEIGHT"),
    verbose: bool = _VERBOSE,
) -> None:
    """Crop SOURCE and write the PNG result to OUTPUT."""

    _configure_logging(verbose)
    options = _build_options(options_file, shape, percentage, aspect_ratio, background, target)
    session, controller = _prepare_session(source, options, viewport, pan, scale, rotate)
    payload = controller.request_crop()
    if payload is None:
        typer.echo("Error: no image available to crop", err=True)
        raise typer.Exit(1)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(payload)
    _print_pose(session)
    print(f"[green]Wrote crop to {output}")


@app.command()
@_handle_errors
def preview(
    source: Path = typer.Argument(..., exists=True, dir_okay=False),
    output: Path = typer.Argument(...),
    options_file: Optional[Path] = _OPTIONS_FILE,
    shape: Optional[str] = _SHAPE,
    percentage: Optional[float] = _PERCENTAGE,
    aspect_ratio: Optional[float] = _ASPECT,
    background: Optional[str] = _BACKGROUND,
    viewport: Optional[str] = _VIEWPORT,
    pan: Tuple[float, float] = _PAN,
    scale: float = _SCALE,
    rotate: float = _ROTATE,
    verbose: bool = _VERBOSE,
) -> None:
    """Write the interactive crop view of SOURCE to OUTPUT."""

    _configure_logging(verbose)
    options = _build_options(options_file, shape, percentage, aspect_ratio, background, None)
    session, _ = _prepare_session(source, options, viewport, pan, scale, rotate)
    frame = session.preview()
    if frame is None or not frame.save(str(output), "PNG"):
        typer.echo(f"Error: unable to write preview to {output}", err=True)
        raise typer.Exit(1)
    _print_pose(session)
    print(f"[green]Wrote preview to {output}")


if __name__ == "__main__":  # pragma: no cover
    app()
