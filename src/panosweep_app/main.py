"""Command line entry points."""
from __future__ import annotations

import math
from pathlib import Path
from typing import Optional

import typer

from .capture.scheduler import CaptureScheduler, CaptureStalledError
from .io.loader import load_panorama_image, load_rig_config, save_panorama_image
from .logging import configure_logging
from .math.projection import WarpMode, warp_to_equirectangular
from .models.rig_config import ConfigurationError, RigConfig
from .render.synthetic import SyntheticRenderer
from .session import DEFAULT_OUTPUT, CaptureSession

app = typer.Typer(
    name="panosweep",
    help="Stereoscopic 360 degree panorama capture by sweeping a camera rig",
    add_completion=False,
)


def _build_config(
    config_path: Optional[Path],
    overrides: dict[str, object],
) -> RigConfig:
    base = load_rig_config(config_path).to_dict() if config_path is not None else {}
    base.update({key: value for key, value in overrides.items() if value is not None})
    return RigConfig.from_dict(base)


@app.command()
def render(
    size: Optional[int] = typer.Option(None, "--size", "-s", help="Output texture size in pixels"),
    lanes: Optional[int] = typer.Option(None, "--lanes", "-l", help="Number of camera lanes"),
    eye_separation: Optional[float] = typer.Option(
        None, "--eye-separation", help="Eye offset from the rig centre"
    ),
    warp: Optional[str] = typer.Option(
        None, "--warp", "-w", help="Projection correction: atan, legacy-tan or none"
    ),
    flip_start: bool = typer.Option(
        False, "--flip-start", help="Start the sweep half a turn later"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON rig config; command line options override it"
    ),
    output: Path = typer.Option(DEFAULT_OUTPUT, "--output", "-o", help="Where to save the PNG"),
    max_frames: int = typer.Option(100000, "--max-frames", help="Give up after this many frames"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Capture a panorama of the built-in synthetic scene."""
    configure_logging(verbose)
    overrides: dict[str, object] = {
        "texture_size": size,
        "lane_count": lanes,
        "eye_separation": eye_separation,
        "warp": warp,
    }
    if flip_start:
        overrides["start_phase"] = math.pi
    try:
        config = _build_config(config_path, overrides)
    except (ConfigurationError, FileNotFoundError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)

    renderer = SyntheticRenderer()
    scheduler = CaptureScheduler(renderer, config)
    session = CaptureSession(renderer, scheduler, output)
    try:
        saved = session.run(max_frames)
    except (CaptureStalledError, TimeoutError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(2)
    finally:
        scheduler.close()
    typer.echo(f"Saved {saved} after {session.frames} frames")


@app.command("warp")
def warp_image(
    source: Path = typer.Argument(..., help="Perspective top/bottom stereo image"),
    destination: Path = typer.Argument(..., help="Where to write the corrected image"),
    mode: str = typer.Option(WarpMode.ATAN_HEMISPHERE.value, "--mode", "-m", help="Warp strategy"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Apply the equirectangular correction to an existing image."""
    configure_logging(verbose)
    try:
        warp_mode = WarpMode(mode)
        image = load_panorama_image(source)
    except (ValueError, FileNotFoundError) as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(1)
    save_panorama_image(destination, warp_to_equirectangular(image, warp_mode))
    typer.echo(f"Saved {destination}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
