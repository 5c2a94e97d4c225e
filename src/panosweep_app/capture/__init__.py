"""Capture core: render surfaces, strip compositing and the sweep scheduler."""

from .compositor import TileCompositor, allocate_output_buffer
from .renderer import CameraSettings, RenderSurface, SceneRenderer
from .scheduler import CaptureScheduler, CaptureStalledError
from .surface_pool import RenderSurfacePool

__all__ = [
    "CameraSettings",
    "CaptureScheduler",
    "CaptureStalledError",
    "RenderSurface",
    "RenderSurfacePool",
    "SceneRenderer",
    "TileCompositor",
    "allocate_output_buffer",
]
