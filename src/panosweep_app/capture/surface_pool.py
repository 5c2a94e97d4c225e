"""Fixed pool of render targets and virtual cameras for the rig."""
from __future__ import annotations

from typing import Dict, Iterator, Tuple

from loguru import logger

from ..models.logical_camera import LogicalCamera, enumerate_cameras
from ..models.rig_config import RigConfig
from .renderer import CameraSettings, RenderSurface, SceneRenderer


class RenderSurfacePool:
    """Owns one render surface per logical camera for the lifetime of the rig.

    Surfaces are created once, start detached, and are only ever toggled in and
    out of the scene afterwards.
    """

    def __init__(self, renderer: SceneRenderer, config: RigConfig) -> None:
        self._renderer = renderer
        self._config = config
        self._cameras = enumerate_cameras(config.lane_count)
        settings = CameraSettings.from_config(config)
        self._surfaces: Dict[LogicalCamera, RenderSurface] = {}
        for camera in self._cameras:
            surface = renderer.create_surface(config.surface_width, config.band_height, settings)
            surface.set_enabled(False)
            self._surfaces[camera] = surface
        self._attached = False
        logger.debug(
            "Created {} render surfaces of {}x{}",
            len(self._surfaces),
            config.surface_width,
            config.band_height,
        )

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def cameras(self) -> Tuple[LogicalCamera, ...]:
        return self._cameras

    def __len__(self) -> int:
        return len(self._surfaces)

    def __iter__(self) -> Iterator[Tuple[LogicalCamera, RenderSurface]]:
        return iter(self._surfaces.items())

    def surface_for(self, camera: LogicalCamera) -> RenderSurface:
        return self._surfaces[camera]

    def attach(self) -> None:
        """Enable every surface and insert it into the scene. Idempotent."""
        if self._attached:
            return
        self._attached = True
        for surface in self._surfaces.values():
            surface.set_enabled(True)
            self._renderer.add_to_scene(surface)
        logger.debug("Attached {} render surfaces", len(self._surfaces))

    def detach(self) -> None:
        """Remove every surface from the scene and stop rendering it. Idempotent."""
        if not self._attached:
            return
        self._attached = False
        for surface in self._surfaces.values():
            self._renderer.remove_from_scene(surface)
            surface.set_enabled(False)
        logger.debug("Detached {} render surfaces", len(self._surfaces))
