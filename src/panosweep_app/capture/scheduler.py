"""Frame-driven state machine that sweeps the rig around a fixed viewpoint."""
from __future__ import annotations

from functools import partial
from typing import Callable, Hashable, Optional

import numpy as np
from loguru import logger

from ..math.geometry import camera_pose
from ..math.projection import warp_for
from ..models.camera_pose import RigPose
from ..models.rig_config import RigConfig
from ..models.scan_state import ScanState
from .compositor import TileCompositor
from .renderer import SceneRenderer
from .surface_pool import RenderSurfacePool

WarpFunction = Callable[[np.ndarray], np.ndarray]


class CaptureStalledError(RuntimeError):
    """Raised when the renderer never reports a drawn frame for a scan column."""


class CaptureScheduler:
    """Captures one column per lane per frame until the panorama is complete.

    Drive it by calling :meth:`tick` once per host update. While scanning, a
    tick attaches the render surfaces, poses every camera for the current
    column and registers a one-shot callback with the renderer; the callback
    composites the drawn strips and advances the column. After the last column
    the warp runs once and the scheduler returns to idle.

    The output buffer belongs to the scheduler. Copy :attr:`output_image` if it
    must survive the next scan.
    """

    def __init__(
        self,
        renderer: SceneRenderer,
        config: Optional[RigConfig] = None,
        *,
        pool: Optional[RenderSurfacePool] = None,
        compositor: Optional[TileCompositor] = None,
        warp: Optional[WarpFunction] = None,
    ) -> None:
        self.config = config or RigConfig()
        self._renderer = renderer
        self.pool = pool or RenderSurfacePool(renderer, self.config)
        self.compositor = compositor or TileCompositor(self.config)
        self._warp = warp or warp_for(self.config.warp)
        self.state = ScanState(self.config.lane_count, self.config.texture_size)
        self.rig_pose = RigPose()
        self.scan_ticks = 0
        self.completed_scans = 0
        self._pending: Optional[Hashable] = None
        self._generation = 0
        self._stalled_ticks = 0

    # ------------------------------------------------------------------
    @property
    def output_image(self) -> np.ndarray:
        return self.compositor.output

    @property
    def awaiting_frame(self) -> bool:
        return self._pending is not None

    def is_finished(self) -> bool:
        return self.state.is_idle

    def start_render(self) -> bool:
        """Begin a sweep. Returns ``False`` without side effects while one is running."""
        if not self.state.is_idle:
            logger.warning(
                "Panorama capture already running (column {} of {})",
                self.state.current_column,
                self.state.columns_per_lane,
            )
            return False
        self.state.begin()
        self.scan_ticks = 0
        self._stalled_ticks = 0
        self.compositor.reset_coverage()
        logger.info(
            "Starting panorama capture: {}px, {} lanes, {} columns per lane",
            self.config.texture_size,
            self.config.lane_count,
            self.config.columns_per_lane,
        )
        return True

    def cancel(self) -> bool:
        """Abort a running sweep, discarding partial progress, and detach the surfaces.

        Returns ``False`` when no sweep was running.
        """
        if self.state.is_idle and self._pending is None:
            self.pool.detach()
            return False
        self._drop_pending()
        column = self.state.current_column
        self.state.reset()
        self.pool.detach()
        logger.info("Panorama capture cancelled at column {}", column)
        return True

    def close(self) -> None:
        """Tear down the rig; safe to call at any time."""
        self.cancel()

    # ------------------------------------------------------------------
    def tick(self, rig_pose: Optional[RigPose] = None) -> None:
        """Advance the state machine by one host update."""
        if rig_pose is not None:
            self.rig_pose = rig_pose

        if self.state.is_idle:
            self.pool.detach()
            return

        if self._pending is not None:
            self._stalled_ticks += 1
            timeout = self.config.stall_timeout_ticks
            if timeout is not None and self._stalled_ticks > timeout:
                column = self.state.current_column
                self.cancel()
                raise CaptureStalledError(
                    f"Renderer did not complete a frame for column {column} "
                    f"within {timeout} ticks"
                )
            return

        self.pool.attach()
        self._pose_cameras(self.state.current_column)
        self._generation += 1
        self._pending = self._renderer.call_after_next_frame(
            partial(self._on_frame_rendered, self._generation)
        )
        self.scan_ticks += 1

    def _pose_cameras(self, column: int) -> None:
        for camera, surface in self.pool:
            surface.set_pose(camera_pose(camera, column, self.config, self.rig_pose))

    def _on_frame_rendered(self, generation: int) -> None:
        if generation != self._generation or self._pending is None:
            logger.debug("Ignoring stale frame callback {}", generation)
            return
        self._pending = None
        self._stalled_ticks = 0

        column = self.state.current_column
        tiles = [(camera, surface.read_image()) for camera, surface in self.pool]
        # Validate every tile before writing any.
        for camera, tile in tiles:
            self.compositor.check_tile(camera, tile)
        for camera, tile in tiles:
            self.compositor.write_strip(camera, column, tile)
        logger.debug("Captured column {} of {}", column + 1, self.state.columns_per_lane)

        if not self.state.advance():
            self._finish()

    def _finish(self) -> None:
        if not self.compositor.is_fully_covered():
            self.compositor.log_coverage_gaps()
        warped = self._warp(self.compositor.output)
        self.compositor.replace_output(warped)
        self.state.reset()
        self.completed_scans += 1
        logger.info("Panorama capture finished after {} frames", self.scan_ticks)

    def _drop_pending(self) -> None:
        if self._pending is not None:
            self._renderer.cancel_frame_callback(self._pending)
            self._pending = None
        self._generation += 1
        self._stalled_ticks = 0
