"""Software ray-caster implementing the renderer contract with numpy.

Used by the command line demo and by integration tests in place of a real
engine. The scene is a procedural sky/ground environment at infinity plus a
handful of shaded spheres, which gives the stereo pair visible parallax.
"""
from __future__ import annotations

from dataclasses import dataclass
import itertools
import math
from typing import Dict, Hashable, List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

from ..capture.renderer import CameraSettings, FrameCallback, RenderSurface, SceneRenderer
from ..models.camera_pose import CameraPose

SKY_ZENITH = np.array([40.0, 90.0, 200.0], dtype=np.float32)
SKY_HORIZON = np.array([200.0, 220.0, 240.0], dtype=np.float32)
GROUND_DARK = np.array([60.0, 70.0, 40.0], dtype=np.float32)
GROUND_LIGHT = np.array([120.0, 140.0, 80.0], dtype=np.float32)
LIGHT_DIRECTION = np.array([0.3, 0.8, 0.5], dtype=np.float64) / math.sqrt(0.98)


@dataclass(slots=True, frozen=True)
class Sphere:
    """Solid sphere visible to cameras whose cull mask includes ``layer``."""

    center: Tuple[float, float, float]
    radius: float
    color: Tuple[int, int, int]
    layer: int = 1


def default_scene() -> List[Sphere]:
    """A ring of coloured spheres around the origin."""
    palette = [
        (230, 60, 50),
        (240, 180, 40),
        (60, 200, 90),
        (50, 160, 230),
        (150, 80, 220),
        (230, 90, 180),
    ]
    spheres = []
    for index, color in enumerate(palette):
        angle = index * (2.0 * math.pi / len(palette))
        distance = 3.0 + index % 3
        spheres.append(
            Sphere(
                center=(distance * math.sin(angle), 0.2 * (index % 2), -distance * math.cos(angle)),
                radius=0.6,
                color=color,
            )
        )
    return spheres


class SyntheticSurface(RenderSurface):
    """In-memory render target drawn by :class:`SyntheticRenderer`."""

    def __init__(self, width: int, height: int, settings: CameraSettings) -> None:
        self.settings = settings
        self._width = width
        self._height = height
        self._enabled = True
        self.pose: Optional[CameraPose] = None
        self.image = np.zeros((height, width, 3), dtype=np.uint8)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

    def set_pose(self, pose: CameraPose) -> None:
        self.pose = pose

    def read_image(self) -> np.ndarray:
        return self.image


class SyntheticRenderer(SceneRenderer):
    """Draws attached surfaces on :meth:`draw_frame`, then fires frame callbacks."""

    def __init__(self, spheres: Optional[Sequence[Sphere]] = None) -> None:
        self.spheres = list(default_scene() if spheres is None else spheres)
        self.frame_count = 0
        self._scene: List[SyntheticSurface] = []
        self._callbacks: Dict[int, FrameCallback] = {}
        self._handles = itertools.count(1)

    @property
    def scene_surfaces(self) -> Tuple[SyntheticSurface, ...]:
        return tuple(self._scene)

    @property
    def pending_callbacks(self) -> int:
        return len(self._callbacks)

    def create_surface(self, width: int, height: int, settings: CameraSettings) -> SyntheticSurface:
        return SyntheticSurface(width, height, settings)

    def add_to_scene(self, surface: RenderSurface) -> None:
        if not isinstance(surface, SyntheticSurface):
            raise TypeError(f"Unsupported surface type: {type(surface).__name__}")
        if surface not in self._scene:
            self._scene.append(surface)

    def remove_from_scene(self, surface: RenderSurface) -> None:
        if surface in self._scene:
            self._scene.remove(surface)

    def call_after_next_frame(self, callback: FrameCallback) -> Hashable:
        handle = next(self._handles)
        self._callbacks[handle] = callback
        return handle

    def cancel_frame_callback(self, handle: Hashable) -> None:
        self._callbacks.pop(handle, None)

    def draw_frame(self) -> None:
        """Render every enabled surface in the scene and run pending callbacks once."""
        for surface in self._scene:
            if surface.enabled and surface.pose is not None:
                surface.image = self.render_view(
                    surface.pose, surface.width, surface.height, surface.settings
                )
        self.frame_count += 1

        callbacks = list(self._callbacks.values())
        self._callbacks.clear()
        for callback in callbacks:
            callback()

    # ------------------------------------------------------------------
    def render_view(
        self,
        pose: CameraPose,
        width: int,
        height: int,
        settings: CameraSettings,
    ) -> np.ndarray:
        """Ray-cast one view. Vertical field of view is fixed by ``settings.fov_deg``."""
        tan_half = math.tan(math.radians(settings.fov_deg) / 2.0)
        aspect = width / float(height)
        xs = ((np.arange(width, dtype=np.float64) + 0.5) / width * 2.0 - 1.0) * tan_half * aspect
        ys = (1.0 - (np.arange(height, dtype=np.float64) + 0.5) / height * 2.0) * tan_half
        x_grid, y_grid = np.meshgrid(xs, ys)

        # Image-right is local -X; the camera looks along local +Z.
        local = np.stack([-x_grid, y_grid, np.ones_like(x_grid)], axis=-1)
        directions = local @ np.asarray(pose.rotation, dtype=np.float64).T
        directions /= np.linalg.norm(directions, axis=-1, keepdims=True)

        image = self._environment(directions)
        depth = np.full(directions.shape[:2], np.inf, dtype=np.float64)
        origin = np.asarray(pose.position, dtype=np.float64)
        for sphere in self.spheres:
            if not settings.cull_mask & sphere.layer:
                continue
            self._draw_sphere(sphere, origin, directions, settings, image, depth)

        return np.clip(image, 0, 255).astype(np.uint8)

    @staticmethod
    def _environment(directions: np.ndarray) -> np.ndarray:
        elevation = np.arcsin(np.clip(directions[..., 1], -1.0, 1.0))
        azimuth = np.arctan2(directions[..., 0], -directions[..., 2])

        sky_mix = np.clip(elevation / (math.pi / 2.0), 0.0, 1.0)[..., None]
        sky = SKY_HORIZON * (1.0 - sky_mix) + SKY_ZENITH * sky_mix

        sector = np.floor((azimuth + math.pi) * 8.0 / math.pi).astype(np.int64)
        checker = (sector % 2)[..., None].astype(np.float32)
        ground = GROUND_DARK * (1.0 - checker) + GROUND_LIGHT * checker

        return np.where((elevation >= 0.0)[..., None], sky, ground).astype(np.float32)

    @staticmethod
    def _draw_sphere(
        sphere: Sphere,
        origin: np.ndarray,
        directions: np.ndarray,
        settings: CameraSettings,
        image: np.ndarray,
        depth: np.ndarray,
    ) -> None:
        center = np.asarray(sphere.center, dtype=np.float64)
        oc = origin - center
        b = directions @ oc
        c = float(oc @ oc) - sphere.radius * sphere.radius
        disc = b * b - c
        hit = disc >= 0.0
        if not np.any(hit):
            return

        root = np.sqrt(np.where(hit, disc, 0.0))
        t = -b - root
        t = np.where(t < settings.near, -b + root, t)
        visible = hit & (t >= settings.near) & (t <= settings.far) & (t < depth)
        if not np.any(visible):
            return

        points = origin + directions * t[..., None]
        normals = (points - center) / sphere.radius
        shade = 0.3 + 0.7 * np.clip(normals @ LIGHT_DIRECTION, 0.0, 1.0)
        color = np.asarray(sphere.color, dtype=np.float32)
        image[visible] = (shade[visible, None] * color).astype(np.float32)
        depth[visible] = t[visible]
        logger.trace("Sphere at {} covers {} pixels", sphere.center, int(np.count_nonzero(visible)))
