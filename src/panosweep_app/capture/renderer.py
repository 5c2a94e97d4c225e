"""Contract between the capture core and the live 3D scene renderer.

The core never draws anything itself. A renderer owns render targets with
attached virtual cameras, draws them as part of its frame loop and lets the
core register one-shot callbacks that run after the next frame is drawn.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Hashable

import numpy as np

from ..models.camera_pose import CameraPose
from ..models.rig_config import FIELD_OF_VIEW_DEG, RigConfig

FrameCallback = Callable[[], None]


@dataclass(slots=True, frozen=True)
class CameraSettings:
    """Projection parameters of one virtual camera."""

    fov_deg: float = FIELD_OF_VIEW_DEG
    near: float = 0.01
    far: float = 10000.0
    cull_mask: int = 0
    keep_aspect: str = "height"
    shadow_atlas_size: int = 4096

    @classmethod
    def from_config(cls, config: RigConfig) -> "CameraSettings":
        return cls(
            near=config.near_clip,
            far=config.far_clip,
            cull_mask=config.cull_mask,
            shadow_atlas_size=config.shadow_atlas_size,
        )


class RenderSurface(ABC):
    """A render target paired with the virtual camera drawing into it."""

    settings: CameraSettings

    @property
    @abstractmethod
    def width(self) -> int:
        ...

    @property
    @abstractmethod
    def height(self) -> int:
        ...

    @property
    @abstractmethod
    def enabled(self) -> bool:
        """Whether the renderer updates this target when drawing frames."""
        ...

    @abstractmethod
    def set_enabled(self, enabled: bool) -> None:
        ...

    @abstractmethod
    def set_pose(self, pose: CameraPose) -> None:
        """Move the camera to a world pose for the next frame."""
        ...

    @abstractmethod
    def read_image(self) -> np.ndarray:
        """Return the last drawn image as a ``(height, width, 3)`` uint8 array."""
        ...


class SceneRenderer(ABC):
    """Host-side renderer the capture rig plugs into."""

    @abstractmethod
    def create_surface(self, width: int, height: int, settings: CameraSettings) -> RenderSurface:
        ...

    @abstractmethod
    def add_to_scene(self, surface: RenderSurface) -> None:
        """Insert a surface into the live scene graph."""
        ...

    @abstractmethod
    def remove_from_scene(self, surface: RenderSurface) -> None:
        ...

    @abstractmethod
    def call_after_next_frame(self, callback: FrameCallback) -> Hashable:
        """Register ``callback`` to run once after the next frame is drawn.

        Returns a handle accepted by :meth:`cancel_frame_callback`.
        """
        ...

    @abstractmethod
    def cancel_frame_callback(self, handle: Hashable) -> None:
        """Deregister a pending callback. Unknown or already-fired handles are ignored."""
        ...
