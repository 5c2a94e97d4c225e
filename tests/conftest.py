"""Shared fakes for the capture tests."""
from __future__ import annotations

import itertools
import sys
from typing import Callable, Dict, Hashable, List, Optional, Tuple

import numpy as np
import pytest
from loguru import logger

from panosweep_app.capture.renderer import CameraSettings, RenderSurface, SceneRenderer
from panosweep_app.models.camera_pose import CameraPose


class FakeSurface(RenderSurface):
    def __init__(self, index: int, width: int, height: int, settings: CameraSettings, events: list) -> None:
        self.index = index
        self.settings = settings
        self._width = width
        self._height = height
        self._enabled = True
        self._events = events
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
        self._enabled = enabled

    def set_pose(self, pose: CameraPose) -> None:
        self.pose = pose
        self._events.append(("pose", self.index))

    def read_image(self) -> np.ndarray:
        return self.image


class FakeRenderer(SceneRenderer):
    """Records every interaction; frames are 'drawn' only when a test says so."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, object]] = []
        self.surfaces: List[FakeSurface] = []
        self.scene: List[FakeSurface] = []
        self.callbacks: Dict[int, Callable[[], None]] = {}
        self.last_callback: Optional[Callable[[], None]] = None
        self._handles = itertools.count(1)

    def create_surface(self, width: int, height: int, settings: CameraSettings) -> FakeSurface:
        surface = FakeSurface(len(self.surfaces), width, height, settings, self.events)
        self.surfaces.append(surface)
        return surface

    def add_to_scene(self, surface: RenderSurface) -> None:
        self.events.append(("add", surface.index))
        self.scene.append(surface)

    def remove_from_scene(self, surface: RenderSurface) -> None:
        self.events.append(("remove", surface.index))
        self.scene.remove(surface)

    def call_after_next_frame(self, callback: Callable[[], None]) -> Hashable:
        handle = next(self._handles)
        self.events.append(("request", handle))
        self.callbacks[handle] = callback
        self.last_callback = callback
        return handle

    def cancel_frame_callback(self, handle: Hashable) -> None:
        self.events.append(("cancel", handle))
        self.callbacks.pop(handle, None)

    def draw_frame(self) -> None:
        callbacks = list(self.callbacks.values())
        self.callbacks.clear()
        for callback in callbacks:
            callback()


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def reset_loguru():
    yield
    logger.remove()
    logger.add(sys.stderr)
