"""Demo host loop: start a capture on a key press, save it when done."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from loguru import logger

from .capture.scheduler import CaptureScheduler
from .io.loader import save_panorama_image
from .models.camera_pose import RigPose
from .render.synthetic import SyntheticRenderer

START_KEYS = frozenset({"r", "R"})
DEFAULT_OUTPUT = Path("OutputPanorama.png")


class CaptureSession:
    """Plays the part of a paused game that wants a VR panorama of its scene.

    Each :meth:`update` is one host frame: the scheduler ticks, the renderer
    draws, and once the scheduler reports it is finished the panorama is saved.
    """

    def __init__(
        self,
        renderer: SyntheticRenderer,
        scheduler: CaptureScheduler,
        output_path: Path = DEFAULT_OUTPUT,
    ) -> None:
        self.renderer = renderer
        self.scheduler = scheduler
        self.output_path = output_path
        self.started = False
        self.frames = 0

    def handle_key(self, key: str) -> bool:
        """Start a render on ``r``/``R``. Returns whether a render was started."""
        if key not in START_KEYS:
            return False
        if self.started:
            logger.info("Not finished rendering yet")
            return False
        logger.info("Starting panorama render")
        self.started = self.scheduler.start_render()
        return self.started

    def update(self, rig_pose: Optional[RigPose] = None) -> Optional[Path]:
        """Run one host frame; returns the saved path on the frame a capture completes."""
        self.scheduler.tick(rig_pose)
        self.renderer.draw_frame()
        self.frames += 1
        if self.started and self.scheduler.is_finished():
            self.started = False
            logger.info("Saving panorama image: {}", self.output_path)
            return save_panorama_image(self.output_path, self.scheduler.output_image)
        return None

    def run(self, max_frames: int, rig_pose: Optional[RigPose] = None) -> Path:
        """Capture one panorama, giving up after ``max_frames`` host frames."""
        self.handle_key("r")
        for _ in range(max_frames):
            saved = self.update(rig_pose)
            if saved is not None:
                return saved
        self.scheduler.cancel()
        self.started = False
        raise TimeoutError(f"Panorama capture did not finish within {max_frames} frames")
