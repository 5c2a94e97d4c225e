"""Strip compositing into the shared output buffer."""
from __future__ import annotations

import numpy as np
from loguru import logger

from ..models.logical_camera import LogicalCamera
from ..models.rig_config import RigConfig

BAND_COUNT = 4


def allocate_output_buffer(texture_size: int) -> np.ndarray:
    """Zero-filled square RGB buffer."""
    return np.zeros((texture_size, texture_size, 3), dtype=np.uint8)


class TileCompositor:
    """Copies the centre column of each rendered tile into the output buffer.

    The compositor also counts writes per ``(band, column)`` so a finished sweep
    can be checked for complete, non-overlapping coverage.
    """

    def __init__(self, config: RigConfig) -> None:
        self._config = config
        self.output = allocate_output_buffer(config.texture_size)
        self.coverage = np.zeros((BAND_COUNT, config.texture_size), dtype=np.uint16)

    def reset_coverage(self) -> None:
        self.coverage.fill(0)

    def replace_output(self, image: np.ndarray) -> None:
        """Swap in a new output buffer, e.g. after the warp."""
        size = self._config.texture_size
        if image.shape != (size, size, 3):
            raise ValueError(f"Output buffer must be {size}x{size}x3, got {image.shape}")
        self.output = image

    def destination(self, camera: LogicalCamera, column: int) -> tuple[int, int]:
        """Top-left ``(x, y)`` of the strip written for ``camera`` at ``column``."""
        config = self._config
        if not 0 <= camera.lane_index < config.lane_count:
            raise ValueError(f"Lane {camera.lane_index} outside rig with {config.lane_count} lanes")
        if not 0 <= column < config.columns_per_lane:
            raise ValueError(f"Column {column} outside [0, {config.columns_per_lane})")
        x = camera.destination_column(column, config.columns_per_lane)
        y = camera.destination_row(config.texture_size)
        return x, y

    def check_tile(self, camera: LogicalCamera, tile: np.ndarray) -> None:
        """Raise ``ValueError`` unless ``tile`` can supply a strip for this rig."""
        band_height = self._config.band_height
        if tile.ndim != 3 or tile.shape[0] != band_height or tile.shape[1] < 1 or tile.shape[2] < 3:
            raise ValueError(
                f"Rendered tile for {camera.label()} has shape {tile.shape}, "
                f"expected ({band_height}, w, 3)"
            )

    def write_strip(self, camera: LogicalCamera, column: int, tile: np.ndarray) -> None:
        """Write the centre column of ``tile`` for ``camera`` at scan position ``column``."""
        band_height = self._config.band_height
        self.check_tile(camera, tile)
        x, y = self.destination(camera, column)
        sx = tile.shape[1] // 2
        self.output[y : y + band_height, x, :] = tile[:, sx, :3]
        self.coverage[camera.band_index, x] += 1

    def is_fully_covered(self) -> bool:
        """True when every column of every band was written exactly once."""
        return bool(np.all(self.coverage == 1))

    def log_coverage_gaps(self) -> None:
        missing = int(np.count_nonzero(self.coverage == 0))
        repeated = int(np.count_nonzero(self.coverage > 1))
        if missing or repeated:
            logger.warning(
                "Sweep coverage incomplete: {} band columns missing, {} written more than once",
                missing,
                repeated,
            )
