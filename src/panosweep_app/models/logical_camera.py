"""Logical camera identities for the stereo sweep rig."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class Eye(Enum):
    """Stereo channel; the left eye fills the top half of the output."""

    LEFT = "left"
    RIGHT = "right"

    @property
    def sign(self) -> float:
        """Direction of the baseline offset for this eye."""
        return 1.0 if self is Eye.LEFT else -1.0


class Half(Enum):
    """Vertical tile captured by a tilted camera."""

    UPPER = "upper"
    LOWER = "lower"


@dataclass(slots=True, frozen=True)
class LogicalCamera:
    """One (eye, half, lane) slot of the rig."""

    eye: Eye
    half: Half
    lane_index: int

    @property
    def band_index(self) -> int:
        """Index of the horizontal output band, counted top to bottom."""
        return (2 if self.eye is Eye.RIGHT else 0) + (1 if self.half is Half.LOWER else 0)

    def destination_row(self, texture_size: int) -> int:
        """First output row written by this camera's strips."""
        y = texture_size // 2 if self.eye is Eye.RIGHT else 0
        if self.half is Half.LOWER:
            y += texture_size // 4
        return y

    def destination_column(self, column: int, columns_per_lane: int) -> int:
        """Output column for the given scan position."""
        return column + self.lane_index * columns_per_lane

    def label(self) -> str:
        return f"{self.eye.value}-{self.half.value}-{self.lane_index:03d}"


def enumerate_cameras(lane_count: int) -> Tuple[LogicalCamera, ...]:
    """Return every logical camera in band order (eye, then half, then lane)."""
    return tuple(
        LogicalCamera(eye, half, lane)
        for eye in (Eye.LEFT, Eye.RIGHT)
        for half in (Half.UPPER, Half.LOWER)
        for lane in range(lane_count)
    )
