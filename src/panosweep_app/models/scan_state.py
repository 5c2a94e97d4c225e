"""Scan progress bookkeeping for the capture scheduler."""
from __future__ import annotations

from dataclasses import dataclass

IDLE_COLUMN = -1


@dataclass(slots=True)
class ScanState:
    """Tracks which column of each lane is being captured.

    ``current_column`` is ``-1`` while idle and ``0 .. columns_per_lane - 1``
    while scanning.
    """

    lane_count: int
    texture_size: int
    current_column: int = IDLE_COLUMN

    @property
    def columns_per_lane(self) -> int:
        return self.texture_size // self.lane_count

    @property
    def is_idle(self) -> bool:
        return self.current_column < 0

    @property
    def is_scanning(self) -> bool:
        return 0 <= self.current_column < self.columns_per_lane

    @property
    def progress(self) -> float:
        """Fraction of columns captured in the current scan (0 while idle)."""
        if self.is_idle:
            return 0.0
        return self.current_column / float(self.columns_per_lane)

    def begin(self) -> None:
        self.current_column = 0

    def advance(self) -> bool:
        """Move to the next column; return ``False`` once every column is done."""
        if self.current_column + 1 < self.columns_per_lane:
            self.current_column += 1
            return True
        return False

    def reset(self) -> None:
        self.current_column = IDLE_COLUMN
