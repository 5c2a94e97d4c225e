"""Perspective to equirectangular row remapping for finished sweeps."""
from __future__ import annotations

from enum import Enum
import math
from typing import Callable

import numpy as np

QUARTER_PI = math.pi / 4.0
HALF_PI = math.pi / 2.0


class WarpMode(Enum):
    """Named projection-correction strategies."""

    ATAN_HEMISPHERE = "atan"
    LEGACY_TAN = "legacy-tan"
    NONE = "none"

    def __str__(self) -> str:
        return self.value


def hemisphere_source_rows(half_height: int) -> np.ndarray:
    """Source row for every destination row of one eye's hemisphere.

    For destination row ``y`` the normalised offset from the midline
    ``t = (y / h - 0.5) / 0.5`` is treated as a tangent, converted back to an
    angle and rescaled linearly over the ``[-pi/4, pi/4]`` range.
    """
    if half_height <= 0:
        return np.zeros(0, dtype=np.intp)
    dy = np.arange(half_height, dtype=np.float64) / float(half_height)
    t = (dy - 0.5) / 0.5
    source_angle = np.arctan(t)
    normalised = (source_angle + QUARTER_PI) / HALF_PI
    rows = np.floor(normalised * half_height).astype(np.intp)
    return np.clip(rows, 0, half_height - 1)


def legacy_source_rows(height: int) -> np.ndarray:
    """Source rows of the earlier whole-image ``tan`` warp.

    Kept for comparison only. This variant reads the top half of the output
    from the bottom half of the source and vice versa.
    """
    if height <= 0:
        return np.zeros(0, dtype=np.intp)
    dy = np.arange(height, dtype=np.float64) / float(height)
    phi = np.mod(dy, 0.5) * 2.0 * HALF_PI - QUARTER_PI
    sy = np.tan(phi) * 0.25 + 0.25 + np.where(dy < 0.5, 0.5, 0.0)
    rows = np.floor(sy * height).astype(np.intp)
    return np.clip(rows, 0, height - 1)


def stacked_hemisphere_rows(height: int) -> np.ndarray:
    """Row map for a full top/bottom stereo buffer, remapping each eye separately."""
    half = height // 2
    rows = hemisphere_source_rows(half)
    return np.concatenate([rows, rows + half])


def remap_rows(image: np.ndarray, rows: np.ndarray) -> np.ndarray:
    """Copy every destination row from ``image[rows[y]]`` into a fresh buffer."""
    if rows.shape[0] != image.shape[0]:
        raise ValueError(
            f"Row map has {rows.shape[0]} entries for an image of height {image.shape[0]}"
        )
    # Fancy indexing reads the untouched source and allocates the destination.
    return np.ascontiguousarray(image[rows])


def warp_to_equirectangular(image: np.ndarray, mode: WarpMode = WarpMode.ATAN_HEMISPHERE) -> np.ndarray:
    """Apply the projection correction selected by ``mode`` and return a new buffer."""
    height = image.shape[0]
    if mode is WarpMode.ATAN_HEMISPHERE:
        return remap_rows(image, stacked_hemisphere_rows(height))
    if mode is WarpMode.LEGACY_TAN:
        return remap_rows(image, legacy_source_rows(height))
    if mode is WarpMode.NONE:
        return np.array(image, copy=True)
    raise ValueError(f"Unsupported warp mode: {mode}")


def warp_for(mode: WarpMode) -> Callable[[np.ndarray], np.ndarray]:
    """Return a single-argument warp callable for the scheduler."""

    def _warp(image: np.ndarray) -> np.ndarray:
        return warp_to_equirectangular(image, mode)

    _warp.__name__ = f"warp_{mode.name.lower()}"
    return _warp
