"""Construction-time configuration for the sweep rig."""
from __future__ import annotations

from dataclasses import dataclass, fields
import math
from typing import Any, Mapping, Optional

from ..math.projection import WarpMode

FIELD_OF_VIEW_DEG = 90.0
DEFAULT_CULL_MASK = (1 << 18) - 1  # render layers 1-18


class ConfigurationError(ValueError):
    """Raised when rig parameters cannot produce a consistent output buffer."""


def _require_int(name: str, value: Any) -> None:
    # bool is an int subclass but never a meaningful size or count.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def _require_real(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


@dataclass(slots=True, frozen=True)
class RigConfig:
    """Parameters fixed when the rig is built.

    Attributes
    ----------
    texture_size:
        Width and height of the square output buffer in pixels.
    lane_count:
        Number of angular sectors swept in parallel. Must divide ``texture_size``.
    eye_separation:
        Distance of each eye from the rig centre, in scene units.
    near_clip, far_clip:
        Clip planes shared by every virtual camera.
    cull_mask:
        Scene visibility mask shared by every virtual camera.
    surface_width:
        Width of each render target. Only the centre column is kept, but
        single-pixel targets lose scene lighting so the minimum is 2.
    start_phase:
        Angular offset (radians) added to every column angle; ``math.pi``
        flips the starting column.
    shadow_atlas_size:
        Positional shadow atlas size requested for each render target.
    warp:
        Projection correction applied once the sweep completes.
    stall_timeout_ticks:
        Consecutive ticks tolerated while a frame-complete callback is still
        outstanding; the next one cancels the scan. ``None`` waits forever.
    """

    texture_size: int = 4096
    lane_count: int = 64
    eye_separation: float = 0.0333
    near_clip: float = 0.01
    far_clip: float = 10000.0
    cull_mask: int = DEFAULT_CULL_MASK
    surface_width: int = 5
    start_phase: float = 0.0
    shadow_atlas_size: int = 4096
    warp: WarpMode = WarpMode.ATAN_HEMISPHERE
    stall_timeout_ticks: Optional[int] = None

    def __post_init__(self) -> None:
        for name in ("texture_size", "lane_count", "surface_width", "cull_mask", "shadow_atlas_size"):
            _require_int(name, getattr(self, name))
        if self.stall_timeout_ticks is not None:
            _require_int("stall_timeout_ticks", self.stall_timeout_ticks)
        for name in ("eye_separation", "near_clip", "far_clip", "start_phase"):
            _require_real(name, getattr(self, name))
        if self.texture_size <= 0:
            raise ConfigurationError(f"texture_size must be positive, got {self.texture_size}")
        if self.lane_count <= 0:
            raise ConfigurationError(f"lane_count must be positive, got {self.lane_count}")
        if self.texture_size % 4 != 0:
            raise ConfigurationError(
                f"texture_size {self.texture_size} must be divisible by 4 (two eyes, two halves)"
            )
        if self.texture_size % self.lane_count != 0:
            raise ConfigurationError(
                f"lane_count {self.lane_count} does not divide texture_size {self.texture_size}"
            )
        if self.surface_width < 2:
            raise ConfigurationError("surface_width must be at least 2 pixels")
        if self.near_clip <= 0.0 or self.far_clip <= self.near_clip:
            raise ConfigurationError(
                f"Invalid clip planes near={self.near_clip}, far={self.far_clip}"
            )
        if self.eye_separation < 0.0 or not math.isfinite(self.eye_separation):
            raise ConfigurationError(f"eye_separation must be non-negative, got {self.eye_separation}")
        if self.cull_mask < 0:
            raise ConfigurationError("cull_mask must be non-negative")
        if self.shadow_atlas_size < 0:
            raise ConfigurationError("shadow_atlas_size must be non-negative")
        if self.stall_timeout_ticks is not None and self.stall_timeout_ticks <= 0:
            raise ConfigurationError("stall_timeout_ticks must be positive when set")
        if not isinstance(self.warp, WarpMode):
            raise ConfigurationError(f"Unsupported warp mode: {self.warp!r}")

    @property
    def columns_per_lane(self) -> int:
        return self.texture_size // self.lane_count

    @property
    def band_height(self) -> int:
        """Height of one (eye, half) band; also the render target height."""
        return self.texture_size // 4

    @property
    def half_height(self) -> int:
        """Height of one eye's hemisphere in the output buffer."""
        return self.texture_size // 2

    @property
    def camera_count(self) -> int:
        return self.lane_count * 2 * 2

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> "RigConfig":
        """Build a config from a plain mapping, e.g. parsed JSON."""
        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ConfigurationError(f"Unknown rig config keys: {', '.join(sorted(unknown))}")

        kwargs = dict(values)
        if "warp" in kwargs and not isinstance(kwargs["warp"], WarpMode):
            try:
                kwargs["warp"] = WarpMode(kwargs["warp"])
            except ValueError as exc:
                raise ConfigurationError(f"Unsupported warp mode: {kwargs['warp']!r}") from exc
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable mapping."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["warp"] = self.warp.value
        return data
