"""Input/output helpers for rig configuration and captured panoramas."""

from .loader import load_panorama_image, load_rig_config, save_panorama_image, save_rig_config

__all__ = [
    "load_panorama_image",
    "load_rig_config",
    "save_panorama_image",
    "save_rig_config",
]
