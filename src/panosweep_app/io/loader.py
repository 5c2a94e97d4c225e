"""File loading and saving for rig configuration and captured panoramas."""
from __future__ import annotations

import json
from pathlib import Path

import cv2
import numpy as np
from loguru import logger

from ..models.rig_config import ConfigurationError, RigConfig


def load_rig_config(path: Path) -> RigConfig:
    """Read a :class:`RigConfig` from a JSON object file."""
    if not path.is_file():
        raise FileNotFoundError(f"Rig config not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Rig config {path} is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Rig config {path} must contain a JSON object")
    config = RigConfig.from_dict(payload)
    logger.debug("Loaded rig config {}: {}", path, config.to_dict())
    return config


def save_rig_config(path: Path, config: RigConfig) -> None:
    path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")


def save_panorama_image(path: Path, image: np.ndarray) -> Path:
    """Encode an RGB uint8 panorama to disk (format chosen by the suffix)."""
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an RGB image, got shape {image.shape}")
    path.parent.mkdir(parents=True, exist_ok=True)
    bgr = cv2.cvtColor(np.ascontiguousarray(image, dtype=np.uint8), cv2.COLOR_RGB2BGR)
    if not cv2.imwrite(str(path), bgr):
        raise OSError(f"Unable to write panorama image: {path}")
    logger.info("Saved panorama image {} ({}x{})", path, image.shape[1], image.shape[0])
    return path


def load_panorama_image(path: Path) -> np.ndarray:
    """Load a saved panorama as an RGB uint8 array."""
    image = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if image is None:
        raise FileNotFoundError(f"Unable to read panorama image: {path}")
    image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    logger.debug("Loaded panorama image {} with shape {}", path, image.shape)
    return image
