import json
from pathlib import Path

import numpy as np
import pytest

from panosweep_app.io.loader import (
    load_panorama_image,
    load_rig_config,
    save_panorama_image,
    save_rig_config,
)
from panosweep_app.math.projection import WarpMode
from panosweep_app.models.rig_config import ConfigurationError, RigConfig


def test_png_preserves_rgb_order(tmp_path: Path):
    image = np.zeros((8, 8, 3), dtype=np.uint8)
    image[..., 0] = 200
    image[2:4, 2:4] = (10, 20, 30)
    path = save_panorama_image(tmp_path / "out" / "pano.png", image)

    loaded = load_panorama_image(path)
    np.testing.assert_array_equal(loaded, image)


def test_save_rejects_non_rgb(tmp_path: Path):
    with pytest.raises(ValueError):
        save_panorama_image(tmp_path / "bad.png", np.zeros((4, 4), dtype=np.uint8))


def test_load_missing_image(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_panorama_image(tmp_path / "missing.png")


def test_rig_config_json_roundtrip(tmp_path: Path):
    config = RigConfig(texture_size=256, lane_count=32, warp=WarpMode.LEGACY_TAN)
    path = tmp_path / "rig.json"
    save_rig_config(path, config)
    assert load_rig_config(path) == config


def test_rig_config_errors(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_rig_config(tmp_path / "missing.json")

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_rig_config(broken)

    degenerate = tmp_path / "degenerate.json"
    degenerate.write_text(json.dumps({"texture_size": 100, "lane_count": 3}), encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_rig_config(degenerate)
