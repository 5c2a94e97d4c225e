import numpy as np
import pytest

from panosweep_app.math.projection import (
    WarpMode,
    hemisphere_source_rows,
    legacy_source_rows,
    remap_rows,
    stacked_hemisphere_rows,
    warp_for,
    warp_to_equirectangular,
)


def _row_coded_image(size: int) -> np.ndarray:
    rows = np.arange(size, dtype=np.uint8)[:, None, None]
    return np.broadcast_to(rows, (size, size, 3)).copy()


@pytest.mark.parametrize("half_height", [1, 2, 8, 32, 127, 512])
def test_hemisphere_rows_stay_in_bounds(half_height):
    rows = hemisphere_source_rows(half_height)
    assert rows.shape == (half_height,)
    assert rows.min() >= 0
    assert rows.max() < half_height


def test_hemisphere_rows_are_monotonic_with_fixed_ends():
    rows = hemisphere_source_rows(256)
    assert np.all(np.diff(rows) >= 0)
    assert rows[0] == 0
    assert rows[128] == 128


def test_hemisphere_rows_compress_towards_the_poles():
    rows = hemisphere_source_rows(256)
    # Near the midline the map is steeper than near the top edge.
    assert rows[130] - rows[126] > rows[4] - rows[0]


def test_stacked_rows_keep_each_eye_in_its_half():
    rows = stacked_hemisphere_rows(64)
    assert np.all(rows[:32] < 32)
    assert np.all(rows[32:] >= 32)
    np.testing.assert_array_equal(rows[32:] - 32, rows[:32])


def test_warp_copies_whole_rows_from_mapped_source():
    image = _row_coded_image(64)
    warped = warp_to_equirectangular(image, WarpMode.ATAN_HEMISPHERE)
    expected_rows = stacked_hemisphere_rows(64)
    for y in range(64):
        assert np.all(warped[y] == expected_rows[y])


def test_warp_never_mixes_eyes():
    image = np.zeros((64, 64, 3), dtype=np.uint8)
    image[:32] = 10
    image[32:] = 200
    warped = warp_to_equirectangular(image)
    assert np.all(warped[:32] == 10)
    assert np.all(warped[32:] == 200)


def test_warp_leaves_source_untouched():
    image = _row_coded_image(32)
    original = image.copy()
    warped = warp_to_equirectangular(image)
    assert warped is not image
    np.testing.assert_array_equal(image, original)


def test_legacy_rows_read_from_opposite_half():
    rows = legacy_source_rows(64)
    assert rows.min() >= 0 and rows.max() < 64
    assert np.all(rows[:32] >= 32)
    assert np.all(rows[32:] < 32)


def test_none_mode_returns_copy():
    image = _row_coded_image(16)
    warped = warp_to_equirectangular(image, WarpMode.NONE)
    np.testing.assert_array_equal(warped, image)
    assert warped is not image


def test_warp_for_matches_direct_call():
    image = _row_coded_image(32)
    np.testing.assert_array_equal(
        warp_for(WarpMode.LEGACY_TAN)(image),
        warp_to_equirectangular(image, WarpMode.LEGACY_TAN),
    )


def test_remap_rows_rejects_mismatched_map():
    with pytest.raises(ValueError):
        remap_rows(np.zeros((8, 8, 3), dtype=np.uint8), np.zeros(4, dtype=np.intp))


def test_warp_mode_label():
    assert str(WarpMode.NONE) == "none"
    assert str(WarpMode.ATAN_HEMISPHERE) == "atan"
