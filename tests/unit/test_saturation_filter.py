"""Tests for the local mean saturation filter."""

import numpy as np
import pytest

from scan_cleaner.processors import (
    local_mean_saturation,
    local_mean_saturation_map,
    rgb_to_hsv_buffer,
)


@pytest.fixture
def strip():
    """1x3: opaque red, opaque white, transparent red."""
    saturation = np.array([[100.0, 0.0, 100.0]])
    opaque = np.array([[True, True, False]])
    return saturation, opaque


def test_window_is_clipped_and_transparent_pixels_count(strip):
    saturation, opaque = strip
    # centre: (100 + 0 + 0) / 3, the transparent pixel still counts
    assert local_mean_saturation(saturation, opaque, 1, 0, 3) == pytest.approx(100 / 3)
    # left edge: out-of-bounds cells count in neither sum nor denominator
    assert local_mean_saturation(saturation, opaque, 0, 0, 3) == pytest.approx(50.0)
    assert local_mean_saturation(saturation, opaque, 2, 0, 3) == pytest.approx(0.0)


def test_map_matches_scalar_on_strip(strip):
    saturation, opaque = strip
    means = local_mean_saturation_map(saturation, opaque, 3)
    np.testing.assert_allclose(means, [[50.0, 100 / 3, 0.0]])


def test_even_kernel_uses_floor_half_width(strip):
    saturation, opaque = strip
    assert local_mean_saturation(saturation, opaque, 1, 0, 2) == pytest.approx(
        local_mean_saturation(saturation, opaque, 1, 0, 3)
    )


@pytest.mark.parametrize("kernel_size", [3, 5, 13])
def test_map_matches_scalar_on_random_image(kernel_size):
    rng = np.random.default_rng(kernel_size)
    raster = rng.integers(0, 256, size=(17, 23, 4), dtype=np.uint8)
    raster[..., 3] = np.where(rng.random((17, 23)) < 0.2, 0, 255)
    hsv = rgb_to_hsv_buffer(raster)
    opaque = raster[..., 3] > 0

    means = local_mean_saturation_map(hsv.saturation, opaque, kernel_size)

    for y in range(raster.shape[0]):
        for x in range(raster.shape[1]):
            assert means[y, x] == pytest.approx(
                local_mean_saturation(hsv.saturation, opaque, x, y, kernel_size),
                abs=1e-9,
            )


def test_kernel_larger_than_image():
    saturation = np.full((2, 2), 40.0)
    opaque = np.ones((2, 2), dtype=bool)
    means = local_mean_saturation_map(saturation, opaque, 13)
    np.testing.assert_allclose(means, 40.0)


def test_empty_image():
    means = local_mean_saturation_map(np.zeros((0, 0)), np.zeros((0, 0), dtype=bool), 3)
    assert means.shape == (0, 0)


@pytest.mark.slow
def test_map_stays_exact_on_scan_sized_image():
    # window sums must not pick up rounding error from the rest of the image
    rng = np.random.default_rng(21)
    height, width = 2000, 2500
    saturation = rng.random((height, width)) * 100
    opaque = np.ones((height, width), dtype=bool)

    means = local_mean_saturation_map(saturation, opaque, 21)

    worst = 0.0
    for y in range(height - 30, height):
        for x in range(width - 30, width):
            exact = local_mean_saturation(saturation, opaque, x, y, 21)
            worst = max(worst, abs(means[y, x] - exact))
    assert worst < 1e-11
