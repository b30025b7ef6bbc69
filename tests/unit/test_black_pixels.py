"""Tests for black ink detection."""

import numpy as np

from scan_cleaner.processors import detect_black_pixels, rgb_to_hsv_buffer


def test_dark_unsaturated_pixels_are_black(raster_factory):
    raster = raster_factory(1, 4)
    raster[0, 0] = (10, 10, 10, 255)    # black
    raster[0, 1] = (60, 10, 10, 255)    # dark but saturated
    raster[0, 2] = (100, 100, 100, 255) # grey, too bright
    raster[0, 3] = (10, 10, 10, 0)      # transparent ink
    hsv = rgb_to_hsv_buffer(raster)

    mask, count = detect_black_pixels(hsv, raster[..., 3] > 0, 25, 31)

    np.testing.assert_array_equal(mask, [[True, False, False, False]])
    assert count == 1


def test_thresholds_are_strict(raster_factory):
    # value exactly 20% is not below a 20% threshold
    raster = raster_factory(1, 1, (51, 51, 51, 255))
    hsv = rgb_to_hsv_buffer(raster)
    mask, count = detect_black_pixels(hsv, raster[..., 3] > 0, 20, 31)
    assert not mask.any()
    assert count == 0
