"""Tests for binary erosion, dilation and opening."""

import numpy as np
import pytest

from scan_cleaner.processors import dilate, erode, open_mask


def reference_erode(mask, k):
    h, w = mask.shape
    half = k // 2
    out = np.zeros_like(mask)
    for y in range(h):
        for x in range(w):
            window = mask[max(0, y - half):y + half + 1, max(0, x - half):x + half + 1]
            out[y, x] = window.all()
    return out


def reference_dilate(mask, k):
    h, w = mask.shape
    half = k // 2
    out = np.zeros_like(mask)
    for y in range(h):
        for x in range(w):
            window = mask[max(0, y - half):y + half + 1, max(0, x - half):x + half + 1]
            out[y, x] = window.any()
    return out


@pytest.fixture
def random_mask():
    rng = np.random.default_rng(3)
    return rng.random((13, 17)) < 0.6


@pytest.mark.parametrize("k", [3, 5, 7])
def test_erode_matches_clipped_window_rule(random_mask, k):
    np.testing.assert_array_equal(erode(random_mask, k), reference_erode(random_mask, k))


@pytest.mark.parametrize("k", [3, 5, 7])
def test_dilate_matches_clipped_window_rule(random_mask, k):
    np.testing.assert_array_equal(dilate(random_mask, k), reference_dilate(random_mask, k))


def test_full_mask_survives_erosion_at_edges():
    mask = np.ones((5, 5), dtype=bool)
    assert erode(mask, 3).all()
    assert open_mask(mask, 3).all()


def test_opening_removes_isolated_pixels_and_thin_lines():
    mask = np.zeros((9, 9), dtype=bool)
    mask[1, 1] = True
    mask[4, :] = True
    mask[6:9, 6:9] = True

    opened = open_mask(mask, 3)

    assert not opened[1, 1]
    assert not opened[4].any()
    assert opened[6:9, 6:9].all()


@pytest.mark.parametrize("k", [3, 5])
def test_opening_is_idempotent(random_mask, k):
    once = open_mask(random_mask, k)
    np.testing.assert_array_equal(open_mask(once, k), once)


def test_opening_is_anti_extensive(random_mask):
    opened = open_mask(random_mask, 3)
    assert not (opened & ~random_mask).any()


def test_empty_mask():
    mask = np.zeros((0, 4), dtype=bool)
    assert erode(mask, 3).shape == (0, 4)
    assert dilate(mask, 3).shape == (0, 4)
