"""Tests for raster and mask file I/O."""

import cv2
import numpy as np
import pytest

from scan_cleaner.exceptions import (
    DimensionMismatchError,
    ImageLoadError,
    ImageSaveError,
    ValidationError,
)
from scan_cleaner.processors import (
    get_image_files,
    load_image,
    load_mask,
    save_image,
    save_mask,
    to_rgba,
)


def test_png_round_trip_keeps_alpha(temp_dir, sample_scan):
    path = temp_dir / "scan.png"
    save_image(sample_scan, path)
    loaded = load_image(path)
    np.testing.assert_array_equal(loaded, sample_scan)


def test_jpeg_is_loaded_opaque(temp_dir, raster_factory):
    raster = raster_factory(8, 8, (120, 130, 140, 0))
    path = temp_dir / "scan.jpg"
    save_image(raster, path)
    loaded = load_image(path)
    assert loaded.shape == (8, 8, 4)
    assert (loaded[..., 3] == 255).all()


def test_to_rgba_channel_order():
    bgr = np.zeros((1, 1, 3), dtype=np.uint8)
    bgr[0, 0] = (10, 20, 30)
    np.testing.assert_array_equal(to_rgba(bgr)[0, 0], (30, 20, 10, 255))

    gray = np.full((2, 2), 7, dtype=np.uint8)
    np.testing.assert_array_equal(to_rgba(gray)[1, 1], (7, 7, 7, 255))

    deep = np.full((1, 1, 4), 65535, dtype=np.uint16)
    assert to_rgba(deep).dtype == np.uint8
    assert (to_rgba(deep) == 255).all()


def test_load_missing_file(temp_dir):
    with pytest.raises(ImageLoadError):
        load_image(temp_dir / "missing.png")


def test_load_corrupt_file(temp_dir):
    path = temp_dir / "corrupt.png"
    path.write_bytes(b"not an image")
    with pytest.raises(ImageLoadError):
        load_image(path)


def test_save_rejects_bad_rasters(temp_dir):
    with pytest.raises(ImageSaveError):
        save_image(np.zeros((0, 0, 4), dtype=np.uint8), temp_dir / "empty.png")
    with pytest.raises(ValidationError):
        save_image(np.zeros((4, 4, 3), dtype=np.uint8), temp_dir / "rgb.png")


def test_mask_round_trip(temp_dir):
    mask = np.zeros((6, 5), dtype=bool)
    mask[1:3, 2:4] = True
    path = temp_dir / "sub" / "mask.png"
    save_mask(mask, path)
    np.testing.assert_array_equal(load_mask(path, (6, 5)), mask)


def test_mask_ignores_transparent_pixels(temp_dir):
    bgra = np.zeros((2, 2, 4), dtype=np.uint8)
    bgra[0, 0] = (255, 255, 255, 255)
    bgra[1, 1] = (255, 255, 255, 0)
    path = temp_dir / "mask.png"
    cv2.imwrite(str(path), bgra)
    mask = load_mask(path)
    assert mask[0, 0]
    assert not mask[1, 1]
    assert mask.sum() == 1


def test_mask_shape_mismatch(temp_dir):
    path = temp_dir / "mask.png"
    save_mask(np.ones((3, 3), dtype=bool), path)
    with pytest.raises(DimensionMismatchError):
        load_mask(path, (4, 4))


def test_get_image_files(temp_dir, raster_factory):
    for name in ["b.png", "a.jpg", "c.TIF"]:
        save_image(raster_factory(2, 2), temp_dir / name)
    (temp_dir / "notes.txt").write_text("skip me")

    names = [p.name for p in get_image_files(temp_dir)]
    assert names == ["a.jpg", "b.png", "c.TIF"]
