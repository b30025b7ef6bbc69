"""Image I/O utilities for loading and saving RGBA rasters and masks."""

from pathlib import Path
from typing import List, Optional, Tuple

import cv2
import numpy as np

from ..exceptions import ImageLoadError, ImageSaveError
from .base import validate_mask, validate_raster

IMAGE_EXTENSIONS = [".jpg", ".jpeg", ".png", ".tiff", ".tif", ".bmp", ".webp"]
NO_ALPHA_EXTENSIONS = {".jpg", ".jpeg", ".bmp"}


def to_rgba(image: np.ndarray) -> np.ndarray:
    """Convert an OpenCV-decoded image (gray, BGR or BGRA) to RGBA.

    Images without alpha become fully opaque. 16-bit images are scaled to 8 bits.
    """
    if image.dtype == np.uint16:
        image = (image // 257).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise ImageLoadError("Unsupported image depth", dtype=str(image.dtype))

    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    raise ImageLoadError("Unsupported channel count", channels=image.shape[2])


def load_image(image_path: Path) -> np.ndarray:
    """Load an image file as an (H, W, 4) RGBA raster.

    Args:
        image_path: Path to the image file

    Returns:
        RGBA uint8 array

    Raises:
        ImageLoadError: If the image cannot be loaded
    """
    image_path = Path(image_path)
    if not image_path.is_file():
        raise ImageLoadError("Image file not found", image_path=str(image_path))

    # np.fromfile + imdecode handles non-ASCII paths that cv2.imread rejects
    data = np.fromfile(str(image_path), dtype=np.uint8)
    image = cv2.imdecode(data, cv2.IMREAD_UNCHANGED) if data.size else None
    if image is None:
        raise ImageLoadError("Could not load image", image_path=str(image_path))
    return to_rgba(image)


def save_image(raster: np.ndarray, output_path: Path) -> None:
    """Save an RGBA raster; use PNG or WebP to keep transparency.

    Args:
        raster: RGBA raster to save
        output_path: Path where to save the image

    Raises:
        ImageSaveError: If the raster is invalid or cannot be encoded
    """
    output_path = Path(output_path)
    if raster is None or raster.size == 0:
        raise ImageSaveError("Cannot save an empty raster", image_path=str(output_path))
    validate_raster(raster)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    suffix = output_path.suffix.lower() or ".png"
    if suffix in NO_ALPHA_EXTENSIONS:
        converted = cv2.cvtColor(raster, cv2.COLOR_RGBA2BGR)
    else:
        converted = cv2.cvtColor(raster, cv2.COLOR_RGBA2BGRA)
    ok, encoded = cv2.imencode(suffix, converted)
    if not ok:
        raise ImageSaveError("Could not encode image", image_path=str(output_path))
    encoded.tofile(str(output_path))


def load_mask(mask_path: Path, shape: Optional[Tuple[int, int]] = None) -> np.ndarray:
    """Load a mask image; any non-zero pixel is True.

    If the image has an alpha channel, only opaque non-black pixels count.

    Raises:
        ImageLoadError: If the file cannot be read
        DimensionMismatchError: If ``shape`` is given and does not match
    """
    rgba = load_image(mask_path)
    mask = (rgba[..., :3].max(axis=-1) > 0) & (rgba[..., 3] > 0)
    if shape is not None:
        mask = validate_mask(mask, shape, f"Mask {mask_path}")
    return mask


def save_mask(mask: np.ndarray, output_path: Path) -> None:
    """Save a boolean mask as a black/white PNG."""
    gray = mask.astype(np.uint8) * 255
    save_image(cv2.cvtColor(gray, cv2.COLOR_GRAY2RGBA), output_path)


def get_image_files(directory: Path) -> List[Path]:
    """Get all image files from directory.

    Args:
        directory: Directory to search for images

    Returns:
        List of paths to image files, sorted
    """
    image_files = set()  # set avoids duplicates on case-insensitive filesystems

    for ext in IMAGE_EXTENSIONS:
        image_files.update(directory.glob(f"*{ext}"))
        image_files.update(directory.glob(f"*{ext.upper()}"))

    return sorted(image_files)
