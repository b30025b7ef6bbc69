"""Distance-bounded search for black ink around a pixel."""

import cv2
import numpy as np


def disk_kernel(structuring_element_size: int) -> np.ndarray:
    """Circular structuring element: offsets with dx² + dy² <= r², r = size // 2.

    ``cv2.getStructuringElement(cv2.MORPH_ELLIPSE, ...)`` rasterises the
    ellipse differently, so the disk is built explicitly.
    """
    r = structuring_element_size // 2
    dy, dx = np.ogrid[-r:r + 1, -r:r + 1]
    return (dx * dx + dy * dy <= r * r).astype(np.uint8)


def is_near_black(
    black_mask: np.ndarray,
    x: int,
    y: int,
    structuring_element_size: int,
) -> bool:
    """True if any black pixel lies within the disk of radius ``size // 2`` around (x, y).

    The bounding box is clipped to the image and the boundary circle is
    included.
    """
    height, width = black_mask.shape
    r = structuring_element_size // 2
    radius_squared = r * r

    for ky in range(max(0, y - r), min(height, y + r + 1)):
        dy = ky - y
        for kx in range(max(0, x - r), min(width, x + r + 1)):
            dx = kx - x
            if dx * dx + dy * dy > radius_squared:
                continue
            if black_mask[ky, kx]:
                return True

    return False


def near_black_map(black_mask: np.ndarray, structuring_element_size: int) -> np.ndarray:
    """:func:`is_near_black` evaluated for every pixel.

    Equivalent to dilating the black mask with :func:`disk_kernel`; pixels
    outside the image never contribute.
    """
    if black_mask.size == 0:
        return np.zeros(black_mask.shape, dtype=bool)

    kernel = disk_kernel(structuring_element_size)
    dilated = cv2.dilate(
        black_mask.astype(np.uint8),
        kernel,
        borderType=cv2.BORDER_CONSTANT,
        borderValue=0,
    )
    return dilated > 0
