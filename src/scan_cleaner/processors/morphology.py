"""Binary erosion, dilation and opening over boolean masks.

Windows are square and clipped at the image edge: only in-bounds neighbours
take part, so the border neither forces a pixel on nor off.
"""

import cv2
import numpy as np


def _square(kernel_size: int) -> np.ndarray:
    # Even sizes behave like the next odd size, matching the clipped-window loops.
    side = 2 * (kernel_size // 2) + 1
    return np.ones((side, side), dtype=np.uint8)


def erode(mask: np.ndarray, kernel_size: int) -> np.ndarray:
    """A pixel stays True only if every in-bounds pixel of its window is True."""
    if mask.size == 0:
        return mask.astype(bool, copy=True)
    eroded = cv2.erode(
        mask.astype(np.uint8),
        _square(kernel_size),
        borderType=cv2.BORDER_CONSTANT,
        borderValue=1,
    )
    return eroded > 0


def dilate(mask: np.ndarray, kernel_size: int) -> np.ndarray:
    """A pixel becomes True if any in-bounds pixel of its window is True."""
    if mask.size == 0:
        return mask.astype(bool, copy=True)
    dilated = cv2.dilate(
        mask.astype(np.uint8),
        _square(kernel_size),
        borderType=cv2.BORDER_CONSTANT,
        borderValue=0,
    )
    return dilated > 0


def open_mask(mask: np.ndarray, kernel_size: int) -> np.ndarray:
    """Morphological opening: two separate full passes, erosion then dilation."""
    return dilate(erode(mask, kernel_size), kernel_size)
