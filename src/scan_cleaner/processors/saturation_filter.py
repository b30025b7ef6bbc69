"""Local mean saturation over a clipped box window."""

import numpy as np


def local_mean_saturation(
    saturation: np.ndarray,
    opaque: np.ndarray,
    x: int,
    y: int,
    kernel_size: int,
) -> float:
    """Mean saturation of the ``kernel_size`` box centred on (x, y).

    The window is clipped to the image. Transparent pixels add nothing to the
    sum but still count in the denominator; cells outside the image count in
    neither. Returns 0 for an empty window.

    Args:
        saturation: (H, W) saturation plane in percent
        opaque: (H, W) boolean, True where alpha > 0
        x: Column of the centre pixel
        y: Row of the centre pixel
        kernel_size: Window width; the half-width is ``kernel_size // 2``
    """
    height, width = saturation.shape
    half = kernel_size // 2
    y0, y1 = max(0, y - half), min(height, y + half + 1)
    x0, x1 = max(0, x - half), min(width, x + half + 1)

    total = 0.0
    count = 0
    for ky in range(y0, y1):
        for kx in range(x0, x1):
            if opaque[ky, kx]:
                total += saturation[ky, kx]
            count += 1

    return total / count if count > 0 else 0.0


def _window_sums(values: np.ndarray, half: int, axis: int) -> np.ndarray:
    """Sum of each clipped ``2 * half + 1`` window along ``axis``.

    Adds shifted copies of a zero-padded array, so every partial sum stays
    within one window and the rounding error does not grow with image size.
    """
    length = values.shape[axis]
    pad = [(0, 0), (0, 0)]
    pad[axis] = (half, half)
    padded = np.pad(values, pad)

    sums = np.zeros_like(values)
    window = [slice(None), slice(None)]
    for offset in range(2 * half + 1):
        window[axis] = slice(offset, offset + length)
        sums += padded[tuple(window)]
    return sums


def local_mean_saturation_map(
    saturation: np.ndarray,
    opaque: np.ndarray,
    kernel_size: int,
) -> np.ndarray:
    """:func:`local_mean_saturation` for every pixel at once.

    The box sum is separable: a horizontal window pass followed by a vertical
    one. The result equals the per-pixel loop up to summation order.
    """
    height, width = saturation.shape
    if height == 0 or width == 0:
        return np.zeros((height, width), dtype=np.float64)

    half = kernel_size // 2
    weighted = np.where(opaque, saturation, 0.0).astype(np.float64)
    sums = _window_sums(_window_sums(weighted, half, axis=1), half, axis=0)

    rows = np.arange(height)
    cols = np.arange(width)
    row_counts = np.minimum(rows + half + 1, height) - np.maximum(rows - half, 0)
    col_counts = np.minimum(cols + half + 1, width) - np.maximum(cols - half, 0)

    return sums / (row_counts[:, None] * col_counts[None, :])
