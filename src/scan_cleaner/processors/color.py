"""RGB to HSV conversion with percent-scaled saturation and value.

OpenCV's ``COLOR_RGB2HSV`` quantises to 8 bits, which shifts pixels across
the detector thresholds, so the conversion is done in float64 here.
"""

from typing import NamedTuple, Tuple

import numpy as np


class HSVBuffer(NamedTuple):
    """Per-pixel HSV planes, each shaped (height, width).

    hue is in degrees [0, 360); saturation and value are in [0, 100].
    """

    hue: np.ndarray
    saturation: np.ndarray
    value: np.ndarray


def rgb_to_hsv(r: int, g: int, b: int) -> Tuple[float, float, float]:
    """Convert one RGB triple (0-255 each) to (hue, saturation %, value %)."""
    r, g, b = r / 255, g / 255, b / 255
    high = max(r, g, b)
    low = min(r, g, b)
    d = high - low

    h = 0.0
    s = 0.0 if high == 0 else d / high

    if high != low:
        if high == r:
            h = (g - b) / d + (6 if g < b else 0)
        elif high == g:
            h = (b - r) / d + 2
        else:
            h = (r - g) / d + 4
        h /= 6

    return h * 360, s * 100, high * 100


def rgb_to_hsv_buffer(raster: np.ndarray) -> HSVBuffer:
    """Vectorised :func:`rgb_to_hsv` over the RGB channels of an RGBA raster.

    Produces bit-identical values to the scalar conversion; alpha is ignored.
    """
    rgb = raster[..., :3].astype(np.float64) / 255
    r, g, b = rgb[..., 0], rgb[..., 1], rgb[..., 2]

    high = rgb.max(axis=-1)
    low = rgb.min(axis=-1)
    d = high - low

    with np.errstate(divide="ignore", invalid="ignore"):
        s = np.where(high == 0, 0.0, d / high)
        h = np.select(
            [d == 0, high == r, high == g],
            [0.0, (g - b) / d + np.where(g < b, 6, 0), (b - r) / d + 2],
            default=(r - g) / d + 4,
        )
    h = h / 6

    return HSVBuffer(hue=h * 360, saturation=s * 100, value=high * 100)
