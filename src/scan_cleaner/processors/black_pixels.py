"""Near-black ink detection."""

from typing import Tuple

import numpy as np

from .color import HSVBuffer


def detect_black_pixels(
    hsv: HSVBuffer,
    opaque: np.ndarray,
    brightness_threshold: float,
    saturation_threshold: float,
) -> Tuple[np.ndarray, int]:
    """Mark opaque pixels that are both dark and unsaturated.

    Args:
        hsv: Precomputed HSV planes
        opaque: (H, W) boolean, True where alpha > 0
        brightness_threshold: Value (%) a black pixel must stay below
        saturation_threshold: Saturation (%) a black pixel must stay below

    Returns:
        Tuple of (black pixel mask, number of black pixels)
    """
    black = (
        opaque
        & (hsv.value < brightness_threshold)
        & (hsv.saturation < saturation_threshold)
    )
    return black, int(np.count_nonzero(black))
