"""Artifact candidate classification and ink-proximity filtering."""

from dataclasses import dataclass

import numpy as np

from ..config.models import ArtifactParams
from ..utils.logging_utils import get_logger
from .color import HSVBuffer
from .proximity import near_black_map
from .saturation_filter import local_mean_saturation, local_mean_saturation_map

logger = get_logger(__name__)

# Means this close to the threshold are recomputed with the per-pixel loop so
# summation order cannot flip a comparison.
_MEAN_TOLERANCE = 1e-9


@dataclass
class CandidateResult:
    """Masks and counters produced by :func:`classify_candidates`."""

    initial_mask: np.ndarray
    near_black_mask: np.ndarray
    final_mask: np.ndarray
    bright_pixels: int
    low_saturation_pixels: int
    candidate_artifacts: int
    low_saturation_areas: int
    near_black_pixels: int
    replaced_pixels: int


def classify_candidates(
    hsv: HSVBuffer,
    opaque: np.ndarray,
    black_mask: np.ndarray,
    params: ArtifactParams,
) -> CandidateResult:
    """Two-pass classification of artifact pixels.

    Pass 1 marks opaque pixels that are bright, unsaturated and sit in an
    unsaturated neighbourhood (the initial mask). Pass 2 drops every initial
    pixel within ``structuring_element_size // 2`` of black ink, judged
    against the unmodified ``black_mask``; the remainder is the final mask.

    Args:
        hsv: Precomputed HSV planes
        opaque: (H, W) boolean, True where alpha > 0
        black_mask: Output of :func:`detect_black_pixels`; read only
        params: Detection parameters

    Returns:
        CandidateResult with the initial, near-black and final masks
    """
    bright = opaque & (hsv.value > params.brightness_threshold)
    low_saturation = opaque & (hsv.saturation < params.saturation_threshold)
    candidates = bright & low_saturation

    mean_saturation = local_mean_saturation_map(
        hsv.saturation, opaque, params.blur_kernel_size
    )
    ambiguous = candidates & (
        np.abs(mean_saturation - params.mean_saturation_threshold) <= _MEAN_TOLERANCE
    )
    for y, x in zip(*np.nonzero(ambiguous)):
        mean_saturation[y, x] = local_mean_saturation(
            hsv.saturation, opaque, int(x), int(y), params.blur_kernel_size
        )

    initial_mask = candidates & (mean_saturation < params.mean_saturation_threshold)

    near_black_mask = initial_mask & near_black_map(
        black_mask, params.structuring_element_size
    )
    final_mask = initial_mask & ~near_black_mask

    result = CandidateResult(
        initial_mask=initial_mask,
        near_black_mask=near_black_mask,
        final_mask=final_mask,
        bright_pixels=int(np.count_nonzero(bright)),
        low_saturation_pixels=int(np.count_nonzero(low_saturation)),
        candidate_artifacts=int(np.count_nonzero(candidates)),
        low_saturation_areas=int(np.count_nonzero(initial_mask)),
        near_black_pixels=int(np.count_nonzero(near_black_mask)),
        replaced_pixels=int(np.count_nonzero(final_mask)),
    )

    logger.debug(
        f"Candidates: bright={result.bright_pixels}, "
        f"low_saturation={result.low_saturation_pixels}, "
        f"candidates={result.candidate_artifacts}, "
        f"low_saturation_areas={result.low_saturation_areas}, "
        f"near_black={result.near_black_pixels}, "
        f"pending={result.replaced_pixels}"
    )

    return result
