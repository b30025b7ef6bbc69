"""Artifact removal pipeline: classify, filter, open, merge and paint."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np

from ..config.loader import params_from_dict
from ..config.models import ArtifactParams
from ..exceptions import InvalidParameterError
from ..utils.logging_utils import get_logger
from .base import BaseProcessor, validate_mask, validate_raster
from .black_pixels import detect_black_pixels
from .classifier import classify_candidates
from .color import rgb_to_hsv_buffer
from .morphology import open_mask
from .whitelist import apply_manual_whitelist

logger = get_logger(__name__)

BLACK_COLOR = (255, 0, 0)
NEAR_BLACK_COLOR = (0, 0, 255)
REMOVED_COLOR = (0, 255, 0)

ParamsLike = Union[ArtifactParams, Mapping[str, Any], None]


@dataclass
class CleaningStats:
    """Pixel counters reported alongside the cleaned image.

    Purely observational; nothing here feeds back into the algorithm.
    """

    bright_pixels: int = 0
    low_saturation_pixels: int = 0
    candidate_artifacts: int = 0
    low_saturation_areas: int = 0
    near_black_pixels: int = 0
    replaced_pixels: int = 0
    black_pixels: int = 0
    manually_whitelisted_pixels: int = 0
    removed_pixels: int = 0
    thresholds: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bright_pixels": self.bright_pixels,
            "low_saturation_pixels": self.low_saturation_pixels,
            "candidate_artifacts": self.candidate_artifacts,
            "low_saturation_areas": self.low_saturation_areas,
            "near_black_pixels": self.near_black_pixels,
            "replaced_pixels": self.replaced_pixels,
            "black_pixels": self.black_pixels,
            "manually_whitelisted_pixels": self.manually_whitelisted_pixels,
            "removed_pixels": self.removed_pixels,
            "thresholds": dict(self.thresholds),
        }


@dataclass
class CleaningResult:
    """Outputs of one :func:`clean_artifacts` call.

    ``cleaned`` and ``visualization`` are new RGBA rasters with the source's
    dimensions. The masks are kept for inspection and debug output.
    """

    cleaned: np.ndarray
    visualization: np.ndarray
    stats: CleaningStats
    black_mask: np.ndarray
    initial_mask: np.ndarray
    final_mask: np.ndarray
    opened_mask: np.ndarray
    removal_mask: np.ndarray


def resolve_params(params: ParamsLike) -> ArtifactParams:
    """Accept a parameter model, a plain mapping, or None for defaults."""
    if params is None:
        return ArtifactParams()
    if isinstance(params, ArtifactParams):
        return params
    if isinstance(params, Mapping):
        return params_from_dict(dict(params))
    raise InvalidParameterError(
        "Parameters must be an ArtifactParams or a mapping",
        {"type": type(params).__name__},
    )


def clean_artifacts(
    raster: np.ndarray,
    params: ParamsLike = None,
    manual_whitelist: Optional[np.ndarray] = None,
    processor: Optional[BaseProcessor] = None,
) -> CleaningResult:
    """Erase light, unsaturated smudges from an RGBA scan while keeping ink.

    Stages, in order:
    1. HSV planes for every pixel.
    2. Black ink mask (painted red in the visualization).
    3. Candidate classification and ink-proximity filtering (protected
       pixels painted blue).
    4. Morphological opening of the final mask.
    5. Manual whitelist override.
    6. Remaining pixels become fully transparent in the cleaned raster and
       green in the visualization.

    Args:
        raster: (H, W, 4) uint8 RGBA image; not modified
        params: Detection parameters (model, mapping or None for defaults)
        manual_whitelist: Optional boolean mask of pixels never to erase,
            shaped (H, W) or flat with H * W entries
        processor: Optional processor collecting debug masks

    Returns:
        CleaningResult with both rasters, statistics and intermediate masks

    Raises:
        ValidationError: If the raster is malformed
        DimensionMismatchError: If the whitelist does not match the raster
        InvalidParameterError: If the parameters are out of range
    """
    validate_raster(raster)
    params = resolve_params(params)
    height, width = raster.shape[:2]
    manual = None
    if manual_whitelist is not None:
        manual = validate_mask(manual_whitelist, (height, width), "Manual whitelist mask")

    cleaned = raster.copy()
    visualization = raster.copy()
    stats = CleaningStats(thresholds=params.thresholds())

    opaque = raster[..., 3] > 0
    hsv = rgb_to_hsv_buffer(raster)

    black_mask, stats.black_pixels = detect_black_pixels(
        hsv,
        opaque,
        params.black_pixel_brightness_threshold,
        params.black_pixel_saturation_threshold,
    )
    visualization[black_mask, :3] = BLACK_COLOR

    candidates = classify_candidates(hsv, opaque, black_mask, params)
    stats.bright_pixels = candidates.bright_pixels
    stats.low_saturation_pixels = candidates.low_saturation_pixels
    stats.candidate_artifacts = candidates.candidate_artifacts
    stats.low_saturation_areas = candidates.low_saturation_areas
    stats.near_black_pixels = candidates.near_black_pixels
    stats.replaced_pixels = candidates.replaced_pixels
    visualization[candidates.near_black_mask, :3] = NEAR_BLACK_COLOR

    opened_mask = open_mask(candidates.final_mask, params.morph_opening_kernel_size)

    removal_mask, stats.manually_whitelisted_pixels = apply_manual_whitelist(
        opened_mask, manual
    )
    stats.removed_pixels = int(np.count_nonzero(removal_mask))

    cleaned[removal_mask] = 0
    visualization[removal_mask, :3] = REMOVED_COLOR

    if processor is not None:
        processor.save_debug_image("black_mask", black_mask)
        processor.save_debug_image("initial_mask", candidates.initial_mask)
        processor.save_debug_image("final_mask", candidates.final_mask)
        processor.save_debug_image("opened_mask", opened_mask)
        processor.save_debug_image("removal_mask", removal_mask)

    logger.debug(f"Cleaned {width}x{height} raster: {stats.to_dict()}")

    return CleaningResult(
        cleaned=cleaned,
        visualization=visualization,
        stats=stats,
        black_mask=black_mask,
        initial_mask=candidates.initial_mask,
        final_mask=candidates.final_mask,
        opened_mask=opened_mask,
        removal_mask=removal_mask,
    )


class ArtifactCleaningProcessor(BaseProcessor):
    """Processor wrapper around :func:`clean_artifacts`.

    ``config`` may be an :class:`OutputConfig`; its ``save_debug_masks`` flag
    controls whether intermediate masks are kept for
    :meth:`save_debug_images_to_dir`.
    """

    def process(
        self,
        image: np.ndarray,
        params: ParamsLike = None,
        manual_whitelist: Optional[np.ndarray] = None,
        **kwargs
    ) -> CleaningResult:
        """Clean one RGBA raster.

        Args:
            image: Input RGBA raster
            params: Detection parameters
            manual_whitelist: Optional protection mask
            **kwargs: Ignored

        Returns:
            CleaningResult
        """
        self.validate_image(image)
        self.clear_debug_images()

        return clean_artifacts(
            image, params=params, manual_whitelist=manual_whitelist, processor=self
        )
