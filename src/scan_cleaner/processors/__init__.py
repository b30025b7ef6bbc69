"""Scan Cleaner Processors Module.

Each module handles one stage of the artifact removal workflow: colour
conversion, local saturation filtering, black ink detection, proximity
testing, candidate classification, morphology and whitelist merging.
"""

# Base processor
from .base import BaseProcessor, validate_raster, validate_mask

# Image I/O
from .image_io import (
    load_image,
    save_image,
    load_mask,
    save_mask,
    get_image_files,
    to_rgba,
)

# Colour model
from .color import HSVBuffer, rgb_to_hsv, rgb_to_hsv_buffer

# Local saturation
from .saturation_filter import local_mean_saturation, local_mean_saturation_map

# Black ink and proximity
from .black_pixels import detect_black_pixels
from .proximity import disk_kernel, is_near_black, near_black_map

# Classification
from .classifier import CandidateResult, classify_candidates

# Morphology
from .morphology import erode, dilate, open_mask

# Manual whitelist
from .whitelist import apply_manual_whitelist, paint_whitelist, WhitelistHistory

# Pipeline
from .artifact_cleaning import (
    ArtifactCleaningProcessor,
    CleaningResult,
    CleaningStats,
    clean_artifacts,
    resolve_params,
)

__all__ = [
    # Base
    "BaseProcessor",
    "validate_raster",
    "validate_mask",
    # Image I/O
    "load_image",
    "save_image",
    "load_mask",
    "save_mask",
    "get_image_files",
    "to_rgba",
    # Colour model
    "HSVBuffer",
    "rgb_to_hsv",
    "rgb_to_hsv_buffer",
    # Local saturation
    "local_mean_saturation",
    "local_mean_saturation_map",
    # Black ink and proximity
    "detect_black_pixels",
    "disk_kernel",
    "is_near_black",
    "near_black_map",
    # Classification
    "CandidateResult",
    "classify_candidates",
    # Morphology
    "erode",
    "dilate",
    "open_mask",
    # Manual whitelist
    "apply_manual_whitelist",
    "paint_whitelist",
    "WhitelistHistory",
    # Pipeline
    "ArtifactCleaningProcessor",
    "CleaningResult",
    "CleaningStats",
    "clean_artifacts",
    "resolve_params",
]
