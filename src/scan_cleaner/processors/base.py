"""Base processor class and common input checks for the cleaning stages."""

from typing import Any, Dict, Optional, Tuple
from abc import ABC, abstractmethod
from pathlib import Path

import cv2
import numpy as np

from ..exceptions import DimensionMismatchError, ValidationError


class BaseProcessor(ABC):
    """Base class for all image processors."""

    def __init__(self, config: Optional[Any] = None):
        """Initialize processor with optional configuration."""
        self.config = config
        self.debug_images = {}

    def get_config_value(self, key: str, default: Any) -> Any:
        """Safely get a config value with a default."""
        if self.config is None:
            return default
        return getattr(self.config, key, default)

    @abstractmethod
    def process(self, image: np.ndarray, **kwargs) -> Any:
        """Process an image. Must be implemented by subclasses."""
        pass

    def validate_image(self, image: np.ndarray) -> None:
        """Validate that the input is an RGBA raster."""
        validate_raster(image)

    def save_debug_image(self, name: str, image: np.ndarray) -> None:
        """Store a debug image for later saving."""
        if self.get_config_value('save_debug_masks', False):
            self.debug_images[name] = image

    def get_debug_images(self) -> Dict[str, np.ndarray]:
        """Get all stored debug images."""
        return self.debug_images

    def clear_debug_images(self) -> None:
        """Clear stored debug images."""
        self.debug_images = {}

    def save_debug_images_to_dir(self, debug_dir: Path, prefix: str = "") -> None:
        """Save all debug images to the specified directory.

        Boolean masks are written as black/white PNGs.
        """
        if not self.debug_images:
            return

        debug_dir.mkdir(parents=True, exist_ok=True)

        for name, image in self.debug_images.items():
            filename = f"{prefix}_{name}.png" if prefix else f"{name}.png"
            if image.dtype == bool:
                image = image.astype(np.uint8) * 255
            cv2.imwrite(str(debug_dir / filename), image)


def validate_raster(raster: np.ndarray) -> None:
    """Raise ValidationError unless ``raster`` is an (H, W, 4) uint8 array.

    Zero-size rasters are accepted.
    """
    if raster is None:
        raise ValidationError("Raster cannot be None")
    if not isinstance(raster, np.ndarray):
        raise ValidationError("Raster must be a numpy array",
                              {"type": type(raster).__name__})
    if raster.ndim != 3 or raster.shape[2] != 4:
        raise ValidationError("Raster must have shape (height, width, 4)",
                              {"shape": raster.shape})
    if raster.dtype != np.uint8:
        raise ValidationError("Raster must be 8-bit per channel",
                              {"dtype": str(raster.dtype)})


def validate_mask(mask: np.ndarray, shape: Tuple[int, int], name: str = "mask") -> np.ndarray:
    """Return ``mask`` as a boolean (height, width) array.

    A flat mask of length ``height * width`` is reshaped row-major. Any other
    size is rejected; masks are never truncated or wrapped.
    """
    height, width = shape
    mask = np.asarray(mask)
    if mask.shape == (height, width):
        return mask.astype(bool, copy=False)
    if mask.ndim == 1 and mask.size == height * width:
        return mask.astype(bool, copy=False).reshape(height, width)
    raise DimensionMismatchError(
        f"{name} does not match the raster dimensions",
        expected=(height, width),
        actual=mask.shape,
    )
