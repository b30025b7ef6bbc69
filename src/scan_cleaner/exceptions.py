"""
Custom exceptions for the scan artifact cleaner.

Provides a hierarchy of exceptions for the boundary checks around the
cleaning core and for the file-level collaborators (loading, saving, config).
"""

from typing import Optional, Any


class ScanCleanerError(Exception):
    """Base exception for all scan cleaner errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} (Details: {details_str})"
        return self.message


class ConfigurationError(ScanCleanerError):
    """Raised when there are configuration-related errors."""
    pass


class ValidationError(ScanCleanerError):
    """Raised when input validation fails."""
    pass


class DimensionMismatchError(ValidationError):
    """Raised when a mask does not match the raster it is applied to."""

    def __init__(self, message: str, expected: Any = None, actual: Any = None,
                 **kwargs: Any) -> None:
        details = kwargs
        if expected is not None:
            details["expected"] = expected
        if actual is not None:
            details["actual"] = actual
        super().__init__(message, details)


class InvalidParameterError(ValidationError):
    """Raised when processing parameters are out of range."""
    pass


class ProcessingError(ScanCleanerError):
    """Raised when image processing operations fail."""

    def __init__(self, message: str, processor: Optional[str] = None,
                 image_path: Optional[str] = None, **kwargs: Any) -> None:
        details = kwargs
        if processor:
            details["processor"] = processor
        if image_path:
            details["image_path"] = image_path
        super().__init__(message, details)


class ImageLoadError(ProcessingError):
    """Raised when an image cannot be loaded or is invalid."""
    pass


class ImageSaveError(ProcessingError):
    """Raised when an image cannot be saved."""
    pass
