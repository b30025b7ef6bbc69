"""Scanned image artifact cleaner."""

__version__ = "1.0.0"
__author__ = "Scan Cleaner Team"

from .config import ArtifactParams
from .processors import CleaningResult, CleaningStats, clean_artifacts

__all__ = ["ArtifactParams", "CleaningResult", "CleaningStats", "clean_artifacts"]
