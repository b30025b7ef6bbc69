"""
Pytest configuration and shared fixtures for scan cleaner tests.

Provides synthetic RGBA scans, parameter sets and temporary directories.
"""

import shutil
import tempfile
from pathlib import Path
from typing import Generator

import numpy as np
import pytest

from scan_cleaner.config import ArtifactParams, Config, get_default_config
from scan_cleaner.utils.logging_utils import setup_logging


def make_raster(height: int, width: int, rgba=(255, 255, 255, 255)) -> np.ndarray:
    """Uniform RGBA raster."""
    raster = np.empty((height, width, 4), dtype=np.uint8)
    raster[...] = rgba
    return raster


@pytest.fixture
def raster_factory():
    """Factory for uniform RGBA rasters."""
    return make_raster


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files."""
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def default_params() -> ArtifactParams:
    return ArtifactParams()


@pytest.fixture
def white_raster() -> np.ndarray:
    """5x5 fully opaque white image."""
    return make_raster(5, 5)


@pytest.fixture
def ink_dot_raster() -> np.ndarray:
    """61x61 near-white page with one black ink pixel in the centre."""
    raster = make_raster(61, 61, (250, 250, 248, 255))
    raster[30, 30] = (10, 10, 10, 255)
    return raster


@pytest.fixture
def sample_scan() -> np.ndarray:
    """A small synthetic scan.

    Near-white paper with a light grey smudge, a black text bar, a red stamp,
    a single-pixel speck and a transparent right-hand column. No pixel uses
    pure red, green or blue so visualization colours are unambiguous.
    """
    raster = make_raster(40, 60, (250, 250, 248, 255))
    raster[25:33, 30:45] = (232, 230, 226, 255)   # smudge
    raster[18:22, 10:50] = (20, 20, 20, 255)      # text bar
    raster[2:9, 2:11] = (200, 40, 40, 255)        # stamp
    raster[12, 52] = (90, 90, 200, 255)           # speck
    raster[:, 59] = (250, 250, 248, 0)            # transparent column
    return raster


@pytest.fixture
def sample_config(temp_dir: Path) -> Config:
    """Configuration writing into the temporary directory."""
    config = get_default_config()
    config.directories.input_dir = str(temp_dir / "input")
    config.directories.output_dir = str(temp_dir / "output" / "cleaned")
    config.directories.visualization_dir = str(temp_dir / "output" / "visualization")
    config.directories.stats_dir = str(temp_dir / "output" / "stats")
    config.logging.use_rich = False
    return config


@pytest.fixture(autouse=True)
def setup_test_logging():
    """Setup logging for tests."""
    setup_logging(
        level="WARNING",
        use_rich=False,
        include_performance=False,
        format_style="minimal"
    )


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (deselect with '-m \"not unit\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers based on test location and name."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        else:
            item.add_marker(pytest.mark.integration)

        if "slow" in item.name.lower() or "parallel" in item.name.lower():
            item.add_marker(pytest.mark.slow)
