"""
Pydantic models for scan cleaner configuration.

Defines the processing parameter record consumed by the cleaning core and
the surrounding directory, output and logging settings used by the batch
runner and the command line interface.
"""

from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogLevel(str, Enum):
    """Supported logging levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


THRESHOLD_FIELDS = (
    "brightness_threshold",
    "saturation_threshold",
    "mean_saturation_threshold",
    "black_pixel_brightness_threshold",
    "black_pixel_saturation_threshold",
)

KERNEL_FIELDS = (
    "structuring_element_size",
    "blur_kernel_size",
    "morph_opening_kernel_size",
)

_KERNEL_MAXIMUM = {
    "structuring_element_size": 51,
    "blur_kernel_size": 21,
    "morph_opening_kernel_size": 21,
}


class ArtifactParams(BaseModel):
    """The eight numeric knobs of the artifact detector.

    Thresholds are expressed in HSV percent (0-100). Kernel sizes are odd
    pixel widths; even or too small values are rejected rather than adjusted.
    Use :meth:`normalized` to get the forgiving behaviour of an interactive
    slider instead.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    brightness_threshold: float = Field(
        default=78,
        ge=0.0,
        le=100.0,
        description="Pixels brighter than this (HSV value %) may be artifacts"
    )
    saturation_threshold: float = Field(
        default=16,
        ge=0.0,
        le=100.0,
        description="Pixels less saturated than this (HSV saturation %) may be artifacts"
    )
    mean_saturation_threshold: float = Field(
        default=16,
        ge=0.0,
        le=100.0,
        description="Local mean saturation below which a candidate is marked"
    )
    black_pixel_brightness_threshold: float = Field(
        default=25,
        ge=0.0,
        le=100.0,
        description="Pixels darker than this count as black ink"
    )
    black_pixel_saturation_threshold: float = Field(
        default=31,
        ge=0.0,
        le=100.0,
        description="Black ink must also be less saturated than this"
    )
    structuring_element_size: int = Field(
        default=25,
        ge=3,
        le=_KERNEL_MAXIMUM["structuring_element_size"],
        description="Diameter of the circular neighbourhood protecting ink (must be odd)"
    )
    blur_kernel_size: int = Field(
        default=13,
        ge=3,
        le=_KERNEL_MAXIMUM["blur_kernel_size"],
        description="Box window used for the local mean saturation (must be odd)"
    )
    morph_opening_kernel_size: int = Field(
        default=3,
        ge=3,
        le=_KERNEL_MAXIMUM["morph_opening_kernel_size"],
        description="Square kernel of the morphological opening (must be odd)"
    )

    @field_validator(*KERNEL_FIELDS)
    @classmethod
    def validate_odd_kernel_size(cls, v):
        """Ensure kernel size is odd."""
        if v % 2 == 0:
            raise ValueError("Kernel size must be odd")
        return v

    @classmethod
    def normalized(cls, **values: Any) -> "ArtifactParams":
        """Build parameters after clamping values into their legal ranges.

        Thresholds are clamped to [0, 100]; kernel sizes are raised to at
        least 3, bumped to the next odd number and capped at their maximum.
        """
        fixed: Dict[str, Any] = {}
        for name, value in values.items():
            if name in THRESHOLD_FIELDS:
                value = min(max(float(value), 0.0), 100.0)
            elif name in KERNEL_FIELDS:
                value = max(int(value), 3)
                if value % 2 == 0:
                    value += 1
                value = min(value, _KERNEL_MAXIMUM[name])
            fixed[name] = value
        return cls(**fixed)

    def thresholds(self) -> Dict[str, float]:
        """Echo of every parameter, as reported in the statistics record."""
        return self.model_dump()


class DirectoryConfig(BaseModel):
    """Directory configuration for batch cleaning."""

    input_dir: str = Field(
        default="input/scans",
        description="Directory containing scanned images"
    )
    output_dir: str = Field(
        default="output/cleaned",
        description="Directory for cleaned (transparent artifact) images"
    )
    visualization_dir: str = Field(
        default="output/visualization",
        description="Directory for red/blue/green debug visualizations"
    )
    stats_dir: str = Field(
        default="output/stats",
        description="Directory for per-image statistics JSON files"
    )
    whitelist_dir: Optional[str] = Field(
        default=None,
        description="Directory holding manual whitelist masks, if any"
    )

    @field_validator("input_dir", "output_dir", "visualization_dir", "stats_dir")
    @classmethod
    def validate_directory_path(cls, v):
        """Validate directory path format."""
        if not v or not isinstance(v, str):
            raise ValueError("Directory path must be a non-empty string")
        return v.replace('\\', '/')


class OutputConfig(BaseModel):
    """What the batch runner writes for every image."""

    cleaned_suffix: str = Field(
        default="_cleaned.png",
        description="Suffix of the cleaned image file (PNG keeps transparency)"
    )
    visualization_suffix: str = Field(
        default="_visualization.png",
        description="Suffix of the visualization image file"
    )
    stats_suffix: str = Field(
        default="_stats.json",
        description="Suffix of the statistics file"
    )
    whitelist_suffix: str = Field(
        default="_whitelist.png",
        description="Suffix identifying a manual whitelist mask for an image"
    )
    save_visualization: bool = Field(
        default=True,
        description="Whether to write the visualization image"
    )
    save_stats: bool = Field(
        default=True,
        description="Whether to write the statistics JSON"
    )
    save_debug_masks: bool = Field(
        default=False,
        description="Whether to write intermediate masks next to the outputs"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Base logging level"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional log file path"
    )
    use_rich: bool = Field(
        default=True,
        description="Whether to use rich console output"
    )
    include_performance: bool = Field(
        default=True,
        description="Whether to include performance logging"
    )
    format_style: str = Field(
        default="detailed",
        pattern="^(simple|detailed|minimal)$",
        description="Logging format style"
    )


class Config(BaseModel):
    """Main configuration model for the scan cleaner."""

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
        use_enum_values=True,
    )

    params: ArtifactParams = Field(
        default_factory=ArtifactParams,
        description="Artifact detection parameters"
    )
    directories: DirectoryConfig = Field(
        default_factory=DirectoryConfig,
        description="Directory configuration"
    )
    output: OutputConfig = Field(
        default_factory=OutputConfig,
        description="Output configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration"
    )
    workers: int = Field(
        default=1,
        ge=1,
        description="Worker processes used for batch cleaning"
    )

    version: str = Field(
        default="1.0.0",
        description="Configuration version"
    )
    description: Optional[str] = Field(
        default=None,
        description="Configuration description"
    )

    def create_output_directories(self) -> None:
        """Create all output directories."""
        from pathlib import Path

        dirs = [self.directories.output_dir]
        if self.output.save_visualization:
            dirs.append(self.directories.visualization_dir)
        if self.output.save_stats:
            dirs.append(self.directories.stats_dir)
        for directory in dirs:
            Path(directory).mkdir(parents=True, exist_ok=True)
