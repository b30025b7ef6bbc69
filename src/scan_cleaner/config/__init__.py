"""
Configuration system with Pydantic models and validation.

Provides the processing parameter record plus the batch, output and
logging settings, loadable from JSON, YAML or TOML files.
"""

from .models import (
    ArtifactParams,
    Config,
    DirectoryConfig,
    OutputConfig,
    LoggingConfig,
)
from .loader import (
    load_config,
    load_config_from_dict,
    params_from_dict,
    save_config,
    get_default_config,
)

__all__ = [
    # Configuration models
    "ArtifactParams",
    "Config",
    "DirectoryConfig",
    "OutputConfig",
    "LoggingConfig",
    # Configuration loading
    "load_config",
    "load_config_from_dict",
    "params_from_dict",
    "save_config",
    "get_default_config",
]
