"""
Reading and writing scan cleaner configuration files.

JSON, YAML and TOML files are read; JSON and YAML are written. String values
may reference environment variables as ``${NAME}`` or ``${NAME:default}``,
where ``SCAN_NAME`` takes precedence over ``NAME``.
"""

import json
import os
import re
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from .models import ArtifactParams, Config
from ..exceptions import ConfigurationError, InvalidParameterError

PathLike = Union[str, Path]

ENV_PREFIX = "SCAN_"
_ENV_REFERENCE = re.compile(r"\$\{(\w+)(?::([^}]*))?\}")


def _read_yaml(text: str) -> Any:
    return yaml.safe_load(text) or {}


_READERS: Dict[str, Callable[[str], Any]] = {
    ".json": json.loads,
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
    ".toml": tomllib.loads,
}
# Unknown suffixes are tried in this order.
_FALLBACK_READERS = (json.loads, _read_yaml, tomllib.loads)
_PARSE_ERRORS = (json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError)

_WRITERS: Dict[str, Callable[[Dict[str, Any]], str]] = {
    "json": lambda data: json.dumps(data, indent=2, ensure_ascii=False) + "\n",
    "yaml": lambda data: yaml.safe_dump(data, sort_keys=False, allow_unicode=True),
    "yml": lambda data: yaml.safe_dump(data, sort_keys=False, allow_unicode=True),
}


def load_config(config_path: PathLike) -> Config:
    """
    Load and validate a configuration file.

    The format follows the file suffix. Any other suffix is tried as JSON,
    then YAML, then TOML.

    Raises:
        ConfigurationError: If the file is missing, unparsable or invalid
    """
    path = Path(config_path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ConfigurationError("Configuration file not found", {"path": str(path)})
    except OSError as e:
        raise ConfigurationError(f"Cannot read configuration: {e}", {"path": str(path)})

    suffix = path.suffix.lower()
    readers = (_READERS[suffix],) if suffix in _READERS else _FALLBACK_READERS

    problem: Any = "empty file"
    for read in readers:
        try:
            data = read(text)
        except _PARSE_ERRORS as e:
            problem = e
            continue
        if isinstance(data, dict):
            return load_config_from_dict(_expand_env(data))
        problem = "top level is not a mapping"

    raise ConfigurationError(f"Cannot parse configuration: {problem}", {"path": str(path)})


def load_config_from_dict(config_data: Dict[str, Any]) -> Config:
    """
    Validate a configuration mapping.

    Raises:
        ConfigurationError: Listing every failing location; ``details["fields"]``
            holds the failing top-level sections
    """
    try:
        return Config(**config_data)
    except ValidationError as e:
        raise ConfigurationError(
            "Configuration validation failed:\n" + _format_errors(e),
            {"fields": _failing_fields(e)},
        )


def params_from_dict(values: Dict[str, Any]) -> ArtifactParams:
    """
    Build detection parameters from a plain mapping.

    Raises:
        InvalidParameterError: If a parameter is unknown or out of range;
            ``details["fields"]`` names the offending parameters
    """
    try:
        return ArtifactParams(**values)
    except ValidationError as e:
        raise InvalidParameterError(
            "Invalid detection parameters:\n" + _format_errors(e),
            {"fields": _failing_fields(e)},
        )


def save_config(config: Config, output_path: PathLike, format_type: Optional[str] = None) -> Path:
    """
    Write ``config`` as JSON or YAML (chosen from the suffix by default).

    Returns:
        The written path

    Raises:
        ConfigurationError: If the format is unsupported or the file cannot be written
    """
    path = Path(output_path)
    format_type = (format_type or path.suffix.lstrip(".")).lower()
    write = _WRITERS.get(format_type)
    if write is None:
        raise ConfigurationError(
            "Unsupported configuration format",
            {"format": format_type or "<none>", "supported": "json, yaml"},
        )

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(write(config.model_dump(mode="json")), encoding="utf-8")
    except OSError as e:
        raise ConfigurationError(f"Cannot write configuration: {e}", {"path": str(path)})
    return path


def get_default_config() -> Config:
    """Configuration with every default value."""
    return Config()


def _format_errors(error: ValidationError) -> str:
    return "\n".join(
        f"{' -> '.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in error.errors()
    )


def _failing_fields(error: ValidationError) -> List[str]:
    return sorted({str(err["loc"][0]) for err in error.errors() if err["loc"]})


def _expand_env(value: Any) -> Any:
    """Replace ``${NAME}`` / ``${NAME:default}`` references in every string."""
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, str):
        return _ENV_REFERENCE.sub(_env_value, value)
    return value


def _env_value(match: "re.Match[str]") -> str:
    name, default = match.group(1, 2)
    for candidate in (ENV_PREFIX + name, name):
        if candidate in os.environ:
            return os.environ[candidate]
    # unresolved references without a default stay as written
    return match.group(0) if default is None else default
