"""Configuration file management for lutpack.

Supports loading configuration from:
1. User config: ~/.lutpack/config.yaml
2. Project config: .lutpack.yaml (in current directory)
3. CLI arguments (highest precedence)

Config files are merged with CLI taking precedence over project over user.
"""

import copy
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..config import DEGENERATE_DOMAIN_POLICIES, QUANTIZATION_RULES, DecoderConfig
from ..errors import ConfigurationError
from .logging import VALID_LEVELS, LogConfig


# Default configuration schema
CONFIG_SCHEMA = {
    "decoder": {
        "quantization": {"type": str, "choices": list(QUANTIZATION_RULES), "default": "nearest"},
        "max_lut_size": {"type": int, "range": (1, 4096), "default": 256},
        "default_mesh_bits": {"type": int, "range": (1, 32), "default": 12},
        "degenerate_domain": {"type": str, "choices": list(DEGENERATE_DOMAIN_POLICIES), "default": "error"},
        "encoding": {"type": str, "default": "utf-8"},
        "max_recorded_issues": {"type": int, "range": (0, 1_000_000), "default": 1000},
    },
    "logging": {
        "log_level": {"type": str, "choices": sorted(VALID_LEVELS), "default": "WARNING"},
        "log_format": {"type": str, "choices": ["text", "json"], "default": "text"},
        "log_file": {"type": str, "default": None},
        "component_levels": {"type": dict, "value_choices": sorted(VALID_LEVELS), "default": {}},
        "max_file_size_mb": {"type": int, "range": (1, 1024), "default": 10},
        "backup_count": {"type": int, "range": (0, 100), "default": 5},
        "include_timestamp": {"type": bool, "default": True},
        "include_source": {"type": bool, "default": False},
    },
}

# Default config file template
DEFAULT_CONFIG_TEMPLATE = """\
# lutpack Configuration File
# Location: ~/.lutpack/config.yaml or .lutpack.yaml (project-local)
#
# CLI arguments take precedence over config file values.
# Project-local config (.lutpack.yaml) overrides user config (~/.lutpack/config.yaml).

decoder:
  # How [0, 1] samples become 8-bit texels
  # Options: nearest (round half up), truncate
  quantization: nearest

  # Largest cube edge length accepted (LUT_3D_SIZE or .3dl axis row length)
  max_lut_size: 256

  # Bit depth assumed by .3dl files without a Mesh line (scale = 2 ** bits)
  default_mesh_bits: 12

  # DOMAIN_MIN == DOMAIN_MAX on a channel
  # Options: error (abort the decode), zero (write 0 for that channel)
  degenerate_domain: error

  # Text encoding of LUT files
  encoding: utf-8

  # Diagnostics kept per decode, later ones are only counted
  max_recorded_issues: 1000

logging:
  # Options: DEBUG, INFO, WARNING, ERROR, CRITICAL
  log_level: WARNING

  # Options: text, json
  log_format: text

  # log_file: ./logs/lutpack.log
  # max_file_size_mb: 10
  # backup_count: 5

  # Levels for parts of lutpack, e.g. decoders, decoders.cube, cli
  # component_levels:
  #   decoders: DEBUG

  include_timestamp: true
  include_source: false
"""


@dataclass
class ValidationError:
    """Represents a config validation error."""
    path: str
    message: str
    value: Any = None


@dataclass
class ConfigFileManager:
    """Manages configuration file loading, saving, and merging.

    Attributes:
        user_config_path: Path to user-level config file
        project_config_path: Path to project-local config file
        loaded_config: The merged configuration dictionary
    """

    user_config_path: Path = field(default_factory=lambda: Path.home() / ".lutpack" / "config.yaml")
    project_config_path: Path = field(default_factory=lambda: Path.cwd() / ".lutpack.yaml")
    loaded_config: Dict[str, Any] = field(default_factory=dict)
    _validation_errors: List[ValidationError] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Ensure paths are Path objects."""
        if not isinstance(self.user_config_path, Path):
            self.user_config_path = Path(self.user_config_path)
        if not isinstance(self.project_config_path, Path):
            self.project_config_path = Path(self.project_config_path)

    def load(self) -> Dict[str, Any]:
        """Load and merge configuration from all sources.

        Order of precedence (later overrides earlier):
        1. Built-in defaults
        2. User config (~/.lutpack/config.yaml)
        3. Project config (.lutpack.yaml)

        Returns:
            Merged configuration dictionary
        """
        self._validation_errors = []

        config: Dict[str, Any] = self._get_builtin_defaults()

        for path in (self.user_config_path, self.project_config_path):
            if path.exists():
                file_config = self._load_yaml_file(path)
                if file_config:
                    config = self._deep_merge(config, file_config)

        self._validate_config(config)

        self.loaded_config = config
        return config

    def _get_builtin_defaults(self) -> Dict[str, Any]:
        """Get built-in default configuration."""
        return {
            section: {key: copy.deepcopy(schema["default"]) for key, schema in fields.items()}
            for section, fields in CONFIG_SCHEMA.items()
        }

    def _load_yaml_file(self, path: Path) -> Optional[Dict[str, Any]]:
        """Load a YAML configuration file.

        Args:
            path: Path to the YAML file

        Returns:
            Parsed configuration dictionary, or None if loading fails
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self._validation_errors.append(
                ValidationError(path=str(path), message=f"YAML parsing error: {e}")
            )
            return None
        except OSError as e:
            self._validation_errors.append(
                ValidationError(path=str(path), message=f"Failed to read file: {e}")
            )
            return None

        if not isinstance(data, dict):
            self._validation_errors.append(
                ValidationError(path=str(path), message="Top level must be a mapping")
            )
            return None
        return data

    def _deep_merge(self, base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge two dictionaries, overlay takes precedence."""
        result = base.copy()

        for key, value in overlay.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result

    def _validate_config(self, config: Dict[str, Any]) -> None:
        """Validate configuration against schema."""
        for section, fields in CONFIG_SCHEMA.items():
            values = config.get(section)
            if not isinstance(values, dict):
                self._validation_errors.append(
                    ValidationError(path=section, message="Section must be a mapping", value=values)
                )
                continue

            for key in values:
                if key not in fields:
                    self._validation_errors.append(
                        ValidationError(path=f"{section}.{key}", message="Unknown setting", value=values[key])
                    )

            for key, schema in fields.items():
                value = values.get(key)
                if value is None:
                    continue

                expected_type = schema.get("type")
                # bool is an int subclass, only accept it for bool settings
                wrong_bool = isinstance(value, bool) and expected_type is not bool
                if expected_type and (not isinstance(value, expected_type) or wrong_bool):
                    self._validation_errors.append(
                        ValidationError(
                            path=f"{section}.{key}",
                            message=f"Expected {expected_type.__name__}, got {type(value).__name__}",
                            value=value,
                        )
                    )
                    continue

                choices = schema.get("choices")
                if choices and value not in choices:
                    self._validation_errors.append(
                        ValidationError(
                            path=f"{section}.{key}",
                            message=f"Invalid value. Must be one of: {choices}",
                            value=value,
                        )
                    )

                value_choices = schema.get("value_choices")
                if value_choices:
                    for name, item in value.items():
                        if not isinstance(item, str) or item.upper() not in value_choices:
                            self._validation_errors.append(
                                ValidationError(
                                    path=f"{section}.{key}.{name}",
                                    message=f"Invalid value. Must be one of: {value_choices}",
                                    value=item,
                                )
                            )

                value_range = schema.get("range")
                if value_range:
                    min_val, max_val = value_range
                    if not (min_val <= value <= max_val):
                        self._validation_errors.append(
                            ValidationError(
                                path=f"{section}.{key}",
                                message=f"Value must be between {min_val} and {max_val}",
                                value=value,
                            )
                        )

    def get_validation_errors(self) -> List[ValidationError]:
        """Get list of validation errors from last load."""
        return self._validation_errors

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get a configuration value by dot-notation path.

        Args:
            key_path: Dot-separated path (e.g., "decoder.max_lut_size")
            default: Default value if key not found
        """
        value: Any = self.loaded_config

        for key in key_path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def decoder_config(self, **overrides: Any) -> DecoderConfig:
        """Build a DecoderConfig from the loaded decoder section.

        Keyword arguments with a non-None value (typically CLI flags)
        take precedence over file values.

        Raises:
            ConfigurationError: If the loaded configuration did not validate
        """
        self._raise_on_errors()
        values = dict(self.loaded_config.get("decoder", {}))
        values.update({k: v for k, v in overrides.items() if v is not None})
        return DecoderConfig.from_dict(values)

    def log_config(self) -> LogConfig:
        """Build a LogConfig from the loaded logging section."""
        self._raise_on_errors()
        try:
            return LogConfig.from_dict(self.loaded_config.get("logging", {}))
        except ValueError as e:
            raise ConfigurationError(f"Invalid logging configuration: {e}") from e

    def _raise_on_errors(self) -> None:
        if self._validation_errors:
            details = "; ".join(f"{e.path}: {e.message}" for e in self._validation_errors)
            raise ConfigurationError(f"Invalid configuration: {details}")

    def init_config(self, target: str = "user", force: bool = False) -> Path:
        """Initialize a new configuration file with defaults.

        Args:
            target: "user" for ~/.lutpack/config.yaml,
                   "project" for .lutpack.yaml
            force: Overwrite an existing file

        Returns:
            Path to created config file
        """
        config_path = self.user_config_path if target == "user" else self.project_config_path

        if config_path.exists() and not force:
            raise ConfigurationError(f"Config file already exists: {config_path}")

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            f.write(DEFAULT_CONFIG_TEMPLATE)

        return config_path

    def show_config(self, as_yaml: bool = True) -> str:
        """Get string representation of current configuration.

        Args:
            as_yaml: If True, format as YAML. Otherwise, format as key=value pairs.
        """
        if as_yaml:
            return yaml.dump(self.loaded_config, default_flow_style=False, sort_keys=False)

        lines: List[str] = []
        self._flatten_config(self.loaded_config, "", lines)
        return "\n".join(lines)

    def _flatten_config(self, config: Dict[str, Any], prefix: str, lines: List[str]) -> None:
        """Flatten nested config to dot-notation lines."""
        for key, value in config.items():
            full_key = f"{prefix}.{key}" if prefix else key
            if isinstance(value, dict):
                self._flatten_config(value, full_key, lines)
            else:
                lines.append(f"{full_key}={value}")


def get_config_manager() -> ConfigFileManager:
    """Get a ConfigFileManager instance with loaded configuration."""
    manager = ConfigFileManager()
    manager.load()
    return manager
