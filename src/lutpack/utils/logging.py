"""Structured logging for lutpack.

Every lutpack module logs through ``logging.getLogger(__name__)``, so all
records end up under the ``lutpack`` logger. This module configures that
logger once per process:

- ``text`` output for terminals, ``json`` output (one object per line) for
  log collectors
- an optional rotating log file next to the console handler
- per-component levels, e.g. ``{"decoders": "DEBUG"}`` for ``lutpack.decoders``

Settings come from the ``logging:`` section of the config files, with the
``--log-level``, ``--log-format`` and ``--log-file`` flags applied on top:

    >>> from lutpack.utils.logging import LogConfig, configure_logging, get_logger
    >>> configure_logging(LogConfig(log_level="INFO", log_format="json"))
    >>> get_logger("cli").info("Packed LUT written", size=33)
"""

import json
import logging
import sys
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["text", "json"]

ROOT_LOGGER_NAME = "lutpack"
VALID_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
LOG_FORMATS = ("text", "json")


def _check_level(level: str, what: str) -> None:
    if not isinstance(level, str) or level.upper() not in VALID_LEVELS:
        raise ValueError(f"Invalid {what} '{level}'. Must be one of: {sorted(VALID_LEVELS)}")


@dataclass
class LogConfig:
    """Logging settings for the ``lutpack`` logger tree.

    Attributes:
        log_level: Level of the ``lutpack`` logger and its handlers
        log_format: 'text' or 'json'
        log_file: Also write records to this file, rotated by size
        component_levels: Levels for child loggers, keyed by the name below
            ``lutpack`` (e.g. 'decoders', 'decoders.cube', 'cli')
        max_file_size_mb: Rotate the log file at this size
        backup_count: Rotated files to keep
        include_timestamp: Prefix text lines with the time
        include_source: Add file and line of the logging call
    """

    log_level: LogLevel = "INFO"
    log_format: LogFormat = "text"
    log_file: Optional[str] = None
    component_levels: Dict[str, LogLevel] = field(default_factory=dict)
    max_file_size_mb: int = 10
    backup_count: int = 5
    include_timestamp: bool = True
    include_source: bool = False

    def __post_init__(self) -> None:
        _check_level(self.log_level, "log_level")
        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Invalid log_format '{self.log_format}'. Must be 'text' or 'json'")
        for component, level in self.component_levels.items():
            _check_level(level, f"log level for component '{component}'")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LogConfig":
        """Create a LogConfig from a mapping; missing or None values keep their defaults."""
        known = {
            k: v for k, v in data.items()
            if k in cls.__dataclass_fields__ and v is not None
        }
        return cls(**known)

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.__dataclass_fields__}


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Keys are timestamp (UTC, ISO 8601), level, component (last part of the
    logger name) and message, followed by any structured fields passed
    through ``LutpackLogger``.
    """

    def __init__(self, include_source: bool = False) -> None:
        super().__init__()
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "component": record.name.rsplit(".", 1)[-1],
            "message": record.getMessage(),
        }
        if self.include_source:
            entry["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }
        entry.update(getattr(record, "extra_fields", None) or {})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


class TextFormatter(logging.Formatter):
    """``2026-10-17 10:30:45 | INFO     | lutpack.decoders.base | lutSize: 33``

    Structured fields are appended as ``[key=value, ...]``.
    """

    def __init__(self, include_timestamp: bool = True, include_source: bool = False) -> None:
        fmt = "%(levelname)-8s | %(name)-12s | %(message)s"
        if include_timestamp:
            fmt = "%(asctime)s | " + fmt
        super().__init__(fmt=fmt, datefmt="%Y-%m-%d %H:%M:%S")
        self.include_source = include_source

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            message += " [" + ", ".join(f"{k}={v}" for k, v in extra_fields.items()) + "]"
        if self.include_source:
            message += f" ({record.filename}:{record.lineno})"
        return message


class LutpackLogger(logging.LoggerAdapter):
    """Logger adapter whose keyword arguments become structured fields.

    ``get_logger("cli").info("Packed LUT written", size=33)`` logs
    ``size=33`` as a separate field in both output formats.
    """

    PASSTHROUGH = ("exc_info", "stack_info", "stacklevel", "extra")

    def __init__(self, logger: logging.Logger) -> None:
        super().__init__(logger, {})

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        fields = {key: kwargs.pop(key) for key in list(kwargs) if key not in self.PASSTHROUGH}
        kwargs.setdefault("extra", {})["extra_fields"] = fields
        return msg, kwargs


_log_config: Optional[LogConfig] = None
_configured_loggers: Dict[str, LutpackLogger] = {}


def _make_formatter(config: LogConfig) -> logging.Formatter:
    if config.log_format == "json":
        return JSONFormatter(include_source=config.include_source)
    return TextFormatter(include_timestamp=config.include_timestamp, include_source=config.include_source)


def _make_handlers(config: LogConfig) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_path,
            maxBytes=config.max_file_size_mb * 1024 * 1024,
            backupCount=config.backup_count,
            encoding="utf-8",
        ))
    return handlers


def configure_logging(config: Optional[LogConfig] = None) -> None:
    """Install handlers on the ``lutpack`` logger, replacing earlier ones.

    Args:
        config: Logging settings. Defaults to ``LogConfig()``.
    """
    global _log_config

    config = config or LogConfig()
    _log_config = config
    level = getattr(logging, config.log_level.upper())

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    formatter = _make_formatter(config)
    for handler in _make_handlers(config):
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for component, component_level in config.component_levels.items():
        logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}").setLevel(component_level.upper())

    root_logger.propagate = False


def get_logger(component: str) -> LutpackLogger:
    """Structured logger for ``lutpack.<component>``, configuring defaults on first use."""
    if _log_config is None:
        configure_logging()

    logger = _configured_loggers.get(component)
    if logger is None:
        logger = LutpackLogger(logging.getLogger(f"{ROOT_LOGGER_NAME}.{component}"))
        _configured_loggers[component] = logger
    return logger


def configure_from_cli(
    log_level: Optional[str] = None,
    log_format: Optional[str] = None,
    log_file: Optional[str] = None,
    base: Optional[LogConfig] = None,
) -> LogConfig:
    """Apply the logging flags on top of ``base`` and configure logging.

    Flags left as None keep the value from ``base``, which is normally
    built from the config files. Without a base the level is WARNING.

    Returns:
        The LogConfig that was applied
    """
    config = base or LogConfig(log_level="WARNING")

    overrides: Dict[str, Any] = {}
    if log_level:
        overrides["log_level"] = log_level.upper()
    if log_format in LOG_FORMATS:
        overrides["log_format"] = log_format
    if log_file:
        overrides["log_file"] = log_file

    config = replace(config, **overrides)
    configure_logging(config)
    return config


def get_cli_args_parser():
    """``(flags, options)`` pairs for the global logging arguments.

    Defaults are None so config file values apply unless a flag is given.
    """
    return [
        (
            ("--log-level",),
            {
                "type": str.upper,
                "choices": sorted(VALID_LEVELS),
                "default": None,
                "help": "Logging level (default: config file, else WARNING)",
            },
        ),
        (
            ("--log-format",),
            {
                "choices": list(LOG_FORMATS),
                "default": None,
                "help": "Logging format (default: config file, else text)",
            },
        ),
        (
            ("--log-file",),
            {
                "default": None,
                "help": "Also write logs to this file",
            },
        ),
    ]
