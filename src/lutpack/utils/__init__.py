"""
lutpack Utilities Package
Logging setup and configuration file handling.
"""

from .config_file import ConfigFileManager, get_config_manager
from .logging import (
    LogConfig,
    LutpackLogger,
    configure_logging,
    configure_from_cli,
    get_logger,
)

__all__ = [
    'ConfigFileManager',
    'get_config_manager',
    'LogConfig',
    'LutpackLogger',
    'configure_logging',
    'configure_from_cli',
    'get_logger',
]
