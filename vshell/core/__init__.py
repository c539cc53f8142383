"""
VShell Core Module

Session-wide infrastructure:
- Configuration Loader
"""

from .config_loader import (
    ConfigLoader,
    Config,
    FilesystemConfig,
    ShellConfig,
    UsersConfig,
    LoggingConfig,
    get_config,
)

__all__ = [
    'ConfigLoader',
    'Config',
    'FilesystemConfig',
    'ShellConfig',
    'UsersConfig',
    'LoggingConfig',
    'get_config',
]
