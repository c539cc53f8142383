"""
VShell Exception Hierarchy

The filesystem and the command engine report failures as values, never
as exceptions. Exceptions are reserved for the conditions a session
cannot recover from on its own: a structurally corrupt snapshot handed
to the VFS, or an unusable configuration file.

Architecture:
    VShellError (Base)
    ├── FileSystemException
    │   └── SnapshotError
    └── ConfigException
        ├── ConfigError
        └── ConfigValidationError
"""

from .base import VShellError

from .fs_exceptions import (
    FileSystemException,
    SnapshotError,
)

from .config_exceptions import (
    ConfigException,
    ConfigError,
    ConfigValidationError,
)

__all__ = [
    "VShellError",
    # Filesystem exceptions
    "FileSystemException",
    "SnapshotError",
    # Configuration exceptions
    "ConfigException",
    "ConfigError",
    "ConfigValidationError",
]
