"""
Configuration Exceptions

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, Any

from .base import VShellError


class ConfigException(VShellError):
    """Base exception for configuration errors."""
    
    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code=error_code or 1000, context=context)


class ConfigError(ConfigException):
    """
    The configuration file cannot be read or parsed.
    
    Example:
        >>> raise ConfigError("Configuration file not found", path="vshell.json")
    """
    
    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if path:
            ctx["path"] = path
        super().__init__(message, error_code=1001, context=ctx)
        self.path = path


class ConfigValidationError(ConfigException):
    """A configuration key or value is invalid."""
    
    def __init__(
        self,
        message: str,
        key: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if key:
            ctx["key"] = key
        super().__init__(message, error_code=1002, context=ctx)
        self.key = key
