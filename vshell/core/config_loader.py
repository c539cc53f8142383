"""
VShell Configuration Loader

Configuration management for a shell session:
- JSON configuration file loading
- Configuration validation
- Default value handling
- Runtime configuration updates
- Type-safe access to configuration values

Author: YSNRFD
Version: 1.0.0
"""

import json
import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from vshell.exceptions import ConfigError, ConfigValidationError


_LOG_LEVELS = ('DEBUG', 'INFO', 'NOTICE', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class FilesystemConfig:
    """Filesystem configuration settings."""
    umask: str = "022"
    initial_snapshot: str = "default"


@dataclass
class ShellConfig:
    """Shell configuration settings."""
    hostname: str = "the-terminal"
    prompt: str = "{user}@{host}:{cwd}{mark} "
    history_size: int = 1000


@dataclass
class UsersConfig:
    """User configuration settings."""
    default_user: str = "guest"
    home_prefix: str = "/home"


@dataclass
class LoggingConfig:
    """Logging configuration settings."""
    level: str = "WARNING"
    log_file: Optional[str] = None
    console_output: bool = True


@dataclass
class Config:
    """
    Main configuration container.
    
    Holds all configuration settings for a session.
    """
    filesystem: FilesystemConfig = field(default_factory=FilesystemConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)
    users: UsersConfig = field(default_factory=UsersConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigLoader:
    """
    Configuration loader and manager.
    
    Handles loading configuration from JSON files, validating
    settings, and providing runtime configuration access.
    
    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load('vshell.json')
        >>> print(config.shell.hostname)
        the-terminal
    """
    
    _instance: Optional['ConfigLoader'] = None
    _lock = threading.Lock()
    
    def __new__(cls) -> 'ConfigLoader':
        """Singleton pattern for configuration access."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._config = Config()
                cls._instance._loaded = False
            return cls._instance
    
    def load(self, config_path: str) -> Config:
        """
        Load configuration from a JSON file.
        
        Args:
            config_path: Path to the configuration file
        
        Returns:
            Config object with loaded settings
        
        Raises:
            ConfigError: If the file cannot be loaded or parsed
            ConfigValidationError: If a value is out of range
        """
        path = Path(config_path)
        
        if not path.exists():
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                path=config_path
            )
        
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in configuration file: {e}",
                path=config_path
            )
        except OSError as e:
            raise ConfigError(
                f"Cannot read configuration file: {e}",
                path=config_path
            )
        
        config = self.parse(data)
        self._config = config
        self._loaded = True
        return config
    
    def parse(self, data: dict[str, Any]) -> Config:
        """Parse configuration data into a validated Config object."""
        if not isinstance(data, dict):
            raise ConfigValidationError("Configuration root must be an object")
        
        config = Config()
        
        if 'filesystem' in data:
            fs_data = data['filesystem']
            config.filesystem = FilesystemConfig(
                umask=str(fs_data.get('umask', config.filesystem.umask)),
                initial_snapshot=fs_data.get('initial_snapshot', config.filesystem.initial_snapshot),
            )
        
        if 'shell' in data:
            shell_data = data['shell']
            config.shell = ShellConfig(
                hostname=shell_data.get('hostname', config.shell.hostname),
                prompt=shell_data.get('prompt', config.shell.prompt),
                history_size=shell_data.get('history_size', config.shell.history_size),
            )
        
        if 'users' in data:
            users_data = data['users']
            config.users = UsersConfig(
                default_user=users_data.get('default_user', config.users.default_user),
                home_prefix=users_data.get('home_prefix', config.users.home_prefix),
            )
        
        if 'logging' in data:
            log_data = data['logging']
            config.logging = LoggingConfig(
                level=str(log_data.get('level', config.logging.level)).upper(),
                log_file=log_data.get('log_file', config.logging.log_file),
                console_output=log_data.get('console_output', config.logging.console_output),
            )
        
        self._validate(config)
        return config
    
    @staticmethod
    def _validate(config: Config) -> None:
        if not re.fullmatch(r'[0-7]{3,4}', config.filesystem.umask):
            raise ConfigValidationError(
                f"Invalid umask: {config.filesystem.umask}",
                key='filesystem.umask'
            )
        if not isinstance(config.shell.history_size, int) or config.shell.history_size < 0:
            raise ConfigValidationError(
                f"Invalid history size: {config.shell.history_size}",
                key='shell.history_size'
            )
        if config.logging.level not in _LOG_LEVELS:
            raise ConfigValidationError(
                f"Invalid log level: {config.logging.level}",
                key='logging.level'
            )
    
    @property
    def config(self) -> Config:
        """Get the current configuration."""
        if not self._loaded:
            return Config()
        return self._config
    
    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-notation key.
        
        Args:
            key: Dot-notation key (e.g., 'shell.hostname')
            default: Default value if key not found
        
        Returns:
            Configuration value or default
        """
        obj: Any = self.config
        
        for part in key.split('.'):
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                return default
        
        return obj
    
    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value at runtime.
        
        Args:
            key: Dot-notation key (e.g., 'filesystem.umask')
            value: Value to set
        
        Note:
            This modifies configuration at runtime but does not
            persist changes to disk.
        """
        parts = key.split('.')
        if not self._loaded:
            self._loaded = True
        obj: Any = self._config
        
        for part in parts[:-1]:
            if hasattr(obj, part):
                obj = getattr(obj, part)
            else:
                raise ConfigValidationError(f"Invalid configuration key: {key}", key=key)
        
        final_key = parts[-1]
        if not hasattr(obj, final_key):
            raise ConfigValidationError(f"Invalid configuration key: {key}", key=key)
        setattr(obj, final_key, value)
    
    def reset(self) -> None:
        """Drop any loaded configuration and return to defaults."""
        self._config = Config()
        self._loaded = False
    
    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary."""
        def dataclass_to_dict(obj: Any) -> Any:
            if hasattr(obj, '__dataclass_fields__'):
                return {
                    k: dataclass_to_dict(v)
                    for k, v in obj.__dict__.items()
                }
            elif isinstance(obj, list):
                return [dataclass_to_dict(item) for item in obj]
            elif isinstance(obj, dict):
                return {k: dataclass_to_dict(v) for k, v in obj.items()}
            else:
                return obj
        
        return dataclass_to_dict(self.config)


def get_config() -> Config:
    """
    Get the global configuration instance.
    
    Returns:
        Config object with current settings
    """
    loader = ConfigLoader()
    return loader.config
