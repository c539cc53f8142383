"""
VShell Logger Module

Logging for the simulated shell session, layered on the standard
``logging`` package:
- Structured logging with contextual information
- Multiple log levels (DEBUG, INFO, NOTICE, WARNING, ERROR, CRITICAL)
- Optional file output
- In-memory session log buffer (security audit trail)
- Subsystem-specific loggers

Author: YSNRFD
Version: 1.0.0
"""

import logging
import sys
import threading
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Optional, Any, List


class LogLevel(IntEnum):
    """Log level enumeration with numeric values for comparison."""
    DEBUG = 10
    INFO = 20
    NOTICE = 25
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


logging.addLevelName(LogLevel.NOTICE, 'NOTICE')


class LogFormatter(logging.Formatter):
    """
    Log formatter for VShell.
    
    Provides formatted output with:
    - Timestamp with millisecond precision
    - Log level with color coding (if terminal supports it)
    - Subsystem identification
    - Structured context
    """
    
    # ANSI color codes for terminal output
    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
        'INFO': '\033[32m',       # Green
        'NOTICE': '\033[34m',     # Blue
        'WARNING': '\033[33m',    # Yellow
        'ERROR': '\033[31m',      # Red
        'CRITICAL': '\033[35m',   # Magenta
    }
    RESET = '\033[0m'
    
    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and self._supports_color()
    
    @staticmethod
    def _supports_color() -> bool:
        """Check if the terminal supports ANSI colors."""
        if not hasattr(sys.stderr, 'isatty'):
            return False
        return sys.stderr.isatty()
    
    def format(self, record: logging.LogRecord) -> str:
        """Format a log record."""
        timestamp = datetime.fromtimestamp(record.created).strftime(
            '%Y-%m-%d %H:%M:%S.%f'
        )[:-3]
        
        level = record.levelname
        
        if self.use_colors and level in self.COLORS:
            level_display = f"{self.COLORS[level]}{level:8s}{self.RESET}"
        else:
            level_display = f"{level:8s}"
        
        components = [f"[{timestamp}]", level_display]
        
        if hasattr(record, 'subsystem'):
            components.append(f"[{record.subsystem}]")
        
        components.append(str(record.getMessage()))
        
        if hasattr(record, 'context') and record.context:
            context_str = " ".join(f"{k}={v}" for k, v in record.context.items())
            components.append(f"{{{context_str}}}")
        
        message = " ".join(components)
        
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        
        return message


class SessionLogHandler(logging.Handler):
    """
    Keeps the most recent log records in memory.
    
    Lets a host application (or a test) inspect what the session
    did, in particular the permission refusals audited by the VFS.
    """
    
    def __init__(self, max_entries: int = 10000):
        super().__init__()
        self.max_entries = max_entries
        self._log_buffer: List[dict[str, Any]] = []
        self._lock = threading.Lock()
    
    def emit(self, record: logging.LogRecord) -> None:
        """Store log record in buffer."""
        log_entry = {
            'timestamp': record.created,
            'level': record.levelname,
            'message': record.getMessage(),
            'subsystem': getattr(record, 'subsystem', None),
            'context': getattr(record, 'context', {}),
        }
        
        with self._lock:
            self._log_buffer.append(log_entry)
            if len(self._log_buffer) > self.max_entries:
                self._log_buffer = self._log_buffer[-self.max_entries:]
    
    def get_logs(
        self,
        level: Optional[str] = None,
        subsystem: Optional[str] = None,
        limit: int = 100
    ) -> List[dict[str, Any]]:
        """Retrieve logs with optional filtering."""
        with self._lock:
            logs = self._log_buffer.copy()
        
        if level:
            logs = [l for l in logs if l['level'] == level]
        
        if subsystem:
            logs = [l for l in logs if l['subsystem'] == subsystem]
        
        return logs[-limit:]
    
    def clear(self) -> None:
        """Clear the log buffer."""
        with self._lock:
            self._log_buffer.clear()


class Logger:
    """
    Main logging class for VShell.
    
    One instance exists per subsystem name ('vfs', 'executor',
    'session', ...). All of them feed the ``vshell`` logger hierarchy.
    
    Example:
        >>> log = Logger('vfs')
        >>> log.notice("Permission denied", context={'path': '/root'})
    """
    
    _instances: dict[str, 'Logger'] = {}
    _lock = threading.Lock()
    _initialized = False
    _session_handler: Optional[SessionLogHandler] = None
    _global_level: int = LogLevel.WARNING
    
    def __new__(cls, subsystem: str = 'session') -> 'Logger':
        """Get or create a logger for a subsystem."""
        with cls._lock:
            if subsystem not in cls._instances:
                instance = super().__new__(cls)
                instance._subsystem = subsystem
                instance._logger = logging.getLogger(f'vshell.{subsystem}')
                cls._instances[subsystem] = instance
            return cls._instances[subsystem]
    
    @classmethod
    def initialize(
        cls,
        level: int = LogLevel.WARNING,
        log_file: Optional[str] = None,
        use_colors: bool = True,
        console_output: bool = True
    ) -> None:
        """
        Initialize the logging system.
        
        Safe to call more than once; only the first call configures
        handlers.
        
        Args:
            level: Minimum log level to capture
            log_file: Optional file path for log output
            use_colors: Whether to use ANSI colors in console output
            console_output: Whether to attach a stderr handler
        """
        with cls._lock:
            if cls._initialized:
                return
            
            cls._global_level = level
            
            cls._session_handler = SessionLogHandler()
            cls._session_handler.setLevel(LogLevel.DEBUG)
            
            root_logger = logging.getLogger('vshell')
            root_logger.setLevel(min(level, LogLevel.NOTICE))
            root_logger.addHandler(cls._session_handler)
            
            if console_output:
                console_handler = logging.StreamHandler(sys.stderr)
                console_handler.setLevel(level)
                console_handler.setFormatter(LogFormatter(use_colors=use_colors))
                root_logger.addHandler(console_handler)
            
            if log_file:
                file_path = Path(log_file)
                file_path.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_file)
                file_handler.setLevel(level)
                file_handler.setFormatter(LogFormatter(use_colors=False))
                root_logger.addHandler(file_handler)
            
            cls._initialized = True
    
    @classmethod
    def get_session_logs(
        cls,
        level: Optional[str] = None,
        subsystem: Optional[str] = None,
        limit: int = 100
    ) -> List[dict[str, Any]]:
        """Get logs from the session log buffer."""
        if cls._session_handler is None:
            return []
        return cls._session_handler.get_logs(level=level, subsystem=subsystem, limit=limit)
    
    def _log(
        self,
        level: int,
        message: str,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        extra = {
            'subsystem': self._subsystem,
            'context': context or {},
        }
        self._logger.log(level, message, extra=extra)
    
    def debug(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        """Log a debug message."""
        self._log(LogLevel.DEBUG, message, context)
    
    def info(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        """Log an info message."""
        self._log(LogLevel.INFO, message, context)
    
    def notice(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        """Log a notice message."""
        self._log(LogLevel.NOTICE, message, context)
    
    def warning(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        """Log a warning message."""
        self._log(LogLevel.WARNING, message, context)
    
    def error(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        """Log an error message."""
        self._log(LogLevel.ERROR, message, context)
    
    def critical(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        """Log a critical message."""
        self._log(LogLevel.CRITICAL, message, context)
    
    def exception(
        self,
        message: str,
        exc: Optional[BaseException] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        """Log an exception with stack trace."""
        self._logger.error(
            message,
            exc_info=exc if exc is not None else True,
            extra={
                'subsystem': self._subsystem,
                'context': context or {},
            }
        )
    
    def security(self, event: str, context: Optional[dict[str, Any]] = None) -> None:
        """Record a security audit event (permission refusals and the like)."""
        self._log(LogLevel.NOTICE, event, context)


def get_logger(subsystem: str) -> Logger:
    """
    Get a logger for the specified subsystem.
    
    Args:
        subsystem: Name of the subsystem (e.g., 'vfs', 'executor')
    
    Returns:
        Logger instance for the subsystem
    """
    return Logger(subsystem)
