"""
Filesystem Exceptions

Raised only when the VFS is handed data it cannot safely adopt.
Ordinary filesystem failures (missing paths, permission refusals)
are returned as ``Err`` values by the VFS instead.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, Any

from .base import VShellError


class FileSystemException(VShellError):
    """
    Base exception for filesystem errors.
    
    Attributes:
        message: Human-readable error description
        error_code: Numeric error code for programmatic handling
        context: Additional context about the error
    """
    
    def __init__(
        self,
        message: str,
        error_code: Optional[int] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code=error_code or 4000, context=context)


class SnapshotError(FileSystemException):
    """
    A snapshot is structurally corrupt.
    
    Raised while decoding a snapshot whose root is missing, whose
    inodes are malformed, or whose directory tree violates the
    single-parent invariant.
    
    Example:
        >>> raise SnapshotError("root inode missing", inode_id="abc")
    """
    
    def __init__(
        self,
        reason: str,
        inode_id: Optional[str] = None,
        context: Optional[dict[str, Any]] = None
    ) -> None:
        ctx = context or {}
        if inode_id is not None:
            ctx["inode_id"] = inode_id
        super().__init__(
            message=f"Corrupt snapshot: {reason}",
            error_code=4010,
            context=ctx
        )
        self.reason = reason
        self.inode_id = inode_id
