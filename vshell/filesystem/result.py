"""
Filesystem Result Module

Every VFS operation returns either ``Ok(value)`` or ``Err(error)``.
Callers branch on the shape (``isinstance`` or ``.is_ok``) before
touching the value; nothing in the filesystem raises for an ordinary
failure.

Author: YSNRFD
Version: 1.0.0
"""

import errno
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union


T = TypeVar('T')


class FsError(Enum):
    """Filesystem failure kinds, with the conventional Unix wording."""
    NOT_FOUND = (errno.ENOENT, "No such file or directory")
    NOT_A_DIRECTORY = (errno.ENOTDIR, "Not a directory")
    IS_A_DIRECTORY = (errno.EISDIR, "Is a directory")
    IS_A_SYMLINK = (errno.ELOOP, "Is a symbolic link")
    FILE_EXISTS = (errno.EEXIST, "File exists")
    DIRECTORY_NOT_EMPTY = (errno.ENOTEMPTY, "Directory not empty")
    SYMLINK_LOOP = (errno.ELOOP, "Too many levels of symbolic links")
    PERMISSION_DENIED = (errno.EACCES, "Permission denied")
    NOT_PERMITTED = (errno.EPERM, "Operation not permitted")
    INVALID_MODE = (errno.EINVAL, "Invalid mode")
    INVALID_ARGUMENT = (errno.EINVAL, "Invalid argument")
    OMITTING_DIRECTORY = (errno.EISDIR, "omitting directory")
    ROOT_REMOVAL = (errno.EBUSY, "Cannot remove root directory")
    SELF_COPY = (errno.EINVAL, "cannot copy a directory into itself")
    SELF_MOVE = (errno.EINVAL, "cannot move a directory into itself")
    
    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message


@dataclass(frozen=True)
class Ok(Generic[T]):
    """A successful filesystem result."""
    value: T
    
    @property
    def is_ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    """A failed filesystem result."""
    error: FsError
    
    @property
    def is_ok(self) -> bool:
        return False
    
    @property
    def message(self) -> str:
        return self.error.message
    
    @property
    def code(self) -> int:
        return self.error.code
    
    def __str__(self) -> str:
        return self.error.message


Result = Union[Ok[T], Err]
