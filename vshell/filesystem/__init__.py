"""
VShell Filesystem Module

In-memory virtual filesystem:
- Inodes with Unix permission bits
- Path resolution through the inode tree
- Symbolic links with bounded resolution depth
- Snapshots for persistence and resets
"""

from .inode import Inode, FileType, Permission, ROOT_USER, format_mode, mode_to_octal
from .path_resolver import PathResolver, ParsedPath
from .result import Ok, Err, FsError, Result
from .snapshots import VFSSnapshot, stock_snapshot, STOCK_LAYOUTS
from .vfs import VirtualFileSystem, MAX_SYMLINK_DEPTH

__all__ = [
    'Inode',
    'FileType',
    'Permission',
    'ROOT_USER',
    'format_mode',
    'mode_to_octal',
    'PathResolver',
    'ParsedPath',
    'Ok',
    'Err',
    'FsError',
    'Result',
    'VFSSnapshot',
    'stock_snapshot',
    'STOCK_LAYOUTS',
    'VirtualFileSystem',
    'MAX_SYMLINK_DEPTH',
]
