"""
VShell - An in-memory Unix shell simulation

A tree-structured virtual filesystem with Unix permission semantics and
a command interpreter (pipes, redirection, substitution, compound
operators) that runs entirely in memory, plus the lab verification
primitives built on top of them. Standard library only.
"""

__version__ = "1.0.0"
__author__ = "YSNRFD"

from .filesystem.vfs import VirtualFileSystem
from .filesystem.snapshots import VFSSnapshot
from .shell.registry import CommandRegistry, create_default_registry
from .shell.executor import CommandExecutor
from .shell.session import ShellSession

__all__ = [
    'VirtualFileSystem',
    'VFSSnapshot',
    'CommandRegistry',
    'create_default_registry',
    'CommandExecutor',
    'ShellSession',
]
