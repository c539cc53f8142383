"""
Path Resolver Module

String-level path helpers for the virtual file system. These never
consult the inode table: ``.`` and ``..`` inside a path handed to the
VFS are resolved by walking inodes, so the helpers here only split,
join and display paths.

Author: YSNRFD
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import List, Tuple


@dataclass
class ParsedPath:
    """A parsed path with its components."""
    is_absolute: bool
    components: List[str]
    
    def __str__(self) -> str:
        if self.is_absolute:
            return '/' + '/'.join(self.components)
        return '/'.join(self.components) if self.components else '.'


class PathResolver:
    """
    Splits and manipulates filesystem paths.
    
    Handles:
    - Absolute and relative paths
    - Parent/name splitting for create operations
    - Home directory (~) expansion
    - Lexical normalization for display
    """
    
    @staticmethod
    def parse(path: str) -> ParsedPath:
        """
        Parse a path into components.
        
        Empty components (from repeated or trailing slashes) are
        dropped; ``.`` and ``..`` are kept for the inode walk.
        """
        is_absolute = path.startswith('/')
        components = [c for c in path.split('/') if c]
        return ParsedPath(is_absolute=is_absolute, components=components)
    
    @staticmethod
    def normalize(path: str) -> str:
        """
        Lexically normalize a path by folding . and ..
        
        Used only for display and for names that never reach the VFS;
        symlinks make this unsound for lookups.
        """
        parsed = PathResolver.parse(path)
        
        result: List[str] = []
        
        for component in parsed.components:
            if component == '.':
                continue
            if component == '..':
                if result and result[-1] != '..':
                    result.pop()
                elif not parsed.is_absolute:
                    result.append(component)
            else:
                result.append(component)
        
        if parsed.is_absolute:
            return '/' + '/'.join(result)
        return '/'.join(result) if result else '.'
    
    @staticmethod
    def join(*paths: str) -> str:
        """
        Join path components without normalizing them.
        
        A later absolute component replaces everything before it.
        """
        if not paths:
            return '.'
        
        result = paths[0]
        
        for path in paths[1:]:
            if not path:
                continue
            if path.startswith('/'):
                result = path
            elif result.endswith('/'):
                result = result + path
            else:
                result = result + '/' + path
        
        return result
    
    @staticmethod
    def split_parent(path: str) -> Tuple[str, str]:
        """
        Split a path into the parent path and the final name.
        
        Args:
            path: Path string ("a", "/a/b", "a/b/", "/")
        
        Returns:
            Tuple of (parent, name); parent is '.' for a bare name and
            '/' for a top-level absolute path. The name is empty for '/'.
        """
        stripped = path.rstrip('/')
        if not stripped:
            return ('/', '') if path.startswith('/') else ('.', '')
        
        parent, sep, name = stripped.rpartition('/')
        if not sep:
            return ('.', name)
        return (parent or '/', name)
    
    @staticmethod
    def dirname(path: str) -> str:
        """Get the directory portion of a path, like dirname(1)."""
        stripped = path.rstrip('/')
        if not stripped:
            return '/' if path.startswith('/') else '.'
        if '/' not in stripped:
            return '.'
        return stripped.rsplit('/', 1)[0].rstrip('/') or '/'
    
    @staticmethod
    def basename(path: str) -> str:
        """Get the final component of a path, like basename(1)."""
        stripped = path.rstrip('/')
        if not stripped:
            return '/' if path.startswith('/') else ''
        return stripped.rsplit('/', 1)[-1]
    
    @staticmethod
    def is_absolute(path: str) -> bool:
        """Check if a path is absolute."""
        return path.startswith('/')
    
    @staticmethod
    def expand_home(path: str, home: str) -> str:
        """Expand a leading ``~`` to the given home directory."""
        if path == '~':
            return home
        if path.startswith('~/'):
            return PathResolver.join(home, path[2:])
        return path
