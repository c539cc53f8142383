"""
Inode Module

Implements the inode abstraction for the virtual file system.
Inodes store metadata about files, directories and symbolic links.

Author: YSNRFD
Version: 1.0.0
"""

import re
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Optional, Any, List


ROOT_USER = 'root'


class FileType(Enum):
    """Types of files."""
    FILE = 'file'
    DIRECTORY = 'directory'
    SYMLINK = 'symlink'


class Permission(IntFlag):
    """File permission bits."""
    # Special bits
    SETUID = 0o4000
    SETGID = 0o2000
    STICKY = 0o1000
    
    # Owner permissions
    OWNER_READ = 0o400
    OWNER_WRITE = 0o200
    OWNER_EXEC = 0o100
    
    # Group permissions
    GROUP_READ = 0o040
    GROUP_WRITE = 0o020
    GROUP_EXEC = 0o010
    
    # Other permissions
    OTHER_READ = 0o004
    OTHER_WRITE = 0o002
    OTHER_EXEC = 0o001
    
    # Default permissions (before umask)
    DEFAULT_FILE = 0o644
    DEFAULT_DIR = 0o755


# Owner-class bit for each access kind; shifted right by 3 for group, 6 for others.
_ACCESS_BITS = {
    'read': Permission.OWNER_READ,
    'write': Permission.OWNER_WRITE,
    'execute': Permission.OWNER_EXEC,
}

_CLASSES = (('owner', 6), ('group', 3), ('others', 0))

_OCTAL_RE = re.compile(r'[0-7]{3,4}')


def parse_octal_mode(mode: str, allow_special: bool = True) -> Optional[int]:
    """
    Parse an octal mode string like "755" or "1777".
    
    Args:
        mode: Octal digits
        allow_special: Accept a fourth, leading special-bits digit
    
    Returns:
        The mode as an integer, or None if the string is not valid
    """
    if not isinstance(mode, str):
        return None
    if allow_special:
        if not _OCTAL_RE.fullmatch(mode):
            return None
    elif not re.fullmatch(r'[0-7]{3}', mode):
        return None
    return int(mode, 8)


def mode_to_octal(mode: int) -> str:
    """Render a mode as "755", or "1755" when special bits are set."""
    special = (mode >> 9) & 0o7
    base = f"{mode & 0o777:03o}"
    return f"{special}{base}" if special else base


def format_mode(mode: int) -> str:
    """Render a mode as "rwxr-xr-x", with s/S/t/T for special bits."""
    chars = []
    for cls, shift in _CLASSES:
        bits = (mode >> shift) & 0o7
        chars.append('r' if bits & 4 else '-')
        chars.append('w' if bits & 2 else '-')
        chars.append('x' if bits & 1 else '-')
    if mode & Permission.SETUID:
        chars[2] = 's' if chars[2] == 'x' else 'S'
    if mode & Permission.SETGID:
        chars[5] = 's' if chars[5] == 'x' else 'S'
    if mode & Permission.STICKY:
        chars[8] = 't' if chars[8] == 'x' else 'T'
    return ''.join(chars)


def mode_to_permissions(mode: int) -> dict[str, Any]:
    """Expand a mode into the owner/group/others x read/write/execute form."""
    perms: dict[str, Any] = {}
    for cls, shift in _CLASSES:
        bits = (mode >> shift) & 0o7
        perms[cls] = {
            'read': bool(bits & 4),
            'write': bool(bits & 2),
            'execute': bool(bits & 1),
        }
    perms['sticky'] = bool(mode & Permission.STICKY)
    perms['setuid'] = bool(mode & Permission.SETUID)
    perms['setgid'] = bool(mode & Permission.SETGID)
    return perms


def permissions_to_mode(perms: dict[str, Any]) -> int:
    """Inverse of mode_to_permissions."""
    mode = 0
    for cls, shift in _CLASSES:
        bits = perms[cls]
        value = (4 if bits['read'] else 0) | (2 if bits['write'] else 0) | (1 if bits['execute'] else 0)
        mode |= value << shift
    if perms.get('sticky'):
        mode |= Permission.STICKY
    if perms.get('setuid'):
        mode |= Permission.SETUID
    if perms.get('setgid'):
        mode |= Permission.SETGID
    return mode


def new_inode_id() -> str:
    """Generate a fresh, opaque inode id."""
    return str(uuid.uuid4())


@dataclass
class Inode:
    """
    Inode - Index Node.
    
    Stores metadata about a file, directory or symbolic link:
    - Type and permissions
    - Owner and group
    - Size and timestamps
    - Type-specific payload: ``content`` for files, ``children``
      (ordered inode ids) for directories, ``target`` for symlinks
    
    ``parent_id`` is a back-reference maintained by the VFS. It does
    not own the parent and is never serialized; it is rebuilt from the
    directories' ``children`` lists when a snapshot is loaded.
    """
    
    id: str
    type: FileType
    name: str
    mode: int = Permission.DEFAULT_FILE
    owner_id: str = ROOT_USER
    group_id: str = ROOT_USER
    size: int = 0
    created_at: float = field(default_factory=time.time)
    modified_at: float = field(default_factory=time.time)
    
    content: Optional[str] = None
    children: Optional[List[str]] = None
    target: Optional[str] = None
    
    parent_id: Optional[str] = field(default=None, compare=False, repr=False)
    
    def __post_init__(self):
        if self.type == FileType.FILE and self.content is None:
            self.content = ''
        if self.type == FileType.DIRECTORY and self.children is None:
            self.children = []
        if self.type == FileType.FILE:
            self.size = len(self.content.encode('utf-8'))
    
    @property
    def is_directory(self) -> bool:
        return self.type == FileType.DIRECTORY
    
    @property
    def is_file(self) -> bool:
        return self.type == FileType.FILE
    
    @property
    def is_symlink(self) -> bool:
        return self.type == FileType.SYMLINK
    
    def has_permission(self, user_id: str, access: str) -> bool:
        """
        Check if a user has read, write or execute access.
        
        Args:
            user_id: Acting user
            access: 'read', 'write' or 'execute'
        
        Returns:
            True if permission is granted
        """
        # Root has all permissions
        if user_id == ROOT_USER:
            return True
        
        bit = _ACCESS_BITS[access]
        
        if user_id == self.owner_id:
            return (self.mode & bit) != 0
        # Groups are modelled as the user's personal group
        elif user_id == self.group_id:
            return (self.mode & (bit >> 3)) != 0
        else:
            return (self.mode & (bit >> 6)) != 0
    
    def can_read(self, user_id: str) -> bool:
        return self.has_permission(user_id, 'read')
    
    def can_write(self, user_id: str) -> bool:
        return self.has_permission(user_id, 'write')
    
    def can_execute(self, user_id: str) -> bool:
        return self.has_permission(user_id, 'execute')
    
    @property
    def sticky(self) -> bool:
        return bool(self.mode & Permission.STICKY)
    
    @property
    def octal_mode(self) -> str:
        return mode_to_octal(self.mode)
    
    def chmod(self, mode: int) -> None:
        """Change permission mode."""
        self.mode = mode & 0o7777
        self.modified_at = time.time()
    
    def chown(self, owner_id: str, group_id: Optional[str] = None) -> None:
        """Change owner and (optionally) group."""
        self.owner_id = owner_id
        if group_id is not None:
            self.group_id = group_id
        self.modified_at = time.time()
    
    def touch(self) -> None:
        """Update the modification time."""
        self.modified_at = time.time()
    
    def set_content(self, content: str) -> None:
        """Replace file content, keeping ``size`` in bytes."""
        self.content = content
        self.size = len(content.encode('utf-8'))
        self.modified_at = time.time()
    
    # Directory operations
    
    def add_child(self, child_id: str) -> None:
        """Append a child inode id."""
        if not self.is_directory:
            raise ValueError("Not a directory")
        self.children.append(child_id)
        self.modified_at = time.time()
    
    def remove_child(self, child_id: str) -> None:
        """Drop a child inode id if present."""
        if not self.is_directory:
            raise ValueError("Not a directory")
        if child_id in self.children:
            self.children.remove(child_id)
            self.modified_at = time.time()
    
    def copy(self) -> 'Inode':
        """Independent copy, including the parent back-reference."""
        clone = Inode(
            id=self.id,
            type=self.type,
            name=self.name,
            mode=self.mode,
            owner_id=self.owner_id,
            group_id=self.group_id,
            size=self.size,
            created_at=self.created_at,
            modified_at=self.modified_at,
            content=self.content,
            children=list(self.children) if self.children is not None else None,
            target=self.target,
        )
        clone.parent_id = self.parent_id
        return clone
    
    def to_dict(self) -> dict[str, Any]:
        """Convert inode to its JSON snapshot form."""
        data: dict[str, Any] = {
            'id': self.id,
            'type': self.type.value,
            'name': self.name,
            'permissions': mode_to_permissions(self.mode),
            'ownerId': self.owner_id,
            'groupId': self.group_id,
            'size': self.size,
            'createdAt': self.created_at,
            'modifiedAt': self.modified_at,
        }
        if self.is_file:
            data['content'] = self.content
        elif self.is_directory:
            data['children'] = list(self.children)
        else:
            data['target'] = self.target
        return data
    
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> 'Inode':
        """
        Build an inode from its JSON snapshot form.
        
        Raises:
            KeyError, TypeError, ValueError: If the record is malformed
        """
        file_type = FileType(data['type'])
        inode = cls(
            id=str(data['id']),
            type=file_type,
            name=str(data['name']),
            mode=permissions_to_mode(data['permissions']),
            owner_id=str(data['ownerId']),
            group_id=str(data.get('groupId', data['ownerId'])),
            size=int(data.get('size', 0)),
            created_at=float(data.get('createdAt', time.time())),
            modified_at=float(data.get('modifiedAt', time.time())),
            content=data.get('content') if file_type == FileType.FILE else None,
            children=list(data.get('children') or []) if file_type == FileType.DIRECTORY else None,
            target=data.get('target') if file_type == FileType.SYMLINK else None,
        )
        if file_type == FileType.SYMLINK and not isinstance(inode.target, str):
            raise ValueError(f"symlink {inode.id} has no target")
        if file_type == FileType.FILE and not isinstance(inode.content, str):
            raise ValueError(f"file {inode.id} has non-text content")
        return inode
