"""
Virtual File System (VFS) Module

Implements an in-memory file system with:
- Hierarchical directory tree of inodes
- Unix permission evaluation (owner/group/others, sticky bit)
- Symbolic links with a bounded resolution depth
- File and directory operations (create, read, write, copy, move, remove)
- Snapshots for persistence and environment resets

No operation raises for an ordinary failure: each returns ``Ok`` or
``Err`` (see ``result.py``). The user ``root`` bypasses every
permission check.

Author: YSNRFD
Version: 1.0.0
"""

import time
from typing import Optional, Any, List, Iterator, Tuple, Union

from .inode import (
    Inode,
    FileType,
    Permission,
    ROOT_USER,
    new_inode_id,
    parse_octal_mode,
    mode_to_octal,
)
from .path_resolver import PathResolver
from .result import Ok, Err, FsError, Result
from .snapshots import VFSSnapshot, DEFAULT_LAYOUT, build_snapshot, stock_snapshot
from vshell.core.config_loader import get_config
from vshell.exceptions import SnapshotError
from vshell.logger import get_logger


MAX_SYMLINK_DEPTH = 20


class VirtualFileSystem:
    """
    Virtual File System.
    
    Owns the inode table. Every path-taking operation accepts the
    acting ``user_id`` and a ``cwd`` against which relative paths are
    resolved; ``.`` and ``..`` are followed through the inode tree,
    never rewritten as strings.
    
    Example:
        >>> vfs = VirtualFileSystem()
        >>> vfs.write_file('/tmp/test.txt', 'Hello, World!')
        >>> vfs.read_file('/tmp/test.txt').value
        'Hello, World!'
    """
    
    def __init__(
        self,
        snapshot: Optional[VFSSnapshot] = None,
        umask: Optional[str] = None,
        populate: bool = True
    ):
        """
        Create a filesystem.
        
        Args:
            snapshot: Adopt an independent copy of this snapshot
            umask: Octal umask for new inodes (defaults to configuration)
            populate: Without a snapshot, create the standard Unix layout
        
        Raises:
            SnapshotError: If the snapshot is structurally corrupt
        """
        self._logger = get_logger('vfs')
        self._inodes: dict[str, Inode] = {}
        self._root_id = ''
        self._umask = 0o022
        
        if not self.set_umask(umask if umask is not None else get_config().filesystem.umask):
            self._logger.warning("Ignoring invalid umask", context={'umask': umask})
        
        if snapshot is None:
            snapshot = build_snapshot(DEFAULT_LAYOUT if populate else [])
            self._adopt(snapshot)
        else:
            self.load_snapshot(snapshot)
    
    # Snapshots
    
    def _adopt(self, snapshot: VFSSnapshot) -> None:
        self._inodes = snapshot.inodes
        self._root_id = snapshot.root_id
    
    def get_snapshot(self) -> VFSSnapshot:
        """Return a deep copy of the inode table and root id."""
        return VFSSnapshot(
            root_id=self._root_id,
            inodes={ino_id: inode.copy() for ino_id, inode in self._inodes.items()},
        )
    
    def load_snapshot(self, snapshot: Union[VFSSnapshot, str]) -> None:
        """
        Replace the whole filesystem with a snapshot.
        
        Args:
            snapshot: A snapshot, or the name of a stock snapshot
                      ('default', 'hpc-base')
        
        Raises:
            SnapshotError: If the snapshot is corrupt or the name unknown
        """
        if isinstance(snapshot, str):
            name = snapshot
            snapshot = stock_snapshot(name)
            if snapshot is None:
                raise SnapshotError(f"unknown snapshot {name!r}")
        else:
            snapshot = snapshot.copy()
        
        snapshot.validate()
        self._adopt(snapshot)
        self._logger.info(
            "Loaded snapshot",
            context={'root': self._root_id, 'inodes': len(self._inodes)}
        )
    
    def serialize(self) -> str:
        """Encode the filesystem as a JSON snapshot."""
        return self.get_snapshot().to_json()
    
    def deserialize(self, data: str) -> None:
        """
        Replace the filesystem with a JSON snapshot.
        
        Raises:
            SnapshotError: If the text is not a valid snapshot
        """
        self._adopt(VFSSnapshot.from_json(data))
    
    # umask
    
    def set_umask(self, mode: str) -> bool:
        """Set the umask from 3 or 4 octal digits."""
        value = parse_octal_mode(mode)
        if value is None:
            return False
        self._umask = value & 0o777
        return True
    
    def get_umask(self) -> str:
        return f"{self._umask:04o}"
    
    # Accessors
    
    def get_root_id(self) -> str:
        return self._root_id
    
    def get_inode(self, inode_id: str) -> Optional[Inode]:
        return self._inodes.get(inode_id)
    
    def get_path(self, inode_id: str) -> str:
        """Absolute path of an inode, built from parent back-references."""
        inode = self._inodes.get(inode_id)
        if inode is None:
            return ''
        
        names: List[str] = []
        while inode.id != self._root_id:
            names.append(inode.name)
            inode = self._inodes.get(inode.parent_id) if inode.parent_id else None
            if inode is None:
                return ''
        
        return '/' + '/'.join(reversed(names))
    
    def _audit(self, path: str, user_id: str, action: str) -> Err:
        self._logger.security(
            "PERMISSION_DENIED",
            context={'path': path, 'user': user_id, 'action': action}
        )
        return Err(FsError.PERMISSION_DENIED)
    
    def _find_child(self, directory: Inode, name: str) -> Optional[Inode]:
        for child_id in directory.children:
            child = self._inodes.get(child_id)
            if child is not None and child.name == name:
                return child
        return None
    
    def _parent_of(self, inode: Inode) -> Inode:
        if inode.parent_id is None:
            return self._inodes[self._root_id]
        return self._inodes[inode.parent_id]
    
    def _is_within(self, inode: Inode, ancestor: Inode) -> bool:
        """True if ``inode`` is ``ancestor`` or lies below it."""
        node: Optional[Inode] = inode
        while node is not None:
            if node.id == ancestor.id:
                return True
            node = self._inodes.get(node.parent_id) if node.parent_id else None
        return False
    
    # Path resolution
    
    def resolve(
        self,
        path: str,
        user_id: str = ROOT_USER,
        start: Optional[str] = None,
        follow_symlinks: bool = True,
        depth: int = 0
    ) -> Result[Inode]:
        """
        Resolve a path to an inode.
        
        Args:
            path: Absolute path, or relative to ``start``
            user_id: Acting user; needs execute on every directory crossed
            start: Inode id relative paths start from (default: root)
            follow_symlinks: Follow a symlink in the final component.
                             Symlinks in earlier components are always followed.
            depth: Symlink nesting so far
        
        Returns:
            Ok(inode), or Err with NOT_FOUND, NOT_A_DIRECTORY,
            PERMISSION_DENIED or SYMLINK_LOOP
        """
        if depth > MAX_SYMLINK_DEPTH:
            return Err(FsError.SYMLINK_LOOP)
        
        root = self._inodes[self._root_id]
        if path.startswith('/') or start is None:
            current = root
        else:
            current = self._inodes.get(start)
            if current is None:
                return Err(FsError.NOT_FOUND)
        
        parts = PathResolver.parse(path).components
        
        for i, part in enumerate(parts):
            if not current.is_directory:
                return Err(FsError.NOT_A_DIRECTORY)
            
            # '.' and '..' need search permission too
            if not current.can_execute(user_id):
                return self._audit(path, user_id, 'execute')
            
            if part == '.':
                continue
            
            if part == '..':
                current = self._parent_of(current)
                continue
            
            child = self._find_child(current, part)
            if child is None:
                return Err(FsError.NOT_FOUND)
            
            is_last = i == len(parts) - 1
            
            if child.is_symlink and (follow_symlinks or not is_last):
                resolved = self.resolve(child.target, user_id, current.id, True, depth + 1)
                if isinstance(resolved, Err) or is_last:
                    return resolved
                
                remaining = '/'.join(parts[i + 1:])
                return self.resolve(remaining, user_id, resolved.value.id, follow_symlinks, depth + 1)
            
            current = child
        
        return Ok(current)
    
    def _lookup(
        self,
        path: str,
        user_id: str,
        cwd: str,
        follow_symlinks: bool = True
    ) -> Result[Inode]:
        """Resolve ``path`` with relative paths starting at ``cwd``."""
        if PathResolver.is_absolute(path) or cwd in ('', '/'):
            return self.resolve(path, user_id, None, follow_symlinks)
        
        base = self.resolve(cwd, user_id)
        if isinstance(base, Err):
            return base
        if not base.value.is_directory:
            return Err(FsError.NOT_A_DIRECTORY)
        return self.resolve(path, user_id, base.value.id, follow_symlinks)
    
    def _lookup_parent(self, path: str, user_id: str, cwd: str) -> Result[Tuple[Inode, str]]:
        """Resolve the directory that would hold ``path`` and the entry name."""
        parent_path, name = PathResolver.split_parent(path)
        if name in ('', '.', '..'):
            return Err(FsError.FILE_EXISTS)
        
        parent = self._lookup(parent_path, user_id, cwd)
        if isinstance(parent, Err):
            return parent
        if not parent.value.is_directory:
            return Err(FsError.NOT_A_DIRECTORY)
        return Ok((parent.value, name))
    
    def stat(self, path: str, user_id: str = ROOT_USER, cwd: str = '/') -> Result[Inode]:
        """Metadata for a path (the inode itself, symlinks followed)."""
        return self._lookup(path, user_id, cwd)
    
    def lstat(self, path: str, user_id: str = ROOT_USER, cwd: str = '/') -> Result[Inode]:
        """Like stat, but a final symlink is returned rather than followed."""
        return self._lookup(path, user_id, cwd, follow_symlinks=False)
    
    # Queries
    
    def exists(self, path: str, user_id: str = ROOT_USER, cwd: str = '/') -> bool:
        return isinstance(self._lookup(path, user_id, cwd), Ok)
    
    def is_directory(self, path: str, user_id: str = ROOT_USER, cwd: str = '/') -> bool:
        result = self._lookup(path, user_id, cwd)
        return isinstance(result, Ok) and result.value.is_directory
    
    def is_file(self, path: str, user_id: str = ROOT_USER, cwd: str = '/') -> bool:
        result = self._lookup(path, user_id, cwd)
        return isinstance(result, Ok) and result.value.is_file
    
    def list_children(
        self,
        path: str,
        user_id: str = ROOT_USER,
        cwd: str = '/'
    ) -> Result[List[Inode]]:
        """
        List a directory's entries in creation order.
        
        Requires execute on every directory on the way and read on the
        directory itself.
        """
        result = self._lookup(path, user_id, cwd)
        if isinstance(result, Err):
            return result
        
        directory = result.value
        if not directory.is_directory:
            return Err(FsError.NOT_A_DIRECTORY)
        if not directory.can_read(user_id):
            return self._audit(path, user_id, 'read')
        
        return Ok([self._inodes[c] for c in directory.children if c in self._inodes])
    
    def walk(self, inode: Inode) -> Iterator[Tuple[str, Inode]]:
        """Yield (path, inode) for ``inode`` and everything below it, pre-order."""
        stack = [(self.get_path(inode.id), inode)]
        while stack:
            path, node = stack.pop()
            yield path, node
            if node.is_directory:
                for child_id in reversed(node.children):
                    child = self._inodes[child_id]
                    child_path = f"/{child.name}" if path == '/' else f"{path}/{child.name}"
                    stack.append((child_path, child))
    
    # File content
    
    def read_file(self, path: str, user_id: str = ROOT_USER, cwd: str = '/') -> Result[str]:
        """Read a file's content. Requires read permission."""
        result = self._lookup(path, user_id, cwd)
        if isinstance(result, Err):
            return result
        
        inode = result.value
        if inode.is_directory:
            return Err(FsError.IS_A_DIRECTORY)
        if inode.is_symlink:
            return Err(FsError.IS_A_SYMLINK)
        if not inode.can_read(user_id):
            return self._audit(path, user_id, 'read')
        
        return Ok(inode.content)
    
    def _open_for_write(self, path: str, user_id: str, cwd: str) -> Result[Inode]:
        """Find or create the regular file behind ``path``, checking write permission."""
        result = self._lookup(path, user_id, cwd)
        trailing_slash = path.endswith('/')
        
        if isinstance(result, Err):
            if result.error != FsError.NOT_FOUND:
                return result
            # "name/" only ever names a directory
            if trailing_slash:
                return Err(FsError.IS_A_DIRECTORY)
            result = self.touch(path, user_id, cwd)
            if isinstance(result, Err):
                return result
        
        inode = result.value
        if inode.is_directory:
            return Err(FsError.IS_A_DIRECTORY)
        if trailing_slash:
            return Err(FsError.NOT_A_DIRECTORY)
        if inode.is_symlink:
            return Err(FsError.IS_A_SYMLINK)
        if not inode.can_write(user_id):
            return self._audit(path, user_id, 'write')
        
        return Ok(inode)
    
    def write_file(
        self,
        path: str,
        content: str,
        user_id: str = ROOT_USER,
        cwd: str = '/'
    ) -> Result[Inode]:
        """
        Replace a file's content, creating the file if needed.
        
        Requires write permission on the file (or on the parent
        directory when the file is created).
        """
        result = self._open_for_write(path, user_id, cwd)
        if isinstance(result, Err):
            return result
        
        inode = result.value
        inode.set_content(content)
        return Ok(inode)
    
    def append_file(
        self,
        path: str,
        content: str,
        user_id: str = ROOT_USER,
        cwd: str = '/'
    ) -> Result[Inode]:
        """
        Append verbatim to a file (no separator), creating it if needed.
        
        Only write permission is needed; a write-only file keeps its
        existing content.
        """
        result = self._open_for_write(path, user_id, cwd)
        if isinstance(result, Err):
            return result
        
        inode = result.value
        inode.set_content((inode.content or '') + content)
        return Ok(inode)
    
    # Creation
    
    def _create(
        self,
        parent: Inode,
        name: str,
        file_type: FileType,
        mode: int,
        owner_id: str,
        **payload: Any
    ) -> Inode:
        now = time.time()
        inode = Inode(
            id=new_inode_id(),
            type=file_type,
            name=name,
            mode=mode,
            owner_id=owner_id,
            group_id=owner_id,
            created_at=now,
            modified_at=now,
            **payload
        )
        inode.parent_id = parent.id
        self._inodes[inode.id] = inode
        parent.add_child(inode.id)
        return inode
    
    def mkdir(
        self,
        path: str,
        user_id: str = ROOT_USER,
        cwd: str = '/',
        mode: Optional[str] = None
    ) -> Result[Inode]:
        """
        Create a directory.
        
        Args:
            path: Path for the new directory
            user_id: Owner, and the user whose permissions are checked
            cwd: Current working directory
            mode: Explicit octal mode; otherwise 755 less the umask
        """
        result = self._lookup_parent(path, user_id, cwd)
        if isinstance(result, Err):
            return result
        parent, name = result.value
        
        if self._find_child(parent, name) is not None:
            return Err(FsError.FILE_EXISTS)
        if not parent.can_write(user_id):
            return self._audit(path, user_id, 'write')
        
        if mode is not None:
            perms = parse_octal_mode(mode)
            if perms is None:
                return Err(FsError.INVALID_MODE)
        else:
            perms = int(Permission.DEFAULT_DIR) & ~self._umask
        
        inode = self._create(parent, name, FileType.DIRECTORY, perms, user_id)
        self._logger.debug("Created directory", context={'path': path, 'id': inode.id})
        return Ok(inode)
    
    def touch(self, path: str, user_id: str = ROOT_USER, cwd: str = '/') -> Result[Inode]:
        """
        Create an empty file, or update the modification time of an
        existing entry. Content and id of an existing entry are untouched.
        """
        result = self._lookup_parent(path, user_id, cwd)
        if isinstance(result, Err):
            return result
        parent, name = result.value
        
        existing = self._find_child(parent, name)
        if existing is not None:
            existing.touch()
            return Ok(existing)
        
        if not parent.can_write(user_id):
            return self._audit(path, user_id, 'write')
        
        inode = self._create(
            parent, name, FileType.FILE,
            int(Permission.DEFAULT_FILE) & ~self._umask, user_id,
            content=''
        )
        self._logger.debug("Created file", context={'path': path, 'id': inode.id})
        return Ok(inode)
    
    def ln(
        self,
        target: str,
        path: str,
        user_id: str = ROOT_USER,
        cwd: str = '/'
    ) -> Result[Inode]:
        """
        Create a symbolic link at ``path`` pointing to ``target``.
        
        The target is stored verbatim and need not exist; a relative
        target is resolved from the directory holding the link.
        """
        result = self._lookup_parent(path, user_id, cwd)
        if isinstance(result, Err):
            return result
        parent, name = result.value
        
        if self._find_child(parent, name) is not None:
            return Err(FsError.FILE_EXISTS)
        if not parent.can_write(user_id):
            return self._audit(path, user_id, 'write')
        
        inode = self._create(parent, name, FileType.SYMLINK, 0o777, user_id, target=target)
        inode.size = len(target.encode('utf-8'))
        self._logger.debug("Created symlink", context={'path': path, 'target': target})
        return Ok(inode)
    
    # Removal
    
    def _may_unlink(self, parent: Inode, inode: Inode, user_id: str) -> Optional[Err]:
        """Check that ``user_id`` may remove ``inode`` from ``parent``."""
        if user_id == ROOT_USER:
            return None
        if parent.sticky and user_id not in (inode.owner_id, parent.owner_id):
            return Err(FsError.NOT_PERMITTED)
        if not parent.can_write(user_id) or not parent.can_execute(user_id):
            return self._audit(self.get_path(inode.id), user_id, 'write')
        return None
    
    def rm(
        self,
        path: str,
        recursive: bool = False,
        user_id: str = ROOT_USER,
        cwd: str = '/'
    ) -> Result[None]:
        """
        Remove a file, symlink or directory.
        
        A non-empty directory needs ``recursive``; its descendants are
        then removed bottom-up. Nothing is removed unless the whole
        subtree may be removed. A final symlink is removed itself, not
        its target.
        """
        result = self._lookup(path, user_id, cwd, follow_symlinks=False)
        if isinstance(result, Err):
            return result
        
        inode = result.value
        if inode.id == self._root_id:
            return Err(FsError.ROOT_REMOVAL)
        
        if inode.is_directory and inode.children and not recursive:
            return Err(FsError.DIRECTORY_NOT_EMPTY)
        
        parent = self._parent_of(inode)
        denied = self._may_unlink(parent, inode, user_id)
        if denied is not None:
            return denied
        
        subtree = list(self.walk(inode))
        for _, node in subtree:
            if node.is_directory and node.children:
                for child_id in node.children:
                    denied = self._may_unlink(node, self._inodes[child_id], user_id)
                    if denied is not None:
                        return denied
        
        for _, node in reversed(subtree):
            del self._inodes[node.id]
        parent.remove_child(inode.id)
        inode.parent_id = None
        
        self._logger.debug(
            "Removed",
            context={'path': path, 'id': inode.id, 'count': len(subtree)}
        )
        return Ok(None)
    
    # Metadata
    
    def chmod(
        self,
        path: str,
        mode: str,
        user_id: str = ROOT_USER,
        cwd: str = '/'
    ) -> Result[Inode]:
        """
        Change permission bits. Only the owner or root may do so, and
        the mode must be exactly three octal digits.
        """
        result = self._lookup(path, user_id, cwd)
        if isinstance(result, Err):
            return result
        
        inode = result.value
        if user_id != ROOT_USER and inode.owner_id != user_id:
            return self._audit(path, user_id, 'chmod')
        
        value = parse_octal_mode(mode, allow_special=False)
        if value is None:
            return Err(FsError.INVALID_MODE)
        
        inode.chmod(value)
        self._logger.debug("Changed mode", context={'path': path, 'mode': mode_to_octal(value)})
        return Ok(inode)
    
    def chown(
        self,
        path: str,
        new_owner: str,
        user_id: str = ROOT_USER,
        cwd: str = '/',
        new_group: Optional[str] = None
    ) -> Result[Inode]:
        """Change owner (and optionally group). Root only."""
        if user_id != ROOT_USER:
            return self._audit(path, user_id, 'chown')
        if not new_owner:
            return Err(FsError.INVALID_ARGUMENT)
        
        result = self._lookup(path, user_id, cwd)
        if isinstance(result, Err):
            return result
        
        inode = result.value
        inode.chown(new_owner, new_group)
        return Ok(inode)
    
    # Copy and move
    
    def _destination(
        self,
        dest: str,
        source: Inode,
        user_id: str,
        cwd: str
    ) -> Result[Tuple[Inode, str]]:
        """
        Work out (directory, name) for a copy or move target. An
        existing directory receives the source under its own name.
        """
        existing = self._lookup(dest, user_id, cwd)
        if isinstance(existing, Ok) and existing.value.is_directory:
            return Ok((existing.value, source.name))
        if isinstance(existing, Err) and existing.error != FsError.NOT_FOUND:
            return existing
        return self._lookup_parent(dest, user_id, cwd)
    
    def cp(
        self,
        src: str,
        dest: str,
        recursive: bool = False,
        user_id: str = ROOT_USER,
        cwd: str = '/'
    ) -> Result[Inode]:
        """
        Copy a file or (with ``recursive``) a directory tree.
        
        Every copied inode gets a fresh id; content and permission bits
        are preserved and the copier becomes the owner. Copying a file
        onto an existing file overwrites its content.
        """
        result = self._lookup(src, user_id, cwd)
        if isinstance(result, Err):
            return result
        source = result.value
        
        if source.is_directory and not recursive:
            return Err(FsError.OMITTING_DIRECTORY)
        
        for _, node in self.walk(source):
            if not node.can_read(user_id) or (node.is_directory and not node.can_execute(user_id)):
                return self._audit(src, user_id, 'read')
        
        target = self._destination(dest, source, user_id, cwd)
        if isinstance(target, Err):
            return target
        parent, name = target.value
        
        existing = self._find_child(parent, name)
        if existing is not None:
            if existing.id == source.id:
                return Err(FsError.FILE_EXISTS)
            if source.is_file and existing.is_file:
                if not existing.can_write(user_id):
                    return self._audit(dest, user_id, 'write')
                existing.set_content(source.content)
                return Ok(existing)
            if existing.is_directory:
                return Err(FsError.IS_A_DIRECTORY)
            return Err(FsError.FILE_EXISTS)
        
        if not parent.can_write(user_id):
            return self._audit(dest, user_id, 'write')
        if source.is_directory and self._is_within(parent, source):
            return Err(FsError.SELF_COPY)
        
        copy = self._copy_tree(source, parent, name, user_id)
        self._logger.debug("Copied", context={'src': src, 'dest': dest, 'id': copy.id})
        return Ok(copy)
    
    def _copy_tree(self, source: Inode, parent: Inode, name: str, user_id: str) -> Inode:
        # Children are listed before the copy is attached anywhere.
        children = [self._inodes[c] for c in source.children] if source.is_directory else []
        
        copy = self._create(
            parent, name, source.type, source.mode, user_id,
            content=source.content,
            target=source.target,
        )
        copy.size = source.size
        
        for child in children:
            self._copy_tree(child, copy, child.name, user_id)
        return copy
    
    def mv(
        self,
        src: str,
        dest: str,
        user_id: str = ROOT_USER,
        cwd: str = '/'
    ) -> Result[Inode]:
        """
        Move or rename. The inode keeps its id; it is detached from its
        old parent and attached to the destination directory under the
        new name. An existing destination name is refused.
        """
        result = self._lookup(src, user_id, cwd, follow_symlinks=False)
        if isinstance(result, Err):
            return result
        source = result.value
        
        if source.id == self._root_id:
            return Err(FsError.SELF_MOVE)
        
        target = self._destination(dest, source, user_id, cwd)
        if isinstance(target, Err):
            return target
        parent, name = target.value
        
        if self._find_child(parent, name) is not None:
            return Err(FsError.FILE_EXISTS)
        if source.is_directory and self._is_within(parent, source):
            return Err(FsError.SELF_MOVE)
        
        old_parent = self._parent_of(source)
        denied = self._may_unlink(old_parent, source, user_id)
        if denied is not None:
            return denied
        if not parent.can_write(user_id):
            return self._audit(dest, user_id, 'write')
        
        old_parent.remove_child(source.id)
        source.name = name
        source.parent_id = parent.id
        parent.add_child(source.id)
        source.touch()
        
        self._logger.debug("Moved", context={'src': src, 'dest': dest, 'id': source.id})
        return Ok(source)
    
    def get_stats(self) -> dict[str, Any]:
        """Get filesystem statistics."""
        counts = {file_type: 0 for file_type in FileType}
        total_size = 0
        for inode in self._inodes.values():
            counts[inode.type] += 1
            if inode.is_file:
                total_size += inode.size
        
        return {
            'total_inodes': len(self._inodes),
            'files': counts[FileType.FILE],
            'directories': counts[FileType.DIRECTORY],
            'symlinks': counts[FileType.SYMLINK],
            'total_size': total_size,
        }
