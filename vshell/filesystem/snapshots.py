"""
Snapshot Module

A snapshot is the whole inode table plus the root id, deep-copied so
that it shares nothing with a live filesystem. The JSON form is::

    {"rootId": "<id>", "inodes": {"<id>": {...inode...}, ...}}

Decoding validates the structure (single parent per inode, reachable
tree, unique names per directory); a corrupt snapshot raises
``SnapshotError`` rather than being half-adopted.

Author: YSNRFD
Version: 1.0.0
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Optional, List, Tuple

from .inode import Inode, FileType, ROOT_USER, new_inode_id
from vshell.exceptions import SnapshotError


@dataclass
class VFSSnapshot:
    """Independent copy of an inode table."""
    root_id: str
    inodes: dict[str, Inode]
    
    def copy(self) -> 'VFSSnapshot':
        return VFSSnapshot(
            root_id=self.root_id,
            inodes={ino_id: inode.copy() for ino_id, inode in self.inodes.items()},
        )
    
    def to_dict(self) -> dict[str, Any]:
        return {
            'rootId': self.root_id,
            'inodes': {ino_id: inode.to_dict() for ino_id, inode in self.inodes.items()},
        }
    
    def to_json(self) -> str:
        return json.dumps(self.to_dict())
    
    @classmethod
    def from_dict(cls, data: Any) -> 'VFSSnapshot':
        """
        Decode and validate a snapshot.
        
        Raises:
            SnapshotError: If the data is not a well-formed snapshot
        """
        if not isinstance(data, dict):
            raise SnapshotError("snapshot must be an object")
        
        root_id = data.get('rootId')
        records = data.get('inodes')
        if not isinstance(root_id, str) or not isinstance(records, dict):
            raise SnapshotError("rootId and inodes are required")
        
        inodes: dict[str, Inode] = {}
        for key, record in records.items():
            if not isinstance(record, dict):
                raise SnapshotError("inode record must be an object", inode_id=key)
            try:
                inode = Inode.from_dict(record)
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise SnapshotError(f"malformed inode ({e})", inode_id=key)
            if inode.id != key:
                raise SnapshotError("inode id does not match its key", inode_id=key)
            inodes[key] = inode
        
        snapshot = cls(root_id=root_id, inodes=inodes)
        snapshot.validate()
        return snapshot
    
    @classmethod
    def from_json(cls, text: str) -> 'VFSSnapshot':
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            raise SnapshotError(f"invalid JSON ({e})")
        return cls.from_dict(data)
    
    def validate(self) -> None:
        """
        Check the tree invariants and set every inode's parent_id.
        
        Raises:
            SnapshotError: If an invariant is violated
        """
        root = self.inodes.get(self.root_id)
        if root is None:
            raise SnapshotError("root inode missing", inode_id=self.root_id)
        if not root.is_directory:
            raise SnapshotError("root inode is not a directory", inode_id=self.root_id)
        
        parents: dict[str, str] = {}
        for inode in self.inodes.values():
            if not inode.is_directory:
                continue
            names = set()
            for child_id in inode.children:
                child = self.inodes.get(child_id)
                if child is None:
                    raise SnapshotError(f"dangling child {child_id}", inode_id=inode.id)
                if child_id == self.root_id:
                    raise SnapshotError("root inode has a parent", inode_id=inode.id)
                if child_id in parents:
                    raise SnapshotError("inode has more than one parent", inode_id=child_id)
                if child.name in names:
                    raise SnapshotError(f"duplicate name {child.name!r}", inode_id=inode.id)
                names.add(child.name)
                parents[child_id] = inode.id
        
        # Every inode must hang off the root; this also rules out detached cycles.
        reachable = {self.root_id}
        stack = [root]
        while stack:
            node = stack.pop()
            for child_id in node.children or []:
                if child_id not in reachable:
                    reachable.add(child_id)
                    stack.append(self.inodes[child_id])
        if len(reachable) != len(self.inodes):
            orphan = next(i for i in self.inodes if i not in reachable)
            raise SnapshotError("inode is not reachable from the root", inode_id=orphan)
        
        root.parent_id = None
        for child_id, parent_id in parents.items():
            self.inodes[child_id].parent_id = parent_id


# Stock layouts: (path, type, mode, owner, content). Parents precede children.
LayoutEntry = Tuple[str, FileType, int, str, Optional[str]]

DEFAULT_LAYOUT: List[LayoutEntry] = [
    ('/bin', FileType.DIRECTORY, 0o755, ROOT_USER, None),
    ('/etc', FileType.DIRECTORY, 0o755, ROOT_USER, None),
    ('/etc/hostname', FileType.FILE, 0o644, ROOT_USER, 'the-terminal'),
    ('/etc/passwd', FileType.FILE, 0o644, ROOT_USER,
     'root:x:0:0:root:/root:/bin/bash\nguest:x:1000:1000:Guest:/home/guest:/bin/bash'),
    ('/etc/group', FileType.FILE, 0o644, ROOT_USER, 'root:x:0:\nusers:x:100:\nguest:x:1000:'),
    ('/home', FileType.DIRECTORY, 0o755, ROOT_USER, None),
    ('/home/guest', FileType.DIRECTORY, 0o755, 'guest', None),
    ('/root', FileType.DIRECTORY, 0o700, ROOT_USER, None),
    ('/tmp', FileType.DIRECTORY, 0o1777, ROOT_USER, None),
    ('/var', FileType.DIRECTORY, 0o755, ROOT_USER, None),
    ('/var/log', FileType.DIRECTORY, 0o755, ROOT_USER, None),
    ('/var/log/syslog', FileType.FILE, 0o644, ROOT_USER,
     'Feb 28 10:00:01 the-terminal systemd[1]: Started The Terminal.\n'
     'Feb 28 10:00:02 the-terminal kernel: Linux version 6.1.0'),
    ('/proc', FileType.DIRECTORY, 0o555, ROOT_USER, None),
    ('/usr', FileType.DIRECTORY, 0o755, ROOT_USER, None),
    ('/usr/bin', FileType.DIRECTORY, 0o755, ROOT_USER, None),
    ('/usr/local', FileType.DIRECTORY, 0o755, ROOT_USER, None),
]

HPC_BASE_LAYOUT: List[LayoutEntry] = [
    ('/home', FileType.DIRECTORY, 0o755, ROOT_USER, None),
    ('/home/guest', FileType.DIRECTORY, 0o755, 'guest', None),
    ('/home/guest/work', FileType.DIRECTORY, 0o755, 'guest', None),
    ('/home/guest/data', FileType.DIRECTORY, 0o755, 'guest', None),
    ('/shared', FileType.DIRECTORY, 0o755, ROOT_USER, None),
    ('/etc', FileType.DIRECTORY, 0o755, ROOT_USER, None),
]

STOCK_LAYOUTS: dict[str, List[LayoutEntry]] = {
    'default': DEFAULT_LAYOUT,
    'hpc-base': HPC_BASE_LAYOUT,
}


def build_snapshot(layout: List[LayoutEntry]) -> VFSSnapshot:
    """Build a fresh snapshot (new ids, current timestamps) from a layout."""
    now = time.time()
    root = Inode(
        id=new_inode_id(),
        type=FileType.DIRECTORY,
        name='/',
        mode=0o755,
        created_at=now,
        modified_at=now,
    )
    inodes = {root.id: root}
    by_path = {'/': root}
    
    for path, file_type, mode, owner, content in layout:
        parent_path, _, name = path.rpartition('/')
        parent = by_path[parent_path or '/']
        inode = Inode(
            id=new_inode_id(),
            type=file_type,
            name=name,
            mode=mode,
            owner_id=owner,
            group_id=owner,
            created_at=now,
            modified_at=now,
            content=content,
        )
        inode.parent_id = parent.id
        parent.children.append(inode.id)
        inodes[inode.id] = inode
        by_path[path] = inode
    
    return VFSSnapshot(root_id=root.id, inodes=inodes)


def stock_snapshot(name: str) -> Optional[VFSSnapshot]:
    """Build the named stock snapshot, or None if there is no such layout."""
    layout = STOCK_LAYOUTS.get(name)
    if layout is None:
        return None
    return build_snapshot(layout)
