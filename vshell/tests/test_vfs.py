#!/usr/bin/env python3
"""
VShell Virtual File System Tests

Path resolution, permissions, symlinks, file operations and snapshots.

Author: YSNRFD
Version: 1.0.0
"""

import os
import sys
import unittest

# Add repository root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from vshell.exceptions import SnapshotError
from vshell.filesystem.result import Ok, Err, FsError
from vshell.filesystem.snapshots import VFSSnapshot
from vshell.filesystem.vfs import VirtualFileSystem, MAX_SYMLINK_DEPTH
from vshell.logger import Logger, LogLevel


class VFSTestCase(unittest.TestCase):
    """Base class providing a freshly populated filesystem."""
    
    def setUp(self):
        Logger.initialize(level=LogLevel.WARNING, console_output=False)
        self.vfs = VirtualFileSystem(umask='022')
    
    def assertOk(self, result):
        self.assertIsInstance(result, Ok, msg=f"expected Ok, got {result}")
        return result.value
    
    def assertErr(self, result, error):
        self.assertIsInstance(result, Err, msg=f"expected {error.name}, got {result}")
        self.assertEqual(result.error, error)


class TestResolution(VFSTestCase):
    """Test path resolution."""
    
    def test_standard_layout(self):
        """Test the default layout is present."""
        for path in ('/bin', '/etc', '/home/guest', '/tmp', '/var/log', '/usr/local'):
            self.assertTrue(self.vfs.is_directory(path), path)
        self.assertEqual(self.assertOk(self.vfs.read_file('/etc/hostname')), 'the-terminal')
        self.assertEqual(self.assertOk(self.vfs.stat('/tmp')).mode, 0o1777)
        self.assertEqual(self.assertOk(self.vfs.stat('/home/guest')).owner_id, 'guest')
    
    def test_resolution_is_stable(self):
        """Test resolving the same path twice yields the same inode."""
        first = self.assertOk(self.vfs.resolve('/etc/hostname'))
        second = self.assertOk(self.vfs.resolve('/etc/hostname'))
        
        self.assertEqual(first.id, second.id)
    
    def test_dot_and_dotdot(self):
        """Test . and .. are followed through the tree."""
        hostname = self.assertOk(self.vfs.resolve('/etc/hostname'))
        
        via_parent = self.assertOk(self.vfs.resolve('/home/guest/../../etc/./hostname'))
        above_root = self.assertOk(self.vfs.resolve('/../../etc/hostname'))
        
        self.assertEqual(via_parent.id, hostname.id)
        self.assertEqual(above_root.id, hostname.id)
        self.assertEqual(self.assertOk(self.vfs.resolve('/..')).id, self.vfs.get_root_id())
    
    def test_relative_to_cwd(self):
        """Test relative paths start at the working directory."""
        self.assertOk(self.vfs.write_file('notes.txt', 'x', 'guest', '/home/guest'))
        
        self.assertTrue(self.vfs.is_file('/home/guest/notes.txt'))
        self.assertEqual(
            self.assertOk(self.vfs.read_file('../guest/notes.txt', 'guest', '/home/guest')),
            'x'
        )
    
    def test_resolution_failures(self):
        """Test missing components and files used as directories."""
        self.assertErr(self.vfs.resolve('/nope'), FsError.NOT_FOUND)
        self.assertErr(self.vfs.resolve('/etc/hostname/x'), FsError.NOT_A_DIRECTORY)
    
    def test_traversal_needs_execute(self):
        """Test every directory crossed needs the execute bit."""
        self.assertOk(self.vfs.mkdir('/home/guest/locked', 'guest'))
        self.assertOk(self.vfs.write_file('/home/guest/locked/f', 'secret', 'guest'))
        self.assertOk(self.vfs.chmod('/home/guest/locked', '600', 'guest'))
        
        self.assertErr(self.vfs.read_file('/home/guest/locked/f', 'alice'), FsError.PERMISSION_DENIED)
        self.assertErr(self.vfs.read_file('/home/guest/locked/f', 'guest'), FsError.PERMISSION_DENIED)
        self.assertEqual(self.assertOk(self.vfs.read_file('/home/guest/locked/f', 'root')), 'secret')
    
    def test_dot_components_need_execute(self):
        """Test . and .. do not step through an untraversable directory."""
        self.assertOk(self.vfs.mkdir('/home/guest/private', 'guest'))
        self.assertOk(self.vfs.write_file('/home/guest/private/secret', 'x', 'guest'))
        self.assertOk(self.vfs.chmod('/home/guest/private', '700', 'guest'))
        
        for path in ('/home/guest/private/secret', '/home/guest/private/..', '/home/guest/private/.'):
            self.assertErr(self.vfs.resolve(path, 'bob'), FsError.PERMISSION_DENIED)
        
        guest_home = self.assertOk(self.vfs.resolve('/home/guest/private/..', 'guest'))
        self.assertEqual(self.vfs.get_path(guest_home.id), '/home/guest')
    
    def test_get_path(self):
        """Test absolute paths are rebuilt from parent links."""
        syslog = self.assertOk(self.vfs.resolve('/var/log/syslog'))
        
        self.assertEqual(self.vfs.get_path(syslog.id), '/var/log/syslog')
        self.assertEqual(self.vfs.get_path(self.vfs.get_root_id()), '/')
        self.assertEqual(self.vfs.get_path('missing'), '')


class TestSymlinks(VFSTestCase):
    """Test symbolic links."""
    
    def test_follow_absolute_and_relative(self):
        """Test absolute and relative link targets."""
        self.assertOk(self.vfs.write_file('/tmp/target', 'data'))
        self.assertOk(self.vfs.ln('/tmp/target', '/tmp/abs'))
        self.assertOk(self.vfs.ln('target', '/tmp/rel'))
        
        self.assertEqual(self.assertOk(self.vfs.read_file('/tmp/abs')), 'data')
        self.assertEqual(self.assertOk(self.vfs.read_file('/tmp/rel')), 'data')
    
    def test_link_in_middle_of_path(self):
        """Test a directory link followed by more components."""
        self.assertOk(self.vfs.ln('/var/log', '/tmp/logs'))
        
        syslog = self.assertOk(self.vfs.resolve('/var/log/syslog'))
        via_link = self.assertOk(self.vfs.resolve('/tmp/logs/syslog'))
        
        self.assertEqual(via_link.id, syslog.id)
        self.assertEqual(self.vfs.get_path(self.assertOk(self.vfs.resolve('/tmp/logs/..')).id), '/var')
    
    def test_no_follow_on_final_component(self):
        """Test lstat returns the link itself."""
        self.assertOk(self.vfs.ln('/etc', '/tmp/etc-link'))
        
        link = self.assertOk(self.vfs.lstat('/tmp/etc-link'))
        
        self.assertTrue(link.is_symlink)
        self.assertEqual(link.target, '/etc')
        self.assertEqual(link.size, 4)
        self.assertTrue(self.assertOk(self.vfs.stat('/tmp/etc-link')).is_directory)
    
    def test_chain_depth_limit(self):
        """Test a chain of 20 links resolves and 21 does not."""
        self.assertOk(self.vfs.write_file('/tmp/end', 'reached'))
        self.assertOk(self.vfs.ln('/tmp/end', '/tmp/l1'))
        for i in range(2, MAX_SYMLINK_DEPTH + 2):
            self.assertOk(self.vfs.ln(f'/tmp/l{i - 1}', f'/tmp/l{i}'))
        
        self.assertEqual(self.assertOk(self.vfs.read_file('/tmp/l20')), 'reached')
        
        result = self.vfs.resolve('/tmp/l21')
        self.assertErr(result, FsError.SYMLINK_LOOP)
        self.assertEqual(result.message, "Too many levels of symbolic links")
    
    def test_cycle(self):
        """Test a link cycle fails instead of recursing forever."""
        self.assertOk(self.vfs.ln('/tmp/b', '/tmp/a'))
        self.assertOk(self.vfs.ln('/tmp/a', '/tmp/b'))
        
        self.assertErr(self.vfs.resolve('/tmp/a'), FsError.SYMLINK_LOOP)
    
    def test_dangling_link(self):
        """Test links may point at nothing."""
        self.assertOk(self.vfs.ln('/nonexistent', '/tmp/dangling'))
        
        self.assertErr(self.vfs.read_file('/tmp/dangling'), FsError.NOT_FOUND)
        self.assertErr(self.vfs.write_file('/tmp/dangling', 'x'), FsError.IS_A_SYMLINK)
        self.assertFalse(self.vfs.exists('/tmp/dangling'))


class TestFileOperations(VFSTestCase):
    """Test creating, reading and writing."""
    
    def test_write_and_read(self):
        """Test write creates the file and tracks size."""
        inode = self.assertOk(self.vfs.write_file('/tmp/f.txt', 'hello'))
        
        self.assertEqual(inode.size, 5)
        self.assertEqual(self.assertOk(self.vfs.read_file('/tmp/f.txt')), 'hello')
        
        self.assertOk(self.vfs.append_file('/tmp/f.txt', ' world'))
        self.assertEqual(self.assertOk(self.vfs.read_file('/tmp/f.txt')), 'hello world')
    
    def test_type_mismatch(self):
        """Test reading or writing a directory fails."""
        self.assertErr(self.vfs.read_file('/etc'), FsError.IS_A_DIRECTORY)
        self.assertErr(self.vfs.write_file('/etc', 'x'), FsError.IS_A_DIRECTORY)
    
    def test_read_write_permissions(self):
        """Test read and write bits are enforced."""
        self.assertOk(self.vfs.write_file('/tmp/private', 'x', 'alice'))
        self.assertOk(self.vfs.chmod('/tmp/private', '600', 'alice'))
        
        self.assertErr(self.vfs.read_file('/tmp/private', 'bob'), FsError.PERMISSION_DENIED)
        self.assertErr(self.vfs.write_file('/tmp/private', 'y', 'bob'), FsError.PERMISSION_DENIED)
        self.assertEqual(self.assertOk(self.vfs.read_file('/tmp/private', 'alice')), 'x')
    
    def test_write_only_file_appends(self):
        """Test appending to a write-only file keeps its content."""
        self.assertOk(self.vfs.write_file('/tmp/w.txt', 'secret', 'guest'))
        self.assertOk(self.vfs.chmod('/tmp/w.txt', '200', 'guest'))
        
        self.assertOk(self.vfs.append_file('/tmp/w.txt', 'more', 'guest'))
        self.assertErr(self.vfs.read_file('/tmp/w.txt', 'guest'), FsError.PERMISSION_DENIED)
        self.assertEqual(self.assertOk(self.vfs.read_file('/tmp/w.txt')), 'secretmore')
    
    def test_trailing_slash_names_a_directory(self):
        """Test a path ending in / is never written as a file."""
        self.assertOk(self.vfs.write_file('/tmp/f.txt', 'x'))
        
        self.assertErr(self.vfs.write_file('/tmp/newdir/', 'x'), FsError.IS_A_DIRECTORY)
        self.assertErr(self.vfs.append_file('/tmp/newdir/', 'x'), FsError.IS_A_DIRECTORY)
        self.assertFalse(self.vfs.exists('/tmp/newdir'))
        self.assertErr(self.vfs.write_file('/tmp/f.txt/', 'y'), FsError.NOT_A_DIRECTORY)
        self.assertEqual(self.assertOk(self.vfs.read_file('/tmp/f.txt')), 'x')
    
    def test_touch_is_idempotent(self):
        """Test touch on an existing file only changes modifiedAt."""
        original = self.assertOk(self.vfs.write_file('/tmp/t.txt', 'keep me'))
        original_id = original.id
        original.modified_at = 0.0
        
        touched = self.assertOk(self.vfs.touch('/tmp/t.txt'))
        
        self.assertEqual(touched.id, original_id)
        self.assertEqual(self.assertOk(self.vfs.read_file('/tmp/t.txt')), 'keep me')
        self.assertGreater(touched.modified_at, 0.0)
    
    def test_create_errors(self):
        """Test duplicate names and bad parents."""
        self.assertErr(self.vfs.mkdir('/etc'), FsError.FILE_EXISTS)
        self.assertErr(self.vfs.ln('/x', '/etc/hostname'), FsError.FILE_EXISTS)
        self.assertErr(self.vfs.mkdir('/etc/hostname/sub'), FsError.NOT_A_DIRECTORY)
        self.assertErr(self.vfs.mkdir('/missing/sub'), FsError.NOT_FOUND)
        self.assertErr(self.vfs.touch('/etc/new', 'guest'), FsError.PERMISSION_DENIED)
    
    def test_umask(self):
        """Test the umask shapes new modes."""
        self.assertEqual(self.assertOk(self.vfs.mkdir('/tmp/d')).mode, 0o755)
        self.assertEqual(self.assertOk(self.vfs.touch('/tmp/f')).mode, 0o644)
        
        self.assertTrue(self.vfs.set_umask('077'))
        self.assertEqual(self.vfs.get_umask(), '0077')
        self.assertEqual(self.assertOk(self.vfs.mkdir('/tmp/d2')).mode, 0o700)
        self.assertEqual(self.assertOk(self.vfs.touch('/tmp/f2')).mode, 0o600)
        self.assertEqual(self.assertOk(self.vfs.mkdir('/tmp/d3', mode='750')).mode, 0o750)
        
        self.assertFalse(self.vfs.set_umask('9'))
    
    def test_ownership_of_new_inodes(self):
        """Test the creator owns what it creates."""
        inode = self.assertOk(self.vfs.mkdir('/home/guest/work', 'guest'))
        
        self.assertEqual(inode.owner_id, 'guest')
        self.assertEqual(inode.group_id, 'guest')


class TestRemoval(VFSTestCase):
    """Test rm."""
    
    def test_mkdir_then_rm_restores_parent(self):
        """Test mkdir X then rm -r X restores the parent's children."""
        before = list(self.assertOk(self.vfs.resolve('/tmp')).children)
        count = self.vfs.get_stats()['total_inodes']
        
        self.assertOk(self.vfs.mkdir('/tmp/x'))
        self.assertOk(self.vfs.mkdir('/tmp/x/y'))
        self.assertOk(self.vfs.write_file('/tmp/x/y/f', 'data'))
        self.assertOk(self.vfs.rm('/tmp/x', recursive=True))
        
        self.assertEqual(self.assertOk(self.vfs.resolve('/tmp')).children, before)
        self.assertEqual(self.vfs.get_stats()['total_inodes'], count)
    
    def test_rm_rules(self):
        """Test root, non-empty and empty directory removal."""
        self.assertErr(self.vfs.rm('/', recursive=True), FsError.ROOT_REMOVAL)
        self.assertErr(self.vfs.rm('/etc'), FsError.DIRECTORY_NOT_EMPTY)
        self.assertErr(self.vfs.rm('/nope'), FsError.NOT_FOUND)
        
        self.assertOk(self.vfs.mkdir('/tmp/empty'))
        self.assertOk(self.vfs.rm('/tmp/empty'))
        self.assertFalse(self.vfs.exists('/tmp/empty'))
    
    def test_rm_needs_parent_write(self):
        """Test removal requires write permission on the parent."""
        self.assertErr(self.vfs.rm('/etc/hostname', user_id='guest'), FsError.PERMISSION_DENIED)
        self.assertTrue(self.vfs.exists('/etc/hostname'))
    
    def test_rm_removes_link_not_target(self):
        """Test removing a symlink leaves its target."""
        self.assertOk(self.vfs.ln('/etc', '/tmp/etc-link'))
        self.assertOk(self.vfs.rm('/tmp/etc-link'))
        
        self.assertTrue(self.vfs.is_directory('/etc'))
    
    def test_sticky_directory(self):
        """Test only the owner may remove entries from /tmp."""
        self.assertOk(self.vfs.write_file('/tmp/alice.txt', 'x', 'alice'))
        
        self.assertErr(self.vfs.rm('/tmp/alice.txt', user_id='bob'), FsError.NOT_PERMITTED)
        self.assertOk(self.vfs.rm('/tmp/alice.txt', user_id='alice'))
    
    def test_recursive_rm_is_all_or_nothing(self):
        """Test nothing is removed when part of the tree is protected."""
        self.assertOk(self.vfs.mkdir('/home/guest/tree', 'guest'))
        self.assertOk(self.vfs.mkdir('/home/guest/tree/ro', 'guest'))
        self.assertOk(self.vfs.write_file('/home/guest/tree/ro/f', 'x', 'guest'))
        self.assertOk(self.vfs.chmod('/home/guest/tree/ro', '555', 'guest'))
        
        self.assertErr(self.vfs.rm('/home/guest/tree', True, 'guest'), FsError.PERMISSION_DENIED)
        self.assertTrue(self.vfs.exists('/home/guest/tree/ro/f'))


class TestMetadata(VFSTestCase):
    """Test chmod and chown."""
    
    def test_chmod(self):
        """Test only owner or root may chmod, with three octal digits."""
        self.assertOk(self.vfs.write_file('/tmp/f', 'x', 'alice'))
        
        self.assertEqual(self.assertOk(self.vfs.chmod('/tmp/f', '640', 'alice')).octal_mode, '640')
        self.assertErr(self.vfs.chmod('/tmp/f', '777', 'bob'), FsError.PERMISSION_DENIED)
        self.assertErr(self.vfs.chmod('/tmp/f', '75', 'alice'), FsError.INVALID_MODE)
        self.assertErr(self.vfs.chmod('/tmp/f', '789', 'alice'), FsError.INVALID_MODE)
        self.assertErr(self.vfs.chmod('/tmp/f', '4755', 'alice'), FsError.INVALID_MODE)
        self.assertOk(self.vfs.chmod('/tmp/f', '600', 'root'))
    
    def test_chmod_700_hides_listing(self):
        """Test chmod 700 by the owner blocks other users' listings."""
        self.assertOk(self.vfs.mkdir('/home/guest/private', 'guest'))
        self.assertOk(self.vfs.chmod('/home/guest/private', '700', 'guest'))
        
        result = self.vfs.list_children('/home/guest/private', 'alice')
        
        self.assertErr(result, FsError.PERMISSION_DENIED)
        self.assertEqual(str(result), "Permission denied")
        self.assertOk(self.vfs.list_children('/home/guest/private', 'guest'))
        self.assertOk(self.vfs.list_children('/home/guest/private', 'root'))
    
    def test_chown_is_root_only(self):
        """Test chown."""
        self.assertOk(self.vfs.write_file('/tmp/f', 'x', 'alice'))
        
        self.assertErr(self.vfs.chown('/tmp/f', 'bob', 'alice'), FsError.PERMISSION_DENIED)
        
        inode = self.assertOk(self.vfs.chown('/tmp/f', 'bob', 'root'))
        self.assertEqual(inode.owner_id, 'bob')
        self.assertEqual(inode.group_id, 'alice')
        
        inode = self.assertOk(self.vfs.chown('/tmp/f', 'carol', 'root', new_group='staff'))
        self.assertEqual(inode.group_id, 'staff')
    
    def test_permission_refusals_are_audited(self):
        """Test refusals are logged with path, user and action."""
        self.vfs.read_file('/root/.profile', 'guest')
        self.vfs.chown('/etc/hostname', 'guest', 'guest')
        
        logs = Logger.get_session_logs(level='NOTICE', subsystem='vfs')
        
        self.assertTrue(logs)
        self.assertEqual(logs[-1]['context'], {'path': '/etc/hostname', 'user': 'guest', 'action': 'chown'})


class TestCopyMove(VFSTestCase):
    """Test cp and mv."""
    
    def test_cp_file(self):
        """Test copies get a new id and the copier as owner."""
        source = self.assertOk(self.vfs.resolve('/etc/hostname'))
        
        copy = self.assertOk(self.vfs.cp('/etc/hostname', '/home/guest/h', user_id='guest'))
        
        self.assertNotEqual(copy.id, source.id)
        self.assertEqual(copy.content, 'the-terminal')
        self.assertEqual(copy.owner_id, 'guest')
        self.assertEqual(copy.mode, source.mode)
    
    def test_cp_directory(self):
        """Test recursive copies get fresh ids everywhere."""
        self.assertOk(self.vfs.mkdir('/tmp/src'))
        self.assertOk(self.vfs.mkdir('/tmp/src/sub'))
        self.assertOk(self.vfs.write_file('/tmp/src/sub/f', 'x'))
        
        self.assertErr(self.vfs.cp('/tmp/src', '/tmp/dst'), FsError.OMITTING_DIRECTORY)
        self.assertOk(self.vfs.cp('/tmp/src', '/tmp/dst', recursive=True))
        
        self.assertEqual(self.assertOk(self.vfs.read_file('/tmp/dst/sub/f')), 'x')
        originals = {i.id for _, i in self.vfs.walk(self.assertOk(self.vfs.resolve('/tmp/src')))}
        copies = {i.id for _, i in self.vfs.walk(self.assertOk(self.vfs.resolve('/tmp/dst')))}
        self.assertEqual(len(copies), 3)
        self.assertFalse(originals & copies)
    
    def test_cp_into_directory_and_over_file(self):
        """Test directory targets and overwriting."""
        self.assertOk(self.vfs.cp('/etc/hostname', '/tmp'))
        self.assertEqual(self.assertOk(self.vfs.read_file('/tmp/hostname')), 'the-terminal')
        
        self.assertOk(self.vfs.write_file('/tmp/other', 'old'))
        self.assertOk(self.vfs.cp('/etc/hostname', '/tmp/other'))
        self.assertEqual(self.assertOk(self.vfs.read_file('/tmp/other')), 'the-terminal')
    
    def test_cp_into_itself(self):
        """Test copying a directory into its own subtree is refused."""
        self.assertOk(self.vfs.mkdir('/tmp/src'))
        self.assertOk(self.vfs.mkdir('/tmp/src/sub'))
        
        self.assertErr(self.vfs.cp('/tmp/src', '/tmp/src/sub', recursive=True), FsError.SELF_COPY)
    
    def test_mv_keeps_id(self):
        """Test mv renames in place."""
        original = self.assertOk(self.vfs.write_file('/tmp/a', 'x'))
        
        moved = self.assertOk(self.vfs.mv('/tmp/a', '/tmp/b'))
        
        self.assertEqual(moved.id, original.id)
        self.assertEqual(moved.name, 'b')
        self.assertFalse(self.vfs.exists('/tmp/a'))
        self.assertEqual(self.vfs.get_path(moved.id), '/tmp/b')
    
    def test_mv_into_directory(self):
        """Test moving into an existing directory keeps the name."""
        self.assertOk(self.vfs.write_file('/tmp/a', 'x'))
        self.assertOk(self.vfs.mv('/tmp/a', '/home'))
        
        self.assertTrue(self.vfs.is_file('/home/a'))
    
    def test_mv_refusals(self):
        """Test existing names, own subtree and root."""
        self.assertOk(self.vfs.write_file('/tmp/a', 'x'))
        self.assertOk(self.vfs.mkdir('/tmp/d'))
        self.assertOk(self.vfs.mkdir('/tmp/d/e'))
        
        self.assertErr(self.vfs.mv('/tmp/a', '/etc/hostname'), FsError.FILE_EXISTS)
        self.assertErr(self.vfs.mv('/tmp/d', '/tmp/d/e'), FsError.SELF_MOVE)
        self.assertErr(self.vfs.mv('/', '/tmp/root'), FsError.SELF_MOVE)
        self.assertErr(self.vfs.mv('/etc/hostname', '/tmp/h', 'guest'), FsError.PERMISSION_DENIED)


class TestSnapshots(VFSTestCase):
    """Test snapshots and serialization."""
    
    def test_round_trip(self):
        """Test a snapshot reproduces file contents."""
        self.assertOk(self.vfs.write_file('/test.txt', 'hello world'))
        
        fresh = VirtualFileSystem(snapshot=self.vfs.get_snapshot())
        
        self.assertEqual(self.assertOk(fresh.read_file('/test.txt')), 'hello world')
    
    def test_snapshot_is_independent(self):
        """Test snapshots never alias live inodes."""
        snapshot = self.vfs.get_snapshot()
        fresh = VirtualFileSystem(snapshot=snapshot)
        
        self.assertOk(fresh.write_file('/etc/hostname', 'changed'))
        snapshot.inodes[snapshot.root_id].children.clear()
        
        self.assertEqual(self.assertOk(self.vfs.read_file('/etc/hostname')), 'the-terminal')
        self.assertTrue(fresh.exists('/etc'))
        self.assertTrue(self.vfs.exists('/etc'))
    
    def test_serialize(self):
        """Test the JSON codec."""
        self.assertOk(self.vfs.mkdir('/tmp/d'))
        self.assertOk(self.vfs.ln('/tmp/d', '/tmp/link'))
        text = self.vfs.serialize()
        
        other = VirtualFileSystem(populate=False)
        other.deserialize(text)
        
        self.assertEqual(other.get_root_id(), self.vfs.get_root_id())
        self.assertEqual(self.assertOk(other.lstat('/tmp/link')).target, '/tmp/d')
        self.assertEqual(self.assertOk(other.stat('/tmp')).mode, 0o1777)
        self.assertEqual(other.get_path(self.assertOk(other.resolve('/tmp/d')).id), '/tmp/d')
    
    def test_corrupt_snapshots(self):
        """Test structurally corrupt snapshots are rejected."""
        data = self.vfs.get_snapshot().to_dict()
        
        with self.assertRaises(SnapshotError):
            self.vfs.deserialize('not json')
        with self.assertRaises(SnapshotError):
            VFSSnapshot.from_dict({'rootId': 'missing', 'inodes': data['inodes']})
        with self.assertRaises(SnapshotError):
            VFSSnapshot.from_dict({'inodes': {}})
        
        tmp_id = self.assertOk(self.vfs.resolve('/tmp')).id
        etc_id = self.assertOk(self.vfs.resolve('/etc')).id
        data['inodes'][etc_id]['children'].append(tmp_id)
        with self.assertRaises(SnapshotError):
            VFSSnapshot.from_dict(data)
        
        # The live filesystem is untouched by a failed load
        self.assertTrue(self.vfs.exists('/tmp'))
    
    def test_stock_snapshots(self):
        """Test loading named snapshots."""
        self.vfs.load_snapshot('hpc-base')
        
        self.assertTrue(self.vfs.is_directory('/home/guest/work'))
        self.assertTrue(self.vfs.is_directory('/shared'))
        self.assertFalse(self.vfs.exists('/tmp'))
        
        with self.assertRaises(SnapshotError):
            self.vfs.load_snapshot('no-such-snapshot')


if __name__ == '__main__':
    unittest.main()
