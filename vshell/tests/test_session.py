#!/usr/bin/env python3
"""
VShell Session Tests

Author: YSNRFD
Version: 1.0.0
"""

import contextlib
import io
import os
import sys
import unittest

# Add repository root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from vshell.core.config_loader import Config, ShellConfig
from vshell.exceptions import SnapshotError
from vshell.filesystem.vfs import VirtualFileSystem
from vshell.logger import Logger, LogLevel
from vshell.main import parse_args
from vshell.shell.registry import CommandRegistry, create_default_registry
from vshell.shell.session import ShellSession
from vshell.shell.types import CommandResult


class TestRegistry(unittest.IsolatedAsyncioTestCase):
    """Test the command registry."""
    
    async def test_register_and_lookup(self):
        """Test registration, help text and removal."""
        registry = CommandRegistry()
        
        async def hello(args, context, stdin=None):
            return CommandResult(output='hello')
        
        registry.register('hello', hello, 'Say hello')
        
        self.assertIn('hello', registry)
        self.assertIs(registry.get('hello'), hello)
        self.assertEqual(registry.help_text('hello'), 'Say hello')
        self.assertEqual(len(registry), 1)
        self.assertEqual(list(registry), ['hello'])
        
        self.assertTrue(registry.unregister('hello'))
        self.assertFalse(registry.unregister('hello'))
        self.assertIsNone(registry.get('hello'))
    
    async def test_default_registry(self):
        """Test the standard commands are all present."""
        registry = create_default_registry()
        
        for name in ('cd', 'ls', 'grep', 'sed', 'awk', 'find', 'ps', 'kill', 'sudo', 'read'):
            self.assertIn(name, registry)
        self.assertEqual(registry.list_commands(), sorted(registry.list_commands()))


class TestShellSession(unittest.IsolatedAsyncioTestCase):
    """Test session state across lines."""
    
    def setUp(self):
        Logger.initialize(level=LogLevel.WARNING, console_output=False)
        self.session = ShellSession()
    
    async def test_initial_state(self):
        """Test the session starts at home."""
        self.assertEqual(self.session.user_id, 'guest')
        self.assertEqual(self.session.cwd, '/home/guest')
        self.assertEqual(self.session.env['HOME'], '/home/guest')
        self.assertEqual(self.session.env['PWD'], '/home/guest')
        self.assertEqual(self.session.prompt, 'guest@the-terminal:~$ ')
        self.assertEqual([p.command for p in self.session.processes], ['init', 'bash'])
    
    async def test_root_session(self):
        """Test root gets /root and the # prompt."""
        session = ShellSession(vfs=self.session.vfs, user_id='root')
        
        self.assertEqual(session.cwd, '/root')
        self.assertEqual(session.prompt, 'root@the-terminal:~# ')
    
    async def test_cd_persists(self):
        """Test cd moves the session between lines."""
        await self.session.run('cd /var/log')
        
        self.assertEqual(self.session.cwd, '/var/log')
        self.assertEqual(self.session.env['OLDPWD'], '/home/guest')
        self.assertEqual(self.session.prompt, 'guest@the-terminal:/var/log$ ')
        self.assertEqual((await self.session.run('pwd')).output, '/var/log')
        
        await self.session.run('cd -')
        self.assertEqual(self.session.cwd, '/home/guest')
        
        await self.session.run('mkdir -p notes/today; cd notes/today')
        self.assertEqual(self.session.cwd, '/home/guest')
        
        await self.session.run('cd notes/today')
        self.assertEqual(self.session.prompt, 'guest@the-terminal:~/notes/today$ ')
        
        await self.session.run('cd')
        self.assertEqual(self.session.cwd, '/home/guest')
    
    async def test_history(self):
        """Test non-blank lines are recorded."""
        await self.session.run('echo one')
        await self.session.run('   ')
        await self.session.run('echo two')
        
        self.assertEqual(self.session.history, ['echo one', 'echo two'])
    
    async def test_history_limit(self):
        """Test history keeps only the newest lines."""
        config = Config(shell=ShellConfig(history_size=3))
        session = ShellSession(vfs=self.session.vfs, config=config)
        
        for i in range(5):
            await session.run(f'echo {i}')
        
        self.assertEqual(session.history, ['echo 2', 'echo 3', 'echo 4'])
    
    async def test_hostname_follows_filesystem(self):
        """Test the prompt reads /etc/hostname."""
        self.session.vfs.write_file('/etc/hostname', 'cluster01\n')
        
        self.assertEqual(self.session.hostname, 'cluster01')
        self.assertTrue(self.session.prompt.startswith('guest@cluster01:'))
    
    async def test_snapshot_and_reset(self):
        """Test reset restores a snapshot and the initial state."""
        snapshot = self.session.get_snapshot()
        await self.session.run('touch scratch; cd /tmp; export X=1')
        
        self.session.reset(snapshot)
        
        self.assertFalse(self.session.vfs.exists('/home/guest/scratch'))
        self.assertEqual(self.session.cwd, '/home/guest')
        self.assertEqual(self.session.history, [])
        self.assertNotIn('X', self.session.env)
    
    async def test_reset_to_stock_snapshot(self):
        """Test reset by name."""
        self.session.reset('hpc-base')
        
        self.assertTrue(self.session.vfs.is_directory('/home/guest/work'))
        self.assertEqual(self.session.cwd, '/home/guest')
        
        with self.assertRaises(SnapshotError):
            self.session.reset('nope')
    
    async def test_missing_home(self):
        """Test a user without a home starts at /."""
        session = ShellSession(vfs=VirtualFileSystem(populate=False), user_id='alice')
        
        self.assertEqual(session.cwd, '/')
        self.assertEqual(session.prompt, 'alice@the-terminal:/$ ')


class TestCommandLine(unittest.TestCase):
    """Test command line parsing."""
    
    def test_defaults(self):
        """Test no arguments means an interactive default session."""
        options = parse_args([])
        
        self.assertIsNone(options.config)
        self.assertIsNone(options.user)
        self.assertIsNone(options.command)
    
    def test_options(self):
        """Test separate and joined option values."""
        options = parse_args(['--config=/etc/vshell.json', '--user', 'alice', '-c', 'ls -l'])
        
        self.assertEqual(options.config, '/etc/vshell.json')
        self.assertEqual(options.user, 'alice')
        self.assertEqual(options.command, 'ls -l')
        self.assertEqual(parse_args(['--command', 'pwd']).command, 'pwd')
    
    def test_help_and_unknown_flags(self):
        """Test --help exits cleanly and unknown flags are usage errors."""
        with contextlib.redirect_stdout(io.StringIO()) as out:
            with self.assertRaises(SystemExit) as ctx:
                parse_args(['--help'])
        self.assertEqual(ctx.exception.code, 0)
        self.assertIn('--user', out.getvalue())
        
        with contextlib.redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                parse_args(['--bogus'])
        self.assertEqual(ctx.exception.code, 2)


if __name__ == '__main__':
    unittest.main()
