"""
Shell Session Module

A session owns one filesystem and the per-user state around it:
working directory, environment, history and the simulated process
table. It runs one input line at a time.

Author: YSNRFD
Version: 1.0.0
"""

import time
from typing import Optional, List, Callable, Awaitable, Union

from .executor import CommandExecutor
from .registry import CommandRegistry, create_default_registry
from .types import CommandContext, CompoundResult, Process
from vshell.core.config_loader import Config, get_config
from vshell.filesystem.inode import ROOT_USER
from vshell.filesystem.path_resolver import PathResolver
from vshell.filesystem.result import Ok
from vshell.filesystem.snapshots import VFSSnapshot
from vshell.filesystem.vfs import VirtualFileSystem
from vshell.logger import get_logger


DEFAULT_PATH = '/usr/local/bin:/usr/bin:/bin'


class ShellSession:
    """
    Interactive shell session.

    Provides:
    - Line execution through the command executor
    - Working directory tracking (only a leading ``cd`` moves it)
    - Environment variables
    - Command history
    - Snapshot and reset of the filesystem

    Example:
        >>> session = ShellSession()
        >>> result = await session.run('mkdir notes && ls')
        >>> result.output
        'notes'
    """

    def __init__(
        self,
        vfs: Optional[VirtualFileSystem] = None,
        registry: Optional[CommandRegistry] = None,
        user_id: Optional[str] = None,
        config: Optional[Config] = None,
        prompt_handler: Optional[Callable[[str], Awaitable[str]]] = None
    ):
        """
        Create a session.

        Args:
            vfs: Filesystem to operate on (default: the configured
                 initial snapshot)
            registry: Commands (default: every standard command)
            user_id: Acting user (default: the configured default user)
            config: Configuration (default: the global configuration)
            prompt_handler: Async callable answering interactive
                            questions, e.g. for ``read``
        """
        self._config = config or get_config()
        self._logger = get_logger('session')

        if vfs is None:
            vfs = VirtualFileSystem(umask=self._config.filesystem.umask, populate=False)
            vfs.load_snapshot(self._config.filesystem.initial_snapshot)
        self._vfs = vfs

        self._registry = registry if registry is not None else create_default_registry()
        self._executor = CommandExecutor(self._registry)
        self._prompt_handler = prompt_handler

        self._user = user_id or self._config.users.default_user
        self._history: List[str] = []
        self._env: dict[str, str] = {}
        self._processes: List[Process] = []
        self._cwd = '/'

        self._start()

    def _start(self) -> None:
        """Put cwd, environment and processes in their initial state."""
        home = self.home
        self._cwd = home if self._vfs.is_directory(home, self._user) else '/'
        self._env = {
            'USER': self._user,
            'HOME': home,
            'PWD': self._cwd,
            'PATH': DEFAULT_PATH,
            'SHELL': '/bin/bash',
            'TERM': 'xterm-256color',
        }

        now = time.time()
        self._processes = [
            Process(pid=1, user=ROOT_USER, command='init', started_at=now),
            Process(pid=100, user=self._user, command='bash', started_at=now),
        ]

    # Properties

    @property
    def vfs(self) -> VirtualFileSystem:
        return self._vfs

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    @property
    def user_id(self) -> str:
        return self._user

    @property
    def home(self) -> str:
        if self._user == ROOT_USER:
            return '/root'
        return PathResolver.join(self._config.users.home_prefix, self._user)

    @property
    def cwd(self) -> str:
        return self._cwd

    @property
    def env(self) -> dict[str, str]:
        return dict(self._env)

    @property
    def history(self) -> List[str]:
        return list(self._history)

    @property
    def processes(self) -> List[Process]:
        return list(self._processes)

    @property
    def hostname(self) -> str:
        result = self._vfs.read_file('/etc/hostname', ROOT_USER)
        if isinstance(result, Ok) and result.value.strip():
            return result.value.strip()
        return self._config.shell.hostname

    @property
    def prompt(self) -> str:
        """Prompt string, e.g. ``guest@the-terminal:~$ ``."""
        cwd = self._cwd
        home = self.home
        if cwd == home:
            cwd = '~'
        elif cwd.startswith(home + '/'):
            cwd = '~' + cwd[len(home):]

        return self._config.shell.prompt.format(
            user=self._user,
            host=self.hostname,
            cwd=cwd,
            mark='#' if self._user == ROOT_USER else '$',
        )

    # Callbacks handed to commands

    def _update_env(self, name: str, value: Optional[str]) -> None:
        if value is None:
            self._env.pop(name, None)
        else:
            self._env[name] = value

    def _update_processes(self, processes: List[Process]) -> None:
        self._processes = list(processes)

    def _make_context(self) -> CommandContext:
        return CommandContext(
            cwd=self._cwd,
            user_id=self._user,
            vfs=self._vfs,
            env=dict(self._env),
            history=list(self._history),
            processes=list(self._processes),
            registry=self._registry,
            update_env=self._update_env,
            update_processes=self._update_processes,
            prompt=self._prompt_handler,
            clear_history=self.clear,
        )

    # Execution

    def _record(self, line: str) -> None:
        self._history.append(line)
        limit = self._config.shell.history_size
        if len(self._history) > limit:
            del self._history[:len(self._history) - limit]

    def _change_dir(self, path: str) -> None:
        self._env['OLDPWD'] = self._cwd
        self._cwd = path
        self._env['PWD'] = path

    async def run(self, line: str) -> CompoundResult:
        """
        Execute one input line.

        Args:
            line: Raw command line

        Returns:
            CompoundResult with the joined stdout/stderr transcript
        """
        context = self._make_context()
        if line.strip():
            self._record(line)

        result = await self._executor.execute_compound(line, context)

        if result.cwd is not None:
            self._change_dir(result.cwd)

        return result

    def clear(self) -> None:
        """Clear command history."""
        self._history.clear()

    # Snapshots

    def get_snapshot(self) -> VFSSnapshot:
        """Independent copy of the current filesystem."""
        return self._vfs.get_snapshot()

    def reset(self, snapshot: Union[VFSSnapshot, str, None] = None) -> None:
        """
        Replace the filesystem and return the session to its initial state.

        Args:
            snapshot: Snapshot or stock snapshot name (default: the
                      configured initial snapshot)

        Raises:
            SnapshotError: If the snapshot is corrupt or unknown
        """
        target = snapshot if snapshot is not None else self._config.filesystem.initial_snapshot
        self._vfs.load_snapshot(target)
        self._history.clear()
        self._start()
        self._logger.info(
            "Session reset",
            context={'user': self._user, 'snapshot': target if isinstance(target, str) else 'custom'}
        )
