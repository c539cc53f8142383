"""
Shell Types

Ephemeral structures passed between the parser, the executor and the
command handlers. None of these are persisted.

Author: YSNRFD
Version: 1.0.0
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Callable, Awaitable, TYPE_CHECKING

if TYPE_CHECKING:
    from vshell.filesystem.vfs import VirtualFileSystem
    from .registry import CommandRegistry


class RedirectType(Enum):
    """Output redirection kinds."""
    NONE = "none"
    OVERWRITE = "overwrite"   # >
    APPEND = "append"         # >>
    STDERR = "stderr"         # 2>
    BOTH = "both"             # &>


class Operator(Enum):
    """Operator following a compound segment."""
    AND = "&&"
    OR = "||"
    SEQ = ";"
    END = "end"


@dataclass
class CommandAction:
    """A single pipeline stage."""
    name: str
    args: List[str] = field(default_factory=list)
    redirect_type: RedirectType = RedirectType.NONE
    redirect_path: Optional[str] = None
    input_path: Optional[str] = None


@dataclass
class CommandPipeline:
    """Stages connected by pipes."""
    actions: List[CommandAction] = field(default_factory=list)


@dataclass
class CompoundSegment:
    """A pipeline and the operator that follows it."""
    pipeline: CommandPipeline
    operator: Operator = Operator.END


@dataclass
class CommandResult:
    """
    Result of running a command.
    
    ``error`` may be set on a successful result for soft warnings.
    """
    output: str = ''
    error: Optional[str] = None
    exit_code: int = 0
    
    @property
    def ok(self) -> bool:
        return self.exit_code == 0


@dataclass
class CompoundResult:
    """Transcript of a whole input line."""
    output: str = ''
    error: Optional[str] = None
    exit_code: int = 0
    cwd: Optional[str] = None


@dataclass
class Process:
    """A simulated process entry shown by ps."""
    pid: int
    user: str
    command: str
    started_at: float


@dataclass
class CommandContext:
    """
    Everything a command handler may see or change.
    
    ``cwd`` and ``env`` are live for the duration of the line;
    ``history`` is a read-only view of earlier lines.
    """
    cwd: str
    user_id: str
    vfs: 'VirtualFileSystem'
    env: dict[str, str] = field(default_factory=dict)
    history: List[str] = field(default_factory=list)
    processes: List[Process] = field(default_factory=list)
    registry: Optional['CommandRegistry'] = None
    update_env: Optional[Callable[[str, Optional[str]], None]] = None
    update_processes: Optional[Callable[[List[Process]], None]] = None
    prompt: Optional[Callable[[str], Awaitable[str]]] = None
    clear_history: Optional[Callable[[], None]] = None
    
    def set_env(self, name: str, value: Optional[str]) -> None:
        """Set (or with None, unset) a variable and notify the owner."""
        if value is None:
            self.env.pop(name, None)
        else:
            self.env[name] = value
        if self.update_env is not None:
            self.update_env(name, value)
    
    @property
    def home(self) -> str:
        return self.env.get('HOME', '/')
    
    def with_user(self, user_id: str) -> 'CommandContext':
        """Copy of this context acting as another user (used by sudo)."""
        return CommandContext(
            cwd=self.cwd,
            user_id=user_id,
            vfs=self.vfs,
            env=self.env,
            history=self.history,
            processes=self.processes,
            registry=self.registry,
            update_env=self.update_env,
            update_processes=self.update_processes,
            prompt=self.prompt,
            clear_history=self.clear_history,
        )


Handler = Callable[[List[str], CommandContext, Optional[str]], Awaitable[CommandResult]]
