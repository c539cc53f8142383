"""
System Information Commands

Simulated system information: there is no real kernel behind the
session, so these report fixed machine facts, the filesystem's own
statistics and the session's process table.

Author: YSNRFD
Version: 1.0.0
"""

import time
from typing import Optional, List

from .builtins import fail, read_as_root, split_flags
from .registry import CommandRegistry
from .types import CommandContext, CommandResult
from vshell.core.config_loader import get_config
from vshell.filesystem.inode import ROOT_USER


KERNEL_NAME = 'Linux'
KERNEL_RELEASE = '6.1.0-vshell'
MACHINE = 'x86_64'
OPERATING_SYSTEM = 'GNU/Linux'

# Simulated memory in KiB
TOTAL_MEMORY = 8 * 1024 * 1024
TOTAL_SWAP = 2 * 1024 * 1024

# Simulated disk size for df, in 1K blocks
DISK_BLOCKS = 10 * 1024 * 1024


def _hostname(context: CommandContext) -> str:
    return read_as_root(context, '/etc/hostname').strip() or get_config().shell.hostname


async def cmd_uname(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Display system information (-a, -s, -n, -r, -m, -o)."""
    flags, _ = split_flags(args)
    values = {
        's': KERNEL_NAME,
        'n': _hostname(context),
        'r': KERNEL_RELEASE,
        'm': MACHINE,
        'o': OPERATING_SYSTEM,
    }

    if 'a' in flags:
        selected = 'snrmo'
    else:
        selected = ''.join(k for k in 'snrmo' if k in flags) or 's'
    return CommandResult(output=' '.join(values[k] for k in selected))


async def cmd_date(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Display the current date and time (date [+FORMAT])."""
    if args and args[0].startswith('+'):
        return CommandResult(output=time.strftime(args[0][1:]))
    return CommandResult(output=time.strftime('%a %b %d %H:%M:%S %Z %Y'))


def _session_start(context: CommandContext) -> float:
    if context.processes:
        return min(p.started_at for p in context.processes)
    return time.time()


async def cmd_uptime(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Display how long the session has been running."""
    seconds = int(time.time() - _session_start(context))
    hours, remainder = divmod(seconds, 3600)
    minutes = remainder // 60
    users = len({p.user for p in context.processes}) or 1
    return CommandResult(
        output=f" {time.strftime('%H:%M:%S')} up {hours}:{minutes:02d}, "
               f"{users} user{'s' if users != 1 else ''}, load average: 0.00, 0.00, 0.00"
    )


async def cmd_ps(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """List processes of the session."""
    now = time.time()
    lines = [f"{'PID':>5} {'USER':<8} {'TIME':>8} CMD"]
    for process in sorted(context.processes, key=lambda p: p.pid):
        elapsed = int(now - process.started_at)
        hours, remainder = divmod(elapsed, 3600)
        minutes, seconds = divmod(remainder, 60)
        lines.append(
            f"{process.pid:>5} {process.user:<8} {hours:02d}:{minutes:02d}:{seconds:02d} {process.command}"
        )
    return CommandResult(output='\n'.join(lines))


async def cmd_kill(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Terminate a simulated process (kill [-SIGNAL] PID...)."""
    pids = [a for a in args if not a.startswith('-')]
    if not pids:
        return fail('kill', 'usage: kill [-s sigspec | -signum] pid')

    remaining = list(context.processes)
    errors = []
    for raw in pids:
        if not raw.isdigit():
            errors.append(f"kill: {raw}: arguments must be process or job IDs")
            continue
        pid = int(raw)
        process = next((p for p in remaining if p.pid == pid), None)
        if process is None:
            errors.append(f"kill: ({pid}) - No such process")
        elif pid == 1 or (context.user_id != ROOT_USER and process.user != context.user_id):
            errors.append(f"kill: ({pid}) - Operation not permitted")
        else:
            remaining.remove(process)

    if len(remaining) != len(context.processes):
        context.processes[:] = remaining
        if context.update_processes is not None:
            context.update_processes(remaining)

    if errors:
        return CommandResult(error='\n'.join(errors), exit_code=1)
    return CommandResult()


async def cmd_df(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Display filesystem usage (-h human readable)."""
    flags, _ = split_flags(args)
    stats = context.vfs.get_stats()

    # One block per inode plus the content bytes
    used = stats['total_inodes'] + (stats['total_size'] + 1023) // 1024
    available = DISK_BLOCKS - used
    percent = max(1, used * 100 // DISK_BLOCKS)

    def size(blocks: int) -> str:
        if 'h' not in flags:
            return str(blocks)
        for unit in ('K', 'M', 'G'):
            if blocks < 1024:
                return f"{blocks}{unit}"
            blocks //= 1024
        return f"{blocks}T"

    header = f"{'Filesystem':<12} {'1K-blocks' if 'h' not in flags else 'Size':>10} {'Used':>8} {'Available':>10} Use% Mounted on"
    row = f"{'vfs':<12} {size(DISK_BLOCKS):>10} {size(used):>8} {size(available):>10} {percent:>3}% /"
    return CommandResult(output=f"{header}\n{row}")


async def cmd_free(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Display simulated memory usage (-m for MiB)."""
    flags, _ = split_flags(args)
    divisor = 1024 if 'm' in flags else 1

    # Each process is charged a fixed amount
    used = 65536 + 16384 * len(context.processes)
    cached = TOTAL_MEMORY // 8
    free = TOTAL_MEMORY - used - cached

    def column(value: int) -> str:
        return f"{value // divisor:>12}"

    lines = [
        f"{'':<7}{'total':>12}{'used':>12}{'free':>12}{'shared':>12}{'buff/cache':>12}{'available':>12}",
        f"{'Mem:':<7}{column(TOTAL_MEMORY)}{column(used)}{column(free)}{column(0)}{column(cached)}{column(free + cached)}",
        f"{'Swap:':<7}{column(TOTAL_SWAP)}{column(0)}{column(TOTAL_SWAP)}",
    ]
    return CommandResult(output='\n'.join(lines))


SYSTEM_COMMANDS = {
    'uname': (cmd_uname, "Display system information (-a)"),
    'date': (cmd_date, "Display date and time"),
    'uptime': (cmd_uptime, "Display session uptime"),
    'ps': (cmd_ps, "List processes"),
    'kill': (cmd_kill, "Terminate a process"),
    'df': (cmd_df, "Display filesystem usage"),
    'free': (cmd_free, "Display memory usage"),
}


def register_system_commands(registry: CommandRegistry) -> None:
    """Register the simulated system information commands."""
    for name, (handler, help_text) in SYSTEM_COMMANDS.items():
        registry.register(name, handler, help_text)
