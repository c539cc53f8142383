"""
Shell Built-in Commands

File and session commands. Every handler has the signature
``async cmd_x(args, context, stdin=None) -> CommandResult`` and reports
failures in the result, in conventional Unix wording, rather than
raising.

Author: YSNRFD
Version: 1.0.0
"""

import time
from typing import Optional, List, Tuple

from .types import CommandContext, CommandResult
from .registry import CommandRegistry
from vshell.core.config_loader import get_config
from vshell.filesystem.inode import Inode, ROOT_USER, format_mode
from vshell.filesystem.path_resolver import PathResolver
from vshell.filesystem.result import Ok, Err, FsError


def fail(command: str, message: str, exit_code: int = 1) -> CommandResult:
    """Build a failed result with the ``command: message`` prefix."""
    return CommandResult(error=f"{command}: {message}", exit_code=exit_code)


def split_flags(args: List[str]) -> Tuple[set, List[str]]:
    """
    Separate single-letter flags from operands.

    Combined flags (``-la``) are split into letters; ``--`` ends option
    parsing and a lone ``-`` is an operand.
    """
    flags = set()
    operands = []
    options_done = False
    for arg in args:
        if options_done or arg == '-' or not arg.startswith('-'):
            operands.append(arg)
        elif arg == '--':
            options_done = True
        else:
            flags.update(arg[1:])
    return flags, operands


def resolve_arg(context: CommandContext, path: str) -> str:
    """Expand ``~`` in a path argument."""
    return PathResolver.expand_home(path, context.home)


def read_as_root(context: CommandContext, path: str) -> str:
    """Read a system file regardless of the caller's permissions."""
    result = context.vfs.read_file(path, ROOT_USER)
    return '' if isinstance(result, Err) else result.value


# Navigation

async def cmd_pwd(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Print working directory."""
    return CommandResult(output=context.cwd)


async def cmd_cd(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """
    Change directory.

    Validates the target and reports its absolute path as output; the
    executor decides whether the move is committed.
    """
    if len(args) > 1:
        return fail('cd', 'too many arguments')

    if not args or args[0] == '~':
        target = context.home
    elif args[0] == '-':
        target = context.env.get('OLDPWD', context.cwd)
    else:
        target = resolve_arg(context, args[0])

    result = context.vfs.stat(target, context.user_id, context.cwd)
    if isinstance(result, Err):
        return fail('cd', f"{target}: {result.message}")

    inode = result.value
    if not inode.is_directory:
        return fail('cd', f"{target}: {FsError.NOT_A_DIRECTORY.message}")
    if not inode.can_execute(context.user_id):
        return fail('cd', f"{target}: {FsError.PERMISSION_DENIED.message}")

    return CommandResult(output=context.vfs.get_path(inode.id))


def _long_entry(inode: Inode, name: str) -> str:
    type_char = {'directory': 'd', 'symlink': 'l'}.get(inode.type.value, '-')
    links = 2 + len(inode.children) if inode.is_directory else 1
    stamp = time.strftime('%b %d %H:%M', time.localtime(inode.modified_at))
    line = (
        f"{type_char}{format_mode(inode.mode)} {links} {inode.owner_id} "
        f"{inode.group_id} {inode.size:>5} {stamp} {name}"
    )
    if inode.is_symlink:
        line += f" -> {inode.target}"
    return line


async def cmd_ls(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """List directory contents (-a all, -l long)."""
    flags, paths = split_flags(args)
    show_all = 'a' in flags
    long_format = 'l' in flags
    vfs = context.vfs

    if not paths:
        paths = ['.']

    sections = []
    errors = []

    for path in paths:
        target = resolve_arg(context, path)
        result = vfs.stat(target, context.user_id, context.cwd)
        if isinstance(result, Err):
            errors.append(f"ls: cannot access '{path}': {result.message}")
            continue

        if not result.value.is_directory:
            entries = [(path, result.value)]
        else:
            listing = vfs.list_children(target, context.user_id, context.cwd)
            if isinstance(listing, Err):
                errors.append(f"ls: cannot open directory '{path}': {listing.message}")
                continue
            entries = [(child.name, child) for child in listing.value]
            if not show_all:
                entries = [(name, child) for name, child in entries if not name.startswith('.')]
            else:
                directory = result.value
                parent = vfs.get_inode(directory.parent_id) if directory.parent_id else directory
                entries = [('.', directory), ('..', parent)] + entries

        if long_format:
            body = '\n'.join(_long_entry(inode, name) for name, inode in entries)
            if result.value.is_directory:
                body = f"total {len(entries)}" + ('\n' + body if body else '')
        else:
            body = '  '.join(name for name, _ in entries)

        if len(paths) > 1 and result.value.is_directory:
            body = f"{path}:" + ('\n' + body if body else '')
        sections.append(body)

    output = '\n\n'.join(s for s in sections if s) if len(paths) > 1 else (sections[0] if sections else '')
    if errors:
        return CommandResult(output=output, error='\n'.join(errors), exit_code=2)
    return CommandResult(output=output)


# File operations

async def cmd_mkdir(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Create directories (-p creates missing parents)."""
    flags, paths = split_flags(args)
    if not paths:
        return fail('mkdir', 'missing operand')

    vfs = context.vfs
    errors = []

    for path in paths:
        target = resolve_arg(context, path)

        if 'p' in flags:
            parsed = PathResolver.parse(target)
            current = '/' if parsed.is_absolute else ''
            for component in parsed.components:
                current = PathResolver.join(current, component) if current else component
                existing = vfs.stat(current, context.user_id, context.cwd)
                if isinstance(existing, Ok) and existing.value.is_directory:
                    continue
                created = vfs.mkdir(current, context.user_id, context.cwd)
                if isinstance(created, Err):
                    errors.append(f"mkdir: cannot create directory '{path}': {created.message}")
                    break
            continue

        created = vfs.mkdir(target, context.user_id, context.cwd)
        if isinstance(created, Err):
            errors.append(f"mkdir: cannot create directory '{path}': {created.message}")

    if errors:
        return CommandResult(error='\n'.join(errors), exit_code=1)
    return CommandResult()


async def cmd_touch(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Create empty files or update timestamps."""
    if not args:
        return fail('touch', 'missing file operand')

    errors = []
    for path in args:
        result = context.vfs.touch(resolve_arg(context, path), context.user_id, context.cwd)
        if isinstance(result, Err):
            errors.append(f"touch: cannot touch '{path}': {result.message}")

    if errors:
        return CommandResult(error='\n'.join(errors), exit_code=1)
    return CommandResult()


async def cmd_cat(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Print files, or stdin when no file is named."""
    if not args:
        return CommandResult(output=stdin or '')

    contents = []
    errors = []
    for path in args:
        if path == '-':
            contents.append(stdin or '')
            continue
        result = context.vfs.read_file(resolve_arg(context, path), context.user_id, context.cwd)
        if isinstance(result, Err):
            errors.append(f"cat: {path}: {result.message}")
        else:
            contents.append(result.value)

    output = '\n'.join(contents)
    if errors:
        return CommandResult(output=output, error='\n'.join(errors), exit_code=1)
    return CommandResult(output=output)


async def cmd_rm(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Remove files or directories (-r recursive, -f ignore missing)."""
    flags, paths = split_flags(args)
    recursive = bool(flags & {'r', 'R'})
    force = 'f' in flags

    if not paths:
        if force:
            return CommandResult()
        return fail('rm', 'missing operand')

    errors = []
    for path in paths:
        result = context.vfs.rm(resolve_arg(context, path), recursive, context.user_id, context.cwd)
        if isinstance(result, Err):
            if force and result.error == FsError.NOT_FOUND:
                continue
            if result.error == FsError.DIRECTORY_NOT_EMPTY and not recursive:
                errors.append(f"rm: cannot remove '{path}': Is a directory")
            else:
                errors.append(f"rm: cannot remove '{path}': {result.message}")

    if errors:
        return CommandResult(error='\n'.join(errors), exit_code=1)
    return CommandResult()


async def cmd_cp(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Copy files (-r/-R for directories)."""
    flags, paths = split_flags(args)
    if len(paths) < 2:
        return fail('cp', 'missing destination file operand' if paths else 'missing file operand')

    recursive = bool(flags & {'r', 'R'})
    dest = resolve_arg(context, paths[-1])
    errors = []

    for src in paths[:-1]:
        result = context.vfs.cp(resolve_arg(context, src), dest, recursive, context.user_id, context.cwd)
        if isinstance(result, Err):
            if result.error == FsError.OMITTING_DIRECTORY:
                errors.append(f"cp: -r not specified; omitting directory '{src}'")
            else:
                errors.append(f"cp: cannot copy '{src}': {result.message}")

    if errors:
        return CommandResult(error='\n'.join(errors), exit_code=1)
    return CommandResult()


async def cmd_mv(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Move or rename files."""
    _, paths = split_flags(args)
    if len(paths) < 2:
        return fail('mv', 'missing destination file operand' if paths else 'missing file operand')

    dest = resolve_arg(context, paths[-1])
    errors = []
    for src in paths[:-1]:
        result = context.vfs.mv(resolve_arg(context, src), dest, context.user_id, context.cwd)
        if isinstance(result, Err):
            errors.append(f"mv: cannot move '{src}' to '{paths[-1]}': {result.message}")

    if errors:
        return CommandResult(error='\n'.join(errors), exit_code=1)
    return CommandResult()


async def cmd_ln(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Create symbolic links (ln -s TARGET LINK)."""
    flags, paths = split_flags(args)
    if 's' not in flags:
        return fail('ln', 'hard links are not supported; use -s')
    if len(paths) != 2:
        return fail('ln', 'usage: ln -s TARGET LINK_NAME')

    target, link = paths
    result = context.vfs.ln(target, resolve_arg(context, link), context.user_id, context.cwd)
    if isinstance(result, Err):
        return fail('ln', f"failed to create symbolic link '{link}': {result.message}")
    return CommandResult()


async def cmd_chmod(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Change file permissions (three octal digits)."""
    if len(args) < 2:
        return fail('chmod', 'missing operand')

    mode = args[0]
    errors = []
    for path in args[1:]:
        result = context.vfs.chmod(resolve_arg(context, path), mode, context.user_id, context.cwd)
        if isinstance(result, Err):
            if result.error == FsError.INVALID_MODE:
                return fail('chmod', f"{result.message}: '{mode}'")
            errors.append(f"chmod: changing permissions of '{path}': {result.message}")

    if errors:
        return CommandResult(error='\n'.join(errors), exit_code=1)
    return CommandResult()


async def cmd_chown(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Change file owner (owner[:group]). Root only."""
    if len(args) < 2:
        return fail('chown', 'missing operand')

    owner, _, group = args[0].partition(':')
    errors = []
    for path in args[1:]:
        result = context.vfs.chown(
            resolve_arg(context, path), owner, context.user_id, context.cwd,
            new_group=group or None
        )
        if isinstance(result, Err):
            errors.append(f"chown: changing ownership of '{path}': {result.message}")

    if errors:
        return CommandResult(error='\n'.join(errors), exit_code=1)
    return CommandResult()


async def cmd_umask(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Show or set the file creation mask."""
    if not args:
        return CommandResult(output=context.vfs.get_umask())
    if not context.vfs.set_umask(args[0]):
        return fail('umask', f"{args[0]}: octal number out of range")
    return CommandResult()


async def cmd_stat(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Display file status."""
    if not args:
        return fail('stat', 'missing operand')

    blocks = []
    errors = []
    for path in args:
        result = context.vfs.lstat(resolve_arg(context, path), context.user_id, context.cwd)
        if isinstance(result, Err):
            errors.append(f"stat: cannot stat '{path}': {result.message}")
            continue

        inode = result.value
        type_char = {'directory': 'd', 'symlink': 'l'}.get(inode.type.value, '-')
        kind = {'file': 'regular file', 'directory': 'directory', 'symlink': 'symbolic link'}[inode.type.value]
        name = f"{path} -> {inode.target}" if inode.is_symlink else path
        blocks.append('\n'.join([
            f"  File: {name}",
            f"  Size: {inode.size}\tType: {kind}",
            f" Inode: {inode.id}",
            f"Access: ({int(inode.mode):04o}/{type_char}{format_mode(inode.mode)})  Uid: {inode.owner_id}  Gid: {inode.group_id}",
            f"Modify: {time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(inode.modified_at))}",
            f" Birth: {time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(inode.created_at))}",
        ]))

    output = '\n'.join(blocks)
    if errors:
        return CommandResult(output=output, error='\n'.join(errors), exit_code=1)
    return CommandResult(output=output)


async def cmd_file(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Determine file type."""
    if not args:
        return fail('file', 'missing operand')

    lines = []
    for path in args:
        result = context.vfs.lstat(resolve_arg(context, path), context.user_id, context.cwd)
        if isinstance(result, Err):
            lines.append(f"{path}: cannot open ({result.message})")
            continue
        inode = result.value
        if inode.is_directory:
            description = 'directory'
        elif inode.is_symlink:
            description = f"symbolic link to {inode.target}"
        elif not inode.content:
            description = 'empty'
        elif inode.content.startswith('#!'):
            description = 'script, ASCII text executable'
        else:
            description = 'ASCII text'
        lines.append(f"{path}: {description}")

    return CommandResult(output='\n'.join(lines))


# Session

async def cmd_clear(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Clear the terminal screen."""
    return CommandResult(output='\x1b[2J\x1b[H')


def _unescape(text: str) -> str:
    return (
        text.replace('\\\\', '\x00')
        .replace('\\n', '\n')
        .replace('\\t', '\t')
        .replace('\x00', '\\')
    )


async def cmd_echo(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """
    Print arguments.

    Backslash escapes (\\n, \\t) are interpreted; -n and -e are
    accepted for compatibility.
    """
    while args and args[0] in ('-n', '-e', '-ne', '-en'):
        args = args[1:]
    return CommandResult(output=_unescape(' '.join(args)))


async def cmd_history(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Show command history."""
    if args and args[0] == '-c':
        if context.clear_history is not None:
            context.clear_history()
        return CommandResult()

    entries = list(enumerate(context.history, 1))
    if args and args[0].isdigit():
        entries = entries[-int(args[0]):] if int(args[0]) else []
    return CommandResult(output='\n'.join(f"{n:>5}  {line}" for n, line in entries))


async def cmd_help(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """List available commands."""
    registry = context.registry
    if registry is None:
        return fail('help', 'no command registry available')

    if args:
        name = args[0]
        if name not in registry:
            return fail('help', f"no help topics match '{name}'")
        return CommandResult(output=f"{name}: {registry.help_text(name)}")

    width = max(len(name) for name in registry.list_commands())
    lines = ["Available commands:"]
    for name in registry.list_commands():
        lines.append(f"  {name.ljust(width)}  {registry.help_text(name)}")
    return CommandResult(output='\n'.join(lines))


async def cmd_sudo(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Run a command as root."""
    if not args:
        return fail('sudo', 'usage: sudo COMMAND [ARG...]')

    registry = context.registry
    handler = registry.get(args[0]) if registry is not None else None
    if handler is None:
        return fail('sudo', f"{args[0]}: command not found", exit_code=127)

    return await handler(args[1:], context.with_user(ROOT_USER), stdin)


async def cmd_export(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Set environment variables (NAME=value)."""
    if not args:
        lines = [f'declare -x {name}="{value}"' for name, value in sorted(context.env.items())]
        return CommandResult(output='\n'.join(lines))

    for arg in args:
        name, sep, value = arg.partition('=')
        if not name.isidentifier():
            return fail('export', f"`{arg}': not a valid identifier")
        if sep:
            context.set_env(name, value)
        elif name not in context.env:
            context.set_env(name, '')
    return CommandResult()


async def cmd_unset(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Remove environment variables."""
    for name in args:
        context.set_env(name, None)
    return CommandResult()


async def cmd_env(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Print the environment."""
    return CommandResult(output='\n'.join(f"{name}={value}" for name, value in context.env.items()))


# Identity

def _uid(context: CommandContext, user: str) -> Tuple[str, str]:
    """(uid, gid) for a user from /etc/passwd, with fallbacks."""
    for line in read_as_root(context, '/etc/passwd').splitlines():
        fields = line.split(':')
        if len(fields) >= 4 and fields[0] == user:
            return fields[2], fields[3]
    return ('0', '0') if user == ROOT_USER else ('1000', '1000')


def _groups(context: CommandContext, user: str) -> List[Tuple[str, str]]:
    """(gid, name) of the user's own group followed by its other memberships."""
    groups = [(_uid(context, user)[1], user)]
    for line in read_as_root(context, '/etc/group').splitlines():
        fields = line.split(':')
        if len(fields) >= 4 and user in fields[3].split(',') and fields[0] != user:
            groups.append((fields[2], fields[0]))
    return groups


async def cmd_whoami(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Display current user."""
    return CommandResult(output=context.user_id)


async def cmd_id(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Display user and group IDs."""
    user = args[0] if args else context.user_id
    uid, gid = _uid(context, user)
    groups = ','.join(f"{gid}({name})" for gid, name in _groups(context, user))
    return CommandResult(output=f"uid={uid}({user}) gid={gid}({user}) groups={groups}")


async def cmd_groups(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Display group memberships."""
    user = args[0] if args else context.user_id
    return CommandResult(output=' '.join(name for _, name in _groups(context, user)))


async def cmd_hostname(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Display the host name."""
    name = read_as_root(context, '/etc/hostname').strip()
    return CommandResult(output=name or get_config().shell.hostname)


async def cmd_which(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Locate a command."""
    registry = context.registry
    found = [f"/usr/bin/{name}" for name in args if registry is not None and name in registry]
    return CommandResult(output='\n'.join(found), exit_code=0 if len(found) == len(args) else 1)


async def cmd_type(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Describe how a name would be interpreted."""
    registry = context.registry
    lines = []
    missing = []
    for name in args:
        if registry is not None and name in registry:
            lines.append(f"{name} is a shell builtin")
        else:
            missing.append(f"type: {name}: not found")

    if missing:
        return CommandResult(output='\n'.join(lines), error='\n'.join(missing), exit_code=1)
    return CommandResult(output='\n'.join(lines))


async def cmd_true(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    return CommandResult()


async def cmd_false(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    return CommandResult(exit_code=1)


async def cmd_basename(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Strip directory (and optionally a suffix) from a path."""
    if not args:
        return fail('basename', 'missing operand')
    name = PathResolver.basename(args[0])
    if len(args) > 1 and name.endswith(args[1]) and name != args[1]:
        name = name[:-len(args[1])]
    return CommandResult(output=name)


async def cmd_dirname(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Strip the last component from a path."""
    if not args:
        return fail('dirname', 'missing operand')
    return CommandResult(output='\n'.join(PathResolver.dirname(a) for a in args))


async def cmd_read(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """
    Read a line into variables (read [-p PROMPT] NAME...).

    Piped input is used when present; otherwise the session's
    interactive prompt is awaited.
    """
    message = ''
    names = []
    i = 0
    while i < len(args):
        if args[i] == '-p' and i + 1 < len(args):
            message = args[i + 1]
            i += 2
            continue
        names.append(args[i])
        i += 1

    if stdin is not None:
        line = stdin.split('\n', 1)[0]
    elif context.prompt is not None:
        line = await context.prompt(message)
    else:
        return fail('read', 'no input available')

    names = names or ['REPLY']
    values = line.split(None, len(names) - 1)
    for index, name in enumerate(names):
        context.set_env(name, values[index] if index < len(values) else '')
    return CommandResult()


BUILTINS = {
    'pwd': (cmd_pwd, "Print working directory"),
    'cd': (cmd_cd, "Change directory"),
    'ls': (cmd_ls, "List directory contents (-a, -l)"),
    'mkdir': (cmd_mkdir, "Create directories (-p)"),
    'touch': (cmd_touch, "Create empty files or update timestamps"),
    'cat': (cmd_cat, "Print files"),
    'rm': (cmd_rm, "Remove files (-r, -f)"),
    'cp': (cmd_cp, "Copy files (-r)"),
    'mv': (cmd_mv, "Move or rename files"),
    'ln': (cmd_ln, "Create symbolic links (-s)"),
    'chmod': (cmd_chmod, "Change permissions"),
    'chown': (cmd_chown, "Change owner (root only)"),
    'umask': (cmd_umask, "Show or set the file creation mask"),
    'stat': (cmd_stat, "Display file status"),
    'file': (cmd_file, "Determine file type"),
    'clear': (cmd_clear, "Clear the screen"),
    'echo': (cmd_echo, "Print arguments"),
    'history': (cmd_history, "Show command history"),
    'help': (cmd_help, "List available commands"),
    'sudo': (cmd_sudo, "Run a command as root"),
    'export': (cmd_export, "Set environment variables"),
    'unset': (cmd_unset, "Remove environment variables"),
    'env': (cmd_env, "Print the environment"),
    'whoami': (cmd_whoami, "Display current user"),
    'id': (cmd_id, "Display user and group IDs"),
    'groups': (cmd_groups, "Display group memberships"),
    'hostname': (cmd_hostname, "Display the host name"),
    'which': (cmd_which, "Locate a command"),
    'type': (cmd_type, "Describe a command"),
    'true': (cmd_true, "Succeed"),
    'false': (cmd_false, "Fail"),
    'basename': (cmd_basename, "Strip directory from a path"),
    'dirname': (cmd_dirname, "Strip last component from a path"),
    'read': (cmd_read, "Read a line into variables"),
}


def register_builtins(registry: CommandRegistry) -> None:
    """Register the file and session commands."""
    for name, (handler, help_text) in BUILTINS.items():
        registry.register(name, handler, help_text)
