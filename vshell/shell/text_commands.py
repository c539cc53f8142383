"""
Text Filter Commands

Line-oriented filters in the Unix tradition. Each reads the files it is
given, or stdin when no file is named, and writes its result to stdout
so it can sit anywhere in a pipeline.

Author: YSNRFD
Version: 1.0.0
"""

import fnmatch
import re
from typing import Optional, List, Tuple, Union

from .builtins import fail, resolve_arg
from .registry import CommandRegistry
from .types import CommandContext, CommandResult
from vshell.filesystem.inode import Inode
from vshell.filesystem.result import Err


def parse_options(
    args: List[str],
    valued: str = ''
) -> Tuple[set, dict[str, str], List[str]]:
    """
    Parse short options.

    Args:
        args: Raw arguments
        valued: Option letters that take a value (``-n 5`` or ``-n5``)

    Returns:
        (boolean flags, option values, operands)
    """
    flags = set()
    values: dict[str, str] = {}
    operands = []
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == '--':
            operands.extend(args[i + 1:])
            break
        if not arg.startswith('-') or arg == '-':
            operands.append(arg)
            i += 1
            continue
        if arg[1:].isdigit() and 'n' in valued:
            values['n'] = arg[1:]
            i += 1
            continue

        letters = arg[1:]
        for pos, letter in enumerate(letters):
            if letter in valued:
                rest = letters[pos + 1:]
                if rest:
                    values[letter] = rest
                elif i + 1 < len(args):
                    i += 1
                    values[letter] = args[i]
                break
            flags.add(letter)
        i += 1
    return flags, values, operands


def read_input(
    command: str,
    files: List[str],
    context: CommandContext,
    stdin: Optional[str]
) -> Union[str, CommandResult]:
    """Concatenate the named files, or return stdin; a failed read is a result."""
    if not files:
        return stdin or ''

    contents = []
    for path in files:
        if path == '-':
            contents.append(stdin or '')
            continue
        result = context.vfs.read_file(resolve_arg(context, path), context.user_id, context.cwd)
        if isinstance(result, Err):
            return fail(command, f"{path}: {result.message}")
        contents.append(result.value)
    return '\n'.join(contents)


def _lines(text: str) -> List[str]:
    return text.splitlines()


async def cmd_grep(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Print lines matching a pattern (-i, -v, -n, -c)."""
    flags, _, operands = parse_options(args)
    if not operands:
        return fail('grep', 'usage: grep [-ivnc] PATTERN [FILE...]', exit_code=2)

    try:
        pattern = re.compile(operands[0], re.IGNORECASE if 'i' in flags else 0)
    except re.error as e:
        return fail('grep', f"invalid pattern: {e}", exit_code=2)

    files = operands[1:]
    sources = [(path, read_input('grep', [path], context, stdin)) for path in files] or [(None, stdin or '')]

    output = []
    errors = []
    total = 0
    for name, text in sources:
        if isinstance(text, CommandResult):
            errors.append(text.error)
            continue

        count = 0
        for number, line in enumerate(_lines(text), 1):
            if bool(pattern.search(line)) == ('v' in flags):
                continue
            count += 1
            if 'c' in flags:
                continue
            prefix = f"{name}:" if len(files) > 1 else ''
            if 'n' in flags:
                prefix += f"{number}:"
            output.append(prefix + line)

        if 'c' in flags:
            output.append(f"{name}:{count}" if len(files) > 1 else str(count))
        total += count

    if errors:
        return CommandResult(output='\n'.join(output), error='\n'.join(errors), exit_code=2)
    return CommandResult(output='\n'.join(output), exit_code=0 if total else 1)


async def cmd_wc(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Count lines, words and bytes (-l, -w, -c)."""
    flags, _, files = parse_options(args)
    text = read_input('wc', files, context, stdin)
    if isinstance(text, CommandResult):
        return text

    counts = {
        'l': len(_lines(text)),
        'w': len(text.split()),
        'c': len(text.encode('utf-8')),
    }
    selected = [k for k in 'lwc' if k in flags] or ['l', 'w', 'c']

    if len(selected) == 1:
        output = str(counts[selected[0]])
    else:
        output = ' '.join(f"{counts[k]:>7}" for k in selected)
    if len(files) == 1:
        output += f" {files[0]}"
    return CommandResult(output=output)


def _line_count(values: dict[str, str], command: str) -> Union[int, CommandResult]:
    raw = values.get('n', '10')
    try:
        return abs(int(raw))
    except ValueError:
        return fail(command, f"invalid number of lines: '{raw}'")


async def cmd_head(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Print the first lines (-n N, default 10)."""
    _, values, files = parse_options(args, valued='n')
    count = _line_count(values, 'head')
    if isinstance(count, CommandResult):
        return count
    text = read_input('head', files, context, stdin)
    if isinstance(text, CommandResult):
        return text
    return CommandResult(output='\n'.join(_lines(text)[:count]))


async def cmd_tail(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Print the last lines (-n N, default 10)."""
    _, values, files = parse_options(args, valued='n')
    count = _line_count(values, 'tail')
    if isinstance(count, CommandResult):
        return count
    text = read_input('tail', files, context, stdin)
    if isinstance(text, CommandResult):
        return text
    lines = _lines(text)
    return CommandResult(output='\n'.join(lines[-count:] if count else []))


_NUMBER_RE = re.compile(r'\s*(-?\d+(?:\.\d+)?)')


def _numeric_key(line: str) -> float:
    match = _NUMBER_RE.match(line)
    return float(match.group(1)) if match else 0.0


async def cmd_sort(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Sort lines (-r reverse, -n numeric, -u unique)."""
    flags, _, files = parse_options(args)
    text = read_input('sort', files, context, stdin)
    if isinstance(text, CommandResult):
        return text

    lines = _lines(text)
    if 'u' in flags:
        lines = list(dict.fromkeys(lines))
    if 'n' in flags:
        lines.sort(key=_numeric_key, reverse='r' in flags)
    else:
        lines.sort(reverse='r' in flags)
    return CommandResult(output='\n'.join(lines))


async def cmd_uniq(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Collapse adjacent duplicate lines (-c count, -d only duplicates)."""
    flags, _, files = parse_options(args)
    text = read_input('uniq', files, context, stdin)
    if isinstance(text, CommandResult):
        return text

    groups: List[List] = []
    for line in _lines(text):
        if groups and groups[-1][0] == line:
            groups[-1][1] += 1
        else:
            groups.append([line, 1])

    if 'd' in flags:
        groups = [g for g in groups if g[1] > 1]
    if 'c' in flags:
        output = [f"{count:>7} {line}" for line, count in groups]
    else:
        output = [line for line, _ in groups]
    return CommandResult(output='\n'.join(output))


def _field_indexes(spec: str, width: int) -> Optional[List[int]]:
    """Expand a cut field list ("1,3", "2-4", "3-") into 0-based indexes."""
    indexes: List[int] = []
    for part in spec.split(','):
        start, dash, end = part.partition('-')
        try:
            first = int(start) if start else 1
            last = (int(end) if end else width) if dash else first
        except ValueError:
            return None
        if first < 1:
            return None
        indexes.extend(i - 1 for i in range(first, last + 1) if i - 1 not in indexes)
    return indexes


async def cmd_cut(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Select fields from each line (-d DELIM -f LIST)."""
    _, values, files = parse_options(args, valued='df')
    if 'f' not in values:
        return fail('cut', 'you must specify a list of fields')

    delimiter = values.get('d', '\t')
    if len(delimiter) != 1:
        return fail('cut', 'the delimiter must be a single character')

    text = read_input('cut', files, context, stdin)
    if isinstance(text, CommandResult):
        return text

    output = []
    for line in _lines(text):
        if delimiter not in line:
            output.append(line)
            continue
        fields = line.split(delimiter)
        indexes = _field_indexes(values['f'], len(fields))
        if indexes is None:
            return fail('cut', f"invalid field value '{values['f']}'")
        output.append(delimiter.join(fields[i] for i in indexes if i < len(fields)))
    return CommandResult(output='\n'.join(output))


async def cmd_tee(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Copy stdin to files and to stdout (-a append)."""
    flags, _, files = parse_options(args)
    text = stdin or ''
    errors = []

    for path in files:
        target = resolve_arg(context, path)
        if 'a' in flags:
            result = context.vfs.append_file(target, text, context.user_id, context.cwd)
        else:
            result = context.vfs.write_file(target, text, context.user_id, context.cwd)
        if isinstance(result, Err):
            errors.append(f"tee: {path}: {result.message}")

    if errors:
        return CommandResult(output=text, error='\n'.join(errors), exit_code=1)
    return CommandResult(output=text)


def _parse_substitution(expression: str) -> Optional[Tuple['re.Pattern[str]', str, int]]:
    """Parse ``s/pattern/replacement/flags``; returns (regex, replacement, count)."""
    if len(expression) < 2 or expression[0] != 's':
        return None

    delimiter = expression[1]
    parts = []
    current = []
    i = 2
    while i < len(expression):
        char = expression[i]
        if char == '\\' and i + 1 < len(expression) and expression[i + 1] == delimiter:
            current.append(delimiter)
            i += 2
            continue
        if char == delimiter:
            parts.append(''.join(current))
            current = []
        else:
            current.append(char)
        i += 1
    parts.append(''.join(current))

    if len(parts) != 3:
        return None

    pattern, replacement, flags = parts
    if set(flags) - {'g', 'i'}:
        return None

    try:
        regex = re.compile(pattern, re.IGNORECASE if 'i' in flags else 0)
    except re.error:
        return None

    # sed's & is the whole match
    replacement = re.sub(r'(?<!\\)&', r'\\g<0>', replacement).replace('\\&', '&')
    return regex, replacement, 0 if 'g' in flags else 1


async def cmd_sed(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Stream editor; supports s/pattern/replacement/[gi]."""
    _, values, operands = parse_options(args, valued='e')
    if 'e' in values:
        expression, files = values['e'], operands
    elif operands:
        expression, files = operands[0], operands[1:]
    else:
        return fail('sed', 'no script specified')

    parsed = _parse_substitution(expression)
    if parsed is None:
        return fail('sed', f"-e expression #1: unknown command: `{expression}'")
    regex, replacement, count = parsed

    text = read_input('sed', files, context, stdin)
    if isinstance(text, CommandResult):
        return text

    try:
        output = [regex.sub(replacement, line, count=count) for line in _lines(text)]
    except re.error as e:
        return fail('sed', str(e))
    return CommandResult(output='\n'.join(output))


_AWK_RE = re.compile(r'^\s*(?:/(?P<pattern>(?:\\/|[^/])*)/)?\s*(?:\{\s*(?P<action>.*?)\s*\})?\s*$', re.S)
_AWK_ITEM_RE = re.compile(r'"((?:\\"|[^"])*)"|\$(\w+)|(\bNF\b|\bNR\b)|(,)')


def _awk_print(items: str, fields: List[str], record: str, number: int) -> str:
    pieces = []
    current = []

    for match in _AWK_ITEM_RE.finditer(items):
        literal, field, var, comma = match.groups()
        if comma:
            pieces.append(''.join(current))
            current = []
        elif literal is not None:
            current.append(literal.replace('\\"', '"'))
        elif var == 'NF':
            current.append(str(len(fields)))
        elif var == 'NR':
            current.append(str(number))
        elif field == 'NF':
            current.append(fields[-1] if fields else '')
        elif field is not None and field.isdigit():
            index = int(field)
            if index == 0:
                current.append(record)
            elif index <= len(fields):
                current.append(fields[index - 1])
    pieces.append(''.join(current))
    return ' '.join(pieces)


async def cmd_awk(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Pattern scanning; supports [/regex/] {print ITEMS} with -F SEP."""
    _, values, operands = parse_options(args, valued='F')
    if not operands:
        return fail('awk', 'usage: awk [-F sep] \'[/regex/] {print ...}\' [FILE...]')

    program, files = operands[0], operands[1:]
    match = _AWK_RE.match(program)
    action = match.group('action') if match else None
    if match is None or (action is not None and action and not action.startswith('print')):
        return fail('awk', f"syntax error in program: {program}", exit_code=2)

    try:
        pattern = re.compile(match.group('pattern')) if match.group('pattern') else None
    except re.error as e:
        return fail('awk', f"invalid regex: {e}", exit_code=2)

    text = read_input('awk', files, context, stdin)
    if isinstance(text, CommandResult):
        return text

    separator = values.get('F')
    items = action[len('print'):].strip() if action else '$0'
    items = items or '$0'

    output = []
    for number, record in enumerate(_lines(text), 1):
        if pattern is not None and not pattern.search(record):
            continue
        fields = record.split(separator) if separator else record.split()
        output.append(_awk_print(items, fields, record, number))
    return CommandResult(output='\n'.join(output))


async def cmd_xargs(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Run a command with stdin words appended as arguments (default echo)."""
    command = args or ['echo']
    registry = context.registry
    handler = registry.get(command[0]) if registry is not None else None
    if handler is None:
        return fail('xargs', f"{command[0]}: No such file or directory", exit_code=127)

    words = (stdin or '').split()
    return await handler(command[1:] + words, context, None)


async def cmd_seq(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Print a sequence of integers (seq [FIRST [INCREMENT]] LAST)."""
    if not 1 <= len(args) <= 3:
        return fail('seq', 'usage: seq [FIRST [INCREMENT]] LAST')

    try:
        numbers = [int(a) for a in args]
    except ValueError:
        bad = next(a for a in args if not a.lstrip('-').isdigit())
        return fail('seq', f"invalid argument: '{bad}'")

    if len(numbers) == 1:
        first, step, last = 1, 1, numbers[0]
    elif len(numbers) == 2:
        first, step, last = numbers[0], 1, numbers[1]
    else:
        first, step, last = numbers
    if step == 0:
        return fail('seq', "invalid Zero increment value: '0'")

    stop = last + (1 if step > 0 else -1)
    return CommandResult(output='\n'.join(str(n) for n in range(first, stop, step)))


async def cmd_find(args: List[str], context: CommandContext, stdin: Optional[str] = None) -> CommandResult:
    """Search a directory tree (find [PATH] [-name GLOB] [-type f|d|l])."""
    start = '.'
    name_glob = None
    type_filter = None

    i = 0
    if args and not args[0].startswith('-'):
        start = args[0]
        i = 1
    while i < len(args):
        option = args[i]
        if option in ('-name', '-type') and i + 1 < len(args):
            if option == '-name':
                name_glob = args[i + 1]
            else:
                type_filter = args[i + 1]
            i += 2
            continue
        return fail('find', f"unknown predicate `{option}'")

    if type_filter is not None and type_filter not in ('f', 'd', 'l'):
        return fail('find', f"Unknown argument to -type: {type_filter}")

    vfs = context.vfs
    user = context.user_id
    root = vfs.stat(resolve_arg(context, start), user, context.cwd)
    if isinstance(root, Err):
        return fail('find', f"'{start}': {root.message}")

    kinds = {'f': 'file', 'd': 'directory', 'l': 'symlink'}
    found = []
    errors = []

    def visit(inode: Inode, display: str, name: str) -> None:
        if (name_glob is None or fnmatch.fnmatchcase(name, name_glob)) and \
                (type_filter is None or inode.type.value == kinds[type_filter]):
            found.append(display)
        if not inode.is_directory:
            return
        if not inode.can_read(user) or not inode.can_execute(user):
            errors.append(f"find: '{display}': Permission denied")
            return
        for child_id in inode.children:
            child = vfs.get_inode(child_id)
            if child is not None:
                visit(child, display.rstrip('/') + '/' + child.name, child.name)

    visit(root.value, start, start.rstrip('/').rsplit('/', 1)[-1] or '/')

    if errors:
        return CommandResult(output='\n'.join(found), error='\n'.join(errors), exit_code=1)
    return CommandResult(output='\n'.join(found))


TEXT_COMMANDS = {
    'grep': (cmd_grep, "Print lines matching a pattern (-i, -v, -n, -c)"),
    'wc': (cmd_wc, "Count lines, words and bytes (-l, -w, -c)"),
    'head': (cmd_head, "Print the first lines (-n N)"),
    'tail': (cmd_tail, "Print the last lines (-n N)"),
    'sort': (cmd_sort, "Sort lines (-r, -n, -u)"),
    'uniq': (cmd_uniq, "Collapse adjacent duplicates (-c, -d)"),
    'cut': (cmd_cut, "Select fields (-d DELIM -f LIST)"),
    'tee': (cmd_tee, "Copy stdin to files and stdout (-a)"),
    'sed': (cmd_sed, "Substitute text (s/pattern/replacement/g)"),
    'awk': (cmd_awk, "Print fields ({print $N}, -F SEP)"),
    'xargs': (cmd_xargs, "Build a command from stdin"),
    'seq': (cmd_seq, "Print a sequence of numbers"),
    'find': (cmd_find, "Search a directory tree (-name, -type)"),
}


def register_text_commands(registry: CommandRegistry) -> None:
    """Register the text filters."""
    for name, (handler, help_text) in TEXT_COMMANDS.items():
        registry.register(name, handler, help_text)
