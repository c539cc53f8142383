"""
Command Parser Module

Turns a raw input line into compound segments of pipelines of
command actions. Everything here is a pure function of its input:
no filesystem access, no environment lookups beyond the map handed
to ``expand``.

Handles:
- Single and double quotes
- ``$(...)`` command substitution spans (kept whole)
- Pipes (|)
- Redirections (&>, 2>, >>, >, <)
- Compound operators (&&, ||, ;)
- ``$NAME`` and ``${NAME}`` variables

A literal dollar sign (single-quoted or backslash-escaped) is carried
through tokenization as ``\\$`` so that later expansion leaves it alone;
``expand`` turns it back into ``$``.

Author: YSNRFD
Version: 1.0.0
"""

import re
from typing import Optional, List, Tuple

from .types import (
    CommandAction,
    CommandPipeline,
    CompoundSegment,
    Operator,
    RedirectType,
)


# Output redirections, highest precedence first.
_OUTPUT_OPERATORS = (
    ('&>', RedirectType.BOTH),
    ('2>', RedirectType.STDERR),
    ('>>', RedirectType.APPEND),
    ('>', RedirectType.OVERWRITE),
)

_INPUT_OPERATOR = '<'

_VARIABLE_RE = re.compile(r'(\\?)\$(?:\{(\w+)\}|(\w+))')


def _substitution_end(text: str, start: int) -> int:
    """
    Index just past the ``)`` closing the ``$(`` at ``start``, or -1 if
    the span is unbalanced.
    """
    depth = 0
    quote = None
    i = start
    while i < len(text):
        char = text[i]
        if quote:
            if char == '\\' and quote == '"' and i + 1 < len(text):
                i += 2
                continue
            if char == quote:
                quote = None
        elif char in ('"', "'"):
            quote = char
        elif char == '$' and text.startswith('$(', i):
            depth += 1
            i += 2
            continue
        elif char == ')':
            depth -= 1
            if depth == 0:
                return i + 1
        i += 1
    return -1


def _scan(text: str, separators: Tuple[str, ...]) -> List[Tuple[str, Optional[str]]]:
    """
    Split ``text`` on any of ``separators`` occurring outside quotes and
    substitution spans. Longer separators must come first.

    Returns:
        List of (piece, separator that followed it or None)
    """
    pieces: List[Tuple[str, Optional[str]]] = []
    current: List[str] = []
    quote = None
    i = 0

    while i < len(text):
        char = text[i]

        if quote:
            current.append(char)
            if char == '\\' and quote == '"' and i + 1 < len(text):
                current.append(text[i + 1])
                i += 2
                continue
            if char == quote:
                quote = None
            i += 1
            continue

        if char == '\\' and i + 1 < len(text):
            current.append(text[i:i + 2])
            i += 2
            continue

        if char in ('"', "'"):
            quote = char
            current.append(char)
            i += 1
            continue

        if text.startswith('$(', i):
            end = _substitution_end(text, i)
            if end != -1:
                current.append(text[i:end])
                i = end
                continue

        for sep in separators:
            if text.startswith(sep, i):
                pieces.append((''.join(current), sep))
                current = []
                i += len(sep)
                break
        else:
            current.append(char)
            i += 1

    pieces.append((''.join(current), None))
    return pieces


def _lex(text: str, operators: bool = False) -> List[Tuple[str, bool]]:
    """
    Quote-aware word splitting.

    Args:
        text: Input text
        operators: Recognise unquoted redirection operators as
                   separate tokens

    Returns:
        List of (value, is_operator)
    """
    tokens: List[Tuple[str, bool]] = []
    current: List[str] = []
    started = False
    quote = None
    i = 0

    def flush():
        nonlocal current, started
        if started:
            tokens.append((''.join(current), False))
        current = []
        started = False

    while i < len(text):
        char = text[i]

        if quote == "'":
            if char == "'":
                quote = None
            elif char == '$':
                current.append('\\$')
            else:
                current.append(char)
            i += 1
            continue

        if quote == '"':
            if char == '"':
                quote = None
                i += 1
                continue
            if char == '\\' and i + 1 < len(text) and text[i + 1] in '"\\`':
                current.append(text[i + 1])
                i += 2
                continue
            if char == '\\' and text.startswith('$', i + 1):
                current.append('\\$')
                i += 2
                continue
            if text.startswith('$(', i):
                end = _substitution_end(text, i)
                if end != -1:
                    current.append(text[i:end])
                    i = end
                    continue
            current.append(char)
            i += 1
            continue

        if char in ('"', "'"):
            quote = char
            started = True
            i += 1
            continue

        if char == '\\' and i + 1 < len(text):
            nxt = text[i + 1]
            current.append('\\$' if nxt == '$' else nxt)
            started = True
            i += 2
            continue

        if text.startswith('$(', i):
            end = _substitution_end(text, i)
            if end != -1:
                current.append(text[i:end])
                started = True
                i = end
                continue

        if char.isspace():
            flush()
            i += 1
            continue

        if operators:
            op = None
            if text.startswith('&>', i):
                op = '&>'
            elif text.startswith('2>', i) and not started:
                op = '2>'
            elif text.startswith('>>', i):
                op = '>>'
            elif char in ('>', _INPUT_OPERATOR):
                op = char
            if op is not None:
                flush()
                tokens.append((op, True))
                i += len(op)
                continue

        current.append(char)
        started = True
        i += 1

    flush()
    return tokens


def tokenize(text: str) -> List[str]:
    """
    Split text into words, honouring quotes.

    Quotes are removed; a balanced ``$(...)`` span stays in one word
    regardless of the whitespace inside it.

    Example:
        >>> tokenize('echo "a b" $(ls -l)')
        ['echo', 'a b', '$(ls -l)']
    """
    return [value for value, _ in _lex(text)]


def split_pipeline(text: str) -> List[str]:
    """Split a segment into pipeline stages on unquoted ``|``."""
    return [piece for piece, _ in _scan(text, ('||', '|'))]


def parse_action(stage: str) -> Optional[CommandAction]:
    """
    Parse one pipeline stage, pulling out its redirections.

    Output redirection picks the highest-precedence operator present
    (&>, then 2>, then >>, then >); its target is the next word and any
    further words remain arguments. Input redirection (<) is taken
    independently. An operator without a target, or one that lost on
    precedence, stays in the arguments as literal text.

    Returns:
        CommandAction, or None for an empty stage
    """
    tokens = _lex(stage, operators=True)
    if not tokens:
        return None

    consumed = set()
    redirect_type = RedirectType.NONE
    redirect_path = None
    input_path = None

    def target_of(index: int) -> Optional[int]:
        nxt = index + 1
        if nxt < len(tokens) and not tokens[nxt][1]:
            return nxt
        return None

    for op, kind in _OUTPUT_OPERATORS:
        for i, (value, is_op) in enumerate(tokens):
            if is_op and value == op:
                target = target_of(i)
                if target is not None:
                    redirect_type = kind
                    redirect_path = tokens[target][0]
                    consumed.update((i, target))
                    break
        if redirect_type != RedirectType.NONE:
            break

    for i, (value, is_op) in enumerate(tokens):
        if is_op and value == _INPUT_OPERATOR and i not in consumed:
            target = target_of(i)
            if target is not None and target not in consumed:
                input_path = tokens[target][0]
                consumed.update((i, target))
                break

    words = [value for i, (value, _) in enumerate(tokens) if i not in consumed]
    if not words and redirect_type == RedirectType.NONE and input_path is None:
        return None

    return CommandAction(
        name=words[0] if words else '',
        args=words[1:],
        redirect_type=redirect_type,
        redirect_path=redirect_path,
        input_path=input_path,
    )


def parse_pipeline(text: str) -> CommandPipeline:
    """Parse a segment into its pipeline of actions; empty stages are skipped."""
    actions = []
    for stage in split_pipeline(text):
        action = parse_action(stage)
        if action is not None:
            actions.append(action)
    return CommandPipeline(actions=actions)


def parse_compound(line: str) -> List[CompoundSegment]:
    """
    Parse a full input line.

    Splits on unquoted ``&&``, ``||`` and ``;``. Each segment carries
    the operator that follows it; the last one carries ``Operator.END``.
    Empty segments are dropped, as is a line starting with ``#``.

    Example:
        >>> [s.operator for s in parse_compound('false && echo x; ls')]
        [<Operator.AND: '&&'>, <Operator.SEQ: ';'>, <Operator.END: 'end'>]
    """
    if line.strip().startswith('#'):
        return []

    segments: List[CompoundSegment] = []
    for piece, sep in _scan(line, ('&&', '||', ';')):
        pipeline = parse_pipeline(piece)
        if not pipeline.actions:
            continue
        operator = Operator(sep) if sep else Operator.END
        segments.append(CompoundSegment(pipeline=pipeline, operator=operator))

    if segments:
        segments[-1].operator = Operator.END
    return segments


def split_substitutions(word: str) -> List[Tuple[str, bool]]:
    """
    Split a word into literal text and ``$(...)`` command texts.

    Returns:
        List of (text, is_command); for commands, text is the inner
        command line without the ``$(`` and ``)``
    """
    parts: List[Tuple[str, bool]] = []
    literal: List[str] = []
    i = 0
    while i < len(word):
        if word.startswith('\\$', i):
            literal.append('\\$')
            i += 2
            continue
        if word.startswith('$(', i):
            end = _substitution_end(word, i)
            if end != -1:
                if literal:
                    parts.append((''.join(literal), False))
                    literal = []
                parts.append((word[i + 2:end - 1], True))
                i = end
                continue
        literal.append(word[i])
        i += 1
    if literal:
        parts.append((''.join(literal), False))
    return parts


def has_substitution(word: str) -> bool:
    return any(is_command for _, is_command in split_substitutions(word))


def expand_word(word: str, env: dict[str, str]) -> str:
    """Expand ``$NAME`` and ``${NAME}`` in one word; unset names become ''."""
    def replace(match: 're.Match[str]') -> str:
        if match.group(1):
            return match.group(0)[1:]
        name = match.group(2) or match.group(3)
        return env.get(name, '')

    return _VARIABLE_RE.sub(replace, word).replace('\\$', '$')


def expand(tokens: List[str], env: dict[str, str]) -> List[str]:
    """Expand environment variables in every token."""
    return [expand_word(token, env) for token in tokens]


def escape_dollars(text: str) -> str:
    """Protect ``$`` in already-final text from a later ``expand``."""
    return text.replace('$', '\\$')
