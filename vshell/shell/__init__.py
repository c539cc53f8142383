"""
VShell Shell Module

Command interpreter:
- Parser (tokens, pipes, redirections, compound operators)
- Command registry
- Executor (pipelines, substitution, short-circuit evaluation)
- Built-in, text and system commands
- Session (cwd, environment, history)
"""

from .types import (
    CommandAction,
    CommandPipeline,
    CompoundSegment,
    CommandContext,
    CommandResult,
    CompoundResult,
    Operator,
    Process,
    RedirectType,
)
from .parser import tokenize, parse_action, parse_pipeline, parse_compound, expand
from .registry import CommandRegistry, create_default_registry
from .executor import CommandExecutor, MAX_SUBSTITUTION_DEPTH
from .session import ShellSession

__all__ = [
    'CommandAction',
    'CommandPipeline',
    'CompoundSegment',
    'CommandContext',
    'CommandResult',
    'CompoundResult',
    'Operator',
    'Process',
    'RedirectType',
    'tokenize',
    'parse_action',
    'parse_pipeline',
    'parse_compound',
    'expand',
    'CommandRegistry',
    'create_default_registry',
    'CommandExecutor',
    'MAX_SUBSTITUTION_DEPTH',
    'ShellSession',
]
