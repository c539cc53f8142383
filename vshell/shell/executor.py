"""
Command Executor Module

Runs parsed command lines against a registry and a filesystem:
- Pipes stdout between stages
- Applies output and input redirection
- Resolves ``$(...)`` substitutions and environment variables
- Short-circuits compound lines on ``&&`` / ``||``

Stages run strictly one after another; each handler is awaited before
the next stage starts. Nothing here raises: unknown commands, failed
substitutions and misbehaving handlers all become results with a
non-zero exit code.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, List, Tuple, Union

from .parser import (
    parse_compound,
    split_substitutions,
    expand_word,
    escape_dollars,
)
from .registry import CommandRegistry
from .types import (
    CommandAction,
    CommandContext,
    CommandPipeline,
    CommandResult,
    CompoundResult,
    Operator,
    RedirectType,
)
from vshell.filesystem.result import Err
from vshell.logger import get_logger


MAX_SUBSTITUTION_DEPTH = 20

EXIT_NOT_FOUND = 127

_DEPTH_EXCEEDED = "maximum command substitution depth exceeded"


class CommandExecutor:
    """
    Executes pipelines and compound lines.

    Example:
        >>> executor = CommandExecutor(create_default_registry())
        >>> result = await executor.execute_compound('echo hi | wc -c', context)
    """

    def __init__(self, registry: CommandRegistry):
        self._registry = registry
        self._logger = get_logger('executor')

    @property
    def registry(self) -> CommandRegistry:
        return self._registry

    # Words

    async def _substitute(
        self,
        word: str,
        context: CommandContext,
        depth: int
    ) -> Tuple[str, bool, List[str]]:
        """
        Replace each ``$(...)`` in a word with the collapsed output of
        running it.

        Returns:
            (new word, whether the word was nothing but substitutions,
            errors reported by the inner commands)
        """
        parts = split_substitutions(word)
        if not any(is_command for _, is_command in parts):
            return word, False, []

        pieces = []
        errors = []
        only_commands = True
        for text, is_command in parts:
            if not is_command:
                only_commands = False
                pieces.append(text)
                continue

            if depth + 1 > MAX_SUBSTITUTION_DEPTH:
                errors.append(_DEPTH_EXCEEDED)
                continue

            inner = await self.execute_compound(text, context, depth + 1)
            if inner.error:
                errors.append(inner.error)
            pieces.append(escape_dollars(' '.join(inner.output.split())))

        return ''.join(pieces), only_commands, errors

    async def _prepare_words(
        self,
        action: CommandAction,
        context: CommandContext,
        depth: int
    ) -> Tuple[List[str], List[str]]:
        """Substitute and expand the command name and arguments."""
        words = []
        errors = []
        for word in ([action.name] if action.name else []) + action.args:
            substituted, only_commands, inner_errors = await self._substitute(word, context, depth)
            errors.extend(inner_errors)
            # An unquoted substitution that produced nothing is not an argument.
            if only_commands and not substituted:
                continue
            words.append(expand_word(substituted, context.env))
        return words, errors

    async def _prepare_path(
        self,
        path: Optional[str],
        context: CommandContext,
        depth: int
    ) -> Tuple[Optional[str], List[str]]:
        if path is None:
            return None, []
        substituted, _, errors = await self._substitute(path, context, depth)
        expanded = expand_word(substituted, context.env)
        if expanded == '~' or expanded.startswith('~/'):
            expanded = context.home + expanded[1:]
        return expanded, errors

    # Stages

    async def _run_handler(
        self,
        name: str,
        args: List[str],
        context: CommandContext,
        stdin: Optional[str]
    ) -> CommandResult:
        handler = self._registry.get(name)
        if handler is None:
            self._logger.debug("Command not found", context={'command': name})
            return CommandResult(error=f"{name}: command not found", exit_code=EXIT_NOT_FOUND)

        try:
            return await handler(args, context, stdin)
        except Exception as e:
            self._logger.exception(f"Command {name} raised", exc=e)
            return CommandResult(error=f"{name}: {e}", exit_code=1)

    def _redirect(
        self,
        result: CommandResult,
        kind: RedirectType,
        path: str,
        context: CommandContext
    ) -> Union[CommandResult, Err]:
        """Route a stage's streams to a file; returns what flows on."""
        vfs = context.vfs
        user, cwd = context.user_id, context.cwd

        if kind == RedirectType.OVERWRITE:
            written = vfs.write_file(path, result.output, user, cwd)
            if isinstance(written, Err):
                return written
            return CommandResult(output='', error=result.error, exit_code=result.exit_code)

        if kind == RedirectType.APPEND:
            written = vfs.append_file(path, result.output, user, cwd)
            if isinstance(written, Err):
                return written
            return CommandResult(output='', error=result.error, exit_code=result.exit_code)

        if kind == RedirectType.STDERR:
            if result.error:
                written = vfs.write_file(path, result.error, user, cwd)
                if isinstance(written, Err):
                    return written
            return CommandResult(output=result.output, error=None, exit_code=result.exit_code)

        # Both streams go to the file; nothing continues down the pipe.
        content = '\n'.join(s for s in (result.output, result.error) if s)
        if content:
            written = vfs.write_file(path, content, user, cwd)
            if isinstance(written, Err):
                return written
        return CommandResult(output='', error=None, exit_code=result.exit_code)

    async def execute(
        self,
        pipeline: CommandPipeline,
        context: CommandContext,
        depth: int = 0
    ) -> CommandResult:
        """
        Run one pipeline.

        Args:
            pipeline: Parsed stages
            context: Session state the handlers operate on
            depth: Command substitution nesting

        Returns:
            The last stage's result, with ``output`` set to whatever
            survived redirection; or the first failing stage's result
            when that stage did not redirect its errors.
        """
        result = CommandResult()
        stdin: Optional[str] = None

        for index, action in enumerate(pipeline.actions):
            words, warnings = await self._prepare_words(action, context, depth)
            redirect_path, path_warnings = await self._prepare_path(action.redirect_path, context, depth)
            input_path, input_warnings = await self._prepare_path(action.input_path, context, depth)
            warnings += path_warnings + input_warnings

            if any(_DEPTH_EXCEEDED in w for w in warnings):
                return CommandResult(error=_DEPTH_EXCEEDED, exit_code=1)

            if input_path is not None:
                read = context.vfs.read_file(input_path, context.user_id, context.cwd)
                stdin = '' if isinstance(read, Err) else read.value

            if words:
                result = await self._run_handler(words[0], words[1:], context, stdin)
            else:
                result = CommandResult(output='')

            if warnings and not result.error:
                result.error = '\n'.join(warnings)

            kind = action.redirect_type
            if result.exit_code != 0 and kind not in (RedirectType.STDERR, RedirectType.BOTH):
                self._logger.debug(
                    "Pipeline aborted",
                    context={'stage': index, 'command': words[0] if words else '', 'exit': result.exit_code}
                )
                return result

            if kind != RedirectType.NONE and redirect_path is not None:
                routed = self._redirect(result, kind, redirect_path, context)
                if isinstance(routed, Err):
                    return CommandResult(error=f"{redirect_path}: {routed.message}", exit_code=1)
                result = routed

            stdin = result.output

        return result

    async def execute_compound(
        self,
        line: str,
        context: CommandContext,
        depth: int = 0
    ) -> CompoundResult:
        """
        Run a whole input line.

        Segments run left to right. After ``&&`` evaluation stops on a
        non-zero exit; after ``||`` it stops on a zero exit; ``;`` always
        continues. A ``cd`` that is the first segment's only command
        moves ``context.cwd`` (and is reported in ``CompoundResult.cwd``);
        later segments then run from the new directory. Output of ``cd``
        is never part of the transcript.
        """
        outputs: List[str] = []
        errors: List[str] = []
        exit_code = 0
        new_cwd: Optional[str] = None

        for index, segment in enumerate(parse_compound(line)):
            result = await self.execute(segment.pipeline, context, depth)
            exit_code = result.exit_code

            actions = segment.pipeline.actions
            is_cd = len(actions) == 1 and actions[0].name == 'cd'

            if is_cd:
                if result.ok and index == 0 and depth == 0 and result.output:
                    new_cwd = result.output
                    context.env['OLDPWD'] = context.cwd
                    context.env['PWD'] = new_cwd
                    context.cwd = new_cwd
            elif result.output:
                outputs.append(result.output)

            if result.error:
                errors.append(result.error)

            if segment.operator == Operator.AND and exit_code != 0:
                break
            if segment.operator == Operator.OR and exit_code == 0:
                break

        return CompoundResult(
            output='\n'.join(outputs),
            error='\n'.join(errors) if errors else None,
            exit_code=exit_code,
            cwd=new_cwd,
        )
