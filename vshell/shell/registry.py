"""
Command Registry

Name to handler lookup table. A registry is an ordinary object built
once at startup and handed to the executor, so tests can construct
isolated registries with only the commands they need.

Author: YSNRFD
Version: 1.0.0
"""

from typing import Optional, List, Iterator

from .types import Handler


class CommandRegistry:
    """
    Maps command names to asynchronous handlers.

    A handler has the signature ``async handler(args, context, stdin)``
    and returns a ``CommandResult``.

    Example:
        >>> registry = CommandRegistry()
        >>> registry.register('hello', cmd_hello, "Print a greeting")
        >>> 'hello' in registry
        True
    """

    def __init__(self):
        self._commands: dict[str, Handler] = {}
        self._help: dict[str, str] = {}

    def register(self, name: str, handler: Handler, help_text: str = '') -> None:
        """Register (or replace) a command."""
        self._commands[name] = handler
        self._help[name] = help_text

    def unregister(self, name: str) -> bool:
        """Remove a command. Returns False if it was not registered."""
        if name not in self._commands:
            return False
        del self._commands[name]
        self._help.pop(name, None)
        return True

    def get(self, name: str) -> Optional[Handler]:
        """Look up a handler; None when the command is unknown."""
        return self._commands.get(name)

    def help_text(self, name: str) -> str:
        return self._help.get(name, '')

    def list_commands(self) -> List[str]:
        """All registered names, sorted."""
        return sorted(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def __iter__(self) -> Iterator[str]:
        return iter(self.list_commands())

    def __len__(self) -> int:
        return len(self._commands)


def create_default_registry() -> CommandRegistry:
    """Build a registry holding every standard command."""
    from .builtins import register_builtins
    from .text_commands import register_text_commands
    from .system_commands import register_system_commands

    registry = CommandRegistry()
    register_builtins(registry)
    register_text_commands(registry)
    register_system_commands(registry)
    return registry
