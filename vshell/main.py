#!/usr/bin/env python3
"""
VShell - An in-memory Unix shell simulation

This is the main entry point for VShell.

Usage:
    vshell [--config PATH] [--user NAME] [-c COMMAND]

Without ``-c`` an interactive prompt is started; it exits on EOF or
``exit``.

Author: YSNRFD
Version: 1.0.0
"""

import argparse
import asyncio
import sys
from typing import Optional, List

from vshell.core.config_loader import ConfigLoader
from vshell.exceptions import VShellError
from vshell.logger import Logger, LogLevel
from vshell.shell.session import ShellSession
from vshell.shell.types import CompoundResult


EXIT_WORDS = ('exit', 'logout', 'quit')


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        prog='vshell',
        description='VShell - an in-memory Unix shell simulation'
    )

    parser.add_argument(
        '--config',
        help='Load configuration from a JSON file',
        type=str
    )

    parser.add_argument(
        '--user',
        help='Run the session as this user',
        type=str
    )

    parser.add_argument(
        '-c', '--command',
        help='Execute a single command line and exit',
        type=str
    )

    return parser.parse_args(argv)


def _print_result(result: CompoundResult) -> None:
    if result.output:
        print(result.output)
    if result.error:
        print(result.error, file=sys.stderr)


async def _prompt(message: str) -> str:
    return input(message)


def repl(session: ShellSession) -> int:
    """
    Run the interactive loop.

    Returns:
        Exit code of the last command
    """
    print(f"VShell on {session.hostname}. Type 'help' for a list of commands.\n")
    exit_code = 0

    while True:
        try:
            line = input(session.prompt)
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("^C")
            continue

        if line.strip() in EXIT_WORDS:
            break

        result = asyncio.run(session.run(line))
        _print_result(result)
        exit_code = result.exit_code

    return exit_code


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for VShell.

    Startup sequence:
    1. Load configuration
    2. Initialize logging
    3. Create the session
    4. Run one command or the interactive loop
    """
    options = parse_args(argv)

    loader = ConfigLoader()
    try:
        config = loader.load(options.config) if options.config else loader.config
    except VShellError as e:
        print(f"vshell: {e}", file=sys.stderr)
        return 1

    Logger.initialize(
        level=LogLevel[config.logging.level],
        log_file=config.logging.log_file,
        console_output=config.logging.console_output,
    )

    try:
        session = ShellSession(user_id=options.user, config=config, prompt_handler=_prompt)
    except VShellError as e:
        print(f"vshell: {e}", file=sys.stderr)
        return 1

    if options.command is not None:
        result = asyncio.run(session.run(options.command))
        _print_result(result)
        return result.exit_code

    try:
        return repl(session)
    except KeyboardInterrupt:
        print("\n\nInterrupted")
        return 130


if __name__ == '__main__':
    sys.exit(main())
