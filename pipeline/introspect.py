"""Recover a program's command tree by running it with --help."""

from __future__ import annotations

import asyncio
import contextlib
from pathlib import Path
from typing import Awaitable, Callable, Sequence

from config import Config
from utils import get_logger

from .helptext import HELP_FLAG, parse_description, parse_help, parse_subcommands, parse_usage
from .types import CommandNode

logger = get_logger(__name__)

# Takes the subcommand path (possibly empty), returns help text or None on failure.
HelpRunner = Callable[[Sequence[str]], Awaitable[str | None]]


async def run_help(
    binary: Path, args: Sequence[str], timeout: float | None = None
) -> str | None:
    """Run `<binary> <args> --help` and return its combined output.

    Returns None when the program cannot be started, exits non-zero, runs
    past the timeout, or prints something that is not UTF-8.
    """
    timeout = Config.HELP_TIMEOUT if timeout is None else timeout
    cmd = [str(binary), *args, HELP_FLAG]
    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.STDOUT,
        )
    except OSError as e:
        logger.debug(f"Cannot run {cmd}: {e}")
        return None

    try:
        stdout, _ = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.communicate()
        logger.debug(f"Help call timed out after {timeout}s: {cmd}")
        return None

    if process.returncode != 0:
        logger.debug(f"Help call exited with {process.returncode}: {cmd}")
        return None

    try:
        return stdout.decode("utf-8")
    except UnicodeDecodeError:
        logger.debug(f"Help output is not UTF-8: {cmd}")
        return None


class CommandIntrospector:
    """Builds a CommandNode tree from help pages.

    Depth is fixed at two levels below the program (`prog group leaf`).
    A command whose help call fails is left out together with its subtree.
    """

    def __init__(self, runner: HelpRunner) -> None:
        self._runner = runner

    @classmethod
    def for_binary(cls, binary: Path, timeout: float | None = None) -> "CommandIntrospector":
        async def _runner(args: Sequence[str]) -> str | None:
            return await run_help(binary, args, timeout=timeout)

        return cls(_runner)

    async def introspect(self, name: str) -> CommandNode:
        """Return the root node for the program; no children means nothing to document."""
        root_help = await self._runner([])
        if root_help is None:
            logger.info(f"No help output from {name}; documenting without commands")
            return CommandNode(name=name)

        children: list[CommandNode] = []
        for command in parse_subcommands(root_help):
            node = await self._introspect_command(command)
            if node is not None:
                children.append(node)

        return CommandNode(
            name=name,
            description=parse_description(root_help),
            usage=parse_usage(root_help),
            children=tuple(children),
        )

    async def _introspect_command(self, command: str) -> CommandNode | None:
        help_text = await self._runner([command])
        if help_text is None:
            logger.debug(f"Skipping command '{command}': help call failed")
            return None

        subcommands = parse_subcommands(help_text)
        if not subcommands:
            return parse_help(command, help_text)

        leaves: list[CommandNode] = []
        for sub in subcommands:
            sub_help = await self._runner([command, sub])
            if sub_help is None:
                logger.debug(f"Skipping command '{command} {sub}': help call failed")
                continue
            leaves.append(parse_help(sub, sub_help))

        if not leaves:
            return None

        return CommandNode(
            name=command,
            description=parse_description(help_text),
            usage=parse_usage(help_text),
            children=tuple(leaves),
        )
