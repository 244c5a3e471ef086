"""Run external commands and inspect what they did.

    >>> from process_exec import run
    >>> result = run(["echo", "hello"])
    >>> result.output
    'hello\\n'
    >>> result.throw_if_failed().successful
    True
"""

from __future__ import annotations

from typing import Optional, Sequence

from .executor import (
    ArgCommand,
    Command,
    CompletedExec,
    ExecError,
    ExecTimeoutError,
    ExecutorTarget,
    FailureHook,
    HostExecutor,
    OnTimeout,
    ProcessFailedError,
    RunOptions,
    ShellCommand,
    SpawnError,
)


__version__ = "0.1.0"

host = HostExecutor()


def as_command(command: Command | str | Sequence[Optional[str]]) -> Command:
    "a str is taken as shell code, any other sequence as an argument vector"
    if isinstance(command, Command):
        return command
    if isinstance(command, str):
        return ShellCommand.from_str(command)
    return ArgCommand.from_args(command)


def run(
    command: Command | str | Sequence[Optional[str]],
    options: Optional[RunOptions] = None,
    *,
    check: bool = False,
    executor: Optional[ExecutorTarget] = None,
) -> CompletedExec:
    return as_command(command).run(
        executor=executor or host,
        options=options,
        check=check,
    )


__all__ = [
    "ArgCommand",
    "Command",
    "CompletedExec",
    "ExecError",
    "ExecTimeoutError",
    "ExecutorTarget",
    "FailureHook",
    "HostExecutor",
    "OnTimeout",
    "ProcessFailedError",
    "RunOptions",
    "ShellCommand",
    "SpawnError",
    "as_command",
    "host",
    "run",
]
