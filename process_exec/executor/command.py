from __future__ import annotations

import abc
import shlex
from typing import Iterable, List, Optional

from attrs import define, field

from .base import CommandArgs, ShellCommandStr, command_line, require_cmd
from .completed import CompletedExec
from .execution import ExecutorTarget
from .options import RunOptions


class Command(metaclass=abc.ABCMeta):
    def run(
        self,
        *,
        executor: ExecutorTarget,
        options: Optional[RunOptions] = None,
        check: bool = False,
    ) -> CompletedExec:
        """Execute the command on ``executor`` and wait for it.

        With ``check`` a non-successful result raises ProcessFailedError,
        otherwise failure is only visible on the returned result.
        """
        return self._run(executor=executor, options=options).throw_if_failed_when(
            check
        )

    @abc.abstractmethod
    def _run(
        self,
        *,
        executor: ExecutorTarget,
        options: Optional[RunOptions],
    ) -> CompletedExec:
        ...


@define
class ArgCommand(Command):
    args: List[str] = field(converter=require_cmd)

    @classmethod
    def from_args(cls, args: Iterable[Optional[str]]) -> ArgCommand:
        return cls(args=list(args))

    def __str__(self) -> str:
        return command_line(CommandArgs(self.args))

    def to_shell_cmd(self) -> ShellCommand:
        return ShellCommand(command=str(self))

    def _run(
        self,
        *,
        executor: ExecutorTarget,
        options: Optional[RunOptions],
    ) -> CompletedExec:
        return executor.exec_cmd(
            command=CommandArgs(self.args),
            options=options,
        )


def _require_shell_cmd(command: str) -> str:
    if not command.strip():
        raise ValueError("shell command must not be empty")
    return command


@define(order=False)
class ShellCommand(Command):
    command: str = field(converter=_require_shell_cmd)

    @classmethod
    def from_str(cls, command: str) -> ShellCommand:
        return cls(
            command=command,
        )

    def to_args(self) -> ArgCommand:
        "split the shell string into words, only valid for simple commands"
        return ArgCommand(args=shlex.split(self.command))

    def __str__(self) -> str:
        return self.command

    def _run(
        self,
        *,
        executor: ExecutorTarget,
        options: Optional[RunOptions],
    ) -> CompletedExec:
        return executor.exec_shell(
            shell_cmd=ShellCommandStr(self.command),
            options=options,
        )
