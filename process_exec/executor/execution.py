from __future__ import annotations

import abc
from functools import cached_property
import logging
from typing import Callable, Optional

from .base import CommandArgs, ShellCommandStr, combine_cmds
from .completed import CompletedExec
from .errors import SpawnError
from .options import RunOptions


logger = logging.getLogger(__name__)


# List of POSIX shells which shall be used
DETECTED_SHELLS = [
    "/usr/bin/bash",
    "/bin/bash",
    "/usr/bin/sh",
    "/bin/sh",
]

# options for probing a shell, a hanging shell must not block detection
PROBE_OPTIONS = RunOptions(timeout=10, raise_on_timeout=False)


class ExecutorTarget(metaclass=abc.ABCMeta):
    @abc.abstractmethod
    def exec_cmd(
        self,
        *,
        command: CommandArgs,
        options: Optional[RunOptions] = None,
        command_line: Optional[str] = None,
    ) -> CompletedExec:
        ...

    @staticmethod
    def process_tester(
        exec: Callable[[CommandArgs], CompletedExec]
    ) -> Callable[[CommandArgs], bool]:
        def tester(command: CommandArgs) -> bool:
            try:
                return exec(command).successful
            except SpawnError as e:
                logger.debug("Shell probe %s could not be started: %s", command[0], e)
                return False

        return tester

    @staticmethod
    def _search_shell_with(tester: Callable[[CommandArgs], bool]) -> str:
        for shell in DETECTED_SHELLS:
            command = CommandArgs([shell, "-c", "true"])
            if tester(command):
                return command[0]
        raise SpawnError(
            " ".join(DETECTED_SHELLS),
            FileNotFoundError(
                "Could not find an acceptable shell on this host",
            ),
        )

    @cached_property
    def found_shell(self) -> str:
        shell = self._search_shell_with(
            self.process_tester(
                lambda command: self.exec_cmd(
                    command=command,
                    options=PROBE_OPTIONS,
                )
            )
        )
        logger.debug("Using shell %s", shell)
        return shell

    def exec_shell(
        self,
        *,
        shell_cmd: ShellCommandStr,
        options: Optional[RunOptions] = None,
    ) -> CompletedExec:
        return self.exec_cmd(
            command=combine_cmds([self.found_shell, "-c"], [shell_cmd]),
            options=options,
            command_line=shell_cmd,
        )
