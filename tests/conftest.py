"""Shared test fixtures for process-exec."""

from __future__ import annotations

import os
import sys
from typing import List, Optional

import pytest

from process_exec.executor import (
    CompletedExec,
    ExecutorTarget,
    HostExecutor,
    RunOptions,
)
from process_exec.executor.base import CommandArgs


posix_only = pytest.mark.skipif(os.name != "posix", reason="needs a POSIX host")


def py(code: str) -> List[str]:
    """Argument vector running ``code`` with the interpreter under test."""
    return [sys.executable, "-c", code]


class RecordingExecutor(ExecutorTarget):
    """Executor which never starts anything and answers with a fixed result."""

    def __init__(self, exit_code: Optional[int] = 0, stdout: bytes = b"") -> None:
        self.exit_code = exit_code
        self.stdout = stdout
        self.calls: list[tuple[CommandArgs, Optional[RunOptions], Optional[str]]] = []

    def exec_cmd(
        self,
        *,
        command: CommandArgs,
        options: Optional[RunOptions] = None,
        command_line: Optional[str] = None,
    ) -> CompletedExec:
        self.calls.append((command, options, command_line))
        return CompletedExec(
            command=command_line or " ".join(command),
            exit_code=self.exit_code,
            stdout=self.stdout,
        )


@pytest.fixture
def executor() -> HostExecutor:
    return HostExecutor()


@pytest.fixture
def recorder() -> RecordingExecutor:
    return RecordingExecutor()
