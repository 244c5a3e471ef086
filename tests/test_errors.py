"""Tests for process_exec.executor.errors."""

from __future__ import annotations

import errno

from process_exec.executor import (
    CompletedExec,
    ExecError,
    ExecTimeoutError,
    ProcessFailedError,
    SpawnError,
)
from process_exec.executor.errors import (
    STDERR_EXCERPT_LIMIT,
    describe_failure,
    stderr_excerpt,
)


class TestDescribeFailure:
    def test_exit_code(self) -> None:
        result = CompletedExec(command="false", exit_code=1)
        assert describe_failure(result) == 'The command "false" failed.\n\nExit Code: 1'

    def test_signal(self) -> None:
        result = CompletedExec(command="sleep 9", exit_code=None, term_signal=15)
        assert "Exit Code: none (terminated by signal 15)" in describe_failure(result)

    def test_error_output_section(self) -> None:
        result = CompletedExec(command="x", exit_code=2, stderr=b"no such file\n")
        summary = describe_failure(result)
        assert summary.endswith("Error Output:\n================\nno such file\n")

    def test_long_stderr_is_cut_from_the_front(self) -> None:
        stderr = "a" * 10 + "b" * STDERR_EXCERPT_LIMIT
        result = CompletedExec(command="x", exit_code=1, stderr=stderr.encode())
        summary = describe_failure(result)
        assert "[... 10 characters cut ...]" in summary
        assert "a" not in summary.split("================\n", 1)[1].split("\n", 1)[1]

    def test_excerpt_short_text_unchanged(self) -> None:
        assert stderr_excerpt("boom") == "boom"


class TestErrorTypes:
    def test_common_base(self) -> None:
        assert issubclass(SpawnError, ExecError)
        assert issubclass(ExecTimeoutError, ExecError)
        assert issubclass(ProcessFailedError, ExecError)

    def test_timeout_is_builtin_timeout(self) -> None:
        assert isinstance(ExecTimeoutError("sleep 5", 1.5), TimeoutError)

    def test_timeout_message_and_partial(self) -> None:
        partial = CompletedExec(command="sleep 5", exit_code=None, stderr=b"tick")
        error = ExecTimeoutError("sleep 5", 1.5, partial=partial)
        assert str(error) == 'The command "sleep 5" timed out after 1.5 seconds.'
        assert error.partial is partial
        assert error.stderr == "tick"
        assert error.exit_code is None

    def test_spawn_error_keeps_cause(self) -> None:
        cause = FileNotFoundError(errno.ENOENT, "No such file or directory", "nope")
        error = SpawnError("nope --help", cause)
        assert error.cause is cause
        assert error.command == "nope --help"
        assert error.exit_code is None
        assert str(error) == (
            'Could not start the command "nope --help": No such file or directory: nope'
        )
