from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .completed import CompletedExec


# amount of stderr text kept in a failure summary, counted from the end
STDERR_EXCERPT_LIMIT = 2000


class ExecError(Exception):
    """Base class of every error raised while executing a command.

    Each error carries the command line, the exit code (if the process got
    that far) and captured stderr, so it can be logged or shown without
    looking at anything else.
    """

    command: str
    exit_code: Optional[int]
    stderr: str

    def __init__(
        self,
        message: str,
        *,
        command: str,
        exit_code: Optional[int] = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class SpawnError(ExecError):
    """The process could not be started at all."""

    def __init__(self, command: str, cause: OSError):
        reason = cause.strerror or str(cause)
        filename = f": {cause.filename}" if cause.filename else ""
        super().__init__(
            f'Could not start the command "{command}": {reason}{filename}',
            command=command,
        )
        self.cause = cause


class ExecTimeoutError(ExecError, TimeoutError):
    timeout: float
    partial: Optional[CompletedExec]

    def __init__(
        self,
        command: str,
        timeout: float,
        partial: Optional[CompletedExec] = None,
    ):
        super().__init__(
            f'The command "{command}" timed out after {timeout:g} seconds.',
            command=command,
            stderr=partial.error_output if partial is not None else "",
        )
        self.timeout = timeout
        self.partial = partial


class ProcessFailedError(ExecError):
    """Raised on request when a process ran to completion but did not succeed."""

    result: CompletedExec

    def __init__(self, result: CompletedExec):
        super().__init__(
            describe_failure(result),
            command=result.command,
            exit_code=result.exit_code,
            stderr=result.error_output,
        )
        self.result = result


def stderr_excerpt(stderr: str, limit: int = STDERR_EXCERPT_LIMIT) -> str:
    if len(stderr) <= limit:
        return stderr
    return f"[... {len(stderr) - limit} characters cut ...]\n" + stderr[-limit:]


def describe_failure(result: CompletedExec) -> str:
    if result.exit_code is not None:
        status = str(result.exit_code)
    elif result.term_signal is not None:
        status = f"none (terminated by signal {result.term_signal})"
    else:
        status = "none"
    summary = f'The command "{result.command}" failed.\n\nExit Code: {status}'
    error_output = result.error_output
    if error_output:
        summary += f"\n\nError Output:\n================\n{stderr_excerpt(error_output)}"
    return summary
