from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol

from attrs import define, field

from .errors import ProcessFailedError
from .options import DEFAULT_ENCODING


logger = logging.getLogger(__name__)


class FailureHook(Protocol):
    """Called with the failed result and the error about to be raised.

    The hook may log or annotate, but it cannot stop the error from being
    raised afterwards.
    """

    def __call__(self, result: CompletedExec, error: ProcessFailedError) -> None:
        ...


@define(frozen=True, kw_only=True)
class CompletedExec:
    """Immutable record of a finished command and what it wrote."""

    command: str
    exit_code: Optional[int]
    stdout: bytes = field(default=b"", repr=False)
    stderr: bytes = field(default=b"", repr=False)
    encoding: str = field(default=DEFAULT_ENCODING, repr=False)
    term_signal: Optional[int] = None
    timed_out: bool = False
    stdout_truncated: bool = False
    stderr_truncated: bool = False

    @property
    def output(self) -> str:
        return self.stdout.decode(self.encoding, errors="replace")

    @property
    def error_output(self) -> str:
        return self.stderr.decode(self.encoding, errors="replace")

    @property
    def successful(self) -> bool:
        return self.exit_code == 0

    @property
    def failed(self) -> bool:
        return not self.successful

    @property
    def returncode(self) -> int:
        "same convention as subprocess: negative signal number when killed"
        if self.exit_code is not None:
            return self.exit_code
        if self.term_signal is not None:
            return -self.term_signal
        return -1

    def contains_in_output(self, needle: str) -> bool:
        return needle in self.output

    def contains_in_error_output(self, needle: str) -> bool:
        return needle in self.error_output

    def throw_if_failed(
        self,
        on_failure: Optional[FailureHook] = None,
    ) -> CompletedExec:
        """Return self if the process succeeded, raise ProcessFailedError otherwise.

        ``on_failure`` is invoked with ``(self, error)`` right before raising.
        Should the hook raise itself, the ProcessFailedError is raised anyway,
        chained to the hook's exception.
        """
        if self.successful:
            return self
        error = ProcessFailedError(self)
        if on_failure is not None:
            try:
                on_failure(self, error)
            except Exception as hook_error:
                logger.warning(
                    "Failure hook for %r raised %r", self.command, hook_error
                )
                raise error from hook_error
        raise error

    def throw_if_failed_when(
        self,
        condition: bool,
        on_failure: Optional[FailureHook] = None,
    ) -> CompletedExec:
        if condition:
            return self.throw_if_failed(on_failure)
        return self

    def to_json(self) -> Any:
        return json.loads(self.output)
