from __future__ import annotations

import logging
import os
import signal
import subprocess
import threading
import time
from typing import IO, Dict, List, Optional, Tuple

from attrs import define, evolve, field

from .base import CommandArgs, command_line as quote_cmd, require_cmd
from .completed import CompletedExec
from .errors import ExecTimeoutError, SpawnError
from .execution import ExecutorTarget
from .options import OnTimeout, RunOptions


logger = logging.getLogger(__name__)


_POSIX = os.name == "posix"

CHUNK_SIZE = 64 * 1024
# how long pipes may stay open once the direct child has exited or was killed
DRAIN_GRACE_SECONDS = 5.0


class _Pump(threading.Thread):
    "drains one pipe of the child, keeping at most `limit` bytes"

    def __init__(self, name: str, stream: IO[bytes], limit: int):
        super().__init__(name=name, daemon=True)
        self.stream = stream
        self.limit = limit
        self.chunks: List[bytes] = []
        self.size = 0
        self.truncated = False
        self.detached = False
        self.lock = threading.Lock()

    def run(self) -> None:
        with self.stream:
            for chunk in iter(lambda: self.stream.read1(CHUNK_SIZE), b""):
                with self.lock:
                    if self.detached:
                        # keep draining so the writer never blocks
                        continue
                    keep = self.limit - self.size
                    if keep > 0:
                        self.chunks.append(chunk[:keep])
                        self.size += min(len(chunk), keep)
                    if len(chunk) > keep:
                        self.truncated = True

    def snapshot(self) -> Tuple[bytes, bool]:
        "captured data and truncation flag; nothing read afterwards is kept"
        with self.lock:
            self.detached = True
            return b"".join(self.chunks), self.truncated


class _Feeder(threading.Thread):
    def __init__(self, stream: IO[bytes], data: bytes):
        super().__init__(name="stdin-feeder", daemon=True)
        self.stream = stream
        self.data = data

    def run(self) -> None:
        try:
            with self.stream:
                self.stream.write(self.data)
        except BrokenPipeError:
            # child exited or closed stdin before reading everything
            logger.debug("Child closed stdin before all input was written")


@define
class HostExecutor(ExecutorTarget):
    """Runs commands as child processes of the current one.

    Output of the child is captured fully in memory (up to the configured
    limit per stream) by one thread per pipe while the calling thread waits
    for the child to exit. On POSIX every child gets its own session, so a
    timeout kills its whole process group and not only the direct child.
    """

    default_options: RunOptions = field(factory=RunOptions)

    @staticmethod
    def _environ(options: RunOptions) -> Optional[Dict[str, str]]:
        if options.inherit_env and options.env is None:
            return None
        environ = dict(os.environ) if options.inherit_env else dict[str, str]()
        environ.update(options.env or {})
        return environ

    @staticmethod
    def _kill(proc: subprocess.Popen) -> None:
        if not _POSIX:
            proc.kill()
            return
        try:
            os.killpg(proc.pid, signal.SIGKILL)
        except ProcessLookupError:
            logger.debug("Process group %d already gone", proc.pid)

    @staticmethod
    def _wait(proc: subprocess.Popen, timeout: Optional[float]) -> bool:
        "True if the child exited before the timeout"
        try:
            proc.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            return False
        return True

    @staticmethod
    def _drain(threads: List[threading.Thread], grace: float) -> bool:
        "True if all pipes reached EOF within `grace` seconds after the child ended"
        deadline = time.monotonic() + grace
        for thread in threads:
            thread.join(max(0.0, deadline - time.monotonic()))
        return not any(thread.is_alive() for thread in threads)

    def exec_cmd(
        self,
        *,
        command: CommandArgs,
        options: Optional[RunOptions] = None,
        command_line: Optional[str] = None,
    ) -> CompletedExec:
        options = options or self.default_options
        args = require_cmd(command)
        line = command_line if command_line is not None else quote_cmd(args)
        input_bytes = options.input_bytes
        logger.debug("Running %s", line)
        try:
            proc = subprocess.Popen(
                args=args,
                cwd=None if options.work_dir is None else str(options.work_dir),
                env=self._environ(options),
                shell=False,
                stdin=subprocess.DEVNULL if input_bytes is None else subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                start_new_session=_POSIX,
            )
        except OSError as e:
            raise SpawnError(line, e) from e

        assert proc.stdout is not None and proc.stderr is not None
        stdout = _Pump("stdout-pump", proc.stdout, options.max_capture_bytes)
        stderr = _Pump("stderr-pump", proc.stderr, options.max_capture_bytes)
        threads: List[threading.Thread] = [stdout, stderr]
        if input_bytes is not None:
            assert proc.stdin is not None
            threads.append(_Feeder(proc.stdin, input_bytes))
        for thread in threads:
            thread.start()

        try:
            finished = self._wait(proc, options.timeout)
        except BaseException:
            self._kill(proc)
            proc.wait()
            raise
        if not finished and proc.poll() is not None:
            # exited on its own right at the deadline
            finished = True
        if not finished:
            logger.warning(
                "Command %s exceeded its timeout of %gs, killing it",
                line,
                options.timeout,
            )
            self._kill(proc)
            proc.wait()
        if not self._drain(threads, DRAIN_GRACE_SECONDS):
            logger.warning(
                "Output of %s is still held open by a descendant, keeping what was read",
                line,
            )

        returncode = proc.returncode
        timed_out = not finished
        stdout_data, stdout_truncated = stdout.snapshot()
        stderr_data, stderr_truncated = stderr.snapshot()
        result = CompletedExec(
            command=line,
            exit_code=None if timed_out or returncode < 0 else returncode,
            term_signal=-returncode if returncode < 0 else None,
            stdout=stdout_data,
            stderr=stderr_data,
            encoding=options.encoding,
            timed_out=timed_out,
            stdout_truncated=stdout_truncated,
            stderr_truncated=stderr_truncated,
        )
        logger.debug("Command %s exited with %d", line, returncode)
        if not timed_out:
            return result

        assert options.timeout is not None
        keep_partial = options.on_timeout is OnTimeout.KEEP_PARTIAL_OUTPUT
        if not keep_partial:
            result = evolve(result, stdout=b"", stderr=b"")
        if options.raise_on_timeout:
            raise ExecTimeoutError(
                line, options.timeout, partial=result if keep_partial else None
            )
        return result
