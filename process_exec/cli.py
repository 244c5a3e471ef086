from __future__ import annotations

import argparse
from functools import wraps
import logging
import os
from pathlib import Path
import sys
from typing import Dict, Mapping, Optional, Sequence

from . import __version__, as_command, host
from .executor import (
    CompletedExec,
    ExecTimeoutError,
    OnTimeout,
    ProcessFailedError,
    RunOptions,
    ShellCommand,
    SpawnError,
)


# same conventions as coreutils timeout(1) and POSIX shells
EXIT_TIMEOUT = 124
EXIT_SPAWN_FAILED = 127
EXIT_SIGNAL_BASE = 128


@wraps(print)
def error(*args, **kwargs):
    ret = print(*args, file=sys.stderr, **kwargs)
    sys.stderr.flush()
    return ret


def parse_env_pair(val: str) -> tuple[str, str]:
    key, sep, value = val.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {val!r}")
    return key, value


def parse_args(args: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="process-exec",
        description="Runs a command to completion and reports its outcome",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--shell",
        action="store_true",
        help="Run the single COMMAND argument as shell code",
    )
    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help="Kill the command after this many seconds (default: $PROCESS_EXEC_TIMEOUT or none)",
    )
    parser.add_argument(
        "-C",
        "--cwd",
        type=Path,
        default=None,
        help="Run the command inside this directory",
    )
    parser.add_argument(
        "-e",
        "--env",
        type=parse_env_pair,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Set an environment variable for the command, can be repeated",
    )
    parser.add_argument(
        "--keep-partial-output",
        action="store_true",
        help="Print what the command wrote before it timed out",
    )
    parser.add_argument(
        "--check",
        action="store_true",
        help="Print a failure summary if the command does not succeed",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log what is executed",
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        metavar="COMMAND",
    )
    parsed = parser.parse_args(args=args)
    if parsed.command[:1] == ["--"]:
        parsed.command = parsed.command[1:]
    if not parsed.command:
        parser.error("no command given")
    if parsed.shell and len(parsed.command) != 1:
        parser.error("--shell expects exactly one COMMAND argument")
    return parsed


def build_options(
    args: argparse.Namespace, environ: Mapping[str, str]
) -> RunOptions:
    overrides: Dict[str, object] = {}
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if args.keep_partial_output:
        overrides["on_timeout"] = OnTimeout.KEEP_PARTIAL_OUTPUT
    if args.cwd is not None:
        overrides["work_dir"] = args.cwd
    if args.env:
        overrides["env"] = dict(args.env)
    # the CLI reports timeouts itself, partial output included
    overrides["raise_on_timeout"] = True
    return RunOptions.from_environ(environ, **overrides)


def echo_result(result: CompletedExec) -> None:
    sys.stdout.buffer.write(result.stdout)
    sys.stdout.flush()
    sys.stderr.buffer.write(result.stderr)
    sys.stderr.flush()


def exit_status(result: CompletedExec) -> int:
    if result.exit_code is not None:
        return result.exit_code
    if result.term_signal is not None:
        return EXIT_SIGNAL_BASE + result.term_signal
    return 1


def exec(given_args: Sequence[str], environ: Optional[Mapping[str, str]] = None) -> int:
    args = parse_args(args=given_args)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(name)s: %(message)s",
    )
    options = build_options(args, os.environ if environ is None else environ)
    command = (
        ShellCommand.from_str(args.command[0])
        if args.shell
        else as_command(args.command)
    )
    try:
        result = command.run(executor=host, options=options, check=args.check)
    except ProcessFailedError as e:
        echo_result(e.result)
        error(e)
        return exit_status(e.result)
    echo_result(result)
    return exit_status(result)


def cli(args: Sequence[str]):
    try:
        sys.exit(exec(given_args=args))
    except SpawnError as e:
        error(e)
        sys.exit(EXIT_SPAWN_FAILED)
    except ExecTimeoutError as e:
        if e.partial is not None:
            echo_result(e.partial)
        error(e)
        sys.exit(EXIT_TIMEOUT)
    except ValueError as e:
        error(f"Invalid configuration: {e}")
        sys.exit(2)


def main():
    cli(sys.argv[1:])


if __name__ == "__main__":
    main()
