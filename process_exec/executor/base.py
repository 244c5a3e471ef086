import shlex
from typing import Iterable, List, NewType, Optional


CommandArgs = NewType("CommandArgs", List[str])
ShellCommandStr = NewType("ShellCommandStr", str)


def filter_cmds(command: Iterable[Optional[str]]) -> CommandArgs:
    return CommandArgs([str(arg) for arg in command if arg is not None])


def combine_cmds(*commands: CommandArgs | List[Optional[str]]) -> CommandArgs:
    return CommandArgs([arg for cmd in commands for arg in filter_cmds(cmd)])


def require_cmd(command: Iterable[Optional[str]]) -> CommandArgs:
    args = filter_cmds(command)
    if not args or not args[0]:
        raise ValueError("command must contain at least the executable")
    return args


def command_line(command: CommandArgs) -> str:
    "text of an argument vector as a POSIX shell would need it"
    return shlex.join(command)
