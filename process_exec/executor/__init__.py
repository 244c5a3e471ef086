from .command import (
    Command,
    ArgCommand,
    ShellCommand,
)
from .completed import (
    CompletedExec,
    FailureHook,
)
from .errors import (
    ExecError,
    ExecTimeoutError,
    ProcessFailedError,
    SpawnError,
)
from .execution import (
    ExecutorTarget,
)
from .host import (
    HostExecutor,
)
from .options import (
    OnTimeout,
    RunOptions,
)
