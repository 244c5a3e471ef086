from __future__ import annotations

import enum
from pathlib import PurePath
from typing import Any, Mapping, Optional

from attrs import define, evolve, field, validators


# variables read by RunOptions.from_environ, checked in order
ENV_PREFIXES = [
    "PROCESS_EXEC_",
]

DEFAULT_MAX_CAPTURE_BYTES = 64 * 1024 * 1024
DEFAULT_ENCODING = "utf-8"


class OnTimeout(enum.Enum):
    KEEP_PARTIAL_OUTPUT = "keep-partial-output"
    DISCARD = "discard"


def parse_bool(val: str | bool) -> bool:
    if isinstance(val, bool):
        return val
    return val.lower().startswith(("t", "y", "1"))


def parse_on_timeout(val: str | OnTimeout) -> OnTimeout:
    if isinstance(val, OnTimeout):
        return val
    return OnTimeout(val.lower().replace("_", "-"))


def parse_timeout(val: str | float | None) -> Optional[float]:
    if val is None or val == "":
        return None
    return float(val)


def parse_path(val: str | PurePath | None) -> Optional[PurePath]:
    if val is None:
        return None
    return PurePath(val)


def parse_env(val: Optional[Mapping[str, Any]]) -> Optional[Mapping[str, str]]:
    if val is None:
        return None
    return {str(key): str(value) for key, value in val.items()}


def _positive(instance, attribute, value) -> None:
    if value is not None and value <= 0:
        raise ValueError(f"{attribute.name} must be positive, got {value!r}")


@define(kw_only=True, frozen=True)
class RunOptions:
    # === Process setup
    work_dir: Optional[PurePath] = field(converter=parse_path, default=None)
    env: Optional[Mapping[str, str]] = field(converter=parse_env, default=None)
    inherit_env: bool = field(converter=parse_bool, default=True)
    input: Optional[bytes | str] = field(default=None)
    # === Timeout
    timeout: Optional[float] = field(
        converter=parse_timeout, validator=_positive, default=None
    )
    on_timeout: OnTimeout = field(converter=parse_on_timeout, default=OnTimeout.DISCARD)
    raise_on_timeout: bool = field(converter=parse_bool, default=True)
    # === Capturing
    max_capture_bytes: int = field(
        converter=int, validator=_positive, default=DEFAULT_MAX_CAPTURE_BYTES
    )
    encoding: str = field(
        validator=validators.instance_of(str), default=DEFAULT_ENCODING
    )

    @classmethod
    def from_environ(cls, environ: Mapping[str, str], **overrides: Any) -> RunOptions:
        """Build options from ``PROCESS_EXEC_*`` variables.

        Only the settings which make sense globally are read (timeout,
        timeout handling, capture limit and encoding); explicit keyword
        overrides win over the environment.
        """
        parsed = {
            key: val
            for key, val in parse_environ(environ).items()
            if key in ENVIRON_SETTINGS
        }
        parsed.update(overrides)
        return cls(**parsed)

    def evolve(self, **changes: Any) -> RunOptions:
        return evolve(self, **changes)

    @property
    def input_bytes(self) -> Optional[bytes]:
        if isinstance(self.input, str):
            return self.input.encode(self.encoding)
        return self.input


ENVIRON_SETTINGS = frozenset(
    [
        "timeout",
        "on_timeout",
        "raise_on_timeout",
        "max_capture_bytes",
        "encoding",
    ]
)


def parse_environ(environ: Mapping[str, str]) -> dict[str, str]:
    ret = dict[str, str]()
    for key, val in environ.items():
        for prefix in ENV_PREFIXES:
            if key.startswith(prefix):
                new_key = key.removeprefix(prefix).lower().replace("-", "_")
                ret.setdefault(new_key, val)
                break
    return ret
