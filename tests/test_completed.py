"""Tests for process_exec.executor.completed: the result facade."""

from __future__ import annotations

import attrs
import pytest

from process_exec.executor import CompletedExec, ProcessFailedError


def make_result(
    exit_code: int | None = 0,
    stdout: bytes = b"",
    stderr: bytes = b"",
    **kwargs,
) -> CompletedExec:
    return CompletedExec(
        command="tool --flag 'quoted arg'",
        exit_code=exit_code,
        stdout=stdout,
        stderr=stderr,
        **kwargs,
    )


# ---------------------------------------------------------------------------
# Accessors
# ---------------------------------------------------------------------------


class TestAccessors:
    def test_exposes_fields(self) -> None:
        result = make_result(3, b"out\n", b"err\n")
        assert result.command == "tool --flag 'quoted arg'"
        assert result.exit_code == 3
        assert result.output == "out\n"
        assert result.error_output == "err\n"

    def test_undecodable_bytes_are_replaced(self) -> None:
        result = make_result(stdout=b"ok \xff")
        assert result.output == "ok �"

    def test_custom_encoding(self) -> None:
        result = make_result(stdout="grüße".encode("latin-1"), encoding="latin-1")
        assert result.output == "grüße"

    def test_is_immutable(self) -> None:
        result = make_result()
        with pytest.raises(attrs.exceptions.FrozenInstanceError):
            result.exit_code = 1  # type: ignore[misc]

    def test_returncode_follows_subprocess_convention(self) -> None:
        assert make_result(2).returncode == 2
        assert make_result(None, term_signal=9).returncode == -9
        assert make_result(None).returncode == -1

    def test_to_json(self) -> None:
        result = make_result(stdout=b'{"name": "vol", "labels": []}')
        assert result.to_json() == {"name": "vol", "labels": []}


class TestSuccess:
    @pytest.mark.parametrize("exit_code", [0, 1, 2, 127, 255, None])
    def test_successful_iff_zero(self, exit_code: int | None) -> None:
        result = make_result(exit_code)
        assert result.successful == (exit_code == 0)
        assert result.failed == (not result.successful)


class TestContains:
    def test_literal_substring(self) -> None:
        result = make_result(stdout=b"hello world", stderr=b"warning: x")
        assert result.contains_in_output("lo wo")
        assert not result.contains_in_output("goodbye")
        assert result.contains_in_error_output("warning")
        assert not result.contains_in_error_output("hello")

    def test_case_sensitive(self) -> None:
        result = make_result(stdout=b"Hello")
        assert not result.contains_in_output("hello")

    def test_empty_needle_is_always_contained(self) -> None:
        result = make_result()
        assert result.contains_in_output("")
        assert result.contains_in_error_output("")

    def test_no_regex_interpretation(self) -> None:
        result = make_result(stdout=b"a.c")
        assert result.contains_in_output("a.c")
        assert not make_result(stdout=b"abc").contains_in_output("a.c")


# ---------------------------------------------------------------------------
# Raising on failure
# ---------------------------------------------------------------------------


class TestThrowIfFailed:
    def test_successful_returns_same_instance(self) -> None:
        result = make_result(0)
        assert result.throw_if_failed() is result

    def test_successful_does_not_call_hook(self) -> None:
        calls = []
        make_result(0).throw_if_failed(lambda res, err: calls.append(res))
        assert calls == []

    @pytest.mark.parametrize("exit_code", [1, 2, 255, None])
    def test_failed_raises_with_result(self, exit_code: int | None) -> None:
        result = make_result(exit_code, stderr=b"boom")
        with pytest.raises(ProcessFailedError) as excinfo:
            result.throw_if_failed()
        error = excinfo.value
        assert error.result is result
        assert error.command == result.command
        assert error.exit_code == exit_code
        assert error.stderr == "boom"

    def test_summary_contains_command_and_exit_code(self) -> None:
        with pytest.raises(ProcessFailedError) as excinfo:
            make_result(42, stderr=b"disk full").throw_if_failed()
        message = str(excinfo.value)
        assert "tool --flag 'quoted arg'" in message
        assert "Exit Code: 42" in message
        assert "disk full" in message

    def test_hook_receives_result_and_error(self) -> None:
        result = make_result(1)
        seen = []
        with pytest.raises(ProcessFailedError) as excinfo:
            result.throw_if_failed(lambda res, err: seen.append((res, err)))
        assert seen == [(result, excinfo.value)]

    def test_hook_cannot_suppress(self) -> None:
        def hook(res: CompletedExec, err: ProcessFailedError) -> None:
            return None

        with pytest.raises(ProcessFailedError):
            make_result(1).throw_if_failed(hook)

    def test_hook_error_is_chained(self) -> None:
        hook_error = RuntimeError("logging backend down")

        def hook(res: CompletedExec, err: ProcessFailedError) -> None:
            raise hook_error

        with pytest.raises(ProcessFailedError) as excinfo:
            make_result(1).throw_if_failed(hook)
        assert excinfo.value.__cause__ is hook_error


class TestThrowIfFailedWhen:
    @pytest.mark.parametrize("exit_code", [0, 1, None])
    def test_false_condition_never_raises(self, exit_code: int | None) -> None:
        calls = []
        result = make_result(exit_code)
        assert result.throw_if_failed_when(False, lambda r, e: calls.append(e)) is result
        assert calls == []

    def test_true_condition_on_success(self) -> None:
        result = make_result(0)
        assert result.throw_if_failed_when(True) is result

    def test_true_condition_on_failure(self) -> None:
        result = make_result(5)
        seen = []
        with pytest.raises(ProcessFailedError) as excinfo:
            result.throw_if_failed_when(True, lambda r, e: seen.append(r))
        assert excinfo.value.result is result
        assert seen == [result]
