"""Unit tests for sequential step execution."""

import subprocess

import pytest
from omarchyctl.core.errors import CommandFailedError, PreconditionError
from omarchyctl.core.steps import Step, run_steps, select_steps
from omarchyctl.models.step import StepResult, StepStatus


def _step(name: str, status: StepStatus = StepStatus.CHANGED) -> Step:
    return Step(name=name, description=f"{name} step", run=lambda: StepResult(name, status))


def _raising(name: str, error: Exception) -> Step:
    def run() -> StepResult:
        raise error

    return Step(name=name, description="raises", run=run)


class TestSelectSteps:
    """Tests for select_steps."""

    @pytest.fixture
    def steps(self) -> list[Step]:
        return [_step("a"), _step("b"), _step("c")]

    def test_no_filters_keeps_all(self, steps: list[Step]) -> None:
        assert [s.name for s in select_steps(steps)] == ["a", "b", "c"]

    def test_only_keeps_order(self, steps: list[Step]) -> None:
        """--only keeps execution order, not argument order."""
        assert [s.name for s in select_steps(steps, only=["c", "a"])] == ["a", "c"]

    def test_skip(self, steps: list[Step]) -> None:
        assert [s.name for s in select_steps(steps, skip=["b"])] == ["a", "c"]

    def test_only_and_skip(self, steps: list[Step]) -> None:
        assert [s.name for s in select_steps(steps, only=["a", "b"], skip=["a"])] == ["b"]

    def test_unknown_name_raises(self, steps: list[Step]) -> None:
        with pytest.raises(ValueError, match="Unknown step\\(s\\): zz. Available: a, b, c"):
            select_steps(steps, only=["zz"])


class TestRunSteps:
    """Tests for run_steps."""

    def test_runs_all_in_order(self) -> None:
        results = run_steps([_step("a"), _step("b", StepStatus.UNCHANGED)])

        assert [(r.name, r.status) for r in results] == [
            ("a", StepStatus.CHANGED),
            ("b", StepStatus.UNCHANGED),
        ]

    def test_stops_after_failed_result(self) -> None:
        results = run_steps([_step("a", StepStatus.FAILED), _step("b")])

        assert [r.name for r in results] == ["a"]

    @pytest.mark.parametrize(
        "error",
        [
            PreconditionError("zsh not installed"),
            CommandFailedError(["git", "clone"], 128, "fatal"),
            OSError("read-only file system"),
            subprocess.TimeoutExpired(["curl"], 60),
        ],
    )
    def test_raised_errors_become_failed_results(self, error: Exception) -> None:
        """Domain, OS and timeout errors stop the run as FAILED results."""
        results = run_steps([_step("a"), _raising("b", error), _step("c")])

        assert [r.name for r in results] == ["a", "b"]
        assert results[1].status == StepStatus.FAILED
        assert results[1].error == str(error)

    def test_unexpected_errors_propagate(self) -> None:
        with pytest.raises(KeyError):
            run_steps([_raising("a", KeyError("bug"))])

    def test_on_result_called_per_step(self) -> None:
        seen: list[str] = []

        run_steps([_step("a"), _step("b")], on_result=lambda r: seen.append(r.name))

        assert seen == ["a", "b"]
