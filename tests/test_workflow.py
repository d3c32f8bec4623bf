"""Tests for workflow result status derivation."""
import pytest

from contentflow_core.workflow import StepStatus, WorkflowResult, WorkflowStatus, WorkflowStepOutcome


def _result(*outcomes):
    result = WorkflowResult("test", "Test workflow")
    for outcome in outcomes:
        result.record(outcome)
    return result


class TestWorkflowStatus:
    """Test overall status is derived from step outcomes."""

    def test_all_succeeded_is_complete(self):
        result = _result(
            WorkflowStepOutcome.succeeded("a", "done"),
            WorkflowStepOutcome.succeeded("b", "done"),
        )
        assert result.status == WorkflowStatus.COMPLETE

    def test_some_succeeded_is_partial(self):
        result = _result(
            WorkflowStepOutcome.succeeded("a", "done"),
            WorkflowStepOutcome.failed("b", "boom"),
        )
        assert result.status == WorkflowStatus.PARTIAL

    def test_none_succeeded_is_failed(self):
        result = _result(
            WorkflowStepOutcome.failed("a", "boom"),
            WorkflowStepOutcome.skipped("b", "a failed"),
        )
        assert result.status == WorkflowStatus.FAILED

    def test_skipped_step_prevents_complete(self):
        """Test a skipped step is not counted as a success."""
        result = _result(
            WorkflowStepOutcome.succeeded("a", "done"),
            WorkflowStepOutcome.skipped("b", "prerequisite failed"),
        )
        assert result.status == WorkflowStatus.PARTIAL

    def test_empty_result_is_failed(self):
        assert _result().status == WorkflowStatus.FAILED


class TestWorkflowResultViews:
    """Test the step partitions and reference listing."""

    def test_partitions_preserve_order(self):
        result = _result(
            WorkflowStepOutcome.succeeded("a", "done", "https://example.com/a"),
            WorkflowStepOutcome.failed("b", "boom"),
            WorkflowStepOutcome.skipped("c", "b failed"),
            WorkflowStepOutcome.succeeded("d", "done"),
        )
        assert [s.step for s in result.completed_steps] == ["a", "d"]
        assert [s.step for s in result.failed_steps] == ["b"]
        assert [s.step for s in result.skipped_steps] == ["c"]
        assert result.references == [("a", "https://example.com/a")]

    def test_outcome_constructors(self):
        assert WorkflowStepOutcome.succeeded("a", "ok").ok
        failed = WorkflowStepOutcome.failed("a", "boom")
        assert failed.status == StepStatus.FAILED
        assert failed.detail == "boom"
        assert failed.reference is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
