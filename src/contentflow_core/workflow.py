"""Workflow result model for composite operations.

A WorkflowResult records every step a composite operation attempted (or
skipped) in execution order. Overall status is derived, never stored:

- complete: every step succeeded
- partial: at least one step succeeded
- failed: no step succeeded
"""
import enum
from dataclasses import dataclass, field
from typing import Optional

from .schemas import ResearchDepth


class StepStatus(str, enum.Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


class WorkflowStatus(str, enum.Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class WorkflowStepOutcome:
    """Outcome of one external call within a composite operation.

    `detail` holds the result text on success, the error text on failure and
    the skip reason when a prerequisite step did not succeed.
    """

    step: str
    status: StepStatus
    detail: str
    reference: Optional[str] = None

    @classmethod
    def succeeded(cls, step: str, detail: str, reference: Optional[str] = None) -> "WorkflowStepOutcome":
        return cls(step, StepStatus.SUCCEEDED, detail, reference)

    @classmethod
    def failed(cls, step: str, error: str) -> "WorkflowStepOutcome":
        return cls(step, StepStatus.FAILED, error)

    @classmethod
    def skipped(cls, step: str, reason: str) -> "WorkflowStepOutcome":
        return cls(step, StepStatus.SKIPPED, reason)

    @property
    def ok(self) -> bool:
        return self.status == StepStatus.SUCCEEDED


@dataclass(frozen=True)
class ResearchFinding:
    query: str
    text: str


@dataclass(frozen=True)
class ResearchResult:
    """Aggregated findings for a topic, one entry per successful query."""

    topic: str
    depth: ResearchDepth
    queries: tuple[str, ...]
    findings: tuple[ResearchFinding, ...] = ()

    @property
    def has_findings(self) -> bool:
        return bool(self.findings)


@dataclass
class WorkflowResult:
    """Aggregate outcome of a composite operation."""

    operation: str
    title: str
    steps: list[WorkflowStepOutcome] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    research: Optional[ResearchResult] = None

    def record(self, outcome: WorkflowStepOutcome) -> WorkflowStepOutcome:
        self.steps.append(outcome)
        return outcome

    @property
    def status(self) -> WorkflowStatus:
        succeeded = sum(1 for step in self.steps if step.ok)
        if self.steps and succeeded == len(self.steps):
            return WorkflowStatus.COMPLETE
        if succeeded:
            return WorkflowStatus.PARTIAL
        return WorkflowStatus.FAILED

    @property
    def completed_steps(self) -> list[WorkflowStepOutcome]:
        return [step for step in self.steps if step.status == StepStatus.SUCCEEDED]

    @property
    def failed_steps(self) -> list[WorkflowStepOutcome]:
        return [step for step in self.steps if step.status == StepStatus.FAILED]

    @property
    def skipped_steps(self) -> list[WorkflowStepOutcome]:
        return [step for step in self.steps if step.status == StepStatus.SKIPPED]

    @property
    def references(self) -> list[tuple[str, str]]:
        """(step, reference) pairs for every step that produced one."""
        return [(step.step, step.reference) for step in self.steps if step.reference]
