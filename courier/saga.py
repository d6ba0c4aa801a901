"""Ordered step execution with optional compensation.

A workflow is a list of :class:`WorkflowStep` objects run strictly in order
by :class:`SagaRunner`. The first failing step aborts the rest. With
compensation disabled nothing is undone and the caller learns which side
effects remain. With compensation enabled, completed steps are undone in
reverse order until a completed step that cannot be undone is reached
(a publish, for example); everything before it stays in place.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from .errors import CourierError, DependencyUnavailable, PartialCompletion, WorkflowFailed

logger = logging.getLogger(__name__)

StepAction = Callable[[], Awaitable[Any]]

_FORWARD_DONE = ("completed", "compensated", "compensation_failed")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class WorkflowStep:
    """One forward action plus its optional compensating action.

    ``mutates`` marks steps with external side effects. ``dependency`` names
    the collaborator when an unexpected exception has to be reported as
    ``DependencyUnavailable``.
    """

    name: str
    action: StepAction
    compensate: Optional[StepAction] = None
    mutates: bool = True
    dependency: str = ""


class StepRecord(BaseModel):
    """Record of an individual step execution."""

    name: str
    status: str = "pending"  # pending, completed, failed, compensated, compensation_failed
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error: Optional[str] = None


class WorkflowRun(BaseModel):
    """Outcome of one workflow invocation."""

    workflow: str
    correlation_id: str
    status: str = "in_progress"  # in_progress, completed, failed
    steps: List[StepRecord] = Field(default_factory=list)
    outputs: Dict[str, Any] = Field(default_factory=dict)

    def step(self, name: str) -> Optional[StepRecord]:
        return next((s for s in self.steps if s.name == name), None)

    def completed_steps(self) -> List[str]:
        """Names of steps whose forward action succeeded."""
        return [s.name for s in self.steps if s.status in _FORWARD_DONE]


class SagaRunner:
    """Runs the steps of one workflow invocation."""

    def __init__(
        self, workflow: str, steps: Sequence[WorkflowStep], compensate: bool = False
    ) -> None:
        self.workflow = workflow
        self.steps = list(steps)
        self.compensate = compensate

    async def run(self, correlation_id: Optional[str] = None) -> WorkflowRun:
        """Execute every step in order.

        Returns:
            The completed run; each step's non-``None`` return value is kept
            in ``run.outputs`` under the step name.

        Raises:
            WorkflowFailed: A step failed and no side effect remains.
            PartialCompletion: A step failed after side effects took hold.
        """
        run = WorkflowRun(
            workflow=self.workflow,
            correlation_id=correlation_id or str(uuid.uuid4()),
            steps=[StepRecord(name=step.name) for step in self.steps],
        )
        executed: List[Tuple[WorkflowStep, StepRecord]] = []

        for step, record in zip(self.steps, run.steps):
            record.started_at = _utcnow()
            try:
                output = await step.action()
            except Exception as exc:
                record.status = "failed"
                record.completed_at = _utcnow()
                record.error = str(exc)
                run.status = "failed"
                cause = exc
                if not isinstance(exc, CourierError):
                    cause = DependencyUnavailable(step.dependency or step.name, str(exc))
                    cause.__cause__ = exc
                raise await self._abort(run, step, record, executed, cause) from cause
            record.status = "completed"
            record.completed_at = _utcnow()
            if output is not None:
                run.outputs[step.name] = output
            executed.append((step, record))
            logger.info(
                f"Step {step.name} of {self.workflow} completed for correlation_id={run.correlation_id}"
            )

        run.status = "completed"
        logger.info(f"Workflow {self.workflow} completed for correlation_id={run.correlation_id}")
        return run

    async def _abort(
        self,
        run: WorkflowRun,
        failed_step: WorkflowStep,
        failed_record: StepRecord,
        executed: List[Tuple[WorkflowStep, StepRecord]],
        cause: Exception,
    ) -> WorkflowFailed:
        logger.error(
            f"Workflow {self.workflow} failed at step {failed_step.name} "
            f"for correlation_id={run.correlation_id}: {cause}"
        )

        # Most recent effects first; a failing step that already applied part
        # of its work (e.g. some stock decrements), or whose mutating call timed
        # out and may have landed, comes before everything else.
        candidates: List[Tuple[WorkflowStep, StepRecord]] = []
        uncertain = failed_step.mutates and getattr(cause, "uncertain", False)
        if getattr(cause, "applied", None) or uncertain:
            candidates.append((failed_step, failed_record))
        candidates.extend((s, r) for s, r in reversed(executed) if s.mutates)

        retained: List[str] = []
        if not self.compensate:
            retained = [s.name for s, _ in candidates]
        else:
            retained = await self._compensate(run, candidates)

        if retained:
            logger.error(
                f"Workflow {self.workflow} left side effects in place for "
                f"correlation_id={run.correlation_id}: {', '.join(retained)}"
            )
            return PartialCompletion(
                self.workflow, failed_step.name, cause, run, retained
            )
        return WorkflowFailed(self.workflow, failed_step.name, cause, run)

    async def _compensate(
        self, run: WorkflowRun, candidates: List[Tuple[WorkflowStep, StepRecord]]
    ) -> List[str]:
        """Undo ``candidates`` in order; return the names left in place."""
        for position, (step, record) in enumerate(candidates):
            if step.compensate is None:
                return [s.name for s, _ in candidates[position:]]
            try:
                await step.compensate()
            except Exception as exc:
                if record.status == "completed":
                    record.status = "compensation_failed"
                logger.warning(
                    f"Compensation for step {step.name} failed for "
                    f"correlation_id={run.correlation_id}: {exc}"
                )
                return [s.name for s, _ in candidates[position:]]
            if record.status == "completed":
                record.status = "compensated"
            logger.warning(
                f"Compensated step {step.name} for correlation_id={run.correlation_id}"
            )
        return []
