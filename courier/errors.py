"""Error taxonomy shared by handlers, collaborators and workflows."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Optional

if TYPE_CHECKING:
    from .contracts import LineItem
    from .saga import WorkflowRun


class CourierError(Exception):
    """Base class for failures reported to the caller."""

    status_code = 500

    def to_dict(self) -> dict[str, Any]:
        return {"error": type(self).__name__, "message": str(self)}


class ValidationError(CourierError):
    """Malformed or missing request input."""

    status_code = 400


class NotFound(CourierError):
    """Referenced entity is absent."""

    status_code = 404

    def __init__(self, entity: str, key: str) -> None:
        super().__init__(f"{entity} '{key}' not found")
        self.entity = entity
        self.key = key


class DependencyUnavailable(CourierError):
    """An external call failed, timed out or returned a non-success status.

    ``uncertain`` is set when no answer arrived in time: the call may still
    have taken effect on the remote side.
    """

    status_code = 502

    def __init__(self, dependency: str, detail: str, uncertain: bool = False) -> None:
        super().__init__(f"{dependency} unavailable: {detail}")
        self.dependency = dependency
        self.detail = detail
        self.uncertain = uncertain


class StockRejected(CourierError):
    """The catalog refused a stock mutation for one product."""

    status_code = 409

    def __init__(self, product_id: str, detail: str) -> None:
        super().__init__(f"stock update for product '{product_id}' rejected: {detail}")
        self.product_id = product_id
        self.detail = detail


class InventoryUpdateFailed(CourierError):
    """A decrement failed part-way through a line-item list.

    ``applied`` holds the items decremented before the failing one. They are
    not restocked unless compensation is enabled.
    """

    def __init__(
        self,
        index: int,
        product_id: str,
        applied: List["LineItem"],
        cause: Exception,
    ) -> None:
        super().__init__(
            f"inventory update failed at item {index} (product '{product_id}'): {cause}"
        )
        self.index = index
        self.product_id = product_id
        self.applied = applied
        self.cause = cause

    @property
    def status_code(self) -> int:  # type: ignore[override]
        return getattr(self.cause, "status_code", DependencyUnavailable.status_code)

    @property
    def uncertain(self) -> bool:
        """Whether the failing item itself may have been decremented."""
        return getattr(self.cause, "uncertain", False)


class WorkflowFailed(CourierError):
    """A workflow aborted at ``step`` and left no side effect in place."""

    partial = False

    def __init__(
        self,
        workflow: str,
        step: str,
        cause: Exception,
        run: Optional["WorkflowRun"] = None,
    ) -> None:
        super().__init__(f"{workflow} failed at step '{step}': {cause}")
        self.workflow = workflow
        self.step = step
        self.cause = cause
        self.run = run

    @property
    def status_code(self) -> int:  # type: ignore[override]
        if isinstance(self.cause, CourierError):
            return self.cause.status_code
        return 500

    @property
    def completed_steps(self) -> List[str]:
        return self.run.completed_steps() if self.run else []

    @property
    def retained(self) -> List[str]:
        return []

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "step": self.step,
                "cause": type(self.cause).__name__,
                "partial": self.partial,
                "completedSteps": self.completed_steps,
                "retained": self.retained,
            }
        )
        return data


class PartialCompletion(WorkflowFailed):
    """A workflow aborted after at least one side effect took hold."""

    status_code = 500  # type: ignore[assignment]
    partial = True

    def __init__(
        self,
        workflow: str,
        step: str,
        cause: Exception,
        run: Optional["WorkflowRun"] = None,
        retained: Optional[List[str]] = None,
    ) -> None:
        super().__init__(workflow, step, cause, run)
        self._retained = list(retained or [])

    @property
    def retained(self) -> List[str]:
        return list(self._retained)
