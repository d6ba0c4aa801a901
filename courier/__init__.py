"""Courier: order and transport workflows over external collaborators."""

from .app import CourierApp
from .config import CourierConfig, load_config
from .contracts import (
    ArchiveSnapshot,
    DomainEvent,
    LineItem,
    OrderRecord,
    TransportRecord,
)
from .errors import (
    CourierError,
    DependencyUnavailable,
    NotFound,
    PartialCompletion,
    ValidationError,
    WorkflowFailed,
)
from .handlers import HandlerResponse, Handlers
from .saga import SagaRunner, WorkflowRun, WorkflowStep
from .workflows import OrderWorkflow, TransportWorkflow

__version__ = "0.1.0"
__all__ = [
    "ArchiveSnapshot",
    "CourierApp",
    "CourierConfig",
    "CourierError",
    "DependencyUnavailable",
    "DomainEvent",
    "HandlerResponse",
    "Handlers",
    "LineItem",
    "NotFound",
    "OrderRecord",
    "OrderWorkflow",
    "PartialCompletion",
    "SagaRunner",
    "TransportRecord",
    "TransportWorkflow",
    "ValidationError",
    "WorkflowFailed",
    "WorkflowRun",
    "WorkflowStep",
    "load_config",
]
