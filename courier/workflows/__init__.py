from .base import BaseWorkflow
from .order import OrderWorkflow
from .transport import TransportWorkflow

__all__ = ["BaseWorkflow", "OrderWorkflow", "TransportWorkflow"]
