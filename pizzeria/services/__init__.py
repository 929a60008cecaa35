"""Order workflow services."""

from pizzeria.services.notifications import NotificationSender
from pizzeria.services.ordering import OrderWorkflowService
from pizzeria.services.transitions import StatusTransitionHandler

__all__ = ["NotificationSender", "OrderWorkflowService", "StatusTransitionHandler"]
