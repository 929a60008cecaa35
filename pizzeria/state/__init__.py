"""State management modules."""

from pizzeria.state.catalog import CatalogStore
from pizzeria.state.manager import StateManager
from pizzeria.state.orders import OrderRepository
from pizzeria.state.users import UserDirectory
from pizzeria.state.workflow import OrderTransitions

__all__ = [
    "CatalogStore",
    "OrderRepository",
    "OrderTransitions",
    "StateManager",
    "UserDirectory",
]
