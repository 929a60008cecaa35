"""Order status state machine."""

from pizzeria.models.order import OrderStatus


class OrderTransitions:
    """Valid order status transitions."""

    TRANSITIONS = {
        OrderStatus.PENDING: [OrderStatus.CONFIRMED, OrderStatus.CANCELLED],
        OrderStatus.CONFIRMED: [OrderStatus.IN_KITCHEN, OrderStatus.CANCELLED],
        OrderStatus.IN_KITCHEN: [OrderStatus.OUT_FOR_DELIVERY],
        OrderStatus.OUT_FOR_DELIVERY: [OrderStatus.DELIVERED],
        OrderStatus.DELIVERED: [],
        OrderStatus.CANCELLED: [],
    }

    CANCELLABLE = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})

    @classmethod
    def can_transition(cls, from_state: OrderStatus, to_state: OrderStatus) -> bool:
        """Check if a state transition is valid."""
        return to_state in cls.TRANSITIONS.get(from_state, [])

    @classmethod
    def can_cancel(cls, state: OrderStatus) -> bool:
        return state in cls.CANCELLABLE
