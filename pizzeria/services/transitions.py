"""Status Transition Handler - admin status changes and customer cancellation."""

from datetime import timedelta
from typing import Callable
from uuid import UUID

from pizzeria.config import get_settings
from pizzeria.errors import Forbidden, InvalidTransition, NotFound
from pizzeria.models.ingredient import utcnow
from pizzeria.models.order import Order, OrderStatus
from pizzeria.models.user import User
from pizzeria.services.notifications import NotificationSender
from pizzeria.state.catalog import CatalogStore
from pizzeria.state.manager import StateManager
from pizzeria.state.orders import OrderRepository
from pizzeria.state.workflow import OrderTransitions
from pizzeria.utils.logging import OrderLogger
from pizzeria.utils.retry import with_optimistic_retry

# A mutation edits the loaded order in place and returns stock to restore.
Mutation = Callable[[Order], dict[UUID, int]]


def _ids(stock: dict[UUID, int]) -> dict[str, int]:
    return {str(k): v for k, v in stock.items()}


class StatusTransitionHandler:
    """Moves orders through the status machine, restoring stock on cancellation."""

    def __init__(
        self,
        state_manager: StateManager,
        catalog: CatalogStore,
        orders: OrderRepository,
        notifier: NotificationSender,
    ):
        self.state = state_manager
        self.catalog = catalog
        self.orders = orders
        self.notifier = notifier
        self.settings = get_settings()
        self.logger = OrderLogger("status_transitions")

    async def advance_status(
        self,
        order_id: UUID,
        new_status: OrderStatus,
        actor: User,
        note: str | None = None,
    ) -> Order:
        """Admin-directed move along the transition table."""
        self._require_admin(actor)

        def mutate(order: Order) -> dict[UUID, int]:
            if not OrderTransitions.can_transition(order.status, new_status):
                raise InvalidTransition(
                    f"Cannot change order {order.order_number} "
                    f"from {order.status.value} to {new_status.value}"
                )
            order.record_status(new_status, changed_by=actor.id, note=note)
            self._apply_delivery_policy(order)
            if new_status is OrderStatus.CANCELLED:
                return order.release_stock()
            return {}

        order, previous, restored = await self._transition(order_id, mutate)
        self.logger.log_transition(
            order.id, previous.value, order.status.value, actor.id, restored=_ids(restored)
        )
        await self.notifier.status_changed(order)
        return order

    async def cancel_order(
        self,
        order_id: UUID,
        requester: User,
        note: str | None = None,
    ) -> Order:
        """Cancel a pending or confirmed order and give its stock back."""

        def mutate(order: Order) -> dict[UUID, int]:
            may_override = requester.is_admin and self.settings.admin_can_cancel
            if order.user_id != requester.id and not may_override:
                raise Forbidden("Not authorized to cancel this order")
            if not OrderTransitions.can_cancel(order.status):
                raise InvalidTransition(
                    f"Order {order.order_number} cannot be cancelled "
                    f"once it is {order.status.value}"
                )
            order.record_status(
                OrderStatus.CANCELLED,
                changed_by=requester.id,
                note=note or "Cancelled by customer",
            )
            return order.release_stock()

        order, previous, restored = await self._transition(order_id, mutate)
        self.logger.log_transition(
            order.id,
            previous.value,
            order.status.value,
            requester.id,
            restored=_ids(restored),
        )
        await self.notifier.status_changed(order)
        return order

    async def force_status(
        self,
        order_id: UUID,
        new_status: OrderStatus,
        actor: User,
        note: str | None = None,
    ) -> Order:
        """
        Admin override that ignores the transition table.

        Stock is never reserved by a forced change. Forcing into ``cancelled``
        releases the reservation if the order still holds one, so stock is
        restored at most once per placement however the order is moved around.
        """
        self._require_admin(actor)

        def mutate(order: Order) -> dict[UUID, int]:
            if order.status is new_status:
                raise InvalidTransition(f"Order is already {new_status.value}")
            order.record_status(
                new_status,
                changed_by=actor.id,
                note=f"forced: {note}" if note else "forced",
            )
            self._apply_delivery_policy(order)
            if new_status is OrderStatus.CANCELLED:
                return order.release_stock()
            return {}

        order, previous, restored = await self._transition(order_id, mutate)
        self.logger.log_transition(
            order.id,
            previous.value,
            order.status.value,
            actor.id,
            forced=True,
            restored=_ids(restored),
        )
        await self.notifier.status_changed(order)
        return order

    async def add_note(self, order_id: UUID, note: str, actor: User) -> Order:
        self._require_admin(actor)

        def mutate(order: Order) -> dict[UUID, int]:
            order.add_note(note, actor.id)
            return {}

        order, _, _ = await self._transition(order_id, mutate)
        return order

    def _apply_delivery_policy(self, order: Order) -> None:
        now = utcnow()
        if order.status is OrderStatus.IN_KITCHEN:
            order.estimated_delivery = now + timedelta(minutes=self.settings.prep_window_minutes)
        elif order.status is OrderStatus.OUT_FOR_DELIVERY:
            order.estimated_delivery = now + timedelta(
                minutes=self.settings.delivery_window_minutes
            )
        elif order.status is OrderStatus.DELIVERED:
            order.actual_delivery = now

    @staticmethod
    def _require_admin(actor: User) -> None:
        if not actor.is_admin:
            raise Forbidden("Admin role required")

    @with_optimistic_retry()
    async def _transition(
        self, order_id: UUID, mutate: Mutation
    ) -> tuple[Order, OrderStatus, dict[UUID, int]]:
        """
        Read, mutate and write one order under WATCH.

        Stock restoration returned by ``mutate`` commits in the same
        MULTI/EXEC as the status change, so it happens exactly once.
        """
        key = self.orders.key(order_id)
        async with self.state.transaction(key) as pipe:
            order = self.orders.decode(await pipe.get(key))
            if order is None:
                raise NotFound(f"Order {order_id} not found")

            previous = order.status
            restore = mutate(order)

            pipe.multi()
            self.orders.stage_update(pipe, order, previous)
            for ingredient_id, quantity in restore.items():
                self.catalog.stage_increment(pipe, ingredient_id, quantity)
            await pipe.execute()

        return order, previous, restore
