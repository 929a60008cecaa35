"""Fire-and-forget customer and admin notifications over Redis pub/sub."""

from typing import Any

from pizzeria.config import get_settings
from pizzeria.models.ingredient import Ingredient
from pizzeria.models.order import Order, OrderStatus
from pizzeria.models.user import User
from pizzeria.state.manager import StateManager
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)

ADMIN_CHANNEL = "notifications:admin"

STATUS_MESSAGES = {
    OrderStatus.PENDING: "We have received your order.",
    OrderStatus.CONFIRMED: "Your order has been confirmed and is being prepared.",
    OrderStatus.IN_KITCHEN: "Your pizza is now being prepared in our kitchen.",
    OrderStatus.OUT_FOR_DELIVERY: "Your order is out for delivery.",
    OrderStatus.DELIVERED: "Your order has been delivered. Enjoy your meal!",
    OrderStatus.CANCELLED: "Your order has been cancelled.",
}


def order_channel(order: Order) -> str:
    return f"notifications:order:{order.id}"


class NotificationSender:
    """
    Publishes notification events for downstream delivery (email, SSE).

    Failures are logged and never propagated: a notification problem must
    not undo an order or status change that already committed.
    """

    def __init__(self, state_manager: StateManager, enabled: bool | None = None):
        self.state = state_manager
        self.enabled = get_settings().notifications_enabled if enabled is None else enabled

    async def order_placed(self, order: Order) -> bool:
        return await self._send(
            order_channel(order),
            {
                "event": "order_placed",
                "recipient": order.customer_email,
                "subject": f"Order Confirmation ({order.order_number})",
                **self._order_fields(order),
            },
        )

    async def status_changed(self, order: Order) -> bool:
        return await self._send(
            order_channel(order),
            {
                "event": "order_status_changed",
                "recipient": order.customer_email,
                "subject": f"Order Update ({order.order_number})",
                **self._order_fields(order),
            },
        )

    async def low_stock(self, items: list[Ingredient], admins: list[User]) -> bool:
        if not items:
            return False
        return await self._send(
            ADMIN_CHANNEL,
            {
                "event": "low_stock_alert",
                "recipients": [admin.email for admin in admins],
                "subject": f"Low Stock Alert - {len(items)} items need restocking",
                "items": [
                    {
                        "id": str(item.id),
                        "name": item.name,
                        "type": item.kind.label,
                        "stock_quantity": item.stock_quantity,
                        "min_threshold": item.min_threshold,
                    }
                    for item in sorted(items, key=lambda i: i.stock_quantity)
                ],
            },
        )

    @staticmethod
    def _order_fields(order: Order) -> dict[str, Any]:
        return {
            "order_id": str(order.id),
            "order_number": order.order_number,
            "status": order.status.value,
            "message": STATUS_MESSAGES[order.status],
            "total_price": str(order.total_price),
            "estimated_delivery": (
                order.estimated_delivery.isoformat() if order.estimated_delivery else None
            ),
        }

    async def _send(self, channel: str, payload: dict[str, Any]) -> bool:
        if not self.enabled:
            logger.debug(
                "notification_skipped", channel=channel, notification=payload["event"]
            )
            return False
        try:
            await self.state.publish(channel, payload)
        except Exception as e:
            logger.warning(
                "notification_failed",
                channel=channel,
                notification=payload["event"],
                error=str(e),
            )
            return False

        logger.info("notification_sent", channel=channel, notification=payload["event"])
        return True
