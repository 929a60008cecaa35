"""Order Workflow Service - turns a pizza selection into a priced, reserved order."""

from collections import Counter
from datetime import timedelta
from uuid import UUID

from redis.exceptions import RedisError

from pizzeria.config import get_settings
from pizzeria.errors import Forbidden, InvalidSelection, NotFound, OutOfStock, ValidationError
from pizzeria.models.ingredient import Ingredient, IngredientKind
from pizzeria.models.order import DeliveryInfo, Order, OrderStatus, PizzaSelection
from pizzeria.models.user import User
from pizzeria.services import pricing
from pizzeria.services.notifications import NotificationSender
from pizzeria.state.catalog import CatalogStore
from pizzeria.state.orders import OrderRepository
from pizzeria.state.users import UserDirectory
from pizzeria.utils.logging import OrderLogger, get_logger

logger = get_logger(__name__)


class OrderWorkflowService:
    """
    Order placement.

    Responsibilities:
    - Validate delivery contact details
    - Resolve and check every selected ingredient
    - Price the pizza from ingredient snapshots
    - Reserve stock and persist the order in one transaction
    - Notify the customer (and admins on low stock)
    """

    def __init__(
        self,
        catalog: CatalogStore,
        orders: OrderRepository,
        users: UserDirectory,
        notifier: NotificationSender,
    ):
        self.catalog = catalog
        self.orders = orders
        self.users = users
        self.notifier = notifier
        self.settings = get_settings()
        self.logger = OrderLogger("order_workflow")

    async def place_order(
        self,
        user_id: UUID,
        selection: PizzaSelection,
        delivery: DeliveryInfo,
    ) -> Order:
        """
        Create a pending order for the selection.

        Raises:
            NotFound: the user does not exist
            ValidationError: phone or address missing
            InvalidSelection: a required component is missing or not orderable
            OutOfStock: an ingredient is unknown or cannot cover the quantity
        """
        user = await self.users.get(user_id)
        if user is None:
            raise NotFound(f"User {user_id} not found")

        contact = self._resolve_contact(user, delivery)
        components = await self._resolve_components(selection)
        self._check_stock(components, selection.quantity)

        base, sauce, cheese, *toppings = [ingredient.snapshot() for ingredient in components]
        price = pricing.unit_price([base, sauce, cheese, *toppings], selection.size)

        order = Order(
            user_id=user.id,
            pizza_base=base,
            sauce=sauce,
            cheese=cheese,
            toppings=tuple(toppings),
            size=selection.size,
            quantity=selection.quantity,
            unit_price=price,
            total_price=pricing.line_total(price, selection.quantity),
            special_instructions=delivery.special_instructions,
            payment_method=delivery.payment_method,
            stock_reserved=True,
            **contact,
        )
        order.estimated_delivery = order.created_at + timedelta(
            minutes=self.settings.base_delivery_minutes
            + self.settings.minutes_per_topping * len(toppings)
        )
        order.record_status(
            OrderStatus.PENDING, changed_by=user.id, note="Order placed", at=order.created_at
        )

        remaining = await self.catalog.reserve(
            order.stock_requirements(),
            stage=lambda pipe: self.orders.stage_create(pipe, order),
        )

        self.logger.log_placed(
            order.id,
            user.id,
            order.total_price,
            order_number=order.order_number,
            quantity=order.quantity,
            size=order.size.value,
        )

        await self.notifier.order_placed(order)
        await self._alert_low_stock(components, remaining)
        return order

    async def get_order(self, order_id: UUID, requester: User) -> Order:
        """Fetch an order visible to its owner or an admin."""
        order = await self.orders.get(order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found")
        if order.user_id != requester.id and not requester.is_admin:
            raise Forbidden("Not authorized to access this order")
        return order

    def _resolve_contact(self, user: User, delivery: DeliveryInfo) -> dict[str, str]:
        phone = (delivery.phone or user.phone or "").strip()
        address = (delivery.address or user.address or "").strip()
        missing = [name for name, value in (("phone", phone), ("address", address)) if not value]
        if missing:
            self.logger.log_rejected(None, "missing_contact", fields=missing)
            raise ValidationError(f"Delivery {' and '.join(missing)} required")

        return {
            "customer_email": delivery.email or user.email,
            "customer_name": (delivery.name or user.full_name).strip(),
            "customer_phone": phone,
            "delivery_address": address,
        }

    async def _resolve_components(self, selection: PizzaSelection) -> list[Ingredient]:
        """Fetch base, sauce, cheese then toppings, in that order."""
        requested: list[tuple[IngredientKind, UUID | None]] = [
            (IngredientKind.BASE, selection.pizza_base),
            (IngredientKind.SAUCE, selection.sauce),
            (IngredientKind.CHEESE, selection.cheese),
            *((IngredientKind.TOPPING, topping_id) for topping_id in selection.toppings),
        ]

        components: list[Ingredient] = []
        for kind, ingredient_id in requested:
            if ingredient_id is None:
                raise InvalidSelection(f"A {kind.label.lower()} is required")

            ingredient = await self.catalog.get(ingredient_id)
            if ingredient is None:
                raise OutOfStock(f"{kind.label.lower()}: Unknown", ingredient_id=ingredient_id)
            if ingredient.kind is not kind:
                raise InvalidSelection(
                    f"{ingredient.name} is a {ingredient.kind.label.lower()}, "
                    f"not a {kind.label.lower()}"
                )
            if not ingredient.is_active:
                raise InvalidSelection(f"{ingredient.name} is not currently available")
            components.append(ingredient)

        return components

    def _check_stock(self, components: list[Ingredient], quantity: int) -> None:
        """
        Fail fast with the first ingredient that cannot cover the order.

        The reservation transaction re-checks under WATCH, so this is only
        for a precise early error; it does not make the reservation safe.
        """
        needed = Counter(ingredient.id for ingredient in components)
        for ingredient in components:
            requested = needed[ingredient.id] * quantity
            if ingredient.stock_quantity < requested:
                self.logger.log_rejected(
                    None, "out_of_stock", ingredient_id=str(ingredient.id)
                )
                raise OutOfStock(
                    f"{ingredient.kind.label.lower()}: {ingredient.name}",
                    ingredient_id=ingredient.id,
                    requested=requested,
                    available=ingredient.stock_quantity,
                )

    async def _alert_low_stock(
        self,
        components: list[Ingredient],
        remaining: dict[UUID, int],
    ) -> None:
        low = []
        for ingredient in {i.id: i for i in components}.values():
            ingredient = ingredient.model_copy(
                update={"stock_quantity": remaining[ingredient.id]}
            )
            if ingredient.is_low_stock:
                low.append(ingredient)
        if not low:
            return
        try:
            admins = await self.users.list_admins()
        except RedisError as e:
            logger.warning("low_stock_alert_failed", items=len(low), error=str(e))
            return
        await self.notifier.low_stock(low, admins)
