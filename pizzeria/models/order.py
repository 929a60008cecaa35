"""Order-related data models."""

from collections import Counter
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from pizzeria.models.ingredient import IngredientSnapshot, utcnow

CENT = Decimal("0.01")


class OrderStatus(str, Enum):
    """Order status progression."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    IN_KITCHEN = "in_kitchen"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


class PizzaSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"

    @property
    def multiplier(self) -> Decimal:
        return {
            PizzaSize.SMALL: Decimal("1.0"),
            PizzaSize.MEDIUM: Decimal("1.25"),
            PizzaSize.LARGE: Decimal("1.5"),
        }[self]


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    ONLINE = "online"


class PizzaSelection(BaseModel):
    """Raw build-a-pizza selection as submitted by the customer."""

    pizza_base: UUID | None = None
    sauce: UUID | None = None
    cheese: UUID | None = None
    toppings: list[UUID] = Field(default_factory=list)
    size: PizzaSize = PizzaSize.SMALL
    quantity: int = Field(default=1, ge=1, le=50)


class DeliveryInfo(BaseModel):
    """Delivery contact details; blanks are prefilled from the user profile."""

    phone: str | None = None
    address: str | None = None
    email: EmailStr | None = None
    name: str | None = None
    special_instructions: str | None = Field(default=None, max_length=500)
    payment_method: PaymentMethod = PaymentMethod.CASH


class StatusChange(BaseModel):
    """One immutable entry of the status history log."""

    model_config = ConfigDict(frozen=True)

    status: OrderStatus
    changed_by: UUID | None = None
    changed_at: datetime = Field(default_factory=utcnow)
    note: str | None = None


class OrderNote(BaseModel):
    model_config = ConfigDict(frozen=True)

    note: str = Field(min_length=1, max_length=500)
    added_by: UUID
    added_at: datetime = Field(default_factory=utcnow)


class Order(BaseModel):
    """Complete order with denormalized ingredient snapshots."""

    id: UUID = Field(default_factory=uuid4)
    user_id: UUID

    # Customer contact
    customer_email: EmailStr
    customer_name: str
    customer_phone: str
    delivery_address: str

    # Snapshots, never live catalog references
    pizza_base: IngredientSnapshot
    sauce: IngredientSnapshot
    cheese: IngredientSnapshot
    toppings: tuple[IngredientSnapshot, ...] = ()
    size: PizzaSize = PizzaSize.SMALL
    quantity: int = Field(default=1, ge=1)

    # Pricing
    unit_price: Decimal = Field(ge=0)
    total_price: Decimal = Field(ge=0)

    status: OrderStatus = OrderStatus.PENDING
    special_instructions: str | None = Field(default=None, max_length=500)

    # Timing
    estimated_delivery: datetime | None = None
    actual_delivery: datetime | None = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    # Payment
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_method: PaymentMethod = PaymentMethod.CASH

    # True while this order holds its ingredient stock
    stock_reserved: bool = False

    # Append-only logs
    order_notes: tuple[OrderNote, ...] = ()
    status_history: tuple[StatusChange, ...] = ()

    @property
    def order_number(self) -> str:
        return f"ORD-{self.id.hex[-8:].upper()}"

    @property
    def ingredients(self) -> list[IngredientSnapshot]:
        """All snapshots in base, sauce, cheese, toppings order."""
        return [self.pizza_base, self.sauce, self.cheese, *self.toppings]

    def stock_requirements(self) -> dict[UUID, int]:
        """
        Units of stock held by this order, per ingredient.

        Used both to reserve stock at placement and to restore it on
        cancellation, so the two always agree.
        """
        counts = Counter(snapshot.id for snapshot in self.ingredients)
        return {ingredient_id: count * self.quantity for ingredient_id, count in counts.items()}

    def release_stock(self) -> dict[UUID, int]:
        """Give up the held reservation, returning what to restore (at most once)."""
        if not self.stock_reserved:
            return {}
        self.stock_reserved = False
        return self.stock_requirements()

    def record_status(
        self,
        status: OrderStatus,
        changed_by: UUID | None = None,
        note: str | None = None,
        at: datetime | None = None,
    ) -> StatusChange:
        """Set the status and append a history entry."""
        change = StatusChange(
            status=status,
            changed_by=changed_by,
            changed_at=at or utcnow(),
            note=note,
        )
        self.status = status
        self.status_history = (*self.status_history, change)
        self.updated_at = change.changed_at
        return change

    def add_note(self, note: str, added_by: UUID) -> OrderNote:
        entry = OrderNote(note=note, added_by=added_by)
        self.order_notes = (*self.order_notes, entry)
        self.updated_at = entry.added_at
        return entry

    def to_response(self, user: dict[str, str] | None = None) -> dict:
        """Serialize for the API, adding derived and owner display fields."""
        data = self.model_dump(mode="json")
        data["order_number"] = self.order_number
        if user is not None:
            data["user"] = user
        return data


def quantize_price(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)
