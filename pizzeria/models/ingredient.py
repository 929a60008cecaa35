"""Catalog ingredient models."""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class IngredientKind(str, Enum):
    """The four purchasable pizza components."""

    BASE = "base"
    SAUCE = "sauce"
    CHEESE = "cheese"
    TOPPING = "topping"

    @property
    def label(self) -> str:
        return "Pizza Base" if self is IngredientKind.BASE else self.value.title()


class Ingredient(BaseModel):
    """Catalog entry with live price and stock levels."""

    id: UUID = Field(default_factory=uuid4)
    kind: IngredientKind
    name: str = Field(min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    price: Decimal = Field(ge=0, decimal_places=2)
    stock_quantity: int = Field(default=0, ge=0)
    min_threshold: int = Field(default=5, ge=0)
    is_active: bool = True

    # Presentation only
    category: str | None = None
    allergens: list[str] = Field(default_factory=list)
    spice_level: int | None = Field(default=None, ge=0, le=5)
    is_vegan: bool = False
    is_vegetarian: bool = True
    image_url: str | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def is_low_stock(self) -> bool:
        """Advisory only; ordering is never blocked by it."""
        return self.stock_quantity <= self.min_threshold

    @property
    def stock_value(self) -> Decimal:
        return self.price * self.stock_quantity

    def snapshot(self) -> "IngredientSnapshot":
        """Freeze id, name and price for embedding in an order."""
        return IngredientSnapshot(id=self.id, name=self.name, price=self.price)


class IngredientSnapshot(BaseModel):
    """Immutable copy of an ingredient captured at order time."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    price: Decimal = Field(ge=0)
