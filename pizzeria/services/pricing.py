"""Order price computation."""

from decimal import Decimal
from typing import Iterable

from pizzeria.models.ingredient import IngredientSnapshot
from pizzeria.models.order import PizzaSize, quantize_price


def unit_price(snapshots: Iterable[IngredientSnapshot], size: PizzaSize) -> Decimal:
    """Sum of component prices scaled by the size multiplier, in cents."""
    subtotal = sum((snapshot.price for snapshot in snapshots), Decimal("0"))
    return quantize_price(subtotal * size.multiplier)


def line_total(price: Decimal, quantity: int) -> Decimal:
    return quantize_price(price * quantity)
