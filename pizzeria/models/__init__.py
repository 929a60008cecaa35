"""Data models for the pizzeria service."""

from pizzeria.models.ingredient import Ingredient, IngredientKind, IngredientSnapshot
from pizzeria.models.order import (
    DeliveryInfo,
    Order,
    OrderNote,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    PizzaSelection,
    PizzaSize,
    StatusChange,
)
from pizzeria.models.user import User, UserRole

__all__ = [
    # Ingredient
    "Ingredient",
    "IngredientKind",
    "IngredientSnapshot",
    # Order
    "DeliveryInfo",
    "Order",
    "OrderNote",
    "OrderStatus",
    "PaymentMethod",
    "PaymentStatus",
    "PizzaSelection",
    "PizzaSize",
    "StatusChange",
    # User
    "User",
    "UserRole",
]
