"""Tests for order and ingredient models."""

from decimal import Decimal
from uuid import uuid4

import pydantic
import pytest

from pizzeria.models.ingredient import Ingredient, IngredientKind, IngredientSnapshot
from pizzeria.models.order import Order, OrderStatus, PizzaSize
from pizzeria.services import pricing
from pizzeria.state.workflow import OrderTransitions


def make_order(**overrides) -> Order:
    snapshot = lambda name, price: IngredientSnapshot(id=uuid4(), name=name, price=Decimal(price))
    fields = dict(
        user_id=uuid4(),
        customer_email="test@example.com",
        customer_name="Test Customer",
        customer_phone="+1234567890",
        delivery_address="123 Test St",
        pizza_base=snapshot("Thin Crust", "8.99"),
        sauce=snapshot("Classic Tomato", "0.99"),
        cheese=snapshot("Mozzarella", "2.49"),
        toppings=(snapshot("Pepperoni", "2.99"),),
        unit_price=Decimal("15.46"),
        total_price=Decimal("15.46"),
    )
    fields.update(overrides)
    return Order(**fields)


def test_order_number_uses_last_eight_id_characters() -> None:
    order = make_order()

    assert order.order_number == f"ORD-{order.id.hex[-8:].upper()}"
    assert len(order.order_number) == 12


def test_stock_requirements_scale_with_quantity_and_repeats() -> None:
    pepperoni = IngredientSnapshot(id=uuid4(), name="Pepperoni", price=Decimal("2.99"))
    order = make_order(toppings=(pepperoni, pepperoni), quantity=3)

    requirements = order.stock_requirements()

    assert requirements[pepperoni.id] == 6
    assert requirements[order.pizza_base.id] == 3
    assert len(requirements) == 4


def test_record_status_appends_history() -> None:
    order = make_order()
    actor = uuid4()

    order.record_status(OrderStatus.PENDING, changed_by=actor)
    change = order.record_status(OrderStatus.CONFIRMED, changed_by=actor, note="ok")

    assert order.status is OrderStatus.CONFIRMED
    assert [c.status for c in order.status_history] == [
        OrderStatus.PENDING,
        OrderStatus.CONFIRMED,
    ]
    assert order.status_history[-1] is change
    assert isinstance(order.status_history, tuple)


def test_status_history_entries_are_immutable() -> None:
    order = make_order()
    change = order.record_status(OrderStatus.CONFIRMED)

    with pytest.raises(pydantic.ValidationError):
        change.status = OrderStatus.DELIVERED


def test_snapshot_is_independent_of_later_price_edits() -> None:
    ingredient = Ingredient(
        kind=IngredientKind.TOPPING, name="Bacon", price=Decimal("3.99"), stock_quantity=5
    )
    snapshot = ingredient.snapshot()

    ingredient.price = Decimal("9.99")

    assert snapshot.price == Decimal("3.99")


def test_low_stock_includes_threshold() -> None:
    ingredient = Ingredient(
        kind=IngredientKind.CHEESE,
        name="Feta",
        price=Decimal("3.99"),
        stock_quantity=5,
        min_threshold=5,
    )
    assert ingredient.is_low_stock

    ingredient.stock_quantity = 6
    assert not ingredient.is_low_stock


@pytest.mark.parametrize(
    "size, expected",
    [
        (PizzaSize.SMALL, Decimal("15.46")),
        (PizzaSize.MEDIUM, Decimal("19.33")),
        (PizzaSize.LARGE, Decimal("23.19")),
    ],
)
def test_unit_price_applies_size_multiplier(size: PizzaSize, expected: Decimal) -> None:
    order = make_order()

    assert pricing.unit_price(order.ingredients, size) == expected


def test_line_total_multiplies_quantity() -> None:
    assert pricing.line_total(Decimal("19.33"), 3) == Decimal("57.99")


def test_transition_table() -> None:
    assert OrderTransitions.can_transition(OrderStatus.PENDING, OrderStatus.CONFIRMED)
    assert OrderTransitions.can_transition(OrderStatus.CONFIRMED, OrderStatus.CANCELLED)
    assert not OrderTransitions.can_transition(OrderStatus.IN_KITCHEN, OrderStatus.CANCELLED)
    assert not OrderTransitions.can_transition(OrderStatus.PENDING, OrderStatus.DELIVERED)
    assert not OrderTransitions.can_transition(OrderStatus.DELIVERED, OrderStatus.PENDING)
    assert OrderStatus.DELIVERED.is_terminal and OrderStatus.CANCELLED.is_terminal


def test_release_stock_only_once() -> None:
    order = make_order(stock_reserved=True, quantity=2)

    first = order.release_stock()
    second = order.release_stock()

    assert first == order.stock_requirements()
    assert second == {}
    assert order.stock_reserved is False
