"""Tests for order placement."""

from datetime import timedelta
from decimal import Decimal
from uuid import uuid4

import pytest
from redis.exceptions import RedisError

from pizzeria.errors import Forbidden, InvalidSelection, NotFound, OutOfStock, ValidationError
from pizzeria.models.order import DeliveryInfo, OrderStatus, PizzaSize
from pizzeria.services.notifications import ADMIN_CHANNEL, order_channel


@pytest.fixture
def published(state_manager, monkeypatch):
    """Capture pub/sub traffic instead of sending it."""
    messages = []

    async def record(channel, message):
        messages.append((channel, message))
        return 0

    monkeypatch.setattr(state_manager, "publish", record)
    return messages


@pytest.mark.asyncio
async def test_place_order_prices_and_reserves(workflow, customer, selection, delivery, stock_levels):
    order = await workflow.place_order(customer.id, selection, delivery)

    assert order.status is OrderStatus.PENDING
    assert order.total_price == Decimal("15.46")
    assert order.stock_reserved is True
    assert order.unit_price == Decimal("15.46")
    assert [t.name for t in order.toppings] == ["Pepperoni"]
    assert await stock_levels() == {"base": 49, "sauce": 99, "cheese": 199, "topping": 149}


@pytest.mark.asyncio
async def test_place_order_persists_and_indexes(workflow, orders, customer, selection, delivery):
    order = await workflow.place_order(customer.id, selection, delivery)

    stored = await orders.get(order.id)
    mine = await orders.list_for_user(customer.id)
    pending, total = await orders.list_all(status=OrderStatus.PENDING)

    assert stored.model_dump() == order.model_dump()
    assert [o.id for o in mine] == [order.id]
    assert total == 1
    assert pending[0].id == order.id


@pytest.mark.asyncio
async def test_place_order_records_history_and_eta(workflow, customer, selection, delivery):
    order = await workflow.place_order(customer.id, selection, delivery)

    assert len(order.status_history) == 1
    assert order.status_history[0].status is OrderStatus.PENDING
    assert order.status_history[0].changed_by == customer.id
    # 30 minutes plus 2 per topping
    assert order.estimated_delivery == order.created_at + timedelta(minutes=32)


@pytest.mark.asyncio
async def test_out_of_stock_topping_rejects_order(
    workflow, catalog, orders, customer, ingredients, selection, delivery, stock_levels
):
    await catalog.set_stock(ingredients["topping"].id, 0)

    with pytest.raises(OutOfStock) as exc_info:
        await workflow.place_order(customer.id, selection, delivery)

    assert "Pepperoni" in str(exc_info.value)
    assert await stock_levels() == {"base": 50, "sauce": 100, "cheese": 200, "topping": 0}
    assert await orders.list_for_user(customer.id) == []


@pytest.mark.asyncio
async def test_quantity_multiplies_stock_and_price(workflow, customer, selection, delivery, stock_levels):
    selection = selection.model_copy(update={"quantity": 3, "size": PizzaSize.MEDIUM})

    order = await workflow.place_order(customer.id, selection, delivery)

    assert order.unit_price == Decimal("19.33")
    assert order.total_price == Decimal("57.99")
    assert await stock_levels() == {"base": 47, "sauce": 97, "cheese": 197, "topping": 147}


@pytest.mark.asyncio
async def test_duplicate_toppings_need_combined_stock(
    workflow, catalog, customer, ingredients, selection, delivery
):
    topping_id = ingredients["topping"].id
    await catalog.set_stock(topping_id, 1)
    selection = selection.model_copy(update={"toppings": [topping_id, topping_id]})

    with pytest.raises(OutOfStock):
        await workflow.place_order(customer.id, selection, delivery)
    assert await catalog.get_stock(topping_id) == 1


@pytest.mark.asyncio
async def test_order_without_toppings(workflow, customer, selection, delivery):
    selection = selection.model_copy(update={"toppings": []})

    order = await workflow.place_order(customer.id, selection, delivery)

    assert order.toppings == ()
    assert order.total_price == Decimal("12.47")


@pytest.mark.asyncio
async def test_missing_sauce_is_invalid_selection(workflow, customer, selection, delivery):
    selection = selection.model_copy(update={"sauce": None})

    with pytest.raises(InvalidSelection):
        await workflow.place_order(customer.id, selection, delivery)


@pytest.mark.asyncio
async def test_wrong_kind_is_invalid_selection(workflow, customer, ingredients, selection, delivery):
    selection = selection.model_copy(update={"cheese": ingredients["sauce"].id})

    with pytest.raises(InvalidSelection):
        await workflow.place_order(customer.id, selection, delivery)


@pytest.mark.asyncio
async def test_inactive_ingredient_is_invalid_selection(
    workflow, catalog, customer, ingredients, selection, delivery
):
    topping = ingredients["topping"].model_copy(update={"is_active": False})
    await catalog.save(topping)

    with pytest.raises(InvalidSelection):
        await workflow.place_order(customer.id, selection, delivery)


@pytest.mark.asyncio
async def test_unknown_ingredient_is_out_of_stock(workflow, customer, selection, delivery, stock_levels):
    selection = selection.model_copy(update={"toppings": [uuid4()]})

    with pytest.raises(OutOfStock) as exc_info:
        await workflow.place_order(customer.id, selection, delivery)

    assert "Unknown" in str(exc_info.value)
    assert await stock_levels() == {"base": 50, "sauce": 100, "cheese": 200, "topping": 150}


@pytest.mark.asyncio
async def test_missing_contact_is_rejected(workflow, other_customer, selection):
    with pytest.raises(ValidationError) as exc_info:
        await workflow.place_order(other_customer.id, selection, DeliveryInfo(phone="+15550000"))

    assert "address" in str(exc_info.value)


@pytest.mark.asyncio
async def test_contact_prefilled_from_profile(workflow, customer, selection):
    order = await workflow.place_order(customer.id, selection, DeliveryInfo())

    assert order.customer_phone == customer.phone
    assert order.delivery_address == customer.address
    assert order.customer_email == customer.email
    assert order.customer_name == "Test Customer"


@pytest.mark.asyncio
async def test_unknown_user(workflow, selection, delivery):
    with pytest.raises(NotFound):
        await workflow.place_order(uuid4(), selection, delivery)


@pytest.mark.asyncio
async def test_snapshot_price_survives_catalog_edit(
    workflow, catalog, customer, ingredients, selection, delivery
):
    order = await workflow.place_order(customer.id, selection, delivery)
    base = await catalog.get(ingredients["base"].id)
    base.price = Decimal("12.99")
    await catalog.save(base)

    stored = await workflow.get_order(order.id, customer)

    assert stored.pizza_base.price == Decimal("8.99")
    assert stored.total_price == Decimal("15.46")


@pytest.mark.asyncio
async def test_get_order_visibility(workflow, customer, other_customer, admin, selection, delivery):
    order = await workflow.place_order(customer.id, selection, delivery)

    assert (await workflow.get_order(order.id, admin)).id == order.id
    with pytest.raises(Forbidden):
        await workflow.get_order(order.id, other_customer)
    with pytest.raises(NotFound):
        await workflow.get_order(uuid4(), customer)


@pytest.mark.asyncio
async def test_notification_failure_does_not_abort(
    workflow, state_manager, orders, customer, selection, delivery, monkeypatch
):
    async def broken(channel, message):
        raise ConnectionError("pub/sub unavailable")

    monkeypatch.setattr(state_manager, "publish", broken)

    order = await workflow.place_order(customer.id, selection, delivery)

    assert await orders.get(order.id) is not None


@pytest.mark.asyncio
async def test_confirmation_published(workflow, customer, selection, delivery, published):
    order = await workflow.place_order(customer.id, selection, delivery)

    channel, message = published[0]
    assert channel == order_channel(order)
    assert message["event"] == "order_placed"
    assert message["order_number"] == order.order_number
    assert message["recipient"] == customer.email


@pytest.mark.asyncio
async def test_low_stock_alert_after_order(
    workflow, catalog, customer, admin, ingredients, selection, delivery, published
):
    await catalog.set_stock(ingredients["base"].id, 11)

    await workflow.place_order(customer.id, selection, delivery)

    alerts = [m for c, m in published if c == ADMIN_CHANNEL]
    assert len(alerts) == 1
    assert alerts[0]["recipients"] == [admin.email]
    assert [item["name"] for item in alerts[0]["items"]] == ["Thin Crust"]
    assert alerts[0]["items"][0]["stock_quantity"] == 10


@pytest.mark.asyncio
async def test_low_stock_alert_failure_does_not_abort(
    workflow, catalog, users, orders, customer, ingredients, selection, delivery, monkeypatch
):
    async def broken():
        raise RedisError("admin lookup failed")

    await catalog.set_stock(ingredients["base"].id, 11)
    monkeypatch.setattr(users, "list_admins", broken)

    order = await workflow.place_order(customer.id, selection, delivery)

    assert await orders.get(order.id) is not None
    assert await catalog.get_stock(ingredients["base"].id) == 10
