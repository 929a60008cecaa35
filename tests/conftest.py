"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("RETRY_DELAY", "0")

from decimal import Decimal
from typing import AsyncGenerator, Awaitable, Callable

import fakeredis
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from pizzeria.api.deps import get_state
from pizzeria.main import app
from pizzeria.models.ingredient import Ingredient, IngredientKind
from pizzeria.models.order import DeliveryInfo, PizzaSelection
from pizzeria.models.user import User, UserRole
from pizzeria.services import NotificationSender, OrderWorkflowService, StatusTransitionHandler
from pizzeria.state import CatalogStore, OrderRepository, StateManager, UserDirectory
from pizzeria.utils.security import create_access_token


@pytest_asyncio.fixture
async def redis_client() -> AsyncGenerator[fakeredis.FakeAsyncRedis, None]:
    """In-memory Redis, fresh for every test."""
    client = fakeredis.FakeAsyncRedis(server=fakeredis.FakeServer(), decode_responses=True)
    yield client
    await client.aclose()


@pytest.fixture
def state_manager(redis_client: fakeredis.FakeAsyncRedis) -> StateManager:
    return StateManager(redis_client)


@pytest.fixture
def catalog(state_manager: StateManager) -> CatalogStore:
    return CatalogStore(state_manager)


@pytest.fixture
def orders(state_manager: StateManager) -> OrderRepository:
    return OrderRepository(state_manager)


@pytest.fixture
def users(state_manager: StateManager) -> UserDirectory:
    return UserDirectory(state_manager)


@pytest.fixture
def notifier(state_manager: StateManager) -> NotificationSender:
    return NotificationSender(state_manager, enabled=True)


@pytest.fixture
def workflow(
    catalog: CatalogStore,
    orders: OrderRepository,
    users: UserDirectory,
    notifier: NotificationSender,
) -> OrderWorkflowService:
    return OrderWorkflowService(catalog, orders, users, notifier)


@pytest.fixture
def transitions(
    state_manager: StateManager,
    catalog: CatalogStore,
    orders: OrderRepository,
    notifier: NotificationSender,
) -> StatusTransitionHandler:
    return StatusTransitionHandler(state_manager, catalog, orders, notifier)


# Sample data fixtures


@pytest_asyncio.fixture
async def ingredients(catalog: CatalogStore) -> dict[str, Ingredient]:
    """Base A, sauce B, cheese C and topping D."""
    items = {
        "base": Ingredient(
            kind=IngredientKind.BASE,
            name="Thin Crust",
            price=Decimal("8.99"),
            stock_quantity=50,
            min_threshold=10,
        ),
        "sauce": Ingredient(
            kind=IngredientKind.SAUCE,
            name="Classic Tomato",
            price=Decimal("0.99"),
            stock_quantity=100,
            min_threshold=20,
        ),
        "cheese": Ingredient(
            kind=IngredientKind.CHEESE,
            name="Mozzarella",
            price=Decimal("2.49"),
            stock_quantity=200,
            min_threshold=30,
        ),
        "topping": Ingredient(
            kind=IngredientKind.TOPPING,
            name="Pepperoni",
            category="meat",
            price=Decimal("2.99"),
            stock_quantity=150,
            min_threshold=20,
        ),
    }
    for item in items.values():
        await catalog.save(item)
    return items


@pytest_asyncio.fixture
async def customer(users: UserDirectory) -> User:
    return await users.save(
        User(
            email="test@example.com",
            first_name="Test",
            last_name="Customer",
            phone="+1234567890",
            address="123 Test St, Test City, TS 12345",
        )
    )


@pytest_asyncio.fixture
async def other_customer(users: UserDirectory) -> User:
    return await users.save(
        User(email="other@example.com", first_name="Other", last_name="Customer")
    )


@pytest_asyncio.fixture
async def admin(users: UserDirectory) -> User:
    return await users.save(
        User(email="admin@example.com", first_name="Admin", role=UserRole.ADMIN)
    )


@pytest.fixture
def selection(ingredients: dict[str, Ingredient]) -> PizzaSelection:
    return PizzaSelection(
        pizza_base=ingredients["base"].id,
        sauce=ingredients["sauce"].id,
        cheese=ingredients["cheese"].id,
        toppings=[ingredients["topping"].id],
    )


@pytest.fixture
def delivery() -> DeliveryInfo:
    return DeliveryInfo(phone="+1987654321", address="9 Delivery Rd, Test City")


@pytest.fixture
def stock_levels(
    catalog: CatalogStore, ingredients: dict[str, Ingredient]
) -> Callable[[], Awaitable[dict[str, int]]]:
    """Current stock of the sample ingredients, keyed by role."""

    async def read() -> dict[str, int]:
        return {name: await catalog.get_stock(item.id) for name, item in ingredients.items()}

    return read


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    def headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}

    return headers


@pytest_asyncio.fixture
async def test_client(state_manager: StateManager) -> AsyncGenerator[AsyncClient, None]:
    """Create a test HTTP client bound to the in-memory store."""
    app.dependency_overrides[get_state] = lambda: state_manager
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
