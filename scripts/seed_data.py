"""Seed the ingredient catalog and demo users."""

import asyncio
from decimal import Decimal

from pizzeria.models.ingredient import Ingredient, IngredientKind
from pizzeria.models.user import User, UserRole
from pizzeria.state.catalog import CatalogStore
from pizzeria.state.manager import StateManager
from pizzeria.state.users import UserDirectory
from pizzeria.utils.security import create_access_token

BASE = IngredientKind.BASE
SAUCE = IngredientKind.SAUCE
CHEESE = IngredientKind.CHEESE
TOPPING = IngredientKind.TOPPING

CATALOG = [
    Ingredient(kind=BASE, name="Thin Crust", description="Crispy thin crust", price=Decimal("8.99"), stock_quantity=50, min_threshold=10, allergens=["gluten"]),
    Ingredient(kind=BASE, name="Thick Crust", description="Soft and fluffy", price=Decimal("10.99"), stock_quantity=40, min_threshold=10, allergens=["gluten"]),
    Ingredient(kind=BASE, name="Stuffed Crust", description="Cheese-filled edges", price=Decimal("12.99"), stock_quantity=30, min_threshold=8, allergens=["gluten", "dairy"]),
    Ingredient(kind=BASE, name="Gluten-Free", description="Rice flour base", price=Decimal("13.99"), stock_quantity=20, min_threshold=5),
    Ingredient(kind=BASE, name="Cauliflower Crust", description="Low-carb base", price=Decimal("14.99"), stock_quantity=25, min_threshold=5, is_vegan=True),
    Ingredient(kind=SAUCE, name="Classic Tomato", description="San Marzano tomatoes", price=Decimal("0.99"), stock_quantity=100, min_threshold=20, is_vegan=True, spice_level=0),
    Ingredient(kind=SAUCE, name="BBQ Sauce", description="Smoky and sweet", price=Decimal("1.49"), stock_quantity=80, min_threshold=15, spice_level=1),
    Ingredient(kind=SAUCE, name="White Sauce", description="Garlic cream", price=Decimal("1.29"), stock_quantity=70, min_threshold=15, allergens=["dairy"]),
    Ingredient(kind=SAUCE, name="Pesto", description="Basil and pine nuts", price=Decimal("1.99"), stock_quantity=60, min_threshold=10, allergens=["nuts", "dairy"]),
    Ingredient(kind=SAUCE, name="Buffalo Sauce", description="Hot and tangy", price=Decimal("1.79"), stock_quantity=50, min_threshold=10, spice_level=4),
    Ingredient(kind=CHEESE, name="Mozzarella", description="Classic stretch", price=Decimal("2.49"), stock_quantity=200, min_threshold=30, allergens=["dairy"]),
    Ingredient(kind=CHEESE, name="Cheddar", description="Sharp and tangy", price=Decimal("2.99"), stock_quantity=150, min_threshold=25, allergens=["dairy"]),
    Ingredient(kind=CHEESE, name="Parmesan", description="Aged and nutty", price=Decimal("3.49"), stock_quantity=100, min_threshold=20, allergens=["dairy"]),
    Ingredient(kind=CHEESE, name="Feta", description="Crumbly and salty", price=Decimal("3.99"), stock_quantity=80, min_threshold=15, allergens=["dairy"]),
    Ingredient(kind=TOPPING, name="Pepperoni", category="meat", price=Decimal("2.99"), stock_quantity=150, min_threshold=20, is_vegetarian=False),
    Ingredient(kind=TOPPING, name="Italian Sausage", category="meat", price=Decimal("3.49"), stock_quantity=120, min_threshold=20, is_vegetarian=False),
    Ingredient(kind=TOPPING, name="Bacon", category="meat", price=Decimal("3.99"), stock_quantity=100, min_threshold=15, is_vegetarian=False),
    Ingredient(kind=TOPPING, name="Ham", category="meat", price=Decimal("3.29"), stock_quantity=110, min_threshold=15, is_vegetarian=False),
    Ingredient(kind=TOPPING, name="Mushrooms", category="vegetable", price=Decimal("1.99"), stock_quantity=200, min_threshold=30, is_vegan=True),
    Ingredient(kind=TOPPING, name="Bell Peppers", category="vegetable", price=Decimal("1.79"), stock_quantity=180, min_threshold=30, is_vegan=True),
    Ingredient(kind=TOPPING, name="Red Onions", category="vegetable", price=Decimal("1.49"), stock_quantity=160, min_threshold=25, is_vegan=True),
    Ingredient(kind=TOPPING, name="Black Olives", category="vegetable", price=Decimal("2.29"), stock_quantity=140, min_threshold=25, is_vegan=True),
]

USERS = [
    User(
        email="admin@pizzeria.com",
        first_name="Admin",
        last_name="User",
        phone="+1234567800",
        role=UserRole.ADMIN,
    ),
    User(
        email="john.doe@example.com",
        first_name="John",
        last_name="Doe",
        phone="+1234567890",
        address="123 Main St, New York, NY 10001",
    ),
    User(
        email="jane.smith@example.com",
        first_name="Jane",
        last_name="Smith",
        phone="+1234567891",
        address="456 Park Ave, New York, NY 10002",
    ),
]


async def seed_catalog(state_manager: StateManager) -> None:
    """Seed the four ingredient collections."""
    print("Seeding ingredient catalog...")

    catalog = CatalogStore(state_manager)
    for ingredient in CATALOG:
        await catalog.save(ingredient)
        print(f"  ✓ Added {ingredient.kind.label}: {ingredient.name} (stock: {ingredient.stock_quantity})")

    print("✓ Catalog seeded successfully\n")


async def seed_users(state_manager: StateManager) -> None:
    """Seed demo users and print a bearer token for each."""
    print("Seeding users...")

    directory = UserDirectory(state_manager)
    for user in USERS:
        await directory.save(user)
        token = create_access_token(user.id, user.role.value)
        print(f"  ✓ Added {user.full_name} ({user.role.value})")
        print(f"    token: {token}")

    print("✓ Users seeded successfully\n")


async def main() -> None:
    """Run all seed functions."""
    print("\n" + "=" * 50)
    print("  Seeding Pizzeria Data")
    print("=" * 50 + "\n")

    state_manager = StateManager()
    await state_manager.connect()
    try:
        await seed_catalog(state_manager)
        await seed_users(state_manager)
    finally:
        await state_manager.disconnect()

    print("=" * 50)
    print("  ✓ All data seeded successfully!")
    print("=" * 50 + "\n")


if __name__ == "__main__":
    asyncio.run(main())
