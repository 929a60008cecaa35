"""Ingredient catalog store and its stock-mutation contract."""

from decimal import Decimal
from typing import Any, Callable
from uuid import UUID

from redis.asyncio.client import Pipeline

from pizzeria.errors import InsufficientStock, NotFound, OutOfStock, ValidationError
from pizzeria.models.ingredient import Ingredient, IngredientKind, utcnow
from pizzeria.state.manager import StateManager, decode_field
from pizzeria.utils.logging import get_logger
from pizzeria.utils.retry import with_optimistic_retry

logger = get_logger(__name__)

STOCK_FIELD = "stock_quantity"


class CatalogStore:
    """
    Four ingredient collections stored as Redis hashes.

    Stock lives in its own hash field so every mutation is a targeted
    HINCRBY, never a read-modify-write of the whole document.
    """

    def __init__(self, state_manager: StateManager):
        self.state = state_manager

    @staticmethod
    def key(ingredient_id: UUID | str) -> str:
        return f"ingredient:{ingredient_id}"

    @staticmethod
    def kind_key(kind: IngredientKind) -> str:
        return f"ingredients:{kind.value}"

    async def save(self, ingredient: Ingredient) -> Ingredient:
        """Create or fully overwrite an ingredient, including its stock."""
        ingredient.updated_at = utcnow()
        await self.state.hset(self.key(ingredient.id), ingredient.model_dump(mode="json"))
        await self.state.sadd(self.kind_key(ingredient.kind), str(ingredient.id))
        logger.debug("ingredient_saved", ingredient_id=str(ingredient.id), kind=ingredient.kind)
        return ingredient

    async def get(self, ingredient_id: UUID) -> Ingredient | None:
        data = await self.state.hgetall(self.key(ingredient_id))
        if not data:
            return None
        return Ingredient.model_validate(data)

    async def list_items(
        self,
        kind: IngredientKind | None = None,
        active_only: bool = True,
    ) -> list[Ingredient]:
        """List ingredients of one kind (or all kinds), sorted by name."""
        kinds = [kind] if kind else list(IngredientKind)
        items: list[Ingredient] = []
        for k in kinds:
            for ingredient_id in await self.state.smembers(self.kind_key(k)):
                ingredient = await self.get(UUID(ingredient_id))
                if ingredient is None or (active_only and not ingredient.is_active):
                    continue
                items.append(ingredient)
        return sorted(items, key=lambda i: (list(IngredientKind).index(i.kind), i.name))

    async def get_stock(self, ingredient_id: UUID) -> int:
        data = await self.state.hgetall(self.key(ingredient_id))
        if not data:
            raise NotFound(f"Ingredient {ingredient_id} not found")
        return int(data[STOCK_FIELD])

    @with_optimistic_retry()
    async def decrement_stock(self, ingredient_id: UUID, quantity: int) -> int:
        """Reduce stock by quantity if enough is available; return the new level."""
        key = self.key(ingredient_id)
        async with self.state.transaction(key) as pipe:
            raw_stock, raw_name = await pipe.hmget(key, [STOCK_FIELD, "name"])
            if raw_stock is None:
                raise NotFound(f"Ingredient {ingredient_id} not found")

            stock = int(raw_stock)
            if stock < quantity:
                raise InsufficientStock(
                    decode_field(raw_name),
                    ingredient_id=ingredient_id,
                    requested=quantity,
                    available=stock,
                )

            pipe.multi()
            pipe.hincrby(key, STOCK_FIELD, -quantity)
            (new_stock,) = await pipe.execute()

        logger.info(
            "stock_decremented",
            ingredient_id=str(ingredient_id),
            quantity=quantity,
            stock=new_stock,
        )
        return new_stock

    async def increment_stock(self, ingredient_id: UUID, quantity: int) -> int:
        """Unconditionally add stock; there is no upper bound."""
        key = self.key(ingredient_id)
        if not await self.state.exists(key):
            raise NotFound(f"Ingredient {ingredient_id} not found")

        new_stock = await self.state.hincrby(key, STOCK_FIELD, quantity)
        logger.info(
            "stock_incremented",
            ingredient_id=str(ingredient_id),
            quantity=quantity,
            stock=new_stock,
        )
        return new_stock

    async def set_stock(self, ingredient_id: UUID, quantity: int) -> int:
        """Overwrite the stock level (admin restock/count correction)."""
        if quantity < 0:
            raise ValidationError("Stock quantity cannot be negative")
        await self.get_stock(ingredient_id)
        await self.state.hset(
            self.key(ingredient_id),
            {STOCK_FIELD: quantity, "updated_at": utcnow().isoformat()},
        )
        logger.info("stock_set", ingredient_id=str(ingredient_id), stock=quantity)
        return quantity

    async def adjust_stock(self, ingredient_id: UUID, quantity: int, operation: str) -> int:
        """Apply an admin ``set``, ``add`` or ``subtract`` to one ingredient."""
        if operation == "add":
            return await self.increment_stock(ingredient_id, quantity)
        if operation == "subtract":
            return await self.decrement_stock(ingredient_id, quantity)
        if operation == "set":
            return await self.set_stock(ingredient_id, quantity)
        raise ValidationError(f"Unknown stock operation: {operation}")

    async def search(
        self,
        kind: IngredientKind | None = None,
        text: str | None = None,
        sort_by: str | None = None,
        descending: bool = False,
    ) -> list[Ingredient]:
        """Active items filtered by a case-insensitive name/description match."""
        items = await self.list_items(kind)
        if text:
            needle = text.lower()
            items = [
                i for i in items if needle in i.name.lower() or needle in i.description.lower()
            ]
        if sort_by:
            def sort_key(item: Ingredient) -> Any:
                value = getattr(item, sort_by)
                return value.lower() if isinstance(value, str) else value

            items.sort(key=sort_key, reverse=descending)
        return items

    def stage_increment(self, pipe: Pipeline, ingredient_id: UUID, quantity: int) -> None:
        """Queue a stock increment on an open MULTI pipeline."""
        pipe.hincrby(self.key(ingredient_id), STOCK_FIELD, quantity)

    @with_optimistic_retry()
    async def reserve(
        self,
        requirements: dict[UUID, int],
        stage: Callable[[Pipeline], Any] | None = None,
    ) -> dict[UUID, int]:
        """
        Decrement several ingredients all-or-nothing.

        Every ingredient hash is WATCHed and checked before anything is
        queued; ``stage`` may queue extra writes (the order document) that
        commit in the same MULTI/EXEC. Returns remaining stock per ingredient.
        """
        keys = [self.key(ingredient_id) for ingredient_id in requirements]
        async with self.state.transaction(*keys) as pipe:
            remaining: dict[UUID, int] = {}
            for ingredient_id, quantity in requirements.items():
                raw_stock, raw_name = await pipe.hmget(self.key(ingredient_id), [STOCK_FIELD, "name"])
                if raw_stock is None:
                    raise OutOfStock("Unknown ingredient", ingredient_id=ingredient_id)

                stock = int(raw_stock)
                if stock < quantity:
                    raise OutOfStock(
                        decode_field(raw_name),
                        ingredient_id=ingredient_id,
                        requested=quantity,
                        available=stock,
                    )
                remaining[ingredient_id] = stock - quantity

            pipe.multi()
            for ingredient_id, quantity in requirements.items():
                pipe.hincrby(self.key(ingredient_id), STOCK_FIELD, -quantity)
            if stage is not None:
                stage(pipe)
            await pipe.execute()

        logger.info(
            "stock_reserved",
            ingredients={str(k): v for k, v in requirements.items()},
        )
        return remaining

    async def low_stock(self, threshold: int | None = None) -> list[Ingredient]:
        """Active items at or below their own (or the given) threshold."""
        items = [
            item
            for item in await self.list_items()
            if (item.stock_quantity <= threshold if threshold is not None else item.is_low_stock)
        ]
        return sorted(items, key=lambda i: i.stock_quantity)

    async def summary(self) -> dict[str, Any]:
        """Inventory dashboard figures over active items."""
        items = await self.list_items()
        low = sorted((i for i in items if i.is_low_stock), key=lambda i: i.stock_quantity)
        total_value = sum((i.stock_value for i in items), Decimal("0"))
        return {
            "summary": {
                "total_items": len(items),
                "low_stock_items": len(low),
                "total_value": str(total_value.quantize(Decimal("0.01"))),
            },
            "categories": {
                kind.value: sum(1 for i in items if i.kind is kind) for kind in IngredientKind
            },
            "low_stock": [
                {**i.model_dump(mode="json"), "type": i.kind.label} for i in low
            ],
        }
