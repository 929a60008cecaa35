"""Tests for the Redis state manager wrapper."""

import pytest

from pizzeria.state.manager import StateManager


@pytest.mark.asyncio
async def test_documents_and_sets(state_manager: StateManager) -> None:
    await state_manager.set("doc", {"name": "Thin Crust", "stock": 3})
    await state_manager.sadd("kinds", "base", "sauce")

    assert await state_manager.get("doc") == {"name": "Thin Crust", "stock": 3}
    assert await state_manager.smembers("kinds") == {"base", "sauce"}
    assert await state_manager.exists("doc")

    await state_manager.delete("doc")
    assert await state_manager.get("doc") is None


@pytest.mark.asyncio
async def test_hash_fields_keep_their_types(state_manager: StateManager) -> None:
    await state_manager.hset("item", {"stock_quantity": 5, "allergens": ["dairy"], "name": "Feta"})

    assert await state_manager.hincrby("item", "stock_quantity", -2) == 3
    assert await state_manager.hgetall("item") == {
        "stock_quantity": 3,
        "allergens": ["dairy"],
        "name": "Feta",
    }
