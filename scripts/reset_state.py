"""Reset all pizzeria state in Redis (useful for testing)."""

import asyncio

from pizzeria.state.manager import StateManager

KEY_PATTERNS = ["ingredient:*", "ingredients:*", "order:*", "orders:*", "user:*", "users:*"]


async def reset_all_state() -> None:
    """Delete every catalog, order and user key."""
    print("\n⚠️  WARNING: This will delete ALL pizzeria data from Redis!")
    response = input("Are you sure? (yes/no): ")

    if response.lower() != "yes":
        print("Cancelled.")
        return

    print("\nResetting state...")

    state_manager = StateManager()
    await state_manager.connect()

    deleted = 0
    for pattern in KEY_PATTERNS:
        keys = [key async for key in state_manager.redis_client.scan_iter(match=pattern)]
        if keys:
            await state_manager.delete(*keys)
            deleted += len(keys)

    await state_manager.disconnect()

    print(f"✓ Deleted {deleted} keys from Redis\n")


if __name__ == "__main__":
    asyncio.run(reset_all_state())
