"""Order document repository."""

import json
from uuid import UUID

from redis.asyncio.client import Pipeline

from pizzeria.models.order import Order, OrderStatus
from pizzeria.state.manager import StateManager

ALL_ORDERS_KEY = "orders:all"


class OrderRepository:
    """
    Orders are JSON documents at ``order:{id}``.

    Sorted-set indexes scored by creation time support newest-first listing
    per user, per status and across all orders. Writes are staged on a
    caller-owned MULTI pipeline so they commit together with stock changes.
    """

    def __init__(self, state_manager: StateManager):
        self.state = state_manager

    @staticmethod
    def key(order_id: UUID | str) -> str:
        return f"order:{order_id}"

    @staticmethod
    def user_key(user_id: UUID | str) -> str:
        return f"orders:user:{user_id}"

    @staticmethod
    def status_key(status: OrderStatus) -> str:
        return f"orders:status:{status.value}"

    @staticmethod
    def decode(raw: str | dict | None) -> Order | None:
        if not raw:
            return None
        if isinstance(raw, str):
            return Order.model_validate_json(raw)
        return Order.model_validate(raw)

    async def get(self, order_id: UUID) -> Order | None:
        return self.decode(await self.state.get(self.key(order_id)))

    def stage_create(self, pipe: Pipeline, order: Order) -> None:
        member = str(order.id)
        score = order.created_at.timestamp()
        pipe.set(self.key(order.id), json.dumps(order.model_dump(mode="json")))
        pipe.zadd(ALL_ORDERS_KEY, {member: score})
        pipe.zadd(self.user_key(order.user_id), {member: score})
        pipe.zadd(self.status_key(order.status), {member: score})

    def stage_update(self, pipe: Pipeline, order: Order, previous_status: OrderStatus) -> None:
        pipe.set(self.key(order.id), json.dumps(order.model_dump(mode="json")))
        if order.status != previous_status:
            member = str(order.id)
            pipe.zrem(self.status_key(previous_status), member)
            pipe.zadd(self.status_key(order.status), {member: order.created_at.timestamp()})

    async def _load(self, order_ids: list[str]) -> list[Order]:
        docs = await self.state.mget([self.key(order_id) for order_id in order_ids])
        return [order for order in map(self.decode, docs) if order is not None]

    async def list_for_user(self, user_id: UUID) -> list[Order]:
        """All orders of one user, newest first."""
        order_ids = await self.state.zrange(self.user_key(user_id), desc=True)
        return await self._load(order_ids)

    async def list_all(
        self,
        page: int = 1,
        limit: int = 10,
        status: OrderStatus | None = None,
    ) -> tuple[list[Order], int]:
        """One page of orders, newest first, plus the total matching count."""
        index = self.status_key(status) if status else ALL_ORDERS_KEY
        total = await self.state.zcard(index)
        start = (page - 1) * limit
        order_ids = await self.state.zrange(index, start, start + limit - 1, desc=True)
        return await self._load(order_ids), total

    async def count_by_status(self) -> dict[str, int]:
        counts = {s.value: await self.state.zcard(self.status_key(s)) for s in OrderStatus}
        counts["total"] = await self.state.zcard(ALL_ORDERS_KEY)
        return counts
