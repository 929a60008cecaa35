"""Order endpoints: placement, tracking, admin status management."""

import math
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel, Field

from pizzeria.api.deps import (
    get_current_user,
    get_order_repository,
    get_transitions,
    get_user_directory,
    get_workflow,
    require_admin,
)
from pizzeria.config import get_settings
from pizzeria.models.order import DeliveryInfo, Order, OrderStatus, PizzaSelection
from pizzeria.models.user import User
from pizzeria.services import OrderWorkflowService, StatusTransitionHandler
from pizzeria.state import OrderRepository, UserDirectory
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])


# Request Models


class PlaceOrderRequest(BaseModel):
    """Build-a-pizza selection plus delivery details."""

    selection: PizzaSelection
    delivery: DeliveryInfo = Field(default_factory=DeliveryInfo)


class StatusUpdateRequest(BaseModel):
    status: OrderStatus
    note: str | None = Field(default=None, max_length=500)
    force: bool = False


class CancelRequest(BaseModel):
    reason: str | None = Field(default=None, max_length=500)


class NoteRequest(BaseModel):
    note: str = Field(min_length=1, max_length=500)


async def _with_owners(orders: list[Order], users: UserDirectory) -> list[dict[str, Any]]:
    """Serialize orders, embedding each owner's display fields once per user."""
    profiles: dict[UUID, dict[str, str] | None] = {}
    data = []
    for order in orders:
        if order.user_id not in profiles:
            owner = await users.get(order.user_id)
            profiles[order.user_id] = owner.public_profile() if owner else None
        data.append(order.to_response(profiles[order.user_id]))
    return data


# Routes


@router.post("", status_code=status.HTTP_201_CREATED)
async def place_order(
    request: PlaceOrderRequest,
    user: User = Depends(get_current_user),
    workflow: OrderWorkflowService = Depends(get_workflow),
) -> dict[str, Any]:
    """Place an order for one pizza selection."""
    order = await workflow.place_order(user.id, request.selection, request.delivery)
    return {
        "message": "Order created successfully",
        "data": order.to_response(user.public_profile()),
    }


@router.get("")
async def list_my_orders(
    user: User = Depends(get_current_user),
    orders: OrderRepository = Depends(get_order_repository),
) -> dict[str, Any]:
    """List the caller's orders, newest first."""
    mine = await orders.list_for_user(user.id)
    return {
        "count": len(mine),
        "data": [order.to_response(user.public_profile()) for order in mine],
    }


@router.get("/admin/all")
async def list_all_orders(
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
    admin: User = Depends(require_admin),
    orders: OrderRepository = Depends(get_order_repository),
    users: UserDirectory = Depends(get_user_directory),
) -> dict[str, Any]:
    """Page through all orders, optionally filtered by status."""
    settings = get_settings()
    limit = min(limit or settings.default_page_size, settings.max_page_size)

    page_orders, total = await orders.list_all(page=page, limit=limit, status=status_filter)
    return {
        "count": len(page_orders),
        "total": total,
        "pagination": {
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit),
        },
        "data": await _with_owners(page_orders, users),
    }


@router.get("/admin/stats")
async def order_stats(
    admin: User = Depends(require_admin),
    orders: OrderRepository = Depends(get_order_repository),
) -> dict[str, int]:
    """Order counts per status."""
    return await orders.count_by_status()


@router.get("/{order_id}")
async def get_order(
    order_id: UUID,
    user: User = Depends(get_current_user),
    workflow: OrderWorkflowService = Depends(get_workflow),
    users: UserDirectory = Depends(get_user_directory),
) -> dict[str, Any]:
    """Get a single order (owner or admin)."""
    order = await workflow.get_order(order_id, user)
    (data,) = await _with_owners([order], users)
    return {"data": data}


@router.put("/{order_id}/status")
async def update_order_status(
    order_id: UUID,
    request: StatusUpdateRequest,
    admin: User = Depends(require_admin),
    transitions: StatusTransitionHandler = Depends(get_transitions),
    users: UserDirectory = Depends(get_user_directory),
) -> dict[str, Any]:
    """Advance an order's status; ``force`` bypasses the transition table."""
    if request.force:
        order = await transitions.force_status(order_id, request.status, admin, request.note)
    else:
        order = await transitions.advance_status(order_id, request.status, admin, request.note)

    (data,) = await _with_owners([order], users)
    return {"message": "Order status updated successfully", "data": data}


@router.put("/{order_id}/cancel")
async def cancel_order(
    order_id: UUID,
    request: CancelRequest | None = None,
    user: User = Depends(get_current_user),
    transitions: StatusTransitionHandler = Depends(get_transitions),
    users: UserDirectory = Depends(get_user_directory),
) -> dict[str, Any]:
    """Cancel a pending or confirmed order and restore its stock."""
    reason = request.reason if request else None
    order = await transitions.cancel_order(order_id, user, reason)

    (data,) = await _with_owners([order], users)
    return {"message": "Order cancelled successfully", "data": data}


@router.post("/{order_id}/notes", status_code=status.HTTP_201_CREATED)
async def add_order_note(
    order_id: UUID,
    request: NoteRequest,
    admin: User = Depends(require_admin),
    transitions: StatusTransitionHandler = Depends(get_transitions),
) -> dict[str, Any]:
    """Append an internal note to an order."""
    order = await transitions.add_note(order_id, request.note, admin)
    return {"data": order.to_response()}
