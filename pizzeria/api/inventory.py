"""Inventory endpoints: builder catalog, dashboard and stock adjustments."""

from typing import Any, Literal
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from pizzeria.api.deps import get_catalog, get_notifier, get_user_directory, require_admin
from pizzeria.config import get_settings
from pizzeria.errors import NotFound, PizzeriaError
from pizzeria.models.ingredient import IngredientKind
from pizzeria.models.user import User
from pizzeria.services import NotificationSender
from pizzeria.state import CatalogStore, UserDirectory
from pizzeria.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/inventory", tags=["inventory"])


class StockUpdateRequest(BaseModel):
    quantity: int = Field(ge=0)
    operation: Literal["set", "add", "subtract"] = "set"


class BulkStockItem(StockUpdateRequest):
    ingredient_id: UUID


class BulkStockUpdateRequest(BaseModel):
    updates: list[BulkStockItem] = Field(min_length=1, max_length=100)


class LowStockAlertRequest(BaseModel):
    threshold: int | None = Field(default=None, ge=0)


@router.get("/dashboard")
async def inventory_dashboard(
    admin: User = Depends(require_admin),
    catalog: CatalogStore = Depends(get_catalog),
) -> dict[str, Any]:
    """Counts per kind, low stock items and total stock value."""
    return await catalog.summary()


@router.get("/low-stock")
async def low_stock_items(
    threshold: int | None = Query(default=None, ge=0),
    admin: User = Depends(require_admin),
    catalog: CatalogStore = Depends(get_catalog),
) -> dict[str, Any]:
    items = await catalog.low_stock(threshold)
    return {
        "count": len(items),
        "data": [{**i.model_dump(mode="json"), "type": i.kind.label} for i in items],
    }


@router.post("/low-stock-alert")
async def send_low_stock_alert(
    request: LowStockAlertRequest | None = None,
    admin: User = Depends(require_admin),
    catalog: CatalogStore = Depends(get_catalog),
    users: UserDirectory = Depends(get_user_directory),
    notifier: NotificationSender = Depends(get_notifier),
) -> dict[str, Any]:
    """Notify every admin about items at or below the threshold."""
    threshold = request.threshold if request else None
    if threshold is None:
        threshold = get_settings().low_stock_threshold
    items = await catalog.low_stock(threshold)
    if not items:
        return {"sent": False, "count": 0, "message": "No low stock items found"}

    admins = await users.list_admins()
    sent = await notifier.low_stock(items, admins)
    logger.info("low_stock_alert_requested", items=len(items), admins=len(admins), sent=sent)
    return {"sent": sent, "count": len(items), "recipients": len(admins)}


@router.get("/items")
async def search_items(
    kind: IngredientKind | None = None,
    search: str | None = Query(default=None, max_length=100),
    sort_by: Literal["name", "price", "stock_quantity", "min_threshold"] | None = None,
    order: Literal["asc", "desc"] = "asc",
    admin: User = Depends(require_admin),
    catalog: CatalogStore = Depends(get_catalog),
) -> dict[str, Any]:
    """Search active items across kinds, optionally sorted."""
    items = await catalog.search(kind, search, sort_by, descending=order == "desc")
    return {
        "count": len(items),
        "data": [{**i.model_dump(mode="json"), "type": i.kind.label} for i in items],
    }


@router.put("/bulk-update")
async def bulk_update_stock(
    request: BulkStockUpdateRequest,
    admin: User = Depends(require_admin),
    catalog: CatalogStore = Depends(get_catalog),
) -> dict[str, Any]:
    """Apply several stock operations; each item succeeds or fails on its own."""
    results = []
    for update in request.updates:
        try:
            stock = await catalog.adjust_stock(
                update.ingredient_id, update.quantity, update.operation
            )
        except PizzeriaError as e:
            results.append(
                {"ingredient_id": str(update.ingredient_id), "success": False, "error": e.message}
            )
            continue
        results.append(
            {"ingredient_id": str(update.ingredient_id), "success": True, "stock_quantity": stock}
        )

    failed = sum(1 for r in results if not r["success"])
    logger.info("bulk_stock_update", items=len(results), failed=failed)
    return {"message": "Bulk stock update completed", "failed": failed, "data": results}


@router.put("/items/{ingredient_id}/stock")
async def update_stock(
    ingredient_id: UUID,
    request: StockUpdateRequest,
    admin: User = Depends(require_admin),
    catalog: CatalogStore = Depends(get_catalog),
) -> dict[str, Any]:
    """Set, add to or subtract from an ingredient's stock."""
    stock = await catalog.adjust_stock(ingredient_id, request.quantity, request.operation)

    return {"ingredient_id": str(ingredient_id), "stock_quantity": stock}


@router.get("/items/{ingredient_id}")
async def get_ingredient(
    ingredient_id: UUID,
    catalog: CatalogStore = Depends(get_catalog),
) -> dict[str, Any]:
    ingredient = await catalog.get(ingredient_id)
    if ingredient is None:
        raise NotFound(f"Ingredient {ingredient_id} not found")
    return {**ingredient.model_dump(mode="json"), "is_low_stock": ingredient.is_low_stock}


@router.get("/{kind}")
async def list_ingredients(
    kind: IngredientKind,
    catalog: CatalogStore = Depends(get_catalog),
) -> dict[str, Any]:
    """Active ingredients of one kind for the pizza builder."""
    items = await catalog.list_items(kind)
    return {"count": len(items), "data": [i.model_dump(mode="json") for i in items]}
