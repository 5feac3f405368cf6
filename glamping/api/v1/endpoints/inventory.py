# File: glamping/api/v1/endpoints/inventory.py
from typing import Any, Dict, List, Literal, Optional
from fastapi import APIRouter, Depends, status
from glamping.api.deps import get_state_service, http_error
from glamping.core.exceptions import GlampingError
from glamping.schemas.inventory import (
    AutoDeductResponse,
    DiningEntry,
    InventoryAdjustment,
    InventoryItem,
    InventoryItemCreate,
    InventoryItemView,
    KitchenAdvice,
    MealStats,
)
from glamping.services import kitchen
from glamping.services.state_service import ResortStateService

router = APIRouter()


@router.get("/", response_model=List[InventoryItemView], operation_id="get_inventory_items")
def get_inventory_items(
    *,
    service: ResortStateService = Depends(get_state_service),
    status_filter: Literal["ALL", "LOW", "SUFFICIENT"] = "ALL",
    sort: Literal["name", "quantity", "safety_stock", "weekly_usage"] = "name",
    descending: bool = False,
) -> Any:
    """Get inventory items with their stock status"""
    return service.list_inventory(status_filter=status_filter, sort=sort, descending=descending)


@router.get("/by-category", response_model=Dict[str, List[InventoryItem]], operation_id="inventory_by_category")
def inventory_by_category(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    return kitchen.group_by_category(service.state.inventory)


@router.get("/restock-count", operation_id="restock_suggestion_count")
def restock_count(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    return {"count": kitchen.restock_suggestion_count(service.state.inventory)}


@router.post("/", response_model=InventoryItem, status_code=status.HTTP_201_CREATED, operation_id="create_inventory_item")
def create_inventory_item(
    *,
    service: ResortStateService = Depends(get_state_service),
    item_in: InventoryItemCreate,
) -> Any:
    """Create new inventory item"""
    return service.create_item(item_in)


@router.post("/reset", response_model=List[InventoryItem], operation_id="reset_inventory")
def reset_inventory(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    """Replace the whole inventory with the default stock list"""
    return service.reset_inventory()


@router.post("/auto-deduct", response_model=AutoDeductResponse, operation_id="auto_deduct_inventory")
def auto_deduct(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    """Deduct per-guest consumption for tonight's dinner headcount"""
    guests, adjusted = service.auto_deduct_inventory()
    if guests == 0:
        message = "今日無用餐人數，無法計算消耗。"
    else:
        message = f"✅ 已依 {guests} 人份扣除 {len(adjusted)} 項食材"
    return AutoDeductResponse(total_guests=guests, adjusted_items=adjusted, message=message)


@router.get("/meal-stats", response_model=MealStats, operation_id="meal_stats")
def meal_stats(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    return service.meal_stats()


@router.get("/dining-list", response_model=List[DiningEntry], operation_id="dining_list")
def dining_list(
    *,
    service: ResortStateService = Depends(get_state_service),
    search: Optional[str] = None,
) -> Any:
    return service.dining_list(search)


@router.get("/kitchen-advice", response_model=KitchenAdvice, operation_id="kitchen_advice")
def kitchen_advice(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    stats = service.meal_stats()
    return KitchenAdvice(
        date=service.clock().date().isoformat(),
        meal_stats=stats,
        advice=service.kitchen_advice(),
    )


@router.get("/{item_id}", response_model=InventoryItemView, operation_id="get_inventory_item")
def get_inventory_item(*, service: ResortStateService = Depends(get_state_service), item_id: str) -> Any:
    try:
        item = service.get_item(item_id)
    except GlampingError as e:
        raise http_error(e)
    return InventoryItemView(**item.model_dump(), stock_status=kitchen.stock_status(item))


@router.post("/{item_id}/adjust", response_model=InventoryItem, operation_id="adjust_inventory_item")
def adjust_inventory_item(
    *,
    service: ResortStateService = Depends(get_state_service),
    item_id: str,
    adjustment: InventoryAdjustment,
) -> Any:
    """Restock (positive delta) or consume (negative); never below zero"""
    try:
        return service.adjust_item(item_id, adjustment)
    except GlampingError as e:
        raise http_error(e)


@router.delete("/{item_id}", operation_id="delete_inventory_item")
def delete_inventory_item(*, service: ResortStateService = Depends(get_state_service), item_id: str) -> Any:
    """Delete inventory item"""
    try:
        service.delete_item(item_id)
    except GlampingError as e:
        raise http_error(e)
    return {"message": "Item deleted successfully"}
