"""Kitchen inventory and meal planning."""
import logging
import uuid
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional, Sequence, Tuple
from glamping.schemas.inventory import (
    DiningEntry,
    InventoryCategory,
    InventoryItem,
    InventoryItemCreate,
    InventoryLog,
    InventoryLogType,
    MealStats,
    StockStatus,
)
from glamping.schemas.member import Member
from glamping.schemas.room import Room, RoomStatus
from glamping.services.members import find_member_by_name

logger = logging.getLogger(__name__)

UNCATEGORIZED = "其他"
SORT_FIELDS = ("name", "quantity", "safety_stock", "weekly_usage")

# Keywords in room notes that count as a dietary tag
NOTE_DIET_KEYWORDS = {
    "素": "素食",
    "牛": "不吃牛",
}

_REASON_LOG_TYPES = {
    "報廢/腐壞": InventoryLogType.SPOILED,
    "報廢": InventoryLogType.SPOILED,
    "腐壞": InventoryLogType.SPOILED,
    "員工餐": InventoryLogType.STAFF_MEAL,
    "盤點修正": InventoryLogType.ADJUSTMENT,
}


def build_default_inventory() -> List[InventoryItem]:
    defaults = [
        ("1", "波士頓龍蝦", InventoryCategory.SEAFOOD, 8, "隻", 10, 20, 0.5),
        ("2", "有機雞蛋", InventoryCategory.PRODUCE, 45, "顆", 30, 100, 1),
        ("3", "季節時蔬", InventoryCategory.PRODUCE, 12, "kg", 8, 25, 0.3),
        ("4", "精選紅酒", InventoryCategory.DRINKS, 24, "瓶", 12, 15, 0.1),
        ("5", "早餐吐司", InventoryCategory.DRY_GOODS, 5, "條", 3, 10, 0.1),
    ]
    return [
        InventoryItem(
            id=item_id,
            name=name,
            category=category.value,
            quantity=quantity,
            unit=unit,
            safety_stock=safety,
            weekly_usage=weekly,
            consumption_per_guest=per_guest,
            logs=[],
        )
        for item_id, name, category, quantity, unit, safety, weekly, per_guest in defaults
    ]


def stock_status(item: InventoryItem) -> StockStatus:
    if item.quantity <= item.safety_stock:
        return StockStatus.CRITICAL
    if item.quantity < item.weekly_usage:
        return StockStatus.REORDER
    return StockStatus.SUFFICIENT


def log_type_for(delta: float, reason: str) -> InventoryLogType:
    if delta > 0:
        return InventoryLogType.RESTOCK
    return _REASON_LOG_TYPES.get(reason, InventoryLogType.USAGE)


def _log(log_type: InventoryLogType, reason: str, amount: float, balance: float, now: datetime) -> InventoryLog:
    return InventoryLog(
        id=uuid.uuid4().hex[:12],
        date=now.strftime("%Y-%m-%d %H:%M:%S"),
        type=log_type,
        reason=reason,
        amount=amount,
        balance_after=balance,
    )


def create_item(data: InventoryItemCreate, now: datetime) -> InventoryItem:
    item_id = uuid.uuid4().hex[:12]
    quantity = round(data.quantity, 2)
    return InventoryItem(
        id=item_id,
        **data.model_dump(exclude={"quantity"}),
        quantity=quantity,
        logs=[_log(InventoryLogType.RESTOCK, "初始建檔", quantity, quantity, now)],
    )


def adjust_quantity(
    item: InventoryItem,
    delta: float,
    now: datetime,
    reason: Optional[str] = None,
    note: Optional[str] = None,
    log_type: Optional[InventoryLogType] = None,
) -> Tuple[InventoryItem, Optional[InventoryLog]]:
    """Apply a signed delta; quantity never goes below zero.

    The logged amount is what actually moved, so a deduction larger than
    the stock logs only what was there. No movement means no log.
    """
    new_quantity = max(0.0, round(item.quantity + delta, 2))
    actual = round(new_quantity - item.quantity, 2)
    if actual == 0:
        return item, None

    reason = reason or ("進貨/補貨" if delta > 0 else "一般消耗")
    log_type = log_type or log_type_for(delta, reason)
    full_reason = f"{reason}: {note}" if note else reason

    entry = _log(log_type, full_reason, actual, new_quantity, now)
    updated = item.model_copy(update={"quantity": new_quantity, "logs": [entry, *item.logs]})
    return updated, entry


def auto_deduct(items: Sequence[InventoryItem], total_guests: int, now: datetime) -> Tuple[List[InventoryItem], List[str]]:
    """Deduct per-guest consumption for tonight's headcount."""
    result, adjusted = [], []
    if total_guests <= 0:
        return list(items), adjusted

    reason = f"系統自動扣除 ({total_guests}人份)"
    for item in items:
        if item.consumption_per_guest <= 0:
            result.append(item)
            continue
        amount = round(total_guests * item.consumption_per_guest, 2)
        updated, entry = adjust_quantity(item, -amount, now, reason=reason, log_type=InventoryLogType.USAGE)
        if entry:
            adjusted.append(item.name)
        result.append(updated)

    logger.info(f"🍳 Auto-deducted inventory for {total_guests} guests: {adjusted}")
    return result, adjusted


def filter_items(items: Sequence[InventoryItem], status_filter: str = "ALL") -> List[InventoryItem]:
    if status_filter == "LOW":
        return [i for i in items if stock_status(i) is not StockStatus.SUFFICIENT]
    if status_filter == "SUFFICIENT":
        return [i for i in items if stock_status(i) is StockStatus.SUFFICIENT]
    return list(items)


def sort_items(items: Sequence[InventoryItem], field: str = "name", descending: bool = False) -> List[InventoryItem]:
    if field not in SORT_FIELDS:
        field = "name"
    return sorted(items, key=lambda i: getattr(i, field), reverse=descending)


def group_by_category(items: Sequence[InventoryItem]) -> Dict[str, List[InventoryItem]]:
    groups: Dict[str, List[InventoryItem]] = {}
    for item in items:
        groups.setdefault(item.category or UNCATEGORIZED, []).append(item)
    return groups


def restock_suggestion_count(items: Sequence[InventoryItem]) -> int:
    return sum(1 for i in items if stock_status(i) is not StockStatus.SUFFICIENT)


# ---------------------------
# Meals
# ---------------------------

def _diet_tags(room: Room, members: Sequence[Member]) -> List[str]:
    tags = []
    member = find_member_by_name(members, room.current_guest_name)
    if member:
        tags.extend(member.dietary_restrictions)
    notes = room.notes or ""
    for keyword, tag in NOTE_DIET_KEYWORDS.items():
        if keyword in notes and tag not in tags:
            tags.append(tag)
    return tags


def meal_stats(rooms: Sequence[Room], members: Sequence[Member]) -> MealStats:
    occupied = [r for r in rooms if r.status is RoomStatus.OCCUPIED]
    headcount = sum(r.headcount() for r in occupied)
    diets = Counter()
    for room in occupied:
        diets.update(_diet_tags(room, members))
    return MealStats(breakfast=headcount, dinner=headcount, diets=dict(diets))


def dining_list(rooms: Sequence[Room], members: Sequence[Member], search: Optional[str] = None) -> List[DiningEntry]:
    entries = []
    needle = (search or "").strip().lower()
    for room in rooms:
        if room.status is not RoomStatus.OCCUPIED:
            continue
        if needle and needle not in room.code.lower() and needle not in (room.current_guest_name or "").lower():
            continue

        if room.actual_adults is not None and room.actual_children is not None and room.actual_adults + room.actual_children > 0:
            breakdown = f"{room.actual_adults}大{room.actual_children}小"
        else:
            breakdown = f"基本{room.type.base_capacity}人" + (f" + 加{room.extra_guests}" if room.extra_guests else "")

        entries.append(DiningEntry(
            room_code=room.code,
            guest_name=room.current_guest_name,
            people=room.headcount(),
            breakdown=breakdown,
            tags=_diet_tags(room, members),
            notes=room.notes or "",
        ))
    return entries
