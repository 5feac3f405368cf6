"""Electric blanket ledger.

Per-room counts live on the rooms themselves; the property-wide figure is a
manually maintained ``total_stock``. Everything else is derived on read:

    in_warehouse = total_stock - in_rooms - broken

so ``in_warehouse + in_rooms + broken == total_stock`` always holds, and
editing ``total_stock`` never redistributes the per-room counts.

Operations here are permissive: they refuse only what is physically
impossible (negative counts, moving a unit that is not there). The
"warehouse is empty" refusal for increments is made by the state service.
"""
import re
from dataclasses import dataclass
from typing import Optional, Sequence, Union
from glamping.schemas.equipment import LedgerSummary
from glamping.schemas.room import Room


@dataclass
class BlanketChange:
    success: bool
    message: str
    room: Optional[Room] = None
    other_room: Optional[Room] = None


def summarize(rooms: Sequence[Room], total_stock: int) -> LedgerSummary:
    in_rooms = sum(r.electric_blankets.current for r in rooms)
    broken = sum(r.electric_blankets.broken for r in rooms)
    missing = sum(max(0, r.electric_blankets.total - r.electric_blankets.current) for r in rooms)
    return LedgerSummary(
        total_stock=total_stock,
        in_rooms=in_rooms,
        broken=broken,
        in_warehouse=total_stock - in_rooms - broken,
        missing_from_rooms=missing,
    )


def _with_blankets(room: Room, **changes) -> Room:
    blankets = room.electric_blankets.model_copy(update=changes)
    return room.model_copy(update={"electric_blankets": blankets})


def set_current(room: Room, count: int) -> BlanketChange:
    if count < 0:
        return BlanketChange(False, f"❌ {room.code} 電熱毯數量不可為負數")
    updated = _with_blankets(room, current=count)
    return BlanketChange(True, f"✅ {room.code} 電熱毯數量已設為 {count}", room=updated)


def adjust_current(room: Room, delta: int) -> BlanketChange:
    new_count = max(0, room.electric_blankets.current + delta)
    if new_count == room.electric_blankets.current:
        return BlanketChange(False, f"⚠️ {room.code} 電熱毯數量未變更 ({new_count})", room=room)
    updated = _with_blankets(room, current=new_count)
    return BlanketChange(True, f"✅ {room.code} 電熱毯數量: {new_count}", room=updated)


def transfer(from_room: Room, to_room: Room) -> BlanketChange:
    if from_room.id == to_room.id:
        return BlanketChange(False, f"❌ {from_room.code} 不能移動到同一間房")
    if from_room.electric_blankets.current <= 0:
        return BlanketChange(False, f"❌ {from_room.code} 沒庫存了，無法移動")

    source = _with_blankets(from_room, current=from_room.electric_blankets.current - 1)
    target = _with_blankets(to_room, current=to_room.electric_blankets.current + 1)
    return BlanketChange(
        True,
        f"✅ 已從 {from_room.code} 移動一件電熱毯至 {to_room.code}",
        room=source,
        other_room=target,
    )


def mark_broken(room: Room) -> BlanketChange:
    current, broken = room.electric_blankets.current, room.electric_blankets.broken
    if current <= 0:
        return BlanketChange(False, f"❌ {room.code} 沒有可用的電熱毯")
    updated = _with_blankets(room, current=current - 1, broken=broken + 1)
    return BlanketChange(True, f"🔧 {room.code} 一件電熱毯標記為損壞", room=updated)


def mark_fixed(room: Room) -> BlanketChange:
    current, broken = room.electric_blankets.current, room.electric_blankets.broken
    if broken <= 0:
        return BlanketChange(False, f"❌ {room.code} 沒有待修的電熱毯")
    updated = _with_blankets(room, current=current + 1, broken=broken - 1)
    return BlanketChange(True, f"✅ {room.code} 一件電熱毯已修復", room=updated)


# ---------------------------
# Equipment mini-command
# ---------------------------

STOCK_KEYWORD = "庫存"


@dataclass
class SetStockCommand:
    total_stock: int


@dataclass
class SetRoomCountCommand:
    room_code: str
    count: int


@dataclass
class TransferCommand:
    from_code: str
    to_code: str


@dataclass
class InvalidCommand:
    message: str


EquipmentCommandParse = Union[SetStockCommand, SetRoomCountCommand, TransferCommand, InvalidCommand]

_INT = re.compile(r"^\s*(-?\d+)\s*$")


def parse_equipment_command(command: str) -> EquipmentCommandParse:
    """``庫存=35`` sets total stock, ``尊1=2`` sets a room, ``尊1>12`` moves one."""
    text = (command or "").strip()
    if not text:
        return InvalidCommand("⚠️ 請輸入設備指令 (例如: 尊1=2)")

    if text.startswith(f"{STOCK_KEYWORD}="):
        match = _INT.match(text.split("=", 1)[1])
        if not match or int(match.group(1)) < 0:
            return InvalidCommand("❌ 庫存格式錯誤，請輸入 庫存=35")
        return SetStockCommand(total_stock=int(match.group(1)))

    if "=" in text:
        raw_code, count_str = text.split("=", 1)
        match = _INT.match(count_str)
        if not raw_code.strip() or not match:
            return InvalidCommand(f"❌ 指令錯誤或找不到房間: {raw_code.strip()}")
        return SetRoomCountCommand(room_code=raw_code.strip(), count=int(match.group(1)))

    if ">" in text:
        raw_from, raw_to = text.split(">", 1)
        return TransferCommand(from_code=raw_from.strip(), to_code=raw_to.strip())

    return InvalidCommand("⚠️ 格式不正確，請使用:\n1. 房號=數量 (設定)\n2. 房號>房號 (移動)\n3. 庫存=數量 (總庫存)")
