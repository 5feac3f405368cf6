import enum
from pydantic import Field
from glamping.schemas.base import CamelModel
from glamping.schemas.room import Room


class BlanketCondition(str, enum.Enum):
    BREAK = "BREAK"
    FIX = "FIX"


class LedgerSummary(CamelModel):
    total_stock: int
    in_rooms: int
    broken: int
    in_warehouse: int
    missing_from_rooms: int


class StockUpdate(CamelModel):
    total_stock: int = Field(..., ge=0)


class BlanketAdjust(CamelModel):
    delta: int


class BlanketCount(CamelModel):
    count: int = Field(..., ge=0)


class BlanketTransfer(CamelModel):
    to_room_id: str


class BlanketConditionRequest(CamelModel):
    action: BlanketCondition


class EquipmentCommand(CamelModel):
    command: str


class EquipmentResult(CamelModel):
    success: bool
    message: str
    ledger: LedgerSummary


class RoomEquipmentResult(EquipmentResult):
    room: Room
