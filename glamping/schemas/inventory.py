import enum
from typing import Dict, List, Optional
from pydantic import BaseModel, Field
from glamping.schemas.base import CamelModel


class InventoryCategory(str, enum.Enum):
    MEAT = "肉品"
    SEAFOOD = "海鮮"
    PRODUCE = "蔬果"
    DRY_GOODS = "乾貨"
    DRINKS = "酒水"
    CONSUMABLES = "消耗品"


class InventoryLogType(str, enum.Enum):
    RESTOCK = "RESTOCK"
    USAGE = "USAGE"
    ADJUSTMENT = "ADJUSTMENT"
    SPOILED = "SPOILED"
    STAFF_MEAL = "STAFF_MEAL"


class StockStatus(str, enum.Enum):
    CRITICAL = "庫存告急"    # at or below safety stock
    REORDER = "建議叫貨"     # below a week of usage
    SUFFICIENT = "庫存充足"


class InventoryLog(CamelModel):
    id: str
    date: str
    type: InventoryLogType
    reason: str
    amount: float  # signed delta
    balance_after: float


class InventoryItemBase(CamelModel):
    name: str
    category: str = InventoryCategory.MEAT.value
    quantity: float = Field(0, ge=0)
    unit: str
    safety_stock: float = 0
    weekly_usage: float = 0
    consumption_per_guest: float = 0


class InventoryItemCreate(InventoryItemBase):
    pass


class InventoryItem(InventoryItemBase):
    id: str
    logs: List[InventoryLog] = []


class InventoryItemView(InventoryItem):
    stock_status: StockStatus


class InventoryAdjustment(CamelModel):
    delta: float
    reason: Optional[str] = None
    note: Optional[str] = None
    log_type: Optional[InventoryLogType] = None


class AutoDeductResponse(CamelModel):
    total_guests: int
    adjusted_items: List[str]
    message: str


class MealStats(BaseModel):
    breakfast: int
    dinner: int
    diets: Dict[str, int]


class DiningEntry(CamelModel):
    room_code: str
    guest_name: Optional[str] = None
    people: int
    breakdown: str
    tags: List[str]
    notes: str = ""


class KitchenAdvice(CamelModel):
    date: str
    meal_stats: MealStats
    advice: str
