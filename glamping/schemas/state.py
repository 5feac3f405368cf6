from datetime import datetime
from typing import Any, Dict, List, Optional
from glamping.schemas.base import CamelModel
from glamping.schemas.booking import BookingRecord
from glamping.schemas.inventory import InventoryItem
from glamping.schemas.member import Member
from glamping.schemas.room import Room


class ResortState(CamelModel):
    """Everything the console keeps; persisted as one JSON blob."""

    rooms: List[Room]
    booking_records: List[BookingRecord] = []
    inventory: List[InventoryItem] = []
    members: List[Member] = []
    total_blanket_stock: int = 35
    last_updated: Optional[datetime] = None


class BackupPayload(CamelModel):
    version: str = "Persistent"
    timestamp: Optional[str] = None
    rooms: Optional[List[Dict[str, Any]]] = None
    inventory: Optional[List[Dict[str, Any]]] = None
    booking_records: Optional[List[Dict[str, Any]]] = None
    members: Optional[List[Dict[str, Any]]] = None
    total_blanket_stock: Optional[int] = None
