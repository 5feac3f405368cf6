import enum
from datetime import date
from typing import Dict, List, Optional
from pydantic import Field
from glamping.schemas.base import CamelModel

DEFAULT_GUEST_NAME = "貴賓"
MAX_EXTRA_GUESTS = 2


class RoomStatus(str, enum.Enum):
    VACANT = "空房"            # clean and ready
    OCCUPIED = "入住中"
    AWAITING_STRIP = "待拆床"  # guest left, bed not stripped yet
    DIRTY = "待清潔"
    MAINTENANCE = "維護中"


class RoomType(str, enum.Enum):
    DOUBLE_TENT = "雙人帳篷"
    PALACE_TENT = "皇宮四人帳"
    VIP_TENT = "尊爵四人帳"
    WATER_HOUSE = "水屋"
    CYPRESS_ROOM = "檜木房"

    @property
    def is_premium(self) -> bool:
        return self in (RoomType.PALACE_TENT, RoomType.VIP_TENT)

    @property
    def base_capacity(self) -> int:
        return 4 if self.is_premium else 2

    @property
    def blanket_entitlement(self) -> int:
        return 2 if self.is_premium else 1


# Status reached by a regular check-out
POST_CHECKOUT_STATUS = RoomStatus.AWAITING_STRIP


def clamp_extra_guests(value: int) -> int:
    return max(0, min(MAX_EXTRA_GUESTS, value))


class ElectricBlankets(CamelModel):
    total: int = 1    # standard entitlement
    current: int = 1  # working units in the room
    broken: int = 0   # awaiting repair


class Room(CamelModel):
    id: str
    code: str
    type: RoomType
    status: RoomStatus = RoomStatus.VACANT
    current_guest_id: Optional[str] = None
    current_guest_name: Optional[str] = None
    check_in_date: Optional[date] = None
    check_out_date: Optional[date] = None
    extra_guests: int = 0
    actual_adults: Optional[int] = None
    actual_children: Optional[int] = None
    electric_blankets: ElectricBlankets = Field(default_factory=ElectricBlankets)
    notes: Optional[str] = None

    def headcount(self) -> int:
        """Exact adult/child counts win over base capacity + extra guests."""
        if self.actual_adults is not None and self.actual_children is not None:
            exact = self.actual_adults + self.actual_children
            if exact > 0:
                return exact
        return self.type.base_capacity + (self.extra_guests or 0)


def build_default_rooms() -> List[Room]:
    """The fixed 27-room roster, all vacant with full blanket entitlement."""
    layout = [
        [(f"d-{i}", f"{i}", RoomType.DOUBLE_TENT) for i in range(1, 12)],
        [(f"p-{i}", f"{i}", RoomType.PALACE_TENT) for i in range(12, 17)],
        [(f"v-{i}", f"尊{i}", RoomType.VIP_TENT) for i in range(1, 4)],
        [(f"w-{i}", f"水{i}", RoomType.WATER_HOUSE) for i in range(1, 5)],
        [(f"c-{i}", f"{i}", RoomType.CYPRESS_ROOM) for i in range(201, 205)],
    ]
    rooms = []
    for group in layout:
        for room_id, code, room_type in group:
            entitlement = room_type.blanket_entitlement
            rooms.append(Room(
                id=room_id,
                code=code,
                type=room_type,
                electric_blankets=ElectricBlankets(total=entitlement, current=entitlement, broken=0),
            ))
    return rooms


# ---------------------------
# API payloads
# ---------------------------

class GuestFields(CamelModel):
    guest_name: Optional[str] = None
    guest_id: Optional[str] = None
    check_out_date: Optional[date] = None
    extra_guests: Optional[int] = None
    actual_adults: Optional[int] = Field(None, ge=0)
    actual_children: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class TransitionRequest(GuestFields):
    status: RoomStatus


class BatchTransitionItem(TransitionRequest):
    room_id: str


class BatchTransitionRequest(CamelModel):
    updates: List[BatchTransitionItem]


class BatchTransitionResponse(CamelModel):
    rooms: List[Room]
    booking_records_added: int
    missing_room_ids: List[str] = []


class SwapRequest(CamelModel):
    from_room: str  # id or code
    to_room: str
    force: bool = False  # confirm a dirty / maintenance / awaiting-strip target


class SwapResponse(CamelModel):
    from_room: Room
    to_room: Room
    message: str


class QuickCommandMode(str, enum.Enum):
    CHECKIN = "CHECKIN"
    CHECKOUT = "CHECKOUT"


class QuickCommandRequest(CamelModel):
    command: str
    mode: QuickCommandMode = QuickCommandMode.CHECKIN
    preview: bool = False


class QuickCommandResponse(CamelModel):
    applied: bool
    successes: List[str]
    failures: List[str]
    message: str


class RoomNotesUpdate(CamelModel):
    notes: Optional[str] = None


class BulkStatusResponse(CamelModel):
    count: int
    room_codes: List[str]
    message: str


class SweepResponse(CamelModel):
    swept_room_codes: List[str]
    message: str


class RoomStatusCounts(CamelModel):
    total: int
    by_status: Dict[str, int]
