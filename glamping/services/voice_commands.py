import logging
import threading
import uuid
from collections import deque
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
from glamping.schemas.room import Room, RoomStatus, RoomType
from glamping.schemas.voice import VoiceAction, VoiceLogEntry
from glamping.services.room_codes import find_room_by_code, normalize_room_code
from glamping.services.room_transitions import CheckIn, CheckOut, MarkVacant, RoomIntent

logger = logging.getLogger(__name__)

VOICE_LOG_LIMIT = 50


def plan_room_action(rooms: Sequence[Room], code: str, action: VoiceAction) -> Tuple[Optional[Room], Optional[RoomIntent], str]:
    """Decide what a spoken room action does.

    Returns the room, the intent to apply (None when refused) and the reply
    read back to the operator.
    """
    room_code = normalize_room_code(code)
    room = find_room_by_code(rooms, room_code)
    if room is None:
        return None, None, f"找不到房號 {room_code}"

    if action is VoiceAction.CLEAN:
        if room.status is not RoomStatus.DIRTY:
            return room, None, f"{room.code} 目前不是待清潔狀態"
        return room, MarkVacant(), f"{room.code} 已設為空房"

    if action is VoiceAction.CHECKOUT:
        if room.status is not RoomStatus.OCCUPIED:
            return room, None, f"{room.code} 目前無人入住"
        return room, CheckOut(), f"{room.code} 已退房"

    if room.status is not RoomStatus.VACANT:
        return room, None, f"{room.code} 目前無法入住"
    return room, CheckIn(), f"{room.code} 已入住"


def hotel_stats(rooms: Sequence[Room], total_blanket_stock: int) -> Dict[str, Any]:
    def count(subset, status):
        return sum(1 for r in subset if r.status is status)

    stats = {
        "total": len(rooms),
        "occupied": count(rooms, RoomStatus.OCCUPIED),
        "awaitingStrip": count(rooms, RoomStatus.AWAITING_STRIP),
        "dirty": count(rooms, RoomStatus.DIRTY),
        "vacant": count(rooms, RoomStatus.VACANT),
        "maintenance": count(rooms, RoomStatus.MAINTENANCE),
        "inventory": {"blankets": total_blanket_stock},
        "roomTypes": {},
    }
    for room_type in RoomType:
        typed = [r for r in rooms if r.type is room_type]
        stats["roomTypes"][room_type.value] = {
            "total": len(typed),
            "vacant": count(typed, RoomStatus.VACANT),
            "occupied": count(typed, RoomStatus.OCCUPIED),
            "dirty": count(typed, RoomStatus.DIRTY),
        }
    return stats


class VoiceCommandLog:
    """Most recent voice tool calls, newest first."""

    def __init__(self, limit: int = VOICE_LOG_LIMIT):
        self._entries = deque(maxlen=limit)
        self._lock = threading.Lock()

    def record(self, tool: str, args: Dict[str, Any], result: str) -> VoiceLogEntry:
        entry = VoiceLogEntry(
            id=uuid.uuid4().hex[:12],
            timestamp=datetime.now().isoformat(),
            tool=tool,
            args=args,
            result=result,
        )
        with self._lock:
            self._entries.appendleft(entry)
        logger.info(f"🎙️ [VoiceLog] {tool} {args} -> {result}")
        return entry

    def entries(self) -> List[VoiceLogEntry]:
        with self._lock:
            return list(self._entries)
