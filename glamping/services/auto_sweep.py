import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Sequence
from glamping.schemas.room import POST_CHECKOUT_STATUS, Room, RoomStatus
from glamping.services.room_transitions import CheckOut, append_note, apply_transition

logger = logging.getLogger(__name__)

AUTO_CHECKOUT_NOTE = "系統自動退房"


@dataclass
class SweepOutcome:
    rooms: List[Room]
    swept_codes: List[str] = field(default_factory=list)


def is_overdue(room: Room, now: datetime, cutoff_hour: int) -> bool:
    """Occupied past the cutoff on (or after) the expected check-out day.

    Keyed on check_out_date. Comparing check_in_date with today would evict
    multi-night guests on their second morning.
    """
    if now.hour < cutoff_hour:
        return False
    if room.status is not RoomStatus.OCCUPIED or room.check_out_date is None:
        return False
    return room.check_out_date <= now.date()


def sweep_overdue_rooms(rooms: Sequence[Room], now: datetime, cutoff_hour: int = 11) -> SweepOutcome:
    outcome = SweepOutcome(rooms=list(rooms))
    if now.hour < cutoff_hour:
        return outcome

    today = now.date()
    for i, room in enumerate(outcome.rooms):
        if not is_overdue(room, now, cutoff_hour):
            continue

        checked_out = apply_transition(room, CheckOut(), today).room
        outcome.rooms[i] = checked_out.model_copy(update={
            "notes": append_note(room.notes, AUTO_CHECKOUT_NOTE),
        })
        outcome.swept_codes.append(room.code)

    if outcome.swept_codes:
        logger.info(f"🧹 Auto check-out moved {len(outcome.swept_codes)} rooms to {POST_CHECKOUT_STATUS.value}: {outcome.swept_codes}")
    return outcome
