"""Room status transition engine.

Every change of a room's status goes through ``apply_transition``. The caller
states an intent (check in, check out, strip bed, clean, maintenance); the
intent fixes the target status and the ``(current, target)`` pair picks the
handler from ``TRANSITIONS``. The engine itself never refuses a transition:
sanity checks such as "check-out needs an occupied room" belong to the
callers (quick commands, voice, swap endpoint).

All functions here are pure. They take rooms and return new rooms; the state
service decides when to swap the result into the application state.
"""
import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Callable, ClassVar, Dict, List, Literal, Optional, Sequence, Tuple, Union
from pydantic import BaseModel, ConfigDict
from glamping.core.exceptions import RoomNotFoundError
from glamping.schemas.booking import BookingRecord
from glamping.schemas.room import (
    DEFAULT_GUEST_NAME,
    POST_CHECKOUT_STATUS,
    Room,
    RoomStatus,
    clamp_extra_guests,
)

logger = logging.getLogger(__name__)

_CLEARED_OCCUPANCY = {
    "current_guest_id": None,
    "current_guest_name": None,
    "check_in_date": None,
    "check_out_date": None,
    "extra_guests": 0,
    "actual_adults": None,
    "actual_children": None,
}


# ---------------------------
# Intents
# ---------------------------

class _Intent(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: ClassVar[RoomStatus]


class CheckIn(_Intent):
    """Move a guest in, or update the stay of the guest already there."""

    kind: Literal["check_in"] = "check_in"
    target: ClassVar[RoomStatus] = RoomStatus.OCCUPIED

    guest_name: Optional[str] = None
    guest_id: Optional[str] = None
    check_out_date: Optional[date] = None
    extra_guests: Optional[int] = None
    actual_adults: Optional[int] = None
    actual_children: Optional[int] = None
    # Booking notes from the guest or an import; stored on the booking
    # record only, never on room.notes.
    notes: Optional[str] = None


class CheckOut(_Intent):
    kind: Literal["check_out"] = "check_out"
    target: ClassVar[RoomStatus] = POST_CHECKOUT_STATUS


class MarkDirty(_Intent):
    kind: Literal["mark_dirty"] = "mark_dirty"
    target: ClassVar[RoomStatus] = RoomStatus.DIRTY


class MarkVacant(_Intent):
    kind: Literal["mark_vacant"] = "mark_vacant"
    target: ClassVar[RoomStatus] = RoomStatus.VACANT


class SetMaintenance(_Intent):
    kind: Literal["set_maintenance"] = "set_maintenance"
    target: ClassVar[RoomStatus] = RoomStatus.MAINTENANCE


RoomIntent = Union[CheckIn, CheckOut, MarkDirty, MarkVacant, SetMaintenance]


def intent_for_status(status: RoomStatus, **guest_fields) -> RoomIntent:
    """Build the intent that drives a room to ``status``."""
    if status is RoomStatus.OCCUPIED:
        return CheckIn(**{k: v for k, v in guest_fields.items() if v is not None})
    if status is RoomStatus.AWAITING_STRIP:
        return CheckOut()
    if status is RoomStatus.DIRTY:
        return MarkDirty()
    if status is RoomStatus.VACANT:
        return MarkVacant()
    return SetMaintenance()


# ---------------------------
# Outcomes
# ---------------------------

@dataclass
class TransitionOutcome:
    room: Room
    booking_record: Optional[BookingRecord] = None


@dataclass
class BatchOutcome:
    rooms: List[Room]
    changed: List[Room] = field(default_factory=list)
    booking_records: List[BookingRecord] = field(default_factory=list)
    missing_room_ids: List[str] = field(default_factory=list)


@dataclass
class SwapOutcome:
    rooms: List[Room]
    from_room: Room
    to_room: Room


@dataclass
class SwapCheck:
    errors: List[str] = field(default_factory=list)
    needs_confirmation: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def append_note(existing: Optional[str], line: str) -> str:
    if not existing:
        return line
    return f"{existing}\n{line}"


# ---------------------------
# Handlers
# ---------------------------

Handler = Callable[[Room, RoomIntent, date], TransitionOutcome]


def _check_in(room: Room, intent: CheckIn, today: date) -> TransitionOutcome:
    guest_name = intent.guest_name or DEFAULT_GUEST_NAME
    check_out_date = intent.check_out_date or today + timedelta(days=1)
    extra_guests = clamp_extra_guests(intent.extra_guests or 0)
    adults = intent.actual_adults if intent.actual_adults is not None else 0
    children = intent.actual_children if intent.actual_children is not None else 0

    updated = room.model_copy(update={
        "status": RoomStatus.OCCUPIED,
        "current_guest_name": guest_name,
        "current_guest_id": intent.guest_id,
        "check_in_date": today,
        "check_out_date": check_out_date,
        "extra_guests": extra_guests,
        "actual_adults": adults,
        "actual_children": children,
    })
    record = BookingRecord(
        id=f"hist-{uuid.uuid4().hex[:12]}",
        room_code=room.code,
        room_type=room.type.value,
        guest_name=guest_name,
        check_in_date=today,
        check_out_date=check_out_date,
        extra_guests=extra_guests,
        actual_adults=adults,
        actual_children=children,
        notes=intent.notes,
    )
    return TransitionOutcome(room=updated, booking_record=record)


def _update_stay(room: Room, intent: CheckIn, today: date) -> TransitionOutcome:
    changes = {}
    if intent.guest_name:
        changes["current_guest_name"] = intent.guest_name
    if intent.guest_id is not None:
        changes["current_guest_id"] = intent.guest_id
    if intent.check_out_date is not None:
        changes["check_out_date"] = intent.check_out_date
    if intent.extra_guests is not None:
        changes["extra_guests"] = clamp_extra_guests(intent.extra_guests)
    if intent.actual_adults is not None:
        changes["actual_adults"] = intent.actual_adults
    if intent.actual_children is not None:
        changes["actual_children"] = intent.actual_children
    return TransitionOutcome(room=room.model_copy(update=changes))


def _check_out(room: Room, intent: RoomIntent, today: date) -> TransitionOutcome:
    return TransitionOutcome(room=room.model_copy(update={"status": intent.target, **_CLEARED_OCCUPANCY}))


def _status_only(room: Room, intent: RoomIntent, today: date) -> TransitionOutcome:
    # Non-occupied rooms carry no occupancy; re-assert it for stale blobs.
    return TransitionOutcome(room=room.model_copy(update={"status": intent.target, **_CLEARED_OCCUPANCY}))


# Handler names for the table below
_strip_bed = _status_only
_clean = _status_only
_enter_maintenance = _status_only
_leave_maintenance = _status_only
_relabel = _status_only

V, O, A, D, M = (
    RoomStatus.VACANT,
    RoomStatus.OCCUPIED,
    RoomStatus.AWAITING_STRIP,
    RoomStatus.DIRTY,
    RoomStatus.MAINTENANCE,
)

TRANSITIONS: Dict[Tuple[RoomStatus, RoomStatus], Handler] = {
    (V, O): _check_in,
    (V, A): _relabel,
    (V, D): _relabel,
    (V, V): _relabel,
    (V, M): _enter_maintenance,

    (O, O): _update_stay,
    (O, A): _check_out,
    (O, D): _check_out,
    (O, V): _check_out,
    (O, M): _check_out,

    (A, O): _check_in,
    (A, D): _strip_bed,
    (A, V): _relabel,
    (A, A): _relabel,
    (A, M): _enter_maintenance,

    (D, O): _check_in,
    (D, V): _clean,
    (D, A): _relabel,
    (D, D): _relabel,
    (D, M): _enter_maintenance,

    (M, O): _check_in,
    (M, V): _leave_maintenance,
    (M, D): _leave_maintenance,
    (M, A): _relabel,
    (M, M): _enter_maintenance,
}


# ---------------------------
# Public operations
# ---------------------------

def apply_transition(room: Room, intent: RoomIntent, today: date) -> TransitionOutcome:
    handler = TRANSITIONS[(room.status, intent.target)]
    return handler(room, intent, today)


def apply_batch_transition(
    rooms: Sequence[Room],
    updates: Sequence[Tuple[str, RoomIntent]],
    today: date,
) -> BatchOutcome:
    """Apply many transitions over one snapshot.

    Booking records come back in update order so the caller can prepend
    them to the history in one go. Unknown room ids are reported, not raised.
    """
    working = list(rooms)
    index = {room.id: i for i, room in enumerate(working)}
    outcome = BatchOutcome(rooms=working)

    for room_id, intent in updates:
        i = index.get(room_id)
        if i is None:
            outcome.missing_room_ids.append(room_id)
            continue

        result = apply_transition(working[i], intent, today)
        working[i] = result.room
        outcome.changed.append(result.room)
        if result.booking_record:
            outcome.booking_records.append(result.booking_record)

    if outcome.missing_room_ids:
        logger.warning(f"Batch transition skipped unknown rooms: {outcome.missing_room_ids}")
    return outcome


def check_swap_preconditions(from_room: Room, to_room: Room) -> SwapCheck:
    """Advisory checks the swap caller runs before ``swap_rooms``."""
    check = SwapCheck()
    if from_room.id == to_room.id:
        check.errors.append(f"{from_room.code} 與目標房間相同")
        return check
    if from_room.status is not RoomStatus.OCCUPIED:
        check.errors.append(f"{from_room.code} 目前狀態為「{from_room.status.value}」，非入住中無法換房")
    if to_room.status is RoomStatus.OCCUPIED:
        check.errors.append(f"目標房間 {to_room.code} 已有房客 ({to_room.current_guest_name})")
    elif to_room.status is not RoomStatus.VACANT:
        check.needs_confirmation.append(f"目標房間 {to_room.code} 目前狀態為「{to_room.status.value}」")
    return check


def swap_rooms(rooms: Sequence[Room], from_id: str, to_id: str) -> SwapOutcome:
    """Move the guest of ``from_id`` into ``to_id``; no booking record."""
    working = list(rooms)
    index = {room.id: i for i, room in enumerate(working)}
    if from_id not in index:
        raise RoomNotFoundError(from_id)
    if to_id not in index:
        raise RoomNotFoundError(to_id)

    source = working[index[from_id]]
    target = working[index[to_id]]

    moved_to = target.model_copy(update={
        "status": RoomStatus.OCCUPIED,
        "current_guest_id": source.current_guest_id,
        "current_guest_name": source.current_guest_name,
        "check_in_date": source.check_in_date,
        "check_out_date": source.check_out_date,
        "extra_guests": source.extra_guests,
        "actual_adults": source.actual_adults,
        "actual_children": source.actual_children,
    })
    moved_from = source.model_copy(update={
        "status": POST_CHECKOUT_STATUS,
        **_CLEARED_OCCUPANCY,
        "notes": append_note(source.notes, f"[系統] 房客 {source.current_guest_name} 換房至 {target.code}"),
    })

    working[index[from_id]] = moved_from
    working[index[to_id]] = moved_to
    return SwapOutcome(rooms=working, from_room=moved_from, to_room=moved_to)
