"""Turn a photographed occupancy sheet into check-ins or booking records.

The image parser hands back raw rows; ``match_parsed_rows`` pairs them with
rooms, the front desk fixes up anything unmatched with ``remap_row``, and
``confirm_import`` decides what the confirmed rows do. Only a sheet dated
today moves rooms. Any other date only appends booking records, which is
how tomorrow's arrivals show up in the forecast.
"""
import logging
import re
import uuid
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence, Tuple
from glamping.schemas.booking import (
    BookingRecord,
    ExtractedBookingRow,
    ParsedBooking,
    ParsedBookingStatus,
)
from glamping.schemas.room import Room, RoomStatus, clamp_extra_guests
from glamping.services.room_codes import find_room_by_code, normalize_room_code
from glamping.services.room_transitions import CheckIn, RoomIntent

logger = logging.getLogger(__name__)

# "3天2夜" must be tried before the bare "N泊/N晚" forms
_NIGHTS_PATTERNS = (
    re.compile(r"\d+\s*天\s*(\d+)\s*夜"),
    re.compile(r"(\d+)\s*泊"),
    re.compile(r"(\d+)\s*[晚夜]"),
)


@dataclass
class ImportPlan:
    updates: List[Tuple[str, RoomIntent]] = field(default_factory=list)
    records: List[BookingRecord] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)


def parse_stay_nights(info: Optional[str]) -> Optional[int]:
    if not info:
        return None
    for pattern in _NIGHTS_PATTERNS:
        match = pattern.search(info)
        if match and int(match.group(1)) > 0:
            return int(match.group(1))
    return None


def _match(row: ParsedBooking, room: Optional[Room]) -> ParsedBooking:
    if room is None:
        return row.model_copy(update={
            "target_room_id": None,
            "room_type": None,
            "base_capacity": 0,
            "extra_guests": 0,
            "status": ParsedBookingStatus.NOT_FOUND,
        })

    base = room.type.base_capacity
    return row.model_copy(update={
        "room_code": room.code,
        "target_room_id": room.id,
        "room_type": room.type.value,
        "base_capacity": base,
        "extra_guests": clamp_extra_guests(row.adults + row.children - base),
        "status": ParsedBookingStatus.CONFLICT if room.status is RoomStatus.OCCUPIED else ParsedBookingStatus.MATCHED,
    })


def match_parsed_rows(rows: Sequence[Dict[str, Any]], rooms: Sequence[Room]) -> List[ParsedBooking]:
    parsed = []
    for raw in rows:
        row = ExtractedBookingRow.model_validate(raw)
        code = normalize_room_code(row.room_code)
        booking = ParsedBooking(
            room_code=code,
            guest_name=row.guest_name,
            check_in_date=row.check_in_date,
            adults=row.adults or 0,
            children=row.children or 0,
            stay_nights=parse_stay_nights(row.stay_duration_info),
            notes=row.notes or "",
        )
        parsed.append(_match(booking, find_room_by_code(rooms, code)))

    unmatched = sum(1 for p in parsed if p.status is ParsedBookingStatus.NOT_FOUND)
    logger.info(f"📋 Matched {len(parsed) - unmatched}/{len(parsed)} imported rows")
    return parsed


def remap_row(row: ParsedBooking, room: Room) -> ParsedBooking:
    """Manually point an imported row at a different room."""
    return _match(row, room)


def plan_import(
    bookings: Sequence[ParsedBooking],
    rooms: Sequence[Room],
    sheet_date: date,
    stay_nights: int,
    today: date,
) -> ImportPlan:
    plan = ImportPlan()
    rooms_by_id = {room.id: room for room in rooms}

    for booking in bookings:
        room = rooms_by_id.get(booking.target_room_id) if booking.target_room_id else None
        if room is None:
            plan.skipped.append(f"{booking.room_code} (無對應房間)")
            continue

        nights = booking.stay_nights or stay_nights
        check_out = sheet_date + timedelta(days=nights)
        notes = booking.notes or None

        if sheet_date == today:
            plan.updates.append((room.id, CheckIn(
                guest_name=booking.guest_name,
                check_out_date=check_out,
                extra_guests=booking.extra_guests,
                actual_adults=booking.adults,
                actual_children=booking.children,
                notes=notes,
            )))
        else:
            plan.records.append(BookingRecord(
                id=f"hist-{uuid.uuid4().hex[:12]}",
                room_code=room.code,
                room_type=room.type.value,
                guest_name=booking.guest_name,
                check_in_date=sheet_date,
                check_out_date=check_out,
                extra_guests=clamp_extra_guests(booking.extra_guests),
                actual_adults=booking.adults,
                actual_children=booking.children,
                notes=notes,
            ))

    return plan
