import enum
from datetime import date
from typing import List, Optional
from pydantic import ConfigDict, Field
from glamping.schemas.base import CamelModel


class BookingRecord(CamelModel):
    id: str
    room_code: str
    room_type: str  # snapshot of the room type label at check-in
    guest_name: str
    check_in_date: date
    check_out_date: Optional[date] = None
    extra_guests: int = 0
    actual_adults: Optional[int] = None
    actual_children: Optional[int] = None
    notes: Optional[str] = None


class ParsedBookingStatus(str, enum.Enum):
    MATCHED = "MATCHED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"


class ExtractedBookingRow(CamelModel):
    """One row as returned by the image parser."""

    # The model may answer 201 rather than "201"
    model_config = ConfigDict(coerce_numbers_to_str=True)

    room_code: str
    guest_name: str
    check_in_date: Optional[str] = None
    adults: Optional[int] = 0
    children: Optional[int] = 0
    stay_duration_info: Optional[str] = None
    notes: Optional[str] = None


class ParsedBooking(CamelModel):
    room_code: str
    target_room_id: Optional[str] = None
    room_type: Optional[str] = None
    base_capacity: int = 0
    guest_name: str
    check_in_date: Optional[str] = None
    adults: int = 0
    children: int = 0
    extra_guests: int = 0
    stay_nights: Optional[int] = None
    notes: str = ""
    status: ParsedBookingStatus = ParsedBookingStatus.NOT_FOUND


class ImageParseRequest(CamelModel):
    image_base64: str
    mime_type: str = "image/jpeg"


class ImportConfirmRequest(CamelModel):
    bookings: List[ParsedBooking]
    sheet_date: date
    stay_nights: int = Field(1, ge=1)


class ImportConfirmResponse(CamelModel):
    applied_to_rooms: int
    records_added: int
    skipped: List[str]
    message: str
