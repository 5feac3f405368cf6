from datetime import date
from typing import List, Optional, Sequence
from glamping.schemas.booking import BookingRecord


def filter_records(
    records: Sequence[BookingRecord],
    keyword: Optional[str] = None,
    on_date: Optional[date] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
) -> List[BookingRecord]:
    """Filter the history, newest check-in first.

    A specific date wins over year/month.
    """
    needle = (keyword or "").strip().lower()
    result = []
    for record in records:
        if needle and not (
            needle in record.guest_name.lower()
            or needle in record.room_code.lower()
            or needle in (record.notes or "").lower()
        ):
            continue
        if on_date is not None:
            if record.check_in_date != on_date:
                continue
        else:
            if year is not None and record.check_in_date.year != year:
                continue
            if month is not None and record.check_in_date.month != month:
                continue
        result.append(record)
    return sorted(result, key=lambda r: r.check_in_date, reverse=True)


def available_years(records: Sequence[BookingRecord]) -> List[int]:
    return sorted({r.check_in_date.year for r in records}, reverse=True)


def forecast(records: Sequence[BookingRecord], on_date: date) -> List[BookingRecord]:
    """Records checking in on ``on_date``; imported future sheets land here."""
    return [r for r in records if r.check_in_date == on_date]
