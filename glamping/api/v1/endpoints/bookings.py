# File: glamping/api/v1/endpoints/bookings.py
from datetime import date
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, status
from glamping.api.deps import get_state_service, http_error
from glamping.core.exceptions import AIServiceError, GlampingError
from glamping.schemas.booking import (
    BookingRecord,
    ImageParseRequest,
    ImportConfirmRequest,
    ImportConfirmResponse,
    ParsedBooking,
)
from glamping.services.state_service import ResortStateService

router = APIRouter()


@router.get("/", response_model=List[BookingRecord], operation_id="list_bookings")
def list_bookings(
    *,
    service: ResortStateService = Depends(get_state_service),
    keyword: Optional[str] = None,
    on_date: Optional[date] = Query(None, alias="date"),
    year: Optional[int] = None,
    month: Optional[int] = Query(None, ge=1, le=12),
) -> Any:
    """Booking history, newest first. ``date`` takes priority over year/month."""
    return service.list_bookings(keyword=keyword, on_date=on_date, year=year, month=month)


@router.get("/years", response_model=List[int], operation_id="booking_years")
def booking_years(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    return service.booking_years()


@router.get("/forecast", response_model=List[BookingRecord], operation_id="booking_forecast")
def forecast(
    *,
    service: ResortStateService = Depends(get_state_service),
    on_date: Optional[date] = Query(None, alias="date"),
) -> Any:
    """Arrivals on a date (tomorrow by default)"""
    return service.forecast(on_date)


@router.delete("/{record_id}", operation_id="delete_booking")
def delete_booking(*, service: ResortStateService = Depends(get_state_service), record_id: str) -> Any:
    try:
        service.delete_booking(record_id)
    except GlampingError as e:
        raise http_error(e)
    return {"message": "Booking record deleted successfully"}


@router.post("/import/parse", response_model=List[ParsedBooking], operation_id="parse_occupancy_image")
def parse_import(
    *,
    service: ResortStateService = Depends(get_state_service),
    request: ImageParseRequest,
) -> Any:
    """Read an occupancy sheet photo and match its rows to rooms. Nothing is applied."""
    try:
        return service.parse_occupancy_image(request.image_base64, request.mime_type)
    except AIServiceError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


@router.post("/import/confirm", response_model=ImportConfirmResponse, operation_id="confirm_occupancy_import")
def confirm_import(
    *,
    service: ResortStateService = Depends(get_state_service),
    request: ImportConfirmRequest,
) -> Any:
    """Apply confirmed rows: check-ins when the sheet is today's, booking records otherwise"""
    return service.confirm_import(request)
