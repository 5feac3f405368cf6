from fastapi import HTTPException, status
from glamping.core.exceptions import (
    BookingRecordNotFoundError,
    ConfirmationRequiredError,
    GlampingError,
    InvalidBackupError,
    InvalidOperationError,
    InventoryItemNotFoundError,
    MemberNotFoundError,
    RoomNotFoundError,
)
from glamping.services.state_service import ResortStateService, get_resort_state_service

_NOT_FOUND = (RoomNotFoundError, InventoryItemNotFoundError, MemberNotFoundError, BookingRecordNotFoundError)


def get_state_service() -> ResortStateService:
    return get_resort_state_service()


def http_error(exc: GlampingError) -> HTTPException:
    """Map a service-layer error onto the HTTP status the console expects"""
    if isinstance(exc, _NOT_FOUND):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ConfirmationRequiredError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, (InvalidOperationError, InvalidBackupError)):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
