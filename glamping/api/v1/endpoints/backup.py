# File: glamping/api/v1/endpoints/backup.py
from typing import Any, Dict
from fastapi import APIRouter, Body, Depends
from glamping.api.deps import get_state_service, http_error
from glamping.core.exceptions import GlampingError
from glamping.services.state_service import ResortStateService

router = APIRouter()


@router.get("/export", operation_id="export_backup")
def export_backup(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    """Full state as a downloadable backup document"""
    return service.export_backup()


@router.post("/restore", operation_id="restore_backup")
def restore_backup(
    *,
    service: ResortStateService = Depends(get_state_service),
    payload: Dict[str, Any] = Body(...),
) -> Any:
    """Replace the whole state; needs at least ``rooms`` and ``inventory``"""
    try:
        state = service.restore_backup(payload)
    except GlampingError as e:
        raise http_error(e)
    return {
        "message": "✅ 資料還原成功",
        "rooms": len(state.rooms),
        "inventory": len(state.inventory),
        "bookingRecords": len(state.booking_records),
        "members": len(state.members),
    }
