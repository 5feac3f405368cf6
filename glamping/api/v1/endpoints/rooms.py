# File: glamping/api/v1/endpoints/rooms.py
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, Query
from glamping.api.deps import get_state_service, http_error
from glamping.core.exceptions import GlampingError
from glamping.schemas.room import (
    BatchTransitionRequest,
    BatchTransitionResponse,
    BulkStatusResponse,
    QuickCommandRequest,
    QuickCommandResponse,
    Room,
    RoomNotesUpdate,
    RoomStatusCounts,
    RoomType,
    SwapRequest,
    SwapResponse,
    SweepResponse,
    TransitionRequest,
)
from glamping.services.auto_sweep import AUTO_CHECKOUT_NOTE
from glamping.services.state_service import ResortStateService

router = APIRouter()


@router.get("/", response_model=List[Room], operation_id="list_rooms")
def list_rooms(
    *,
    service: ResortStateService = Depends(get_state_service),
    room_type: Optional[RoomType] = Query(None, alias="type"),
    search: Optional[str] = None,
) -> Any:
    """List rooms, optionally by type or a code / guest-name search"""
    return service.list_rooms(room_type=room_type, search=search)


@router.get("/status-counts", response_model=RoomStatusCounts, operation_id="room_status_counts")
def room_status_counts(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    counts = service.room_status_counts()
    return RoomStatusCounts(total=sum(counts.values()), by_status=counts)


@router.get("/{room_ref}", response_model=Room, operation_id="get_room")
def get_room(*, service: ResortStateService = Depends(get_state_service), room_ref: str) -> Any:
    """Get a room by id or code"""
    try:
        return service.get_room(room_ref)
    except GlampingError as e:
        raise http_error(e)


@router.post("/{room_ref}/transition", response_model=Room, operation_id="transition_room")
def transition_room(
    *,
    service: ResortStateService = Depends(get_state_service),
    room_ref: str,
    request: TransitionRequest,
) -> Any:
    """Move a room to a new status; guest fields apply to check-in only"""
    try:
        return service.transition_room(room_ref, request)
    except GlampingError as e:
        raise http_error(e)


@router.post("/batch-transition", response_model=BatchTransitionResponse, operation_id="batch_transition_rooms")
def batch_transition(
    *,
    service: ResortStateService = Depends(get_state_service),
    request: BatchTransitionRequest,
) -> Any:
    outcome = service.batch_transition(request.updates)
    return BatchTransitionResponse(
        rooms=outcome.changed,
        booking_records_added=len(outcome.booking_records),
        missing_room_ids=outcome.missing_room_ids,
    )


@router.post("/swap", response_model=SwapResponse, operation_id="swap_rooms")
def swap_rooms(
    *,
    service: ResortStateService = Depends(get_state_service),
    request: SwapRequest,
) -> Any:
    """Move the guest of one room into another.

    409 when the target is not vacant and ``force`` was not set.
    """
    try:
        outcome = service.swap(request.from_room, request.to_room, force=request.force)
    except GlampingError as e:
        raise http_error(e)
    return SwapResponse(
        from_room=outcome.from_room,
        to_room=outcome.to_room,
        message=f"✅ {outcome.to_room.current_guest_name} 已從 {outcome.from_room.code} 換至 {outcome.to_room.code}",
    )


@router.post("/quick-command", response_model=QuickCommandResponse, operation_id="quick_command")
def quick_command(
    *,
    service: ResortStateService = Depends(get_state_service),
    request: QuickCommandRequest,
) -> Any:
    """Bulk check-in / check-out from a line like ``"201 202+1 尊一-1"``"""
    return service.quick_command(request.command, request.mode, preview=request.preview)


@router.post("/batch-clean", response_model=BulkStatusResponse, operation_id="batch_clean_rooms")
def batch_clean(
    *,
    service: ResortStateService = Depends(get_state_service),
    room_ids: Optional[List[str]] = Query(None),
) -> Any:
    """Mark dirty rooms clean (all of them, or only ``room_ids``)"""
    cleaned = service.batch_clean(room_ids)
    return BulkStatusResponse(
        count=len(cleaned),
        room_codes=[r.code for r in cleaned],
        message=f"✅ 已成功將 {len(cleaned)} 間房間設為已清潔 (可入住)" if cleaned else "目前沒有待清潔的房間。",
    )


@router.post("/batch-checkout", response_model=BulkStatusResponse, operation_id="batch_checkout_rooms")
def batch_checkout(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    checked_out = service.batch_checkout()
    return BulkStatusResponse(
        count=len(checked_out),
        room_codes=[r.code for r in checked_out],
        message=f"✅ 已成功將 {len(checked_out)} 間房間退房" if checked_out else "目前沒有入住中的房間。",
    )


@router.put("/{room_ref}/notes", response_model=Room, operation_id="update_room_notes")
def update_notes(
    *,
    service: ResortStateService = Depends(get_state_service),
    room_ref: str,
    update: RoomNotesUpdate,
) -> Any:
    try:
        return service.update_notes(room_ref, update.notes)
    except GlampingError as e:
        raise http_error(e)


@router.post("/auto-sweep", response_model=SweepResponse, operation_id="run_auto_sweep")
def auto_sweep(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    """Run the overdue check-out sweep now instead of waiting for the scheduler"""
    outcome = service.run_auto_sweep()
    if outcome.swept_codes:
        message = f"🧹 {AUTO_CHECKOUT_NOTE}: " + ", ".join(outcome.swept_codes)
    else:
        message = "沒有需要自動退房的房間。"
    return SweepResponse(swept_room_codes=outcome.swept_codes, message=message)
