# File: glamping/api/v1/endpoints/equipment.py
from typing import Any
from fastapi import APIRouter, Depends
from glamping.api.deps import get_state_service, http_error
from glamping.core.exceptions import GlampingError
from glamping.schemas.equipment import (
    BlanketAdjust,
    BlanketConditionRequest,
    BlanketCount,
    BlanketTransfer,
    EquipmentCommand,
    EquipmentResult,
    LedgerSummary,
    RoomEquipmentResult,
    StockUpdate,
)
from glamping.services.equipment_ledger import BlanketChange
from glamping.services.state_service import ResortStateService

router = APIRouter()


def _room_result(service: ResortStateService, change: BlanketChange, room_ref: str) -> RoomEquipmentResult:
    return RoomEquipmentResult(
        success=change.success,
        message=change.message,
        ledger=service.ledger(),
        room=service.get_room(room_ref),
    )


@router.get("/blankets", response_model=LedgerSummary, operation_id="blanket_ledger")
def blanket_ledger(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    """Warehouse / in-room / broken breakdown of the electric blankets"""
    return service.ledger()


@router.put("/blankets/stock", response_model=LedgerSummary, operation_id="set_blanket_stock")
def set_stock(*, service: ResortStateService = Depends(get_state_service), update: StockUpdate) -> Any:
    return service.set_total_blanket_stock(update.total_stock)


@router.post("/blankets/{room_ref}/adjust", response_model=RoomEquipmentResult, operation_id="adjust_room_blankets")
def adjust_blankets(
    *,
    service: ResortStateService = Depends(get_state_service),
    room_ref: str,
    adjust: BlanketAdjust,
) -> Any:
    """Add or remove blankets in a room; adding needs warehouse stock"""
    try:
        change = service.adjust_blankets(room_ref, adjust.delta)
        return _room_result(service, change, room_ref)
    except GlampingError as e:
        raise http_error(e)


@router.put("/blankets/{room_ref}", response_model=RoomEquipmentResult, operation_id="set_room_blankets")
def set_room_blankets(
    *,
    service: ResortStateService = Depends(get_state_service),
    room_ref: str,
    update: BlanketCount,
) -> Any:
    try:
        change = service.set_room_blankets(room_ref, update.count)
        return _room_result(service, change, room_ref)
    except GlampingError as e:
        raise http_error(e)


@router.post("/blankets/{room_ref}/transfer", response_model=RoomEquipmentResult, operation_id="transfer_room_blanket")
def transfer_blanket(
    *,
    service: ResortStateService = Depends(get_state_service),
    room_ref: str,
    transfer: BlanketTransfer,
) -> Any:
    """Move one blanket from this room to another"""
    try:
        change = service.transfer_blanket(room_ref, transfer.to_room_id)
        return _room_result(service, change, room_ref)
    except GlampingError as e:
        raise http_error(e)


@router.post("/blankets/{room_ref}/condition", response_model=RoomEquipmentResult, operation_id="blanket_condition")
def blanket_condition(
    *,
    service: ResortStateService = Depends(get_state_service),
    room_ref: str,
    request: BlanketConditionRequest,
) -> Any:
    try:
        change = service.blanket_condition(room_ref, request.action)
        return _room_result(service, change, room_ref)
    except GlampingError as e:
        raise http_error(e)


@router.post("/blankets/command", response_model=EquipmentResult, operation_id="equipment_command")
def equipment_command(
    *,
    service: ResortStateService = Depends(get_state_service),
    request: EquipmentCommand,
) -> Any:
    """``庫存=35`` / ``尊1=2`` / ``尊1>12``"""
    change = service.equipment_command(request.command)
    return EquipmentResult(success=change.success, message=change.message, ledger=service.ledger())
