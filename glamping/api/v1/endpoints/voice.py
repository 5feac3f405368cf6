# File: glamping/api/v1/endpoints/voice.py
from typing import Any, List
from fastapi import APIRouter, Depends
from glamping.api.deps import get_state_service
from glamping.schemas.voice import VoiceLogEntry, VoiceRoomActionRequest, VoiceRoomActionResponse
from glamping.services.state_service import ResortStateService

router = APIRouter()


@router.post("/room-action", response_model=VoiceRoomActionResponse, operation_id="voice_room_action")
def room_action(
    *,
    service: ResortStateService = Depends(get_state_service),
    request: VoiceRoomActionRequest,
) -> Any:
    """Spoken room action; refusals come back as the reply text, not as errors"""
    return VoiceRoomActionResponse(result=service.voice_room_action(request.room_code, request.action))


@router.get("/stats", operation_id="voice_hotel_stats")
def hotel_stats(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    return service.voice_hotel_stats()


@router.get("/logs", response_model=List[VoiceLogEntry], operation_id="voice_logs")
def voice_logs(*, service: ResortStateService = Depends(get_state_service)) -> Any:
    return service.voice_logs()
