import enum
from typing import Any, Dict
from glamping.schemas.base import CamelModel


class VoiceAction(str, enum.Enum):
    CHECKIN = "CHECKIN"
    CHECKOUT = "CHECKOUT"
    CLEAN = "CLEAN"


class VoiceRoomActionRequest(CamelModel):
    room_code: str
    action: VoiceAction


class VoiceRoomActionResponse(CamelModel):
    result: str


class VoiceLogEntry(CamelModel):
    id: str
    timestamp: str
    tool: str
    args: Dict[str, Any]
    result: str
