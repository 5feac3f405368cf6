# File: glamping/core/exceptions.py
"""Exceptions raised by the service layer.

Per-item problems inside a batch (unknown room code, wrong room state,
malformed token) are never raised; they are reported back as reason strings.
These exceptions cover single lookups and collaborator failures only.
"""


class GlampingError(Exception):
    """Base class for service-layer errors"""


class RoomNotFoundError(GlampingError):
    def __init__(self, room_ref: str):
        self.room_ref = room_ref
        super().__init__(f"Room not found: {room_ref}")


class InventoryItemNotFoundError(GlampingError):
    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Inventory item not found: {item_id}")


class MemberNotFoundError(GlampingError):
    def __init__(self, member_id: str):
        self.member_id = member_id
        super().__init__(f"Member not found: {member_id}")


class BookingRecordNotFoundError(GlampingError):
    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Booking record not found: {record_id}")


class InvalidBackupError(GlampingError):
    """Backup payload is missing required sections"""


class AIServiceError(GlampingError):
    """The generative AI collaborator failed or is not configured"""


class InvalidOperationError(GlampingError):
    """The request is well-formed but the current state does not allow it"""


class ConfirmationRequiredError(GlampingError):
    """The operation is allowed only after the operator confirms it"""
