# File: glamping/schemas/__init__.py
from .room import (
    Room, RoomStatus, RoomType, ElectricBlankets, GuestFields,
    TransitionRequest, BatchTransitionRequest, BatchTransitionItem, BatchTransitionResponse,
    SwapRequest, SwapResponse, QuickCommandMode, QuickCommandRequest, QuickCommandResponse,
    RoomNotesUpdate, BulkStatusResponse, SweepResponse,
    DEFAULT_GUEST_NAME, POST_CHECKOUT_STATUS, build_default_rooms,
)
from .booking import (
    BookingRecord, ParsedBooking, ParsedBookingStatus, ExtractedBookingRow,
    ImageParseRequest, ImportConfirmRequest, ImportConfirmResponse,
)
from .inventory import (
    InventoryItem, InventoryItemCreate, InventoryItemView, InventoryLog, InventoryLogType,
    InventoryCategory, InventoryAdjustment, StockStatus, MealStats, DiningEntry,
    AutoDeductResponse, KitchenAdvice,
)
from .member import (
    Member, MemberCreate, MemberUpdate, MemberHistory, MembershipTier,
    AIAnalysisResult, MemberAnalysis, WelcomeMessage,
)
from .equipment import (
    LedgerSummary, StockUpdate, BlanketAdjust, BlanketTransfer, BlanketCondition,
    BlanketConditionRequest, EquipmentCommand, EquipmentResult, RoomEquipmentResult,
)
from .voice import VoiceAction, VoiceRoomActionRequest, VoiceRoomActionResponse, VoiceLogEntry
from .dashboard import DashboardSummary, DailyBriefing, RegionCount
from .state import ResortState, BackupPayload
