"""Application state controller.

One ``ResortStateService`` owns the whole console state. Every mutation
follows the same path: take the lock, read the current state, compute the
new one with the pure engines, swap it in, then ask persistence for a
debounced save. API threads and the scheduler thread are the only writers.
"""
import logging
import threading
from datetime import date, datetime, timedelta
from typing import Any, Callable, Dict, List, Optional, Sequence
from pydantic import ValidationError
from glamping.core.config import settings
from glamping.core.exceptions import (
    AIServiceError,
    BookingRecordNotFoundError,
    ConfirmationRequiredError,
    InvalidBackupError,
    InvalidOperationError,
    InventoryItemNotFoundError,
    MemberNotFoundError,
    RoomNotFoundError,
)
from glamping.schemas.booking import (
    BookingRecord,
    ImportConfirmRequest,
    ImportConfirmResponse,
    ParsedBooking,
)
from glamping.schemas.dashboard import DashboardSummary
from glamping.schemas.equipment import BlanketCondition, LedgerSummary
from glamping.schemas.inventory import (
    DiningEntry,
    InventoryAdjustment,
    InventoryItem,
    InventoryItemCreate,
    InventoryItemView,
    MealStats,
)
from glamping.schemas.member import Member, MemberCreate, MemberUpdate
from glamping.schemas.room import (
    BatchTransitionItem,
    GuestFields,
    QuickCommandMode,
    QuickCommandResponse,
    Room,
    RoomStatus,
    RoomType,
    TransitionRequest,
    build_default_rooms,
)
from glamping.schemas.state import BackupPayload, ResortState
from glamping.schemas.voice import VoiceAction, VoiceLogEntry
from glamping.services import (
    booking_history,
    dashboard,
    equipment_ledger,
    kitchen,
    members as member_service,
    occupancy_import,
    quick_command,
    voice_commands,
)
from glamping.services.ai_service import AzureOpenAIService
from glamping.services.auto_sweep import SweepOutcome, sweep_overdue_rooms
from glamping.services.equipment_ledger import BlanketChange
from glamping.services.room_codes import resolve_room
from glamping.services.room_transitions import (
    BatchOutcome,
    CheckOut,
    MarkVacant,
    SwapOutcome,
    apply_batch_transition,
    apply_transition,
    check_swap_preconditions,
    intent_for_status,
    swap_rooms,
)

logger = logging.getLogger(__name__)


def _guest_fields(fields: GuestFields) -> Dict[str, Any]:
    return fields.model_dump(include=set(GuestFields.model_fields))


class ResortStateService:
    def __init__(
        self,
        persistence=None,
        ai: Optional[AzureOpenAIService] = None,
        clock: Callable[[], datetime] = datetime.now,
        auto_checkout_hour: Optional[int] = None,
    ):
        self.persistence = persistence
        self.ai = ai if ai is not None else AzureOpenAIService()
        self.clock = clock
        self.auto_checkout_hour = settings.AUTO_CHECKOUT_HOUR if auto_checkout_hour is None else auto_checkout_hour
        self.voice_log = voice_commands.VoiceCommandLog()
        self._lock = threading.RLock()
        self._state = self._default_state()

    # ---------------------------
    # State plumbing
    # ---------------------------

    def _today(self) -> date:
        return self.clock().date()

    @staticmethod
    def _default_state() -> ResortState:
        return ResortState(
            rooms=build_default_rooms(),
            booking_records=[],
            inventory=kitchen.build_default_inventory(),
            members=member_service.build_default_members(),
            total_blanket_stock=settings.DEFAULT_BLANKET_STOCK,
        )

    @property
    def state(self) -> ResortState:
        with self._lock:
            return self._state

    def load(self) -> ResortState:
        """Replace the in-memory state with the stored one, or the defaults."""
        data = self.persistence.load() if self.persistence else None
        loaded = None
        if data:
            try:
                loaded = ResortState.model_validate(data)
            except ValidationError as e:
                logger.error(f"Stored state is invalid, using defaults: {e}")
                loaded = None
            if loaded is not None and not loaded.rooms:
                logger.warning("Stored state has no rooms, using defaults")
                loaded = None
            if loaded is not None and not data.get("inventory"):
                loaded = loaded.model_copy(update={"inventory": kitchen.build_default_inventory()})

        with self._lock:
            self._state = loaded or self._default_state()
            logger.info(f"🏕️ State ready: {len(self._state.rooms)} rooms, {len(self._state.booking_records)} booking records")
            return self._state

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return self._state.model_dump(mode="json", by_alias=True)

    def _commit(self, **changes) -> ResortState:
        # Callers hold the lock
        self._state = self._state.model_copy(update={**changes, "last_updated": self.clock()})
        if self.persistence is not None:
            try:
                self.persistence.schedule_save(self.snapshot)
            except Exception as e:
                logger.error(f"Failed to request save: {e}")
        return self._state

    def _replace_rooms(self, *updated: Room) -> List[Room]:
        by_id = {room.id: room for room in updated}
        return [by_id.get(room.id, room) for room in self._state.rooms]

    def _room(self, ref: str) -> Room:
        room = resolve_room(self._state.rooms, ref)
        if room is None:
            raise RoomNotFoundError(ref)
        return room

    # ---------------------------
    # Rooms
    # ---------------------------

    def list_rooms(self, room_type: Optional[RoomType] = None, search: Optional[str] = None) -> List[Room]:
        rooms = self.state.rooms
        if room_type is not None:
            rooms = [r for r in rooms if r.type is room_type]
        if search and search.strip():
            needle = search.strip().lower()
            rooms = [
                r for r in rooms
                if needle in r.code.lower() or needle in (r.current_guest_name or "").lower()
            ]
        return list(rooms)

    def get_room(self, ref: str) -> Room:
        with self._lock:
            return self._room(ref)

    def room_status_counts(self) -> Dict[str, int]:
        return dashboard.status_counts(self.state.rooms)

    def transition_room(self, ref: str, request: TransitionRequest) -> Room:
        with self._lock:
            room = self._room(ref)
            intent = intent_for_status(request.status, **_guest_fields(request))
            outcome = apply_transition(room, intent, self._today())
            changes = {"rooms": self._replace_rooms(outcome.room)}
            if outcome.booking_record:
                changes["booking_records"] = [outcome.booking_record, *self._state.booking_records]
            self._commit(**changes)
            logger.info(f"🛏️ {room.code}: {room.status.value} -> {outcome.room.status.value}")
            return outcome.room

    def _apply_batch(self, updates) -> BatchOutcome:
        # Callers hold the lock
        outcome = apply_batch_transition(self._state.rooms, updates, self._today())
        if outcome.changed:
            self._commit(
                rooms=outcome.rooms,
                booking_records=[*outcome.booking_records, *self._state.booking_records],
            )
        return outcome

    def batch_transition(self, items: Sequence[BatchTransitionItem]) -> BatchOutcome:
        updates = [
            (item.room_id, intent_for_status(item.status, **_guest_fields(item)))
            for item in items
        ]
        with self._lock:
            return self._apply_batch(updates)

    def batch_clean(self, room_ids: Optional[Sequence[str]] = None) -> List[Room]:
        """Mark dirty rooms clean: the given ones, or every dirty room."""
        with self._lock:
            dirty = [r for r in self._state.rooms if r.status is RoomStatus.DIRTY]
            if room_ids is not None:
                wanted = set(room_ids)
                dirty = [r for r in dirty if r.id in wanted]
            self._apply_batch([(r.id, MarkVacant()) for r in dirty])
            return dirty

    def batch_checkout(self) -> List[Room]:
        with self._lock:
            occupied = [r for r in self._state.rooms if r.status is RoomStatus.OCCUPIED]
            self._apply_batch([(r.id, CheckOut()) for r in occupied])
            return occupied

    def swap(self, from_ref: str, to_ref: str, force: bool = False) -> SwapOutcome:
        with self._lock:
            source = self._room(from_ref)
            target = self._room(to_ref)
            check = check_swap_preconditions(source, target)
            if not check.ok:
                raise InvalidOperationError("; ".join(check.errors))
            if check.needs_confirmation and not force:
                raise ConfirmationRequiredError("; ".join(check.needs_confirmation) + "，確定要換房嗎？")

            outcome = swap_rooms(self._state.rooms, source.id, target.id)
            self._commit(rooms=outcome.rooms)
            logger.info(f"🔁 Swapped guest {source.current_guest_name} from {source.code} to {target.code}")
            return outcome

    def quick_command(self, command: str, mode: QuickCommandMode, preview: bool = False) -> QuickCommandResponse:
        mode = QuickCommandMode(mode)
        with self._lock:
            result = quick_command.parse_quick_command(command, self._state.rooms, mode)
            applied = result.has_updates and not preview
            if applied:
                self._apply_batch(result.updates)
        return QuickCommandResponse(
            applied=applied,
            successes=result.successes,
            failures=result.failures,
            message=quick_command.summarize(result, mode, applied),
        )

    def update_notes(self, ref: str, notes: Optional[str]) -> Room:
        with self._lock:
            room = self._room(ref).model_copy(update={"notes": notes or None})
            self._commit(rooms=self._replace_rooms(room))
            return room

    def run_auto_sweep(self, now: Optional[datetime] = None) -> SweepOutcome:
        with self._lock:
            outcome = sweep_overdue_rooms(self._state.rooms, now or self.clock(), self.auto_checkout_hour)
            if outcome.swept_codes:
                self._commit(rooms=outcome.rooms)
            return outcome

    # ---------------------------
    # Equipment ledger
    # ---------------------------

    def ledger(self) -> LedgerSummary:
        with self._lock:
            return equipment_ledger.summarize(self._state.rooms, self._state.total_blanket_stock)

    def set_total_blanket_stock(self, total: int) -> LedgerSummary:
        with self._lock:
            self._commit(total_blanket_stock=total)
            logger.info(f"🧺 Blanket stock set to {total}")
            return self.ledger()

    def _apply_blanket_change(self, change: BlanketChange) -> BlanketChange:
        # Callers hold the lock
        if change.success:
            updated = [r for r in (change.room, change.other_room) if r is not None]
            self._commit(rooms=self._replace_rooms(*updated))
        return change

    def adjust_blankets(self, ref: str, delta: int) -> BlanketChange:
        with self._lock:
            room = self._room(ref)
            if delta > 0 and delta > self.ledger().in_warehouse:
                return BlanketChange(False, "❌ 倉庫備品不足！請先檢查庫存或從其他房間調度。", room=room)
            return self._apply_blanket_change(equipment_ledger.adjust_current(room, delta))

    def set_room_blankets(self, ref: str, count: int) -> BlanketChange:
        with self._lock:
            return self._apply_blanket_change(equipment_ledger.set_current(self._room(ref), count))

    def transfer_blanket(self, from_ref: str, to_ref: str) -> BlanketChange:
        with self._lock:
            return self._apply_blanket_change(
                equipment_ledger.transfer(self._room(from_ref), self._room(to_ref))
            )

    def blanket_condition(self, ref: str, action: BlanketCondition) -> BlanketChange:
        with self._lock:
            room = self._room(ref)
            if action is BlanketCondition.BREAK:
                change = equipment_ledger.mark_broken(room)
            else:
                change = equipment_ledger.mark_fixed(room)
            return self._apply_blanket_change(change)

    def equipment_command(self, command: str) -> BlanketChange:
        parsed = equipment_ledger.parse_equipment_command(command)

        if isinstance(parsed, equipment_ledger.InvalidCommand):
            return BlanketChange(False, parsed.message)

        if isinstance(parsed, equipment_ledger.SetStockCommand):
            self.set_total_blanket_stock(parsed.total_stock)
            return BlanketChange(True, f"✅ 總庫存已更新為: {parsed.total_stock}")

        with self._lock:
            if isinstance(parsed, equipment_ledger.SetRoomCountCommand):
                room = resolve_room(self._state.rooms, parsed.room_code)
                if room is None:
                    return BlanketChange(False, f"❌ 指令錯誤或找不到房間: {parsed.room_code}")
                return self._apply_blanket_change(equipment_ledger.set_current(room, parsed.count))

            source = resolve_room(self._state.rooms, parsed.from_code)
            target = resolve_room(self._state.rooms, parsed.to_code)
            if source is None or target is None:
                missing = parsed.from_code if source is None else parsed.to_code
                return BlanketChange(False, f"❌ 房號錯誤: {missing} 不存在")
            return self._apply_blanket_change(equipment_ledger.transfer(source, target))

    # ---------------------------
    # Kitchen
    # ---------------------------

    def _item(self, item_id: str) -> InventoryItem:
        for item in self._state.inventory:
            if item.id == item_id:
                return item
        raise InventoryItemNotFoundError(item_id)

    def _replace_item(self, updated: InventoryItem) -> List[InventoryItem]:
        return [updated if i.id == updated.id else i for i in self._state.inventory]

    def list_inventory(self, status_filter: str = "ALL", sort: str = "name", descending: bool = False) -> List[InventoryItemView]:
        items = kitchen.sort_items(kitchen.filter_items(self.state.inventory, status_filter), sort, descending)
        return [
            InventoryItemView(**item.model_dump(), stock_status=kitchen.stock_status(item))
            for item in items
        ]

    def get_item(self, item_id: str) -> InventoryItem:
        with self._lock:
            return self._item(item_id)

    def create_item(self, data: InventoryItemCreate) -> InventoryItem:
        with self._lock:
            item = kitchen.create_item(data, self.clock())
            self._commit(inventory=[*self._state.inventory, item])
            return item

    def delete_item(self, item_id: str) -> None:
        with self._lock:
            self._item(item_id)
            self._commit(inventory=[i for i in self._state.inventory if i.id != item_id])

    def adjust_item(self, item_id: str, adjustment: InventoryAdjustment) -> InventoryItem:
        with self._lock:
            updated, entry = kitchen.adjust_quantity(
                self._item(item_id),
                adjustment.delta,
                self.clock(),
                reason=adjustment.reason,
                note=adjustment.note,
                log_type=adjustment.log_type,
            )
            if entry:
                self._commit(inventory=self._replace_item(updated))
            return updated

    def reset_inventory(self) -> List[InventoryItem]:
        with self._lock:
            self._commit(inventory=kitchen.build_default_inventory())
            return self._state.inventory

    def meal_stats(self) -> MealStats:
        with self._lock:
            return kitchen.meal_stats(self._state.rooms, self._state.members)

    def dining_list(self, search: Optional[str] = None) -> List[DiningEntry]:
        with self._lock:
            return kitchen.dining_list(self._state.rooms, self._state.members, search)

    def auto_deduct_inventory(self):
        """Deduct tonight's dinner headcount; returns (guests, adjusted item names)."""
        with self._lock:
            guests = kitchen.meal_stats(self._state.rooms, self._state.members).dinner
            if guests <= 0:
                return 0, []
            items, adjusted = kitchen.auto_deduct(self._state.inventory, guests, self.clock())
            if adjusted:
                self._commit(inventory=items)
            return guests, adjusted

    def kitchen_advice(self) -> str:
        stats = self.meal_stats()
        return self.ai.generate_kitchen_advice(self._today().isoformat(), stats.model_dump())

    # ---------------------------
    # Members
    # ---------------------------

    def _member(self, member_id: str) -> Member:
        for member in self._state.members:
            if member.id == member_id:
                return member
        raise MemberNotFoundError(member_id)

    def _replace_member(self, updated: Member) -> List[Member]:
        return [updated if m.id == updated.id else m for m in self._state.members]

    def list_members(self, search: Optional[str] = None) -> List[Member]:
        return member_service.search_members(self.state.members, search)

    def get_member(self, member_id: str) -> Member:
        with self._lock:
            return self._member(member_id)

    def create_member(self, data: MemberCreate) -> Member:
        with self._lock:
            member = member_service.create_member(data, self._today())
            self._commit(members=[member, *self._state.members])
            return member

    def update_member(self, member_id: str, changes: MemberUpdate) -> Member:
        with self._lock:
            member = member_service.update_member(self._member(member_id), changes)
            self._commit(members=self._replace_member(member))
            return member

    def delete_member(self, member_id: str) -> None:
        with self._lock:
            self._member(member_id)
            self._commit(members=[m for m in self._state.members if m.id != member_id])

    def analyze_member(self, member_id: str):
        # The AI call runs outside the lock; only the merge is serialized.
        member = self.get_member(member_id)
        analysis = self.ai.analyze_member_notes(member.notes)
        with self._lock:
            merged = member_service.merge_analysis(self._member(member_id), analysis)
            self._commit(members=self._replace_member(merged))
            return merged, analysis

    def welcome_message(self, member_id: str) -> str:
        return self.ai.generate_welcome_message(self.get_member(member_id))

    # ---------------------------
    # Booking history and imports
    # ---------------------------

    def list_bookings(self, keyword=None, on_date=None, year=None, month=None) -> List[BookingRecord]:
        return booking_history.filter_records(self.state.booking_records, keyword, on_date, year, month)

    def booking_years(self) -> List[int]:
        return booking_history.available_years(self.state.booking_records)

    def forecast(self, on_date: Optional[date] = None) -> List[BookingRecord]:
        return booking_history.forecast(self.state.booking_records, on_date or self._today() + timedelta(days=1))

    def delete_booking(self, record_id: str) -> None:
        with self._lock:
            if not any(r.id == record_id for r in self._state.booking_records):
                raise BookingRecordNotFoundError(record_id)
            self._commit(booking_records=[r for r in self._state.booking_records if r.id != record_id])

    def parse_occupancy_image(self, base64_image: str, mime_type: str = "image/jpeg") -> List[ParsedBooking]:
        """Raises ``AIServiceError``; room state is never touched here."""
        rows = self.ai.analyze_occupancy_image(base64_image, mime_type)
        with self._lock:
            try:
                return occupancy_import.match_parsed_rows(rows, self._state.rooms)
            except ValidationError as e:
                raise AIServiceError(f"分析失敗: {e}") from e

    def confirm_import(self, request: ImportConfirmRequest) -> ImportConfirmResponse:
        with self._lock:
            today = self._today()
            plan = occupancy_import.plan_import(
                request.bookings, self._state.rooms, request.sheet_date, request.stay_nights, today,
            )

            if request.sheet_date == today:
                outcome = self._apply_batch(plan.updates)
                applied, added = len(outcome.changed), len(outcome.booking_records)
                message = f"✅ 已匯入 {applied} 間房間入住"
            else:
                applied, added = 0, len(plan.records)
                if plan.records:
                    self._commit(booking_records=[*plan.records, *self._state.booking_records])
                message = f"📅 已新增 {added} 筆 {request.sheet_date.isoformat()} 的訂房紀錄"

        logger.info(f"📥 Import for {request.sheet_date}: rooms={applied} records={added} skipped={len(plan.skipped)}")
        return ImportConfirmResponse(
            applied_to_rooms=applied,
            records_added=added,
            skipped=plan.skipped,
            message=message,
        )

    # ---------------------------
    # Voice
    # ---------------------------

    def voice_room_action(self, room_code: str, action: VoiceAction) -> str:
        with self._lock:
            room, intent, reply = voice_commands.plan_room_action(self._state.rooms, room_code, action)
            if room is not None and intent is not None:
                outcome = apply_transition(room, intent, self._today())
                changes = {"rooms": self._replace_rooms(outcome.room)}
                if outcome.booking_record:
                    changes["booking_records"] = [outcome.booking_record, *self._state.booking_records]
                self._commit(**changes)
        self.voice_log.record("roomAction", {"roomCode": room_code, "action": action.value}, reply)
        return reply

    def voice_hotel_stats(self) -> Dict[str, Any]:
        with self._lock:
            stats = voice_commands.hotel_stats(self._state.rooms, self._state.total_blanket_stock)
        self.voice_log.record("getHotelStats", {}, f"{stats['occupied']}/{stats['total']} occupied")
        return stats

    def voice_logs(self) -> List[VoiceLogEntry]:
        return self.voice_log.entries()

    # ---------------------------
    # Dashboard
    # ---------------------------

    def dashboard(self) -> DashboardSummary:
        with self._lock:
            return dashboard.build_summary(self._state.rooms, self._state.members, self._today())

    def daily_briefing(self) -> str:
        summary = self.dashboard()
        stats = summary.model_dump(mode="json", by_alias=True, exclude={"upcoming_checkouts"})
        return self.ai.generate_daily_briefing(stats)

    # ---------------------------
    # Backup
    # ---------------------------

    def export_backup(self) -> Dict[str, Any]:
        with self._lock:
            payload = BackupPayload(
                timestamp=self.clock().isoformat(),
                rooms=[r.model_dump(mode="json", by_alias=True) for r in self._state.rooms],
                inventory=[i.model_dump(mode="json", by_alias=True) for i in self._state.inventory],
                booking_records=[b.model_dump(mode="json", by_alias=True) for b in self._state.booking_records],
                members=[m.model_dump(mode="json", by_alias=True) for m in self._state.members],
                total_blanket_stock=self._state.total_blanket_stock,
            )
        return payload.model_dump(mode="json", by_alias=True)

    def restore_backup(self, data: Dict[str, Any]) -> ResortState:
        try:
            payload = BackupPayload.model_validate(data)
        except ValidationError as e:
            raise InvalidBackupError(f"無效的備份檔: {e}") from e
        if not payload.rooms or payload.inventory is None:
            raise InvalidBackupError("無效的備份檔: 缺少 rooms 或 inventory")

        try:
            restored = ResortState(
                rooms=payload.rooms,
                inventory=payload.inventory,
                booking_records=payload.booking_records or [],
                members=payload.members or [],
                total_blanket_stock=(
                    payload.total_blanket_stock
                    if payload.total_blanket_stock is not None
                    else settings.DEFAULT_BLANKET_STOCK
                ),
            )
        except ValidationError as e:
            raise InvalidBackupError(f"無效的備份檔: {e}") from e

        with self._lock:
            self._state = restored
            self._commit()
            logger.info(f"♻️ Restored backup from {payload.timestamp or 'unknown time'}")
            return self._state


_service: Optional[ResortStateService] = None
_service_lock = threading.Lock()


def get_resort_state_service() -> ResortStateService:
    """Process-wide controller, created on first use."""
    global _service
    with _service_lock:
        if _service is None:
            from glamping.core.scheduler import scheduler
            from glamping.services.persistence import PersistenceService

            _service = ResortStateService(persistence=PersistenceService(scheduler=scheduler))
        return _service
