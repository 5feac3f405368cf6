from datetime import datetime, timedelta
from glamping.schemas.room import QuickCommandMode, RoomStatus
from glamping.services.auto_sweep import AUTO_CHECKOUT_NOTE, is_overdue, sweep_overdue_rooms
from glamping.services.room_transitions import CheckIn, apply_transition


def stay(rooms, room_id, check_in, check_out):
    return [
        apply_transition(r, CheckIn(guest_name="客", check_out_date=check_out), check_in).room if r.id == room_id else r
        for r in rooms
    ]


class TestSweep:
    def test_nothing_before_cutoff(self, rooms, today):
        rooms = stay(rooms, "d-1", today - timedelta(days=1), today)
        outcome = sweep_overdue_rooms(rooms, datetime(today.year, today.month, today.day, 10, 59))
        assert outcome.swept_codes == []

    def test_due_today_after_cutoff(self, rooms, today):
        rooms = stay(rooms, "d-1", today - timedelta(days=1), today)
        outcome = sweep_overdue_rooms(rooms, datetime(today.year, today.month, today.day, 11, 0))
        assert outcome.swept_codes == ["1"]
        room = next(r for r in outcome.rooms if r.id == "d-1")
        assert room.status is RoomStatus.AWAITING_STRIP
        assert room.current_guest_name is None
        assert AUTO_CHECKOUT_NOTE in room.notes

    def test_multi_night_guest_not_evicted(self, rooms, today):
        # Checked in yesterday, leaves tomorrow
        rooms = stay(rooms, "d-2", today - timedelta(days=1), today + timedelta(days=1))
        outcome = sweep_overdue_rooms(rooms, datetime(today.year, today.month, today.day, 15, 0))
        assert outcome.swept_codes == []

    def test_missed_check_out_day_is_swept(self, rooms, today):
        rooms = stay(rooms, "d-3", today - timedelta(days=3), today - timedelta(days=1))
        outcome = sweep_overdue_rooms(rooms, datetime(today.year, today.month, today.day, 12, 0))
        assert outcome.swept_codes == ["3"]

    def test_idempotent(self, rooms, today):
        rooms = stay(rooms, "d-1", today - timedelta(days=1), today)
        now = datetime(today.year, today.month, today.day, 11, 30)
        first = sweep_overdue_rooms(rooms, now)
        second = sweep_overdue_rooms(first.rooms, now)
        assert second.swept_codes == []
        assert second.rooms == first.rooms

    def test_existing_notes_kept(self, rooms, today):
        rooms = stay(rooms, "d-1", today - timedelta(days=1), today)
        rooms = [r.model_copy(update={"notes": "窗戶破"}) if r.id == "d-1" else r for r in rooms]
        outcome = sweep_overdue_rooms(rooms, datetime(today.year, today.month, today.day, 11, 0))
        room = next(r for r in outcome.rooms if r.id == "d-1")
        assert room.notes == f"窗戶破\n{AUTO_CHECKOUT_NOTE}"

    def test_is_overdue_ignores_other_statuses(self, rooms, today):
        now = datetime(today.year, today.month, today.day, 12, 0)
        assert not any(is_overdue(r, now, 11) for r in rooms)


class TestServiceSweep:
    def test_sweep_reads_state_at_call_time(self, service, clock, today):
        service.quick_command("5", QuickCommandMode.CHECKIN)
        assert service.run_auto_sweep().swept_codes == []

        clock.set(datetime(today.year, today.month, today.day, 11, 0) + timedelta(days=1))
        assert service.run_auto_sweep().swept_codes == ["5"]
        assert service.get_room("5").status is RoomStatus.AWAITING_STRIP
