from datetime import timedelta
import pytest
from glamping.core.exceptions import AIServiceError
from glamping.schemas.booking import ImportConfirmRequest, ParsedBookingStatus
from glamping.schemas.room import RoomStatus
from glamping.services.occupancy_import import (
    match_parsed_rows,
    parse_stay_nights,
    plan_import,
    remap_row,
)
from glamping.services.room_transitions import CheckIn, apply_transition

SHEET = [
    {"roomCode": "尊一", "guestName": "王小明", "adults": 4, "children": 1, "stayDurationInfo": "2泊", "notes": "素食"},
    {"roomCode": "5", "guestName": "李大同", "adults": 2},
    {"roomCode": "201", "guestName": "張三", "adults": 1, "children": 1, "stayDurationInfo": "3天2夜"},
]


@pytest.mark.parametrize("info,nights", [
    ("2泊", 2),
    ("3天2夜", 2),
    ("住2晚", 2),
    ("1夜", 1),
    ("續住", None),
    ("0泊", None),
    (None, None),
])
def test_parse_stay_nights(info, nights):
    assert parse_stay_nights(info) == nights


class TestMatching:
    def test_spoken_code_matches_and_clamps_extras(self, rooms):
        parsed = match_parsed_rows(SHEET[:1], rooms)[0]
        assert parsed.room_code == "尊1"
        assert parsed.target_room_id == "v-1"
        assert parsed.status is ParsedBookingStatus.MATCHED
        assert parsed.base_capacity == 4
        assert parsed.extra_guests == 1
        assert parsed.stay_nights == 2

    def test_occupied_room_is_a_conflict(self, rooms, today):
        rooms = [apply_transition(r, CheckIn(), today).room if r.id == "d-5" else r for r in rooms]
        parsed = match_parsed_rows(SHEET[1:2], rooms)[0]
        assert parsed.status is ParsedBookingStatus.CONFLICT
        assert parsed.target_room_id == "d-5"

    def test_unknown_room(self, rooms):
        parsed = match_parsed_rows([{"roomCode": "999", "guestName": "無名"}], rooms)[0]
        assert parsed.status is ParsedBookingStatus.NOT_FOUND
        assert parsed.target_room_id is None

    def test_numeric_code_and_null_counts(self, rooms):
        rows = [
            {"roomCode": 201, "guestName": "張三", "adults": None, "children": None},
            {"roomCode": 12, "guestName": "李四", "adults": 5, "children": None},
        ]
        first, second = match_parsed_rows(rows, rooms)
        assert first.room_code == "201"
        assert first.target_room_id == "c-201"
        assert first.adults == 0 and first.children == 0
        assert first.extra_guests == 0
        assert second.target_room_id == "p-12"
        assert second.children == 0

    def test_remap(self, rooms):
        parsed = match_parsed_rows([{"roomCode": "999", "guestName": "無名", "adults": 3}], rooms)[0]
        room = next(r for r in rooms if r.id == "d-2")
        remapped = remap_row(parsed, room)
        assert remapped.status is ParsedBookingStatus.MATCHED
        assert remapped.room_code == "2"
        assert remapped.extra_guests == 1


class TestPlan:
    def test_unmatched_rows_are_skipped(self, rooms, today):
        parsed = match_parsed_rows([{"roomCode": "999", "guestName": "無名"}], rooms)
        plan = plan_import(parsed, rooms, today, 1, today)
        assert plan.updates == []
        assert plan.records == []
        assert plan.skipped == ["999 (無對應房間)"]

    def test_row_nights_override_default(self, rooms, today):
        parsed = match_parsed_rows(SHEET, rooms)
        plan = plan_import(parsed, rooms, today, 1, today)
        check_outs = {room_id: intent.check_out_date for room_id, intent in plan.updates}
        assert check_outs == {
            "v-1": today + timedelta(days=2),
            "d-5": today + timedelta(days=1),
            "c-201": today + timedelta(days=2),
        }


class TestServiceImport:
    def test_parse_passes_ai_errors_through(self, service, fake_ai):
        fake_ai.image_error = "分析失敗"
        with pytest.raises(AIServiceError):
            service.parse_occupancy_image("aGVsbG8=")

    def test_malformed_rows_become_ai_errors(self, service, fake_ai):
        fake_ai.image_rows = [{"adults": 2}]
        with pytest.raises(AIServiceError):
            service.parse_occupancy_image("aGVsbG8=")

    def test_loose_row_types_still_parse(self, service, fake_ai):
        fake_ai.image_rows = [{"roomCode": 5, "guestName": "李大同", "adults": None}]
        parsed = service.parse_occupancy_image("aGVsbG8=")
        assert parsed[0].status is ParsedBookingStatus.MATCHED
        assert parsed[0].target_room_id == "d-5"

    def test_parse_does_not_touch_rooms(self, service, fake_ai, persistence):
        fake_ai.image_rows = SHEET
        parsed = service.parse_occupancy_image("aGVsbG8=")
        assert len(parsed) == 3
        assert persistence.snapshots == []

    def test_future_sheet_only_adds_records(self, service, fake_ai, today):
        fake_ai.image_rows = SHEET
        tomorrow = today + timedelta(days=1)
        request = ImportConfirmRequest(
            bookings=service.parse_occupancy_image("aGVsbG8="), sheet_date=tomorrow, stay_nights=1,
        )
        response = service.confirm_import(request)
        assert response.applied_to_rooms == 0
        assert response.records_added == 3
        assert all(r.status is RoomStatus.VACANT for r in service.list_rooms())
        forecast = service.forecast()
        assert {r.room_code for r in forecast} == {"尊1", "5", "201"}
        assert all(r.check_in_date == tomorrow for r in forecast)

    def test_today_sheet_checks_rooms_in(self, service, fake_ai, today):
        fake_ai.image_rows = SHEET
        request = ImportConfirmRequest(
            bookings=service.parse_occupancy_image("aGVsbG8="), sheet_date=today, stay_nights=1,
        )
        response = service.confirm_import(request)
        assert response.applied_to_rooms == 3
        room = service.get_room("尊1")
        assert room.status is RoomStatus.OCCUPIED
        assert room.current_guest_name == "王小明"
        assert room.check_out_date == today + timedelta(days=2)
        assert room.actual_adults == 4
        assert room.notes is None
