from datetime import timedelta

API = "/api/v1"

SHEET = [
    {"roomCode": "尊一", "guestName": "王小明", "adults": 4, "children": 1, "stayDurationInfo": "2泊"},
    {"roomCode": "999", "guestName": "無名"},
]


class TestRoot:
    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["status"] == "running"
        assert "X-Process-Time" in response.headers


class TestRoomsApi:
    def test_list_rooms_camel_case(self, client):
        response = client.get(f"{API}/rooms/")
        assert response.status_code == 200
        rooms = response.json()
        assert len(rooms) == 27
        assert {"checkOutDate", "electricBlankets", "currentGuestName", "extraGuests"} <= rooms[0].keys()

    def test_filter_by_type(self, client):
        response = client.get(f"{API}/rooms/", params={"type": "尊爵四人帳"})
        assert [r["code"] for r in response.json()] == ["尊1", "尊2", "尊3"]

    def test_unknown_room_is_404(self, client):
        response = client.get(f"{API}/rooms/999")
        assert response.status_code == 404
        assert "999" in response.json()["detail"]

    def test_transition(self, client, today):
        response = client.post(f"{API}/rooms/尊1/transition", json={"status": "入住中", "guestName": "陳怡君"})
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "入住中"
        assert body["checkOutDate"] == (today + timedelta(days=1)).isoformat()

    def test_quick_command(self, client):
        response = client.post(f"{API}/rooms/quick-command", json={"command": "201 202+1 999", "mode": "CHECKIN"})
        body = response.json()
        assert body["applied"] is True
        assert body["failures"] == ["999 (無此房號)"]
        assert client.get(f"{API}/rooms/202").json()["extraGuests"] == 1

    def test_swap_needs_confirmation(self, client):
        client.post(f"{API}/rooms/quick-command", json={"command": "1"})
        client.post(f"{API}/rooms/2/transition", json={"status": "待清潔"})
        response = client.post(f"{API}/rooms/swap", json={"fromRoom": "1", "toRoom": "2"})
        assert response.status_code == 409
        response = client.post(f"{API}/rooms/swap", json={"fromRoom": "1", "toRoom": "2", "force": True})
        assert response.status_code == 200
        assert response.json()["toRoom"]["status"] == "入住中"

    def test_swap_invalid(self, client):
        response = client.post(f"{API}/rooms/swap", json={"fromRoom": "1", "toRoom": "2"})
        assert response.status_code == 400

    def test_batch_checkout(self, client):
        client.post(f"{API}/rooms/quick-command", json={"command": "1 2"})
        body = client.post(f"{API}/rooms/batch-checkout").json()
        assert body["count"] == 2
        assert client.get(f"{API}/rooms/1").json()["status"] == "待拆床"

    def test_auto_sweep_endpoint(self, client, clock, today):
        client.post(f"{API}/rooms/quick-command", json={"command": "5"})
        clock.set(clock().replace(hour=12) + timedelta(days=1))
        body = client.post(f"{API}/rooms/auto-sweep").json()
        assert body["sweptRoomCodes"] == ["5"]


class TestEquipmentApi:
    def test_increment_refused_without_stock(self, client):
        response = client.post(f"{API}/equipment/blankets/1/adjust", json={"delta": 1})
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["room"]["electricBlankets"]["current"] == 1

    def test_stock_then_command(self, client):
        ledger = client.put(f"{API}/equipment/blankets/stock", json={"totalStock": 37}).json()
        assert ledger["inWarehouse"] == 2
        body = client.post(f"{API}/equipment/blankets/command", json={"command": "1=3"}).json()
        assert body["success"] is True
        assert body["ledger"]["inWarehouse"] == 0

    def test_set_room_count(self, client):
        response = client.put(f"{API}/equipment/blankets/尊1", json={"count": 0})
        assert response.status_code == 200
        assert response.json()["room"]["electricBlankets"]["current"] == 0
        assert response.json()["ledger"]["inWarehouse"] == 2
        assert client.put(f"{API}/equipment/blankets/999", json={"count": 1}).status_code == 404


class TestBookingsApi:
    def test_parse_failure_is_502(self, client, fake_ai):
        fake_ai.image_error = "分析失敗"
        response = client.post(f"{API}/bookings/import/parse", json={"imageBase64": "aGVsbG8="})
        assert response.status_code == 502

    def test_parse_then_confirm_for_tomorrow(self, client, fake_ai, today):
        fake_ai.image_rows = SHEET
        parsed = client.post(f"{API}/bookings/import/parse", json={"imageBase64": "aGVsbG8="}).json()
        assert [row["status"] for row in parsed] == ["MATCHED", "NOT_FOUND"]

        tomorrow = (today + timedelta(days=1)).isoformat()
        response = client.post(f"{API}/bookings/import/confirm", json={
            "bookings": parsed, "sheetDate": tomorrow, "stayNights": 1,
        })
        body = response.json()
        assert body["recordsAdded"] == 1
        assert body["appliedToRooms"] == 0
        assert body["skipped"] == ["999 (無對應房間)"]

        forecast = client.get(f"{API}/bookings/forecast").json()
        assert [r["guestName"] for r in forecast] == ["王小明"]
        assert client.get(f"{API}/rooms/尊1").json()["status"] == "空房"

    def test_delete_unknown_booking(self, client):
        assert client.delete(f"{API}/bookings/nope").status_code == 404


class TestInventoryApi:
    def test_list_with_status(self, client):
        items = client.get(f"{API}/inventory/", params={"status_filter": "LOW"}).json()
        assert all(item["stockStatus"] != "庫存充足" for item in items)

    def test_adjust(self, client):
        response = client.post(f"{API}/inventory/1/adjust", json={"delta": -3, "reason": "員工餐"})
        assert response.status_code == 200
        body = response.json()
        assert body["quantity"] == 5
        assert body["logs"][0]["type"] == "STAFF_MEAL"

    def test_unknown_item(self, client):
        assert client.post(f"{API}/inventory/nope/adjust", json={"delta": 1}).status_code == 404


class TestMembersAndVoiceApi:
    def test_analyze(self, client):
        body = client.post(f"{API}/members/3/analyze").json()
        assert "不吃牛" in body["member"]["dietaryRestrictions"]

    def test_voice_round_trip(self, client):
        reply = client.post(f"{API}/voice/room-action", json={"roomCode": "尊一", "action": "CHECKIN"}).json()
        assert reply["result"] == "尊1 已入住"
        assert client.get(f"{API}/voice/stats").json()["occupied"] == 1
        logs = client.get(f"{API}/voice/logs").json()
        assert logs[0]["tool"] == "getHotelStats"


class TestDashboardAndBackupApi:
    def test_dashboard(self, client):
        body = client.get(f"{API}/dashboard/").json()
        assert body["occupancyRate"] == 0
        assert body["totalMembers"] == 3

    def test_backup_round_trip(self, client):
        backup = client.get(f"{API}/backup/export").json()
        client.post(f"{API}/rooms/quick-command", json={"command": "5"})
        response = client.post(f"{API}/backup/restore", json=backup)
        assert response.status_code == 200
        assert response.json()["rooms"] == 27
        assert client.get(f"{API}/rooms/5").json()["status"] == "空房"

    def test_invalid_backup_is_400(self, client):
        response = client.post(f"{API}/backup/restore", json={"inventory": []})
        assert response.status_code == 400
