import pytest
from glamping.core.exceptions import InventoryItemNotFoundError
from glamping.schemas.inventory import InventoryAdjustment, InventoryItemCreate, InventoryLogType, StockStatus
from glamping.schemas.room import QuickCommandMode
from glamping.services import kitchen
from glamping.services.members import build_default_members
from glamping.services.room_transitions import CheckIn, apply_transition
from tests.conftest import NOW


def check_in(rooms, room_id, today, **fields):
    return [apply_transition(r, CheckIn(**fields), today).room if r.id == room_id else r for r in rooms]


@pytest.fixture
def inventory():
    return {item.name: item for item in kitchen.build_default_inventory()}


class TestStockStatus:
    def test_levels(self, inventory):
        assert kitchen.stock_status(inventory["波士頓龍蝦"]) is StockStatus.CRITICAL
        assert kitchen.stock_status(inventory["有機雞蛋"]) is StockStatus.REORDER
        assert kitchen.stock_status(inventory["精選紅酒"]) is StockStatus.SUFFICIENT

    def test_filter_and_sort(self, inventory):
        items = list(inventory.values())
        low = kitchen.filter_items(items, "LOW")
        assert {i.name for i in low} == {"波士頓龍蝦", "有機雞蛋", "季節時蔬", "早餐吐司"}
        assert [i.name for i in kitchen.filter_items(items, "SUFFICIENT")] == ["精選紅酒"]
        by_quantity = kitchen.sort_items(items, "quantity", descending=True)
        assert by_quantity[0].name == "有機雞蛋"
        assert kitchen.restock_suggestion_count(items) == 4

    def test_group_by_category(self):
        item = kitchen.create_item(InventoryItemCreate(name="火種", category="", unit="包"), NOW)
        groups = kitchen.group_by_category([item, *kitchen.build_default_inventory()])
        assert [i.name for i in groups["其他"]] == ["火種"]
        assert len(groups["蔬果"]) == 2


class TestAdjustQuantity:
    def test_consume(self, inventory):
        item, log = kitchen.adjust_quantity(inventory["波士頓龍蝦"], -3, NOW)
        assert item.quantity == 5
        assert log.type is InventoryLogType.USAGE
        assert log.amount == -3
        assert log.balance_after == 5
        assert item.logs[0] == log

    def test_floor_logs_actual_movement(self, inventory):
        item, log = kitchen.adjust_quantity(inventory["波士頓龍蝦"], -100, NOW)
        assert item.quantity == 0
        assert log.amount == -8

    def test_no_movement_no_log(self, inventory):
        empty, _ = kitchen.adjust_quantity(inventory["早餐吐司"], -5, NOW)
        item, log = kitchen.adjust_quantity(empty, -1, NOW)
        assert log is None
        assert item is empty

    def test_rounding(self, inventory):
        item, log = kitchen.adjust_quantity(inventory["季節時蔬"], -0.1, NOW)
        assert item.quantity == 11.9
        assert log.amount == -0.1

    @pytest.mark.parametrize("reason,expected", [
        ("報廢/腐壞", InventoryLogType.SPOILED),
        ("報廢", InventoryLogType.SPOILED),
        ("腐壞", InventoryLogType.SPOILED),
        ("員工餐", InventoryLogType.STAFF_MEAL),
        ("盤點修正", InventoryLogType.ADJUSTMENT),
        ("一般消耗", InventoryLogType.USAGE),
    ])
    def test_reason_maps_log_type(self, inventory, reason, expected):
        _, log = kitchen.adjust_quantity(inventory["有機雞蛋"], -1, NOW, reason=reason)
        assert log.type is expected

    def test_restock(self, inventory):
        item, log = kitchen.adjust_quantity(inventory["有機雞蛋"], 12, NOW, reason="報廢", note="廠商補送")
        assert item.quantity == 57
        assert log.type is InventoryLogType.RESTOCK
        assert log.reason == "報廢: 廠商補送"

    def test_new_item_log(self):
        item = kitchen.create_item(InventoryItemCreate(name="牛排", unit="片", quantity=10), NOW)
        assert item.logs[0].reason == "初始建檔"
        assert item.logs[0].type is InventoryLogType.RESTOCK
        assert item.logs[0].balance_after == 10


class TestAutoDeduct:
    def test_per_guest_consumption(self, inventory):
        items, adjusted = kitchen.auto_deduct(list(inventory.values()), 4, NOW)
        by_name = {i.name: i for i in items}
        assert by_name["波士頓龍蝦"].quantity == 6
        assert by_name["有機雞蛋"].quantity == 41
        assert by_name["季節時蔬"].quantity == 10.8
        assert by_name["精選紅酒"].quantity == 23.6
        assert by_name["早餐吐司"].quantity == 4.6
        assert len(adjusted) == 5
        assert by_name["波士頓龍蝦"].logs[0].reason == "系統自動扣除 (4人份)"

    def test_no_guests(self, inventory):
        items, adjusted = kitchen.auto_deduct(list(inventory.values()), 0, NOW)
        assert adjusted == []


class TestMeals:
    def test_meal_stats_and_diets(self, rooms, today):
        members = build_default_members()
        rooms = check_in(rooms, "p-12", today, guest_name="陳怡君")
        rooms = check_in(rooms, "d-1", today, guest_name="王", actual_adults=1, actual_children=1)
        rooms = [r.model_copy(update={"notes": "一位吃素，不吃牛"}) if r.id == "d-1" else r for r in rooms]
        stats = kitchen.meal_stats(rooms, members)
        # Palace tent base 4 (adults/children default 0), double tent exact 2
        assert stats.breakfast == 6
        assert stats.dinner == 6
        assert stats.diets == {"全素": 1, "素食": 1, "不吃牛": 1}

    def test_dining_list(self, rooms, today):
        rooms = check_in(rooms, "d-1", today, guest_name="王", extra_guests=1)
        entries = kitchen.dining_list(rooms, [])
        assert len(entries) == 1
        assert entries[0].people == 3
        assert entries[0].breakdown == "基本2人 + 加1"
        assert kitchen.dining_list(rooms, [], search="不存在") == []


class TestServiceKitchen:
    def test_auto_deduct_uses_dinner_headcount(self, service):
        service.quick_command("12", QuickCommandMode.CHECKIN)
        guests, adjusted = service.auto_deduct_inventory()
        assert guests == 4
        assert service.get_item("1").quantity == 6

    def test_adjust_unknown_item(self, service):
        with pytest.raises(InventoryItemNotFoundError):
            service.adjust_item("nope", InventoryAdjustment(delta=-1))
