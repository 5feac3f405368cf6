from glamping.services.room_codes import find_room_by_code, normalize_room_code, resolve_room


class TestNormalizeRoomCode:
    def test_spoken_numerals(self):
        assert normalize_room_code("尊一") == "尊1"
        assert normalize_room_code("水四") == "水4"
        assert normalize_room_code("五") == "5"

    def test_glyph_by_glyph(self):
        # No positional arithmetic: 十 is always "10"
        assert normalize_room_code("十一") == "101"
        assert normalize_room_code("十") == "10"

    def test_digits_untouched(self):
        for code in ("201", "尊1", "12+1", ""):
            assert normalize_room_code(code) == code

    def test_idempotent(self):
        for code in ("尊一", "十二", "水三", "二零一"):
            once = normalize_room_code(code)
            assert normalize_room_code(once) == once


class TestLookup:
    def test_find_by_code_strips_whitespace(self, rooms):
        room = find_room_by_code(rooms, "  尊1 ")
        assert room.id == "v-1"

    def test_find_unknown(self, rooms):
        assert find_room_by_code(rooms, "999") is None

    def test_resolve_prefers_id(self, rooms):
        assert resolve_room(rooms, "c-201").code == "201"
        assert resolve_room(rooms, "201").id == "c-201"
        assert resolve_room(rooms, "水二").id == "w-2"

    def test_default_roster(self, rooms):
        assert len(rooms) == 27
        assert len({r.code for r in rooms}) == 27
        assert [r.code for r in rooms if r.id.startswith("v-")] == ["尊1", "尊2", "尊3"]
