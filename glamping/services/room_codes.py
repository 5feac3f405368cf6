from typing import Iterable, Optional
from glamping.schemas.room import Room

# Per-glyph replacement: "十一" becomes "101", not "11".
_NUMERAL_GLYPHS = {
    "一": "1",
    "二": "2",
    "三": "3",
    "四": "4",
    "五": "5",
    "六": "6",
    "七": "7",
    "八": "8",
    "九": "9",
    "十": "10",
}


def normalize_room_code(code: str) -> str:
    """Replace spoken Chinese numerals with digits (尊一 -> 尊1)."""
    return "".join(_NUMERAL_GLYPHS.get(ch, ch) for ch in code)


def find_room_by_code(rooms: Iterable[Room], code: str) -> Optional[Room]:
    wanted = code.strip()
    for room in rooms:
        if room.code == wanted:
            return room
    return None


def resolve_room(rooms: Iterable[Room], ref: str) -> Optional[Room]:
    """Look a room up by internal id first, then by (normalized) code."""
    rooms = list(rooms)
    for room in rooms:
        if room.id == ref:
            return room
    return find_room_by_code(rooms, normalize_room_code(ref))
