"""Quick-command mini-language for bulk check-in / check-out.

A command is a list of tokens separated by commas or whitespace, each token
``<room code>[+N|-N]`` with a single-digit N, e.g. ``"201 202+1 尊一-1"``.

Parsing is strictly per token: a bad token becomes a failure line and the
rest of the batch carries on. Nothing here touches state; the caller applies
``updates`` as one batch transition, and only when there is at least one.
"""
import re
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple
from glamping.schemas.room import (
    DEFAULT_GUEST_NAME,
    QuickCommandMode,
    Room,
    RoomStatus,
    clamp_extra_guests,
)
from glamping.services.room_codes import find_room_by_code, normalize_room_code
from glamping.services.room_transitions import CheckIn, CheckOut, RoomIntent

# Non-greedy code, then an optional sign and exactly one digit at the end.
# "尊1+1" -> ("尊1", "+", "1"); "12+10" does not split and stays one code.
TOKEN_PATTERN = re.compile(r"^(.+?)(?:([+-])(\d))?$")
TOKEN_SEPARATOR = re.compile(r"[,，\s]+")


@dataclass
class QuickCommandResult:
    updates: List[Tuple[str, RoomIntent]] = field(default_factory=list)
    successes: List[str] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def has_updates(self) -> bool:
        return bool(self.updates)


def tokenize(command: str) -> List[str]:
    return [token for token in TOKEN_SEPARATOR.split(command or "") if token.strip()]


def parse_quick_command(command: str, rooms: Sequence[Room], mode: QuickCommandMode) -> QuickCommandResult:
    result = QuickCommandResult()
    processed_ids = set()

    for token in tokenize(command):
        match = TOKEN_PATTERN.match(token)
        # A token that opens with a sign ("+1") carries no room code
        if not match or match.group(1)[0] in "+-":
            result.failures.append(f"{token} (格式錯誤)")
            continue

        raw_code, operator, digit = match.groups()
        room_code = normalize_room_code(raw_code)
        amount = int(digit) if digit else 0

        room = find_room_by_code(rooms, room_code)
        if not room:
            result.failures.append(f"{raw_code} (無此房號)")
            continue

        # First occurrence wins
        if room.id in processed_ids:
            continue

        if mode is QuickCommandMode.CHECKIN:
            if room.status not in (RoomStatus.VACANT, RoomStatus.OCCUPIED):
                result.failures.append(f"{room_code} (狀態: {room.status.value}，無法入住)")
                continue

            extra = room.extra_guests if room.status is RoomStatus.OCCUPIED else 0
            if operator == "+":
                extra += amount
            elif operator == "-":
                extra -= amount
            final_extra = clamp_extra_guests(extra)

            guest_name = room.current_guest_name or DEFAULT_GUEST_NAME

            processed_ids.add(room.id)
            result.updates.append((room.id, CheckIn(guest_name=guest_name, extra_guests=final_extra)))
            op_str = f"{operator}{amount}" if operator else ""
            result.successes.append(f"{room_code}{op_str} (加人:{final_extra})")

        else:
            if room.status is not RoomStatus.OCCUPIED:
                result.failures.append(f"{room_code} (非入住中，無法退房)")
                continue

            processed_ids.add(room.id)
            result.updates.append((room.id, CheckOut()))
            result.successes.append(room_code)

    return result


def summarize(result: QuickCommandResult, mode: QuickCommandMode, applied: bool) -> str:
    """Human-readable outcome, matching what the front desk expects to read."""
    if not result.has_updates:
        if result.failures:
            return "❌ 操作失敗 (無有效指令):\n" + "\n".join(result.failures)
        return "⚠️ 未執行任何操作，請檢查輸入。"

    if not applied:
        verb = "退房" if mode is QuickCommandMode.CHECKOUT else "入住"
        message = f"確定要為以下房間{verb}嗎？\n" + ", ".join(result.successes)
    elif mode is QuickCommandMode.CHECKOUT:
        message = "✅ 成功退房: " + ", ".join(result.successes)
    else:
        message = "✅ 成功: " + ", ".join(result.successes)

    if result.failures:
        message += "\n⚠️ 部分失敗:\n" + "\n".join(result.failures)
    return message
