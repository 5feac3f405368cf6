from collections import Counter
from datetime import date, timedelta
from typing import Dict, Sequence
from glamping.schemas.dashboard import DashboardSummary, RegionCount
from glamping.schemas.member import Member
from glamping.schemas.room import Room, RoomStatus


def status_counts(rooms: Sequence[Room]) -> Dict[str, int]:
    counts = {status.value: 0 for status in RoomStatus}
    for room in rooms:
        counts[room.status.value] += 1
    return counts


def build_summary(rooms: Sequence[Room], members: Sequence[Member], today: date) -> DashboardSummary:
    occupied = [r for r in rooms if r.status is RoomStatus.OCCUPIED]
    tomorrow = today + timedelta(days=1)
    regions = Counter(m.location or "未知" for m in members)

    return DashboardSummary(
        date=today.isoformat(),
        visitors=sum(r.headcount() for r in occupied),
        check_ins=len(occupied),
        occupancy_rate=round(len(occupied) / len(rooms) * 100) if rooms else 0,
        status_counts=status_counts(rooms),
        total_members=len(members),
        total_revenue=sum(m.total_spend for m in members),
        regions=[RegionCount(name=name, value=value) for name, value in regions.most_common()],
        upcoming_checkouts=[r for r in occupied if r.check_out_date == tomorrow],
    )
