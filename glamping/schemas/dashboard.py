from typing import Dict, List
from glamping.schemas.base import CamelModel
from glamping.schemas.room import Room


class RegionCount(CamelModel):
    name: str
    value: int


class DashboardSummary(CamelModel):
    date: str
    visitors: int
    check_ins: int
    occupancy_rate: int
    status_counts: Dict[str, int]
    total_members: int
    total_revenue: float
    regions: List[RegionCount]
    upcoming_checkouts: List[Room]


class DailyBriefing(CamelModel):
    date: str
    briefing: str
