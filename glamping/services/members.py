import logging
import uuid
from datetime import date
from typing import List, Optional, Sequence
from glamping.schemas.member import (
    AIAnalysisResult,
    Member,
    MemberCreate,
    MemberHistory,
    MembershipTier,
    MemberUpdate,
)

logger = logging.getLogger(__name__)


def build_default_members() -> List[Member]:
    return [
        Member(
            id="1",
            name="林志豪",
            phone="0912-345-678",
            email="lin.c@example.com",
            location="台北市",
            tier=MembershipTier.PLATINUM,
            join_date="2022-05-12",
            total_visits=5,
            total_spend=85000,
            tags=["紅酒愛好者", "家庭客", "需要嬰兒床"],
            dietary_restrictions=["海鮮過敏"],
            preferences="喜歡高樓層視野，習慣下午喝手沖咖啡。",
            history=[
                MemberHistory(date="2023-12-24", stay_duration=2, accommodation_type="神殿帳", notes="聖誕節入住，安排了驚喜蛋糕"),
                MemberHistory(date="2023-08-10", stay_duration=1, accommodation_type="皇宮帳", notes=""),
            ],
            notes="林先生喜歡安靜，不喜歡太靠近公共區域的帳篷。對海鮮非常過敏，請廚房特別注意。",
        ),
        Member(
            id="2",
            name="陳怡君",
            phone="0987-654-321",
            email="yichun.chen@example.com",
            location="新竹市",
            tier=MembershipTier.DIAMOND,
            join_date="2021-11-03",
            total_visits=12,
            total_spend=240000,
            tags=["VIP", "高消費", "素食"],
            dietary_restrictions=["全素"],
            preferences="每次都需要安排瑜珈墊，喜歡早晨的冥想活動。",
            history=[
                MemberHistory(date="2024-01-15", stay_duration=3, accommodation_type="尊爵套房帳", notes="與朋友慶生"),
            ],
            notes="陳小姐是我們的VVIP，請務必提前準備好有機花茶。",
        ),
        Member(
            id="3",
            name="張建國",
            phone="0922-111-222",
            email="chang.jk@example.com",
            location="台中市",
            tier=MembershipTier.GOLD,
            join_date="2023-01-20",
            total_visits=2,
            total_spend=32000,
            tags=["攝影愛好者", "獨旅"],
            dietary_restrictions=[],
            preferences="喜歡日出時段攝影，請協助安排面東的帳篷。",
            notes="張先生有許多昂貴攝影器材，請房務整理時特別小心。",
        ),
    ]


def find_member_by_name(members: Sequence[Member], name: Optional[str]) -> Optional[Member]:
    """First member whose name matches exactly.

    Names are not unique; two members sharing a name resolve to whichever
    was registered first.
    """
    if not name:
        return None
    for member in members:
        if member.name == name:
            return member
    return None


def search_members(members: Sequence[Member], term: Optional[str]) -> List[Member]:
    if not term or not term.strip():
        return list(members)
    needle = term.strip().lower()
    return [
        m for m in members
        if needle in m.name.lower()
        or needle in m.phone
        or needle in m.location.lower()
        or any(needle in tag.lower() for tag in m.tags)
    ]


def create_member(data: MemberCreate, today: date) -> Member:
    return Member(
        id=uuid.uuid4().hex[:12],
        join_date=today.isoformat(),
        **data.model_dump(),
    )


def update_member(member: Member, changes: MemberUpdate) -> Member:
    return member.model_copy(update=changes.model_dump(exclude_unset=True))


def merge_analysis(member: Member, analysis: AIAnalysisResult) -> Member:
    """Fold AI-extracted facts into the profile without dropping existing ones."""
    def merged(existing: List[str], extra: List[str]) -> List[str]:
        return list(dict.fromkeys([*existing, *extra]))

    return member.model_copy(update={
        "dietary_restrictions": merged(member.dietary_restrictions, analysis.dietary_restrictions),
        "special_requests": merged(member.special_requests, analysis.special_requests),
        "tags": merged(member.tags, analysis.tags),
        "preferences": analysis.summary or member.preferences,
    })
