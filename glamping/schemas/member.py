import enum
from typing import List, Optional
from glamping.schemas.base import CamelModel


class MembershipTier(str, enum.Enum):
    CLASSIC = "經典會員"
    GOLD = "黃金會員"
    PLATINUM = "白金會員"
    DIAMOND = "黑鑽尊榮"


class MemberHistory(CamelModel):
    date: str
    stay_duration: int  # nights
    accommodation_type: str
    notes: str = ""


class MemberBase(CamelModel):
    name: str
    location: str = ""
    phone: str = ""
    email: str = ""
    birthday: Optional[str] = None
    tier: MembershipTier = MembershipTier.CLASSIC
    tags: List[str] = []
    dietary_restrictions: List[str] = []
    special_requests: List[str] = []
    preferences: str = ""
    notes: str = ""


class MemberCreate(MemberBase):
    pass


class MemberUpdate(CamelModel):
    name: Optional[str] = None
    location: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    birthday: Optional[str] = None
    tier: Optional[MembershipTier] = None
    tags: Optional[List[str]] = None
    dietary_restrictions: Optional[List[str]] = None
    special_requests: Optional[List[str]] = None
    preferences: Optional[str] = None
    notes: Optional[str] = None


class Member(MemberBase):
    id: str
    join_date: str
    total_visits: int = 0
    total_spend: float = 0
    history: List[MemberHistory] = []


class AIAnalysisResult(CamelModel):
    dietary_restrictions: List[str] = []
    special_requests: List[str] = []
    tags: List[str] = []
    summary: str = ""
    suggested_actions: List[str] = []


class MemberAnalysis(CamelModel):
    member: Member
    analysis: AIAnalysisResult


class WelcomeMessage(CamelModel):
    member_id: str
    message: str
