from datetime import date, datetime
import pytest
from fastapi.testclient import TestClient
from glamping.api.deps import get_state_service
from glamping.core.exceptions import AIServiceError
from glamping.main import app
from glamping.schemas.member import AIAnalysisResult
from glamping.schemas.room import build_default_rooms
from glamping.services.state_service import ResortStateService

NOW = datetime(2026, 3, 10, 9, 0)
TODAY = NOW.date()


class FakeAI:
    """Stands in for the Azure OpenAI collaborator"""

    def __init__(self):
        self.image_rows = []
        self.image_error = None
        self.analysis = AIAnalysisResult(
            dietary_restrictions=["不吃牛"],
            special_requests=["嬰兒床"],
            tags=["家庭客", "回頭客"],
            summary="重視隱私的家庭客",
        )

    def analyze_member_notes(self, notes):
        return self.analysis

    def generate_welcome_message(self, member):
        return f"歡迎 {member.name}"

    def generate_daily_briefing(self, stats):
        return "briefing"

    def generate_kitchen_advice(self, date, meal_stats):
        return f"advice for {meal_stats['dinner']}"

    def analyze_occupancy_image(self, base64_image, mime_type="image/jpeg"):
        if self.image_error:
            raise AIServiceError(self.image_error)
        return self.image_rows


class RecordingPersistence:
    """Keeps every requested snapshot instead of writing anywhere"""

    def __init__(self, data=None, fail=False):
        self.data = data
        self.fail = fail
        self.snapshots = []
        self.last_saved_at = None

    def load(self):
        return self.data

    def schedule_save(self, snapshot_fn):
        if self.fail:
            raise RuntimeError("basket unreachable")
        self.snapshots.append(snapshot_fn())

    def save_snapshot(self, snapshot_fn):
        self.snapshots.append(snapshot_fn())


@pytest.fixture
def rooms():
    return build_default_rooms()


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def fake_ai():
    return FakeAI()


@pytest.fixture
def persistence():
    return RecordingPersistence()


@pytest.fixture
def clock():
    current = {"now": NOW}

    def now():
        return current["now"]

    now.set = lambda value: current.update(now=value)
    return now


@pytest.fixture
def service(persistence, fake_ai, clock):
    return ResortStateService(persistence=persistence, ai=fake_ai, clock=clock, auto_checkout_hour=11)


@pytest.fixture
def client(service):
    app.dependency_overrides[get_state_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()
