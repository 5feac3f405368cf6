import threading
import pytest
import requests
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from glamping.db.database import init_db
from glamping.services import persistence
from glamping.services.persistence import SAVE_JOB_ID, LocalMirror, PantryClient, PersistenceService


class StubStore:
    def __init__(self, data=None, ok=True):
        self.data = data
        self.ok = ok
        self.saved = []

    def load(self):
        return self.data

    def save(self, data):
        self.saved.append(data)
        return self.ok


class SlowStore(StubStore):
    """Holds every save until released"""

    def __init__(self, release):
        super().__init__()
        self.release = release

    def save(self, data):
        self.release.wait(timeout=5)
        return super().save(data)


class FakeScheduler:
    running = True

    def __init__(self):
        self.jobs = []

    def add_job(self, func, **kwargs):
        self.jobs.append((func, kwargs))


class FakeResponse:
    def __init__(self, status_code, payload=None):
        self.status_code = status_code
        self.payload = payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}")

    def json(self):
        return self.payload


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


class TestPantryClient:
    def test_disabled_without_url(self):
        client = PantryClient(url="")
        assert not client.enabled
        assert client.load() is None
        assert client.save({"rooms": []}) is False

    def test_missing_basket(self, monkeypatch):
        monkeypatch.setattr(persistence.requests, "get", lambda *a, **kw: FakeResponse(404))
        assert PantryClient(url="https://pantry.test/basket").load() is None

    def test_load(self, monkeypatch):
        monkeypatch.setattr(persistence.requests, "get", lambda *a, **kw: FakeResponse(200, {"rooms": [1]}))
        assert PantryClient(url="https://pantry.test/basket").load() == {"rooms": [1]}

    def test_network_errors_are_swallowed(self, monkeypatch):
        def boom(*args, **kwargs):
            raise requests.ConnectionError("offline")

        monkeypatch.setattr(persistence.requests, "get", boom)
        monkeypatch.setattr(persistence.requests, "post", boom)
        client = PantryClient(url="https://pantry.test/basket")
        assert client.load() is None
        assert client.save({"rooms": []}) is False

    def test_save_server_error(self, monkeypatch):
        monkeypatch.setattr(persistence.requests, "post", lambda *a, **kw: FakeResponse(500))
        assert PantryClient(url="https://pantry.test/basket").save({}) is False


class TestLocalMirror:
    def test_roundtrip_and_overwrite(self, session_factory):
        mirror = LocalMirror(session_factory=session_factory)
        assert mirror.load() is None
        assert mirror.save({"rooms": [{"code": "尊1"}]})
        assert mirror.save({"rooms": [{"code": "12"}]})
        assert mirror.load() == {"rooms": [{"code": "12"}]}


class TestPersistenceService:
    def test_load_prefers_remote(self):
        service = PersistenceService(remote=StubStore({"from": "remote"}), mirror=StubStore({"from": "mirror"}))
        assert service.load() == {"from": "remote"}

    def test_load_falls_back_to_mirror(self):
        service = PersistenceService(remote=StubStore(None), mirror=StubStore({"from": "mirror"}))
        assert service.load() == {"from": "mirror"}

    def test_save_writes_both(self):
        remote, mirror = StubStore(), StubStore()
        service = PersistenceService(remote=remote, mirror=mirror)
        assert service.save({"a": 1}) == {"mirror": True, "remote": True}
        assert remote.saved == mirror.saved == [{"a": 1}]
        assert service.last_saved_at is not None

    def test_total_failure_leaves_timestamp(self):
        service = PersistenceService(remote=StubStore(ok=False), mirror=StubStore(ok=False))
        assert service.save({"a": 1}) == {"mirror": False, "remote": False}
        assert service.last_saved_at is None

    def test_broken_snapshot_is_not_raised(self):
        def snapshot():
            raise ValueError("bad state")

        service = PersistenceService(remote=StubStore(), mirror=StubStore())
        assert service.save_snapshot(snapshot) == {"mirror": False, "remote": False}

    def test_schedule_without_scheduler_saves_now(self):
        mirror = StubStore()
        service = PersistenceService(remote=StubStore(), mirror=mirror)
        service.schedule_save(lambda: {"a": 1})
        service.wait_for_pending(timeout=5)
        assert mirror.saved == [{"a": 1}]

    def test_immediate_save_does_not_block_caller(self):
        release = threading.Event()
        remote = SlowStore(release)
        service = PersistenceService(remote=remote, mirror=StubStore())
        service.schedule_save(lambda: {"a": 1})
        assert remote.saved == []
        release.set()
        service.wait_for_pending(timeout=5)
        assert remote.saved == [{"a": 1}]
        service.close()

    def test_schedule_debounces_on_running_scheduler(self):
        scheduler, mirror = FakeScheduler(), StubStore()
        service = PersistenceService(remote=StubStore(), mirror=mirror, scheduler=scheduler, debounce_seconds=2)
        service.schedule_save(lambda: {"a": 1})
        service.schedule_save(lambda: {"a": 2})
        assert mirror.saved == []
        assert len(scheduler.jobs) == 2
        func, kwargs = scheduler.jobs[-1]
        assert func == service.save_snapshot
        assert kwargs["id"] == SAVE_JOB_ID
        assert kwargs["replace_existing"] is True

    def test_mirror_backed_service(self, session_factory):
        service = PersistenceService(remote=PantryClient(url=""), mirror=LocalMirror(session_factory=session_factory))
        assert service.save({"totalBlanketStock": 40})["mirror"]
        assert service.load() == {"totalBlanketStock": 40}
