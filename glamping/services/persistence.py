"""Persistence of the whole console state as one JSON blob.

Two stores: the remote Pantry basket (shared between devices) and a local
mirror row in the ``kv_store`` table. Loading prefers the basket; saving
writes both. Nothing in here raises into room state: failures are logged
and reported as ``False``.
"""
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional
import requests
from apscheduler.triggers.date import DateTrigger
from glamping.core.config import settings
from glamping.crud.kv_store import kv_store_crud
from glamping.db.database import SessionLocal

logger = logging.getLogger(__name__)

STATE_KEY = "resort_state"
SAVE_JOB_ID = "persist_resort_state"


class PantryClient:
    def __init__(self, url: Optional[str] = None, timeout: Optional[int] = None):
        self.url = url if url is not None else settings.pantry_url
        self.timeout = timeout or settings.REMOTE_TIMEOUT_SECONDS

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    def load(self) -> Optional[Dict[str, Any]]:
        if not self.enabled:
            return None
        try:
            response = requests.get(
                self.url,
                headers={"Content-Type": "application/json", "Cache-Control": "no-store"},
                timeout=self.timeout,
            )
            if response.status_code == 404:
                logger.warning("Pantry basket not found, starting from defaults")
                return None
            response.raise_for_status()
            return response.json()
        except Exception as e:
            logger.error(f"Failed to fetch data from Pantry: {e}")
            return None

    def save(self, data: Dict[str, Any]) -> bool:
        if not self.enabled:
            return False
        try:
            response = requests.post(
                self.url,
                json=data,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            return True
        except Exception as e:
            logger.error(f"Failed to save data to Pantry: {e}")
            return False


class LocalMirror:
    def __init__(self, session_factory: Callable = SessionLocal, key: str = STATE_KEY):
        self.session_factory = session_factory
        self.key = key

    def load(self) -> Optional[Dict[str, Any]]:
        db = self.session_factory()
        try:
            return kv_store_crud.get_value(db, self.key)
        except Exception as e:
            logger.error(f"Failed to read local mirror: {e}")
            return None
        finally:
            db.close()

    def save(self, data: Dict[str, Any]) -> bool:
        db = self.session_factory()
        try:
            kv_store_crud.set_value(db, self.key, data)
            return True
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to write local mirror: {e}")
            return False
        finally:
            db.close()


class PersistenceService:
    def __init__(
        self,
        remote: Optional[PantryClient] = None,
        mirror: Optional[LocalMirror] = None,
        scheduler=None,
        debounce_seconds: Optional[float] = None,
    ):
        self.remote = remote or PantryClient()
        self.mirror = mirror or LocalMirror()
        self.scheduler = scheduler
        self.debounce_seconds = settings.SAVE_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        self.last_saved_at: Optional[datetime] = None
        # One worker so immediate saves land in request order
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="state-save")
        self._pending: Optional[Future] = None

    def load(self) -> Optional[Dict[str, Any]]:
        data = self.remote.load()
        if data:
            logger.info("📥 Loaded state from remote basket")
            return data

        data = self.mirror.load()
        if data:
            logger.info("📥 Loaded state from local mirror")
        return data

    def save(self, data: Dict[str, Any]) -> Dict[str, bool]:
        result = {
            "mirror": self.mirror.save(data),
            "remote": self.remote.save(data),
        }
        if any(result.values()):
            self.last_saved_at = datetime.now()
        else:
            logger.warning("⚠️ State could not be saved to any store")
        return result

    def save_snapshot(self, snapshot_fn: Callable[[], Dict[str, Any]]) -> Dict[str, bool]:
        try:
            data = snapshot_fn()
        except Exception as e:
            logger.error(f"Failed to build state snapshot: {e}")
            return {"mirror": False, "remote": False}
        return self.save(data)

    def schedule_save(self, snapshot_fn: Callable[[], Dict[str, Any]]) -> None:
        """Save shortly, collapsing a burst of changes into one write.

        The snapshot is taken when the job fires, so the last change wins.
        Without a running scheduler the save starts right away on a worker
        thread; the caller never waits on the stores.
        """
        if self.scheduler is None or not self.scheduler.running:
            self._save_in_background(snapshot_fn)
            return

        try:
            self.scheduler.add_job(
                self.save_snapshot,
                trigger=DateTrigger(run_date=datetime.now() + timedelta(seconds=self.debounce_seconds)),
                args=[snapshot_fn],
                id=SAVE_JOB_ID,
                name="Persist resort state",
                replace_existing=True,
            )
        except Exception as e:
            logger.error(f"Failed to schedule save, saving now: {e}")
            self._save_in_background(snapshot_fn)

    def _save_in_background(self, snapshot_fn: Callable[[], Dict[str, Any]]) -> None:
        self._pending = self._executor.submit(self.save_snapshot, snapshot_fn)

    def wait_for_pending(self, timeout: Optional[float] = None) -> None:
        """Block until the last immediate save has finished."""
        pending = self._pending
        if pending is not None:
            pending.result(timeout=timeout)

    def close(self) -> None:
        self._executor.shutdown(wait=True)
