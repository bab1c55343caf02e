"""ReminderStore — JSON document holding the pending message queue."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from typing import TYPE_CHECKING

from src.config import settings
from src.scheduler.errors import StoreError
from src.scheduler.models import ReminderQueue

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


class ReminderStore:
    """Persists the reminder queue as a single JSON document.

    Singleton accessed via ``ReminderStore.get()``.  Pass an explicit *path*
    for test isolation (e.g. ``tmp_path / "reminders.json"``).

    The store does no locking of its own; callers serialise their
    load/mutate/commit cycles (see ``ReminderService``).
    """

    _instance: ReminderStore | None = None

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or settings.data_store_path
        self._missing_reported = False

    @classmethod
    def get(cls) -> ReminderStore:
        """Return the shared ReminderStore instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def _reset(cls) -> None:
        """Reset the singleton (for testing)."""
        cls._instance = None

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> ReminderQueue:
        """Read the full queue. A missing document yields an empty queue."""
        if not self._path.exists():
            # Warn once; the sweep loads every minute until the first commit.
            log = logger.debug if self._missing_reported else logger.warning
            log("Reminder store %s is missing; starting with an empty queue", self._path)
            self._missing_reported = True
            return ReminderQueue()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                msg = f"expected a JSON object, got {type(data).__name__}"
                raise TypeError(msg)
            return ReminderQueue.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as exc:
            msg = f"Could not read reminder store {self._path}: {exc}"
            raise StoreError(msg) from exc

    def commit(self, queue: ReminderQueue) -> None:
        """Atomically replace the stored queue via tempfile + fsync + os.replace()."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self._path.parent, suffix=".tmp")
        except OSError as exc:
            msg = f"Could not write reminder store {self._path}: {exc}"
            raise StoreError(msg) from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(queue.to_dict(), f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, self._path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                os.unlink(tmp)
            msg = f"Could not write reminder store {self._path}: {exc}"
            raise StoreError(msg) from exc
        logger.debug("Committed %d reminder(s) to %s", len(queue), self._path)
