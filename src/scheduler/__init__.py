"""Scheduled message engine — models, persistence, lifecycle, dispatch and paging."""

from src.scheduler.engine import DispatchSweep
from src.scheduler.errors import ScheduleValidationError, SessionExpiredError, StoreError
from src.scheduler.models import Destination, ReminderQueue, ScheduledMessage
from src.scheduler.service import ReminderService
from src.scheduler.session import PaginationSession
from src.scheduler.store import ReminderStore
from src.scheduler.validation import DueDate

__all__ = [
    "Destination",
    "DispatchSweep",
    "DueDate",
    "PaginationSession",
    "ReminderQueue",
    "ReminderService",
    "ReminderStore",
    "ScheduleValidationError",
    "ScheduledMessage",
    "SessionExpiredError",
    "StoreError",
]
