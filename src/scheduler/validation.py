"""Validation rules for new scheduled messages.

Checks run in a fixed order and stop at the first failure:
calendar/time validity, future time, body length, attachment count,
attachment URLs, then destination.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from src.scheduler.errors import (
    BodyTooLongError,
    InvalidDateError,
    MalformedUrlError,
    NoDestinationError,
    PastTimeError,
    TooManyAttachmentsError,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from src.scheduler.models import Destination

_url_adapter = TypeAdapter(AnyUrl)


@dataclass(frozen=True)
class DueDate:
    """Wall-clock date and time as entered by a user.

    When ``year`` is omitted the earliest future occurrence is used: this
    year, or next year if that moment has already passed.
    """

    month: int
    day: int
    hour: int
    minute: int
    year: int | None = None


def is_valid_time(hour: int, minute: int) -> bool:
    return 0 <= hour <= 23 and 0 <= minute <= 59


def _local_epoch(year: int, due: DueDate, tz: ZoneInfo) -> int:
    """Build the epoch for *due* in *year*. Raises ValueError on impossible dates."""
    dt = datetime(year, due.month, due.day, due.hour, due.minute, tzinfo=tz)
    return int(dt.timestamp())


def resolve_due_time(due: DueDate, *, now: int, timezone: str) -> int:
    """Convert a user-entered date into a Unix timestamp.

    Raises ``InvalidDateError`` for out-of-range times and dates that do not
    exist on the calendar (31 April, 29 February outside leap years). Dates
    are never normalised into the following month.
    """
    if not is_valid_time(due.hour, due.minute):
        raise InvalidDateError

    tz = ZoneInfo(timezone)
    year = due.year
    if year is None:
        year = datetime.fromtimestamp(now, tz).year
        try:
            if _local_epoch(year, due, tz) < now:
                year += 1
        except ValueError:
            year += 1

    try:
        return _local_epoch(year, due, tz)
    except (ValueError, OverflowError) as exc:
        raise InvalidDateError from exc


def is_valid_url(value: str) -> bool:
    """Return True if *value* parses as an absolute URL."""
    try:
        _url_adapter.validate_python(value)
    except PydanticValidationError:
        return False
    return True


def validate_schedule(
    *,
    due_at: int,
    now: int,
    body: str,
    attachments: Sequence[str],
    destination: Destination | None,
    max_body_length: int,
    max_attachments: int,
) -> None:
    """Raise the first applicable ``ScheduleValidationError``, if any."""
    if due_at <= now:
        raise PastTimeError
    if len(body) > max_body_length:
        raise BodyTooLongError(
            f"Your total message length cannot be more than {max_body_length} characters long."
        )
    if len(attachments) > max_attachments:
        raise TooManyAttachmentsError(f"You can only attach up to {max_attachments} links.")
    if not all(is_valid_url(link) for link in attachments):
        raise MalformedUrlError
    if destination is None or not destination.is_addressable:
        raise NoDestinationError
