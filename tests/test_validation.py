"""Tests for schedule validation rules."""

from datetime import UTC, datetime

import pytest

from src.scheduler.errors import (
    BodyTooLongError,
    InvalidDateError,
    MalformedUrlError,
    NoDestinationError,
    PastTimeError,
    ScheduleValidationError,
    TooManyAttachmentsError,
)
from src.scheduler.models import Destination
from src.scheduler.validation import (
    DueDate,
    is_valid_time,
    is_valid_url,
    resolve_due_time,
    validate_schedule,
)

NOW = 1_800_000_000  # 2027-01-15 08:00:00 UTC
DEST = Destination(channel="telegram", chat_id="-100123")


def _epoch(*args: int) -> int:
    return int(datetime(*args, tzinfo=UTC).timestamp())


def _validate(**overrides) -> None:
    kwargs = {
        "due_at": NOW + 60,
        "now": NOW,
        "body": "hello",
        "attachments": [],
        "destination": DEST,
        "max_body_length": 1800,
        "max_attachments": 10,
    }
    kwargs.update(overrides)
    validate_schedule(**kwargs)


# -- Time of day -----------------------------------------------------------------


@pytest.mark.parametrize(
    ("hour", "minute", "valid"),
    [(0, 0, True), (23, 59, True), (24, 0, False), (12, 60, False), (-1, 0, False)],
)
def test_is_valid_time(hour: int, minute: int, valid: bool) -> None:
    assert is_valid_time(hour, minute) is valid


# -- resolve_due_time ------------------------------------------------------------


def test_resolve_explicit_date() -> None:
    due = DueDate(year=2027, month=3, day=1, hour=23, minute=59)
    assert resolve_due_time(due, now=NOW, timezone="UTC") == _epoch(2027, 3, 1, 23, 59)


def test_resolve_respects_timezone() -> None:
    due = DueDate(year=2027, month=3, day=1, hour=9, minute=0)
    # Berlin is UTC+1 in March before DST starts.
    assert resolve_due_time(due, now=NOW, timezone="Europe/Berlin") == _epoch(2027, 3, 1, 8, 0)


@pytest.mark.parametrize(("hour", "minute"), [(24, 0), (10, 60)])
def test_resolve_rejects_out_of_range_time(hour: int, minute: int) -> None:
    due = DueDate(year=2027, month=3, day=1, hour=hour, minute=minute)
    with pytest.raises(InvalidDateError):
        resolve_due_time(due, now=NOW, timezone="UTC")


def test_resolve_rejects_april_31() -> None:
    due = DueDate(year=2027, month=4, day=31, hour=10, minute=0)
    with pytest.raises(InvalidDateError):
        resolve_due_time(due, now=NOW, timezone="UTC")


def test_resolve_rejects_month_13() -> None:
    due = DueDate(year=2027, month=13, day=1, hour=10, minute=0)
    with pytest.raises(InvalidDateError):
        resolve_due_time(due, now=NOW, timezone="UTC")


def test_resolve_rejects_feb_29_outside_leap_year() -> None:
    due = DueDate(year=2027, month=2, day=29, hour=10, minute=0)
    with pytest.raises(InvalidDateError):
        resolve_due_time(due, now=NOW, timezone="UTC")


def test_resolve_without_year_uses_this_year_when_future() -> None:
    due = DueDate(month=6, day=1, hour=12, minute=0)
    assert resolve_due_time(due, now=NOW, timezone="UTC") == _epoch(2027, 6, 1, 12, 0)


def test_resolve_without_year_rolls_to_next_year_when_past() -> None:
    due = DueDate(month=1, day=1, hour=12, minute=0)
    assert resolve_due_time(due, now=NOW, timezone="UTC") == _epoch(2028, 1, 1, 12, 0)


def test_resolve_without_year_keeps_exact_now() -> None:
    # Equal to now is not rolled forward; the future check rejects it later.
    due = DueDate(month=1, day=15, hour=8, minute=0)
    assert resolve_due_time(due, now=NOW, timezone="UTC") == NOW


def test_resolve_without_year_feb_29_rolls_to_leap_year() -> None:
    # Feb 29 2027 does not exist, so the next year is tried.
    due = DueDate(month=2, day=29, hour=10, minute=0)
    assert resolve_due_time(due, now=NOW, timezone="UTC") == _epoch(2028, 2, 29, 10, 0)


# -- URLs ------------------------------------------------------------------------


@pytest.mark.parametrize(
    "url",
    ["https://example.com/cat.png", "http://example.com", "https://cdn.example.org/a/b?c=d"],
)
def test_valid_urls(url: str) -> None:
    assert is_valid_url(url)


@pytest.mark.parametrize("url", ["not-a-url", "", "example.com/cat.png", "/relative/path"])
def test_invalid_urls(url: str) -> None:
    assert not is_valid_url(url)


# -- validate_schedule -----------------------------------------------------------


def test_valid_request_passes() -> None:
    _validate()


def test_due_equal_to_now_rejected() -> None:
    with pytest.raises(PastTimeError):
        _validate(due_at=NOW)


def test_due_in_past_rejected() -> None:
    with pytest.raises(PastTimeError):
        _validate(due_at=NOW - 1)


def test_body_limit() -> None:
    _validate(body="x" * 1800)
    with pytest.raises(BodyTooLongError) as exc_info:
        _validate(body="x" * 1801)
    assert "1800" in str(exc_info.value)


def test_attachment_count_limit() -> None:
    links = [f"https://example.com/{i}.png" for i in range(11)]
    _validate(attachments=links[:10])
    with pytest.raises(TooManyAttachmentsError):
        _validate(attachments=links)


def test_one_malformed_attachment_rejected() -> None:
    with pytest.raises(MalformedUrlError):
        _validate(attachments=["https://a.io/1", "not-a-url", "https://a.io/3"])


def test_missing_destination_rejected() -> None:
    with pytest.raises(NoDestinationError):
        _validate(destination=None)
    with pytest.raises(NoDestinationError):
        _validate(destination=Destination(channel="telegram", chat_id=""))


# -- Precedence ------------------------------------------------------------------


def test_past_time_reported_before_body_length() -> None:
    with pytest.raises(PastTimeError):
        _validate(due_at=NOW, body="x" * 5000)


def test_body_length_reported_before_attachments() -> None:
    with pytest.raises(BodyTooLongError):
        _validate(body="x" * 1801, attachments=["bad"] * 20)


def test_attachment_count_reported_before_url_shape() -> None:
    with pytest.raises(TooManyAttachmentsError):
        _validate(attachments=["bad"] * 11)


def test_url_shape_reported_before_destination() -> None:
    with pytest.raises(MalformedUrlError):
        _validate(attachments=["bad"], destination=None)


def test_all_errors_share_base_and_message() -> None:
    for error_cls in (
        InvalidDateError,
        PastTimeError,
        BodyTooLongError,
        TooManyAttachmentsError,
        MalformedUrlError,
        NoDestinationError,
    ):
        exc = error_cls()
        assert isinstance(exc, ScheduleValidationError)
        assert str(exc)
