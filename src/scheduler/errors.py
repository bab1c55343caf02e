"""Errors raised by the scheduled message engine."""


class ScheduleValidationError(ValueError):
    """A schedule request was rejected. ``str(exc)`` is safe to show the user."""

    message = "Invalid scheduled message."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class InvalidDateError(ScheduleValidationError):
    message = "Please provide a valid date and time."


class PastTimeError(ScheduleValidationError):
    message = "Please provide a date and time in the future."


class BodyTooLongError(ScheduleValidationError):
    message = "Your total message length cannot be more than 1800 characters long."


class TooManyAttachmentsError(ScheduleValidationError):
    message = "You can only attach up to 10 links."


class MalformedUrlError(ScheduleValidationError):
    message = (
        "Please provide valid URLs for attachments.\n\n"
        "URLs must be absolute, for example https://example.com/image.png."
    )


class NoDestinationError(ScheduleValidationError):
    message = "This command can only be used in a chat the bot can read and send messages in."


class StoreError(RuntimeError):
    """The reminder document could not be read or written."""


class SessionExpiredError(RuntimeError):
    """An action was attempted on an expired /messages session."""
