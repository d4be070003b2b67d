"""Error taxonomy for calendar requests."""

from __future__ import annotations


class CalendarError(RuntimeError):
    """Classified failure with a short, client-safe message."""

    status = 500

    def __init__(self, code: str, detail: str | None = None) -> None:
        self.code = code
        self.detail = detail
        message = f"{code}: {detail}" if detail else code
        super().__init__(message)


class InvalidInput(CalendarError):
    """Malformed or out-of-range client-supplied identifier."""

    status = 400


class NotFound(CalendarError):
    status = 404


class SynthesisFailed(CalendarError):
    """Upstream data or serialization failure. Never cached."""

    status = 500


class TimetableUnavailable(SynthesisFailed):
    status = 502


class CalendarSerializationError(SynthesisFailed):
    pass
