"""Error taxonomy for the rules engine.

``ValidationError`` is the only error a caller of :func:`decide` should ever
see for a bad command. ``InvariantViolation`` never escapes :func:`fold`;
``DataCorruption`` never escapes an event store read.
"""

from __future__ import annotations

from .enums import RejectionReason


class FortressError(Exception):
    """Base class for every error raised by the rules engine."""


class ValidationError(FortressError):
    """A command broke a precondition; no events were produced."""

    def __init__(self, reason: RejectionReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"reason": self.reason.value, "message": self.message}


class ConcurrencyConflict(ValidationError):
    """The stream moved on between reading state and appending events."""

    def __init__(self, stream_id: str, expected: int, actual: int) -> None:
        super().__init__(
            RejectionReason.CONCURRENCY_CONFLICT,
            f"stream {stream_id!r} is at version {actual}, expected {expected}",
        )
        self.stream_id = stream_id
        self.expected = expected
        self.actual = actual


class InvariantViolation(FortressError):
    """Applying an event would leave the state inconsistent."""


class DataCorruption(FortressError):
    """A persisted event could not be decoded."""

    def __init__(
        self, detail: str, *, stream_id: str | None = None, sequence: int | None = None
    ) -> None:
        location = f"{stream_id or '?'}#{sequence if sequence is not None else '?'}"
        super().__init__(f"corrupt event at {location}: {detail}")
        self.stream_id = stream_id
        self.sequence = sequence
