"""
Domain errors for the diary core.
Routers translate them into HTTP responses; weather and location errors never fail a write.
"""


class DiaryError(Exception):
    """Base class for diary domain errors."""


class NotFoundError(DiaryError):
    """An update referenced an event id that is not in the store."""

    def __init__(self, event_id: str):
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id


class InvalidInputError(DiaryError):
    """Malformed user input (glucose level, sun duration, fluid amount, unknown type)."""


class PhaseConflictError(DiaryError):
    """Sleep action does not match the current cycle phase (e.g. sleep_start while already asleep)."""


class WeatherFetchError(DiaryError):
    """Upstream weather call failed: transport error, non-2xx status or unreadable body."""


class LocationUnavailable(DiaryError):
    """Location provider could not produce a position (denied, no fix)."""
