"""Interval-overlap checks run before an appointment is written."""

from datetime import datetime

from backend.models.appointment import Appointment
from backend.storage import AppointmentStore


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open interval test: ``[start_a, end_a)`` and ``[start_b, end_b)`` share an instant.

    Intervals that only touch (one ends exactly when the other starts) do not overlap.
    """
    return start_a < end_b and end_a > start_b


def check_conflicts(
    store: AppointmentStore,
    start_time: datetime | None,
    end_time: datetime | None,
    exclude_id: int | None = None,
) -> list[Appointment]:
    """Return every stored appointment whose interval overlaps the candidate.

    ``exclude_id`` skips the appointment being edited so it never collides with
    itself. Without both bounds there is nothing to compare and no conflicts are
    reported.
    """
    if start_time is None or end_time is None:
        return []

    return [
        existing
        for existing in store.list_appointments()
        if existing.id != exclude_id
        and overlaps(start_time, end_time, existing.start_time, existing.end_time)
    ]
