"""
Slot Availability Filter

Computes the bookable start times for a single calendar day from a fixed
catalog of candidate slots and the day's existing bookings.

Two checks are offered:

- ``available_slots``: point containment. A candidate is taken when it falls
  inside ``[start, end)`` of an existing booking. This is the behaviour the
  public endpoint uses by default. It can admit a multi-hour request whose
  tail collides with a later booking.
- ``available_slots_for_duration``: interval overlap. A candidate is taken
  when ``[candidate, candidate + duration)`` intersects any booking.
"""

from typing import Any, Iterable, List, Mapping, Sequence, Tuple

from bodyshop.scheduling.timeutils import to_minutes

DEFAULT_SLOTS: Tuple[str, ...] = (
    "09:00", "10:00", "11:00", "12:00", "13:00", "14:00", "15:00", "16:00", "17:00",
)


def _booked_intervals(bookings: Iterable[Mapping[str, Any]]) -> List[Tuple[int, int]]:
    intervals = []
    for booking in bookings:
        if booking.get("status") == "cancelled":
            continue
        intervals.append((to_minutes(booking["start_time"]), to_minutes(booking["end_time"])))
    return intervals


def available_slots(
    bookings: Iterable[Mapping[str, Any]],
    catalog: Sequence[str] = DEFAULT_SLOTS,
) -> List[str]:
    """
    Returns the catalog slots whose start is not inside any booked interval.

    Args:
        bookings: the day's bookings, each with ``start_time``/``end_time``
        catalog: ordered candidate start times

    Returns:
        list[str]: free candidates, in catalog order
    """
    intervals = _booked_intervals(bookings)

    free = []
    for slot in catalog:
        slot_start = to_minutes(slot)
        if any(start <= slot_start < end for start, end in intervals):
            continue
        free.append(slot)
    return free


def available_slots_for_duration(
    bookings: Iterable[Mapping[str, Any]],
    duration_minutes: int,
    catalog: Sequence[str] = DEFAULT_SLOTS,
) -> List[str]:
    """
    Returns the catalog slots where a ``duration_minutes`` long job fits
    without overlapping any booked interval.
    """
    intervals = _booked_intervals(bookings)

    free = []
    for slot in catalog:
        slot_start = to_minutes(slot)
        slot_end = slot_start + duration_minutes
        # overlap: start < other_end AND end > other_start
        if any(slot_start < end and slot_end > start for start, end in intervals):
            continue
        free.append(slot)
    return free
