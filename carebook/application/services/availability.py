"""
Slot availability

Pure calendar helpers and the free-slot calculator. Times of day are handled
as minutes since midnight and rendered as zero-padded ``HH:MM`` strings, the
same form used as part of the booking key.
"""

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Iterable, Iterator, List, Optional, Union

from ...exceptions import InvalidInput

DEFAULT_WORKING_HOURS = "09:00-17:00"
DEFAULT_GRANULARITY_MINUTES = 30

TimeLike = Union[str, time]


@dataclass(frozen=True)
class WorkingHours:
    """Half-open range ``[start, end)`` in minutes since midnight."""

    start: int
    end: int

    @classmethod
    def parse(cls, value: str) -> "WorkingHours":
        try:
            start_str, end_str = value.split("-")
        except (AttributeError, ValueError):
            raise InvalidInput(f"Invalid working hours '{value}'. Use HH:MM-HH:MM")
        return cls(to_minutes(start_str), to_minutes(end_str))

    def __str__(self) -> str:
        return f"{format_minutes(self.start)}-{format_minutes(self.end)}"


def to_minutes(value: TimeLike) -> int:
    """Minutes since midnight for ``HH:MM``, ``HH:MM:SS`` or a ``time``."""
    if isinstance(value, time):
        return value.hour * 60 + value.minute
    text = str(value).strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.hour * 60 + parsed.minute
    raise InvalidInput(f"Invalid time '{value}'. Use HH:MM")


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def normalize_time(value: TimeLike) -> str:
    """Canonical ``HH:MM`` form of a time of day."""
    return format_minutes(to_minutes(value))


def parse_date(value: Union[str, date]) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError:
        raise InvalidInput(f"Invalid date '{value}'. Use YYYY-MM-DD")


def iter_slot_starts(hours: WorkingHours, granularity_minutes: int) -> Iterator[int]:
    """Yield ``start, start+g, ...`` while strictly before ``end``."""
    if granularity_minutes <= 0:
        raise InvalidInput("Slot granularity must be a positive number of minutes")
    current = hours.start
    while current < hours.end:
        yield current
        current += granularity_minutes


def resolve_working_hours(value: Optional[Union[str, WorkingHours]], default: str = DEFAULT_WORKING_HOURS) -> WorkingHours:
    if isinstance(value, WorkingHours):
        return value
    if value is None or not str(value).strip():
        return WorkingHours.parse(default)
    return WorkingHours.parse(value)


def compute_free_slots(
    working_hours: Optional[Union[str, WorkingHours]],
    granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
    booked_times: Iterable[TimeLike] = (),
) -> List[str]:
    """
    Free slot start times for one doctor on one day.

    Args:
        working_hours: ``WorkingHours``, ``"HH:MM-HH:MM"`` or None for the
            default 09:00-17:00 range
        granularity_minutes: distance between consecutive slot starts
        booked_times: start times of active (not cancelled) bookings

    Returns:
        list[str]: ascending ``HH:MM`` values of the grid not in booked_times.
        Empty when the range is empty.
    """
    hours = resolve_working_hours(working_hours)
    taken = {to_minutes(t) for t in booked_times}
    return [
        format_minutes(minute)
        for minute in iter_slot_starts(hours, granularity_minutes)
        if minute not in taken
    ]
