from enum import Enum
from typing import Dict, FrozenSet

from ...exceptions import InvalidInput, InvalidTransition


class AppointmentStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class AppointmentType(str, Enum):
    IN_PERSON = "IN_PERSON"
    TELEMEDICINE = "TELEMEDICINE"


class AppointmentEvent(str, Enum):
    CREATED = "CREATED"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    RESCHEDULED = "RESCHEDULED"


# Statuses that occupy a slot
ACTIVE_STATUSES: FrozenSet[AppointmentStatus] = frozenset({
    AppointmentStatus.PENDING,
    AppointmentStatus.CONFIRMED,
})

LEGAL_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED}),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}

TRANSITION_EVENTS: Dict[AppointmentStatus, AppointmentEvent] = {
    AppointmentStatus.CONFIRMED: AppointmentEvent.CONFIRMED,
    AppointmentStatus.CANCELLED: AppointmentEvent.CANCELLED,
    AppointmentStatus.COMPLETED: AppointmentEvent.COMPLETED,
}


def parse_status(value) -> AppointmentStatus:
    try:
        return AppointmentStatus(str(getattr(value, "value", value)).upper())
    except ValueError:
        valid = [s.value for s in AppointmentStatus]
        raise InvalidInput(f"Invalid status. Must be one of: {valid}")


def parse_type(value) -> AppointmentType:
    try:
        return AppointmentType(str(getattr(value, "value", value)).upper())
    except ValueError:
        valid = [t.value for t in AppointmentType]
        raise InvalidInput(f"Invalid appointment type. Must be one of: {valid}")


def is_active(status) -> bool:
    return parse_status(status) in ACTIVE_STATUSES


def is_terminal(status) -> bool:
    return not LEGAL_TRANSITIONS[parse_status(status)]


def can_transition(current, target) -> bool:
    return parse_status(target) in LEGAL_TRANSITIONS[parse_status(current)]


def transition(current, target) -> AppointmentEvent:
    """Validate ``current -> target`` and return the event it emits."""
    current_status = parse_status(current)
    target_status = parse_status(target)
    if target_status not in LEGAL_TRANSITIONS[current_status]:
        raise InvalidTransition(current_status.value, target_status.value)
    return TRANSITION_EVENTS[target_status]
