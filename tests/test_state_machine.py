import itertools

import pytest

from carebook.application.services.state_machine import (
    AppointmentEvent,
    AppointmentStatus,
    LEGAL_TRANSITIONS,
    can_transition,
    is_active,
    is_terminal,
    parse_status,
    parse_type,
    transition,
)
from carebook.exceptions import InvalidInput, InvalidTransition

LEGAL = {
    ("PENDING", "CONFIRMED"),
    ("PENDING", "CANCELLED"),
    ("CONFIRMED", "CANCELLED"),
    ("CONFIRMED", "COMPLETED"),
}


def test_legal_transitions_emit_their_event():
    assert transition("PENDING", "CONFIRMED") == AppointmentEvent.CONFIRMED
    assert transition("PENDING", "CANCELLED") == AppointmentEvent.CANCELLED
    assert transition("CONFIRMED", "CANCELLED") == AppointmentEvent.CANCELLED
    assert transition("CONFIRMED", "COMPLETED") == AppointmentEvent.COMPLETED


def test_every_other_pair_is_an_invalid_transition():
    statuses = [s.value for s in AppointmentStatus]
    for current, target in itertools.product(statuses, statuses):
        if (current, target) in LEGAL:
            assert can_transition(current, target)
            continue
        assert not can_transition(current, target)
        with pytest.raises(InvalidTransition) as excinfo:
            transition(current, target)
        assert excinfo.value.context == {"current_status": current, "requested_status": target}


def test_terminal_and_active_states():
    assert is_terminal("CANCELLED") and is_terminal("COMPLETED")
    assert not is_terminal("PENDING")
    assert is_active("PENDING") and is_active("CONFIRMED")
    assert not is_active("CANCELLED")
    assert LEGAL_TRANSITIONS[AppointmentStatus.COMPLETED] == frozenset()


def test_parsing_is_case_insensitive_and_strict():
    assert parse_status("confirmed") == AppointmentStatus.CONFIRMED
    assert parse_status(AppointmentStatus.PENDING) == AppointmentStatus.PENDING
    assert parse_type("telemedicine").value == "TELEMEDICINE"
    with pytest.raises(InvalidInput):
        parse_status("scheduled")
    with pytest.raises(InvalidInput):
        parse_type("HOME_VISIT")
