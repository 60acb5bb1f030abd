from enum import Enum, auto

import pytest

from caseta_codec.caseta.connection import SessionStateMachine
from caseta_codec.caseta.types import SessionEvent, SessionState
from caseta_codec.utils.state import StateMachine, TransitionError

class DummyStates(Enum):
    INIT = auto()
    RUNNING = auto()
    STOPPED = auto()

class DummyEvents(Enum):
    START = auto()
    STOP = auto()

class DummyStateMachine(StateMachine[DummyStates, DummyEvents]):
    TRANSITIONS = {
        DummyStates.INIT: {DummyEvents.START: DummyStates.RUNNING},
        DummyStates.RUNNING: {DummyEvents.STOP: DummyStates.STOPPED},
        DummyStates.STOPPED: {},
    }

class StrictDummyStateMachine(DummyStateMachine):
    STRICT = True

def test_default_state():
    sm = DummyStateMachine()
    assert sm.state == DummyStates.INIT

def test_transition_start_stop():
    sm = DummyStateMachine()
    sm.on_event(DummyEvents.START)
    assert sm.state == DummyStates.RUNNING
    sm.on_event(DummyEvents.STOP)
    assert sm.state == DummyStates.STOPPED

def test_unhandled_event():
    sm = DummyStateMachine()
    sm.on_event(DummyEvents.STOP)  # Should not change state
    assert sm.state == DummyStates.INIT

def test_strict_unhandled_event():
    sm = StrictDummyStateMachine()
    with pytest.raises(TransitionError) as excinfo:
        sm.on_event(DummyEvents.STOP)
    assert excinfo.value.state == DummyStates.INIT
    assert excinfo.value.event == DummyEvents.STOP
    assert sm.state == DummyStates.INIT

def test_non_enum_event():
    sm = DummyStateMachine()
    with pytest.raises(TypeError):
        sm.on_event("START")

def test_can_handle():
    sm = DummyStateMachine()
    assert sm.can_handle(DummyEvents.START)
    assert not sm.can_handle(DummyEvents.STOP)

def test_session_handshake_order():
    sm = SessionStateMachine()
    assert sm.state == SessionState.UNOPENED
    assert not sm.is_handshaking

    for event in (
        SessionEvent.CONNECTED,
        SessionEvent.LOGIN_PROMPT_RECEIVED,
        SessionEvent.PASSWORD_PROMPT_RECEIVED,
    ):
        sm.on_event(event)
        assert sm.is_handshaking

    sm.on_event(SessionEvent.LOGGED_IN)
    assert sm.state == SessionState.READY

def test_session_steps_cannot_be_skipped():
    sm = SessionStateMachine()
    sm.on_event(SessionEvent.CONNECTED)
    with pytest.raises(TransitionError):
        sm.on_event(SessionEvent.PASSWORD_PROMPT_RECEIVED)
    assert sm.state == SessionState.AWAITING_LOGIN_PROMPT

def test_failed_session_stays_failed():
    sm = SessionStateMachine(SessionState.READY)
    sm.on_event(SessionEvent.FAILED)
    sm.on_event(SessionEvent.CLOSED)
    assert sm.state == SessionState.FAILED
    with pytest.raises(TransitionError):
        sm.on_event(SessionEvent.CONNECTED)
