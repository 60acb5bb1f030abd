from enum import Enum
from typing import TypeVar, Generic

from caseta_codec.utils.logging import get_logger

logger = get_logger(__name__)

StateT = TypeVar("StateT", bound=Enum)
EventT = TypeVar("EventT", bound=Enum)


class TransitionError(ValueError):
    """Raised by a strict state machine for an event its current state can't handle."""

    def __init__(self, state: Enum, event: Enum):
        self.state = state
        self.event = event
        super().__init__(f"Event {event} is not valid in state {state}")


class StateMachine(Generic[StateT, EventT]):
    """
    Generic, typed state machine base class for Enum-based states and events.
    Subclass and specify StateT and EventT as Enum types for your domain.

    Example:
        class MyStates(Enum): ...
        class MyEvents(Enum): ...
        class MySM(StateMachine[MyStates, MyEvents]):
            TRANSITIONS = {
                MyStates.STOPPED: {MyEvents.START: MyStates.RUNNING},
                ...
            }

    A subclass that sets STRICT = True raises TransitionError for
    unhandled events instead of logging them and staying put.
    """
    TRANSITIONS: dict[StateT, dict[EventT, StateT]] = {}
    STRICT: bool = False

    def __init__(self, initial_state: StateT | None = None):
        if initial_state is not None:
            state = initial_state
        else:
            state = self._default_state()
        self.state: StateT = state

    def _default_state(self) -> StateT:
        # Returns the first value in the StateT enum, inferred from the first key in TRANSITIONS
        for key in self.TRANSITIONS.keys():
            enum_cls = type(key)
            return next(iter(enum_cls))
        raise NotImplementedError("State enum type could not be determined from TRANSITIONS. Please override _default_state().")

    def can_handle(self, event: EventT) -> bool:
        return event in self.TRANSITIONS.get(self.state, {})

    def on_event(self, event: EventT) -> StateT:
        """
        Transition to the next state based on the current state and event.
        """
        if not isinstance(event, Enum):
            raise TypeError("EventT must be an Enum instance")
        transitions = self.TRANSITIONS.get(self.state, {})
        next_state = transitions.get(event)
        if next_state is None:
            if self.STRICT:
                raise TransitionError(self.state, event)
            logger.warning(f"Unhandled event {event} in state {self.state}")
        else:
            logger.debug(f"{self.__class__.__name__}: {self.state.name} --{event.name}--> {next_state.name}")
            self.state = next_state
        return self.state

    def __repr__(self):
        return f"<{self.__class__.__name__} state={self.state}>"

    def __str__(self):
        return f"<{self.__class__.__name__} state={self.state}>"
