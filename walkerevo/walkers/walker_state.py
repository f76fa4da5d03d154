from enum import Enum

from walkerevo.exceptions import WalkerStateError


class WalkerState(str, Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"


VALID_TRANSITIONS: dict[WalkerState, set[WalkerState]] = {
    WalkerState.IDLE: {WalkerState.EVALUATING},
    WalkerState.EVALUATING: {WalkerState.IDLE},
}


def is_valid_transition(current: WalkerState, new: WalkerState) -> bool:
    return new in VALID_TRANSITIONS.get(current, set())


def validate_transition(current: WalkerState, new: WalkerState) -> None:
    if not is_valid_transition(current, new):
        valid_next = VALID_TRANSITIONS.get(current, set())
        raise WalkerStateError(
            f"Invalid walker transition: {current.value} -> {new.value}. "
            f"Valid transitions from {current.value}: {[s.value for s in valid_next]}"
        )
