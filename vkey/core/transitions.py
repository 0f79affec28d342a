"""State transition rules for the composition state machine."""

from __future__ import annotations

from vkey.core.states import ComposeState


# Allowed transitions: {from_state: {event_name: to_state}}
TRANSITIONS: dict[ComposeState, dict[str, ComposeState]] = {
    ComposeState.IDLE: {
        "letter": ComposeState.COMPOSING,
    },
    ComposeState.COMPOSING: {
        "letter": ComposeState.COMPOSING,
        "modifier": ComposeState.COMPOSING,
        "backspace": ComposeState.COMPOSING,
        "backspace_empty": ComposeState.IDLE,
        "boundary": ComposeState.IDLE,
        "commit": ComposeState.IDLE,
        "escape": ComposeState.IDLE,
        "release": ComposeState.IDLE,
    },
}


def can_transition(from_state: ComposeState, event_name: str) -> bool:
    return event_name in TRANSITIONS.get(from_state, {})


def next_state(from_state: ComposeState, event_name: str) -> ComposeState:
    try:
        return TRANSITIONS[from_state][event_name]
    except KeyError:
        raise ValueError(f"No transition from {from_state!r} on event {event_name!r}")
