"""Composition states and the per-context CompositionBuffer."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto

from vkey.core.types import KeystrokeToken, OutputEncoding, Scheme


class ComposeState(Enum):
    IDLE = auto()
    COMPOSING = auto()


@dataclass
class CompositionBuffer:
    context_id: str
    scheme: Scheme = Scheme.TELEX
    encoding: OutputEncoding = OutputEncoding.UNICODE
    state: ComposeState = ComposeState.IDLE

    # Single source of truth; everything else is derived from it
    keystroke_history: list[KeystrokeToken] = field(default_factory=list)
    last_rendered_text: str = ""

    @property
    def is_composing(self) -> bool:
        return self.state is ComposeState.COMPOSING

    @property
    def raw_text(self) -> str:
        """The keys typed so far, verbatim."""
        return "".join(t.raw for t in self.keystroke_history)

    def reset(self) -> None:
        """Clear history and rendering, back to Idle."""
        self.keystroke_history.clear()
        self.last_rendered_text = ""
        self.state = ComposeState.IDLE
