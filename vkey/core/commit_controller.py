"""CommitController: drives a CompositionBuffer through Idle/Composing.

Every key that changes the composition re-renders it from the full history
and returns the minimal edit between the previous and the new rendering.
"""

from __future__ import annotations

import logging

import vkey.log  # registers TRACE level and logger.trace()
from vkey.core.rebuild import rebuild, render
from vkey.core.states import CompositionBuffer
from vkey.core.syllable import Syllable
from vkey.core.transcoder import transcode
from vkey.core.transitions import can_transition, next_state
from vkey.core.types import ControlKey, Edit, KeyResult, KeystrokeToken, ResultKind, TokenKind

logger = logging.getLogger(__name__)

BACKSPACE_MODES = ("keystroke", "character")


def compute_edit(old: str, new: str) -> Edit:
    """Keep the common prefix of *old* and *new*; replace only the rest."""
    limit = min(len(old), len(new))
    prefix = 0
    while prefix < limit and old[prefix] == new[prefix]:
        prefix += 1
    return Edit(delete_count=len(old) - prefix, insert_text=new[prefix:])


class CommitController:
    """Applies tokens to composition buffers and decides when to commit."""

    def __init__(
        self,
        modern_style: bool = True,
        backspace_mode: str = "keystroke",
        escape_restores_raw: bool = False,
        max_keys: int = 12,
        debug: bool = False,
    ):
        if backspace_mode not in BACKSPACE_MODES:
            raise ValueError(f"Unknown backspace mode: {backspace_mode!r}")
        self.modern_style = modern_style
        self.backspace_mode = backspace_mode
        self.escape_restores_raw = escape_restores_raw
        self.max_keys = max_keys
        self.debug = debug

    def _transition(self, buffer: CompositionBuffer, event_name: str) -> bool:
        if not can_transition(buffer.state, event_name):
            logger.trace("Ignored transition %r from %s", event_name, buffer.state)  # type: ignore[attr-defined]
            return False
        new_state = next_state(buffer.state, event_name)
        if new_state is not buffer.state:
            logger.debug("[%s] State: %s → %s (on %r)", buffer.context_id, buffer.state, new_state, event_name)
        buffer.state = new_state
        return True

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def rebuild(self, buffer: CompositionBuffer) -> tuple[Syllable, str]:
        return rebuild(buffer.keystroke_history, self.modern_style)

    def render(self, buffer: CompositionBuffer) -> str:
        return render(*self.rebuild(buffer))

    def _rerender(self, buffer: CompositionBuffer) -> KeyResult:
        previous = buffer.last_rendered_text
        text = self.render(buffer)
        edit = compute_edit(previous, text)
        buffer.last_rendered_text = text
        logger.trace("[%s] %r → %r %s", buffer.context_id, previous, text, edit)  # type: ignore[attr-defined]
        return KeyResult(ResultKind.EDIT, edit, previous=previous, rendered=text, consumed=True)

    # ------------------------------------------------------------------
    # Token handling
    # ------------------------------------------------------------------

    def process(self, buffer: CompositionBuffer, token: KeystrokeToken) -> KeyResult:
        """Route one classified token to the matching operation."""
        if token.kind is TokenKind.CONTROL:
            if token.control is ControlKey.BACKSPACE:
                return self.backspace(buffer)
            if token.control is ControlKey.ESCAPE:
                return self.cancel(buffer)
            return self.commit(buffer, boundary=token.raw)
        return self.feed(buffer, token)

    def feed(self, buffer: CompositionBuffer, token: KeystrokeToken) -> KeyResult:
        """Append a non-control token and re-render."""
        if not buffer.is_composing:
            if not token.starts_composition:
                return KeyResult.passthrough()
            self._transition(buffer, "letter")
        elif len(buffer.keystroke_history) >= self.max_keys:
            logger.debug("[%s] Composition reached %d keys, committing", buffer.context_id, self.max_keys)
            return self.commit(buffer)
        else:
            self._transition(buffer, "letter" if token.kind is TokenKind.LETTER else "modifier")

        buffer.keystroke_history.append(token)
        return self._rerender(buffer)

    def backspace(self, buffer: CompositionBuffer) -> KeyResult:
        """Pop the last keystroke (or the last visible character) and re-render."""
        if not buffer.is_composing:
            return KeyResult.passthrough()

        previous = buffer.last_rendered_text
        history = buffer.keystroke_history
        history.pop()
        if self.backspace_mode == "character":
            while history and len(render(*rebuild(history, self.modern_style))) >= len(previous):
                history.pop()

        if not history:
            self._transition(buffer, "backspace_empty")
            buffer.reset()
            return KeyResult(ResultKind.EDIT, compute_edit(previous, ""), previous=previous, consumed=True)

        self._transition(buffer, "backspace")
        return self._rerender(buffer)

    def commit(self, buffer: CompositionBuffer, boundary: str = "") -> KeyResult:
        """Flush the composition through the transcoder and go Idle.

        *boundary* (space, punctuation, newline) is appended untouched.
        """
        if not buffer.is_composing:
            return KeyResult.passthrough()

        previous = buffer.last_rendered_text
        committed = transcode(self.render(buffer), buffer.encoding) + boundary
        edit = compute_edit(previous, committed)
        self._transition(buffer, "boundary" if boundary else "commit")
        buffer.reset()
        logger.debug("[%s] Commit %r (%s)", buffer.context_id, committed, buffer.encoding.value)
        return KeyResult(
            ResultKind.COMMIT, edit,
            committed=committed, previous=previous, rendered=committed,
            consumed=bool(boundary),
        )

    def cancel(self, buffer: CompositionBuffer) -> KeyResult:
        """Discard the composition without committing anything."""
        if not buffer.is_composing:
            return KeyResult.passthrough()

        previous = buffer.last_rendered_text
        target = buffer.raw_text if self.escape_restores_raw else ""
        edit = compute_edit(previous, target)
        self._transition(buffer, "escape")
        buffer.reset()
        return KeyResult(ResultKind.CANCEL, edit, previous=previous, rendered=target, consumed=True)

    def release(self, buffer: CompositionBuffer) -> str:
        """Stop composing and leave the rendered text as it is on screen."""
        text = buffer.last_rendered_text
        if buffer.is_composing:
            self._transition(buffer, "release")
            buffer.reset()
        return text
