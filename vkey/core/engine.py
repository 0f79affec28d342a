"""InputEngine - keystroke-in, edit-out facade over the composition core.

The engine owns the context registry (through ModeSwitch), classifies keys
with the active scheme, drives the CommitController and publishes every
edit and commit on the EventBus.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import vkey.log  # registers TRACE level and logger.trace()
from vkey.config import validate_config
from vkey.core.commit_controller import CommitController
from vkey.core.context import Context
from vkey.core.errors import ConfigError, UnknownContext
from vkey.core.event_bus import EventBus
from vkey.core.events import CommitEventData, EditEventData, Event, EventType, ModeEventData
from vkey.core.mode_switch import ModeSwitch
from vkey.core.schemes import classify, normalize_key
from vkey.core.types import (
    SHORTCUT_MODIFIERS,
    ControlKey,
    KeyInput,
    KeyModifier,
    KeyResult,
    OutputEncoding,
    ResultKind,
    Scheme,
)

logger = logging.getLogger(__name__)

CHORD_MODIFIERS = KeyModifier.SHIFT | KeyModifier.CTRL | KeyModifier.ALT | KeyModifier.SUPER

_MODIFIER_NAMES: dict[str, KeyModifier] = {
    "ctrl": KeyModifier.CTRL,
    "control": KeyModifier.CTRL,
    "shift": KeyModifier.SHIFT,
    "alt": KeyModifier.ALT,
    "super": KeyModifier.SUPER,
    "meta": KeyModifier.SUPER,
    "win": KeyModifier.SUPER,
    "cmd": KeyModifier.SUPER,
}


def parse_hotkey(spec: str) -> tuple[KeyModifier, str]:
    """Parse ``"ctrl+space"`` style chords into ``(modifiers, key)``."""
    modifiers = KeyModifier.NONE
    key = ""
    for part in (p.strip() for p in spec.split("+")):
        if not part:
            continue
        if part.lower() in _MODIFIER_NAMES:
            modifiers |= _MODIFIER_NAMES[part.lower()]
        elif key:
            raise ConfigError(f"Hotkey {spec!r} names more than one key")
        else:
            key = normalize_key(part)
    if not key:
        raise ConfigError(f"Hotkey {spec!r} has no key")
    return modifiers, key.lower()


class InputEngine:
    """Per-context keystroke processing with a shared configuration."""

    def __init__(self, config: Optional[dict] = None, event_bus: Optional[EventBus] = None, debug: bool = False):
        conf = validate_config(config or {})
        self.config = conf
        self.debug = debug or conf['debug']
        self.bus = event_bus if event_bus is not None else EventBus()

        self.controller = CommitController(
            modern_style=conf['modern_tone_style'],
            backspace_mode=conf['backspace_mode'],
            escape_restores_raw=conf['escape_restores_raw'],
            max_keys=conf['max_syllable_keys'],
            debug=self.debug,
        )
        self.mode = ModeSwitch(
            context_capacity=conf['context_capacity'],
            on_evict=self._on_evict,
            scheme=Scheme.parse(conf['scheme']),
            default_encoding=OutputEncoding.parse(conf['default_encoding']),
            per_app_encoding_overrides=conf['per_app_encoding_overrides'],
            vietnamese_mode=conf['vietnamese_mode'],
            auto_switch_enabled=conf['auto_mode_switch_enabled'],
            auto_switch_threshold=conf['auto_mode_switch_threshold'],
            remember_encoding=conf['remember_encoding'],
            debug=self.debug,
        )
        self.registry = self.mode.registry
        self.hotkey = parse_hotkey(conf['toggle_hotkey'])
        self._active_id: Optional[str] = None

    # ------------------------------------------------------------------
    # Contexts
    # ------------------------------------------------------------------

    @property
    def active_context_id(self) -> Optional[str]:
        return self._active_id

    def focus(self, context_id: str) -> Context:
        """Make *context_id* the active context, creating it on first focus.

        Whatever was being composed in the previously active context is
        committed first.
        """
        previous = self._active_id
        if previous is not None and previous != context_id:
            self.commit(previous)
        ctx = self.registry.focus(context_id)
        ctx.buffer.scheme = self.mode.scheme_for(context_id)
        self._active_id = context_id
        if previous != context_id:
            logger.debug("Focus: %s → %s", previous, context_id)
            self._emit(EventType.FOCUS_CHANGED, context_id)
        return ctx

    def _on_evict(self, ctx: Context) -> None:
        if ctx.buffer.is_composing:
            self.controller.release(ctx.buffer)
        if self._active_id == ctx.context_id:
            self._active_id = None
        self._emit(EventType.CONTEXT_EVICTED, ctx.context_id)

    def rendered(self, context_id: str) -> str:
        """Text of the composition currently shown in *context_id*."""
        ctx = self.registry.find(context_id)
        return ctx.buffer.last_rendered_text if ctx else ""

    # ------------------------------------------------------------------
    # Keystrokes
    # ------------------------------------------------------------------

    def _is_hotkey(self, key: KeyInput) -> bool:
        modifiers, hotkey = self.hotkey
        return (key.modifiers & CHORD_MODIFIERS) == modifiers and normalize_key(key.key).lower() == hotkey

    def handle_key(self, key: KeyInput) -> KeyResult:
        """Process one keystroke for its context and return the resulting edit."""
        ctx = self.registry.find(key.context_id)
        if ctx is None:
            logger.debug("Key for unknown context %r ignored", key.context_id)
            return KeyResult.ignored()

        if key.timestamp:
            if key.timestamp < ctx.last_timestamp:
                logger.warning("[%s] Out-of-order key %r (%.3f < %.3f)",
                               ctx.context_id, key.key, key.timestamp, ctx.last_timestamp)
            else:
                ctx.last_timestamp = key.timestamp

        if self._is_hotkey(key):
            self.toggle_mode()
            return KeyResult(ResultKind.MODE_TOGGLED, consumed=True)

        if key.modifiers & SHORTCUT_MODIFIERS:
            result = self.controller.commit(ctx.buffer)
            self._publish(ctx, result)
            return result

        scheme = self.mode.scheme_for(ctx.context_id)
        token = classify(scheme, key.key)
        logger.trace("[%s] key=%r token=%s", ctx.context_id, key.key, token.kind.name)  # type: ignore[attr-defined]
        is_boundary = token.control is ControlKey.WORD_BOUNDARY

        if not self.mode.should_convert(ctx.context_id):
            if is_boundary:
                self.mode.note_boundary(ctx)
            return KeyResult.passthrough()

        ctx.buffer.scheme = scheme
        result = self.controller.process(ctx.buffer, token)

        if is_boundary:
            self.mode.note_boundary(ctx)
        elif result.kind is ResultKind.EDIT and ctx.buffer.is_composing:
            syllable, _ = self.controller.rebuild(ctx.buffer)
            if self.mode.note_keystroke(ctx, syllable.valid):
                self.controller.release(ctx.buffer)

        self._publish(ctx, result)
        return result

    def type_keys(self, context_id: str, keys) -> list[KeyResult]:
        """Feed a sequence of keys (characters or key names) to *context_id*."""
        if context_id not in self.registry:
            self.focus(context_id)
        return [self.handle_key(KeyInput(context_id, k, timestamp=time.time())) for k in keys]

    # ------------------------------------------------------------------
    # Explicit requests
    # ------------------------------------------------------------------

    def commit(self, context_id: str) -> KeyResult:
        """Flush the composition of *context_id*; unknown contexts are a no-op."""
        try:
            ctx = self.registry.get(context_id)
        except UnknownContext as exc:
            logger.debug("%s, commit ignored", exc)
            return KeyResult.ignored()
        result = self.controller.commit(ctx.buffer)
        self._publish(ctx, result)
        return result

    def cancel(self, context_id: str) -> KeyResult:
        """Discard the composition of *context_id*; unknown contexts are a no-op."""
        try:
            ctx = self.registry.get(context_id)
        except UnknownContext as exc:
            logger.debug("%s, cancel ignored", exc)
            return KeyResult.ignored()
        result = self.controller.cancel(ctx.buffer)
        self._publish(ctx, result)
        return result

    def commit_all(self) -> None:
        for ctx in self.registry.contexts():
            if ctx.buffer.is_composing:
                self.commit(ctx.context_id)

    def toggle_mode(self, context_id: Optional[str] = None) -> bool:
        """Explicit user toggle of Vietnamese mode (global or per context)."""
        if context_id is None:
            self.commit_all()
        else:
            self.commit(context_id)
        enabled = self.mode.toggle(context_id)
        logger.info("Vietnamese mode %s%s", "on" if enabled else "off",
                    f" for {context_id}" if context_id else "")
        self.bus.publish(Event(EventType.MODE_CHANGED, ModeEventData(enabled, context_id), time.time()))
        return enabled

    def set_scheme(self, scheme: Scheme, context_id: Optional[str] = None) -> None:
        if context_id is None:
            self.commit_all()
        else:
            self.commit(context_id)
        self.mode.set_scheme(scheme, context_id)

    def set_encoding(self, encoding: OutputEncoding, context_id: Optional[str] = None) -> None:
        self.mode.set_encoding(encoding, context_id)
        self._emit(EventType.ENCODING_CHANGED, (context_id, encoding))

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _emit(self, event_type: EventType, data) -> None:
        self.bus.publish(Event(event_type, data, time.time()))

    def _publish(self, ctx: Context, result: KeyResult) -> None:
        if result.kind is ResultKind.EDIT:
            self._emit(EventType.EDIT, EditEventData(ctx.context_id, result.edit, result.previous, result.rendered))
        elif result.kind is ResultKind.COMMIT:
            self._emit(EventType.COMMIT, CommitEventData(ctx.context_id, result.committed, ctx.buffer.encoding, result.edit))
        elif result.kind is ResultKind.CANCEL:
            self._emit(EventType.CANCEL, EditEventData(ctx.context_id, result.edit, result.previous, result.rendered))
