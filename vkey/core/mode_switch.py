"""ModeSwitch: whether, how and into which encoding each context converts.

``should_convert`` combines three inputs, strongest first:

* an explicit per-context toggle by the user;
* the global Vietnamese/English mode;
* the auto-suspend heuristic: after more than ``auto_switch_threshold``
  consecutive keystrokes whose syllable is invalid, the rest of the word
  passes through untouched.  The suspension lifts at the next word boundary.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import vkey.log  # registers TRACE level and logger.trace()
from vkey.core.context import DEFAULT_CAPACITY, Context, ContextRegistry
from vkey.core.types import OutputEncoding, Scheme

logger = logging.getLogger(__name__)


class ModeSwitch:
    """Per-context conversion policy backed by a ContextRegistry."""

    def __init__(
        self,
        registry: Optional[ContextRegistry] = None,
        context_capacity: int = DEFAULT_CAPACITY,
        on_evict: Optional[Callable[[Context], None]] = None,
        scheme: Scheme = Scheme.TELEX,
        default_encoding: OutputEncoding = OutputEncoding.UNICODE,
        per_app_encoding_overrides: Optional[dict[str, str]] = None,
        vietnamese_mode: bool = True,
        auto_switch_enabled: bool = False,
        auto_switch_threshold: int = 3,
        remember_encoding: bool = True,
        debug: bool = False,
    ):
        if registry is None:
            registry = ContextRegistry(context_capacity, factory=self.new_context, on_evict=on_evict)
        self.registry = registry
        self.scheme = scheme
        self.default_encoding = default_encoding
        self.overrides: dict[str, OutputEncoding] = {
            app: OutputEncoding.parse(enc) for app, enc in (per_app_encoding_overrides or {}).items()
        }
        self.enabled = vietnamese_mode
        self.auto_switch_enabled = auto_switch_enabled
        self.auto_switch_threshold = auto_switch_threshold
        self.remember_encoding = remember_encoding
        self.debug = debug

    # ------------------------------------------------------------------
    # Context creation
    # ------------------------------------------------------------------

    def _override_for(self, context_id: str) -> Optional[OutputEncoding]:
        if context_id in self.overrides:
            return self.overrides[context_id]
        lowered = context_id.lower()
        for app, enc in self.overrides.items():
            if app.lower() == lowered:
                return enc
        return None

    def new_context(self, context_id: str) -> Context:
        """Registry factory: new contexts start with their remembered encoding."""
        return Context(context_id=context_id, encoding=self._override_for(context_id) or self.default_encoding)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def should_convert(self, context_id: str) -> bool:
        ctx = self.registry.find(context_id)
        if ctx is None:
            return self.enabled
        if ctx.enabled_override is not None:
            return ctx.enabled_override
        return self.enabled and not ctx.auto_suspended

    def scheme_for(self, context_id: str) -> Scheme:
        ctx = self.registry.find(context_id)
        if ctx is not None and ctx.scheme is not None:
            return ctx.scheme
        return self.scheme

    def encoding_for(self, context_id: str) -> OutputEncoding:
        ctx = self.registry.find(context_id)
        if ctx is not None:
            return ctx.encoding
        return self._override_for(context_id) or self.default_encoding

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def set_enabled(self, enabled: bool, context_id: Optional[str] = None) -> None:
        """Set the global mode, or an explicit override for one context."""
        if context_id is None:
            self.enabled = enabled
            logger.debug("Vietnamese mode: %s", "on" if enabled else "off")
            return
        ctx = self.registry.focus(context_id)
        ctx.enabled_override = enabled
        ctx.auto_suspended = False
        logger.debug("[%s] Vietnamese mode override: %s", context_id, "on" if enabled else "off")

    def toggle(self, context_id: Optional[str] = None) -> bool:
        """Flip the global mode (or a context override); returns the new value."""
        new_value = not (self.enabled if context_id is None else self.should_convert(context_id))
        self.set_enabled(new_value, context_id)
        return new_value

    def clear_override(self, context_id: str) -> None:
        ctx = self.registry.find(context_id)
        if ctx is not None:
            ctx.enabled_override = None

    def set_scheme(self, scheme: Scheme, context_id: Optional[str] = None) -> None:
        if context_id is None:
            self.scheme = scheme
        else:
            self.registry.focus(context_id).scheme = scheme
        logger.debug("Scheme %s%s", scheme.value, f" for {context_id}" if context_id else "")

    def set_encoding(self, encoding: OutputEncoding, context_id: Optional[str] = None) -> None:
        """Change the output encoding globally or for one application.

        With ``remember_encoding`` the per-app choice is kept in the override
        map, so the app gets it back after its context is evicted.
        """
        if context_id is None:
            self.default_encoding = encoding
            for ctx in self.registry.contexts():
                if self._override_for(ctx.context_id) is None:
                    ctx.encoding = ctx.buffer.encoding = encoding
            return
        ctx = self.registry.focus(context_id)
        ctx.encoding = encoding
        ctx.buffer.encoding = encoding
        if self.remember_encoding:
            self.overrides[context_id] = encoding
        logger.debug("[%s] Encoding %s", context_id, encoding.value)

    def overrides_as_config(self) -> dict[str, str]:
        return {app: enc.value for app, enc in self.overrides.items()}

    # ------------------------------------------------------------------
    # Heuristic
    # ------------------------------------------------------------------

    def note_keystroke(self, ctx: Context, syllable_valid: bool) -> bool:
        """Feed the invalid-syllable streak; returns True when *ctx* just got suspended."""
        if syllable_valid:
            ctx.invalid_streak = 0
            return False
        ctx.invalid_streak += 1
        if (
            self.auto_switch_enabled
            and ctx.enabled_override is None
            and not ctx.auto_suspended
            and ctx.invalid_streak > self.auto_switch_threshold
        ):
            ctx.auto_suspended = True
            logger.debug("[%s] Auto-suspended after %d invalid keystrokes", ctx.context_id, ctx.invalid_streak)
            return True
        return False

    def note_boundary(self, ctx: Context) -> None:
        if ctx.auto_suspended:
            logger.debug("[%s] Auto-suspension lifted", ctx.context_id)
        ctx.invalid_streak = 0
        ctx.auto_suspended = False
