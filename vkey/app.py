"""VKeyApp - evdev daemon wiring the InputEngine to the focused X11 window.

The daemon listens to input devices without grabbing them, so every
physical key also reaches the application.  Edits are therefore computed
against what the screen shows after that echo, not against the engine's
own previous rendering.
"""

from __future__ import annotations

import logging
import os
import signal

import vkey.log  # registers TRACE level and logger.trace()
from vkey.config import ConfigManager
from vkey.core.commit_controller import compute_edit
from vkey.core.engine import InputEngine
from vkey.core.event_bus import EventBus
from vkey.core.event_manager import EventManager
from vkey.core.events import Event, EventType
from vkey.core.types import KeyInput, KeyModifier, KeyResult, OutputEncoding, ResultKind, Scheme
from vkey.input import key_mapper as km

logger = logging.getLogger(__name__)

_MODIFIER_FLAGS: dict[int, KeyModifier] = {
    **{code: KeyModifier.SHIFT for code in km.SHIFT_KEYS},
    **{code: KeyModifier.CTRL for code in km.CTRL_KEYS},
    **{code: KeyModifier.ALT for code in km.ALT_KEYS},
    **{code: KeyModifier.SUPER for code in km.META_KEYS},
}

_ECHO_TEXT = {km.KEY_ENTER: "\n", km.KEY_KPENTER: "\n", km.KEY_TAB: "\t"}


def echoed_screen(previous: str, keycode: int, echo: str) -> str:
    """What the application shows once the physical key has landed."""
    if keycode == km.KEY_BACKSPACE:
        return previous[:-1]
    return previous + echo


class VKeyApp:
    """Vietnamese input daemon.

    ``_init_platform()`` is separated from ``__init__`` so that tests
    can inject mocks without touching real X11 / evdev resources.
    """

    def __init__(
        self,
        debug: bool = False,
        config_path: str | None = None,
        scheme: str | None = None,
        encoding: str | None = None,
    ):
        self.debug = debug
        self._running = False

        self.config = ConfigManager(config_path=config_path, debug=debug)
        if scheme:
            self.config.set('scheme', scheme)
        if encoding:
            self.config.set('default_encoding', encoding)
        if debug:
            self.config.set('debug', True)

        self.event_bus = EventBus()
        self.engine = InputEngine(self.config.get_all(), event_bus=self.event_bus, debug=debug)

        self._modifiers = KeyModifier.NONE

        # Platform adapters, created by _init_platform()
        self.system = None
        self.window = None
        self.virtual_kb = None
        self.output = None
        self.device_manager = None
        self.event_manager: EventManager | None = None

    # ------------------------------------------------------------------
    # Platform initialisation
    # ------------------------------------------------------------------

    def _init_platform(self):
        """Initialise platform components (X11, uinput, evdev devices)."""
        from vkey.input.device_manager import DeviceManager
        from vkey.input.virtual_keyboard import VirtualKeyboard
        from vkey.platform.output_sink import OutputSink
        from vkey.platform.subprocess_impl import SubprocessSystemAdapter
        from vkey.platform.window_adapter import X11WindowAdapter

        self.system = SubprocessSystemAdapter(debug=self.debug)
        try:
            self.window = X11WindowAdapter(debug=self.debug)
        except Exception as exc:
            raise RuntimeError(f"X11 unavailable: {exc}") from exc

        self.virtual_kb = VirtualKeyboard(debug=self.debug)
        if not self.virtual_kb.available:
            raise RuntimeError("Cannot create the uinput virtual keyboard")

        self.output = OutputSink(self.virtual_kb, self.system, debug=self.debug)
        self.event_manager = EventManager(self.event_bus, debug=self.debug)
        self.device_manager = DeviceManager(debug=self.debug)
        self.device_manager.exclude_name(VirtualKeyboard.DEVICE_NAME)

    # ------------------------------------------------------------------
    # Event bus wiring
    # ------------------------------------------------------------------

    def _wire_event_bus(self):
        self.event_bus.subscribe(EventType.KEY_PRESS, self._on_key_press)
        self.event_bus.subscribe(EventType.KEY_REPEAT, self._on_key_press)
        self.event_bus.subscribe(EventType.KEY_RELEASE, self._on_key_release)
        self.event_bus.subscribe(EventType.MOUSE_CLICK, self._on_mouse_click)
        self.event_bus.subscribe(EventType.MODE_CHANGED, self._on_mode_changed)
        self.event_bus.subscribe(EventType.ENCODING_CHANGED, self._on_encoding_changed)

    # ------------------------------------------------------------------
    # Event callbacks
    # ------------------------------------------------------------------

    def _focused_context(self) -> str:
        context_id = self.window.active_context_id()
        if context_id != self.engine.active_context_id:
            self.engine.focus(context_id)
        return context_id

    def _on_key_press(self, event: Event):
        code = event.data.code
        if code in _MODIFIER_FLAGS:
            self._modifiers |= _MODIFIER_FLAGS[code]
            return
        if code == km.KEY_CAPSLOCK:
            if event.data.value == 1:
                self._modifiers ^= KeyModifier.CAPSLOCK
            return

        context_id = self._focused_context()
        if code in km.NAVIGATION_KEYS:
            self._drop_composition(context_id, "navigation")
            return

        shift = bool(self._modifiers & KeyModifier.SHIFT)
        caps = bool(self._modifiers & KeyModifier.CAPSLOCK)
        key = km.keycode_to_key(code, shift=shift, capslock=caps)
        if not key:
            # Function keys and the like: finish the word, type nothing
            self._drop_composition(context_id, f"key {code}")
            return

        result = self.engine.handle_key(KeyInput(context_id, key, self._modifiers, event.timestamp))
        self._apply(result, code, self._echo_for(code))

    def _on_key_release(self, event: Event):
        code = event.data.code
        if code in _MODIFIER_FLAGS:
            self._modifiers &= ~_MODIFIER_FLAGS[code]

    def _on_mouse_click(self, event: Event):
        context_id = self.engine.active_context_id
        if context_id is not None:
            self._drop_composition(context_id, "mouse click")

    def _on_mode_changed(self, event: Event):
        logger.info("Vietnamese mode: %s", "on" if event.data.enabled else "off")

    def _on_encoding_changed(self, event: Event):
        context_id, encoding = event.data
        if context_id is None or not self.config.get('remember_encoding'):
            return
        self.config.remember_app_encoding(context_id, encoding.value)
        self.config.save()

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _echo_for(self, code: int) -> str:
        """Text the physical key inserts by itself."""
        if self._modifiers & (KeyModifier.CTRL | KeyModifier.ALT | KeyModifier.SUPER):
            return ""
        if code in _ECHO_TEXT:
            return _ECHO_TEXT[code]
        return km.keycode_to_char(
            code,
            shift=bool(self._modifiers & KeyModifier.SHIFT),
            capslock=bool(self._modifiers & KeyModifier.CAPSLOCK),
        )

    def _apply(self, result: KeyResult, code: int, echo: str) -> None:
        if result.kind not in (ResultKind.EDIT, ResultKind.COMMIT, ResultKind.CANCEL):
            return
        screen = echoed_screen(result.previous, code, echo)
        target = result.rendered if result.consumed else result.rendered + echo
        edit = compute_edit(screen, target)
        logger.trace("Screen %r → %r: %s", screen, target, edit)  # type: ignore[attr-defined]
        self.output.apply(edit)

    def _drop_composition(self, context_id: str, reason: str) -> None:
        """The caret moved: finish the word where it stands.

        The edit is dropped since the caret is no longer after the word, so a
        word committed this way stays in Unicode under a legacy encoding.
        """
        result = self.engine.commit(context_id)
        if result.kind is ResultKind.COMMIT and not result.edit.is_noop:
            logger.warning("[%s] Caret moved (%s), %r left in Unicode instead of %s",
                           context_id, reason, result.previous, self.engine.mode.encoding_for(context_id).value)

    # ------------------------------------------------------------------
    # Runtime settings
    # ------------------------------------------------------------------

    def reload_config(self) -> None:
        """Re-read the config file and rebuild the engine from it."""
        if not self.config.reload():
            return
        self.engine.commit_all()
        self.engine = InputEngine(self.config.get_all(), event_bus=self.event_bus, debug=self.debug)
        self.event_bus.publish(Event(EventType.CONFIG_CHANGED, self.config.get_all(), 0.0))
        logger.info("Config reloaded")

    def set_scheme(self, scheme: str) -> None:
        self.engine.set_scheme(Scheme.parse(scheme))

    def set_encoding(self, encoding: str, context_id: str | None = None) -> None:
        self.engine.set_encoding(OutputEncoding.parse(encoding), context_id)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------

    def run(self):
        """Blocking main event loop."""
        if not os.environ.get('DISPLAY'):
            raise RuntimeError("VKey requires X11 (DISPLAY is not set)")

        self._init_platform()
        self._wire_event_bus()

        count = self.device_manager.scan_devices()
        self._running = True
        logger.info("VKey started (%d devices, scheme %s)", count, self.engine.mode.scheme.value)

        def _reload_handler(signum, frame):
            self.reload_config()
        signal.signal(signal.SIGHUP, _reload_handler)

        self._run_evdev_loop()

    def _run_evdev_loop(self):
        import time

        last_scan = time.monotonic()
        try:
            while self._running:
                for device, event in self.device_manager.get_events(timeout=0.1):
                    self.event_manager.handle_raw_event(event, device.name)
                if time.monotonic() - last_scan > self.device_manager.RESCAN_INTERVAL:
                    self.device_manager.rescan()
                    last_scan = time.monotonic()
        except KeyboardInterrupt:
            pass
        finally:
            self.stop()

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    def request_stop(self):
        """Ask the event loop to exit after the current batch of events."""
        self._running = False

    def stop(self):
        """Graceful shutdown; safe to call multiple times."""
        self._running = False
        self.engine.commit_all()
        self.event_bus.publish(Event(EventType.APP_QUIT, None, 0.0))
        if self.device_manager:
            self.device_manager.close()
            self.device_manager = None
        if self.virtual_kb:
            self.virtual_kb.close()
            self.virtual_kb = None
        if self.window:
            self.window.close()
            self.window = None
