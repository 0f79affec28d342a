"""VirtualKeyboard - evdev.UInput device used to erase composed text."""

from __future__ import annotations

import logging
import time
from typing import Any

from vkey.input.key_mapper import KEY_BACKSPACE

logger = logging.getLogger(__name__)


class VirtualKeyboard:
    """Creates and manages a UInput virtual keyboard device."""

    DEVICE_NAME = "VKey Virtual Keyboard"

    # Pause between press/release and between taps; many toolkits drop
    # events that arrive faster than their input loop runs
    KEY_PRESS_DELAY = 0.001
    KEY_REPEAT_DELAY = 0.001

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._uinput: Any = None
        self._open()

    def _open(self) -> None:
        try:
            import evdev
            self._uinput = evdev.UInput(name=self.DEVICE_NAME)
        except (OSError, ImportError) as e:
            logger.warning("Cannot create UInput device: %s", e)

    @property
    def available(self) -> bool:
        return self._uinput is not None

    def tap_key(self, keycode: int, n_times: int = 1) -> None:
        """Press and release a keycode n times."""
        for i in range(n_times):
            self._write(keycode, 1)
            time.sleep(self.KEY_PRESS_DELAY)
            self._write(keycode, 0)
            if i < n_times - 1:
                time.sleep(self.KEY_REPEAT_DELAY)

    def backspace(self, count: int) -> None:
        """Erase *count* characters before the caret."""
        if count > 0:
            self.tap_key(KEY_BACKSPACE, count)

    def _write(self, code: int, value: int) -> None:
        if self._uinput is None:
            return
        try:
            from evdev import ecodes
            self._uinput.write(ecodes.EV_KEY, code, value)
            self._uinput.syn()
        except OSError as e:
            logger.debug("VirtualKeyboard write error: %s", e)

    def close(self) -> None:
        if self._uinput is not None:
            try:
                self._uinput.close()
            except OSError:
                pass
            self._uinput = None
