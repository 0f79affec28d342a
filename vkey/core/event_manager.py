"""EventManager - turns raw evdev events into typed events on the EventBus."""

from __future__ import annotations

import logging
import time

import vkey.log  # registers TRACE level and logger.trace()
from vkey.core.event_bus import EventBus
from vkey.core.events import Event, EventType, KeyEventData

logger = logging.getLogger(__name__)

MOUSE_BUTTONS = {272, 273, 274}  # BTN_LEFT, BTN_RIGHT, BTN_MIDDLE

# Used when evdev is not importable
EV_KEY = 1

_VALUE_TO_TYPE = {
    0: EventType.KEY_RELEASE,
    1: EventType.KEY_PRESS,
    2: EventType.KEY_REPEAT,
}


class EventManager:
    """Classifies raw input events and publishes them."""

    def __init__(self, event_bus: EventBus, debug: bool = False):
        self.bus = event_bus
        self.debug = debug
        try:
            from evdev import ecodes
            self._ev_key = ecodes.EV_KEY
        except ImportError:
            self._ev_key = EV_KEY

    def handle_raw_event(self, event, device_name: str = "") -> None:
        """Publish KEY_PRESS / KEY_RELEASE / KEY_REPEAT for an EV_KEY event.

        Mouse buttons only produce MOUSE_CLICK, and only on press; any click
        may have moved the caret.
        """
        if getattr(event, "type", None) != self._ev_key:
            return

        code, value = event.code, event.value
        if self.debug:
            logger.trace("RawEvent: dev=%s code=%d value=%d", device_name, code, value)  # type: ignore[attr-defined]

        data = KeyEventData(code=code, value=value, device_name=device_name)
        if code in MOUSE_BUTTONS:
            if value == 1:
                self.bus.publish(Event(EventType.MOUSE_CLICK, data, time.time()))
            return

        event_type = _VALUE_TO_TYPE.get(value)
        if event_type is not None:
            self.bus.publish(Event(event_type, data, time.time()))
