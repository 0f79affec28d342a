"""IWindowAdapter interface and X11WindowAdapter.

The focused window's WM_CLASS is the context id: one composition buffer
and one remembered output encoding per application.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)

UNKNOWN_CONTEXT = "unknown"


class IWindowAdapter(ABC):
    @abstractmethod
    def active_context_id(self) -> str: ...

    def close(self) -> None:
        pass


class X11WindowAdapter(IWindowAdapter):
    """Reads ``_NET_ACTIVE_WINDOW`` through python-xlib."""

    def __init__(self, debug: bool = False) -> None:
        from Xlib import display

        self.debug = debug
        self._display = display.Display()
        self._root = self._display.screen().root
        self._net_active_window = self._display.intern_atom("_NET_ACTIVE_WINDOW")

    def _active_window(self):
        from Xlib import X

        prop = self._root.get_full_property(self._net_active_window, X.AnyPropertyType)
        if prop is None or not prop.value:
            return None
        window_id = prop.value[0]
        if window_id == X.NONE:
            return None
        return self._display.create_resource_object("window", window_id)

    def active_context_id(self) -> str:
        """WM_CLASS class name of the focused window, or ``"unknown"``."""
        from Xlib.error import XError

        try:
            window = self._active_window()
            wm_class = window.get_wm_class() if window is not None else None
        except XError as exc:
            logger.debug("Active window lookup failed: %s", exc)
            return UNKNOWN_CONTEXT
        if not wm_class:
            return UNKNOWN_CONTEXT
        # (instance, class); the class names the application
        return wm_class[-1] or UNKNOWN_CONTEXT

    def close(self) -> None:
        self._display.close()
