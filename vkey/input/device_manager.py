"""DeviceManager - opens keyboards and mice, multiplexes their events."""

from __future__ import annotations

import logging
import selectors
import threading
from typing import Any, Callable, Dict, Iterator, Optional

try:
    import evdev
    from evdev import ecodes

    EVDEV_AVAILABLE = True
except ImportError:  # pragma: no cover
    evdev = None  # type: ignore[assignment]
    ecodes = None  # type: ignore[assignment]
    EVDEV_AVAILABLE = False

from vkey.input.device_filter import should_include_device

logger = logging.getLogger(__name__)


class DeviceManager:
    """Tracks physical evdev devices; ``rescan`` picks up hot-plugged ones."""

    RESCAN_INTERVAL = 2.0

    def __init__(
        self,
        debug: bool = False,
        on_device_added: Optional[Callable[[Any], None]] = None,
        on_device_removed: Optional[Callable[[Any], None]] = None,
    ):
        self.debug = debug
        self.devices: Dict[str, Any] = {}
        self.selector = selectors.DefaultSelector()
        self.on_device_added = on_device_added
        self.on_device_removed = on_device_removed
        self._lock = threading.Lock()
        self._excluded_names: set[str] = set()

    def exclude_name(self, name: str) -> None:
        """Never open devices whose name contains *name*."""
        self._excluded_names.add(name)

    @property
    def device_count(self) -> int:
        return len(self.devices)

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def scan_devices(self) -> int:
        """Open every suitable device under /dev/input; returns how many were added."""
        if not EVDEV_AVAILABLE:  # pragma: no cover
            logger.warning("evdev not available, no input devices")
            return 0
        return sum(1 for path in evdev.list_devices() if self.add_device(path))

    rescan = scan_devices

    def is_suitable(self, device: Any) -> bool:
        name = device.name
        if any(excluded in name for excluded in self._excluded_names):
            return False
        if not should_include_device(name):
            return False
        keys = device.capabilities().get(ecodes.EV_KEY, [])
        return ecodes.KEY_A in keys or ecodes.BTN_LEFT in keys

    def add_device(self, path: str) -> bool:
        with self._lock:
            if path in self.devices:
                return False
            try:
                device = evdev.InputDevice(path)
            except OSError as exc:
                logger.debug("Cannot open %s: %s", path, exc)
                return False
            if not self.is_suitable(device):
                device.close()
                return False
            self.devices[path] = device
            self.selector.register(device, selectors.EVENT_READ)
        logger.info("Device added: %s (%s)", device.name, path)
        if self.on_device_added:
            self.on_device_added(device)
        return True

    def remove_device(self, path: str) -> bool:
        with self._lock:
            device = self.devices.pop(path, None)
            if device is None:
                return False
            try:
                self.selector.unregister(device)
            except (KeyError, ValueError):
                pass
            try:
                device.close()
            except OSError:
                pass
        logger.info("Device removed: %s (%s)", getattr(device, "name", "?"), path)
        if self.on_device_removed:
            self.on_device_removed(device)
        return True

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def get_events(self, timeout: float = 0.1) -> Iterator[tuple]:
        """Yield ``(device, event)`` pairs from devices with pending input.

        A device that fails to read (unplugged) is dropped.
        """
        for key, _mask in self.selector.select(timeout=timeout):
            device = key.fileobj
            try:
                for event in device.read():
                    yield device, event
            except OSError as exc:
                logger.debug("Read error on %s: %s", device.name, exc)
                self.remove_device(device.path)

    def close(self) -> None:
        for path in list(self.devices):
            self.remove_device(path)
        self.selector.close()

    def __enter__(self) -> "DeviceManager":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> bool:
        self.close()
        return False
