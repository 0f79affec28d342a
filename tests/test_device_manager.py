"""Tests for vkey.input.device_manager - fully mocked evdev."""

from __future__ import annotations

import types
from unittest.mock import MagicMock

import pytest

import vkey.input.device_manager as dm_mod
from vkey.input.device_manager import DeviceManager

# ---------------------------------------------------------------------------
# Fake evdev so we never touch real devices
# ---------------------------------------------------------------------------

_fake_ecodes = types.SimpleNamespace(EV_KEY=1, KEY_A=30, BTN_LEFT=0x110, BTN_RIGHT=0x111)


def _make_device(
    name: str = "Test Keyboard",
    path: str = "/dev/input/event0",
    keys: tuple = (30,),
) -> MagicMock:
    dev = MagicMock()
    dev.name = name
    dev.path = path
    dev.capabilities.return_value = {_fake_ecodes.EV_KEY: list(keys)} if keys else {}
    dev.read.return_value = []
    return dev


@pytest.fixture
def fake_evdev(monkeypatch):
    devices: dict[str, MagicMock] = {}
    fake = types.SimpleNamespace(
        list_devices=lambda: list(devices),
        InputDevice=lambda path: devices[path],
    )
    monkeypatch.setattr(dm_mod, "evdev", fake)
    monkeypatch.setattr(dm_mod, "ecodes", _fake_ecodes)
    monkeypatch.setattr(dm_mod, "EVDEV_AVAILABLE", True)
    return devices


@pytest.fixture
def manager():
    mgr = DeviceManager()
    mgr.selector = MagicMock()
    return mgr


class TestScan:
    def test_keyboard_and_mouse_added(self, fake_evdev, manager):
        fake_evdev["/dev/input/event0"] = _make_device()
        fake_evdev["/dev/input/event1"] = _make_device("Mouse", "/dev/input/event1", keys=(0x110,))
        assert manager.scan_devices() == 2
        assert manager.device_count == 2
        assert manager.selector.register.call_count == 2

    def test_unsuitable_devices_closed(self, fake_evdev, manager):
        power = _make_device("Power Button", "/dev/input/event2", keys=(116,))
        fake_evdev["/dev/input/event2"] = power
        assert manager.scan_devices() == 0
        power.close.assert_called_once()

    def test_virtual_keyboard_excluded(self, fake_evdev, manager):
        fake_evdev["/dev/input/event3"] = _make_device("VKey Virtual Keyboard", "/dev/input/event3")
        assert manager.scan_devices() == 0

    def test_excluded_name(self, fake_evdev, manager):
        fake_evdev["/dev/input/event4"] = _make_device("Other Remapper", "/dev/input/event4")
        manager.exclude_name("Remapper")
        assert manager.scan_devices() == 0

    def test_rescan_only_adds_new(self, fake_evdev, manager):
        fake_evdev["/dev/input/event0"] = _make_device()
        manager.scan_devices()
        fake_evdev["/dev/input/event5"] = _make_device(path="/dev/input/event5")
        assert manager.rescan() == 1

    def test_open_error(self, monkeypatch, fake_evdev, manager):
        def denied(path):
            raise PermissionError(path)

        fake_evdev["/dev/input/event0"] = _make_device()
        monkeypatch.setattr(dm_mod.evdev, "InputDevice", denied)
        assert manager.scan_devices() == 0

    def test_added_callback(self, fake_evdev):
        added = []
        mgr = DeviceManager(on_device_added=added.append)
        mgr.selector = MagicMock()
        dev = _make_device()
        fake_evdev[dev.path] = dev
        mgr.scan_devices()
        assert added == [dev]


class TestRemoveAndRead:
    def test_remove(self, fake_evdev):
        removed = []
        mgr = DeviceManager(on_device_removed=removed.append)
        mgr.selector = MagicMock()
        dev = _make_device()
        fake_evdev[dev.path] = dev
        mgr.scan_devices()
        assert mgr.remove_device(dev.path) is True
        assert mgr.remove_device(dev.path) is False
        dev.close.assert_called()
        assert removed == [dev]

    def test_get_events(self, fake_evdev, manager):
        dev = _make_device()
        dev.read.return_value = ["e1", "e2"]
        fake_evdev[dev.path] = dev
        manager.scan_devices()
        manager.selector.select.return_value = [(types.SimpleNamespace(fileobj=dev), 1)]
        assert list(manager.get_events()) == [(dev, "e1"), (dev, "e2")]

    def test_read_error_drops_device(self, fake_evdev, manager):
        dev = _make_device()
        dev.read.side_effect = OSError("unplugged")
        fake_evdev[dev.path] = dev
        manager.scan_devices()
        manager.selector.select.return_value = [(types.SimpleNamespace(fileobj=dev), 1)]
        assert list(manager.get_events()) == []
        assert manager.device_count == 0

    def test_context_manager_closes(self, fake_evdev):
        dev = _make_device()
        fake_evdev[dev.path] = dev
        with DeviceManager() as mgr:
            mgr.selector = MagicMock()
            mgr.scan_devices()
        assert mgr.device_count == 0
        mgr.selector.close.assert_called_once()
