"""Tests for vkey.input.virtual_keyboard - fully mocked evdev.UInput."""

from __future__ import annotations

import sys
import types
from unittest.mock import MagicMock, call

import pytest

from vkey.input.key_mapper import KEY_BACKSPACE
from vkey.input.virtual_keyboard import VirtualKeyboard


@pytest.fixture
def uinput(monkeypatch):
    """Install a fake evdev whose UInput is a MagicMock."""
    device = MagicMock()
    fake = types.ModuleType("evdev")
    fake.ecodes = types.SimpleNamespace(EV_KEY=1)
    fake.UInput = MagicMock(return_value=device)
    monkeypatch.setitem(sys.modules, "evdev", fake)
    monkeypatch.setattr(VirtualKeyboard, "KEY_PRESS_DELAY", 0)
    monkeypatch.setattr(VirtualKeyboard, "KEY_REPEAT_DELAY", 0)
    return device


class TestDeviceName:
    def test_device_name_constant(self):
        assert VirtualKeyboard.DEVICE_NAME == "VKey Virtual Keyboard"

    def test_created_with_name(self, uinput):
        VirtualKeyboard()
        sys.modules["evdev"].UInput.assert_called_once_with(name="VKey Virtual Keyboard")


class TestTapKey:
    def test_press_release(self, uinput):
        vk = VirtualKeyboard()
        vk.tap_key(30)
        assert uinput.method_calls == [
            call.write(1, 30, 1),
            call.syn(),
            call.write(1, 30, 0),
            call.syn(),
        ]

    def test_n_times(self, uinput):
        vk = VirtualKeyboard()
        vk.tap_key(30, n_times=3)
        assert uinput.write.call_count == 6


class TestBackspace:
    def test_backspace_count(self, uinput):
        vk = VirtualKeyboard()
        vk.backspace(2)
        presses = [c for c in uinput.write.call_args_list if c == call(1, KEY_BACKSPACE, 1)]
        assert len(presses) == 2

    def test_zero_is_noop(self, uinput):
        VirtualKeyboard().backspace(0)
        uinput.write.assert_not_called()


class TestUnavailable:
    def test_open_failure(self, monkeypatch):
        fake = types.ModuleType("evdev")
        fake.ecodes = types.SimpleNamespace(EV_KEY=1)
        fake.UInput = MagicMock(side_effect=PermissionError("/dev/uinput"))
        monkeypatch.setitem(sys.modules, "evdev", fake)
        vk = VirtualKeyboard()
        assert vk.available is False
        vk.tap_key(30)   # no-op, no exception

    def test_write_error_is_swallowed(self, uinput):
        uinput.write.side_effect = OSError("gone")
        VirtualKeyboard().tap_key(30)


def test_close_idempotent(uinput):
    vk = VirtualKeyboard()
    vk.close()
    vk.close()
    uinput.close.assert_called_once()
    assert vk.available is False
