import os
import signal
import sys

import pytest

from vkey.platform.system_adapter import CommandResult, ISystemAdapter
from vkey.platform.window_adapter import IWindowAdapter


def pytest_addoption(parser):
    parser.addoption(
        "--keyboard-watchdog",
        action="store",
        default="10",
        help="Timeout in seconds after which a hung test is aborted so the virtual keyboard is released"
    )


class MockSystemAdapter(ISystemAdapter):
    """Records commands and typed text instead of running xdotool."""

    def __init__(self):
        self.commands: list[list[str]] = []
        self.typed: list[str] = []

    def run_command(self, args, timeout=1.0):
        self.commands.append(list(args))
        return CommandResult(stdout="", stderr="", returncode=0)

    def type_text(self, text, timeout=1.0):
        self.typed.append(text)
        return CommandResult(stdout="", stderr="", returncode=0)

    def xdotool_key(self, sequence, timeout=0.3):
        return self.run_command(["xdotool", "key", sequence], timeout)


class MockWindowAdapter(IWindowAdapter):
    def __init__(self, context_id: str = "gedit"):
        self.context_id = context_id
        self.closed = False

    def active_context_id(self) -> str:
        return self.context_id

    def close(self) -> None:
        self.closed = True


class MockVirtualKeyboard:
    """Counts backspaces the way the application would receive them."""

    DEVICE_NAME = "VKey Virtual Keyboard"

    def __init__(self):
        self.backspaces = 0
        self.closed = False

    @property
    def available(self) -> bool:
        return True

    def backspace(self, count: int) -> None:
        self.backspaces += count

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def mock_system():
    return MockSystemAdapter()


@pytest.fixture
def mock_window():
    return MockWindowAdapter()


@pytest.fixture
def mock_virtual_kb():
    return MockVirtualKeyboard()


@pytest.fixture(autouse=True)
def mock_uinput(monkeypatch):
    """Replace real evdev.UInput with a dummy so no test grabs /dev/uinput."""
    try:
        import evdev
    except ImportError:
        yield
        return

    class DummyUInput:
        def __init__(self, *args, **kwargs):
            print(f"[test] DummyUInput() created pid={os.getpid()}", file=sys.stderr)

        def write(self, *a, **k):
            pass

        def syn(self):
            pass

        def close(self):
            pass

    monkeypatch.setattr(evdev, "UInput", DummyUInput)
    yield


@pytest.fixture(autouse=True)
def keyboard_watchdog(request):
    timeout = int(request.config.getoption('--keyboard-watchdog') or 10)

    def handler(signum, frame):
        print("Keyboard watchdog triggered: aborting test to free input devices.", file=sys.stderr)
        os._exit(70)

    old_handler = signal.signal(signal.SIGALRM, handler)
    signal.alarm(timeout)
    try:
        yield
    finally:
        signal.alarm(0)
        signal.signal(signal.SIGALRM, old_handler)
