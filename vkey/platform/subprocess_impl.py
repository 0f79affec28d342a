"""SubprocessSystemAdapter - xdotool-backed implementation of ISystemAdapter."""

from __future__ import annotations

import logging
import subprocess

from vkey.platform.system_adapter import CommandResult, ISystemAdapter

logger = logging.getLogger(__name__)


class SubprocessSystemAdapter(ISystemAdapter):
    """Executes real subprocess calls."""

    def __init__(self, debug: bool = False) -> None:
        self.debug = debug

    def run_command(self, args: list[str], timeout: float = 1.0) -> CommandResult:
        try:
            r = subprocess.run(args, capture_output=True, text=True, timeout=timeout)
            return CommandResult(stdout=r.stdout, stderr=r.stderr, returncode=r.returncode)
        except subprocess.TimeoutExpired:
            return CommandResult(stdout="", stderr="timeout", returncode=-1)
        except OSError as e:
            return CommandResult(stdout="", stderr=str(e), returncode=-1)

    def type_text(self, text: str, timeout: float = 1.0) -> CommandResult:
        """Type *text* into the focused window, whatever its script."""
        result = self.run_command(["xdotool", "type", "--clearmodifiers", "--", text], timeout=timeout)
        if not result.ok:
            logger.warning("xdotool type failed (%d): %s", result.returncode, result.stderr.strip())
        return result

    def xdotool_key(self, sequence: str, timeout: float = 0.3) -> CommandResult:
        return self.run_command(["xdotool", "key", sequence], timeout=timeout)
