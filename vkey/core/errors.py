"""Error kinds raised inside the engine.

None of them is fatal: each one is caught at a well-defined seam and turned
into a degraded but usable result (literal text, Unicode fallback, no-op).
"""

from __future__ import annotations


class VKeyError(Exception):
    """Base class for all VKey errors."""


class InvalidSyllableShape(VKeyError):
    """The working letters do not form a Vietnamese syllable."""

    def __init__(self, reason: str, text: str = ""):
        super().__init__(f"{reason}: {text!r}" if text else reason)
        self.reason = reason
        self.text = text


class UnsupportedGlyph(VKeyError):
    """A character has no code in the requested legacy encoding."""

    def __init__(self, char: str, encoding: object):
        name = getattr(encoding, "value", encoding)
        super().__init__(f"{char!r} (U+{ord(char):04X}) has no {name} code")
        self.char = char
        self.encoding = encoding


class UnknownContext(VKeyError, KeyError):
    """A request referenced a context that is not in the registry."""

    def __init__(self, context_id: str):
        super().__init__(context_id)
        self.context_id = context_id

    def __str__(self) -> str:
        return f"Unknown context: {self.context_id!r}"


class ConfigError(VKeyError, ValueError):
    """Invalid configuration value."""
