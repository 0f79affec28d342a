"""Scheme tables: raw key -> KeystrokeToken for Telex, VNI and VIQR.

The tables are plain data; ``classify`` looks a key up in the table of the
active scheme and falls back to the shared control-key and boundary rules.
Swapping schemes swaps tables only.
"""

from __future__ import annotations

from vkey.core.types import (
    ControlKey,
    KeystrokeToken,
    Op,
    Request,
    Scheme,
    Tone,
    TokenKind,
)

# Telex: letters that may modify the syllable (lowercase keys)
TELEX_TABLE: dict[str, Request] = {
    "s": Request(Op.TONE, tone=Tone.ACUTE),
    "f": Request(Op.TONE, tone=Tone.GRAVE),
    "r": Request(Op.TONE, tone=Tone.HOOK),
    "x": Request(Op.TONE, tone=Tone.TILDE),
    "j": Request(Op.TONE, tone=Tone.DOT),
    "z": Request(Op.CLEAR_TONE),
    "a": Request(Op.CIRCUMFLEX, base="a"),
    "e": Request(Op.CIRCUMFLEX, base="e"),
    "o": Request(Op.CIRCUMFLEX, base="o"),
    "w": Request(Op.HORN_OR_BREVE),
    "d": Request(Op.STROKE),
    # VNI tone digits also work in Telex
    "1": Request(Op.TONE, tone=Tone.ACUTE),
    "2": Request(Op.TONE, tone=Tone.GRAVE),
    "3": Request(Op.TONE, tone=Tone.HOOK),
    "4": Request(Op.TONE, tone=Tone.TILDE),
    "5": Request(Op.TONE, tone=Tone.DOT),
}

VNI_TABLE: dict[str, Request] = {
    "1": Request(Op.TONE, tone=Tone.ACUTE),
    "2": Request(Op.TONE, tone=Tone.GRAVE),
    "3": Request(Op.TONE, tone=Tone.HOOK),
    "4": Request(Op.TONE, tone=Tone.TILDE),
    "5": Request(Op.TONE, tone=Tone.DOT),
    "6": Request(Op.CIRCUMFLEX),
    "7": Request(Op.HORN),
    "8": Request(Op.BREVE),
    "9": Request(Op.STROKE),
    "0": Request(Op.CLEAR_TONE),
}

VIQR_TABLE: dict[str, Request] = {
    "'": Request(Op.TONE, tone=Tone.ACUTE),
    "`": Request(Op.TONE, tone=Tone.GRAVE),
    "?": Request(Op.TONE, tone=Tone.HOOK),
    "~": Request(Op.TONE, tone=Tone.TILDE),
    ".": Request(Op.TONE, tone=Tone.DOT),
    "^": Request(Op.CIRCUMFLEX),
    "(": Request(Op.BREVE),
    "+": Request(Op.HORN),
    "d": Request(Op.STROKE),
}

SCHEME_TABLES: dict[Scheme, dict[str, Request]] = {
    Scheme.TELEX: TELEX_TABLE,
    Scheme.VNI: VNI_TABLE,
    Scheme.VIQR: VIQR_TABLE,
}

# X keysym-style names the platform layer may hand over instead of characters
NAMED_KEYS: dict[str, str] = {
    "BackSpace": "\b",
    "Escape": "\x1b",
    "Return": "\n",
    "KP_Enter": "\n",
    "Tab": "\t",
    "space": " ",
}

BACKSPACE_CHARS = {"\b", "\x7f"}
ESCAPE_CHARS = {"\x1b"}


def normalize_key(raw_key: str) -> str:
    """Map named keys (``BackSpace``, ``Return``...) to their characters."""
    return NAMED_KEYS.get(raw_key, raw_key)


def classify(scheme: Scheme, raw_key: str) -> KeystrokeToken:
    """Classify one raw key under *scheme*.

    Total over the key alphabet: anything the scheme does not claim is either
    a literal ``LETTER`` (letters, digits) or a ``WORD_BOUNDARY`` control key
    (whitespace, punctuation, unknown named keys).
    """
    key = normalize_key(raw_key)

    if key in BACKSPACE_CHARS:
        return KeystrokeToken(TokenKind.CONTROL, key, control=ControlKey.BACKSPACE)
    if key in ESCAPE_CHARS:
        return KeystrokeToken(TokenKind.CONTROL, key, control=ControlKey.ESCAPE)
    if len(key) != 1:
        return KeystrokeToken(TokenKind.CONTROL, key, control=ControlKey.WORD_BOUNDARY)

    request = SCHEME_TABLES[scheme].get(key.lower())
    if request is not None:
        if key.isalpha():
            kind = TokenKind.MODIFIER_LETTER
        elif key.isdigit():
            kind = TokenKind.TONE_DIGIT
        else:
            kind = TokenKind.MODIFIER_MARK
        return KeystrokeToken(kind, key, request=request)

    if key.isalnum():
        return KeystrokeToken(TokenKind.LETTER, key)
    return KeystrokeToken(TokenKind.CONTROL, key, control=ControlKey.WORD_BOUNDARY)


def classify_all(scheme: Scheme, keys) -> list[KeystrokeToken]:
    """Classify an iterable of raw keys."""
    return [classify(scheme, k) for k in keys]
