"""evdev keycode -> key string mapping (US QWERTY)."""

from __future__ import annotations

# Unshifted and shifted characters per evdev keycode
KEYCODE_TO_CHAR: dict[int, tuple[str, str]] = {
    2: ("1", "!"), 3: ("2", "@"), 4: ("3", "#"), 5: ("4", "$"), 6: ("5", "%"),
    7: ("6", "^"), 8: ("7", "&"), 9: ("8", "*"), 10: ("9", "("), 11: ("0", ")"),
    12: ("-", "_"), 13: ("=", "+"),
    16: ("q", "Q"), 17: ("w", "W"), 18: ("e", "E"), 19: ("r", "R"), 20: ("t", "T"),
    21: ("y", "Y"), 22: ("u", "U"), 23: ("i", "I"), 24: ("o", "O"), 25: ("p", "P"),
    26: ("[", "{"), 27: ("]", "}"),
    30: ("a", "A"), 31: ("s", "S"), 32: ("d", "D"), 33: ("f", "F"), 34: ("g", "G"),
    35: ("h", "H"), 36: ("j", "J"), 37: ("k", "K"), 38: ("l", "L"),
    39: (";", ":"), 40: ("'", '"'), 41: ("`", "~"), 43: ("\\", "|"),
    44: ("z", "Z"), 45: ("x", "X"), 46: ("c", "C"), 47: ("v", "V"), 48: ("b", "B"),
    49: ("n", "N"), 50: ("m", "M"), 51: (",", "<"), 52: (".", ">"), 53: ("/", "?"),
    57: (" ", " "),
}

# Keys that reach the engine as named control keys
KEY_BACKSPACE = 14
KEY_TAB = 15
KEY_ENTER = 28
KEY_ESC = 1
KEY_KPENTER = 96

CONTROL_KEYS: dict[int, str] = {
    KEY_BACKSPACE: "BackSpace",
    KEY_TAB: "Tab",
    KEY_ENTER: "Return",
    KEY_KPENTER: "KP_Enter",
    KEY_ESC: "Escape",
}

# Modifiers
KEY_LEFTSHIFT = 42
KEY_RIGHTSHIFT = 54
KEY_LEFTCTRL = 29
KEY_RIGHTCTRL = 97
KEY_LEFTALT = 56
KEY_RIGHTALT = 100
KEY_LEFTMETA = 125
KEY_RIGHTMETA = 126
KEY_CAPSLOCK = 58

SHIFT_KEYS = {KEY_LEFTSHIFT, KEY_RIGHTSHIFT}
CTRL_KEYS = {KEY_LEFTCTRL, KEY_RIGHTCTRL}
ALT_KEYS = {KEY_LEFTALT, KEY_RIGHTALT}
META_KEYS = {KEY_LEFTMETA, KEY_RIGHTMETA}
MODIFIER_KEYS = SHIFT_KEYS | CTRL_KEYS | ALT_KEYS | META_KEYS | {KEY_CAPSLOCK}

# Caret movement ends the composition: arrows, home, end, pgup, pgdn, delete
NAVIGATION_KEYS = {103, 108, 105, 106, 102, 107, 104, 109, 111}


def keycode_to_char(keycode: int, shift: bool = False, capslock: bool = False) -> str:
    """Return the printable character for *keycode*, or '' if it has none.

    CapsLock only affects letters; Shift inverts it for them.
    """
    pair = KEYCODE_TO_CHAR.get(keycode)
    if pair is None:
        return ""
    plain, shifted = pair
    if plain.isalpha():
        return shifted if shift != capslock else plain
    return shifted if shift else plain


def keycode_to_key(keycode: int, shift: bool = False, capslock: bool = False) -> str:
    """Key string for the engine: a character or a control-key name."""
    if keycode in CONTROL_KEYS:
        return CONTROL_KEYS[keycode]
    return keycode_to_char(keycode, shift, capslock)
