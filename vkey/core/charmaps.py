"""Legacy Vietnamese code tables (TCVN3/ABC and VNI-Win).

Legacy text is represented as ``str`` with one code point per byte
(the Latin-1 view of the bytes), which is what legacy Vietnamese fonts
render.  Unicode glyphs missing from a table are unmappable.
"""

from __future__ import annotations

from vkey.core.syllable import ALLOWED_DIACRITICS, compose_char
from vkey.core.types import Diacritic, OutputEncoding, Tone

# ---------------------------------------------------------------------------
# TCVN3 (ABC): single byte per glyph, lowercase toned vowels only
# ---------------------------------------------------------------------------

# Columns follow Tone order: level, acute, grave, hook, tilde, dot
_TCVN3_ROWS: dict[str, str] = {
    "a": "a\xb8\xb5\xb6\xb7\xb9",
    "ă": "\xa8\xbe\xbb\xbc\xbd\xc6",
    "â": "\xa9\xca\xc7\xc8\xc9\xcb",
    "e": "e\xd0\xcc\xce\xcf\xd1",
    "ê": "\xaa\xd5\xd2\xd3\xd4\xd6",
    "i": "i\xdd\xd7\xd8\xdc\xde",
    "o": "o\xe3\xdf\xe1\xe2\xe4",
    "ô": "\xab\xe8\xe5\xe6\xe7\xe9",
    "ơ": "\xac\xed\xea\xeb\xec\xee",
    "u": "u\xf3\xef\xf1\xf2\xf4",
    "ư": "\xad\xf8\xf5\xf6\xf7\xf9",
    "y": "y\xfd\xfa\xfb\xfc\xfe",
}

_TCVN3_EXTRA: dict[str, str] = {
    "đ": "\xae",
    "Ă": "\xa1", "Â": "\xa2", "Ê": "\xa3", "Ô": "\xa4", "Ơ": "\xa5", "Ư": "\xa6", "Đ": "\xa7",
}


def _build_tcvn3() -> dict[str, str]:
    table: dict[str, str] = {}
    for base, row in _TCVN3_ROWS.items():
        for tone, code in zip(Tone, row):
            table[compose_char(base, Diacritic.NONE, tone)] = code
    table.update(_TCVN3_EXTRA)
    return table


# ---------------------------------------------------------------------------
# VNI-Win: base letter followed by a mark byte; a few glyphs are one byte
# ---------------------------------------------------------------------------

_VNI_TONE = {
    False: {Tone.LEVEL: "", Tone.ACUTE: "\xf9", Tone.GRAVE: "\xf8", Tone.HOOK: "\xfb",
            Tone.TILDE: "\xf5", Tone.DOT: "\xef"},
    True: {Tone.LEVEL: "", Tone.ACUTE: "\xd9", Tone.GRAVE: "\xd8", Tone.HOOK: "\xdb",
           Tone.TILDE: "\xd5", Tone.DOT: "\xcf"},
}
_VNI_CIRCUMFLEX = {
    False: {Tone.LEVEL: "\xe2", Tone.ACUTE: "\xe1", Tone.GRAVE: "\xe0", Tone.HOOK: "\xe5",
            Tone.TILDE: "\xe3", Tone.DOT: "\xe4"},
    True: {Tone.LEVEL: "\xc2", Tone.ACUTE: "\xc1", Tone.GRAVE: "\xc0", Tone.HOOK: "\xc5",
           Tone.TILDE: "\xc3", Tone.DOT: "\xc4"},
}
_VNI_BREVE = {
    False: {Tone.LEVEL: "\xea", Tone.ACUTE: "\xe9", Tone.GRAVE: "\xe8", Tone.HOOK: "\xfa",
            Tone.TILDE: "\xfc", Tone.DOT: "\xeb"},
    True: {Tone.LEVEL: "\xca", Tone.ACUTE: "\xc9", Tone.GRAVE: "\xc8", Tone.HOOK: "\xda",
           Tone.TILDE: "\xdc", Tone.DOT: "\xcb"},
}
_VNI_TONED_I = {
    False: {Tone.ACUTE: "\xed", Tone.GRAVE: "\xec", Tone.HOOK: "\xe6", Tone.TILDE: "\xf3", Tone.DOT: "\xf2"},
    True: {Tone.ACUTE: "\xcd", Tone.GRAVE: "\xcc", Tone.HOOK: "\xc6", Tone.TILDE: "\xd3", Tone.DOT: "\xd2"},
}
_VNI_HORN = {False: {"o": "\xf4", "u": "\xf6"}, True: {"o": "\xd4", "u": "\xd6"}}
_VNI_Y_DOT = {False: "\xee", True: "\xce"}
_VNI_D_STROKE = {False: "\xf1", True: "\xd1"}


def _vni_code(base: str, upper: bool, diacritic: Diacritic, tone: Tone) -> str:
    letter = base.upper() if upper else base
    if base == "i" and tone is not Tone.LEVEL:
        return _VNI_TONED_I[upper][tone]
    if base == "y" and tone is Tone.DOT:
        return _VNI_Y_DOT[upper]
    if diacritic is Diacritic.HORN:
        return _VNI_HORN[upper][base] + _VNI_TONE[upper][tone]
    if diacritic is Diacritic.CIRCUMFLEX:
        return letter + _VNI_CIRCUMFLEX[upper][tone]
    if diacritic is Diacritic.BREVE:
        return letter + _VNI_BREVE[upper][tone]
    return letter + _VNI_TONE[upper][tone]


def _build_vni_win() -> dict[str, str]:
    table: dict[str, str] = {}
    for base in "aeiouy":
        diacritics = (Diacritic.NONE, *sorted(ALLOWED_DIACRITICS.get(base, ()), key=lambda d: d.value))
        for diacritic in diacritics:
            for tone in Tone:
                for upper in (False, True):
                    glyph = compose_char(base.upper() if upper else base, diacritic, tone)
                    table[glyph] = _vni_code(base, upper, diacritic, tone)
    table["đ"] = _VNI_D_STROKE[False]
    table["Đ"] = _VNI_D_STROKE[True]
    return table


TCVN3_MAP: dict[str, str] = _build_tcvn3()
VNI_WIN_MAP: dict[str, str] = _build_vni_win()

CHARMAPS: dict[OutputEncoding, dict[str, str]] = {
    OutputEncoding.TCVN3: TCVN3_MAP,
    OutputEncoding.VNI_WIN: VNI_WIN_MAP,
}
