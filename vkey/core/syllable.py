"""Syllable model: working letters, onset/nucleus/coda split, well-formedness.

A syllable is composed from *letters* (the working state of the keystroke
fold) and split into onset consonants, a vowel nucleus and a coda.  Shape
checks are deliberately lenient about diacritics so that intermediate states
typed on the way to a word (``tien`` before ``tiên``) stay valid.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field, replace

from vkey.core.errors import InvalidSyllableShape
from vkey.core.types import Diacritic, Tone

VOWELS = frozenset("aeiouy")

ONSETS = frozenset({
    "", "b", "c", "ch", "d", "đ", "g", "gh", "gi", "h", "k", "kh", "l", "m",
    "n", "ng", "ngh", "nh", "p", "ph", "qu", "r", "s", "t", "th", "tr", "v", "x",
})

CODAS = frozenset({"", "c", "ch", "m", "n", "ng", "nh", "p", "t"})
STOP_CODAS = frozenset({"c", "ch", "p", "t"})
STOP_CODA_TONES = frozenset({Tone.LEVEL, Tone.ACUTE, Tone.DOT})

# Vowel clusters by base letters (diacritics ignored)
NUCLEI = frozenset({
    "a", "e", "i", "o", "u", "y",
    "ai", "ao", "au", "ay", "eo", "eu", "ia", "ie", "iu", "oa", "oe", "oi",
    "oo", "ua", "ue", "ui", "uo", "uu", "uy", "ye",
    "ieu", "yeu", "oai", "oay", "oeo", "uay", "uoi", "uou", "uya", "uye", "uyu",
})

# Clusters ending in a semivowel; they never take a consonant coda
OPEN_NUCLEI = frozenset({
    "ai", "ao", "au", "ay", "eo", "eu", "iu", "oi", "ui", "uu",
    "ieu", "yeu", "oai", "oay", "oeo", "uay", "uoi", "uou", "uyu",
})

DIACRITIC_MARKS: dict[Diacritic, str] = {
    Diacritic.NONE: "",
    Diacritic.CIRCUMFLEX: "\u0302",
    Diacritic.HORN: "\u031b",
    Diacritic.BREVE: "\u0306",
}

TONE_MARKS: dict[Tone, str] = {
    Tone.LEVEL: "",
    Tone.ACUTE: "\u0301",
    Tone.GRAVE: "\u0300",
    Tone.HOOK: "\u0309",
    Tone.TILDE: "\u0303",
    Tone.DOT: "\u0323",
}

# Which diacritics each base vowel can carry
ALLOWED_DIACRITICS: dict[str, frozenset] = {
    "a": frozenset({Diacritic.CIRCUMFLEX, Diacritic.BREVE}),
    "e": frozenset({Diacritic.CIRCUMFLEX}),
    "o": frozenset({Diacritic.CIRCUMFLEX, Diacritic.HORN}),
    "u": frozenset({Diacritic.HORN}),
}


def compose_char(char: str, diacritic: Diacritic = Diacritic.NONE, tone: Tone = Tone.LEVEL) -> str:
    """Compose a base letter with its diacritic and tone into one NFC glyph."""
    return unicodedata.normalize("NFC", char + DIACRITIC_MARKS[diacritic] + TONE_MARKS[tone])


@dataclass(frozen=True)
class Letter:
    """One letter of the working syllable, as typed plus applied marks."""

    char: str                       # lowercase letter as typed
    upper: bool = False
    diacritic: Diacritic = Diacritic.NONE
    stroke: bool = False            # d -> đ

    @classmethod
    def from_key(cls, key: str) -> "Letter":
        return cls(char=key.lower(), upper=key != key.lower())

    @property
    def is_vowel(self) -> bool:
        return self.char in VOWELS

    @property
    def base(self) -> str:
        """Lowercase letter including the stroke (``đ``), without vowel marks."""
        return "đ" if self.stroke else self.char

    def cased(self) -> str:
        base = self.base
        return base.upper() if self.upper else base

    def with_diacritic(self, diacritic: Diacritic) -> "Letter":
        return replace(self, diacritic=diacritic)

    def with_stroke(self, stroke: bool) -> "Letter":
        return replace(self, stroke=stroke)

    def render(self, tone: Tone = Tone.LEVEL) -> str:
        return compose_char(self.cased(), self.diacritic, tone)


def nucleus_span(letters: list[Letter]) -> tuple[int, int]:
    """Return ``(start, end)`` of the vowel nucleus inside *letters*.

    Consonants before the first vowel form the onset; ``qu`` and ``gi``
    followed by another vowel are onsets too.  The nucleus is the vowel run
    after the onset.
    """
    n = len(letters)
    start = 0
    while start < n and not letters[start].is_vowel:
        start += 1
    if start == 1 and start + 1 < n and letters[start + 1].is_vowel:
        first, second = letters[0].base, letters[1].char
        if (first, second) in (("q", "u"), ("g", "i")) and letters[1].diacritic is Diacritic.NONE:
            start = 2
    end = start
    while end < n and letters[end].is_vowel:
        end += 1
    return start, end


def split_letters(letters: list[Letter]) -> tuple[list[Letter], list[Letter], list[Letter]]:
    start, end = nucleus_span(letters)
    return letters[:start], letters[start:end], letters[end:]


def check_shape(onset: list[Letter], nucleus: list[Letter], coda: list[Letter], tone: Tone) -> None:
    """Raise ``InvalidSyllableShape`` unless the split is a plausible syllable."""
    onset_key = "".join(l.base for l in onset)
    nucleus_key = "".join(l.char for l in nucleus)
    coda_key = "".join(l.base for l in coda)
    text = onset_key + nucleus_key + coda_key

    if onset_key not in ONSETS:
        raise InvalidSyllableShape("illegal onset", text)
    if not nucleus:
        if coda:
            raise InvalidSyllableShape("coda without vowel", text)
        return
    if nucleus_key not in NUCLEI:
        raise InvalidSyllableShape("illegal vowel cluster", text)
    for letter in nucleus:
        if letter.diacritic is not Diacritic.NONE and \
                letter.diacritic not in ALLOWED_DIACRITICS.get(letter.char, ()):
            raise InvalidSyllableShape("illegal diacritic", text)
    if any(l.is_vowel for l in coda) or coda_key not in CODAS:
        raise InvalidSyllableShape("illegal coda", text)
    if coda_key and nucleus_key in OPEN_NUCLEI:
        raise InvalidSyllableShape("open vowel cluster with coda", text)
    if coda_key in STOP_CODAS and tone not in STOP_CODA_TONES:
        raise InvalidSyllableShape("tone not allowed before stop coda", text)


@dataclass(frozen=True)
class Syllable:
    """Pure value for one composed (or failed) syllable.

    ``literal`` holds the raw keys folded into the syllable and is excluded
    from equality, so the same syllable typed under different schemes
    compares equal.
    """

    onset: str = ""
    nucleus: tuple[tuple[str, Diacritic], ...] = ()
    tone: Tone = Tone.LEVEL
    coda: str = ""
    tone_index: int = -1
    valid: bool = True
    literal: str = field(default="", compare=False)

    @property
    def is_empty(self) -> bool:
        return not (self.onset or self.nucleus or self.coda)

    @property
    def vowels(self) -> str:
        return "".join(compose_char(ch, d) for ch, d in self.nucleus)

    def text(self) -> str:
        """Render to NFC Unicode; invalid syllables render their literal keys."""
        if not self.valid:
            return self.literal
        parts = [self.onset]
        for i, (ch, diacritic) in enumerate(self.nucleus):
            parts.append(compose_char(ch, diacritic, self.tone if i == self.tone_index else Tone.LEVEL))
        parts.append(self.coda)
        return "".join(parts)

    def __str__(self) -> str:
        return self.text()
