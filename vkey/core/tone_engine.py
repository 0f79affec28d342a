"""Tone engine: tone-mark placement and modifier application.

Placement follows Vietnamese orthography, in precedence order:

1. a vowel carrying a circumflex, breve or horn takes the mark (the last
   such vowel wins, so ``ươ`` marks the ``ơ``);
2. a three-vowel nucleus marks its middle vowel;
3. with a coda the last nucleus vowel takes the mark (``hoàn``, ``toán``);
4. a two-vowel open nucleus marks its first vowel (``chào``, ``mùa``), except
   the medial clusters ``oa``, ``oe``, ``uy`` which mark the second vowel in
   the modern style (``hoà``) and the first in the classic one (``hòa``).

Modifier requests toggle: asking again for what is already there removes it,
asking for a different diacritic replaces the current one.
"""

from __future__ import annotations

import logging
from typing import Sequence

import vkey.log  # registers TRACE level and logger.trace()
from vkey.core.syllable import Letter, nucleus_span
from vkey.core.types import Diacritic, Op, Request, Tone

logger = logging.getLogger(__name__)

MEDIAL_PAIRS = frozenset({"oa", "oe", "uy"})


def place_tone(nucleus: Sequence[tuple[str, Diacritic]], has_coda: bool, modern: bool = True) -> int:
    """Return the index of the tone-bearing vowel in *nucleus* (-1 if empty)."""
    n = len(nucleus)
    if n == 0:
        return -1
    if n == 1:
        return 0
    marked = [i for i, (_, d) in enumerate(nucleus) if d is not Diacritic.NONE]
    if marked:
        return marked[-1]
    if n >= 3:
        return 1
    if has_coda:
        return n - 1
    pair = "".join(ch.lower() for ch, _ in nucleus)
    if modern and pair in MEDIAL_PAIRS:
        return 1
    return 0


def toggle_tone(current: Tone, requested: Tone) -> Tone:
    """Requesting the tone already set resets it to level."""
    return Tone.LEVEL if current is requested else requested


def _rightmost(letters: list[Letter], start: int, end: int, chars: str) -> list[int]:
    for i in range(end - 1, start - 1, -1):
        if letters[i].char in chars:
            return [i]
    return []


def _first(letters: list[Letter], start: int, end: int, chars: str) -> list[int]:
    for i in range(start, end):
        if letters[i].char in chars:
            return [i]
    return []


def _horn_pair(letters: list[Letter], start: int, end: int) -> list[int]:
    for i in range(start, end - 1):
        if letters[i].char == "u" and letters[i + 1].char == "o":
            return [i, i + 1]
    return []


def _oa_breve(letters: list[Letter], start: int, end: int) -> list[int]:
    for i in range(start, end - 1):
        if letters[i].char == "o" and letters[i + 1].char == "a":
            return [i + 1]
    return []


def find_targets(letters: list[Letter], request: Request) -> tuple[list[int], Diacritic]:
    """Pick the nucleus letters a diacritic request applies to.

    Returns ``([], Diacritic.NONE)`` when nothing in the nucleus accepts it.
    """
    start, end = nucleus_span(letters)
    op = request.op

    if op is Op.CIRCUMFLEX:
        chars = request.base or "aeo"
        return _rightmost(letters, start, end, chars), Diacritic.CIRCUMFLEX
    if op is Op.BREVE:
        return _rightmost(letters, start, end, "a"), Diacritic.BREVE
    if op is Op.HORN:
        return (_horn_pair(letters, start, end) or _first(letters, start, end, "uo")), Diacritic.HORN
    if op is Op.HORN_OR_BREVE:
        pair = _horn_pair(letters, start, end)
        if pair:
            return pair, Diacritic.HORN
        breve = _oa_breve(letters, start, end)
        if breve:
            return breve, Diacritic.BREVE
        horn = _first(letters, start, end, "uo")
        if horn:
            return horn, Diacritic.HORN
        return _rightmost(letters, start, end, "a"), Diacritic.BREVE
    return [], Diacritic.NONE


def apply_request(letters: list[Letter], tone: Tone, request: Request) -> tuple[list[Letter], Tone] | None:
    """Apply a modifier *request* to the working letters and tone.

    Returns the new ``(letters, tone)`` or ``None`` when the request has no
    target (no vowel yet, no ``d`` onset, no tone to clear...).
    """
    op = request.op

    if op is Op.STROKE:
        if letters and letters[0].char == "d":
            head = letters[0]
            return [head.with_stroke(not head.stroke), *letters[1:]], tone
        return None

    start, end = nucleus_span(letters)
    if start == end:
        return None

    if op is Op.TONE:
        return letters, toggle_tone(tone, request.tone)
    if op is Op.CLEAR_TONE:
        if tone is Tone.LEVEL:
            return None
        return letters, Tone.LEVEL

    targets, diacritic = find_targets(letters, request)
    if not targets:
        return None

    if all(letters[i].diacritic is diacritic for i in targets):
        diacritic = Diacritic.NONE
    out = list(letters)
    for i in targets:
        out[i] = out[i].with_diacritic(diacritic)
    logger.trace("Diacritic %s on %s", diacritic.name, [letters[i].char for i in targets])  # type: ignore[attr-defined]
    return out, tone
