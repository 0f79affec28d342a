"""Syllable reconstruction as a pure fold over the keystroke history.

``rebuild(history)`` replays every token from scratch, so its result depends
on the history alone; ``rebuild(history[:-1])`` is exactly the state before
the last key was typed.
"""

from __future__ import annotations

import logging
from typing import Sequence

import vkey.log  # registers TRACE level and logger.trace()
from vkey.core.errors import InvalidSyllableShape
from vkey.core.syllable import Letter, Syllable, check_shape, split_letters
from vkey.core.tone_engine import apply_request, place_tone
from vkey.core.types import Diacritic, KeystrokeToken, Op, TokenKind, Tone

logger = logging.getLogger(__name__)


def compose(letters: list[Letter], tone: Tone = Tone.LEVEL, modern_style: bool = True,
            literal: str = "") -> Syllable:
    """Build a valid Syllable from working letters.

    Raises ``InvalidSyllableShape`` when the letters are not a syllable.
    """
    onset, nucleus, coda = split_letters(letters)
    if not coda and [l.char for l in nucleus] == ["u", "o"] and \
            all(l.diacritic is Diacritic.HORN for l in nucleus):
        # open ươ is spelled uơ (thuở, huơ)
        nucleus = [nucleus[0].with_diacritic(Diacritic.NONE), nucleus[1]]
    check_shape(onset, nucleus, coda, tone)
    pairs = tuple((l.cased(), l.diacritic) for l in nucleus)
    return Syllable(
        onset="".join(l.cased() for l in onset),
        nucleus=pairs,
        tone=tone,
        coda="".join(l.cased() for l in coda),
        tone_index=place_tone(pairs, bool(coda), modern_style),
        valid=True,
        literal=literal,
    )


def _invalid(letters: list[Letter], tone: Tone, literal: str) -> Syllable:
    onset, nucleus, coda = split_letters(letters)
    return Syllable(
        onset="".join(l.cased() for l in onset),
        nucleus=tuple((l.cased(), l.diacritic) for l in nucleus),
        tone=tone,
        coda="".join(l.cased() for l in coda),
        valid=False,
        literal=literal,
    )


def rebuild(history: Sequence[KeystrokeToken], modern_style: bool = True) -> tuple[Syllable, str]:
    """Fold *history* into ``(syllable, residual_literal_text)``.

    Letters are appended; modifier requests are applied through the tone
    engine.  A modifier letter that cannot apply is kept as an ordinary
    letter (Telex ``s`` in ``sa``).  A tone digit or mark that cannot apply
    starts the residual, and every later key is appended to it verbatim.
    Repeating the tone key resets the tone to level and that key starts the
    residual as well, so ``ass`` shows ``as``.
    """
    letters: list[Letter] = []
    tone = Tone.LEVEL
    consumed: list[str] = []
    residual: list[str] = []

    for token in history:
        if token.kind is TokenKind.CONTROL:
            raise ValueError(f"Control key {token.raw!r} cannot be part of a composition")
        if residual:
            residual.append(token.raw)
            continue
        if token.request is not None:
            applied = apply_request(letters, tone, token.request)
            if applied is not None and token.request.op is Op.TONE and tone is token.request.tone:
                tone = applied[1]
                residual.append(token.raw)
                continue
            if applied is not None:
                letters, tone = applied
                consumed.append(token.raw)
                continue
            if token.kind is not TokenKind.MODIFIER_LETTER:
                residual.append(token.raw)
                continue
        letters.append(Letter.from_key(token.raw))
        consumed.append(token.raw)

    literal = "".join(consumed)
    try:
        syllable = compose(letters, tone, modern_style, literal)
    except InvalidSyllableShape as exc:
        logger.trace("Literal fallback: %s", exc)  # type: ignore[attr-defined]
        syllable = _invalid(letters, tone, literal)
    return syllable, "".join(residual)


def render(syllable: Syllable, residual: str = "") -> str:
    return syllable.text() + residual


def render_history(history: Sequence[KeystrokeToken], modern_style: bool = True) -> str:
    """Convenience: ``render(*rebuild(history))``."""
    syllable, residual = rebuild(history, modern_style)
    return render(syllable, residual)
