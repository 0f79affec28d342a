"""Tests for vkey.core.syllable - letters, onset/nucleus/coda split, shape checks."""

from __future__ import annotations

import unicodedata

import pytest

from vkey.core.errors import InvalidSyllableShape
from vkey.core.syllable import Letter, Syllable, check_shape, compose_char, nucleus_span, split_letters
from vkey.core.types import Diacritic, Tone


def _letters(text: str) -> list[Letter]:
    return [Letter.from_key(ch) for ch in text]


class TestComposeChar:
    def test_composes_to_single_code_point(self):
        glyph = compose_char("e", Diacritic.CIRCUMFLEX, Tone.DOT)
        assert glyph == "ệ"
        assert len(glyph) == 1
        assert unicodedata.is_normalized("NFC", glyph)

    def test_uppercase(self):
        assert compose_char("A", Diacritic.BREVE, Tone.ACUTE) == "Ắ"

    def test_plain(self):
        assert compose_char("o") == "o"


class TestLetter:
    def test_from_key_records_case(self):
        letter = Letter.from_key("D")
        assert letter.char == "d"
        assert letter.upper is True

    def test_stroke_changes_base(self):
        assert Letter.from_key("D").with_stroke(True).cased() == "Đ"

    def test_render_with_tone(self):
        letter = Letter.from_key("u").with_diacritic(Diacritic.HORN)
        assert letter.render(Tone.GRAVE) == "ừ"


class TestNucleusSpan:
    @pytest.mark.parametrize("text,span", [
        ("viet", (1, 3)),
        ("nguoi", (2, 5)),
        ("qua", (2, 3)),
        ("gia", (2, 3)),
        ("gi", (1, 2)),
        ("bc", (2, 2)),
        ("", (0, 0)),
    ])
    def test_spans(self, text, span):
        assert nucleus_span(_letters(text)) == span

    def test_u_with_horn_is_not_part_of_qu(self):
        letters = _letters("quo")
        letters[1] = letters[1].with_diacritic(Diacritic.HORN)
        assert nucleus_span(letters) == (1, 3)

    def test_split(self):
        onset, nucleus, coda = split_letters(_letters("nghieng"))
        assert "".join(l.char for l in onset) == "ngh"
        assert "".join(l.char for l in nucleus) == "ie"
        assert "".join(l.char for l in coda) == "ng"


class TestCheckShape:
    def _check(self, text: str, tone: Tone = Tone.LEVEL):
        check_shape(*split_letters(_letters(text)), tone)

    @pytest.mark.parametrize("text", ["viet", "nguoi", "khuya", "truong", "a", "b", "ngh", "oanh"])
    def test_valid(self, text):
        self._check(text)

    @pytest.mark.parametrize("text,reason", [
        ("wa", "illegal onset"),
        ("bn", "illegal onset"),
        ("aei", "illegal vowel cluster"),
        ("anb", "illegal coda"),
        ("aib", "illegal coda"),
        ("ain", "open vowel cluster with coda"),
    ])
    def test_invalid(self, text, reason):
        with pytest.raises(InvalidSyllableShape) as exc_info:
            self._check(text)
        assert exc_info.value.reason == reason

    def test_stop_coda_limits_tones(self):
        self._check("hoc", Tone.ACUTE)
        self._check("hoc", Tone.DOT)
        with pytest.raises(InvalidSyllableShape):
            self._check("hoc", Tone.GRAVE)

    def test_illegal_diacritic(self):
        letters = _letters("bi")
        letters[1] = letters[1].with_diacritic(Diacritic.HORN)
        with pytest.raises(InvalidSyllableShape, match="illegal diacritic"):
            check_shape(*split_letters(letters), Tone.LEVEL)


class TestSyllable:
    def test_text_places_tone_on_index(self):
        syl = Syllable(onset="v", nucleus=(("i", Diacritic.NONE), ("e", Diacritic.CIRCUMFLEX)),
                       tone=Tone.DOT, coda="t", tone_index=1)
        assert syl.text() == "việt"
        assert str(syl) == "việt"
        assert syl.vowels == "iê"

    def test_invalid_renders_literal(self):
        syl = Syllable(onset="w", valid=False, literal="wf")
        assert syl.text() == "wf"

    def test_literal_not_part_of_equality(self):
        assert Syllable(onset="b", literal="b") == Syllable(onset="b", literal="B")

    def test_empty(self):
        assert Syllable().is_empty
        assert not Syllable(onset="b").is_empty
