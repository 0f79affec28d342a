"""Tests for vkey.core.tone_engine - tone placement and modifier requests."""

from __future__ import annotations

import pytest

from vkey.core.syllable import Letter
from vkey.core.tone_engine import apply_request, find_targets, place_tone, toggle_tone
from vkey.core.types import Diacritic, Op, Request, Tone

N = Diacritic.NONE


def _nucleus(text: str, marks: dict[int, Diacritic] | None = None):
    marks = marks or {}
    return tuple((ch, marks.get(i, N)) for i, ch in enumerate(text))


def _letters(text: str) -> list[Letter]:
    return [Letter.from_key(ch) for ch in text]


def _chars(letters: list[Letter]) -> str:
    return "".join(l.render() for l in letters)


class TestPlaceTone:
    def test_empty_nucleus(self):
        assert place_tone((), False) == -1

    def test_single_vowel(self):
        assert place_tone(_nucleus("a"), True) == 0

    def test_marked_vowel_wins(self):
        # tiếng: ê carries the tone
        assert place_tone(_nucleus("ie", {1: Diacritic.CIRCUMFLEX}), True) == 1
        # người: the last horned vowel
        assert place_tone(_nucleus("uoi", {0: Diacritic.HORN, 1: Diacritic.HORN}), False) == 1

    def test_three_vowels_mark_middle(self):
        assert place_tone(_nucleus("uya"), False) == 1
        assert place_tone(_nucleus("oai"), False) == 1

    def test_coda_marks_last_vowel(self):
        assert place_tone(_nucleus("oa"), True) == 1
        assert place_tone(_nucleus("uy"), True) == 1

    @pytest.mark.parametrize("pair", ["ao", "ua", "ai", "ia"])
    def test_open_pair_marks_first(self, pair):
        assert place_tone(_nucleus(pair), False) == 0

    @pytest.mark.parametrize("pair", ["oa", "oe", "uy"])
    def test_medial_pairs_depend_on_style(self, pair):
        assert place_tone(_nucleus(pair), False, modern=True) == 1
        assert place_tone(_nucleus(pair), False, modern=False) == 0


class TestToggleTone:
    def test_same_tone_resets(self):
        assert toggle_tone(Tone.ACUTE, Tone.ACUTE) is Tone.LEVEL

    def test_other_tone_replaces(self):
        assert toggle_tone(Tone.ACUTE, Tone.GRAVE) is Tone.GRAVE


class TestFindTargets:
    def test_horn_pair(self):
        targets, diacritic = find_targets(_letters("nguo"), Request(Op.HORN_OR_BREVE))
        assert targets == [2, 3]
        assert diacritic is Diacritic.HORN

    def test_oa_takes_breve(self):
        targets, diacritic = find_targets(_letters("hoa"), Request(Op.HORN_OR_BREVE))
        assert targets == [2]
        assert diacritic is Diacritic.BREVE

    def test_lone_u_takes_horn(self):
        assert find_targets(_letters("tu"), Request(Op.HORN_OR_BREVE)) == ([1], Diacritic.HORN)

    def test_lone_a_takes_breve(self):
        assert find_targets(_letters("ban"), Request(Op.HORN_OR_BREVE)) == ([1], Diacritic.BREVE)

    def test_circumflex_restricted_to_base(self):
        assert find_targets(_letters("ta"), Request(Op.CIRCUMFLEX, base="e")) == ([], Diacritic.CIRCUMFLEX)
        assert find_targets(_letters("tie"), Request(Op.CIRCUMFLEX, base="e")) == ([2], Diacritic.CIRCUMFLEX)

    def test_vni_circumflex_takes_rightmost_candidate(self):
        assert find_targets(_letters("toa"), Request(Op.CIRCUMFLEX))[0] == [2]


class TestApplyRequest:
    def test_tone_needs_a_vowel(self):
        assert apply_request(_letters("b"), Tone.LEVEL, Request(Op.TONE, tone=Tone.ACUTE)) is None

    def test_tone_toggles(self):
        letters = _letters("ba")
        _, tone = apply_request(letters, Tone.LEVEL, Request(Op.TONE, tone=Tone.ACUTE))
        assert tone is Tone.ACUTE
        _, tone = apply_request(letters, tone, Request(Op.TONE, tone=Tone.ACUTE))
        assert tone is Tone.LEVEL

    def test_clear_tone(self):
        letters = _letters("ba")
        assert apply_request(letters, Tone.LEVEL, Request(Op.CLEAR_TONE)) is None
        assert apply_request(letters, Tone.HOOK, Request(Op.CLEAR_TONE)) == (letters, Tone.LEVEL)

    def test_stroke_toggles_leading_d(self):
        letters, _ = apply_request(_letters("da"), Tone.LEVEL, Request(Op.STROKE))
        assert _chars(letters) == "đa"
        letters, _ = apply_request(letters, Tone.LEVEL, Request(Op.STROKE))
        assert _chars(letters) == "da"

    def test_stroke_without_d(self):
        assert apply_request(_letters("ba"), Tone.LEVEL, Request(Op.STROKE)) is None

    def test_diacritic_toggles_off(self):
        req = Request(Op.CIRCUMFLEX, base="a")
        letters, _ = apply_request(_letters("ca"), Tone.LEVEL, req)
        assert _chars(letters) == "câ"
        letters, _ = apply_request(letters, Tone.LEVEL, req)
        assert _chars(letters) == "ca"

    def test_different_diacritic_replaces(self):
        letters, _ = apply_request(_letters("ta"), Tone.LEVEL, Request(Op.CIRCUMFLEX))
        letters, _ = apply_request(letters, Tone.LEVEL, Request(Op.BREVE))
        assert _chars(letters) == "tă"

    def test_input_letters_not_mutated(self):
        letters = _letters("ta")
        apply_request(letters, Tone.LEVEL, Request(Op.BREVE))
        assert _chars(letters) == "ta"
