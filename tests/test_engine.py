"""Tests for vkey.core.engine - InputEngine end to end."""

from __future__ import annotations

import logging

import pytest

from vkey.core.engine import InputEngine, parse_hotkey
from vkey.core.errors import ConfigError
from vkey.core.events import EventType
from vkey.core.types import KeyInput, KeyModifier, OutputEncoding, ResultKind, Scheme


_TYPED = {"Return": "\n", "Escape": ""}


def screen_after(engine: InputEngine, context_id: str, keys) -> str:
    """Replay results the way an application would display them."""
    screen = ""
    for key, result in zip(keys, engine.type_keys(context_id, keys)):
        if result.edit.delete_count:
            screen = screen[:-result.edit.delete_count]
        screen += result.edit.insert_text
        if not result.consumed and result.kind is not ResultKind.MODE_TOGGLED:
            screen = screen[:-1] if key == "BackSpace" else screen + _TYPED.get(key, key)
    return screen


class TestParseHotkey:
    def test_ctrl_space(self):
        assert parse_hotkey("ctrl+space") == (KeyModifier.CTRL, " ")

    def test_multiple_modifiers(self):
        mods, key = parse_hotkey("Ctrl+Shift+Z")
        assert mods == KeyModifier.CTRL | KeyModifier.SHIFT
        assert key == "z"

    @pytest.mark.parametrize("spec", ["ctrl+", "ctrl+a+b"])
    def test_invalid(self, spec):
        with pytest.raises(ConfigError):
            parse_hotkey(spec)


class TestTyping:
    def test_sentence(self):
        engine = InputEngine()
        keys = list("tieengs vieetj ") + ["Return"]
        assert screen_after(engine, "gedit", keys) == "tiếng việt \n"

    def test_vni(self):
        engine = InputEngine({"scheme": "VNI"})
        assert screen_after(engine, "gedit", list("vie6t5 Nam")) == "việt Nam"

    def test_backspace_then_retype(self):
        engine = InputEngine()
        keys = list("hoaf") + ["BackSpace", "s"]
        assert screen_after(engine, "gedit", keys) == "hoá"

    def test_backspace_past_composition(self):
        engine = InputEngine()
        keys = list("ab ") + ["BackSpace", "BackSpace"]
        assert screen_after(engine, "gedit", keys) == "a"

    def test_escape_discards(self):
        engine = InputEngine()
        assert screen_after(engine, "gedit", list("vieet") + ["Escape"]) == ""

    def test_rendered(self):
        engine = InputEngine()
        engine.type_keys("gedit", "vieet")
        assert engine.rendered("gedit") == "viêt"
        assert engine.rendered("missing") == ""

    def test_legacy_encoding_on_commit(self):
        engine = InputEngine({"default_encoding": "TCVN3"})
        results = engine.type_keys("word", list("as "))
        assert results[-1].kind is ResultKind.COMMIT
        assert results[-1].committed == "\xb8 "


class TestContexts:
    def test_unknown_context_ignored(self):
        engine = InputEngine()
        assert engine.handle_key(KeyInput("nobody", "a")).kind is ResultKind.IGNORED

    def test_contexts_are_independent(self):
        engine = InputEngine()
        engine.focus("a")
        engine.focus("b")
        engine.handle_key(KeyInput("a", "v"))
        engine.handle_key(KeyInput("b", "x"))
        assert engine.rendered("a") == "v"
        assert engine.rendered("b") == "x"

    def test_focus_commits_previous(self):
        engine = InputEngine()
        commits = []
        engine.bus.subscribe(EventType.COMMIT, lambda e: commits.append(e.data))
        engine.type_keys("a", "as")
        engine.focus("b")
        assert [(c.context_id, c.text) for c in commits] == [("a", "á")]
        assert engine.active_context_id == "b"

    def test_eviction_releases_composition(self):
        engine = InputEngine({"context_capacity": 1})
        evicted = []
        engine.bus.subscribe(EventType.CONTEXT_EVICTED, lambda e: evicted.append(e.data))
        engine.type_keys("a", "v")
        engine.focus("b")
        assert evicted == ["a"]
        assert "a" not in engine.registry

    def test_commit_and_cancel_unknown_context(self):
        engine = InputEngine()
        assert engine.commit("ghost").kind is ResultKind.IGNORED
        assert engine.cancel("ghost").kind is ResultKind.IGNORED

    def test_out_of_order_timestamp_logged(self, caplog):
        engine = InputEngine()
        engine.focus("a")
        engine.handle_key(KeyInput("a", "v", timestamp=10.0))
        with caplog.at_level(logging.WARNING, logger="vkey.core.engine"):
            engine.handle_key(KeyInput("a", "i", timestamp=5.0))
        assert "Out-of-order" in caplog.text
        assert engine.rendered("a") == "vi"


class TestModes:
    def test_hotkey_toggles(self):
        engine = InputEngine()
        engine.focus("a")
        changes = []
        engine.bus.subscribe(EventType.MODE_CHANGED, lambda e: changes.append(e.data.enabled))
        result = engine.handle_key(KeyInput("a", " ", KeyModifier.CTRL))
        assert result.kind is ResultKind.MODE_TOGGLED
        assert changes == [False]
        assert engine.handle_key(KeyInput("a", "a")).kind is ResultKind.PASS_THROUGH

    def test_toggle_commits_open_composition(self):
        engine = InputEngine()
        engine.type_keys("a", "as")
        engine.toggle_mode()
        assert engine.rendered("a") == ""

    def test_shortcut_commits_and_passes_through(self):
        engine = InputEngine()
        engine.type_keys("a", "vieet")
        result = engine.handle_key(KeyInput("a", "c", KeyModifier.CTRL))
        assert result.kind is ResultKind.COMMIT
        assert result.committed == "viêt"
        assert result.consumed is False

    def test_shift_is_not_a_shortcut(self):
        engine = InputEngine()
        engine.focus("a")
        assert engine.handle_key(KeyInput("a", "V", KeyModifier.SHIFT)).rendered == "V"

    def test_auto_suspend_until_boundary(self):
        engine = InputEngine({"auto_mode_switch_enabled": True, "auto_mode_switch_threshold": 2})
        results = engine.type_keys("a", "www")
        assert engine.rendered("a") == ""
        assert results[-1].rendered == "www"
        assert engine.handle_key(KeyInput("a", "w")).kind is ResultKind.PASS_THROUGH
        engine.handle_key(KeyInput("a", " "))
        assert engine.handle_key(KeyInput("a", "a")).kind is ResultKind.EDIT

    def test_per_context_scheme(self):
        engine = InputEngine()
        engine.set_scheme(Scheme.VNI, "term")
        engine.type_keys("term", "a6")
        assert engine.rendered("term") == "â"
        engine.type_keys("gedit", "a6")
        assert engine.rendered("gedit") == "a6"

    def test_set_encoding_event(self):
        engine = InputEngine()
        events = []
        engine.bus.subscribe(EventType.ENCODING_CHANGED, lambda e: events.append(e.data))
        engine.set_encoding(OutputEncoding.VNI_WIN, "word")
        assert events == [("word", OutputEncoding.VNI_WIN)]


class TestEvents:
    def test_edit_events(self):
        engine = InputEngine()
        edits = []
        engine.bus.subscribe(EventType.EDIT, lambda e: edits.append(e.data.rendered))
        engine.type_keys("a", "as")
        assert edits == ["a", "á"]

    def test_cancel_event(self):
        engine = InputEngine()
        cancels = []
        engine.bus.subscribe(EventType.CANCEL, cancels.append)
        engine.type_keys("a", ["v", "Escape"])
        assert len(cancels) == 1

    def test_invalid_config_rejected(self):
        with pytest.raises(ConfigError):
            InputEngine({"scheme": "Dvorak"})
