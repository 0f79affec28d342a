"""OutputSink - applies an Edit to the focused application."""

from __future__ import annotations

import logging

import vkey.log  # registers TRACE level and logger.trace()
from vkey.core.types import Edit

logger = logging.getLogger(__name__)


class OutputSink:
    """Erases with the virtual keyboard, inserts through the system adapter."""

    def __init__(self, virtual_kb, system, debug: bool = False):
        self.virtual_kb = virtual_kb
        self.system = system
        self.debug = debug

    def apply(self, edit: Edit) -> None:
        if edit.is_noop:
            return
        logger.trace("Apply edit: -%d +%r", edit.delete_count, edit.insert_text)  # type: ignore[attr-defined]
        if edit.delete_count:
            self.virtual_kb.backspace(edit.delete_count)
        if edit.insert_text:
            self.system.type_text(edit.insert_text)
