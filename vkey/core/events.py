"""Typed event definitions (dataclasses)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

from vkey.core.types import Edit, OutputEncoding


class EventType(Enum):
    # Raw input events
    KEY_PRESS = auto()
    KEY_RELEASE = auto()
    KEY_REPEAT = auto()
    MOUSE_CLICK = auto()
    # Composition output
    EDIT = auto()
    COMMIT = auto()
    CANCEL = auto()
    # Context / mode
    FOCUS_CHANGED = auto()
    CONTEXT_EVICTED = auto()
    MODE_CHANGED = auto()
    ENCODING_CHANGED = auto()
    # Config
    CONFIG_CHANGED = auto()
    # App lifecycle
    APP_QUIT = auto()


@dataclass
class Event:
    type: EventType
    data: Any
    timestamp: float


@dataclass
class KeyEventData:
    code: int
    value: int          # 0=release, 1=press, 2=repeat
    device_name: str = ""


@dataclass
class EditEventData:
    context_id: str
    edit: Edit
    previous: str = ""
    rendered: str = ""


@dataclass
class CommitEventData:
    context_id: str
    text: str
    encoding: OutputEncoding = OutputEncoding.UNICODE
    edit: Edit = Edit()


@dataclass
class ModeEventData:
    enabled: bool
    context_id: str | None = None   # None: global mode
