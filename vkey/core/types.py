"""Value types shared by the composition engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, Flag, IntEnum, auto


class Scheme(Enum):
    TELEX = "Telex"
    VNI = "VNI"
    VIQR = "VIQR"

    @classmethod
    def parse(cls, value: "str | Scheme") -> "Scheme":
        """Case-insensitive lookup; raises ``ValueError`` for unknown names."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        raise ValueError(f"Unknown input scheme: {value!r}")


class OutputEncoding(Enum):
    UNICODE = "Unicode"
    TCVN3 = "TCVN3"
    VNI_WIN = "VNI-Win"

    @classmethod
    def parse(cls, value: "str | OutputEncoding") -> "OutputEncoding":
        """Case-insensitive lookup accepting ``VNI-Win``, ``vni_win`` and ``vniwin``."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "").replace("-", "")
        for member in cls:
            if member.value.lower().replace("-", "") == key:
                return member
        raise ValueError(f"Unknown output encoding: {value!r}")


class Tone(IntEnum):
    LEVEL = 0
    ACUTE = 1
    GRAVE = 2
    HOOK = 3
    TILDE = 4
    DOT = 5


class Diacritic(Enum):
    NONE = auto()
    CIRCUMFLEX = auto()
    HORN = auto()
    BREVE = auto()


class TokenKind(Enum):
    LETTER = auto()
    TONE_DIGIT = auto()
    MODIFIER_LETTER = auto()
    MODIFIER_MARK = auto()   # VIQR punctuation marks
    CONTROL = auto()


class ControlKey(Enum):
    BACKSPACE = auto()
    WORD_BOUNDARY = auto()
    ESCAPE = auto()


class Op(Enum):
    """Modification a keystroke asks for."""
    TONE = auto()
    CLEAR_TONE = auto()
    CIRCUMFLEX = auto()
    HORN = auto()
    BREVE = auto()
    HORN_OR_BREVE = auto()   # Telex ``w``
    STROKE = auto()          # d -> đ


@dataclass(frozen=True)
class Request:
    op: Op
    tone: Tone | None = None
    base: str | None = None   # restricts CIRCUMFLEX to one base vowel (Telex aa/ee/oo)


@dataclass(frozen=True)
class KeystrokeToken:
    kind: TokenKind
    raw: str
    request: Request | None = None
    control: ControlKey | None = None

    @property
    def is_control(self) -> bool:
        return self.kind is TokenKind.CONTROL

    @property
    def starts_composition(self) -> bool:
        return self.kind in (TokenKind.LETTER, TokenKind.MODIFIER_LETTER)


@dataclass(frozen=True)
class Edit:
    """Replace-range edit applied at the caret: delete N chars, then insert text."""
    delete_count: int = 0
    insert_text: str = ""

    @property
    def is_noop(self) -> bool:
        return self.delete_count == 0 and not self.insert_text


NO_EDIT = Edit()


class ResultKind(Enum):
    PASS_THROUGH = auto()
    EDIT = auto()
    COMMIT = auto()
    CANCEL = auto()
    IGNORED = auto()
    MODE_TOGGLED = auto()


@dataclass(frozen=True)
class KeyResult:
    kind: ResultKind
    edit: Edit = NO_EDIT
    committed: str = ""
    previous: str = ""
    rendered: str = ""
    consumed: bool = False

    @classmethod
    def passthrough(cls) -> "KeyResult":
        return cls(ResultKind.PASS_THROUGH)

    @classmethod
    def ignored(cls) -> "KeyResult":
        return cls(ResultKind.IGNORED)


class KeyModifier(Flag):
    NONE = 0
    SHIFT = auto()
    CTRL = auto()
    ALT = auto()
    SUPER = auto()
    CAPSLOCK = auto()


SHORTCUT_MODIFIERS = KeyModifier.CTRL | KeyModifier.ALT | KeyModifier.SUPER


@dataclass(frozen=True)
class KeyInput:
    """One keystroke as delivered by the platform layer."""
    context_id: str
    key: str
    modifiers: KeyModifier = KeyModifier.NONE
    timestamp: float = field(default=0.0, compare=False)
