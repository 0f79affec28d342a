"""Encoding transcoder: composed Unicode -> Unicode / TCVN3 / VNI-Win."""

from __future__ import annotations

import logging
import unicodedata

import vkey.log  # registers TRACE level and logger.trace()
from vkey.core.charmaps import CHARMAPS
from vkey.core.errors import UnsupportedGlyph
from vkey.core.types import OutputEncoding

logger = logging.getLogger(__name__)


def transcode_char(char: str, encoding: OutputEncoding) -> str:
    """Map one Unicode character; raises ``UnsupportedGlyph`` when unmappable."""
    if encoding is OutputEncoding.UNICODE or ord(char) < 0x80:
        return char
    try:
        return CHARMAPS[encoding][char]
    except KeyError:
        raise UnsupportedGlyph(char, encoding) from None


def transcode(text: str, encoding: OutputEncoding) -> str:
    """Convert *text* to *encoding*, one code point per legacy byte.

    Unmappable glyphs are kept as Unicode (never dropped) and reported with
    a warning.
    """
    if encoding is OutputEncoding.UNICODE:
        return text

    out: list[str] = []
    fallback: list[str] = []
    for char in unicodedata.normalize("NFC", text):
        try:
            out.append(transcode_char(char, encoding))
        except UnsupportedGlyph as exc:
            fallback.append(exc.char)
            out.append(char)
    if fallback:
        logger.warning("No %s code for %s in %r, kept as Unicode",
                       encoding.value, "".join(fallback), text)
    return "".join(out)


def encode_legacy(text: str, encoding: OutputEncoding) -> bytes:
    """Strictly encode *text* to legacy bytes; raises ``UnsupportedGlyph``."""
    if encoding is OutputEncoding.UNICODE:
        return text.encode("utf-8")
    chars = [transcode_char(c, encoding) for c in unicodedata.normalize("NFC", text)]
    try:
        return "".join(chars).encode("latin-1")
    except UnicodeEncodeError as exc:
        raise UnsupportedGlyph(exc.object[exc.start], encoding) from None
