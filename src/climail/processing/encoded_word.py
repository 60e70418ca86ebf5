"""Decoding of MIME encoded-word fragments embedded in header text."""

import base64
import binascii
import logging
import string
from typing import Callable, Optional

logger = logging.getLogger(__name__)

START_MARKERS_UTF8_Q = ("=?UTF-8?q?", "=?utf-8?q?")
START_MARKERS_UTF8_B = ("=?UTF-8?B?",)
END_MARKER = "?="


def _decode_utf8_q(payload: str) -> str:
    """Decode a quoted-printable style payload.

    ``=XX`` is a hex escape for one byte, ``_`` is a space and every other
    character passes through. Invalid escapes and invalid UTF-8 sequences
    are dropped.
    """
    buf = bytearray()
    pending_hex: Optional[str] = None

    for char in payload:
        if pending_hex is not None:
            pending_hex += char
            if len(pending_hex) == 2:
                if all(c in string.hexdigits for c in pending_hex):
                    buf.append(int(pending_hex, 16))
                else:
                    logger.debug(f"Dropping invalid escape ={pending_hex!r}")
                pending_hex = None
        elif char == "=":
            pending_hex = ""
        elif char == "_":
            buf.append(ord(" "))
        else:
            buf.extend(char.encode("utf-8"))

    return buf.decode("utf-8", errors="ignore")


def _decode_utf8_b(payload: str) -> str:
    """Decode a base64 payload, yielding an empty string on any failure."""
    try:
        return base64.b64decode(payload, validate=True).decode("utf-8")
    except (binascii.Error, ValueError):
        logger.debug(f"Could not decode base64 payload {payload!r}")
        return ""


_CODECS: tuple[tuple[tuple[str, ...], Callable[[str], str]], ...] = (
    (START_MARKERS_UTF8_Q, _decode_utf8_q),
    (START_MARKERS_UTF8_B, _decode_utf8_b),
)


def _match_start(text: str, pos: int) -> Optional[tuple[str, Callable[[str], str]]]:
    for markers, decode_fn in _CODECS:
        for marker in markers:
            if text.startswith(marker, pos):
                return marker, decode_fn
    return None


def decode(text: str) -> str:
    """Replace every encoded word in ``text`` with its decoded payload.

    Text outside of encoded words is copied verbatim. An encoded word
    without an end marker extends to the end of the input.

    Args:
        text: Raw header value

    Returns:
        str: Header value with encoded words decoded
    """
    changed: list[tuple[tuple[int, int], str]] = []
    length = len(text)
    pos = 0

    while pos < length:
        match = _match_start(text, pos)
        if match is None:
            pos += 1
            continue

        marker, decode_fn = match
        inner_start = pos + len(marker)
        inner_end = text.find(END_MARKER, inner_start)
        if inner_end == -1:
            inner_end = outer_end = length
        else:
            outer_end = inner_end + len(END_MARKER)

        changed.append(((pos, outer_end), decode_fn(text[inner_start:inner_end])))
        pos = outer_end

    if not changed:
        return text

    parts = []
    index = 0
    for (start, end), replacement in sorted(changed):
        if index < start:
            parts.append(text[index:start])
        parts.append(replacement)
        index = end
    parts.append(text[index:])

    return "".join(parts)
