from __future__ import annotations

import logging
from typing import TypeVar

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


def parse_int(text: str, default: T) -> int | T:
    """Parse a decimal integer, returning `default` when `text` is not one.

    Surrounding whitespace is ignored.
    """
    stripped = str(text).strip()
    try:
        return int(stripped, 10)
    except ValueError:
        _LOGGER.debug("malformed integer field %r, using %r", text, default)
        return default


def header_value(line: str, token: str) -> str:
    """Return the text after the last `token` in `line`, minus one separator char."""
    idx = line.rfind(token)
    if idx < 0:
        return ""
    return line[idx + len(token) + 1 :]


def fixed_str(raw: bytes, encoding: str = "utf-8") -> str:
    """Decode a fixed-width, NUL padded string field."""
    data = bytes(raw)
    nul = data.find(b"\x00")
    if nul >= 0:
        data = data[:nul]
    return data.decode(encoding, errors="replace")


def digest_hex(raw: bytes) -> str:
    return bytes(raw).hex()
