"""
Utilities for converting codec symbols to displayable strings.
"""

import unicodedata

from .byte_codec import symbols_to_bytes


def _escape_ctrl_chars(s: str) -> str:
    """Replace all Unicode control characters with their escape sequences."""
    cleaned = []
    for c in s:
        # control category codes vary: Cc, Cf, Cn etc.
        # so check via first character
        if unicodedata.category(c)[0] != "C":
            cleaned.append(c)
        else:
            cleaned.append(f"\\u{ord(c):04x}")
    return "".join(cleaned)


def render_bytes(b: bytes) -> str:
    """
    Decode bytes as UTF-8 and escape control characters.

    Invalid UTF-8 sequences (partial multi-byte characters are common inside
    merge products) are replaced with the Unicode replacement character.
    """
    return _escape_ctrl_chars(b.decode("utf-8", errors="replace"))


def render_symbol(symbol: str) -> str:
    """Render a codec symbol as the text its bytes stand for."""
    return render_bytes(symbols_to_bytes(symbol))
