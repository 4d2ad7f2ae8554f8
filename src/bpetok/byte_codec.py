"""
Reversible byte <-> unicode mapping used by byte-level BPE.

Every byte value is mapped to a printable unicode character so that arbitrary
byte runs can be handled as ordinary strings during training and encoding.
Bytes that are already printable (``!``..``~``, ``¡``..``¬``, ``®``..``ÿ``) map to
themselves. The remaining 68 bytes (control characters, space, DEL, NBSP,
soft hyphen, ...) are shifted, in ascending byte order, to codepoints 256..323.
"""

import functools
from types import MappingProxyType
from typing import Mapping

from .types import Symbol

# bytes in these ranges are printable and keep their own codepoint
_PRINTABLE_RANGES = (range(33, 127), range(161, 173), range(174, 256))


@functools.cache
def bytes_to_unicode() -> Mapping[int, str]:
    """Return the byte -> character table (built once, read-only)."""
    printable = {b for rng in _PRINTABLE_RANGES for b in rng}
    table: dict[int, str] = {}
    n = 0
    for b in range(256):
        if b in printable:
            table[b] = chr(b)
        else:
            table[b] = chr(256 + n)
            n += 1
    return MappingProxyType(table)


@functools.cache
def unicode_to_bytes() -> Mapping[str, int]:
    """Return the character -> byte table, the inverse of :func:`bytes_to_unicode`."""
    return MappingProxyType({c: b for b, c in bytes_to_unicode().items()})


@functools.cache
def base_symbols() -> tuple[Symbol, ...]:
    """The 256 single-byte symbols ordered by ascending codepoint."""
    return tuple(sorted(bytes_to_unicode().values(), key=ord))


def encode_byte(b: int) -> str:
    """Map one byte value (0-255) to its codec character."""
    return bytes_to_unicode()[b]


def decode_char(c: str) -> int:
    """Map one codec character back to its byte value."""
    return unicode_to_bytes()[c]


def bytes_to_symbols(data: bytes) -> list[Symbol]:
    """Split raw bytes into one codec symbol per byte."""
    table = bytes_to_unicode()
    return [table[b] for b in data]


def symbols_to_bytes(symbols: str) -> bytes:
    """
    Convert a string of codec characters back into raw bytes.

    :raises KeyError: If a character is not in the codec image.
    """
    table = unicode_to_bytes()
    return bytes(table[c] for c in symbols)


__all__ = [
    "bytes_to_unicode",
    "unicode_to_bytes",
    "base_symbols",
    "encode_byte",
    "decode_char",
    "bytes_to_symbols",
    "symbols_to_bytes",
]
