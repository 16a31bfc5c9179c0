"""Small helpers shared by the voice file readers and dump commands."""

from __future__ import annotations

import gzip
from pathlib import Path

_GZIP_MAGIC = b"\x1f\x8b"

_CSV_ESCAPES = str.maketrans(
    {
        "\0": "\\\0",
        "\\": "\\\\",
        "\b": "\\b",
        "\n": "\\n",
        "\r": "\\r",
        "\t": "\\t",
        "\x1a": "\\Z",
        '"': '""',
    }
)


def load_file(filename: str | Path) -> bytes:
    """Return the whole contents of a file; raises OSError when it cannot be read."""
    return Path(filename).read_bytes()


def load_gzfile(filename: str | Path) -> bytes:
    """Return the contents of a file, decompressing it if it is gzip data.

    Files that are not gzip-compressed are returned unchanged.
    """
    raw = Path(filename).read_bytes()
    if raw.startswith(_GZIP_MAGIC):
        return gzip.decompress(raw)
    return raw


def gcd(a: int, b: int) -> int:
    """Greatest common divisor by Euclid's algorithm; b must not be zero."""
    c = a % b
    while c > 0:
        a, b = b, c
        c = a % b
    return b


def csv_quote(text: str | None) -> str:
    """Quote a value for a CSV field, escaping control characters.

    None becomes the NULL marker ``\\N``.
    """
    if text is None:
        return "\\N"
    return '"' + text.translate(_CSV_ESCAPES) + '"'