"""Y12 instrument files: one OPN voice with name, dumper and game fields."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field

from fmvoice.tools import load_file

_FILE_SIZE = 0x80
_OPERATOR_STRIDE = 16
_TEXT_SIZE = 16
_ALG_OFFSET = 64
_NAME_OFFSET = 80
_DUMPER_OFFSET = 96
_GAME_OFFSET = 112


class Y12FormatError(ValueError):
    """Raised when data is not a valid Y12 file."""


@dataclass
class Y12Operator:
    """Register values of one operator."""

    mul_dt: int = 0
    tl: int = 0
    ar_rs: int = 0
    dr_am: int = 0
    sr: int = 0
    rr_sl: int = 0
    ssg: int = 0


def _four_operators() -> list[Y12Operator]:
    return [Y12Operator() for _ in range(4)]


def _text(data: bytes, offset: int) -> bytes:
    return bytes(data[offset : offset + _TEXT_SIZE]).split(b"\0", 1)[0]


def _printable(text: bytes) -> str:
    return "".join(chr(c) if 0x20 <= c < 0x7F else "." for c in text[:_TEXT_SIZE])


@dataclass
class Y12File:
    """A voice with up to 16 bytes each of name, dumper and game."""

    alg: int = 0
    fb: int = 0
    name: bytes = b""
    dumper: bytes = b""
    game: bytes = b""
    operators: list[Y12Operator] = field(default_factory=_four_operators)

    def dump(self) -> None:
        """Print the voice as a human-readable table."""
        print(f"alg={self.alg} fb={self.fb}")
        print(f"name={_printable(self.name)}")
        print(f"dumper={_printable(self.dumper)}")
        print(f"game={_printable(self.game)}")
        print("OP MUL DT TL AR RS DR AM SR RR SL SSG")
        for i, op in enumerate(self.operators):
            print(
                f"{i}  {op.mul_dt & 0x0f} {op.mul_dt >> 4 & 0x07} {op.tl & 0x7f} "
                f"{op.ar_rs >> 6} {op.ar_rs & 0x1f} {op.dr_am & 0x1f} {op.dr_am >> 7} "
                f"{op.sr} {op.rr_sl >> 4} {op.rr_sl & 0x0f} {op.ssg}"
            )


def load_y12(data: bytes) -> Y12File:
    """Parse the contents of a Y12 file."""
    if len(data) != _FILE_SIZE:
        raise Y12FormatError(f"bad Y12 size: {len(data)} bytes")
    operators = [
        Y12Operator(*data[start : start + 7])
        for start in range(0, _ALG_OFFSET, _OPERATOR_STRIDE)
    ]
    return Y12File(
        alg=data[_ALG_OFFSET],
        fb=data[_ALG_OFFSET + 1],
        name=_text(data, _NAME_OFFSET),
        dumper=_text(data, _DUMPER_OFFSET),
        game=_text(data, _GAME_OFFSET),
        operators=operators,
    )


def main(argv: list[str] | None = None) -> int:
    """Dump every Y12 file named on the command line."""
    if argv is None:
        argv = sys.argv[1:]
    for path in argv:
        try:
            data = load_file(path)
        except OSError as exc:
            print(f"Could not open {path}: {exc.strerror} ({exc.errno})", file=sys.stderr)
            print(f"Could not open {path}", file=sys.stderr)
            continue
        try:
            y12 = load_y12(data)
        except Y12FormatError:
            print(f"Could not load {path}", file=sys.stderr)
            continue
        print(path)
        y12.dump()
    return 0


if __name__ == "__main__":
    sys.exit(main())