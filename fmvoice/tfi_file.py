"""TFI instrument files: one four-operator OPN voice in 42 bytes."""

from __future__ import annotations

import sys
from dataclasses import dataclass, field

from fmvoice.tools import load_file

_FILE_SIZE = 42
_OPERATOR_FIELDS = ("mul", "dt", "tl", "rs", "ar", "dr", "sr", "rr", "sl", "ssg_eg")


class TfiFormatError(ValueError):
    """Raised when data is not a valid TFI file."""


@dataclass
class TfiOperator:
    """Parameters of one operator; dt is stored offset by 3."""

    mul: int = 0
    dt: int = 0
    tl: int = 0
    rs: int = 0
    ar: int = 0
    dr: int = 0
    sr: int = 0
    rr: int = 0
    sl: int = 0
    ssg_eg: int = 0


def _four_operators() -> list[TfiOperator]:
    return [TfiOperator() for _ in range(4)]


@dataclass
class TfiFile:
    """Algorithm, feedback and four operators."""

    alg: int = 0
    fb: int = 0
    operators: list[TfiOperator] = field(default_factory=_four_operators)

    def dump(self) -> None:
        """Print the instrument as a human-readable table."""
        print(f"alg={self.alg} fb={self.fb}")
        print("OP MUL DT TL RS AR DR SR RR SL SSG-EG")
        for i, op in enumerate(self.operators):
            values = " ".join(str(getattr(op, name)) for name in _OPERATOR_FIELDS)
            print(f"{i}  {values}")


def load_tfi(data: bytes) -> TfiFile:
    """Parse the contents of a TFI file."""
    if len(data) != _FILE_SIZE:
        raise TfiFormatError(f"bad TFI size: {len(data)} bytes")
    width = len(_OPERATOR_FIELDS)
    operators = [
        TfiOperator(**dict(zip(_OPERATOR_FIELDS, data[start : start + width])))
        for start in range(2, _FILE_SIZE, width)
    ]
    return TfiFile(alg=data[0], fb=data[1], operators=operators)


def main(argv: list[str] | None = None) -> int:
    """Dump every TFI file named on the command line."""
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
            tfi = load_tfi(data)
        except TfiFormatError:
            print(f"Could not load {path}", file=sys.stderr)
            continue
        print(path)
        tfi.dump()
    return 0


if __name__ == "__main__":
    sys.exit(main())