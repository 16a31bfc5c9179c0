"""Sound Blaster Instrument (.sbi) files: a single two-operator OPL voice."""

from __future__ import annotations

import sys
from dataclasses import dataclass

from fmvoice.tools import load_file

_MIN_SIZE = 47
_MAX_SIZE = 52
_FIELDS_END = 50


class SbiFormatError(ValueError):
    """Raised when data is not a valid SBI file."""


@dataclass
class SbiFile:
    """Register values of an SBI instrument; pairs are (modulator, carrier)."""

    name: bytes = bytes(32)
    am_vib_eg_ksr_mul: tuple[int, int] = (0, 0)
    ksl_tl: tuple[int, int] = (0, 0)
    ar_dr: tuple[int, int] = (0, 0)
    sl_rr: tuple[int, int] = (0, 0)
    ws: tuple[int, int] = (0, 0)
    fb_con: int = 0
    perc_voice: int = 0
    transpose: int = 0
    perc_pitch: int = 0

    @property
    def display_name(self) -> str:
        return self.name[:32].split(b"\0", 1)[0].decode("latin-1")

    def dump(self) -> None:
        """Print the instrument as a human-readable table."""
        print(f"name={self.display_name}")
        print(
            f"fb={self.fb_con >> 1 & 0x07} con={self.fb_con & 0x01} "
            f"perc_voice={self.perc_voice} transpose={self.transpose} "
            f"perc_pitch={self.perc_pitch}"
        )
        print(" OP AM VIB EG KSR MUL KSL TL AR DR SL RR WS")
        for label, avekm, ksl_tl, ar_dr, sl_rr, ws in zip(
            ("MOD", "CAR"), self.am_vib_eg_ksr_mul, self.ksl_tl, self.ar_dr, self.sl_rr, self.ws
        ):
            print(
                f"{label} {avekm >> 7}    {avekm >> 6 & 1}  {avekm >> 5 & 1}   "
                f"{avekm >> 4 & 1}  {avekm & 0x0f:2d}   {ksl_tl >> 6} "
                f"{ksl_tl & 0x3f:2d} {ar_dr >> 4:2d} {ar_dr & 0x0f:2d} "
                f"{sl_rr >> 4:2d} {sl_rr & 0x0f:2d}  {ws}"
            )


def load_sbi(data: bytes) -> SbiFile:
    """Parse the contents of an SBI file."""
    if not _MIN_SIZE <= len(data) <= _MAX_SIZE:
        raise SbiFormatError(f"bad SBI size: {len(data)} bytes")
    if data[:3] != b"SBI" or data[3] not in (0x1A, 0x1D):
        raise SbiFormatError("missing SBI signature")
    # The shortest files end before the last few fields; treat those as zero.
    fields = bytes(data[36:_FIELDS_END]).ljust(_FIELDS_END - 36, b"\0")
    transpose = fields[12]
    return SbiFile(
        name=bytes(data[4:36]),
        am_vib_eg_ksr_mul=(fields[0], fields[1]),
        ksl_tl=(fields[2], fields[3]),
        ar_dr=(fields[4], fields[5]),
        sl_rr=(fields[6], fields[7]),
        ws=(fields[8], fields[9]),
        fb_con=fields[10],
        perc_voice=fields[11],
        transpose=transpose - 256 if transpose >= 128 else transpose,
        perc_pitch=fields[13],
    )


def main(argv: list[str] | None = None) -> int:
    """Dump every SBI file named on the command line."""
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
            sbi = load_sbi(data)
        except SbiFormatError:
            print(f"Could not load {path}", file=sys.stderr)
            continue
        print(path)
        sbi.dump()
    return 0


if __name__ == "__main__":
    sys.exit(main())