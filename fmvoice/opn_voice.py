"""Voice model for the YM2203/YM2608/YM2612 family of FM chips."""

from __future__ import annotations

import hashlib
import math
from dataclasses import dataclass, field

# Carrier operators for each connection (algorithm), bit 0 = operator 1.
_SLOT_MASKS = (0x08, 0x08, 0x08, 0x08, 0x0C, 0x0E, 0x0E, 0x0F)


@dataclass
class OpnOperator:
    """Register values of one operator."""

    dt_mul: int = 0
    tl: int = 0
    ks_ar: int = 0
    am_dr: int = 0
    sr: int = 0
    sl_rr: int = 0
    ssg_eg: int = 0

    @property
    def dt(self) -> int:
        return self.dt_mul >> 4 & 0x07

    @property
    def mul(self) -> int:
        return self.dt_mul & 0x0F

    @property
    def ks(self) -> int:
        return self.ks_ar >> 6

    @property
    def ar(self) -> int:
        return self.ks_ar & 0x1F

    @property
    def am(self) -> int:
        return self.am_dr >> 7

    @property
    def dr(self) -> int:
        return self.am_dr & 0x1F

    @property
    def sl(self) -> int:
        return self.sl_rr >> 4

    @property
    def rr(self) -> int:
        return self.sl_rr & 0x0F

    def is_silent(self) -> bool:
        """Rough guess whether the operator produces no audible output."""
        return (self.ks_ar & 0x1F) < 1 or self.tl > 110

    def _significant_bytes(self) -> bytes:
        return bytes(
            (
                self.dt_mul & 0x7F,
                self.tl & 0x7F,
                self.ks_ar & 0xDF,
                self.am_dr & 0x9F,
                self.sr & 0x0F,
                self.sl_rr & 0xFF,
                self.ssg_eg & 0x0F,
            )
        )


def _four_operators() -> list[OpnOperator]:
    return [OpnOperator() for _ in range(4)]


@dataclass
class OpnVoice:
    """A four-operator voice with per-channel registers."""

    name: str = ""
    dumper: str = ""
    game: str = ""
    lfo: int = 0
    slot: int = 0
    fb_con: int = 0
    lr_ams_pms: int = 0
    operators: list[OpnOperator] = field(default_factory=_four_operators)

    @property
    def fb(self) -> int:
        return self.fb_con >> 3 & 0x07

    @property
    def con(self) -> int:
        return self.fb_con & 0x07

    @property
    def lr(self) -> int:
        return self.lr_ams_pms >> 6

    @property
    def ams(self) -> int:
        return self.lr_ams_pms >> 4 & 0x03

    @property
    def pms(self) -> int:
        return self.lr_ams_pms & 0x07

    def dump(self) -> None:
        """Print the voice as a human-readable table."""
        slot = "".join(
            digit if self.slot & bit else "-"
            for digit, bit in (("4", 0x80), ("3", 0x40), ("2", 0x20), ("1", 0x10))
        )
        pan = ("L" if self.lr_ams_pms & 0x80 else "-") + ("R" if self.lr_ams_pms & 0x40 else "-")
        print(self.name[:256])
        print(
            f"lfo={self.lfo} slot={slot} fb={self.fb} con={self.con} "
            f"pan={pan} ams={self.ams} pms={self.pms}"
        )
        print("OP DT MUL  TL KS AR AM DR SR SL RR SSG")
        for i, op in enumerate(self.operators):
            print(
                f"{i:2d} {op.dt:2d} {op.mul:3d} {op.tl & 0x7f:3d} {op.ks:2d} "
                f"{op.ar:2d} {op.am:2d} {op.dr:2d} {op.sr & 0x1f:2d} "
                f"{op.sl:2d} {op.rr:2d} {op.ssg_eg & 0x0f:3d}"
            )

    def normalize(self) -> None:
        """Raise the carrier levels so the loudest carrier is at full volume."""
        mask = _SLOT_MASKS[self.fb_con & 0x07]
        carriers = [op for i, op in enumerate(self.operators) if mask >> i & 1]
        for op in carriers:
            if (op.ks_ar & 0x1F) < 1 and op.tl > 100:
                op.tl = 127
        min_tl = min([127, *(op.tl for op in carriers)])
        for op in carriers:
            op.tl = (op.tl - min_tl) & 0xFF

    def matches(self, other: OpnVoice) -> bool:
        """True if both voices sound the same on the chip."""
        if self.fb_con != other.fb_con:
            return False
        for o1, o2 in zip(self.operators, other.operators):
            if (
                (o1.dt_mul & 0x7F) != (o2.dt_mul & 0x7F)
                or (o1.ks_ar & 0xDF) != (o2.ks_ar & 0xDF)
                or (o1.am_dr & 0x9F) != (o2.am_dr & 0x9F)
                or (o1.sr & 0x1F) != (o2.sr & 0x1F)
                or (o1.tl & 0x7F) != (o2.tl & 0x7F)
                or o1.sl_rr != o2.sl_rr
            ):
                return False
        return True

    def is_silent(self) -> bool:
        """Rough guess whether the voice produces no audible output."""
        if self.slot == 0:
            return True
        return all(op.is_silent() for op in self.operators)

    def md5_digest(self) -> bytes:
        """MD5 over the register bits that affect the sound."""
        data = bytes(
            (
                self.lfo & 0x0F,
                self.slot & 0x0F,
                self.fb_con & 0x3F,
                self.lr_ams_pms & 0xF7,
            )
        ) + b"".join(op._significant_bytes() for op in self.operators)
        return hashlib.md5(data).digest()


def opn_pitch_to_block_fnum(pitch: float, clock: int) -> int:
    """Block and F-number for a pitch in Hz on the YM2203 (OPN)."""
    octave = int((69 + 12 * math.log2(pitch / 440.0)) / 12 - 1)
    fnum = int(144 * pitch * (1 << 19) / clock / 2 ** (octave - 1))
    return octave << 11 | (fnum & 0x7FF)


def opn_block_fnum_to_pitch(block_fnum2: int, fnum1: int, clock: int) -> float:
    """Pitch in Hz for the YM2203 (OPN) block/F-number register pair."""
    block = (block_fnum2 & 0xFF) >> 3
    fnum = (block_fnum2 & 0x07) << 8 | (fnum1 & 0xFF)
    return fnum * clock * 2.0 ** (block - 20) / 144.0


def opnx_pitch_to_block_fnum(pitch: float, clock: int) -> int:
    """Block and F-number for a pitch in Hz on OPNA, OPNB and OPN2."""
    octave = int((69 + 12 * math.log2(pitch / 440.0)) / 12)
    fnum = int(144 * pitch * (1 << 20) / clock / 2 ** (octave - 1))
    return octave << 11 | (fnum & 0x7FF)


def opnx_block_fnum_to_pitch(block_fnum2: int, fnum1: int, clock: int) -> float:
    """Pitch in Hz for the OPNA/OPNB/OPN2 block/F-number register pair."""
    block = (block_fnum2 & 0xFF) >> 3
    fnum = (block_fnum2 & 0x07) << 8 | (fnum1 & 0xFF)
    return fnum * clock * 2.0 ** (block - 21) / 144.0