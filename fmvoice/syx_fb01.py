"""Yamaha FB-01 bulk voice bank SysEx dumps."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from typing import Callable, Optional

_MAX_VOICES = 48
_VOICE_SIZE = 64
_BANK_NAME_SIZE = 8
_BANK_HEADER_SIZE = 0x20
_CLOCK = 4_000_000


class Fb01Status(IntEnum):
    """Result codes of the FB-01 SysEx receiver."""

    SUCCESS = 0
    IN_PROGRESS = 1
    FILE_TOO_SMALL = 2
    NOT_SYSEX = 3
    BAD_ID_NO = 4
    BAD_SUBSTATUS = 5
    BAD_CHANNEL = 6
    BAD_MESSAGE_NO = 7
    BAD_SYSTEM_NO = 8
    BAD_OPERATION_NO = 9
    BAD_FORMAT_NO = 10
    BAD_BANK_NO = 11
    TOO_SMALL = 12
    TOO_BIG = 13
    BAD_DATA_LOW = 14
    BAD_DATA_HIGH = 15
    BAD_BYTE_COUNT_LSB = 16
    BAD_BYTE_COUNT_MSB = 17
    BAD_CHECKSUM = 18
    AFTER_EOX = 19
    EARLY_EOX = 20
    SHORT_WRITE = 21
    TOO_MANY_VOICES = 22

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    Fb01Status.SUCCESS: "Success",
    Fb01Status.IN_PROGRESS: "In progress",
    Fb01Status.FILE_TOO_SMALL: "File too small",
    Fb01Status.NOT_SYSEX: "Not sysex",
    Fb01Status.BAD_ID_NO: "Bad id no",
    Fb01Status.BAD_SUBSTATUS: "Bad substatus",
    Fb01Status.BAD_CHANNEL: "Bad channel",
    Fb01Status.BAD_MESSAGE_NO: "Bad message no",
    Fb01Status.BAD_SYSTEM_NO: "Bad system no",
    Fb01Status.BAD_OPERATION_NO: "Bad operation no",
    Fb01Status.BAD_FORMAT_NO: "Bad format no",
    Fb01Status.BAD_BANK_NO: "Bad bank no",
    Fb01Status.TOO_SMALL: "Too small",
    Fb01Status.TOO_BIG: "Too big",
    Fb01Status.BAD_DATA_LOW: "Bad data low bits",
    Fb01Status.BAD_DATA_HIGH: "Bad data high bits",
    Fb01Status.BAD_BYTE_COUNT_LSB: "Bad byte count LSB",
    Fb01Status.BAD_BYTE_COUNT_MSB: "Bad byte count MSB",
    Fb01Status.BAD_CHECKSUM: "Bad checksum",
    Fb01Status.AFTER_EOX: "After EOX",
    Fb01Status.EARLY_EOX: "Early EOX",
    Fb01Status.SHORT_WRITE: "Short write",
    Fb01Status.TOO_MANY_VOICES: "Too many voices",
}


class Fb01Error(ValueError):
    """Raised when FB-01 SysEx data cannot be parsed."""

    def __init__(self, status: Fb01Status) -> None:
        super().__init__(status.description)
        self.status = status


def error_string(status: int) -> str:
    """Human-readable description of a status code."""
    try:
        return Fb01Status(status).description
    except ValueError:
        return "Unknown"


_CONTROLLER_NAMES = ("OFF", "TOUCH", "WHEEL", "BREATH", "FOOT")
_LFO_WAVEFORM_NAMES = ("sawtooth", "square", "triangle", "noise")


def input_controller_name(c: int) -> str:
    """Name of a pitch modulation input controller."""
    if 0 <= c < len(_CONTROLLER_NAMES):
        return _CONTROLLER_NAMES[c]
    return "Unknown"


def lfo_waveform_name(w: int) -> str:
    """Name of an LFO waveform; only the low two bits are used."""
    return _LFO_WAVEFORM_NAMES[w & 0x03]


def _safechar(c: int) -> str:
    return chr(c) if 48 < c < 127 or c == 0x20 else "."


def _lfo_speed_to_hz(lfo_speed: int, clock: int) -> float:
    return clock * (16 + lfo_speed % 16) / 2 ** (36 - math.floor(lfo_speed / 16.0))


@dataclass
class Fb01Operator:
    """Parameters of one operator of an FB-01 voice."""

    tl: int = 0
    ks_type_bit0: int = 0
    tl_sensitivity: int = 0
    ks_level_depth: int = 0
    tl_adjust: int = 0
    ks_type_bit1: int = 0
    detune: int = 0
    freq: int = 0
    ks_rate_depth: int = 0
    ar: int = 0
    carrier: int = 0
    ar_velocity_sens: int = 0
    d1r: int = 0
    inharmonic_freq: int = 0
    d2r: int = 0
    sl: int = 0
    rr: int = 0

    def _encode(self) -> bytes:
        # Keyboard scaling type bit 0 is written into both type-bit positions.
        return bytes(
            (
                self.tl & 0x7F,
                (self.ks_type_bit0 & 0x01) << 7 | (self.tl_sensitivity & 0x07) << 4,
                (self.ks_level_depth & 0x0F) << 4 | (self.tl_adjust & 0x0F),
                (self.ks_type_bit0 & 0x01) << 7 | (self.detune & 0x07) << 4 | (self.freq & 0x0F),
                (self.ks_rate_depth & 0x03) << 6 | (self.ar & 0x1F),
                (self.carrier & 0x01) << 7
                | (self.ar_velocity_sens & 0x03) << 5
                | (self.d1r & 0x1F),
                (self.inharmonic_freq & 0x03) << 6 | (self.d2r & 0x1F),
                (self.sl & 0x0F) << 4 | (self.rr & 0x0F),
            )
        )

    def _decode(self, index: int, byte: int) -> None:
        if index == 0:
            self.tl = byte & 0x7F
        elif index == 1:
            self.ks_type_bit0 = byte >> 7
            self.tl_sensitivity = byte >> 4 & 0x07
        elif index == 2:
            self.ks_level_depth = byte >> 4
            self.tl_adjust = byte & 0x0F
        elif index == 3:
            self.ks_type_bit1 = byte >> 7
            self.detune = byte >> 4 & 0x07
            self.freq = byte & 0x0F
        elif index == 4:
            self.ks_rate_depth = byte >> 6
            self.ar = byte & 0x1F
        elif index == 5:
            self.carrier = byte >> 7
            self.ar_velocity_sens = byte >> 5 & 0x03
            self.d1r = byte & 0x1F
        elif index == 6:
            self.inharmonic_freq = byte >> 6
            self.d2r = byte & 0x1F
        else:
            self.sl = byte >> 4
            self.rr = byte & 0x0F


def _four_operators() -> list[Fb01Operator]:
    return [Fb01Operator() for _ in range(4)]


@dataclass
class Fb01Voice:
    """One FB-01 voice as stored in a bulk dump."""

    name: bytes = bytes(7)
    user_code: int = 0
    lfo_speed: int = 0
    lfo_enable: int = 0
    am_depth: int = 0
    lfo_sync: int = 0
    pm_depth: int = 0
    op_mask: int = 0
    l_enable: int = 0
    r_enable: int = 0
    fb_level: int = 0
    algorithm: int = 0
    pm_sens: int = 0
    am_sens: int = 0
    lfo_waveform: int = 0
    transpose: int = 0
    op: list[Fb01Operator] = field(default_factory=_four_operators)
    mono: int = 0
    portamento_speed: int = 0
    pmd_controller: int = 0
    pitch_bend_range: int = 0

    def _encode(self) -> bytes:
        head = bytes(self.name[:7]).ljust(7, b"\0") + bytes(
            (
                self.user_code & 0xFF,
                self.lfo_speed & 0xFF,
                (self.lfo_enable & 0x01) << 7 | (self.am_depth & 0x7F),
                (self.lfo_sync & 0x01) << 7 | (self.pm_depth & 0x7F),
                (self.op_mask & 0x0F) << 3,
                (self.l_enable & 0x01) << 7
                | (self.r_enable & 0x01) << 6
                | (self.fb_level & 0x07) << 3
                | (self.algorithm & 0x07),
                (self.pm_sens & 0x07) << 4 | (self.am_sens & 0x03),
                (self.lfo_waveform & 0x03) << 5,
                self.transpose & 0xFF,
            )
        )
        operators = b"".join(op._encode() for op in self.op)
        tail = bytes(10) + bytes(
            (
                (self.mono & 0x01) << 7 | (self.portamento_speed & 0x7F),
                (self.pmd_controller & 0x07) << 4 | (self.pitch_bend_range & 0x0F),
            )
        ) + bytes(4)
        return head + operators + tail

    def _decode(self, pos: int, byte: int) -> None:
        if pos <= 6:
            self.name = self.name[:pos] + bytes((byte,)) + self.name[pos + 1 :]
        elif pos >= 0x30:
            if pos == 0x3A:
                self.mono = byte >> 7
                self.portamento_speed = byte & 0x7F
            elif pos == 0x3B:
                self.pmd_controller = byte >> 4 & 0x07
                self.pitch_bend_range = byte & 0x0F
        elif pos >= 0x10:
            oppos = (pos - 0x10) & 0x1F
            self.op[oppos >> 3]._decode(oppos & 0x07, byte)
        elif pos == 0x07:
            self.user_code = byte
        elif pos == 0x08:
            self.lfo_speed = byte
        elif pos == 0x09:
            self.lfo_enable = byte >> 7
            self.am_depth = byte & 0x7F
        elif pos == 0x0A:
            self.lfo_sync = byte >> 7
            self.pm_depth = byte & 0x7F
        elif pos == 0x0B:
            self.op_mask = byte >> 3 & 0x0F
        elif pos == 0x0C:
            self.l_enable = byte >> 7
            self.r_enable = byte >> 6 & 0x01
            self.fb_level = byte >> 3 & 0x07
            self.algorithm = byte & 0x07
        elif pos == 0x0D:
            self.pm_sens = byte >> 4 & 0x07
            self.am_sens = byte & 0x03
        elif pos == 0x0E:
            self.lfo_waveform = byte >> 5 & 0x03
        elif pos == 0x0F:
            self.transpose = byte - 256 if byte >= 128 else byte

    def dump(self, voicenum: int) -> None:
        """Print the voice as a human-readable table."""
        name = "".join(_safechar(c) for c in bytes(self.name[:7]).ljust(7, b"\0"))
        print(f"Voice {voicenum}, {name} algorithm: {self.algorithm} op_mask={self.op_mask:x}")
        hz = _lfo_speed_to_hz(self.lfo_speed, _CLOCK)
        print(
            f"  LFO: {'ENABLED' if self.lfo_enable else 'DISABLED'} speed: {self.lfo_speed} "
            f"({hz:.2f}Hz) sync: {self.lfo_sync} waveform: "
            f"{lfo_waveform_name(self.lfo_waveform)} ({self.lfo_waveform})"
        )
        print(
            f"  am_depth: {self.am_depth} am_sens: {self.am_sens} "
            f"pm_depth: {self.pm_depth} pm_sens: {self.pm_sens}"
        )
        print(f"  l_enable: {self.l_enable} r_enable: {self.r_enable} fb_level: {self.fb_level}")
        print(
            f"  mono: {self.mono} transpose: {self.transpose} pmd_controller: "
            f"{input_controller_name(self.pmd_controller)} ({self.pmd_controller})"
        )
        print(
            f"  pitch_bend_range: {self.pitch_bend_range} "
            f"portamento_speed: {self.portamento_speed}"
        )
        print("     Attack -Decay-         --TL--- Key sns           ")
        print("  OP AR  VS D1R D2R  RR SL  TL S  A T LD RD  F DT IF C")
        for j, op in enumerate(self.op):
            print(
                f"  {j:2d} {op.ar:2d} {op.ar_velocity_sens:3d} {op.d1r:3d} {op.d2r:3d} "
                f"{op.rr:3d} {op.sl:2d} {op.tl:3d} {op.tl_sensitivity} {op.tl_adjust:2d} "
                f"{op.ks_type_bit0 | op.ks_type_bit1 << 1} {op.ks_level_depth:2d} "
                f"{op.ks_rate_depth:2d} {op.freq:2d} {op.detune:2d} "
                f"{op.inharmonic_freq:2d} {op.carrier}"
            )


class _RxState(Enum):
    SYSEX_START = auto()
    ID_NO = auto()
    SUB_STATUS = auto()
    FORMAT_NO = auto()
    SYSTEM_NO = auto()
    MESSAGE_NO = auto()
    OP_NO = auto()
    BANK_NO = auto()
    BYTE_COUNT_MSB_OR_EOX = auto()
    BYTE_COUNT_LSB = auto()
    DATA_LOW = auto()
    DATA_HIGH = auto()
    CHECKSUM = auto()
    EOX = auto()


class _VoiceState(Enum):
    IN_NAME = auto()
    IN_PADDING = auto()
    IN_VOICE = auto()
    AFTER_VOICES = auto()


VoiceCallback = Callable[[Fb01Voice, int], None]


class Fb01MidiReceiver:
    """State machine that parses FB-01 SysEx data one byte at a time.

    Each completed voice is handed to ``voice_cb(voice, voicenum)``; the
    voice object is reused for the next voice, so keep a copy if needed.
    """

    def __init__(self, voice_cb: Optional[VoiceCallback] = None) -> None:
        self.voice_cb = voice_cb
        self.state = _RxState.SYSEX_START
        self.substatus = 0
        self.system_no = 0
        self.bank_no = 0
        self.byte_count = 0
        self.data_pos = 0
        self.data_byte = 0
        self.accumulator = 0
        self.voicestate = _VoiceState.IN_NAME
        self.voicenum = 0
        self.voicepos = 0
        self.namebuf = bytearray(_BANK_NAME_SIZE)
        self.voice = Fb01Voice()

    def _start_message(self, substatus: int) -> None:
        self.substatus = substatus
        self.voicestate = _VoiceState.IN_NAME
        self.voicepos = 0
        self.voicenum = 0

    def receive_voice(self, byte: int) -> Fb01Status:
        """Feed one decoded data byte into the voice parser."""
        if self.voicestate is _VoiceState.IN_NAME:
            self.namebuf[self.voicepos] = byte
            self.voicepos += 1
            if self.voicepos >= _BANK_NAME_SIZE:
                self.voicestate = _VoiceState.IN_PADDING
        elif self.voicestate is _VoiceState.IN_PADDING:
            self.voicepos += 1
            if self.voicepos >= _BANK_HEADER_SIZE:
                self.voicestate = _VoiceState.IN_VOICE
                self.voicepos = 0
        elif self.voicestate is _VoiceState.IN_VOICE:
            self.voice._decode(self.voicepos, byte)
            self.voicepos += 1
            if self.voicepos >= _VOICE_SIZE:
                if self.voice_cb is not None:
                    self.voice_cb(self.voice, self.voicenum)
                self.voicepos = 0
                self.voicenum += 1
                if self.voicenum >= _MAX_VOICES:
                    self.voicestate = _VoiceState.AFTER_VOICES
        else:
            raise Fb01Error(Fb01Status.TOO_MANY_VOICES)
        return Fb01Status.IN_PROGRESS

    def receive(self, byte: int) -> Fb01Status:
        """Feed one MIDI byte; returns SUCCESS at end of message, else IN_PROGRESS."""
        state = self.state
        if state is _RxState.SYSEX_START:
            if byte != 0xF0:
                raise Fb01Error(Fb01Status.NOT_SYSEX)
            self.state = _RxState.ID_NO
        elif state is _RxState.ID_NO:
            if byte != 0x43:
                raise Fb01Error(Fb01Status.BAD_ID_NO)
            self.state = _RxState.SUB_STATUS
        elif state is _RxState.SUB_STATUS:
            if byte < 16:
                self.state = _RxState.FORMAT_NO
            elif byte == 0x75:
                self.state = _RxState.SYSTEM_NO
            else:
                raise Fb01Error(Fb01Status.BAD_SUBSTATUS)
            self._start_message(byte)
        elif state is _RxState.FORMAT_NO:
            if byte != 0x0C:
                raise Fb01Error(Fb01Status.BAD_FORMAT_NO)
            self.state = _RxState.BYTE_COUNT_MSB_OR_EOX
        elif state is _RxState.SYSTEM_NO:
            if byte >= 16:
                raise Fb01Error(Fb01Status.BAD_SYSTEM_NO)
            self.system_no = byte
            self.state = _RxState.MESSAGE_NO
        elif state is _RxState.MESSAGE_NO:
            if byte != 0x00:
                raise Fb01Error(Fb01Status.BAD_MESSAGE_NO)
            self.state = _RxState.OP_NO
        elif state is _RxState.OP_NO:
            if byte != 0x00:
                raise Fb01Error(Fb01Status.BAD_OPERATION_NO)
            self.state = _RxState.BANK_NO
        elif state is _RxState.BANK_NO:
            if byte > 0x07:
                raise Fb01Error(Fb01Status.BAD_BANK_NO)
            self.bank_no = byte
            self.state = _RxState.BYTE_COUNT_MSB_OR_EOX
        elif state is _RxState.BYTE_COUNT_MSB_OR_EOX:
            if byte == 0xF7:
                return Fb01Status.SUCCESS
            if byte & 0x80:
                raise Fb01Error(Fb01Status.BAD_BYTE_COUNT_MSB)
            self.byte_count = (byte & 0x7F) << 7
            self.state = _RxState.BYTE_COUNT_LSB
        elif state is _RxState.BYTE_COUNT_LSB:
            if byte & 0x80:
                raise Fb01Error(Fb01Status.BAD_BYTE_COUNT_LSB)
            self.byte_count |= byte & 0x7F
            self.state = _RxState.DATA_LOW
            self.data_pos = 0
        elif state is _RxState.DATA_LOW:
            self.accumulator = (self.accumulator + byte) & 0xFF
            if byte > 0x0F:
                raise Fb01Error(Fb01Status.BAD_DATA_LOW)
            self.data_byte = byte
            self.data_pos += 1
            self.state = _RxState.DATA_HIGH
        elif state is _RxState.DATA_HIGH:
            self.accumulator = (self.accumulator + byte) & 0xFF
            if byte > 0x0F:
                raise Fb01Error(Fb01Status.BAD_DATA_HIGH)
            self.data_byte = (self.data_byte | byte << 4) & 0xFF
            self.data_pos += 1
            if self.data_pos >= self.byte_count:
                self.state = _RxState.CHECKSUM
            else:
                self.state = _RxState.DATA_LOW
            return self.receive_voice(self.data_byte)
        elif state is _RxState.CHECKSUM:
            if byte != (-self.accumulator & 0x7F):
                raise Fb01Error(Fb01Status.BAD_CHECKSUM)
            self.state = _RxState.BYTE_COUNT_MSB_OR_EOX
            self.accumulator = 0
        else:
            raise Fb01Error(Fb01Status.AFTER_EOX)
        return Fb01Status.IN_PROGRESS


def _nibble_block(payload: bytes) -> bytes:
    """Byte count, nibble-split payload and checksum of one data block."""
    size = 2 * len(payload)
    out = bytearray((size >> 7 & 0x7F, size & 0x7F))
    accumulator = 0
    for value in payload:
        low, high = value & 0x0F, value >> 4 & 0x0F
        out += bytes((low, high))
        accumulator += low + high
    out.append(-accumulator & 0x7F)
    return bytes(out)


@dataclass
class Fb01VoiceBank:
    """A bank of up to 48 voices with its name and MIDI system channel."""

    channel: int = 0
    bank: int = 0
    name: bytes = bytes(_BANK_NAME_SIZE)
    voices: list[Fb01Voice] = field(default_factory=list)

    @property
    def num_voices(self) -> int:
        return len(self.voices)

    @classmethod
    def from_bytes(cls, data: bytes) -> Fb01VoiceBank:
        """Parse a complete bulk voice bank SysEx dump."""
        voices: list[Fb01Voice] = []

        def collect(voice: Fb01Voice, voicenum: int) -> None:
            if voicenum < _MAX_VOICES:
                voices.append(copy.deepcopy(voice))

        rx = Fb01MidiReceiver(collect)
        last = len(data) - 1
        for i, byte in enumerate(data):
            if rx.receive(byte) is Fb01Status.SUCCESS and i < last:
                raise Fb01Error(Fb01Status.EARLY_EOX)
        return cls(
            channel=rx.system_no,
            bank=rx.bank_no,
            name=bytes(rx.namebuf),
            voices=voices[: rx.voicenum],
        )

    def to_bytes(self) -> bytes:
        """Encode the bank as a bulk voice bank SysEx dump."""
        header = bytes((0xF0, 0x43, 0x75, self.channel & 0x0F, 0x00, 0x00, self.bank & 0x07))
        name = bytes(self.name[:_BANK_NAME_SIZE]).ljust(_BANK_HEADER_SIZE, b"\0")
        blocks = [_nibble_block(name)]
        blocks.extend(_nibble_block(voice._encode()) for voice in self.voices)
        return header + b"".join(blocks) + b"\xf7"

    def dump(self) -> None:
        """Print the bank header and every voice."""
        name = "".join(_safechar(c) for c in bytes(self.name[:8]).ljust(8, b"\0"))
        print(f"bank {self.bank}, channel {self.channel}, name={name} voices={self.num_voices}")
        for i, voice in enumerate(self.voices):
            voice.dump(i)