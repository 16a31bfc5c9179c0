"""Yamaha DX21/DX100/TX81Z voice data and the SysEx receiver that parses it."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum, auto
from typing import Callable, Optional

_VOICE_SIZE = 128
_MAX_VOICES = 32
_NAME_SIZE = 10


class Dx21Status(IntEnum):
    """Result codes of the DX21 SysEx receiver."""

    def _generate_next_value_(name, start, count, last_values):  # noqa: N805
        return count

    SUCCESS = auto()
    IN_PROGRESS = auto()
    FILE_TOO_SMALL = auto()
    NOT_SYSEX = auto()
    BAD_ID_NO = auto()
    BAD_SUBSTATUS = auto()
    BAD_CHANNEL = auto()
    BAD_MESSAGE_NO = auto()
    BAD_SYSTEM_NO = auto()
    BAD_OPERATION_NO = auto()
    BAD_FORMAT_NO = auto()
    BAD_BANK_NO = auto()
    TOO_SMALL = auto()
    TOO_BIG = auto()
    BAD_BYTE_COUNT_LSB = auto()
    BAD_BYTE_COUNT_MSB = auto()
    BAD_CHECKSUM = auto()
    AFTER_EOX = auto()
    EARLY_EOX = auto()
    SHORT_WRITE = auto()
    TOO_MANY_VOICES = auto()
    BAD_VCED_AR = auto()
    BAD_VCED_D1R = auto()
    BAD_VCED_D2R = auto()
    BAD_VCED_RR = auto()
    BAD_VCED_D1L = auto()
    BAD_VCED_KSL = auto()
    BAD_VCED_KSR = auto()
    BAD_VCED_EG_BIAS_SENS = auto()
    BAD_VCED_AME = auto()
    BAD_VCED_KV = auto()
    BAD_VCED_OL = auto()
    BAD_VCED_FREQ = auto()
    BAD_VCED_DETUNE = auto()
    BAD_VCED_ALGORITHM = auto()
    BAD_FEEDBACK = auto()
    BAD_LFO_SPEED = auto()
    BAD_LFO_DELAY = auto()
    BAD_LFO_PMD = auto()
    BAD_LFO_AMD = auto()
    BAD_LFO_SYNC = auto()
    BAD_LFO_WAVE = auto()
    BAD_PM_SENS = auto()
    BAD_AM_SENS = auto()
    BAD_MIDDLE_C = auto()
    BAD_MONO_MODE = auto()
    BAD_PITCH_BEND_RANGE = auto()
    BAD_FINGERED_PORTA = auto()
    BAD_PORTA_TIME = auto()
    BAD_FC_VOLUME = auto()
    BAD_FC_SUSTAIN = auto()
    BAD_FC_PORTA = auto()
    BAD_CHORUS = auto()
    BAD_MW_PITCH = auto()
    BAD_MW_AMPLITUDE = auto()
    BAD_BC_PITCH = auto()
    BAD_BC_AMPLITUDE = auto()
    BAD_BC_PITCH_BIAS = auto()
    BAD_BC_EG_BIAS = auto()
    BAD_PEG_RATE_1 = auto()
    BAD_PEG_RATE_2 = auto()
    BAD_PEG_RATE_3 = auto()
    BAD_LEVEL_1 = auto()
    BAD_LEVEL_2 = auto()
    BAD_LEVEL_3 = auto()
    BAD_VMEM_AR = auto()
    BAD_VMEM_D1R = auto()
    BAD_VMEM_D2R = auto()
    BAD_VMEM_RR = auto()
    BAD_VMEM_D1L = auto()
    BAD_VMEM_KSL = auto()
    BAD_VMEM_AME_EBS_KVS = auto()
    BAD_VMEM_OL = auto()
    BAD_VMEM_FREQ = auto()
    BAD_VMEM_RS_DET = auto()
    BAD_VMEM_DET = auto()
    BAD_CH_MO_SU_PO_PM = auto()
    BAD_SHFT_FIX_FIXRG = auto()
    BAD_OPW_FINE = auto()
    BAD_REVERB_RATE = auto()
    BAD_FC_PITCH = auto()
    BAD_FC_AMPLITUDE = auto()

    @property
    def description(self) -> str:
        return _DESCRIPTIONS.get(self, self.name)


_DESCRIPTIONS = {
    Dx21Status.SUCCESS: "Success",
    Dx21Status.IN_PROGRESS: "In progress",
    Dx21Status.FILE_TOO_SMALL: "File too small",
    Dx21Status.NOT_SYSEX: "Not sysex",
    Dx21Status.BAD_ID_NO: "Bad id no",
    Dx21Status.BAD_SUBSTATUS: "Bad substatus",
    Dx21Status.BAD_CHANNEL: "Bad channel",
    Dx21Status.BAD_MESSAGE_NO: "Bad message no",
    Dx21Status.BAD_SYSTEM_NO: "Bad system no",
    Dx21Status.BAD_OPERATION_NO: "Bad operation no",
    Dx21Status.BAD_FORMAT_NO: "Bad format no",
    Dx21Status.BAD_BANK_NO: "Bad bank no",
    Dx21Status.TOO_SMALL: "Too small",
    Dx21Status.TOO_BIG: "Too big",
    Dx21Status.BAD_BYTE_COUNT_LSB: "Bad byte count LSB",
    Dx21Status.BAD_BYTE_COUNT_MSB: "Bad byte count MSB",
    Dx21Status.BAD_CHECKSUM: "Bad checksum",
    Dx21Status.AFTER_EOX: "After EOX",
    Dx21Status.EARLY_EOX: "Early EOX",
    Dx21Status.SHORT_WRITE: "Short write",
    Dx21Status.TOO_MANY_VOICES: "Too many voices",
    Dx21Status.BAD_FINGERED_PORTA: "BAD_FINGeRED_pORTA",
    Dx21Status.BAD_PEG_RATE_3: "BAD_PEG_RATE_2",
}


class Dx21Error(ValueError):
    """Raised when DX21 SysEx data cannot be parsed."""

    def __init__(self, status: Dx21Status) -> None:
        super().__init__(status.description)
        self.status = status


def error_string(status: int) -> str:
    """Human-readable description of a status code."""
    try:
        return Dx21Status(status).description
    except ValueError:
        return "Unknown"


_CONTROLLER_NAMES = ("OFF", "TOUCH", "WHEEL", "BREATH", "FOOT")
_LFO_WAVEFORM_NAMES = ("sawtooth", "square", "triangle", "sample & hold")


def input_controller_name(c: int) -> str:
    """Name of an input controller."""
    if 0 <= c < len(_CONTROLLER_NAMES):
        return _CONTROLLER_NAMES[c]
    return "Unknown"


def lfo_waveform_name(w: int) -> str:
    """Name of an LFO waveform; only the low two bits are used."""
    return _LFO_WAVEFORM_NAMES[w & 0x03]


@dataclass
class Dx21Operator:
    """Parameters of one operator (VCED plus TX81Z additions)."""

    ar: int = 0
    d1r: int = 0
    d2r: int = 0
    rr: int = 0
    d1l: int = 0
    ksl: int = 0
    ksr: int = 0
    eg_bias_sens: int = 0
    ame: int = 0
    kv: int = 0
    ol: int = 0
    freq: int = 0
    detune: int = 0
    fix: int = 0
    fix_range: int = 0
    fin_ratio: int = 0
    opw: int = 0
    shft: int = 0

    def _vmem_bytes(self) -> bytes:
        return bytes(
            b & 0xFF
            for b in (
                self.ar,
                self.d1r,
                self.d2r,
                self.rr,
                self.d1l,
                self.ksl,
                self.ame << 6 | self.eg_bias_sens << 3 | self.kv,
                self.ol,
                self.freq,
                self.ksr << 3 | self.detune,
            )
        )

    def _aced_bytes(self) -> bytes:
        return bytes(
            (
                (self.shft << 4 | self.fix << 3 | self.fix_range) & 0xFF,
                (self.opw << 4 | self.fin_ratio) & 0xFF,
            )
        )


def _four_operators() -> list[Dx21Operator]:
    return [Dx21Operator() for _ in range(4)]


@dataclass
class Dx21Voice:
    """One voice: four operators and the common voice parameters."""

    op: list[Dx21Operator] = field(default_factory=_four_operators)
    algorithm: int = 0
    feedback: int = 0
    lfo_speed: int = 0
    lfo_delay: int = 0
    lfo_pmd: int = 0
    lfo_amd: int = 0
    lfo_sync: int = 0
    lfo_wave: int = 0
    pm_sens: int = 0
    am_sens: int = 0
    middle_c: int = 0
    mono_mode: int = 0
    pitch_bend_range: int = 0
    fingered_porta: int = 0
    porta_time: int = 0
    fc_volume: int = 0
    fc_sustain: int = 0
    fc_porta: int = 0
    chorus: int = 0
    mw_pitch: int = 0
    mw_amplitude: int = 0
    bc_pitch: int = 0
    bc_amplitude: int = 0
    bc_pitch_bias: int = 0
    bc_eg_bias: int = 0
    name: bytes = bytes(_NAME_SIZE)
    peg_rate_1: int = 0
    peg_rate_2: int = 0
    peg_rate_3: int = 0
    level_1: int = 0
    level_2: int = 0
    level_3: int = 0
    reverb_rate: int = 0
    fc_pitch: int = 0
    fc_amplitude: int = 0

    def _set_name_byte(self, index: int, byte: int) -> None:
        name = bytearray(bytes(self.name[:_NAME_SIZE]).ljust(_NAME_SIZE, b"\0"))
        name[index] = byte
        self.name = bytes(name)

    def _vmem_bytes(self) -> bytes:
        """The 128-byte VMEM image of the voice, as sent in a bulk dump."""
        common = bytes(
            b & 0xFF
            for b in (
                self.lfo_sync << 6 | self.feedback << 3 | self.algorithm,
                self.lfo_speed,
                self.lfo_delay,
                self.lfo_pmd,
                self.lfo_amd,
                self.pm_sens << 4 | self.am_sens << 2 | self.lfo_wave,
                self.middle_c,
                self.pitch_bend_range,
                self.chorus << 4
                | self.mono_mode << 3
                | self.fc_sustain << 2
                | self.fc_porta << 1
                | self.fingered_porta,
                self.porta_time,
                self.fc_volume,
                self.mw_pitch,
                self.mw_amplitude,
                self.bc_pitch,
                self.bc_amplitude,
                self.bc_pitch_bias,
                self.bc_eg_bias,
            )
        )
        name = bytes(self.name[:_NAME_SIZE]).ljust(_NAME_SIZE, b"\0")
        pitch_eg = bytes(
            b & 0xFF
            for b in (
                self.peg_rate_1,
                self.peg_rate_2,
                self.peg_rate_3,
                self.level_1,
                self.level_2,
                self.level_3,
            )
        )
        extra = bytes(b & 0xFF for b in (self.reverb_rate, self.fc_pitch, self.fc_amplitude))
        data = (
            b"".join(op._vmem_bytes() for op in self.op)
            + common
            + name
            + pitch_eg
            + b"".join(op._aced_bytes() for op in self.op)
            + extra
        )
        return data.ljust(_VOICE_SIZE, b"\0")


S = Dx21Status

# position within an operator block -> (attribute, maximum, error)
_VMEM_OP_FIELDS = {
    0: ("ar", 31, S.BAD_VMEM_AR),
    1: ("d1r", 31, S.BAD_VMEM_D1R),
    2: ("d2r", 31, S.BAD_VMEM_D2R),
    3: ("rr", 15, S.BAD_VMEM_RR),
    4: ("d1l", 15, S.BAD_VMEM_D1L),
    5: ("ksl", 99, S.BAD_VMEM_KSL),
    7: ("ol", 99, S.BAD_VMEM_OL),
    8: ("freq", 63, S.BAD_VMEM_FREQ),
}

_VMEM_VOICE_FIELDS = {
    41: ("lfo_speed", 99, S.BAD_LFO_SPEED),
    42: ("lfo_delay", 99, S.BAD_LFO_DELAY),
    43: ("lfo_pmd", 99, S.BAD_LFO_PMD),
    44: ("lfo_amd", 99, S.BAD_LFO_AMD),
    46: ("middle_c", 48, S.BAD_MIDDLE_C),
    47: ("pitch_bend_range", 12, S.BAD_PITCH_BEND_RANGE),
    49: ("porta_time", 99, S.BAD_PORTA_TIME),
    50: ("fc_volume", 99, S.BAD_FC_VOLUME),
    51: ("mw_pitch", 99, S.BAD_MW_PITCH),
    52: ("mw_amplitude", 99, S.BAD_MW_AMPLITUDE),
    53: ("bc_pitch", 99, S.BAD_BC_PITCH),
    54: ("bc_amplitude", 99, S.BAD_BC_AMPLITUDE),
    55: ("bc_pitch_bias", 99, S.BAD_BC_PITCH_BIAS),
    56: ("bc_eg_bias", 99, S.BAD_BC_EG_BIAS),
    67: ("peg_rate_1", 99, S.BAD_PEG_RATE_1),
    68: ("peg_rate_2", 99, S.BAD_PEG_RATE_2),
    69: ("peg_rate_3", 99, S.BAD_PEG_RATE_3),
    70: ("level_1", 99, S.BAD_LEVEL_1),
    71: ("level_2", 99, S.BAD_LEVEL_2),
    72: ("level_3", 99, S.BAD_LEVEL_3),
    81: ("reverb_rate", 7, S.BAD_REVERB_RATE),
    82: ("fc_pitch", 99, S.BAD_FC_PITCH),
    83: ("fc_amplitude", 99, S.BAD_FC_AMPLITUDE),
}

_VCED_OP_FIELDS = {
    0: ("ar", 31, S.BAD_VCED_AR),
    1: ("d1r", 31, S.BAD_VCED_D1R),
    2: ("d2r", 31, S.BAD_VCED_D2R),
    3: ("rr", 15, S.BAD_VCED_RR),
    4: ("d1l", 15, S.BAD_VCED_D1L),
    5: ("ksl", 99, S.BAD_VCED_KSL),
    6: ("ksr", 3, S.BAD_VCED_KSR),
    7: ("eg_bias_sens", 7, S.BAD_VCED_EG_BIAS_SENS),
    8: ("ame", 1, S.BAD_VCED_AME),
    9: ("kv", 7, S.BAD_VCED_KV),
    10: ("ol", 99, S.BAD_VCED_OL),
    11: ("freq", 63, S.BAD_VCED_FREQ),
    12: ("detune", 6, S.BAD_VCED_DETUNE),
}

_VCED_VOICE_FIELDS = {
    52: ("algorithm", 7, S.BAD_VCED_ALGORITHM),
    53: ("feedback", 7, S.BAD_FEEDBACK),
    54: ("lfo_speed", 99, S.BAD_LFO_SPEED),
    55: ("lfo_delay", 99, S.BAD_LFO_DELAY),
    56: ("lfo_pmd", 99, S.BAD_LFO_PMD),
    57: ("lfo_amd", 99, S.BAD_LFO_AMD),
    58: ("lfo_sync", 1, S.BAD_LFO_SYNC),
    59: ("lfo_wave", 3, S.BAD_LFO_WAVE),
    60: ("pm_sens", 7, S.BAD_PM_SENS),
    61: ("am_sens", 3, S.BAD_AM_SENS),
    62: ("middle_c", 48, S.BAD_MIDDLE_C),
    63: ("mono_mode", 1, S.BAD_MONO_MODE),
    64: ("pitch_bend_range", 12, S.BAD_PITCH_BEND_RANGE),
    65: ("fingered_porta", 1, S.BAD_FINGERED_PORTA),
    66: ("porta_time", 99, S.BAD_PORTA_TIME),
    67: ("fc_volume", 99, S.BAD_FC_VOLUME),
    68: ("fc_sustain", 1, S.BAD_FC_SUSTAIN),
    69: ("fc_porta", 1, S.BAD_FC_PORTA),
    70: ("chorus", 1, S.BAD_CHORUS),
    71: ("mw_pitch", 99, S.BAD_MW_PITCH),
    72: ("mw_amplitude", 99, S.BAD_MW_AMPLITUDE),
    73: ("bc_pitch", 99, S.BAD_BC_PITCH),
    74: ("bc_amplitude", 99, S.BAD_BC_AMPLITUDE),
    75: ("bc_pitch_bias", 99, S.BAD_BC_PITCH_BIAS),
    76: ("bc_eg_bias", 99, S.BAD_BC_EG_BIAS),
    87: ("peg_rate_1", 99, S.BAD_PEG_RATE_1),
    88: ("peg_rate_2", 99, S.BAD_PEG_RATE_2),
    89: ("peg_rate_3", 99, S.BAD_PEG_RATE_3),
    90: ("level_1", 99, S.BAD_LEVEL_1),
    91: ("level_2", 99, S.BAD_LEVEL_2),
    92: ("level_3", 99, S.BAD_LEVEL_3),
}

del S


def _store(target: object, spec: tuple[str, int, Dx21Status], byte: int) -> None:
    attr, maximum, error = spec
    if byte > maximum:
        raise Dx21Error(error)
    setattr(target, attr, byte)


class _RxState(Enum):
    SYSEX_START = auto()
    ID_NO = auto()
    SUB_STATUS = auto()
    FORMAT_NO = auto()
    BYTE_COUNT_MSB_OR_EOX = auto()
    BYTE_COUNT_LSB = auto()
    DATA = auto()
    CHECKSUM = auto()
    EOX = auto()


VoiceCallback = Callable[[Dx21Voice, int], None]


class Dx21MidiReceiver:
    """State machine that parses DX21 SysEx data one byte at a time.

    Each completed voice is handed to ``voice_cb(voice, voicenum)``; the
    voice object is reused for the next voice, so keep a copy if needed.
    """

    def __init__(self, voice_cb: Optional[VoiceCallback] = None) -> None:
        self.voice_cb = voice_cb
        self.state = _RxState.SYSEX_START
        self.channel = 0
        self.format = 0
        self.byte_count = 0
        self.data_pos = 0
        self.accumulator = 0
        self.voicenum = 0
        self.voicepos = 0
        self.voice = Dx21Voice()

    def _advance(self) -> Dx21Status:
        self.voicepos += 1
        if self.voicepos >= _VOICE_SIZE:
            if self.voice_cb is not None:
                self.voice_cb(self.voice, self.voicenum)
            self.voicepos = 0
            self.voicenum += 1
        return Dx21Status.IN_PROGRESS

    def receive_vmem_voice(self, byte: int) -> Dx21Status:
        """Feed one byte of a voice in the packed VMEM bulk format."""
        if self.voicenum >= _MAX_VOICES:
            raise Dx21Error(Dx21Status.TOO_MANY_VOICES)
        pos = self.voicepos
        voice = self.voice
        if pos < 40:
            op = voice.op[pos // 10]
            oppos = pos % 10
            if oppos == 6:
                if byte & 0x80:
                    raise Dx21Error(Dx21Status.BAD_VMEM_AME_EBS_KVS)
                op.ame = byte >> 6 & 0x01
                op.eg_bias_sens = byte >> 3 & 0x07
                op.kv = byte & 0x07
            elif oppos == 9:
                if byte > 32:
                    raise Dx21Error(Dx21Status.BAD_VMEM_RS_DET)
                if (byte & 0x07) > 6:
                    raise Dx21Error(Dx21Status.BAD_VMEM_DET)
                op.ksr = byte >> 3 & 0x03
                op.detune = byte & 0x07
            else:
                _store(op, _VMEM_OP_FIELDS[oppos], byte)
        elif 57 <= pos <= 66:
            voice._set_name_byte(pos - 57, byte)
        elif 73 <= pos <= 80:
            op = voice.op[(pos - 73) // 2]
            if (pos - 73) % 2 == 0:
                if byte & 0xC0:
                    raise Dx21Error(Dx21Status.BAD_SHFT_FIX_FIXRG)
                op.shft = byte >> 4 & 0x03
                op.fix = byte >> 3 & 0x01
                op.fix_range = byte & 0x07
            else:
                if byte & 0x80:
                    raise Dx21Error(Dx21Status.BAD_OPW_FINE)
                op.opw = byte >> 4 & 0x07
                op.fin_ratio = byte & 0x0F
        elif pos == 40:
            voice.lfo_sync = byte >> 6
            voice.feedback = byte >> 3 & 0x07
            voice.algorithm = byte & 0x07
        elif pos == 45:
            voice.pm_sens = byte >> 4
            voice.am_sens = byte >> 2 & 0x03
            voice.lfo_wave = byte & 0x03
        elif pos == 48:
            if byte > 0x1F:
                raise Dx21Error(Dx21Status.BAD_CH_MO_SU_PO_PM)
            voice.chorus = byte >> 4 & 0x01
            voice.mono_mode = byte >> 3 & 0x01
            voice.fc_sustain = byte >> 2 & 0x01
            voice.fc_porta = byte >> 1 & 0x01
            voice.fingered_porta = byte & 0x01
        elif pos in _VMEM_VOICE_FIELDS:
            _store(voice, _VMEM_VOICE_FIELDS[pos], byte)
        return self._advance()

    def receive_vced_voice(self, byte: int) -> Dx21Status:
        """Feed one byte of a voice in the unpacked VCED edit format."""
        if self.voicenum >= _MAX_VOICES:
            raise Dx21Error(Dx21Status.TOO_MANY_VOICES)
        pos = self.voicepos
        if pos < 52:
            _store(self.voice.op[pos // 13], _VCED_OP_FIELDS[pos % 13], byte)
        elif 77 <= pos <= 86:
            self.voice._set_name_byte(pos - 77, byte)
        elif pos in _VCED_VOICE_FIELDS:
            _store(self.voice, _VCED_VOICE_FIELDS[pos], byte)
        return self._advance()

    def receive(self, byte: int) -> Dx21Status:
        """Feed one MIDI byte; returns SUCCESS at end of message, else IN_PROGRESS."""
        state = self.state
        if state is _RxState.SYSEX_START:
            if byte != 0xF0:
                raise Dx21Error(Dx21Status.NOT_SYSEX)
            self.state = _RxState.ID_NO
        elif state is _RxState.ID_NO:
            if byte != 0x43:
                raise Dx21Error(Dx21Status.BAD_ID_NO)
            self.state = _RxState.SUB_STATUS
        elif state is _RxState.SUB_STATUS:
            if byte > 15:
                raise Dx21Error(Dx21Status.BAD_SUBSTATUS)
            self.channel = byte
            self.state = _RxState.FORMAT_NO
        elif state is _RxState.FORMAT_NO:
            if byte not in (0x03, 0x04):
                raise Dx21Error(Dx21Status.BAD_FORMAT_NO)
            self.format = byte
            self.state = _RxState.BYTE_COUNT_MSB_OR_EOX
        elif state is _RxState.BYTE_COUNT_MSB_OR_EOX:
            if byte == 0xF7:
                return Dx21Status.SUCCESS
            if byte & 0x80:
                raise Dx21Error(Dx21Status.BAD_BYTE_COUNT_MSB)
            self.byte_count = (byte & 0x7F) << 7
            self.state = _RxState.BYTE_COUNT_LSB
        elif state is _RxState.BYTE_COUNT_LSB:
            if byte & 0x80:
                raise Dx21Error(Dx21Status.BAD_BYTE_COUNT_LSB)
            self.byte_count |= byte & 0x7F
            self.state = _RxState.DATA
            self.data_pos = 0
        elif state is _RxState.DATA:
            self.accumulator = (self.accumulator + byte) & 0xFF
            self.data_pos += 1
            if self.data_pos >= self.byte_count:
                self.state = _RxState.CHECKSUM
            # Both the single-voice and the 32-voice formats carry VMEM data.
            return self.receive_vmem_voice(byte)
        elif state is _RxState.CHECKSUM:
            if byte != (-self.accumulator & 0x7F):
                raise Dx21Error(Dx21Status.BAD_CHECKSUM)
            self.state = _RxState.BYTE_COUNT_MSB_OR_EOX
            self.accumulator = 0
        else:
            raise Dx21Error(Dx21Status.AFTER_EOX)
        return Dx21Status.IN_PROGRESS