"""Yamaha DX21 32-voice bulk dumps (VMEM format) and their text dump."""

from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field

from fmvoice.dx21_voice import (
    Dx21Error,
    Dx21MidiReceiver,
    Dx21Status,
    Dx21Voice,
    lfo_waveform_name,
)

_MAX_BANK_VOICES = 48
_BULK_SIZE = 4096
_CLOCK = 4_000_000
_NOTES = "CCDDEFFGGAAB"
# Operators are listed in the order they appear on the synthesizer's panel.
_OP_ORDER = (3, 1, 2, 0)


def _safechar(c: int) -> str:
    return chr(c) if 48 < c < 127 or c == 0x20 else "."


def _lfo_speed_to_hz(lfo_speed: int, clock: int) -> float:
    return clock * (16 + lfo_speed % 16) / 2 ** (36 - math.floor(lfo_speed / 16.0))


def dump_voice(voice: Dx21Voice, voicenum: int) -> None:
    """Print one voice as a human-readable table."""
    name = "".join(_safechar(c) for c in bytes(voice.name[:10]).ljust(10, b"\0"))
    print(f"Voice {voicenum}: {name}")
    print(f"  Algorithm: {voice.algorithm + 1}")
    hz = _lfo_speed_to_hz(voice.lfo_speed, _CLOCK)
    print(
        f"  LFO speed={voice.lfo_speed} ({hz:.2f}Hz) delay={voice.lfo_delay} "
        f"pmd={voice.lfo_pmd} amd={voice.lfo_amd} sync={voice.lfo_sync} "
        f"wave={lfo_waveform_name(voice.lfo_wave)} ({voice.lfo_wave})"
    )
    print(f"  PM sensitivity: {voice.pm_sens}  AM sensitivity: {voice.am_sens}")
    print(f"  Chorus: {voice.chorus}  Reverb: {voice.reverb_rate}")
    porta = "Fingered" if voice.fingered_porta else "Full time"
    print(f"  Portamento: {porta}, time={voice.porta_time}")
    print(
        f"  Pitch bend range: {voice.pitch_bend_range}  "
        f"Middle C: {_NOTES[voice.middle_c % 12]}{voice.middle_c // 12 + 1} "
        f"({voice.middle_c - 24})  Play mode: {'MONO' if voice.mono_mode else 'POLY'}"
    )
    print(
        f"  FC volume={voice.fc_volume} sustain={voice.fc_sustain} "
        f"portamento={voice.fc_porta} pitch={voice.fc_pitch} amplitude={voice.fc_amplitude}"
    )
    print(f"  Mod wheel pitch={voice.mw_pitch} amplitude={voice.mw_amplitude}")
    print(
        f"  Breath pitch={voice.bc_pitch} amplitude={voice.bc_amplitude} "
        f"pitch bias={voice.bc_pitch_bias - 50} eg bias={voice.bc_eg_bias}"
    )
    # The second rate is shown in place of the third, as the hardware tools do.
    print(
        f"  Pitch EG rate {voice.peg_rate_1}, {voice.peg_rate_2}, {voice.peg_rate_2} "
        f"level {voice.level_1}, {voice.level_2}, {voice.level_3}"
    )
    print("  OP AR D1R D2R RR D1L LS RS EBS AMS KV OL  F DT FIX FIXR FIN OPW SHFT")
    for j, index in enumerate(_OP_ORDER):
        op = voice.op[index]
        print(
            f"  {j + 1:1d} "
            f" {op.ar:2d}"
            f"  {op.d1r:2d}"
            f"  {op.d2r:2d}"
            f" {op.rr:2d}"
            f"  {op.d1l:2d}"
            f" {op.ksl:2d}"
            f"  {op.ksr:1d}"
            f"   {op.eg_bias_sens:1d}"
            f"   {op.ame:1d}"
            f"  {op.kv:1d}"
            f" {op.ol:2d}"
            f" {op.freq:2d}"
            f" {op.detune - 3:+2d}"
            f"   {op.fix}"
            f"    {op.fix_range}"
            f"  {op.fin_ratio:2d}"
            f"   {op.opw}"
            f"    {op.shft}"
        )


@dataclass
class Dx21VoiceBank:
    """A bank of voices together with the MIDI channel it was sent on."""

    channel: int = 0
    voices: list[Dx21Voice] = field(default_factory=list)

    @property
    def num_voices(self) -> int:
        return len(self.voices)

    @classmethod
    def from_bytes(cls, data: bytes) -> Dx21VoiceBank:
        """Parse a complete bulk dump; raises Dx21Error on bad data."""
        voices: list[Dx21Voice] = []

        def collect(voice: Dx21Voice, voicenum: int) -> None:
            if voicenum < _MAX_BANK_VOICES:
                voices.append(copy.deepcopy(voice))

        rx = Dx21MidiReceiver(collect)
        last = len(data) - 1
        for i, byte in enumerate(data):
            if rx.receive(byte) is Dx21Status.SUCCESS and i < last:
                raise Dx21Error(Dx21Status.EARLY_EOX)
        return cls(channel=rx.channel, voices=voices[: rx.voicenum])

    def to_bytes(self) -> bytes:
        """Encode the bank as a 32-voice bulk dump."""
        payload = b"".join(voice._vmem_bytes() for voice in self.voices)
        checksum = -sum(payload) & 0x7F
        header = bytes(
            (0xF0, 0x43, self.channel & 0x0F, 0x04, _BULK_SIZE >> 7 & 0x7F, _BULK_SIZE & 0x7F)
        )
        return header + payload + bytes((checksum, 0xF7))

    def dump(self) -> None:
        """Print the bank header and every voice."""
        print(f"channel {self.channel}, voices={self.num_voices}")
        for i, voice in enumerate(self.voices):
            dump_voice(voice, i)