import copy

import pytest

from fmvoice.dx21_voice import (
    Dx21Error,
    Dx21MidiReceiver,
    Dx21Operator,
    Dx21Status,
    Dx21Voice,
    error_string,
    input_controller_name,
    lfo_waveform_name,
)


def _sample_voice():
    ops = [
        Dx21Operator(
            ar=31 - i, d1r=10 + i, d2r=5, rr=7, d1l=15, ksl=40 + i, ksr=2,
            eg_bias_sens=3, ame=1, kv=4, ol=90 - i, freq=20 + i, detune=i,
            fix=1, fix_range=5, fin_ratio=9, opw=3, shft=2,
        )
        for i in range(4)
    ]
    return Dx21Voice(
        op=ops, algorithm=4, feedback=6, lfo_speed=35, lfo_delay=12,
        lfo_pmd=7, lfo_amd=8, lfo_sync=1, lfo_wave=2, pm_sens=5, am_sens=1,
        middle_c=24, mono_mode=1, pitch_bend_range=2, fingered_porta=1,
        porta_time=50, fc_volume=60, fc_sustain=1, fc_porta=0, chorus=1,
        mw_pitch=11, mw_amplitude=22, bc_pitch=33, bc_amplitude=44,
        bc_pitch_bias=50, bc_eg_bias=66, name=b"BRASS  1  ",
        peg_rate_1=99, peg_rate_2=98, peg_rate_3=97, level_1=50,
        level_2=51, level_3=52, reverb_rate=3, fc_pitch=10, fc_amplitude=20,
    )


def _message(data, channel=0, fmt=0x04):
    count = len(data)
    checksum = -sum(data) & 0x7F
    return (
        bytes((0xF0, 0x43, channel, fmt, count >> 7 & 0x7F, count & 0x7F))
        + bytes(data)
        + bytes((checksum, 0xF7))
    )


def _collecting_receiver():
    voices = []
    rx = Dx21MidiReceiver(lambda voice, num: voices.append((num, copy.deepcopy(voice))))
    return rx, voices


def test_error_strings():
    assert error_string(Dx21Status.SUCCESS) == "Success"
    assert error_string(Dx21Status.BAD_CHECKSUM) == "Bad checksum"
    assert error_string(Dx21Status.BAD_VMEM_AR) == "BAD_VMEM_AR"
    assert error_string(Dx21Status.BAD_PEG_RATE_3) == "BAD_PEG_RATE_2"
    assert error_string(Dx21Status.BAD_FINGERED_PORTA) == "BAD_FINGeRED_pORTA"
    assert error_string(10_000) == "Unknown"


def test_status_order_follows_the_list():
    assert error_string(0) == "Success"
    assert error_string(1) == "In progress"
    assert error_string(len(Dx21Status) - 1) == "BAD_FC_AMPLITUDE"
    assert error_string(len(Dx21Status)) == "Unknown"


def test_names():
    assert input_controller_name(0) == "OFF"
    assert input_controller_name(4) == "FOOT"
    assert input_controller_name(5) == "Unknown"
    assert lfo_waveform_name(0) == "sawtooth"
    assert lfo_waveform_name(3) == "sample & hold"
    assert lfo_waveform_name(5) == "square"


def test_vmem_image_is_128_bytes_and_round_trips():
    voice = _sample_voice()
    image = voice._vmem_bytes()
    assert len(image) == 128
    assert image[84:] == bytes(44)
    rx, voices = _collecting_receiver()
    for byte in image:
        assert rx.receive_vmem_voice(byte) is Dx21Status.IN_PROGRESS
    assert rx.voicenum == 1
    assert rx.voicepos == 0
    assert voices == [(0, voice)]


def test_vmem_packed_operator_byte():
    rx = Dx21MidiReceiver()
    for byte in (1, 2, 3, 4, 5, 6, 0x4D):
        rx.receive_vmem_voice(byte)
    op = rx.voice.op[0]
    assert (op.ar, op.d1r, op.d2r, op.rr, op.d1l, op.ksl) == (1, 2, 3, 4, 5, 6)
    assert (op.ame, op.eg_bias_sens, op.kv) == (1, 1, 5)


@pytest.mark.parametrize(
    "prefix, byte, status",
    [
        ([], 32, Dx21Status.BAD_VMEM_AR),
        ([0, 0, 0], 16, Dx21Status.BAD_VMEM_RR),
        ([0] * 6, 0x80, Dx21Status.BAD_VMEM_AME_EBS_KVS),
        ([0] * 9, 33, Dx21Status.BAD_VMEM_RS_DET),
        ([0] * 9, 7, Dx21Status.BAD_VMEM_DET),
        ([0] * 41, 100, Dx21Status.BAD_LFO_SPEED),
        ([0] * 48, 0x20, Dx21Status.BAD_CH_MO_SU_PO_PM),
        ([0] * 73, 0x40, Dx21Status.BAD_SHFT_FIX_FIXRG),
        ([0] * 74, 0x80, Dx21Status.BAD_OPW_FINE),
        ([0] * 81, 8, Dx21Status.BAD_REVERB_RATE),
    ],
)
def test_vmem_range_errors(prefix, byte, status):
    rx = Dx21MidiReceiver()
    for b in prefix:
        rx.receive_vmem_voice(b)
    with pytest.raises(Dx21Error) as info:
        rx.receive_vmem_voice(byte)
    assert info.value.status is status


def test_vced_decoding():
    data = bytearray(128)
    data[0] = 31
    data[12] = 6
    data[13] = 17
    data[52] = 7
    data[53] = 5
    data[65] = 1
    data[77:87] = b"E.PIANO 1 "
    data[92] = 99
    rx, voices = _collecting_receiver()
    for byte in data:
        rx.receive_vced_voice(byte)
    assert len(voices) == 1
    num, voice = voices[0]
    assert num == 0
    assert voice.op[0].ar == 31
    assert voice.op[0].detune == 6
    assert voice.op[1].ar == 17
    assert voice.algorithm == 7
    assert voice.feedback == 5
    assert voice.fingered_porta == 1
    assert voice.name == b"E.PIANO 1 "
    assert voice.level_3 == 99


@pytest.mark.parametrize(
    "pos, byte, status",
    [
        (0, 32, Dx21Status.BAD_VCED_AR),
        (12, 7, Dx21Status.BAD_VCED_DETUNE),
        (52, 8, Dx21Status.BAD_VCED_ALGORITHM),
        (65, 2, Dx21Status.BAD_FINGERED_PORTA),
        (89, 100, Dx21Status.BAD_PEG_RATE_3),
    ],
)
def test_vced_range_errors(pos, byte, status):
    rx = Dx21MidiReceiver()
    for _ in range(pos):
        rx.receive_vced_voice(0)
    with pytest.raises(Dx21Error) as info:
        rx.receive_vced_voice(byte)
    assert info.value.status is status


def test_too_many_voices():
    rx = Dx21MidiReceiver()
    for _ in range(32 * 128):
        rx.receive_vmem_voice(0)
    assert rx.voicenum == 32
    with pytest.raises(Dx21Error) as info:
        rx.receive_vmem_voice(0)
    assert info.value.status is Dx21Status.TOO_MANY_VOICES


def test_full_message():
    voice = _sample_voice()
    msg = _message(voice._vmem_bytes(), channel=5)
    rx, voices = _collecting_receiver()
    results = [rx.receive(b) for b in msg]
    assert results[-1] is Dx21Status.SUCCESS
    assert all(r is Dx21Status.IN_PROGRESS for r in results[:-1])
    assert rx.channel == 5
    assert rx.format == 0x04
    assert voices == [(0, voice)]


def test_bad_checksum():
    msg = bytearray(_message(_sample_voice()._vmem_bytes()))
    msg[-2] = (msg[-2] + 1) & 0x7F
    rx = Dx21MidiReceiver()
    with pytest.raises(Dx21Error) as info:
        for b in msg:
            rx.receive(b)
    assert info.value.status is Dx21Status.BAD_CHECKSUM


@pytest.mark.parametrize(
    "prefix, status",
    [
        (b"\x90", Dx21Status.NOT_SYSEX),
        (b"\xf0\x41", Dx21Status.BAD_ID_NO),
        (b"\xf0\x43\x10", Dx21Status.BAD_SUBSTATUS),
        (b"\xf0\x43\x00\x05", Dx21Status.BAD_FORMAT_NO),
        (b"\xf0\x43\x00\x04\x81", Dx21Status.BAD_BYTE_COUNT_MSB),
        (b"\xf0\x43\x00\x04\x20\x80", Dx21Status.BAD_BYTE_COUNT_LSB),
    ],
)
def test_header_errors(prefix, status):
    rx = Dx21MidiReceiver()
    with pytest.raises(Dx21Error) as info:
        for b in prefix:
            rx.receive(b)
    assert info.value.status is status
    assert str(info.value) == status.description


def test_empty_message_ends_with_success():
    rx = Dx21MidiReceiver()
    results = [rx.receive(b) for b in b"\xf0\x43\x00\x03\xf7"]
    assert results[-1] is Dx21Status.SUCCESS
    assert rx.format == 0x03
    assert rx.voicenum == 0