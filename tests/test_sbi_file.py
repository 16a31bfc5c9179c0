import pytest

from fmvoice.sbi_file import SbiFile, SbiFormatError, load_sbi, main

PARAMS = bytes(range(1, 15))


def make_sbi(name=b"PIANO", params=PARAMS, sig=0x1A, pad=2):
    return b"SBI" + bytes([sig]) + name.ljust(32, b"\0") + params + bytes(pad)


def test_load_fields():
    sbi = load_sbi(make_sbi())
    assert sbi.am_vib_eg_ksr_mul == (PARAMS[0], PARAMS[1])
    assert sbi.ksl_tl == (PARAMS[2], PARAMS[3])
    assert sbi.ar_dr == (PARAMS[4], PARAMS[5])
    assert sbi.sl_rr == (PARAMS[6], PARAMS[7])
    assert sbi.ws == (PARAMS[8], PARAMS[9])
    assert sbi.fb_con == PARAMS[10]
    assert sbi.perc_voice == PARAMS[11]
    assert sbi.transpose == PARAMS[12]
    assert sbi.perc_pitch == PARAMS[13]


def test_load_name():
    sbi = load_sbi(make_sbi(name=b"BRASS"))
    assert sbi.name == b"BRASS".ljust(32, b"\0")
    assert sbi.display_name == "BRASS"


def test_transpose_is_signed():
    params = bytearray(PARAMS)
    params[12] = 0xFE
    assert load_sbi(make_sbi(params=bytes(params))).transpose == -2


def test_alternate_signature_accepted():
    assert load_sbi(make_sbi(sig=0x1D)).fb_con == PARAMS[10]


@pytest.mark.parametrize("sig", [0x00, 0x1B, 0x1C])
def test_bad_signature_byte(sig):
    with pytest.raises(SbiFormatError):
        load_sbi(make_sbi(sig=sig))


def test_bad_magic():
    data = bytearray(make_sbi())
    data[0:3] = b"XBI"
    with pytest.raises(SbiFormatError):
        load_sbi(bytes(data))


@pytest.mark.parametrize("size", [0, 46, 53, 100])
def test_bad_size(size):
    data = make_sbi(pad=0).ljust(size, b"\0")[:size]
    with pytest.raises(SbiFormatError):
        load_sbi(data)


def test_short_file_missing_fields_are_zero():
    data = make_sbi(pad=0)[:47]
    sbi = load_sbi(data)
    assert sbi.ws == (PARAMS[8], PARAMS[9])
    assert (sbi.fb_con, sbi.perc_voice, sbi.transpose, sbi.perc_pitch) == (PARAMS[10], 0, 0, 0)


def test_default_sbi_file_matches_zero_load():
    assert load_sbi(make_sbi(name=b"", params=bytes(14))) == SbiFile()


def test_dump(capsys):
    params = bytearray(PARAMS)
    params[10] = (5 << 1) | 1
    load_sbi(make_sbi(params=bytes(params))).dump()
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "name=PIANO"
    assert lines[1].startswith("fb=5 con=1 ")
    assert lines[2] == " OP AM VIB EG KSR MUL KSL TL AR DR SL RR WS"
    assert lines[3].startswith("MOD ")
    assert lines[4].startswith("CAR ")


def test_main_dumps_files(tmp_path, capsys):
    path = tmp_path / "piano.sbi"
    path.write_bytes(make_sbi())
    assert main([str(path)]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out[0] == str(path)
    assert out[1] == "name=PIANO"


def test_main_reports_errors(tmp_path, capsys):
    bad = tmp_path / "bad.sbi"
    bad.write_bytes(b"garbage")
    missing = tmp_path / "missing.sbi"
    assert main([str(missing), str(bad)]) == 0
    captured = capsys.readouterr()
    assert f"Could not open {missing}" in captured.err
    assert f"Could not load {bad}" in captured.err
    assert captured.out == ""