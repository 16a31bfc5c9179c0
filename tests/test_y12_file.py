import pytest

from fmvoice.y12_file import Y12FormatError, Y12Operator, load_y12, main


def build(name=b"Lead", dumper=b"someone", game=b"A Game", alg=4, fb=5):
    data = bytearray(128)
    for i in range(4):
        data[i * 16 : i * 16 + 7] = bytes(10 * i + k for k in range(1, 8))
        data[i * 16 + 7 : i * 16 + 16] = b"\xee" * 9
    data[64] = alg
    data[65] = fb
    data[66:80] = b"\xee" * 14
    data[80:96] = name.ljust(16, b"\0")
    data[96:112] = dumper.ljust(16, b"\0")
    data[112:128] = game.ljust(16, b"\0")
    return bytes(data)


def test_load_fields():
    y12 = load_y12(build())
    assert y12.alg == 4
    assert y12.fb == 5
    assert y12.name == b"Lead"
    assert y12.dumper == b"someone"
    assert y12.game == b"A Game"


def test_load_operators_skip_padding():
    y12 = load_y12(build())
    assert y12.operators[0] == Y12Operator(1, 2, 3, 4, 5, 6, 7)
    assert y12.operators[3] == Y12Operator(31, 32, 33, 34, 35, 36, 37)


def test_full_length_text_fields():
    y12 = load_y12(build(name=b"N" * 16, game=b"G" * 16))
    assert y12.name == b"N" * 16
    assert y12.game == b"G" * 16


@pytest.mark.parametrize("size", [0, 127, 129])
def test_wrong_size_rejected(size):
    with pytest.raises(Y12FormatError):
        load_y12(bytes(size))


def test_dump(capsys):
    load_y12(build(name=b"Le\x01d")).dump()
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "alg=4 fb=5"
    assert lines[1] == "name=Le.d"
    assert lines[2] == "dumper=someone"
    assert lines[3] == "game=A Game"
    assert lines[4] == "OP MUL DT TL AR RS DR AM SR RR SL SSG"
    assert len(lines) == 9


def test_dump_operator_fields(capsys):
    data = bytearray(build())
    data[0:7] = bytes((0x35, 0xFF, 0xC7, 0x9F, 9, 0xA3, 8))
    load_y12(bytes(data)).dump()
    row = capsys.readouterr().out.splitlines()[5].split()
    assert row[0] == "0"
    assert row[1:] == ["5", "3", "127", "3", "7", "31", "1", "9", "10", "3", "8"]


def test_main(tmp_path, capsys):
    good = tmp_path / "voice.y12"
    good.write_bytes(build())
    bad = tmp_path / "bad.y12"
    bad.write_bytes(bytes(10))
    missing = tmp_path / "none.y12"
    assert main([str(good), str(bad), str(missing)]) == 0
    out, err = capsys.readouterr()
    assert out.splitlines()[0] == str(good)
    assert "name=Lead" in out
    assert f"Could not load {bad}" in err
    assert f"Could not open {missing}" in err