import pytest

from fmvoice.tfi_file import TfiFile, TfiFormatError, TfiOperator, load_tfi, main

DATA = bytes(range(42))


def test_load_header():
    tfi = load_tfi(DATA)
    assert tfi.alg == 0
    assert tfi.fb == 1
    assert len(tfi.operators) == 4


def test_load_operator_layout():
    tfi = load_tfi(DATA)
    assert tfi.operators[0] == TfiOperator(2, 3, 4, 5, 6, 7, 8, 9, 10, 11)
    assert tfi.operators[3] == TfiOperator(32, 33, 34, 35, 36, 37, 38, 39, 40, 41)


def test_operators_cover_all_bytes_in_order():
    tfi = load_tfi(DATA)
    flattened = [tfi.alg, tfi.fb]
    for op in tfi.operators:
        flattened += [op.mul, op.dt, op.tl, op.rs, op.ar, op.dr, op.sr, op.rr, op.sl, op.ssg_eg]
    assert bytes(flattened) == DATA


@pytest.mark.parametrize("size", [0, 41, 43, 128])
def test_wrong_size_rejected(size):
    with pytest.raises(TfiFormatError):
        load_tfi(bytes(size))


def test_dump(capsys):
    load_tfi(DATA).dump()
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == "alg=0 fb=1"
    assert lines[1] == "OP MUL DT TL RS AR DR SR RR SL SSG-EG"
    assert lines[2] == "0  2 3 4 5 6 7 8 9 10 11"
    assert len(lines) == 6


def test_default_file_is_zero():
    tfi = TfiFile()
    assert tfi.operators == [TfiOperator()] * 4


def test_main(tmp_path, capsys):
    good = tmp_path / "good.tfi"
    good.write_bytes(DATA)
    bad = tmp_path / "bad.tfi"
    bad.write_bytes(b"short")
    missing = tmp_path / "missing.tfi"
    assert main([str(good), str(bad), str(missing)]) == 0
    out, err = capsys.readouterr()
    assert out.splitlines()[0] == str(good)
    assert f"Could not load {bad}" in err
    assert f"Could not open {missing}" in err
    assert str(bad) not in out