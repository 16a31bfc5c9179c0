import gzip
import math

import pytest

from fmvoice.tools import csv_quote, gcd, load_file, load_gzfile


def test_load_file_reads_all_bytes(tmp_path):
    payload = bytes(range(256)) * 3
    path = tmp_path / "data.bin"
    path.write_bytes(payload)
    assert load_file(path) == payload


def test_load_file_accepts_str_path(tmp_path):
    path = tmp_path / "x.bin"
    path.write_bytes(b"abc")
    assert load_file(str(path)) == b"abc"


def test_load_file_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_file(tmp_path / "missing.bin")


def test_load_gzfile_decompresses(tmp_path):
    payload = b"voice data " * 500
    path = tmp_path / "data.gz"
    path.write_bytes(gzip.compress(payload))
    assert load_gzfile(path) == payload


def test_load_gzfile_plain_file_passes_through(tmp_path):
    payload = b"not compressed at all"
    path = tmp_path / "plain.bin"
    path.write_bytes(payload)
    assert load_gzfile(path) == payload


def test_load_gzfile_missing_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_gzfile(tmp_path / "nope.gz")


@pytest.mark.parametrize("a,b", [(12, 18), (35, 21), (100, 75), (17, 5), (1, 1), (64, 48)])
def test_gcd_agrees_with_math_gcd(a, b):
    assert gcd(a, b) == math.gcd(a, b)


def test_gcd_of_common_multiples():
    assert gcd(7 * 5, 7 * 3) == 7


def test_gcd_divides_both():
    g = gcd(1071, 462)
    assert 1071 % g == 0 and 462 % g == 0


def test_gcd_zero_divisor_raises():
    with pytest.raises(ZeroDivisionError):
        gcd(5, 0)


def test_csv_quote_plain():
    assert csv_quote("abc") == '"abc"'


def test_csv_quote_none():
    assert csv_quote(None) == "\\N"


def test_csv_quote_doubles_quotes():
    assert csv_quote('a"b') == '"a""b"'


@pytest.mark.parametrize(
    "raw,escaped",
    [
        ("\n", "\\n"),
        ("\r", "\\r"),
        ("\t", "\\t"),
        ("\b", "\\b"),
        ("\\", "\\\\"),
        ("\x1a", "\\Z"),
        ("\0", "\\\0"),
    ],
)
def test_csv_quote_escapes(raw, escaped):
    assert csv_quote("x" + raw + "y") == '"x' + escaped + 'y"'