# fmvoice

Read and inspect FM synthesizer voice data: single-instrument files used by
trackers and sound drivers, and Yamaha FB-01 and DX21/TX81Z SysEx bulk dumps.
Pure Python 3.10+, no dependencies outside the standard library.

| Module               | Contents                                                   |
|----------------------|------------------------------------------------------------|
| `fmvoice.sbi_file`   | SBI (Sound Blaster Instrument), two-operator OPL voice     |
| `fmvoice.tfi_file`   | TFI, 42-byte four-operator OPN voice                       |
| `fmvoice.y12_file`   | Y12, 128-byte OPN voice with name, dumper and game fields  |
| `fmvoice.syx_fb01`   | FB-01 bulk voice bank SysEx: parse, encode, print          |
| `fmvoice.dx21_voice` | DX21/TX81Z voice data and a byte-by-byte SysEx receiver    |
| `fmvoice.dx21_bank`  | DX21/TX81Z voice bank SysEx: parse, encode, print          |
| `fmvoice.opn_voice`  | OPN voice model and pitch/block-F-number conversions       |
| `fmvoice.tools`      | File loading and small helpers                             |

## Installation

```
pip install fmvoice
```

## Command-line tools

```
sbidump piano.sbi organ.sbi
tfidump bass.tfi
y12dump lead.y12
```

Each command takes any number of file names. For every file it prints the
name followed by a listing of its parameters. A file that cannot be opened
or parsed is reported on standard error and skipped. The exit status is 0.

## Library use

### Single-instrument files

```python
from fmvoice.tools import load_file
from fmvoice.sbi_file import load_sbi, SbiFormatError
from fmvoice.tfi_file import load_tfi
from fmvoice.y12_file import load_y12

try:
    sbi = load_sbi(load_file("piano.sbi"))
except SbiFormatError:
    print("not an SBI file")
else:
    sbi.dump()

load_tfi(load_file("bass.tfi")).dump()
load_y12(load_file("lead.y12")).dump()
```

`load_sbi` accepts 47 to 52 bytes starting with `SBI` and `0x1A` or `0x1D`;
`load_tfi` needs exactly 42 bytes and `load_y12` exactly 128 bytes. Otherwise
they raise `SbiFormatError`, `TfiFormatError` or `Y12FormatError` (all
subclasses of `ValueError`). They return the dataclasses `SbiFile`, `TfiFile`
and `Y12File`.

### SysEx voice banks

```python
from fmvoice.tools import load_file
from fmvoice.syx_fb01 import Fb01VoiceBank, Fb01Error
from fmvoice.dx21_bank import Dx21VoiceBank

try:
    bank = Fb01VoiceBank.from_bytes(load_file("fb01_bank.syx"))
except Fb01Error as exc:
    print("bad FB-01 dump:", exc, exc.status)
else:
    bank.dump()
    raw = bank.to_bytes()

dx = Dx21VoiceBank.from_bytes(load_file("dx21_bank.syx"))
dx.dump()
```

Parse errors raise `Fb01Error` or `Dx21Error`. Each carries a `status` from
`Fb01Status` or `Dx21Status`. `error_string(status)` in the matching module
returns the status description, or `"Unknown"` for an unknown code.

`to_bytes()` encodes a bank back into a SysEx message. For the DX21 this is
the 32-voice VMEM bulk format.

For streaming input, `Fb01MidiReceiver` and `Dx21MidiReceiver` take MIDI
bytes one at a time through `receive(byte)`:

- They return `SUCCESS` at the end-of-exclusive byte and `IN_PROGRESS` otherwise.
- They raise on bad data.
- Each completed voice is passed to the optional `voice_cb(voice, voicenum)`. The voice object is reused, so copy it if you keep it.

### OPN voices and pitch helpers

`fmvoice.opn_voice` provides the `OpnVoice` and `OpnOperator` dataclasses. They offer:

- `normalize()`
- `is_silent()`
- `matches(other)`
- `md5_digest()`
- `dump()`

The module also converts between a frequency in Hz and the chip's block/F-number value:

```python
from fmvoice.opn_voice import opnx_pitch_to_block_fnum, opnx_block_fnum_to_pitch

block_fnum = opnx_pitch_to_block_fnum(440.0, 7670453)
```

The `opn_*` functions target the YM2203. The `opnx_*` functions target the
OPNA, OPNB and OPN2.

### Utilities

`fmvoice.tools` has four helpers:

- `load_file(filename)` returns a file's bytes.
- `load_gzfile(filename)` returns a file's bytes, decompressing them when the file is gzip data.
- `gcd(a, b)` returns the greatest common divisor.
- `csv_quote(text)` returns a quoted, escaped CSV field, or `\N` for `None`.

## What it does not do

- It does not convert between formats. The instrument readers return their own dataclasses, not `OpnVoice`, and there is no shared voice bank type.
- It cannot write SBI, TFI or Y12 files.
- There are no command-line tools for FB-01 or DX21 banks. Use `Fb01VoiceBank.dump()` and `Dx21VoiceBank.dump()` from Python.

## Running the tests

```
pip install "fmvoice[test]"
pytest
```