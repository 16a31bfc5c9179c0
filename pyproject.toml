[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fmvoice"
version = "0.1.0"
description = "Read and inspect FM synthesizer instrument files (SBI, TFI, Y12) and Yamaha FB-01/DX21 SysEx voice banks"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "fm synthesis",
    "sysex",
    "midi",
    "yamaha",
    "opn",
    "opl",
    "fb-01",
    "dx21",
    "tx81z",
    "sbi",
    "tfi",
    "y12",
    "instrument",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Sound Synthesis",
    "Topic :: Multimedia :: Sound/Audio :: MIDI",
    "Topic :: File Formats",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
sbidump = "fmvoice.sbi_file:main"
tfidump = "fmvoice.tfi_file:main"
y12dump = "fmvoice.y12_file:main"

[tool.hatch.build.targets.wheel]
packages = ["fmvoice"]

[tool.hatch.build.targets.sdist]
include = ["fmvoice", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
