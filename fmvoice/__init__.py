"""Read and inspect FM synthesizer instrument files and Yamaha SysEx voice banks."""

__version__ = "0.1.0"