"""Serial and TCP/UDP ports, waveform frame encoding, tool boxes and settings."""

__version__ = "1.4.0"