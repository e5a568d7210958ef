"""Zero-crossing octave-divider voice engine with delay, and OpenSound Control data helpers."""

__version__ = "0.1.0"

__all__ = ["dsp", "voices", "engine", "oscargs", "timetag", "version"]