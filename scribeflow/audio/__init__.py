"""Audio input for Scribeflow."""

from .loader import load_waveform, resample, to_float32

__all__ = ["load_waveform", "resample", "to_float32"]
