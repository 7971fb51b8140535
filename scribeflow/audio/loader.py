"""Load audio files into 16 kHz mono float32 waveforms."""

import logging
from math import gcd
from pathlib import Path
from typing import Union

import numpy as np
from scipy.io import wavfile
from scipy.signal import resample_poly

from ..inference.base import SAMPLING_RATE

logger = logging.getLogger(__name__)


def to_float32(samples: np.ndarray) -> np.ndarray:
    """Convert PCM samples of any wav dtype to float32 in [-1.0, 1.0]."""
    if samples.dtype == np.uint8:
        return (samples.astype(np.float32) - 128.0) / 128.0
    if np.issubdtype(samples.dtype, np.integer):
        scale = float(np.iinfo(samples.dtype).max) + 1.0
        return samples.astype(np.float32) / scale
    return samples.astype(np.float32)


def resample(samples: np.ndarray, source_rate: int, target_rate: int = SAMPLING_RATE) -> np.ndarray:
    """Polyphase resample between integer rates."""
    if source_rate == target_rate:
        return samples
    divisor = gcd(source_rate, target_rate)
    return resample_poly(samples, target_rate // divisor, source_rate // divisor).astype(np.float32)


def load_waveform(path: Union[str, Path], sample_rate: int = SAMPLING_RATE) -> np.ndarray:
    """Read a WAV file as a mono float32 waveform at ``sample_rate``.

    Multi-channel files keep only the first channel.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a readable WAV file or holds no samples
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Audio file not found: {path}")

    try:
        source_rate, samples = wavfile.read(str(path))
    except ValueError as e:
        raise ValueError(f"Unsupported audio file {path}: {e}") from e

    if samples.ndim > 1:
        samples = samples[:, 0]
    if samples.size == 0:
        raise ValueError(f"Audio file {path} contains no samples")

    waveform = resample(to_float32(samples), source_rate, sample_rate)
    logger.info(f"Loaded {path.name}: {waveform.shape[0] / sample_rate:.1f}s at {sample_rate}Hz "
                f"(source {source_rate}Hz)")
    return waveform
