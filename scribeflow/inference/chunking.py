"""Windowing of long waveforms into overlapping chunks."""

from typing import Iterator, Tuple

import numpy as np

from .base import SAMPLING_RATE


def chunk_waveform(waveform: np.ndarray,
                   chunk_length_s: float,
                   stride_length_s: float,
                   sampling_rate: int = SAMPLING_RATE) -> Iterator[Tuple[np.ndarray, Tuple[int, int, int]]]:
    """Split a waveform into overlapping windows.

    Each window is ``chunk_length_s`` long and overlaps its neighbours by
    ``stride_length_s`` on each side. Yields ``(samples, (chunk_len, stride_left, stride_right))``
    with all stride values counted in samples. The first window has no left
    stride and the last has no right stride.
    """
    chunk_len = int(round(chunk_length_s * sampling_rate))
    stride = int(round(stride_length_s * sampling_rate))
    step = chunk_len - 2 * stride
    if step <= 0:
        raise ValueError("Stride is too large for the chunk length")

    total = waveform.shape[0]
    for start in range(0, total, step):
        end = start + chunk_len
        chunk = waveform[start:end]
        stride_left = 0 if start == 0 else stride
        is_last = end >= total
        stride_right = 0 if is_last else stride
        if chunk.shape[0] > stride_left:
            yield chunk, (chunk.shape[0], stride_left, stride_right)
        if is_last:
            break
