"""Abstract base classes for speech-recognition inference adapters."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence
import logging

import numpy as np

from ..models.transcript import BeamCandidate, RawChunk

logger = logging.getLogger(__name__)

SAMPLING_RATE = 16000

ProgressCallback = Callable[[Dict[str, Any]], None]
BeamCallback = Callable[[List[BeamCandidate]], None]
ChunkCallback = Callable[[Any], None]


@dataclass
class TranscriptionOptions:
    """Options recognized by ``run_transcription``."""
    chunk_length_s: float = 30.0
    stride_length_s: float = 5.0  # Also the fallback duration for segments without an end
    return_timestamps: bool = True

    def __post_init__(self):
        if self.chunk_length_s <= 0:
            raise ValueError(f"chunk_length_s must be positive, got {self.chunk_length_s}")
        if self.stride_length_s < 0:
            raise ValueError(f"stride_length_s must not be negative, got {self.stride_length_s}")
        if 2 * self.stride_length_s >= self.chunk_length_s:
            raise ValueError("chunk_length_s must be larger than twice stride_length_s")


class AbstractInferenceAdapter(ABC):
    """Boundary around a pretrained speech-recognition model."""

    def __init__(self, model_name: str):
        """Initialize adapter for a named model."""
        self.model_name = model_name

    @abstractmethod
    def load(self, progress_callback: Optional[ProgressCallback] = None) -> None:
        """Acquire model assets.

        Args:
            progress_callback: Receives dicts shaped like
                ``{"status": "progress", "file": ..., "progress": ..., "loaded": ..., "total": ...}``

        Raises:
            ModelAcquisitionError: If the model cannot be loaded
        """
        pass

    @abstractmethod
    def run_transcription(self,
                          waveform: np.ndarray,
                          options: TranscriptionOptions,
                          on_beam: BeamCallback,
                          on_chunk: ChunkCallback) -> None:
        """Run the model over a waveform, blocking until complete.

        Args:
            waveform: 1-D float32 samples, 16 kHz mono
            options: Chunking and timestamp options
            on_beam: Called once per generated token step with the current hypotheses
            on_chunk: Called once per finished audio chunk with its raw decode

        Raises:
            InferenceRuntimeError: If the model fails while processing
        """
        pass

    @abstractmethod
    def decode_tokens(self, token_ids: Sequence[int]) -> str:
        """Decode token ids to text, skipping special tokens."""
        pass

    @abstractmethod
    def decode_chunks(self, raw_chunks: List[Any]) -> List[RawChunk]:
        """Decode the whole raw chunk buffer into ordered timestamped chunks."""
        pass
