"""Inference adapters and the model registry."""

from .base import AbstractInferenceAdapter, TranscriptionOptions, SAMPLING_RATE
from .registry import ModelRegistry, get_registry
from .stream import InferenceStream, BeamUpdate, ChunkUpdate, StreamDone, StreamError

__all__ = [
    "AbstractInferenceAdapter",
    "TranscriptionOptions",
    "SAMPLING_RATE",
    "ModelRegistry",
    "get_registry",
    "InferenceStream",
    "BeamUpdate",
    "ChunkUpdate",
    "StreamDone",
    "StreamError",
]
