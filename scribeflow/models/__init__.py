"""Data models for the Scribeflow application."""

from .transcript import Segment, PartialPreview, RawChunk, BeamCandidate, transcript_text
from .messages import (
    MessageType,
    LoadingStatus,
    LoadingMessage,
    DownloadingMessage,
    PartialResultMessage,
    ResultMessage,
    InferenceDoneMessage,
    InferenceErrorMessage,
    TranslationMessage,
    InferenceRequest,
)

__all__ = [
    "Segment",
    "PartialPreview",
    "RawChunk",
    "BeamCandidate",
    "transcript_text",
    # Channel messages
    "MessageType",
    "LoadingStatus",
    "LoadingMessage",
    "DownloadingMessage",
    "PartialResultMessage",
    "ResultMessage",
    "InferenceDoneMessage",
    "InferenceErrorMessage",
    "TranslationMessage",
    "InferenceRequest",
]
