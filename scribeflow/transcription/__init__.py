"""Transcription module for Scribeflow."""

from .aggregator import TranscriptAggregator, round_half_up
from .publisher import MessagePublisher

__all__ = [
    "TranscriptAggregator",
    "round_half_up",
    "MessagePublisher",
]
