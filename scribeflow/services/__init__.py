"""Service layer for Scribeflow."""

from .transcription_service import TranscriptionWorker, TRANSCRIPTION_TOPIC
from .translation_service import TranslationWorker, TranslationRequest, TRANSLATION_TOPIC

__all__ = [
    "TranscriptionWorker",
    "TRANSCRIPTION_TOPIC",
    "TranslationWorker",
    "TranslationRequest",
    "TRANSLATION_TOPIC",
]
