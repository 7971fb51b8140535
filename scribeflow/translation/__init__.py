"""Translation module for Scribeflow."""

from .base import AbstractTranslationBackend
from .languages import LANGUAGES, LANGUAGE_CODES, resolve_language

__all__ = [
    "AbstractTranslationBackend",
    "LANGUAGES",
    "LANGUAGE_CODES",
    "resolve_language",
]
