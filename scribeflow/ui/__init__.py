"""Console user interface for Scribeflow."""

from .console import TranscriptConsole, format_timestamp

__all__ = ["TranscriptConsole", "format_timestamp"]
