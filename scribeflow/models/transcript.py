"""Transcript-related data models."""

from dataclasses import dataclass, field
from typing import Optional, List, Tuple


@dataclass
class Segment:
    """One committed unit of transcript output."""
    index: int   # Position in the latest full-buffer decode
    text: str
    start: int   # Seconds, rounded
    end: int     # Seconds, rounded (may be a stride-based estimate)


@dataclass
class PartialPreview:
    """Low-frequency preview of the in-progress hypothesis."""
    text: str
    start: int
    end: Optional[int] = None  # Previews never claim a final boundary


@dataclass
class RawChunk:
    """One chunk returned by the adapter's full-buffer decode."""
    text: str
    timestamp: Tuple[float, Optional[float]]


@dataclass
class BeamCandidate:
    """A generation hypothesis reported while a chunk is being decoded."""
    output_token_ids: List[int] = field(default_factory=list)


def transcript_text(segments: List[Segment], separator: str = "\n") -> str:
    """Join segment texts in index order."""
    ordered = sorted(segments, key=lambda s: s.index)
    return separator.join(segment.text for segment in ordered if segment.text)
