"""Transcript aggregator that turns streamed model output into ordered segments.

One aggregator serves exactly one transcription run. It receives two kinds of
input from the inference adapter:

* beam updates, fired once per generated token step. Every
  ``partial_every``-th update is decoded into a ``PartialPreview``.
* chunk updates, fired once per finished audio window. The raw window output
  is appended to a buffer and the whole buffer is decoded again, because the
  decoder may revise earlier boundaries once it sees more context. The
  resulting segment list replaces the previous one.

The aggregator is not thread-safe. Events must arrive serialized, which the
``consume`` loop over an ``InferenceStream`` guarantees.
"""

import logging
import math
from typing import Any, Callable, List, Optional

from ..errors import InferenceRuntimeError
from ..inference.base import AbstractInferenceAdapter
from ..inference.stream import BeamUpdate, ChunkUpdate, InferenceStream, StreamDone, StreamError
from ..models.messages import (
    InferenceDoneMessage,
    InferenceErrorMessage,
    PartialResultMessage,
    ResultMessage,
)
from ..models.transcript import BeamCandidate, PartialPreview, RawChunk, Segment

logger = logging.getLogger(__name__)

# Fraction of the stride used as the duration of a segment without an end timestamp
FALLBACK_END_RATIO = 0.9


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounding up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(value + 0.5))


class TranscriptAggregator:
    """Tracks beams and chunks for a single run and publishes caller-facing messages."""

    def __init__(self,
                 adapter: AbstractInferenceAdapter,
                 stride_length_s: float,
                 publish: Callable[[Any], None],
                 partial_every: int = 10):
        """Initialize aggregator.

        Args:
            adapter: Loaded adapter providing ``decode_tokens`` and ``decode_chunks``
            stride_length_s: Stride used for the run, also the fallback segment duration
            publish: Receives each outgoing message
            partial_every: Emit a partial preview on every n-th beam update
        """
        if partial_every < 1:
            raise ValueError(f"partial_every must be at least 1, got {partial_every}")

        self.adapter = adapter
        self.stride_length_s = stride_length_s
        self.publish = publish
        self.partial_every = partial_every

        # Append-only buffer of raw chunk outputs
        self.chunks: List[Any] = []
        # Derived from the whole buffer on every chunk event
        self.segments: List[Segment] = []
        self.beam_callback_count = 0

        self.is_done = False
        self.error: Optional[InferenceRuntimeError] = None

    def on_beam(self, beams: List[BeamCandidate]) -> None:
        """Handle one generation step; publishes a preview on every n-th call."""
        self._check_open()
        self.beam_callback_count += 1
        if self.beam_callback_count % self.partial_every != 0:
            return

        best_beam = beams[0]
        text = self._decode(self.adapter.decode_tokens, best_beam.output_token_ids)
        preview = PartialPreview(text=text, start=self.last_segment_end())

        logger.debug(f"Partial preview #{self.beam_callback_count}: '{text[:50]}'")
        self.publish(PartialResultMessage(result=preview))

    def on_chunk(self, raw_chunk: Any) -> None:
        """Append a finished chunk, recompute all segments and publish them."""
        self._check_open()
        self.chunks.append(raw_chunk)

        decoded = self._decode(self.adapter.decode_chunks, self.chunks)
        self.segments = [self._to_segment(chunk, index) for index, chunk in enumerate(decoded)]

        logger.debug(f"Chunk {len(self.chunks)} decoded into {len(self.segments)} segments")
        self.publish(ResultMessage(
            results=list(self.segments),
            is_done=False,
            completed_until_timestamp=self.last_segment_end(),
        ))

    def finish(self) -> List[Segment]:
        """Mark the run complete and publish the done marker.

        Returns:
            The latest segment list, which is the final transcript
        """
        self._check_open()
        self.is_done = True
        logger.info(f"Transcription done: {len(self.segments)} segments from {len(self.chunks)} chunks")
        self.publish(InferenceDoneMessage())
        return list(self.segments)

    def fail(self, error: InferenceRuntimeError) -> None:
        """Mark the run failed. Segments so far stay available; no done marker is sent."""
        self.error = error
        logger.error(f"Transcription failed after {len(self.chunks)} chunks: {error}")
        self.publish(InferenceErrorMessage(stage="inference", error=str(error)))

    def consume(self, stream: InferenceStream) -> List[Segment]:
        """Receive events from a stream until it ends, dispatching them in order.

        Returns:
            The final segment list

        Raises:
            InferenceRuntimeError: If the stream reports a failure
        """
        for event in stream:
            try:
                if isinstance(event, BeamUpdate):
                    self.on_beam(event.beams)
                elif isinstance(event, ChunkUpdate):
                    self.on_chunk(event.raw_chunk)
                elif isinstance(event, StreamDone):
                    return self.finish()
                elif isinstance(event, StreamError):
                    raise event.error
                else:
                    raise TypeError(f"Unknown stream event: {event!r}")
            except InferenceRuntimeError as e:
                self.fail(e)
                raise
            except Exception as e:
                error = InferenceRuntimeError(f"Handling {type(event).__name__} failed: {e}",
                                              self.adapter.model_name)
                self.fail(error)
                raise error from e

        # A stream that was already drained yields nothing
        raise InferenceRuntimeError("Inference stream ended without a terminal event",
                                    self.adapter.model_name)

    def last_segment_end(self) -> int:
        """End of the last current segment, or 0 if there are none."""
        if not self.segments:
            return 0
        return self.segments[-1].end

    def _to_segment(self, chunk: RawChunk, index: int) -> Segment:
        start, end = chunk.timestamp
        # A missing start counts as 0
        start = start or 0.0
        rounded_start = round_half_up(start)
        # A missing or zero end falls back to a stride-based estimate
        rounded_end = round_half_up(end) if end is not None else 0
        if not rounded_end:
            rounded_end = round_half_up(start + FALLBACK_END_RATIO * self.stride_length_s)

        return Segment(
            index=index,
            text=chunk.text.strip(),
            start=rounded_start,
            end=rounded_end,
        )

    def _decode(self, decode: Callable[[Any], Any], value: Any) -> Any:
        """Run an adapter decode step, reporting failures as inference errors."""
        try:
            return decode(value)
        except InferenceRuntimeError:
            raise
        except Exception as e:
            raise InferenceRuntimeError(f"Decoding failed: {e}", self.adapter.model_name) from e

    def _check_open(self) -> None:
        if self.is_done:
            raise RuntimeError("Transcription run already finished")
        if self.error is not None:
            raise RuntimeError("Transcription run already failed")
