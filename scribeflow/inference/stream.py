"""Runs an inference adapter on its own thread and exposes its callbacks as ordered events."""

import logging
import queue
import threading
import traceback
from dataclasses import dataclass
from typing import Any, Iterator, List, Optional, Union

import numpy as np

from ..errors import InferenceRuntimeError
from ..models.transcript import BeamCandidate
from .base import AbstractInferenceAdapter, TranscriptionOptions

logger = logging.getLogger(__name__)


@dataclass
class BeamUpdate:
    """A generation step finished."""
    beams: List[BeamCandidate]


@dataclass
class ChunkUpdate:
    """An audio chunk finished decoding."""
    raw_chunk: Any


@dataclass
class StreamDone:
    """The adapter processed all audio."""


@dataclass
class StreamError:
    """The adapter failed. Terminal."""
    error: InferenceRuntimeError


StreamEvent = Union[BeamUpdate, ChunkUpdate, StreamDone, StreamError]


class InferenceStream:
    """Single-use event stream over one ``run_transcription`` call.

    The adapter runs on a daemon thread and its callbacks are queued in the
    order they fire. Iterating blocks on the queue and stops after the
    terminal ``StreamDone`` or ``StreamError`` event.
    """

    def __init__(self,
                 adapter: AbstractInferenceAdapter,
                 waveform: np.ndarray,
                 options: TranscriptionOptions,
                 name: str = "inference"):
        self.adapter = adapter
        self.waveform = waveform
        self.options = options
        self.name = name

        self.event_queue: "queue.Queue[StreamEvent]" = queue.Queue()
        self.thread: Optional[threading.Thread] = None
        self._finished = False

    def start(self) -> "InferenceStream":
        """Start the adapter thread. Returns self for chaining."""
        if self.thread is not None:
            raise RuntimeError("InferenceStream can only be started once")

        self.thread = threading.Thread(target=self._run, daemon=True)
        self.thread.name = f"stream_{self.name}"
        self.thread.start()
        logger.debug(f"Started inference thread {self.thread.name}")
        return self

    def _run(self) -> None:
        """Thread body: run the adapter and queue a terminal event."""
        try:
            self.adapter.run_transcription(
                self.waveform,
                self.options,
                self._on_beam,
                self._on_chunk,
            )
        except InferenceRuntimeError as e:
            logger.error(f"Inference failed in {self.name}: {e}")
            self.event_queue.put(StreamError(e))
        except Exception as e:
            logger.error(f"Unhandled exception in {self.name} inference: {e}\n{traceback.format_exc()}")
            error = InferenceRuntimeError(str(e), self.adapter.model_name)
            error.__cause__ = e
            self.event_queue.put(StreamError(error))
        else:
            self.event_queue.put(StreamDone())

    def _on_beam(self, beams: List[BeamCandidate]) -> None:
        self.event_queue.put(BeamUpdate(beams))

    def _on_chunk(self, raw_chunk: Any) -> None:
        self.event_queue.put(ChunkUpdate(raw_chunk))

    def __iter__(self) -> Iterator[StreamEvent]:
        if self.thread is None:
            self.start()

        while not self._finished:
            event = self.event_queue.get()
            if isinstance(event, (StreamDone, StreamError)):
                self._finished = True
            yield event

    def join(self, timeout: Optional[float] = None) -> None:
        """Wait for the adapter thread to exit."""
        if self.thread is not None:
            self.thread.join(timeout)
            if self.thread.is_alive():
                logger.warning(f"Inference thread {self.thread.name} still running after join")
