"""Unit tests for InferenceStream."""

import pytest

from scribeflow.errors import InferenceRuntimeError
from scribeflow.inference.base import TranscriptionOptions
from scribeflow.inference.stream import (
    BeamUpdate,
    ChunkUpdate,
    InferenceStream,
    StreamDone,
    StreamError,
)
from scribeflow.models.transcript import RawChunk


@pytest.mark.unit
class TestInferenceStream:
    """Test cases for InferenceStream."""

    def test_events_arrive_in_callback_order(self, make_adapter, sample_waveform):
        """Beam and chunk callbacks are delivered in firing order, then done."""
        chunk = [RawChunk(text="hi", timestamp=(0.0, 1.0))]
        adapter = make_adapter(script=[("beam", [1]), ("chunk", chunk), ("beam", [2])])

        events = list(InferenceStream(adapter, sample_waveform, TranscriptionOptions()))

        assert [type(e) for e in events] == [BeamUpdate, ChunkUpdate, BeamUpdate, StreamDone]
        assert events[0].beams[0].output_token_ids == [1]
        assert events[1].raw_chunk is chunk

    def test_adapter_failure_is_terminal_error(self, make_adapter, sample_waveform):
        """An InferenceRuntimeError ends the stream with StreamError."""
        adapter = make_adapter(script=[("beam", [1]), ("fail", "decoder crashed"), ("beam", [2])])

        events = list(InferenceStream(adapter, sample_waveform, TranscriptionOptions()))

        assert isinstance(events[-1], StreamError)
        assert str(events[-1].error) == "decoder crashed"
        assert len(events) == 2

    def test_unexpected_exception_is_wrapped(self, make_adapter, sample_waveform):
        """Other exceptions become InferenceRuntimeError with the original as cause."""
        class ExplodingAdapter(make_adapter):
            def run_transcription(self, waveform, options, on_beam, on_chunk):
                raise MemoryError("out of memory")

        events = list(InferenceStream(ExplodingAdapter(), sample_waveform, TranscriptionOptions()))

        error = events[-1].error
        assert isinstance(error, InferenceRuntimeError)
        assert isinstance(error.__cause__, MemoryError)
        assert error.model_name == "fake/whisper"

    def test_start_only_once(self, make_adapter, sample_waveform):
        """A stream is single-use."""
        stream = InferenceStream(make_adapter(), sample_waveform, TranscriptionOptions())
        stream.start()

        with pytest.raises(RuntimeError):
            stream.start()
        stream.join(timeout=2.0)

    def test_thread_is_daemon_and_named(self, make_adapter, sample_waveform):
        stream = InferenceStream(make_adapter(), sample_waveform, TranscriptionOptions(), name="tiny")
        stream.start()
        stream.join(timeout=2.0)

        assert stream.thread.daemon is True
        assert stream.thread.name == "stream_tiny"
        assert not stream.thread.is_alive()

    def test_drained_stream_yields_nothing(self, make_adapter, sample_waveform):
        stream = InferenceStream(make_adapter(), sample_waveform, TranscriptionOptions())
        list(stream)

        assert list(stream) == []


@pytest.mark.unit
class TestTranscriptionOptions:
    """Validation of chunking options."""

    def test_defaults(self):
        options = TranscriptionOptions()

        assert options.chunk_length_s == 30.0
        assert options.stride_length_s == 5.0
        assert options.return_timestamps is True

    @pytest.mark.parametrize("chunk,stride", [(0, 0), (-1, 0), (30, -1), (10, 5), (10, 6)])
    def test_invalid_options_rejected(self, chunk, stride):
        with pytest.raises(ValueError):
            TranscriptionOptions(chunk_length_s=chunk, stride_length_s=stride)
