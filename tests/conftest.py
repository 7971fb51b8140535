"""Pytest configuration and fixtures for Scribeflow tests."""

import pytest
import tempfile
import uuid
import logging
from pathlib import Path
from typing import Any, List, Optional, Sequence
from unittest.mock import Mock, patch
import numpy as np
from scipy.io import wavfile

from scribeflow.config import ScribeflowConfig
from scribeflow.errors import InferenceRuntimeError, ModelAcquisitionError
from scribeflow.inference.base import AbstractInferenceAdapter, TranscriptionOptions
from scribeflow.inference.registry import ModelRegistry
from scribeflow.models.transcript import BeamCandidate, RawChunk
from scribeflow.translation.base import AbstractTranslationBackend


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without models or audio hardware")
    config.addinivalue_line("markers", "integration: workers, channel and console wired together")


class FakeInferenceAdapter(AbstractInferenceAdapter):
    """Scripted adapter.

    ``script`` is a list of steps replayed by ``run_transcription``:
    ``("beam", [token ids])``, ``("chunk", raw_chunk)`` or ``("fail", message)``.
    A raw chunk is a list of ``RawChunk``; ``decode_chunks`` concatenates the
    whole buffer, so every decode reflects all chunks seen so far.
    """

    def __init__(self, model_name: str = "fake/whisper", script: Optional[List[tuple]] = None,
                 fail_load: bool = False):
        super().__init__(model_name)
        self.script = script or []
        self.fail_load = fail_load
        self.load_count = 0
        self.decode_calls: List[int] = []

    def load(self, progress_callback=None) -> None:
        self.load_count += 1
        if self.fail_load:
            raise ModelAcquisitionError("weights unavailable", self.model_name)
        if progress_callback:
            progress_callback({"status": "progress", "file": "model.safetensors",
                               "progress": 50.0, "loaded": 1, "total": 2})
            progress_callback({"status": "ready", "file": self.model_name})

    def run_transcription(self, waveform, options: TranscriptionOptions, on_beam, on_chunk) -> None:
        for kind, payload in self.script:
            if kind == "beam":
                on_beam([BeamCandidate(output_token_ids=list(payload))])
            elif kind == "chunk":
                on_chunk(payload)
            elif kind == "fail":
                raise InferenceRuntimeError(payload, self.model_name)

    def decode_tokens(self, token_ids: Sequence[int]) -> str:
        return " ".join(f"w{token}" for token in token_ids)

    def decode_chunks(self, raw_chunks: List[Any]) -> List[RawChunk]:
        self.decode_calls.append(len(raw_chunks))
        decoded = []
        for raw in raw_chunks:
            decoded.extend(raw)
        return decoded


class FakeTranslationBackend(AbstractTranslationBackend):
    """Upper-cases the text, reporting one update per word."""

    def __init__(self, model_name: str = "fake/nllb", fail_load: bool = False):
        super().__init__(model_name)
        self.fail_load = fail_load
        self.calls: List[tuple] = []

    def load(self, progress_callback=None) -> None:
        if self.fail_load:
            raise ModelAcquisitionError("no translation weights", self.model_name)
        if progress_callback:
            progress_callback({"status": "initiate", "file": self.model_name})
            progress_callback({"status": "ready", "file": self.model_name})

    def translate(self, text, src_lang, tgt_lang, on_update=None) -> str:
        self.calls.append((text, src_lang, tgt_lang))
        words = text.upper().split()
        for i in range(1, len(words) + 1):
            if on_update:
                on_update(" ".join(words[:i]))
        return " ".join(words)


class MessageCollector:
    """Pubsub listener that records every message it receives."""

    def __init__(self):
        self.messages: List[Any] = []

    def on_message(self, message: Any) -> None:
        self.messages.append(message)

    def of_type(self, message_type) -> List[Any]:
        return [m for m in self.messages if getattr(m, "type", None) == message_type]

    def statuses(self) -> List[str]:
        return [m.status for m in self.messages]


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


@pytest.fixture
def topic():
    """A pubsub topic name no other test uses."""
    return f"test_{uuid.uuid4().hex}"


@pytest.fixture
def collector(topic):
    """Collector subscribed to the test topic."""
    from pubsub import pub

    collector = MessageCollector()
    pub.subscribe(collector.on_message, topic)
    yield collector
    pub.unsubscribe(collector.on_message, topic)


@pytest.fixture
def registry():
    """A fresh model registry, isolated from the process-wide one."""
    return ModelRegistry()


@pytest.fixture
def default_config():
    """Configuration with built-in defaults."""
    return ScribeflowConfig()


@pytest.fixture
def sample_waveform():
    """Two seconds of a 440 Hz tone at 16 kHz."""
    sample_rate = 16000
    t = np.linspace(0, 2.0, 2 * sample_rate, False)
    return (0.5 * np.sin(2 * np.pi * 440 * t)).astype(np.float32)


@pytest.fixture
def wav_file(temp_data_dir):
    """Factory writing a WAV file with the given samples and rate."""
    def write(samples: np.ndarray, sample_rate: int = 16000, name: str = "test_audio.wav") -> str:
        path = Path(temp_data_dir) / name
        wavfile.write(str(path), sample_rate, samples)
        return str(path)
    return write


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # 1024 int16 samples at half scale
        mock_stream.read.return_value = (np.full(1024, 16384, dtype=np.int16)).tobytes()
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def make_adapter():
    """Factory for scripted inference adapters."""
    return FakeInferenceAdapter


@pytest.fixture
def make_translator():
    """Factory for fake translation backends."""
    return FakeTranslationBackend
