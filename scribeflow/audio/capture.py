"""Microphone capture producing a waveform for transcription."""

import pyaudio
import time
import logging
from threading import Thread, Event, Lock
from typing import Optional, List
from datetime import datetime
import numpy as np

from ..inference.base import SAMPLING_RATE
from .loader import to_float32

logger = logging.getLogger(__name__)


class MicrophoneRecorder:
    """Records from the default input device in a background thread."""

    def __init__(
        self,
        sample_rate: int = SAMPLING_RATE,
        chunk_size: int = 1024,
        channels: int = 1,
    ):
        """Initialize recorder with specified parameters.

        Args:
            sample_rate: Audio sample rate (16kHz for Whisper compatibility)
            chunk_size: Size of each read in samples
            channels: Number of audio channels; only the first is kept
        """
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.format = pyaudio.paInt16

        # Recording thread management
        self.recording_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.is_recording = False

        self.frames: List[bytes] = []
        self.frames_lock = Lock()
        self.start_time: Optional[datetime] = None

        self.pyaudio_instance: Optional[pyaudio.PyAudio] = None

    def start_recording(self) -> None:
        """Start continuous recording in background thread."""
        if self.is_recording:
            logger.warning("Recording already in progress")
            return

        logger.info("Starting audio recording")
        self.stop_event.clear()
        self.start_time = datetime.now()
        with self.frames_lock:
            self.frames = []

        self.recording_thread = Thread(target=self._record_continuously, daemon=True)
        self.recording_thread.name = "MicrophoneRecorderThread"
        self.recording_thread.start()
        self.is_recording = True

    def stop_recording(self) -> np.ndarray:
        """Stop recording and return the captured waveform."""
        if not self.is_recording:
            logger.warning("No recording in progress")
            return self.get_waveform()

        logger.info("Stopping audio recording")
        self.stop_event.set()

        if self.recording_thread and self.recording_thread.is_alive():
            self.recording_thread.join(timeout=2.0)
            if self.recording_thread.is_alive():
                logger.warning("Recording thread did not stop cleanly")

        self.is_recording = False
        waveform = self.get_waveform()
        logger.info(f"Recording stopped. {waveform.shape[0] / self.sample_rate:.1f}s captured")
        return waveform

    def record(self, duration_seconds: float) -> np.ndarray:
        """Record for a fixed duration and return the waveform."""
        self.start_recording()
        time.sleep(duration_seconds)
        return self.stop_recording()

    def get_waveform(self) -> np.ndarray:
        """Float32 mono waveform of everything captured so far."""
        with self.frames_lock:
            data = b"".join(self.frames)
        samples = np.frombuffer(data, dtype=np.int16)
        if self.channels > 1:
            samples = samples.reshape(-1, self.channels)[:, 0]
        return to_float32(samples)

    def __open_audio_stream(self) -> pyaudio.Stream:
        self.pyaudio_instance = pyaudio.PyAudio()
        stream = self.pyaudio_instance.open(
            format=self.format,
            channels=self.channels,
            rate=self.sample_rate,
            input=True,
            frames_per_buffer=self.chunk_size,
            stream_callback=None
        )
        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return stream

    def _record_continuously(self) -> None:
        """Internal method: continuous recording loop in background thread."""
        stream = None
        try:
            stream = self.__open_audio_stream()
            while not self.stop_event.is_set():
                audio_chunk = stream.read(self.chunk_size, exception_on_overflow=False)
                with self.frames_lock:
                    self.frames.append(audio_chunk)
        except Exception as e:
            logger.error(f"Recording failed: {e}")
        finally:
            if stream:
                stream.stop_stream()
                stream.close()
            if self.pyaudio_instance:
                self.pyaudio_instance.terminate()
                self.pyaudio_instance = None
