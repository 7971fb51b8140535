"""Transcription worker that serves inference requests over a pub/sub channel."""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..config import ScribeflowConfig
from ..errors import InferenceRuntimeError, ModelAcquisitionError
from ..inference.base import AbstractInferenceAdapter, TranscriptionOptions
from ..inference.registry import ModelRegistry, get_registry
from ..inference.stream import InferenceStream
from ..models.messages import (
    DownloadingMessage,
    InferenceErrorMessage,
    InferenceRequest,
    LoadingMessage,
    LoadingStatus,
)
from ..models.transcript import Segment
from ..transcription.aggregator import TranscriptAggregator
from ..transcription.publisher import MessagePublisher
from .worker import SerialRequestWorker

logger = logging.getLogger(__name__)

TRANSCRIPTION_TOPIC = "transcription"


def create_whisper_adapter(model_name: str) -> AbstractInferenceAdapter:
    """Default adapter factory. Imports torch and transformers on first use."""
    from ..inference.whisper_backend import WhisperTransformersAdapter
    return WhisperTransformersAdapter(model_name)


class TranscriptionWorker(SerialRequestWorker):
    """Handles ``InferenceRequest``s one at a time and publishes channel messages.

    Every run gets a fresh ``TranscriptAggregator``. The loaded model comes
    from the registry and is reused across runs.
    """

    def __init__(self,
                 config: ScribeflowConfig,
                 topic: str = TRANSCRIPTION_TOPIC,
                 registry: Optional[ModelRegistry] = None,
                 adapter_factory: Callable[[str], AbstractInferenceAdapter] = create_whisper_adapter):
        """Initialize transcription worker.

        Args:
            config: Application configuration
            topic: Pub/sub topic the messages are published on
            registry: Model registry, defaults to the process-wide one
            adapter_factory: Builds an unloaded adapter for a model name
        """
        super().__init__("transcription")
        self.config = config
        self.publisher = MessagePublisher(topic)
        self.registry = registry or get_registry()
        self.adapter_factory = adapter_factory

        # Last run's aggregator, kept so a failed run can be inspected
        self.current_aggregator: Optional[TranscriptAggregator] = None
        # Run stage reported if a request fails unexpectedly
        self._stage = "loading"

    def submit(self, request: Any) -> None:
        """Validate and queue a request. Accepts an ``InferenceRequest`` or an equivalent dict.

        Raises:
            pydantic.ValidationError: If the request is malformed
        """
        if not isinstance(request, InferenceRequest):
            request = InferenceRequest.model_validate(request)
        super().submit(request)

    def _options(self) -> TranscriptionOptions:
        return TranscriptionOptions(
            chunk_length_s=float(self.config.get('transcription.chunk_length_s', 30)),
            stride_length_s=float(self.config.get('transcription.stride_length_s', 5)),
            return_timestamps=True,
        )

    def _on_load_progress(self, data: Dict[str, Any]) -> None:
        if data.get("status") == "progress":
            self.publisher.publish(DownloadingMessage(
                file=data.get("file", ""),
                progress=data.get("progress", 0.0),
                loaded=data.get("loaded", 0),
                total=data.get("total", 0),
            ))

    def handle_request(self, request: InferenceRequest) -> Optional[List[Segment]]:
        """Run one transcription to completion or failure.

        Every run ends with ``INFERENCE_DONE`` or ``INFERENCE_ERROR``.

        Returns:
            Final segment list, or None if the run failed
        """
        self._stage = "loading"
        try:
            return self._transcribe(request)
        except Exception as e:
            logger.error(f"Unexpected failure during {self._stage}: {e}", exc_info=True)
            self.publisher.publish(InferenceErrorMessage(stage=self._stage, error=str(e)))
            return None

    def _transcribe(self, request: InferenceRequest) -> Optional[List[Segment]]:
        model_name = request.model_name or self.config.get('transcription.model_name')
        logger.info(f"Transcription request: {request.audio.shape[0]} samples, model={model_name}")

        self.publisher.publish(LoadingMessage(status=LoadingStatus.LOADING))
        try:
            if not model_name:
                raise ValueError("No transcription model configured")
            options = self._options()
            partial_every = int(self.config.get('transcription.partial_every', 10))
            if partial_every < 1:
                raise ValueError(f"transcription.partial_every must be at least 1, got {partial_every}")
        except (TypeError, ValueError) as e:
            logger.error(f"Invalid transcription options: {e}")
            self.publisher.publish(InferenceErrorMessage(stage="loading", error=str(e)))
            return None

        try:
            adapter = self.registry.get_instance(
                "transcription", model_name, self.adapter_factory, self._on_load_progress
            )
        except ModelAcquisitionError as e:
            logger.error(f"Model loading failed: {e}")
            self.publisher.publish(InferenceErrorMessage(stage="loading", error=str(e)))
            return None
        self.publisher.publish(LoadingMessage(status=LoadingStatus.SUCCESS))
        self._stage = "inference"

        aggregator = TranscriptAggregator(
            adapter,
            options.stride_length_s,
            self.publisher.publish,
            partial_every=partial_every,
        )
        self.current_aggregator = aggregator

        stream = InferenceStream(adapter, request.audio, options, name=model_name.replace("/", "_"))
        try:
            return aggregator.consume(stream)
        except InferenceRuntimeError:
            # Already published by the aggregator; partial segments stay on current_aggregator
            return None
        finally:
            stream.join(timeout=5.0)
