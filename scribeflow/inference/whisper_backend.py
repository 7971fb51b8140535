"""Whisper inference adapter backed by Hugging Face transformers."""

import logging
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import torch
from transformers import AutoModelForSpeechSeq2Seq, AutoProcessor
from transformers.generation.streamers import BaseStreamer

from ..errors import InferenceRuntimeError, ModelAcquisitionError
from ..hub import download_model, pick_device
from ..models.transcript import BeamCandidate, RawChunk
from .chunking import chunk_waveform
from .base import (
    AbstractInferenceAdapter,
    BeamCallback,
    ChunkCallback,
    ProgressCallback,
    SAMPLING_RATE,
    TranscriptionOptions,
)

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "openai/whisper-tiny.en"


class _BeamStreamer(BaseStreamer):
    """Forwards every generated token step to ``on_beam`` as the running hypothesis."""

    def __init__(self, on_beam: BeamCallback):
        self.on_beam = on_beam
        self.token_ids: List[int] = []
        self.next_tokens_are_prompt = True

    def put(self, value) -> None:
        self.token_ids.extend(int(t) for t in value.reshape(-1).tolist())
        # The first call carries the decoder prompt, not a generated step
        if self.next_tokens_are_prompt:
            self.next_tokens_are_prompt = False
            return
        self.on_beam([BeamCandidate(output_token_ids=list(self.token_ids))])

    def end(self) -> None:
        self.next_tokens_are_prompt = True


class WhisperTransformersAdapter(AbstractInferenceAdapter):
    """Runs a Whisper checkpoint with greedy decoding and timestamp tokens."""

    def __init__(self, model_name: str = DEFAULT_MODEL, device: Optional[str] = None):
        super().__init__(model_name or DEFAULT_MODEL)
        self.device = device or pick_device()
        self.processor = None
        self.model = None

    def load(self, progress_callback: Optional[ProgressCallback] = None) -> None:
        """Download (if needed) and load the processor and model."""
        try:
            model_path = download_model(self.model_name, progress_callback)
            self.processor = AutoProcessor.from_pretrained(model_path)
            self.model = AutoModelForSpeechSeq2Seq.from_pretrained(model_path).to(self.device)
            self.model.eval()
        except Exception as e:
            raise ModelAcquisitionError(f"Failed to load Whisper model {self.model_name}: {e}",
                                        self.model_name) from e

        if progress_callback:
            progress_callback({"status": "ready", "file": self.model_name})
        logger.info(f"Whisper model {self.model_name} ready on {self.device}")

    def _require_loaded(self) -> None:
        if self.model is None or self.processor is None:
            raise InferenceRuntimeError("Whisper model is not loaded", self.model_name)

    def run_transcription(self,
                          waveform: np.ndarray,
                          options: TranscriptionOptions,
                          on_beam: BeamCallback,
                          on_chunk: ChunkCallback) -> None:
        """Transcribe window by window, reporting token steps and finished windows."""
        self._require_loaded()
        # The feature extractor pads or truncates every window to this length
        max_chunk_length_s = self.processor.feature_extractor.chunk_length
        if options.chunk_length_s > max_chunk_length_s:
            raise InferenceRuntimeError(
                f"chunk_length_s {options.chunk_length_s} exceeds the {max_chunk_length_s}s "
                f"input window of {self.model_name}",
                self.model_name,
            )
        waveform = np.asarray(waveform, dtype=np.float32)

        chunk_count = 0
        try:
            for samples, stride in chunk_waveform(waveform, options.chunk_length_s, options.stride_length_s):
                features = self.processor.feature_extractor(
                    samples, sampling_rate=SAMPLING_RATE, return_tensors="pt"
                ).input_features
                features = features.to(self.device, dtype=self.model.dtype)

                with torch.no_grad():
                    tokens = self.model.generate(
                        features,
                        do_sample=False,
                        num_beams=1,
                        return_timestamps=options.return_timestamps,
                        streamer=_BeamStreamer(on_beam),
                    )

                chunk_count += 1
                on_chunk({
                    "tokens": tokens.cpu().numpy(),
                    # The ASR decoder expects strides in seconds
                    "stride": tuple(value / SAMPLING_RATE for value in stride),
                })
        except InferenceRuntimeError:
            raise
        except Exception as e:
            raise InferenceRuntimeError(
                f"Whisper inference failed after {chunk_count} chunks: {e}", self.model_name
            ) from e

        logger.debug(f"Whisper processed {chunk_count} chunks")

    def decode_tokens(self, token_ids: Sequence[int]) -> str:
        self._require_loaded()
        return self.processor.tokenizer.decode(list(token_ids), skip_special_tokens=True)

    def decode_chunks(self, raw_chunks: List[Dict[str, Any]]) -> List[RawChunk]:
        """Merge overlapping windows into timestamped chunks with the tokenizer's ASR decoder."""
        self._require_loaded()
        time_precision = (self.processor.feature_extractor.chunk_length
                          / self.model.config.max_source_positions)
        _, optional = self.processor.tokenizer._decode_asr(
            raw_chunks,
            return_timestamps=True,
            return_language=None,
            time_precision=time_precision,
        )
        return [
            RawChunk(text=chunk["text"], timestamp=tuple(chunk["timestamp"]))
            for chunk in optional.get("chunks", [])
        ]
