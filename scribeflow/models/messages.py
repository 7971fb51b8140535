"""Message models exchanged between the transcription worker and its callers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Any

import numpy as np
from pydantic import BaseModel, ConfigDict, field_validator

from .transcript import Segment, PartialPreview


class MessageType(str, Enum):
    """Kinds of messages on the transcription channel."""
    INFERENCE_REQUEST = "INFERENCE_REQUEST"
    LOADING = "LOADING"
    DOWNLOADING = "DOWNLOADING"
    RESULT_PARTIAL = "RESULT_PARTIAL"
    RESULT = "RESULT"
    INFERENCE_DONE = "INFERENCE_DONE"
    INFERENCE_ERROR = "INFERENCE_ERROR"


class LoadingStatus(str, Enum):
    LOADING = "Loading"
    SUCCESS = "success"


@dataclass
class LoadingMessage:
    status: LoadingStatus
    type: MessageType = MessageType.LOADING


@dataclass
class DownloadingMessage:
    """Progress while model assets are fetched."""
    file: str
    progress: float
    loaded: int
    total: int
    type: MessageType = MessageType.DOWNLOADING


@dataclass
class PartialResultMessage:
    result: PartialPreview
    type: MessageType = MessageType.RESULT_PARTIAL


@dataclass
class ResultMessage:
    """Full segment list as of the latest chunk event."""
    results: List[Segment]
    is_done: bool
    completed_until_timestamp: int
    type: MessageType = MessageType.RESULT


@dataclass
class InferenceDoneMessage:
    type: MessageType = MessageType.INFERENCE_DONE


@dataclass
class InferenceErrorMessage:
    """Terminal failure of a run."""
    stage: str  # "loading" | "inference"
    error: str
    type: MessageType = MessageType.INFERENCE_ERROR


@dataclass
class TranslationMessage:
    """Status message from the translation worker."""
    status: str  # "initiate" | "progress" | "done" | "ready" | "update" | "complete" | "error"
    output: Any = None
    data: dict = field(default_factory=dict)


class InferenceRequest(BaseModel):
    """Inbound request to transcribe a waveform."""

    model_config = ConfigDict(arbitrary_types_allowed=True, protected_namespaces=())

    type: MessageType = MessageType.INFERENCE_REQUEST
    audio: np.ndarray
    model_name: Optional[str] = None

    @field_validator("type")
    @classmethod
    def _check_type(cls, value: MessageType) -> MessageType:
        if value != MessageType.INFERENCE_REQUEST:
            raise ValueError(f"Unsupported request type: {value}")
        return value

    @field_validator("audio", mode="before")
    @classmethod
    def _to_float32(cls, value: Any) -> np.ndarray:
        audio = np.asarray(value, dtype=np.float32)
        if audio.ndim != 1:
            raise ValueError(f"Audio must be a 1-D sample sequence, got shape {audio.shape}")
        if audio.size == 0:
            raise ValueError("Audio is empty")
        return audio
