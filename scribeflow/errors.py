"""Error taxonomy for model acquisition and inference runs."""

from typing import Optional


class ModelError(Exception):
    """Base class for failures raised by an inference or translation model."""

    def __init__(self, message: str, model_name: Optional[str] = None):
        super().__init__(message)
        self.model_name = model_name


class ModelAcquisitionError(ModelError):
    """The model or its assets could not be loaded. Nothing was produced."""


class InferenceRuntimeError(ModelError):
    """The model failed while processing audio, possibly after partial results."""
