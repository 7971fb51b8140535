"""Model asset download and device selection shared by the transformers backends."""

import logging
import os
from typing import Any, Callable, Dict, List, Optional

import torch
from huggingface_hub import snapshot_download
from tqdm.auto import tqdm

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[Dict[str, Any]], None]

# Weights, configs and tokenizer files; skips the other framework checkpoints
MODEL_FILE_PATTERNS = ["*.json", "*.safetensors", "*.txt", "*.model", "*.tiktoken"]


def pick_device() -> str:
    """Prefer CUDA, then Apple MPS, then CPU."""
    if torch.cuda.is_available():
        return "cuda"
    mps = getattr(torch.backends, "mps", None)
    if mps is not None and mps.is_available():
        return "mps"
    return "cpu"


def _progress_tqdm(model_name: str, progress_callback: ProgressCallback):
    """Build a tqdm class that reports snapshot download progress to a callback."""

    class _ProgressTqdm(tqdm):
        def __init__(self, *args, **kwargs):
            kwargs["disable"] = True
            super().__init__(*args, **kwargs)
            self.files_done = 0

        def update(self, n=1):
            # Disabled bars never advance self.n
            self.files_done += n
            total = self.total or 0
            progress_callback({
                "status": "progress",
                "file": model_name,
                "progress": (100.0 * self.files_done / total) if total else 0.0,
                "loaded": self.files_done,
                "total": total,
            })

    return _ProgressTqdm


def download_model(model_name: str,
                   progress_callback: Optional[ProgressCallback] = None,
                   allow_patterns: Optional[List[str]] = None) -> str:
    """Return a local directory holding the model, downloading it if needed.

    Reports ``initiate``, ``progress`` and ``done`` statuses to the callback.
    Local directories are returned as they are.
    """
    if os.path.isdir(model_name):
        logger.debug(f"Using local model directory: {model_name}")
        return model_name

    if progress_callback:
        progress_callback({"status": "initiate", "file": model_name})

    tqdm_class = _progress_tqdm(model_name, progress_callback) if progress_callback else None
    path = snapshot_download(
        model_name,
        allow_patterns=allow_patterns or MODEL_FILE_PATTERNS,
        tqdm_class=tqdm_class,
    )
    logger.info(f"Model files for {model_name} available at {path}")

    if progress_callback:
        progress_callback({"status": "done", "file": model_name})
    return path
