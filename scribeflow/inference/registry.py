"""Process-wide registry of loaded model handles.

Handles are created lazily on first request, loaded exactly once and kept for
the life of the process. There is no teardown. Callers receive the handle
explicitly and pass it on; nothing reads it from module state.
"""

import logging
import threading
from typing import Callable, Dict, Optional, Tuple, TypeVar, Any

from ..errors import ModelAcquisitionError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ModelRegistry:
    """Init-once store of loaded models keyed by (kind, model name)."""

    def __init__(self):
        self._handles: Dict[Tuple[str, str], Any] = {}
        self._lock = threading.Lock()

    def get_instance(self,
                     kind: str,
                     model_name: str,
                     factory: Callable[[str], T],
                     progress_callback: Optional[Callable[[dict], None]] = None) -> T:
        """Return the loaded handle for a model, creating and loading it on first use.

        Args:
            kind: Model family, e.g. "transcription" or "translation"
            model_name: Model identifier passed to ``factory``
            factory: Builds an unloaded handle with a ``load(progress_callback)`` method
            progress_callback: Forwarded to ``load`` when the model is acquired

        Raises:
            ModelAcquisitionError: If loading fails. No entry is kept, so a
                later call loads again.
        """
        key = (kind, model_name)
        with self._lock:
            handle = self._handles.get(key)
            if handle is not None:
                logger.debug(f"Reusing loaded {kind} model: {model_name}")
                return handle

            logger.info(f"Loading {kind} model: {model_name}")
            try:
                handle = factory(model_name)
                handle.load(progress_callback)
            except ModelAcquisitionError:
                raise
            except Exception as e:
                raise ModelAcquisitionError(f"Failed to load {kind} model {model_name}: {e}",
                                            model_name) from e

            self._handles[key] = handle
            logger.info(f"{kind.capitalize()} model loaded: {model_name}")
            return handle

    def is_loaded(self, kind: str, model_name: str) -> bool:
        with self._lock:
            return (kind, model_name) in self._handles


_default_registry = ModelRegistry()


def get_registry() -> ModelRegistry:
    """Get the process-wide registry."""
    return _default_registry
