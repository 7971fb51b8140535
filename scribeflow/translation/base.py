"""Abstract base class for translation backends."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional


class AbstractTranslationBackend(ABC):
    """Boundary around a pretrained machine-translation model."""

    def __init__(self, model_name: str):
        """Initialize backend for a named model."""
        self.model_name = model_name

    @abstractmethod
    def load(self, progress_callback: Optional[Callable[[Dict[str, Any]], None]] = None) -> None:
        """Acquire model assets, reporting loader status dicts to the callback.

        Raises:
            ModelAcquisitionError: If the model cannot be loaded
        """
        pass

    @abstractmethod
    def translate(self,
                  text: str,
                  src_lang: str,
                  tgt_lang: str,
                  on_update: Optional[Callable[[str], None]] = None) -> str:
        """Translate text, reporting the partial translation after each generated token.

        Args:
            text: Source text
            src_lang: Source language code (NLLB/FLORES-200, e.g. 'eng_Latn')
            tgt_lang: Target language code
            on_update: Receives the partial translation so far

        Returns:
            Full translated text
        """
        pass
