"""Translation worker that serves translation requests over a pub/sub channel."""

import logging
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, field_validator

from ..config import ScribeflowConfig
from ..errors import ModelError
from ..inference.registry import ModelRegistry, get_registry
from ..models.messages import TranslationMessage
from ..transcription.publisher import MessagePublisher
from ..translation.base import AbstractTranslationBackend
from ..translation.languages import resolve_language
from .worker import SerialRequestWorker

logger = logging.getLogger(__name__)

TRANSLATION_TOPIC = "translation"


class TranslationRequest(BaseModel):
    """Inbound request to translate a transcript."""
    text: str
    tgt_lang: str
    src_lang: str = "eng_Latn"

    @field_validator("tgt_lang", "src_lang")
    @classmethod
    def _known_language(cls, value: str) -> str:
        return resolve_language(value)


def create_nllb_backend(model_name: str) -> AbstractTranslationBackend:
    """Default backend factory. Imports torch and transformers on first use."""
    from ..translation.nllb_backend import NllbTranslationBackend
    return NllbTranslationBackend(model_name)


class TranslationWorker(SerialRequestWorker):
    """Translates one request at a time, publishing loader, update and complete statuses."""

    def __init__(self,
                 config: ScribeflowConfig,
                 topic: str = TRANSLATION_TOPIC,
                 registry: Optional[ModelRegistry] = None,
                 backend_factory: Callable[[str], AbstractTranslationBackend] = create_nllb_backend):
        super().__init__("translation")
        self.config = config
        self.publisher = MessagePublisher(topic)
        self.registry = registry or get_registry()
        self.backend_factory = backend_factory

    def submit(self, request: Any) -> None:
        """Validate and queue a request. Accepts a ``TranslationRequest`` or an equivalent dict."""
        if not isinstance(request, TranslationRequest):
            request = TranslationRequest.model_validate(request)
        super().submit(request)

    def _on_load_progress(self, data: Dict[str, Any]) -> None:
        # Loader statuses are forwarded as they are
        self.publisher.publish(TranslationMessage(status=data.get("status", "progress"), data=dict(data)))

    def _on_update(self, partial: str) -> None:
        self.publisher.publish(TranslationMessage(status="update", output=partial))

    def handle_request(self, request: TranslationRequest) -> Optional[str]:
        """Translate one request.

        Returns:
            Translated text, or None if the model failed
        """
        model_name = self.config.get('translation.model_name')
        logger.info(f"Translation request: {len(request.text)} chars, {request.src_lang} -> {request.tgt_lang}")

        try:
            translator = self.registry.get_instance(
                "translation", model_name, self.backend_factory, self._on_load_progress
            )
            output = translator.translate(request.text, request.src_lang, request.tgt_lang,
                                          on_update=self._on_update)
        except ModelError as e:
            logger.error(f"Translation failed: {e}")
            self.publisher.publish(TranslationMessage(status="error", output=str(e)))
            return None
        except Exception as e:
            logger.error(f"Unexpected translation failure: {e}", exc_info=True)
            self.publisher.publish(TranslationMessage(status="error", output=str(e)))
            return None

        self.publisher.publish(TranslationMessage(status="complete", output=[{"translation_text": output}]))
        return output
