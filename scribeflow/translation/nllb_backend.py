"""NLLB translation backend backed by Hugging Face transformers."""

import logging
from typing import Any, Callable, Dict, List, Optional

import torch
from transformers import AutoModelForSeq2SeqLM, AutoTokenizer
from transformers.generation.streamers import BaseStreamer

from ..errors import InferenceRuntimeError, ModelAcquisitionError
from ..hub import MODEL_FILE_PATTERNS, download_model, pick_device
from .base import AbstractTranslationBackend

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "facebook/nllb-200-distilled-600M"


class _UpdateStreamer(BaseStreamer):
    """Decodes the running output after each generated token."""

    def __init__(self, tokenizer, on_update: Callable[[str], None]):
        self.tokenizer = tokenizer
        self.on_update = on_update
        self.token_ids: List[int] = []
        self.next_tokens_are_prompt = True

    def put(self, value) -> None:
        self.token_ids.extend(int(t) for t in value.reshape(-1).tolist())
        if self.next_tokens_are_prompt:
            self.next_tokens_are_prompt = False
            return
        self.on_update(self.tokenizer.decode(self.token_ids, skip_special_tokens=True))

    def end(self) -> None:
        self.next_tokens_are_prompt = True


class NllbTranslationBackend(AbstractTranslationBackend):
    """Translates with an NLLB-200 checkpoint, forcing the target language token."""

    def __init__(self, model_name: str = DEFAULT_MODEL, device: Optional[str] = None, max_length: int = 512):
        super().__init__(model_name or DEFAULT_MODEL)
        self.device = device or pick_device()
        self.max_length = max_length
        self.tokenizer = None
        self.model = None

    def load(self, progress_callback: Optional[Callable[[Dict[str, Any]], None]] = None) -> None:
        try:
            model_path = download_model(self.model_name, progress_callback,
                                        allow_patterns=MODEL_FILE_PATTERNS + ["*.bin"])
            self.tokenizer = AutoTokenizer.from_pretrained(model_path)
            self.model = AutoModelForSeq2SeqLM.from_pretrained(model_path).to(self.device)
            self.model.eval()
        except Exception as e:
            raise ModelAcquisitionError(f"Failed to load translation model {self.model_name}: {e}",
                                        self.model_name) from e

        if progress_callback:
            progress_callback({"status": "ready", "file": self.model_name})
        logger.info(f"Translation model {self.model_name} ready on {self.device}")

    def translate(self,
                  text: str,
                  src_lang: str,
                  tgt_lang: str,
                  on_update: Optional[Callable[[str], None]] = None) -> str:
        if self.model is None or self.tokenizer is None:
            raise InferenceRuntimeError("Translation model is not loaded", self.model_name)

        try:
            self.tokenizer.src_lang = src_lang
            inputs = self.tokenizer(text, return_tensors="pt", truncation=True,
                                    max_length=self.max_length).to(self.device)
            streamer = _UpdateStreamer(self.tokenizer, on_update) if on_update else None

            with torch.no_grad():
                output_ids = self.model.generate(
                    **inputs,
                    forced_bos_token_id=self.tokenizer.convert_tokens_to_ids(tgt_lang),
                    max_length=self.max_length,
                    do_sample=False,
                    num_beams=1,
                    streamer=streamer,
                )
            return self.tokenizer.batch_decode(output_ids, skip_special_tokens=True)[0]
        except Exception as e:
            raise InferenceRuntimeError(f"Translation {src_lang}->{tgt_lang} failed: {e}",
                                        self.model_name) from e
