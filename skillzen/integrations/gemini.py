from __future__ import annotations

import base64
import logging
import threading

import google.generativeai as genai

logger = logging.getLogger(__name__)

AUDIO_MIME_TYPE = "audio/webm"
AUDIO_TRANSCRIPTION_HINT = (
    "Important: The audio is in English language. Please transcribe it accurately in English only. "
    "Do not translate to any other language."
)

_UNAVAILABLE_MARKERS = ("404", "not found", "not supported")

_CONFIGURE_LOCK = threading.Lock()


def is_model_unavailable_error(exc: BaseException) -> bool:
    message = str(exc).lower()
    return any(marker in message for marker in _UNAVAILABLE_MARKERS)


def model_priority(model_id: str) -> int:
    return (
        (4 if "latest" in model_id else 0)
        + (3 if "1.5-pro" in model_id else 0)
        + (2 if "1.5-flash" in model_id else 0)
        + (1 if "pro" in model_id else 0)
    )


class GeminiClient:
    """Generative-language calls bound to one API key."""

    def __init__(self, api_key: str):
        if not api_key:
            raise RuntimeError("GEMINI_API_KEY is missing")
        self._api_key = api_key

    def generate(self, model_id: str, prompt: str, audio_b64: str | None = None) -> str:
        contents: str | list = prompt
        if audio_b64:
            logger.info("gemini_audio_transcription model=%s", model_id)
            contents = [
                f"{prompt}\n\n{AUDIO_TRANSCRIPTION_HINT}",
                {"mime_type": AUDIO_MIME_TYPE, "data": base64.b64decode(audio_b64)},
            ]
        # genai keeps the key in module state; configure and call must not interleave across keys.
        with _CONFIGURE_LOCK:
            genai.configure(api_key=self._api_key)
            model = genai.GenerativeModel(model_id)
            response = model.generate_content(contents)
        return response.text

    def list_models(self) -> list[str]:
        with _CONFIGURE_LOCK:
            genai.configure(api_key=self._api_key)
            names = [getattr(model, "name", "") for model in genai.list_models()]
        model_ids = [name.removeprefix("models/") for name in names if isinstance(name, str) and name]
        return sorted(model_ids, key=model_priority, reverse=True)
