from __future__ import annotations

import logging
from typing import Any, Callable

from skillzen.core.config import settings
from skillzen.integrations.gemini import GeminiClient, is_model_unavailable_error
from skillzen.quota import QuotaManager

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], GeminiClient]

QUOTA_RETRY_AFTER_S = 300
RATE_GATE_RETRY_AFTER_S = 2
MAX_LISTED_MODELS = 15


class GeminiServiceError(RuntimeError):
    def __init__(self, message: str, *, status_code: int, **extra: Any):
        super().__init__(message)
        self.status_code = status_code
        self.extra = extra

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": str(self)}
        payload.update({key: value for key, value in self.extra.items() if value is not None})
        return payload


class _NoSupportedModel(RuntimeError):
    def __init__(self, tried: list[str], available: list[str], last_error: BaseException | None):
        super().__init__("No supported Gemini model available")
        self.tried = tried
        self.available = available
        self.last_error = last_error


def _classify_failure(exc: BaseException) -> tuple[str, int] | None:
    """Map provider errors that warrant a backup-key retry to (message, status)."""
    message = str(exc)
    lowered = message.lower()
    if "429" in message or "quota" in lowered or "rate limit" in lowered:
        return "API rate limit exceeded. Please wait a few minutes before trying again.", 429
    if "API_KEY_INVALID" in message:
        return "Invalid API key. Please check your API configuration.", 401
    return None


def _generate_with_fallback(
    client: GeminiClient,
    prompt: str,
    audio_b64: str | None,
    model_id: str | None,
) -> tuple[str, str]:
    candidates = [model_id] if model_id else [settings.gemini_default_model]
    last_error: BaseException | None = None

    for candidate in candidates:
        try:
            logger.info("gemini_try_model model=%s", candidate)
            return client.generate(candidate, prompt, audio_b64), candidate
        except Exception as exc:
            if not is_model_unavailable_error(exc):
                raise
            logger.warning("gemini_model_unavailable model=%s", candidate)
            last_error = exc

    try:
        discovered = client.list_models()
    except Exception as exc:
        logger.warning("gemini_list_models_failed error=%s", exc)
        discovered = []

    for candidate in discovered:
        try:
            logger.info("gemini_try_discovered_model model=%s", candidate)
            return client.generate(candidate, prompt, audio_b64), candidate
        except Exception as exc:
            if not is_model_unavailable_error(exc):
                raise
            last_error = exc

    raise _NoSupportedModel(candidates, discovered, last_error)


def generate_content(
    manager: QuotaManager,
    prompt: str,
    *,
    audio_b64: str | None = None,
    model_id: str | None = None,
    client_factory: ClientFactory = GeminiClient,
    _allow_backup_retry: bool = True,
) -> dict[str, Any]:
    """Run one Gemini generation under quota accounting, failing over to the backup key once."""
    api_key = manager.get_current_api_key()
    if not api_key:
        raise GeminiServiceError("No Gemini API key available", status_code=500)

    # The rate gate would always trip on the immediate backup retry.
    if _allow_backup_retry and manager.should_wait_for_rate_limit():
        raise GeminiServiceError(
            "Rate limit: Please wait a moment before making another request",
            status_code=429,
            retryAfter=RATE_GATE_RETRY_AFTER_S,
        )

    if manager.is_quota_exhausted():
        has_backup = manager.has_backup_api_key()
        if has_backup and _allow_backup_retry and manager.switch_to_backup_api_key():
            logger.info("gemini_quota_exhausted_switching_backup")
            return generate_content(
                manager,
                prompt,
                audio_b64=audio_b64,
                model_id=model_id,
                client_factory=client_factory,
                _allow_backup_retry=False,
            )
        manager.set_api_status("quota-exceeded")
        raise GeminiServiceError(
            "Daily quota exceeded. Please try again tomorrow.",
            status_code=429,
            hasBackup=has_backup,
        )

    manager.record_api_call()
    quota = manager.decrease_quota()

    try:
        text, used_model = _generate_with_fallback(client_factory(api_key), prompt, audio_b64, model_id)
    except _NoSupportedModel as exc:
        raise GeminiServiceError(
            "Model not available for your API key/version",
            status_code=404,
            details=str(exc.last_error) if exc.last_error else str(exc),
            tried=exc.tried,
            availableModels=exc.available[:MAX_LISTED_MODELS],
        ) from exc
    except Exception as exc:
        logger.error("gemini_generate_failed error=%s", exc)
        failure = _classify_failure(exc)
        if failure is None:
            raise GeminiServiceError(
                "Failed to generate content",
                status_code=500,
                details=str(exc),
                hasBackup=manager.has_backup_api_key(),
            ) from exc

        message, status_code = failure
        if status_code == 429:
            manager.mark_quota_exhausted()
            manager.set_api_status("quota-exceeded")
        if _allow_backup_retry and manager.has_backup_api_key() and manager.switch_to_backup_api_key():
            try:
                return generate_content(
                    manager,
                    prompt,
                    audio_b64=audio_b64,
                    model_id=model_id,
                    client_factory=client_factory,
                    _allow_backup_retry=False,
                )
            except GeminiServiceError as retry_exc:
                logger.error("gemini_backup_key_failed error=%s", retry_exc)
        raise GeminiServiceError(
            message,
            status_code=status_code,
            details=str(exc),
            retryAfter=QUOTA_RETRY_AFTER_S if status_code == 429 else None,
            hasBackup=manager.has_backup_api_key(),
        ) from exc

    manager.set_api_status("online")
    logger.info("gemini_generate_ok model=%s remaining=%s", used_model, quota.remaining)
    return {
        "response": text,
        "model": used_model,
        "quotaInfo": {
            "remaining": quota.remaining,
            "total": quota.total,
            "apiKeyIndex": quota.api_key_index,
        },
    }
