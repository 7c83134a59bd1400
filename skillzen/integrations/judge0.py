from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from skillzen.core.config import settings

from .errors import UpstreamServiceError

logger = logging.getLogger(__name__)

LANGUAGE_IDS: dict[str, int] = {
    "javascript": 63,
    "python": 71,
    "java": 62,
    "cpp": 54,
    "c": 50,
    "csharp": 51,
    "go": 60,
    "rust": 73,
    "php": 68,
    "ruby": 72,
    "swift": 83,
    "kotlin": 78,
    "typescript": 74,
    "sql": 82,
    "r": 80,
    "scala": 81,
    "perl": 85,
    "haskell": 61,
    "lua": 64,
    "bash": 46,
    "powershell": 87,
    "mysql": 82,
    "postgresql": 82,
}

# Ids 1-2 are queued/processing; 3 is accepted and anything above is a terminal failure.
STATUS_ACCEPTED = 3


def language_id(language: str) -> int | None:
    return LANGUAGE_IDS.get(language.strip().lower())


def _headers() -> dict[str, str]:
    host = httpx.URL(settings.judge0_api_url).host
    return {
        "X-RapidAPI-Key": settings.rapidapi_key or "",
        "X-RapidAPI-Host": host,
    }


def run_submission(
    code: str,
    language: str,
    *,
    stdin: str = "",
    expected_output: str | None = None,
    max_attempts: int = 30,
    poll_interval_s: float = 1.0,
) -> dict[str, Any]:
    lang_id = language_id(language)
    if lang_id is None:
        raise UpstreamServiceError(f"Unsupported language: {language}", status_code=400)

    base = settings.judge0_api_url.rstrip("/")
    with httpx.Client(timeout=settings.vendor_timeout_s, headers=_headers()) as client:
        submitted = client.post(
            f"{base}/submissions",
            json={
                "language_id": lang_id,
                "source_code": code,
                "stdin": stdin,
                "expected_output": expected_output,
            },
        )
        if submitted.status_code >= 400:
            raise UpstreamServiceError(
                "Failed to submit code for compilation",
                status_code=submitted.status_code,
                details=submitted.text,
            )
        body = submitted.json()
        token = body.get("token") if isinstance(body, dict) else None
        if not token:
            raise UpstreamServiceError(
                "Invalid response from compilation service",
                status_code=500,
                details="Missing token in response",
            )
        logger.info("judge0_submitted language=%s token=%s", language, token)

        result: dict[str, Any] | None = None
        for attempt in range(1, max_attempts + 1):
            time.sleep(poll_interval_s)
            polled = client.get(f"{base}/submissions/{token}")
            if polled.status_code >= 400:
                raise UpstreamServiceError(
                    f"Failed to get compilation result: {polled.status_code}",
                    status_code=500,
                )
            result = polled.json()
            status_id = (result.get("status") or {}).get("id") or 0
            logger.debug("judge0_poll token=%s attempt=%s status_id=%s", token, attempt, status_id)
            if status_id >= STATUS_ACCEPTED:
                break

    if result is None:
        raise UpstreamServiceError("Compilation timed out", status_code=408)

    status = result.get("status") or {}
    outcome: dict[str, Any] = {
        "success": status.get("id") == STATUS_ACCEPTED,
        "status": status.get("description") or "Unknown",
        "output": result.get("stdout") or "",
        "error": result.get("stderr") or result.get("compile_output") or "",
        "time": result.get("time") or "0.000",
        "memory": str(result.get("memory") or "0"),
        "exitCode": result.get("exit_code") or 0,
        "language": language,
        "token": token,
    }
    if expected_output and outcome["success"]:
        outcome["testPassed"] = outcome["output"].strip() == expected_output.strip()
    return outcome


def list_languages() -> list[dict[str, Any]]:
    base = settings.judge0_api_url.rstrip("/")
    with httpx.Client(timeout=settings.vendor_timeout_s, headers=_headers()) as client:
        response = client.get(f"{base}/languages")
    if response.status_code >= 400:
        raise UpstreamServiceError(
            "Failed to fetch supported languages",
            status_code=500,
            details=f"HTTP {response.status_code}",
        )
    return response.json()
