from __future__ import annotations

from typing import Any

import httpx

from skillzen.core.config import settings

from .errors import UpstreamServiceError

DEFAULT_LANGUAGE = "en-US"


def check_text(text: str, language: str | None = None) -> dict[str, Any]:
    form = {"text": text, "language": language or DEFAULT_LANGUAGE}
    with httpx.Client(timeout=settings.vendor_timeout_s) as client:
        response = client.post(settings.languagetool_url, data=form)

    if response.status_code >= 400:
        raise UpstreamServiceError(
            "LanguageTool request failed",
            status_code=response.status_code,
            details=response.text,
        )

    body = response.json()
    return {
        "matches": body.get("matches") or [],
        "language": body.get("language"),
    }
