"""Resume-parsing vendors: APYHub (async job + polling) and APILayer (single upload)."""
from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from skillzen.core.config import settings

from .errors import ResumeVendorError

logger = logging.getLogger(__name__)

APYHUB = "APYHub"
APILAYER = "APILayer"
USER_AGENT = "SkillZen-Resume-Parser/1.0"


def _json_or_none(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def parse_with_apyhub(
    filename: str,
    content: bytes,
    content_type: str,
    *,
    api_key: str | None = None,
    base_url: str | None = None,
    max_attempts: int | None = None,
    poll_interval_s: float | None = None,
) -> dict[str, Any]:
    key = api_key or settings.apyhub_api_key
    if not key:
        raise ResumeVendorError("APYHub API key not configured", status_code=500)
    url = base_url or settings.apyhub_base_url
    attempts = settings.resume_poll_attempts if max_attempts is None else max_attempts
    interval = settings.resume_poll_interval_s if poll_interval_s is None else poll_interval_s
    headers = {"apy-token": key}

    with httpx.Client(timeout=settings.vendor_timeout_s, headers=headers) as client:
        submit = client.post(
            url,
            files={"file": (filename, content, content_type)},
            data={"language": "English"},
        )
        if submit.status_code == 429:
            raise ResumeVendorError(
                "API rate limit exceeded",
                status_code=429,
                details="Too many requests to APYHub API. Please try again later or upgrade your plan.",
            )
        if submit.status_code >= 400:
            body = _json_or_none(submit) or {}
            details = (body.get("message") or body.get("error")) if isinstance(body, dict) else None
            raise ResumeVendorError(
                "Failed to submit resume for parsing",
                status_code=submit.status_code,
                details=details or f"HTTP {submit.status_code}",
            )

        body = _json_or_none(submit)
        job_id = body.get("job_id") if isinstance(body, dict) else None
        if not job_id:
            raise ResumeVendorError(
                "Invalid response from resume parser API",
                status_code=500,
                details="Missing job_id in response",
            )
        logger.info("apyhub_job_submitted job_id=%s", job_id)

        for attempt in range(1, attempts + 1):
            time.sleep(interval)
            status_response = client.get(f"{url}/job/status/{job_id}")
            if status_response.status_code == 429:
                raise ResumeVendorError(
                    "API rate limit exceeded during status check",
                    status_code=429,
                    details="Too many requests to APYHub API. Please try again later.",
                )
            if status_response.status_code >= 400:
                raise ResumeVendorError("Failed to check parsing status", status_code=status_response.status_code)

            status_body = _json_or_none(status_response) or {}
            job_status = status_body.get("status") if isinstance(status_body, dict) else None
            logger.debug("apyhub_job_status job_id=%s attempt=%s status=%s", job_id, attempt, job_status)
            if job_status == "completed":
                result = status_body.get("result")
                return result if isinstance(result, dict) else {}
            if job_status == "failed":
                raise ResumeVendorError(
                    "Resume parsing failed",
                    status_code=500,
                    details=status_body.get("error") or "Unknown error",
                )

    raise ResumeVendorError("Resume parsing timed out. Please try again.", status_code=408)


def parse_with_apilayer(
    content: bytes,
    *,
    api_key: str | None = None,
    base_url: str | None = None,
) -> dict[str, Any]:
    key = api_key or settings.apilayer_api_key
    if not key:
        raise ResumeVendorError("APILayer API key not configured", status_code=500)
    url = f"{base_url or settings.apilayer_base_url}/upload"
    headers = {
        "apikey": key,
        "Content-Type": "application/octet-stream",
        "User-Agent": USER_AGENT,
    }

    with httpx.Client(timeout=settings.vendor_timeout_s) as client:
        response = client.post(url, headers=headers, content=content)

    if response.status_code >= 400:
        body = _json_or_none(response)
        if isinstance(body, dict):
            details = body.get("message") or body.get("error")
        else:
            logger.warning("apilayer_non_json_error status=%s body=%s", response.status_code, response.text[:500])
            details = "Non-JSON response received"
        raise ResumeVendorError(
            "APILayer request failed",
            status_code=response.status_code,
            details=details or f"HTTP {response.status_code}",
        )

    body = _json_or_none(response)
    if not isinstance(body, dict):
        raise ResumeVendorError(
            "APILayer returned invalid JSON",
            status_code=500,
            details="APILayer API returned non-JSON response",
        )
    return body


def probe_vendors() -> dict[str, dict[str, str | None]]:
    """Cheap reachability check of both vendors with the configured keys."""
    results: dict[str, dict[str, str | None]] = {}
    probes = {
        "apyhub": (
            settings.apyhub_api_key,
            settings.apyhub_base_url,
            {"apy-token": settings.apyhub_api_key or ""},
        ),
        "apilayer": (
            settings.apilayer_api_key,
            f"{settings.apilayer_base_url}/url?url=https://example.com/test.pdf",
            {"apikey": settings.apilayer_api_key or ""},
        ),
    }
    for name, (key, url, headers) in probes.items():
        if not key:
            results[name] = {"status": "no_key", "error": "API key not configured"}
            continue
        try:
            with httpx.Client(timeout=10.0) as client:
                response = client.get(url, headers=headers)
            ok = response.is_success
            results[name] = {
                "status": "success" if ok else f"error_{response.status_code}",
                "error": None if ok else f"HTTP {response.status_code}",
            }
        except httpx.HTTPError as exc:
            logger.warning("vendor_probe_failed vendor=%s error=%s", name, exc)
            results[name] = {"status": "error", "error": str(exc)}
    return results
