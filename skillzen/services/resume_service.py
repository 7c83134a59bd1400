from __future__ import annotations

import logging

from skillzen.core.config import settings
from skillzen.integrations.errors import ResumeVendorError
from skillzen.integrations.resume_vendors import APILAYER, APYHUB, parse_with_apilayer, parse_with_apyhub
from skillzen.resume import normalize_resume_payload
from skillzen.schemas.resume import NormalizedResumeRecord

logger = logging.getLogger(__name__)

MAX_RESUME_BYTES = 5 * 1024 * 1024
ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "text/plain",
    "application/rtf",
}
# Vendor keys shorter than this are treated as unset placeholders.
MIN_VENDOR_KEY_LENGTH = 10


class ResumeInputError(ValueError):
    status_code = 400


def validate_resume_upload(filename: str | None, content: bytes, content_type: str | None) -> None:
    if not filename or not content:
        raise ResumeInputError("No file provided")
    if (content_type or "").split(";")[0].strip().lower() not in ALLOWED_CONTENT_TYPES:
        raise ResumeInputError("Invalid file type. Please upload PDF, DOC, DOCX, TXT, or RTF files only.")
    if len(content) > MAX_RESUME_BYTES:
        raise ResumeInputError("File too large. Please upload files smaller than 5MB.")


def _usable_key(key: str | None) -> bool:
    return bool(key) and len(key or "") >= MIN_VENDOR_KEY_LENGTH


def parse_resume_file(
    filename: str,
    content: bytes,
    content_type: str,
    *,
    include_raw: bool = False,
) -> NormalizedResumeRecord:
    """Parse with APYHub, fall back to APILayer, and normalize whichever answers first."""
    validate_resume_upload(filename, content, content_type)
    logger.info("resume_parse_start filename=%s bytes=%s", filename, len(content))

    if _usable_key(settings.apyhub_api_key):
        try:
            payload = parse_with_apyhub(filename, content, content_type)
            return normalize_resume_payload(payload, source=APYHUB, include_raw=include_raw)
        except Exception as exc:
            logger.warning("resume_vendor_failed vendor=%s error=%s", APYHUB, exc)

    if _usable_key(settings.apilayer_api_key):
        try:
            payload = parse_with_apilayer(content)
            return normalize_resume_payload(payload, source=APILAYER, include_raw=include_raw)
        except Exception as exc:
            logger.warning("resume_vendor_failed vendor=%s error=%s", APILAYER, exc)

    raise ResumeVendorError(
        "Resume parsing failed",
        status_code=503,
        details="Both APYHub and APILayer APIs are unavailable. Please check your API keys and try again.",
    )
