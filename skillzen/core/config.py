from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


def _get_env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value


def _get_env_bool(name: str, default: bool) -> bool:
    raw = _get_env(name, None)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_env_int(name: str, default: int) -> int:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    raw = _get_env(name, None)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_env_optional_path(name: str, default: str) -> str | None:
    """Path setting that an explicit "off" / "none" / "memory" value disables."""
    raw = _get_env(name, default)
    if raw is None or raw.strip().lower() in {"off", "none", "memory", "0", "false"}:
        return None
    return raw.strip()


def _get_env_list(name: str, default: list[str]) -> tuple[str, ...]:
    raw = _get_env(name, None)
    if raw is None:
        return tuple(default)
    values = [item.strip() for item in raw.split(",")]
    clean = [item for item in values if item]
    return tuple(clean) if clean else tuple(default)


GEMINI_KEY_ENV_NAMES = ("GEMINI_API_KEY", "GEMINI_API_KEY_2", "GEMINI_API_KEY_3")


def configured_gemini_keys() -> tuple[str, ...]:
    """Primary key first, then backups; unset slots are skipped."""
    keys = [(_get_env(name) or "").strip() for name in GEMINI_KEY_ENV_NAMES]
    return tuple(key for key in keys if key)


@dataclass(frozen=True)
class Settings:
    gemini_api_keys: tuple[str, ...]
    gemini_default_model: str
    apyhub_api_key: str | None
    apyhub_base_url: str
    apilayer_api_key: str | None
    apilayer_base_url: str
    rapidapi_key: str | None
    judge0_api_url: str
    languagetool_url: str
    vendor_timeout_s: float
    resume_poll_attempts: int
    resume_poll_interval_s: float
    quota_store_path: str | None
    rate_limit: str
    rate_limit_enabled: bool
    log_level: str
    sentry_dsn: str | None
    cors_allowed_origins: tuple[str, ...]
    cors_allow_origin_regex: str | None


settings = Settings(
    gemini_api_keys=configured_gemini_keys(),
    gemini_default_model=_get_env("GEMINI_MODEL", "gemini-1.5-flash-latest") or "gemini-1.5-flash-latest",
    apyhub_api_key=_get_env("APYHUB_API_KEY"),
    apyhub_base_url=_get_env("APYHUB_BASE_URL", "https://api.apyhub.com/sharpapi/api/v1/hr/parse_resume")
    or "https://api.apyhub.com/sharpapi/api/v1/hr/parse_resume",
    apilayer_api_key=_get_env("APILAYER_API_KEY"),
    apilayer_base_url=_get_env("APILAYER_BASE_URL", "https://api.apilayer.com/resume_parser")
    or "https://api.apilayer.com/resume_parser",
    rapidapi_key=_get_env("RAPIDAPI_KEY"),
    judge0_api_url=_get_env("JUDGE0_API_URL", "https://judge0-ce.p.rapidapi.com") or "https://judge0-ce.p.rapidapi.com",
    languagetool_url=_get_env("LANGUAGETOOL_URL", "https://api.dev.languagetool.org/v2/check")
    or "https://api.dev.languagetool.org/v2/check",
    vendor_timeout_s=_get_env_float("VENDOR_TIMEOUT_S", 30.0),
    resume_poll_attempts=_get_env_int("RESUME_POLL_ATTEMPTS", 30),
    resume_poll_interval_s=_get_env_float("RESUME_POLL_INTERVAL_S", 1.0),
    quota_store_path=_get_env_optional_path("QUOTA_STORE_PATH", "data/quota_store.db"),
    rate_limit=_get_env("RATE_LIMIT", "60/minute") or "60/minute",
    rate_limit_enabled=_get_env_bool("RATE_LIMIT_ENABLED", True),
    log_level=_get_env("LOG_LEVEL", "INFO") or "INFO",
    sentry_dsn=_get_env("SENTRY_DSN"),
    cors_allowed_origins=_get_env_list(
        "CORS_ALLOWED_ORIGINS",
        [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
            "http://localhost:5173",
        ],
    ),
    cors_allow_origin_regex=_get_env("CORS_ALLOW_ORIGIN_REGEX"),
)
