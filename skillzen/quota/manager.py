from __future__ import annotations

import json
import logging
import time
from typing import Callable, Sequence

from .models import DEFAULT_QUOTA_TOTAL, ApiKeyInfo, ApiStatus, QuotaInfo, QuotaSnapshot
from .store import KeyValueStore

logger = logging.getLogger(__name__)

# Superseded by API_KEYS_KEY; only cleared, never read.
LEGACY_QUOTA_KEY = "gemini_quota_info"
STATUS_KEY = "gemini_api_status"
STATUS_TIME_KEY = "gemini_api_status_time"
API_KEYS_KEY = "gemini_api_keys_info"
LAST_CALL_TIME_KEY = "gemini_last_call_time"

CACHE_DURATION_MS = 5 * 60 * 1000
MIN_CALL_INTERVAL_MS = 2000
LOW_QUOTA_THRESHOLD = 100
MAX_API_KEYS = 3
BACKUP_KEY_INDEX = 1

_API_STATUSES = {"online", "offline", "quota-exceeded"}


def _now_ms() -> int:
    return int(time.time() * 1000)


class QuotaManager:
    """Tracks Gemini call budgets per configured key, with backup-key failover.

    The manager persists everything into ``store``. Without a store it behaves
    like code running where no persistent storage exists: reads fall back to
    configuration and writes are inert.

    Storage failures are logged and treated as missing state; no method lets
    a store exception escape.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        api_keys: Sequence[str] = (),
        *,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._store = store
        self._configured_keys = tuple(key for key in api_keys if key)[:MAX_API_KEYS]
        self._clock = clock

    @property
    def has_store(self) -> bool:
        return self._store is not None

    # -- persisted key list -------------------------------------------------

    def _load_keys(self) -> list[ApiKeyInfo] | None:
        raw = self._store.get(API_KEYS_KEY)
        if not raw:
            return None
        data = json.loads(raw)
        if not isinstance(data, list):
            return None
        return [ApiKeyInfo.model_validate(item) for item in data]

    def _save_keys(self, keys: list[ApiKeyInfo]) -> None:
        payload = [item.model_dump(mode="json", by_alias=True) for item in keys]
        self._store.set(API_KEYS_KEY, json.dumps(payload))

    # -- credentials --------------------------------------------------------

    def get_api_keys(self) -> list[ApiKeyInfo]:
        now = self._clock()
        return [
            ApiKeyInfo(
                key=key,
                quota=QuotaInfo(
                    remaining=DEFAULT_QUOTA_TOTAL,
                    total=DEFAULT_QUOTA_TOTAL,
                    last_updated=now,
                    api_key_index=index,
                ),
                is_active=index == 0,
            )
            for index, key in enumerate(self._configured_keys)
        ]

    def initialize_api_keys(self) -> None:
        # Overwrites any persisted quota with configuration defaults on every call.
        if self._store is None:
            return
        try:
            self._save_keys(self.get_api_keys())
        except Exception as exc:
            logger.error("quota_initialize_failed error=%s", exc)

    def get_current_api_key(self) -> str | None:
        if self._store is not None:
            try:
                keys = self._load_keys()
                if keys:
                    for item in keys:
                        if item.is_active:
                            return item.key
            except Exception as exc:
                logger.error("quota_read_keys_failed error=%s", exc)
        return self._configured_keys[0] if self._configured_keys else None

    def has_backup_api_key(self) -> bool:
        if self._store is None:
            return len(self._configured_keys) > 1
        try:
            keys = self._load_keys()
            if keys:
                return any(not item.is_active for item in keys)
        except Exception as exc:
            logger.error("quota_read_backup_failed error=%s", exc)
        return False

    def switch_to_backup_api_key(self) -> bool:
        """Activate the second configured key (index 1), whichever key is active now."""
        if self._store is None:
            return False
        try:
            keys = self._load_keys()
            if not keys:
                return False
            backup = next((item for item in keys if item.quota.api_key_index == BACKUP_KEY_INDEX), None)
            if backup is None:
                return False
            for item in keys:
                item.is_active = False
            backup.is_active = True
            backup.quota.last_updated = self._clock()
            self._save_keys(keys)
            logger.info("quota_switched_to_backup api_key_index=%s", BACKUP_KEY_INDEX)
            return True
        except Exception as exc:
            logger.error("quota_switch_backup_failed error=%s", exc)
        return False

    # -- quota --------------------------------------------------------------

    def get_quota_info(self) -> QuotaInfo | None:
        if self._store is None:
            return None
        try:
            keys = self._load_keys()
            active = next((item for item in keys or [] if item.is_active), None)
            if active is not None and self._clock() - active.quota.last_updated < CACHE_DURATION_MS:
                return active.quota
        except Exception as exc:
            logger.error("quota_read_failed error=%s", exc)
        return None

    def set_quota_info(self, quota: QuotaInfo) -> None:
        if self._store is None:
            return
        try:
            keys = self._load_keys()
            if not keys:
                return
            for index, item in enumerate(keys):
                if item.is_active:
                    keys[index].quota = quota.model_copy(update={"last_updated": self._clock()})
                    self._save_keys(keys)
                    return
        except Exception as exc:
            logger.error("quota_write_failed error=%s", exc)

    def _zero_quota(self) -> QuotaInfo:
        return QuotaInfo(remaining=0, total=0, last_updated=self._clock(), api_key_index=0)

    def decrease_quota(self) -> QuotaInfo:
        if self._store is None:
            return self._zero_quota()
        try:
            current = self.get_quota_info()
            if current is not None:
                updated = QuotaInfo(
                    remaining=max(0, current.remaining - 1),
                    total=current.total,
                    last_updated=self._clock(),
                    api_key_index=current.api_key_index,
                    exhausted=current.exhausted,
                )
                self.set_quota_info(updated)
                return updated

            # Unknown or stale quota: start a fresh window that already counts this call.
            updated = QuotaInfo(
                remaining=DEFAULT_QUOTA_TOTAL - 1,
                total=DEFAULT_QUOTA_TOTAL,
                last_updated=self._clock(),
                api_key_index=0,
            )
            self.initialize_api_keys()
            self.set_quota_info(updated)
            return updated
        except Exception as exc:
            logger.error("quota_decrease_failed error=%s", exc)
            return self._zero_quota()

    def reset_quota(self, total: int = DEFAULT_QUOTA_TOTAL) -> QuotaInfo:
        """Start a new window of ``total`` calls.

        ``reset_quota(0)`` is how exhaustion has always been recorded; it loses
        the previous ceiling. ``mark_quota_exhausted`` keeps it.
        """
        quota = QuotaInfo(remaining=total, total=total, last_updated=self._clock(), api_key_index=0)
        self.set_quota_info(quota)
        return quota

    def mark_quota_exhausted(self) -> QuotaInfo | None:
        current = self.get_quota_info()
        if current is None:
            return None
        exhausted = current.model_copy(update={"remaining": 0, "exhausted": True})
        self.set_quota_info(exhausted)
        return exhausted

    def is_quota_low(self) -> bool:
        # Threshold is above the default window of 50, so any known quota is "low".
        quota = self.get_quota_info()
        return quota.remaining <= LOW_QUOTA_THRESHOLD if quota else False

    def is_quota_exhausted(self) -> bool:
        quota = self.get_quota_info()
        if quota is None:
            return False
        return quota.exhausted or quota.remaining <= 0

    # -- status -------------------------------------------------------------

    def get_api_status(self) -> ApiStatus:
        if self._store is None:
            return "offline"
        try:
            cached = self._store.get(STATUS_KEY)
            cached_time = self._store.get(STATUS_TIME_KEY)
            if cached and cached_time and cached in _API_STATUSES:
                if self._clock() - int(cached_time) < CACHE_DURATION_MS:
                    return cached  # type: ignore[return-value]
        except Exception as exc:
            logger.error("quota_status_read_failed error=%s", exc)
        return "offline"

    def set_api_status(self, status: ApiStatus) -> None:
        if self._store is None:
            return
        try:
            self._store.set(STATUS_KEY, status)
            self._store.set(STATUS_TIME_KEY, str(self._clock()))
        except Exception as exc:
            logger.error("quota_status_write_failed error=%s", exc)

    # -- rate gate ----------------------------------------------------------

    def should_wait_for_rate_limit(self) -> bool:
        if self._store is None:
            return False
        try:
            last_call = self._store.get(LAST_CALL_TIME_KEY)
            if last_call:
                return self._clock() - int(last_call) < MIN_CALL_INTERVAL_MS
        except Exception as exc:
            logger.error("quota_rate_gate_read_failed error=%s", exc)
        return False

    def record_api_call(self) -> None:
        if self._store is None:
            return
        try:
            self._store.set(LAST_CALL_TIME_KEY, str(self._clock()))
        except Exception as exc:
            logger.error("quota_record_call_failed error=%s", exc)

    # -- housekeeping -------------------------------------------------------

    def _active_position(self) -> int | None:
        if self._store is None:
            return 0 if self._configured_keys else None
        try:
            for position, item in enumerate(self._load_keys() or []):
                if item.is_active:
                    return position
        except Exception as exc:
            logger.error("quota_read_keys_failed error=%s", exc)
        return None

    def snapshot(self) -> QuotaSnapshot:
        quota = self.get_quota_info()
        return QuotaSnapshot(
            active_key_index=self._active_position(),
            quota=quota,
            status=self.get_api_status(),
            has_backup=self.has_backup_api_key(),
            quota_low=self.is_quota_low(),
            quota_exhausted=self.is_quota_exhausted(),
        )

    def clear_state(self) -> None:
        if self._store is None:
            return
        try:
            for key in (LEGACY_QUOTA_KEY, STATUS_KEY, STATUS_TIME_KEY, API_KEYS_KEY, LAST_CALL_TIME_KEY):
                self._store.delete(key)
        except Exception as exc:
            logger.error("quota_clear_failed error=%s", exc)

    def close(self) -> None:
        close = getattr(self._store, "close", None)
        if callable(close):
            close()
