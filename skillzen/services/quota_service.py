from __future__ import annotations

import logging
from functools import lru_cache

from skillzen.core.config import settings
from skillzen.quota import QuotaManager, SQLiteKeyValueStore

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_quota_manager() -> QuotaManager:
    """Process-wide tracker; QUOTA_STORE_PATH=off runs it storage-less."""
    store = SQLiteKeyValueStore(settings.quota_store_path) if settings.quota_store_path else None
    manager = QuotaManager(store, settings.gemini_api_keys)
    logger.info(
        "quota_manager_ready keys=%s persistent=%s",
        len(settings.gemini_api_keys),
        manager.has_store,
    )
    return manager
