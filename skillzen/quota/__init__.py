from .manager import QuotaManager
from .models import ApiKeyInfo, ApiStatus, QuotaInfo, QuotaSnapshot
from .store import KeyValueStore, MemoryKeyValueStore, SQLiteKeyValueStore

__all__ = [
    "QuotaManager",
    "QuotaInfo",
    "ApiKeyInfo",
    "ApiStatus",
    "QuotaSnapshot",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "SQLiteKeyValueStore",
]
