import os
import sys
import unittest
from dataclasses import replace
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from skillzen.core import config  # noqa: E402
from skillzen.services import quota_service  # noqa: E402


class QuotaStorePathTests(unittest.TestCase):
    def test_off_values_disable_the_store(self):
        for value in ("off", "None", "memory", "0", "false"):
            with self.subTest(value=value), patch.dict(os.environ, {"QUOTA_STORE_PATH": value}):
                self.assertIsNone(config._get_env_optional_path("QUOTA_STORE_PATH", "data/quota_store.db"))

    def test_unset_uses_default(self):
        with patch.dict(os.environ, {"QUOTA_STORE_PATH": ""}):
            self.assertEqual(
                config._get_env_optional_path("QUOTA_STORE_PATH", "data/quota_store.db"),
                "data/quota_store.db",
            )

    def test_custom_path_is_kept(self):
        with patch.dict(os.environ, {"QUOTA_STORE_PATH": " /tmp/quota.db "}):
            self.assertEqual(config._get_env_optional_path("QUOTA_STORE_PATH", "data/quota_store.db"), "/tmp/quota.db")


class QuotaManagerFactoryTests(unittest.TestCase):
    def setUp(self):
        quota_service.get_quota_manager.cache_clear()
        self.addCleanup(quota_service.get_quota_manager.cache_clear)

    def test_disabled_store_runs_without_persistence(self):
        configured = replace(config.settings, quota_store_path=None, gemini_api_keys=("key-a",))
        with patch.object(quota_service, "settings", configured):
            manager = quota_service.get_quota_manager()

        self.assertFalse(manager.has_store)

    def test_configured_path_is_persistent(self):
        with patch.object(quota_service, "SQLiteKeyValueStore") as store_cls:
            configured = replace(config.settings, quota_store_path="quota.db", gemini_api_keys=("key-a",))
            with patch.object(quota_service, "settings", configured):
                manager = quota_service.get_quota_manager()

        store_cls.assert_called_once_with("quota.db")
        self.assertTrue(manager.has_store)


if __name__ == "__main__":
    unittest.main()
