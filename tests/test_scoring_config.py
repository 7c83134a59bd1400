import unittest
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from skillzen.core.scoring import get_scoring_config, get_scoring_value


class ScoringConfigTests(unittest.TestCase):
    def test_loader_and_value_lookup(self):
        config = get_scoring_config()
        self.assertIsInstance(config, dict)
        self.assertEqual(get_scoring_value("contact.email"), 8)
        self.assertEqual(get_scoring_value("tiers.excellent"), 80)

    def test_missing_path_returns_default(self):
        self.assertEqual(get_scoring_value("contact.fax", 3), 3)
        self.assertEqual(get_scoring_value("summary.nested", 0), 0)
        self.assertIsNone(get_scoring_value(""))


if __name__ == "__main__":
    unittest.main()
