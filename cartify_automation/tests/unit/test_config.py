import json
import os
import tempfile
import unittest
from unittest.mock import patch

from cartify_automation.config import Config


class TestConfig(unittest.TestCase):
    """Layering of defaults, configuration files and environment variables."""

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmpdir.cleanup)

    def write(self, name, content):
        path = os.path.join(self.tmpdir.name, name)
        with open(path, 'w', encoding='utf-8') as f:
            f.write(content)
        return path

    def test_defaults(self):
        config = Config(use_env=False)
        self.assertEqual(config.base_url, "https://cartify0.netlify.app")
        self.assertEqual(config.timeout, 10.0)
        self.assertEqual(config.poll_interval, 0.5)
        self.assertEqual(config.page_url("cart"), "https://cartify0.netlify.app/cartpage")
        self.assertTrue(config.get("browser.headless"))

    def test_defaults_are_not_shared_between_instances(self):
        first = Config(use_env=False)
        first.set("browser.viewport.width", 800)
        self.assertEqual(Config(use_env=False).get("browser.viewport.width"), 1280)

    def test_yaml_file_merges_over_defaults(self):
        path = self.write("config.yaml", "site:\n  base_url: http://localhost:3000/\ntimeouts:\n  default: 4\n")
        config = Config(path, use_env=False)
        self.assertEqual(config.page_url("checkout"), "http://localhost:3000/checkout")
        self.assertEqual(config.timeout, 4.0)
        self.assertEqual(config.poll_interval, 0.5)

    def test_json_file(self):
        path = self.write("config.json", json.dumps({"browser": {"browser_type": "firefox"}}))
        config = Config(path, use_env=False)
        self.assertEqual(config.get("browser.browser_type"), "firefox")
        self.assertTrue(config.get("browser.headless"))

    def test_missing_file_falls_back_to_defaults(self):
        config = Config(os.path.join(self.tmpdir.name, "absent.yaml"), use_env=False)
        self.assertEqual(config.timeout, 10.0)

    def test_invalid_file_raises(self):
        with self.assertRaises(ValueError):
            Config(self.write("broken.json", "{not json"), use_env=False)
        with self.assertRaises(ValueError):
            Config(self.write("list.yaml", "- a\n- b\n"), use_env=False)

    def test_environment_overrides(self):
        env = {
            "CARTIFY_BASE_URL": "http://staging.test",
            "CARTIFY_TIMEOUT": "7.5",
            "CARTIFY_HEADLESS": "false",
            "CARTIFY_BROWSER": "webkit",
        }
        with patch.dict(os.environ, env), patch("cartify_automation.config.load_dotenv"):
            config = Config()
        self.assertEqual(config.base_url, "http://staging.test")
        self.assertEqual(config.timeout, 7.5)
        self.assertFalse(config.get("browser.headless"))
        self.assertEqual(config.get("browser.browser_type"), "webkit")

    def test_invalid_environment_value(self):
        with patch.dict(os.environ, {"CARTIFY_TIMEOUT": "soon"}), patch("cartify_automation.config.load_dotenv"):
            with self.assertRaises(ValueError):
                Config()

    def test_unknown_page(self):
        with self.assertRaises(KeyError):
            Config(use_env=False).page_url("wishlist")

    def test_get_default_for_missing_key(self):
        config = Config(use_env=False)
        self.assertEqual(config.get("browser.missing", "fallback"), "fallback")
        self.assertIsNone(config.get("timeouts.default.nested"))


if __name__ == '__main__':
    unittest.main()
