import os
import json
import shutil
import tempfile
import unittest
from unittest.mock import patch

from flickr_uploader.config import (
    AppConfig,
    Album,
    ConfigError,
    Rule,
    RuleAction,
    RuleCondition,
    default_config_dir,
    load_config,
    save_config,
    validate_for_upload,
)


class TestConfig(unittest.TestCase):
    """Test cases for configuration loading."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = tempfile.mkdtemp()
        self.config_path = os.path.join(self.temp_dir, "config.json")

    def tearDown(self):
        """Clean up after tests."""
        shutil.rmtree(self.temp_dir)

    def write_config(self, data):
        with open(self.config_path, "w") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)

    def test_missing_file_gives_defaults(self):
        config = load_config(self.config_path)
        self.assertEqual(config.rules, [])
        self.assertEqual(config.config_dir, self.temp_dir)
        self.assertTrue(config.upload.store_upload_list_in_image_dir)

    def test_load_full_config(self):
        self.write_config({
            "flickr": {
                "api_key": "key", "api_secret": "secret",
                "oauth_token": "token", "oauth_secret": "${TEST_FLICKR_SECRET}",
                "username": "me",
            },
            "cmd": {"exiftool": "/usr/bin/exiftool"},
            "upload": {"store_upload_list_in_image_dir": False, "set_date_posted": False},
            "rules": [
                {
                    "condition": {"excludesAny": ["public"], "includes_any": ["private", "family"]},
                    "action": {"delete": True, "albums": [{"id": "7215", "name": "Family"}]},
                },
                {"condition": {"includesAll": "cat"}},
            ],
            "log_level": "DEBUG",
            "tool_timeout": 60,
        })

        with patch.dict(os.environ, {"TEST_FLICKR_SECRET": "from-env"}):
            config = load_config(self.config_path)

        self.assertEqual(config.flickr.oauth_secret, "from-env")
        self.assertEqual(config.cmd.exiftool, "/usr/bin/exiftool")
        self.assertFalse(config.upload.store_upload_list_in_image_dir)
        self.assertFalse(config.upload.set_date_posted)
        self.assertEqual(config.log_level, "DEBUG")
        self.assertEqual(config.tool_timeout, 60)
        self.assertEqual(config.config_dir, self.temp_dir)

        self.assertEqual(len(config.rules), 2)
        first = config.rules[0]
        self.assertEqual(first.condition.excludes_any, ["public"])
        self.assertEqual(first.condition.includes_any, ["private", "family"])
        self.assertTrue(first.action.delete)
        self.assertEqual(first.action.albums, [Album(id="7215", name="Family")])
        self.assertEqual(config.rules[1].condition.includes_all, ["cat"])
        self.assertFalse(config.rules[1].action.delete)

    def test_invalid_json(self):
        self.write_config("{broken")
        with self.assertRaises(ConfigError):
            load_config(self.config_path)

    def test_unknown_condition(self):
        self.write_config({"rules": [{"condition": {"includesSome": ["x"]}}]})
        with self.assertRaises(ConfigError):
            load_config(self.config_path)

    def test_album_without_id(self):
        self.write_config({"rules": [{"action": {"albums": [{"name": "No id"}]}}]})
        with self.assertRaises(ConfigError):
            load_config(self.config_path)

    def test_unknown_setting(self):
        self.write_config({"upload": {"bogus": True}})
        with self.assertRaises(ConfigError):
            load_config(self.config_path)

    def test_validate_for_upload(self):
        config = AppConfig()
        with self.assertRaises(ConfigError):
            validate_for_upload(config)

        config.flickr.api_key = "k"
        config.flickr.api_secret = "s"
        config.flickr.oauth_token = "t"
        config.flickr.oauth_secret = "ts"
        with self.assertRaises(ConfigError):
            validate_for_upload(config)

        config.cmd.exiftool = "exiftool"
        validate_for_upload(config)

    def test_save_and_load(self):
        config = load_config(self.config_path)
        config.flickr.api_key = "key"
        config.force = True
        config.rules = [Rule(
            condition=RuleCondition(includes_any=["a"]),
            action=RuleAction(albums=[Album(id="1", name="One")]),
        )]

        save_config(config, self.config_path)

        with open(self.config_path) as f:
            saved = json.load(f)
        self.assertNotIn("force", saved)
        self.assertNotIn("config_dir", saved)

        reloaded = load_config(self.config_path)
        self.assertEqual(reloaded.flickr.api_key, "key")
        self.assertFalse(reloaded.force)
        self.assertEqual(reloaded.rules[0].action.albums, [Album(id="1", name="One")])

    def test_default_config_dir_from_env(self):
        with patch.dict(os.environ, {"FLICKR_UPLOADER_CONFIG_DIR": self.temp_dir}):
            self.assertEqual(default_config_dir(), self.temp_dir)


if __name__ == '__main__':
    unittest.main()
