"""Layered configuration tests.

The keyring is always patched so tests never touch the real credential
store of the machine running them.
"""

from __future__ import annotations

import tempfile
import tomllib
import unittest
from pathlib import Path
from unittest import mock

from keyring.errors import KeyringError

from spelunktui import config
from spelunktui.errors import ConfigMissingError


def _write_toml(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class ParseBoolTests(unittest.TestCase):
    def test_known_spellings(self) -> None:
        for value in ("1", "true", "YES", " on ", True):
            self.assertIs(config.parse_bool(value), True)
        for value in ("0", "False", "no", "off", False):
            self.assertIs(config.parse_bool(value), False)
        self.assertIsNone(config.parse_bool("maybe"))


class LoadConfigTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        patcher = mock.patch("spelunktui.config.keyring.get_password", return_value=None)
        self.get_password = patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_defaults_when_every_layer_is_empty(self) -> None:
        loaded = config.load_config(
            [
                config.TomlFileSource(self.root / "missing.toml"),
                config.KeyringSource(),
                config.EnvSource({}),
                config.DotenvSource(self.root / "missing.env"),
            ]
        )
        self.assertEqual(loaded, config.AppConfig())

    def test_toml_values_are_read(self) -> None:
        path = _write_toml(
            self.root / "config.toml",
            'splunk_base_url = "https://splunk:8089"\nsplunk_token = "t"\nsplunk_verify_ssl = false\ntheme = "Neon"\n',
        )
        loaded = config.load_config([config.TomlFileSource(path)])
        self.assertEqual(loaded.splunk_base_url, "https://splunk:8089")
        self.assertEqual(loaded.splunk_token, "t")
        self.assertFalse(loaded.splunk_verify_ssl)
        self.assertEqual(loaded.theme, "Neon")

    def test_broken_toml_is_ignored(self) -> None:
        path = _write_toml(self.root / "config.toml", "splunk_base_url = [unterminated\n")
        loaded = config.load_config([config.TomlFileSource(path)])
        self.assertEqual(loaded.splunk_base_url, "")

    def test_keyring_only_fills_missing_token(self) -> None:
        self.get_password.return_value = "from-keyring"
        path = _write_toml(self.root / "config.toml", 'splunk_token = "from-file"\n')

        with_file = config.load_config([config.TomlFileSource(path), config.KeyringSource()])
        without_file = config.load_config([config.KeyringSource()])

        self.assertEqual(with_file.splunk_token, "from-file")
        self.assertEqual(without_file.splunk_token, "from-keyring")
        self.get_password.assert_called_once_with(config.APP_NAME, config.KEYRING_USER)

    def test_keyring_errors_are_tolerated(self) -> None:
        self.get_password.side_effect = KeyringError("locked")
        loaded = config.load_config([config.KeyringSource()])
        self.assertEqual(loaded.splunk_token, "")

    def test_environment_overrides_file_and_dotenv_overrides_environment(self) -> None:
        path = _write_toml(self.root / "config.toml", 'splunk_base_url = "https://file"\nsplunk_token = "file"\n')
        dotenv_path = self.root / ".env"
        dotenv_path.write_text("SPLUNK_TOKEN=dotenv\nSPLUNK_VERIFY_SSL=no\n", encoding="utf-8")
        environ = {"SPLUNK_BASE_URL": "https://env", "SPLUNK_TOKEN": "env", "SPLUNK_VERIFY_SSL": "true"}

        loaded = config.load_config(
            [
                config.TomlFileSource(path),
                config.KeyringSource(),
                config.EnvSource(environ),
                config.DotenvSource(dotenv_path),
            ]
        )

        self.assertEqual(loaded.splunk_base_url, "https://env")
        self.assertEqual(loaded.splunk_token, "dotenv")
        self.assertFalse(loaded.splunk_verify_ssl)

    def test_unrecognized_verify_value_keeps_lower_layer(self) -> None:
        loaded = config.load_config([config.EnvSource({"SPLUNK_VERIFY_SSL": "sometimes"})])
        self.assertTrue(loaded.splunk_verify_ssl)


class ValidateTests(unittest.TestCase):
    def test_missing_url_is_reported_first(self) -> None:
        with self.assertRaises(ConfigMissingError) as ctx:
            config.AppConfig().validate()
        self.assertIn("Splunk Base URL is not configured.", str(ctx.exception))
        self.assertIn("spelunktui config", str(ctx.exception))

    def test_missing_token(self) -> None:
        with self.assertRaises(ConfigMissingError) as ctx:
            config.AppConfig(splunk_base_url="https://splunk").validate()
        self.assertIn("Splunk Token is not configured.", str(ctx.exception))

    def test_complete_config_passes(self) -> None:
        config.AppConfig(splunk_base_url="https://splunk", splunk_token="t").validate()


class SaveThemeTests(unittest.TestCase):
    def test_theme_is_merged_into_existing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = _write_toml(Path(tmp) / "config.toml", 'splunk_base_url = "https://splunk"\ntheme = "Default"\n')

            config.save_theme("Splunk", path)

            with path.open("rb") as handle:
                data = tomllib.load(handle)
            self.assertEqual(data, {"splunk_base_url": "https://splunk", "theme": "Splunk"})

    def test_missing_file_is_created(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "nested" / "config.toml"
            config.save_theme("Neon", path)
            with path.open("rb") as handle:
                self.assertEqual(tomllib.load(handle), {"theme": "Neon"})

    def test_write_failure_is_swallowed(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "config.toml"
            with mock.patch("spelunktui.config.write_config_file", side_effect=OSError("read-only")):
                config.save_theme("Neon", path)
            self.assertFalse(path.exists())


if __name__ == "__main__":
    unittest.main()
