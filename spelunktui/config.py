"""Layered connection settings.

Values come from, lowest to highest precedence: the TOML file in the
platform config dir, the OS keyring (token only, when still missing), the
process environment, and a ``.env`` file in the working directory. Each
layer is a ``ConfigSource`` so tests and the wizard can swap them out.
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Protocol

import keyring
import tomli_w
from dotenv import dotenv_values
from keyring.errors import KeyringError
from platformdirs import user_config_dir

from .errors import ConfigMissingError

logger = logging.getLogger(__name__)

APP_NAME = "spelunktui"
CONFIG_FILENAME = "config.toml"
KEYRING_USER = "token"
CONFIG_DIR = Path(user_config_dir(APP_NAME, appauthor=False))
CONFIG_PATH = CONFIG_DIR / CONFIG_FILENAME

ENV_KEYS: dict[str, str] = {
    "SPLUNK_BASE_URL": "splunk_base_url",
    "SPLUNK_TOKEN": "splunk_token",
    "SPLUNK_VERIFY_SSL": "splunk_verify_ssl",
}
_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}


@dataclass
class AppConfig:
    splunk_base_url: str = ""
    splunk_token: str = ""
    splunk_verify_ssl: bool = True
    theme: str | None = None

    def validate(self) -> None:
        """Raise ``ConfigMissingError`` when URL or token is unset."""
        if not self.splunk_base_url.strip():
            raise ConfigMissingError(
                f"Splunk Base URL is not configured.\nRun '{APP_NAME} config' to set up your credentials."
            )
        if not self.splunk_token.strip():
            raise ConfigMissingError(
                f"Splunk Token is not configured.\nRun '{APP_NAME} config' to set up your credentials."
            )


class ConfigSource(Protocol):
    def read(self, current: AppConfig) -> dict[str, object]:
        """Return the settings this layer provides, given the layers below."""
        ...


def parse_bool(value: object) -> bool | None:
    """Interpret common truthy/falsy spellings; ``None`` when unrecognized."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    return None


def _from_variables(values: Mapping[str, str | None]) -> dict[str, object]:
    out: dict[str, object] = {}
    for env_name, field_name in ENV_KEYS.items():
        raw = values.get(env_name)
        if raw is None:
            continue
        if field_name == "splunk_verify_ssl":
            parsed = parse_bool(raw)
            if parsed is not None:
                out[field_name] = parsed
            continue
        out[field_name] = raw
    return out


class TomlFileSource:
    def __init__(self, path: Path | None = None) -> None:
        self.path = path

    def read_raw(self) -> dict[str, object]:
        path = CONFIG_PATH if self.path is None else self.path
        try:
            with path.open("rb") as handle:
                return tomllib.load(handle)
        except FileNotFoundError:
            return {}
        except (OSError, tomllib.TOMLDecodeError) as exc:
            logger.warning("ignoring unreadable config file %s: %s", path, exc)
            return {}

    def read(self, current: AppConfig) -> dict[str, object]:
        data = self.read_raw()
        out: dict[str, object] = {}
        for key in ("splunk_base_url", "splunk_token", "theme"):
            value = data.get(key)
            if isinstance(value, str):
                out[key] = value
        verify = data.get("splunk_verify_ssl")
        if verify is not None:
            parsed = parse_bool(verify)
            if parsed is not None:
                out["splunk_verify_ssl"] = parsed
        return out


class KeyringSource:
    def __init__(self, service: str = APP_NAME, user: str = KEYRING_USER) -> None:
        self.service = service
        self.user = user

    def read(self, current: AppConfig) -> dict[str, object]:
        if current.splunk_token:
            return {}
        try:
            token = keyring.get_password(self.service, self.user)
        except KeyringError as exc:
            logger.warning("keyring lookup failed: %s", exc)
            return {}
        return {"splunk_token": token} if token else {}


class EnvSource:
    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self.environ = environ

    def read(self, current: AppConfig) -> dict[str, object]:
        return _from_variables(os.environ if self.environ is None else self.environ)


class DotenvSource:
    def __init__(self, path: Path | None = None) -> None:
        self.path = Path(".env") if path is None else path

    def read(self, current: AppConfig) -> dict[str, object]:
        if not self.path.is_file():
            return {}
        return _from_variables(dotenv_values(self.path))


def default_sources() -> list[ConfigSource]:
    return [TomlFileSource(), KeyringSource(), EnvSource(), DotenvSource()]


def load_config(sources: Sequence[ConfigSource] | None = None) -> AppConfig:
    """Merge every source over defaults, later sources winning."""
    config = AppConfig()
    known = {f.name for f in fields(AppConfig)}
    for source in default_sources() if sources is None else sources:
        layer = source.read(config)
        for key, value in layer.items():
            if key in known:
                setattr(config, key, value)
        logger.debug("config layer %s provided %s", type(source).__name__, sorted(layer))
    return config


def write_config_file(data: Mapping[str, object], path: Path | None = None) -> Path:
    target = CONFIG_PATH if path is None else path
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = {key: value for key, value in data.items() if value is not None}
    target.write_text(tomli_w.dumps(payload), encoding="utf-8")
    return target


def save_theme(theme_name: str, path: Path | None = None) -> None:
    """Persist the theme key, keeping every other key of the file.

    Write failures are logged and otherwise ignored so a read-only config dir
    never breaks theme switching.
    """
    source = TomlFileSource(path)
    data = source.read_raw()
    data["theme"] = theme_name
    try:
        write_config_file(data, path)
    except OSError as exc:
        logger.warning("could not persist theme %r: %s", theme_name, exc)


__all__ = [
    "APP_NAME",
    "AppConfig",
    "CONFIG_DIR",
    "CONFIG_PATH",
    "ConfigSource",
    "DotenvSource",
    "EnvSource",
    "KeyringSource",
    "TomlFileSource",
    "default_sources",
    "load_config",
    "parse_bool",
    "save_theme",
    "write_config_file",
]
