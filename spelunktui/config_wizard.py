"""Interactive ``spelunktui config`` setup.

Asks for the connection settings on the plain terminal, stores the token in
the OS keyring when one is available, and writes the rest as TOML.
"""

from __future__ import annotations

import getpass
import logging
from collections.abc import Callable
from pathlib import Path

import keyring
from keyring.errors import KeyringError

from . import config as config_mod

logger = logging.getLogger(__name__)


def _verify_answer(answer: str) -> bool:
    return answer.strip().lower() not in {"n", "no", "false"}


def run_config_wizard(
    *,
    prompt: Callable[[str], str] = input,
    prompt_secret: Callable[[str], str] = getpass.getpass,
    echo: Callable[[str], None] = print,
    path: Path | None = None,
) -> Path:
    """Collect settings, persist them, and return the written config path."""
    echo("Spelunk TUI configuration")
    echo("")
    base_url = prompt("Enter Splunk Base URL: ").strip()
    token = prompt_secret("Enter Splunk Token: ").strip()
    verify_ssl = _verify_answer(prompt("Verify SSL? [Y/n]: "))

    existing = config_mod.TomlFileSource(path).read_raw()
    data: dict[str, object] = {
        "splunk_base_url": base_url,
        "splunk_verify_ssl": verify_ssl,
    }
    if isinstance(existing.get("theme"), str):
        data["theme"] = existing["theme"]

    try:
        keyring.set_password(config_mod.APP_NAME, config_mod.KEYRING_USER, token)
    except KeyringError as exc:
        logger.warning("keyring unavailable, storing token in config file: %s", exc)
        echo(f"Warning: could not store token in the system keyring ({exc}).")
        echo("The token will be saved in the config file instead.")
        data["splunk_token"] = token
    else:
        echo("Token stored in the system keyring.")

    written = config_mod.write_config_file(data, path)
    echo(f"Configuration saved to {written}")
    echo("Setup complete!")
    return written


__all__ = ["run_config_wizard"]
