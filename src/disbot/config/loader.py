from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Dict

from disbot.errors import ConfigurationError

DEFAULT_CONFIG_PATH = Path("config.toml")
CONFIG_PATH_ENV = "DISBOT_CONFIG"


def load_raw_config(path: str | Path | None = None) -> Dict[str, Any]:
    """
    Read the TOML config at ``path``, ``$DISBOT_CONFIG`` or ./config.toml.

    A missing file yields ``{}`` so every setting falls back to the
    environment; a file that exists but does not parse is an error.
    """
    if path is None:
        path = os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH
    target = Path(path)
    if not target.is_file():
        return {}

    try:
        with target.open("rb") as handle:
            return tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Invalid config file {target}: {exc}") from exc


__all__ = ["load_raw_config", "DEFAULT_CONFIG_PATH", "CONFIG_PATH_ENV"]
