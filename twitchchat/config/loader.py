"""Configuration loading utilities."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import ValidationError

from ..errors import ConfigError
from ..logs.logger import logger
from .model import ChatConfig

DEFAULT_CONFIG_FILE = "config.json"
CONFIG_ENV_VAR = "TWITCH_CHAT_CONFIG"


def default_config_path() -> Path:
    """Path from ``TWITCH_CHAT_CONFIG``, else ``config.json`` in the working dir."""
    return Path(os.environ.get(CONFIG_ENV_VAR) or Path.cwd() / DEFAULT_CONFIG_FILE)


def load_config(path: str | os.PathLike[str] | None = None) -> ChatConfig:
    """Read and validate the settings file.

    Raises:
        ConfigError: The file is missing, is not JSON or fails validation.
    """
    config_path = Path(path) if path is not None else default_config_path()
    logger.log_event("config", "loading", path=str(config_path))
    try:
        with config_path.open(encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(
            f"config file not found: {config_path}", data={"path": str(config_path)}
        ) from e
    except json.JSONDecodeError as e:
        raise ConfigError(
            f"config file is not valid JSON: {config_path}: {e}",
            data={"path": str(config_path)},
        ) from e
    except OSError as e:
        raise ConfigError(
            f"cannot read config file {config_path}: {e}",
            data={"path": str(config_path)},
        ) from e

    try:
        config = ChatConfig.model_validate(raw)
    except ValidationError as e:
        raise ConfigError(
            f"invalid configuration in {config_path}: {e}",
            data={"path": str(config_path), "errors": e.error_count()},
        ) from e

    logger.log_event(
        "config",
        "loaded",
        server=config.server.address,
        port=config.server.port,
        tls=config.server.ssl_tls,
        channels=len(config.channels_to_join()),
    )
    return config
