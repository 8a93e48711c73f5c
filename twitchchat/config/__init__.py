"""Configuration package exports."""

from .loader import CONFIG_ENV_VAR, default_config_path, load_config
from .model import ApplicationConfig, ChatConfig, ServerConfig, UserConfig

__all__ = [
    "ApplicationConfig",
    "ChatConfig",
    "ServerConfig",
    "UserConfig",
    "CONFIG_ENV_VAR",
    "default_config_path",
    "load_config",
]
