from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from ..constants import TWITCH_IRC_HOST, TWITCH_IRC_TLS_PORT


def _normalize_channel(name: str) -> str:
    return name.strip().lstrip("#").lower()


class ApplicationConfig(BaseModel):
    """Process level settings."""

    log_level: Literal["debug", "info", "warning", "error", "critical"] = "info"

    @field_validator("log_level", mode="before")
    @classmethod
    def lower_level(cls, v: Any) -> Any:
        return v.strip().lower() if isinstance(v, str) else v


class ServerConfig(BaseModel):
    """Where to connect and how.

    Attributes:
        address: Chat server host name.
        port: TCP port (6667 plain, 6697 TLS on Twitch).
        ssl_tls: Wrap the stream in TLS.
        ssl_verify_mode: Validate the server certificate; disable only for
            self-signed test endpoints.
    """

    address: str = Field(default=TWITCH_IRC_HOST, min_length=1)
    port: int = Field(default=TWITCH_IRC_TLS_PORT, ge=1, le=65535)
    ssl_tls: bool = True
    ssl_verify_mode: bool = True


class UserConfig(BaseModel):
    """Credentials and channel list.

    Attributes:
        token: OAuth token, stored without the ``oauth:`` prefix.
        nickname: Login name used for ``NICK``.
        main_channel: Channel joined first.
        channels: Additional channels, normalized and deduplicated.
    """

    token: str = Field(min_length=1)
    nickname: str = Field(min_length=1)
    main_channel: str = Field(min_length=1)
    channels: list[str] = Field(default_factory=list)

    @field_validator("token", mode="before")
    @classmethod
    def strip_oauth_prefix(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().removeprefix("oauth:")
        return v

    @field_validator("nickname", mode="before")
    @classmethod
    def strip_nickname(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("main_channel", mode="before")
    @classmethod
    def normalize_main_channel(cls, v: Any) -> Any:
        return _normalize_channel(v) if isinstance(v, str) else v

    @field_validator("channels", mode="before")
    @classmethod
    def validate_channels(cls, v: Any) -> list[str]:
        """Strip whitespace and '#', lowercase, drop empties and duplicates.

        Order is preserved since it decides join order.
        """
        if not isinstance(v, list):
            raise ValueError("channels must be a list")
        validated = []
        for c in v:
            if isinstance(c, str):
                stripped = _normalize_channel(c)
                if stripped:
                    validated.append(stripped)
        return list(dict.fromkeys(validated))

    @model_validator(mode="after")
    def drop_main_from_extras(self) -> UserConfig:
        self.channels = [c for c in self.channels if c != self.main_channel]
        return self


class ChatConfig(BaseModel):
    """Whole settings file.

    The server section is read from ``server`` or, for files written for the
    earlier releases, ``sever``.
    """

    application: ApplicationConfig = Field(default_factory=ApplicationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    user: UserConfig

    @model_validator(mode="before")
    @classmethod
    def accept_legacy_server_key(cls, data: Any) -> Any:
        if isinstance(data, dict) and "server" not in data and "sever" in data:
            data = dict(data)
            data["server"] = data.pop("sever")
        return data

    def channels_to_join(self) -> list[str]:
        return [self.user.main_channel, *self.user.channels]
