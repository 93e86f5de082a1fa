"""Configuration models and loading."""

from typing import Any

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PORT = 8080
PORT_ENV = "PROXY_PORT"
ENV_FILE = ".env"


class _EnvSection(BaseSettings):
    """Settings section read from ``PROXY_*`` variables and ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="PROXY_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_on_invalid(cls, value: Any, handler, info: ValidationInfo) -> Any:
        # Invalid values are ignored in favour of the default
        try:
            return handler(value)
        except ValidationError:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)


class ProxySettings(_EnvSection):
    host: str = "0.0.0.0"
    port: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    log_requests: bool = False


class UpstreamSettings(_EnvSection):
    # None disables the timeout entirely
    timeout: float | None = Field(default=None, gt=0)
    max_redirects: int = Field(default=20, ge=0)


class LimitSettings(_EnvSection):
    max_body_size: int = Field(default=50 * 1024 * 1024, gt=0)
    keep_alive_timeout: int = Field(default=5, gt=0)


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)


def load_config(*, use_dotenv: bool = True) -> Config:
    """Build configuration from ``PROXY_*`` environment variables.

    Variables already set in the environment win over a ``.env`` file in
    the working directory. Values that are empty or fail validation fall
    back to their defaults, so an unset or invalid ``PROXY_PORT`` yields
    port 8080.
    """
    env_file = ENV_FILE if use_dotenv else None
    return Config(
        proxy=ProxySettings(_env_file=env_file),
        upstream=UpstreamSettings(_env_file=env_file),
        limits=LimitSettings(_env_file=env_file),
    )
