"""Configuration management using pydantic-settings.

``get_app_config()`` re-reads the config sources on every call.  The
trusted proxy list, however, is parsed once per process by
``get_trusted_proxies()`` and shared read-only by every request.

Priority order (highest first):

1. Override YAML (path from ``REAL_IP_CONFIG_FILE`` env var)
2. Environment variables (``REAL_IP_`` prefix, ``__`` for nesting)
3. ``.env`` dotenv file
4. Static YAML (``configs/config.yaml``)
5. Init defaults / field defaults
6. File secrets

Example::

    REAL_IP_PROXY__TRUSTED_PROXIES=10.0.0.1,10.10.10.0/24
"""

import functools
import os
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

from real_ip.networks import IPNetwork

from .system import LoggingConfig, ProxyConfig

# ---------------------------------------------------------------------------
# Path constants
# ---------------------------------------------------------------------------

CONFIG_PY_PATH = Path(__file__).resolve()
PROJECT_ROOT = CONFIG_PY_PATH.parent.parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "configs"

STATIC_CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Optional override file, e.g. a mounted ConfigMap.
_override_env = os.environ.get("REAL_IP_CONFIG_FILE")
OVERRIDE_CONFIG_FILE: Optional[Path] = Path(_override_env) if _override_env else None

DOTENV_FILE_PATH = PROJECT_ROOT / ".env"
ENV_DELIMITER = "__"
ENV_PREFIX = "REAL_IP_"

DEFAULT_ENCODING = "utf-8"


class AppConfig(BaseSettings):
    """Application configuration."""

    model_config = SettingsConfigDict(
        env_file=DOTENV_FILE_PATH,
        env_file_encoding=DEFAULT_ENCODING,
        env_nested_delimiter=ENV_DELIMITER,
        env_prefix=ENV_PREFIX,
        case_sensitive=False,
        extra="ignore",
        yaml_file=STATIC_CONFIG_FILE,
        yaml_file_encoding=DEFAULT_ENCODING,
    )

    proxy: ProxyConfig = Field(
        default_factory=ProxyConfig,
        description="Trusted reverse-proxy settings",
    )

    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration settings",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = []

        if OVERRIDE_CONFIG_FILE is not None and OVERRIDE_CONFIG_FILE.is_file():
            sources.append(
                YamlConfigSettingsSource(
                    settings_cls,
                    yaml_file=OVERRIDE_CONFIG_FILE,
                )
            )

        sources.append(env_settings)
        sources.append(dotenv_settings)
        sources.append(YamlConfigSettingsSource(settings_cls))
        sources.append(init_settings)
        sources.append(file_secret_settings)

        return tuple(sources)


def get_app_config() -> AppConfig:
    """Get the application configuration (re-read on every call)."""
    return AppConfig()


def get_proxy_config() -> ProxyConfig:
    return get_app_config().proxy


def get_logging_config() -> LoggingConfig:
    return get_app_config().logging


@functools.lru_cache(maxsize=1)
def get_trusted_proxies() -> tuple[IPNetwork, ...]:
    """Trusted proxy ranges, parsed once and shared across requests.

    Call ``get_trusted_proxies.cache_clear()`` to pick up new settings.
    """
    return get_proxy_config().trusted_proxies
