from typing import Annotated, Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import NoDecode

from real_ip.networks import IPNetwork, parse_trusted_proxies


class ProxyConfig(BaseModel):
    """Trusted reverse-proxy settings."""

    # Comma-separated in env vars, so skip pydantic-settings' JSON decoding.
    trusted_proxies: Annotated[tuple[IPNetwork, ...], NoDecode] = Field(
        default=(),
        description="Addresses or CIDR ranges allowed to set forwarding headers",
    )

    @field_validator("trusted_proxies", mode="before")
    @classmethod
    def parse_trusted_proxies_field(cls, value: Any) -> tuple[IPNetwork, ...]:
        if value is None:
            return ()
        return parse_trusted_proxies(value)


class LoggingConfig(BaseModel):
    """Logging configuration settings."""

    level: str = Field(default="INFO", description="Root log level")
    json_output: bool = Field(
        default=True, description="Emit JSON lines instead of coloured text"
    )
