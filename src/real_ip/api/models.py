"""Pydantic models for the IP inspection API."""

from pydantic import BaseModel, Field

from real_ip.headers import HeaderSource


class ResolvedIP(BaseModel):
    """Outcome of resolving the client IP of one request."""

    ip: str = Field(description="Resolved client address")
    peer: str = Field(description="Directly connected peer as seen by the server")
    source: HeaderSource | None = Field(
        default=None, description="Header family the hops were read from"
    )
    hops: list[str] = Field(
        default_factory=list,
        description="Declared hops, from the client towards the nearest proxy",
    )
