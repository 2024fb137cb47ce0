"""Endpoint and run settings with the tool's built-in defaults.

Endpoint values may be overridden through ``NEXUSPRUNE_*`` environment
variables so credentials do not have to appear on the command line.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

DEFAULT_PROTOCOL = "http"
DEFAULT_SERVER = "localhost"
DEFAULT_PORT = "8081"
DEFAULT_CONTEXT_ROOT = "nexus/"
DEFAULT_USERNAME = "admin"
DEFAULT_PASSWORD = "admin123"
DEFAULT_REPOSITORY = "releases"

DEFAULT_COUNT = 200
DEFAULT_EXPECT = 1
DEFAULT_THROTTLE = 1
DEFAULT_TIMEOUT = 30.0

ENV_PREFIX = "NEXUSPRUNE_"


@dataclass(frozen=True, slots=True)
class NexusEndpoint:
    """Coordinates of a Nexus installation and the repository to operate on."""

    protocol: str = DEFAULT_PROTOCOL
    server: str = DEFAULT_SERVER
    port: str = DEFAULT_PORT
    context_root: str = DEFAULT_CONTEXT_ROOT
    username: str = DEFAULT_USERNAME
    password: str = DEFAULT_PASSWORD
    repository_id: str = DEFAULT_REPOSITORY

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "NexusEndpoint":
        env = os.environ if environ is None else environ

        def _value(name: str, default: str) -> str:
            return env.get(f"{ENV_PREFIX}{name}", default)

        return cls(
            protocol=_value("PROTOCOL", DEFAULT_PROTOCOL),
            server=_value("SERVER", DEFAULT_SERVER),
            port=_value("PORT", DEFAULT_PORT),
            context_root=_value("CONTEXTROOT", DEFAULT_CONTEXT_ROOT),
            username=_value("USERNAME", DEFAULT_USERNAME),
            password=_value("PASSWORD", DEFAULT_PASSWORD),
            repository_id=_value("REPOSITORY", DEFAULT_REPOSITORY),
        )

    def base_url(self) -> str:
        """Return ``protocol://server:port/context_root/`` with a trailing slash."""

        root = self.context_root.strip("/")
        suffix = f"{root}/" if root else ""
        return f"{self.protocol}://{self.server}:{self.port}/{suffix}"

    def __repr__(self) -> str:
        return (
            f"NexusEndpoint(base_url={self.base_url()!r}, "
            f"username={self.username!r}, repository_id={self.repository_id!r})"
        )


@dataclass(frozen=True, slots=True)
class RetentionSettings:
    """Policy knobs for a single retention run."""

    count: int = DEFAULT_COUNT
    expect: int = DEFAULT_EXPECT
    throttle: int = DEFAULT_THROTTLE
    keep_latest: bool = True
    delete: bool = False
    artifact: str = ""
    version: str = ""

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError("count must be at least 1")
        if self.expect < 0:
            raise ValueError("expect must be non-negative")
        if self.throttle < 0:
            raise ValueError("throttle must be non-negative")


__all__ = [
    "DEFAULT_COUNT",
    "DEFAULT_EXPECT",
    "DEFAULT_THROTTLE",
    "DEFAULT_TIMEOUT",
    "ENV_PREFIX",
    "NexusEndpoint",
    "RetentionSettings",
]
