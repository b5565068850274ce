"""Admin API client configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .constants import DEFAULT_REQUEST_TIMEOUT_SECONDS
from .services.rgw.exceptions import ConfigurationError


@dataclass(frozen=True)
class AdminConfig:
    """Connection settings for the radosgw admin API.

    Instances are immutable and validated on construction, so a client
    built from one never has to re-check its settings per call.
    """

    endpoint: str
    access_key_id: str
    secret_access_key: str = field(repr=False)
    timeout: float = DEFAULT_REQUEST_TIMEOUT_SECONDS
    verify_tls: bool = True

    def __post_init__(self) -> None:
        missing = [
            name
            for name in ("endpoint", "access_key_id", "secret_access_key")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigurationError(f"missing admin API settings: {', '.join(missing)}")
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")
        object.__setattr__(self, "endpoint", self.endpoint.rstrip("/"))

    @classmethod
    def from_env(cls) -> AdminConfig:
        """Build a configuration from environment variables.

        Environment Variables:
            RGW_ENDPOINT: Admin API endpoint URL
            ACCESS_KEY_ID: Admin access key id
            SECRET_ACCESS_KEY: Admin secret access key
            RGW_REQUEST_TIMEOUT_SECONDS: Per-request timeout (default: 30)
        """
        return cls(
            endpoint=os.getenv("RGW_ENDPOINT", ""),
            access_key_id=os.getenv("ACCESS_KEY_ID", ""),
            secret_access_key=os.getenv("SECRET_ACCESS_KEY", ""),
            timeout=float(
                os.getenv("RGW_REQUEST_TIMEOUT_SECONDS", str(DEFAULT_REQUEST_TIMEOUT_SECONDS))
            ),
        )
