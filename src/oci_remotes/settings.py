"""
Settings and configuration for OCI remotes.

Centralizes configuration values and provides validation with fail-fast behavior.
Loads settings from environment variables at client construction time.
"""
from __future__ import annotations

import os
import re
from dataclasses import dataclass
from typing import Optional

from .errors import MAX_ERROR_BODY_BYTES

__all__ = ["Settings", "create_settings_from_env"]


@dataclass(frozen=True)
class Settings:
    """
    Configuration settings for the registry client.

    Registry Settings:
        registry_url: OCI registry URL (required)
        registry_insecure: Allow HTTP connections for local/dev use
        registry_user: Username for token authentication
        registry_pass: Password for token authentication
        http_timeout_s: HTTP read/write timeout in seconds

    Error Reporting:
        error_body_limit: Bytes of a failed response body kept on the error
    """
    registry_url: str
    registry_insecure: bool = False
    registry_user: Optional[str] = None
    registry_pass: Optional[str] = None
    http_timeout_s: float = 30.0
    error_body_limit: int = MAX_ERROR_BODY_BYTES

    def __post_init__(self):
        """Validate settings on construction."""
        if not self.registry_url:
            raise ValueError("registry_url is required")

        # host[:port] or http(s)://host[:port]
        url_pattern = r"^(?:https?://)?[a-zA-Z0-9.-]+(?::[0-9]+)?(?:/.*)?$"
        if not re.match(url_pattern, self.registry_url):
            raise ValueError(f"Invalid registry_url format: {self.registry_url}")

        if self.http_timeout_s <= 0:
            raise ValueError(f"http_timeout_s must be positive, got {self.http_timeout_s}")

        if not 0 < self.error_body_limit <= MAX_ERROR_BODY_BYTES:
            raise ValueError(
                f"error_body_limit must be in 1..{MAX_ERROR_BODY_BYTES}, got {self.error_body_limit}"
            )

        if bool(self.registry_user) != bool(self.registry_pass):
            raise ValueError("registry_user and registry_pass must be set together")

    @property
    def base_url(self) -> str:
        """Registry URL with scheme, defaulting to https unless insecure."""
        if self.registry_url.startswith(("http://", "https://")):
            return self.registry_url.rstrip("/")
        scheme = "http" if self.registry_insecure else "https"
        return f"{scheme}://{self.registry_url.rstrip('/')}"


def create_settings_from_env() -> Settings:
    """
    Load settings from environment variables.

    Environment Variables:
        - OCI_REMOTES_REGISTRY_URL (required)
        - OCI_REMOTES_REGISTRY_INSECURE (default: false)
        - OCI_REMOTES_REGISTRY_USERNAME (optional)
        - OCI_REMOTES_REGISTRY_PASSWORD (optional)
        - OCI_REMOTES_HTTP_TIMEOUT (default: 30.0)
        - OCI_REMOTES_ERROR_BODY_LIMIT (default: 64000)

    Returns:
        Settings object with validated configuration

    Raises:
        ValueError: If configuration is invalid or required values missing

    Note:
        Creates a fresh Settings instance every time (no caching).
    """
    def str_to_bool(value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on')

    def get_float(key: str, default: float) -> float:
        value = os.getenv(key)
        return float(value) if value else default

    def get_int(key: str, default: int) -> int:
        value = os.getenv(key)
        return int(value) if value else default

    registry_url = os.getenv("OCI_REMOTES_REGISTRY_URL")
    if not registry_url:
        raise ValueError("OCI_REMOTES_REGISTRY_URL environment variable is required")

    return Settings(
        registry_url=registry_url,
        registry_insecure=str_to_bool(os.getenv("OCI_REMOTES_REGISTRY_INSECURE", "false")),
        registry_user=os.getenv("OCI_REMOTES_REGISTRY_USERNAME"),
        registry_pass=os.getenv("OCI_REMOTES_REGISTRY_PASSWORD"),
        http_timeout_s=get_float("OCI_REMOTES_HTTP_TIMEOUT", 30.0),
        error_body_limit=get_int("OCI_REMOTES_ERROR_BODY_LIMIT", MAX_ERROR_BODY_BYTES),
    )
