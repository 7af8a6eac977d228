"""
OCI remotes: structured errors for unexpected registry responses.

Public API:
    new_unexpected_status_error: Build an UnexpectedStatusError from a response
    raise_for_unexpected_status: Raise one unless the status was expected
    RegistryHTTP: Minimal OCI Distribution API client built on the above
"""
from __future__ import annotations

__version__ = "0.1.0"

from .errors import (
    MAX_ERROR_BODY_BYTES,
    OciError,
    OciTransportError,
    UnexpectedStatusError,
    new_unexpected_status_error,
    raise_for_unexpected_status,
)
from .models import ErrorInfo, ErrorResponse, TagList
from .registry_http import ManifestResult, RegistryHTTP
from .settings import Settings, create_settings_from_env

__all__ = [
    "__version__",
    "MAX_ERROR_BODY_BYTES",
    "OciError",
    "OciTransportError",
    "UnexpectedStatusError",
    "new_unexpected_status_error",
    "raise_for_unexpected_status",
    "ErrorInfo",
    "ErrorResponse",
    "TagList",
    "ManifestResult",
    "RegistryHTTP",
    "Settings",
    "create_settings_from_env",
]
