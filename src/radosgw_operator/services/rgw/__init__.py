"""radosgw admin ops API client.

The client itself lives in ``services.rgw.client``; only the error
taxonomy is re-exported here since ``config`` depends on it.
"""

from .exceptions import (
    ConfigurationError,
    DeadlineExceeded,
    InvalidIdentifier,
    InvalidResponse,
    MalformedResponse,
    NotFound,
    RGWAdminError,
    TransportError,
    UnexpectedStatus,
    UnsupportedOperation,
)

__all__ = [
    "RGWAdminError",
    "ConfigurationError",
    "TransportError",
    "DeadlineExceeded",
    "UnexpectedStatus",
    "MalformedResponse",
    "InvalidResponse",
    "NotFound",
    "InvalidIdentifier",
    "UnsupportedOperation",
]
