"""Request signing for the radosgw admin API.

The admin API authenticates with the legacy S3 HMAC-SHA1 scheme: the
signature covers only the method, the date and the URL path. Query
parameters and any other headers are not part of the string to sign.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
from datetime import datetime, timezone
from email.utils import format_datetime
from urllib.parse import urlsplit

from requests import PreparedRequest
from requests.auth import AuthBase


def format_date(now: datetime) -> str:
    """Format a timestamp for the ``Date`` header.

    Args:
        now: Timestamp; naive values are taken to be UTC

    Returns:
        RFC 1123 date with English day and month names and a ``GMT`` suffix
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)
    # strftime's %a/%b follow LC_TIME
    return format_datetime(now, usegmt=True)


def string_to_sign(method: str, path: str, date: str) -> str:
    """Build the canonical string; content-md5 and content-type are always empty."""
    return f"{method.upper()}\n\n\n{date}\n{path}"


def sign(
    method: str,
    path: str,
    access_key_id: str,
    secret_access_key: str,
    now: datetime | None = None,
) -> dict[str, str]:
    """Compute the authentication headers for a request.

    Args:
        method: HTTP method
        path: URL path without query string
        access_key_id: Admin access key id
        secret_access_key: Admin secret access key
        now: Signing time (defaults to the current UTC time)

    Returns:
        ``Date`` and ``Authorization`` headers
    """
    date = format_date(now or datetime.now(timezone.utc))
    mac = hmac.new(
        secret_access_key.encode("utf-8"),
        string_to_sign(method, path, date).encode("utf-8"),
        hashlib.sha1,
    )
    signature = base64.b64encode(mac.digest()).decode("ascii")
    return {
        "Date": date,
        "Authorization": f"AWS {access_key_id}:{signature}",
    }


class AdminAuth(AuthBase):
    """requests authentication hook signing every outgoing admin request."""

    def __init__(self, access_key_id: str, secret_access_key: str):
        self.access_key_id = access_key_id
        self.secret_access_key = secret_access_key

    def __call__(self, request: PreparedRequest) -> PreparedRequest:
        path = urlsplit(request.url).path or "/"
        request.headers.update(
            sign(request.method, path, self.access_key_id, self.secret_access_key)
        )
        return request
