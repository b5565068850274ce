"""Shared fixtures for unit tests."""

from __future__ import annotations

import json
from typing import Any, Callable
from unittest.mock import MagicMock, patch

import pytest
import requests

from radosgw_operator.config import AdminConfig
from radosgw_operator.services.rgw.client import RGWAdminClient


@pytest.fixture
def make_response() -> Callable[..., requests.Response]:
    """Build real ``requests.Response`` objects without a network."""

    def _make(status_code: int = 200, body: Any = None, text: str | None = None) -> requests.Response:
        response = requests.Response()
        response.status_code = status_code
        if text is None:
            text = "" if body is None else json.dumps(body)
        response._content = text.encode("utf-8")
        response.encoding = "utf-8"
        return response

    return _make


@pytest.fixture
def admin_config() -> AdminConfig:
    return AdminConfig(
        endpoint="http://rgw.example.com:8080",
        access_key_id="ADMINACCESSKEY",
        secret_access_key="adminsecretkey",
    )


@pytest.fixture
def session() -> MagicMock:
    return MagicMock(spec=requests.Session)


@pytest.fixture
def admin_client(admin_config: AdminConfig, session: MagicMock) -> RGWAdminClient:
    return RGWAdminClient(admin_config, session=session)


@pytest.fixture
def admin_api() -> MagicMock:
    """Stand-in for the admin client used by reconciler tests."""
    return MagicMock(spec=RGWAdminClient)


@pytest.fixture
def kopf_event():
    """Capture Kubernetes events instead of posting them."""
    with patch("radosgw_operator.utils.events.kopf.event") as mock_event:
        yield mock_event
