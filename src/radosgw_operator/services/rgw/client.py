"""radosgw admin API client implementation."""

from __future__ import annotations

import logging
import time
from typing import Any

import requests

from ... import metrics
from ...config import AdminConfig
from ...constants import ADMIN_PREFIX
from ...utils.errors import sanitize_dict
from .exceptions import (
    DeadlineExceeded,
    InvalidResponse,
    MalformedResponse,
    TransportError,
    UnexpectedStatus,
)
from .models import Key, KeySpec, Subuser, SubuserAccess, User, access_value
from .signer import AdminAuth

logger = logging.getLogger(__name__)


class RGWAdminClient:
    """Client for the radosgw admin ops API.

    The client keeps no entity state between calls. Its configuration is
    immutable, so one instance can serve concurrent reconciliations.
    """

    def __init__(self, config: AdminConfig, session: requests.Session | None = None) -> None:
        """Initialize the admin client.

        Args:
            config: Validated connection settings
            session: Optional HTTP session (a new one is created otherwise)
        """
        self.config = config
        self.auth = AdminAuth(config.access_key_id, config.secret_access_key)
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    def _request(
        self,
        operation: str,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> Any:
        """Send a signed request and decode its JSON body.

        Args:
            operation: Operation name used for metrics and logs
            method: HTTP method
            path: Admin sub-path, optionally with a bare selector (``/user?key``)
            params: Query parameters (``format=json`` is always added)
            timeout: Per-call timeout overriding the configured one

        Returns:
            Decoded JSON body, or None for an empty body

        Raises:
            DeadlineExceeded: If the request timed out
            TransportError: If the request could not be sent
            UnexpectedStatus: On a non-2xx response
            MalformedResponse: If the body is not valid JSON
        """
        query = {"format": "json"}
        query.update(params or {})
        request = requests.Request(
            method,
            f"{self.config.endpoint}{ADMIN_PREFIX}{path}",
            params=query,
            auth=self.auth,
        ).prepare()

        logger.debug(f"Sending admin request {operation}: {method} {path} {sanitize_dict(query)}")
        start_time = time.time()
        result = "error"
        try:
            response = self.session.send(
                request,
                timeout=timeout or self.config.timeout,
                verify=self.config.verify_tls,
            )
        except requests.Timeout as e:
            raise DeadlineExceeded(f"could not send request: {e}") from e
        except requests.RequestException as e:
            raise TransportError(f"could not send request: {e}") from e
        else:
            if not 200 <= response.status_code < 300:
                raise UnexpectedStatus(response.status_code, response.text)
            result = "success"
        finally:
            metrics.api_call_total.labels(api_type="rgw", operation=operation, result=result).inc()
            metrics.api_call_duration_seconds.labels(api_type="rgw", operation=operation).observe(
                time.time() - start_time
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(f"could not parse json: {e}") from e

    def info(self, timeout: float | None = None) -> str:
        """Check liveness and credentials, returning the cluster id.

        Raises:
            InvalidResponse: If the response carries no cluster id
        """
        data = self._request("info", "GET", "/info", timeout=timeout)
        if not isinstance(data, dict) or not isinstance(data.get("info"), dict):
            raise MalformedResponse(f"could not decode info: {data!r}")

        info = data["info"]
        cluster_id = info.get("cluster_id")
        if not cluster_id:
            for backend in info.get("storage_backends") or []:
                if isinstance(backend, dict) and backend.get("cluster_id"):
                    cluster_id = backend["cluster_id"]
                    break
        if not cluster_id:
            raise InvalidResponse("invalid info, info.cluster_id is empty")
        return cluster_id

    def get_user(self, uid: str, timeout: float | None = None) -> User:
        """Fetch a user with its keys and subusers."""
        data = self._request("get_user", "GET", "/user", {"uid": uid}, timeout=timeout)
        return User.from_dict(data)

    def list_users(self, timeout: float | None = None) -> list[str]:
        """List the ids of all users."""
        data = self._request("list_users", "GET", "/metadata/user", timeout=timeout)
        if not isinstance(data, list) or not all(isinstance(u, str) for u in data):
            raise MalformedResponse(f"could not decode user list: {data!r}")
        return data

    def create_user(self, uid: str, display_name: str, timeout: float | None = None) -> User:
        """Create a user."""
        params = {"uid": uid, "display-name": display_name}
        data = self._request("create_user", "PUT", "/user", params, timeout=timeout)
        return User.from_dict(data)

    def modify_user(self, uid: str, display_name: str, timeout: float | None = None) -> User:
        """Change a user's display name."""
        params = {"uid": uid, "display-name": display_name}
        data = self._request("modify_user", "POST", "/user", params, timeout=timeout)
        return User.from_dict(data)

    def remove_user(self, uid: str, purge_data: bool = False, timeout: float | None = None) -> None:
        """Remove a user, keeping its data unless ``purge_data`` is set."""
        params = {"uid": uid, "purge-data": "true" if purge_data else "false"}
        self._request("remove_user", "DELETE", "/user", params, timeout=timeout)

    def create_subuser(
        self,
        uid: str,
        subuser: str,
        access: SubuserAccess | str,
        generate_secret: bool = False,
        timeout: float | None = None,
    ) -> list[Subuser]:
        """Create a subuser.

        Args:
            uid: Parent user id
            subuser: Local subuser name
            access: Write-form access level
            generate_secret: Whether the gateway should generate a key
            timeout: Per-call timeout
        """
        params = {
            "uid": uid,
            "subuser": subuser,
            "access": access_value(access),
            "generate-secret": "true" if generate_secret else "false",
        }
        data = self._request("create_subuser", "PUT", "/user?subuser", params, timeout=timeout)
        return self._decode_subusers(data)

    def modify_subuser(
        self,
        uid: str,
        subuser: str,
        access: SubuserAccess | str,
        timeout: float | None = None,
    ) -> list[Subuser]:
        """Change a subuser's access level."""
        params = {"uid": uid, "subuser": subuser, "access": access_value(access)}
        data = self._request("modify_subuser", "POST", "/user?subuser", params, timeout=timeout)
        return self._decode_subusers(data)

    def remove_subuser(self, uid: str, subuser: str, timeout: float | None = None) -> None:
        """Remove a subuser."""
        params = {"uid": uid, "subuser": subuser}
        self._request("remove_subuser", "DELETE", "/user?subuser", params, timeout=timeout)

    def create_key(self, spec: KeySpec, timeout: float | None = None) -> list[Key]:
        """Create a key.

        The admin API answers with every key the owning user holds, not
        only the one just created.
        """
        data = self._request("create_key", "PUT", "/user?key", spec.to_params(), timeout=timeout)
        if not isinstance(data, list):
            raise MalformedResponse(f"could not decode key list: {data!r}")
        return [Key.from_dict(k) for k in data]

    def remove_key(self, spec: KeySpec, timeout: float | None = None) -> None:
        """Remove a key identified by owner and access key."""
        self._request("remove_key", "DELETE", "/user?key", spec.to_params(), timeout=timeout)

    @staticmethod
    def _decode_subusers(data: Any) -> list[Subuser]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise MalformedResponse(f"could not decode subuser list: {data!r}")
        return [Subuser.from_dict(s) for s in data]
