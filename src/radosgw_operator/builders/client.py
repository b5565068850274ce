"""Builder for admin API clients."""

from __future__ import annotations

import os
from typing import Any

from kubernetes import client, config

from ..config import AdminConfig
from ..constants import DEFAULT_REQUEST_TIMEOUT_SECONDS
from ..services.rgw.client import RGWAdminClient
from ..utils.secrets import get_secret_value


def load_kube_config() -> None:
    """Load in-cluster configuration, falling back to the local kubeconfig."""
    try:
        config.load_incluster_config()
    except config.ConfigException:
        config.load_kube_config()


def _credential(
    api: client.CoreV1Api | None,
    namespace: str,
    ref: dict[str, Any],
    default_key: str,
    env_var: str,
) -> str:
    """Resolve one credential from a secret reference or the environment."""
    secret_name = ref.get("name")
    if not secret_name:
        return os.getenv(env_var, "")
    return get_secret_value(api, namespace, secret_name, ref.get("key", default_key))


def create_admin_config_from_spec(
    spec: dict[str, Any],
    meta: dict[str, Any],
    api: client.CoreV1Api | None = None,
) -> AdminConfig:
    """Create an admin API configuration from a Provider CRD spec.

    Args:
        spec: Provider CRD spec
        meta: Provider metadata
        api: Optional CoreV1Api (one is created from the kube config otherwise)

    Returns:
        Validated admin configuration

    Raises:
        ValueError: If a referenced secret is missing
        ConfigurationError: If the resulting configuration is incomplete
    """
    namespace = meta.get("namespace", "default")
    auth = spec.get("auth", {})
    access_key_ref = auth.get("accessKeySecretRef", {})
    secret_key_ref = auth.get("secretKeySecretRef", {})

    # Only talk to the cluster when a secret actually has to be read
    if api is None and (access_key_ref.get("name") or secret_key_ref.get("name")):
        load_kube_config()
        api = client.CoreV1Api()

    access_key_id = _credential(api, namespace, access_key_ref, "access-key", "ACCESS_KEY_ID")
    secret_access_key = _credential(api, namespace, secret_key_ref, "secret-key", "SECRET_ACCESS_KEY")

    tls_config = spec.get("tls", {})

    return AdminConfig(
        endpoint=spec.get("endpoint") or os.getenv("RGW_ENDPOINT", ""),
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        timeout=float(spec.get("timeoutSeconds", DEFAULT_REQUEST_TIMEOUT_SECONDS)),
        verify_tls=not tls_config.get("insecureSkipVerify", False),
    )


def create_admin_client_from_spec(
    spec: dict[str, Any],
    meta: dict[str, Any],
    api: client.CoreV1Api | None = None,
) -> RGWAdminClient:
    """Create an admin API client from a Provider CRD spec."""
    return RGWAdminClient(create_admin_config_from_spec(spec, meta, api))
