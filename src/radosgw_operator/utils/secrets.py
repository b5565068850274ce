"""Utilities for managing Kubernetes secrets."""

from __future__ import annotations

import base64
import binascii
from typing import Any

from kubernetes import client

from ..constants import (
    FIELD_MANAGER,
    LABEL_MANAGED_BY,
    LABEL_RESOURCE_TYPE,
    SECRET_KEY_ACCESS_KEY_ID,
    SECRET_KEY_SECRET_ACCESS_KEY,
)


def _decode(value: str | bytes) -> str:
    # Different kubernetes client versions hand back str or bytes
    if isinstance(value, bytes):
        return value.decode("utf-8")
    try:
        return base64.b64decode(value, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return value


def get_secret_value(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    key: str,
) -> str:
    """Get a value from a Kubernetes secret.

    Args:
        api: Kubernetes API client
        namespace: Namespace of the secret
        secret_name: Name of the secret
        key: Key in the secret

    Returns:
        Secret value

    Raises:
        ValueError: If secret or key not found
    """
    data = read_secret_data(api, namespace, secret_name)
    if key not in data:
        raise ValueError(f"Key '{key}' not found in secret '{secret_name}'")
    return data[key]


def read_secret_data(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
) -> dict[str, str]:
    """Read all data from a Kubernetes secret.

    Raises:
        ValueError: If secret not found
    """
    try:
        secret = api.read_namespaced_secret(name=secret_name, namespace=namespace)
    except client.exceptions.ApiException as e:
        if e.status == 404:
            raise ValueError(f"Secret '{secret_name}' not found in namespace '{namespace}'") from e
        raise
    return {key: _decode(value) for key, value in (secret.data or {}).items()}


def write_credentials_secret(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
    access_key_id: str,
    secret_access_key: str,
    owner_references: list[dict[str, Any]] | None = None,
) -> None:
    """Create or replace the secret holding a key's credentials.

    Args:
        api: Kubernetes API client
        namespace: Namespace for the secret
        secret_name: Name of the secret
        access_key_id: S3 access key
        secret_access_key: S3 secret key
        owner_references: Owner references for the secret
    """
    secret = client.V1Secret(
        metadata=client.V1ObjectMeta(
            name=secret_name,
            namespace=namespace,
            owner_references=owner_references or [],
            labels={
                LABEL_MANAGED_BY: FIELD_MANAGER,
                LABEL_RESOURCE_TYPE: "key",
            },
        ),
        type="Opaque",
        string_data={
            SECRET_KEY_ACCESS_KEY_ID: access_key_id,
            SECRET_KEY_SECRET_ACCESS_KEY: secret_access_key,
        },
    )

    try:
        api.create_namespaced_secret(
            namespace=namespace,
            body=secret,
            field_manager=FIELD_MANAGER,
        )
    except client.exceptions.ApiException as e:
        if e.status != 409:
            raise
        api.patch_namespaced_secret(
            name=secret_name,
            namespace=namespace,
            body=secret,
            field_manager=FIELD_MANAGER,
        )


def delete_secret(
    api: client.CoreV1Api,
    namespace: str,
    secret_name: str,
) -> None:
    """Delete a Kubernetes secret; a missing secret is not an error."""
    try:
        api.delete_namespaced_secret(name=secret_name, namespace=namespace)
    except client.exceptions.ApiException as e:
        if e.status != 404:
            raise
