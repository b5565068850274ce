"""Shared utilities for handlers."""

from __future__ import annotations

import time
from typing import Any

from kubernetes import client

from .. import metrics
from ..builders.client import load_kube_config
from ..constants import (
    API_GROUP,
    API_VERSION,
    COND_READY,
    KIND_PROVIDER,
    PLURAL_PROVIDERS,
)
from ..services.rgw.exceptions import NotFound, UnexpectedStatus
from ..utils.cache import get_cached_object, make_cache_key, set_cached_object


def get_provider_with_cache(
    api: Any,
    provider_name: str,
    provider_ns: str,
) -> dict[str, Any]:
    """Get provider CRD with caching.

    Args:
        api: Kubernetes CustomObjectsApi instance
        provider_name: Name of the provider
        provider_ns: Namespace of the provider

    Returns:
        Provider CRD object

    Raises:
        client.exceptions.ApiException: If provider not found or API error
    """
    cache_key = make_cache_key(KIND_PROVIDER, provider_ns, provider_name)
    cached_provider = get_cached_object(cache_key)

    if cached_provider is not None:
        metrics.api_call_total.labels(api_type="k8s", operation="get_provider", result="cache_hit").inc()
        return cached_provider

    start_time = time.time()
    try:
        provider_obj = api.get_namespaced_custom_object(
            group=API_GROUP,
            version=API_VERSION,
            namespace=provider_ns,
            plural=PLURAL_PROVIDERS,
            name=provider_name,
        )
        metrics.api_call_total.labels(api_type="k8s", operation="get_provider", result="success").inc()
        set_cached_object(cache_key, provider_obj)
        return provider_obj
    except Exception:
        metrics.api_call_total.labels(api_type="k8s", operation="get_provider", result="error").inc()
        raise
    finally:
        duration = time.time() - start_time
        metrics.api_call_duration_seconds.labels(api_type="k8s", operation="get_provider").observe(duration)


def is_provider_ready(provider_obj: dict[str, Any]) -> bool:
    """Check the Ready condition of a Provider object."""
    conditions = provider_obj.get("status", {}).get("conditions", [])
    return any(
        cond.get("type") == COND_READY and cond.get("status") == "True" for cond in conditions
    )


def is_gone(error: Exception) -> bool:
    """Tell whether an admin error means the entity no longer exists.

    Subuser and key reads raise ``NotFound``; user reads surface the
    gateway's 404 verbatim.
    """
    if isinstance(error, NotFound):
        return True
    return isinstance(error, UnexpectedStatus) and error.status_code == 404


def owner_reference(kind: str, meta: dict[str, Any]) -> dict[str, Any]:
    """Build an owner reference pointing at a custom resource."""
    return {
        "apiVersion": f"{API_GROUP}/{API_VERSION}",
        "kind": kind,
        "name": meta.get("name"),
        "uid": meta.get("uid"),
        "controller": True,
    }


def get_k8s_client() -> client.CustomObjectsApi:
    """Get Kubernetes CustomObjectsApi client."""
    load_kube_config()
    return client.CustomObjectsApi()


def get_core_client() -> client.CoreV1Api:
    """Get Kubernetes CoreV1Api client."""
    load_kube_config()
    return client.CoreV1Api()
