"""Handler for Provider CRD."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import kopf

from .. import metrics
from ..builders.client import create_admin_client_from_spec
from ..constants import API_GROUP_VERSION, KIND_PROVIDER
from ..services.rgw.exceptions import RGWAdminError, UnexpectedStatus
from ..tracing import add_span_attribute, trace_span
from ..utils.cache import invalidate_cache, make_cache_key
from ..utils.conditions import (
    set_auth_valid_condition,
    set_endpoint_reachable_condition,
    set_ready_condition,
)
from ..utils.errors import sanitize_exception
from ..utils.events import emit_validate_succeeded
from .base import BaseHandler


class ProviderHandler(BaseHandler):
    """Handler for Provider resources."""

    def __init__(self):
        super().__init__(KIND_PROVIDER)

    def reconcile(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Reconcile Provider resource.

        Builds an admin client from the resource spec and probes ``/admin/info``,
        which checks both reachability and the credentials.
        """
        name = meta.get("name", "unknown")
        namespace = meta.get("namespace", "default")

        # Dependents must not keep using a stale spec
        invalidate_cache(make_cache_key(KIND_PROVIDER, namespace, name))

        with trace_span("reconcile_provider", kind=KIND_PROVIDER, attributes={"provider.name": name}):
            if not spec.get("endpoint"):
                self.handle_validation_error(meta, "endpoint is required")

            emit_validate_succeeded(meta)
            conditions = status.get("conditions", [])

            try:
                admin_client = create_admin_client_from_spec(spec, meta)
                auth_valid = True
                auth_message = "Credentials loaded"
            except ValueError as e:
                admin_client = None
                auth_valid = False
                auth_message = f"Invalid configuration: {sanitize_exception(e)}"
                metrics.error_total.labels(kind=KIND_PROVIDER, error_type=type(e).__name__).inc()
                self.log_error(meta, auth_message, error=e, reason="AuthFailed")

            cluster_id = None
            connected = False
            if admin_client is not None:
                with trace_span("check_info", kind=KIND_PROVIDER):
                    try:
                        cluster_id = admin_client.info()
                        connected = True
                        endpoint_message = "Endpoint is reachable"
                        auth_message = "Authentication successful"
                        add_span_attribute("rgw.cluster_id", cluster_id)
                    except RGWAdminError as e:
                        sanitized_error = sanitize_exception(e)
                        endpoint_message = f"Connectivity test failed: {sanitized_error}"
                        # A 403 means the gateway answered but refused the signature
                        if isinstance(e, UnexpectedStatus) and e.status_code == 403:
                            auth_valid = False
                            auth_message = f"Authentication failed: {sanitized_error}"
                        metrics.error_total.labels(kind=KIND_PROVIDER, error_type=type(e).__name__).inc()
                        self.log_error(meta, endpoint_message, error=e, reason="ConnectivityFailed")
            else:
                endpoint_message = "Cannot test connectivity due to configuration error"

            conditions = set_auth_valid_condition(conditions, auth_valid, auth_message)
            conditions = set_endpoint_reachable_condition(conditions, connected, endpoint_message)

            ready = auth_valid and connected
            conditions = set_ready_condition(
                conditions, ready, "Provider is ready" if ready else "Provider is not ready"
            )

            self.update_resource_status(patch, meta, ready, {
                "connected": connected,
                "clusterId": cluster_id,
                "lastConnectTime": datetime.now(timezone.utc).isoformat() if connected else None,
                "conditions": conditions,
            })

    def delete(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Handle Provider resource deletion."""
        self.log_info(meta, "Provider is being deleted", event="deletion", reason="Deletion")
        invalidate_cache(
            make_cache_key(KIND_PROVIDER, meta.get("namespace", "default"), meta.get("name", "unknown"))
        )
        self.remove_finalizer(meta, patch)


# Global handler instance
_handler = ProviderHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_PROVIDER)
@kopf.on.update(API_GROUP_VERSION, KIND_PROVIDER)
@kopf.on.resume(API_GROUP_VERSION, KIND_PROVIDER)
def handle_provider(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Provider resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_PROVIDER)
def handle_provider_delete(
    spec: dict[str, Any],
    meta: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Provider resource deletion."""
    _handler.delete(spec, meta, patch)
