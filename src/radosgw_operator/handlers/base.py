"""Base handler class with common functionality for all CRD handlers."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable

import kopf
from kubernetes import client

from .. import metrics
from ..builders.client import create_admin_client_from_spec
from ..constants import FINALIZER
from ..logging import log_resource_event
from ..services.rgw.client import RGWAdminClient
from ..services.rgw.exceptions import (
    ConfigurationError,
    InvalidIdentifier,
    UnsupportedOperation,
)
from ..utils.conditions import set_provider_not_ready_condition, set_ready_condition
from ..utils.errors import sanitize_exception
from ..utils.events import (
    emit_drift_detected,
    emit_reconcile_failed,
    emit_reconcile_started,
    emit_validate_failed,
)
from .shared import get_k8s_client, get_provider_with_cache, is_provider_ready

# Failures that retrying cannot fix
PERMANENT_ERRORS = (ConfigurationError, InvalidIdentifier, UnsupportedOperation)


class BaseHandler:
    """Base class for all CRD handlers with common functionality."""

    def __init__(self, kind: str):
        """Initialize base handler.

        Args:
            kind: The Kubernetes resource kind (e.g., "Provider", "User")
        """
        self.kind = kind
        self.logger = logging.getLogger(__name__)

    def _get_resource_context(self, meta: dict[str, Any]) -> dict[str, Any]:
        return {
            "name": meta.get("name", "unknown"),
            "namespace": meta.get("namespace", "default"),
            "uid": meta.get("uid", "unknown"),
        }

    def _log(
        self,
        meta: dict[str, Any],
        message: str,
        event: str,
        reason: str,
        **kwargs: Any,
    ) -> None:
        ctx = self._get_resource_context(meta)
        log_resource_event(
            self.logger,
            resource_kind=self.kind,
            resource_name=ctx["name"],
            namespace=ctx["namespace"],
            uid=ctx["uid"],
            event=event,
            reason=reason,
            message=message,
            **kwargs,
        )

    def log_info(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "info",
        reason: str = "Info",
        **kwargs: Any,
    ) -> None:
        """Log an info-level structured log message."""
        self._log(meta, message, event, reason, **kwargs)

    def log_warning(
        self,
        meta: dict[str, Any],
        message: str,
        event: str = "warning",
        reason: str = "Warning",
        **kwargs: Any,
    ) -> None:
        """Log a warning-level structured log message."""
        self._log(meta, message, event, reason, **kwargs)

    def log_error(
        self,
        meta: dict[str, Any],
        message: str,
        error: Exception | None = None,
        event: str = "error",
        reason: str = "Error",
        **kwargs: Any,
    ) -> None:
        """Log an error-level structured log message.

        Args:
            meta: Kubernetes resource metadata
            message: Log message
            error: Optional exception to include sanitized error details
            event: Event type (default: "error")
            reason: Reason for the event (default: "Error")
            **kwargs: Additional fields to include in the log
        """
        log_data = kwargs.copy()
        if error is not None:
            log_data["error"] = sanitize_exception(error)
            log_data["error_type"] = type(error).__name__
        self._log(meta, message, event, reason, **log_data)

    def handle_provider_not_found(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        error_msg: str,
    ) -> None:
        """Record a missing provider and retry later.

        Raises:
            kopf.TemporaryError: Always raises to trigger retry
        """
        self.log_error(meta, error_msg, reason="ProviderNotFound")
        conditions = set_provider_not_ready_condition(status.get("conditions", []), error_msg)
        emit_reconcile_failed(meta, error_msg)
        patch.status.update({
            "conditions": conditions,
            "observedGeneration": meta.get("generation", 0),
        })
        raise kopf.TemporaryError(error_msg, delay=30)

    def handle_provider_not_ready(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        provider_name: str,
        error_msg: str,
    ) -> None:
        """Handle provider not ready error consistently.

        Raises:
            kopf.TemporaryError: Always raises to trigger retry
        """
        self.log_warning(meta, error_msg, reason="ProviderNotReady", provider=provider_name)
        conditions = set_provider_not_ready_condition(status.get("conditions", []), error_msg)
        emit_reconcile_failed(meta, error_msg)
        patch.status.update({
            "conditions": conditions,
            "observedGeneration": meta.get("generation", 0),
        })
        raise kopf.TemporaryError(error_msg, delay=30)

    def handle_validation_error(
        self,
        meta: dict[str, Any],
        error_msg: str,
    ) -> None:
        """Handle validation error consistently.

        Raises:
            kopf.PermanentError: Always; an invalid spec needs a new generation
        """
        self.log_error(meta, error_msg, reason="ValidationFailed")
        emit_validate_failed(meta, error_msg)
        raise kopf.PermanentError(error_msg)

    def handle_reconciliation_error(
        self,
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
        error: Exception,
        condition_fn: Callable[[list[dict[str, Any]], str], list[dict[str, Any]]] | None = None,
    ) -> None:
        """Report a failed reconciliation and hand it back to kopf.

        The resource is marked not ready with a sanitized message. Retry and
        backoff are left to kopf.

        Raises:
            kopf.PermanentError: For failures a retry cannot fix
            kopf.TemporaryError: For everything else
        """
        sanitized_error = sanitize_exception(error)
        message = f"Reconciliation failed: {sanitized_error}"

        self.log_error(meta, message, error=error, reason="ReconciliationFailed")
        emit_reconcile_failed(meta, message)
        metrics.error_total.labels(kind=self.kind, error_type=type(error).__name__).inc()

        conditions = status.get("conditions", [])
        if condition_fn is not None:
            conditions = condition_fn(conditions, message)
        conditions = set_ready_condition(conditions, False, message)
        patch.status.update({
            "conditions": conditions,
            "observedGeneration": meta.get("generation", 0),
        })

        if isinstance(error, PERMANENT_ERRORS):
            raise kopf.PermanentError(message) from error
        raise kopf.TemporaryError(message) from error

    def resolve_admin_client(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> RGWAdminClient:
        """Look up the referenced Provider and build an admin client from it.

        Raises:
            kopf.TemporaryError: If the provider is missing or not ready
        """
        provider_ref = spec.get("providerRef", {})
        provider_name = provider_ref.get("name")
        if not provider_name:
            self.handle_validation_error(meta, "providerRef.name is required")

        provider_ns = provider_ref.get("namespace", meta.get("namespace", "default"))
        try:
            provider_obj = get_provider_with_cache(get_k8s_client(), provider_name, provider_ns)
        except client.exceptions.ApiException as e:
            if e.status == 404:
                self.handle_provider_not_found(
                    meta,
                    status,
                    patch,
                    f"Provider {provider_name} not found in namespace {provider_ns}",
                )
            raise

        if not is_provider_ready(provider_obj):
            self.handle_provider_not_ready(
                meta, status, patch, provider_name, f"Provider {provider_name} is not ready"
            )

        return create_admin_client_from_spec(
            provider_obj.get("spec", {}), provider_obj.get("metadata", {})
        )

    def ensure_finalizer(self, meta: dict[str, Any], patch: kopf.Patch) -> None:
        """Ensure finalizer is present in metadata."""
        finalizers = list(meta.get("finalizers", []))
        if FINALIZER not in finalizers:
            finalizers.append(FINALIZER)
            patch.metadata["finalizers"] = finalizers

    def remove_finalizer(self, meta: dict[str, Any], patch: kopf.Patch) -> None:
        """Remove finalizer from metadata."""
        finalizers = list(meta.get("finalizers", []))
        if FINALIZER in finalizers:
            finalizers.remove(FINALIZER)
            patch.metadata["finalizers"] = finalizers if finalizers else None

    def reconcile_with_metrics(
        self,
        meta: dict[str, Any],
        reconcile_fn: Callable[[], None],
    ) -> None:
        """Execute reconciliation with metrics and error handling.

        Args:
            meta: Kubernetes resource metadata
            reconcile_fn: Function to execute for reconciliation
        """
        emit_reconcile_started(meta)
        metrics.reconcile_total.labels(kind=self.kind, result="started").inc()

        start_time = time.time()
        try:
            reconcile_fn()
            metrics.reconcile_total.labels(kind=self.kind, result="success").inc()
        except (kopf.TemporaryError, kopf.PermanentError):
            # Already reported by the handler
            metrics.reconcile_total.labels(kind=self.kind, result="failed").inc()
            raise
        except Exception as e:
            metrics.error_total.labels(kind=self.kind, error_type=type(e).__name__).inc()
            self.log_error(meta, "Reconciliation failed", error=e, reason="ReconciliationFailed")
            emit_reconcile_failed(meta, f"Reconciliation failed: {sanitize_exception(e)}")
            metrics.reconcile_total.labels(kind=self.kind, result="error").inc()
            raise
        finally:
            metrics.reconcile_duration_seconds.labels(kind=self.kind).observe(time.time() - start_time)

    def record_drift(self, meta: dict[str, Any], field: str, message: str) -> None:
        """Count and report a divergence between declared and observed state."""
        metrics.drift_detected_total.labels(kind=self.kind, field=field).inc()
        self.log_warning(meta, message, event="drift", reason="DriftDetected", field=field)
        emit_drift_detected(meta, field, message)

    def update_resource_status(
        self,
        patch: kopf.Patch,
        meta: dict[str, Any],
        ready: bool,
        status_data: dict[str, Any] | None = None,
    ) -> None:
        """Update resource status with common fields.

        Args:
            patch: Kopf patch object
            meta: Kubernetes resource metadata
            ready: Whether the resource is ready
            status_data: Additional status data to include
        """
        status_update = {
            "observedGeneration": meta.get("generation", 0),
            **(status_data or {}),
        }
        metrics.resource_status_total.labels(
            kind=self.kind, status="ready" if ready else "not_ready"
        ).inc()
        patch.status.update(status_update)
