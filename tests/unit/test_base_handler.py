"""Tests for base handler functionality."""

from __future__ import annotations

from unittest.mock import MagicMock, Mock, patch

import kopf
import pytest
from kubernetes import client

from radosgw_operator.constants import FINALIZER
from radosgw_operator.handlers.base import BaseHandler
from radosgw_operator.services.rgw.exceptions import (
    ConfigurationError,
    InvalidIdentifier,
    TransportError,
    UnexpectedStatus,
    UnsupportedOperation,
)

META = {"name": "alice", "namespace": "default", "uid": "uid-1", "generation": 4}

READY_PROVIDER = {
    "metadata": {"name": "rgw", "namespace": "default"},
    "spec": {"endpoint": "http://rgw:8080"},
    "status": {"conditions": [{"type": "Ready", "status": "True"}]},
}


class TestFinalizers:
    """Test cases for finalizer management."""

    def test_ensure_finalizer_adds_when_missing(self):
        handler = BaseHandler(kind="User")
        patch_obj = kopf.Patch()

        handler.ensure_finalizer({"finalizers": []}, patch_obj)

        assert FINALIZER in patch_obj.metadata["finalizers"]

    def test_ensure_finalizer_no_patch_when_present(self):
        handler = BaseHandler(kind="User")
        patch_obj = kopf.Patch()

        handler.ensure_finalizer({"finalizers": [FINALIZER]}, patch_obj)

        assert "finalizers" not in patch_obj.metadata

    def test_remove_finalizer_keeps_others(self):
        handler = BaseHandler(kind="User")
        patch_obj = kopf.Patch()

        handler.remove_finalizer({"finalizers": [FINALIZER, "other-finalizer"]}, patch_obj)

        assert patch_obj.metadata["finalizers"] == ["other-finalizer"]

    def test_remove_finalizer_sets_none_when_empty(self):
        handler = BaseHandler(kind="User")
        patch_obj = kopf.Patch()

        handler.remove_finalizer({"finalizers": [FINALIZER]}, patch_obj)

        assert patch_obj.metadata["finalizers"] is None


class TestReconcileWithMetrics:
    """Test cases for reconcile_with_metrics."""

    @patch("radosgw_operator.handlers.base.emit_reconcile_started")
    @patch("radosgw_operator.handlers.base.metrics")
    def test_success(self, mock_metrics, mock_emit_started):
        handler = BaseHandler(kind="User")
        reconcile_fn = Mock()

        handler.reconcile_with_metrics(META, reconcile_fn)

        reconcile_fn.assert_called_once()
        mock_emit_started.assert_called_once_with(META)
        mock_metrics.reconcile_total.labels.assert_any_call(kind="User", result="started")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="User", result="success")
        assert mock_metrics.reconcile_duration_seconds.labels.called

    @patch("radosgw_operator.handlers.base.emit_reconcile_failed")
    @patch("radosgw_operator.handlers.base.emit_reconcile_started")
    @patch("radosgw_operator.handlers.base.metrics")
    def test_unexpected_error(self, mock_metrics, mock_emit_started, mock_emit_failed):
        """Test that unexpected errors are reported and re-raised."""
        handler = BaseHandler(kind="User")

        def failing_fn():
            raise ValueError("secret_key: wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY")

        with pytest.raises(ValueError):
            handler.reconcile_with_metrics(META, failing_fn)

        message = mock_emit_failed.call_args[0][1]
        assert "wJalrXUtnFEMI" not in message
        mock_metrics.error_total.labels.assert_called_with(kind="User", error_type="ValueError")
        mock_metrics.reconcile_total.labels.assert_any_call(kind="User", result="error")

    @patch("radosgw_operator.handlers.base.emit_reconcile_failed")
    @patch("radosgw_operator.handlers.base.emit_reconcile_started")
    @patch("radosgw_operator.handlers.base.metrics")
    def test_kopf_errors_pass_through(self, mock_metrics, mock_emit_started, mock_emit_failed):
        """Test that already-reported kopf errors are counted but not re-reported."""
        handler = BaseHandler(kind="User")

        def failing_fn():
            raise kopf.TemporaryError("provider not ready", delay=30)

        with pytest.raises(kopf.TemporaryError):
            handler.reconcile_with_metrics(META, failing_fn)

        mock_emit_failed.assert_not_called()
        mock_metrics.reconcile_total.labels.assert_any_call(kind="User", result="failed")


class TestHandleReconciliationError:
    """Test cases for handle_reconciliation_error."""

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("endpoint is required"),
            InvalidIdentifier("expected format <parent>:<child>"),
            UnsupportedOperation("key update"),
        ],
    )
    @patch("radosgw_operator.handlers.base.emit_reconcile_failed")
    @patch("radosgw_operator.handlers.base.metrics")
    def test_permanent_errors(self, mock_metrics, mock_emit_failed, error):
        handler = BaseHandler(kind="Key")
        patch_obj = kopf.Patch()

        with pytest.raises(kopf.PermanentError):
            handler.handle_reconciliation_error(META, {}, patch_obj, error)

        assert patch_obj.status["conditions"][0]["type"] == "Ready"
        assert patch_obj.status["conditions"][0]["status"] == "False"

    @pytest.mark.parametrize(
        "error",
        [TransportError("connection refused"), UnexpectedStatus(500, "boom")],
    )
    @patch("radosgw_operator.handlers.base.emit_reconcile_failed")
    @patch("radosgw_operator.handlers.base.metrics")
    def test_temporary_errors(self, mock_metrics, mock_emit_failed, error):
        handler = BaseHandler(kind="User")
        patch_obj = kopf.Patch()

        with pytest.raises(kopf.TemporaryError):
            handler.handle_reconciliation_error(META, {}, patch_obj, error)

        assert patch_obj.status["observedGeneration"] == 4
        mock_metrics.error_total.labels.assert_called_with(
            kind="User", error_type=type(error).__name__
        )

    @patch("radosgw_operator.handlers.base.emit_reconcile_failed")
    @patch("radosgw_operator.handlers.base.metrics")
    def test_extra_condition(self, mock_metrics, mock_emit_failed):
        handler = BaseHandler(kind="User")
        patch_obj = kopf.Patch()
        condition_fn = MagicMock(side_effect=lambda conditions, message: conditions)

        with pytest.raises(kopf.TemporaryError):
            handler.handle_reconciliation_error(
                META, {}, patch_obj, TransportError("down"), condition_fn=condition_fn
            )

        condition_fn.assert_called_once()
        assert "down" in condition_fn.call_args[0][1]


class TestValidation:
    """Test cases for validation failures."""

    @patch("radosgw_operator.handlers.base.emit_validate_failed")
    def test_validation_error_is_permanent(self, mock_emit):
        handler = BaseHandler(kind="User")

        with pytest.raises(kopf.PermanentError, match="userId is required"):
            handler.handle_validation_error(META, "userId is required")

        mock_emit.assert_called_once_with(META, "userId is required")


class TestResolveAdminClient:
    """Test cases for resolving a provider into an admin client."""

    @patch("radosgw_operator.handlers.base.create_admin_client_from_spec")
    @patch("radosgw_operator.handlers.base.get_provider_with_cache")
    @patch("radosgw_operator.handlers.base.get_k8s_client")
    def test_ready_provider(self, mock_k8s, mock_get_provider, mock_create):
        mock_get_provider.return_value = READY_PROVIDER
        handler = BaseHandler(kind="User")

        admin = handler.resolve_admin_client({"providerRef": {"name": "rgw"}}, META, {}, kopf.Patch())

        assert admin is mock_create.return_value
        mock_get_provider.assert_called_once_with(mock_k8s.return_value, "rgw", "default")
        mock_create.assert_called_once_with(READY_PROVIDER["spec"], READY_PROVIDER["metadata"])

    @patch("radosgw_operator.handlers.base.emit_validate_failed")
    def test_missing_provider_ref(self, mock_emit):
        handler = BaseHandler(kind="User")

        with pytest.raises(kopf.PermanentError):
            handler.resolve_admin_client({}, META, {}, kopf.Patch())

    @patch("radosgw_operator.handlers.base.emit_reconcile_failed")
    @patch("radosgw_operator.handlers.base.get_provider_with_cache")
    @patch("radosgw_operator.handlers.base.get_k8s_client")
    def test_provider_not_found(self, mock_k8s, mock_get_provider, mock_emit):
        mock_get_provider.side_effect = client.exceptions.ApiException(status=404)
        handler = BaseHandler(kind="User")
        patch_obj = kopf.Patch()

        with pytest.raises(kopf.TemporaryError):
            handler.resolve_admin_client(
                {"providerRef": {"name": "rgw", "namespace": "ceph"}}, META, {}, patch_obj
            )

        assert patch_obj.status["conditions"][0]["type"] == "ProviderNotReady"

    @patch("radosgw_operator.handlers.base.emit_reconcile_failed")
    @patch("radosgw_operator.handlers.base.get_provider_with_cache")
    @patch("radosgw_operator.handlers.base.get_k8s_client")
    def test_provider_not_ready(self, mock_k8s, mock_get_provider, mock_emit):
        mock_get_provider.return_value = {**READY_PROVIDER, "status": {"conditions": []}}
        handler = BaseHandler(kind="User")

        with pytest.raises(kopf.TemporaryError, match="not ready"):
            handler.resolve_admin_client({"providerRef": {"name": "rgw"}}, META, {}, kopf.Patch())


class TestStatusAndDrift:
    """Test cases for status updates and drift reporting."""

    @patch("radosgw_operator.handlers.base.metrics")
    def test_update_resource_status(self, mock_metrics):
        handler = BaseHandler(kind="User")
        patch_obj = kopf.Patch()

        handler.update_resource_status(patch_obj, META, ready=True, status_data={"userId": "alice"})

        assert patch_obj.status["observedGeneration"] == 4
        assert patch_obj.status["userId"] == "alice"
        mock_metrics.resource_status_total.labels.assert_called_with(kind="User", status="ready")

    @patch("radosgw_operator.handlers.base.emit_drift_detected")
    @patch("radosgw_operator.handlers.base.metrics")
    def test_record_drift(self, mock_metrics, mock_emit):
        handler = BaseHandler(kind="Subuser")

        handler.record_drift(META, "access", "expected read, found full")

        mock_metrics.drift_detected_total.labels.assert_called_once_with(kind="Subuser", field="access")
        mock_emit.assert_called_once_with(META, "access", "expected read, found full")
