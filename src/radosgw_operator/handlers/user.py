"""Handler for User CRD."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Any

import kopf

from ..constants import API_GROUP_VERSION, KIND_USER
from ..reconcilers.state import UserState
from ..reconcilers.user import UserReconciler
from ..services.rgw.exceptions import RGWAdminError, UnsupportedOperation
from ..tracing import trace_span
from ..utils.conditions import set_creation_failed_condition, set_ready_condition
from ..utils.events import emit_user_created, emit_user_updated, emit_validate_succeeded
from .base import BaseHandler
from .shared import is_gone


class UserHandler(BaseHandler):
    """Handler for User resources."""

    def __init__(self):
        super().__init__(KIND_USER)

    def _desired(self, spec: dict[str, Any], meta: dict[str, Any]) -> UserState:
        user_id = spec.get("userId")
        if not user_id:
            self.handle_validation_error(meta, "userId is required")
        return UserState(user_id=user_id, display_name=spec.get("displayName") or user_id)

    def reconcile(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Reconcile User resource."""
        desired = self._desired(spec, meta)

        with trace_span("reconcile_user", kind=KIND_USER, attributes={"user.id": desired.user_id}):
            emit_validate_succeeded(meta)
            reconciler = UserReconciler(self.resolve_admin_client(spec, meta, status, patch))

            try:
                if not status.get("created"):
                    observed = self._create(reconciler, desired, spec, meta)
                else:
                    observed = self._maintain(reconciler, desired, meta, status)
            except RGWAdminError as e:
                condition_fn = None if status.get("created") else set_creation_failed_condition
                self.handle_reconciliation_error(meta, status, patch, e, condition_fn)

            conditions = set_ready_condition(
                status.get("conditions", []), True, f"User {observed.user_id} is ready"
            )
            self.update_resource_status(patch, meta, True, {
                "userId": observed.user_id,
                "displayName": observed.display_name,
                "keyCount": len(observed.keys),
                "created": True,
                "lastSyncTime": datetime.now(timezone.utc).isoformat(),
                "conditions": conditions,
            })

    def _create(
        self,
        reconciler: UserReconciler,
        desired: UserState,
        spec: dict[str, Any],
        meta: dict[str, Any],
    ) -> UserState:
        if spec.get("adopt"):
            observed = reconciler.import_(desired.user_id)
            self.log_info(meta, f"Adopted user {observed.user_id}", reason="UserAdopted")
            if observed.display_name != desired.display_name:
                observed = reconciler.update(desired)
                emit_user_updated(meta, observed.user_id)
            return observed

        observed = reconciler.create(desired)
        emit_user_created(meta, observed.user_id)
        return observed

    def _maintain(
        self,
        reconciler: UserReconciler,
        desired: UserState,
        meta: dict[str, Any],
        status: dict[str, Any],
    ) -> UserState:
        tracked = status.get("userId")
        if tracked and tracked != desired.user_id:
            raise UnsupportedOperation(
                f"userId cannot change from {tracked!r} to {desired.user_id!r}, "
                "create a new User resource instead"
            )

        try:
            observed = reconciler.read(desired.user_id)
        except RGWAdminError as e:
            if not is_gone(e):
                raise
            self.record_drift(meta, "userId", f"User {desired.user_id} is gone, recreating")
            observed = reconciler.create(desired)
            emit_user_created(meta, observed.user_id)
            return observed

        if observed.display_name != desired.display_name:
            self.record_drift(
                meta,
                "displayName",
                f"display name is {observed.display_name!r}, want {desired.display_name!r}",
            )
            keys = observed.keys
            observed = reconciler.update(desired)
            observed.keys = keys
            emit_user_updated(meta, observed.user_id)
        return observed

    def delete(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Handle User resource deletion."""
        user_id = status.get("userId") or spec.get("userId")
        self.log_info(meta, f"User {user_id} is being deleted", event="deletion", reason="Deletion")

        if user_id and status.get("created"):
            reconciler = UserReconciler(self.resolve_admin_client(spec, meta, status, patch))
            try:
                reconciler.delete(user_id)
            except RGWAdminError as e:
                if not is_gone(e):
                    self.handle_reconciliation_error(meta, status, patch, e)
                self.log_warning(meta, f"User {user_id} was already gone", reason="AlreadyDeleted")

        self.remove_finalizer(meta, patch)


# Global handler instance
_handler = UserHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_USER)
@kopf.on.update(API_GROUP_VERSION, KIND_USER)
@kopf.on.resume(API_GROUP_VERSION, KIND_USER)
@kopf.timer(API_GROUP_VERSION, KIND_USER, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_user(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle User resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_USER)
def handle_user_delete(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle User resource deletion."""
    _handler.delete(spec, meta, status, patch)
