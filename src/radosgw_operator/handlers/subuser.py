"""Handler for Subuser CRD."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Any

import kopf

from ..constants import API_GROUP_VERSION, KIND_SUBUSER
from ..reconcilers.state import SubuserState
from ..reconcilers.subuser import SubuserReconciler
from ..services.rgw.exceptions import NotFound, RGWAdminError, UnsupportedOperation
from ..services.rgw.models import SubuserAccess, access_value, join_owner
from ..tracing import trace_span
from ..utils.conditions import set_creation_failed_condition, set_ready_condition
from ..utils.events import (
    emit_subuser_created,
    emit_subuser_deleted,
    emit_subuser_updated,
    emit_validate_succeeded,
)
from .base import BaseHandler
from .shared import is_gone

ACCESS_LEVELS = {access.value for access in SubuserAccess}


class SubuserHandler(BaseHandler):
    """Handler for Subuser resources."""

    def __init__(self):
        super().__init__(KIND_SUBUSER)

    def _desired(self, spec: dict[str, Any], meta: dict[str, Any]) -> SubuserState:
        user_id = spec.get("userId")
        subuser = spec.get("subuser")
        access = spec.get("access", SubuserAccess.NONE.value)

        if not user_id or not subuser:
            self.handle_validation_error(meta, "userId and subuser are required")
        if ":" in subuser:
            self.handle_validation_error(meta, f"subuser must be a local name without ':', got {subuser!r}")
        if access not in ACCESS_LEVELS:
            self.handle_validation_error(
                meta, f"access must be one of {', '.join(sorted(ACCESS_LEVELS))}, got {access!r}"
            )
        return SubuserState(user_id=user_id, subuser=subuser, access=SubuserAccess(access))

    def reconcile(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Reconcile Subuser resource."""
        desired = self._desired(spec, meta)

        with trace_span("reconcile_subuser", kind=KIND_SUBUSER, attributes={"subuser.name": desired.qualified_name}):
            emit_validate_succeeded(meta)
            reconciler = SubuserReconciler(self.resolve_admin_client(spec, meta, status, patch))

            try:
                if not status.get("created"):
                    observed = self._create(reconciler, desired, spec, meta)
                else:
                    observed = self._maintain(reconciler, desired, meta, status)
            except RGWAdminError as e:
                condition_fn = None if status.get("created") else set_creation_failed_condition
                self.handle_reconciliation_error(meta, status, patch, e, condition_fn)

            conditions = set_ready_condition(
                status.get("conditions", []), True, f"Subuser {observed.qualified_name} is ready"
            )
            self.update_resource_status(patch, meta, True, {
                "userId": observed.user_id,
                "subuser": observed.subuser,
                "access": access_value(observed.access),
                "created": True,
                "lastSyncTime": datetime.now(timezone.utc).isoformat(),
                "conditions": conditions,
            })

    def _create(
        self,
        reconciler: SubuserReconciler,
        desired: SubuserState,
        spec: dict[str, Any],
        meta: dict[str, Any],
    ) -> SubuserState:
        if spec.get("adopt"):
            observed = reconciler.import_(desired.qualified_name)
            self.log_info(meta, f"Adopted subuser {observed.qualified_name}", reason="SubuserAdopted")
            return self._converge(reconciler, desired, observed, meta)

        observed = reconciler.create(desired)
        emit_subuser_created(meta, observed.qualified_name)
        return observed

    def _maintain(
        self,
        reconciler: SubuserReconciler,
        desired: SubuserState,
        meta: dict[str, Any],
        status: dict[str, Any],
    ) -> SubuserState:
        tracked = join_owner(status.get("userId") or "", status.get("subuser"))
        if status.get("userId") and tracked != desired.qualified_name:
            raise UnsupportedOperation(
                f"subuser cannot change from {tracked!r} to {desired.qualified_name!r}, "
                "create a new Subuser resource instead"
            )

        try:
            observed = reconciler.read(desired)
        except NotFound:
            self.record_drift(meta, "subuser", f"Subuser {desired.qualified_name} is gone, recreating")
            observed = reconciler.create(desired)
            emit_subuser_created(meta, observed.qualified_name)
            return observed
        return self._converge(reconciler, desired, observed, meta)

    def _converge(
        self,
        reconciler: SubuserReconciler,
        desired: SubuserState,
        observed: SubuserState,
        meta: dict[str, Any],
    ) -> SubuserState:
        if observed.access == desired.access:
            return observed
        self.record_drift(
            meta, "access", f"access is {observed.access!s}, want {access_value(desired.access)}"
        )
        observed = reconciler.update(desired)
        emit_subuser_updated(meta, observed.qualified_name)
        return observed

    def delete(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Handle Subuser resource deletion."""
        user_id = status.get("userId") or spec.get("userId")
        subuser = status.get("subuser") or spec.get("subuser")
        name = join_owner(user_id or "", subuser)
        self.log_info(meta, f"Subuser {name} is being deleted", event="deletion", reason="Deletion")

        if user_id and subuser and status.get("created"):
            reconciler = SubuserReconciler(self.resolve_admin_client(spec, meta, status, patch))
            state = SubuserState(user_id=user_id, subuser=subuser, access=status.get("access", ""))
            try:
                reconciler.delete(state)
                emit_subuser_deleted(meta, name)
            except RGWAdminError as e:
                if not is_gone(e):
                    self.handle_reconciliation_error(meta, status, patch, e)
                self.log_warning(meta, f"Subuser {name} was already gone", reason="AlreadyDeleted")

        self.remove_finalizer(meta, patch)


# Global handler instance
_handler = SubuserHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_SUBUSER)
@kopf.on.update(API_GROUP_VERSION, KIND_SUBUSER)
@kopf.on.resume(API_GROUP_VERSION, KIND_SUBUSER)
@kopf.timer(API_GROUP_VERSION, KIND_SUBUSER, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_subuser(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Subuser resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_SUBUSER)
def handle_subuser_delete(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Subuser resource deletion."""
    _handler.delete(spec, meta, status, patch)
