"""Handler for Key CRD."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Any

import kopf

from ..constants import (
    API_GROUP_VERSION,
    KIND_KEY,
    SECRET_KEY_ACCESS_KEY_ID,
    SECRET_KEY_SECRET_ACCESS_KEY,
)
from ..reconcilers.key import KeyReconciler
from ..reconcilers.state import KeyState
from ..services.rgw.exceptions import NotFound, RGWAdminError
from ..tracing import trace_span
from ..utils.conditions import set_creation_failed_condition, set_ready_condition
from ..utils.events import emit_key_created, emit_key_deleted, emit_validate_succeeded
from ..utils.secrets import delete_secret, read_secret_data, write_credentials_secret
from .base import BaseHandler
from .shared import get_core_client, is_gone, owner_reference


def credentials_secret_name(name: str) -> str:
    return f"{name}-credentials"


class KeyHandler(BaseHandler):
    """Handler for Key resources.

    Secret material never goes into the resource status. Generated or
    adopted credentials are written to ``<name>-credentials``, owned by the
    Key resource; caller-supplied credentials are read from
    ``spec.credentialsSecretRef``.
    """

    def __init__(self):
        super().__init__(KIND_KEY)

    def _desired(self, spec: dict[str, Any], meta: dict[str, Any], core_api: Any) -> KeyState:
        user = spec.get("user")
        if not user:
            self.handle_validation_error(meta, "user is required")

        desired = KeyState(user=user, subuser=spec.get("subuser") or None)

        secret_ref = spec.get("credentialsSecretRef", {})
        if secret_ref.get("name"):
            namespace = secret_ref.get("namespace", meta.get("namespace", "default"))
            try:
                data = read_secret_data(core_api, namespace, secret_ref["name"])
            except ValueError as e:
                raise kopf.TemporaryError(str(e), delay=30) from e
            desired.access_key = data.get(SECRET_KEY_ACCESS_KEY_ID, "")
            desired.secret_key = data.get(SECRET_KEY_SECRET_ACCESS_KEY, "")
        return desired

    def reconcile(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Reconcile Key resource."""
        core_api = get_core_client()
        desired = self._desired(spec, meta, core_api)

        with trace_span("reconcile_key", kind=KIND_KEY, attributes={"key.owner": desired.owner}):
            emit_validate_succeeded(meta)
            reconciler = KeyReconciler(self.resolve_admin_client(spec, meta, status, patch))

            try:
                if not status.get("created"):
                    observed = self._create(reconciler, desired, spec, meta)
                else:
                    observed = self._maintain(reconciler, desired, meta, status, core_api)
            except RGWAdminError as e:
                condition_fn = None if status.get("created") else set_creation_failed_condition
                self.handle_reconciliation_error(meta, status, patch, e, condition_fn)

            secret_name = credentials_secret_name(meta.get("name", "unknown"))
            write_credentials_secret(
                core_api,
                meta.get("namespace", "default"),
                secret_name,
                observed.access_key,
                observed.secret_key,
                owner_references=[owner_reference(KIND_KEY, meta)],
            )

            conditions = set_ready_condition(
                status.get("conditions", []), True, f"Key {observed.access_key} is ready"
            )
            self.update_resource_status(patch, meta, True, {
                "user": observed.user,
                "subuser": observed.subuser,
                "accessKey": observed.access_key,
                "secretName": secret_name,
                "created": True,
                "lastSyncTime": datetime.now(timezone.utc).isoformat(),
                "conditions": conditions,
            })

    def _create(
        self,
        reconciler: KeyReconciler,
        desired: KeyState,
        spec: dict[str, Any],
        meta: dict[str, Any],
    ) -> KeyState:
        adopt_access_key = spec.get("adoptAccessKey")
        if adopt_access_key:
            observed = reconciler.import_(adopt_access_key)
            if observed.owner != desired.owner:
                # The owner of an existing key cannot be changed
                reconciler.update(desired)
            self.log_info(meta, f"Adopted key {observed.access_key}", reason="KeyAdopted")
            return observed

        observed = reconciler.create(desired)
        emit_key_created(meta, observed.access_key, observed.owner)
        return observed

    def _maintain(
        self,
        reconciler: KeyReconciler,
        desired: KeyState,
        meta: dict[str, Any],
        status: dict[str, Any],
        core_api: Any,
    ) -> KeyState:
        current = KeyState(
            user=status.get("user", ""),
            subuser=status.get("subuser") or None,
            access_key=status.get("accessKey", ""),
        )
        if current.owner != desired.owner:
            reconciler.update(desired)

        if desired.access_key and desired.access_key != current.access_key:
            self.record_drift(
                meta,
                "accessKey",
                f"credentials secret now holds {desired.access_key}, rotating {current.access_key}",
            )
            self._delete_key(reconciler, current, meta)
            return self._recreate(reconciler, desired, meta)

        secret_name = status.get("secretName") or credentials_secret_name(meta.get("name", "unknown"))
        try:
            data = read_secret_data(core_api, meta.get("namespace", "default"), secret_name)
        except ValueError:
            # The gateway still holds the secret key; match on access key alone
            self.record_drift(
                meta, "secretName", f"Secret {secret_name} is missing, recapturing {current.access_key}"
            )
            try:
                observed = reconciler.import_(current.access_key)
            except NotFound:
                return self._recreate(reconciler, desired, meta)
            if observed.owner != desired.owner:
                reconciler.update(desired)
            return observed
        current.secret_key = data.get(SECRET_KEY_SECRET_ACCESS_KEY, "")

        try:
            return reconciler.read(current)
        except NotFound:
            self.record_drift(meta, "accessKey", f"Key {current.access_key} is gone, recreating")
            return self._recreate(reconciler, desired, meta)

    def _recreate(self, reconciler: KeyReconciler, desired: KeyState, meta: dict[str, Any]) -> KeyState:
        observed = reconciler.create(desired)
        emit_key_created(meta, observed.access_key, observed.owner)
        return observed

    def _delete_key(self, reconciler: KeyReconciler, state: KeyState, meta: dict[str, Any]) -> None:
        """Remove a key, treating an already missing key as deleted."""
        try:
            reconciler.delete(state)
        except RGWAdminError as e:
            if not is_gone(e):
                raise
            self.log_warning(meta, f"Key {state.access_key} was already gone", reason="AlreadyDeleted")
            return
        emit_key_deleted(meta, state.access_key, state.owner)

    def delete(
        self,
        spec: dict[str, Any],
        meta: dict[str, Any],
        status: dict[str, Any],
        patch: kopf.Patch,
    ) -> None:
        """Handle Key resource deletion."""
        access_key = status.get("accessKey")
        self.log_info(meta, f"Key {access_key} is being deleted", event="deletion", reason="Deletion")

        if access_key and status.get("created"):
            state = KeyState(
                user=status.get("user") or spec.get("user", ""),
                subuser=status.get("subuser") or None,
                access_key=access_key,
            )
            reconciler = KeyReconciler(self.resolve_admin_client(spec, meta, status, patch))
            try:
                self._delete_key(reconciler, state, meta)
            except RGWAdminError as e:
                self.handle_reconciliation_error(meta, status, patch, e)

            delete_secret(
                get_core_client(),
                meta.get("namespace", "default"),
                status.get("secretName") or credentials_secret_name(meta.get("name", "unknown")),
            )

        self.remove_finalizer(meta, patch)


# Global handler instance
_handler = KeyHandler()


@kopf.on.create(API_GROUP_VERSION, KIND_KEY)
@kopf.on.update(API_GROUP_VERSION, KIND_KEY)
@kopf.on.resume(API_GROUP_VERSION, KIND_KEY)
@kopf.timer(API_GROUP_VERSION, KIND_KEY, interval=int(os.getenv("DRIFT_CHECK_INTERVAL_SECONDS", "300")))
def handle_key(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Key resource reconciliation."""
    _handler.ensure_finalizer(meta, patch)
    _handler.reconcile_with_metrics(meta, lambda: _handler.reconcile(spec, meta, status, patch))


@kopf.on.delete(API_GROUP_VERSION, KIND_KEY)
def handle_key_delete(
    spec: dict[str, Any],
    meta: dict[str, Any],
    status: dict[str, Any],
    patch: kopf.Patch,
    **kwargs: Any,
) -> None:
    """Handle Key resource deletion."""
    _handler.delete(spec, meta, status, patch)
