"""Utilities for emitting Kubernetes events."""

from __future__ import annotations

from typing import Any

import kopf

from ..constants import (
    EVENT_REASON_DRIFT_DETECTED,
    EVENT_REASON_KEY_CREATED,
    EVENT_REASON_KEY_DELETED,
    EVENT_REASON_RECONCILE_FAILED,
    EVENT_REASON_RECONCILE_STARTED,
    EVENT_REASON_SUBUSER_CREATED,
    EVENT_REASON_SUBUSER_DELETED,
    EVENT_REASON_SUBUSER_UPDATED,
    EVENT_REASON_USER_CREATED,
    EVENT_REASON_USER_UPDATED,
    EVENT_REASON_VALIDATE_FAILED,
    EVENT_REASON_VALIDATE_SUCCEEDED,
)


def emit_event(
    meta: dict[str, Any],
    reason: str,
    message: str,
    type_: str = "Normal",
) -> None:
    """Emit a Kubernetes event.

    Args:
        meta: Resource metadata
        reason: Event reason
        message: Event message
        type_: Event type (Normal or Warning)
    """
    kopf.event(
        meta,
        reason=reason,
        message=message,
        type=type_,
    )


def emit_reconcile_started(meta: dict[str, Any]) -> None:
    """Emit reconcile started event."""
    emit_event(meta, EVENT_REASON_RECONCILE_STARTED, "Reconciliation started")


def emit_reconcile_failed(meta: dict[str, Any], message: str) -> None:
    """Emit reconcile failed event."""
    emit_event(meta, EVENT_REASON_RECONCILE_FAILED, message, type_="Warning")


def emit_validate_succeeded(meta: dict[str, Any]) -> None:
    """Emit validation succeeded event."""
    emit_event(meta, EVENT_REASON_VALIDATE_SUCCEEDED, "Validation succeeded")


def emit_validate_failed(meta: dict[str, Any], message: str) -> None:
    """Emit validation failed event."""
    emit_event(meta, EVENT_REASON_VALIDATE_FAILED, message, type_="Warning")


def emit_user_created(meta: dict[str, Any], user_id: str) -> None:
    emit_event(meta, EVENT_REASON_USER_CREATED, f"User {user_id} created")


def emit_user_updated(meta: dict[str, Any], user_id: str) -> None:
    emit_event(meta, EVENT_REASON_USER_UPDATED, f"User {user_id} updated")


def emit_subuser_created(meta: dict[str, Any], name: str) -> None:
    emit_event(meta, EVENT_REASON_SUBUSER_CREATED, f"Subuser {name} created")


def emit_subuser_updated(meta: dict[str, Any], name: str) -> None:
    emit_event(meta, EVENT_REASON_SUBUSER_UPDATED, f"Subuser {name} updated")


def emit_subuser_deleted(meta: dict[str, Any], name: str) -> None:
    emit_event(meta, EVENT_REASON_SUBUSER_DELETED, f"Subuser {name} deleted")


def emit_key_created(meta: dict[str, Any], access_key: str, owner: str) -> None:
    emit_event(meta, EVENT_REASON_KEY_CREATED, f"Key {access_key} created for {owner}")


def emit_key_deleted(meta: dict[str, Any], access_key: str, owner: str) -> None:
    emit_event(meta, EVENT_REASON_KEY_DELETED, f"Key {access_key} of {owner} deleted")


def emit_drift_detected(meta: dict[str, Any], field: str, message: str) -> None:
    """Emit a warning when observed state diverges from the declared state."""
    emit_event(meta, EVENT_REASON_DRIFT_DETECTED, f"{field}: {message}", type_="Warning")
