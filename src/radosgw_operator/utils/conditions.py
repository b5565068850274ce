"""Utilities for managing Kubernetes conditions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from ..constants import (
    COND_AUTH_VALID,
    COND_CREATION_FAILED,
    COND_ENDPOINT_REACHABLE,
    COND_PROVIDER_NOT_READY,
    COND_READY,
)


def update_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: str,
    reason: str,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Update or add a condition to the conditions list.

    Args:
        conditions: List of existing conditions
        condition_type: Type of condition
        status: Status of condition ("True", "False", "Unknown")
        reason: Reason for the condition
        message: Human-readable message
        observed_generation: Generation when condition was observed

    Returns:
        Updated list of conditions
    """
    now = datetime.now(timezone.utc).isoformat()

    existing_idx = next(
        (idx for idx, cond in enumerate(conditions) if cond.get("type") == condition_type),
        None,
    )

    new_condition = {
        "type": condition_type,
        "status": status,
        "reason": reason,
        "message": message,
        "lastTransitionTime": now,
    }
    if observed_generation is not None:
        new_condition["observedGeneration"] = observed_generation

    if existing_idx is not None:
        existing = conditions[existing_idx]
        # lastTransitionTime only moves when the status flips
        if existing.get("status") == status:
            new_condition["lastTransitionTime"] = existing.get("lastTransitionTime", now)
        conditions[existing_idx] = new_condition
    else:
        conditions.append(new_condition)

    return conditions


def _set_bool_condition(
    conditions: list[dict[str, Any]],
    condition_type: str,
    status: bool,
    reasons: tuple[str, str],
    message: str,
    observed_generation: int | None,
) -> list[dict[str, Any]]:
    true_reason, false_reason = reasons
    return update_condition(
        conditions,
        condition_type,
        "True" if status else "False",
        true_reason if status else false_reason,
        message,
        observed_generation,
    )


def set_ready_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the Ready condition."""
    return _set_bool_condition(
        conditions, COND_READY, status, ("Ready", "NotReady"), message, observed_generation
    )


def set_provider_not_ready_condition(
    conditions: list[dict[str, Any]],
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the ProviderNotReady condition."""
    return update_condition(
        conditions,
        COND_PROVIDER_NOT_READY,
        "True",
        "ProviderNotReady",
        message,
        observed_generation,
    )


def set_auth_valid_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the AuthValid condition."""
    return _set_bool_condition(
        conditions,
        COND_AUTH_VALID,
        status,
        ("AuthValid", "AuthInvalid"),
        message,
        observed_generation,
    )


def set_endpoint_reachable_condition(
    conditions: list[dict[str, Any]],
    status: bool,
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the EndpointReachable condition."""
    return _set_bool_condition(
        conditions,
        COND_ENDPOINT_REACHABLE,
        status,
        ("EndpointReachable", "EndpointUnreachable"),
        message,
        observed_generation,
    )


def set_creation_failed_condition(
    conditions: list[dict[str, Any]],
    message: str,
    observed_generation: int | None = None,
) -> list[dict[str, Any]]:
    """Set the CreationFailed condition."""
    return update_condition(
        conditions,
        COND_CREATION_FAILED,
        "True",
        "CreationFailed",
        message,
        observed_generation,
    )
