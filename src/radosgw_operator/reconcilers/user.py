"""Reconciler for radosgw users."""

from __future__ import annotations

import logging

from ..constants import KIND_USER
from ..services.rgw.base import AdminAPI
from ..services.rgw.exceptions import annotate
from ..services.rgw.models import User
from ..tracing import trace_span
from .state import KeyState, UserState

logger = logging.getLogger(__name__)


def _observed(user: User, with_keys: bool = False) -> UserState:
    keys = [KeyState.from_key(k) for k in user.keys] if with_keys else []
    return UserState(user_id=user.user_id, display_name=user.display_name, keys=keys)


class UserReconciler:
    """Create, read, update and delete top-level radosgw accounts.

    The gateway is authoritative for both the id and the display name, so
    every result is copied back from the response rather than from the
    desired record.
    """

    def __init__(self, client: AdminAPI):
        self.client = client

    def create(self, desired: UserState) -> UserState:
        with trace_span("create_user", kind=KIND_USER, attributes={"user.id": desired.user_id}):
            with annotate("create user", desired.user_id):
                user = self.client.create_user(desired.user_id, desired.display_name)
            logger.info(f"Created user {user.user_id}")
            return _observed(user)

    def read(self, user_id: str) -> UserState:
        with trace_span("read_user", kind=KIND_USER, attributes={"user.id": user_id}):
            with annotate("read user", user_id):
                user = self.client.get_user(user_id)
            return _observed(user, with_keys=True)

    def update(self, desired: UserState) -> UserState:
        with trace_span("update_user", kind=KIND_USER, attributes={"user.id": desired.user_id}):
            with annotate("update user", desired.user_id):
                user = self.client.modify_user(desired.user_id, desired.display_name)
            logger.info(f"Updated user {user.user_id}")
            return _observed(user)

    def delete(self, user_id: str) -> None:
        """Remove the user; bucket data owned by it is left in place."""
        with trace_span("delete_user", kind=KIND_USER, attributes={"user.id": user_id}):
            with annotate("delete user", user_id):
                self.client.remove_user(user_id, purge_data=False)
            logger.info(f"Deleted user {user_id}")

    def import_(self, external_id: str) -> UserState:
        """Adopt an existing user; the external id is the user id."""
        return self.read(external_id)
