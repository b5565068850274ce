"""Reconciler for radosgw S3 keys."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace

from ..constants import KEY_TYPE_S3, KIND_KEY
from ..services.rgw.base import AdminAPI
from ..services.rgw.exceptions import NotFound, UnsupportedOperation, annotate
from ..services.rgw.models import Key, KeySpec
from ..tracing import trace_span
from .state import KeyState

logger = logging.getLogger(__name__)


def select_new_key(seen: Iterable[str], keys: Iterable[Key]) -> Key | None:
    """Return the first key whose access key was not present before creation.

    Args:
        seen: Access keys the owner held before the create call
        keys: Key set returned by the create call

    Returns:
        The new key, or None when every returned key was already known
        (for example when an existing key was regenerated in place)
    """
    seen = set(seen)
    for key in keys:
        if key.access_key not in seen:
            return key
    return None


class KeyReconciler:
    """Create, read, delete and import S3 keys of users and subusers.

    Keys are immutable: rotating secret material is a delete followed by
    a create, so that a compromised access key is always superseded.
    """

    def __init__(self, client: AdminAPI):
        self.client = client

    def create(self, desired: KeyState) -> KeyState:
        """Create a key, generating both halves when either is blank.

        The admin API returns the owner's whole key set, so the owner's keys
        are snapshotted first and the new key is found by set difference.
        """
        with trace_span("create_key", kind=KIND_KEY, attributes={"key.owner": desired.owner}):
            with annotate("create key", desired.owner):
                owner = self.client.get_user(desired.user)
                seen = {key.access_key for key in owner.keys}

                spec = KeySpec(
                    uid=desired.user,
                    subuser=desired.subuser,
                    access_key=desired.access_key or None,
                    secret_key=desired.secret_key or None,
                    key_type=KEY_TYPE_S3,
                    generate_key=not desired.access_key or not desired.secret_key,
                )
                keys = self.client.create_key(spec)

            new_key = select_new_key(seen, keys)
            if new_key is None:
                logger.warning(
                    f"Could not identify the key created for {desired.owner}, keeping declared values"
                )
                return replace(desired)

            logger.info(f"Created key {new_key.access_key} for {new_key.user}")
            return KeyState.from_key(new_key)

    def read(self, state: KeyState) -> KeyState:
        """Refresh a key by matching owner, access key and secret key.

        Raises:
            NotFound: If the owner no longer holds the key pair
        """
        with trace_span("read_key", kind=KIND_KEY, attributes={"key.owner": state.owner}):
            with annotate("read key", state.owner):
                owner = self.client.get_user(state.user)
                for key in owner.keys:
                    if (
                        key.user == state.owner
                        and key.access_key == state.access_key
                        and key.secret_key == state.secret_key
                    ):
                        return KeyState.from_key(key)
                raise NotFound(f"key {state.access_key!r} not found on {state.owner!r}")

    def update(self, desired: KeyState) -> KeyState:
        """Keys cannot be changed in place.

        Raises:
            UnsupportedOperation: Always
        """
        with annotate("update key", desired.owner):
            raise UnsupportedOperation(
                "keys cannot be updated in place, delete and recreate the key to rotate it"
            )

    def delete(self, state: KeyState) -> None:
        with trace_span("delete_key", kind=KIND_KEY, attributes={"key.owner": state.owner}):
            with annotate("delete key", state.owner):
                self.client.remove_key(
                    KeySpec(
                        uid=state.user,
                        subuser=state.subuser,
                        access_key=state.access_key,
                        key_type=KEY_TYPE_S3,
                    )
                )
            logger.info(f"Deleted key {state.access_key} of {state.owner}")

    def import_(self, access_key: str) -> KeyState:
        """Adopt an existing key by scanning every user's key set.

        Raises:
            NotFound: If no user holds the access key
        """
        with trace_span("import_key", kind=KIND_KEY):
            with annotate("import key", access_key):
                for user_id in self.client.list_users():
                    user = self.client.get_user(user_id)
                    for key in user.keys:
                        if key.access_key == access_key:
                            return KeyState.from_key(key)
                raise NotFound(f"key {access_key!r} not found on any user")
