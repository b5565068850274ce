"""Reconciler for radosgw subusers."""

from __future__ import annotations

import logging
from dataclasses import replace

from ..constants import KIND_SUBUSER
from ..services.rgw.base import AdminAPI
from ..services.rgw.exceptions import NotFound, annotate
from ..services.rgw.models import (
    Subuser,
    normalize_access,
    split_composite_id,
    strip_parent_prefix,
)
from ..tracing import trace_span
from .state import SubuserState

logger = logging.getLogger(__name__)


def _observed(user_id: str, subuser: Subuser) -> SubuserState:
    """Map a wire subuser back to the declarative shape.

    Read operations report access in the reply vocabulary; normalizing it
    keeps observed state comparable to the declared one.
    """
    return SubuserState(
        user_id=user_id,
        subuser=strip_parent_prefix(subuser.name, user_id),
        access=normalize_access(subuser.access),
    )


class SubuserReconciler:
    """Create, read, update, delete and import subusers of a parent user.

    Keys are never generated here; they are managed by ``KeyReconciler``.
    """

    def __init__(self, client: AdminAPI):
        self.client = client

    def create(self, desired: SubuserState) -> SubuserState:
        """Create the subuser and return the desired record.

        The create call does not echo the subuser, so there is nothing to
        normalize from the response.
        """
        with trace_span("create_subuser", kind=KIND_SUBUSER, attributes={"subuser.name": desired.qualified_name}):
            with annotate("create subuser", desired.qualified_name):
                self.client.create_subuser(
                    desired.user_id,
                    desired.subuser,
                    desired.access,
                    generate_secret=False,
                )
            logger.info(f"Created subuser {desired.qualified_name}")
            return replace(desired)

    def read(self, state: SubuserState) -> SubuserState:
        """Refresh a subuser by its local name.

        Raises:
            NotFound: If the parent user no longer has this subuser
        """
        with trace_span("read_subuser", kind=KIND_SUBUSER, attributes={"subuser.name": state.qualified_name}):
            with annotate("read subuser", state.qualified_name):
                user = self.client.get_user(state.user_id)
                for subuser in user.subusers:
                    if strip_parent_prefix(subuser.name, user.user_id) == state.subuser:
                        return _observed(user.user_id, subuser)
                raise NotFound(f"subuser {state.subuser!r} not found on user {user.user_id!r}")

    def update(self, desired: SubuserState) -> SubuserState:
        """Change the access level; subusers are never renamed in place."""
        with trace_span("update_subuser", kind=KIND_SUBUSER, attributes={"subuser.name": desired.qualified_name}):
            with annotate("update subuser", desired.qualified_name):
                self.client.modify_subuser(desired.user_id, desired.subuser, desired.access)
            logger.info(f"Updated subuser {desired.qualified_name}")
            return replace(desired)

    def delete(self, state: SubuserState) -> None:
        with trace_span("delete_subuser", kind=KIND_SUBUSER, attributes={"subuser.name": state.qualified_name}):
            with annotate("delete subuser", state.qualified_name):
                self.client.remove_subuser(state.user_id, state.subuser)
            logger.info(f"Deleted subuser {state.qualified_name}")

    def import_(self, external_id: str) -> SubuserState:
        """Adopt an existing subuser from a ``user:subuser`` identifier.

        Unlike ``read``, the match is made on the fully qualified name.

        Raises:
            InvalidIdentifier: If the identifier is not ``user:subuser``
            NotFound: If no subuser has that exact name
        """
        with trace_span("import_subuser", kind=KIND_SUBUSER, attributes={"subuser.name": external_id}):
            with annotate("import subuser", external_id):
                user_id, _ = split_composite_id(external_id)
                user = self.client.get_user(user_id)
                for subuser in user.subusers:
                    if subuser.name == external_id:
                        return _observed(user.user_id, subuser)
                raise NotFound(f"subuser {external_id!r} not found")
