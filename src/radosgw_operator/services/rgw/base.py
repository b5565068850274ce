"""Admin API interface used by the reconcilers."""

from __future__ import annotations

from typing import Protocol

from .models import Key, KeySpec, Subuser, SubuserAccess, User


class AdminAPI(Protocol):
    """Protocol defining the radosgw admin operations the reconcilers need."""

    def info(self) -> str:
        """Return the cluster id, verifying the endpoint and credentials."""
        ...

    def get_user(self, uid: str) -> User:
        """Fetch a user with its keys and subusers."""
        ...

    def list_users(self) -> list[str]:
        """List all user ids."""
        ...

    def create_user(self, uid: str, display_name: str) -> User:
        """Create a user."""
        ...

    def modify_user(self, uid: str, display_name: str) -> User:
        """Change a user's display name."""
        ...

    def remove_user(self, uid: str, purge_data: bool = False) -> None:
        """Remove a user."""
        ...

    def create_subuser(
        self,
        uid: str,
        subuser: str,
        access: SubuserAccess | str,
        generate_secret: bool = False,
    ) -> list[Subuser]:
        """Create a subuser under a user."""
        ...

    def modify_subuser(self, uid: str, subuser: str, access: SubuserAccess | str) -> list[Subuser]:
        """Change a subuser's access level."""
        ...

    def remove_subuser(self, uid: str, subuser: str) -> None:
        """Remove a subuser."""
        ...

    def create_key(self, spec: KeySpec) -> list[Key]:
        """Create a key and return the owner's full key set."""
        ...

    def remove_key(self, spec: KeySpec) -> None:
        """Remove a key."""
        ...
