"""Declarative records exchanged with the configuration host."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..services.rgw.models import Key, SubuserAccess, join_owner, split_owner


@dataclass
class KeyState:
    """Declared or observed S3 key pair.

    Blank ``access_key`` / ``secret_key`` in a desired record ask the
    gateway to generate the pair.
    """

    user: str
    subuser: str | None = None
    access_key: str = ""
    secret_key: str = ""

    @property
    def owner(self) -> str:
        return join_owner(self.user, self.subuser)

    @classmethod
    def from_key(cls, key: Key) -> KeyState:
        """Build an observed record, splitting a ``user:subuser`` owner."""
        user, subuser = split_owner(key.user)
        return cls(
            user=user,
            subuser=subuser,
            access_key=key.access_key,
            secret_key=key.secret_key,
        )


@dataclass
class UserState:
    """Declared or observed user."""

    user_id: str
    display_name: str
    keys: list[KeyState] = field(default_factory=list)


@dataclass
class SubuserState:
    """Declared or observed subuser; ``subuser`` holds the local name only."""

    user_id: str
    subuser: str
    access: SubuserAccess | str

    @property
    def qualified_name(self) -> str:
        return join_owner(self.user_id, self.subuser)
