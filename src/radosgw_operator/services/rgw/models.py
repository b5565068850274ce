"""Models for radosgw admin API entities."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ...constants import KEY_TYPE_S3
from .exceptions import InvalidIdentifier, MalformedResponse

OWNER_SEPARATOR = ":"


class SubuserAccess(str, Enum):
    """Subuser access levels as accepted by write operations."""

    NONE = "none"
    READ = "read"
    WRITE = "write"
    READ_WRITE = "readwrite"
    FULL = "full"


# Read operations echo access levels from a different vocabulary.
REPLY_ACCESS: dict[str, SubuserAccess] = {
    "<none>": SubuserAccess.NONE,
    "read": SubuserAccess.READ,
    "write": SubuserAccess.WRITE,
    "read-write": SubuserAccess.READ_WRITE,
    "full-control": SubuserAccess.FULL,
}


def normalize_access(value: str) -> str:
    """Map a reply-form access level to its write form.

    Values outside the reply vocabulary are returned unchanged so that
    unknown levels do not fail a whole reconciliation.
    """
    access = REPLY_ACCESS.get(value)
    if access is None:
        return value
    return access.value


def access_value(access: SubuserAccess | str) -> str:
    """Render an access level as the plain string the admin API expects."""
    if isinstance(access, SubuserAccess):
        return access.value
    return access


def join_owner(user: str, subuser: str | None = None) -> str:
    """Compose an owner identity from a user id and optional subuser name."""
    if subuser:
        return f"{user}{OWNER_SEPARATOR}{subuser}"
    return user


def split_owner(owner: str) -> tuple[str, str | None]:
    """Split an owner identity on its first colon."""
    user, sep, subuser = owner.partition(OWNER_SEPARATOR)
    if not sep:
        return owner, None
    return user, subuser


def strip_parent_prefix(name: str, parent: str) -> str:
    """Remove a single ``parent:`` prefix from a fully qualified subuser name."""
    prefix = f"{parent}{OWNER_SEPARATOR}"
    if name.startswith(prefix):
        return name[len(prefix):]
    return name


def split_composite_id(external_id: str) -> tuple[str, str]:
    """Parse a ``parent:child`` identifier.

    Raises:
        InvalidIdentifier: If either part is missing
    """
    parent, sep, child = external_id.partition(OWNER_SEPARATOR)
    if not sep or not parent or not child:
        raise InvalidIdentifier(
            f"invalid identifier {external_id!r}, expected format <user>:<subuser>"
        )
    return parent, child


@dataclass
class Key:
    """An S3 key pair as reported by the admin API."""

    user: str
    access_key: str
    secret_key: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Key:
        try:
            return cls(
                user=data["user"],
                access_key=data["access_key"],
                secret_key=data.get("secret_key", ""),
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise MalformedResponse(f"could not decode key: {e!r}") from e


@dataclass
class Subuser:
    """A subuser as reported by the admin API.

    ``name`` is fully qualified (``parent:local``) and ``access`` is in reply form.
    """

    name: str
    access: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Subuser:
        try:
            return cls(name=data["id"], access=data.get("permissions", ""))
        except (KeyError, TypeError, AttributeError) as e:
            raise MalformedResponse(f"could not decode subuser: {e!r}") from e


@dataclass
class User:
    """A radosgw user with its keys and subusers."""

    user_id: str
    display_name: str
    keys: list[Key] = field(default_factory=list)
    subusers: list[Subuser] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> User:
        try:
            return cls(
                user_id=data["user_id"],
                display_name=data.get("display_name", ""),
                keys=[Key.from_dict(k) for k in data.get("keys") or []],
                subusers=[Subuser.from_dict(s) for s in data.get("subusers") or []],
            )
        except (KeyError, TypeError, AttributeError) as e:
            raise MalformedResponse(f"could not decode user: {e!r}") from e


@dataclass
class KeySpec:
    """Parameters for creating or removing a key."""

    uid: str
    subuser: str | None = None
    access_key: str | None = None
    secret_key: str | None = None
    key_type: str = KEY_TYPE_S3
    generate_key: bool = False

    def to_params(self) -> dict[str, str]:
        """Render the key request as admin API query parameters, omitting blanks."""
        params = {"uid": self.uid, "key-type": self.key_type}
        if self.subuser:
            params["subuser"] = self.subuser
        if self.access_key:
            params["access-key"] = self.access_key
        if self.secret_key:
            params["secret-key"] = self.secret_key
        if self.generate_key:
            params["generate-key"] = "true"
        return params
