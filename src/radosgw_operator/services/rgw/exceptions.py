"""Errors raised by the radosgw admin client and the reconcilers."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator


class ConfigurationError(ValueError):
    """Admin client configuration is missing or invalid."""


class RGWAdminError(Exception):
    """Base exception for all admin API and reconciliation failures.

    Attributes:
        detail: Underlying failure description, kept verbatim
        operation: Reconciler operation that failed (set by ``annotate``)
        entity_id: Identifier of the entity the operation was attempted on
    """

    def __init__(self, detail: str):
        self.detail = detail
        self.operation: str | None = None
        self.entity_id: str | None = None
        super().__init__(detail)

    def __str__(self) -> str:
        if self.operation and self.entity_id is not None:
            return f"{self.operation} {self.entity_id!r}: {self.detail}"
        return self.detail


class TransportError(RGWAdminError):
    """The request could not be sent or no response was received."""


class DeadlineExceeded(TransportError):
    """The request did not complete within its timeout."""


class UnexpectedStatus(RGWAdminError):
    """The admin API answered with a non-2xx status code.

    Attributes:
        status_code: HTTP status code
        body: Raw response body
    """

    def __init__(self, status_code: int, body: str):
        self.status_code = status_code
        self.body = body
        super().__init__(f"unexpected response code {status_code}: {body}")


class MalformedResponse(RGWAdminError):
    """The response body did not decode into the expected shape."""


class InvalidResponse(RGWAdminError):
    """The response decoded but failed a domain postcondition."""


class NotFound(RGWAdminError):
    """The entity does not exist on the gateway."""


class InvalidIdentifier(RGWAdminError):
    """A composite identifier could not be parsed."""


class UnsupportedOperation(RGWAdminError):
    """The operation is not supported for this entity type."""


@contextmanager
def annotate(operation: str, entity_id: str) -> Iterator[None]:
    """Attach the operation name and entity id to admin errors raised in the block.

    The original exception object is re-raised so callers can still tell
    error classes apart.
    """
    try:
        yield
    except RGWAdminError as e:
        if e.operation is None:
            e.operation = operation
            e.entity_id = entity_id
        raise
