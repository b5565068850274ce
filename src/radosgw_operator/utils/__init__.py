"""Utility functions for the radosgw operator."""

from .cache import (
    get_cached_object,
    invalidate_cache,
    make_cache_key,
    set_cached_object,
)
from .conditions import (
    set_provider_not_ready_condition,
    set_ready_condition,
    update_condition,
)
from .events import emit_event
from .secrets import get_secret_value, read_secret_data, write_credentials_secret

__all__ = [
    "update_condition",
    "set_ready_condition",
    "set_provider_not_ready_condition",
    "emit_event",
    "get_secret_value",
    "read_secret_data",
    "write_credentials_secret",
    "get_cached_object",
    "set_cached_object",
    "invalidate_cache",
    "make_cache_key",
]
