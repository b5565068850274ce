"""Reconcilers translating declarative identity records to admin API calls."""

from .key import KeyReconciler, select_new_key
from .state import KeyState, SubuserState, UserState
from .subuser import SubuserReconciler
from .user import UserReconciler

__all__ = [
    "UserReconciler",
    "SubuserReconciler",
    "KeyReconciler",
    "select_new_key",
    "UserState",
    "SubuserState",
    "KeyState",
]
