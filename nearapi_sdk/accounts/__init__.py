"""
Account operations and read-only queries.
"""
from .access_keys import full_access_key, function_call_access_key
from .account import (
    DEFAULT_DELEGATE_TTL,
    Account,
    get_access_key_list,
    get_account_balance,
    state,
    view_function,
    view_state,
)

__all__ = [
    "Account",
    "DEFAULT_DELEGATE_TTL",
    "full_access_key",
    "function_call_access_key",
    "get_access_key_list",
    "get_account_balance",
    "state",
    "view_function",
    "view_state",
]
