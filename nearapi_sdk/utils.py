"""
Utility functions for the NEAR API SDK.
"""
import base64
import hashlib
import json
import re
from typing import Any, Union

import base58

from .exceptions import InvalidAccountIdError

U64_MAX = 2 ** 64 - 1
U128_MAX = 2 ** 128 - 1

ACCOUNT_ID_MIN_LENGTH = 2
ACCOUNT_ID_MAX_LENGTH = 64
_ACCOUNT_ID_RE = re.compile(r"^(([a-z\d]+[\-_])*[a-z\d]+\.)*([a-z\d]+[\-_])*[a-z\d]+$")


def sha256(data: bytes) -> bytes:
    """
    Calculate the SHA-256 digest of bytes.

    Args:
        data: Bytes to hash

    Returns:
        32-byte digest
    """
    return hashlib.sha256(data).digest()


def b58encode(data: bytes) -> str:
    """Encode bytes as a base58 string."""
    return base58.b58encode(data).decode("ascii")


def b58decode(value: str) -> bytes:
    """Decode a base58 string to bytes."""
    return base58.b58decode(value)


def b64encode(data: bytes) -> str:
    """Encode bytes as a standard base64 string."""
    return base64.b64encode(data).decode("ascii")


def b64decode(value: str) -> bytes:
    """Decode a standard base64 string to bytes."""
    return base64.b64decode(value)


def validate_account_id(account_id: str) -> str:
    """
    Validate a NEAR account id.

    Account ids are 2-64 characters long and made of lowercase alphanumeric
    parts separated by ``.``, ``-`` or ``_`` (no leading, trailing or
    repeated separators). Implicit accounts (64 hex characters) pass the
    same rules.

    Args:
        account_id: Account id to validate

    Returns:
        The account id, unchanged

    Raises:
        InvalidAccountIdError: If the account id is invalid
    """
    if not isinstance(account_id, str):
        raise InvalidAccountIdError(f"Account id must be a string, got {type(account_id).__name__}")

    if not ACCOUNT_ID_MIN_LENGTH <= len(account_id) <= ACCOUNT_ID_MAX_LENGTH:
        raise InvalidAccountIdError(
            f"Account id must be {ACCOUNT_ID_MIN_LENGTH}-{ACCOUNT_ID_MAX_LENGTH} characters long: {account_id!r}"
        )

    if not _ACCOUNT_ID_RE.fullmatch(account_id):
        raise InvalidAccountIdError(f"Invalid account id: {account_id!r}")

    return account_id


def is_uint(value: Any, maximum: int) -> bool:
    """Check that value is a non-negative int no larger than maximum (bools excluded)."""
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= maximum


def encode_args(args: Union[bytes, bytearray, str, dict, list, None]) -> bytes:
    """
    Normalize function call arguments to bytes.

    Bytes pass through unchanged and strings are taken as already-encoded
    JSON text. Anything else is serialized as compact UTF-8 JSON, which is
    what NEAR contracts expect by default.

    Args:
        args: Raw bytes, JSON text, or a JSON-serializable value

    Returns:
        Argument bytes
    """
    if isinstance(args, (bytes, bytearray)):
        return bytes(args)
    if isinstance(args, str):
        return args.encode("utf-8")
    if args is None:
        args = {}
    return json.dumps(args, separators=(",", ":")).encode("utf-8")
