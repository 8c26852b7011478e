"""
Access key constructors.
"""
from typing import Optional, Sequence

from ..transactions.actions import AccessKey, FullAccessPermission, FunctionCallPermission


def full_access_key() -> AccessKey:
    """A new access key allowed to sign any transaction."""
    return AccessKey(nonce=0, permission=FullAccessPermission())


def function_call_access_key(
    allowance: Optional[int],
    receiver_id: str,
    method_names: Sequence[str]
) -> AccessKey:
    """
    A new access key limited to calling ``receiver_id``.

    Args:
        allowance: Maximum yoctoNEAR the key may spend on gas (None for unlimited)
        receiver_id: Contract the key may call
        method_names: Callable methods; empty allows every method

    Returns:
        AccessKey with nonce 0
    """
    permission = FunctionCallPermission(
        receiver_id=receiver_id,
        method_names=method_names,
        allowance=allowance,
    )
    return AccessKey(nonce=0, permission=permission)
