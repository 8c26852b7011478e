"""
Signer abstraction for the NEAR API SDK.

Anything that can expose a public key and sign bytes can authorize
transactions: in-memory keys, hardware wallets, remote KMS backends or test
doubles. Implementations must raise ``SigningFailed`` when the key material is
unavailable or the backend refuses to sign.
"""
from typing import Protocol, runtime_checkable

from ..crypto import PublicKey, Signature
from .local import InMemorySigner

__all__ = ["Signer", "InMemorySigner"]


@runtime_checkable
class Signer(Protocol):
    """Protocol for transaction signers"""

    def public_key(self) -> PublicKey:
        """Return the public key matching the signing key"""
        ...

    def sign(self, data: bytes) -> Signature:
        """Sign data and return the signature"""
        ...
