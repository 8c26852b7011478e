"""
In-memory signer backed by a local key pair.
"""
import json
import logging
from pathlib import Path
from typing import Optional, Union

from ..crypto import KeyPair, KeyType, PublicKey, Signature
from ..exceptions import InvalidKeyError, SigningFailed

logger = logging.getLogger(__name__)


class InMemorySigner:
    """
    Signer holding its key pair in process memory.

    Suitable for scripts, backends and tests. For production keys prefer a
    signer whose secret never leaves a hardware or KMS boundary.
    """

    def __init__(self, account_id: str, key_pair: KeyPair):
        """
        Initialize the signer

        Args:
            account_id: Account the key belongs to
            key_pair: Key pair used for signing
        """
        self.account_id = account_id
        self.key_pair = key_pair

    @classmethod
    def from_secret_key(cls, account_id: str, secret_key: str) -> "InMemorySigner":
        """
        Create a signer from a secret key string.

        Args:
            account_id: Account the key belongs to
            secret_key: Secret key, e.g. ``ed25519:<base58>``

        Raises:
            InvalidKeyError: If the secret key is malformed
        """
        return cls(account_id, KeyPair.from_string(secret_key))

    @classmethod
    def from_seed(cls, account_id: str, seed: str) -> "InMemorySigner":
        """Create a signer with a deterministic ED25519 key derived from seed (tests, localnet)."""
        return cls(account_id, KeyPair.from_seed(seed))

    @classmethod
    def from_random(cls, account_id: str, key_type: KeyType = KeyType.ED25519) -> "InMemorySigner":
        """Create a signer with a freshly generated key."""
        return cls(account_id, KeyPair.from_random(key_type))

    @classmethod
    def from_key_file(cls, path: Union[str, Path], account_id: Optional[str] = None) -> "InMemorySigner":
        """
        Load a signer from a NEAR credentials key file.

        Key files are JSON objects with ``account_id``, ``public_key`` and
        ``private_key`` (``secret_key`` is accepted as an alias).

        Args:
            path: Path to the key file
            account_id: Account id override (defaults to the one in the file)

        Raises:
            InvalidKeyError: If the file is unreadable or holds an invalid key
        """
        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise InvalidKeyError(f"Failed to read key file {path}: {e}")

        secret = data.get("private_key") or data.get("secret_key")
        if not secret:
            raise InvalidKeyError(f"Key file {path} has no private_key")

        account = account_id or data.get("account_id")
        if not account:
            raise InvalidKeyError(f"Key file {path} has no account_id and none was given")

        key_pair = KeyPair.from_string(secret)
        if "public_key" in data and PublicKey.from_string(data["public_key"]) != key_pair.public_key:
            raise InvalidKeyError(f"Key file {path} public_key does not match its private_key")

        logger.debug(f"Loaded key {key_pair.public_key} for {account} from {path}")
        return cls(account, key_pair)

    def public_key(self) -> PublicKey:
        return self.key_pair.public_key

    def sign(self, data: bytes) -> Signature:
        """
        Sign data with the held key.

        Raises:
            SigningFailed: If the key cannot sign this data
        """
        try:
            return self.key_pair.sign(data)
        except Exception as e:
            logger.error(f"Signing failed for {self.account_id}: {e}")
            raise SigningFailed(f"Failed to sign with key {self.key_pair.public_key}: {e}") from e

    def __repr__(self) -> str:
        return f"InMemorySigner(account_id={self.account_id!r}, public_key={str(self.key_pair.public_key)!r})"
