"""
Key and signature types for the NEAR API SDK.

ED25519 keys use the ``cryptography`` package. SECP256K1 keys use ``eth_keys``;
NEAR stores them as 64-byte uncompressed public keys (no 0x04 prefix) and
65-byte recoverable signatures (r || s || v) over a 32-byte hash.
"""
import logging
import os
from enum import IntEnum
from typing import Tuple, Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey, Ed25519PublicKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat
from eth_keys import keys as secp256k1_keys
from eth_keys.exceptions import BadSignature
from eth_utils import ValidationError

from .exceptions import InvalidKeyError
from .borsh import BorshReader, BorshWriter
from .utils import b58decode, b58encode

logger = logging.getLogger(__name__)

ED25519_SEED_LENGTH = 32


class KeyType(IntEnum):
    """Key algorithms supported by the ledger (values are the Borsh tags)."""
    ED25519 = 0
    SECP256K1 = 1

    @property
    def prefix(self) -> str:
        return self.name.lower()

    @classmethod
    def from_prefix(cls, prefix: str) -> "KeyType":
        try:
            return cls[prefix.upper()]
        except KeyError:
            raise InvalidKeyError(f"Unknown key type: {prefix!r}")


PUBLIC_KEY_LENGTHS = {KeyType.ED25519: 32, KeyType.SECP256K1: 64}
SIGNATURE_LENGTHS = {KeyType.ED25519: 64, KeyType.SECP256K1: 65}


def _split_key_string(value: str) -> Tuple[KeyType, bytes]:
    """Split ``<type>:<base58>`` text into its key type and raw bytes (ED25519 if untyped)."""
    if ":" in value:
        prefix, encoded = value.split(":", 1)
        key_type = KeyType.from_prefix(prefix)
    else:
        key_type, encoded = KeyType.ED25519, value
    try:
        return key_type, b58decode(encoded)
    except ValueError as e:
        raise InvalidKeyError(f"Invalid base58 data in key {value[:12]}…: {e}")


class PublicKey:
    """A typed public key, as carried in transactions and access keys."""

    __slots__ = ("key_type", "data")

    def __init__(self, key_type: KeyType, data: bytes):
        key_type = KeyType(key_type)
        data = bytes(data)
        expected = PUBLIC_KEY_LENGTHS[key_type]
        if len(data) != expected:
            raise InvalidKeyError(f"{key_type.prefix} public key must be {expected} bytes, got {len(data)}")
        self.key_type = key_type
        self.data = data

    @classmethod
    def from_string(cls, value: Union[str, "PublicKey"]) -> "PublicKey":
        """
        Parse a public key from ``ed25519:<base58>`` or ``secp256k1:<base58>``.

        Args:
            value: Key text (untyped base58 is read as ED25519), or a PublicKey

        Returns:
            PublicKey instance

        Raises:
            InvalidKeyError: If the text is not a valid key
        """
        if isinstance(value, PublicKey):
            return value
        key_type, data = _split_key_string(value)
        return cls(key_type, data)

    def verify(self, message: bytes, signature: "Signature") -> bool:
        """
        Verify a signature over message with this key.

        For SECP256K1 the message must be the 32-byte hash that was signed.

        Returns:
            True if the signature is valid, False otherwise
        """
        if signature.key_type != self.key_type:
            return False
        if self.key_type == KeyType.ED25519:
            try:
                Ed25519PublicKey.from_public_bytes(self.data).verify(signature.data, message)
                return True
            except InvalidSignature:
                return False
        try:
            return secp256k1_keys.PublicKey(self.data).verify_msg_hash(
                message, secp256k1_keys.Signature(signature.data)
            )
        except (BadSignature, ValidationError):
            return False

    def serialize(self, writer: BorshWriter) -> None:
        writer.u8(self.key_type)
        writer.fixed_bytes(self.data, PUBLIC_KEY_LENGTHS[self.key_type])

    @classmethod
    def deserialize(cls, reader: BorshReader) -> "PublicKey":
        key_type = reader.u8()
        if key_type not in PUBLIC_KEY_LENGTHS:
            raise InvalidKeyError(f"Unknown key type tag: {key_type}")
        return cls(KeyType(key_type), reader.fixed_bytes(PUBLIC_KEY_LENGTHS[KeyType(key_type)]))

    def __str__(self) -> str:
        return f"{self.key_type.prefix}:{b58encode(self.data)}"

    def __repr__(self) -> str:
        return f"PublicKey({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.key_type == other.key_type and self.data == other.data

    def __hash__(self) -> int:
        return hash((self.key_type, self.data))


class Signature:
    """A typed signature."""

    __slots__ = ("key_type", "data")

    def __init__(self, key_type: KeyType, data: bytes):
        key_type = KeyType(key_type)
        data = bytes(data)
        expected = SIGNATURE_LENGTHS[key_type]
        if len(data) != expected:
            raise InvalidKeyError(f"{key_type.prefix} signature must be {expected} bytes, got {len(data)}")
        self.key_type = key_type
        self.data = data

    @classmethod
    def from_string(cls, value: str) -> "Signature":
        key_type, data = _split_key_string(value)
        return cls(key_type, data)

    def serialize(self, writer: BorshWriter) -> None:
        writer.u8(self.key_type)
        writer.fixed_bytes(self.data, SIGNATURE_LENGTHS[self.key_type])

    @classmethod
    def deserialize(cls, reader: BorshReader) -> "Signature":
        key_type = reader.u8()
        if key_type not in SIGNATURE_LENGTHS:
            raise InvalidKeyError(f"Unknown signature type tag: {key_type}")
        return cls(KeyType(key_type), reader.fixed_bytes(SIGNATURE_LENGTHS[KeyType(key_type)]))

    def __str__(self) -> str:
        return f"{self.key_type.prefix}:{b58encode(self.data)}"

    def __repr__(self) -> str:
        return f"Signature({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Signature):
            return NotImplemented
        return self.key_type == other.key_type and self.data == other.data

    def __hash__(self) -> int:
        return hash((self.key_type, self.data))


class KeyPair:
    """
    A secret key together with its public key.

    The text form matches NEAR key files: ``ed25519:<base58(seed || public key)>``
    for ED25519 and ``secp256k1:<base58(secret)>`` for SECP256K1.
    """

    def __init__(self, key_type: KeyType, secret: bytes):
        self.key_type = KeyType(key_type)
        self._secret = bytes(secret)

        if self.key_type == KeyType.ED25519:
            if len(self._secret) != ED25519_SEED_LENGTH:
                raise InvalidKeyError(f"ed25519 seed must be {ED25519_SEED_LENGTH} bytes, got {len(self._secret)}")
            self._ed25519 = Ed25519PrivateKey.from_private_bytes(self._secret)
            public_bytes = self._ed25519.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        else:
            try:
                self._secp256k1 = secp256k1_keys.PrivateKey(self._secret)
            except ValidationError as e:
                raise InvalidKeyError(f"Invalid secp256k1 secret key: {e}")
            public_bytes = self._secp256k1.public_key.to_bytes()

        self.public_key = PublicKey(self.key_type, public_bytes)

    @classmethod
    def from_random(cls, key_type: KeyType = KeyType.ED25519) -> "KeyPair":
        """Generate a new random key pair."""
        if key_type == KeyType.ED25519:
            pair = cls(key_type, os.urandom(ED25519_SEED_LENGTH))
        else:
            while True:
                try:
                    pair = cls(key_type, os.urandom(32))
                    break
                except InvalidKeyError:
                    # Out of curve order range, draw again
                    continue
        logger.debug(f"Generated new key pair {pair.public_key}")
        return pair

    @classmethod
    def from_seed(cls, seed: str) -> "KeyPair":
        """
        Derive a deterministic ED25519 key pair from a text seed.

        The seed is UTF-8 encoded, truncated to 32 bytes and right-padded with
        spaces, matching how the reference tooling derives test keys.
        """
        raw = seed.encode("utf-8")[:ED25519_SEED_LENGTH]
        return cls(KeyType.ED25519, raw.ljust(ED25519_SEED_LENGTH, b" "))

    @classmethod
    def from_string(cls, value: str) -> "KeyPair":
        """
        Parse a secret key in NEAR key file format.

        Raises:
            InvalidKeyError: If the key is malformed or its embedded public key does not match
        """
        key_type, data = _split_key_string(value)
        if key_type == KeyType.ED25519:
            if len(data) == ED25519_SEED_LENGTH:
                return cls(key_type, data)
            if len(data) != ED25519_SEED_LENGTH * 2:
                raise InvalidKeyError(f"ed25519 secret key must be 32 or 64 bytes, got {len(data)}")
            pair = cls(key_type, data[:ED25519_SEED_LENGTH])
            if pair.public_key.data != data[ED25519_SEED_LENGTH:]:
                raise InvalidKeyError("ed25519 secret key does not match its embedded public key")
            return pair
        return cls(key_type, data)

    @property
    def secret_key(self) -> str:
        """Secret key text in NEAR key file format."""
        if self.key_type == KeyType.ED25519:
            return f"{self.key_type.prefix}:{b58encode(self._secret + self.public_key.data)}"
        return f"{self.key_type.prefix}:{b58encode(self._secret)}"

    def sign(self, message: bytes) -> Signature:
        """
        Sign a message.

        ED25519 signs arbitrary bytes; SECP256K1 requires a 32-byte hash.
        """
        if self.key_type == KeyType.ED25519:
            return Signature(self.key_type, self._ed25519.sign(message))
        if len(message) != 32:
            raise InvalidKeyError(f"secp256k1 can only sign 32-byte hashes, got {len(message)} bytes")
        try:
            signed = self._secp256k1.sign_msg_hash(message)
        except ValidationError as e:
            raise InvalidKeyError(f"secp256k1 can only sign 32-byte hashes: {e}")
        return Signature(self.key_type, signed.to_bytes())

    def verify(self, message: bytes, signature: Signature) -> bool:
        return self.public_key.verify(message, signature)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyPair):
            return NotImplemented
        return self.key_type == other.key_type and self._secret == other._secret

    def __hash__(self) -> int:
        return hash((self.key_type, self._secret))

    def __repr__(self) -> str:
        # Never expose secret material in reprs or logs
        return f"KeyPair(public_key={str(self.public_key)!r})"
