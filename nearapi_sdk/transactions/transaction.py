"""
Transaction assembly, canonical hashing and signing.
"""
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from ..borsh import BorshReader, BorshWriter
from ..crypto import PublicKey, Signature
from ..exceptions import ConstructionError, InvalidActionError
from ..signer import Signer
from ..utils import U64_MAX, b58decode, b58encode, b64encode, is_uint, sha256, validate_account_id
from .actions import Action

logger = logging.getLogger(__name__)

BLOCK_HASH_LENGTH = 32


@dataclass(frozen=True)
class Transaction:
    """
    An unsigned transaction.

    ``nonce`` must exceed the last nonce used by ``public_key`` on
    ``signer_id`` and ``block_hash`` must name a recent block, otherwise the
    ledger rejects the transaction.
    """

    signer_id: str
    public_key: PublicKey
    nonce: int
    receiver_id: str
    block_hash: bytes
    actions: Tuple[Action, ...]

    def __post_init__(self):
        validate_account_id(self.signer_id)
        validate_account_id(self.receiver_id)
        if not isinstance(self.public_key, PublicKey):
            raise ConstructionError(f"public_key must be a PublicKey, got {type(self.public_key).__name__}")
        if not is_uint(self.nonce, U64_MAX):
            raise ConstructionError(f"nonce must be an integer in [0, 2**64), got {self.nonce!r}")
        if not isinstance(self.block_hash, (bytes, bytearray)) or len(self.block_hash) != BLOCK_HASH_LENGTH:
            raise ConstructionError(f"block_hash must be {BLOCK_HASH_LENGTH} bytes")
        object.__setattr__(self, "block_hash", bytes(self.block_hash))
        actions = tuple(self.actions)
        for index, action in enumerate(actions):
            if not isinstance(action, Action):
                raise InvalidActionError(f"Action at index {index} is not an Action: {type(action).__name__}")
        object.__setattr__(self, "actions", actions)

    def serialize(self, writer: Optional[BorshWriter] = None) -> bytes:
        """Canonical Borsh encoding, the bytes the signature commits to."""
        writer = writer or BorshWriter()
        writer.string(self.signer_id)
        self.public_key.serialize(writer)
        writer.u64(self.nonce)
        writer.string(self.receiver_id)
        writer.fixed_bytes(self.block_hash, BLOCK_HASH_LENGTH)
        writer.vec(self.actions, lambda action: action.serialize(writer))
        return writer.output()

    @classmethod
    def deserialize(cls, data: Union[bytes, BorshReader]) -> "Transaction":
        """
        Decode a transaction from its Borsh encoding.

        Args:
            data: Encoded bytes (must be consumed entirely) or a reader positioned at a transaction

        Returns:
            Transaction instance
        """
        reader = data if isinstance(data, BorshReader) else BorshReader(data)
        transaction = cls(
            signer_id=reader.string(),
            public_key=PublicKey.deserialize(reader),
            nonce=reader.u64(),
            receiver_id=reader.string(),
            block_hash=reader.fixed_bytes(BLOCK_HASH_LENGTH),
            actions=tuple(reader.vec(lambda: Action.deserialize(reader))),
        )
        if not isinstance(data, BorshReader):
            reader.finish()
        return transaction

    def get_hash(self) -> bytes:
        """SHA-256 of the canonical encoding; this is what gets signed."""
        return sha256(self.serialize())

    def get_hash_base58(self) -> str:
        """Transaction id as shown by explorers and accepted by ``tx`` queries."""
        return b58encode(self.get_hash())


@dataclass(frozen=True)
class SignedTransaction:
    """A transaction together with a signature over its hash."""

    transaction: Transaction
    signature: Signature

    def serialize(self) -> bytes:
        writer = BorshWriter()
        self.transaction.serialize(writer)
        self.signature.serialize(writer)
        return writer.output()

    @classmethod
    def deserialize(cls, data: bytes) -> "SignedTransaction":
        reader = BorshReader(data)
        signed = cls(Transaction.deserialize(reader), Signature.deserialize(reader))
        reader.finish()
        return signed

    def to_base64(self) -> str:
        """Encoding expected by the ``send_tx`` family of RPC methods."""
        return b64encode(self.serialize())

    def get_hash(self) -> bytes:
        return self.transaction.get_hash()

    def get_hash_base58(self) -> str:
        return self.transaction.get_hash_base58()

    def verify(self) -> bool:
        """Check the signature against the hash under the transaction's own public key."""
        return self.transaction.public_key.verify(self.get_hash(), self.signature)


def _block_hash_bytes(block_hash: Union[bytes, str]) -> bytes:
    if isinstance(block_hash, str):
        try:
            return b58decode(block_hash)
        except ValueError as e:
            raise ConstructionError(f"Invalid base58 block hash {block_hash!r}: {e}")
    return block_hash


def assemble_transaction(
    signer_id: str,
    signer_public_key: Union[PublicKey, str],
    receiver_id: str,
    nonce: int,
    block_hash: Union[bytes, str],
    actions: Sequence[Action]
) -> Transaction:
    """
    Bind signer, nonce, receiver, block hash and actions into a transaction.

    No I/O happens here; the nonce and block hash must already be resolved.

    Args:
        signer_id: Account that signs and pays for the transaction
        signer_public_key: Access key of ``signer_id`` used to sign
        receiver_id: Account the actions apply to
        nonce: Next nonce for the access key
        block_hash: Recent block hash, as 32 bytes or base58 text
        actions: Ordered actions

    Returns:
        Unsigned Transaction

    Raises:
        ConstructionError: If any field is malformed
    """
    return Transaction(
        signer_id=signer_id,
        public_key=PublicKey.from_string(signer_public_key),
        nonce=nonce,
        receiver_id=receiver_id,
        block_hash=_block_hash_bytes(block_hash),
        actions=tuple(actions),
    )


def sign_transaction(transaction: Transaction, signer: Signer) -> SignedTransaction:
    """
    Sign a transaction.

    Args:
        transaction: Transaction to sign
        signer: Signer holding the key named by ``transaction.public_key``

    Returns:
        SignedTransaction

    Raises:
        ConstructionError: If the signer's key is not the transaction's key
        SigningFailed: If the signer cannot sign
    """
    signer_key = signer.public_key()
    if signer_key != transaction.public_key:
        raise ConstructionError(
            f"Signer key {signer_key} does not match transaction key {transaction.public_key}"
        )

    tx_hash = transaction.get_hash()
    logger.debug(f"Signing transaction {b58encode(tx_hash)} for {transaction.signer_id} (nonce {transaction.nonce})")
    signature = signer.sign(tx_hash)
    return SignedTransaction(transaction=transaction, signature=signature)
