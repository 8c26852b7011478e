"""
Action model for NEAR transactions.

A transaction carries an ordered list of actions. Each action is an immutable
value whose Borsh form is a one-byte variant tag followed by its payload; the
tags below are fixed by the ledger's schema.
"""
from dataclasses import dataclass, field
from typing import ClassVar, Dict, Optional, Tuple, Type

from ..borsh import BorshError, BorshReader, BorshWriter
from ..crypto import PublicKey, Signature
from ..exceptions import ConstructionError, InvalidActionError, NestedDelegateActionError
from ..utils import U64_MAX, U128_MAX, is_uint, sha256, validate_account_id

# Prefix of signable messages defined by NEP-461; delegate actions belong to NEP-366.
NEP461_SIGNED_MESSAGE_PREFIX = 1 << 30
DELEGATE_ACTION_NEP = 366


def _require_u64(name: str, value: int) -> None:
    if not is_uint(value, U64_MAX):
        raise InvalidActionError(f"{name} must be an integer in [0, 2**64), got {value!r}")


def _require_u128(name: str, value: int) -> None:
    if not is_uint(value, U128_MAX):
        raise InvalidActionError(f"{name} must be an integer in [0, 2**128), got {value!r}")


def _require_public_key(name: str, value: PublicKey) -> None:
    if not isinstance(value, PublicKey):
        raise InvalidActionError(f"{name} must be a PublicKey, got {type(value).__name__}")


def _account_id(name: str, value: str) -> None:
    try:
        validate_account_id(value)
    except ConstructionError as e:
        raise InvalidActionError(f"{name}: {e}")


# Access keys

@dataclass(frozen=True)
class FullAccessPermission:
    """Permission to sign any transaction for the account."""

    ENUM_INDEX: ClassVar[int] = 1

    def serialize(self, writer: BorshWriter) -> None:
        writer.u8(self.ENUM_INDEX)


@dataclass(frozen=True)
class FunctionCallPermission:
    """
    Permission limited to calling methods of one contract.

    ``allowance`` caps the gas fees the key may spend (``None`` means
    unlimited). An empty ``method_names`` allows any method of ``receiver_id``.
    """

    receiver_id: str
    method_names: Tuple[str, ...] = ()
    allowance: Optional[int] = None

    ENUM_INDEX: ClassVar[int] = 0

    def __post_init__(self):
        _account_id("receiver_id", self.receiver_id)
        if isinstance(self.method_names, (str, bytes)):
            raise InvalidActionError("method_names must be a sequence of method names, not a single string")
        object.__setattr__(self, "method_names", tuple(self.method_names))
        if not all(isinstance(name, str) for name in self.method_names):
            raise InvalidActionError("method_names must be strings")
        if self.allowance is not None:
            _require_u128("allowance", self.allowance)

    def serialize(self, writer: BorshWriter) -> None:
        writer.u8(self.ENUM_INDEX)
        writer.option(self.allowance, writer.u128)
        writer.string(self.receiver_id)
        writer.vec(self.method_names, writer.string)


@dataclass(frozen=True)
class AccessKey:
    """An access key's nonce and permission, as attached by ``AddKey``."""

    nonce: int = 0
    permission: object = field(default_factory=FullAccessPermission)

    def __post_init__(self):
        _require_u64("nonce", self.nonce)
        if not isinstance(self.permission, (FullAccessPermission, FunctionCallPermission)):
            raise InvalidActionError(f"Unsupported access key permission: {type(self.permission).__name__}")

    def serialize(self, writer: BorshWriter) -> None:
        writer.u64(self.nonce)
        self.permission.serialize(writer)

    @classmethod
    def deserialize(cls, reader: BorshReader) -> "AccessKey":
        nonce = reader.u64()
        tag = reader.u8()
        if tag == FullAccessPermission.ENUM_INDEX:
            permission = FullAccessPermission()
        elif tag == FunctionCallPermission.ENUM_INDEX:
            allowance = reader.option(reader.u128)
            receiver_id = reader.string()
            method_names = tuple(reader.vec(reader.string))
            permission = FunctionCallPermission(receiver_id, method_names, allowance)
        else:
            raise BorshError(f"Unknown access key permission tag: {tag}")
        return cls(permission=permission, nonce=nonce)


# Actions

class Action:
    """Base class of all actions; ``ENUM_INDEX`` is the Borsh variant tag."""

    ENUM_INDEX: ClassVar[int]

    def serialize(self, writer: BorshWriter) -> None:
        writer.u8(self.ENUM_INDEX)
        self._serialize_payload(writer)

    def _serialize_payload(self, writer: BorshWriter) -> None:
        raise NotImplementedError

    @classmethod
    def deserialize(cls, reader: BorshReader) -> "Action":
        tag = reader.u8()
        action_cls = ACTION_TYPES.get(tag)
        if action_cls is None:
            raise BorshError(f"Unknown action tag: {tag}")
        return action_cls._deserialize_payload(reader)

    @classmethod
    def _deserialize_payload(cls, reader: BorshReader) -> "Action":
        raise NotImplementedError


@dataclass(frozen=True)
class CreateAccount(Action):
    ENUM_INDEX: ClassVar[int] = 0

    def _serialize_payload(self, writer: BorshWriter) -> None:
        pass

    @classmethod
    def _deserialize_payload(cls, reader: BorshReader) -> "CreateAccount":
        return cls()


@dataclass(frozen=True)
class DeployContract(Action):
    code: bytes

    ENUM_INDEX: ClassVar[int] = 1

    def __post_init__(self):
        if not isinstance(self.code, (bytes, bytearray)):
            raise InvalidActionError(f"code must be bytes, got {type(self.code).__name__}")
        object.__setattr__(self, "code", bytes(self.code))

    def _serialize_payload(self, writer: BorshWriter) -> None:
        writer.u8_vec(self.code)

    @classmethod
    def _deserialize_payload(cls, reader: BorshReader) -> "DeployContract":
        return cls(reader.u8_vec())

    def __repr__(self) -> str:
        return f"DeployContract(code=<{len(self.code)} bytes>)"


@dataclass(frozen=True)
class FunctionCall(Action):
    method_name: str
    args: bytes
    gas: int
    deposit: int = 0

    ENUM_INDEX: ClassVar[int] = 2

    def __post_init__(self):
        if not isinstance(self.method_name, str) or not self.method_name:
            raise InvalidActionError("method_name must be a non-empty string")
        if not isinstance(self.args, (bytes, bytearray)):
            raise InvalidActionError(f"args must be bytes, got {type(self.args).__name__}")
        object.__setattr__(self, "args", bytes(self.args))
        _require_u64("gas", self.gas)
        _require_u128("deposit", self.deposit)

    def _serialize_payload(self, writer: BorshWriter) -> None:
        writer.string(self.method_name)
        writer.u8_vec(self.args)
        writer.u64(self.gas)
        writer.u128(self.deposit)

    @classmethod
    def _deserialize_payload(cls, reader: BorshReader) -> "FunctionCall":
        return cls(reader.string(), reader.u8_vec(), reader.u64(), reader.u128())


@dataclass(frozen=True)
class Transfer(Action):
    deposit: int

    ENUM_INDEX: ClassVar[int] = 3

    def __post_init__(self):
        _require_u128("deposit", self.deposit)

    def _serialize_payload(self, writer: BorshWriter) -> None:
        writer.u128(self.deposit)

    @classmethod
    def _deserialize_payload(cls, reader: BorshReader) -> "Transfer":
        return cls(reader.u128())


@dataclass(frozen=True)
class Stake(Action):
    stake: int
    public_key: PublicKey

    ENUM_INDEX: ClassVar[int] = 4

    def __post_init__(self):
        _require_u128("stake", self.stake)
        _require_public_key("public_key", self.public_key)

    def _serialize_payload(self, writer: BorshWriter) -> None:
        writer.u128(self.stake)
        self.public_key.serialize(writer)

    @classmethod
    def _deserialize_payload(cls, reader: BorshReader) -> "Stake":
        return cls(reader.u128(), PublicKey.deserialize(reader))


@dataclass(frozen=True)
class AddKey(Action):
    public_key: PublicKey
    access_key: AccessKey

    ENUM_INDEX: ClassVar[int] = 5

    def __post_init__(self):
        _require_public_key("public_key", self.public_key)
        if not isinstance(self.access_key, AccessKey):
            raise InvalidActionError(f"access_key must be an AccessKey, got {type(self.access_key).__name__}")

    def _serialize_payload(self, writer: BorshWriter) -> None:
        self.public_key.serialize(writer)
        self.access_key.serialize(writer)

    @classmethod
    def _deserialize_payload(cls, reader: BorshReader) -> "AddKey":
        return cls(PublicKey.deserialize(reader), AccessKey.deserialize(reader))


@dataclass(frozen=True)
class DeleteKey(Action):
    public_key: PublicKey

    ENUM_INDEX: ClassVar[int] = 6

    def __post_init__(self):
        _require_public_key("public_key", self.public_key)

    def _serialize_payload(self, writer: BorshWriter) -> None:
        self.public_key.serialize(writer)

    @classmethod
    def _deserialize_payload(cls, reader: BorshReader) -> "DeleteKey":
        return cls(PublicKey.deserialize(reader))


@dataclass(frozen=True)
class DeleteAccount(Action):
    beneficiary_id: str

    ENUM_INDEX: ClassVar[int] = 7

    def __post_init__(self):
        _account_id("beneficiary_id", self.beneficiary_id)

    def _serialize_payload(self, writer: BorshWriter) -> None:
        writer.string(self.beneficiary_id)

    @classmethod
    def _deserialize_payload(cls, reader: BorshReader) -> "DeleteAccount":
        return cls(reader.string())


# Meta transactions

def check_no_nested_delegate(actions) -> None:
    """
    Raise if any of the actions is a delegate action.

    Raises:
        NestedDelegateActionError: On the first delegate action found
    """
    for index, action in enumerate(actions):
        if isinstance(action, Delegate):
            raise NestedDelegateActionError(
                f"Delegate actions cannot be nested (delegate found at index {index})"
            )


@dataclass(frozen=True)
class DelegateAction:
    """
    A batch of actions authorized by ``sender_id`` for a relayer to submit.

    The ledger executes ``actions`` against ``receiver_id`` as if sent by
    ``sender_id``, provided the block height at execution is at most
    ``max_block_height`` and ``nonce`` is fresh for ``public_key``.
    Delegate actions never nest.
    """

    sender_id: str
    receiver_id: str
    actions: Tuple[Action, ...]
    nonce: int
    max_block_height: int
    public_key: PublicKey

    def __post_init__(self):
        _account_id("sender_id", self.sender_id)
        _account_id("receiver_id", self.receiver_id)
        actions = tuple(self.actions)
        check_no_nested_delegate(actions)
        for index, action in enumerate(actions):
            if not isinstance(action, Action):
                raise InvalidActionError(f"Action at index {index} is not an Action: {type(action).__name__}")
        object.__setattr__(self, "actions", actions)
        _require_u64("nonce", self.nonce)
        _require_u64("max_block_height", self.max_block_height)
        _require_public_key("public_key", self.public_key)

    def serialize(self, writer: Optional[BorshWriter] = None) -> bytes:
        writer = writer or BorshWriter()
        writer.string(self.sender_id)
        writer.string(self.receiver_id)
        writer.vec(self.actions, lambda action: action.serialize(writer))
        writer.u64(self.nonce)
        writer.u64(self.max_block_height)
        self.public_key.serialize(writer)
        return writer.output()

    @classmethod
    def deserialize(cls, reader: BorshReader) -> "DelegateAction":
        return cls(
            sender_id=reader.string(),
            receiver_id=reader.string(),
            actions=tuple(reader.vec(lambda: Action.deserialize(reader))),
            nonce=reader.u64(),
            max_block_height=reader.u64(),
            public_key=PublicKey.deserialize(reader),
        )

    def get_nep461_hash(self) -> bytes:
        """
        Hash that the sender signs.

        The Borsh encoding is prefixed with the NEP-461 discriminant
        ``2**30 + 366`` so a delegate signature can never be replayed as a
        transaction signature.
        """
        writer = BorshWriter()
        writer.u32(NEP461_SIGNED_MESSAGE_PREFIX + DELEGATE_ACTION_NEP)
        self.serialize(writer)
        return sha256(writer.output())

    def is_expired(self, block_height: int) -> bool:
        """Whether the action is no longer valid at the given block height."""
        return block_height > self.max_block_height


@dataclass(frozen=True)
class SignedDelegateAction:
    """A delegate action plus the sender's signature over its NEP-461 hash."""

    delegate_action: DelegateAction
    signature: Signature

    def serialize(self, writer: BorshWriter) -> None:
        self.delegate_action.serialize(writer)
        self.signature.serialize(writer)

    @classmethod
    def deserialize(cls, reader: BorshReader) -> "SignedDelegateAction":
        return cls(DelegateAction.deserialize(reader), Signature.deserialize(reader))

    def verify(self) -> bool:
        """Check the signature against the delegate's own public key."""
        return self.delegate_action.public_key.verify(self.delegate_action.get_nep461_hash(), self.signature)

    def to_action(self) -> "Delegate":
        return Delegate(self)


@dataclass(frozen=True)
class Delegate(Action):
    signed_delegate_action: SignedDelegateAction

    ENUM_INDEX: ClassVar[int] = 8

    def __post_init__(self):
        if not isinstance(self.signed_delegate_action, SignedDelegateAction):
            raise InvalidActionError(
                f"signed_delegate_action must be a SignedDelegateAction, "
                f"got {type(self.signed_delegate_action).__name__}"
            )

    def _serialize_payload(self, writer: BorshWriter) -> None:
        self.signed_delegate_action.serialize(writer)

    @classmethod
    def _deserialize_payload(cls, reader: BorshReader) -> "Delegate":
        return cls(SignedDelegateAction.deserialize(reader))


ACTION_TYPES: Dict[int, Type[Action]] = {
    action_cls.ENUM_INDEX: action_cls
    for action_cls in (
        CreateAccount, DeployContract, FunctionCall, Transfer, Stake,
        AddKey, DeleteKey, DeleteAccount, Delegate,
    )
}
