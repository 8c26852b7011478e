"""
Tests for the action model and its Borsh encoding.
"""
import struct

import pytest

from nearapi_sdk.borsh import BorshReader, BorshWriter
from nearapi_sdk.crypto import KeyType, PublicKey, Signature
from nearapi_sdk.exceptions import InvalidActionError, NestedDelegateActionError
from nearapi_sdk.transactions.actions import (
    AccessKey,
    Action,
    AddKey,
    CreateAccount,
    Delegate,
    DelegateAction,
    DeleteAccount,
    DeleteKey,
    DeployContract,
    FullAccessPermission,
    FunctionCall,
    FunctionCallPermission,
    SignedDelegateAction,
    Stake,
    Transfer,
)

PK = PublicKey(KeyType.ED25519, bytes(range(32)))
PK_BYTES = b"\x00" + bytes(range(32))


def encode(action: Action) -> bytes:
    writer = BorshWriter()
    action.serialize(writer)
    return writer.output()


def string(value: str) -> bytes:
    return struct.pack("<I", len(value)) + value.encode("utf-8")


def u128(value: int) -> bytes:
    return value.to_bytes(16, "little")


def make_delegate_action(actions=(Transfer(1),)) -> DelegateAction:
    return DelegateAction(
        sender_id="alice.near",
        receiver_id="bob.near",
        actions=actions,
        nonce=1,
        max_block_height=100,
        public_key=PK,
    )


class TestActionEncoding:
    """Each action is its variant tag followed by the payload."""

    def test_create_account(self):
        assert encode(CreateAccount()) == b"\x00"

    def test_deploy_contract(self):
        assert encode(DeployContract(b"\x00asm")) == b"\x01" + struct.pack("<I", 4) + b"\x00asm"

    def test_function_call(self):
        action = FunctionCall("set_status", b'{"message":"hi"}', 30_000_000_000_000, 5)
        assert encode(action) == (
            b"\x02"
            + string("set_status")
            + struct.pack("<I", 16) + b'{"message":"hi"}'
            + struct.pack("<Q", 30_000_000_000_000)
            + u128(5)
        )

    def test_transfer(self):
        assert encode(Transfer(10 ** 24)) == b"\x03" + u128(10 ** 24)

    def test_stake(self):
        assert encode(Stake(100, PK)) == b"\x04" + u128(100) + PK_BYTES

    def test_add_full_access_key(self):
        action = AddKey(PK, AccessKey())
        assert encode(action) == b"\x05" + PK_BYTES + struct.pack("<Q", 0) + b"\x01"

    def test_add_function_call_key(self):
        permission = FunctionCallPermission("app.near", ("a", "b"), allowance=250)
        action = AddKey(PK, AccessKey(nonce=0, permission=permission))
        assert encode(action) == (
            b"\x05" + PK_BYTES
            + struct.pack("<Q", 0)
            + b"\x00"
            + b"\x01" + u128(250)
            + string("app.near")
            + struct.pack("<I", 2) + string("a") + string("b")
        )

    def test_unlimited_allowance_is_none(self):
        permission = FunctionCallPermission("app.near")
        writer = BorshWriter()
        permission.serialize(writer)
        assert writer.output() == b"\x00" + b"\x00" + string("app.near") + struct.pack("<I", 0)

    def test_delete_key(self):
        assert encode(DeleteKey(PK)) == b"\x06" + PK_BYTES

    def test_delete_account(self):
        assert encode(DeleteAccount("bob.near")) == b"\x07" + string("bob.near")

    def test_delegate(self):
        delegate = make_delegate_action()
        signature = Signature(KeyType.ED25519, b"\x09" * 64)
        action = Delegate(SignedDelegateAction(delegate, signature))

        expected_delegate = (
            string("alice.near")
            + string("bob.near")
            + struct.pack("<I", 1) + b"\x03" + u128(1)
            + struct.pack("<Q", 1)
            + struct.pack("<Q", 100)
            + PK_BYTES
        )
        assert encode(action) == b"\x08" + expected_delegate + b"\x00" + b"\x09" * 64

    @pytest.mark.parametrize("action", [
        CreateAccount(),
        DeployContract(b"code"),
        FunctionCall("m", b"{}", 1, 2),
        Transfer(3),
        Stake(4, PK),
        AddKey(PK, AccessKey(nonce=0, permission=FunctionCallPermission("app.near", ("x",), 9))),
        DeleteKey(PK),
        DeleteAccount("bob.near"),
    ])
    def test_decode_matches(self, action):
        reader = BorshReader(encode(action))
        assert Action.deserialize(reader) == action
        reader.finish()


class TestActionValidation:
    """Payloads are checked when the action is built."""

    @pytest.mark.parametrize("gas", [-1, 2 ** 64, "10", 1.5, True])
    def test_invalid_gas(self, gas):
        with pytest.raises(InvalidActionError, match="gas"):
            FunctionCall("m", b"", gas)

    @pytest.mark.parametrize("deposit", [-1, 2 ** 128])
    def test_invalid_deposit(self, deposit):
        with pytest.raises(InvalidActionError, match="deposit"):
            Transfer(deposit)

    def test_empty_method_name(self):
        with pytest.raises(InvalidActionError, match="method_name"):
            FunctionCall("", b"", 1)

    def test_args_must_be_bytes(self):
        with pytest.raises(InvalidActionError, match="args"):
            FunctionCall("m", {"a": 1}, 1)

    def test_bytearray_is_frozen_to_bytes(self):
        code = bytearray(b"abc")
        action = DeployContract(code)
        code[0] = 0
        assert action.code == b"abc"

    def test_invalid_beneficiary(self):
        with pytest.raises(InvalidActionError, match="beneficiary_id"):
            DeleteAccount("Not Valid")

    def test_stake_needs_public_key(self):
        with pytest.raises(InvalidActionError, match="public_key"):
            Stake(1, "ed25519:abc")

    def test_actions_are_immutable(self):
        action = Transfer(1)
        with pytest.raises(AttributeError):
            action.deposit = 2

    @pytest.mark.parametrize("method_names", ["set_status", b"set_status"])
    def test_method_names_must_not_be_a_string(self, method_names):
        with pytest.raises(InvalidActionError, match="method_names"):
            FunctionCallPermission("app.testnet", method_names)

    def test_method_names_must_be_strings(self):
        with pytest.raises(InvalidActionError, match="method_names"):
            FunctionCallPermission("app.testnet", ["vote", 1])

    def test_access_key_nonce_range(self):
        with pytest.raises(InvalidActionError):
            AccessKey(nonce=-1)

    def test_deploy_repr_hides_code(self):
        assert "bytes" in repr(DeployContract(b"\x00" * 1000))


class TestDelegateAction:
    """Delegate action construction and hashing."""

    def test_nested_delegate_rejected(self):
        inner = Delegate(SignedDelegateAction(make_delegate_action(), Signature(KeyType.ED25519, bytes(64))))
        with pytest.raises(NestedDelegateActionError, match="index 1"):
            make_delegate_action(actions=(Transfer(1), inner))

    def test_nep461_hash_prefix(self):
        import hashlib

        delegate = make_delegate_action()
        expected = hashlib.sha256(struct.pack("<I", 2 ** 30 + 366) + delegate.serialize()).digest()
        assert delegate.get_nep461_hash() == expected

    def test_delegate_hash_differs_from_plain_hash(self):
        import hashlib

        delegate = make_delegate_action()
        assert delegate.get_nep461_hash() != hashlib.sha256(delegate.serialize()).digest()

    def test_is_expired(self):
        delegate = make_delegate_action()
        assert not delegate.is_expired(99)
        assert not delegate.is_expired(100)
        assert delegate.is_expired(101)

    def test_actions_become_tuple(self):
        delegate = make_delegate_action(actions=[Transfer(1)])
        assert delegate.actions == (Transfer(1),)

    def test_to_action(self):
        signed = SignedDelegateAction(make_delegate_action(), Signature(KeyType.ED25519, bytes(64)))
        action = signed.to_action()
        assert isinstance(action, Delegate)
        assert action.signed_delegate_action is signed
