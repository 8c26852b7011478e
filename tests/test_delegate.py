"""
Tests for delegate actions and relayed transactions.
"""
import hashlib
import struct

import pytest

from nearapi_sdk.exceptions import ConstructionError, NestedDelegateActionError
from nearapi_sdk.transactions import (
    Delegate,
    SignedDelegateAction,
    Transfer,
    build_relayed_transaction,
    make_delegate,
    sign_delegate,
    sign_transaction,
)
from nearapi_sdk.transactions.actions import DelegateAction

from conftest import ALICE_ID, BOB_ID, RELAYER_ID

BLOCK_HASH = bytes(range(32))


@pytest.fixture
def delegate(alice_signer):
    return make_delegate(
        sender_id=ALICE_ID,
        receiver_id=BOB_ID,
        actions=[Transfer(10)],
        nonce=42,
        max_block_height=1100,
        sender_public_key=alice_signer.public_key(),
    )


def test_make_delegate_fields(delegate, alice_signer):
    assert delegate.sender_id == ALICE_ID
    assert delegate.receiver_id == BOB_ID
    assert delegate.actions == (Transfer(10),)
    assert delegate.nonce == 42
    assert delegate.max_block_height == 1100
    assert delegate.public_key == alice_signer.public_key()


def test_make_delegate_rejects_nested(delegate, alice_signer):
    signed = sign_delegate(delegate, alice_signer)
    with pytest.raises(NestedDelegateActionError):
        make_delegate(ALICE_ID, BOB_ID, [Delegate(signed)], 43, 1100, alice_signer.public_key())


def test_signature_covers_prefixed_hash(delegate, alice_signer):
    signed = sign_delegate(delegate, alice_signer)
    prefixed = hashlib.sha256(struct.pack("<I", 2 ** 30 + 366) + delegate.serialize()).digest()
    assert alice_signer.public_key().verify(prefixed, signed.signature)
    assert signed.verify()


def test_signature_not_valid_for_unprefixed_hash(delegate, alice_signer):
    signed = sign_delegate(delegate, alice_signer)
    plain = hashlib.sha256(delegate.serialize()).digest()
    assert not alice_signer.public_key().verify(plain, signed.signature)


def test_sign_delegate_key_mismatch(delegate, bob_signer):
    with pytest.raises(ConstructionError, match="does not match"):
        sign_delegate(delegate, bob_signer)


def test_signed_delegate_decode(delegate, alice_signer):
    from nearapi_sdk.borsh import BorshReader, BorshWriter

    signed = sign_delegate(delegate, alice_signer)
    writer = BorshWriter()
    signed.serialize(writer)
    reader = BorshReader(writer.output())
    assert SignedDelegateAction.deserialize(reader) == signed
    reader.finish()


def test_delegate_decode(delegate):
    from nearapi_sdk.borsh import BorshReader

    assert DelegateAction.deserialize(BorshReader(delegate.serialize())) == delegate


class TestRelayedTransaction:
    """The relayer wraps the delegate as the single action of its own transaction."""

    @pytest.fixture
    def relayed(self, delegate, alice_signer, relayer_signer):
        signed = sign_delegate(delegate, alice_signer)
        tx = build_relayed_transaction(
            relayer_id=RELAYER_ID,
            relayer_public_key=relayer_signer.public_key(),
            signed_delegate=signed,
            nonce=8,
            block_hash=BLOCK_HASH,
        )
        return signed, tx

    def test_addressed_to_delegate_sender(self, relayed):
        _, tx = relayed
        assert tx.signer_id == RELAYER_ID
        assert tx.receiver_id == ALICE_ID

    def test_single_delegate_action(self, relayed):
        signed, tx = relayed
        assert tx.actions == (Delegate(signed),)

    def test_encoding_contains_tagged_delegate(self, relayed):
        from nearapi_sdk.borsh import BorshWriter

        signed, tx = relayed
        writer = BorshWriter()
        signed.serialize(writer)
        assert tx.serialize().endswith(struct.pack("<I", 1) + b"\x08" + writer.output())

    def test_relayer_signs_outer_transaction(self, relayed, relayer_signer, alice_signer):
        _, tx = relayed
        signed_tx = sign_transaction(tx, relayer_signer)
        assert signed_tx.verify()
        with pytest.raises(ConstructionError):
            sign_transaction(tx, alice_signer)
