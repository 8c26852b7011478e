"""
End-to-end flows: resolve, assemble, sign, relay and submit.
"""
import pytest

from nearapi_sdk.accounts import Account
from nearapi_sdk.exceptions import AccessKeyNotFound, DelegateActionExpired, NestedDelegateActionError
from nearapi_sdk.models import TxExecutionStatus
from nearapi_sdk.nonce import NonceResolver
from nearapi_sdk.sender import TransactionSender
from nearapi_sdk.signer import InMemorySigner
from nearapi_sdk.transactions import (
    ActionBuilder,
    Delegate,
    assemble_transaction,
    make_delegate,
    sign_delegate,
    sign_transaction,
)

from test_helpers.fake_provider import DEFAULT_BLOCK_HEIGHT, FakeProvider


@pytest.fixture
def signers():
    return {name: InMemorySigner.from_seed(name, name) for name in ("alice", "relay", "nobody")}


@pytest.fixture
def provider(signers):
    provider = FakeProvider()
    provider.set_access_key("alice", signers["alice"].public_key(), 10)
    provider.set_access_key("relay", signers["relay"].public_key(), 20)
    return provider


def test_transfer_submitted_without_waiting(provider, signers):
    alice = signers["alice"]
    nonce = NonceResolver(provider).resolve_next_nonce("alice", alice.public_key())
    tx = assemble_transaction(
        "alice", alice.public_key(), "bob", nonce, provider.get_recent_block_hash(),
        ActionBuilder().transfer(1_000_000).build(),
    )
    response = TransactionSender(sign_transaction(tx, alice), provider).submit(TxExecutionStatus.NONE)

    assert response.transaction_hash == tx.get_hash_base58()
    assert response.final_execution_status == TxExecutionStatus.NONE
    assert not response.has_outcome
    assert provider.sent[0].transaction.nonce == 11


def test_relayed_function_call(provider, signers):
    alice = Account("alice", signers["alice"], provider)
    relay = Account("relay", signers["relay"], provider)

    signed_delegate = alice.create_signed_delegate(
        "app", ActionBuilder().function_call("set_status", {"message": "hello"}),
    )
    assert signed_delegate.delegate_action.max_block_height == DEFAULT_BLOCK_HEIGHT + 100

    response = relay.relay(signed_delegate).submit(TxExecutionStatus.EXECUTED_OPTIMISTIC)

    assert response.is_success
    assert response.signer_id == "relay"
    assert response.receipt_executor_ids == ["alice"]
    assert response.transaction_outcome["outcome"]["executor_id"] == "relay"
    assert response.tokens_burnt > 0

    outer = provider.sent[0].transaction
    assert outer.signer_id == "relay"
    assert outer.actions == (Delegate(signed_delegate),)


def test_nested_delegate_makes_no_calls(provider, signers):
    alice = signers["alice"]
    inner_delegate = make_delegate("alice", "app", [], 1, 100, alice.public_key())
    inner = Delegate(sign_delegate(inner_delegate, alice))

    with pytest.raises(NestedDelegateActionError):
        make_delegate("alice", "app", [inner], 2, 100, alice.public_key())
    assert provider.calls == []


def test_missing_access_key_is_not_nonce_zero(provider, signers):
    with pytest.raises(AccessKeyNotFound):
        NonceResolver(provider).resolve_next_nonce("nobody", signers["nobody"].public_key())


def test_expired_delegate_is_reported(provider, signers):
    alice = Account("alice", signers["alice"], provider)
    relay = Account("relay", signers["relay"], provider)

    signed_delegate = alice.create_signed_delegate("app", ActionBuilder().transfer(1), block_height_ttl=1)
    assert signed_delegate.delegate_action.is_expired(DEFAULT_BLOCK_HEIGHT + 2)

    provider.outcome_status = {"Failure": {"ActionError": {"index": 0, "kind": "DelegateActionExpired"}}}
    response = relay.relay(signed_delegate).transact()

    assert not response.is_success
    with pytest.raises(DelegateActionExpired):
        response.raise_for_failure()


def test_identical_inputs_encode_identically(signers):
    alice = signers["alice"]

    def build():
        actions = ActionBuilder().transfer(1_000_000).function_call("set_status", {"message": "hi"}).build()
        return assemble_transaction("alice", alice.public_key(), "bob", 11, bytes(range(32)), actions)

    first, second = build(), build()
    assert first.serialize() == second.serialize()
    assert first.get_hash() == second.get_hash()
