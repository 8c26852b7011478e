"""
Tests for Connection wiring.
"""
import json
import logging

import pytest

from nearapi_sdk.accounts import Account
from nearapi_sdk.connection import Connection, ConnectionConfig
from nearapi_sdk.keystore import InMemoryKeyStore
from nearapi_sdk.providers import JsonRpcProvider

from conftest import ALICE_ID


def test_default_network():
    connection = Connection.from_config(ConnectionConfig())
    assert connection.network_id == "testnet"
    assert isinstance(connection.provider, JsonRpcProvider)
    assert connection.provider.rpc_url == "https://rpc.testnet.near.org"
    assert connection.signer is None


def test_network_from_env(monkeypatch):
    monkeypatch.setenv("NEAR_NETWORK", "mainnet")
    assert Connection.from_config(ConnectionConfig()).provider.rpc_url == "https://rpc.mainnet.near.org"


def test_rpc_url_override():
    connection = Connection.from_config(ConnectionConfig(network_id="localnet", rpc_url="http://localhost:4040"))
    assert connection.provider.rpc_url == "http://localhost:4040"


def test_unknown_network():
    with pytest.raises(ValueError, match="Available networks"):
        Connection.from_config(ConnectionConfig(network_id="devnet"))


def test_signer_from_key_file(tmp_path, alice_signer):
    key_file = tmp_path / "alice.json"
    key_file.write_text(json.dumps({
        "account_id": ALICE_ID,
        "public_key": str(alice_signer.public_key()),
        "private_key": alice_signer.key_pair.secret_key,
    }))
    connection = Connection.from_config(ConnectionConfig(key_file=key_file))
    account = connection.account()
    assert isinstance(account, Account)
    assert account.account_id == ALICE_ID
    assert account.signer.public_key() == alice_signer.public_key()
    assert account.provider is connection.provider


def test_signer_from_key_store(alice_signer):
    key_store = InMemoryKeyStore()
    key_store.set_key("testnet", ALICE_ID, alice_signer.key_pair)
    connection = Connection.from_config(ConnectionConfig(account_id=ALICE_ID), key_store=key_store)
    assert connection.signer.public_key() == alice_signer.public_key()


def test_missing_key_in_store(caplog):
    with caplog.at_level(logging.WARNING, logger="nearapi_sdk.connection"):
        connection = Connection.from_config(ConnectionConfig(account_id=ALICE_ID), key_store=InMemoryKeyStore())
    assert connection.signer is None
    assert "No key" in caplog.text


def test_account_requires_signer():
    connection = Connection.from_config(ConnectionConfig())
    with pytest.raises(ValueError, match="signer"):
        connection.account(ALICE_ID)


def test_close():
    connection = Connection.from_config(ConnectionConfig())
    connection.close()
