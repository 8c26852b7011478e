#!/usr/bin/env python3
"""
Relay a meta-transaction: the sender signs, the relayer pays the gas.
"""
import os

from nearapi_sdk import (
    Account,
    ActionBuilder,
    InMemorySigner,
    JsonRpcProvider,
    NearApiError,
    NetworkConfig,
)


def main():
    """
    Demonstrate a delegate action relayed by a second account.

    This example shows how to:
    1. Sign a delegate action as the sender (no gas spent by the sender)
    2. Wrap it in a transaction signed by the relayer
    3. Submit and check the outcome for expiry or failure
    """
    NETWORK = os.environ.get("NEAR_NETWORK", "testnet")
    SENDER_KEY_FILE = os.environ.get("SENDER_KEY_FILE")
    RELAYER_KEY_FILE = os.environ.get("RELAYER_KEY_FILE")
    CONTRACT_ID = os.environ.get("CONTRACT_ID", "status-message.testnet")

    if not SENDER_KEY_FILE or not RELAYER_KEY_FILE:
        print("ERROR: SENDER_KEY_FILE and RELAYER_KEY_FILE environment variables are required")
        return

    provider = JsonRpcProvider(NetworkConfig.get_rpc_url(NETWORK))
    sender_signer = InMemorySigner.from_key_file(SENDER_KEY_FILE)
    relayer_signer = InMemorySigner.from_key_file(RELAYER_KEY_FILE)
    sender = Account(sender_signer.account_id, sender_signer, provider)
    relayer = Account(relayer_signer.account_id, relayer_signer, provider)

    actions = ActionBuilder().function_call("set_status", {"message": "relayed"}).build()

    try:
        signed_delegate = sender.create_signed_delegate(CONTRACT_ID, actions, block_height_ttl=120)
        print(f"Delegate valid until block {signed_delegate.delegate_action.max_block_height}")

        outcome = relayer.relay(signed_delegate).transact()
        outcome.raise_for_failure()
        print(f"Relayed in {outcome.transaction_hash}; receipts ran on {outcome.receipt_executor_ids}")
    except NearApiError as e:
        print(f"Relay failed: {e}")
    finally:
        provider.close()


if __name__ == "__main__":
    main()
