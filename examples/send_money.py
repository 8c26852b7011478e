#!/usr/bin/env python3
"""
Send NEAR from one account to another.
"""
import os

from nearapi_sdk import Account, InMemorySigner, JsonRpcProvider, NetworkConfig, NearApiError


def main():
    """
    Demonstrate a plain transfer.

    This example shows how to:
    1. Load a signer from a NEAR credentials key file
    2. Connect to the network's RPC node
    3. Transfer 1 NEAR and wait for optimistic execution
    """
    NETWORK = os.environ.get("NEAR_NETWORK", "testnet")
    KEY_FILE = os.environ.get("NEAR_KEY_FILE")
    RECEIVER_ID = os.environ.get("RECEIVER_ID")

    if not KEY_FILE or not RECEIVER_ID:
        print("ERROR: NEAR_KEY_FILE and RECEIVER_ID environment variables are required")
        return

    signer = InMemorySigner.from_key_file(KEY_FILE)
    provider = JsonRpcProvider(NetworkConfig.get_rpc_url(NETWORK))
    account = Account(signer.account_id, signer, provider)

    try:
        outcome = account.send_money(RECEIVER_ID, 10 ** 24)  # 1 NEAR
        outcome.raise_for_failure()
        print(f"Transfer succeeded: {NetworkConfig.get_explorer_tx_url(NETWORK, outcome.transaction_hash)}")
        print(f"Tokens burnt: {outcome.tokens_burnt}")
    except NearApiError as e:
        print(f"Transfer failed: {e}")
    finally:
        provider.close()


if __name__ == "__main__":
    main()
