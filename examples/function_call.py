#!/usr/bin/env python3
"""
Call a contract method and choose the finality level at submission time.
"""
import os

from nearapi_sdk import Account, InMemorySigner, JsonRpcProvider, NetworkConfig, NearApiError
from nearapi_sdk.accounts import view_function


def main():
    """
    Demonstrate a change call followed by a view call.

    This example shows how to:
    1. Prepare a signed function call with Account.function_call
    2. Submit it through the returned TransactionSender
    3. Read the new state back with view_function
    """
    NETWORK = os.environ.get("NEAR_NETWORK", "testnet")
    KEY_FILE = os.environ.get("NEAR_KEY_FILE")
    CONTRACT_ID = os.environ.get("CONTRACT_ID", "guest-book.testnet")

    if not KEY_FILE:
        print("ERROR: NEAR_KEY_FILE environment variable is required")
        return

    signer = InMemorySigner.from_key_file(KEY_FILE)
    provider = JsonRpcProvider(NetworkConfig.get_rpc_url(NETWORK))
    account = Account(signer.account_id, signer, provider)

    try:
        sender = account.function_call(CONTRACT_ID, "add_message", {"text": "Hello from Python"})
        print(f"Submitting {sender.get_hash_base58()}")
        outcome = sender.transact_advanced("INCLUDED_FINAL")
        outcome.raise_for_failure()
        print(f"Final execution status: {outcome.final_execution_status.rpc_name}")

        messages = view_function(provider, CONTRACT_ID, "get_messages", {"from_index": "0", "limit": "5"})
        print(f"Latest messages: {messages.decode_json()}")
    except NearApiError as e:
        print(f"Function call failed: {e}")
    finally:
        provider.close()


if __name__ == "__main__":
    main()
