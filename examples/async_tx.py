#!/usr/bin/env python3
"""
Submit without waiting, then poll the status.
"""
import os
import time

from nearapi_sdk import (
    Account,
    InMemorySigner,
    JsonRpcProvider,
    NearApiError,
    NetworkConfig,
    TxExecutionStatus,
)


def main():
    """
    Demonstrate fire-and-poll submission.

    This example shows how to:
    1. Submit with TxExecutionStatus.NONE (returns once the pool accepts it)
    2. Poll get_status until the transaction is final
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
        sender = account.function_call(CONTRACT_ID, "add_message", {"text": "async hello"})
        accepted = sender.transact_async()
        print(f"Accepted {accepted.transaction_hash}")

        for _ in range(10):
            status = sender.get_status(TxExecutionStatus.INCLUDED)
            print(f"Status: {status.final_execution_status.rpc_name}")
            if status.final_execution_status >= TxExecutionStatus.FINAL:
                break
            time.sleep(1)
    except NearApiError as e:
        print(f"Transaction failed: {e}")
    finally:
        provider.close()


if __name__ == "__main__":
    main()
