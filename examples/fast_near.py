#!/usr/bin/env python3
"""
Read accounts, keys and contract views through FastNEAR.
"""
import os

from nearapi_sdk import FastNearClient, NearApiError, NetworkConfig


def main():
    """
    Demonstrate FastNEAR reads.

    This example shows how to:
    1. Resolve the FastNEAR endpoint of a network
    2. Fetch an account, one of its access keys and a contract's methods
    3. Call a view method with arguments passed as query parameters
    """
    NETWORK = os.environ.get("NEAR_NETWORK", "mainnet")
    ACCOUNT_ID = os.environ.get("ACCOUNT_ID", "vlad.near")
    PUBLIC_KEY = os.environ.get("PUBLIC_KEY", "ed25519:JBHUrhF61wfScUxqGGRmfdJTQYg8MzRr5H8pqMMjqygr")
    CONTRACT_ID = os.environ.get("CONTRACT_ID", "lands.near")

    with FastNearClient(NetworkConfig.get_fast_near_url(NETWORK)) as client:
        try:
            account = client.account_info(ACCOUNT_ID)
            print(f"{ACCOUNT_ID} balance: {account.amount} yoctoNEAR")

            key = client.access_key(ACCOUNT_ID, PUBLIC_KEY)
            print(f"Key {key.public_key}: nonce {key.nonce}, {key.type}")

            print(f"{CONTRACT_ID} methods: {', '.join(client.contract_methods(CONTRACT_ID))}")

            page = client.view_function(CONTRACT_ID, "web4_get", {"request": {"path": "/"}})
            print(f"web4_get: {page}")
        except NearApiError as e:
            print(f"FastNEAR read failed: {e}")


if __name__ == "__main__":
    main()
