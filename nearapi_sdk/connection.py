"""
Wiring of provider, signer and account from configuration.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from .accounts.account import Account
from .config import NetworkConfig, get_default_network
from .keystore.key_store import KeyStore
from .providers.json_rpc import JsonRpcProvider
from .providers.provider import Provider
from .signer import InMemorySigner, Signer

logger = logging.getLogger(__name__)


@dataclass
class ConnectionConfig:
    """
    Settings for a connection.

    Attributes:
        network_id: Network name from networks.json (defaults to NEAR_NETWORK or testnet)
        rpc_url: RPC URL override
        key_file: NEAR credentials key file for the signer
        account_id: Account id (defaults to the one in the key file)
    """
    network_id: Optional[str] = None
    rpc_url: Optional[str] = None
    key_file: Optional[Union[str, Path]] = None
    account_id: Optional[str] = None


class Connection:
    """
    A provider plus an optional signer for one network.

    Nothing is global: every Connection owns its provider, and accounts built
    from it share that provider.
    """

    def __init__(self, network_id: str, provider: Provider, signer: Optional[Signer] = None, account_id: Optional[str] = None):
        self.network_id = network_id
        self.provider = provider
        self.signer = signer
        self.account_id = account_id

    @classmethod
    def from_config(cls, config: ConnectionConfig, key_store: Optional[KeyStore] = None) -> "Connection":
        """
        Build a connection from settings.

        The signer comes from ``config.key_file`` if set, otherwise from
        ``key_store`` when both it and ``config.account_id`` are given.

        Args:
            config: Connection settings
            key_store: Optional key store to look the account's key up in

        Returns:
            Connection

        Raises:
            ValueError: If the network is unknown
            InvalidKeyError: If the key file is invalid
        """
        network_id = config.network_id or get_default_network()
        rpc_url = NetworkConfig.get_rpc_url(network_id, override=config.rpc_url)
        provider = JsonRpcProvider(rpc_url)

        signer = None
        account_id = config.account_id
        if config.key_file:
            signer = InMemorySigner.from_key_file(config.key_file, account_id)
            account_id = signer.account_id
        elif key_store is not None and account_id:
            key_pair = key_store.get_key(network_id, account_id)
            if key_pair is not None:
                signer = InMemorySigner(account_id, key_pair)
            else:
                logger.warning(f"No key for {account_id} on {network_id} in key store")

        logger.debug(f"Connected to {network_id} at {rpc_url}")
        return cls(network_id, provider, signer, account_id)

    def account(self, account_id: Optional[str] = None) -> Account:
        """
        Account bound to this connection's provider and signer.

        Raises:
            ValueError: If no signer or account id is available
        """
        account_id = account_id or self.account_id
        if self.signer is None or not account_id:
            raise ValueError("Connection has no signer; configure key_file or a key store")
        return Account(account_id, self.signer, self.provider)

    def close(self) -> None:
        close = getattr(self.provider, "close", None)
        if close is not None:
            close()
