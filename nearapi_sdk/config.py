"""
Network and environment configuration for the NEAR API SDK.
"""
import importlib.resources
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

ENV_RPC_TIMEOUT = "NEAR_RPC_TIMEOUT"
ENV_INSECURE_RPC = "NEAR_INSECURE_RPC"
ENV_KEY_STORE_PATH = "NEAR_KEY_STORE_PATH"
ENV_NETWORK = "NEAR_NETWORK"

DEFAULT_RPC_TIMEOUT = 30.0
DEFAULT_NETWORK = "testnet"
DEFAULT_KEY_STORE_PATH = "~/.near-credentials"


class NetworkConfig:
    """
    Bundled network definitions (``networks.json``).

    Each entry has ``networkId``, ``rpc``, ``archivalRpc`` and ``explorer``.
    The file is read once and cached on the class.
    """

    _networks_cache: Optional[Dict[str, Dict[str, Any]]] = None

    @classmethod
    def load_networks(cls) -> Dict[str, Dict[str, Any]]:
        """
        Load network configurations from the bundled file.

        Returns:
            Mapping of network name to its configuration
        """
        if cls._networks_cache is not None:
            return cls._networks_cache

        resource = importlib.resources.files("nearapi_sdk").joinpath("networks.json")
        with resource.open("r", encoding="utf-8") as f:
            cls._networks_cache = json.load(f)
        logger.debug(f"Loaded {len(cls._networks_cache)} network configurations")
        return cls._networks_cache

    @classmethod
    def get_network(cls, network_name: str) -> Dict[str, Any]:
        """
        Get the configuration of one network.

        Args:
            network_name: Network name, e.g. "testnet"

        Returns:
            Network configuration

        Raises:
            ValueError: If the network is not defined
        """
        networks = cls.load_networks()
        if network_name not in networks:
            available = ", ".join(sorted(networks))
            raise ValueError(f"Network '{network_name}' not found. Available networks: {available}")
        return networks[network_name]

    @classmethod
    def get_rpc_url(cls, network_name: str, override: Optional[str] = None) -> str:
        """
        Resolve the RPC URL of a network.

        Precedence: ``override``, then the ``<NETWORK>_RPC_URL`` environment
        variable (dashes become underscores), then the bundled file.
        """
        if override:
            return override

        env_var = f"{network_name.upper().replace('-', '_')}_RPC_URL"
        env_url = os.environ.get(env_var)
        if env_url:
            logger.debug(f"Using RPC URL from {env_var}")
            return env_url

        return cls.get_network(network_name)["rpc"]

    @classmethod
    def get_archival_rpc_url(cls, network_name: str) -> str:
        network = cls.get_network(network_name)
        return network.get("archivalRpc") or network["rpc"]

    @classmethod
    def get_fast_near_url(cls, network_name: str) -> str:
        """
        Base URL of the FastNEAR HTTP endpoint of a network.

        Raises:
            ValueError: If the network has no FastNEAR endpoint
        """
        url = cls.get_network(network_name).get("fastNear")
        if not url:
            raise ValueError(f"Network '{network_name}' has no FastNEAR endpoint")
        return url

    @classmethod
    def get_explorer_tx_url(cls, network_name: str, tx_hash: str) -> Optional[str]:
        """Explorer link for a transaction, or None if the network has no explorer."""
        explorer = cls.get_network(network_name).get("explorer")
        if not explorer:
            return None
        return f"{explorer.rstrip('/')}/txns/{tx_hash}"


def get_rpc_timeout() -> float:
    """HTTP timeout in seconds from ``NEAR_RPC_TIMEOUT`` (default 30)."""
    raw = os.environ.get(ENV_RPC_TIMEOUT)
    if not raw:
        return DEFAULT_RPC_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        raise ValueError(f"{ENV_RPC_TIMEOUT} must be a number of seconds, got {raw!r}")
    if timeout <= 0:
        raise ValueError(f"{ENV_RPC_TIMEOUT} must be positive, got {raw!r}")
    return timeout


def insecure_rpc_allowed() -> bool:
    """Whether ``NEAR_INSECURE_RPC=1`` allows plain http to non-local hosts."""
    return os.environ.get(ENV_INSECURE_RPC, "").lower() in ("1", "true", "yes")


def get_key_store_path() -> Path:
    """Root of the file key store from ``NEAR_KEY_STORE_PATH``."""
    return Path(os.environ.get(ENV_KEY_STORE_PATH) or DEFAULT_KEY_STORE_PATH).expanduser()


def get_default_network() -> str:
    """Network used when none is given, from ``NEAR_NETWORK``."""
    return os.environ.get(ENV_NETWORK) or DEFAULT_NETWORK
