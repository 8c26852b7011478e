"""
Key stores: where signing keys live between runs.
"""
import json
import logging
import os
import stat
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Union

import portalocker

from ..config import get_key_store_path
from ..crypto import KeyPair
from ..exceptions import InvalidKeyError, KeyStoreError
from ..utils import validate_account_id

logger = logging.getLogger(__name__)

LOCK_TIMEOUT = 10


class KeyStore(ABC):
    """Abstract base class for key stores keyed by (network, account)."""

    @abstractmethod
    def set_key(self, network_id: str, account_id: str, key_pair: KeyPair) -> None:
        """Store the key of an account, replacing any existing one."""
        pass

    @abstractmethod
    def get_key(self, network_id: str, account_id: str) -> Optional[KeyPair]:
        """
        Get the key of an account.

        Returns:
            KeyPair or None if no key is stored
        """
        pass

    @abstractmethod
    def remove_key(self, network_id: str, account_id: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        """Remove every stored key."""
        pass

    @abstractmethod
    def get_networks(self) -> List[str]:
        pass

    @abstractmethod
    def get_accounts(self, network_id: str) -> List[str]:
        pass


class InMemoryKeyStore(KeyStore):
    """Key store holding keys in a dict; contents are lost when the process exits."""

    def __init__(self):
        self._keys: Dict[str, KeyPair] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(network_id: str, account_id: str) -> str:
        return f"{account_id}:{network_id}"

    def set_key(self, network_id: str, account_id: str, key_pair: KeyPair) -> None:
        with self._lock:
            self._keys[self._key(network_id, account_id)] = key_pair

    def get_key(self, network_id: str, account_id: str) -> Optional[KeyPair]:
        with self._lock:
            return self._keys.get(self._key(network_id, account_id))

    def remove_key(self, network_id: str, account_id: str) -> None:
        with self._lock:
            self._keys.pop(self._key(network_id, account_id), None)

    def clear(self) -> None:
        with self._lock:
            self._keys.clear()

    def get_networks(self) -> List[str]:
        with self._lock:
            return sorted({key.rsplit(":", 1)[1] for key in self._keys})

    def get_accounts(self, network_id: str) -> List[str]:
        with self._lock:
            return sorted(
                account for account, network in (key.rsplit(":", 1) for key in self._keys)
                if network == network_id
            )


class FileKeyStore(KeyStore):
    """
    Key store using the NEAR credentials directory layout.

    Keys live in ``<root>/<network>/<account>.json`` as JSON objects with
    ``account_id``, ``public_key`` and ``private_key``. Access is guarded by
    portalocker file locks so several processes can share one store.
    """

    def __init__(self, root: Optional[Union[str, Path]] = None):
        """
        Initialize the key store.

        Args:
            root: Store directory (defaults to NEAR_KEY_STORE_PATH or ~/.near-credentials)
        """
        self.root = Path(root).expanduser() if root else get_key_store_path()

    def _network_dir(self, network_id: str) -> Path:
        if not network_id or "/" in network_id or "\\" in network_id or network_id.startswith("."):
            raise KeyStoreError(f"Invalid network id: {network_id!r}")
        return self.root / network_id

    def _key_path(self, network_id: str, account_id: str) -> Path:
        validate_account_id(account_id)
        return self._network_dir(network_id) / f"{account_id}.json"

    @staticmethod
    def _lock_path(path: Path) -> str:
        return str(path) + ".lock"

    def _ensure_dir(self, directory: Path) -> None:
        directory.mkdir(parents=True, exist_ok=True)
        # Set secure permissions on directory (Unix/Linux/Mac only)
        if os.name == 'posix':
            os.chmod(directory, stat.S_IRUSR | stat.S_IWUSR | stat.S_IXUSR)  # 0700

    def set_key(self, network_id: str, account_id: str, key_pair: KeyPair) -> None:
        path = self._key_path(network_id, account_id)
        self._ensure_dir(path.parent)
        data = {
            "account_id": account_id,
            "public_key": str(key_pair.public_key),
            "private_key": key_pair.secret_key,
        }
        try:
            with portalocker.Lock(self._lock_path(path), timeout=LOCK_TIMEOUT):
                with open(path, "w") as f:
                    json.dump(data, f, indent=2)
                if os.name == 'posix':
                    os.chmod(path, stat.S_IRUSR | stat.S_IWUSR)  # 0600
        except (OSError, portalocker.LockException) as e:
            raise KeyStoreError(f"Failed to write key for {account_id} on {network_id}: {e}")
        logger.debug(f"Stored key {key_pair.public_key} for {account_id} on {network_id}")

    def get_key(self, network_id: str, account_id: str) -> Optional[KeyPair]:
        path = self._key_path(network_id, account_id)
        if not path.exists():
            return None
        try:
            with portalocker.Lock(self._lock_path(path), timeout=LOCK_TIMEOUT):
                with open(path, "r") as f:
                    data = json.load(f)
        except (OSError, ValueError, portalocker.LockException) as e:
            raise KeyStoreError(f"Failed to read key for {account_id} on {network_id}: {e}")

        secret = data.get("private_key") or data.get("secret_key")
        if not secret:
            raise KeyStoreError(f"Key file {path} has no private_key")
        try:
            return KeyPair.from_string(secret)
        except InvalidKeyError as e:
            raise KeyStoreError(f"Key file {path} holds an invalid key: {e}")

    def remove_key(self, network_id: str, account_id: str) -> None:
        path = self._key_path(network_id, account_id)
        if not path.exists():
            return
        try:
            with portalocker.Lock(self._lock_path(path), timeout=LOCK_TIMEOUT):
                path.unlink()
        except (OSError, portalocker.LockException) as e:
            raise KeyStoreError(f"Failed to remove key for {account_id} on {network_id}: {e}")
        logger.debug(f"Removed key for {account_id} on {network_id}")

    def clear(self) -> None:
        for network_id in self.get_networks():
            for account_id in self.get_accounts(network_id):
                self.remove_key(network_id, account_id)

    def get_networks(self) -> List[str]:
        if not self.root.is_dir():
            return []
        return sorted(entry.name for entry in self.root.iterdir() if entry.is_dir())

    def get_accounts(self, network_id: str) -> List[str]:
        directory = self._network_dir(network_id)
        if not directory.is_dir():
            return []
        return sorted(entry.stem for entry in directory.glob("*.json"))
