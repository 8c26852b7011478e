"""
Key stores.
"""
from .key_store import FileKeyStore, InMemoryKeyStore, KeyStore

__all__ = ["KeyStore", "InMemoryKeyStore", "FileKeyStore"]
