"""
Pytest fixtures for the NEAR API SDK tests.
"""
import pytest

from nearapi_sdk._rate_limited_log import reset_rate_limits
from nearapi_sdk.config import NetworkConfig
from nearapi_sdk.signer import InMemorySigner

from test_helpers.fake_provider import FakeProvider

# Constants for testing
TEST_RPC_URL = "https://rpc.testnet.example.com"
ALICE_ID = "alice.testnet"
BOB_ID = "bob.testnet"
RELAYER_ID = "relayer.testnet"
ALICE_NONCE = 41
RELAYER_NONCE = 7
ONE_NEAR = 10 ** 24


@pytest.fixture(autouse=True)
def _reset_module_state():
    """Clear class-level and module-level caches between tests."""
    NetworkConfig._networks_cache = None
    reset_rate_limits()
    yield
    NetworkConfig._networks_cache = None
    reset_rate_limits()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep the developer's NEAR_* settings out of the tests."""
    for name in ("NEAR_RPC_TIMEOUT", "NEAR_INSECURE_RPC", "NEAR_KEY_STORE_PATH", "NEAR_NETWORK"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def alice_signer():
    """Deterministic ED25519 signer for alice.testnet"""
    return InMemorySigner.from_seed(ALICE_ID, "alice")


@pytest.fixture
def bob_signer():
    return InMemorySigner.from_seed(BOB_ID, "bob")


@pytest.fixture
def relayer_signer():
    return InMemorySigner.from_seed(RELAYER_ID, "relayer")


@pytest.fixture
def fake_provider(alice_signer, relayer_signer):
    """Provider knowing alice's and the relayer's access keys"""
    provider = FakeProvider()
    provider.set_access_key(ALICE_ID, alice_signer.public_key(), ALICE_NONCE)
    provider.set_access_key(RELAYER_ID, relayer_signer.public_key(), RELAYER_NONCE)
    return provider
