"""
Pytest fixtures for the AidChain SDK tests.
"""
import time
from unittest.mock import MagicMock

import pytest

from aidchain_sdk import _rate_limited_log
from aidchain_sdk.config import NetworkConfig
from aidchain_sdk.intent import IntentBuilder
from aidchain_sdk.ledger import SuiLedgerClient
from aidchain_sdk.relay_client import RelayClient
from aidchain_sdk.signer.local import LocalSigner
from aidchain_sdk.signing import SignatureCoordinator

from tests.test_helpers import TEST_CONFIG, TEST_PRIV_KEY


# Make time.sleep instantaneous so effect polling doesn't slow the suite down
@pytest.fixture(autouse=True)
def _fast_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


@pytest.fixture(autouse=True)
def _reset_shared_state():
    """Suppressed log messages and the network table must not leak between tests."""
    _rate_limited_log.reset()
    NetworkConfig._networks_cache = None
    yield
    _rate_limited_log.reset()
    NetworkConfig._networks_cache = None


@pytest.fixture
def config():
    return TEST_CONFIG


@pytest.fixture
def builder(config):
    return IntentBuilder(config)


@pytest.fixture
def signer():
    """Deterministic local signer"""
    return LocalSigner(TEST_PRIV_KEY)


@pytest.fixture
def signatures(signer):
    return SignatureCoordinator(signer)


@pytest.fixture
def mock_relay():
    """RelayClient double; configure create_grant/execute per test"""
    return MagicMock(spec=RelayClient)


@pytest.fixture
def mock_ledger():
    """SuiLedgerClient double"""
    return MagicMock(spec=SuiLedgerClient)


@pytest.fixture
def mock_provider():
    """Upstream sponsor provider double recording every call"""
    provider = MagicMock()
    provider.create_sponsored_transaction.return_value = {"bytes": "AAAA", "digest": "GrantDigest111"}
    provider.execute_sponsored_transaction.side_effect = lambda digest, signature: {"digest": digest}
    return provider
