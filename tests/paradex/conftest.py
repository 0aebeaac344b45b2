"""Shared pytest fixtures for Paradex tests.

The system config and keys are fixed, so derived addresses
and signatures are reproducible between runs.
"""

import pytest
from eth_account import Account
from eth_account.signers.local import LocalAccount

from paradex_defi.paradex.account import ParadexAccount
from paradex_defi.paradex.authentication import ParadexApiClient
from paradex_defi.paradex.config import SystemConfig
from paradex_defi.paradex.constants import ParadexEnvironment

#: Anvil test account #0
L1_PRIVATE_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

L2_PRIVATE_KEY = "0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef"


@pytest.fixture
def system_config() -> SystemConfig:
    """Mock system config with made up class hashes."""
    return SystemConfig(
        l1_chain_id="1",
        starknet_chain_id="SN_MAIN",
        paraclear_account_hash="0xabcdef1234567890abcdef1234567890abcdef1234567890abcdef1234567890",
        paraclear_account_proxy_hash="0x1234567890abcdef1234567890abcdef1234567890abcdef1234567890abcdef",
    )


@pytest.fixture
def l1_private_key() -> str:
    return L1_PRIVATE_KEY


@pytest.fixture
def l1_account(l1_private_key) -> LocalAccount:
    return Account.from_key(l1_private_key)


@pytest.fixture
def paradex_account(system_config, l1_account) -> ParadexAccount:
    """Account with a fixed L2 key."""
    return ParadexAccount.from_l2_private_key(system_config, l1_account.address, L2_PRIVATE_KEY)


@pytest.fixture
def mock_session(mocker):
    """HTTP session that never hits the network."""
    return mocker.Mock()


@pytest.fixture
def api_client(paradex_account, mock_session) -> ParadexApiClient:
    return ParadexApiClient(ParadexEnvironment.testnet, account=paradex_account, session=mock_session)
