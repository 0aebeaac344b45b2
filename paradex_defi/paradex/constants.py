"""Paradex API constants and configuration.

This module defines API endpoints, protocol constants and HTTP defaults
for the Paradex integration.
"""

import enum
from pathlib import Path


class ParadexEnvironment(enum.Enum):
    """Paradex deployments."""

    prod = "prod"

    testnet = "testnet"

    @property
    def api_url(self) -> str:
        """REST API base URL, without a trailing slash."""
        return f"https://api.{self.value}.paradex.trade/v1"

    @property
    def ws_url(self) -> str:
        """WebSocket API URL."""
        return f"wss://ws.api.{self.value}.paradex.trade/v1"

    def __str__(self):
        return self.value


#: Typed data domain name for all Paradex messages
DOMAIN_NAME = "Paradex"

#: Typed data domain version for all Paradex messages
DOMAIN_VERSION = "1"

#: Name of the typed data domain type
DOMAIN_TYPE_NAME = "StarkNetDomain"

#: Message signed with the L1 key to derive the L2 key.
#:
#: Formatted with the decimal L1 chain id. Changing this changes
#: every derived account.
STARK_KEY_DERIVATION_MESSAGE = "Paradex Stark Key Derivation: {chain_id}"

#: Account contract initialiser, called through the proxy constructor
ACCOUNT_INITIALIZE_FUNCTION = "initialize"

#: How many seconds a JWT is considered fresh before we re-authenticate
JWT_REFRESH_INTERVAL = 4 * 60

#: How many seconds an auth request signature stays valid
AUTH_SIGNATURE_EXPIRY = 24 * 60 * 60

#: Fullnode request signature version
FULLNODE_SIGNATURE_VERSION = "1.0.0"

#: Paraclear quantum decimals
PARACLEAR_DECIMALS = 8

#: Header carrying the L1 (Ethereum) account during onboarding
HEADER_ETHEREUM_ACCOUNT = "PARADEX-ETHEREUM-ACCOUNT"

#: Header carrying the L2 (Starknet) account address
HEADER_STARKNET_ACCOUNT = "PARADEX-STARKNET-ACCOUNT"

#: Header carrying the flattened Starknet signature
HEADER_STARKNET_SIGNATURE = "PARADEX-STARKNET-SIGNATURE"

#: Header carrying the auth request timestamp (seconds)
HEADER_TIMESTAMP = "PARADEX-TIMESTAMP"

#: Header carrying the auth signature expiration (seconds)
HEADER_SIGNATURE_EXPIRATION = "PARADEX-SIGNATURE-EXPIRATION"

#: Default rate limit for Paradex API requests per second
DEFAULT_REQUESTS_PER_SECOND = 10.0

#: Default number of retries for API requests
DEFAULT_RETRIES = 5

#: Default backoff factor for retries (seconds)
DEFAULT_BACKOFF_FACTOR = 0.5

#: Default HTTP timeout (seconds)
DEFAULT_TIMEOUT = 30.0

#: Default SQLite database path for rate limiting state
#:
#: Using SQLite ensures thread-safe rate limiting across multiple threads
PARADEX_RATE_LIMIT_SQLITE_DATABASE = Path("~/.paradex-defi/rate-limit.sqlite").expanduser()
