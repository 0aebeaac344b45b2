"""Paradex account and message signing.

- :py:class:`ParadexAccount` is the main account: the L2 key is derived
  from an L1 (Ethereum) key and the L2 address is computed from the L2 public key

- :py:class:`SubkeyAccount` signs for an existing L2 account with a
  registered subkey, without any L1 credentials

The L2 private key is held by the account object only. Callers get
signatures, never the key.

Signatures are passed to Paradex as a flattened string ``[0x<r>,0x<s>]``.

Example:

.. code-block:: python

    from paradex_defi.paradex.account import ParadexAccount
    from paradex_defi.paradex.authentication import ParadexApiClient

    client = ParadexApiClient(ParadexEnvironment.testnet)
    config = client.fetch_system_config()
    account = ParadexAccount.from_l1_private_key(
        config,
        l1_address="0x...",
        l1_private_key=os.environ["PARADEX_L1_PRIVATE_KEY"],
    )
    client.account = account
    client.authenticate_account()

    order = Order.builder().market("BTC-USD-PERP").side(OrderSide.buy).order_type(OrderType.market).size("0.01").build()
    account.sign_order(order)
"""

import dataclasses
import logging
import threading
from datetime import UTC, datetime

from eth_account.signers.local import LocalAccount
from eth_typing import HexAddress
from starknet_py.hash.utils import message_signature

from paradex_defi.paradex.auth_lifecycle import AuthLifecycle
from paradex_defi.paradex.block_trades import BlockOfferRequest, BlockTradeRequest
from paradex_defi.paradex.config import SystemConfig, parse_felt_hex
from paradex_defi.paradex.constants import (
    AUTH_SIGNATURE_EXPIRY,
    HEADER_ETHEREUM_ACCOUNT,
    HEADER_SIGNATURE_EXPIRATION,
    HEADER_STARKNET_ACCOUNT,
    HEADER_STARKNET_SIGNATURE,
    HEADER_TIMESTAMP,
)
from paradex_defi.paradex.errors import ConfigurationFormatError, CredentialFormatError, SigningError
from paradex_defi.paradex.key_derivation import (
    compute_account_address,
    compute_public_key,
    derive_l2_key,
    derive_l2_key_from_account,
    parse_l2_private_key,
)
from paradex_defi.paradex.messages import (
    build_auth_message,
    build_block_offer_message,
    build_block_trade_message,
    build_fullnode_message,
    build_modify_order_message,
    build_onboarding_message,
    build_order_message,
)
from paradex_defi.paradex.order import Order
from paradex_defi.paradex.typed_data import TypedData

logger = logging.getLogger(__name__)


#: HTTP headers as an ordered list of (name, value)
Headers = list[tuple[str, str]]


def flatten_signature(r: int, s: int) -> str:
    """Format a signature the way Paradex expects it.

    >>> flatten_signature(0x123, 0x456)
    '[0x123,0x456]'
    """
    return f"[{hex(r)},{hex(s)}]"


class StarkSigningAccount:
    """Signing operations shared by all Paradex account types.

    - Signing only reads the private key, so it is safe to sign from many threads

    - The JWT is the only mutable state, replaced under a lock
    """

    def __init__(self, *, l2_address: int, l2_private_key: int, chain_id: int, decimals: int, l2_public_key: int | None = None):
        """
        :param l2_address:
            Account contract address

        :param l2_private_key:
            Validated L2 private key

        :param chain_id:
            Starknet chain id as a field element

        :param decimals:
            Paraclear quantum decimals

        :param l2_public_key:
            Public key, if already computed
        """
        self._l2_address = l2_address
        self._l2_private_key = l2_private_key
        self._l2_public_key = l2_public_key or compute_public_key(l2_private_key)
        self._chain_id = chain_id
        self.decimals = decimals
        self._jwt_token: str | None = None
        self._token_lock = threading.Lock()

        #: When we last authenticated
        self.auth = AuthLifecycle()

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.l2_address_hex} authenticated:{self.auth.is_authenticated()}>"

    @property
    def l2_address(self) -> int:
        """Account contract address."""
        return self._l2_address

    @property
    def l2_public_key(self) -> int:
        return self._l2_public_key

    @property
    def chain_id(self) -> int:
        return self._chain_id

    @property
    def l2_address_hex(self) -> str:
        return hex(self._l2_address)

    @property
    def l2_public_key_hex(self) -> str:
        return hex(self._l2_public_key)

    @property
    def jwt_token(self) -> str | None:
        """Session token from the last authentication."""
        return self._jwt_token

    def set_jwt_token(self, token: str, authenticated_at: datetime | None = None):
        """Replace the session token after a successful authentication."""
        assert token, "Empty JWT"
        with self._token_lock:
            self._jwt_token = token
            self.auth.mark_authenticated(authenticated_at)

    def clear_jwt_token(self):
        with self._token_lock:
            self._jwt_token = None
            self.auth.reset()

    def sign_hash(self, msg_hash: int) -> tuple[int, int]:
        """Sign a message hash with the L2 key.

        :return:
            Signature ``(r, s)``

        :raise SigningError:
            If the curve signing fails
        """
        try:
            r, s = message_signature(msg_hash, self._l2_private_key)
        except Exception as e:
            raise SigningError(f"Signing failed: {e}") from e
        return r, s

    def sign_typed_data(self, typed_data: TypedData) -> str:
        """Hash and sign typed data.

        :return:
            Flattened signature
        """
        message_hash = typed_data.message_hash()
        r, s = self.sign_hash(message_hash)
        logger.debug("Signed %s message %s", typed_data.primary_type, hex(message_hash))
        return flatten_signature(r, s)

    def sign_order(self, order: Order) -> str:
        """Sign an order.

        - If the order has no ``signature_timestamp``, it is set to the current time in milliseconds.
          An existing timestamp is kept.

        - Orders with ``id`` are signed as modifications of that order

        - The signature and the timestamp are stored in the order only after signing succeeds.
          If signing fails, the timestamp is left as it was and ``order.signature`` is cleared,
          as an earlier signature no longer matches the order.

        :return:
            Flattened signature

        :raise SigningError:
            If the order cannot be encoded or signed
        """
        timestamp = order.signature_timestamp
        if timestamp is None:
            timestamp = int(datetime.now(UTC).timestamp() * 1000)

        stamped = dataclasses.replace(order, signature_timestamp=timestamp, signature=None)
        try:
            if stamped.id is not None:
                typed_data = build_modify_order_message(self._chain_id, stamped, self.decimals)
            else:
                typed_data = build_order_message(self._chain_id, stamped, self.decimals)
            signature = self.sign_typed_data(typed_data)
        except SigningError:
            order.signature = None
            raise

        order.signature_timestamp = timestamp
        order.signature = signature
        return signature

    def auth_headers(self, timestamp: int | None = None) -> Headers:
        """Headers for a JWT request.

        The signature is valid for 24 hours.

        :param timestamp:
            Override the current time, seconds since epoch
        """
        if timestamp is None:
            timestamp = int(datetime.now(UTC).timestamp())
        expiry = timestamp + AUTH_SIGNATURE_EXPIRY

        typed_data = build_auth_message(self._chain_id, timestamp, expiry)
        signature = self.sign_typed_data(typed_data)

        return [
            (HEADER_STARKNET_ACCOUNT, self.l2_address_hex),
            (HEADER_STARKNET_SIGNATURE, signature),
            (HEADER_TIMESTAMP, str(timestamp)),
            (HEADER_SIGNATURE_EXPIRATION, str(expiry)),
        ]

    def sign_block_trade(self, block_trade: BlockTradeRequest) -> str:
        return self.sign_typed_data(build_block_trade_message(self._chain_id, block_trade))

    def sign_block_offer(self, offer: BlockOfferRequest) -> str:
        return self.sign_typed_data(build_block_offer_message(self._chain_id, offer))

    def sign_fullnode_request(self, json_payload: str, signature_timestamp: int | None = None) -> tuple[str, int]:
        """Sign a JSON-RPC request to the Paradex fullnode.

        :return:
            Tuple (flattened signature, signature timestamp in milliseconds)
        """
        if signature_timestamp is None:
            signature_timestamp = int(datetime.now(UTC).timestamp() * 1000)
        typed_data = build_fullnode_message(self._chain_id, self.l2_address_hex, json_payload, signature_timestamp)
        return self.sign_typed_data(typed_data), signature_timestamp


class ParadexAccount(StarkSigningAccount):
    """Paradex account derived from L1 credentials.

    - The L2 address is computed once at construction from the public key and the
      account class hashes in :py:class:`~paradex_defi.paradex.config.SystemConfig`

    - Construction either succeeds fully or raises, there are no half-built accounts
    """

    def __init__(self, *, config: SystemConfig, l1_address: HexAddress, l2_private_key: str | int):
        """
        :param config:
            Paradex system configuration

        :param l1_address:
            Ethereum address of the account owner

        :param l2_private_key:
            L2 private key, hex string or integer

        :raise CredentialFormatError:
            Bad L2 key

        :raise ConfigurationFormatError:
            Bad class hashes or chain id in the config
        """
        key = parse_l2_private_key(l2_private_key)
        public_key = compute_public_key(key)
        address = compute_account_address(
            public_key,
            account_class_hash=config.account_class_hash,
            proxy_class_hash=config.proxy_class_hash,
        )
        super().__init__(
            l2_address=address,
            l2_private_key=key,
            chain_id=config.starknet_chain_id_felt,
            decimals=config.paraclear_decimals,
            l2_public_key=public_key,
        )
        self.l1_address = l1_address
        logger.info("Paradex account %s for L1 %s", self.l2_address_hex, l1_address)

    @classmethod
    def from_l1_private_key(cls, config: SystemConfig, l1_address: HexAddress, l1_private_key: str) -> "ParadexAccount":
        """Create an account by deriving the L2 key from an L1 private key.

        :raise CredentialFormatError:
            Bad L1 key
        """
        l1_chain_id = config.parse_l1_chain_id()
        l2_private_key = derive_l2_key(l1_private_key, l1_chain_id)
        return cls(config=config, l1_address=l1_address, l2_private_key=l2_private_key)

    @classmethod
    def from_l1_account(cls, config: SystemConfig, l1_account: LocalAccount) -> "ParadexAccount":
        """Create an account by deriving the L2 key with an L1 signer.

        E.g. ``HotWallet.account`` or ``Account.from_key()``.
        """
        l1_chain_id = config.parse_l1_chain_id()
        l2_private_key = derive_l2_key_from_account(l1_account, l1_chain_id)
        return cls(config=config, l1_address=l1_account.address, l2_private_key=l2_private_key)

    @classmethod
    def from_l2_private_key(cls, config: SystemConfig, l1_address: HexAddress, l2_private_key: str | int) -> "ParadexAccount":
        """Create an account from a known L2 key."""
        return cls(config=config, l1_address=l1_address, l2_private_key=l2_private_key)

    def onboarding_headers(self) -> Headers:
        """Headers for the onboarding request."""
        signature = self.sign_typed_data(build_onboarding_message(self._chain_id))
        return [
            (HEADER_ETHEREUM_ACCOUNT, self.l1_address),
            (HEADER_STARKNET_ACCOUNT, self.l2_address_hex),
            (HEADER_STARKNET_SIGNATURE, signature),
        ]


class SubkeyAccount(StarkSigningAccount):
    """Signs for an existing Paradex account with a subkey.

    Subkeys can trade and authenticate, but cannot onboard.
    """

    def __init__(self, *, config: SystemConfig, l2_private_key: str | int, l2_address: str):
        """
        :param l2_private_key:
            Subkey private key

        :param l2_address:
            Address of the main account the subkey is registered to

        :raise CredentialFormatError:
            Bad L2 key or address
        """
        key = parse_l2_private_key(l2_private_key)
        try:
            address = parse_felt_hex(l2_address, "L2 address")
        except ConfigurationFormatError as e:
            raise CredentialFormatError(f"Invalid L2 address: {l2_address!r}") from e
        super().__init__(
            l2_address=address,
            l2_private_key=key,
            chain_id=config.starknet_chain_id_felt,
            decimals=config.paraclear_decimals,
        )
        logger.info("Paradex subkey account %s, subkey %s", self.l2_address_hex, self.l2_public_key_hex)
