"""Paradex typed data messages.

Every message Paradex accepts a signature for has a fixed shape.
Each shape is a dataclass below, with its primary type name and ordered
member list as class variables. A message is turned into
:py:class:`~paradex_defi.paradex.typed_data.TypedData` by :py:meth:`ParadexMessage.to_typed_data`.

All members are ``felt``. Protocol strings are converted with :py:func:`encode_text_felt`
and decimal amounts to quantums before hashing.

Field order matters: it is part of the type hash.
"""

import abc
import logging
import re
from dataclasses import dataclass
from typing import ClassVar

from starknet_py.cairo.felt import encode_shortstring

from paradex_defi.paradex.block_trades import BlockOfferRequest, BlockTradeRequest
from paradex_defi.paradex.constants import (
    DOMAIN_NAME,
    DOMAIN_TYPE_NAME,
    DOMAIN_VERSION,
    FULLNODE_SIGNATURE_VERSION,
    PARACLEAR_DECIMALS,
)
from paradex_defi.paradex.errors import SigningError
from paradex_defi.paradex.order import Order, OrderSide, OrderType
from paradex_defi.paradex.typed_data import StarknetDomain, TypedData, TypeMember, starknet_keccak

logger = logging.getLogger(__name__)


_NUMERIC = re.compile(r"^(0x[0-9a-fA-F]+|[0-9]+)$")

#: Members of the ``StarkNetDomain`` type
DOMAIN_MEMBERS = (
    TypeMember("name"),
    TypeMember("chainId"),
    TypeMember("version"),
)


def encode_text_felt(text: str) -> str:
    """Encode a protocol string as a felt string.

    - Numeric strings, decimal or ``0x`` hex, are already felts
    - ASCII strings up to 31 characters are Cairo short strings
    - Anything longer is hashed with Starknet keccak
    """
    if _NUMERIC.match(text):
        return text
    if text.isascii() and len(text) <= 31:
        return hex(encode_shortstring(text))
    return hex(starknet_keccak(text.encode("utf-8")))


@dataclass(slots=True, frozen=True)
class ParadexMessage(abc.ABC):
    """Base class for signable Paradex messages."""

    #: Typed data primary type name
    primary_type: ClassVar[str]

    #: Message member names in type hash order
    member_names: ClassVar[tuple[str, ...]]

    @abc.abstractmethod
    def encode_members(self) -> dict[str, str]:
        """Message values as felt strings, keyed by member name."""

    def to_typed_data(self, chain_id: int) -> TypedData:
        """Build typed data for a Paradex chain.

        :param chain_id:
            Starknet chain id as a field element
        """
        message = self.encode_members()
        assert tuple(message.keys()) == self.member_names, f"{self.primary_type}: {message.keys()} vs {self.member_names}"
        return TypedData(
            domain=StarknetDomain(name=DOMAIN_NAME, chain_id=hex(chain_id), version=DOMAIN_VERSION),
            primary_type=self.primary_type,
            types={
                DOMAIN_TYPE_NAME: list(DOMAIN_MEMBERS),
                self.primary_type: [TypeMember(name) for name in self.member_names],
            },
            message=message,
        )


@dataclass(slots=True, frozen=True)
class OrderMessage(ParadexMessage):
    """New order."""

    primary_type: ClassVar[str] = "Order"

    member_names: ClassVar[tuple[str, ...]] = ("timestamp", "market", "side", "orderType", "size", "price")

    #: Milliseconds since epoch
    timestamp: int

    market: str

    side: OrderSide

    order_type: OrderType

    #: Quantums
    size: int

    #: Quantums
    price: int

    @classmethod
    def from_order(cls, order: Order, decimals: int = PARACLEAR_DECIMALS) -> "OrderMessage":
        return cls(**_order_values(order, decimals))

    def encode_members(self) -> dict[str, str]:
        return {
            "timestamp": str(self.timestamp),
            "market": encode_text_felt(self.market),
            "side": str(self.side.chain_side),
            "orderType": encode_text_felt(self.order_type.value),
            "size": str(self.size),
            "price": str(self.price),
        }


@dataclass(slots=True, frozen=True)
class ModifyOrderMessage(OrderMessage):
    """Modification of an existing order."""

    primary_type: ClassVar[str] = "ModifyOrder"

    member_names: ClassVar[tuple[str, ...]] = OrderMessage.member_names + ("id",)

    id: str

    @classmethod
    def from_order(cls, order: Order, decimals: int = PARACLEAR_DECIMALS) -> "ModifyOrderMessage":
        if not order.id:
            raise SigningError("Order modification needs an order id")
        return cls(**_order_values(order, decimals), id=order.id)

    def encode_members(self) -> dict[str, str]:
        message = OrderMessage.encode_members(self)
        message["id"] = encode_text_felt(self.id)
        return message


@dataclass(slots=True, frozen=True)
class OnboardingMessage(ParadexMessage):
    """Account onboarding. Has no members."""

    primary_type: ClassVar[str] = "Onboarding"

    member_names: ClassVar[tuple[str, ...]] = ()

    def encode_members(self) -> dict[str, str]:
        return {}


@dataclass(slots=True, frozen=True)
class AuthMessage(ParadexMessage):
    """JWT request."""

    primary_type: ClassVar[str] = "Auth"

    member_names: ClassVar[tuple[str, ...]] = ("timestamp", "expiry")

    #: Seconds since epoch
    timestamp: int

    #: Seconds since epoch
    expiry: int

    def encode_members(self) -> dict[str, str]:
        return {"timestamp": str(self.timestamp), "expiry": str(self.expiry)}


@dataclass(slots=True, frozen=True)
class BlockTradeMessage(ParadexMessage):
    """Block trade initiation."""

    primary_type: ClassVar[str] = "BlockTrade"

    member_names: ClassVar[tuple[str, ...]] = ("timestamp", "markets", "required_signers")

    timestamp: int

    markets: tuple[str, ...]

    required_signers: tuple[str, ...]

    def encode_members(self) -> dict[str, str]:
        return {
            "timestamp": str(self.timestamp),
            "markets": encode_text_felt(",".join(self.markets)),
            "required_signers": encode_text_felt(",".join(self.required_signers)),
        }


@dataclass(slots=True, frozen=True)
class BlockOfferMessage(ParadexMessage):
    """Block trade offer."""

    primary_type: ClassVar[str] = "BlockOffer"

    member_names: ClassVar[tuple[str, ...]] = ("timestamp",)

    timestamp: int

    def encode_members(self) -> dict[str, str]:
        return {"timestamp": str(self.timestamp)}


@dataclass(slots=True, frozen=True)
class FullnodeRequestMessage(ParadexMessage):
    """Request proxied to the Paradex Starknet fullnode."""

    primary_type: ClassVar[str] = "FullnodeRequest"

    member_names: ClassVar[tuple[str, ...]] = ("account", "payload", "timestamp", "version")

    #: L2 account address, hex
    account: str

    #: JSON-RPC payload as a string
    payload: str

    #: Milliseconds since epoch
    timestamp: int

    version: str = FULLNODE_SIGNATURE_VERSION

    def encode_members(self) -> dict[str, str]:
        return {
            "account": encode_text_felt(self.account),
            "payload": encode_text_felt(self.payload),
            "timestamp": str(self.timestamp),
            "version": encode_text_felt(self.version),
        }


def _order_values(order: Order, decimals: int) -> dict:
    if order.signature_timestamp is None:
        raise SigningError(f"Order has no signature timestamp: {order.market}")

    try:
        size = order.chain_size(decimals)
        price = order.chain_price(decimals)
    except ValueError as e:
        raise SigningError(f"Cannot convert order amounts to quantums: {e}") from e

    return dict(
        timestamp=order.signature_timestamp,
        market=order.market,
        side=order.side,
        order_type=order.order_type,
        size=size,
        price=price,
    )


def build_order_message(chain_id: int, order: Order, decimals: int = PARACLEAR_DECIMALS) -> TypedData:
    """Typed data for a new order."""
    return OrderMessage.from_order(order, decimals).to_typed_data(chain_id)


def build_modify_order_message(chain_id: int, order: Order, decimals: int = PARACLEAR_DECIMALS) -> TypedData:
    """Typed data for modifying the order ``order.id``."""
    return ModifyOrderMessage.from_order(order, decimals).to_typed_data(chain_id)


def build_onboarding_message(chain_id: int) -> TypedData:
    return OnboardingMessage().to_typed_data(chain_id)


def build_auth_message(chain_id: int, timestamp: int, expiry: int) -> TypedData:
    return AuthMessage(timestamp=timestamp, expiry=expiry).to_typed_data(chain_id)


def build_block_trade_message(chain_id: int, block_trade: BlockTradeRequest) -> TypedData:
    message = BlockTradeMessage(
        timestamp=block_trade.signature_timestamp,
        markets=tuple(block_trade.markets),
        required_signers=tuple(block_trade.required_signers),
    )
    return message.to_typed_data(chain_id)


def build_block_offer_message(chain_id: int, offer: BlockOfferRequest) -> TypedData:
    return BlockOfferMessage(timestamp=offer.signature_timestamp).to_typed_data(chain_id)


def build_fullnode_message(
    chain_id: int,
    account_address: str,
    json_payload: str,
    signature_timestamp: int,
    signature_version: str = FULLNODE_SIGNATURE_VERSION,
) -> TypedData:
    message = FullnodeRequestMessage(
        account=account_address,
        payload=json_payload,
        timestamp=signature_timestamp,
        version=signature_version,
    )
    logger.debug("Fullnode request message for %s, payload %d bytes", account_address, len(json_payload))
    return message.to_typed_data(chain_id)
