"""Paradex block trade request types.

A block trade is a negotiated multi-party trade. The initiator signs a
:py:class:`BlockTradeRequest` over the markets and the counterparties
who must sign. Each counterparty answers with a signed :py:class:`BlockOfferRequest`.
"""

from dataclasses import dataclass, field


@dataclass(slots=True, frozen=True)
class BlockOfferOrder:
    """One leg of a block offer."""

    market: str

    #: ``BUY`` or ``SELL``
    side: str

    size: str

    price: str

    def to_dict(self) -> dict:
        return {"market": self.market, "side": self.side, "size": self.size, "price": self.price}


@dataclass(slots=True)
class BlockTradeRequest:
    """Block trade initiation."""

    #: Markets included in the block trade
    markets: list[str]

    #: L2 addresses of the accounts that must sign
    required_signers: list[str]

    #: Milliseconds since epoch
    signature_timestamp: int

    signature: str = ""

    def to_dict(self) -> dict:
        return {
            "markets": list(self.markets),
            "required_signers": list(self.required_signers),
            "signature": self.signature,
            "signature_timestamp": self.signature_timestamp,
        }


@dataclass(slots=True)
class BlockOfferRequest:
    """Offer answering a block trade."""

    #: Milliseconds since epoch
    signature_timestamp: int

    orders: list[BlockOfferOrder] = field(default_factory=list)

    signature: str = ""

    def to_dict(self) -> dict:
        return {
            "orders": [o.to_dict() for o in self.orders],
            "signature": self.signature,
            "signature_timestamp": self.signature_timestamp,
        }
