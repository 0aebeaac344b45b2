"""Paradex order types.

Orders are created with :py:class:`OrderBuilder`, so that an order
without a market, side, type or size cannot exist:

.. code-block:: python

    order = (
        Order.builder()
        .market("BTC-USD-PERP")
        .side(OrderSide.buy)
        .order_type(OrderType.limit)
        .size("0.1")
        .price("50000")
        .instruction(OrderInstruction.post_only)
        .build()
    )

    signature = account.sign_order(order)
    assert order.signature == signature
"""

import enum
from dataclasses import dataclass, field
from decimal import Decimal

from paradex_defi.paradex.constants import PARACLEAR_DECIMALS
from paradex_defi.quantum import parse_decimal, to_quantum


class OrderSide(enum.Enum):
    """Order side."""

    buy = "BUY"

    sell = "SELL"

    @property
    def chain_side(self) -> int:
        """Side as it appears in the signed message: buy is 1, sell is 2."""
        return 1 if self == OrderSide.buy else 2


class OrderType(enum.Enum):
    limit = "LIMIT"

    market = "MARKET"


class OrderInstruction(enum.Enum):
    """Order execution instruction."""

    #: Good till cancelled
    gtc = "GTC"

    post_only = "POST_ONLY"

    #: Immediate or cancel
    ioc = "IOC"

    #: Fill or kill
    fok = "FOK"


@dataclass(slots=True)
class Order:
    """An order to be signed and submitted to Paradex.

    - ``signature`` and ``signature_timestamp`` are filled in
      by :py:meth:`paradex_defi.paradex.account.StarkSigningAccount.sign_order`

    - If ``id`` is set, the order is signed as a modification of an existing order
    """

    #: Market symbol, e.g. ``BTC-USD-PERP``
    market: str

    side: OrderSide

    order_type: OrderType

    #: Order size as a decimal string
    size: str

    #: Limit price as a decimal string, not set for market orders
    price: str | None = None

    client_id: str | None = None

    instruction: OrderInstruction | None = None

    reduce_only: bool | None = None

    trigger_price: str | None = None

    #: Flattened ``[0x<r>,0x<s>]`` signature
    signature: str | None = None

    #: Signature timestamp, milliseconds since epoch
    signature_timestamp: int | None = None

    #: Existing order id when modifying an order
    id: str | None = None

    flags: list[str] = field(default_factory=list)

    recv_window: int | None = None

    stp: str | None = None

    @staticmethod
    def builder() -> "OrderBuilder":
        return OrderBuilder()

    def chain_size(self, decimals: int = PARACLEAR_DECIMALS) -> int:
        """Size in quantums."""
        return to_quantum(self.size, decimals)

    def chain_price(self, decimals: int = PARACLEAR_DECIMALS) -> int:
        """Price in quantums, zero for orders without a price."""
        if self.price is None:
            return 0
        return to_quantum(self.price, decimals)

    def to_dict(self) -> dict:
        """Order as a REST API payload."""
        data = {
            "market": self.market,
            "side": self.side.value,
            "type": self.order_type.value,
            "size": self.size,
            "price": self.price if self.price is not None else "0",
        }
        if self.client_id is not None:
            data["client_id"] = self.client_id
        if self.instruction is not None:
            data["instruction"] = self.instruction.value
        if self.reduce_only is not None:
            data["reduce_only"] = self.reduce_only
        if self.trigger_price is not None:
            data["trigger_price"] = self.trigger_price
        if self.signature is not None:
            data["signature"] = self.signature
        if self.signature_timestamp is not None:
            data["signature_timestamp"] = self.signature_timestamp
        if self.id is not None:
            data["id"] = self.id
        if self.flags:
            data["flags"] = list(self.flags)
        if self.recv_window is not None:
            data["recv_window"] = self.recv_window
        if self.stp is not None:
            data["stp"] = self.stp
        return data


class OrderBuilder:
    """Staged construction of :py:class:`Order`.

    :py:meth:`build` refuses to create an order
    before all mandatory fields are given.
    """

    def __init__(self):
        self._market: str | None = None
        self._side: OrderSide | None = None
        self._order_type: OrderType | None = None
        self._size: str | None = None
        self._optional = {}

    def market(self, market: str) -> "OrderBuilder":
        self._market = market
        return self

    def side(self, side: OrderSide) -> "OrderBuilder":
        assert isinstance(side, OrderSide), f"Got {side}"
        self._side = side
        return self

    def order_type(self, order_type: OrderType) -> "OrderBuilder":
        assert isinstance(order_type, OrderType), f"Got {order_type}"
        self._order_type = order_type
        return self

    def size(self, size: str | Decimal) -> "OrderBuilder":
        parse_decimal(size)
        self._size = str(size)
        return self

    def price(self, price: str | Decimal) -> "OrderBuilder":
        parse_decimal(price)
        self._optional["price"] = str(price)
        return self

    def client_id(self, client_id: str) -> "OrderBuilder":
        self._optional["client_id"] = client_id
        return self

    def instruction(self, instruction: OrderInstruction) -> "OrderBuilder":
        self._optional["instruction"] = instruction
        return self

    def reduce_only(self, reduce_only: bool) -> "OrderBuilder":
        self._optional["reduce_only"] = reduce_only
        return self

    def trigger_price(self, trigger_price: str | Decimal) -> "OrderBuilder":
        parse_decimal(trigger_price)
        self._optional["trigger_price"] = str(trigger_price)
        return self

    def flags(self, *flags: str) -> "OrderBuilder":
        self._optional["flags"] = list(flags)
        return self

    def order_id(self, order_id: str) -> "OrderBuilder":
        """Build a modification of an existing order."""
        self._optional["id"] = order_id
        return self

    def build(self) -> Order:
        """Create the order.

        :raise ValueError:
            If market, side, order type or size is missing
        """
        for name, value in (("market", self._market), ("side", self._side), ("order_type", self._order_type), ("size", self._size)):
            if value is None:
                raise ValueError(f"{name} is required")

        return Order(
            market=self._market,
            side=self._side,
            order_type=self._order_type,
            size=self._size,
            **self._optional,
        )
