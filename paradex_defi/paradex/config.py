"""Paradex system configuration.

Paradex publishes its chain ids and account contract class hashes
at ``GET /system/config``. The account key derivation and address computation
depend on these, so the config must be fetched before an account is created.
"""

import re
from dataclasses import dataclass, field

from starknet_py.constants import FIELD_PRIME

from paradex_defi.paradex.errors import ConfigurationFormatError

_HEX = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


def parse_felt_hex(value: str, what: str) -> int:
    """Parse a ``0x`` prefixed hex string to a field element.

    Up to 256-bit values are accepted and reduced modulo the field prime.

    :param what:
        Name of the value for the error message

    :raise ConfigurationFormatError:
        If the value is not hex, or is wider than 256 bits
    """
    if not isinstance(value, str) or not _HEX.match(value):
        raise ConfigurationFormatError(f"Invalid {what}: {value!r}")
    return int(value, 16) % FIELD_PRIME


def encode_chain_id(chain_id: str) -> int:
    """Turn a Starknet chain id string to a field element.

    ``"SN_MAIN"`` becomes the big-endian integer of its ASCII bytes.

    :raise ConfigurationFormatError:
        If the chain id is not a short ASCII string
    """
    try:
        encoded = chain_id.encode("ascii")
    except (UnicodeEncodeError, AttributeError) as e:
        raise ConfigurationFormatError(f"Invalid chain ID: {chain_id!r}") from e

    if not encoded or len(encoded) > 31:
        raise ConfigurationFormatError(f"Invalid chain ID: {chain_id!r}")

    return int.from_bytes(encoded, "big")


@dataclass(slots=True, frozen=True)
class BridgedToken:
    """Token bridged between L1 and Paradex."""

    l1_token_address: str
    l2_token_address: str
    l1_bridge_address: str
    l2_bridge_address: str
    decimals: int
    symbol: str
    name: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "BridgedToken":
        return cls(
            l1_token_address=data["l1_token_address"],
            l2_token_address=data["l2_token_address"],
            l1_bridge_address=data["l1_bridge_address"],
            l2_bridge_address=data["l2_bridge_address"],
            decimals=int(data["decimals"]),
            symbol=data["symbol"],
            name=data.get("name"),
        )


@dataclass(slots=True, frozen=True)
class SystemConfig:
    """Paradex system configuration.

    Immutable for the lifetime of an account.
    """

    #: L1 chain id as a decimal string, e.g. ``"1"``
    l1_chain_id: str

    #: L2 chain id string, e.g. ``"PRIVATE_SN_PARACLEAR_MAINNET"``
    starknet_chain_id: str

    #: Account implementation class hash, ``0x`` hex
    paraclear_account_hash: str

    #: Account proxy class hash, ``0x`` hex
    paraclear_account_proxy_hash: str

    starknet_fullnode_rpc_url: str = ""

    paraclear_address: str = ""

    paraclear_decimals: int = 8

    bridged_tokens: tuple[BridgedToken, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, data: dict) -> "SystemConfig":
        """Read the ``/system/config`` JSON response.

        :raise ConfigurationFormatError:
            If a mandatory key is missing
        """
        try:
            return cls(
                l1_chain_id=str(data["l1_chain_id"]),
                starknet_chain_id=data["starknet_chain_id"],
                paraclear_account_hash=data["paraclear_account_hash"],
                paraclear_account_proxy_hash=data["paraclear_account_proxy_hash"],
                starknet_fullnode_rpc_url=data.get("starknet_fullnode_rpc_url", ""),
                paraclear_address=data.get("paraclear_address", ""),
                paraclear_decimals=int(data.get("paraclear_decimals", 8)),
                bridged_tokens=tuple(BridgedToken.from_dict(t) for t in data.get("bridged_tokens", [])),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationFormatError(f"Bad system config: {data}") from e

    def parse_l1_chain_id(self) -> int:
        """L1 chain id as an integer.

        :raise ConfigurationFormatError:
            If the chain id is not a decimal number
        """
        if not self.l1_chain_id.isdecimal():
            raise ConfigurationFormatError(f"Invalid L1 chain ID: {self.l1_chain_id!r}")
        return int(self.l1_chain_id)

    @property
    def starknet_chain_id_felt(self) -> int:
        return encode_chain_id(self.starknet_chain_id)

    @property
    def account_class_hash(self) -> int:
        return parse_felt_hex(self.paraclear_account_hash, "account class hash")

    @property
    def proxy_class_hash(self) -> int:
        return parse_felt_hex(self.paraclear_account_proxy_hash, "account proxy class hash")
