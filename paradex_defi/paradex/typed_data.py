"""Starknet typed data hashing.

- Routines for encoding and hashing Starknet typed data messages,
  the Starknet counterpart of EIP-712.

- Only flat messages are supported: every member is a scalar ``felt``.
  There is no struct-in-struct or array encoding.

- Message values are strings: ``0x`` prefixed hex, or decimal numerals.

The hash of a message is computed as follows:

1. The type is serialised as ``Name(felt field1,felt field2)``
   in the declared member order and hashed to get the type hash.

2. Each member value is parsed to a field element.

3. ``[type_hash, value_1, ..., value_n]`` are concatenated as 32-byte
   big-endian words and hashed.

The hash used in both steps is :py:func:`starknet_keccak`.

Example:

.. code-block:: python

    data = {
        "domain": {"name": "Paradex", "chainId": "0x534e5f4d41494e", "version": "1"},
        "primaryType": "Auth",
        "types": {
            "StarkNetDomain": [
                {"name": "name", "type": "felt"},
                {"name": "chainId", "type": "felt"},
                {"name": "version", "type": "felt"},
            ],
            "Auth": [
                {"name": "timestamp", "type": "felt"},
                {"name": "expiry", "type": "felt"},
            ],
        },
        "message": {"timestamp": "1700000000", "expiry": "1700086400"},
    }

    typed_data = TypedData.from_dict(data)
    msg_hash = typed_data.message_hash()

.. note ::

    A full Starknet off-chain message hash combines a ``"StarkNet Message"``
    prefix, the domain hash and the signer address with the message hash.
    :py:meth:`TypedData.message_hash` returns the message struct hash only.
    This is what our signatures are computed over.
"""

import re
from dataclasses import dataclass, field
from typing import Any

from starknet_py.constants import FIELD_PRIME
from web3 import Web3

from paradex_defi.paradex.errors import SigningError

#: Starknet keccak is truncated to 250 bits, so it always fits a felt
MASK_250 = 2**250 - 1

#: The only member type we know how to encode
FELT_TYPE = "felt"

_HEX_FELT = re.compile(r"^0x[0-9a-fA-F]+$")

_DECIMAL_FELT = re.compile(r"^[0-9]+$")


def starknet_keccak(value: bytes) -> int:
    """Keccak-256 truncated to 250 bits."""
    return int.from_bytes(Web3.keccak(value), "big") & MASK_250


@dataclass(slots=True, frozen=True)
class TypeMember:
    """One member of a typed data type."""

    #: Member name as it appears in the message
    name: str

    #: Member type, always ``felt`` for Paradex messages
    type: str = FELT_TYPE

    def to_dict(self) -> dict:
        return {"name": self.name, "type": self.type}


@dataclass(slots=True, frozen=True)
class StarknetDomain:
    """Typed data domain separator."""

    name: str

    #: Chain id as a hex string
    chain_id: str

    version: str

    def to_dict(self) -> dict:
        return {"name": self.name, "chainId": self.chain_id, "version": self.version}


#: Type name -> ordered member list.
#:
#: Member order is part of the type hash.
TypeDefinitions = dict[str, list[TypeMember]]


def encode_type(type_name: str, types: TypeDefinitions) -> str:
    """Serialise a type to its canonical string form.

    Example: ``Auth(felt timestamp,felt expiry)``.

    :raise SigningError:
        If the type is not defined
    """
    members = types.get(type_name)
    if members is None:
        raise SigningError(f"Type not found: {type_name}")
    defs = [f"{m.type} {m.name}" for m in members]
    return type_name + "(" + ",".join(defs) + ")"


def hash_type(type_name: str, types: TypeDefinitions) -> int:
    """Type hash of a typed data type."""
    return starknet_keccak(encode_type(type_name, types).encode("ascii"))


def encode_value(field_type: str, value: Any) -> int:
    """Parse a message value to a field element.

    :param field_type:
        Member type. Only ``felt`` is supported.

    :param value:
        ``0x`` prefixed hex string or a decimal numeral string.
        Numbers, lists and dicts are rejected, as they have no
        unambiguous flat encoding.

    Values up to 256 bits are reduced modulo the field prime,
    the same way keys and class hashes are read.

    :raise SigningError:
        If the value cannot be parsed or is wider than 256 bits
    """
    if field_type != FELT_TYPE:
        raise SigningError(f"Unsupported member type: {field_type}")

    if not isinstance(value, str):
        raise SigningError(f"Expected string for felt, got {type(value).__name__}: {value!r}")

    if _HEX_FELT.match(value):
        felt = int(value, 16)
    elif _DECIMAL_FELT.match(value):
        felt = int(value)
    else:
        raise SigningError(f"Invalid felt: {value!r}")

    if felt >= 2**256:
        raise SigningError(f"Felt out of range: {value}")

    return felt % FIELD_PRIME


def encode_data(type_name: str, data: dict[str, Any], types: TypeDefinitions) -> list[int]:
    """Encode a message as ``[type_hash, value_1, ..., value_n]``.

    :raise SigningError:
        If a member is missing from the message
    """
    encoded_values = [hash_type(type_name, types)]
    for member in types[type_name]:
        if member.name not in data:
            raise SigningError(f"Missing field: {member.name} in {type_name} message")
        encoded_values.append(encode_value(member.type, data[member.name]))
    return encoded_values


def hash_struct(type_name: str, data: dict[str, Any], types: TypeDefinitions) -> int:
    """Hash an encoded message.

    Each encoded value is a 32-byte big-endian word in the hash input.
    """
    words = encode_data(type_name, data, types)
    return starknet_keccak(b"".join(w.to_bytes(32, "big") for w in words))


@dataclass(slots=True)
class TypedData:
    """Typed data message ready for hashing.

    - Build from a JSON-like dict with :py:meth:`from_dict`,
      or use the Paradex message builders in :py:mod:`paradex_defi.paradex.messages`.
    """

    domain: StarknetDomain

    #: Name of the root type in :py:attr:`types`
    primary_type: str

    types: TypeDefinitions

    #: Member name -> string value
    message: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> "TypedData":
        """Read ``domain``, ``primaryType``, ``types`` and ``message`` keys.

        :raise SigningError:
            If the dict is not valid typed data
        """
        try:
            domain = data["domain"]
            return cls(
                domain=StarknetDomain(
                    name=domain["name"],
                    chain_id=domain["chainId"],
                    version=domain["version"],
                ),
                primary_type=data["primaryType"],
                types={name: [TypeMember(name=m["name"], type=m["type"]) for m in members] for name, members in data["types"].items()},
                message=dict(data.get("message", {})),
            )
        except (KeyError, AttributeError, TypeError) as e:
            raise SigningError(f"Not valid typed data: {data}") from e

    def to_dict(self) -> dict:
        return {
            "domain": self.domain.to_dict(),
            "primaryType": self.primary_type,
            "types": {name: [m.to_dict() for m in members] for name, members in self.types.items()},
            "message": dict(self.message),
        }

    def encode_type(self, type_name: str) -> str:
        return encode_type(type_name, self.types)

    def type_hash(self, type_name: str) -> int:
        return hash_type(type_name, self.types)

    def encode_message(self, type_name: str) -> int:
        return hash_struct(type_name, self.message, self.types)

    def message_hash(self) -> int:
        """Hash of the primary type message.

        This is the value we sign.
        """
        return self.encode_message(self.primary_type)
