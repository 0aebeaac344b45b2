"""Paradex L2 key derivation and account address computation.

Paradex accounts live on a Starknet appchain (Paraclear). A user never
handles the L2 key directly: it is derived from their Ethereum (L1) key.

1. The L1 key personal-signs ``Paradex Stark Key Derivation: <l1 chain id>``
   (EIP-191, see :py:func:`eth_account.messages.encode_defunct`)

2. The 64 bytes of ``r || s`` of the signature, without the recovery byte,
   are hashed with Keccak-256

3. The digest, as a big-endian integer reduced into the Starknet field,
   is the L2 private key

The account address is then the counterfactual address of the account
proxy contract, deployed with the public key as salt and no deployer.

.. warning::

    Any change to the message format or byte order here derives a different
    account for the same L1 key. Existing users would lose access
    to their funds through this library.

Example:

.. code-block:: python

    from eth_account import Account

    l1_account = Account.from_key(os.environ["PARADEX_L1_PRIVATE_KEY"])
    l2_private_key = derive_l2_key_from_account(l1_account, l1_chain_id=1)
    l2_public_key = compute_public_key(l2_private_key)
    l2_address = compute_account_address(
        l2_public_key,
        account_class_hash=config.account_class_hash,
        proxy_class_hash=config.proxy_class_hash,
    )
"""

import logging
import re

from eth_account import Account
from eth_account.messages import encode_defunct
from eth_account.signers.local import LocalAccount
from starknet_py.constants import EC_ORDER, FIELD_PRIME
from starknet_py.hash.address import compute_address
from starknet_py.hash.selector import get_selector_from_name
from starknet_py.hash.utils import private_to_stark_key
from web3 import Web3

from paradex_defi.paradex.constants import ACCOUNT_INITIALIZE_FUNCTION, STARK_KEY_DERIVATION_MESSAGE
from paradex_defi.paradex.errors import CredentialFormatError, ProtocolError

logger = logging.getLogger(__name__)


_HEX_KEY = re.compile(r"^0x[0-9a-fA-F]{1,64}$")


def build_stark_key_message(l1_chain_id: int) -> str:
    """Build the message the L1 key signs to derive the L2 key.

    >>> build_stark_key_message(1)
    'Paradex Stark Key Derivation: 1'
    """
    assert type(l1_chain_id) == int, f"Got {type(l1_chain_id)}"
    return STARK_KEY_DERIVATION_MESSAGE.format(chain_id=l1_chain_id)


def derive_l2_key_from_account(l1_account: LocalAccount, l1_chain_id: int) -> int:
    """Derive the L2 private key by signing with an L1 account.

    :param l1_account:
        Anything with ``sign_message()`` like :py:class:`eth_account.signers.local.LocalAccount`

    :param l1_chain_id:
        L1 chain id from :py:meth:`paradex_defi.paradex.config.SystemConfig.parse_l1_chain_id`

    :return:
        L2 private key as a field element

    :raise CredentialFormatError:
        If the L1 signer fails
    """
    message = build_stark_key_message(l1_chain_id)
    try:
        signed = l1_account.sign_message(encode_defunct(text=message))
    except Exception as e:
        raise CredentialFormatError(f"L1 signing failed: {e}") from e

    signature_bytes = signed.r.to_bytes(32, "big") + signed.s.to_bytes(32, "big")
    digest = Web3.keccak(signature_bytes)
    logger.debug("Derived L2 key for L1 account %s, chain %d", getattr(l1_account, "address", "<unknown>"), l1_chain_id)
    return int.from_bytes(digest, "big") % FIELD_PRIME


def derive_l2_key(l1_private_key: str, l1_chain_id: int) -> int:
    """Derive the L2 private key from an L1 private key.

    A pure function: the same inputs always give the same key.

    :param l1_private_key:
        Hex encoded Ethereum private key

    :raise CredentialFormatError:
        If the L1 key is malformed
    """
    try:
        l1_account = Account.from_key(l1_private_key)
    except Exception as e:
        # Do not echo the key back in the message
        raise CredentialFormatError(f"Invalid L1 private key: {type(e).__name__}") from e
    return derive_l2_key_from_account(l1_account, l1_chain_id)


def parse_l2_private_key(value: str | int) -> int:
    """Validate an L2 private key.

    Hex strings of up to 256 bits are reduced modulo the field prime,
    the same way Starknet tooling reads felts from hex.

    :param value:
        ``0x`` prefixed hex string, or an integer

    :raise CredentialFormatError:
        If the key is malformed or not a valid curve scalar
    """
    if isinstance(value, str):
        if not _HEX_KEY.match(value):
            raise CredentialFormatError("Invalid L2 private key: expected 0x prefixed hex")
        key = int(value, 16) % FIELD_PRIME
    elif isinstance(value, int) and not isinstance(value, bool):
        key = value
    else:
        raise CredentialFormatError(f"Invalid L2 private key type: {type(value).__name__}")

    if not 0 < key < EC_ORDER:
        raise CredentialFormatError("Invalid L2 private key: outside the curve order")

    return key


def compute_public_key(l2_private_key: int) -> int:
    """Stark curve public key (x coordinate) for a private key."""
    return private_to_stark_key(l2_private_key)


def compute_account_address(public_key: int, account_class_hash: int, proxy_class_hash: int) -> int:
    """Compute the Paradex account contract address.

    The account is a proxy contract whose constructor calls
    ``initialize(public_key, 0)`` on the account implementation class:

    .. code-block:: text

        calldata = [account_class_hash, selector("initialize"), 2, public_key, 0]

    The address is computed as if the account deployed itself:
    the public key is the salt and the deployer address is zero.

    :raise ProtocolError:
        If the selector or address cannot be computed
    """
    try:
        initialize_selector = get_selector_from_name(ACCOUNT_INITIALIZE_FUNCTION)
        calldata = [
            account_class_hash,
            initialize_selector,
            2,
            public_key,
            0,
        ]
        return compute_address(
            class_hash=proxy_class_hash,
            constructor_calldata=calldata,
            salt=public_key,
            deployer_address=0,
        )
    except Exception as e:
        raise ProtocolError(f"Account address computation failed: {e}") from e
