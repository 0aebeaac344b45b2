"""Paradex protocol integration.

Paradex is a perpetuals exchange built on its own Starknet appchain (Paraclear).
Orders, onboarding and API authentication are authorised with Stark curve
signatures over Starknet typed data.

This module provides:

- L2 key derivation from an Ethereum key
- Account contract address computation
- Typed data hashing for the Paradex message types
- Order, block trade and authentication signing
- JWT authentication against the REST API

Key components:

- :py:mod:`paradex_defi.paradex.key_derivation` - L1 to L2 key derivation and account address
- :py:mod:`paradex_defi.paradex.typed_data` - Starknet typed data hashing
- :py:mod:`paradex_defi.paradex.messages` - Paradex message shapes
- :py:mod:`paradex_defi.paradex.account` - Accounts and signing operations
- :py:mod:`paradex_defi.paradex.authentication` - Onboarding and JWT API client
- :py:mod:`paradex_defi.paradex.auth_lifecycle` - JWT refresh tracking
- :py:mod:`paradex_defi.paradex.constants` - API URLs, header names and protocol constants

Example workflow::

    from eth_account import Account
    from paradex_defi.paradex.account import ParadexAccount
    from paradex_defi.paradex.authentication import ParadexApiClient
    from paradex_defi.paradex.constants import ParadexEnvironment
    from paradex_defi.paradex.order import Order, OrderSide, OrderType

    client = ParadexApiClient(ParadexEnvironment.testnet)
    config = client.fetch_system_config()

    l1_account = Account.from_key("0x...")
    account = ParadexAccount.from_l1_account(config, l1_account)
    client.account = account
    client.authenticate_account()

    order = Order.builder().market("ETH-USD-PERP").side(OrderSide.sell).order_type(OrderType.limit).size("0.5").price("3200").build()
    account.sign_order(order)

Environment variables for testing:
    - ``PARADEX_L1_PRIVATE_KEY`` - Ethereum private key of a Paradex testnet user
    - ``SEND_REAL_REQUESTS`` - Enable live API calls
"""
