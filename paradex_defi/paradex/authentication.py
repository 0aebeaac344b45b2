"""Paradex API client for onboarding and JWT authentication.

Authentication is a two step process:

1. **Onboarding** registers the L2 account with Paradex. It is signed with
   the ``Onboarding`` message and only needs to happen once per account.
   Onboarding an account that already exists is treated as success.

2. **Authentication** exchanges a signed ``Auth`` message for a JWT.
   The JWT is stored on the account and refreshed when older than
   :py:data:`~paradex_defi.paradex.constants.JWT_REFRESH_INTERVAL`.

Onboarding headers::

    PARADEX-ETHEREUM-ACCOUNT:   <L1 address>
    PARADEX-STARKNET-ACCOUNT:   <L2 address>
    PARADEX-STARKNET-SIGNATURE: [0x<r>,0x<s>]

Authentication headers::

    PARADEX-STARKNET-ACCOUNT:     <L2 address>
    PARADEX-STARKNET-SIGNATURE:   [0x<r>,0x<s>]
    PARADEX-TIMESTAMP:            <seconds>
    PARADEX-SIGNATURE-EXPIRATION: <seconds + 24h>
"""

import logging

from requests import Response, Session

from paradex_defi.paradex.account import ParadexAccount, StarkSigningAccount
from paradex_defi.paradex.config import SystemConfig
from paradex_defi.paradex.constants import DEFAULT_TIMEOUT, ParadexEnvironment
from paradex_defi.paradex.errors import AccountStateError, ParadexApiError
from paradex_defi.paradex.session import create_paradex_session

logger = logging.getLogger(__name__)


class ParadexApiClient:
    """Paradex API client for the authentication flow.

    Example::

        client = ParadexApiClient(ParadexEnvironment.testnet)
        config = client.fetch_system_config()
        client.account = ParadexAccount.from_l1_private_key(config, l1_address, l1_private_key)
        client.authenticate_account()

        # Before each privileged request
        client.refresh_auth_if_needed()
        headers = client.authorization_headers()
    """

    def __init__(
        self,
        environment: ParadexEnvironment = ParadexEnvironment.testnet,
        account: StarkSigningAccount | None = None,
        session: Session | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        :param environment:
            Paradex deployment

        :param account:
            Account to authenticate. Can be set later.

        :param session:
            HTTP session. Created with :py:func:`~paradex_defi.paradex.session.create_paradex_session` if not given.

        :param timeout:
            HTTP request timeout in seconds
        """
        self.environment = environment
        self.account = account
        self.base_url = environment.api_url
        self.timeout = timeout
        self.session = session or create_paradex_session(environment)

    def __repr__(self):
        return f"<ParadexApiClient {self.environment} {self.account}>"

    def _require_account(self) -> StarkSigningAccount:
        if self.account is None:
            raise AccountStateError("No account initialized")
        return self.account

    def _raise_for_status(self, response: Response):
        if not response.ok:
            raise ParadexApiError(response.status_code, response.text)

    def fetch_system_config(self) -> SystemConfig:
        """Read chain ids and account class hashes."""
        response = self.session.get(f"{self.base_url}/system/config", timeout=self.timeout)
        self._raise_for_status(response)
        return SystemConfig.from_dict(response.json())

    def onboard(self):
        """Register the account with Paradex.

        Idempotent: an already onboarded account is not an error.

        :raise AccountStateError:
            If there is no account, or the account is a subkey account

        :raise ParadexApiError:
            If Paradex rejects the onboarding
        """
        account = self._require_account()
        if not isinstance(account, ParadexAccount):
            raise AccountStateError(f"Only main accounts can onboard, got {account}")

        headers = dict(account.onboarding_headers())
        response = self.session.post(
            f"{self.base_url}/onboarding",
            json={"public_key": account.l2_public_key_hex},
            headers=headers,
            timeout=self.timeout,
        )

        if response.status_code == 400 and "already" in response.text.lower():
            logger.debug("Account %s already onboarded", account.l2_address_hex)
            return

        self._raise_for_status(response)
        logger.info("Onboarding successful for: %s", account.l2_public_key_hex)

    def authenticate(self) -> str:
        """Get a fresh JWT and store it on the account.

        :return:
            JWT token
        """
        account = self._require_account()
        headers = dict(account.auth_headers())

        response = self.session.post(
            f"{self.base_url}/auth/{account.l2_public_key_hex}",
            headers=headers,
            timeout=self.timeout,
        )
        self._raise_for_status(response)

        data = response.json()
        token = data.get("jwt_token")
        if not token:
            raise ParadexApiError(response.status_code, f"No jwt_token in auth response: {data}")

        account.set_jwt_token(token)
        logger.info("Authentication successful for: %s", account.l2_address_hex)
        return token

    def authenticate_account(self):
        """Onboard if needed, then authenticate."""
        account = self._require_account()
        if isinstance(account, ParadexAccount):
            self.onboard()
        self.authenticate()

    def refresh_auth_if_needed(self) -> bool:
        """Re-authenticate if the JWT is getting old.

        Accounts that have never authenticated are left alone.

        :return:
            True if we re-authenticated
        """
        if self.account is None:
            return False

        if self.account.auth.needs_refresh():
            logger.info("JWT token expired for %s, refreshing", self.account.l2_address_hex)
            self.authenticate()
            return True

        return False

    def authorization_headers(self) -> dict[str, str]:
        """Bearer header for privileged requests.

        :raise AccountStateError:
            If we have not authenticated yet
        """
        account = self._require_account()
        token = account.jwt_token
        if not token:
            raise AccountStateError(f"Account {account.l2_address_hex} is not authenticated")
        return {"Authorization": f"Bearer {token}"}
