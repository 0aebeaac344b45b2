"""Onboarding and JWT authentication against a mocked Paradex API."""

import datetime

import pytest

from paradex_defi.paradex.account import SubkeyAccount
from paradex_defi.paradex.auth_lifecycle import utc_now
from paradex_defi.paradex.authentication import ParadexApiClient
from paradex_defi.paradex.constants import ParadexEnvironment
from paradex_defi.paradex.errors import AccountStateError, ParadexApiError


def _response(mocker, status_code=200, json_data=None, text=""):
    return mocker.Mock(
        ok=200 <= status_code < 300,
        status_code=status_code,
        text=text,
        json=mocker.Mock(return_value=json_data or {}),
    )


def test_api_urls():
    assert ParadexEnvironment.prod.api_url == "https://api.prod.paradex.trade/v1"
    assert ParadexEnvironment.testnet.api_url == "https://api.testnet.paradex.trade/v1"
    assert ParadexEnvironment.testnet.ws_url == "wss://ws.api.testnet.paradex.trade/v1"


def test_fetch_system_config(mocker, mock_session):
    mock_session.get.return_value = _response(
        mocker,
        json_data={
            "l1_chain_id": "11155111",
            "starknet_chain_id": "PRIVATE_SN_POTC_SEPOLIA",
            "paraclear_account_hash": "0x1",
            "paraclear_account_proxy_hash": "0x2",
        },
    )
    client = ParadexApiClient(ParadexEnvironment.testnet, session=mock_session)
    config = client.fetch_system_config()
    assert config.starknet_chain_id == "PRIVATE_SN_POTC_SEPOLIA"
    mock_session.get.assert_called_once_with("https://api.testnet.paradex.trade/v1/system/config", timeout=client.timeout)


def test_onboard(mocker, api_client, mock_session, paradex_account):
    mock_session.post.return_value = _response(mocker)
    api_client.onboard()

    args, kwargs = mock_session.post.call_args
    assert args[0] == "https://api.testnet.paradex.trade/v1/onboarding"
    assert kwargs["json"] == {"public_key": paradex_account.l2_public_key_hex}
    assert kwargs["headers"]["PARADEX-STARKNET-ACCOUNT"] == paradex_account.l2_address_hex
    assert kwargs["headers"]["PARADEX-ETHEREUM-ACCOUNT"] == paradex_account.l1_address


def test_onboard_already_onboarded(mocker, api_client, mock_session):
    """Onboarding twice is not an error."""
    mock_session.post.return_value = _response(mocker, 400, text='{"error": "ACCOUNT_ALREADY_ONBOARDED", "message": "Account already onboarded"}')
    api_client.onboard()


def test_onboard_failure(mocker, api_client, mock_session):
    mock_session.post.return_value = _response(mocker, 400, text="Invalid signature")
    with pytest.raises(ParadexApiError) as exc_info:
        api_client.onboard()
    assert exc_info.value.status == 400
    assert exc_info.value.message == "Invalid signature"
    assert str(exc_info.value) == "API error (status 400): Invalid signature"


def test_authenticate(mocker, api_client, mock_session, paradex_account):
    mock_session.post.return_value = _response(mocker, json_data={"jwt_token": "jwt-abc"})
    token = api_client.authenticate()
    assert token == "jwt-abc"
    assert paradex_account.jwt_token == "jwt-abc"
    assert paradex_account.auth.is_authenticated()
    assert api_client.authorization_headers() == {"Authorization": "Bearer jwt-abc"}

    args, kwargs = mock_session.post.call_args
    assert args[0] == f"https://api.testnet.paradex.trade/v1/auth/{paradex_account.l2_public_key_hex}"
    assert set(kwargs["headers"].keys()) == {
        "PARADEX-STARKNET-ACCOUNT",
        "PARADEX-STARKNET-SIGNATURE",
        "PARADEX-TIMESTAMP",
        "PARADEX-SIGNATURE-EXPIRATION",
    }


def test_authenticate_failure_keeps_old_token(mocker, api_client, mock_session, paradex_account):
    paradex_account.set_jwt_token("old-jwt")
    mock_session.post.return_value = _response(mocker, 401, text="Unauthorized")
    with pytest.raises(ParadexApiError):
        api_client.authenticate()
    assert paradex_account.jwt_token == "old-jwt"


def test_authenticate_no_token(mocker, api_client, mock_session):
    mock_session.post.return_value = _response(mocker, json_data={"error": "nope"})
    with pytest.raises(ParadexApiError, match="No jwt_token"):
        api_client.authenticate()


def test_authenticate_account(mocker, api_client, mock_session):
    """Main accounts onboard before they authenticate."""
    mock_session.post.side_effect = [
        _response(mocker, 400, text="account already onboarded"),
        _response(mocker, json_data={"jwt_token": "jwt-abc"}),
    ]
    api_client.authenticate_account()
    assert mock_session.post.call_count == 2
    assert mock_session.post.call_args_list[0].args[0].endswith("/onboarding")
    assert "/auth/" in mock_session.post.call_args_list[1].args[0]


def test_subkey_skips_onboarding(mocker, system_config, paradex_account, mock_session):
    subkey = SubkeyAccount(config=system_config, l2_private_key="0x5678", l2_address=paradex_account.l2_address_hex)
    client = ParadexApiClient(ParadexEnvironment.testnet, account=subkey, session=mock_session)
    mock_session.post.return_value = _response(mocker, json_data={"jwt_token": "jwt-sub"})
    client.authenticate_account()
    assert mock_session.post.call_count == 1
    assert subkey.jwt_token == "jwt-sub"

    with pytest.raises(AccountStateError):
        client.onboard()


def test_refresh_auth_if_needed(mocker, api_client, mock_session, paradex_account):
    # Never authenticated
    assert not api_client.refresh_auth_if_needed()

    paradex_account.set_jwt_token("jwt-1")
    assert not api_client.refresh_auth_if_needed()
    mock_session.post.assert_not_called()

    stale = utc_now() - datetime.timedelta(minutes=5)
    paradex_account.set_jwt_token("jwt-1", authenticated_at=stale)
    mock_session.post.return_value = _response(mocker, json_data={"jwt_token": "jwt-2"})
    assert api_client.refresh_auth_if_needed()
    assert paradex_account.jwt_token == "jwt-2"
    assert not paradex_account.auth.needs_refresh()


def test_no_account(mock_session):
    client = ParadexApiClient(ParadexEnvironment.testnet, session=mock_session)
    with pytest.raises(AccountStateError, match="No account initialized"):
        client.authenticate()
    with pytest.raises(AccountStateError):
        client.authorization_headers()
    assert not client.refresh_auth_if_needed()


def test_not_authenticated(api_client):
    with pytest.raises(AccountStateError, match="not authenticated"):
        api_client.authorization_headers()
