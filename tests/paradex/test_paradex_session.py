"""HTTP session retry and rate limit set up."""

import logging

import pytest

from paradex_defi.logging_retry import LoggingRetry
from paradex_defi.paradex.authentication import ParadexApiClient
from paradex_defi.paradex.constants import ParadexEnvironment
from paradex_defi.paradex.session import create_paradex_session


@pytest.fixture
def session(tmp_path):
    db_path = tmp_path / "paradex" / "rate-limit.sqlite"
    return create_paradex_session(ParadexEnvironment.testnet, retries=3, rate_limit_db_path=db_path)


def test_create_session(tmp_path, session):
    assert (tmp_path / "paradex").exists()

    retry = session.get_adapter("https://api.testnet.paradex.trade/v1/system/config").max_retries
    assert isinstance(retry, LoggingRetry)
    assert retry.total == 3
    assert 429 in retry.status_forcelist
    assert "GET" in retry.allowed_methods


@pytest.mark.parametrize(
    "url",
    [
        "https://api.testnet.paradex.trade/v1/onboarding",
        "https://api.testnet.paradex.trade/v1/auth/0x36d65c8c6785a6bbc664cad4e3d14b79c4fec9366f9d6ef593003370cc5a67b",
    ],
)
def test_post_retried_on_auth_endpoints(session, url):
    retry = session.get_adapter(url).max_retries
    assert "POST" in retry.allowed_methods
    assert retry.total == 3


@pytest.mark.parametrize(
    "url",
    [
        "https://api.testnet.paradex.trade/v1/orders",
        "https://api.testnet.paradex.trade/v1/block-trades",
        "https://api.prod.paradex.trade/v1/onboarding",
    ],
)
def test_post_not_retried_elsewhere(session, url):
    """Resubmitting an order could fill it twice."""
    retry = session.get_adapter(url).max_retries
    assert "POST" not in retry.allowed_methods


def test_adapters_share_rate_limit(session):
    read_adapter = session.get_adapter("https://api.testnet.paradex.trade/v1/system/config")
    auth_adapter = session.get_adapter("https://api.testnet.paradex.trade/v1/onboarding")
    assert read_adapter is not auth_adapter
    assert read_adapter.limiter is auth_adapter.limiter


def test_client_session_follows_environment(mocker):
    create_session = mocker.patch("paradex_defi.paradex.authentication.create_paradex_session")
    client = ParadexApiClient(ParadexEnvironment.prod)
    create_session.assert_called_once_with(ParadexEnvironment.prod)
    assert client.session is create_session.return_value


def test_retry_keeps_logger():
    """urllib3 clones the retry policy on each attempt."""
    logger = logging.getLogger("paradex-test")
    retry = LoggingRetry(total=2, logger=logger)
    assert retry.new(total=1).logger is logger


def test_retry_logs(caplog):
    retry = LoggingRetry(total=2)
    with caplog.at_level(logging.WARNING):
        retry = retry.increment(method="POST", url="https://api.testnet.paradex.trade/v1/auth/0x1", error=ConnectionError("reset"))
    assert retry.total == 1
    assert "Retrying: POST" in caplog.text
