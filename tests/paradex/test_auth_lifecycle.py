"""JWT refresh timing."""

import datetime

import pytest

from paradex_defi.paradex.auth_lifecycle import AuthLifecycle, needs_refresh, utc_now


AUTHENTICATED_AT = datetime.datetime(2024, 1, 1, 12, 0, 0)


def test_fresh_token():
    assert not needs_refresh(AUTHENTICATED_AT, AUTHENTICATED_AT + datetime.timedelta(seconds=10))


def test_refresh_boundary():
    """Exactly four minutes old is still fresh, one second more is stale."""
    assert not needs_refresh(AUTHENTICATED_AT, AUTHENTICATED_AT + datetime.timedelta(seconds=240))
    assert needs_refresh(AUTHENTICATED_AT, AUTHENTICATED_AT + datetime.timedelta(seconds=241))
    assert needs_refresh(AUTHENTICATED_AT, AUTHENTICATED_AT + datetime.timedelta(hours=1))


def test_future_timestamp_is_fresh():
    assert not needs_refresh(AUTHENTICATED_AT, AUTHENTICATED_AT - datetime.timedelta(minutes=10))


def test_lifecycle():
    lifecycle = AuthLifecycle()
    assert not lifecycle.is_authenticated()
    assert lifecycle.authenticated_at is None

    # Never authenticated needs full authentication, not a refresh
    assert not lifecycle.needs_refresh()

    lifecycle.mark_authenticated(AUTHENTICATED_AT)
    assert lifecycle.is_authenticated()
    assert lifecycle.authenticated_at == AUTHENTICATED_AT
    assert not lifecycle.needs_refresh(AUTHENTICATED_AT + datetime.timedelta(seconds=240))
    assert lifecycle.needs_refresh(AUTHENTICATED_AT + datetime.timedelta(seconds=241))

    lifecycle.reset()
    assert not lifecycle.is_authenticated()


def test_mark_authenticated_defaults_to_now():
    lifecycle = AuthLifecycle()
    lifecycle.mark_authenticated()
    assert not lifecycle.needs_refresh()


def test_custom_interval():
    lifecycle = AuthLifecycle(refresh_interval=60)
    lifecycle.mark_authenticated(AUTHENTICATED_AT)
    assert lifecycle.needs_refresh(AUTHENTICATED_AT + datetime.timedelta(seconds=61))


def test_timezone_aware_rejected():
    aware = AUTHENTICATED_AT.replace(tzinfo=datetime.timezone.utc)

    with pytest.raises(AssertionError, match="naive UTC"):
        needs_refresh(aware, AUTHENTICATED_AT)

    with pytest.raises(AssertionError, match="naive UTC"):
        needs_refresh(AUTHENTICATED_AT, aware)

    lifecycle = AuthLifecycle()
    with pytest.raises(AssertionError, match="naive UTC"):
        lifecycle.mark_authenticated(aware)
    assert not lifecycle.is_authenticated()


def test_utc_now_is_naive():
    assert utc_now().tzinfo is None
