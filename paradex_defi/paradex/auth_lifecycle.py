"""JWT freshness tracking.

Paradex JWTs are short lived. All timestamps are naive UTC datetimes. We re-authenticate when the last successful
authentication is older than :py:data:`~paradex_defi.paradex.constants.JWT_REFRESH_INTERVAL`.

.. code-block:: text

    Unauthenticated -> onboard -> Onboarded -> authenticate -> Authenticated(t)
    Authenticated(t) -> [now - t > 240s] -> authenticate -> Authenticated(t')
"""

import datetime
import threading

from paradex_defi.paradex.constants import JWT_REFRESH_INTERVAL


def utc_now() -> datetime.datetime:
    """Current time as naive UTC."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def needs_refresh(
    auth_timestamp: datetime.datetime,
    now: datetime.datetime | None = None,
    refresh_interval: float = JWT_REFRESH_INTERVAL,
) -> bool:
    """Is a JWT obtained at ``auth_timestamp`` due for refresh.

    Exactly ``refresh_interval`` seconds old is still fresh.
    A timestamp in the future is fresh.

    :param auth_timestamp:
        When the last authentication succeeded

    :param now:
        Override the current time
    """
    if now is None:
        now = utc_now()
    assert auth_timestamp.tzinfo is None, f"Only naive UTC datetimes accepted, got {auth_timestamp}"
    assert now.tzinfo is None, f"Only naive UTC datetimes accepted, got {now}"
    elapsed = (now - auth_timestamp).total_seconds()
    return elapsed > refresh_interval


class AuthLifecycle:
    """Tracks when the account last authenticated.

    Safe to share between threads.
    """

    def __init__(self, refresh_interval: float = JWT_REFRESH_INTERVAL):
        self.refresh_interval = refresh_interval
        self._authenticated_at: datetime.datetime | None = None
        self._lock = threading.Lock()

    def __repr__(self):
        return f"<AuthLifecycle authenticated_at:{self._authenticated_at}>"

    @property
    def authenticated_at(self) -> datetime.datetime | None:
        """When we last authenticated, or ``None`` if never."""
        return self._authenticated_at

    def is_authenticated(self) -> bool:
        return self._authenticated_at is not None

    def mark_authenticated(self, at: datetime.datetime | None = None):
        """Record a successful authentication.

        :param at:
            Naive UTC time of the authentication, defaults to now
        """
        assert at is None or at.tzinfo is None, f"Only naive UTC datetimes accepted, got {at}"
        with self._lock:
            self._authenticated_at = at or utc_now()

    def reset(self):
        with self._lock:
            self._authenticated_at = None

    def needs_refresh(self, now: datetime.datetime | None = None) -> bool:
        """Should we re-authenticate before the next privileged call.

        Never authenticated accounts do not need a refresh, they need a full authentication.
        """
        authenticated_at = self._authenticated_at
        if authenticated_at is None:
            return False
        return needs_refresh(authenticated_at, now, self.refresh_interval)
