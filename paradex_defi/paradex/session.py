"""HTTP session for the Paradex REST API.

- All requests to the API share one SQLite backed rate limit bucket,
  so the session can be used from several threads signing and submitting orders

- GET requests are retried on throttling and gateway errors

- POST requests are retried only on the endpoints where a repeat is harmless:
  onboarding is idempotent and each auth request issues a fresh JWT.
  Order and other POSTs are never repeated.

Retry policy is chosen by URL prefix with :py:meth:`requests.Session.mount`,
the longest matching prefix wins.
"""

import logging
from pathlib import Path

from pyrate_limiter import SQLiteBucket
from requests import Session
from requests_ratelimiter import LimiterAdapter

from paradex_defi.logging_retry import LoggingRetry
from paradex_defi.paradex.constants import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_REQUESTS_PER_SECOND,
    DEFAULT_RETRIES,
    PARADEX_RATE_LIMIT_SQLITE_DATABASE,
    ParadexEnvironment,
)

logger = logging.getLogger(__name__)


#: API paths, relative to :py:attr:`ParadexEnvironment.api_url`, where POST may be retried
RETRYABLE_POST_PATHS = ("/onboarding", "/auth/")

#: Throttling and gateway statuses worth another attempt
RETRY_STATUSES = (429, 500, 502, 503, 504)


def create_retry_policy(retries: int, backoff_factor: float, allow_post: bool) -> LoggingRetry:
    """Retry policy for Paradex API requests.

    :param allow_post:
        Also retry POST requests
    """
    allowed_methods = LoggingRetry.DEFAULT_ALLOWED_METHODS
    if allow_post:
        allowed_methods = allowed_methods | frozenset(["POST"])

    return LoggingRetry(
        total=retries,
        backoff_factor=backoff_factor,
        status_forcelist=RETRY_STATUSES,
        respect_retry_after_header=True,
        logger=logger,
        allowed_methods=allowed_methods,
    )


def create_paradex_session(
    environment: ParadexEnvironment = ParadexEnvironment.testnet,
    retries: int = DEFAULT_RETRIES,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    requests_per_second: float = DEFAULT_REQUESTS_PER_SECOND,
    pool_maxsize: int = 32,
    rate_limit_db_path: Path = PARADEX_RATE_LIMIT_SQLITE_DATABASE,
) -> Session:
    """Create a requests Session for one Paradex environment.

    :py:class:`~paradex_defi.paradex.authentication.ParadexApiClient` creates one
    of these for its environment when no session is given.

    Example::

        session = create_paradex_session(ParadexEnvironment.testnet)
        response = session.get("https://api.testnet.paradex.trade/v1/system/config")

    :param environment:
        Whose onboarding and auth endpoints get POST retries
    :param retries:
        Maximum number of retry attempts for failed requests
    :param backoff_factor:
        Backoff factor for exponential retry delays
    :param requests_per_second:
        Maximum requests per second, shared by all requests of the session
    :param pool_maxsize:
        Maximum number of connections to keep in each connection pool.
    :param rate_limit_db_path:
        Path to SQLite database for storing rate limit state.
        Defaults to ``~/.paradex-defi/rate-limit.sqlite``.
    :return:
        Configured requests Session
    """
    rate_limit_db_path.parent.mkdir(parents=True, exist_ok=True)

    session = Session()

    adapter = LimiterAdapter(
        per_second=requests_per_second,
        max_retries=create_retry_policy(retries, backoff_factor, allow_post=False),
        pool_connections=pool_maxsize,
        pool_maxsize=pool_maxsize,
        bucket_class=SQLiteBucket,
        bucket_kwargs={"path": str(rate_limit_db_path)},
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    # Same limiter, so retried POSTs count against the same rate
    post_adapter = LimiterAdapter(
        limiter=adapter.limiter,
        max_retries=create_retry_policy(retries, backoff_factor, allow_post=True),
        pool_connections=pool_maxsize,
        pool_maxsize=pool_maxsize,
    )
    for path in RETRYABLE_POST_PATHS:
        session.mount(environment.api_url + path, post_adapter)

    logger.debug("Created Paradex %s session, %s req/s, POST retries on %s", environment, requests_per_second, RETRYABLE_POST_PATHS)
    return session
