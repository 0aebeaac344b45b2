"""paradex_defi package root.

Client-side signing core for the Paradex exchange: Starknet key derivation,
account address computation and typed data signing.

See :py:mod:`paradex_defi.paradex` for the exchange integration.
"""

import sys


#: Minimum required Python version to run this package
MIN_PYTHON_VERSION = (3, 11)


def _check_python_version():
    """Try early abort if the Python version is too old."""

    # Use Python tuple comparison for version numbers
    # https://stackoverflow.com/a/1093331/315168
    if sys.version_info < MIN_PYTHON_VERSION:
        raise RuntimeError(f"paradex-defi needs Python {MIN_PYTHON_VERSION[0]}.{MIN_PYTHON_VERSION[1]} or later")


_check_python_version()
