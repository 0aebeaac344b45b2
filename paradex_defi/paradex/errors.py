"""Paradex error kinds.

All errors raised by the signing core derive from :py:class:`ParadexError`.
Underlying library failures are chained, so the original cause is
available in ``__cause__``.
"""


class ParadexError(Exception):
    """Base class for Paradex integration errors."""


class CredentialFormatError(ParadexError):
    """L1 or L2 private key is malformed, or the L1 signer refused to sign."""


class ConfigurationFormatError(ParadexError):
    """System configuration has a malformed chain id or class hash."""


class ProtocolError(ParadexError):
    """Selector or contract address computation failed."""


class SigningError(ParadexError):
    """Typed data could not be encoded, or the curve signature failed."""


class AccountStateError(ParadexError):
    """Operation needs an account, but none has been set up."""


class ParadexApiError(ParadexError):
    """Paradex REST API returned a non-success status."""

    def __init__(self, status: int, message: str):
        self.status = status
        self.message = message
        super().__init__(f"API error (status {status}): {message}")
