"""Error taxonomy shared by the navigator, selector and data providers."""
from __future__ import annotations


class PgnavError(Exception):
    """Base class for every error raised by pgnav."""


class ValidationError(PgnavError):
    """A required prompt input was empty."""


class CancelError(PgnavError):
    """The user aborted the session (escape, Ctrl+C or a termination signal).

    Callers treat this as a clean exit rather than a fault.
    """

    def __init__(self, message: str = "cancelled"):
        super().__init__(message)


class ProviderError(PgnavError):
    """A data provider failed to fetch its rows.

    Always fatal to a navigation run; the original fault is kept on
    ``cause`` (and ``__cause__`` when raised with ``from``).
    """

    def __init__(self, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.cause = cause


class ProviderTimeoutError(ProviderError):
    """A data provider exceeded its time bound."""


class SelectorIOError(PgnavError):
    """Reading from or writing to the terminal failed."""


class ProfileError(PgnavError):
    """No usable connection profile could be resolved."""
