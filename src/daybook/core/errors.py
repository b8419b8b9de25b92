"""Error types raised by Daybook."""


class DaybookError(Exception):
    """Base class for Daybook errors."""

    pass


class ParseFailure(DaybookError, ValueError):
    """Free-text time input did not resolve to valid wall-clock times."""

    pass


class InvalidRange(DaybookError, ValueError):
    """End not after start, for either a time span or a date range."""

    pass


class BackendError(DaybookError):
    """A backend request failed."""

    pass


class AuthenticationError(DaybookError):
    """Credentials were rejected or the session is no longer valid."""

    pass
