"""Error taxonomy shared by the ledger, adapters and CLI."""


class TallyError(Exception):
    """Base class for tasktally errors."""

    pass


class ValidationError(TallyError):
    """Raised when input is rejected before touching the store."""

    pass


class NotFoundError(TallyError):
    """Raised when an operation targets a missing or foreign-owned record."""

    pass


class StoreError(TallyError):
    """Raised when the backing record store fails."""

    pass


class AuthenticationError(TallyError):
    """Raised when no signed-in user is available."""

    pass
