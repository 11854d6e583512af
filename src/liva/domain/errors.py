"""Error types shared across services."""

from enum import Enum


class StoreErrorKind(Enum):
    """Classification of remote store failures."""

    SCHEMA_MISSING = "schema_missing"
    TRANSPORT = "transport"
    NOT_FOUND = "not_found"


class StoreError(Exception):
    """A remote store operation failed."""

    def __init__(self, kind: StoreErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def is_schema_missing(self) -> bool:
        """Return True when the backing table does not exist."""
        return self.kind is StoreErrorKind.SCHEMA_MISSING

    def __repr__(self) -> str:
        return f"StoreError(kind={self.kind.value!r}, message={self.message!r})"


class SessionNotReadyError(RuntimeError):
    """A command was issued before the session finished initializing."""


class EstimationError(Exception):
    """Nutrition estimation failed."""


class MissingCredentialsError(EstimationError):
    """No API credentials are configured for estimation."""
