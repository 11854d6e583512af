"""Client-local key-value storage interface."""

from typing import Protocol


class LocalStorage(Protocol):
    """Durable string storage on the client."""

    def get_item(self, key: str) -> str | None:
        """Return the stored value for a key, if present."""

    def set_item(self, key: str, value: str) -> None:
        """Store a value under a key."""

    def remove_item(self, key: str) -> None:
        """Remove a key; missing keys are ignored."""
