"""Stable anonymous identity for this installation."""

import logging
from dataclasses import dataclass, field
from uuid import uuid4

from liva.services.storage import LocalStorage

DEVICE_KEY = "liva_device_id"

_logger = logging.getLogger(__name__)


@dataclass
class DeviceIdentityService:
    """Creates the device id once and returns it afterwards."""

    storage: LocalStorage
    _cached: str | None = field(default=None, init=False, repr=False)

    def get_device_id(self) -> str:
        """Return the persisted device id, generating it on first use.

        If local storage cannot be read or written, the generated id is still
        returned and reused for this process, but it will not survive a
        restart.
        """
        if self._cached is not None:
            return self._cached

        try:
            stored = self.storage.get_item(DEVICE_KEY)
        except (OSError, ValueError):
            _logger.warning("Local storage unreadable, using a temporary device id")
            stored = None
        if stored:
            self._cached = stored
            return stored

        device_id = str(uuid4())
        try:
            self.storage.set_item(DEVICE_KEY, device_id)
        except (OSError, ValueError):
            _logger.warning("Could not persist device id; it will not survive restart")
        self._cached = device_id
        return device_id
