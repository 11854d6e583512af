"""Device provisioning and goal synchronization."""

import logging
from dataclasses import dataclass

from liva.domain.errors import StoreError, StoreErrorKind
from liva.domain.nutrition import UserGoals
from liva.services.records import device_from_row, goals_to_patch
from liva.services.store import Collection, RemoteStore

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of syncing a device.

    ``goals`` is None both for a first run and on failure; callers tell
    those apart through ``error``.
    """

    goals: UserGoals | None = None
    error: StoreError | None = None

    @property
    def setup_required(self) -> bool:
        """Return True when the remote schema has not been provisioned."""
        return self.error is not None and self.error.is_schema_missing

    @property
    def connection_failed(self) -> bool:
        """Return True for any failure other than a missing schema."""
        return self.error is not None and not self.error.is_schema_missing


@dataclass
class DeviceSyncService:
    """Ensures the device record exists and resolves its goals."""

    store: RemoteStore

    async def sync_device(self, device_id: str) -> SyncResult:
        """Fetch or provision the device and return its goals."""
        try:
            rows = await self.store.select_by_device(
                Collection.DEVICES,
                device_id,
                columns="device_id, regular_day_goals, training_day_goals",
            )
        except StoreError as exc:
            _logger.error("Device sync failed (%s): %s", exc.kind.value, exc.message)
            return SyncResult(error=exc)

        if not rows:
            try:
                await self.store.insert(Collection.DEVICES, {"device_id": device_id})
            except StoreError as exc:
                _logger.error("Registering device failed: %s", exc.message)
                return SyncResult(error=exc)
            _logger.info("Registered new device %s", device_id)
            return SyncResult()

        return SyncResult(goals=device_from_row(rows[0]).goals)

    async def update_goals(self, device_id: str, goals: UserGoals) -> None:
        """Store both goal profiles on the device record."""
        await self.store.update(Collection.DEVICES, device_id, goals_to_patch(goals))


def is_setup_error(exc: BaseException) -> bool:
    """Return True when an exception means the schema is missing."""
    return isinstance(exc, StoreError) and exc.kind is StoreErrorKind.SCHEMA_MISSING
