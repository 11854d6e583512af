"""Device domain models."""

from dataclasses import dataclass

from liva.domain.nutrition import UserGoals


@dataclass(frozen=True)
class DeviceRecord:
    """Remote record for one installation."""

    device_id: str
    goals: UserGoals | None
