"""Population defaults for catalog imports."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_int, optional_env_str, optional_env_tuple

DEFAULT_POPULATION_BATCH_SIZE = 50
DEFAULT_POPULATION_PLATFORMS: tuple[str, ...] = ("shopee", "tiktokshop")
DEFAULT_ORGANIZATION_ID = "default-org"


@dataclass(frozen=True, slots=True)
class SyncConfig:
    batch_size: int = DEFAULT_POPULATION_BATCH_SIZE
    platforms: tuple[str, ...] = DEFAULT_POPULATION_PLATFORMS
    organization_id: str = DEFAULT_ORGANIZATION_ID


def get_sync_config() -> SyncConfig:
    """Defaults for ``populate``, overridable via ``SYNCSTORE_BATCH_SIZE``,
    ``SYNCSTORE_PLATFORMS`` and ``SYNCSTORE_ORGANIZATION_ID``."""

    return SyncConfig(
        batch_size=optional_env_int(
            "SYNCSTORE_BATCH_SIZE", DEFAULT_POPULATION_BATCH_SIZE, minimum=1
        ),
        platforms=optional_env_tuple("SYNCSTORE_PLATFORMS", DEFAULT_POPULATION_PLATFORMS),
        organization_id=optional_env_str("SYNCSTORE_ORGANIZATION_ID", DEFAULT_ORGANIZATION_ID),
    )
