"""Error taxonomy for catalog reconciliation, pricing and validation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime


def _utcnow() -> datetime:
    return datetime.now(UTC)


class CatalogError(Exception):
    """Base class for all catalog pipeline errors."""

    code: str = "CATALOG_ERROR"


class ValidationError(CatalogError):
    """A record violates a schema or business rule."""

    code = "VALIDATION_ERROR"


class TransformError(CatalogError):
    """A platform adapter could not normalize a raw record."""

    code = "TRANSFORM_ERROR"

    def __init__(self, message: str, *, platform: str, product_id: str | None = None) -> None:
        super().__init__(message)
        self.platform = platform
        self.product_id = product_id


class PersistenceError(CatalogError):
    """Writing a single record to the catalog store failed."""

    code = "PERSISTENCE_ERROR"


class ConfigurationError(CatalogError):
    """Unknown or inactive platform, or a malformed configuration value."""

    code = "CONFIGURATION_ERROR"


class FatalIOError(CatalogError):
    """A raw batch or the catalog store could not be reached."""

    code = "FATAL_IO_ERROR"


@dataclass(frozen=True, slots=True)
class RecordError:
    """Error attached to a single processed record."""

    product_id: str
    platform: str
    message: str
    code: str = CatalogError.code
    timestamp: datetime = field(default_factory=_utcnow)

    @classmethod
    def from_exception(
        cls,
        exc: CatalogError,
        *,
        product_id: str | None,
        platform: str,
    ) -> RecordError:
        return cls(
            product_id=product_id or "unknown",
            platform=platform,
            message=str(exc),
            code=exc.code,
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "product_id": self.product_id,
            "platform": self.platform,
            "message": self.message,
            "code": self.code,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True, slots=True)
class RecordWarning:
    product_id: str
    platform: str
    message: str
    timestamp: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> dict[str, str]:
        return {
            "product_id": self.product_id,
            "platform": self.platform,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }
