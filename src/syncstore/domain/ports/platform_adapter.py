"""Port implemented by every marketplace adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from syncstore.domain.errors import TransformError
    from syncstore.domain.model import CanonicalRecord


@dataclass(frozen=True, slots=True)
class ListingValidation:
    """Result of checking one raw record against a platform's strict listing rules.

    Errors are formatted as ``"field: message"``.
    """

    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()
    tokopedia_flag: bool | None = None


@runtime_checkable
class PlatformAdapter(Protocol):
    """Pure mapping from one platform's raw records to canonical records."""

    @property
    def platform(self) -> str: ...

    def native_id(self, raw: Mapping[str, Any]) -> str | None: ...

    def normalize(self, raw: Mapping[str, Any]) -> CanonicalRecord | TransformError: ...

    def validate_listing(self, raw: Mapping[str, Any]) -> ListingValidation: ...
