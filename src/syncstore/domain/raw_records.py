"""Guards for raw batch entries before they reach a platform adapter.

Raw batches are untyped JSON; an entry that is not an object fails on its own instead
of taking the rest of its batch down with it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeGuard

from syncstore.domain.errors import TransformError

if TYPE_CHECKING:
    from syncstore.domain.model import CanonicalRecord
    from syncstore.domain.ports import PlatformAdapter


def is_record(raw: object) -> TypeGuard[Mapping[str, Any]]:
    return isinstance(raw, Mapping)


def not_a_record(raw: object) -> str:
    return f"Raw record is not an object: {type(raw).__name__}"


def native_id(adapter: PlatformAdapter, raw: object) -> str | None:
    return adapter.native_id(raw) if is_record(raw) else None


def normalize(adapter: PlatformAdapter, raw: object) -> CanonicalRecord | TransformError:
    if not is_record(raw):
        return TransformError(not_a_record(raw), platform=adapter.platform)
    return adapter.normalize(raw)
