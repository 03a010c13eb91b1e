"""Port for reading and appending raw platform batches."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence


@dataclass(slots=True)
class RawBatch:
    """One stored export file; records stay untyped until an adapter normalizes them."""

    batch_id: str
    platform: str
    products: list[Any] = field(default_factory=list[Any])
    metadata: dict[str, Any] = field(default_factory=dict[str, Any])
    stats: dict[str, Any] = field(default_factory=dict[str, Any])


@runtime_checkable
class RawBatchStore(Protocol):
    """Append-only store of raw batches keyed by platform and batch id.

    Implementations raise :class:`~syncstore.domain.errors.FatalIOError` when a batch
    cannot be read.
    """

    def iter_batches(self, platform: str) -> Iterator[RawBatch]: ...

    def append(
        self,
        platform: str,
        products: Sequence[Any],
        *,
        batch_id: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> RawBatch: ...
