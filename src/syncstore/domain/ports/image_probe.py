"""Port for checking that product image URLs are reachable."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence


@dataclass(frozen=True, slots=True)
class ImageProbeResult:
    """Outcome of a single HEAD probe.

    ``status_code`` is ``None`` when no HTTP response arrived at all.
    """

    url: str
    reachable: bool
    status_code: int | None = None
    issue: str | None = None

    @property
    def responded(self) -> bool:
        return self.status_code is not None


@runtime_checkable
class ImageProbe(Protocol):
    def probe(self, urls: Sequence[str]) -> list[ImageProbeResult]: ...
