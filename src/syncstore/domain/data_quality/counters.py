"""Accumulator for raw-record spot check results."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .report import RawPlatformValidation

if TYPE_CHECKING:
    from collections.abc import Iterable

COMMON_ERROR_LIMIT = 5


@dataclass(slots=True)
class _PlatformTally:
    total: int = 0
    valid: int = 0
    errors: Counter[str] = field(default_factory=Counter[str])


class ValidationCounters:
    """Per-platform validity counts and recurring error messages.

    Each validator owns one instance; :meth:`reset` clears it between runs.
    """

    def __init__(self) -> None:
        self._tallies: dict[str, _PlatformTally] = {}

    def record(self, platform: str, *, is_valid: bool, errors: Iterable[str] = ()) -> None:
        tally = self._tallies.setdefault(platform, _PlatformTally())
        tally.total += 1
        if is_valid:
            tally.valid += 1
        else:
            tally.errors.update(errors)

    def touch(self, platform: str) -> None:
        """Register ``platform`` so it shows up in snapshots even without records."""

        self._tallies.setdefault(platform, _PlatformTally())

    def reset(self) -> None:
        self._tallies.clear()

    def snapshot(self) -> dict[str, RawPlatformValidation]:
        return {
            platform: RawPlatformValidation(
                platform=platform,
                total_products=tally.total,
                valid_products=tally.valid,
                invalid_products=tally.total - tally.valid,
                common_errors=tuple(tally.errors.most_common(COMMON_ERROR_LIMIT)),
            )
            for platform, tally in self._tallies.items()
        }
