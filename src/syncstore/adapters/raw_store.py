"""Filesystem-backed raw batch store.

Layout: ``<root>/<platform>/batch_<batch_id>_<epoch_ms>.json``.
"""

from __future__ import annotations

import time
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from syncstore.domain.errors import FatalIOError
from syncstore.domain.model import utcnow
from syncstore.domain.ports import RawBatch

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping, Sequence
    from pathlib import Path

    from syncstore.domain.ports import RawBatchStore

log = getLogger(__name__)

BATCH_GLOB = "batch_*.json"


class RawBatchFile(BaseModel):
    model_config = ConfigDict(extra="ignore")

    batchId: str | None = None  # noqa: N815
    platform: str | None = None
    products: list[Any] = Field(default_factory=list[Any])
    metadata: dict[str, Any] = Field(default_factory=dict[str, Any])
    stats: dict[str, Any] = Field(default_factory=dict[str, Any])


class FileRawBatchStore:
    def __init__(self, root: Path) -> None:
        self.root = root

    def platform_dir(self, platform: str) -> Path:
        return self.root / platform

    def batch_paths(self, platform: str) -> list[Path]:
        directory = self.platform_dir(platform)
        if not directory.exists():
            return []
        return sorted(directory.glob(BATCH_GLOB))

    def iter_batches(self, platform: str) -> Iterator[RawBatch]:
        for path in self.batch_paths(platform):
            yield self._read(path, platform)

    def append(
        self,
        platform: str,
        products: Sequence[Any],
        *,
        batch_id: str | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> RawBatch:
        stamp = int(time.time() * 1000)
        resolved_id = batch_id or f"{platform}_batch_{stamp}"
        document = RawBatchFile(
            batchId=resolved_id,
            platform=platform,
            products=list(products),
            metadata={
                "importedAt": utcnow().isoformat(),
                "source": f"{platform}_api_batch",
                **(metadata or {}),
            },
            stats={"totalProducts": len(products)},
        )
        directory = self.platform_dir(platform)
        path = directory / f"batch_{resolved_id}_{stamp}.json"
        try:
            directory.mkdir(parents=True, exist_ok=True)
            path.write_text(document.model_dump_json(indent=2), encoding="utf-8")
        except OSError as exc:
            raise FatalIOError(f"Cannot write raw batch {path}: {exc}") from exc
        log.info("Stored %s %s products to %s", len(products), platform, path.name)
        return RawBatch(
            batch_id=resolved_id,
            platform=platform,
            products=document.products,
            metadata=document.metadata,
            stats=document.stats,
        )

    def _read(self, path: Path, platform: str) -> RawBatch:
        try:
            document = RawBatchFile.model_validate_json(path.read_bytes())
        except OSError as exc:
            raise FatalIOError(f"Cannot read raw batch {path}: {exc}") from exc
        except PydanticValidationError as exc:
            raise FatalIOError(f"Malformed raw batch {path}: {exc.error_count()} error(s)") from exc
        return RawBatch(
            batch_id=document.batchId or path.stem,
            platform=document.platform or platform,
            products=document.products,
            metadata=document.metadata,
            stats=document.stats,
        )


if TYPE_CHECKING:
    _check_store: RawBatchStore = FileRawBatchStore(Path())
