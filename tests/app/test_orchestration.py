from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

import pytest

from syncstore.adapters.job_queue import InMemoryJobQueue
from syncstore.app import (
    batch_status,
    export_pricing_configuration,
    import_batch_report,
    import_pricing_configuration,
    populate_master_catalog,
    validate_catalog,
)
from syncstore.domain.errors import ConfigurationError
from syncstore.domain.model import BatchState
from tests.helpers.fakes import FakeImageProbe
from tests.helpers.payloads import malformed_shopee_item, shopee_item

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from syncstore.adapters.raw_store import FileRawBatchStore
    from syncstore.adapters.sqlalchemy.unit_of_work import SqlAlchemyCatalogUnitOfWork

VALIDATION_SUMMARY = "Validation finished: status=%s, score=%s, recommendations=%s"


def test_populate_then_inspect_batch(
    monkeypatch: pytest.MonkeyPatch,
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
    raw_store: FileRawBatchStore,
    job_queue: InMemoryJobQueue,
) -> None:
    monkeypatch.delenv("SYNCSTORE_PRICING_CONFIG", raising=False)
    raw_store.append("shopee", [shopee_item(1), malformed_shopee_item(2)])

    result = populate_master_catalog(
        organization_id="org-1",
        platforms=("shopee",),
        unit_of_work_factory=sqlite_unit_of_work,
        raw_store=raw_store,
        job_queue=job_queue,
    )

    assert (result.success_count, result.error_count) == (1, 1)

    live = batch_status(
        result.import_batch_id, unit_of_work_factory=sqlite_unit_of_work, job_queue=job_queue
    )
    assert live is not None
    assert live.source == "queue"
    assert live.status is BatchState.MIXED
    assert live.error_summary is not None
    assert live.error_summary.error_types == {"TRANSFORM_ERROR": 1}

    restarted = batch_status(
        result.import_batch_id,
        unit_of_work_factory=sqlite_unit_of_work,
        job_queue=InMemoryJobQueue(),
    )
    assert restarted is not None
    assert restarted.source == "log"
    assert (restarted.completed, restarted.failed) == (1, 1)

    report = import_batch_report(result.import_batch_id, unit_of_work_factory=sqlite_unit_of_work)
    assert f"Batch ID: {result.import_batch_id}" in report


def test_pricing_configuration_export_and_import(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("SYNCSTORE_PRICING_CONFIG", raising=False)
    exported = tmp_path / "fees.json"

    payload = export_pricing_configuration(exported)

    platforms = [entry["platform"] for entry in json.loads(payload)]
    assert "shopee" in platforms
    assert exported.read_text(encoding="utf-8") == payload + "\n"

    installed = tmp_path / "config" / "installed.json"
    engine = import_pricing_configuration(exported, installed)
    assert installed.exists()
    assert engine.validate_configuration().is_valid

    monkeypatch.setenv("SYNCSTORE_PRICING_CONFIG", str(installed))
    assert export_pricing_configuration() == payload


def test_pricing_import_needs_a_destination(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("SYNCSTORE_PRICING_CONFIG", raising=False)
    source = tmp_path / "fees.json"
    export_pricing_configuration(source)

    with pytest.raises(ConfigurationError, match="No destination"):
        import_pricing_configuration(source)


def test_validation_summary_is_logged_with_arguments(
    caplog: pytest.LogCaptureFixture,
    sqlite_unit_of_work: Callable[[], SqlAlchemyCatalogUnitOfWork],
    raw_store: FileRawBatchStore,
) -> None:
    caplog.set_level(logging.INFO, logger="syncstore.app")

    report = validate_catalog(
        unit_of_work_factory=sqlite_unit_of_work,
        raw_store=raw_store,
        image_probe=FakeImageProbe(),
    )

    (record,) = [r for r in caplog.records if r.msg == VALIDATION_SUMMARY]
    assert record.args == (report.status, report.overall_score, len(report.recommendations))
