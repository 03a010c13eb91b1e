from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from syncstore.domain.catalog_population import PopulationResult, SuccessPolicy
from syncstore.ui import cli

if TYPE_CHECKING:
    from collections.abc import Callable


def _fake_populate(
    captured: dict[str, object], *, success: bool = True
) -> Callable[..., PopulationResult]:
    def fake(**kwargs: object) -> PopulationResult:
        captured.update(kwargs)
        return PopulationResult(import_batch_id="batch-1", dry_run=False, success=success)

    return fake


def test_populate_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}
    monkeypatch.setattr(cli, "populate_master_catalog", _fake_populate(captured))

    cli.main(["populate"])

    assert captured["organization_id"] is None
    assert captured["platforms"] is None
    assert captured["batch_size"] is None
    assert captured["skip_existing"] is False
    assert captured["dry_run"] is False
    assert captured["success_policy"] is SuccessPolicy.READ_SUCCEEDED
    assert captured["max_platform_workers"] == 1


def test_populate_with_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}
    monkeypatch.setattr(cli, "populate_master_catalog", _fake_populate(captured))

    cli.main(
        [
            "populate",
            "--organization-id",
            "org-7",
            "--platform",
            "shopee",
            "--batch-size",
            "10",
            "--skip-existing",
            "--dry-run",
            "--success-policy",
            "no_record_errors",
            "--workers",
            "2",
        ]
    )

    assert captured["organization_id"] == "org-7"
    assert captured["platforms"] == ("shopee",)
    assert captured["batch_size"] == 10
    assert captured["skip_existing"] is True
    assert captured["dry_run"] is True
    assert captured["success_policy"] is SuccessPolicy.NO_RECORD_ERRORS
    assert captured["max_platform_workers"] == 2


def test_failed_population_exits_non_zero(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "populate_master_catalog", _fake_populate({}, success=False))

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["populate"])

    assert excinfo.value.code == 1
    assert "Batch batch-1 (import): failed" in capsys.readouterr().out


@pytest.mark.parametrize(
    "argv",
    [
        ["populate", "--batch-size", "0"],
        ["populate", "--platform", "lazada"],
        ["price", "-5"],
        ["unknown-command"],
    ],
)
def test_invalid_arguments_exit_with_usage_error(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(argv)

    assert excinfo.value.code == 2


def test_unexpected_errors_exit_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def boom(**_: object) -> PopulationResult:
        raise RuntimeError("database unavailable")

    monkeypatch.setattr(cli, "populate_master_catalog", boom)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["populate"])

    assert excinfo.value.code == 1


def test_price_for_single_platform(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("SYNCSTORE_PRICING_CONFIG", raising=False)

    cli.main(["price", "150000", "--platform", "shopee"])

    out = capsys.readouterr().out
    assert out.startswith("shopee: Rp 177.503 (platform fee Rp 22.500")


def test_compare_prices(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.delenv("SYNCSTORE_PRICING_CONFIG", raising=False)

    cli.main(["compare-prices", "150000"])

    out = capsys.readouterr().out
    assert "Lowest: website" in out
    assert "Highest: tiktokshop Rp 184.500" in out


def test_report_prints_batch_report(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "import_batch_report", lambda batch_id: f"report for {batch_id}")

    cli.main(["report", "batch-9"])

    assert capsys.readouterr().out == "report for batch-9\n"


def test_unknown_batch_status_exits_non_zero(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "batch_status", lambda _batch_id: None)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["batch-status", "missing"])

    assert excinfo.value.code == 1
    assert "Batch not found: missing" in capsys.readouterr().out


def test_pricing_export_prints_payload(
    monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(cli, "export_pricing_configuration", lambda _output: "[]")

    cli.main(["pricing", "export"])

    assert capsys.readouterr().out == "[]\n"
