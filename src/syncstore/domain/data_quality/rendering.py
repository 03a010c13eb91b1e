"""Markdown rendering of a :class:`ValidationReport`."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .report import (
        DataIntegrityValidation,
        FieldValidation,
        ImageValidation,
        MasterCatalogValidation,
        RawDataValidation,
        Recommendation,
        ValidationReport,
    )

NOT_AVAILABLE = "_Stage degraded; no data._"


def render_markdown(report: ValidationReport) -> str:
    overview = report.overview
    lines = [
        "# Data Quality Validation Report",
        "",
        f"**Status:** {report.status}  ",
        f"**Overall score:** {report.overall_score:g}/100",
        "",
        "## Overview",
        "",
        f"- Products validated: {overview.total_products_validated}",
        f"- Started: {overview.started_at.isoformat()}",
        f"- Finished: {overview.ended_at.isoformat()}",
        f"- Duration: {overview.duration_ms} ms",
        f"- Platforms: {', '.join(overview.platforms_covered) or '-'}",
        f"- Stages run: {', '.join(overview.stages_run)}",
        f"- Degraded stages: {', '.join(overview.degraded_stages) or 'none'}",
    ]
    for finding in report.findings:
        lines.append(f"  - {finding.stage}: {finding.message}")

    lines += ["", "## Master Catalog", "", *_master_catalog(report.master_catalog)]
    lines += ["", "## Raw Data", "", *_raw_data(report.raw_data)]
    lines += ["", "## Images", "", *_images(report.images)]
    lines += ["", "## Fields", "", *_fields(report.fields)]
    lines += ["", "## Data Integrity", "", *_integrity(report.integrity)]
    lines += ["", "## Recommendations", "", *_recommendations(report.recommendations)]
    return "\n".join(lines) + "\n"


def _master_catalog(section: MasterCatalogValidation | None) -> list[str]:
    if section is None:
        return [NOT_AVAILABLE]
    lines = [
        f"- Total products: {section.total_master_products}",
        f"- Valid / invalid: {section.valid_products} / {section.invalid_products}",
        f"- With errors: {section.products_with_errors} ({section.error_count} errors)",
        f"- With warnings: {section.products_with_warnings} ({section.warning_count} warnings)",
        f"- Average quality score: {section.average_data_quality_score:g}",
    ]
    if section.status_breakdown:
        breakdown = ", ".join(
            f"{status}: {count}" for status, count in sorted(section.status_breakdown.items())
        )
        lines.append(f"- Status breakdown: {breakdown}")
    return lines


def _raw_data(section: RawDataValidation | None) -> list[str]:
    if section is None:
        return [NOT_AVAILABLE]
    lines = [
        "| Platform | Sampled | Valid | Invalid | Rate |",
        "|---|---|---|---|---|",
    ]
    lines.extend(
        f"| {p.platform} | {p.total_products} | {p.valid_products} | {p.invalid_products} "
        f"| {p.validation_rate:g}% |"
        for p in section.platform_breakdown.values()
    )
    for platform in section.platform_breakdown.values():
        for error, count in platform.common_errors:
            lines.append(f"- {platform.platform}: {error} ({count})")
    return lines


def _images(section: ImageValidation | None) -> list[str]:
    if section is None:
        return [NOT_AVAILABLE]
    lines = [
        f"- Checked: {section.total_images_checked}",
        f"- Accessible: {section.valid_images} ({section.accessibility_rate:g}%)",
    ]
    lines.extend(f"- {issue}: {count}" for issue, count in section.common_issues)
    return lines


def _fields(section: FieldValidation | None) -> list[str]:
    if section is None:
        return [NOT_AVAILABLE]
    lines = [
        f"Required field completeness: {section.completeness_rate:g}%",
        "",
        "| Field | Present | Missing | Valid | Completeness |",
        "|---|---|---|---|---|",
    ]
    lines.extend(
        f"| {f.field_name} | {f.present_count} | {f.missing_count} | {f.valid_count} "
        f"| {f.completeness_percentage:g}% |"
        for f in section.completeness.values()
    )
    lines.extend(
        f"- {check.field_name} is {check.expected_type}: {check.invalid_count} invalid"
        for check in section.data_types
        if check.invalid_count
    )
    lines.extend(
        f"- {check.field_name} out of range: {check.out_of_range_count}"
        for check in section.value_ranges
        if check.out_of_range_count
    )
    return lines


def _integrity(section: DataIntegrityValidation | None) -> list[str]:
    if section is None:
        return [NOT_AVAILABLE]
    return [
        f"- Duplicate products: {section.duplicate_products}",
        f"- Orphaned mappings: {section.orphaned_mappings}",
        f"- Missing mappings: {section.missing_mappings}",
        f"- Inconsistent pricing: {section.inconsistent_pricing}",
    ]


def _recommendations(recommendations: tuple[Recommendation, ...]) -> list[str]:
    if not recommendations:
        return ["No recommendations."]
    lines: list[str] = []
    for item in recommendations:
        affected = f" ({item.affected_count} affected)" if item.affected_count else ""
        lines += [
            f"### [{item.priority.upper()}] {item.title}{affected}",
            "",
            f"- Category: {item.category}",
            f"- Issue: {item.description}",
            f"- Action: {item.action_required}",
            f"- Expected outcome: {item.expected_outcome}",
            "",
        ]
    return lines
