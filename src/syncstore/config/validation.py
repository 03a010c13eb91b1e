"""Sampling and probing limits for the data quality validator."""

from __future__ import annotations

from dataclasses import dataclass, field

from .http_resilience import ResilienceConfig, RetryPolicy

DEFAULT_IMAGE_SAMPLE_CAP = 50
DEFAULT_IMAGE_TIMEOUT_SECONDS = 5.0
DEFAULT_IMAGES_PER_PRODUCT = 3
DEFAULT_IMAGE_CONCURRENCY = 10
DEFAULT_RAW_SAMPLE_BATCHES = 2
DEFAULT_RAW_SAMPLE_RECORDS = 10
DEFAULT_CATALOG_SAMPLE_SIZE = 20


def _image_probe_resilience() -> ResilienceConfig:
    return ResilienceConfig(
        name="image-probe",
        timeout_seconds=DEFAULT_IMAGE_TIMEOUT_SECONDS,
        retry=RetryPolicy.disabled(),
    )


@dataclass(frozen=True, slots=True)
class ValidationConfig:
    image_sample_cap: int = DEFAULT_IMAGE_SAMPLE_CAP
    images_per_product: int = DEFAULT_IMAGES_PER_PRODUCT
    image_concurrency: int = DEFAULT_IMAGE_CONCURRENCY
    raw_sample_batches: int = DEFAULT_RAW_SAMPLE_BATCHES
    raw_sample_records: int = DEFAULT_RAW_SAMPLE_RECORDS
    catalog_sample_size: int = DEFAULT_CATALOG_SAMPLE_SIZE
    platforms: tuple[str, ...] = ("shopee", "tiktokshop")
    image_resilience: ResilienceConfig = field(default_factory=_image_probe_resilience)


def get_validation_config() -> ValidationConfig:
    return ValidationConfig()
