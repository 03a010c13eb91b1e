"""Platform fee schedules and the forward/inverse price calculations built on them.

All money arithmetic is done in :class:`~decimal.Decimal` and rounded half-up to a
whole currency unit, so ``x.5`` always rounds away from zero.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from logging import getLogger
from typing import TYPE_CHECKING, Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from syncstore.domain.errors import ConfigurationError, ValidationError
from syncstore.domain.model import utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime
    from pathlib import Path

log = getLogger(__name__)

HIGH_PLATFORM_FEE = 50
HIGH_PAYMENT_FEE = 10
HIGH_MINIMUM_PRICE = 100_000

Percentage = Annotated[float, Field(ge=0, le=100)]


class PlatformFeeConfig(BaseModel):
    """Fee schedule of one sales channel."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    platform: str = Field(min_length=1)
    fee_percentage: Percentage = Field(alias="feePercentage")
    payment_fee_percentage: Percentage = Field(alias="paymentFeePercentage")
    fixed_fee: float = Field(default=0, ge=0, alias="fixedFee")
    minimum_price: float = Field(default=0, ge=0, alias="minimumPrice")
    is_active: bool = Field(default=True, alias="isActive")
    description: str | None = None


FEE_CONFIG_LIST_ADAPTER: TypeAdapter[list[PlatformFeeConfig]] = TypeAdapter(
    list[PlatformFeeConfig]
)

DEFAULT_PLATFORM_FEE_CONFIGS: tuple[PlatformFeeConfig, ...] = (
    PlatformFeeConfig(
        platform="shopee",
        fee_percentage=15,
        payment_fee_percentage=2.9,
        minimum_price=1000,
        description="Shopee marketplace fees including platform and payment processing",
    ),
    PlatformFeeConfig(
        platform="tiktokshop",
        fee_percentage=20,
        payment_fee_percentage=2.5,
        minimum_price=1000,
        description="TikTok Shop marketplace fees including platform and payment processing",
    ),
    PlatformFeeConfig(
        platform="tokopedia",
        fee_percentage=20,
        payment_fee_percentage=2.5,
        minimum_price=1000,
        description="Tokopedia fees (auto-synced from TikTok Shop)",
    ),
    PlatformFeeConfig(
        platform="website",
        fee_percentage=0,
        payment_fee_percentage=2.9,
        minimum_price=0,
        description="Own website - no platform fees, payment gateway only",
    ),
)


@dataclass(frozen=True, slots=True)
class PricingResult:
    platform: str
    base_price: float
    platform_fee: int
    payment_fee: int
    fixed_fee: float
    total_fees: int
    final_price: int
    profit_margin: float | None
    calculated_at: datetime


@dataclass(frozen=True, slots=True)
class BulkPricingResult:
    base_price: float
    platform_results: tuple[PricingResult, ...]
    calculated_at: datetime

    @property
    def total_platforms(self) -> int:
        return len(self.platform_results)

    def for_platform(self, platform: str) -> PricingResult | None:
        return next((r for r in self.platform_results if r.platform == platform), None)


@dataclass(frozen=True, slots=True)
class PlatformComparison:
    platform: str
    final_price: int
    total_fees: int
    profit_margin: float | None
    competitive_advantage: float


@dataclass(frozen=True, slots=True)
class PricingComparison:
    base_price: float
    cost_price: float | None
    platforms: tuple[PlatformComparison, ...]
    lowest_price: tuple[str, int]
    highest_price: tuple[str, int]
    average_price: int


@dataclass(frozen=True, slots=True)
class ConfigurationCheck:
    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


def round_half_up(value: Decimal | float) -> int:
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    return int(amount.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _dec(value: float) -> Decimal:
    return Decimal(str(value))


class PricingEngine:
    """Per-platform fee calculator.

    Configs start from :data:`DEFAULT_PLATFORM_FEE_CONFIGS` unless given explicitly and
    change only through :meth:`add_platform_config`, :meth:`update_platform_fee` or
    :meth:`import_configuration`.
    """

    def __init__(
        self,
        configs: Iterable[PlatformFeeConfig | dict[str, Any]] | None = None,
    ) -> None:
        self._configs: dict[str, PlatformFeeConfig] = {}
        for config in DEFAULT_PLATFORM_FEE_CONFIGS if configs is None else configs:
            self.add_platform_config(config)

    @classmethod
    def from_file(cls, path: Path) -> PricingEngine:
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise ConfigurationError(f"Cannot read pricing config {path}: {exc}") from exc
        return cls(load_fee_configs(raw))

    def add_platform_config(
        self,
        config: PlatformFeeConfig | dict[str, Any],
    ) -> PlatformFeeConfig:
        try:
            validated = PlatformFeeConfig.model_validate(config)
        except PydanticValidationError as exc:
            raise ConfigurationError(f"Invalid platform fee config: {exc}") from exc
        self._configs[validated.platform] = validated
        return validated

    def get_platform_config(self, platform: str) -> PlatformFeeConfig | None:
        return self._configs.get(platform)

    def all_platform_configs(self) -> list[PlatformFeeConfig]:
        return list(self._configs.values())

    def active_platforms(self) -> list[str]:
        return [config.platform for config in self._configs.values() if config.is_active]

    def update_platform_fee(self, platform: str, fee_percentage: float) -> bool:
        config = self._configs.get(platform)
        if config is None:
            return False
        clamped = max(0.0, min(100.0, fee_percentage))
        self._configs[platform] = config.model_copy(update={"fee_percentage": clamped})
        return True

    def calculate_platform_price(
        self,
        base_price: float,
        platform: str,
        cost_price: float | None = None,
    ) -> PricingResult:
        if base_price <= 0:
            raise ValidationError("Base price must be greater than zero")
        config = self._active_config(platform)

        base = _dec(base_price)
        platform_fee = base * _dec(config.fee_percentage) / 100
        payment_fee = (base + platform_fee) * _dec(config.payment_fee_percentage) / 100
        fixed_fee = _dec(config.fixed_fee)
        total_fees = platform_fee + payment_fee + fixed_fee

        final_price = max(round_half_up(base + total_fees), round_half_up(config.minimum_price))

        profit_margin: float | None = None
        if cost_price is not None and cost_price > 0:
            profit_margin = (final_price - cost_price) / final_price * 100

        return PricingResult(
            platform=platform,
            base_price=base_price,
            platform_fee=round_half_up(platform_fee),
            payment_fee=round_half_up(payment_fee),
            fixed_fee=config.fixed_fee,
            total_fees=round_half_up(total_fees),
            final_price=final_price,
            profit_margin=profit_margin,
            calculated_at=utcnow(),
        )

    def calculate_all_platform_prices(
        self,
        base_price: float,
        cost_price: float | None = None,
    ) -> BulkPricingResult:
        if base_price <= 0:
            raise ValidationError("Base price must be greater than zero")
        results: list[PricingResult] = []
        for platform in self.active_platforms():
            try:
                results.append(self.calculate_platform_price(base_price, platform, cost_price))
            except (ConfigurationError, ValidationError) as exc:
                log.warning("Failed to calculate price for platform %s: %s", platform, exc)
        return BulkPricingResult(
            base_price=base_price,
            platform_results=tuple(results),
            calculated_at=utcnow(),
        )

    def calculate_optimal_base_price(
        self,
        cost_price: float,
        target_margin: float,
        platform: str,
    ) -> int:
        """Smallest base price whose final price yields ``target_margin`` percent profit.

        Targets that need a final price below the platform minimum are rejected: the
        minimum would lift the price and the margin with it.
        """

        if cost_price <= 0:
            raise ValidationError("Cost price must be greater than zero")
        if target_margin < 0 or target_margin >= 100:
            raise ValidationError("Target profit margin must be between 0 and 100")
        config = self._known_config(platform)

        required_final = _dec(cost_price) / (1 - _dec(target_margin) / 100)
        if required_final < _dec(config.minimum_price):
            floor_margin = (config.minimum_price - cost_price) / config.minimum_price * 100
            raise ValidationError(
                f"Target margin {target_margin:g}% is unreachable on {platform}: the minimum "
                f"price of {config.minimum_price:g} already yields {floor_margin:.1f}%"
            )
        platform_multiplier = 1 + _dec(config.fee_percentage) / 100
        payment_multiplier = 1 + _dec(config.payment_fee_percentage) / 100
        base_price = (required_final - _dec(config.fixed_fee)) / (
            platform_multiplier * payment_multiplier
        )
        return max(0, round_half_up(base_price))

    def compare_platform_pricing(
        self,
        base_price: float,
        cost_price: float | None = None,
    ) -> PricingComparison:
        bulk = self.calculate_all_platform_prices(base_price, cost_price)
        if not bulk.platform_results:
            raise ConfigurationError("No active platforms found for comparison")

        lowest = min(bulk.platform_results, key=lambda result: result.final_price)
        highest = max(bulk.platform_results, key=lambda result: result.final_price)
        total = sum(result.final_price for result in bulk.platform_results)

        platforms = tuple(
            PlatformComparison(
                platform=result.platform,
                final_price=result.final_price,
                total_fees=result.total_fees,
                profit_margin=result.profit_margin,
                competitive_advantage=(
                    (highest.final_price - result.final_price) / highest.final_price * 100
                    if highest.final_price > 0
                    else 0.0
                ),
            )
            for result in bulk.platform_results
        )
        return PricingComparison(
            base_price=base_price,
            cost_price=cost_price,
            platforms=platforms,
            lowest_price=(lowest.platform, lowest.final_price),
            highest_price=(highest.platform, highest.final_price),
            average_price=round_half_up(Decimal(total) / len(bulk.platform_results)),
        )

    def validate_configuration(self) -> ConfigurationCheck:
        errors: list[str] = []
        warnings: list[str] = []
        if not self._configs:
            errors.append("No platform configurations found")
        if not self.active_platforms():
            warnings.append("No active platforms configured")
        for config in self._configs.values():
            if config.fee_percentage > HIGH_PLATFORM_FEE:
                warnings.append(
                    f"High platform fee for {config.platform}: {config.fee_percentage:g}%"
                )
            if config.payment_fee_percentage > HIGH_PAYMENT_FEE:
                warnings.append(
                    f"High payment fee for {config.platform}: {config.payment_fee_percentage:g}%"
                )
            if config.minimum_price > HIGH_MINIMUM_PRICE:
                warnings.append(
                    f"High minimum price for {config.platform}: {config.minimum_price:g} IDR"
                )
        return ConfigurationCheck(
            is_valid=not errors,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )

    def export_configuration(self) -> list[PlatformFeeConfig]:
        return list(self._configs.values())

    def import_configuration(self, configs: Iterable[PlatformFeeConfig | dict[str, Any]]) -> None:
        """Replace every config; on a malformed entry the previous set is kept."""

        previous = self._configs
        self._configs = {}
        try:
            for config in configs:
                self.add_platform_config(config)
        except ConfigurationError:
            self._configs = previous
            raise

    def _known_config(self, platform: str) -> PlatformFeeConfig:
        config = self._configs.get(platform)
        if config is None:
            raise ConfigurationError(f"Platform configuration not found for: {platform}")
        return config

    def _active_config(self, platform: str) -> PlatformFeeConfig:
        config = self._known_config(platform)
        if not config.is_active:
            raise ConfigurationError(f"Platform {platform} is not active")
        return config


def dump_fee_configs(configs: Iterable[PlatformFeeConfig]) -> str:
    return FEE_CONFIG_LIST_ADAPTER.dump_json(list(configs), by_alias=True, indent=2).decode()


def load_fee_configs(raw: str | bytes) -> list[PlatformFeeConfig]:
    try:
        return FEE_CONFIG_LIST_ADAPTER.validate_json(raw)
    except PydanticValidationError as exc:
        raise ConfigurationError(f"Malformed pricing configuration: {exc}") from exc


def format_idr(amount: float) -> str:
    """Format ``amount`` the way Indonesian shops print prices, e.g. ``Rp 150.000``."""

    whole = round_half_up(amount)
    sign = "-" if whole < 0 else ""
    grouped = f"{abs(whole):,}".replace(",", ".")
    return f"{sign}Rp {grouped}"


def parse_idr(text: str) -> int:
    digits = "".join(char for char in text if char.isdigit())
    return int(digits) if digits else 0


def price_difference(price: float, reference: float) -> float:
    if reference == 0:
        return 0.0
    return (price - reference) / reference * 100
