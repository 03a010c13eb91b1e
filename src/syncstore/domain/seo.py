"""Platform-tuned product title variants.

Each sales channel gets its own title built from the original product name, its
priority keywords and a set of title patterns. Candidates are scored by how close
their word overlap with the original lands to a target similarity and by a
platform-specific quality score; the best candidate wins.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic import ValidationError as PydanticValidationError

from syncstore.domain.errors import ConfigurationError
from syncstore.domain.model import SeoTitle, utcnow

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

log = getLogger(__name__)

SIMILARITY_BAND = (70.0, 85.0)
DEFAULT_TARGET_SIMILARITY = 75.0
WEBSITE_TARGET_SIMILARITY = 85.0
VARIATION_TARGETS = (70.0, 75.0, 80.0, 85.0)

STOPWORDS = frozenset(
    {"the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"}
)

_NON_WORD = re.compile(r"[^\w\s]")
_PLACEHOLDER = re.compile(r"\{[^}]+\}")
_WHITESPACE = re.compile(r"\s+")
_DIGIT = re.compile(r"\d")

SIMILARITY_WEIGHT = 0.6
QUALITY_WEIGHT = 0.4


class SeoPlatformConfig(BaseModel):
    """Title rules of one sales channel."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    platform: str = Field(min_length=1)
    max_title_length: int = Field(ge=10, le=200, alias="maxTitleLength")
    preferred_length: int = Field(ge=10, le=200, alias="preferredLength")
    keyword_density: float = Field(ge=0, le=100, alias="keywordDensity")
    priority_keywords: tuple[str, ...] = Field(default=(), alias="priorityKeywords")
    banned_words: tuple[str, ...] = Field(default=(), alias="bannedWords")
    title_patterns: tuple[str, ...] = Field(default=(), alias="titlePatterns")
    is_active: bool = Field(default=True, alias="isActive")

    @model_validator(mode="after")
    def _lengths(self) -> SeoPlatformConfig:
        if self.preferred_length > self.max_title_length:
            raise ValueError("preferredLength must not exceed maxTitleLength")
        return self


DEFAULT_SEO_CONFIGS: tuple[SeoPlatformConfig, ...] = (
    SeoPlatformConfig(
        platform="shopee",
        max_title_length=120,
        preferred_length=80,
        keyword_density=15,
        priority_keywords=(
            "murah", "berkualitas", "original", "terbaru", "promo",
            "drone", "fpv", "racing", "carbon", "frame", "parts",
            "ringan", "kuat", "tahan lama", "premium",
        ),
        banned_words=("fake", "kw", "tiruan", "bajakan"),
        title_patterns=(
            "{product} {material} {size} - {quality} {category}",
            "{category} {product} {material} {feature} {size}",
            "{quality} {product} {material} untuk {application}",
            "{product} {size} {material} {feature} - {benefit}",
        ),
    ),
    SeoPlatformConfig(
        platform="tiktokshop",
        max_title_length=100,
        preferred_length=70,
        keyword_density=20,
        priority_keywords=(
            "viral", "trending", "hits", "recommended", "best seller",
            "drone", "fpv", "racing", "carbon fiber", "lightweight",
            "durable", "professional", "upgrade", "performance",
        ),
        banned_words=("fake", "replica", "copy"),
        title_patterns=(
            "\U0001f525 {product} {material} {size} {feature}",
            "✨ {quality} {product} {material} - {benefit}",
            "\U0001f680 {category} {product} {size} {application}",
            "⭐ {product} {material} {feature} {size}",
        ),
    ),
    SeoPlatformConfig(
        platform="tokopedia",
        max_title_length=70,
        preferred_length=60,
        keyword_density=18,
        priority_keywords=(
            "original", "berkualitas", "terpercaya", "garansi",
            "drone parts", "fpv racing", "carbon fiber", "frame",
            "ringan", "kuat", "profesional", "upgrade",
        ),
        banned_words=("kw", "tiruan", "fake"),
        title_patterns=(
            "{product} {material} {size} {quality}",
            "{category} {product} {feature} {size}",
            "{quality} {product} {material} - {application}",
            "{product} {size} {material} {benefit}",
        ),
    ),
    SeoPlatformConfig(
        platform="website",
        max_title_length=60,
        preferred_length=50,
        keyword_density=10,
        priority_keywords=(
            "fpv", "drone", "racing", "carbon fiber", "frame",
            "lightweight", "durable", "professional", "custom",
            "3d printed", "precision", "performance", "upgrade",
        ),
        title_patterns=(
            "{product} {material} {size} - {specification}",
            "{category}: {product} {material} {feature}",
            "{product} {size} {material} ({specification})",
            "Professional {product} {material} {size}",
        ),
    ),
)  # fmt: skip


@dataclass(frozen=True, slots=True)
class KeywordDatabase:
    """Domain vocabulary used to slot title keywords into pattern placeholders."""

    products: tuple[str, ...]
    materials: tuple[str, ...]
    sizes: tuple[str, ...]
    features: tuple[str, ...]
    qualities: tuple[str, ...]
    applications: tuple[str, ...]
    benefits: tuple[str, ...]

    def all_terms(self) -> list[str]:
        return [
            *self.products,
            *self.materials,
            *self.sizes,
            *self.features,
            *self.qualities,
            *self.applications,
            *self.benefits,
        ]

    def categorize(self, keyword: str) -> str:
        lowered = keyword.lower()
        for slot, terms in (
            ("product", self.products),
            ("material", self.materials),
            ("size", self.sizes),
            ("feature", self.features),
            ("quality", self.qualities),
            ("application", self.applications),
            ("benefit", self.benefits),
        ):
            if any(lowered in term.lower() for term in terms):
                return slot
        if "frame" in lowered or "motor" in lowered:
            return "product"
        if "carbon" in lowered or "aluminum" in lowered:
            return "material"
        if _DIGIT.search(keyword):
            return "size"
        return "specification"


FPV_KEYWORDS = KeywordDatabase(
    products=(
        "frame", "motor", "propeller", "esc", "flight controller",
        "camera", "vtx", "antenna", "battery", "charger",
        "receiver", "transmitter", "goggles", "mount",
    ),
    materials=(
        "carbon fiber", "carbon", "aluminum", "plastic", "tpu",
        "3d printed", "cnc", "titanium", "steel", "composite",
    ),
    sizes=(
        "5 inch", "3 inch", "7 inch", "2.5 inch", "6 inch",
        "65mm", "75mm", "85mm", "110mm", "130mm", "180mm",
        "210mm", "250mm", "300mm", "micro", "mini", "standard",
    ),
    features=(
        "lightweight", "durable", "aerodynamic", "low profile",
        "high performance", "racing", "freestyle", "cinematic",
        "long range", "precision", "responsive", "stable",
    ),
    qualities=(
        "premium", "professional", "high quality", "original",
        "authentic", "certified", "tested", "proven", "reliable",
    ),
    applications=(
        "racing", "freestyle", "cinematic", "long range",
        "indoor", "outdoor", "competition", "hobby", "professional",
    ),
    benefits=(
        "faster response", "better control", "longer flight time",
        "improved stability", "enhanced performance", "easy installation",
        "perfect fit", "crash resistant", "weather resistant",
    ),
)  # fmt: skip


@dataclass(frozen=True, slots=True)
class TitleGenerationResult:
    platform: str
    original_title: str
    generated_title: str
    similarity: float
    keywords_used: tuple[str, ...]
    optimized_for: tuple[str, ...]
    quality_score: float
    generated_at: datetime = field(default_factory=utcnow)

    @property
    def length(self) -> int:
        return len(self.generated_title)

    @property
    def in_similarity_band(self) -> bool:
        low, high = SIMILARITY_BAND
        return low <= self.similarity <= high

    def to_seo_title(self) -> SeoTitle:
        return SeoTitle(
            title=self.generated_title,
            similarity=self.similarity,
            quality_score=self.quality_score,
            optimized_for=self.optimized_for,
            generated_at=self.generated_at,
        )


@dataclass(frozen=True, slots=True)
class BulkTitleGenerationResult:
    original_title: str
    platform_titles: tuple[TitleGenerationResult, ...]
    generated_at: datetime = field(default_factory=utcnow)

    @property
    def total_platforms(self) -> int:
        return len(self.platform_titles)

    @property
    def average_similarity(self) -> float:
        if not self.platform_titles:
            return 0.0
        return sum(result.similarity for result in self.platform_titles) / len(
            self.platform_titles
        )


@dataclass(frozen=True, slots=True)
class TitleEffectiveness:
    length: int
    word_count: int
    keyword_density: float
    readability_score: float
    suggestions: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class SeoConfigurationCheck:
    is_valid: bool
    errors: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


def title_similarity(first: str, second: str) -> float:
    """Jaccard overlap of the two titles' lowercased word sets, as a percentage."""

    words_first = set(first.lower().split())
    words_second = set(second.lower().split())
    union = words_first | words_second
    if not union:
        return 0.0
    return len(words_first & words_second) / len(union) * 100


def extract_keywords(text: str) -> list[str]:
    """Search keywords of a product name: lowercase words minus stopwords, in order."""

    words = _NON_WORD.sub("", text.lower()).split()
    keywords = [word for word in words if len(word) > 2 and word not in STOPWORDS]
    return list(dict.fromkeys(keywords))


def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _contains(haystack: str, needle: str) -> bool:
    return needle.lower() in haystack.lower()


class SeoTitleGenerator:
    def __init__(
        self,
        configs: Iterable[SeoPlatformConfig | dict[str, Any]] | None = None,
        keyword_db: KeywordDatabase = FPV_KEYWORDS,
    ) -> None:
        self._configs: dict[str, SeoPlatformConfig] = {}
        self._keywords = keyword_db
        for config in DEFAULT_SEO_CONFIGS if configs is None else configs:
            self.add_platform_config(config)

    def add_platform_config(
        self,
        config: SeoPlatformConfig | dict[str, Any],
    ) -> SeoPlatformConfig:
        try:
            validated = SeoPlatformConfig.model_validate(config)
        except PydanticValidationError as exc:
            raise ConfigurationError(f"Invalid SEO config: {exc}") from exc
        self._configs[validated.platform] = validated
        return validated

    def get_platform_config(self, platform: str) -> SeoPlatformConfig | None:
        return self._configs.get(platform)

    def active_platforms(self) -> list[str]:
        return [config.platform for config in self._configs.values() if config.is_active]

    def title_keywords(self, title: str) -> list[str]:
        """Vocabulary phrases found in ``title`` followed by its uncovered plain words."""

        lowered = title.lower()
        keywords = [term for term in self._keywords.all_terms() if term.lower() in lowered]
        for word in _NON_WORD.sub(" ", lowered).split():
            if len(word) > 2 and not any(word in keyword.lower() for keyword in keywords):
                keywords.append(word)
        return list(dict.fromkeys(keywords))

    def platform_keywords(self, base_keywords: list[str], config: SeoPlatformConfig) -> list[str]:
        keywords = list(base_keywords)
        missing = [
            keyword
            for keyword in config.priority_keywords
            if not any(_contains(existing, keyword) for existing in keywords)
        ]
        keywords.extend(missing[: min(3, int(config.keyword_density // 10))])
        return [
            keyword
            for keyword in keywords
            if not any(_contains(keyword, banned) for banned in config.banned_words)
        ]

    def apply_pattern(self, pattern: str, keywords: list[str], original_title: str) -> str:
        slots: dict[str, list[str]] = {}
        for keyword in keywords:
            slots.setdefault(self._keywords.categorize(keyword), []).append(keyword)
        if "product" not in slots and "frame" in original_title.lower():
            slots["product"] = ["Frame"]
        slots.setdefault("category", ["Drone Parts"])

        result = pattern
        for slot, words in slots.items():
            result = result.replace(f"{{{slot}}}", words[0], 1)
        result = _collapse(_PLACEHOLDER.sub("", result))
        return result or original_title

    def quality_score(self, title: str, keywords: list[str], config: SeoPlatformConfig) -> float:
        score = 100.0
        score -= min(20.0, abs(len(title) - config.preferred_length) * 0.5)

        used = sum(1 for keyword in keywords if _contains(title, keyword))
        density = used / len(title.split(" ")) * 100
        score -= min(15.0, abs(density - config.keyword_density) * 0.3)

        priority_used = sum(1 for keyword in config.priority_keywords if _contains(title, keyword))
        score += min(10, priority_used * 2)
        score -= 20 * sum(1 for banned in config.banned_words if _contains(title, banned))

        if len(_NON_WORD.findall(title)) <= 3:
            score += 5
        return max(0.0, min(100.0, score))

    def generate_platform_title(
        self,
        original_title: str,
        platform: str,
        target_similarity: float | None = None,
    ) -> TitleGenerationResult:
        config = self._configs.get(platform)
        if config is None:
            raise ConfigurationError(f"SEO configuration not found for: {platform}")
        if not config.is_active:
            raise ConfigurationError(f"Platform {platform} is not active")

        if target_similarity is None:
            target_similarity = (
                WEBSITE_TARGET_SIMILARITY if platform == "website" else DEFAULT_TARGET_SIMILARITY
            )
        keywords = self.platform_keywords(self.title_keywords(original_title), config)

        best_title = original_title
        best_similarity = 100.0
        best_quality = 0.0
        best_total = -1.0
        for candidate in self._candidates(original_title, keywords, config):
            similarity = title_similarity(original_title, candidate)
            quality = self.quality_score(candidate, keywords, config)
            total = (100 - abs(similarity - target_similarity)) * SIMILARITY_WEIGHT + (
                quality * QUALITY_WEIGHT
            )
            if total > best_total:
                best_title, best_similarity, best_quality, best_total = (
                    candidate,
                    similarity,
                    quality,
                    total,
                )

        return TitleGenerationResult(
            platform=platform,
            original_title=original_title,
            generated_title=best_title,
            similarity=best_similarity,
            keywords_used=tuple(k for k in keywords if _contains(best_title, k)),
            optimized_for=config.priority_keywords[:5],
            quality_score=best_quality,
        )

    def generate_all_platform_titles(
        self,
        original_title: str,
        target_similarity: float | None = None,
    ) -> BulkTitleGenerationResult:
        results: list[TitleGenerationResult] = []
        for platform in self.active_platforms():
            try:
                results.append(
                    self.generate_platform_title(original_title, platform, target_similarity)
                )
            except ConfigurationError as exc:
                log.warning("Failed to generate title for platform %s: %s", platform, exc)
        return BulkTitleGenerationResult(
            original_title=original_title,
            platform_titles=tuple(results),
        )

    def generate_title_variations(
        self,
        original_title: str,
        platform: str,
        count: int = 3,
    ) -> list[str]:
        variations = [
            self.generate_platform_title(original_title, platform, target).generated_title
            for target in VARIATION_TARGETS[:count]
        ]
        return list(dict.fromkeys(variations))

    def validate_configuration(self) -> SeoConfigurationCheck:
        errors: list[str] = []
        warnings: list[str] = []
        if not self._configs:
            errors.append("No platform configurations found")
        if not self.active_platforms():
            warnings.append("No active platforms configured")
        for config in self._configs.values():
            if not config.title_patterns:
                warnings.append(f"No title patterns configured for {config.platform}")
            if not config.priority_keywords:
                warnings.append(f"No priority keywords configured for {config.platform}")
        return SeoConfigurationCheck(
            is_valid=not errors,
            errors=tuple(errors),
            warnings=tuple(warnings),
        )

    def _candidates(
        self,
        original_title: str,
        keywords: list[str],
        config: SeoPlatformConfig,
    ) -> list[str]:
        # Pattern titles diverge strongly from the original; suffixing it with
        # priority keywords gives the close variants.
        candidates = [
            self.apply_pattern(pattern, keywords, original_title)
            for pattern in config.title_patterns
        ]
        extras = [
            keyword
            for keyword in config.priority_keywords
            if not _contains(original_title, keyword)
            and not any(_contains(keyword, banned) for banned in config.banned_words)
        ]
        candidates.extend(
            _collapse(f"{original_title} {' '.join(extras[:count])}")
            for count in range(1, min(3, len(extras)) + 1)
        )
        return [_truncate(candidate, config.max_title_length) for candidate in candidates]


def _truncate(title: str, max_length: int) -> str:
    if len(title) <= max_length:
        return title
    return title[: max_length - 3] + "..."


def analyze_title_effectiveness(title: str) -> TitleEffectiveness:
    words = title.split()
    word_count = max(len(words), 1)
    special_chars = len(_NON_WORD.findall(title))
    lowered = title.lower()
    matches = sum(
        1
        for keyword in ("drone", "fpv", "racing", "frame", "carbon", "motor", "propeller")
        if keyword in lowered
    )
    keyword_density = matches / word_count * 100
    average_word_length = len(re.sub(r"\W", "", title)) / word_count
    readability = max(0.0, 100 - average_word_length * 5 - special_chars * 2)

    suggestions: list[str] = []
    if len(title) > 100:
        suggestions.append("Consider shortening the title for better readability")
    if keyword_density < 10:
        suggestions.append("Add more relevant keywords to improve SEO")
    if special_chars > 5:
        suggestions.append("Reduce special characters for better readability")
    if len(words) < 3:
        suggestions.append("Add more descriptive words to improve clarity")

    return TitleEffectiveness(
        length=len(title),
        word_count=len(words),
        keyword_density=keyword_density,
        readability_score=readability,
        suggestions=tuple(suggestions),
    )
