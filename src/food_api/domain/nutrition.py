"""Nutrition domain models."""

from dataclasses import dataclass, field

RawFoodRecord = dict[str, object]


@dataclass(frozen=True)
class ServingSize:
    """Serving amount and its unit."""

    amount: float
    unit: str


@dataclass(frozen=True)
class Macronutrients:
    """Macronutrient grams per serving."""

    protein: float
    carbohydrates: float
    fat: float
    fiber: float | None = None
    sugar: float | None = None


@dataclass(frozen=True)
class NutritionSummary:
    """Normalized nutrition data for a single FDC food."""

    fdc_id: int
    description: str
    brand_name: str | None
    serving_size: ServingSize
    calories: float
    macronutrients: Macronutrients
    data_type: str | None = None
    published_date: str | None = None


@dataclass(frozen=True)
class SearchResult:
    """A page of nutrition summaries for a search term."""

    foods: list[NutritionSummary]
    total_hits: int
    current_page: int
    total_pages: int
    search_query: str


@dataclass(frozen=True)
class SkippedRecord:
    """A record dropped from a batch extraction."""

    fdc_id: object
    reason: str


@dataclass(frozen=True)
class ExtractionBatch:
    """Successful summaries plus the records that were skipped."""

    summaries: list[NutritionSummary] = field(default_factory=list)
    skipped: list[SkippedRecord] = field(default_factory=list)
