"""Normalize raw FoodData Central records into nutrition summaries."""

import logging
import math
import re
from collections.abc import Iterable, Mapping

from food_api.domain.nutrition import (
    ExtractionBatch,
    Macronutrients,
    NutritionSummary,
    RawFoodRecord,
    SearchResult,
    ServingSize,
    SkippedRecord,
)

NUTRIENT_IDS = {
    "calories": 1008,  # Energy (kcal)
    "protein": 1003,
    "carbohydrates": 1005,  # Carbohydrate, by difference
    "fat": 1004,  # Total lipid (fat)
    "fiber": 1079,  # Fiber, total dietary
    "sugar": 2000,  # Sugars, total including NLEA
}

UNKNOWN_FOOD = "Unknown Food"
MAX_DESCRIPTION_LENGTH = 200
MAX_BRAND_LENGTH = 50
DEFAULT_SERVING = ServingSize(amount=100.0, unit="g")

_UNIT_ALIASES = {
    "g": "g",
    "gram": "g",
    "grams": "g",
    "oz": "oz",
    "ounce": "oz",
    "ounces": "oz",
    "ml": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "cup": "cup",
    "cups": "cup",
    "tbsp": "tbsp",
    "tablespoon": "tbsp",
    "tablespoons": "tbsp",
    "tsp": "tsp",
    "teaspoon": "tsp",
    "teaspoons": "tsp",
}

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED_CHARS = re.compile(r"[^A-Za-z0-9_\s\-.,&()]")
_LEADING_SEGMENT = re.compile(r"^([^,]+),")
# Longest alternatives first so "grams" is not read as "g".
_SERVING_TEXT = re.compile(
    r"(\d+(?:\.\d+)?)\s*("
    + "|".join(sorted(_UNIT_ALIASES, key=len, reverse=True))
    + r")\b",
    re.IGNORECASE,
)

_logger = logging.getLogger(__name__)


def clean_description(description: object) -> str:
    """Trim, collapse whitespace, strip odd characters and cap the length."""
    if not isinstance(description, str):
        return UNKNOWN_FOOD
    cleaned = _WHITESPACE.sub(" ", description.strip())
    cleaned = _DISALLOWED_CHARS.sub("", cleaned)[:MAX_DESCRIPTION_LENGTH]
    return cleaned or UNKNOWN_FOOD


def extract_brand_name(record: Mapping[str, object]) -> str | None:
    """Return the brand owner, or a short leading description segment."""
    brand_owner = record.get("brandOwner")
    if isinstance(brand_owner, str) and brand_owner.strip():
        return brand_owner.strip()
    description = record.get("description")
    if not isinstance(description, str):
        return None
    match = _LEADING_SEGMENT.match(description)
    if match and len(match.group(1)) < MAX_BRAND_LENGTH:
        return match.group(1).strip() or None
    return None


def normalize_unit(unit: str) -> str:
    """Map long unit names onto their short form."""
    return _UNIT_ALIASES.get(unit.lower(), unit)


def extract_serving_size(record: Mapping[str, object]) -> ServingSize:
    """Derive the serving size from portions, description text, or default."""
    portions = record.get("foodPortions")
    if isinstance(portions, list) and portions:
        portion = portions[0]
        if isinstance(portion, Mapping):
            amount = _to_number(portion.get("amount"))
            measure_unit = portion.get("measureUnit")
            if amount is not None and amount > 0 and isinstance(measure_unit, Mapping):
                unit = (
                    measure_unit.get("abbreviation") or measure_unit.get("name") or "g"
                )
                return ServingSize(amount=amount, unit=str(unit))

    description = record.get("description")
    if isinstance(description, str):
        match = _SERVING_TEXT.search(description)
        if match:
            return ServingSize(
                amount=float(match.group(1)), unit=normalize_unit(match.group(2))
            )
    return DEFAULT_SERVING


def extract_nutrient_value(record: Mapping[str, object], nutrient_id: int) -> float:
    """Return a non-negative nutrient value, or 0 when missing or malformed."""
    for nutrient in _nutrient_entries(record):
        nutrient_info = nutrient.get("nutrient")
        matched_id = nutrient.get("nutrientId")
        if matched_id is None and isinstance(nutrient_info, Mapping):
            matched_id = nutrient_info.get("id")
        if matched_id != nutrient_id:
            continue
        raw_value = nutrient.get("value")
        if raw_value is None:
            raw_value = nutrient.get("amount")
        value = _to_number(raw_value)
        return value if value is not None and value > 0 else 0.0
    return 0.0


def extract(record: RawFoodRecord) -> NutritionSummary | None:
    """Extract a nutrition summary, returning None when the record is unusable."""
    outcome = _extract_or_skip(record)
    if isinstance(outcome, SkippedRecord):
        return None
    return outcome


def extract_many(records: Iterable[RawFoodRecord]) -> ExtractionBatch:
    """Extract every record, collecting failures instead of aborting."""
    batch = ExtractionBatch()
    for record in records:
        outcome = _extract_or_skip(record)
        if isinstance(outcome, SkippedRecord):
            batch.skipped.append(outcome)
        else:
            batch.summaries.append(outcome)
    return batch


def extract_search_result(payload: Mapping[str, object], query: str) -> SearchResult:
    """Build a search result page from an FDC search payload."""
    foods = payload.get("foods")
    batch = extract_many(foods if isinstance(foods, list) else [])
    return SearchResult(
        foods=batch.summaries,
        total_hits=_to_int(payload.get("totalHits"), default=0),
        current_page=_to_int(payload.get("currentPage"), default=1),
        total_pages=_to_int(payload.get("totalPages"), default=0),
        search_query=query,
    )


def is_valid_summary(summary: NutritionSummary) -> bool:
    """Return true when the summary carries enough data to be useful."""
    macros = summary.macronutrients
    return (
        summary.fdc_id > 0
        and len(summary.description) > 0
        and summary.serving_size.amount > 0
        and len(summary.serving_size.unit) > 0
        and (
            summary.calories > 0
            or macros.protein > 0
            or macros.carbohydrates > 0
            or macros.fat > 0
        )
    )


def _extract_or_skip(record: object) -> NutritionSummary | SkippedRecord:
    fdc_id = record.get("fdcId") if isinstance(record, Mapping) else None
    try:
        return _build_summary(record)
    except Exception as exc:  # noqa: BLE001
        reason = f"{type(exc).__name__}: {exc}"
        _logger.warning(
            "Failed to extract nutrition data for food %s: %s", fdc_id, reason
        )
        return SkippedRecord(fdc_id=fdc_id, reason=reason)


def _build_summary(record: object) -> NutritionSummary:
    if not isinstance(record, Mapping):
        msg = f"food record must be an object, got {type(record).__name__}"
        raise TypeError(msg)
    raw_id = record.get("fdcId")
    if isinstance(raw_id, bool) or not isinstance(raw_id, int | str):
        msg = f"invalid fdcId {raw_id!r}"
        raise ValueError(msg)
    fdc_id = int(raw_id)
    if fdc_id <= 0:
        msg = f"invalid fdcId {raw_id!r}"
        raise ValueError(msg)
    macronutrients = Macronutrients(
        protein=round(extract_nutrient_value(record, NUTRIENT_IDS["protein"]), 2),
        carbohydrates=round(
            extract_nutrient_value(record, NUTRIENT_IDS["carbohydrates"]), 2
        ),
        fat=round(extract_nutrient_value(record, NUTRIENT_IDS["fat"]), 2),
        fiber=_optional_positive(extract_nutrient_value(record, NUTRIENT_IDS["fiber"])),
        sugar=_optional_positive(extract_nutrient_value(record, NUTRIENT_IDS["sugar"])),
    )
    data_type = record.get("dataType")
    published_date = record.get("publishedDate")
    return NutritionSummary(
        fdc_id=fdc_id,
        description=clean_description(record.get("description")),
        brand_name=extract_brand_name(record),
        serving_size=extract_serving_size(record),
        calories=extract_nutrient_value(record, NUTRIENT_IDS["calories"]),
        macronutrients=macronutrients,
        data_type=data_type if isinstance(data_type, str) else None,
        published_date=published_date if isinstance(published_date, str) else None,
    )


def _nutrient_entries(record: Mapping[str, object]) -> list[Mapping[str, object]]:
    nutrients = record.get("foodNutrients")
    if nutrients is None:
        return []
    if not isinstance(nutrients, list) or not all(
        isinstance(nutrient, Mapping) for nutrient in nutrients
    ):
        msg = "foodNutrients must be a list of objects"
        raise TypeError(msg)
    return nutrients


def _optional_positive(value: float) -> float | None:
    rounded = round(value, 2)
    return rounded if rounded > 0 else None


def _to_number(value: object) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(str(value))
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number


def _to_int(value: object, *, default: int) -> int:
    number = _to_number(value)
    return int(number) if number else default
