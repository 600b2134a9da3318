"""Pydantic models for request parameters and response payloads."""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from food_api.domain.nutrition import NutritionSummary, SearchResult

FOOD_TYPE_PATTERN = r"^[a-zA-Z0-9\s\-.,&()]+$"

FoodType = Annotated[
    str,
    StringConstraints(
        strip_whitespace=True, min_length=1, max_length=100, pattern=FOOD_TYPE_PATTERN
    ),
]


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FoodSearchParams(CamelModel):
    """Query parameters for a food search."""

    type: FoodType
    page_size: int = Field(default=25, ge=1, le=200)
    page_number: int = Field(default=1, ge=1)


class ServingSizeModel(CamelModel):
    amount: float
    unit: str


class MacronutrientsModel(CamelModel):
    protein: float
    carbohydrates: float
    fat: float
    fiber: float | None = None
    sugar: float | None = None


class NutritionSummaryModel(CamelModel):
    """Normalized nutrition data for one food."""

    fdc_id: int
    description: str
    brand_name: str | None = None
    serving_size: ServingSizeModel
    calories: float
    macronutrients: MacronutrientsModel
    data_type: str | None = None
    published_date: str | None = None

    @classmethod
    def from_domain(cls, summary: NutritionSummary) -> "NutritionSummaryModel":
        macros = summary.macronutrients
        return cls(
            fdc_id=summary.fdc_id,
            description=summary.description,
            brand_name=summary.brand_name,
            serving_size=ServingSizeModel(
                amount=summary.serving_size.amount, unit=summary.serving_size.unit
            ),
            calories=summary.calories,
            macronutrients=MacronutrientsModel(
                protein=macros.protein,
                carbohydrates=macros.carbohydrates,
                fat=macros.fat,
                fiber=macros.fiber,
                sugar=macros.sugar,
            ),
            data_type=summary.data_type,
            published_date=summary.published_date,
        )


class SearchResultModel(CamelModel):
    """A page of search results."""

    foods: list[NutritionSummaryModel]
    total_hits: int
    current_page: int
    total_pages: int
    search_query: str

    @classmethod
    def from_domain(cls, result: SearchResult) -> "SearchResultModel":
        return cls(
            foods=[NutritionSummaryModel.from_domain(food) for food in result.foods],
            total_hits=result.total_hits,
            current_page=result.current_page,
            total_pages=result.total_pages,
            search_query=result.search_query,
        )


class ApiResponse(CamelModel):
    """Envelope returned by every endpoint."""

    success: bool
    data: object | None = None
    error: str | None = None
    message: str | None = None
    request_id: str | None = None
    details: object | None = None

    def to_content(self) -> dict[str, object]:
        """Dump to JSON-ready content, always keeping the data key."""
        data = self.data
        if isinstance(data, BaseModel):
            data = data.model_dump(by_alias=True, exclude_none=True)
        content = self.model_dump(
            by_alias=True, exclude_none=True, exclude={"data"}, mode="json"
        )
        content["data"] = data
        return content
