"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from food_api.adapters.fdc_client import FdcClient
from food_api.config import Settings
from food_api.containers import AppContainer, build_rate_limiters
from food_api.domain.errors import FoodNotFoundError
from food_api.services.cache import InMemoryCache
from food_api.services.foods import FoodService


def make_food(  # noqa: PLR0913
    fdc_id: int = 171688,
    description: str = "Apples, raw, with skin",
    *,
    calories: float | None = 52,
    protein: float = 0.26,
    carbs: float = 13.81,
    fat: float = 0.17,
    fiber: float | None = 2.4,
    sugar: float | None = 10.39,
    brand_owner: str | None = None,
    portions: list[dict[str, object]] | None = None,
) -> dict[str, object]:
    nutrients: list[dict[str, object]] = [
        {"nutrientId": 1003, "nutrientName": "Protein", "value": protein},
        {"nutrientId": 1005, "nutrientName": "Carbohydrate", "value": carbs},
        {"nutrientId": 1004, "nutrientName": "Total lipid (fat)", "value": fat},
    ]
    if calories is not None:
        nutrients.append({"nutrientId": 1008, "value": calories})
    if fiber is not None:
        nutrients.append({"nutrientId": 1079, "value": fiber})
    if sugar is not None:
        nutrients.append({"nutrientId": 2000, "value": sugar})
    food: dict[str, object] = {
        "fdcId": fdc_id,
        "description": description,
        "dataType": "SR Legacy",
        "publishedDate": "2019-04-01",
        "foodNutrients": nutrients,
    }
    if brand_owner is not None:
        food["brandOwner"] = brand_owner
    if portions is not None:
        food["foodPortions"] = portions
    return food


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client with in-memory responses that counts calls."""

    foods: dict[int, dict[str, object]] = field(
        default_factory=lambda: {171688: make_food()}
    )
    search_payload: dict[str, object] = field(
        default_factory=lambda: {
            "foods": [make_food(), make_food(1102644, "Banana, raw", calories=89)],
            "totalHits": 2,
            "currentPage": 1,
            "totalPages": 1,
        }
    )
    search_calls: list[tuple[str, int, int]] = field(default_factory=list)
    food_calls: list[int] = field(default_factory=list)
    error: Exception | None = None

    async def search_foods(
        self, query: str, page_size: int = 25, page_number: int = 1
    ) -> dict[str, object]:
        self.search_calls.append((query, page_size, page_number))
        if self.error is not None:
            raise self.error
        return self.search_payload

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        self.food_calls.append(fdc_id)
        if self.error is not None:
            raise self.error
        if fdc_id not in self.foods:
            raise FoodNotFoundError(fdc_id=fdc_id)
        return self.foods[fdc_id]


@pytest.fixture
def settings() -> Settings:
    return Settings(fdc_api_key="fdc-key", environment="test")


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient()


@pytest.fixture
def container(settings: Settings, fdc_client: FakeFdcClient) -> AppContainer:
    cache = InMemoryCache(max_entries=settings.cache_max_entries)
    food_service = FoodService(fdc_client=fdc_client, cache=cache)

    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        cache=cache,
        food_service=food_service,
        rate_limiters=build_rate_limiters(settings),
        close_resources=close_resources,
    )
