"""Food search and lookup endpoints."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from food_api.api.dependencies import (
    get_container,
    get_request_id,
    limit_search,
    parse_fdc_id,
)
from food_api.api.models import (
    ApiResponse,
    FoodSearchParams,
    NutritionSummaryModel,
    SearchResultModel,
)
from food_api.domain.errors import ErrorCode, ValidationError

router = APIRouter(
    prefix="/foods", tags=["foods"], dependencies=[Depends(limit_search)]
)


@router.get("")
async def search_foods(
    request: Request,
    food_type: str | None = Query(default=None, alias="type"),
    page_size: str | None = Query(default=None, alias="pageSize"),
    page_number: str | None = Query(default=None, alias="pageNumber"),
) -> dict[str, object]:
    """Search foods and return normalized nutrition summaries."""
    raw_params = {"type": food_type, "pageSize": page_size, "pageNumber": page_number}
    params = _validate_search_params(
        {key: value for key, value in raw_params.items() if value is not None}
    )
    result = await get_container(request).food_service.search(
        params.type, page_size=params.page_size, page_number=params.page_number
    )
    return ApiResponse(
        success=True,
        data=SearchResultModel.from_domain(result),
        message=f'Found {len(result.foods)} foods for "{params.type}"',
        request_id=get_request_id(request),
    ).to_content()


@router.get("/{fdc_id}/nutrition", response_model=None)
async def food_nutrition(
    fdc_id: str, request: Request
) -> dict[str, object] | JSONResponse:
    """Return the nutrition summary for a single food."""
    food_id = parse_fdc_id(fdc_id)
    summary = await get_container(request).food_service.get_nutrition(food_id)
    if summary is None:
        response = ApiResponse(
            success=False,
            error=ErrorCode.NUTRITION_DATA_MISSING,
            message=f"No nutrition data available for FDC ID {food_id}",
            request_id=get_request_id(request),
        )
        return JSONResponse(status_code=404, content=response.to_content())
    return ApiResponse(
        success=True,
        data=NutritionSummaryModel.from_domain(summary),
        message=f"Nutrition data for FDC ID {food_id}",
        request_id=get_request_id(request),
    ).to_content()


@router.get("/{fdc_id}")
async def food_details(fdc_id: str, request: Request) -> dict[str, object]:
    """Return the raw FDC record for a single food."""
    food_id = parse_fdc_id(fdc_id)
    record = await get_container(request).food_service.get_food(food_id)
    return ApiResponse(
        success=True,
        data=record,
        message=f"Food details for FDC ID {food_id}",
        request_id=get_request_id(request),
    ).to_content()


def _validate_search_params(raw: dict[str, str]) -> FoodSearchParams:
    try:
        return FoodSearchParams.model_validate(raw)
    except PydanticValidationError as exc:
        details = []
        for error in exc.errors():
            item: dict[str, object] = {
                "field": ".".join(str(part) for part in error["loc"]),
                "message": error["msg"],
            }
            if error["type"] != "missing":
                item["value"] = error.get("input")
            details.append(item)
        raise ValidationError("Validation failed", details=details) from None
