"""
Food Catalog Routes

Reads are public. Writes require the admin role and go through the catalog
sanitizer and the fail-fast CatalogItemValidator.
"""

import logging
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from food_ordering.api.dependencies import json_object_body, require_admin
from food_ordering.core.errors import NotFoundError, ValidationError
from food_ordering.database import get_db
from food_ordering.models import Food
from food_ordering.schemas import FoodMessageResponse, FoodResponse, FoodStatistics, MessageResponse
from food_ordering.security.identity import Identity
from food_ordering.security.sanitizer import catalog_sanitizer
from food_ordering.validation import CatalogItemValidator
from food_ordering.validation.catalog import merge_update

logger = logging.getLogger(__name__)
router = APIRouter()

catalog_validator = CatalogItemValidator()

MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 100
MAX_SEARCH_RESULTS = 50


def escape_like(term: str) -> str:
    """Escape LIKE wildcards so the term only ever matches literally."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


async def load_food(db: AsyncSession, food_id: int) -> Food:
    food = await db.get(Food, food_id)
    if food is None:
        raise NotFoundError("Food item not found")
    return food


def apply_draft(food: Food, draft: dict[str, Any]) -> None:
    food.name = draft["name"]
    food.description = draft["description"]
    food.price = float(draft["price"])
    food.category = draft["category"]
    food.preparation_time = int(draft["preparationTime"])
    if draft.get("image"):
        food.image = draft["image"]
    if isinstance(draft.get("available"), bool):
        food.available = draft["available"]


# =============================================================================
# PUBLIC READS
# =============================================================================

@router.get("", response_model=List[FoodResponse], summary="List food items")
async def list_foods(
    category: Optional[str] = Query(None, max_length=50),
    available: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> List[FoodResponse]:
    """Newest first, optionally filtered by category and availability."""
    query = select(Food)
    if category and category.strip():
        query = query.where(Food.category == category.strip())
    if available is not None:
        query = query.where(Food.available == available)

    result = await db.execute(query.order_by(Food.created_at.desc(), Food.id.desc()))
    return [FoodResponse.model_validate(food) for food in result.scalars().all()]


@router.get("/search", response_model=List[FoodResponse], summary="Search food items")
async def search_foods(
    q: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
) -> List[FoodResponse]:
    """Case-insensitive substring match on name, description and category."""
    if not q or not q.strip():
        raise ValidationError("Search query is required")
    if not MIN_QUERY_LENGTH <= len(q) <= MAX_QUERY_LENGTH:
        raise ValidationError(
            f"Search query must be between {MIN_QUERY_LENGTH} and {MAX_QUERY_LENGTH} characters"
        )

    pattern = f"%{escape_like(q)}%"
    query = (
        select(Food)
        .where(or_(
            Food.name.ilike(pattern, escape="\\"),
            Food.description.ilike(pattern, escape="\\"),
            Food.category.ilike(pattern, escape="\\"),
        ))
        .order_by(Food.name)
        .limit(MAX_SEARCH_RESULTS)
    )
    result = await db.execute(query)
    return [FoodResponse.model_validate(food) for food in result.scalars().all()]


@router.get("/categories/list", summary="Distinct categories in use")
async def list_categories(db: AsyncSession = Depends(get_db)) -> List[str]:
    result = await db.execute(select(Food.category).distinct().order_by(Food.category))
    return list(result.scalars().all())


@router.get("/stats/summary", response_model=FoodStatistics, summary="Catalog statistics")
async def food_statistics(db: AsyncSession = Depends(get_db)) -> FoodStatistics:
    total = (await db.execute(select(func.count(Food.id)))).scalar() or 0
    available = (
        await db.execute(select(func.count(Food.id)).where(Food.available.is_(True)))
    ).scalar() or 0
    average = (await db.execute(select(func.avg(Food.price)))).scalar() or 0.0

    rows = await db.execute(select(Food.category, func.count(Food.id)).group_by(Food.category))

    return FoodStatistics(
        total_items=total,
        available_items=available,
        average_price=round(float(average), 2),
        category_counts={category: count for category, count in rows.all()},
    )


@router.get("/{food_id}", response_model=FoodResponse, summary="Get a food item")
async def get_food(food_id: int, db: AsyncSession = Depends(get_db)) -> FoodResponse:
    return FoodResponse.model_validate(await load_food(db, food_id))


# =============================================================================
# ADMIN WRITES
# =============================================================================

@router.post("", response_model=FoodMessageResponse, status_code=201, summary="Create a food item")
async def create_food(
    admin: Identity = Depends(require_admin),
    payload: dict[str, Any] = Depends(json_object_body),
    db: AsyncSession = Depends(get_db),
) -> FoodMessageResponse:
    draft = catalog_sanitizer.sanitize(payload)
    catalog_validator.ensure_valid(draft)

    food = Food()
    apply_draft(food, draft)
    if food.available is None:
        food.available = True
    db.add(food)
    await db.commit()

    logger.info(f"Food #{food.id} '{food.name}' created by user {admin.user_id}")

    return FoodMessageResponse(
        message="Food item created successfully",
        food=FoodResponse.model_validate(food),
    )


@router.put("/{food_id}", response_model=FoodMessageResponse, summary="Update a food item")
async def update_food(
    food_id: int,
    admin: Identity = Depends(require_admin),
    payload: dict[str, Any] = Depends(json_object_body),
    db: AsyncSession = Depends(get_db),
) -> FoodMessageResponse:
    """Partial update; the merged item must still satisfy every catalog rule."""
    food = await load_food(db, food_id)
    changes = catalog_sanitizer.sanitize(payload)

    current = food.to_draft()
    catalog_validator.ensure_valid_update(current, changes)

    merged = merge_update(current, changes)
    apply_draft(food, merged)
    await db.commit()

    logger.info(f"Food #{food.id} updated by user {admin.user_id}")

    return FoodMessageResponse(
        message="Food item updated successfully",
        food=FoodResponse.model_validate(food),
    )


@router.delete("/{food_id}", response_model=MessageResponse, summary="Delete a food item")
async def delete_food(
    food_id: int,
    admin: Identity = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> MessageResponse:
    food = await load_food(db, food_id)
    await db.delete(food)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ValidationError("Food item is referenced by existing orders")

    logger.info(f"Food #{food_id} deleted by user {admin.user_id}")
    return MessageResponse(message="Food item deleted successfully")
