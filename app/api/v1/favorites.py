from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from app.core.dependencies import get_current_user, get_meal_plan_repository
from app.models.user import User
from app.repositories.meal_plan_repository import MealPlanRepository
from app.schemas.auth import MessageResponse
from app.schemas.meal import MealRead, FavoriteResponse

router = APIRouter(prefix="/favorites", tags=["favorites"])


@router.get("", response_model=List[MealRead])
async def list_favorites(
        current_user: User = Depends(get_current_user),
        repo: MealPlanRepository = Depends(get_meal_plan_repository),
):
    return await repo.list_favorite_meals(current_user.id)


@router.post("/{meal_id}", response_model=FavoriteResponse, status_code=status.HTTP_201_CREATED)
async def add_favorite(
        meal_id: int,
        current_user: User = Depends(get_current_user),
        repo: MealPlanRepository = Depends(get_meal_plan_repository),
):
    """Добавить блюдо в избранное; повторное добавление не создает дубликат"""
    meal = await repo.get_meal(meal_id)
    if not meal:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meal not found")

    if not await repo.get_favorite(current_user.id, meal_id):
        await repo.add_favorite(current_user.id, meal_id)

    return FavoriteResponse(message="Meal added to favorites", meal=MealRead.model_validate(meal))


@router.delete("/{meal_id}", response_model=MessageResponse)
async def remove_favorite(
        meal_id: int,
        current_user: User = Depends(get_current_user),
        repo: MealPlanRepository = Depends(get_meal_plan_repository),
):
    favorite = await repo.get_favorite(current_user.id, meal_id)
    if not favorite:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meal is not in favorites")

    await repo.remove_favorite(favorite)
    return MessageResponse(message="Meal removed from favorites")
