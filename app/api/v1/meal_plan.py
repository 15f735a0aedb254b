import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.db import get_db
from app.core.dependencies import (
    get_current_user, get_profile_repository, get_meal_plan_repository,
    get_meal_generator, get_meal_plan_service,
)
from app.core.exceptions import MealPlannerError
from app.models.user import User
from app.repositories.profile_repository import ProfileRepository
from app.repositories.meal_plan_repository import MealPlanRepository
from app.services.gemini_service import GeminiMealService
from app.services.meal_plan_service import MealPlanService
from app.schemas.meal_plan import MealPlanRead, MealPlanGenerateResponse, MealPlanCurrentResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/meal-plan", tags=["meal-plan"])


@router.post("/generate", response_model=MealPlanGenerateResponse)
async def generate_meal_plan(
        current_user: User = Depends(get_current_user),
        db: AsyncSession = Depends(get_db),
        profile_repo: ProfileRepository = Depends(get_profile_repository),
        generator: GeminiMealService = Depends(get_meal_generator),
        plan_service: MealPlanService = Depends(get_meal_plan_service),
):
    """Сгенерировать недельный план через Gemini и сохранить его"""
    # После rollback атрибуты current_user истекают
    user_id = current_user.id
    profile = await profile_repo.get_by_user_id(user_id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User profile not found")

    try:
        meals = await generator.generate_meals(profile.to_dict(), days=settings.MEAL_PLAN_DAYS)
        plan = await plan_service.create_weekly_plan(db, user_id, meals)
    except MealPlannerError as e:
        logger.exception("Meal plan generation failed for user %s: [%s] %s", user_id, e.code, e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate meal plan"
        )

    return MealPlanGenerateResponse(
        message="Meal plan generated successfully",
        plan=MealPlanRead.from_plan(plan),
    )


@router.get("/current", response_model=MealPlanCurrentResponse)
async def get_current_meal_plan(
        current_user: User = Depends(get_current_user),
        repo: MealPlanRepository = Depends(get_meal_plan_repository),
):
    """Последний активный план пользователя"""
    plan = await repo.get_current_plan(current_user.id)
    if not plan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active meal plan found")
    return MealPlanCurrentResponse(plan=MealPlanRead.from_plan(plan))
