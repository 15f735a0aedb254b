from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime

from app.models.meal_plan import MealPlan, MealPlanStatusEnum
from app.schemas.meal import MealRead, MealPivot, PlannedMealRead


class MealPlanRead(BaseModel):
    id: int
    user_id: int
    week_start_date: date
    status: MealPlanStatusEnum
    created_at: Optional[datetime] = None
    meals: List[PlannedMealRead]

    @classmethod
    def from_plan(cls, plan: MealPlan) -> "MealPlanRead":
        meals = []
        for item in plan.items:
            meal = MealRead.model_validate(item.meal)
            meals.append(PlannedMealRead(
                **meal.model_dump(),
                pivot=MealPivot(day_of_week=item.day_of_week, meal_type=item.meal_type),
            ))
        return cls(
            id=plan.id,
            user_id=plan.user_id,
            week_start_date=plan.week_start_date,
            status=plan.status,
            created_at=plan.created_at,
            meals=meals,
        )


class MealPlanGenerateResponse(BaseModel):
    message: str
    plan: MealPlanRead


class MealPlanCurrentResponse(BaseModel):
    plan: MealPlanRead
