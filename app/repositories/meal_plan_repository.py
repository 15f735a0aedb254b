from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select, update

from app.models.meal import Meal, Favorite
from app.models.meal_plan import MealPlan, MealPlanItem, MealPlanStatusEnum


class MealPlanRepository:
    """Запросы к планам питания, блюдам и избранному"""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def _with_meals():
        return selectinload(MealPlan.items).selectinload(MealPlanItem.meal)

    async def get_plan(self, plan_id: int) -> Optional[MealPlan]:
        result = await self.db.execute(
            select(MealPlan)
            .where(MealPlan.id == plan_id)
            .options(self._with_meals())
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_current_plan(self, user_id: int) -> Optional[MealPlan]:
        """Последний активный план пользователя"""
        result = await self.db.execute(
            select(MealPlan)
            .where(MealPlan.user_id == user_id, MealPlan.status == MealPlanStatusEnum.active)
            .order_by(MealPlan.created_at.desc(), MealPlan.id.desc())
            .limit(1)
            .options(self._with_meals())
        )
        return result.scalar_one_or_none()

    async def archive_active_plans(self, user_id: int) -> None:
        await self.db.execute(
            update(MealPlan)
            .where(MealPlan.user_id == user_id, MealPlan.status == MealPlanStatusEnum.active)
            .values(status=MealPlanStatusEnum.archived)
        )

    async def get_meal(self, meal_id: int) -> Optional[Meal]:
        return await self.db.get(Meal, meal_id)

    async def list_favorite_meals(self, user_id: int) -> List[Meal]:
        result = await self.db.execute(
            select(Meal)
            .join(Favorite, Favorite.meal_id == Meal.id)
            .where(Favorite.user_id == user_id)
            .order_by(Favorite.created_at.desc(), Favorite.id.desc())
        )
        return list(result.scalars().all())

    async def get_favorite(self, user_id: int, meal_id: int) -> Optional[Favorite]:
        result = await self.db.execute(
            select(Favorite).where(Favorite.user_id == user_id, Favorite.meal_id == meal_id)
        )
        return result.scalar_one_or_none()

    async def add_favorite(self, user_id: int, meal_id: int) -> Favorite:
        favorite = Favorite(user_id=user_id, meal_id=meal_id)
        self.db.add(favorite)
        await self.db.commit()
        return favorite

    async def remove_favorite(self, favorite: Favorite) -> None:
        await self.db.delete(favorite)
        await self.db.commit()
