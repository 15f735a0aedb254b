import asyncio
import logging
import weakref
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import MealPlanPersistenceError
from app.models.meal import Meal
from app.models.meal_plan import MealPlan, MealPlanItem, MealPlanStatusEnum
from app.repositories.meal_plan_repository import MealPlanRepository

module_logger = logging.getLogger(__name__)

MEAL_FIELDS = (
    "title", "description", "ingredients", "instructions",
    "calories", "protein", "carbs", "fats", "meal_type", "diet_type",
)


def start_of_week(today: Optional[date] = None) -> date:
    """Понедельник текущей недели"""
    today = today or datetime.utcnow().date()
    return today - timedelta(days=today.weekday())


def summarize_meals(meals: List[Dict[str, Any]]) -> Dict[str, Any]:
    calories = [meal.get("calories") or 0 for meal in meals]
    return {
        "total_count": len(meals),
        "by_meal_type": dict(Counter(meal.get("meal_type", "unknown") for meal in meals)),
        "by_day": dict(Counter(meal.get("day_of_week", "unknown") for meal in meals)),
        "calories_min": min(calories) if calories else 0,
        "calories_max": max(calories) if calories else 0,
        "calories_total": sum(calories),
    }


class MealPlanService:
    """Сохранение сгенерированного плана: план → блюда → слоты, одной транзакцией"""

    def __init__(self, logger: Optional[logging.Logger] = None, archive_previous: Optional[bool] = None):
        self.logger = logger or module_logger
        self.archive_previous = settings.ARCHIVE_PREVIOUS_PLANS if archive_previous is None else archive_previous
        self._user_locks: "weakref.WeakValueDictionary[int, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, user_id: int) -> asyncio.Lock:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = asyncio.Lock()
            self._user_locks[user_id] = lock
        return lock

    @staticmethod
    async def _advisory_lock(db: AsyncSession, user_id: int) -> None:
        """Блокировка на уровне PostgreSQL между воркерами, снимается с транзакцией"""
        bind = getattr(db, "bind", None)
        dialect = getattr(getattr(bind, "dialect", None), "name", None)
        if dialect == "postgresql":
            await db.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": user_id})

    @staticmethod
    def _build_meal(meal_data: Dict[str, Any]) -> Meal:
        day_of_week = meal_data["day_of_week"]
        if not isinstance(day_of_week, int) or not 1 <= day_of_week <= 7:
            raise ValueError(f"day_of_week must be an integer 1-7, got {day_of_week!r}")
        return Meal(**{field: meal_data[field] for field in MEAL_FIELDS})

    async def create_weekly_plan(
            self,
            db: AsyncSession,
            user_id: int,
            meals: List[Dict[str, Any]],
            week_start_date: Optional[date] = None,
    ) -> MealPlan:
        week_start_date = week_start_date or start_of_week()
        self.logger.info(
            "Starting meal plan creation: user_id=%s week_start_date=%s summary=%s",
            user_id, week_start_date, summarize_meals(meals),
        )

        repo = MealPlanRepository(db)
        async with self._lock_for(user_id):
            try:
                await self._advisory_lock(db, user_id)

                if self.archive_previous:
                    await repo.archive_active_plans(user_id)

                plan = MealPlan(
                    user_id=user_id,
                    week_start_date=week_start_date,
                    status=MealPlanStatusEnum.active,
                )
                db.add(plan)
                await db.flush()

                for index, meal_data in enumerate(meals):
                    try:
                        meal = self._build_meal(meal_data)
                        db.add(meal)
                        db.add(MealPlanItem(
                            meal_plan_id=plan.id,
                            meal=meal,
                            day_of_week=meal_data["day_of_week"],
                            meal_type=meal_data["meal_type"],
                        ))
                        await db.flush()
                    except Exception:
                        self.logger.error(
                            "Failed to create meal #%s for plan %s: %s",
                            index, plan.id, meal_data,
                        )
                        raise

                await db.commit()
            except Exception as e:
                await db.rollback()
                self.logger.exception("Failed to create meal plan in transaction: user_id=%s", user_id)
                raise MealPlanPersistenceError(f"Failed to persist meal plan: {e}") from e

        self.logger.info(
            "Created meal plan %s for user %s with %s meals",
            plan.id, user_id, len(meals),
        )
        return await repo.get_plan(plan.id)
