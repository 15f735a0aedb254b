import logging
from datetime import date
from typing import Any, Dict, Optional

from app.core.exceptions import CalorieCalculationError
from app.models.profile import UserProfile
from app.services.calorie_calculator import CalorieCalculator

module_logger = logging.getLogger(__name__)

# Поля, изменение которых требует пересчета нормы калорий
RECALCULATION_FIELDS = frozenset({
    "weight", "height", "activity_level", "gender", "date_of_birth", "goals",
})

# Поля, которые можно явно обнулить через PUT
NULLABLE_FIELDS = frozenset({"diet_type", "allergies"})


class ProfileService:
    """Логирующая обертка над CalorieCalculator для создания и обновления профиля"""

    def __init__(self, logger: Optional[logging.Logger] = None, today: Optional[date] = None):
        self.logger = logger or module_logger
        self.today = today

    def calculate(self, profile_data: Dict[str, Any]) -> int:
        try:
            calories = CalorieCalculator.calculate(profile_data, today=self.today)
        except CalorieCalculationError:
            self.logger.exception("Calorie calculation failed: profile_data=%s", profile_data)
            raise
        self.logger.info("Calculated daily calories: %s", calories)
        return calories

    def resolve_for_create(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Заполнить daily_calories_target, если пользователь его не указал"""
        data = dict(data)
        if data.get("daily_calories_target") is None:
            self.logger.info("Calculating daily calories for new profile")
            data["daily_calories_target"] = self.calculate(data)
        return data

    def resolve_for_update(self, profile: UserProfile, changes: Dict[str, Any]) -> Dict[str, Any]:
        """
        Подготовить изменения профиля.

        Норма пересчитывается только если изменилось одно из полей RECALCULATION_FIELDS
        и новая норма не передана явно.
        """
        changes = {
            field: value for field, value in changes.items()
            if value is not None or field in NULLABLE_FIELDS
        }

        updated_fields = sorted(RECALCULATION_FIELDS.intersection(changes))
        if updated_fields and "daily_calories_target" not in changes:
            self.logger.info("Recalculating daily calories due to profile updates: %s", updated_fields)
            merged = {**profile.to_dict(), **changes}
            changes["daily_calories_target"] = self.calculate(merged)

        return changes
