import math
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional

from app.core.exceptions import CalorieCalculationError


def _value(raw: Any) -> Any:
    """Enum → его значение, остальное как есть"""
    return getattr(raw, "value", raw)


class CalorieCalculator:
    """
    Расчет дневной нормы калорий по формуле Харриса-Бенедикта (ревизия).

    Чистые функции: без логирования и обращений к БД, логирует вызывающий слой.
    """

    ACTIVITY_MULTIPLIERS = {
        "sedentary": 1.2,
        "light": 1.375,
        "moderate": 1.55,
        "very_active": 1.725,
        "extra_active": 1.9,
    }
    DEFAULT_ACTIVITY_MULTIPLIER = 1.55

    MIN_CALORIES = {"male": 1500}
    DEFAULT_MIN_CALORIES = 1200

    KETO_FACTOR = 0.95
    ROUNDING_STEP = 50

    REQUIRED_FIELDS = ("gender", "weight", "height", "date_of_birth")

    @staticmethod
    def calculate_age(date_of_birth: date, today: Optional[date] = None) -> int:
        """Полных лет на дату today (по умолчанию текущая дата UTC)"""
        today = today or datetime.utcnow().date()
        # 29 февраля в невисокосный год считается наступившим 1 марта
        had_birthday = (today.month, today.day) >= (date_of_birth.month, date_of_birth.day)
        return today.year - date_of_birth.year - (0 if had_birthday else 1)

    @staticmethod
    def calculate_bmi(weight: float, height: float) -> float:
        height_m = height / 100
        return weight / (height_m * height_m)

    @classmethod
    def calculate_bmr(cls, weight: float, height: float, age: int, gender: str) -> float:
        if gender == "male":
            return 88.362 + 13.397 * weight + 4.799 * height - 5.677 * age
        return 447.593 + 9.247 * weight + 3.098 * height - 4.330 * age

    @classmethod
    def activity_multiplier(cls, activity_level: Optional[str]) -> float:
        if not activity_level:
            return cls.DEFAULT_ACTIVITY_MULTIPLIER
        key = str(activity_level).strip().lower().replace(" ", "_")
        return cls.ACTIVITY_MULTIPLIERS.get(key, cls.DEFAULT_ACTIVITY_MULTIPLIER)

    @classmethod
    def calculate_tdee(cls, bmr: float, activity_level: Optional[str]) -> float:
        return bmr * cls.activity_multiplier(activity_level)

    @staticmethod
    def goal_factor(goal: Optional[str], bmi: float) -> float:
        if goal == "lose_weight":
            if bmi > 30:
                deficit = 0.20
            elif bmi > 25:
                deficit = 0.15
            else:
                deficit = 0.10
            return 1 - deficit
        if goal == "gain_muscle":
            surplus = 0.05 if bmi > 25 else 0.10
            return 1 + surplus
        return 1.0

    @classmethod
    def round_to_step(cls, calories: float) -> int:
        # Округление половины вверх: 2875 -> 2900
        return int(math.floor(calories / cls.ROUNDING_STEP + 0.5)) * cls.ROUNDING_STEP

    @classmethod
    def calculate(cls, profile: Mapping[str, Any], today: Optional[date] = None) -> int:
        """Итоговая дневная норма калорий, кратная 50"""
        data: Dict[str, Any] = {key: _value(profile.get(key)) for key in (
            "gender", "weight", "height", "date_of_birth", "activity_level", "goals", "diet_type"
        )}

        missing = [field for field in cls.REQUIRED_FIELDS if not data[field]]
        if missing:
            raise CalorieCalculationError(
                f"Missing required profile data for calorie calculation: {', '.join(missing)}"
            )

        date_of_birth = data["date_of_birth"]
        if isinstance(date_of_birth, datetime):
            date_of_birth = date_of_birth.date()
        elif isinstance(date_of_birth, str):
            try:
                date_of_birth = date.fromisoformat(date_of_birth)
            except ValueError as e:
                raise CalorieCalculationError(f"Invalid date_of_birth: {date_of_birth}") from e

        try:
            weight = float(data["weight"])
            height = float(data["height"])
        except (TypeError, ValueError) as e:
            raise CalorieCalculationError("Weight and height must be numeric") from e

        gender = data["gender"]
        age = cls.calculate_age(date_of_birth, today)
        bmi = cls.calculate_bmi(weight, height)
        bmr = cls.calculate_bmr(weight, height, age, gender)

        calories = cls.calculate_tdee(bmr, data["activity_level"])
        calories *= cls.goal_factor(data["goals"], bmi)

        if data["diet_type"] == "keto":
            calories *= cls.KETO_FACTOR

        calories = max(calories, cls.MIN_CALORIES.get(gender, cls.DEFAULT_MIN_CALORIES))
        return cls.round_to_step(calories)
