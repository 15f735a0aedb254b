class MealPlannerError(Exception):
    code = "E_MEAL_PLANNER"

    def __init__(self, message: str = "") -> None:
        super().__init__(message)


class CalorieCalculationError(MealPlannerError):
    """Недостаточно данных профиля для расчета калорий"""
    code = "E_CALORIE_CALCULATION"


class MealGenerationError(MealPlannerError):
    """AI не ответил, ответил ошибкой или вернул неразборчивый ответ"""
    code = "E_MEAL_GENERATION"


class MealPlanPersistenceError(MealPlannerError):
    code = "E_MEAL_PLAN_PERSISTENCE"
