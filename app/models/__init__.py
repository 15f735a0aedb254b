from app.models.user import User
from app.models.profile import UserProfile
from app.models.meal import Meal, Favorite
from app.models.meal_plan import MealPlan, MealPlanItem

__all__ = [
    "User", "UserProfile",
    "Meal", "Favorite",
    "MealPlan", "MealPlanItem",
]
