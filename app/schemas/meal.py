import re
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime

from app.models.meal import MealTypeEnum

# "Day 3", "day3", "Day 3 - Wednesday"
DAY_LABEL_PATTERN = re.compile(r"day\s*(\d+)", re.IGNORECASE)


class MealRead(BaseModel):
    id: int
    title: str
    description: str
    ingredients: List[str]
    instructions: str
    calories: int
    protein: float
    carbs: float
    fats: float
    meal_type: MealTypeEnum
    diet_type: str
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class MealPivot(BaseModel):
    day_of_week: int
    meal_type: MealTypeEnum


class PlannedMealRead(MealRead):
    pivot: MealPivot


class GeneratedMeal(BaseModel):
    """Блюдо в ответе AI до сохранения в БД"""
    model_config = ConfigDict(extra="ignore")

    title: str = Field(min_length=1)
    description: str = ""
    ingredients: List[str]
    instructions: str
    calories: int = Field(ge=0)
    protein: float = Field(ge=0)
    carbs: float = Field(ge=0)
    fats: float = Field(ge=0)
    meal_type: MealTypeEnum
    diet_type: Optional[str] = None

    @field_validator("description", mode="before")
    @classmethod
    def none_as_blank(cls, value):
        return "" if value is None else value

    @field_validator("instructions", mode="before")
    @classmethod
    def join_steps(cls, value):
        # Иногда модель отдает инструкции списком шагов
        if isinstance(value, list):
            return "\n".join(str(step) for step in value)
        return value

    @field_validator("calories", mode="before")
    @classmethod
    def round_calories(cls, value):
        if isinstance(value, float):
            return int(round(value))
        return value

    @field_validator("meal_type", mode="before")
    @classmethod
    def normalize_meal_type(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


class GeneratedDay(BaseModel):
    model_config = ConfigDict(extra="ignore")

    day: int = Field(ge=1, le=7)
    meals: List[GeneratedMeal] = Field(min_length=1)

    @field_validator("day", mode="before")
    @classmethod
    def parse_day_label(cls, value):
        if isinstance(value, bool):
            raise ValueError("day must be a number or a 'Day N' label")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            label = value.strip()
            if label.isdigit():
                return int(label)
            match = DAY_LABEL_PATTERN.search(label)
            if match:
                return int(match.group(1))
        raise ValueError("day must be a number or a 'Day N' label")


class FavoriteResponse(BaseModel):
    message: str
    meal: MealRead
