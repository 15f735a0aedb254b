from pydantic import AfterValidator, BaseModel, BeforeValidator, Field, field_validator
from typing import Annotated, Optional, List
from datetime import date, datetime

from app.models.profile import GoalEnum, ActivityLevelEnum, GenderEnum

MIN_DATE_OF_BIRTH = date(1900, 1, 1)

Allergy = Annotated[str, Field(max_length=50)]


def _validate_date_of_birth(value: Optional[date]) -> Optional[date]:
    if value is None:
        return value
    if value <= MIN_DATE_OF_BIRTH:
        raise ValueError("The date of birth must be after 1900.")
    # Та же граница дня, что и при расчете возраста
    if value >= datetime.utcnow().date():
        raise ValueError("The date of birth must be in the past.")
    return value


def _normalize_activity_level(value):
    # "very active" -> "very_active"
    if isinstance(value, str):
        return value.strip().lower().replace(" ", "_")
    return value


DateOfBirth = Annotated[date, AfterValidator(_validate_date_of_birth)]
ActivityLevel = Annotated[ActivityLevelEnum, BeforeValidator(_normalize_activity_level)]


class ProfileCreate(BaseModel):
    goals: GoalEnum
    diet_type: Optional[str] = Field(default=None, max_length=50)
    allergies: Optional[List[Allergy]] = None
    daily_calories_target: Optional[int] = Field(default=None, ge=500, le=10000)
    weight: float = Field(ge=20, le=500, description="Weight in kg (20-500)")
    height: float = Field(ge=50, le=300, description="Height in cm (50-300)")
    activity_level: ActivityLevel
    gender: GenderEnum
    date_of_birth: DateOfBirth


class ProfileUpdate(BaseModel):
    goals: Optional[GoalEnum] = None
    diet_type: Optional[str] = Field(default=None, max_length=50)
    allergies: Optional[List[Allergy]] = None
    daily_calories_target: Optional[int] = Field(default=None, ge=500, le=10000)
    weight: Optional[float] = Field(default=None, ge=20, le=500)
    height: Optional[float] = Field(default=None, ge=50, le=300)
    activity_level: Optional[ActivityLevel] = None
    gender: Optional[GenderEnum] = None
    date_of_birth: Optional[DateOfBirth] = None


class ProfileResponse(BaseModel):
    id: int
    user_id: int
    goals: GoalEnum
    diet_type: Optional[str] = None
    allergies: List[str] = []
    daily_calories_target: int
    weight: float
    height: float
    activity_level: ActivityLevelEnum
    gender: GenderEnum
    date_of_birth: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("allergies", mode="before")
    @classmethod
    def none_as_empty(cls, value):
        return value or []

    class Config:
        from_attributes = True


class ProfileMessageResponse(BaseModel):
    message: str
    profile: ProfileResponse
