import enum
from datetime import datetime

from sqlalchemy import Column, Integer, String, Float, Date, DateTime, Enum, ForeignKey, JSON
from sqlalchemy.orm import relationship

from app.core.base import Base


class GoalEnum(str, enum.Enum):
    lose_weight = "lose_weight"
    gain_muscle = "gain_muscle"
    maintain_weight = "maintain_weight"


class ActivityLevelEnum(str, enum.Enum):
    sedentary = "sedentary"
    light = "light"
    moderate = "moderate"
    very_active = "very_active"
    extra_active = "extra_active"


class GenderEnum(str, enum.Enum):
    male = "male"
    female = "female"
    other = "other"


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    goals = Column(Enum(GoalEnum), nullable=False)
    diet_type = Column(String(50), nullable=True)
    allergies = Column(JSON, nullable=True)
    daily_calories_target = Column(Integer, nullable=False)
    weight = Column(Float, nullable=False)
    height = Column(Float, nullable=False)
    activity_level = Column(Enum(ActivityLevelEnum), nullable=False)
    gender = Column(Enum(GenderEnum), nullable=False)
    date_of_birth = Column(Date, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="profile")

    def to_dict(self) -> dict:
        """Снимок профиля для сервисов расчета и генерации"""
        return {
            "goals": self.goals.value if self.goals else None,
            "diet_type": self.diet_type,
            "allergies": list(self.allergies or []),
            "daily_calories_target": self.daily_calories_target,
            "weight": self.weight,
            "height": self.height,
            "activity_level": self.activity_level.value if self.activity_level else None,
            "gender": self.gender.value if self.gender else None,
            "date_of_birth": self.date_of_birth,
        }
