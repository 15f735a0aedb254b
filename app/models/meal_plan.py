import enum
from datetime import datetime

from sqlalchemy import Column, Integer, Date, DateTime, Enum, ForeignKey, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship

from app.core.base import Base
from app.models.meal import MealTypeEnum


class MealPlanStatusEnum(str, enum.Enum):
    active = "active"
    archived = "archived"


class MealPlan(Base):
    __tablename__ = "meal_plans"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    week_start_date = Column(Date, nullable=False)
    status = Column(Enum(MealPlanStatusEnum), nullable=False, default=MealPlanStatusEnum.active)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="meal_plans")
    items = relationship(
        "MealPlanItem",
        back_populates="meal_plan",
        cascade="all, delete-orphan",
        order_by=lambda: [MealPlanItem.day_of_week, MealPlanItem.id],
    )

    def meals_for_day(self, day_of_week: int):
        return [item.meal for item in self.items if item.day_of_week == day_of_week]


class MealPlanItem(Base):
    """Связь план ↔ блюдо: один слот (день, прием пищи) на план"""
    __tablename__ = "meal_plan_items"
    __table_args__ = (
        UniqueConstraint("meal_plan_id", "day_of_week", "meal_type", name="uq_meal_plan_items_slot"),
        CheckConstraint("day_of_week BETWEEN 1 AND 7", name="ck_meal_plan_items_day"),
    )

    id = Column(Integer, primary_key=True)
    meal_plan_id = Column(Integer, ForeignKey("meal_plans.id", ondelete="CASCADE"), nullable=False, index=True)
    meal_id = Column(Integer, ForeignKey("meals.id", ondelete="CASCADE"), nullable=False, index=True)
    # 1 = понедельник, 7 = воскресенье
    day_of_week = Column(Integer, nullable=False)
    meal_type = Column(Enum(MealTypeEnum), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    meal_plan = relationship("MealPlan", back_populates="items")
    meal = relationship("Meal", back_populates="plan_items")
