"""
Модульные тесты для ProfileService.

- resolve_for_create: расчет нормы, если она не передана
- resolve_for_update: пересчет только при изменении влияющих полей
- логирование ошибок расчета
"""

import pytest
from datetime import date
from unittest.mock import MagicMock

from app.core.exceptions import CalorieCalculationError
from app.models.profile import UserProfile, GoalEnum, ActivityLevelEnum, GenderEnum
from app.services.profile_service import ProfileService

pytestmark = pytest.mark.unit

TODAY = date(2024, 6, 15)


@pytest.fixture
def service() -> ProfileService:
    return ProfileService(logger=MagicMock(), today=TODAY)


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        id=1,
        user_id=1,
        goals=GoalEnum.maintain_weight,
        diet_type="balanced",
        allergies=["peanuts"],
        daily_calories_target=2850,
        weight=80,
        height=180,
        activity_level=ActivityLevelEnum.moderate,
        gender=GenderEnum.male,
        date_of_birth=date(1994, 6, 15),
    )


def test_resolve_for_create_fills_missing_target(service):
    data = {
        "goals": GoalEnum.maintain_weight, "diet_type": None, "allergies": None,
        "daily_calories_target": None, "weight": 80, "height": 180,
        "activity_level": ActivityLevelEnum.moderate, "gender": GenderEnum.male,
        "date_of_birth": date(1994, 6, 15),
    }

    resolved = service.resolve_for_create(data)

    assert resolved["daily_calories_target"] == 2850
    assert data["daily_calories_target"] is None


def test_resolve_for_create_keeps_explicit_target(service):
    resolved = service.resolve_for_create({"daily_calories_target": 2000})
    assert resolved["daily_calories_target"] == 2000


def test_resolve_for_create_incomplete_data_raises_and_logs(service):
    with pytest.raises(CalorieCalculationError):
        service.resolve_for_create({"weight": 80})
    service.logger.exception.assert_called_once()


def test_resolve_for_update_recalculates_on_weight_change(service, profile):
    """Вес 90 кг: 1987.602 * 1.55 = 3080.8 -> 3100"""
    changes = service.resolve_for_update(profile, {"weight": 90})
    assert changes == {"weight": 90, "daily_calories_target": 3100}


def test_resolve_for_update_non_affecting_field_keeps_target(service, profile):
    changes = service.resolve_for_update(profile, {"allergies": ["shellfish"]})
    assert changes == {"allergies": ["shellfish"]}


def test_resolve_for_update_diet_type_alone_does_not_recalculate(service, profile):
    changes = service.resolve_for_update(profile, {"diet_type": "keto"})
    assert "daily_calories_target" not in changes


def test_resolve_for_update_explicit_target_wins(service, profile):
    changes = service.resolve_for_update(profile, {"weight": 90, "daily_calories_target": 2500})
    assert changes["daily_calories_target"] == 2500


def test_resolve_for_update_drops_null_for_required_fields(service, profile):
    changes = service.resolve_for_update(profile, {"weight": None, "diet_type": None})
    assert changes == {"diet_type": None}


def test_resolve_for_update_uses_stored_values_for_untouched_fields(service, profile):
    """Смена цели: остальные параметры берутся из профиля. 2873.13 * 1.10 = 3160.4 -> 3150"""
    changes = service.resolve_for_update(profile, {"goals": GoalEnum.gain_muscle})
    assert changes["daily_calories_target"] == 3150
