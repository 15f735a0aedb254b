"""
Интеграционные тесты эндпоинтов /api/meal-plan/*.

- POST /meal-plan/generate: успех, нет профиля (404), ошибка AI (500) без записей в БД
- GET /meal-plan/current: 404 без плана, последний активный план

Стратегия: генератор блюд либо подменяется AsyncMock, либо используется настоящий
GeminiMealService поверх httpx.MockTransport.
"""

import logging
import pytest
import httpx
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy import func, select

from app.core.dependencies import get_meal_generator
from app.core.exceptions import MealGenerationError
from app.models.meal import Meal
from app.models.meal_plan import MealPlan
from app.services.gemini_service import GeminiMealService
from tests.factories import make_day_blocks, make_flat_meals, make_profile_payload, fenced, gemini_body

pytestmark = pytest.mark.integration


@pytest.fixture
def generator(db_app) -> AsyncMock:
    mock = AsyncMock(spec=GeminiMealService)
    mock.generate_meals.return_value = make_flat_meals(7)
    db_app.dependency_overrides[get_meal_generator] = lambda: mock
    return mock


def use_gemini_transport(db_app, handler) -> None:
    service = GeminiMealService(
        api_key="test-key",
        endpoint="https://gemini.test/generateContent",
        timeout=5.0,
        logger=MagicMock(),
        transport=httpx.MockTransport(handler),
    )
    db_app.dependency_overrides[get_meal_generator] = lambda: service


async def count_rows(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


@pytest.fixture
async def with_profile(db_client):
    response = await db_client.post("/api/profile", json=make_profile_payload(diet_type="vegetarian"))
    assert response.status_code == 201
    return response.json()["profile"]


# ---------------------------------------------------------------------------
# POST /meal-plan/generate
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_generate_without_profile_returns_404(db_client, generator):
    response = await db_client.post("/api/meal-plan/generate")

    assert response.status_code == 404
    assert response.json()["detail"] == "User profile not found"
    generator.generate_meals.assert_not_called()


@pytest.mark.asyncio
async def test_generate_creates_plan_with_pivot(db_client, db_user, generator, with_profile):
    response = await db_client.post("/api/meal-plan/generate")

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Meal plan generated successfully"
    plan = data["plan"]
    assert plan["user_id"] == db_user.id
    assert plan["status"] == "active"
    assert len(plan["meals"]) == 28
    pivots = {(meal["pivot"]["day_of_week"], meal["pivot"]["meal_type"]) for meal in plan["meals"]}
    assert len(pivots) == 28
    assert plan["meals"][0]["pivot"] == {"day_of_week": 1, "meal_type": "breakfast"}

    profile_arg = generator.generate_meals.call_args.args[0]
    assert profile_arg["diet_type"] == "vegetarian"
    assert profile_arg["daily_calories_target"] == with_profile["daily_calories_target"]
    assert generator.generate_meals.call_args.kwargs["days"] == 7


@pytest.mark.asyncio
async def test_generate_ai_failure_returns_500_without_rows(db_client, db_session, generator, with_profile):
    generator.generate_meals.side_effect = MealGenerationError("Gemini API request failed: 503")

    response = await db_client.post("/api/meal-plan/generate")

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to generate meal plan"
    assert await count_rows(db_session, MealPlan) == 0


@pytest.mark.asyncio
async def test_generate_duplicate_slot_returns_500_without_rows(db_client, db_session, generator, with_profile):
    meals = make_flat_meals(7)
    meals[1]["meal_type"] = "breakfast"
    generator.generate_meals.return_value = meals

    response = await db_client.post("/api/meal-plan/generate")

    assert response.status_code == 500
    assert await count_rows(db_session, MealPlan) == 0
    assert await count_rows(db_session, Meal) == 0


@pytest.mark.asyncio
async def test_generate_with_gemini_response(db_app, db_client, with_profile):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=gemini_body(fenced(make_day_blocks(7, label=lambda day: day))))

    use_gemini_transport(db_app, handler)

    response = await db_client.post("/api/meal-plan/generate")

    assert response.status_code == 200
    assert len(response.json()["plan"]["meals"]) == 28
    assert len(requests) == 1
    assert b"Diet: vegetarian" in requests[0].content


@pytest.mark.asyncio
async def test_generate_with_unparseable_gemini_text_creates_nothing(db_app, db_client, db_session, with_profile):
    use_gemini_transport(
        db_app, lambda request: httpx.Response(200, json=gemini_body("Here is your plan: enjoy!"))
    )

    response = await db_client.post("/api/meal-plan/generate")

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to generate meal plan"
    assert await count_rows(db_session, MealPlan) == 0
    assert await count_rows(db_session, Meal) == 0


@pytest.mark.asyncio
async def test_generate_twice_archives_previous_plan(db_client, generator, with_profile):
    first = (await db_client.post("/api/meal-plan/generate")).json()["plan"]
    second = (await db_client.post("/api/meal-plan/generate")).json()["plan"]

    current = (await db_client.get("/api/meal-plan/current")).json()["plan"]

    assert second["id"] != first["id"]
    assert current["id"] == second["id"]


# ---------------------------------------------------------------------------
# GET /meal-plan/current
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_current_without_plan_returns_404(db_client):
    response = await db_client.get("/api/meal-plan/current")

    assert response.status_code == 404
    assert response.json()["detail"] == "No active meal plan found"


@pytest.mark.asyncio
async def test_current_returns_generated_plan(db_client, generator, with_profile):
    generated = (await db_client.post("/api/meal-plan/generate")).json()["plan"]

    response = await db_client.get("/api/meal-plan/current")

    assert response.status_code == 200
    plan = response.json()["plan"]
    assert plan["id"] == generated["id"]
    assert plan["week_start_date"] == generated["week_start_date"]
    days = [meal["pivot"]["day_of_week"] for meal in plan["meals"]]
    assert days == sorted(days)
    assert plan["meals"][0]["ingredients"] == ["oats", "milk"]


@pytest.mark.asyncio
async def test_generate_failure_is_logged_with_code_and_traceback(db_client, generator, with_profile, caplog):
    generator.generate_meals.side_effect = MealGenerationError("Gemini API request failed: 503")

    with caplog.at_level(logging.ERROR, logger="app.api.v1.meal_plan"):
        response = await db_client.post("/api/meal-plan/generate")

    assert response.status_code == 500
    records = [r for r in caplog.records if r.name == "app.api.v1.meal_plan"]
    assert len(records) == 1
    assert MealGenerationError.code in records[0].getMessage()
    assert records[0].exc_info is not None
