import json
import logging
import re
from typing import Any, Dict, List, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from app.core.config import settings
from app.core.exceptions import MealGenerationError
from app.schemas.meal import GeneratedDay

module_logger = logging.getLogger(__name__)

# ```json ... ``` вокруг полезной нагрузки
CODE_FENCE_PATTERN = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)

_days_adapter = TypeAdapter(List[GeneratedDay])


class GeminiMealService:
    def __init__(
            self,
            api_key: Optional[str] = None,
            endpoint: Optional[str] = None,
            timeout: Optional[float] = None,
            logger: Optional[logging.Logger] = None,
            transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GEMINI_API_KEY
        self.endpoint = endpoint or settings.GEMINI_ENDPOINT
        self.timeout = timeout or settings.GEMINI_TIMEOUT
        self.logger = logger or module_logger
        self.transport = transport

    @staticmethod
    def build_prompt(profile: Dict[str, Any], days: int = 7) -> str:
        diet = profile.get("diet_type") or "any"
        calories = profile.get("daily_calories_target") or 2000
        allergies = profile.get("allergies")
        allergies_text = ", ".join(allergies) if isinstance(allergies, list) and allergies else "none"

        return (
            f"Generate a {days}-day meal plan. Each day should have breakfast, lunch, dinner, and snack. "
            "Each meal should include: title, description, ingredients (as array), instructions, "
            "calories, protein, carbs, fats, meal_type, and diet_type. "
            f"Total daily calories should be close to {calories}. "
            f"Diet: {diet}. Allergies: {allergies_text}. "
            'Respond in JSON array format: [{"day": 1, "meals": [...]}, ...] with one entry per day.'
        )

    @staticmethod
    def extract_text(response_data: Any) -> str:
        """Текст первого кандидата из ответа generateContent"""
        try:
            text = response_data["candidates"][0]["content"]["parts"][0]["text"]
        except (KeyError, IndexError, TypeError):
            raise MealGenerationError("Gemini response has no candidate text")
        if not isinstance(text, str) or not text.strip():
            raise MealGenerationError("Gemini response has no candidate text")
        return text

    @staticmethod
    def strip_code_fence(text: str) -> str:
        return CODE_FENCE_PATTERN.sub("", text.strip()).strip()

    @classmethod
    def parse_response(cls, text: str, default_diet_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        Разобрать JSON из ответа модели и развернуть дни в плоский список блюд.

        Каждое блюдо получает day_of_week своего дня. Любое отклонение от схемы
        (битый JSON, день без номера, блюдо без полей) - MealGenerationError.
        """
        payload = cls.strip_code_fence(text)
        try:
            parsed = json.loads(payload)
        except json.JSONDecodeError as e:
            raise MealGenerationError(f"Invalid JSON response from Gemini: {e.msg}") from e

        if not isinstance(parsed, list) or not parsed:
            raise MealGenerationError("Gemini response must be a non-empty JSON array of days")

        try:
            day_blocks = _days_adapter.validate_python(parsed)
        except ValidationError as e:
            raise MealGenerationError(
                f"Gemini response does not match the meal plan schema: {e.error_count()} errors"
            ) from e

        diet_type = default_diet_type or "any"
        meals = []
        for day_block in day_blocks:
            for meal in day_block.meals:
                record = meal.model_dump(mode="json")
                record["diet_type"] = record.get("diet_type") or diet_type
                record["day_of_week"] = day_block.day
                meals.append(record)
        return meals

    async def _make_gemini_request(self, prompt: str) -> Dict[str, Any]:
        if not self.api_key:
            raise MealGenerationError("AI service is not configured: GEMINI_API_KEY is empty")

        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.post(
                    self.endpoint,
                    params={"key": self.api_key},
                    headers={"Content-Type": "application/json"},
                    json={"contents": [{"parts": [{"text": prompt}]}]},
                )
        except httpx.TimeoutException as e:
            raise MealGenerationError("Timed out waiting for Gemini API") from e
        except httpx.HTTPError as e:
            raise MealGenerationError(f"Could not reach Gemini API: {e}") from e

        self.logger.info(
            "Received response from Gemini AI: status=%s size=%s",
            response.status_code, len(response.content),
        )

        if not response.is_success:
            self.logger.error(
                "Gemini API request failed: status=%s body=%s",
                response.status_code, response.text[:1000],
            )
            raise MealGenerationError(f"Gemini API request failed: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise MealGenerationError("Gemini API returned a non-JSON body") from e

    async def generate_meals(self, profile: Dict[str, Any], days: int = 7) -> List[Dict[str, Any]]:
        """Сгенерировать блюда на days дней по профилю пользователя"""
        prompt = self.build_prompt(profile, days)
        self.logger.info(
            "Sending request to Gemini AI: diet_type=%s daily_calories=%s allergies=%s goals=%s days=%s prompt_length=%s",
            profile.get("diet_type") or "any",
            profile.get("daily_calories_target") or 2000,
            profile.get("allergies") or [],
            profile.get("goals") or "maintain_weight",
            days,
            len(prompt),
        )
        self.logger.debug("Gemini prompt: %s", prompt)

        text = None
        try:
            response_data = await self._make_gemini_request(prompt)
            text = self.extract_text(response_data)
            meals = self.parse_response(text, default_diet_type=profile.get("diet_type"))
        except MealGenerationError:
            self.logger.exception(
                "Failed to generate meals with Gemini AI: profile=%s response_preview=%s",
                profile, (text or "")[:500],
            )
            raise

        self.logger.info(
            "Parsed %s meals from Gemini response: %s",
            len(meals),
            [(m["day_of_week"], m["meal_type"], m["title"], m["calories"]) for m in meals],
        )
        return meals
