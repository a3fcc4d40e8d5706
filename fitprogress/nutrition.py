"""AI gateway client for meal nutrition analysis."""

import json
import logging
import re
from typing import Optional

import requests

from .config import GatewayConfig
from .models import NutritionAnalysis


logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """You are a nutrition analysis AI. Analyze the meal description and provide:
1. Estimated calories
2. Protein in grams
3. Carbohydrates in grams
4. Fat in grams
5. 2-3 practical suggestions for improving the meal

Respond ONLY with a valid JSON object in this exact format:
{
  "calories": <number>,
  "protein": <number>,
  "carbs": <number>,
  "fat": <number>,
  "suggestions": [<string>, <string>]
}

Be realistic with estimates. For unknown portions, assume standard serving sizes."""

# first "{" through last "}", across lines
JSON_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


class NutritionError(Exception):
    """Meal analysis failed."""


class RateLimitError(NutritionError):
    """The gateway rejected the request with HTTP 429."""


class CreditsExhaustedError(NutritionError):
    """The gateway rejected the request with HTTP 402."""


def extract_json_object(content: str) -> dict:
    """
    Pull the JSON object out of a model reply.

    Anything outside the outermost braces is ignored.
    """
    match = JSON_OBJECT_RE.search(content or "")
    if not match:
        raise NutritionError("Failed to parse nutrition data from AI response")

    try:
        return json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise NutritionError(f"Invalid nutrition JSON from AI response: {e}") from e


class NutritionClient:
    """Client that asks the AI gateway to estimate a meal's macros."""

    def __init__(self, config: GatewayConfig):
        """
        Initialize nutrition client with configuration.
        """
        self._config = config

    def _get_headers(self) -> dict:
        """Build authorization headers for API requests."""
        return {
            "Authorization": f"Bearer {self._config.api_key}",
            "Content-Type": "application/json",
        }

    def build_payload(self, meal_description: str) -> dict:
        """Chat completion request body for one meal."""
        return {
            "model": self._config.model,
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f"Analyze this meal: {meal_description}"},
            ],
        }

    def analyze_meal(self, meal_description: Optional[str]) -> NutritionAnalysis:
        """
        Estimate calories and macros for a described meal.
        """
        if not meal_description or not meal_description.strip():
            raise ValueError("Please describe your meal")

        logger.info(f"Nutrition analysis invoked for meal: {meal_description}")

        response = requests.post(
            f"{self._config.api_base}/chat/completions",
            headers=self._get_headers(),
            json=self.build_payload(meal_description),
            timeout=60,
        )

        if not response.ok:
            logger.error(f"AI gateway error: {response.status_code} {response.text}")
            if response.status_code == 429:
                raise RateLimitError(
                    "Rate limit exceeded. Please try again in a moment."
                )
            if response.status_code == 402:
                raise CreditsExhaustedError(
                    "AI service credits depleted. Please contact support."
                )
            raise NutritionError(f"AI gateway error: {response.status_code}")

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (KeyError, IndexError, ValueError) as e:
            raise NutritionError(f"Unexpected AI gateway response: {e}") from e

        data = extract_json_object(content)
        try:
            analysis = NutritionAnalysis.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            raise NutritionError(f"Incomplete nutrition data: {e}") from e

        logger.info("Nutrition analysis completed successfully")
        return analysis
