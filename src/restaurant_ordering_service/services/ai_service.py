"""Client for the generative AI API used by the chef assistant.

Talks to the Gemini ``generateContent`` REST endpoint with httpx. Answers
arrive as free text; structured answers are expected to embed a JSON object,
which is extracted and validated here.
"""

import json
import logging
import re
import time
from typing import Any

import httpx
from pydantic import ValidationError

from restaurant_ordering_service.models.ai_models import DishSuggestions, StrategicInsights
from restaurant_ordering_service.observability import traced
from restaurant_ordering_service.observability.metrics import record_ai_request
from restaurant_ordering_service.utils.exceptions import UpstreamFailureError

logger = logging.getLogger(__name__)

JSON_BLOCK_PATTERN = re.compile(r"\{[\s\S]*\}")
DATA_URL_PATTERN = re.compile(r"^data:(image/[\w.+-]+);base64,")

FALLBACK_INSIGHTS = StrategicInsights(
    summary="Strategic data analysis is currently unavailable.",
    insights=[],
    priority="low",
)

SUGGESTION_PROMPT = """You are a professional menu consultant for a restaurant.
Draft content for a new dish.

Dish name: "{name}"
Ingredients: {ingredients}

Return ONLY a JSON object with this exact structure:
{{
  "description": "appetizing plain-text description, at most 300 characters",
  "tags": ["short labels such as Vegetarian or Spicy"],
  "pairing": "one beverage or side dish",
  "ingredient_suggestions": ["one or two creative additions"]
}}"""

CHAT_PROMPT = """You are a friendly chef assistant helping customers choose dishes.

Current menu:
{context}

Rules:
1. Only recommend dishes present in the menu.
2. Be concise but enthusiastic.
3. Mention recommended dishes by their exact name.
4. If something is not on the menu, suggest the closest alternative.

Customer message: "{message}\""""

INSIGHTS_PROMPT = """You are a senior business analyst for a restaurant.
Data: {data}

Analyze revenue, category performance and AI-drafted dish usage.
Return ONLY a JSON object with:
- "summary": two-sentence executive summary
- "insights": list of {{"type": "trend" | "alert" | "recommendation", "text": "..."}}
- "priority": "high" | "medium" | "low\""""


def extract_json_object(text: str) -> dict[str, Any]:
    """Extract the first JSON object embedded in free text.

    Handles answers wrapped in markdown fences or surrounded by prose.

    Args:
        text: Raw model output

    Returns:
        dict: Parsed JSON object

    Raises:
        UpstreamFailureError: If no valid JSON object is found
    """
    match = JSON_BLOCK_PATTERN.search(text)
    candidate = match.group(0) if match else text

    try:
        parsed = json.loads(candidate)
    except json.JSONDecodeError:
        raise UpstreamFailureError("AI response was not valid JSON") from None

    if not isinstance(parsed, dict):
        raise UpstreamFailureError("AI response was not a JSON object")

    return parsed


class AIService:
    """Generative AI client for dish suggestions, chat and business insights."""

    def __init__(
        self,
        api_key: str | None,
        base_url: str = "https://generativelanguage.googleapis.com",
        suggestion_model: str = "gemini-2.0-flash",
        chat_model: str = "gemini-2.0-flash",
        timeout_seconds: float = 30.0,
    ) -> None:
        """Initialize the AI client.

        Args:
            api_key: Gemini API key; calls fail with UpstreamFailureError when missing
            base_url: Base URL of the Generative Language API
            suggestion_model: Model used for dish suggestions and insights
            chat_model: Model used for customer chat
            timeout_seconds: HTTP timeout for each call
        """
        if not api_key:
            logger.warning("No Gemini API key configured - AI features will be unavailable")
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.suggestion_model = suggestion_model
        self.chat_model = chat_model
        self.timeout_seconds = timeout_seconds

    async def _generate(self, model: str, parts: list[dict[str, Any]], operation: str) -> str:
        """Call generateContent and return the concatenated answer text."""
        if not self.api_key:
            raise UpstreamFailureError("AI service unavailable: API key not configured")

        url = f"{self.base_url}/v1beta/models/{model}:generateContent"
        payload = {"contents": [{"role": "user", "parts": parts}]}
        started = time.monotonic()

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(
                    url, json=payload, headers={"x-goog-api-key": self.api_key}
                )
                response.raise_for_status()
                data = response.json()

        except httpx.HTTPStatusError as e:
            record_ai_request(operation, time.monotonic() - started, success=False)
            if e.response.status_code == 404:
                raise UpstreamFailureError(
                    f"AI model {model} not found, verify the model name and API version"
                ) from e
            raise UpstreamFailureError(
                f"AI request failed with status {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            record_ai_request(operation, time.monotonic() - started, success=False)
            raise UpstreamFailureError(f"AI request failed: {e}") from e
        except ValueError as e:
            record_ai_request(operation, time.monotonic() - started, success=False)
            raise UpstreamFailureError("AI response body was not JSON") from e

        text = "".join(
            part.get("text", "")
            for candidate in data.get("candidates", [])[:1]
            for part in candidate.get("content", {}).get("parts", [])
        ).strip()

        record_ai_request(operation, time.monotonic() - started, success=bool(text))
        if not text:
            raise UpstreamFailureError("AI returned an empty response")

        return text

    @traced("generate_dish_suggestions")
    async def generate_dish_suggestions(
        self, name: str, ingredients: list[str], image_base64: str | None = None
    ) -> DishSuggestions:
        """Draft a description, tags, pairing and extra ingredients for a dish.

        Args:
            name: Dish name
            ingredients: Known ingredients
            image_base64: Optional photo as raw base64 or a data URL

        Returns:
            DishSuggestions parsed from the model's JSON answer
        """
        prompt = SUGGESTION_PROMPT.format(name=name, ingredients=", ".join(ingredients) or "none")
        parts: list[dict[str, Any]] = [{"text": prompt}]

        if image_base64:
            mime_type = "image/jpeg"
            match = DATA_URL_PATTERN.match(image_base64)
            if match:
                mime_type = match.group(1)
                image_base64 = image_base64[match.end() :]
            parts.append({"inline_data": {"mime_type": mime_type, "data": image_base64}})

        text = await self._generate(self.suggestion_model, parts, "dish_suggestions")

        try:
            return DishSuggestions(**extract_json_object(text))
        except ValidationError as e:
            raise UpstreamFailureError("AI response did not match the suggestion format") from e

    @traced("chef_chat")
    async def chat(self, message: str, context: str) -> str:
        """Answer a customer message using the given menu context."""
        prompt = CHAT_PROMPT.format(context=context, message=message)
        return await self._generate(self.chat_model, [{"text": prompt}], "chat")

    async def analyze_strategic_data(self, data: dict[str, Any]) -> StrategicInsights:
        """Ask the model for business insights.

        Never raises: any failure yields a fixed fallback answer.
        """
        prompt = INSIGHTS_PROMPT.format(data=json.dumps(data, default=str))

        try:
            text = await self._generate(self.suggestion_model, [{"text": prompt}], "insights")
            return StrategicInsights(**extract_json_object(text))
        except (UpstreamFailureError, ValidationError) as e:
            logger.error(f"Strategic analysis failed, returning fallback: {e}")
            return FALLBACK_INSIGHTS.model_copy(deep=True)
