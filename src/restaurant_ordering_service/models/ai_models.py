"""Request and response models for the AI assistant."""

from typing import Any, Literal

from pydantic import BaseModel, Field


class DishSuggestionRequest(BaseModel):
    """Input for drafting a dish description."""

    name: str = ""
    ingredients: list[str] = Field(default_factory=list)
    image_base64: str | None = Field(None, description="Optional photo, raw or data URL")


class DishSuggestions(BaseModel):
    """AI-drafted dish content."""

    description: str
    tags: list[str] = Field(default_factory=list)
    pairing: str | None = None
    ingredient_suggestions: list[str] = Field(default_factory=list)


class ChatRequest(BaseModel):
    """Customer message to the chef assistant."""

    message: str = ""
    context: str | None = Field(None, description="Menu context; built from active dishes if omitted")


class ChatResponse(BaseModel):
    """Chef assistant reply."""

    reply: str


class Insight(BaseModel):
    """Single strategic finding."""

    type: Literal["trend", "alert", "recommendation"]
    text: str


class StrategicInsights(BaseModel):
    """Business insights drafted from report data."""

    summary: str
    insights: list[Insight] = Field(default_factory=list)
    priority: Literal["high", "medium", "low"] = "low"


class StrategicReport(BaseModel):
    """Report context sent to the AI together with its insights."""

    reports: dict[str, Any]
    insights: StrategicInsights
