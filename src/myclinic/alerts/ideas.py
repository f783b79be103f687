"""Turn an Alert into a structured content idea brief via Claude."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from myclinic.alerts.parser import Alert
from myclinic.exceptions import IdeaSchemaError
from myclinic.llm.client import ClaudeClient
from myclinic.llm.prompts import render
from myclinic.storage.models import ContentIdea
from myclinic.text import slugify

logger = logging.getLogger(__name__)

IDEA_FIELDS = [
    "suggested_title",
    "target_keywords",
    "target_audience",
    "search_intent",
    "suggested_outline",
    "word_count_estimate",
    "seo_priority_score",
    "topic",
    "urgency",
]

IDEA_SLUG_LENGTH = 100


class IdeaBrief(BaseModel):
    """The JSON object the model must return for an alert."""

    suggested_title: str = Field(min_length=1)
    target_keywords: list[str] = Field(default_factory=list)
    target_audience: str | None = None
    search_intent: str | None = None
    suggested_outline: Any = None
    word_count_estimate: int | None = None
    seo_priority_score: float = 0.0
    topic: str | None = None
    urgency: str | None = None

    @field_validator("target_keywords", mode="before")
    @classmethod
    def _split_keyword_string(cls, value: Any) -> Any:
        # Models sometimes return "a, b, c" instead of a list
        if isinstance(value, str):
            return [k.strip() for k in value.split(",") if k.strip()]
        return value

    @field_validator("target_audience", "search_intent", "topic", "urgency", mode="before")
    @classmethod
    def _join_lists(cls, value: Any) -> Any:
        if isinstance(value, list):
            return ", ".join(str(v) for v in value)
        return value

    @field_validator("word_count_estimate", mode="before")
    @classmethod
    def _round_word_count(cls, value: Any) -> Any:
        if isinstance(value, float):
            return round(value)
        return value


def parse_idea_response(text: str) -> IdeaBrief:
    """Parse and validate the model's JSON reply, raising IdeaSchemaError.

    Only the leading JSON value is decoded; any prose the model adds after
    the closing brace is ignored.
    """
    try:
        data, _ = json.JSONDecoder().raw_decode(text.strip())
    except json.JSONDecodeError as e:
        raise IdeaSchemaError(f"Idea response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise IdeaSchemaError(f"Idea response is a {type(data).__name__}, expected an object")
    try:
        return IdeaBrief.model_validate(data)
    except ValidationError as e:
        raise IdeaSchemaError(f"Idea response failed validation: {e}") from e


def build_content_idea(alert: Alert, brief: IdeaBrief) -> ContentIdea:
    """Combine alert provenance with the model's brief into a pending idea row."""
    return ContentIdea(
        title=f"Content Idea: {alert.title}",
        slug=slugify(brief.suggested_title, IDEA_SLUG_LENGTH),
        source="google_alerts",
        topic=brief.topic,
        urgency=brief.urgency,
        alert_query=alert.query,
        alert_date=alert.date,
        original_url=alert.url,
        source_title=alert.title,
        source_snippet=alert.snippet,
        source_message_id=alert.message_id,
        target_keywords=brief.target_keywords,
        target_audience=brief.target_audience,
        search_intent=brief.search_intent,
        suggested_title=brief.suggested_title,
        suggested_outline=brief.suggested_outline,
        word_count_estimate=brief.word_count_estimate,
        seo_priority_score=brief.seo_priority_score,
        status="pending",
    )


class IdeaGenerator:
    """Ask Claude for a blog post brief based on one alert."""

    def __init__(self, client: ClaudeClient, brand: str = "Meet Your Clinic") -> None:
        self._client = client
        self._brand = brand

    def generate(self, alert: Alert) -> IdeaBrief:
        response = self._client.generate(
            system=render("idea_system.j2", brand=self._brand),
            messages=[
                {
                    "role": "user",
                    "content": render(
                        "idea_user.j2", alert=alert.to_prompt_dict(), fields=IDEA_FIELDS
                    ),
                }
            ],
            model=self._client.fast_model,
            temperature=0.7,
            max_tokens=1500,
            json_mode=True,
        )
        return parse_idea_response(response)
