"""SQLModel database models."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

IDEA_PENDING = "pending"
IDEA_PROCESSED = "processed"
POST_DRAFT = "draft"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ContentIdea(SQLModel, table=True):
    """Structured brief for a future blog post, derived from one Google Alert."""

    __tablename__ = "content_ideas"

    id: int | None = Field(default=None, primary_key=True)
    title: str
    slug: str = Field(index=True)
    source: str = "google_alerts"
    topic: str | None = None
    urgency: str | None = None

    # Provenance copied from the alert email
    alert_query: str = ""
    alert_date: datetime | None = None
    original_url: str = ""
    source_title: str = ""
    source_snippet: str = ""
    source_message_id: str = Field(default="", index=True)

    # Brief produced by the model
    target_keywords: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    target_audience: str | None = None
    search_intent: str | None = None
    suggested_title: str
    suggested_outline: Any = Field(default=None, sa_column=Column(JSON))
    word_count_estimate: int | None = None
    seo_priority_score: float = Field(default=0.0, index=True)

    status: str = Field(default=IDEA_PENDING, index=True)  # pending | processed
    created_at: datetime = Field(default_factory=_utcnow)


class BlogPost(SQLModel, table=True):
    """Generated long-form post awaiting human review."""

    __tablename__ = "blog_posts"

    id: int | None = Field(default=None, primary_key=True)
    title: str
    slug: str = Field(index=True)
    excerpt: str = ""
    content: str
    meta_title: str = ""
    meta_description: str = ""
    keywords: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    category: str | None = None
    category_slug: str | None = None
    reading_time: int = 0
    author_name: str = ""
    status: str = POST_DRAFT
    source_idea_id: int | None = Field(default=None, foreign_key="content_ideas.id")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
