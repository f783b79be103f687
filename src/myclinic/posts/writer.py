"""Write draft blog posts for the highest-priority pending ideas."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from sqlmodel import Session

from myclinic.posts.generator import PostGenerator
from myclinic.storage import repository
from myclinic.storage.models import POST_DRAFT, BlogPost, ContentIdea
from myclinic.text import category_slug, make_excerpt, reading_time_minutes, slugify

logger = logging.getLogger(__name__)

POST_SLUG_LENGTH = 80


@dataclass
class WriteSummary:
    written: int = 0
    errors: int = 0


def build_blog_post(
    idea: ContentIdea,
    content: str,
    meta_description: str,
    *,
    author_name: str,
    now: datetime | None = None,
) -> BlogPost:
    """Assemble the draft row; everything except content and meta is derived."""
    now = now or datetime.now(timezone.utc)
    return BlogPost(
        title=idea.suggested_title,
        slug=slugify(idea.suggested_title, POST_SLUG_LENGTH),
        excerpt=make_excerpt(content),
        content=content,
        meta_title=idea.suggested_title,
        meta_description=meta_description,
        keywords=list(idea.target_keywords or []),
        category=idea.topic,
        category_slug=category_slug(idea.topic),
        reading_time=reading_time_minutes(content),
        author_name=author_name,
        status=POST_DRAFT,
        source_idea_id=idea.id,
        created_at=now,
        updated_at=now,
    )


class PostWriter:
    """Drafts up to ``batch_size`` posts per run.

    A failed idea is rolled back and stays pending, so the next run picks it
    up again if it still ranks high enough.
    """

    def __init__(
        self,
        generator: PostGenerator,
        session_factory: Callable[[], Session],
        *,
        batch_size: int = 3,
        author_name: str = "Meet Your Clinic",
    ) -> None:
        self._generator = generator
        self._session_factory = session_factory
        self._batch_size = batch_size
        self._author_name = author_name

    def run(self) -> WriteSummary:
        summary = WriteSummary()

        with self._session_factory() as session:
            ideas = repository.pending_ideas(session, self._batch_size)
            logger.info("Found %d pending ideas", len(ideas))

            if not ideas:
                logger.info("No pending ideas to process")
                return summary

            for idea in ideas:
                # Read before any rollback expires the instance
                idea_id = idea.id
                try:
                    logger.info("Writing: %s", idea.suggested_title)
                    content = self._generator.write_body(idea)
                    meta = self._generator.write_meta_description(idea.suggested_title, content)
                    post = build_blog_post(idea, content, meta, author_name=self._author_name)
                    repository.save_post_for_idea(session, post, idea)

                    summary.written += 1
                    logger.info("Saved draft: /blog/%s", post.slug)
                except Exception as e:
                    session.rollback()
                    logger.error("Error processing idea %s: %s", idea_id, e)
                    summary.errors += 1

        logger.info("Summary: %d posts written, %d errors", summary.written, summary.errors)
        return summary
