"""Draft blog post bodies and meta descriptions from content ideas."""

from __future__ import annotations

import logging

from myclinic.llm.client import ClaudeClient
from myclinic.llm.prompts import render
from myclinic.storage.models import ContentIdea

logger = logging.getLogger(__name__)

META_DESCRIPTION_MAX = 155
META_PREVIEW_CHARS = 500


class PostGenerator:
    """Two Claude calls per idea: the markdown body, then its meta description."""

    def __init__(
        self,
        client: ClaudeClient,
        *,
        brand: str = "Meet Your Clinic",
        default_word_count: int = 1500,
    ) -> None:
        self._client = client
        self._brand = brand
        self._default_word_count = default_word_count

    def write_body(self, idea: ContentIdea) -> str:
        """Return the full post in markdown."""
        system = render(
            "post_system.j2",
            brand=self._brand,
            word_count=idea.word_count_estimate or self._default_word_count,
        )
        return self._client.generate(
            system=system,
            messages=[{"role": "user", "content": render("post_user.j2", idea=idea)}],
            temperature=0.7,
            max_tokens=4000,
        )

    def write_meta_description(self, title: str, content: str) -> str:
        """Return an SEO meta description.

        The length limit is only asked for in the prompt; longer replies are
        kept as-is and logged.
        """
        response = self._client.generate(
            system=render("meta_system.j2", max_length=META_DESCRIPTION_MAX),
            messages=[
                {
                    "role": "user",
                    "content": f"Title: {title}\n\n"
                    f"Content preview: {content[:META_PREVIEW_CHARS]}",
                }
            ],
            model=self._client.fast_model,
            max_tokens=100,
        )
        description = response.strip().strip('"').strip()
        if len(description) > META_DESCRIPTION_MAX:
            logger.warning(
                "Meta description for %r is %d characters (limit %d)",
                title,
                len(description),
                META_DESCRIPTION_MAX,
            )
        return description
