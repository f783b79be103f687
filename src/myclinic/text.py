"""Deterministic text derivations for ideas and posts: slugs, excerpts, reading time."""

from __future__ import annotations

import math
import re

_NON_SLUG_CHARS = re.compile(r"[^A-Za-z0-9_\s-]")
_WHITESPACE_RUN = re.compile(r"\s+")
_HEADING_MARKER = re.compile(r"#{1,6}\s")

EXCERPT_LENGTH = 160
WORDS_PER_MINUTE = 200


def slugify(text: str, max_length: int | None = None) -> str:
    """Lower-case, drop anything but word chars/whitespace/hyphens, hyphenate spaces.

    Underscores are word characters and survive:
    ``slugify("Hello, World! Foo_Bar")`` is ``"hello-world-foo_bar"``.
    """
    slug = _NON_SLUG_CHARS.sub("", text.lower())
    slug = _WHITESPACE_RUN.sub("-", slug)
    if max_length is not None:
        slug = slug[:max_length]
    return slug


def category_slug(topic: str | None) -> str | None:
    if not topic:
        return None
    return slugify(topic)


def make_excerpt(markdown: str, length: int = EXCERPT_LENGTH) -> str:
    """Plain-text teaser: heading and bold markers removed, single line, ``...`` appended."""
    plain = _HEADING_MARKER.sub("", markdown)
    plain = plain.replace("**", "").replace("\n", " ").strip()
    return plain[:length] + "..."


def reading_time_minutes(text: str, words_per_minute: int = WORDS_PER_MINUTE) -> int:
    # Never report a zero-minute read, even for an empty body
    return max(1, math.ceil(len(text.split()) / words_per_minute))
